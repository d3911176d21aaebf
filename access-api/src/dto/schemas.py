from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ApiModel(BaseModel):
    # Wire format is camelCase; Python code uses the snake_case field names
    model_config = ConfigDict(populate_by_name=True, ser_json_bytes="base64")


# ============================================================================
# Records
# ============================================================================


class WellRecord(BaseModel):
    name: str
    block: str
    field: str
    province: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    depth: float = Field(ge=0)
    type: str
    estimated_reserves: float = 0
    daily_production: float = 0
    production_start_date: Optional[str] = None
    status: str
    decline_rate: float = 0


class ProductionRecord(BaseModel):
    wlbr_id: str = Field(min_length=1)
    wlbr_nm: Optional[str] = None
    cmpl_id: Optional[str] = None
    production_date: str
    oil_volume: float = 0
    water_volume: float = 0
    gas_volume: float = 0
    glg: float = 0
    hours_produced: float = 0
    choke_size: float = 0
    bhp: float = 0
    bht: float = 0
    whp: float = 0
    wht: float = 0
    chp: float = 0


class RowOutcome(ApiModel):
    """
    Result of validating one row: a record or a list of errors, never both.
    """

    row: int
    data: Optional[Union[WellRecord, ProductionRecord]] = None
    errors: List[str] = Field(default_factory=list)
    original: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_record_xor_errors(self):
        if (self.data is None) == (not self.errors):
            raise ValueError("row outcome needs either a record or errors")
        return self

    @property
    def is_valid(self) -> bool:
        return self.data is not None


class TableDescriptor(ApiModel):
    name: str
    row_count: int = Field(0, alias="rowCount")
    columns: List[str] = Field(default_factory=list)


# ============================================================================
# Requests
# ============================================================================


class UploadInitRequest(ApiModel):
    filename: Optional[Any] = None
    size: Optional[Any] = None
    total_chunks: Optional[Any] = Field(None, alias="totalChunks")


class UploadIdRequest(ApiModel):
    upload_id: Optional[str] = Field(None, alias="uploadId")


class SessionRequest(ApiModel):
    session_id: Optional[str] = Field(None, alias="sessionId")


class ListTablesFromUrlRequest(ApiModel):
    file_url: Optional[str] = Field(None, alias="fileUrl")
    filename: Optional[str] = None


class ParseTableBatchRequest(ApiModel):
    session_id: Optional[str] = Field(None, alias="sessionId")
    table_name: Optional[str] = Field(None, alias="tableName")
    offset: int = 0
    limit: Optional[int] = None


# ============================================================================
# Responses
# ============================================================================


class SuccessResponse(ApiModel):
    success: bool = True
    error: Optional[str] = None


class HealthResponse(ApiModel):
    status: str
    timestamp: datetime
    active_sessions: int = Field(alias="activeSessions")
    active_chunk_uploads: int = Field(alias="activeChunkUploads")
    chunk_size_bytes: int = Field(alias="chunkSizeBytes")


class UploadInitResponse(ApiModel):
    success: bool = True
    upload_id: str = Field(alias="uploadId")
    chunk_size: int = Field(alias="chunkSize")


class UploadStatusResponse(ApiModel):
    success: bool = True
    upload_id: str = Field(alias="uploadId")
    total_chunks: Optional[int] = Field(None, alias="totalChunks")
    received: int
    received_indices: List[int] = Field(alias="receivedIndices")


class TablesResponse(ApiModel):
    success: bool = True
    tables: List[TableDescriptor]
    session_id: str = Field(alias="sessionId")


class ParseTableBatchResponse(ApiModel):
    success: bool = True
    table_name: str = Field(alias="tableName")
    columns: List[str]
    data_type: str = Field(alias="dataType")
    total_rows: int = Field(alias="totalRows")
    offset: int
    limit: int
    rows: List[RowOutcome]
    has_more: bool = Field(alias="hasMore")


class ParseResult(ApiModel):
    success: List[RowOutcome] = Field(default_factory=list)
    failed: List[RowOutcome] = Field(default_factory=list)
    total_rows: int = Field(0, alias="totalRows")


class ParseTableResponse(ApiModel):
    success: bool = True
    parse_result: ParseResult = Field(alias="parseResult")
    data_type: str = Field(alias="dataType")
