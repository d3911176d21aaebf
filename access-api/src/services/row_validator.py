"""
Row validation for the two record kinds.

Each row is mapped to canonical field names, checked, and turned into a
``RowOutcome``. Problems are collected as human-readable (Portuguese)
messages in a fixed order; they never raise.
"""

from typing import Any, Callable, Mapping, Optional, Sequence

from dto.schemas import ProductionRecord, RowOutcome, WellRecord
from services.mappings import PRODUCTION, WELLS
from services.normalizer import (
    ColumnNormalizer,
    normalize_status,
    normalize_type,
    number_or_zero,
    parse_date,
    parse_number,
)

VALID_TYPES = ("oil", "gas", "mixed")
VALID_STATUSES = ("active", "inactive", "exploratory", "declining")

Row = Mapping[str, Any]
RowValidatorFn = Callable[[Row, Sequence[str], int], RowOutcome]

_default_normalizer = ColumnNormalizer()


def _out_of_range(value: Optional[float], low: float, high: float) -> bool:
    return value is None or value < low or value > high


def validate_wells_row(
    row: Row,
    columns: Sequence[str],
    row_index: int,
    normalizer: ColumnNormalizer = _default_normalizer,
) -> RowOutcome:
    mapped, original = normalizer.map_row(row, columns, WELLS)
    errors = []

    if not mapped.get("name"):
        errors.append("Nome do poço é obrigatório")
    if not mapped.get("block"):
        errors.append("Bloco é obrigatório")
    if not mapped.get("field"):
        errors.append("Campo é obrigatório")
    if not mapped.get("province"):
        errors.append("Província é obrigatória")

    latitude = parse_number(mapped.get("latitude"))
    longitude = parse_number(mapped.get("longitude"))
    depth = parse_number(mapped.get("depth"))

    if _out_of_range(latitude, -90, 90):
        errors.append("Latitude inválida")
    if _out_of_range(longitude, -180, 180):
        errors.append("Longitude inválida")
    if depth is None or depth < 0:
        errors.append("Profundidade inválida")

    well_type = normalize_type(mapped.get("type"))
    if well_type not in VALID_TYPES:
        errors.append("Tipo deve ser: petróleo, gás ou misto")

    status = normalize_status(mapped.get("status"))
    if status not in VALID_STATUSES:
        errors.append("Status deve ser: ativo, inativo, exploratório ou declínio")

    if errors:
        return RowOutcome(row=row_index + 1, data=None, errors=errors, original=original)

    record = WellRecord(
        name=str(mapped["name"]),
        block=str(mapped["block"]),
        field=str(mapped["field"]),
        province=str(mapped["province"]),
        latitude=latitude,
        longitude=longitude,
        depth=depth,
        type=well_type,
        estimated_reserves=number_or_zero(mapped.get("estimated_reserves")),
        daily_production=number_or_zero(mapped.get("daily_production")),
        production_start_date=parse_date(mapped.get("production_start_date")),
        status=status,
        decline_rate=number_or_zero(mapped.get("decline_rate")),
    )
    return RowOutcome(row=row_index + 1, data=record, errors=[], original=original)


def validate_production_row(
    row: Row,
    columns: Sequence[str],
    row_index: int,
    normalizer: ColumnNormalizer = _default_normalizer,
) -> RowOutcome:
    mapped, original = normalizer.map_row(row, columns, PRODUCTION)
    errors = []

    wlbr_id = mapped.get("wlbr_id")
    if not wlbr_id:
        errors.append("Wellbore ID é obrigatório")

    production_date = parse_date(mapped.get("production_date"))
    if not production_date:
        errors.append("Data de produção é obrigatória")

    if errors:
        return RowOutcome(row=row_index + 1, data=None, errors=errors, original=original)

    wlbr_nm = mapped.get("wlbr_nm")
    cmpl_id = mapped.get("cmpl_id")
    record = ProductionRecord(
        wlbr_id=str(wlbr_id),
        wlbr_nm=str(wlbr_nm) if wlbr_nm else None,
        cmpl_id=str(cmpl_id) if cmpl_id else None,
        production_date=production_date,
        oil_volume=number_or_zero(mapped.get("oil_volume")),
        water_volume=number_or_zero(mapped.get("water_volume")),
        gas_volume=number_or_zero(mapped.get("gas_volume")),
        glg=number_or_zero(mapped.get("glg")),
        hours_produced=number_or_zero(mapped.get("hours_produced")),
        choke_size=number_or_zero(mapped.get("choke_size")),
        bhp=number_or_zero(mapped.get("bhp")),
        bht=number_or_zero(mapped.get("bht")),
        whp=number_or_zero(mapped.get("whp")),
        wht=number_or_zero(mapped.get("wht")),
        chp=number_or_zero(mapped.get("chp")),
    )
    return RowOutcome(row=row_index + 1, data=record, errors=[], original=original)


VALIDATORS = {
    WELLS: validate_wells_row,
    PRODUCTION: validate_production_row,
}


def validator_for(data_type: str) -> RowValidatorFn:
    return VALIDATORS.get(data_type, validate_wells_row)
