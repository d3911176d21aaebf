"""
Column label tables, data-type indicators and locale tokens.

These are the business rules for reading Portuguese/English well and
production spreadsheets exported to Access. Keys are lower-case and trimmed;
lookups must normalize the raw label the same way. Bump MAPPINGS_VERSION when
any table changes so downstream consumers can tell results apart.
"""

MAPPINGS_VERSION = "1"

WELLS = "wells"
PRODUCTION = "production"

WELLS_COLUMN_MAPPINGS = {
    "nome": "name",
    "nome do poço": "name",
    "poço": "name",
    "poco": "name",
    "bloco": "block",
    "campo": "field",
    "campo petrolífero": "field",
    "província": "province",
    "provincia": "province",
    "latitude": "latitude",
    "lat": "latitude",
    "longitude": "longitude",
    "long": "longitude",
    "lng": "longitude",
    "profundidade": "depth",
    "depth": "depth",
    "tipo": "type",
    "type": "type",
    "tipo de hidrocarboneto": "type",
    "reservas": "estimated_reserves",
    "reservas estimadas": "estimated_reserves",
    "estimated_reserves": "estimated_reserves",
    "produção diária": "daily_production",
    "producao diaria": "daily_production",
    "produção": "daily_production",
    "daily_production": "daily_production",
    "data de início": "production_start_date",
    "data inicio": "production_start_date",
    "início produção": "production_start_date",
    "production_start_date": "production_start_date",
    "status": "status",
    "estado": "status",
    "taxa de declínio": "decline_rate",
    "declínio": "decline_rate",
    "decline_rate": "decline_rate",
}

PRODUCTION_COLUMN_MAPPINGS = {
    "wlbr_id": "wlbr_id",
    "wellbore_id": "wlbr_id",
    "id do poço": "wlbr_id",
    "wlbr_nm": "wlbr_nm",
    "wellbore_name": "wlbr_nm",
    "nome do poço": "wlbr_nm",
    "wellbore name": "wlbr_nm",
    "cmpl_id": "cmpl_id",
    "completion_id": "cmpl_id",
    "daytime": "production_date",
    "date": "production_date",
    "data": "production_date",
    "data produção": "production_date",
    "oil": "oil_volume",
    "óleo": "oil_volume",
    "petroleo": "oil_volume",
    "petróleo": "oil_volume",
    "water": "water_volume",
    "água": "water_volume",
    "agua": "water_volume",
    "gas": "gas_volume",
    "gás": "gas_volume",
    "glg": "glg",
    "gas lift": "glg",
    "hours": "hours_produced",
    "horas": "hours_produced",
    "choke": "choke_size",
    "bhp": "bhp",
    "bht": "bht",
    "whp": "whp",
    "wht": "wht",
    "chp": "chp",
}

COLUMN_MAPPINGS = {
    WELLS: WELLS_COLUMN_MAPPINGS,
    PRODUCTION: PRODUCTION_COLUMN_MAPPINGS,
}

# Substrings looked up in lower-cased column names by the type detector
PRODUCTION_INDICATORS = (
    "oil",
    "gas",
    "water",
    "daytime",
    "wlbr_id",
    "cmpl_id",
    "bhp",
    "whp",
    "choke",
)

WELLS_INDICATORS = (
    "latitude",
    "longitude",
    "block",
    "field",
    "province",
    "poço",
    "poco",
    "bloco",
    "campo",
)

# Canonical value -> accepted spellings
WELL_TYPE_TOKENS = {
    "oil": ("petróleo", "petroleo", "oil"),
    "gas": ("gás", "gas"),
    "mixed": ("misto", "mixed"),
}

WELL_STATUS_TOKENS = {
    "active": ("ativo", "active"),
    "inactive": ("inativo", "inactive"),
    "exploratory": ("exploratório", "exploratorio", "exploratory"),
    "declining": ("declínio", "declining", "em declínio"),
}
