"""Tests for wells and production row validation."""

import pytest

from dto.schemas import ProductionRecord, RowOutcome, WellRecord
from services.mappings import PRODUCTION, WELLS
from services.row_validator import (
    validate_production_row,
    validate_wells_row,
    validator_for,
)

WELL_COLUMNS = [
    "Nome",
    "Bloco",
    "Campo",
    "Província",
    "Lat",
    "Lng",
    "Profundidade",
    "Tipo",
    "Estado",
    "Reservas",
    "Data de início",
]


def well_row(**overrides):
    row = {
        "Nome": "KZ-01",
        "Bloco": "15",
        "Campo": "Kizomba A",
        "Província": "Zaire",
        "Lat": "-6,25",
        "Lng": "12.5",
        "Profundidade": 1800,
        "Tipo": "gás",
        "Estado": "exploratório",
        "Reservas": None,
        "Data de início": "2019-07-15",
    }
    row.update(overrides)
    return row


class TestValidateWellsRow:
    def test_valid_row(self):
        outcome = validate_wells_row(well_row(), WELL_COLUMNS, 0)

        assert outcome.row == 1
        assert outcome.errors == []
        assert isinstance(outcome.data, WellRecord)
        assert outcome.data.name == "KZ-01"
        assert outcome.data.latitude == -6.25
        assert outcome.data.longitude == 12.5
        assert outcome.data.depth == 1800
        assert outcome.data.type == "gas"
        assert outcome.data.status == "exploratory"
        assert outcome.data.estimated_reserves == 0
        assert outcome.data.daily_production == 0
        assert outcome.data.decline_rate == 0
        assert outcome.data.production_start_date == "2019-07-15"

    def test_original_view_keeps_raw_keys(self):
        row = well_row()
        outcome = validate_wells_row(row, WELL_COLUMNS, 3)
        assert outcome.row == 4
        assert outcome.original == row

    @pytest.mark.parametrize(
        "lat, lng, depth",
        [(-90, -180, 0), (90, 180, 12000), (0, 0, 1), ("45,5", "-120,25", "3000")],
    )
    def test_in_range_coordinates(self, lat, lng, depth):
        outcome = validate_wells_row(
            well_row(Lat=lat, Lng=lng, Profundidade=depth), WELL_COLUMNS, 0
        )
        assert outcome.errors == []
        assert outcome.data.latitude == pytest.approx(float(str(lat).replace(",", ".")))
        assert outcome.data.longitude == pytest.approx(float(str(lng).replace(",", ".")))
        assert outcome.data.depth == pytest.approx(float(depth))

    def test_missing_name(self):
        outcome = validate_wells_row(well_row(Nome=None), WELL_COLUMNS, 0)
        assert outcome.data is None
        assert "Nome do poço é obrigatório" in outcome.errors

    def test_error_order(self):
        row = {column: None for column in WELL_COLUMNS}
        outcome = validate_wells_row(row, WELL_COLUMNS, 0)
        assert outcome.errors == [
            "Nome do poço é obrigatório",
            "Bloco é obrigatório",
            "Campo é obrigatório",
            "Província é obrigatória",
            "Latitude inválida",
            "Longitude inválida",
            "Profundidade inválida",
            "Tipo deve ser: petróleo, gás ou misto",
            "Status deve ser: ativo, inativo, exploratório ou declínio",
        ]

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"Lat": 90.01}, "Latitude inválida"),
            ({"Lng": -181}, "Longitude inválida"),
            ({"Profundidade": -1}, "Profundidade inválida"),
            ({"Profundidade": "n/a"}, "Profundidade inválida"),
            ({"Tipo": "carvão"}, "Tipo deve ser: petróleo, gás ou misto"),
            ({"Estado": "fechado"}, "Status deve ser: ativo, inativo, exploratório ou declínio"),
        ],
    )
    def test_single_field_errors(self, overrides, message):
        outcome = validate_wells_row(well_row(**overrides), WELL_COLUMNS, 0)
        assert outcome.data is None
        assert outcome.errors == [message]

    def test_missing_columns_are_errors(self):
        outcome = validate_wells_row({"Nome": "X"}, ["Nome"], 0)
        assert outcome.data is None
        assert "Bloco é obrigatório" in outcome.errors

    def test_record_and_errors_exclusive(self):
        for row in (well_row(), well_row(Nome=""), well_row(Lat=200)):
            outcome = validate_wells_row(row, WELL_COLUMNS, 0)
            assert (outcome.data is None) != (outcome.errors == [])


class TestValidateProductionRow:
    columns = ["WELLBORE_ID", "Wellbore Name", "CMPL_ID", "Data", "Óleo", "Água", "Horas", "Choke"]

    def test_valid_row(self):
        row = {
            "WELLBORE_ID": 1001,
            "Wellbore Name": "",
            "CMPL_ID": "C-7",
            "Data": "2024-01-31",
            "Óleo": "150,75",
            "Água": None,
            "Horas": "24",
            "Choke": "abc",
        }
        outcome = validate_production_row(row, self.columns, 9)

        assert outcome.row == 10
        assert isinstance(outcome.data, ProductionRecord)
        assert outcome.data.wlbr_id == "1001"
        assert outcome.data.wlbr_nm is None
        assert outcome.data.cmpl_id == "C-7"
        assert outcome.data.production_date == "2024-01-31"
        assert outcome.data.oil_volume == 150.75
        assert outcome.data.water_volume == 0
        assert outcome.data.hours_produced == 24
        assert outcome.data.choke_size == 0
        assert outcome.data.gas_volume == 0

    def test_required_fields(self):
        outcome = validate_production_row({"Data": "nope"}, self.columns, 0)
        assert outcome.data is None
        assert outcome.errors == [
            "Wellbore ID é obrigatório",
            "Data de produção é obrigatória",
        ]


class TestRowOutcome:
    def test_rejects_both_record_and_errors(self):
        record = validate_production_row(
            {"wlbr_id": "W", "date": "2024-01-01"}, ["wlbr_id", "date"], 0
        ).data
        with pytest.raises(ValueError):
            RowOutcome(row=1, data=record, errors=["boom"])

    def test_rejects_neither(self):
        with pytest.raises(ValueError):
            RowOutcome(row=1, data=None, errors=[])


def test_validator_for():
    assert validator_for(WELLS) is validate_wells_row
    assert validator_for(PRODUCTION) is validate_production_row
    assert validator_for("unknown") is validate_wells_row
