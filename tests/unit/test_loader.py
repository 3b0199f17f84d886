"""Unit tests for raw record loading"""

import pytest

from contract_engine.domain.exceptions import InvalidInputError
from contract_engine.domain.models import EnrollmentRecord, Witness
from contract_engine.records.loader import load_record


def test_bonus_values_win_over_variable_fields():
    """Test bonus-specific values take precedence field by field"""
    record = load_record(
        {
            "variable_fields": {"immersion_date": "01/01/2025", "Quantidade de Inscrições": "4"},
            "bonus": {"codes": ["IMERSAO"], "fields": {"Data da Imersão": "05/05/2025"}},
        }
    )

    assert record.bonus.fields.immersion_date == "05/05/2025"
    assert record.bonus.fields.immersion_enrollments == "4"
    assert record.bonus.fields.other_description is None


def test_witnesses_padded_to_two():
    """Test missing witnesses become blank signer rows"""
    record = load_record({"witnesses": [{"name": "Rita"}]})

    assert record.witnesses == (Witness(name="Rita"), Witness())


def test_record_passes_through_and_bad_shapes_rejected():
    """Test domain records are accepted as-is and unusable input is rejected"""
    record = EnrollmentRecord()

    assert load_record(record) is record
    with pytest.raises(InvalidInputError):
        load_record(["not", "a", "mapping"])
    with pytest.raises(InvalidInputError):
        load_record({"training": "bad"})
