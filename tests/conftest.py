"""Pytest fixtures for testing"""

import pytest
from typing import Callable

from contract_engine.config import Settings
from contract_engine.domain.models import ClauseBlock, EnrollmentRecord
from contract_engine.records.loader import load_record


@pytest.fixture
def engine_settings() -> Settings:
    """Reference layout constants with the cover-page signature enabled"""
    return Settings(max_page_size=6200, footer_share_threshold=5000, cover_signature_enabled=True)


@pytest.fixture
def make_clause() -> Callable[[str, int], str]:
    """Build plain-text clause markup whose printable size is exactly `size`"""

    def build(ordinal: str, size: int) -> str:
        heading = f"CLÁUSULA {ordinal} - "
        return heading + "x" * (size - len(heading))

    return build


@pytest.fixture
def make_block() -> Callable[[int], ClauseBlock]:
    """Clause block of a given estimated size"""

    def build(size: int, marker: str = "x") -> ClauseBlock:
        return ClauseBlock(raw_markup=marker * size, estimated_size=size)

    return build


@pytest.fixture
def sample_raw_record(make_clause) -> dict:
    """Enrollment as handed over by the enrollment service"""
    return {
        "student": {
            "name": "Maria Souza",
            "document": "12345678901",
            "birth_date": "1990-05-20",
            "phone": "19999990000",
            "email": "maria@example.com",
            "address": "Rua das Flores, 100",
            "city_state": "Americana/SP",
            "zip_code": "13465000",
        },
        "training": {
            "name": "Mentoria Prosperar",
            "city": "Campinas",
            "start_date": "2025-03-01",
            "end_date": "2025-03-03",
            "price": "4.997,00",
        },
        "payment_mode": "PARCELADO",
        "payments": [
            {"method": "CARTAO_CREDITO", "billing": "PARCELADO", "amount": 1000},
            {"method": "CARTAO_CREDITO", "billing": "PARCELADO", "amount": 1000},
            {"method": "PIX", "billing": "A_VISTA", "amount": "2.997,00"},
        ],
        "bonus": {"codes": ["IMERSAO"], "fields": {"immersion_enrollments": "2"}},
        "bonus_event": {"start_date": "2025-04-10"},
        "witnesses": [
            {"name": "João Lima", "document": "98765432100"},
            {"name": "Ana Prado", "document": "11122233344", "signature": "https://cdn.example.com/sig/ana.png"},
        ],
        "clauses": make_clause("PRIMEIRA", 1500) + "\n\n" + make_clause("SEGUNDA", 1500),
        "variable_fields": {"Local de Assinatura do Termo": "Americana/SP"},
        "contract": {"location": "", "date": "2025-02-15"},
        "signatures": {"student": "data:image/png;base64,AAAA"},
        "observations": "Aluno indicado por parceiro.",
    }


@pytest.fixture
def sample_record(sample_raw_record: dict) -> EnrollmentRecord:
    """Sample enrollment converted to the domain record"""
    return load_record(sample_raw_record)
