"""Unit tests for contract document assembly"""

import pytest
from decimal import Decimal

from contract_engine.config import Settings
from contract_engine.domain.assembler import CLAUSES_MISSING, assemble, assemble_contract
from contract_engine.domain.exceptions import InvalidInputError
from contract_engine.domain.fields import VariableFields
from contract_engine.domain.models import (
    BillingType,
    CheckboxList,
    ClauseBlock,
    EnrollmentRecord,
    FieldTable,
    PageKind,
    PaymentEntry,
    PaymentMethod,
    SignatureBlock,
    Student,
    TextFragment,
    WarningMarker,
    Witness,
)


def _table(page, title):
    for block in page.blocks:
        if isinstance(block, FieldTable) and block.title == title:
            return dict(block.rows)
    raise AssertionError(f"table {title!r} not found")


def _clause_blocks(document):
    return [block for page in document.pages for block in page.blocks if isinstance(block, ClauseBlock)]


def test_rejects_missing_record(engine_settings):
    """Test an absent record is a caller contract violation"""
    with pytest.raises(InvalidInputError):
        assemble_contract(None, engine_settings)

    with pytest.raises(InvalidInputError):
        assemble_contract({"student": {}}, engine_settings)


def test_small_clause_text_shares_signature(make_clause, engine_settings):
    """Test 4000 chars of clauses → cover + one clause page carrying the signature"""
    document = assemble_contract(EnrollmentRecord(clauses=make_clause("PRIMEIRA", 4000)), engine_settings)

    assert [page.kind for page in document.pages] == [PageKind.COVER, PageKind.CLAUSE_CONTENT]
    last = document.pages[-1]
    assert last.has_signature_block is True
    assert isinstance(last.blocks[-1], SignatureBlock)
    assert document.signature_pages == (last,)


def test_large_clause_text_gets_signature_page(make_clause, engine_settings):
    """Test 2 × 6000 chars → cover + two clause pages + signature page"""
    clauses = make_clause("PRIMEIRA", 6000) + "\n\n" + make_clause("SEGUNDA", 6000)

    document = assemble_contract(EnrollmentRecord(clauses=clauses), engine_settings)

    assert [page.kind for page in document.pages] == [
        PageKind.COVER,
        PageKind.CLAUSE_CONTENT,
        PageKind.CLAUSE_CONTENT,
        PageKind.SIGNATURE_ONLY,
    ]
    assert [page.has_signature_block for page in document.pages[1:]] == [False, False, True]
    assert all(page.has_footer_logo for page in document.pages)
    assert [len(page.blocks) for page in document.pages[1:3]] == [1, 1]


def test_missing_clauses_emit_placeholder_and_signature_page(engine_settings):
    """Test empty clause text → placeholder clause page + signature page"""
    result = assemble(EnrollmentRecord(clauses="   "), engine_settings)
    document = result.document

    assert result.clauses_missing is True
    assert len(document.pages) == 3
    placeholder = document.pages[1]
    assert placeholder.kind is PageKind.CLAUSE_CONTENT
    assert placeholder.has_signature_block is False
    assert isinstance(placeholder.blocks[0], WarningMarker)
    assert placeholder.blocks[0].code == CLAUSES_MISSING
    assert document.pages[2].kind is PageKind.SIGNATURE_ONLY
    assert document.pages[2].has_signature_block is True


def test_cover_page_content(sample_record, engine_settings):
    """Test cover carries identification, training, bonus and payment summary"""
    cover = assemble_contract(sample_record, engine_settings).pages[0]

    assert cover.kind is PageKind.COVER
    assert cover.has_footer_logo is True
    assert cover.has_signature_block is True

    personal = _table(cover, "DADOS PESSOAIS")
    assert personal["Nome completo"] == "Maria Souza"
    assert personal["CPF/CNPJ"] == "123.456.789-01"
    assert personal["Data de nascimento"] == "20/05/1990"
    assert personal["CEP"] == "13465-000"

    training = _table(cover, "TREINAMENTO E BÔNUS")
    assert training["Data prevista"] == "01/03/2025 a 03/03/2025"
    assert training["Preço do contrato"] == "R$ 4997.00"

    payments = _table(cover, "FORMAS DE PAGAMENTO")
    assert payments["Forma de pagamento selecionada"] == "À VISTA + PARCELADO"
    assert payments["Valor real pago"] == "R$ 4997.00"

    lines = [block.text for block in cover.blocks if isinstance(block, TextFragment) and block.style == "list_item"]
    assert lines == [
        "• Cartão de crédito parcelado: 2x de R$ 1000.00 (total R$ 2000.00)",
        "• PIX/Transferência à vista: R$ 2997.00",
    ]

    bonus = next(block for block in cover.blocks if isinstance(block, CheckboxList))
    checked = [entry for entry in bonus.entries if entry.checked]
    assert [entry.code for entry in checked] == ["IMERSAO"]
    assert checked[0].detail_text == "Inscrições: 2 - Data: 10/04/2025"

    assert _table(cover, "LOCAL E DATA") == {"Local": "Americana/SP", "Data": "15/02/2025"}


def test_cover_signature_can_be_disabled(sample_record):
    """Test the cover-page signature follows configuration"""
    config = Settings(cover_signature_enabled=False)

    document = assemble_contract(sample_record, config)
    cover = document.pages[0]

    assert cover.has_signature_block is False
    assert not any(isinstance(block, SignatureBlock) for block in cover.blocks)
    assert len(document.signature_pages) == 1


def test_signature_block_passes_references_through(sample_record, engine_settings):
    """Test signer rows and signature image references are untouched"""
    document = assemble_contract(sample_record, engine_settings)
    signature = document.signature_pages[0].blocks[-1]

    assert isinstance(signature, SignatureBlock)
    assert [signer.role for signer in signature.signers] == ["ALUNO/Contratante", "Testemunha 1", "Testemunha 2"]
    assert signature.signers[0].signature_ref == "data:image/png;base64,AAAA"
    assert signature.signers[1].signature_ref is None
    assert signature.signers[2].signature_ref == "https://cdn.example.com/sig/ana.png"
    assert signature.signers[2].document == "111.222.333-44"


def test_declaration_counts_clause_pages(make_clause, engine_settings):
    """Test the cover declaration states how many clause pages follow"""
    clauses = "\n\n".join(make_clause(ordinal, 5000) for ordinal in ("PRIMEIRA", "SEGUNDA", "TERCEIRA"))

    cover = assemble_contract(EnrollmentRecord(clauses=clauses), engine_settings).pages[0]
    declaration = next(b for b in cover.blocks if isinstance(b, TextFragment) and b.style == "declaration")

    assert "redigidas em 3 laudas" in declaration.text


def test_clause_placeholders_filled(engine_settings):
    """Test student data and variable fields are merged into clause text"""
    record = EnrollmentRecord(
        student=Student(name="Maria Souza", document="12345678901"),
        clauses="CLÁUSULA PRIMEIRA - Eu, {{Nome Completo do Aluno}}, CPF {{CPF/CNPJ do Aluno}}, turma {{Turma}}.",
        variable_fields=VariableFields.from_mapping({"Turma": "12"}),
    )

    blocks = _clause_blocks(assemble_contract(record, engine_settings))

    assert blocks[0].raw_markup == "CLÁUSULA PRIMEIRA - Eu, Maria Souza, CPF 123.456.789-01, turma 12."


def test_duplicate_clauses_removed(engine_settings):
    """Test repeated headed clauses are printed once"""
    record = EnrollmentRecord(clauses="CLÁUSULA PRIMEIRA - a\nCLÁUSULA SEGUNDA - b\nCLÁUSULA PRIMEIRA - a")

    blocks = _clause_blocks(assemble_contract(record, engine_settings))

    assert [block.raw_markup for block in blocks] == ["CLÁUSULA PRIMEIRA - a", "CLÁUSULA SEGUNDA - b"]


def test_student_fields_fall_back_to_variable_fields(engine_settings):
    """Test blank record fields are looked up in the variable fields"""
    record = EnrollmentRecord(
        student=Student(name=""),
        variable_fields=VariableFields.from_mapping({"Nome Completo do Aluno": "Carlos Dias", "CEP do Aluno": "01001000"}),
    )

    personal = _table(assemble_contract(record, engine_settings).pages[0], "DADOS PESSOAIS")

    assert personal["Nome completo"] == "Carlos Dias"
    assert personal["CEP"] == "01001-000"


def test_bank_slip_plan_rows(engine_settings):
    """Test bank-slip installment plans print the first due date and best day"""
    record = EnrollmentRecord(
        payments=(
            PaymentEntry(PaymentMethod.BANK_SLIP, BillingType.INSTALLMENT, Decimal("300")),
            PaymentEntry(PaymentMethod.BANK_SLIP, BillingType.INSTALLMENT, Decimal("300")),
        ),
        variable_fields=VariableFields.from_mapping(
            {"Data do Primeiro Boleto": "10/03/2025", "Melhor Dia de Vencimento": "10"}
        ),
    )

    payments = _table(assemble_contract(record, engine_settings).pages[0], "FORMAS DE PAGAMENTO")

    assert payments["1º boleto para"] == "10/03/2025"
    assert payments["Melhor dia de vencimento"] == "10"


def test_empty_payments_print_not_informed(engine_settings):
    """Test a record without payments still yields a payment section"""
    cover = assemble_contract(EnrollmentRecord(), engine_settings).pages[0]

    assert _table(cover, "FORMAS DE PAGAMENTO")["Forma de pagamento selecionada"] == "Não informado"
    assert any(isinstance(b, TextFragment) and b.text == "• Não informado" for b in cover.blocks)


def test_assembly_is_idempotent(sample_record, engine_settings):
    """Test the same record always yields an identical document"""
    first = assemble_contract(sample_record, engine_settings)
    second = assemble_contract(sample_record, engine_settings)

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_to_dict_is_renderer_friendly(sample_record, engine_settings):
    """Test serialized pages expose kinds, fragment types and plain values"""
    data = assemble_contract(sample_record, engine_settings).to_dict()

    assert [page["kind"] for page in data["pages"]] == ["cover", "clause_content"]
    cover_types = {block["type"] for block in data["pages"][0]["blocks"]}
    assert {"text", "table", "checkboxes", "signature"} <= cover_types
    assert data["pages"][1]["blocks"][0]["type"] == "clause"


@pytest.mark.parametrize("count", [0, 1, 3])
def test_signature_block_always_has_two_witness_rows(count, engine_settings):
    """Test directly built records with any number of witnesses"""
    witnesses = tuple(Witness(name=f"Testemunha {i}") for i in range(1, count + 1))

    document = assemble_contract(EnrollmentRecord(witnesses=witnesses), engine_settings)
    signature = document.signature_pages[0].blocks[-1]

    names = [signer.name for signer in signature.signers[1:]]
    expected = [f"Testemunha {i}" for i in range(1, min(count, 2) + 1)]
    assert names == expected + [""] * (2 - len(expected))
