"""Contract assembly: cover page + paginated clauses + signature placement"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from contract_engine.config import Settings, settings as default_settings
from contract_engine.domain.bonus import resolve_bonuses
from contract_engine.domain.clauses import fill_placeholders, remove_duplicate_clauses, segment
from contract_engine.domain.exceptions import InvalidInputError
from contract_engine.domain.fields import BANK_SLIP_DUE_DATE_STRATEGIES, LookupStrategy, resolve_first
from contract_engine.domain.models import (
    BillingType,
    CheckboxList,
    ContractDocument,
    EnrollmentRecord,
    FieldTable,
    Page,
    PageKind,
    PaymentGroup,
    PaymentMethod,
    SignatureBlock,
    Signer,
    TextFragment,
    WarningMarker,
    Witness,
)
from contract_engine.domain.pagination import PaginationResult, paginate
from contract_engine.domain.payments import aggregate_payments, summarize_payments
from contract_engine.utils.date_utils import format_date
from contract_engine.utils.format_utils import format_amount, format_cep, format_cpf

CLAUSES_MISSING = "clauses_missing"

INTRO_TEXT = (
    "O presente instrumento tem como objetivo realizar a inscrição da pessoa "
    "abaixo nominada no seguinte treinamento:"
)
CLOSING_TEXT = (
    "E por estarem justos e acordados, firmam o presente contrato em duas vias "
    "de igual teor e forma, para que produza seus efeitos legais."
)
MISSING_CLAUSES_TEXT = (
    "As cláusulas deste contrato não foram encontradas. "
    "Revise o modelo de contrato antes de coletar as assinaturas."
)


def _record_then_fields(student_attr: str, field_attr: str) -> Tuple[LookupStrategy, ...]:
    return (
        LookupStrategy("record", lambda record: getattr(record.student, student_attr)),
        LookupStrategy("variable_fields", lambda record: getattr(record.variable_fields, field_attr)),
    )


STUDENT_STRATEGIES: Dict[str, Tuple[LookupStrategy, ...]] = {
    "name": _record_then_fields("name", "student_name"),
    "document": _record_then_fields("document", "student_document"),
    "address": _record_then_fields("address", "student_address"),
    "city_state": _record_then_fields("city_state", "student_city_state"),
    "zip_code": _record_then_fields("zip_code", "student_zip_code"),
}


def _signing_location_strategies(config: Settings) -> Tuple[LookupStrategy, ...]:
    return (
        LookupStrategy("contract", lambda record: record.contract.location),
        LookupStrategy("variable_fields", lambda record: record.variable_fields.signing_location),
        LookupStrategy("settings", lambda record: config.default_signing_location),
        LookupStrategy("training_city", lambda record: record.training.city),
    )


@dataclass(frozen=True)
class AssemblyResult:
    """Assembled document plus the intermediate decisions behind it"""

    document: ContractDocument
    pagination: PaginationResult
    payment_groups: Tuple[PaymentGroup, ...]

    @property
    def clauses_missing(self) -> bool:
        return not self.pagination.pages


def _student_values(record: EnrollmentRecord) -> Dict[str, str]:
    return {key: resolve_first(strategies, record)[0] for key, strategies in STUDENT_STRATEGIES.items()}


def _placeholder_values(record: EnrollmentRecord, student: Dict[str, str]) -> Dict[str, str]:
    values = record.variable_fields.as_placeholders()
    values.update(
        {
            "Nome Completo do Aluno": student["name"],
            "CPF/CNPJ do Aluno": format_cpf(student["document"]),
            "Endereço do Aluno": student["address"],
            "Cidade/Estado do Aluno": student["city_state"],
            "CEP do Aluno": format_cep(student["zip_code"]),
            "Nome do Treinamento Contratado": record.training.name,
            "Preço do Treinamento": format_amount(record.training.price),
        }
    )
    return values


def _payment_fragments(record: EnrollmentRecord, groups: List[PaymentGroup]) -> List:
    summary = summarize_payments(groups)
    rows = [
        ("Forma de pagamento selecionada", summary.selected_label),
        ("Valor real pago", format_amount(summary.total_paid)),
    ]

    has_bank_slip_plan = any(
        group.method is PaymentMethod.BANK_SLIP and group.billing is BillingType.INSTALLMENT
        for group in groups
    )
    if has_bank_slip_plan:
        due_date, _ = resolve_first(BANK_SLIP_DUE_DATE_STRATEGIES, record.variable_fields)
        rows.append(("1º boleto para", due_date))
        rows.append(("Melhor dia de vencimento", record.variable_fields.bank_slip_best_day or ""))

    fragments = [FieldTable(title="FORMAS DE PAGAMENTO", rows=tuple(rows))]
    detail_lines = summary.detail_lines or ("Não informado",)
    fragments.extend(TextFragment(text=f"• {line}", style="list_item") for line in detail_lines)
    return fragments


def build_signature_block(record: EnrollmentRecord, location: str) -> SignatureBlock:
    """Student plus two witnesses (padded or trimmed); signature image references pass through untouched"""
    student = _student_values(record)
    witnesses = tuple(record.witnesses or ())[:2]
    first, second = witnesses + (Witness(),) * (2 - len(witnesses))
    return SignatureBlock(
        signers=(
            Signer(
                role="ALUNO/Contratante",
                name=student["name"],
                document=format_cpf(student["document"]),
                signature_ref=record.student_signature_ref,
            ),
            Signer(role="Testemunha 1", name=first.name, document=format_cpf(first.document), signature_ref=first.signature_ref),
            Signer(role="Testemunha 2", name=second.name, document=format_cpf(second.document), signature_ref=second.signature_ref),
        ),
        location=location,
        date=format_date(record.contract.date),
    )


def build_cover_page(
    record: EnrollmentRecord,
    groups: List[PaymentGroup],
    clause_page_count: int,
    location: str,
    config: Settings,
) -> Page:
    """Identification, training, bonus and payment summary; always the first page"""
    student = _student_values(record)
    training = record.training

    if training.end_date and training.end_date != training.start_date:
        scheduled = f"{format_date(training.start_date)} a {format_date(training.end_date)}"
    else:
        scheduled = format_date(training.start_date)

    blocks = [
        TextFragment(text=config.company_name, style="title"),
        TextFragment(text=INTRO_TEXT),
        FieldTable(
            title="DADOS PESSOAIS",
            rows=(
                ("Nome completo", student["name"]),
                ("CPF/CNPJ", format_cpf(student["document"])),
                ("Data de nascimento", format_date(record.student.birth_date)),
                ("WhatsApp", record.student.phone),
                ("E-mail", record.student.email),
                ("Endereço", student["address"]),
                ("Cidade/Estado", student["city_state"]),
                ("CEP", format_cep(student["zip_code"])),
            ),
        ),
        FieldTable(
            title="TREINAMENTO E BÔNUS",
            rows=(
                ("Treinamento", training.name),
                ("Cidade", training.city),
                ("Data prevista", scheduled),
                ("Preço do contrato", format_amount(training.price)),
            ),
        ),
        CheckboxList(title="BÔNUS", entries=tuple(resolve_bonuses(record.bonus, record.bonus_event_start))),
    ]
    blocks.extend(_payment_fragments(record, groups))
    blocks.append(FieldTable(title="OBSERVAÇÕES", rows=(("Observações", record.observations),)))
    blocks.append(
        FieldTable(title="LOCAL E DATA", rows=(("Local", location), ("Data", format_date(record.contract.date))))
    )
    blocks.append(
        TextFragment(
            text=(
                "Declaro que li e concordo com todas as cláusulas deste contrato, "
                f"redigidas em {max(clause_page_count, 1)} laudas, estando ciente de todas elas, "
                "por meio da assinatura abaixo e na presença de 2 testemunhas."
            ),
            style="declaration",
        )
    )
    if config.cover_signature_enabled:
        blocks.append(build_signature_block(record, location))

    return Page(
        kind=PageKind.COVER,
        blocks=tuple(blocks),
        has_footer_logo=True,
        has_signature_block=config.cover_signature_enabled,
    )


def assemble(record: EnrollmentRecord, config: Optional[Settings] = None) -> AssemblyResult:
    """
    Build the full contract page list.

    Flow:
    1. Clean clause text (duplicate headings, placeholders) and segment it
    2. Paginate the blocks and decide where the signature block goes
    3. Cover page from record fields, payment groups and bonus entries
    4. Missing clauses → placeholder clause page + signature page;
       otherwise signature on the last clause page or on its own page

    Raises:
        InvalidInputError: record is absent or not an EnrollmentRecord
    """
    if record is None:
        raise InvalidInputError("Enrollment record is required")
    if not isinstance(record, EnrollmentRecord):
        raise InvalidInputError(f"Expected EnrollmentRecord, got {type(record).__name__}")

    config = config or default_settings

    student = _student_values(record)
    clauses = record.clauses if isinstance(record.clauses, str) else ""
    markup = fill_placeholders(remove_duplicate_clauses(clauses), _placeholder_values(record, student))
    pagination = paginate(
        segment(markup),
        max_page_size=config.max_page_size,
        footer_share_threshold=config.footer_share_threshold,
    )

    groups = aggregate_payments(record.payments)
    location, _ = resolve_first(_signing_location_strategies(config), record)
    signature_blocks = (
        TextFragment(text=CLOSING_TEXT, style="closing"),
        build_signature_block(record, location),
    )
    signature_page = Page(
        kind=PageKind.SIGNATURE_ONLY,
        blocks=signature_blocks,
        has_footer_logo=True,
        has_signature_block=True,
    )

    pages = [build_cover_page(record, groups, len(pagination.pages), location, config)]

    if not pagination.pages:
        pages.append(
            Page(
                kind=PageKind.CLAUSE_CONTENT,
                blocks=(WarningMarker(code=CLAUSES_MISSING, message=MISSING_CLAUSES_TEXT),),
                has_footer_logo=True,
                has_signature_block=False,
            )
        )
        pages.append(signature_page)
    else:
        clause_pages = list(pagination.pages)
        if pagination.signature_shares_last_page:
            last = clause_pages[-1]
            clause_pages[-1] = replace(last, blocks=last.blocks + signature_blocks, has_signature_block=True)
        pages.extend(clause_pages)
        if not pagination.signature_shares_last_page:
            pages.append(signature_page)

    return AssemblyResult(
        document=ContractDocument(pages=tuple(pages)),
        pagination=pagination,
        payment_groups=tuple(groups),
    )


def assemble_contract(record: EnrollmentRecord, config: Optional[Settings] = None) -> ContractDocument:
    """Assemble and return only the ContractDocument"""
    return assemble(record, config).document
