"""Domain models - immutable dataclasses describing enrollments and the contract page model"""

from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union

from contract_engine.domain.fields import VariableFields


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PIX = "pix"
    CASH = "cash"
    BANK_SLIP = "bank_slip"


class BillingType(str, Enum):
    UPFRONT = "upfront"
    INSTALLMENT = "installment"


class PageKind(str, Enum):
    COVER = "cover"
    CLAUSE_CONTENT = "clause_content"
    SIGNATURE_ONLY = "signature_only"


@dataclass(frozen=True)
class PaymentEntry:
    """Single payment line from the enrollment (one per installment)"""

    method: PaymentMethod
    billing: BillingType
    amount: Decimal


@dataclass(frozen=True)
class PaymentGroup:
    """Aggregated payments sharing one (method, billing) pair"""

    method: PaymentMethod
    billing: BillingType
    total_amount: Decimal
    installment_count: int
    per_installment_amount: Decimal


@dataclass(frozen=True)
class PaymentSummary:
    """Cover-page payment totals and description lines"""

    total_paid: Decimal
    selected_label: str
    detail_lines: Tuple[str, ...]


@dataclass(frozen=True)
class BonusFields:
    """Supplemental values some bonuses print next to their checkbox"""

    immersion_date: Optional[str] = None
    immersion_enrollments: Optional[str] = None
    other_description: Optional[str] = None


@dataclass(frozen=True)
class BonusSelection:
    selected_codes: FrozenSet[str] = frozenset()
    fields: BonusFields = BonusFields()


@dataclass(frozen=True)
class BonusDisplayEntry:
    code: str
    label: str
    checked: bool
    detail_text: Optional[str] = None


@dataclass(frozen=True)
class Student:
    name: str = ""
    document: str = ""
    birth_date: Optional[date] = None
    phone: str = ""
    email: str = ""
    address: str = ""
    city_state: str = ""
    zip_code: str = ""


@dataclass(frozen=True)
class TrainingProgram:
    name: str = ""
    city: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price: Optional[Decimal] = None


@dataclass(frozen=True)
class Witness:
    name: str = ""
    document: str = ""
    signature_ref: Optional[str] = None


@dataclass(frozen=True)
class ContractInfo:
    location: str = ""
    date: Optional[date] = None


@dataclass(frozen=True)
class EnrollmentRecord:
    """Already-loaded enrollment, the only input of contract assembly"""

    student: Student = Student()
    training: TrainingProgram = TrainingProgram()
    payments: Tuple[PaymentEntry, ...] = ()
    bonus: BonusSelection = BonusSelection()
    witnesses: Tuple[Witness, Witness] = (Witness(), Witness())
    clauses: str = ""
    variable_fields: VariableFields = VariableFields()
    contract: ContractInfo = ContractInfo()
    student_signature_ref: Optional[str] = None
    observations: str = ""
    bonus_event_start: Optional[date] = None
    skipped_payments: int = 0  # Raw entries dropped during ingestion


# Page content fragments. `type` lets renderers dispatch on serialized output.


@dataclass(frozen=True)
class ClauseBlock:
    """One segmented unit of clause markup with its printable-size estimate"""

    raw_markup: str
    estimated_size: int
    type: str = field(default="clause", init=False)


@dataclass(frozen=True)
class TextFragment:
    text: str
    style: str = "paragraph"
    type: str = field(default="text", init=False)


@dataclass(frozen=True)
class FieldTable:
    title: str
    rows: Tuple[Tuple[str, str], ...]
    type: str = field(default="table", init=False)


@dataclass(frozen=True)
class CheckboxList:
    title: str
    entries: Tuple[BonusDisplayEntry, ...]
    type: str = field(default="checkboxes", init=False)


@dataclass(frozen=True)
class Signer:
    role: str
    name: str
    document: str = ""
    signature_ref: Optional[str] = None


@dataclass(frozen=True)
class SignatureBlock:
    signers: Tuple[Signer, ...]
    location: str = ""
    date: str = ""
    type: str = field(default="signature", init=False)


@dataclass(frozen=True)
class WarningMarker:
    code: str
    message: str
    type: str = field(default="warning", init=False)


Fragment = Union[ClauseBlock, TextFragment, FieldTable, CheckboxList, SignatureBlock, WarningMarker]


@dataclass(frozen=True)
class Page:
    """Terminal output unit handed to the renderer"""

    kind: PageKind
    blocks: Tuple[Fragment, ...] = ()
    has_footer_logo: bool = True
    has_signature_block: bool = False


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (frozenset, set)):
        return sorted(value)
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class ContractDocument:
    """Ordered printable pages of one enrollment contract"""

    pages: Tuple[Page, ...]

    @property
    def signature_pages(self) -> Tuple[Page, ...]:
        """Clause or signature pages carrying the signature block"""
        return tuple(
            page for page in self.pages
            if page.kind is not PageKind.COVER and page.has_signature_block
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form for external renderers"""
        return _serialize(asdict(self))
