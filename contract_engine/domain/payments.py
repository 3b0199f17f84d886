"""Payment aggregation: group raw payment entries per (method, billing) for the cover page"""

import logging
import re
import unicodedata
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from contract_engine.domain.fields import LookupStrategy, resolve_first
from contract_engine.domain.models import (
    BillingType,
    PaymentEntry,
    PaymentGroup,
    PaymentMethod,
    PaymentSummary,
)
from contract_engine.utils.format_utils import format_amount, to_decimal

METHOD_ALIASES: Dict[str, PaymentMethod] = {
    "credit_card": PaymentMethod.CREDIT_CARD,
    "cartao_credito": PaymentMethod.CREDIT_CARD,
    "cartao_de_credito": PaymentMethod.CREDIT_CARD,
    "debit_card": PaymentMethod.DEBIT_CARD,
    "cartao_debito": PaymentMethod.DEBIT_CARD,
    "cartao_de_debito": PaymentMethod.DEBIT_CARD,
    "pix": PaymentMethod.PIX,
    "pix_transferencia": PaymentMethod.PIX,
    "transferencia": PaymentMethod.PIX,
    "cash": PaymentMethod.CASH,
    "dinheiro": PaymentMethod.CASH,
    "especie": PaymentMethod.CASH,
    "bank_slip": PaymentMethod.BANK_SLIP,
    "boleto": PaymentMethod.BANK_SLIP,
}

BILLING_ALIASES: Dict[str, BillingType] = {
    "upfront": BillingType.UPFRONT,
    "a_vista": BillingType.UPFRONT,
    "avista": BillingType.UPFRONT,
    "installment": BillingType.INSTALLMENT,
    "installments": BillingType.INSTALLMENT,
    "parcelado": BillingType.INSTALLMENT,
}

METHOD_LABELS: Dict[PaymentMethod, str] = {
    PaymentMethod.CREDIT_CARD: "Cartão de crédito",
    PaymentMethod.DEBIT_CARD: "Cartão de débito",
    PaymentMethod.PIX: "PIX/Transferência",
    PaymentMethod.CASH: "Espécie",
    PaymentMethod.BANK_SLIP: "Boleto",
}


def _key(name: str) -> LookupStrategy:
    return LookupStrategy(name, lambda raw: raw.get(name))


# Payment lines arrive as {method, billing, amount} or as the enrollment
# service's {forma, tipo, valor}
METHOD_KEYS: Tuple[LookupStrategy, ...] = (_key("method"), _key("forma"))
BILLING_KEYS: Tuple[LookupStrategy, ...] = (_key("billing"), _key("tipo"))
AMOUNT_KEYS: Tuple[LookupStrategy, ...] = (_key("amount"), _key("valor"))

_SEPARATORS = re.compile(r"[\s\-/]+")


def _normalize_key(value: Any) -> str:
    text = unicodedata.normalize("NFKD", str(value).strip().lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return _SEPARATORS.sub("_", text)


def parse_method(value: Any) -> Optional[PaymentMethod]:
    if isinstance(value, PaymentMethod):
        return value
    if value is None:
        return None
    return METHOD_ALIASES.get(_normalize_key(value))


def parse_billing(value: Any) -> Optional[BillingType]:
    if isinstance(value, BillingType):
        return value
    if value is None:
        return None
    return BILLING_ALIASES.get(_normalize_key(value))


def parse_payment_entries(
    raw_entries: Optional[Iterable[Mapping[str, Any]]],
    default_billing: Any = None,
) -> Tuple[List[PaymentEntry], int]:
    """
    Convert raw {method, billing, amount} or {forma, tipo, valor} mappings
    into PaymentEntry objects.

    Entries with an unknown method or billing type, or a non-numeric or
    non-positive amount, are excluded rather than failing the enrollment.

    Args:
        raw_entries: Payment lines as stored on the enrollment
        default_billing: Billing type for lines that carry none

    Returns:
        (entries in input order, number of skipped lines)
    """
    entries: List[PaymentEntry] = []
    skipped = 0

    for position, raw in enumerate(raw_entries or []):
        if not isinstance(raw, Mapping):
            skipped += 1
            continue

        raw_method, _ = resolve_first(METHOD_KEYS, raw)
        raw_billing, _ = resolve_first(BILLING_KEYS, raw)
        raw_amount, _ = resolve_first(AMOUNT_KEYS, raw)

        method = parse_method(raw_method or None)
        billing = parse_billing(raw_billing or default_billing)
        amount = to_decimal(raw_amount or None)

        if method is None or billing is None or amount is None or amount <= 0:
            logging.debug(
                "Skipping payment entry",
                extra={"position": position, "method": raw_method, "amount": raw_amount},
            )
            skipped += 1
            continue

        entries.append(PaymentEntry(method=method, billing=billing, amount=amount))

    return entries, skipped


def aggregate_payments(entries: Iterable[PaymentEntry]) -> List[PaymentGroup]:
    """
    Group payment entries by (method, billing) in first-seen order.

    Requirements:
    - total_amount is the sum of the group's amounts
    - installment_count is the number of entries in the group
    - per_installment_amount = total / count for installment groups only;
      upfront groups repeat the total
    - Non-numeric or non-positive amounts are left out of every total

    Example:
        [CC/installment 100, CC/installment 100, PIX/upfront 50]
        → [CC/installment total=200 count=2 per=100, PIX/upfront total=50 count=1]
    """
    totals: Dict[Tuple[PaymentMethod, BillingType], Decimal] = {}
    counts: Dict[Tuple[PaymentMethod, BillingType], int] = {}

    for entry in entries:
        amount = to_decimal(entry.amount)
        if amount is None or amount <= 0:
            continue

        key = (entry.method, entry.billing)
        totals[key] = totals.get(key, Decimal("0")) + amount
        counts[key] = counts.get(key, 0) + 1

    groups = []
    for (method, billing), total in totals.items():
        count = counts[(method, billing)]
        per_installment = total / count if billing is BillingType.INSTALLMENT else total
        groups.append(
            PaymentGroup(
                method=method,
                billing=billing,
                total_amount=total,
                installment_count=count,
                per_installment_amount=per_installment,
            )
        )

    return groups


def describe_group(group: PaymentGroup) -> str:
    """One cover-page line for a payment group"""
    label = METHOD_LABELS[group.method]
    if group.billing is BillingType.INSTALLMENT:
        return (
            f"{label} parcelado: {group.installment_count}x de "
            f"{format_amount(group.per_installment_amount)} (total {format_amount(group.total_amount)})"
        )
    return f"{label} à vista: {format_amount(group.total_amount)}"


def summarize_payments(groups: List[PaymentGroup]) -> PaymentSummary:
    """Total paid, selected payment mode and description lines for the cover page"""
    billings = {group.billing for group in groups}

    if billings == {BillingType.UPFRONT}:
        selected_label = "À VISTA"
    elif billings == {BillingType.INSTALLMENT}:
        selected_label = "PARCELADO"
    elif billings:
        selected_label = "À VISTA + PARCELADO"
    else:
        selected_label = "Não informado"

    return PaymentSummary(
        total_paid=sum((group.total_amount for group in groups), Decimal("0")),
        selected_label=selected_label,
        detail_lines=tuple(describe_group(group) for group in groups),
    )
