"""Plain display helpers for amounts and Brazilian identity numbers"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

_CENTS = Decimal("0.01")
_NON_DIGITS = re.compile(r"\D")


def _grouped(text: str, separator: str) -> bool:
    """True for "1.234.567"-style integers grouped in threes by `separator`"""
    pattern = r"[+-]?\d{1,3}(?:" + re.escape(separator) + r"\d{3})+"
    return re.fullmatch(pattern, text) is not None


def _normalize_amount(text: str) -> Optional[str]:
    if "," in text and "." in text:
        decimal_point = "," if text.rfind(",") > text.rfind(".") else "."
        thousands = "." if decimal_point == "," else ","
        integer, _, fraction = text.rpartition(decimal_point)
        if not _grouped(integer, thousands):
            return None
        return integer.replace(thousands, "") + "." + fraction
    if "," in text:
        return text.replace(",", ".")
    if _grouped(text, "."):
        return text.replace(".", "")
    return text


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Coerce an upstream amount into a Decimal.

    Accepts numbers and strings such as "1234.56", "1.234,56", "1.500"
    (thousands) and "1,234.56". With both separators present the last one is
    the decimal point; a lone comma is always decimal.
    Returns None for anything non-numeric (including NaN/Infinity and booleans).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    else:
        text = _normalize_amount(str(value).strip().replace("R$", "").replace(" ", ""))
        if text is None:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    if not amount.is_finite():
        return None
    return amount


def format_amount(amount: Optional[Decimal]) -> str:
    """"R$ 1234.50" style, two decimal places"""
    if amount is None:
        return ""
    return f"R$ {amount.quantize(_CENTS, rounding=ROUND_HALF_UP)}"


def format_cpf(document: str) -> str:
    """Mask an 11-digit CPF as 000.000.000-00; other values pass through"""
    digits = _NON_DIGITS.sub("", document or "")
    if len(digits) != 11:
        return document or ""
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_cep(cep: str) -> str:
    """Mask an 8-digit CEP as 00000-000; other values pass through"""
    digits = _NON_DIGITS.sub("", cep or "")
    if len(digits) != 8:
        return cep or ""
    return f"{digits[:5]}-{digits[5:]}"
