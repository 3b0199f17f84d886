"""Typed variable fields and ordered first-match lookup strategies"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, NamedTuple, Optional, Tuple


# Aliases accepted for each named field: snake_case keys plus the labels
# used by the contract templates ("{{Nome Completo do Aluno}}" etc.)
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "student_name": ("student_name", "Nome Completo do Aluno", "Nome Completo"),
    "student_document": ("student_document", "CPF/CNPJ do Aluno", "CPF do Aluno"),
    "student_address": ("student_address", "Endereço do Aluno"),
    "student_city_state": ("student_city_state", "Cidade/Estado do Aluno"),
    "student_zip_code": ("student_zip_code", "CEP do Aluno"),
    "signing_location": ("signing_location", "Local de Assinatura do Termo", "Local do Contrato"),
    "immersion_date": ("immersion_date", "Data da Imersão", "Data Imersão Prosperar"),
    "immersion_enrollments": ("immersion_enrollments", "Quantidade de Inscrições", "Inscrições Imersão"),
    "other_bonus_description": ("other_bonus_description", "other_description", "Outros Bônus", "Descrição Outros Bônus"),
    "first_bank_slip_due_date": ("first_bank_slip_due_date", "1º Boleto Para"),
    "bank_slip_best_day": ("bank_slip_best_day", "Melhor Dia de Vencimento"),
}

# Keys seen in older templates for the first bank slip due date
BANK_SLIP_DUE_DATE_ALIASES: Tuple[str, ...] = (
    "Data do Primeiro Boleto",
    "Vencimento do Primeiro Boleto",
    "Vencimento Boleto",
    "data_primeiro_boleto",
    "vencimento_boleto",
)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class VariableFields:
    """Named optional fields plus the residual mapping of unknown keys"""

    student_name: Optional[str] = None
    student_document: Optional[str] = None
    student_address: Optional[str] = None
    student_city_state: Optional[str] = None
    student_zip_code: Optional[str] = None
    signing_location: Optional[str] = None
    immersion_date: Optional[str] = None
    immersion_enrollments: Optional[str] = None
    other_bonus_description: Optional[str] = None
    first_bank_slip_due_date: Optional[str] = None
    bank_slip_best_day: Optional[str] = None
    extra: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "VariableFields":
        """
        Build from a free-form key/value bag.

        Known aliases fill the named fields (first alias with a non-blank value
        wins); every other key lands in `extra`, blank values included.
        """
        raw = raw or {}
        consumed = set()
        named: Dict[str, str] = {}

        for name, aliases in FIELD_ALIASES.items():
            for alias in aliases:
                if alias in raw:
                    consumed.add(alias)
                    value = _clean(raw[alias])
                    if value is not None and name not in named:
                        named[name] = value

        extra = {
            str(key): "" if value is None else str(value)
            for key, value in raw.items()
            if key not in consumed
        }
        return cls(**named, extra=MappingProxyType(extra))

    def get(self, key: str) -> Optional[str]:
        """Look a value up by named field or by residual key"""
        if key in FIELD_ALIASES:
            return getattr(self, key)
        return _clean(self.extra.get(key))

    def as_placeholders(self) -> Dict[str, str]:
        """Map placeholder labels to values, residual keys included"""
        values = {key: value for key, value in self.extra.items()}
        for item in fields(self):
            if item.name == "extra":
                continue
            value = getattr(self, item.name)
            if value is None:
                continue
            for alias in FIELD_ALIASES[item.name]:
                values[alias] = value
        return values


class LookupStrategy(NamedTuple):
    """A named way of locating one logical value"""

    name: str
    lookup: Callable[[Any], Any]


def resolve_first(strategies: Iterable[LookupStrategy], source: Any) -> Tuple[str, Optional[str]]:
    """
    Evaluate strategies in order; the first non-blank value wins.

    Returns:
        (value, strategy_name); ("", None) when nothing matched
    """
    for strategy in strategies:
        value = _clean(strategy.lookup(source))
        if value is not None:
            return value, strategy.name
    return "", None


def alias_lookup(*keys: str) -> Callable[[VariableFields], Optional[str]]:
    """Lookup returning the first residual key holding a non-blank value"""

    def lookup(variable_fields: VariableFields) -> Optional[str]:
        for key in keys:
            value = variable_fields.get(key)
            if value:
                return value
        return None

    return lookup


BANK_SLIP_DUE_DATE_STRATEGIES: Tuple[LookupStrategy, ...] = (
    LookupStrategy("explicit_field", lambda vf: vf.first_bank_slip_due_date),
    LookupStrategy("legacy_alias", alias_lookup(*BANK_SLIP_DUE_DATE_ALIASES)),
)
