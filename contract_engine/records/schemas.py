"""Pydantic schemas for the raw enrollment record handed over by the surrounding service"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from contract_engine.utils.date_utils import parse_date
from contract_engine.utils.format_utils import to_decimal


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _list(value: Any) -> Any:
    return [] if value is None else value


def _mapping(value: Any) -> Any:
    return {} if value is None else value


def _markup(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _witnesses(value: Any) -> Any:
    # Accepts a list or the {"testemunha_1": ..., "testemunha_2": ...} form
    if value is None:
        return []
    if isinstance(value, dict):
        value = list(value.values())
    if isinstance(value, (list, tuple)):
        return [{} if item is None else item for item in value]
    return value


Text = Annotated[str, BeforeValidator(_text)]
OptionalText = Annotated[Optional[str], BeforeValidator(lambda value: _text(value) or None)]
LenientDate = Annotated[Optional[date], BeforeValidator(parse_date)]
LenientDecimal = Annotated[Optional[Decimal], BeforeValidator(to_decimal)]
LenientList = Annotated[List[Any], BeforeValidator(_list)]
LenientMapping = Annotated[Dict[str, Any], BeforeValidator(_mapping)]
Markup = Annotated[str, BeforeValidator(_markup)]


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class StudentSchema(_Schema):
    """Student identification block"""

    name: Text = Field("", validation_alias=_alias("name", "nome"))
    document: Text = Field("", validation_alias=_alias("document", "cpf"))
    birth_date: LenientDate = Field(None, validation_alias=_alias("birth_date", "data_nascimento"))
    phone: Text = Field("", validation_alias=_alias("phone", "telefone_um", "whatsapp"))
    email: Text = ""
    address: Text = Field("", validation_alias=_alias("address", "endereco"))
    city_state: Text = Field("", validation_alias=_alias("city_state", "cidade_estado"))
    zip_code: Text = Field("", validation_alias=_alias("zip_code", "cep"))


class TrainingSchema(_Schema):
    """Training program the student enrolls in"""

    name: Text = Field("", validation_alias=_alias("name", "nome", "treinamento"))
    city: Text = Field("", validation_alias=_alias("city", "cidade"))
    start_date: LenientDate = Field(None, validation_alias=_alias("start_date", "data_inicio"))
    end_date: LenientDate = Field(None, validation_alias=_alias("end_date", "data_fim"))
    price: LenientDecimal = Field(None, validation_alias=_alias("price", "preco", "preco_treinamento"))


class BonusSchema(_Schema):
    codes: LenientList = Field(default_factory=list, validation_alias=_alias("codes", "selected_codes"))
    supplemental: LenientMapping = Field(default_factory=dict, validation_alias=_alias("supplemental", "fields"))


class WitnessSchema(_Schema):
    name: Text = Field("", validation_alias=_alias("name", "nome"))
    document: Text = Field("", validation_alias=_alias("document", "cpf"))
    signature: OptionalText = Field(None, validation_alias=_alias("signature", "assinatura"))


WitnessList = Annotated[List[WitnessSchema], BeforeValidator(_witnesses)]


class ContractSchema(_Schema):
    location: Text = Field("", validation_alias=_alias("location", "local"))
    date: LenientDate = Field(None, validation_alias=_alias("date", "data"))


class SignaturesSchema(_Schema):
    """Already-captured signature image references (URIs or data URLs)"""

    student: OptionalText = Field(None, validation_alias=_alias("student", "aluno"))


class BonusEventSchema(_Schema):
    start_date: LenientDate = Field(None, validation_alias=_alias("start_date", "data_inicio"))


def _section(model):
    """A nested object that may be missing or null"""
    return Annotated[model, BeforeValidator(_mapping)]


class EnrollmentRecordSchema(_Schema):
    """Request body accepted by ContractService.build_document"""

    student: _section(StudentSchema) = Field(
        default_factory=StudentSchema, validation_alias=_alias("student", "aluno")
    )
    training: _section(TrainingSchema) = Field(
        default_factory=TrainingSchema, validation_alias=_alias("training", "treinamento")
    )
    payment_mode: OptionalText = Field(None, validation_alias=_alias("payment_mode", "forma_pagamento"))
    payments: LenientList = Field(default_factory=list, validation_alias=_alias("payments", "formas_pagamento"))
    bonus: _section(BonusSchema) = Field(default_factory=BonusSchema)
    witnesses: WitnessList = Field(default_factory=list, validation_alias=_alias("witnesses", "testemunhas"))
    clauses: Markup = Field("", validation_alias=_alias("clauses", "clausulas"))
    variable_fields: LenientMapping = Field(
        default_factory=dict, validation_alias=_alias("variable_fields", "campos_variaveis")
    )
    contract: _section(ContractSchema) = Field(
        default_factory=ContractSchema, validation_alias=_alias("contract", "contrato")
    )
    signatures: _section(SignaturesSchema) = Field(default_factory=SignaturesSchema)
    observations: Text = Field("", validation_alias=_alias("observations", "observacoes"))
    bonus_event: Optional[BonusEventSchema] = None
