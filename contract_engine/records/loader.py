"""Convert raw enrollment mappings into immutable domain records"""

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from contract_engine.domain.exceptions import InvalidInputError
from contract_engine.domain.fields import VariableFields
from contract_engine.domain.models import (
    BonusFields,
    BonusSelection,
    ContractInfo,
    EnrollmentRecord,
    Student,
    TrainingProgram,
    Witness,
)
from contract_engine.domain.payments import parse_payment_entries
from contract_engine.records.schemas import EnrollmentRecordSchema, WitnessSchema


def _witness(schema: WitnessSchema) -> Witness:
    return Witness(name=schema.name, document=schema.document, signature_ref=schema.signature)


def to_domain(schema: EnrollmentRecordSchema) -> EnrollmentRecord:
    """Map a validated schema onto the domain record"""
    variable_fields = VariableFields.from_mapping(schema.variable_fields)
    bonus_values = VariableFields.from_mapping(schema.bonus.supplemental)

    payments, skipped = parse_payment_entries(schema.payments, default_billing=schema.payment_mode)

    witnesses = [_witness(item) for item in schema.witnesses[:2]]
    while len(witnesses) < 2:
        witnesses.append(Witness())

    student = schema.student
    training = schema.training

    return EnrollmentRecord(
        student=Student(
            name=student.name,
            document=student.document,
            birth_date=student.birth_date,
            phone=student.phone,
            email=student.email,
            address=student.address,
            city_state=student.city_state,
            zip_code=student.zip_code,
        ),
        training=TrainingProgram(
            name=training.name,
            city=training.city,
            start_date=training.start_date,
            end_date=training.end_date,
            price=training.price,
        ),
        payments=tuple(payments),
        bonus=BonusSelection(
            selected_codes=frozenset(str(code) for code in schema.bonus.codes if code is not None),
            fields=BonusFields(
                # Bonus-specific values win over the general variable fields
                immersion_date=bonus_values.immersion_date or variable_fields.immersion_date,
                immersion_enrollments=bonus_values.immersion_enrollments or variable_fields.immersion_enrollments,
                other_description=bonus_values.other_bonus_description or variable_fields.other_bonus_description,
            ),
        ),
        witnesses=(witnesses[0], witnesses[1]),
        clauses=schema.clauses,
        variable_fields=variable_fields,
        contract=ContractInfo(location=schema.contract.location, date=schema.contract.date),
        student_signature_ref=schema.signatures.student,
        observations=schema.observations,
        bonus_event_start=schema.bonus_event.start_date if schema.bonus_event else None,
        skipped_payments=skipped,
    )


def load_record(raw: Any) -> EnrollmentRecord:
    """
    Validate a raw enrollment mapping and build the domain record.

    Data-quality gaps (bad amounts, unparsable dates, missing sections) are
    tolerated; only a structurally unusable record is rejected.

    Raises:
        InvalidInputError: record is None, not a mapping, or has the wrong shape
    """
    if raw is None:
        raise InvalidInputError("Enrollment record is required")
    if isinstance(raw, EnrollmentRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidInputError(f"Enrollment record must be a mapping, got {type(raw).__name__}")

    try:
        schema = EnrollmentRecordSchema.model_validate(dict(raw))
    except ValidationError as e:
        raise InvalidInputError(f"Malformed enrollment record: {e.error_count()} invalid field(s)") from e

    record = to_domain(schema)
    if record.skipped_payments:
        logging.warning(
            "Payment entries skipped",
            extra={"step": "record_load", "skipped_payments": record.skipped_payments},
        )
    return record
