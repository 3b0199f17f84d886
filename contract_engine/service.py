"""Contract document service - entry point used by the surrounding enrollment service"""

import logging
import time
import uuid
from typing import Any, Optional

from contract_engine.config import Settings, settings
from contract_engine.domain.assembler import AssemblyResult, assemble
from contract_engine.domain.exceptions import InvalidInputError
from contract_engine.domain.models import ContractDocument
from contract_engine.infrastructure.observability.logging import log_assembly
from contract_engine.infrastructure.observability.metrics import (
    clause_placeholder_counter,
    oversized_clause_counter,
    record_assembly,
    signature_placement,
    skipped_payment_entries_counter,
)
from contract_engine.records.loader import load_record


class ContractService:
    """Builds printable contract page models from enrollment records"""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    def assemble(self, raw_record: Any, request_id: Optional[str] = None) -> AssemblyResult:
        """
        Load the record and assemble its contract.

        Flow:
        1. Validate and convert the raw record
        2. Assemble cover, clause and signature pages
        3. Record metrics and a structured log line

        Raises:
            InvalidInputError: record is absent or structurally unusable
        """
        start_time = time.time()
        request_id = request_id or str(uuid.uuid4())

        try:
            record = load_record(raw_record)
        except InvalidInputError as e:
            logging.warning(f"Invalid enrollment record: {e}", extra={"request_id": request_id})
            raise

        result = assemble(record, self.config)

        if record.skipped_payments:
            skipped_payment_entries_counter.inc(record.skipped_payments)

        if result.clauses_missing:
            clause_placeholder_counter.inc()
            logging.warning(
                "Contract clauses missing, emitting placeholder page",
                extra={"request_id": request_id, "step": "pagination"},
            )

        for block in result.pagination.overflowing_blocks:
            oversized_clause_counter.inc()
            logging.warning(
                "Clause block exceeds page budget, placed alone",
                extra={
                    "request_id": request_id,
                    "step": "pagination",
                    "estimated_size": block.estimated_size,
                    "max_page_size": self.config.max_page_size,
                },
            )

        duration = time.time() - start_time
        record_assembly(result.document, duration)
        log_assembly(
            request_id,
            record.student.name,
            len(result.document.pages),
            signature_placement(result.document),
            degraded=result.clauses_missing or bool(record.skipped_payments),
            duration_ms=duration * 1000,
        )

        return result

    def build_document(self, raw_record: Any, request_id: Optional[str] = None) -> ContractDocument:
        """Assemble and return only the page model"""
        return self.assemble(raw_record, request_id).document
