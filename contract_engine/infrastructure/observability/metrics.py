"""Prometheus metrics for contract assembly volume, layout decisions and data-quality gaps"""

from prometheus_client import Counter, Histogram

from contract_engine.domain.models import ContractDocument, PageKind

# Assembly metrics
documents_assembled_counter = Counter(
    "contract_documents_assembled_total",
    "Total contract documents assembled",
    ["signature_placement"],  # last_clause_page | signature_page
)

pages_per_document_histogram = Histogram(
    "contract_pages_per_document",
    "Pages in each assembled contract",
    buckets=[2, 3, 4, 5, 6, 8, 10, 15],
)

assembly_duration_histogram = Histogram(
    "contract_assembly_duration_seconds",
    "Time spent assembling one contract",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

# Data-quality metrics
clause_placeholder_counter = Counter(
    "contract_clause_placeholder_total",
    "Contracts assembled with the missing-clauses placeholder page",
)

skipped_payment_entries_counter = Counter(
    "contract_skipped_payment_entries_total",
    "Payment entries excluded for malformed or non-positive amounts",
)

oversized_clause_counter = Counter(
    "contract_oversized_clause_blocks_total",
    "Clause blocks larger than a full page, placed alone with overflow",
)


def signature_placement(document: ContractDocument) -> str:
    """Where the signature block landed: last clause page or its own page"""
    if any(page.kind is PageKind.SIGNATURE_ONLY for page in document.pages):
        return "signature_page"
    return "last_clause_page"


def record_assembly(document: ContractDocument, duration_seconds: float) -> None:
    """Record assembly metrics for page-volume and layout monitoring"""
    documents_assembled_counter.labels(signature_placement=signature_placement(document)).inc()
    pages_per_document_histogram.observe(len(document.pages))
    assembly_duration_histogram.observe(duration_seconds)
