"""Clause pagination - greedy, boundary-preserving bin packing of clause blocks"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from contract_engine.domain.models import ClauseBlock, Page, PageKind

MAX_PAGE_SIZE = 6200
FOOTER_SHARE_THRESHOLD = 5000


@dataclass(frozen=True)
class PaginationResult:
    """Clause pages plus the signature placement decision"""

    pages: Tuple[Page, ...]
    signature_shares_last_page: bool
    total_size: int
    overflowing_blocks: Tuple[ClauseBlock, ...] = ()


def _clause_page(blocks: List[ClauseBlock]) -> Page:
    return Page(
        kind=PageKind.CLAUSE_CONTENT,
        blocks=tuple(blocks),
        has_footer_logo=True,
        has_signature_block=False,
    )


def paginate(
    blocks: Sequence[ClauseBlock],
    max_page_size: int = MAX_PAGE_SIZE,
    footer_share_threshold: int = FOOTER_SHARE_THRESHOLD,
    signature_required: bool = True,
) -> PaginationResult:
    """
    Pack clause blocks onto pages in order, never splitting a block.

    Algorithm:
    - A block opens a new page when adding it would push a non-empty page
      past max_page_size; otherwise it joins the current page
    - A block larger than max_page_size on its own gets a page to itself
      (overflow accepted, clause text is never cut)
    - The signature shares the last clause page iff the total clause size
      is strictly below footer_share_threshold

    Example (6200 / 5000):
        sizes [4000]        → 1 page, signature on the clause page
        sizes [6000, 6000]  → 2 pages, signature on its own page

    With no blocks there are no pages and the signature goes on its own page.
    """
    pages: List[Page] = []
    current_page: List[ClauseBlock] = []
    current_size = 0

    for block in blocks:
        if current_size + block.estimated_size > max_page_size and current_page:
            pages.append(_clause_page(current_page))
            current_page = [block]
            current_size = block.estimated_size
        else:
            current_page.append(block)
            current_size += block.estimated_size

    if current_page:
        pages.append(_clause_page(current_page))

    total_size = sum(block.estimated_size for block in blocks)
    shares_last_page = bool(pages) and signature_required and total_size < footer_share_threshold

    return PaginationResult(
        pages=tuple(pages),
        signature_shares_last_page=shares_last_page,
        total_size=total_size,
        overflowing_blocks=tuple(block for block in blocks if block.estimated_size > max_page_size),
    )
