"""Clause segmentation: split clause markup into ordered, size-estimated blocks"""

import html
import re
from typing import List, Mapping

from contract_engine.domain.models import ClauseBlock

_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")

# "CLÁUSULA PRIMEIRA -", "CLAUSULA DÉCIMA SEGUNDA –", "CLÁUSULA 3ª:".
# Opening tags right before the heading belong to the heading's paragraph.
HEADING_PATTERN = re.compile(
    r"(?:<(?!/)[^>]*>\s*)*(?P<heading>CL[ÁA]USULA(?:\s+[A-ZÀ-Ú0-9ºª]+)+\s*[-–—:])"
)

_ELEMENT = r"<(/?)([a-zA-Z][a-zA-Z0-9]*)[^>]*?(/?)>"
_ELEMENT_TAG = re.compile(_ELEMENT)
# Element tags plus the line breaks between them
_LAYOUT_TOKEN = re.compile(_ELEMENT + r"|(\n[ \t\r\f\v]*\n)|\n")

_VOID_TAGS = frozenset({"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"})
_BLOCK_TAGS = frozenset({"p", "div", "li", "h1", "h2", "h3", "h4", "h5", "h6"})

_PLACEHOLDER = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


def strip_tags(markup: str) -> str:
    return _TAG.sub("", markup or "")


def estimate_size(markup: str) -> int:
    """Printable size of a markup fragment: characters left once tags are stripped"""
    return len(strip_tags(markup))


def _tag_balance(markup: str) -> int:
    """Opening minus closing element tags; void and self-closing tags don't count"""
    balance = 0
    for match in _ELEMENT_TAG.finditer(markup):
        closing, name, self_closing = match.groups()
        if self_closing or name.lower() in _VOID_TAGS:
            continue
        balance += -1 if closing else 1
    return balance


def _keep(pieces: List[str]) -> List[str]:
    """
    Trim pieces and drop the ones with no printable text.

    A blank piece holding an unmatched tag is not dropped: a stray closing tag
    joins the piece before it, a stray opening tag joins the piece after it.
    """
    kept: List[str] = []
    pending = ""
    for piece in pieces:
        piece = piece.strip()
        if not piece:
            continue
        if strip_tags(piece).strip():
            kept.append(pending + piece)
            pending = ""
            continue
        balance = _tag_balance(piece)
        if balance < 0 and kept and not pending:
            kept[-1] += piece
        elif balance != 0:
            pending += piece
    if pending and kept:
        kept[-1] += pending
    return kept


def _cut(markup: str, cuts: List[int]) -> List[str]:
    bounds = [0] + cuts + [len(markup)]
    return [markup[start:end] for start, end in zip(bounds, bounds[1:])]


def _top_level_cuts(markup: str, line_breaks: bool) -> List[int]:
    """
    Offsets where a top-level block ends: after a closing block tag or <br>,
    and at blank lines (any line break when `line_breaks`), never inside an
    open element.
    """
    cuts = []
    depth = 0
    for match in _LAYOUT_TOKEN.finditer(markup):
        closing, name, self_closing, blank_line = match.groups()
        if name is None:
            if depth == 0 and (blank_line or line_breaks):
                cuts.append(match.end())
            continue
        name = name.lower()
        if self_closing or name in _VOID_TAGS:
            if name == "br" and depth == 0:
                cuts.append(match.end())
        elif closing:
            depth = max(depth - 1, 0)
            if depth == 0 and name in _BLOCK_TAGS:
                cuts.append(match.end())
        else:
            depth += 1
    return cuts


def _split_on_headings(markup: str) -> List[str]:
    starts = [match.start() for match in HEADING_PATTERN.finditer(markup)]
    return _keep(_cut(markup, starts))


def _split_on_block_boundaries(markup: str) -> List[str]:
    pieces = _keep(_cut(markup, _top_level_cuts(markup, line_breaks=False)))
    if len(pieces) <= 1:
        pieces = _keep(_cut(markup, _top_level_cuts(markup, line_breaks=True)))
    return pieces


def segment(markup: str) -> List[ClauseBlock]:
    """
    Split clause markup into ordered ClauseBlocks.

    1. Blank markup → no blocks
    2. Split at clause headings; used when it yields more than one segment
    3. Otherwise split at top-level block boundaries, then at top-level
       line breaks; an open element is never cut in two
    4. Each block is sized with estimate_size, the Paginator's metric

    Whitespace-only segments are discarded; unmatched tags travel with a
    neighbouring block.
    """
    if not markup or not markup.strip():
        return []

    segments = _split_on_headings(markup)
    if len(segments) <= 1:
        segments = _split_on_block_boundaries(markup)

    return [ClauseBlock(raw_markup=piece, estimated_size=estimate_size(piece)) for piece in segments]


def _heading_key(heading: str) -> str:
    return _WHITESPACE.sub(" ", strip_tags(heading)).strip().upper()


def remove_duplicate_clauses(markup: str) -> str:
    """
    Keep only the first clause for each repeated heading.

    Text before the first heading is kept as-is. Markup without repeated
    headings is returned unchanged.
    """
    if not markup:
        return markup or ""

    matches = list(HEADING_PATTERN.finditer(markup))
    keys = [_heading_key(match.group("heading")) for match in matches]
    if len(keys) == len(set(keys)):
        return markup

    kept = [markup[: matches[0].start()]]
    seen = set()
    for index, match in enumerate(matches):
        end = matches[index + 1].start() if index + 1 < len(matches) else len(markup)
        if keys[index] in seen:
            continue
        seen.add(keys[index])
        kept.append(markup[match.start():end])

    return "".join(kept)


def fill_placeholders(markup: str, values: Mapping[str, str]) -> str:
    """Replace {{Field Name}} placeholders with known values; unknown ones stay as written"""

    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in values:
            return match.group(0)
        return html.escape(values[key] or "", quote=False)

    return _PLACEHOLDER.sub(replace, markup or "")
