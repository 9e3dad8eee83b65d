# quote_anchoring.py
"""
QUOTE ANCHORING for AI feedback on extracted document text.

The feedback model is told to quote the document verbatim, but its quotes drift:
- curly vs straight quotes, en/em dashes, ellipsis glyphs
- newlines and runs of spaces collapsed (or not)
- truncated or lightly paraphrased passages

So exact search fails far too often. This module locates each quote with a cheap,
deterministic cascade (strict -> lenient):
1) exact 30-char chunks of the quote (long quotes only)
2) any 3 consecutive significant words, in order
3) the longest single significant word

Matched spans are wrapped in highlight markup (longest quotes first, so a long
passage is carved out before the short ones nested in it), and the annotations are
returned ordered by their position in the ORIGINAL text; unmatched ones go last.

Everything here is pure: same input -> same output, nothing cached, nothing shared.
"""

import math
import re
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple


# Print per-quote match decisions (debugging only).
DEBUG_QUOTE_MATCH = False

MIN_QUOTE_LENGTH = 10
MIN_CONFIDENCE = 0.7

CHUNK_QUOTE_MIN_LENGTH = 50  # chunk strategy only for quotes longer than this
CHUNK_SIZE = 30
CHUNK_END_PAD = 20
CHUNK_CONFIDENCE = 0.9

SEQUENCE_WORDS = 3
SEQUENCE_PAD = 20
SEQUENCE_CONFIDENCE = 0.85

TOKEN_MIN_LENGTH = 4        # words of 3 chars or less are ignored
SIGNIFICANT_MIN_LENGTH = 6  # single-word fallback needs longer words
WORD_PAD = 10
WORD_CONFIDENCE = 0.7

UNMATCHED_SORT_KEY = math.inf
MISSING_START_INDEX = -1

ANNOTATION_ID_PREFIX = "annotation-"
MARK_OPEN = '<span id="text-{id}" data-annotation-id="{id}" class="annotation-highlight">'
MARK_CLOSE = "</span>"

# Stands in for already-marked text while searching, so quotes can't land in markup.
_MASK_CHAR = "\x00"


class FeedbackItem(NamedTuple):
    """One model-produced passage comment. `quote` is NOT trusted to exist in the text."""
    quote: str
    comment: str
    guideline_reference: Optional[str] = None


class MatchResult(NamedTuple):
    start_index: int
    end_index: int
    confidence: float
    strategy: str


class PlacementRecord(NamedTuple):
    id: str
    matched: bool
    start_index: Optional[int]
    quote: str
    comment: str
    guideline_reference: Optional[str]


class Annotation(NamedTuple):
    id: str
    matched: bool
    sort_key: float
    quote: str
    comment: str
    guideline_reference: Optional[str]


# ============================================================
# TEXT NORMALIZER
# ============================================================
_CHAR_REPLACEMENTS = {
    "‘": "'", "’": "'",
    "“": '"', "”": '"',
    "–": "-", "—": "-",
    "…": "...",
}


def normalize_with_offsets(text: str) -> Tuple[str, List[int], List[int]]:
    """
    Normalize `text` and keep, for every normalized char, the raw half-open range
    [starts[i], ends[i]) it came from. A collapsed space covers its whole whitespace
    run; the three dots of an ellipsis all point at the single glyph.
    """
    out: List[str] = []
    starts: List[int] = []
    ends: List[int] = []
    space_run: Optional[Tuple[int, int]] = None

    for i, ch in enumerate(text or ""):
        if ch.isspace():
            space_run = (i, i + 1) if space_run is None else (space_run[0], i + 1)
            continue
        if space_run is not None:
            if out:
                out.append(" ")
                starts.append(space_run[0])
                ends.append(space_run[1])
            space_run = None
        repl = _CHAR_REPLACEMENTS.get(ch)
        if repl is None:
            repl = ch.lower()
        for r in repl:
            out.append(r)
            starts.append(i)
            ends.append(i + 1)

    return "".join(out), starts, ends


def normalize_text(text: str) -> str:
    return normalize_with_offsets(text)[0]


# ============================================================
# SUBSTRING MATCHER
# Strategies work on normalized text and return normalized ranges.
# ============================================================
def _quote_tokens(quote: str) -> List[str]:
    return [w for w in (quote or "").split() if len(w) >= TOKEN_MIN_LENGTH]


def _match_chunks(norm_quote: str, tokens: List[str], norm_haystack: str) -> Optional[MatchResult]:
    n = len(norm_quote)
    if n <= CHUNK_QUOTE_MIN_LENGTH:
        return None

    half = n // 2
    chunks = [
        norm_quote[:CHUNK_SIZE],
        norm_quote[half - CHUNK_SIZE // 2: half + CHUNK_SIZE // 2],
        norm_quote[n - CHUNK_SIZE:],
    ]
    found = []
    for which, chunk in enumerate(chunks):
        idx = norm_haystack.find(chunk)
        if idx >= 0:
            found.append((idx, which))
    if not found:
        return None

    # earliest occurrence wins, not the "best" chunk
    idx, which = min(found)
    if which == 0:
        start = idx
    elif which == 1:
        start = max(0, idx - (half - CHUNK_SIZE // 2))
    else:
        start = max(0, idx - (n - CHUNK_SIZE))
    end = min(len(norm_haystack), start + n + CHUNK_END_PAD)
    return MatchResult(start, end, CHUNK_CONFIDENCE, "chunk")


# Between two kept words, allow the short words the token filter dropped:
# "quick brown fox jumps" must match its own text although "fox" is not a token.
_SEQUENCE_GAP = r"\s+(?:\S{1,%d}\s+)*" % (TOKEN_MIN_LENGTH - 1)


def _match_word_sequence(norm_quote: str, tokens: List[str], norm_haystack: str) -> Optional[MatchResult]:
    if len(tokens) < SEQUENCE_WORDS:
        return None

    for i in range(len(tokens) - SEQUENCE_WORDS + 1):
        window = tokens[i:i + SEQUENCE_WORDS]
        pattern = _SEQUENCE_GAP.join(re.escape(normalize_text(w)) for w in window)
        try:
            m = re.search(pattern, norm_haystack, flags=re.IGNORECASE)
        except re.error as e:
            if DEBUG_QUOTE_MATCH:
                print(f"  regex error for window {window!r}: {e}")
            continue
        if m:
            start = max(0, m.start() - SEQUENCE_PAD)
            end = min(len(norm_haystack), m.start() + len(norm_quote) + SEQUENCE_PAD)
            return MatchResult(start, end, SEQUENCE_CONFIDENCE, "word_sequence")
    return None


def _match_single_word(norm_quote: str, tokens: List[str], norm_haystack: str) -> Optional[MatchResult]:
    significant = sorted(
        (w for w in tokens if len(w) >= SIGNIFICANT_MIN_LENGTH),
        key=len,
        reverse=True,
    )
    for word in significant:
        idx = norm_haystack.find(normalize_text(word))
        if idx >= 0:
            start = max(0, idx - WORD_PAD)
            end = min(len(norm_haystack), idx + len(norm_quote) + WORD_PAD)
            return MatchResult(start, end, WORD_CONFIDENCE, "single_word")
    return None


_STRATEGIES = (_match_chunks, _match_word_sequence, _match_single_word)


def find_best_match(quote: str, haystack: str) -> Optional[MatchResult]:
    """
    Best-effort location of `quote` in `haystack`.
    Returned indices are RAW haystack offsets (cut-ready), 0 <= start < end <= len(haystack).
    Confidence is the fixed tier of the strategy that fired (0.9 / 0.85 / 0.7).
    """
    # short quotes match almost anywhere
    if not quote or len(quote) < MIN_QUOTE_LENGTH:
        return None

    norm_haystack, starts, ends = normalize_with_offsets(haystack)
    if not norm_haystack:
        return None
    norm_quote = normalize_text(quote)
    tokens = _quote_tokens(quote)

    for strategy in _STRATEGIES:
        found = strategy(norm_quote, tokens, norm_haystack)
        if found is not None:
            return found._replace(
                start_index=starts[found.start_index],
                end_index=ends[found.end_index - 1],
            )
    return None


# ============================================================
# ANNOTATION PLACER
# ============================================================
def _mask_regions(text: str, regions: Sequence[Tuple[int, int]]) -> str:
    parts: List[str] = []
    pos = 0
    for start, end in regions:
        parts.append(text[pos:start])
        parts.append(_MASK_CHAR * (end - start))
        pos = end
    parts.append(text[pos:])
    return "".join(parts)


def _clip_to_unmarked(start: int, end: int, regions: Sequence[Tuple[int, int]]) -> Optional[Tuple[int, int]]:
    """Longest part of [start, end) outside every marked region (first one on ties)."""
    gaps: List[Tuple[int, int]] = []
    pos = start
    for r_start, r_end in regions:
        if r_end <= pos:
            continue
        if r_start >= end:
            break
        if r_start > pos:
            gaps.append((pos, r_start))
        pos = max(pos, r_end)
    if pos < end:
        gaps.append((pos, end))
    if not gaps:
        return None
    return max(gaps, key=lambda g: g[1] - g[0])


def _wrap_span(
    text: str,
    regions: List[Tuple[int, int]],
    span: Tuple[int, int],
    annotation_id: str,
) -> Tuple[str, List[Tuple[int, int]]]:
    start, end = span
    opening = MARK_OPEN.format(id=annotation_id)
    marked = text[:start] + opening + text[start:end] + MARK_CLOSE + text[end:]

    # span sits in a gap, so every region is either fully before it or fully after
    growth = len(opening) + len(MARK_CLOSE)
    shifted = [(s, e) if e <= start else (s + growth, e + growth) for s, e in regions]
    shifted.append((start, end + growth))
    shifted.sort()
    return marked, shifted


def place_annotations(
    document_text: str,
    items: Iterable[FeedbackItem],
) -> Tuple[str, List[PlacementRecord]]:
    """
    Wrap every confidently located quote in highlight markup.

    - ids come from the input order (annotation-0, annotation-1, ...), never from matching
    - longest quotes are placed first; later quotes search the marked text with
      the marked regions masked out
    - the sort position comes from a second lookup on the untouched text
      (-1 if that lookup fails; the item still counts as matched)

    Returns (marked_text, records) with one record per item, in input order.
    """
    if not document_text:
        return "", []

    items = list(items)
    ids = [f"{ANNOTATION_ID_PREFIX}{i}" for i in range(len(items))]
    order = sorted(range(len(items)), key=lambda i: len(items[i].quote or ""), reverse=True)

    working = document_text
    regions: List[Tuple[int, int]] = []
    stable_starts: Dict[int, int] = {}

    for i in order:
        quote = items[i].quote or ""
        match = find_best_match(quote, _mask_regions(working, regions))
        if match is None or match.confidence < MIN_CONFIDENCE:
            if DEBUG_QUOTE_MATCH:
                print(f"  No match for: {quote[:30]!r}")
            continue

        span = _clip_to_unmarked(match.start_index, match.end_index, regions)
        if span is None:
            if DEBUG_QUOTE_MATCH:
                print(f"  Match inside marked text only: {quote[:30]!r}")
            continue

        working, regions = _wrap_span(working, regions, span, ids[i])

        pristine = find_best_match(quote, document_text)
        stable_starts[i] = pristine.start_index if pristine is not None else MISSING_START_INDEX
        if DEBUG_QUOTE_MATCH:
            print(f"  Found match for: {quote[:30]!r} via {match.strategy} ({match.confidence})")

    records = [
        PlacementRecord(
            id=ids[i],
            matched=i in stable_starts,
            start_index=stable_starts.get(i),
            quote=item.quote,
            comment=item.comment,
            guideline_reference=item.guideline_reference,
        )
        for i, item in enumerate(items)
    ]
    return working, records


# ============================================================
# ANNOTATION SORTER
# ============================================================
def order_annotations(records: Iterable[PlacementRecord]) -> List[Annotation]:
    annotations = [
        Annotation(
            id=r.id,
            matched=r.matched,
            sort_key=r.start_index if r.matched and r.start_index is not None else UNMATCHED_SORT_KEY,
            quote=r.quote,
            comment=r.comment,
            guideline_reference=r.guideline_reference,
        )
        for r in records
    ]
    # stable: ties (all unmatched, same start) keep input order
    return sorted(annotations, key=lambda a: a.sort_key)


def annotate_document(
    document_text: str,
    items: Iterable[FeedbackItem],
) -> Tuple[str, List[Annotation]]:
    """Full one-shot run: place, then order. Re-run from scratch whenever either input changes."""
    marked_text, records = place_annotations(document_text, items)
    annotations = order_annotations(records)
    if DEBUG_QUOTE_MATCH:
        matched = sum(1 for a in annotations if a.matched)
        print(f"Matched {matched} quotes, {len(annotations) - matched} unmatched")
    return marked_text, annotations


def annotation_to_dict(annotation: Annotation) -> Dict[str, object]:
    # JSON has no Infinity; unmatched -> start_index None
    start = annotation.sort_key if annotation.matched else None
    return {
        "id": annotation.id,
        "matched": annotation.matched,
        "start_index": int(start) if start is not None else None,
        "quote": annotation.quote,
        "comment": annotation.comment,
        "guideline_reference": annotation.guideline_reference,
    }
