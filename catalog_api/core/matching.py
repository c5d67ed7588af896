# catalog_api/core/matching.py

"""
Alias matcher.

Decides which catalog item an imported supplier line refers to, using the
alias snapshot of the whole catalog. Three phases, in order of trust:

1. SUPPLIER_CODE  - normalized supplier code equals an alias
2. ALIAS_TOKEN    - an alias appears as whole words in the description
3. ALIAS_CONTAINS - an alias appears anywhere in the description

Phases 2 and 3 only resolve when every hit points at the same item.
Anything else is left unmatched (reason NONE) for a person to decide.
"""

from typing import Any, Iterable, Optional, Sequence, Union

from catalog_api.core.normalizers import normalize_text
from catalog_api.models import AliasRecord, MatchResult, NormalizedAlias

# Shorter aliases/tokens ("tv", "kit") collide across unrelated descriptions
MIN_ALIAS_LENGTH = 4
SUGGESTED_ALIAS_MAX_LENGTH = 80

AliasInput = Union[AliasRecord, dict]
Span = tuple[int, int]


def _as_record(alias: AliasInput) -> AliasRecord:
    if isinstance(alias, AliasRecord):
        return alias
    return AliasRecord.model_validate(alias)


def build_alias_index(aliases: Iterable[AliasInput]) -> list[NormalizedAlias]:
    """
    Normalize an alias snapshot for matching.

    Records whose normalized text is shorter than MIN_ALIAS_LENGTH are
    dropped unless they are supplier codes. Input order is preserved.
    """
    index = []
    for alias in aliases:
        record = _as_record(alias)
        normalized = normalize_text(record.alias)
        if record.is_supplier_code or len(normalized) >= MIN_ALIAS_LENGTH:
            index.append(NormalizedAlias(**record.model_dump(), normalized_alias=normalized))
    return index


def _is_description_alias(alias: NormalizedAlias) -> bool:
    return not alias.is_supplier_code and len(alias.normalized_alias) >= MIN_ALIAS_LENGTH


def _token_spans(words: list[str], tokens: list[str]) -> list[Span]:
    """Positions where `words` occurs as a contiguous run of whole tokens."""
    n = len(words)
    return [
        (start, start + n)
        for start in range(len(tokens) - n + 1)
        if tokens[start:start + n] == words
    ]


def _single_item(matches: Sequence[NormalizedAlias]) -> Optional[str]:
    """The item id when all matches agree on one item, else None."""
    item_ids = {m.item_id for m in matches}
    if len(item_ids) == 1:
        return matches[0].item_id
    return None


def _match_supplier_code(code: str, index: list[NormalizedAlias]) -> Optional[str]:
    # Any alias whose text equals the code counts, flagged as a code or not
    for alias in index:
        if alias.normalized_alias and alias.normalized_alias == code:
            return alias.item_id
    return None


def _match_tokens(description: str, index: list[NormalizedAlias]) -> list[NormalizedAlias]:
    """
    Aliases found as whole words in the description.

    One-word aliases must equal a description token of at least
    MIN_ALIAS_LENGTH chars. Multi-word aliases must appear as a run of
    tokens. A hit whose span sits strictly inside another hit's span is
    discarded, so "valvula esferica" beats "valvula" on the same words.
    """
    tokens = description.split(" ") if description else []
    long_tokens = {t for t in tokens if len(t) >= MIN_ALIAS_LENGTH}

    hits: list[tuple[NormalizedAlias, list[Span]]] = []
    for alias in index:
        if not _is_description_alias(alias):
            continue
        words = alias.normalized_alias.split(" ")
        if len(words) == 1 and words[0] not in long_tokens:
            continue
        spans = _token_spans(words, tokens)
        if spans:
            hits.append((alias, spans))

    all_spans = {span for _, spans in hits for span in spans}

    def covered(span: Span) -> bool:
        return any(
            other != span and other[0] <= span[0] and span[1] <= other[1]
            for other in all_spans
        )

    return [
        alias for alias, spans in hits
        if any(not covered(span) for span in spans)
    ]


def _match_contains(description: str, index: list[NormalizedAlias]) -> list[NormalizedAlias]:
    return [
        alias for alias in index
        if _is_description_alias(alias) and alias.normalized_alias in description
    ]


def match_with_index(
    supplier_code: Optional[str],
    raw_description: Any,
    index: list[NormalizedAlias],
) -> MatchResult:
    """
    Match one line against an already built alias index.

    Same result as match_import_line; use it to match many lines against
    one snapshot without renormalizing the aliases each time.
    """
    code = normalize_text(supplier_code)
    description = normalize_text(raw_description)

    if code:
        item_id = _match_supplier_code(code, index)
        if item_id is not None:
            return MatchResult(item_id=item_id, reason="SUPPLIER_CODE")

    item_id = _single_item(_match_tokens(description, index))
    if item_id is not None:
        return MatchResult(item_id=item_id, reason="ALIAS_TOKEN")

    item_id = _single_item(_match_contains(description, index))
    if item_id is not None:
        return MatchResult(item_id=item_id, reason="ALIAS_CONTAINS")

    return MatchResult.unmatched()


def match_import_line(
    *,
    supplier_code: Optional[str] = None,
    raw_description: Any,
    aliases: Iterable[AliasInput],
) -> MatchResult:
    """
    Decide which catalog item an imported line refers to.

    Args:
        supplier_code: Supplier's own code for the line, may be empty
        raw_description: Free-text description as typed by the supplier
        aliases: Full alias snapshot of the catalog (records or row dicts)

    Returns:
        MatchResult; reason NONE when there is no unambiguous answer.
        Never raises for unmatched or ambiguous lines.
    """
    return match_with_index(supplier_code, raw_description, build_alias_index(aliases))


def build_suggested_alias(raw_description: Any) -> str:
    """Normalized description, cut to 80 chars, for a person to review."""
    return normalize_text(raw_description)[:SUGGESTED_ALIAS_MAX_LENGTH].rstrip()
