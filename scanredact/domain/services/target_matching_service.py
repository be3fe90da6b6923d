"""
Target matching service.
Turns recognized OCR fragments into redaction targets.
"""
import logging
from typing import List, Sequence

from ..entities import RecognizedFragment, RedactionTarget
from ..exceptions import InvalidInputError

logger = logging.getLogger(__name__)

# Fragments at or below this OCR confidence (0-100) are never redacted.
MIN_CONFIDENCE = 60.0


def normalize_queries(queries: Sequence[str]) -> List[str]:
    """
    Lower-case the queries, rejecting an empty list or blank entries.

    Raises:
        InvalidInputError: If no query is given or one of them is blank
    """
    if not queries:
        raise InvalidInputError("At least one redaction query must be specified")
    normalized = []
    for query in queries:
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("Redaction queries cannot be empty")
        normalized.append(query.lower())
    return normalized


def find_redaction_targets(
    fragments_by_page: Sequence[Sequence[RecognizedFragment]],
    queries: Sequence[str]
) -> List[RedactionTarget]:
    """
    Select the fragments that contain any query and pass the confidence gate.

    Matching is a case-insensitive substring test, OR-ed across queries. A
    fragment yields at most one target no matter how many queries it
    matches. Output order is page order, then OCR reading order.

    Args:
        fragments_by_page: Recognized fragments, one sequence per page
        queries: Phrases to redact

    Returns:
        Redaction targets tagged with their 0-based page index
    """
    lowered_queries = normalize_queries(queries)
    targets = []

    for page_index, fragments in enumerate(fragments_by_page):
        page_matches = 0
        for fragment in fragments:
            if fragment.confidence <= MIN_CONFIDENCE:
                continue
            text = fragment.text.lower()
            if any(query in text for query in lowered_queries):
                targets.append(RedactionTarget(
                    word=fragment.text,
                    bbox=fragment.bbox,
                    page=page_index
                ))
                page_matches += 1
        if page_matches:
            logger.debug(
                "Page %d: %d fragment(s) matched", page_index + 1, page_matches,
                extra={"event": "match.page", "page": page_index, "matches": page_matches}
            )

    logger.info(
        "Found %d redaction target(s) across %d page(s)", len(targets), len(fragments_by_page),
        extra={"event": "match.done", "targets": len(targets), "pages": len(fragments_by_page)}
    )
    return targets


class TargetMatchingService:
    """Domain service wrapping the matching rules."""

    def find_targets(
        self,
        fragments_by_page: Sequence[Sequence[RecognizedFragment]],
        queries: Sequence[str]
    ) -> List[RedactionTarget]:
        """Select redaction targets. See ``find_redaction_targets``."""
        return find_redaction_targets(fragments_by_page, queries)

    def validate_queries(self, queries: Sequence[str]) -> None:
        """Raise ``InvalidInputError`` if the queries cannot be matched."""
        normalize_queries(queries)
