"""Adapters from Hydra/JSON-LD payloads to plain records with an ``id``."""

import json
from typing import Any, Dict, List, Optional

from folioscope.utils.logging import get_logger

logger = get_logger(__name__)


def iri_to_id(iri: Optional[str]) -> Optional[str]:
    """
    Extract the identifier from a Hydra IRI.

    Converts "/api/resource/123" to "123".

    Args:
        iri: IRI string (may be None or empty)

    Returns:
        Last non-empty path segment, or None
    """
    if not iri or not isinstance(iri, str):
        return None
    segments = [segment for segment in iri.split("/") if segment]
    return segments[-1] if segments else None


def normalize(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ensure a record carries an ``id`` field.

    An explicit ``id`` wins; otherwise it is parsed from ``@id``. The input
    is not mutated.

    Args:
        item: Raw API item

    Returns:
        New dict with ``id`` as its first key
    """
    record_id = item.get("id")
    if record_id is None:
        record_id = iri_to_id(item.get("@id"))
    return {"id": record_id, **{k: v for k, v in item.items() if k != "id"}}


def process_enquiry_data(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize an enquiry record and decode its ``internalMemo``.

    The API stores the memo as a JSON string; an undecodable memo becomes an
    empty list.
    """
    normalized = normalize(item)
    memo = normalized.get("internalMemo")
    if isinstance(memo, str):
        try:
            normalized["internalMemo"] = json.loads(memo)
        except json.JSONDecodeError:
            logger.debug(f"Undecodable internalMemo on enquiry {normalized.get('id')}")
            normalized["internalMemo"] = []
    return normalized


def _member_list(data: Any) -> Optional[List[Any]]:
    if isinstance(data, dict) and isinstance(data.get("member"), list):
        return data["member"]
    return None


def _bare_list(data: Any) -> Optional[List[Any]]:
    if isinstance(data, list):
        return data
    return None


def extract_items_from_hydra_response(data: Any) -> List[Any]:
    """
    Extract the item array from a collection response.

    Tries ``data["member"]``, then ``data`` itself, then gives up with an
    empty list.
    """
    for step in (_member_list, _bare_list):
        items = step(data)
        if items is not None:
            return items
    return []


def _total_items(data: Any) -> Optional[int]:
    if not isinstance(data, dict):
        return None
    total = data.get("totalItems")
    # bool is an int subclass but never a count
    if isinstance(total, bool) or not isinstance(total, (int, float)):
        return None
    return total


def extract_total_from_hydra_response(data: Any, fallback_length: int) -> int:
    """
    Extract the collection total.

    Falls back to ``fallback_length`` when ``totalItems`` is absent. On a
    paginated response that fallback is the page size, not the collection
    size, so the total under-reports.

    Args:
        data: Decoded response body
        fallback_length: Value used when no numeric ``totalItems`` exists

    Returns:
        Total item count
    """
    total = _total_items(data)
    if total is None:
        logger.debug(f"No totalItems in response, using fallback {fallback_length}")
        return fallback_length
    return total
