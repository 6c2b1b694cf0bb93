"""Multi-field ordering of documents.

A sort specification arrives from the client in one of three shapes:

    ["lastName", "firstName"]                   # ascending by default
    [["created", -1], ["title"]]                # explicit pairs
    {"created": -1, "title": 1}                 # mapping, iteration order

normalize_order_by() turns all of them into a list of (field, direction)
pairs, and order_by() applies that list with sequential tie-breaking.
"""

from collections.abc import Mapping
from functools import cmp_to_key
from typing import Any

from docforge.errors import InvalidSortSpecificationError
from docforge.paths import get_path

SortPair = tuple[str, int]

INVALID_ORDER_BY_MESSAGE = "orderby param must be array or object"


def _normalize_pair(ordering: Any) -> Any:
    if isinstance(ordering, str):
        return (ordering, 1)
    if isinstance(ordering, (list, tuple)):
        if len(ordering) == 1:
            return (ordering[0], 1)
        if len(ordering) == 2:
            return (ordering[0], ordering[1])
    return ordering


def normalize_order_by(order_by_spec: Any) -> list[SortPair]:
    """Normalize a sort specification into ordered (field, direction) pairs.

    Keys are never dropped or reordered; only missing directions are
    defaulted to ascending (1).

    Raises:
        InvalidSortSpecificationError: If the spec is not a list, tuple or mapping
    """
    if isinstance(order_by_spec, (list, tuple)):
        return [_normalize_pair(ordering) for ordering in order_by_spec]
    if isinstance(order_by_spec, Mapping):
        return list(order_by_spec.items())
    raise InvalidSortSpecificationError(400, INVALID_ORDER_BY_MESSAGE)


def _greater(a: Any, b: Any) -> bool:
    # Unorderable values (None, mixed types) are neither greater nor lesser
    try:
        return bool(a > b)
    except TypeError:
        return False


def compare_documents(a: Any, b: Any, order: list[SortPair]) -> int:
    """Compare two documents across the ordering pairs.

    The first pair whose values differ decides the result; its direction
    is returned as-is (or negated) so the magnitude acts as a multiplier.
    """
    for key, direction in order:
        a_value = get_path(a, key)
        b_value = get_path(b, key)
        if _greater(a_value, b_value):
            return direction
        if _greater(b_value, a_value):
            return -direction
    return 0


def order_by(documents: list[Any], order: list[SortPair]) -> list[Any]:
    """Sort documents in place by normalized ordering pairs.

    Documents equal on every pair keep their input order (list.sort is
    stable), though callers should not depend on it.

    Returns:
        The same list, now ordered
    """
    documents.sort(key=cmp_to_key(lambda a, b: compare_documents(a, b, order)))
    return documents
