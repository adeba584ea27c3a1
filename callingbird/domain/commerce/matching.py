"""Pick the product a caller means from a store's search results"""

from typing import Callable, Sequence, TypeVar

from ...errors import AmbiguousProductMatchError, NoProductMatchError
from ...utils.string_similarity import similarity_score

T = TypeVar("T")

MIN_SCORE = 0.2
# Shopify searches by title prefix, so near-identical titles are common
SHOPIFY_MARGIN = 0.15
# WooCommerce only rejects exact ties
WOO_MARGIN = 0.0


def pick_best_match(query: str, items: Sequence[T], get_name: Callable[[T], str], margin: float) -> T:
    """
    Return the item whose name is most similar to ``query``.

    Raises:
        ValueError: empty query
        NoProductMatchError: no item scores at least MIN_SCORE
        AmbiguousProductMatchError: the runner-up scores within ``margin`` of the best
    """
    normalized_query = (query or "").strip()
    if not normalized_query:
        raise ValueError("Product name is required")

    scored = sorted(
        ((similarity_score(normalized_query, get_name(item) or ""), item) for item in items),
        key=lambda pair: pair[0],
        reverse=True,
    )
    if not scored or scored[0][0] < MIN_SCORE:
        raise NoProductMatchError(normalized_query)

    best_score, best_item = scored[0]
    if len(scored) > 1 and scored[1][0] >= best_score - margin:
        candidates = [get_name(item) for score, item in scored if score >= best_score - margin]
        raise AmbiguousProductMatchError(normalized_query, candidates)
    return best_item
