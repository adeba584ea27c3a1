import pytest

from callingbird.domain.commerce.matching import SHOPIFY_MARGIN, WOO_MARGIN, pick_best_match
from callingbird.errors import AmbiguousProductMatchError, NoProductMatchError
from callingbird.utils.string_similarity import similarity_score


def title(product):
    return product["title"]


def test_similarity_bounds():
    assert similarity_score("Shampoo", "  shampoo ") == 1.0
    assert similarity_score("", "shampoo") == 0.0
    assert similarity_score("a", "b") == 0.0
    assert 0 < similarity_score("rode wijn", "rode wijnglas") < 1


def test_similarity_ignores_repeated_whitespace():
    assert similarity_score("rode   wijn glas", "rode wijn glas") == 1.0


def test_best_match_wins_when_clearly_ahead():
    products = [{"title": "Rode wijn"}, {"title": "Bier"}, {"title": "Witte wijn"}]

    assert pick_best_match("rode wijn", products, title, SHOPIFY_MARGIN) == {"title": "Rode wijn"}


def test_no_match_below_threshold():
    with pytest.raises(NoProductMatchError):
        pick_best_match("fiets", [{"title": "Rode wijn"}], title, SHOPIFY_MARGIN)


def test_no_match_for_empty_result():
    with pytest.raises(NoProductMatchError):
        pick_best_match("fiets", [], title, WOO_MARGIN)


def test_close_runner_up_is_ambiguous_for_shopify():
    products = [{"title": "Shampoo droog haar"}, {"title": "Shampoo vet haar"}]

    with pytest.raises(AmbiguousProductMatchError) as exc_info:
        pick_best_match("shampoo haar", products, title, SHOPIFY_MARGIN)

    assert set(exc_info.value.candidates) == {"Shampoo droog haar", "Shampoo vet haar"}


def test_woocommerce_only_rejects_exact_ties():
    products = [{"title": "Shampoo droog haar"}, {"title": "Shampoo vet haar"}]
    best = pick_best_match("shampoo droog", products, title, WOO_MARGIN)
    assert best["title"] == "Shampoo droog haar"

    with pytest.raises(AmbiguousProductMatchError):
        pick_best_match("shampoo", [{"title": "Shampoo"}, {"title": "shampoo"}], title, WOO_MARGIN)


def test_empty_query_is_rejected():
    with pytest.raises(ValueError):
        pick_best_match("  ", [{"title": "Shampoo"}], title, WOO_MARGIN)


def test_case_insensitive_exact_name_wins():
    products = [{"title": "Blue Pants"}, {"title": "Red Shirt"}]

    assert pick_best_match("red shirt", products, title, SHOPIFY_MARGIN)["title"] == "Red Shirt"
