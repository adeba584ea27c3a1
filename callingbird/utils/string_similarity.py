import re
from collections import Counter


def _bigrams(value: str) -> list[str]:
    normalized = re.sub(r"\s+", " ", value.lower()).strip()
    return [normalized[i : i + 2] for i in range(len(normalized) - 1)]


def similarity_score(a: str, b: str) -> float:
    """
    Dice coefficient over character bigrams, between 0 and 1.

    Case and repeated whitespace are ignored; identical strings score 1 and
    an empty string scores 0 against anything.
    """
    a_norm = (a or "").strip()
    b_norm = (b or "").strip()
    if not a_norm or not b_norm:
        return 0.0
    if a_norm.lower() == b_norm.lower():
        return 1.0

    a_bigrams = _bigrams(a_norm)
    b_bigrams = _bigrams(b_norm)
    if not a_bigrams or not b_bigrams:
        return 0.0

    counts = Counter(a_bigrams)
    overlap = 0
    for gram in b_bigrams:
        if counts[gram]:
            overlap += 1
            counts[gram] -= 1

    return (2 * overlap) / (len(a_bigrams) + len(b_bigrams))
