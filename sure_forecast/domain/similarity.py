"""
Jaro and Jaro-Winkler string similarity.

Pure functions over their arguments; safe to call concurrently.
"""

from sure_forecast.config import settings
from sure_forecast.domain.exceptions import InvalidArgumentError


def jaro(a: str, b: str) -> float:
    """
    Jaro similarity in [0, 1].

    Characters match when equal and no further apart than
    ``max(len(a), len(b)) // 2 - 1``. Transpositions are half the number of
    matched characters that appear in a different order.
    """
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    len_a, len_b = len(a), len(b)
    window = max(max(len_a, len_b) // 2 - 1, 0)

    a_matched = [False] * len_a
    b_matched = [False] * len_b
    matches = 0

    for i, char in enumerate(a):
        low = max(0, i - window)
        high = min(i + window + 1, len_b)
        for j in range(low, high):
            if b_matched[j] or b[j] != char:
                continue
            a_matched[i] = True
            b_matched[j] = True
            matches += 1
            break

    if matches == 0:
        return 0.0

    out_of_order = 0
    k = 0
    for i in range(len_a):
        if not a_matched[i]:
            continue
        while not b_matched[k]:
            k += 1
        if a[i] != b[k]:
            out_of_order += 1
        k += 1
    transpositions = out_of_order // 2

    return (matches / len_a + matches / len_b + (matches - transpositions) / matches) / 3


def common_prefix_length(a: str, b: str, cap: int) -> int:
    length = 0
    for char_a, char_b in zip(a[:cap], b[:cap]):
        if char_a != char_b:
            break
        length += 1
    return length


def jaro_winkler(
    a: str,
    b: str,
    scaling: float | None = None,
    prefix_cap: int | None = None,
) -> float:
    """Jaro similarity boosted by the shared prefix: ``jaro + prefix * scaling * (1 - jaro)``"""
    scaling = settings.jaro_winkler_scaling if scaling is None else scaling
    prefix_cap = settings.jaro_winkler_prefix_cap if prefix_cap is None else prefix_cap

    if scaling < 0 or prefix_cap < 0 or scaling * prefix_cap > 1:
        raise InvalidArgumentError(
            f"Jaro-Winkler scaling ({scaling}) times prefix cap ({prefix_cap}) must be within [0, 1]"
        )

    score = jaro(a, b)
    if score == 0.0:
        return 0.0

    prefix = common_prefix_length(a, b, prefix_cap)
    return score + prefix * scaling * (1 - score)


def similarity(a: str, b: str, scaling: float | None = None, prefix_cap: int | None = None) -> float:
    """Case-insensitive Jaro-Winkler; 0.0 when either side is empty, or blank and unequal"""
    if not a or not b:
        return 0.0

    a, b = a.lower(), b.lower()
    if a == b:
        return 1.0
    if not a.strip() or not b.strip():
        return 0.0
    return jaro_winkler(a, b, scaling=scaling, prefix_cap=prefix_cap)
