"""
Statistical helpers used by the governance metrics.
"""
import math
from typing import Dict, Hashable, Iterable, List, Tuple


def round_half_up(value: float, digits: int = 2) -> float:
    """Round like a dashboard would: halves go up, never to even."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def ratio_percent(ratio: float, digits: int = 2) -> float:
    """Express a 0..1 ratio as a percentage rounded half up to ``digits``."""
    # Scale in one step so exact halves such as 0.14375 stay exact
    return math.floor(ratio * 10 ** (digits + 2) + 0.5) / 10 ** digits


def percentage(part: float, total: float, digits: int = 2) -> float:
    """Share of ``part`` in ``total`` as a percentage, 0 when total is empty."""
    if not total or total <= 0:
        return 0.0
    return ratio_percent(part / total, digits)


def average(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def evenness_score(counts: Iterable[int]) -> float:
    """
    Shannon evenness (Pielou's J) of a set of category counts, in [0, 1].

    Zero counts are ignored. A single category is perfectly even (1) and no
    categories at all score 0.
    """
    filtered = [c for c in counts if c > 0]
    n = len(filtered)
    if n <= 1:
        return 1.0 if n == 1 else 0.0

    total = sum(filtered)
    entropy = 0.0
    for count in filtered:
        p = count / total
        entropy -= p * math.log(p)

    max_entropy = math.log(n)
    return entropy / max_entropy if max_entropy > 0 else 0.0


class Histogram:
    """Insertion-ordered counter whose ranking keeps ties in first-seen order."""

    def __init__(self, keys: Iterable[Hashable] = ()):
        self._counts: Dict[Hashable, int] = {}
        for key in keys:
            self.add(key)

    def add(self, key: Hashable, amount: int = 1) -> None:
        self._counts[key] = self._counts.get(key, 0) + amount

    def __len__(self) -> int:
        return len(self._counts)

    def __getitem__(self, key: Hashable) -> int:
        return self._counts.get(key, 0)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def counts(self) -> List[int]:
        return list(self._counts.values())

    def most_common(self) -> List[Tuple[Hashable, int]]:
        # sorted() is stable, so equal counts stay in insertion order
        return sorted(self._counts.items(), key=lambda entry: entry[1], reverse=True)
