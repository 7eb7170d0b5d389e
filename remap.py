from typing import Iterable, List


def remap(raw: int, goal: int, modulus: int) -> int:
    """Distance from ``raw`` forward to ``goal`` around a cycle of ``modulus``."""
    return goal - raw if raw <= goal else goal + modulus - raw


def remap_grid(grid: Iterable[int], goal: int, modulus: int) -> List[int]:
    return [remap(v, goal, modulus) for v in grid]


__all__ = ["remap", "remap_grid"]
