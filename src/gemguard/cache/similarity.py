"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Edit-distance helpers for approximate prompt matching.
"""

from __future__ import annotations

import Levenshtein


def levenshtein_distance(left: str, right: str) -> int:
    return Levenshtein.distance(left, right)


def similarity(left: str, right: str) -> float:
    """
    Normalized similarity in [0, 1]:
    `(len(longer) - distance) / len(longer)`.
    """
    if left == right:
        return 1.0
    longer = max(len(left), len(right))
    if longer == 0:
        return 1.0
    return (longer - Levenshtein.distance(left, right)) / longer


def is_similar(left: str, right: str, threshold: float) -> bool:
    """
    True when `similarity(left, right)` is strictly above `threshold`.

    Distance is at least the length difference, so similarity can never
    exceed `len(shorter) / len(longer)`; such pairs are rejected without
    computing the distance.
    """
    longer = max(len(left), len(right))
    if longer and min(len(left), len(right)) / longer <= threshold:
        return False
    return similarity(left, right) > threshold
