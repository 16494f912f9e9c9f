# tourcore/apps/leaderboard/services/handicap.py
"""
Cálculo de handicap (WHS):
  Course Handicap = Handicap Index × Slope / 113 + (Course Rating − Par)
redondeado al entero más cercano (.5 hacia arriba). Sin course rating solo se
aplica el término de slope.
"""
from __future__ import annotations

import math
from typing import List, Optional, Sequence

from tourcore.apps.core.golf import STANDARD_SLOPE_RATING


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def course_handicap(
    handicap_index: Optional[float],
    slope_rating: int = STANDARD_SLOPE_RATING,
    course_rating: Optional[float] = None,
    par: Optional[int] = None,
) -> int:
    if handicap_index is None:
        return 0
    raw = handicap_index * slope_rating / STANDARD_SLOPE_RATING
    if course_rating is not None and par is not None:
        raw += course_rating - par
    return round_half_up(raw)


def distribute_strokes(strokes: int, stroke_index: Sequence[int], hole_count: int) -> List[int]:
    """
    Reparte los golpes de handicap por hoyo.
    Con índice de dificultad: primero los hoyos más difíciles (índice 1, 2, ...);
    handicap plus devuelve golpes en los más fáciles. Sin índice: parejo,
    el resto a los primeros hoyos.
    """
    if hole_count <= 0:
        return []

    valid_index = (
        stroke_index
        and len(stroke_index) == hole_count
        and sorted(stroke_index) == list(range(1, hole_count + 1))
    )
    if not valid_index:
        base, extra = divmod(strokes, hole_count)
        return [base + (1 if i < extra else 0) for i in range(hole_count)]

    index = list(stroke_index)
    per_hole = [0] * hole_count
    if strokes < 0:
        for i in range(min(-strokes, hole_count)):
            per_hole[index.index(hole_count - i)] -= 1
        return per_hole

    full, partial = divmod(strokes, hole_count)
    per_hole = [full] * hole_count
    for priority in range(1, partial + 1):
        per_hole[index.index(priority)] += 1
    return per_hole


def net_scores(scores: Sequence[int], strokes_per_hole: Sequence[int]) -> List[int]:
    """Neto por hoyo; hoyos sin jugar (0) o levantados (-1) quedan igual."""
    return [s - k if s > 0 else s for s, k in zip(scores, strokes_per_hole)]
