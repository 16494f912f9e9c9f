# tourcore/apps/scoring/services/cards.py
"""Lectura de tarjetas: totales, hoyos jugados y resultado respecto al par."""
from __future__ import annotations

from typing import Sequence

from tourcore.apps.core.golf import PICKED_UP


def gross_total(scores: Sequence[int]) -> int:
    return sum(s for s in scores if s > 0)


def holes_played(scores: Sequence[int]) -> int:
    return sum(1 for s in scores if s > 0)


def is_complete(scores: Sequence[int]) -> bool:
    return bool(scores) and all(s > 0 for s in scores)


def has_picked_up(scores: Sequence[int]) -> bool:
    return any(s == PICKED_UP for s in scores)


def score_to_par(scores: Sequence[int], pars: Sequence[int]) -> int:
    """Diferencia contra el par considerando solo los hoyos jugados."""
    return sum(s - int(p) for s, p in zip(scores, pars) if s > 0)
