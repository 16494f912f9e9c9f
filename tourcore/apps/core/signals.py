# tourcore/apps/core/signals.py
"""
Eventos de dominio para capas externas de lectura/caché.

Cada señal se envía con ``event=<dataclass>`` y solo después del commit de la
transacción que produjo el cambio, de modo que un suscriptor nunca observa un
estado que luego se revierte.

    from tourcore.apps.core.signals import score_updated

    @receiver(score_updated)
    def invalidate(sender, event, **kwargs):
        cache.delete(f"leaderboard:{event.competition_id}")
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from django.db import transaction
from django.dispatch import Signal

registration_changed = Signal()
score_updated = Signal()
manual_score_set = Signal()
participant_locked = Signal()
participant_disqualified = Signal()
competition_finalized = Signal()
competition_reopened = Signal()


@dataclass(frozen=True)
class RegistrationChanged:
    competition_id: int
    player_id: int
    status: str
    previous_status: Optional[str]
    tee_time_id: Optional[int]


@dataclass(frozen=True)
class ScoreUpdated:
    competition_id: int
    participant_id: int
    hole: int
    shots: int


@dataclass(frozen=True)
class ManualScoreSet:
    competition_id: int
    participant_id: int
    total: Optional[int]


@dataclass(frozen=True)
class ParticipantLocked:
    competition_id: int
    participant_id: int
    locked: bool


@dataclass(frozen=True)
class ParticipantDisqualified:
    competition_id: int
    participant_id: int
    is_dq: bool


@dataclass(frozen=True)
class CompetitionFinalized:
    competition_id: int
    tour_id: Optional[int]
    results_count: int


@dataclass(frozen=True)
class CompetitionReopened:
    competition_id: int
    tour_id: Optional[int]


def emit(signal: Signal, event, sender=None) -> None:
    """Encola el envío para después del commit (inmediato si no hay transacción)."""
    transaction.on_commit(lambda: signal.send(sender=sender or type(event), event=event))
