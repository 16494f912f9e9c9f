# tourcore/apps/scoring/services/ledger.py
"""
Escrituras sobre tarjetas.

Las que cambian resultados (golpes, total manual, DQ) bloquean primero la
competición y después la tarjeta: así no se cruzan con ``finalize``, que
toma el mismo bloqueo antes de congelar la clasificación.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from tourcore.apps.accounts.models import Player
from tourcore.apps.core.errors import (
    AlreadyFinalizedError,
    AuthorizationError,
    LockedError,
    NotFoundError,
    ValidationError,
)
from tourcore.apps.core.golf import MAX_SHOTS_PER_HOLE, PICKED_UP
from tourcore.apps.core.signals import (
    ManualScoreSet,
    ParticipantDisqualified,
    ParticipantLocked,
    ScoreUpdated,
    emit,
    manual_score_set,
    participant_disqualified,
    participant_locked,
    score_updated,
)
from tourcore.apps.events.context import load_competition

from ..models import Participant

logger = logging.getLogger(__name__)


def _participant_for_update(participant_id: int) -> Participant:
    try:
        return (
            Participant.objects.select_for_update(of=("self",))
            .select_related("competition__course")
            .get(pk=participant_id)
        )
    except Participant.DoesNotExist:
        raise NotFoundError(f"La tarjeta {participant_id} no existe.")


def _card_for_result_write(participant_id: int) -> Participant:
    """Bloquea competición y tarjeta (en ese orden) y rechaza competiciones finalizadas."""
    competition_id = (
        Participant.objects.filter(pk=participant_id).values_list("competition_id", flat=True).first()
    )
    if competition_id is None:
        raise NotFoundError(f"La tarjeta {participant_id} no existe.")

    competition = load_competition(competition_id, for_update=True)
    if competition.is_results_final:
        raise AlreadyFinalizedError()

    participant = _participant_for_update(participant_id)
    participant.competition = competition
    return participant


def _is_admin(user) -> bool:
    return bool(user is not None and user.is_authenticated and (user.is_staff or user.is_superuser))


def _authorize_actor(participant: Participant, actor) -> None:
    """Staff o un jugador del mismo grupo (tee time) que la tarjeta."""
    if _is_admin(actor):
        return
    player = Player.objects.for_user(actor)
    if player is None:
        raise AuthorizationError("Solo jugadores del grupo pueden anotar esta tarjeta.")
    same_group = Participant.objects.filter(tee_time_id=participant.tee_time_id, player=player).exists()
    if not same_group:
        raise AuthorizationError("Solo jugadores del grupo pueden anotar esta tarjeta.")


def _validate_shots(shots) -> int:
    if isinstance(shots, bool) or not isinstance(shots, int):
        raise ValidationError("Los golpes deben ser un entero.")
    if shots < 0 and shots != PICKED_UP:
        raise ValidationError("Los golpes deben ser ≥ 0 (0 borra el hoyo) o -1 si levantó la bola.")
    if shots > MAX_SHOTS_PER_HOLE:
        raise ValidationError(f"No se pueden anotar más de {MAX_SHOTS_PER_HOLE} golpes en un hoyo.")
    return shots


def update_score(participant_id: int, hole: int, shots: int, actor) -> Participant:
    shots = _validate_shots(shots)
    if isinstance(hole, bool) or not isinstance(hole, int):
        raise ValidationError("El hoyo debe ser un entero.")

    with transaction.atomic():
        participant = _card_for_result_write(participant_id)
        competition = participant.competition

        hole_count = competition.course.hole_count
        if not (1 <= hole <= hole_count):
            raise ValidationError(f"El hoyo debe estar entre 1 y {hole_count}.")

        _authorize_actor(participant, actor)
        if participant.is_locked:
            raise LockedError()

        scores = participant.score_list(hole_count)
        scores[hole - 1] = shots
        updated = Participant.objects.filter(pk=participant.pk, is_locked=False).update(
            scores=scores, updated_at=timezone.now()
        )
        if updated == 0:
            raise LockedError()
        participant.scores = scores

        logger.info("Tarjeta %s: hoyo %s = %s", participant.pk, hole, shots)
        emit(
            score_updated,
            ScoreUpdated(
                competition_id=participant.competition_id,
                participant_id=participant.pk,
                hole=hole,
                shots=shots,
            ),
            sender=Participant,
        )
    return participant


def set_manual_score(participant_id: int, total: Optional[int]) -> Participant:
    """
    Total de la vuelta cargado a mano (tarjeta en papel). Con valor, la tarjeta
    cuenta como completa y ese total reemplaza la suma de hoyos; ``None`` lo
    borra y vuelve al hoyo a hoyo. Solo staff (lo controla la vista/admin).
    """
    if total is not None and (isinstance(total, bool) or not isinstance(total, int)):
        raise ValidationError("El total debe ser un entero o null.")

    with transaction.atomic():
        participant = _card_for_result_write(participant_id)
        if total is not None:
            limit = participant.competition.course.hole_count * MAX_SHOTS_PER_HOLE
            if not (1 <= total <= limit):
                raise ValidationError(f"El total debe estar entre 1 y {limit}.")
        if participant.is_locked:
            raise LockedError()

        updated = Participant.objects.filter(pk=participant.pk, is_locked=False).update(
            manual_score_total=total, updated_at=timezone.now()
        )
        if updated == 0:
            raise LockedError()
        participant.manual_score_total = total

        logger.info("Tarjeta %s: total manual = %s", participant.pk, total)
        emit(
            manual_score_set,
            ManualScoreSet(
                competition_id=participant.competition_id,
                participant_id=participant.pk,
                total=total,
            ),
            sender=Participant,
        )
    return participant


def _set_lock(participant_id: int, locked: bool) -> Participant:
    with transaction.atomic():
        participant = _participant_for_update(participant_id)
        if participant.is_locked == locked:
            return participant

        participant.is_locked = locked
        participant.locked_at = timezone.now() if locked else None
        participant.save(update_fields=["is_locked", "locked_at", "updated_at"])

        logger.info("Tarjeta %s %s", participant.pk, "bloqueada" if locked else "desbloqueada")
        emit(
            participant_locked,
            ParticipantLocked(
                competition_id=participant.competition_id,
                participant_id=participant.pk,
                locked=locked,
            ),
            sender=Participant,
        )
    return participant


def lock(participant_id: int) -> Participant:
    return _set_lock(participant_id, True)


def unlock(participant_id: int) -> Participant:
    return _set_lock(participant_id, False)


def set_disqualified(participant_id: int, flag: bool) -> Participant:
    if not isinstance(flag, bool):
        raise ValidationError("'is_dq' debe ser booleano.")

    with transaction.atomic():
        participant = _card_for_result_write(participant_id)
        if participant.is_dq == flag:
            return participant

        participant.is_dq = flag
        participant.save(update_fields=["is_dq", "updated_at"])

        logger.info("Tarjeta %s: DQ=%s", participant.pk, flag)
        emit(
            participant_disqualified,
            ParticipantDisqualified(
                competition_id=participant.competition_id,
                participant_id=participant.pk,
                is_dq=flag,
            ),
            sender=Participant,
        )
    return participant
