# tourcore/apps/registration/transitions.py
"""
Máquina de estados de la inscripción.

Toda transición pasa por ``guard`` (tabla explícita) y se confirma con
``commit_transition``: un UPDATE condicionado a ``(pk, status, version)``.
Si otra petición cambió la fila entre la lectura y la escritura, el UPDATE no
toca filas y se lanza ConflictError.
"""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Optional

from django.db.models import F
from django.utils import timezone

from tourcore.apps.core.errors import ConflictError
from tourcore.apps.core.signals import RegistrationChanged, emit, registration_changed

from .models import Registration

logger = logging.getLogger(__name__)

LOOKING_FOR_GROUP = Registration.LOOKING_FOR_GROUP
REGISTERED = Registration.REGISTERED
PLAYING = Registration.PLAYING
FINISHED = Registration.FINISHED
WITHDRAWN = Registration.WITHDRAWN

STATUSES = frozenset(code for code, _ in Registration.STATUS_CHOICES)

# None = sin inscripción. Una fila retirada se descarta al volver a inscribirse,
# así que "withdrawn" no tiene salidas propias.
TRANSITIONS: Dict[Optional[str], FrozenSet[str]] = {
    None: frozenset({LOOKING_FOR_GROUP, REGISTERED}),
    LOOKING_FOR_GROUP: frozenset({REGISTERED, WITHDRAWN}),
    REGISTERED: frozenset({LOOKING_FOR_GROUP, PLAYING, WITHDRAWN}),
    PLAYING: frozenset({FINISHED, WITHDRAWN}),
    FINISHED: frozenset(),
    WITHDRAWN: frozenset(),
}

TERMINAL = frozenset(s for s, targets in TRANSITIONS.items() if s is not None and not targets)


def can_transition(current: Optional[str], target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def guard(current: Optional[str], target: str) -> None:
    if not can_transition(current, target):
        logger.warning("Transición rechazada: %s → %s", current or "sin inscripción", target)
        raise ConflictError(
            f"No se puede pasar de '{current or 'sin inscripción'}' a '{target}'."
        )


def notify(registration: Registration, previous: Optional[str]) -> None:
    emit(
        registration_changed,
        RegistrationChanged(
            competition_id=registration.competition_id,
            player_id=registration.player_id,
            status=registration.status,
            previous_status=previous,
            tee_time_id=registration.tee_time_id,
        ),
        sender=Registration,
    )


def commit_transition(registration: Registration, target: str, **changes) -> Registration:
    """
    Valida y persiste ``registration.status → target`` junto con ``changes``
    (campos del modelo). Actualiza la instancia en memoria y encola el evento.
    """
    previous = registration.status
    guard(previous, target)

    now = timezone.now()
    updated = Registration.objects.filter(
        pk=registration.pk,
        status=previous,
        version=registration.version,
    ).update(status=target, version=F("version") + 1, updated_at=now, **changes)
    if updated == 0:
        logger.warning(
            "Escritura obsoleta en inscripción %s (%s → %s)",
            registration.pk, previous, target,
        )
        raise ConflictError("La inscripción cambió mientras se procesaba; vuelve a intentarlo.")

    registration.status = target
    registration.version += 1
    registration.updated_at = now
    for name, value in changes.items():
        setattr(registration, name, value)

    logger.info(
        "Inscripción %s (jugador %s, competición %s): %s → %s",
        registration.pk, registration.player_id, registration.competition_id, previous, target,
    )
    notify(registration, previous)
    return registration
