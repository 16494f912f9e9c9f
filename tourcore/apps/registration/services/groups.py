# tourcore/apps/registration/services/groups.py
"""
Inscripción y formación de grupos.

Cada operación que muta corre en un único ``transaction.atomic()``, bloquea
las filas que lee (``select_for_update``) y confirma el cambio de estado con
``transitions.commit_transition``. Los eventos se envían tras el commit.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from tourcore.apps.accounts.models import Player
from tourcore.apps.core.errors import (
    AlreadyFinalizedError,
    AuthorizationError,
    ConflictError,
    LockedError,
    NotFoundError,
    ValidationError,
)
from tourcore.apps.core.golf import max_group_size
from tourcore.apps.events.context import CompetitionContext, load_competition, resolve_competition
from tourcore.apps.events.models import Competition, TourEnrollment

from ..models import Registration, TeeTime
from ..transitions import (
    FINISHED,
    LOOKING_FOR_GROUP,
    PLAYING,
    REGISTERED,
    STATUSES,
    WITHDRAWN,
    commit_transition,
    guard,
    notify,
)

logger = logging.getLogger(__name__)

MODE_SOLO = "solo"
MODE_LOOKING_FOR_GROUP = "looking_for_group"
MODE_CREATE_GROUP = "create_group"
REGISTER_MODES = (MODE_SOLO, MODE_LOOKING_FOR_GROUP, MODE_CREATE_GROUP)

# Estados que cuentan como "ronda activa" para el jugador
ACTIVE_ROUND_STATUSES = (LOOKING_FOR_GROUP, REGISTERED, PLAYING, FINISHED)

GROUP_STATUS_ORDER = {"on_course": 0, "registered": 1, "finished": 2}


# ------------------------------
# Utilidades internas
# ------------------------------
def _participant_model():
    from tourcore.apps.scoring.models import Participant  # import local: scoring depende de registration
    return Participant


def _get_player(player_id: int) -> Player:
    try:
        return Player.objects.get(pk=player_id)
    except Player.DoesNotExist:
        raise NotFoundError(f"El jugador {player_id} no existe.")


def _competition_for_write(competition_id: int) -> Competition:
    competition = load_competition(competition_id, for_update=True)
    if competition.is_results_final:
        raise AlreadyFinalizedError()
    return competition


def _registration_for_update(competition: Competition, player_id: int) -> Optional[Registration]:
    return (
        Registration.objects.select_for_update()
        .filter(competition=competition, player_id=player_id)
        .first()
    )


def _require_registration(competition: Competition, player_id: int) -> Registration:
    reg = _registration_for_update(competition, player_id)
    if reg is None:
        raise NotFoundError("No estás inscrito en esta competición.")
    return reg


def _enrollment_for(ctx: CompetitionContext, player: Player) -> Optional[TourEnrollment]:
    """En competiciones de tour el jugador debe tener una inscripción activa al tour."""
    if ctx.kind != "tour":
        return None
    enrollment = (
        TourEnrollment.objects.filter(tour=ctx.tour, player=player, status="active")
        .select_related("category")
        .first()
    )
    if enrollment is None:
        raise ValidationError(f"{player.name} no está inscrito en el tour {ctx.tour.name}.")
    return enrollment


def _handicap_snapshot(reg: Registration) -> Optional[float]:
    if reg.enrollment_id and reg.enrollment.playing_handicap is not None:
        return reg.enrollment.playing_handicap
    return reg.player.handicap_index


def _create_participant(reg: Registration, tee_time: TeeTime):
    Participant = _participant_model()
    last = Participant.objects.filter(tee_time=tee_time).aggregate(m=Max("tee_order"))["m"] or 0
    try:
        with transaction.atomic():
            return Participant.objects.create(
                competition_id=reg.competition_id,
                tee_time=tee_time,
                player_id=reg.player_id,
                registration=reg,
                tee_order=last + 1,
                handicap_index=_handicap_snapshot(reg),
            )
    except IntegrityError:
        raise ConflictError(f"{reg.player} ya tiene una tarjeta en esta competición.")


def _release_participant(reg: Registration) -> None:
    """
    Suelta la tarjeta del jugador al dejar el grupo. Una tarjeta bloqueada no
    se toca (LockedError); una DQ se conserva sin inscripción asociada.
    """
    Participant = _participant_model()
    card = (
        Participant.objects.select_for_update()
        .filter(competition_id=reg.competition_id, player_id=reg.player_id)
        .first()
    )
    if card is None:
        return
    if card.is_locked:
        raise LockedError("La tarjeta está bloqueada; un administrador debe desbloquearla antes.")
    if card.is_dq:
        Participant.objects.filter(pk=card.pk).update(registration=None)
        return
    card.delete()


def _discard_withdrawn(reg: Optional[Registration]) -> Optional[Registration]:
    """Una inscripción retirada no cuenta: se elimina para poder volver a inscribirse."""
    if reg is not None and reg.status == WITHDRAWN:
        reg.delete()
        return None
    return reg


def _settle_group(tee_time: Optional[TeeTime], leaver_id: int, was_owner: bool) -> None:
    """Libera el tee time vacío o traspasa la propiedad al miembro más antiguo."""
    if tee_time is None:
        return
    remaining = list(
        Registration.objects.select_for_update()
        .filter(tee_time=tee_time)
        .exclude(player_id=leaver_id)
        .order_by("registered_at", "id")
    )
    if not remaining:
        if tee_time.participants.exists():
            # Queda una tarjeta DQ colgando del grupo
            return
        logger.info("Tee time %s liberado (sin jugadores)", tee_time.pk)
        tee_time.delete()
        return
    if was_owner:
        new_owner = remaining[0].player_id
        Registration.objects.filter(tee_time=tee_time).update(group_created_by_id=new_owner)
        logger.info("Grupo %s: propiedad traspasada al jugador %s", tee_time.pk, new_owner)


def _leave_current_group(reg: Registration, target: str, **changes) -> Registration:
    tee_time = reg.tee_time
    was_owner = reg.is_group_creator
    _release_participant(reg)
    commit_transition(reg, target, tee_time=None, group_created_by=None, **changes)
    _settle_group(tee_time, reg.player_id, was_owner)
    return reg


# ------------------------------
# Operaciones
# ------------------------------
def register(competition_id: int, player_id: int, mode: str) -> Registration:
    if mode not in REGISTER_MODES:
        raise ValidationError(f"Modo inválido '{mode}'. Usa: {', '.join(REGISTER_MODES)}.")

    target = LOOKING_FOR_GROUP if mode == MODE_LOOKING_FOR_GROUP else REGISTERED

    with transaction.atomic():
        competition = _competition_for_write(competition_id)
        ctx = resolve_competition(competition)
        player = _get_player(player_id)

        if not competition.is_open_now:
            raise ValidationError("La competición está fuera de su ventana de juego libre.")
        enrollment = _enrollment_for(ctx, player)

        existing = _discard_withdrawn(_registration_for_update(competition, player.pk))
        if existing is not None:
            raise ConflictError(f"Ya existe una inscripción ({existing.status}) para este jugador.")
        guard(None, target)

        tee_time = TeeTime.objects.create(competition=competition) if target == REGISTERED else None
        try:
            with transaction.atomic():
                reg = Registration.objects.create(
                    competition=competition,
                    player=player,
                    status=target,
                    tee_time=tee_time,
                    group_created_by=player if tee_time else None,
                    enrollment=enrollment,
                )
        except IntegrityError:
            raise ConflictError("Ya existe una inscripción para este jugador.")

        if tee_time is not None:
            _create_participant(reg, tee_time)

        logger.info(
            "Jugador %s inscrito en competición %s (modo %s)", player.pk, competition.pk, mode,
        )
        notify(reg, None)
    return reg


def add_to_group(competition_id: int, requester_id: int, player_ids: Iterable[int]) -> List[Registration]:
    """Suma jugadores al grupo del solicitante. Todo o nada."""
    ids: List[int] = []
    for pid in player_ids:
        if pid not in ids:
            ids.append(pid)
    if not ids:
        raise ValidationError("Indica al menos un jugador.")

    with transaction.atomic():
        competition = _competition_for_write(competition_id)
        ctx = resolve_competition(competition)

        owner = _registration_for_update(competition, requester_id)
        if owner is None or owner.status != REGISTERED or owner.tee_time_id is None:
            raise ConflictError("Debes estar inscrito con un grupo para sumar jugadores.")
        if owner.group_created_by_id != requester_id:
            raise AuthorizationError("Solo quien creó el grupo puede sumar jugadores.")

        tee_time = TeeTime.objects.select_for_update().get(pk=owner.tee_time_id)
        members = list(Registration.objects.select_for_update().filter(tee_time=tee_time))
        member_ids = {m.player_id for m in members}

        limit = max_group_size()
        if len(member_ids) + len(ids) > limit:
            raise ConflictError(f"El grupo no puede superar {limit} jugadores.")

        added: List[Registration] = []
        for pid in ids:
            player = _get_player(pid)
            if pid in member_ids:
                raise ConflictError(f"{player.name} ya está en tu grupo.")

            reg = _discard_withdrawn(_registration_for_update(competition, pid))
            if reg is None:
                enrollment = _enrollment_for(ctx, player)
                guard(None, REGISTERED)
                try:
                    with transaction.atomic():
                        reg = Registration.objects.create(
                            competition=competition,
                            player=player,
                            status=REGISTERED,
                            tee_time=tee_time,
                            group_created_by_id=requester_id,
                            enrollment=enrollment,
                        )
                except IntegrityError:
                    raise ConflictError(f"{player.name} ya tiene una inscripción.")
                notify(reg, None)
            elif reg.status == LOOKING_FOR_GROUP:
                commit_transition(reg, REGISTERED, tee_time=tee_time, group_created_by_id=requester_id)
            elif reg.status == REGISTERED:
                raise ConflictError(f"{player.name} ya está en otro grupo.")
            else:
                raise ConflictError(f"{player.name} no está disponible ({reg.status}).")

            _create_participant(reg, tee_time)
            member_ids.add(pid)
            added.append(reg)

        logger.info(
            "Grupo %s (competición %s): %s sumó %s", tee_time.pk, competition.pk, requester_id, ids,
        )
    return added


def remove_from_group(competition_id: int, requester_id: int, player_id: int) -> Registration:
    if requester_id == player_id:
        raise ValidationError("Para salir de tu propio grupo usa 'leave'.")

    with transaction.atomic():
        competition = _competition_for_write(competition_id)

        owner = _registration_for_update(competition, requester_id)
        if owner is None or owner.tee_time_id is None:
            raise ConflictError("No tienes un grupo en esta competición.")
        if owner.group_created_by_id != requester_id:
            raise AuthorizationError("Solo quien creó el grupo puede quitar jugadores.")

        target = _registration_for_update(competition, player_id)
        if target is None or target.tee_time_id != owner.tee_time_id:
            raise ConflictError("Ese jugador no está en tu grupo.")
        if target.status != REGISTERED:
            raise ConflictError(f"No se puede quitar a un jugador en estado '{target.status}'.")

        _leave_current_group(target, LOOKING_FOR_GROUP)
    return target


def leave_group(competition_id: int, player_id: int) -> Registration:
    with transaction.atomic():
        competition = _competition_for_write(competition_id)
        reg = _require_registration(competition, player_id)
        guard(reg.status, LOOKING_FOR_GROUP)
        _leave_current_group(reg, LOOKING_FOR_GROUP)
    return reg


def start_playing(competition_id: int, player_id: int) -> Registration:
    with transaction.atomic():
        competition = _competition_for_write(competition_id)
        reg = _require_registration(competition, player_id)
        if reg.status == PLAYING:
            return reg
        guard(reg.status, PLAYING)
        commit_transition(reg, PLAYING, started_at=timezone.now())
    return reg


def finish_playing(competition_id: int, player_id: int) -> Registration:
    with transaction.atomic():
        competition = _competition_for_write(competition_id)
        reg = _require_registration(competition, player_id)
        if reg.status == FINISHED:
            return reg
        commit_transition(reg, FINISHED, finished_at=timezone.now())
    return reg


def withdraw(competition_id: int, player_id: int) -> Registration:
    with transaction.atomic():
        competition = _competition_for_write(competition_id)
        reg = _require_registration(competition, player_id)
        guard(reg.status, WITHDRAWN)
        _leave_current_group(reg, WITHDRAWN)
    return reg


def set_status(competition_id: int, player_id: int, status: str) -> Registration:
    if status not in STATUSES:
        raise ValidationError(f"Estado desconocido '{status}'.")
    handlers = {
        PLAYING: start_playing,
        FINISHED: finish_playing,
        WITHDRAWN: withdraw,
        LOOKING_FOR_GROUP: leave_group,
    }
    handler = handlers.get(status)
    if handler is None:
        raise ConflictError("Para quedar inscrito en un grupo usa register o group/add.")
    return handler(competition_id, player_id)


# ------------------------------
# Lecturas
# ------------------------------
def _availability(reg: Optional[Registration]) -> str:
    if reg is None:
        return "available"
    return {
        LOOKING_FOR_GROUP: "looking_for_group",
        REGISTERED: "in_group",
        PLAYING: "playing",
        FINISHED: "finished",
    }[reg.status]


def list_available_players(competition_id: int) -> List[Dict[str, Any]]:
    ctx = resolve_competition(competition_id)
    competition = ctx.competition

    regs = {
        r.player_id: r
        for r in Registration.objects.filter(competition=competition)
        .exclude(status=WITHDRAWN)
        .select_related("player")
    }
    if ctx.kind == "tour":
        candidates = [
            e.player
            for e in TourEnrollment.objects.filter(tour=ctx.tour, status="active").select_related("player")
        ]
    else:
        candidates = [r.player for r in regs.values()]

    rows: List[Dict[str, Any]] = []
    for player in candidates:
        # Un retirado de una fecha de tour vuelve a figurar como disponible
        reg = regs.get(player.pk)
        rows.append({
            "player_id": player.pk,
            "name": player.name,
            "handicap_index": player.handicap_index,
            "status": _availability(reg),
            "group_tee_time_id": reg.tee_time_id if reg else None,
        })

    rows.sort(key=lambda r: (r["status"] != "looking_for_group", r["name"].lower(), r["player_id"]))
    return rows


def empty_group() -> Dict[str, Any]:
    return {"tee_time_id": None, "players": [], "max_players": max_group_size()}


def get_group(competition_id: int, player_id: Optional[int]) -> Dict[str, Any]:
    competition = load_competition(competition_id)
    if player_id is None:
        return empty_group()
    reg = Registration.objects.filter(competition=competition, player_id=player_id).first()
    if reg is None or reg.tee_time_id is None:
        return empty_group()

    tee_time = reg.tee_time
    members = (
        Registration.objects.filter(tee_time=tee_time)
        .select_related("player")
        .order_by("registered_at", "id")
    )
    return {
        "tee_time_id": tee_time.pk,
        "teetime": tee_time.teetime,
        "start_hole": tee_time.start_hole,
        "created_by": reg.group_created_by_id,
        "max_players": max_group_size(),
        "players": [
            {
                "player_id": m.player_id,
                "name": m.player.name,
                "handicap_index": m.player.handicap_index,
                "status": m.status,
                "is_creator": m.is_group_creator,
            }
            for m in members
        ],
    }


def _group_status(statuses: List[str]) -> str:
    if any(s == PLAYING for s in statuses):
        return "on_course"
    if statuses and all(s == FINISHED for s in statuses):
        return "finished"
    return "registered"


def competition_groups(competition_id: int) -> List[Dict[str, Any]]:
    """Quién está jugando: cada tee time con sus jugadores y progreso."""
    from tourcore.apps.scoring.services.cards import holes_played, score_to_par

    competition = load_competition(competition_id)
    pars = competition.course.pars or []
    hole_count = len(pars)

    participants = (
        _participant_model().objects.filter(competition=competition)
        .select_related("player", "registration", "tee_time")
        .order_by("tee_time_id", "tee_order", "id")
    )
    groups: Dict[int, Dict[str, Any]] = {}
    for p in participants:
        scores = p.score_list(hole_count)
        status = p.registration.status if p.registration_id else REGISTERED
        group = groups.setdefault(p.tee_time_id, {
            "tee_time_id": p.tee_time_id,
            "teetime": p.tee_time.teetime,
            "start_hole": p.tee_time.start_hole,
            "players": [],
        })
        group["players"].append({
            "participant_id": p.pk,
            "player_id": p.player_id,
            "name": p.player.name,
            "status": status,
            "holes_played": holes_played(scores),
            "score_to_par": score_to_par(scores, pars),
        })

    result = []
    for group in groups.values():
        group["status"] = _group_status([pl["status"] for pl in group["players"]])
        result.append(group)
    result.sort(key=lambda g: (GROUP_STATUS_ORDER[g["status"]], g["teetime"], g["tee_time_id"]))
    return result


def active_rounds(player_id: Optional[int]) -> List[Dict[str, Any]]:
    if player_id is None:
        return []
    from tourcore.apps.scoring.services.cards import holes_played, score_to_par

    Participant = _participant_model()
    regs = (
        Registration.objects.filter(
            player_id=player_id,
            status__in=ACTIVE_ROUND_STATUSES,
            competition__is_results_final=False,
        )
        .select_related("competition__course", "competition__tour", "tee_time")
        .order_by("-competition__date", "id")
    )

    rounds: List[Dict[str, Any]] = []
    for reg in regs:
        competition = reg.competition
        pars = competition.course.pars or []
        participant = Participant.objects.filter(competition=competition, player_id=player_id).first()
        scores = participant.score_list(len(pars)) if participant else []
        mates = []
        if reg.tee_time_id:
            mates = [
                r.player.name
                for r in Registration.objects.filter(tee_time_id=reg.tee_time_id)
                .exclude(player_id=player_id)
                .select_related("player")
            ]
        rounds.append({
            "competition_id": competition.pk,
            "competition_name": competition.name,
            "date": competition.date.isoformat() if competition.date else None,
            "tour_id": competition.tour_id,
            "tour_name": competition.tour.name if competition.tour_id else None,
            "status": reg.status,
            "tee_time_id": reg.tee_time_id,
            "participant_id": participant.pk if participant else None,
            "holes_played": holes_played(scores),
            "score_to_par": score_to_par(scores, pars),
            "group": mates,
        })
    return rounds
