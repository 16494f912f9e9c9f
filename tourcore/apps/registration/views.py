# tourcore/apps/registration/views.py
from __future__ import annotations

from typing import Any, Dict, Optional

from django.http import HttpRequest, JsonResponse

from tourcore.apps.accounts.models import Player, require_player
from tourcore.apps.core.api import api_view, int_param, login_required_json, read_json
from tourcore.apps.core.errors import ValidationError
from tourcore.apps.events.context import load_competition

from .models import Registration
from .services import groups


def _iso(dt) -> Optional[str]:
    return dt.isoformat() if dt else None


def registration_dict(reg: Registration) -> Dict[str, Any]:
    return {
        "id": reg.pk,
        "competition_id": reg.competition_id,
        "player_id": reg.player_id,
        "status": reg.status,
        "tee_time_id": reg.tee_time_id,
        "group_created_by": reg.group_created_by_id,
        "registered_at": _iso(reg.registered_at),
        "started_at": _iso(reg.started_at),
        "finished_at": _iso(reg.finished_at),
        "version": reg.version,
    }


# -------------------------------
# Inscripción
# -------------------------------
@api_view("POST", "DELETE")
@login_required_json
def register(request: HttpRequest, competition_id: int):
    player = require_player(request.user)
    if request.method == "DELETE":
        reg = groups.withdraw(competition_id, player.pk)
        return JsonResponse({"registration": registration_dict(reg)})

    data = read_json(request)
    mode = data.get("mode")
    if not isinstance(mode, str):
        raise ValidationError("Falta el modo de inscripción.")
    reg = groups.register(competition_id, player.pk, mode)
    return JsonResponse(
        {
            "registration": registration_dict(reg),
            "group": groups.get_group(competition_id, player.pk),
        },
        status=201,
    )


@api_view("GET")
@login_required_json
def my_registration(request: HttpRequest, competition_id: int):
    competition = load_competition(competition_id)
    player = Player.objects.for_user(request.user)
    reg = None
    if player is not None:
        reg = Registration.objects.filter(competition=competition, player=player).first()
    return JsonResponse({"registration": registration_dict(reg) if reg else None})


@api_view("GET")
@login_required_json
def available_players(request: HttpRequest, competition_id: int):
    return JsonResponse({"players": groups.list_available_players(competition_id)})


# -------------------------------
# Grupos
# -------------------------------
@api_view("GET")
@login_required_json
def my_group(request: HttpRequest, competition_id: int):
    player = Player.objects.for_user(request.user)
    return JsonResponse(groups.get_group(competition_id, player.pk if player else None))


@api_view("GET")
def competition_groups(request: HttpRequest, competition_id: int):
    return JsonResponse({"groups": groups.competition_groups(competition_id)})


@api_view("POST")
@login_required_json
def group_add(request: HttpRequest, competition_id: int):
    player = require_player(request.user)
    data = read_json(request)
    raw_ids = data.get("playerIds")
    if not isinstance(raw_ids, list) or not raw_ids:
        raise ValidationError("'playerIds' debe ser una lista no vacía.")
    ids = [int_param(v, "playerIds") for v in raw_ids]
    added = groups.add_to_group(competition_id, player.pk, ids)
    return JsonResponse({
        "added": [registration_dict(r) for r in added],
        "group": groups.get_group(competition_id, player.pk),
    })


@api_view("POST")
@login_required_json
def group_remove(request: HttpRequest, competition_id: int):
    player = require_player(request.user)
    data = read_json(request)
    target_id = int_param(data.get("playerId"), "playerId")
    reg = groups.remove_from_group(competition_id, player.pk, target_id)
    return JsonResponse({
        "removed": registration_dict(reg),
        "group": groups.get_group(competition_id, player.pk),
    })


@api_view("POST")
@login_required_json
def group_leave(request: HttpRequest, competition_id: int):
    player = require_player(request.user)
    reg = groups.leave_group(competition_id, player.pk)
    return JsonResponse({"registration": registration_dict(reg)})


# -------------------------------
# Estado de juego
# -------------------------------
@api_view("POST")
@login_required_json
def start_playing(request: HttpRequest, competition_id: int):
    player = require_player(request.user)
    reg = groups.start_playing(competition_id, player.pk)
    return JsonResponse({"registration": registration_dict(reg)})


@api_view("POST")
@login_required_json
def finish_playing(request: HttpRequest, competition_id: int):
    player = require_player(request.user)
    reg = groups.finish_playing(competition_id, player.pk)
    return JsonResponse({"registration": registration_dict(reg)})


@api_view("PUT")
@login_required_json
def set_status(request: HttpRequest, competition_id: int):
    player = require_player(request.user)
    data = read_json(request)
    status = data.get("status")
    if not isinstance(status, str):
        raise ValidationError("Falta 'status'.")
    reg = groups.set_status(competition_id, player.pk, status)
    return JsonResponse({"registration": registration_dict(reg)})


@api_view("GET")
def my_active_rounds(request: HttpRequest):
    # Sin sesión: lista vacía
    player = Player.objects.for_user(request.user)
    return JsonResponse(groups.active_rounds(player.pk if player else None), safe=False)
