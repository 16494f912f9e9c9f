# tourcore/apps/scoring/views.py
from __future__ import annotations

from django.http import HttpRequest, JsonResponse

from tourcore.apps.core.api import api_view, login_required_json, read_json, staff_required_json
from tourcore.apps.core.errors import ValidationError

from .models import Participant
from .services import ledger


def participant_dict(p: Participant) -> dict:
    return {
        "id": p.pk,
        "competition_id": p.competition_id,
        "tee_time_id": p.tee_time_id,
        "player_id": p.player_id,
        "tee_order": p.tee_order,
        "scores": list(p.scores or []),
        "manual_score_total": p.manual_score_total,
        "is_locked": p.is_locked,
        "locked_at": p.locked_at.isoformat() if p.locked_at else None,
        "is_dq": p.is_dq,
        "handicap_index": p.handicap_index,
    }


@api_view("PUT")
@login_required_json
def update_hole_score(request: HttpRequest, participant_id: int, hole: int):
    data = read_json(request)
    if "shots" not in data:
        raise ValidationError("Falta 'shots'.")
    participant = ledger.update_score(participant_id, hole, data["shots"], request.user)
    return JsonResponse({"participant": participant_dict(participant)})


@api_view("POST")
@staff_required_json
def lock_participant(request: HttpRequest, participant_id: int):
    return JsonResponse({"participant": participant_dict(ledger.lock(participant_id))})


@api_view("POST")
@staff_required_json
def unlock_participant(request: HttpRequest, participant_id: int):
    return JsonResponse({"participant": participant_dict(ledger.unlock(participant_id))})


@api_view("POST")
@staff_required_json
def disqualify_participant(request: HttpRequest, participant_id: int):
    data = read_json(request)
    flag = data.get("is_dq", True)
    return JsonResponse({"participant": participant_dict(ledger.set_disqualified(participant_id, flag))})


@api_view("PUT")
@staff_required_json
def set_manual_score(request: HttpRequest, participant_id: int):
    data = read_json(request)
    if "total" not in data:
        raise ValidationError("Falta 'total' (null para borrarlo).")
    return JsonResponse({"participant": participant_dict(ledger.set_manual_score(participant_id, data["total"]))})
