# tourcore/apps/results/views.py
from __future__ import annotations

from django.http import HttpRequest, JsonResponse

from tourcore.apps.core.api import api_view, staff_required_json
from tourcore.apps.core.errors import ValidationError

from .services.finalize import final_results, finalize, reopen


@api_view("POST")
@staff_required_json
def finalize_competition(request: HttpRequest, competition_id: int):
    rows = finalize(competition_id)
    return JsonResponse({"competition_id": competition_id, "is_final": True, "results_count": len(rows)})


@api_view("POST")
@staff_required_json
def reopen_competition(request: HttpRequest, competition_id: int):
    competition = reopen(competition_id)
    return JsonResponse({"competition_id": competition.pk, "is_final": competition.is_results_final})


@api_view("GET")
def results(request: HttpRequest, competition_id: int):
    scoring_type = request.GET.get("scoring_type") or None
    if scoring_type not in (None, "gross", "net"):
        raise ValidationError("scoring_type inválido. Usa gross o net.")
    rows = final_results(competition_id, scoring_type)
    return JsonResponse({
        "competition_id": competition_id,
        "results": [r.as_dict() for r in rows],
    })
