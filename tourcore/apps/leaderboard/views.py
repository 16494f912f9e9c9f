# tourcore/apps/leaderboard/views.py
from __future__ import annotations

from django.http import HttpRequest, JsonResponse

from tourcore.apps.accounts.models import Player
from tourcore.apps.core.api import api_view, int_param

from .services.competition import competition_leaderboard
from .services.tour import tour_standings, tours_for_player


@api_view("GET")
def leaderboard(request: HttpRequest, competition_id: int):
    """
    Leaderboard de una competición.
      • ?scoring_type=gross|net (por defecto el modo de la competición)
      • ?category=<id> clasifica solo a los miembros de esa categoría
    """
    return JsonResponse(competition_leaderboard(
        competition_id,
        scoring_type=request.GET.get("scoring_type") or None,
        category_id=int_param(request.GET.get("category"), "category", required=False),
    ))


@api_view("GET")
def standings(request: HttpRequest, tour_id: int):
    return JsonResponse(tour_standings(
        tour_id,
        scoring_type=request.GET.get("scoring_type") or None,
        category_id=int_param(request.GET.get("category"), "category", required=False),
    ))


@api_view("GET")
def my_tours(request: HttpRequest):
    # Sin sesión o sin perfil: lista vacía
    return JsonResponse(tours_for_player(Player.objects.for_user(request.user)), safe=False)
