# tourcore/apps/leaderboard/services/tour.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from tourcore.apps.accounts.models import Player
from tourcore.apps.core.errors import NotFoundError, ValidationError
from tourcore.apps.events.models import Tour, TourCategory, TourEnrollment

from .competition import default_scoring_type
from .standings import SCORING_TYPES, aggregate_tour_points


def _get_tour(tour_id: int) -> Tour:
    try:
        return Tour.objects.get(pk=tour_id)
    except Tour.DoesNotExist:
        raise NotFoundError(f"El tour {tour_id} no existe.")


def tour_standings(
    tour_id: int,
    scoring_type: Optional[str] = None,
    category_id: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Suma de FinalResult.points por jugador en las competiciones finalizadas
    del tour. Con categoría se usan las filas de esa categoría.
    """
    from tourcore.apps.results.models import FinalResult

    tour = _get_tour(tour_id)
    scoring_type = scoring_type or default_scoring_type(tour.scoring_mode)
    if scoring_type not in SCORING_TYPES:
        raise ValidationError(f"scoring_type inválido '{scoring_type}'. Usa gross o net.")

    categories = list(TourCategory.objects.filter(tour=tour))
    if category_id is not None and category_id not in {c.pk for c in categories}:
        raise NotFoundError(f"La categoría {category_id} no pertenece a este tour.")

    finals = FinalResult.objects.filter(
        competition__tour=tour,
        competition__is_results_final=True,
        scoring_type=scoring_type,
        category_id=category_id,
    ).select_related("competition")

    rows = [
        {
            "player_id": r.player_id,
            "name": r.player_name,
            "competition_id": r.competition_id,
            "competition_name": r.competition.name,
            "date": r.competition.date.isoformat() if r.competition.date else None,
            "position": r.position,
            "points": r.points,
        }
        for r in finals
    ]
    table = aggregate_tour_points(rows)

    enrollment_by_player = {
        e.player_id: e
        for e in TourEnrollment.objects.filter(tour=tour).select_related("category")
    }
    for standing in table:
        enrollment = enrollment_by_player.get(standing["player_id"])
        category = enrollment.category if enrollment else None
        standing["category_id"] = category.pk if category else None
        standing["category_name"] = category.name if category else None

    return {
        "tour_id": tour.pk,
        "tour_name": tour.name,
        "scoring_type": scoring_type,
        "category_id": category_id,
        "categories": [{"id": c.pk, "name": c.name} for c in categories],
        "total_competitions": tour.competitions.filter(is_results_final=True).count(),
        "standings": table,
    }


def tours_for_player(player: Optional[Player]) -> List[Dict[str, Any]]:
    if player is None:
        return []
    enrollments = (
        TourEnrollment.objects.filter(player=player, status="active")
        .select_related("tour", "category")
        .order_by("tour__name")
    )
    return [
        {
            "tour_id": e.tour_id,
            "name": e.tour.name,
            "slug": e.tour.slug,
            "category_id": e.category_id,
            "category_name": e.category.name if e.category_id else None,
            "playing_handicap": e.effective_handicap,
            "status": e.status,
        }
        for e in enrollments
    ]
