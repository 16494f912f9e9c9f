# tourcore/apps/leaderboard/services/competition.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from tourcore.apps.core.errors import NotFoundError, ValidationError
from tourcore.apps.events.context import CompetitionContext, resolve_competition, slope_and_rating
from tourcore.apps.events.models import Competition, TourCategory, TourEnrollment

from .handicap import course_handicap, distribute_strokes
from .standings import GROSS, NET, SCORING_TYPES, Entry, Standing, assign_points, rank_entries


def default_scoring_type(mode: str) -> str:
    return NET if mode == NET else GROSS


def resolve_scoring_type(competition: Competition, requested: Optional[str]) -> str:
    if not requested:
        return default_scoring_type(competition.scoring_mode)
    if requested not in SCORING_TYPES:
        raise ValidationError(f"scoring_type inválido '{requested}'. Usa gross o net.")
    if requested not in competition.scoring_types:
        raise ValidationError(f"La competición no se puntúa en modo '{requested}'.")
    return requested


def resolve_category(ctx: CompetitionContext, category_id: Optional[int]) -> Optional[TourCategory]:
    if category_id is None:
        return None
    if ctx.kind != "tour":
        raise ValidationError("Las categorías solo existen en competiciones de tour.")
    try:
        return TourCategory.objects.get(pk=category_id, tour=ctx.tour)
    except TourCategory.DoesNotExist:
        raise NotFoundError(f"La categoría {category_id} no pertenece a este tour.")


def build_entries(ctx: CompetitionContext) -> List[Entry]:
    """Una entrada por tarjeta con su handicap ya calculado según el tee que le toca."""
    from tourcore.apps.scoring.models import Participant

    competition = ctx.competition
    course = competition.course
    pars = course.pars or []
    hole_count = len(pars)
    total_par = course.total_par

    enrollments: Dict[int, TourEnrollment] = {}
    if ctx.kind == "tour":
        enrollments = {
            e.player_id: e
            for e in TourEnrollment.objects.filter(tour=ctx.tour, status="active")
        }

    entries: List[Entry] = []
    participants = (
        Participant.objects.filter(competition=competition)
        .select_related("player", "registration__enrollment")
        .order_by("id")
    )
    for p in participants:
        enrollment = None
        if p.registration_id and p.registration.enrollment_id:
            enrollment = p.registration.enrollment
        else:
            enrollment = enrollments.get(p.player_id)
        category_id = enrollment.category_id if enrollment else None

        slope, rating = slope_and_rating(ctx.tee_for_category(category_id))
        hi = p.handicap_index if p.handicap_index is not None else 0.0
        strokes = course_handicap(hi, slope, rating, total_par)

        entries.append(Entry(
            participant_id=p.pk,
            player_id=p.player_id,
            name=p.player.name,
            scores=p.score_list(hole_count),
            category_id=category_id,
            handicap_index=hi,
            handicap_strokes=strokes,
            strokes_per_hole=distribute_strokes(strokes, course.stroke_index or [], hole_count),
            is_dq=p.is_dq,
            par=total_par,
            manual_total=p.manual_score_total,
        ))
    return entries


def points_field_size(ctx: CompetitionContext, category_id: Optional[int]) -> Optional[int]:
    """N para la fórmula por defecto: inscripciones activas del tour (o de la categoría)."""
    if ctx.kind != "tour":
        return None
    qs = TourEnrollment.objects.filter(tour=ctx.tour, status="active")
    if category_id is not None:
        qs = qs.filter(category_id=category_id)
    return qs.count() or None


def score_scope(
    ctx: CompetitionContext,
    entries: List[Entry],
    scoring_type: str,
    category_id: Optional[int] = None,
) -> List[Standing]:
    """Ranking y puntos para un alcance (general o una categoría)."""
    scoped = entries if category_id is None else [e for e in entries if e.category_id == category_id]
    standings = rank_entries(scoped, scoring_type)

    structure = None
    if ctx.kind == "tour" and ctx.point_template is not None:
        structure = ctx.point_template.points_structure or {}
    assign_points(
        standings,
        structure=structure,
        number_of_players=points_field_size(ctx, category_id),
        multiplier=ctx.competition.points_multiplier,
    )
    return standings


def competition_leaderboard(
    competition_id: int,
    scoring_type: Optional[str] = None,
    category_id: Optional[int] = None,
) -> Dict[str, Any]:
    """En vivo mientras no es definitiva; luego, las filas de FinalResult."""
    from tourcore.apps.results.models import FinalResult

    ctx = resolve_competition(competition_id)
    competition = ctx.competition
    scoring_type = resolve_scoring_type(competition, scoring_type)
    category = resolve_category(ctx, category_id)

    if competition.is_results_final:
        rows = [
            r.as_dict()
            for r in FinalResult.objects.filter(
                competition=competition,
                scoring_type=scoring_type,
                category=category,
            )
        ]
        source = "final"
    else:
        standings = score_scope(ctx, build_entries(ctx), scoring_type, category.pk if category else None)
        rows = [s.as_dict() for s in standings]
        source = "live"

    return {
        "competition_id": competition.pk,
        "competition_name": competition.name,
        "kind": ctx.kind,
        "tour_id": competition.tour_id,
        "scoring_type": scoring_type,
        "category_id": category.pk if category else None,
        "is_final": competition.is_results_final,
        "source": source,
        "par": competition.course.total_par,
        "entries": rows,
    }
