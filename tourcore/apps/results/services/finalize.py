# tourcore/apps/results/services/finalize.py
"""
Finalización: congela la clasificación de una competición en FinalResult.

Se calcula una vez por tipo de puntuación (gross, más net si corresponde) y
por alcance (general y cada categoría del tour). Las tarjetas incompletas y
las DQ se guardan sin posición y con 0 puntos.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from tourcore.apps.core.errors import AlreadyFinalizedError, ConflictError
from tourcore.apps.core.signals import (
    CompetitionFinalized,
    CompetitionReopened,
    competition_finalized,
    competition_reopened,
    emit,
)
from tourcore.apps.events.context import load_competition, resolve_competition
from tourcore.apps.events.models import Competition
from tourcore.apps.leaderboard.services.competition import build_entries, score_scope
from tourcore.apps.leaderboard.services.standings import Standing

from ..models import FinalResult

logger = logging.getLogger(__name__)


def _to_row(competition: Competition, standing: Standing, category_id: Optional[int]) -> FinalResult:
    e = standing.entry
    return FinalResult(
        competition=competition,
        participant_id=e.participant_id,
        player_id=e.player_id,
        player_name=e.name,
        scoring_type=standing.scoring_type,
        category_id=category_id,
        position=standing.position,
        points=standing.points,
        gross_total=e.gross_total,
        net_total=e.net_total,
        handicap_strokes=e.handicap_strokes,
        holes_played=e.holes_played,
        is_complete=e.is_complete,
        is_dq=e.is_dq,
    )


def finalize(competition_id: int) -> List[FinalResult]:
    with transaction.atomic():
        competition = load_competition(competition_id, for_update=True)
        if competition.is_results_final:
            raise AlreadyFinalizedError()

        ctx = resolve_competition(competition)
        entries = build_entries(ctx)

        scopes: List[Optional[int]] = [None]
        if ctx.kind == "tour":
            scopes += list(ctx.tour.categories.values_list("pk", flat=True))

        rows: List[FinalResult] = []
        for scoring_type in competition.scoring_types:
            for category_id in scopes:
                for standing in score_scope(ctx, entries, scoring_type, category_id):
                    rows.append(_to_row(competition, standing, category_id))

        FinalResult.objects.bulk_create(rows)

        now = timezone.now()
        Competition.objects.filter(pk=competition.pk).update(
            is_results_final=True, results_finalized_at=now,
        )
        competition.is_results_final = True
        competition.results_finalized_at = now

        logger.info("Competición %s finalizada (%s filas)", competition.pk, len(rows))
        emit(
            competition_finalized,
            CompetitionFinalized(
                competition_id=competition.pk,
                tour_id=competition.tour_id,
                results_count=len(rows),
            ),
            sender=Competition,
        )
    return rows


def reopen(competition_id: int) -> Competition:
    with transaction.atomic():
        competition = load_competition(competition_id, for_update=True)
        if not competition.is_results_final:
            raise ConflictError("La competición no está finalizada.")

        Competition.objects.filter(pk=competition.pk).update(
            is_results_final=False, results_finalized_at=None,
        )
        competition.is_results_final = False
        competition.results_finalized_at = None
        deleted, _ = FinalResult.objects.filter(competition=competition).delete()

        logger.info("Competición %s reabierta (%s filas eliminadas)", competition.pk, deleted)
        emit(
            competition_reopened,
            CompetitionReopened(competition_id=competition.pk, tour_id=competition.tour_id),
            sender=Competition,
        )
    return competition


def final_results(competition_id: int, scoring_type: Optional[str] = None) -> List[FinalResult]:
    competition = load_competition(competition_id)
    qs = FinalResult.objects.filter(competition=competition).select_related("category")
    if scoring_type:
        qs = qs.filter(scoring_type=scoring_type)
    return list(qs)
