# tourcore/apps/events/context.py
"""
Contexto de una competición resuelto una sola vez por operación.

Una competición es *standalone* o pertenece a un *tour*; el resto del código
ramifica sobre ``ctx.kind`` en vez de preguntar por ``competition.tour_id``
en cada punto.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Union

from tourcore.apps.core.errors import NotFoundError
from tourcore.apps.core.golf import standard_slope

from .models import Competition, CourseTee, PointTemplate, Tour


@dataclass(frozen=True)
class StandaloneCompetition:
    competition: Competition
    kind: Literal["standalone"] = "standalone"

    @property
    def tee(self) -> Optional[CourseTee]:
        return self.competition.tee

    def tee_for_category(self, category_id: Optional[int]) -> Optional[CourseTee]:
        return self.competition.tee


@dataclass(frozen=True)
class TourCompetition:
    competition: Competition
    tour: Tour
    point_template: Optional[PointTemplate]
    # category_id → tee
    category_tees: Dict[int, CourseTee] = field(default_factory=dict)
    kind: Literal["tour"] = "tour"

    @property
    def tee(self) -> Optional[CourseTee]:
        return self.competition.tee

    def tee_for_category(self, category_id: Optional[int]) -> Optional[CourseTee]:
        if category_id is not None and category_id in self.category_tees:
            return self.category_tees[category_id]
        return self.competition.tee


CompetitionContext = Union[StandaloneCompetition, TourCompetition]


def load_competition(competition_id: int, *, for_update: bool = False) -> Competition:
    qs = Competition.objects.select_related("course", "tee", "tour")
    if for_update:
        qs = qs.select_for_update(of=("self",))
    try:
        return qs.get(pk=competition_id)
    except Competition.DoesNotExist:
        raise NotFoundError(f"La competición {competition_id} no existe.")


def resolve_competition(competition: Union[Competition, int]) -> CompetitionContext:
    if not isinstance(competition, Competition):
        competition = load_competition(competition)

    if competition.tour_id is None:
        return StandaloneCompetition(competition=competition)

    tour = competition.tour
    template = tour.point_template
    if template is None:
        # Plantilla propia del tour si no hay una asignada explícitamente
        template = PointTemplate.objects.filter(tour=tour).order_by("id").first()

    category_tees = {
        ct.category_id: ct.tee
        for ct in competition.category_tees.select_related("tee")
    }
    return TourCompetition(
        competition=competition,
        tour=tour,
        point_template=template,
        category_tees=category_tees,
    )


def slope_and_rating(tee: Optional[CourseTee]) -> tuple[int, Optional[float]]:
    """(slope, course_rating) del tee; sin tee → slope estándar y sin rating."""
    if tee is None:
        return standard_slope(), None
    return int(tee.slope_rating or standard_slope()), tee.course_rating
