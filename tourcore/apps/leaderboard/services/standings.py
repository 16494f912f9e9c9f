# tourcore/apps/leaderboard/services/standings.py
"""
Motor de clasificación (sin acceso a base de datos).

  • Solo se rankean tarjetas completas y no descalificadas.
  • Orden ascendente por total (gross o neto).
  • Desempate count-back: acumulado de los últimos 9, 6, 3 y 1 hoyos
    (segmentos más cortos que la vuelta), luego hoyo a hoyo hacia atrás.
  • Empates sin resolver comparten posición: 1 + cantidad de mejores.
  • Detrás: incompletas (más hoyos jugados primero) y al final las DQ.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from tourcore.apps.core.golf import COUNT_BACK_SEGMENTS

from .handicap import net_scores, round_half_up

GROSS = "gross"
NET = "net"
SCORING_TYPES = (GROSS, NET)


@dataclass
class Entry:
    participant_id: int
    player_id: int
    name: str
    scores: List[int]
    category_id: Optional[int] = None
    handicap_index: float = 0.0
    handicap_strokes: int = 0
    strokes_per_hole: List[int] = field(default_factory=list)
    is_dq: bool = False
    par: int = 0
    # Total cargado a mano: manda sobre la suma de hoyos y completa la tarjeta
    manual_total: Optional[int] = None

    @property
    def has_manual_total(self) -> bool:
        return self.manual_total is not None

    @property
    def has_hole_detail(self) -> bool:
        return bool(self.scores) and all(s > 0 for s in self.scores)

    @property
    def gross_total(self) -> int:
        if self.has_manual_total:
            return self.manual_total
        return sum(s for s in self.scores if s > 0)

    @property
    def net_total(self) -> int:
        return self.gross_total - self.handicap_strokes

    @property
    def holes_played(self) -> int:
        if self.has_manual_total:
            return len(self.scores)
        return sum(1 for s in self.scores if s > 0)

    @property
    def is_complete(self) -> bool:
        return self.has_manual_total or self.has_hole_detail

    def total(self, scoring_type: str) -> int:
        return self.net_total if scoring_type == NET else self.gross_total

    def hole_values(self, scoring_type: str) -> List[int]:
        if scoring_type == NET and self.strokes_per_hole:
            return net_scores(self.scores, self.strokes_per_hole)
        return list(self.scores)


@dataclass
class Standing:
    entry: Entry
    scoring_type: str
    position: Optional[int] = None
    points: int = 0

    @property
    def total(self) -> int:
        return self.entry.total(self.scoring_type)

    def as_dict(self) -> Dict[str, Any]:
        e = self.entry
        return {
            "position": self.position,
            "participant_id": e.participant_id,
            "player_id": e.player_id,
            "name": e.name,
            "category_id": e.category_id,
            "gross_total": e.gross_total,
            "net_total": e.net_total,
            "handicap_strokes": e.handicap_strokes,
            "to_par": e.gross_total - e.par if e.is_complete else None,
            "holes_played": e.holes_played,
            "is_complete": e.is_complete,
            "is_dq": e.is_dq,
            "points": self.points,
        }


def count_back_key(holes: Sequence[int]) -> Tuple[int, ...]:
    n = len(holes)
    segments = [sum(holes[-seg:]) for seg in COUNT_BACK_SEGMENTS if seg < n]
    return tuple(segments) + tuple(reversed(holes))


def _sort_key(entry: Entry, scoring_type: str) -> Tuple:
    # Un total manual sin hoyo a hoyo no puede desempatar: pierde el count-back
    # contra tarjetas con detalle y comparte posición con otras iguales.
    if not entry.has_hole_detail:
        return (entry.total(scoring_type), 1, ())
    return (entry.total(scoring_type), 0, count_back_key(entry.hole_values(scoring_type)))


def rank_entries(entries: Sequence[Entry], scoring_type: str = GROSS) -> List[Standing]:
    ranked = [e for e in entries if not e.is_dq and e.is_complete]
    incomplete = [e for e in entries if not e.is_dq and not e.is_complete]
    disqualified = [e for e in entries if e.is_dq]

    ranked.sort(key=lambda e: (_sort_key(e, scoring_type), e.name.lower(), e.participant_id))
    incomplete.sort(key=lambda e: (-e.holes_played, e.total(scoring_type), e.name.lower()))
    disqualified.sort(key=lambda e: e.name.lower())

    out: List[Standing] = []
    previous_key = None
    position = 0
    for idx, entry in enumerate(ranked):
        key = _sort_key(entry, scoring_type)
        if key != previous_key:
            position = idx + 1
            previous_key = key
        out.append(Standing(entry=entry, scoring_type=scoring_type, position=position))

    out.extend(Standing(entry=e, scoring_type=scoring_type) for e in incomplete)
    out.extend(Standing(entry=e, scoring_type=scoring_type) for e in disqualified)
    return out


# -------------------------------
# Puntos
# -------------------------------
def points_for_rank(rank: int, structure: Mapping[str, Any]) -> float:
    """Clave exacta, si no 'default', si no 0."""
    if rank is None or rank <= 0 or not structure:
        return 0
    exact = structure.get(str(rank))
    if exact is None:
        exact = structure.get(rank)
    if exact is not None:
        return exact
    return structure.get("default", 0) or 0


def default_points(rank: int, number_of_players: int) -> int:
    """1º = N+2, 2º = N, k-ésimo = max(0, N − (k−1))."""
    if rank is None or rank <= 0:
        return 0
    if rank == 1:
        return number_of_players + 2
    if rank == 2:
        return number_of_players
    return max(0, number_of_players - (rank - 1))


def assign_points(
    standings: Sequence[Standing],
    *,
    structure: Optional[Mapping[str, Any]] = None,
    number_of_players: Optional[int] = None,
    multiplier: float = 1,
) -> None:
    """Asigna puntos in place; sin plantilla usa la fórmula por defecto."""
    ranked_count = sum(1 for s in standings if s.position is not None)
    n = number_of_players if number_of_players else ranked_count
    for s in standings:
        if s.position is None:
            s.points = 0
            continue
        base = points_for_rank(s.position, structure) if structure else default_points(s.position, n)
        s.points = round_half_up(base * multiplier)


# -------------------------------
# Tour: agregación de puntos
# -------------------------------
def aggregate_tour_points(rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    ``rows``: dicts con player_id, name, competition_id, competition_name,
    date, position, points (una fila por competición finalizada).
    Devuelve la tabla del tour ordenada: puntos desc, competiciones jugadas
    desc, nombre asc; empates en puntos y jugadas comparten posición.
    """
    by_player: Dict[int, Dict[str, Any]] = {}
    for row in rows:
        if row.get("position") is None:
            continue
        standing = by_player.setdefault(row["player_id"], {
            "player_id": row["player_id"],
            "name": row["name"],
            "total_points": 0,
            "competitions_played": 0,
            "competitions": [],
        })
        standing["total_points"] += row["points"]
        standing["competitions_played"] += 1
        standing["competitions"].append({
            "competition_id": row["competition_id"],
            "competition_name": row.get("competition_name"),
            "date": row.get("date"),
            "position": row["position"],
            "points": row["points"],
        })

    table = sorted(
        by_player.values(),
        key=lambda s: (-s["total_points"], -s["competitions_played"], s["name"].lower(), s["player_id"]),
    )
    previous = None
    position = 0
    for idx, standing in enumerate(table):
        key = (standing["total_points"], standing["competitions_played"])
        if key != previous:
            position = idx + 1
            previous = key
        standing["position"] = position
    return table
