# tourcore/apps/results/models.py
from __future__ import annotations

from django.db import models
from django.db.models import Q

from tourcore.apps.accounts.models import Player
from tourcore.apps.core.errors import AlreadyFinalizedError
from tourcore.apps.events.models import Competition, TourCategory
from tourcore.apps.scoring.models import Participant

SCORING_TYPE_CHOICES = (
    ("gross", "Gross"),
    ("net", "Neto"),
)


class FinalResultQuerySet(models.QuerySet):
    def delete(self):
        if self.filter(competition__is_results_final=True).exists():
            raise AlreadyFinalizedError("Reabre la competición antes de borrar sus resultados.")
        return super().delete()


class FinalResult(models.Model):
    """
    Foto inmutable de la clasificación al finalizar una competición:
    una fila por jugador, tipo de puntuación y alcance (general o categoría).
    """

    competition = models.ForeignKey(Competition, on_delete=models.CASCADE, related_name="final_results")
    participant = models.ForeignKey(
        Participant,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="final_results",
    )
    player = models.ForeignKey(Player, on_delete=models.CASCADE, related_name="final_results")
    player_name = models.CharField(max_length=160)
    scoring_type = models.CharField(max_length=8, choices=SCORING_TYPE_CHOICES)
    # NULL = clasificación general
    category = models.ForeignKey(
        TourCategory,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="final_results",
    )
    position = models.PositiveIntegerField(null=True, blank=True)
    points = models.IntegerField(default=0)
    gross_total = models.IntegerField(default=0)
    net_total = models.IntegerField(null=True, blank=True)
    handicap_strokes = models.IntegerField(default=0)
    holes_played = models.PositiveSmallIntegerField(default=0)
    is_complete = models.BooleanField(default=False)
    is_dq = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = FinalResultQuerySet.as_manager()

    class Meta:
        ordering = ("competition_id", "scoring_type", "category_id", models.F("position").asc(nulls_last=True), "player_name")
        constraints = [
            models.UniqueConstraint(
                fields=["competition", "player", "scoring_type", "category"],
                name="final_result_unique_scope",
            ),
            models.UniqueConstraint(
                fields=["competition", "player", "scoring_type"],
                condition=Q(category__isnull=True),
                name="final_result_unique_overall",
            ),
        ]

    def __str__(self) -> str:
        pos = self.position if self.position is not None else "—"
        return f"{self.competition} · {self.scoring_type} · {pos} · {self.player_name}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not kwargs.get("force_insert"):
            raise AlreadyFinalizedError("Los resultados finales no se pueden modificar.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if Competition.objects.filter(pk=self.competition_id, is_results_final=True).exists():
            raise AlreadyFinalizedError("Reabre la competición antes de borrar sus resultados.")
        return super().delete(*args, **kwargs)

    def as_dict(self) -> dict:
        return {
            "position": self.position,
            "participant_id": self.participant_id,
            "player_id": self.player_id,
            "name": self.player_name,
            "category_id": self.category_id,
            "scoring_type": self.scoring_type,
            "gross_total": self.gross_total,
            "net_total": self.net_total,
            "handicap_strokes": self.handicap_strokes,
            "holes_played": self.holes_played,
            "is_complete": self.is_complete,
            "is_dq": self.is_dq,
            "points": self.points,
        }
