from __future__ import annotations

from django.db import models

from tourcore.apps.accounts.models import Player
from tourcore.apps.events.models import Competition
from tourcore.apps.registration.models import Registration, TeeTime


class Participant(models.Model):
    """Tarjeta de un jugador en una competición (una por jugador y competición)."""

    competition = models.ForeignKey(Competition, on_delete=models.CASCADE, related_name="participants")
    tee_time = models.ForeignKey(TeeTime, on_delete=models.CASCADE, related_name="participants")
    player = models.ForeignKey(Player, on_delete=models.CASCADE, related_name="participations")
    registration = models.OneToOneField(
        Registration,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="participant",
    )
    tee_order = models.PositiveSmallIntegerField(default=1)
    # Golpes por hoyo: 0 = sin jugar, -1 = levantó la bola
    scores = models.JSONField(default=list, blank=True)
    # Total cargado a mano; si existe reemplaza la suma de hoyos
    manual_score_total = models.PositiveSmallIntegerField(null=True, blank=True)
    is_locked = models.BooleanField(default=False)
    locked_at = models.DateTimeField(null=True, blank=True)
    is_dq = models.BooleanField(default=False)
    handicap_index = models.FloatField(
        null=True,
        blank=True,
        help_text="Handicap al momento de entrar al grupo.",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("competition", "player"),)
        ordering = ("tee_time", "tee_order", "id")

    def __str__(self) -> str:
        return f"{self.player} · {self.competition}"

    def score_list(self, hole_count: int) -> list[int]:
        """Golpes normalizados al largo de la cancha (relleno con 0)."""
        raw = [int(s) for s in (self.scores or [])][:hole_count]
        return raw + [0] * (hole_count - len(raw))
