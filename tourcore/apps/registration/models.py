from __future__ import annotations

from django.db import models

from tourcore.apps.accounts.models import Player
from tourcore.apps.events.models import Competition, TourEnrollment


class TeeTime(models.Model):
    """Grupo de juego: jugadores que comparten horario de salida."""

    competition = models.ForeignKey(Competition, on_delete=models.CASCADE, related_name="tee_times")
    # Vacío en salida libre
    teetime = models.CharField(max_length=20, blank=True)
    start_hole = models.PositiveSmallIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("competition", "teetime", "id")

    def __str__(self) -> str:
        label = self.teetime or f"grupo {self.pk}"
        return f"{self.competition} · {label}"


class Registration(models.Model):
    LOOKING_FOR_GROUP = "looking_for_group"
    REGISTERED = "registered"
    PLAYING = "playing"
    FINISHED = "finished"
    WITHDRAWN = "withdrawn"

    STATUS_CHOICES = (
        (LOOKING_FOR_GROUP, "Buscando grupo"),
        (REGISTERED, "Inscrito"),
        (PLAYING, "Jugando"),
        (FINISHED, "Terminó"),
        (WITHDRAWN, "Retirado"),
    )

    competition = models.ForeignKey(Competition, on_delete=models.CASCADE, related_name="registrations")
    player = models.ForeignKey(Player, on_delete=models.CASCADE, related_name="registrations")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)
    group_created_by = models.ForeignKey(
        Player,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    tee_time = models.ForeignKey(
        TeeTime,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registrations",
    )
    enrollment = models.ForeignKey(
        TourEnrollment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="registrations",
    )
    registered_at = models.DateTimeField(auto_now_add=True)
    started_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)
    # Contador para compare-and-swap; cada transición lo incrementa
    version = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = (("competition", "player"),)
        ordering = ("registered_at", "id")

    def __str__(self) -> str:
        return f"{self.player} · {self.competition} ({self.status})"

    @property
    def is_group_creator(self) -> bool:
        return self.group_created_by_id is not None and self.group_created_by_id == self.player_id
