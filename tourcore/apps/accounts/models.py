from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.db import models


class PlayerQuerySet(models.QuerySet):
    def for_user(self, user) -> Optional["Player"]:
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return self.filter(user=user).first()


class Player(models.Model):
    """Golfista. Puede existir sin usuario (p. ej. importado desde planilla)."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="player",
    )
    name = models.CharField(max_length=160)
    email = models.EmailField(blank=True)
    handicap_index = models.FloatField(
        null=True,
        blank=True,
        help_text="Handicap index WHS (negativo = handicap plus).",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = PlayerQuerySet.as_manager()

    class Meta:
        ordering = ("name", "id")

    def __str__(self) -> str:
        return self.name


def require_player(user) -> Player:
    """Perfil de jugador del usuario autenticado o NotFoundError."""
    from tourcore.apps.core.errors import NotFoundError

    player = Player.objects.for_user(user)
    if player is None:
        raise NotFoundError("Tu usuario no tiene un perfil de jugador.")
    return player
