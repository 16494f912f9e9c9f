from __future__ import annotations

from django.db import models
from django.utils.text import slugify
from django.core.exceptions import ValidationError
from django.utils import timezone

from tourcore.apps.accounts.models import Player

SCORING_CHOICES = (
    ("gross", "Gross"),
    ("net", "Neto"),
    ("both", "Gross y neto"),
)


class Course(models.Model):
    name = models.CharField(max_length=160)
    # Par por hoyo, p. ej. [4, 3, 5, ...]; su largo define la cantidad de hoyos
    pars = models.JSONField(default=list)
    # Permutación de 1..N (dificultad por hoyo); vacío = sin índice
    stroke_index = models.JSONField(default=list, blank=True)

    class Meta:
        ordering = ("name", "id")

    def __str__(self) -> str:
        return self.name

    @property
    def hole_count(self) -> int:
        return len(self.pars or [])

    @property
    def total_par(self) -> int:
        return sum(int(p) for p in (self.pars or []))

    def clean(self):
        if not self.pars:
            raise ValidationError("La cancha debe tener al menos un hoyo.")
        if any(not isinstance(p, int) or not (3 <= p <= 6) for p in self.pars):
            raise ValidationError("Cada par debe ser un entero entre 3 y 6.")
        if self.stroke_index and sorted(self.stroke_index) != list(range(1, len(self.pars) + 1)):
            raise ValidationError("El índice de dificultad debe contener cada hoyo exactamente una vez.")


class CourseTee(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="tees")
    name = models.CharField(max_length=60)
    color = models.CharField(max_length=30, blank=True)
    course_rating = models.FloatField(
        null=True,
        blank=True,
        help_text="Si está vacío no se aplica el ajuste (course rating − par).",
    )
    slope_rating = models.PositiveIntegerField(default=113)

    class Meta:
        unique_together = (("course", "name"),)
        ordering = ("course", "name")

    def __str__(self) -> str:
        return f"{self.course.name} · {self.name}"

    def clean(self):
        if not (55 <= (self.slope_rating or 0) <= 155):
            raise ValidationError("El slope rating debe estar entre 55 y 155.")


class PointTemplate(models.Model):
    name = models.CharField(max_length=120)
    tour = models.ForeignKey(
        "events.Tour",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="point_templates",
    )
    # {"1": 100, "2": 80, "default": 10}
    points_structure = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name", "id")

    def __str__(self) -> str:
        return self.name

    def clean(self):
        if not isinstance(self.points_structure, dict):
            raise ValidationError("La estructura de puntos debe ser un objeto posición→puntos.")
        for key, value in self.points_structure.items():
            if key != "default" and not str(key).isdigit():
                raise ValidationError(f"Clave de posición inválida: {key!r}.")
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                raise ValidationError(f"Puntos inválidos para {key!r}.")


class Tour(models.Model):
    name = models.CharField(max_length=160)
    slug = models.SlugField(unique=True)
    description = models.TextField(blank=True)
    point_template = models.ForeignKey(
        PointTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    scoring_mode = models.CharField(max_length=8, choices=SCORING_CHOICES, default="gross")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("name",)

    def __str__(self) -> str:
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)


class TourCategory(models.Model):
    tour = models.ForeignKey(Tour, on_delete=models.CASCADE, related_name="categories")
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = (("tour", "name"),)
        ordering = ("sort_order", "name")

    def __str__(self) -> str:
        return f"{self.tour.name} · {self.name}"


class TourEnrollment(models.Model):
    STATUS_CHOICES = (
        ("active", "Activa"),
        ("withdrawn", "Retirada"),
    )

    tour = models.ForeignKey(Tour, on_delete=models.CASCADE, related_name="enrollments")
    player = models.ForeignKey(Player, on_delete=models.CASCADE, related_name="tour_enrollments")
    category = models.ForeignKey(
        TourCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="enrollments",
    )
    playing_handicap = models.FloatField(
        null=True,
        blank=True,
        help_text="Si está vacío se usa el handicap index del jugador.",
    )
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default="active")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = (("tour", "player"),)
        ordering = ("tour", "player__name")

    def __str__(self) -> str:
        return f"{self.player} · {self.tour}"

    def clean(self):
        if self.category_id and self.category.tour_id != self.tour_id:
            raise ValidationError("La categoría no pertenece a este tour.")

    @property
    def effective_handicap(self):
        if self.playing_handicap is not None:
            return self.playing_handicap
        return self.player.handicap_index


class Competition(models.Model):
    START_MODE_CHOICES = (
        ("scheduled", "Horarios asignados"),
        ("open", "Salida libre"),
    )

    name = models.CharField(max_length=160)
    date = models.DateField(null=True, blank=True)
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="competitions")
    tee = models.ForeignKey(
        CourseTee,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="competitions",
    )
    tour = models.ForeignKey(
        Tour,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="competitions",
    )
    scoring_mode = models.CharField(max_length=8, choices=SCORING_CHOICES, default="gross")
    points_multiplier = models.FloatField(default=1)
    start_mode = models.CharField(max_length=12, choices=START_MODE_CHOICES, default="scheduled")
    open_start = models.DateTimeField(null=True, blank=True)
    open_end = models.DateTimeField(null=True, blank=True)

    is_results_final = models.BooleanField(default=False)
    results_finalized_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-date", "name")

    def __str__(self) -> str:
        return self.name

    def clean(self):
        if self.open_start and self.open_end and self.open_end < self.open_start:
            raise ValidationError("open_end no puede ser anterior a open_start")
        if self.tee_id and self.tee.course_id != self.course_id:
            raise ValidationError("El tee no pertenece a la cancha de la competición.")
        if self.points_multiplier is not None and self.points_multiplier < 0:
            raise ValidationError("El multiplicador de puntos no puede ser negativo.")

    @property
    def is_open_now(self) -> bool:
        """Ventana de juego libre; fuera de modo 'open' siempre es True."""
        if self.start_mode != "open":
            return True
        now = timezone.now()
        if self.open_start and now < self.open_start:
            return False
        if self.open_end and now > self.open_end:
            return False
        return True

    @property
    def scoring_types(self) -> tuple[str, ...]:
        if self.scoring_mode == "both":
            return ("gross", "net")
        return (self.scoring_mode,)


class CompetitionCategoryTee(models.Model):
    """Tee específico por categoría (p. ej. damas desde tees rojos)."""

    competition = models.ForeignKey(Competition, on_delete=models.CASCADE, related_name="category_tees")
    category = models.ForeignKey(TourCategory, on_delete=models.CASCADE, related_name="competition_tees")
    tee = models.ForeignKey(CourseTee, on_delete=models.CASCADE, related_name="+")

    class Meta:
        unique_together = (("competition", "category"),)

    def __str__(self) -> str:
        return f"{self.competition} · {self.category.name} · {self.tee.name}"

    def clean(self):
        if self.tee.course_id != self.competition.course_id:
            raise ValidationError("El tee no pertenece a la cancha de la competición.")
