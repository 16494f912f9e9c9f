from __future__ import annotations

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from tourcore.apps.core.errors import DomainError

from .models import (
    Course,
    CourseTee,
    PointTemplate,
    Tour,
    TourCategory,
    TourEnrollment,
    Competition,
    CompetitionCategoryTee,
)


# -----------------------------
# Canchas
# -----------------------------
class CourseTeeInline(admin.TabularInline):
    model = CourseTee
    extra = 0
    fields = ["name", "color", "course_rating", "slope_rating"]


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("name", "hole_count", "total_par")
    search_fields = ("name",)
    inlines = [CourseTeeInline]


# -----------------------------
# Tours
# -----------------------------
class TourCategoryInline(admin.TabularInline):
    model = TourCategory
    extra = 0
    fields = ["name", "sort_order", "description"]
    ordering = ("sort_order",)


@admin.register(Tour)
class TourAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "scoring_mode", "point_template", "created_at")
    search_fields = ("name", "slug")
    list_filter = ("scoring_mode",)
    prepopulated_fields = {"slug": ("name",)}
    inlines = [TourCategoryInline]


@admin.register(PointTemplate)
class PointTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "tour", "created_at")
    list_filter = ("tour",)
    search_fields = ("name",)


@admin.register(TourEnrollment)
class TourEnrollmentAdmin(admin.ModelAdmin):
    list_display = ("player", "tour", "category", "playing_handicap", "status")
    list_filter = ("tour", "category", "status")
    search_fields = ("player__name", "player__email")
    raw_id_fields = ("player",)


# -----------------------------
# Competiciones (finalizar / reabrir vía servicio)
# -----------------------------
class CompetitionCategoryTeeInline(admin.TabularInline):
    model = CompetitionCategoryTee
    extra = 0


@admin.register(Competition)
class CompetitionAdmin(admin.ModelAdmin):
    list_display = ("name", "date", "tour", "course", "scoring_mode", "points_multiplier", "is_results_final")
    list_filter = ("tour", "scoring_mode", "start_mode", "is_results_final")
    search_fields = ("name",)
    readonly_fields = ("is_results_final", "results_finalized_at")
    inlines = [CompetitionCategoryTeeInline]
    actions = ["action_finalize", "action_reopen"]

    @admin.action(description=_("Finalizar resultados"))
    def action_finalize(self, request, queryset):
        from tourcore.apps.results.services.finalize import finalize

        done = 0
        for competition in queryset:
            try:
                finalize(competition.pk)
                done += 1
            except DomainError as exc:
                self.message_user(request, f"{competition}: {exc.message}", level=messages.WARNING)
        if done:
            self.message_user(request, f"{done} competiciones finalizadas.", level=messages.SUCCESS)

    @admin.action(description=_("Reabrir resultados"))
    def action_reopen(self, request, queryset):
        from tourcore.apps.results.services.finalize import reopen

        done = 0
        for competition in queryset:
            try:
                reopen(competition.pk)
                done += 1
            except DomainError as exc:
                self.message_user(request, f"{competition}: {exc.message}", level=messages.WARNING)
        if done:
            self.message_user(request, f"{done} competiciones reabiertas.", level=messages.SUCCESS)
