from django.contrib import admin

from .models import FinalResult


@admin.register(FinalResult)
class FinalResultAdmin(admin.ModelAdmin):
    list_display = ("competition", "scoring_type", "category", "position", "player_name", "gross_total", "net_total", "points")
    list_filter = ("competition", "scoring_type", "category", "is_dq")
    search_fields = ("player_name",)

    # Solo lectura: se generan al finalizar y se borran al reabrir
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
