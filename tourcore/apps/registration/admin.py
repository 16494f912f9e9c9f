from __future__ import annotations

from django.contrib import admin

from .models import TeeTime, Registration


class GroupMembersInline(admin.TabularInline):
    model = Registration
    fk_name = "tee_time"
    extra = 0
    fields = ("player", "status", "group_created_by", "registered_at")
    readonly_fields = ("player", "status", "group_created_by", "registered_at")
    can_delete = False
    show_change_link = True


@admin.register(TeeTime)
class TeeTimeAdmin(admin.ModelAdmin):
    list_display = ("competition", "teetime", "start_hole", "members_count", "created_at")
    list_filter = ("competition",)
    raw_id_fields = ("competition",)
    inlines = [GroupMembersInline]

    def members_count(self, obj: TeeTime) -> int:
        return obj.registrations.count()
    members_count.short_description = "Jugadores"


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ("player", "competition", "status", "tee_time", "group_created_by", "registered_at")
    list_filter = ("competition", "status")
    search_fields = ("player__name", "player__email")
    raw_id_fields = ("player", "competition", "tee_time", "group_created_by", "enrollment")
    # El estado solo cambia a través de los servicios (tabla de transiciones)
    readonly_fields = ("status", "version", "started_at", "finished_at")
