from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from tourcore.apps.core.errors import DomainError

from .models import Participant
from .services import ledger


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ("player", "competition", "tee_time", "tee_order", "manual_score_total", "is_locked", "is_dq", "updated_at")
    list_filter = ("competition", "is_locked", "is_dq")
    search_fields = ("player__name",)
    raw_id_fields = ("player", "registration", "tee_time")
    readonly_fields = ("is_locked", "locked_at", "is_dq", "manual_score_total")
    actions = ["action_lock", "action_unlock", "action_disqualify", "action_reinstate"]

    def _apply(self, request, queryset, fn, label):
        done = 0
        for participant in queryset:
            try:
                fn(participant.pk)
                done += 1
            except DomainError as exc:
                self.message_user(request, f"{participant}: {exc.message}", level=messages.WARNING)
        self.message_user(request, f"{done} tarjetas {label}.", level=messages.SUCCESS)

    @admin.action(description=_("Bloquear tarjetas"))
    def action_lock(self, request, queryset):
        self._apply(request, queryset, ledger.lock, "bloqueadas")

    @admin.action(description=_("Desbloquear tarjetas"))
    def action_unlock(self, request, queryset):
        self._apply(request, queryset, ledger.unlock, "desbloqueadas")

    @admin.action(description=_("Descalificar"))
    def action_disqualify(self, request, queryset):
        self._apply(request, queryset, lambda pk: ledger.set_disqualified(pk, True), "descalificadas")

    @admin.action(description=_("Quitar descalificación"))
    def action_reinstate(self, request, queryset):
        self._apply(request, queryset, lambda pk: ledger.set_disqualified(pk, False), "rehabilitadas")
