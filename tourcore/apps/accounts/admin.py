from django.contrib import admin
from .models import Player

@admin.register(Player)
class PlayerAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "email", "handicap_index", "created_at")
    search_fields = ("name", "email", "user__username", "user__email")
    raw_id_fields = ("user",)
