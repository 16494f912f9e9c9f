from django.apps import AppConfig


class LeaderboardConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tourcore.apps.leaderboard"
    verbose_name = "Clasificaciones"
