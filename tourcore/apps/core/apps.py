from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tourcore.apps.core"
    verbose_name = "Núcleo (errores, eventos, API)"
