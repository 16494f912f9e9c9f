from django.apps import AppConfig


class RegistrationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tourcore.apps.registration"
    verbose_name = "Inscripciones y grupos"
