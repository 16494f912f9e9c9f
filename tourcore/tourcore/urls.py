from django.contrib import admin
from django.urls import path, include

from tourcore.apps.core.views import health

urlpatterns = [
    path("admin/", admin.site.urls),

    # API healthcheck
    path("api/health/", health, name="api_health"),

    # Inscripción, grupos y rondas activas
    path("api/", include("tourcore.apps.registration.urls")),
    # Tarjetas (golpes, bloqueo, DQ)
    path("api/", include("tourcore.apps.scoring.urls")),
    # Leaderboard y clasificación del tour
    path("api/", include("tourcore.apps.leaderboard.urls")),
    # Finalización y resultados definitivos
    path("api/", include("tourcore.apps.results.urls")),
]
