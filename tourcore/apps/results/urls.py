from django.urls import path

from . import views

urlpatterns = [
    path("competitions/<int:competition_id>/finalize", views.finalize_competition, name="competition_finalize"),
    path("competitions/<int:competition_id>/reopen", views.reopen_competition, name="competition_reopen"),
    path("competitions/<int:competition_id>/results", views.results, name="competition_results"),
]
