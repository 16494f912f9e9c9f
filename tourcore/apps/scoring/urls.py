from django.urls import path

from . import views

urlpatterns = [
    path("game-scores/<int:participant_id>/hole/<int:hole>", views.update_hole_score, name="participant_hole_score"),
    path("participants/<int:participant_id>/lock", views.lock_participant, name="participant_lock"),
    path("participants/<int:participant_id>/unlock", views.unlock_participant, name="participant_unlock"),
    path("participants/<int:participant_id>/dq", views.disqualify_participant, name="participant_dq"),
    path("participants/<int:participant_id>/manual-score", views.set_manual_score, name="participant_manual_score"),
]
