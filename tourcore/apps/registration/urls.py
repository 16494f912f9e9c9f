from django.urls import path

from . import views

urlpatterns = [
    path("competitions/<int:competition_id>/register", views.register, name="competition_register"),
    path("competitions/<int:competition_id>/my-registration", views.my_registration, name="competition_my_registration"),
    path("competitions/<int:competition_id>/available-players", views.available_players, name="competition_available_players"),
    path("competitions/<int:competition_id>/group", views.my_group, name="competition_group"),
    path("competitions/<int:competition_id>/groups", views.competition_groups, name="competition_groups"),
    path("competitions/<int:competition_id>/group/add", views.group_add, name="competition_group_add"),
    path("competitions/<int:competition_id>/group/remove", views.group_remove, name="competition_group_remove"),
    path("competitions/<int:competition_id>/group/leave", views.group_leave, name="competition_group_leave"),
    path("competitions/<int:competition_id>/start-playing", views.start_playing, name="competition_start_playing"),
    path("competitions/<int:competition_id>/finish-playing", views.finish_playing, name="competition_finish_playing"),
    path("competitions/<int:competition_id>/status", views.set_status, name="competition_status"),
    path("players/me/active-rounds", views.my_active_rounds, name="player_active_rounds"),
]
