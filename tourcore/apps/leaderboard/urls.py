from django.urls import path

from . import views

urlpatterns = [
    path("competitions/<int:competition_id>/leaderboard", views.leaderboard, name="competition_leaderboard"),
    path("tours/mine", views.my_tours, name="tours_mine"),
    path("tours/<int:tour_id>/standings", views.standings, name="tour_standings"),
]
