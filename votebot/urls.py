"""URL routes for the votebot app."""

from django.urls import path

from . import views

app_name = "votebot"

urlpatterns = [
    path("health/", views.health_check, name="health_check"),
    path("manage/teams/", views.add_team, name="add_team"),
]
