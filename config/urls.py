"""Root URL configuration for votebot."""

from django.urls import include, path

urlpatterns = [
    path("api/", include("votebot.urls")),
]
