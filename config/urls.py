"""URL configuration for the cascade helper project."""

from django.urls import include, path

urlpatterns = [
    path("cascades/", include("apps.cascades.urls")),
]
