"""
URL configuration for the cascades app.
"""

from django.urls import path

from apps.cascades.views import CheckRunWebhookView


app_name = "cascades"

urlpatterns = [
    path("webhook/", CheckRunWebhookView.as_view(), name="webhook"),
]
