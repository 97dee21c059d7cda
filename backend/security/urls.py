from django.urls import path

from . import views

app_name = "security"

urlpatterns = [
    path("events/", views.security_event_list, name="event-list"),
]
