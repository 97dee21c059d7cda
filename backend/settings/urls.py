from django.urls import path

from . import views

app_name = "settings"

urlpatterns = [
    path("commission/", views.commission_config, name="commission-config"),
    path("trial/", views.trial_config, name="trial-config"),
    path("cafeterias/<str:cafeteria_id>/trial/", views.cafeteria_trial, name="cafeteria-trial"),
]
