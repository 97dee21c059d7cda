from django.urls import path

from . import views

app_name = "ledger"

urlpatterns = [
    path("recharge-requests/", views.recharge_request_list, name="recharge-request-list"),
    path(
        "recharge-requests/<str:request_id>/process/",
        views.recharge_request_process,
        name="recharge-request-process",
    ),
    path("payouts/", views.payout_list, name="payout-list"),
    path("entries/", views.ledger_entry_list, name="entry-list"),
    path("marketers/<str:marketer_id>/balance/", views.marketer_balance, name="marketer-balance"),
]
