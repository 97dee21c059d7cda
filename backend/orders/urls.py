from django.urls import path

from .views import order_detail, order_list, order_update_status

app_name = "orders"

urlpatterns = [
    path("", order_list, name="order-list"),
    path("<str:order_id>/", order_detail, name="order-detail"),
    path("<str:order_id>/status/", order_update_status, name="order-status"),
]
