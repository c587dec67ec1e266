from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/stock/", include("stock.urls")),
    path("api/orders/", include("orders.urls")),
]
