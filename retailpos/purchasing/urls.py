from django.urls import path
from .views import purchase_list_create, purchase_detail, purchase_status

urlpatterns = [
    path('purchases/', purchase_list_create, name='purchase-list-create'),
    path('purchases/<int:pk>/', purchase_detail, name='purchase-detail'),
    path('purchases/<int:pk>/status/', purchase_status, name='purchase-status'),
]
