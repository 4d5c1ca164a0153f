from django.urls import path
from .views import (
    sale_list_create, sale_recent, sale_detail, sale_status,
    sale_receipt, sale_receipt_pdf
)

urlpatterns = [
    path('sales/', sale_list_create, name='sale-list-create'),
    path('sales/recent/', sale_recent, name='sale-recent'),
    path('sales/<int:pk>/', sale_detail, name='sale-detail'),
    path('sales/<int:pk>/status/', sale_status, name='sale-status'),
    path('sales/<int:pk>/receipt/', sale_receipt, name='sale-receipt'),
    path('sales/<int:pk>/receipt/pdf/', sale_receipt_pdf, name='sale-receipt-pdf'),
]
