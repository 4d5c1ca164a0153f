from django.urls import path
from . import views

urlpatterns = [
    path('dashboard/stats/', views.dashboard_stats, name='dashboard-stats'),
    path('dashboard/sales-chart/', views.dashboard_sales_chart, name='dashboard-sales-chart'),
    path('dashboard/top-products/', views.dashboard_top_products, name='dashboard-top-products'),
    path('reports/sales-summary/', views.sales_summary, name='sales-summary'),
    path('reports/payment-methods/', views.payment_methods, name='payment-methods'),
    path('reports/gst-summary/', views.gst_summary, name='gst-summary'),
    path('reports/inventory-summary/', views.inventory_summary, name='inventory-summary'),
    path('reports/customers/', views.customer_summary, name='customer-summary'),
]
