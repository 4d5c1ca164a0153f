from django.urls import path
from .views import (
    label_template_list_create, label_template_detail, label_template_export, label_template_import,
    printer_list_create, printer_detail, printer_test,
    print_job_list, print_job_sheet, print_labels, label_sheet
)

urlpatterns = [
    # Label template endpoints
    path('label-templates/', label_template_list_create, name='label-template-list-create'),
    path('label-templates/import/', label_template_import, name='label-template-import'),
    path('label-templates/<int:pk>/', label_template_detail, name='label-template-detail'),
    path('label-templates/<int:pk>/export/', label_template_export, name='label-template-export'),

    # Printer endpoints
    path('printers/', printer_list_create, name='printer-list-create'),
    path('printers/<int:pk>/', printer_detail, name='printer-detail'),
    path('printers/<int:pk>/test/', printer_test, name='printer-test'),

    # Printing
    path('print-jobs/', print_job_list, name='print-job-list'),
    path('print-jobs/<int:pk>/sheet/', print_job_sheet, name='print-job-sheet'),
    path('print-labels/', print_labels, name='print-labels'),
    path('labels/sheet/', label_sheet, name='label-sheet'),
]
