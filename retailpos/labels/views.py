from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.core.serializers.json import DjangoJSONEncoder
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.template.loader import render_to_string
from django.utils import timezone
import base64
import json
import logging
import re

from retailpos.catalog.barcodes import EscPosCommands
from retailpos.catalog.models import Product
from retailpos.core.permissions import IsManagerOrAdminForWrites
from retailpos.core.utils import create_audit_log
from .models import LabelTemplate, Printer, PrintJob
from .serializers import (
    LabelTemplateSerializer, PrinterSerializer, PrintJobSerializer, PrintLabelsSerializer
)
from .sheet import build_label_sheet, sheet_config

logger = logging.getLogger(__name__)

PRINT_JOB_LIMIT = 100
EXPORT_EXCLUDED_FIELDS = ('id', 'created_at', 'updated_at', 'is_default')
IMPORT_SUFFIX = ' (imported)'


def _mm(value):
    """50.00 -> '50', 62.50 -> '62.5'"""
    return f"{value.normalize():f}"


def _products_in_order(product_ids):
    products = Product.objects.in_bulk(product_ids)
    return [products[pk] for pk in product_ids if pk in products]


def _render_sheet(products, config, autoprint=False):
    sheet = build_label_sheet(products, config)
    html = render_to_string('labels/label_sheet.html', {'sheet': sheet, 'autoprint': autoprint})
    return HttpResponse(html, content_type='text/html; charset=utf-8')


# Label template views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def label_template_list_create(request):
    """List all label templates or create a new one"""
    if request.method == 'GET':
        templates = LabelTemplate.objects.all()
        if request.query_params.get('active') in ('1', 'true'):
            templates = templates.filter(is_active=True)
        serializer = LabelTemplateSerializer(templates, many=True)
        return Response(serializer.data)

    serializer = LabelTemplateSerializer(data=request.data)
    if serializer.is_valid():
        template = serializer.save()
        create_audit_log(
            request=request,
            action='create',
            model_name='LabelTemplate',
            object_id=template.id,
            object_name=template.name,
            changes={'width': str(template.width), 'height': str(template.height)}
        )
        return Response(LabelTemplateSerializer(template).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def label_template_detail(request, pk):
    """Retrieve, update or delete a label template"""
    template = get_object_or_404(LabelTemplate, pk=pk)

    if request.method == 'GET':
        return Response(LabelTemplateSerializer(template).data)

    if request.method in ['PUT', 'PATCH']:
        serializer = LabelTemplateSerializer(template, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            template = serializer.save()
            return Response(LabelTemplateSerializer(template).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='delete',
        model_name='LabelTemplate',
        object_id=template.id,
        object_name=template.name,
    )
    template.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def label_template_export(request, pk):
    """Download a template as JSON for import elsewhere"""
    template = get_object_or_404(LabelTemplate, pk=pk)
    data = {
        key: value for key, value in LabelTemplateSerializer(template).data.items()
        if key not in EXPORT_EXCLUDED_FIELDS
    }
    filename = re.sub(r'\s+', '_', template.name)
    response = HttpResponse(json.dumps(data, cls=DjangoJSONEncoder, indent=2), content_type='application/json')
    response['Content-Disposition'] = f'attachment; filename="template_{filename}.json"'
    return response


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def label_template_import(request):
    """Create a template from exported JSON; clashing names get an ' (imported)' suffix"""
    data = request.data
    if not isinstance(data, dict) or not data.get('name') or not data.get('width') or not data.get('height'):
        return Response({'error': 'Invalid template data'}, status=status.HTTP_400_BAD_REQUEST)

    data = {key: value for key, value in data.items() if key not in EXPORT_EXCLUDED_FIELDS}
    name = str(data['name']).strip()
    if LabelTemplate.objects.filter(name=name).exists():
        base = f"{name}{IMPORT_SUFFIX}"
        name = base
        counter = 2
        while LabelTemplate.objects.filter(name=name).exists():
            name = f"{base[:-1]} {counter})"
            counter += 1
    data['name'] = name

    serializer = LabelTemplateSerializer(data=data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    template = serializer.save()
    logger.info(f"Imported label template {template.name}")
    return Response(LabelTemplateSerializer(template).data, status=status.HTTP_201_CREATED)


# Printer views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def printer_list_create(request):
    if request.method == 'GET':
        printers = Printer.objects.all()
        return Response(PrinterSerializer(printers, many=True).data)

    serializer = PrinterSerializer(data=request.data)
    if serializer.is_valid():
        printer = serializer.save()
        return Response(PrinterSerializer(printer).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsManagerOrAdminForWrites])
def printer_detail(request, pk):
    printer = get_object_or_404(Printer, pk=pk)

    if request.method == 'GET':
        return Response(PrinterSerializer(printer).data)

    if request.method in ['PUT', 'PATCH']:
        serializer = PrinterSerializer(printer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            printer = serializer.save()
            return Response(PrinterSerializer(printer).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    printer.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def printer_test(request, pk):
    """
    Build an ESC/POS test label for the printer. The bytes are returned
    base64-encoded; the client forwards them to the device.
    """
    printer = Printer.objects.filter(pk=pk).first()
    if printer is None:
        return Response({'error': 'Printer not found'}, status=status.HTTP_404_NOT_FOUND)

    commands = EscPosCommands.label(
        product_name='Test Label',
        price='99.00',
        barcode='TEST123',
        custom_text=f'{printer.name} ({printer.connection})',
    )
    return Response({
        'success': True,
        'message': f'Test successful for {printer.name}',
        'connection_type': printer.connection,
        'commands': base64.b64encode(commands).decode('ascii'),
    })


# Print job views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def print_job_list(request):
    jobs = PrintJob.objects.select_related('template', 'user')[:PRINT_JOB_LIMIT]
    return Response(PrintJobSerializer(jobs, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def print_job_sheet(request, pk):
    """Re-render the label sheet of an earlier print job"""
    job = get_object_or_404(PrintJob.objects.select_related('template'), pk=pk)
    config = sheet_config(
        {'copies': job.copies, 'columns': job.labels_per_row, 'custom_text': job.custom_text},
        template=job.template,
    )
    autoprint = request.query_params.get('autoprint') in ('1', 'true')
    return _render_sheet(_products_in_order(job.product_ids), config, autoprint=autoprint)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def print_labels(request):
    """Record a print run of a template for a set of products"""
    serializer = PrintLabelsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    template = LabelTemplate.objects.filter(pk=data['template_id']).first()
    if template is None:
        return Response({'error': 'Template not found'}, status=status.HTTP_404_NOT_FOUND)

    printer = None
    if data.get('printer_id'):
        printer = Printer.objects.filter(pk=data['printer_id']).first()
        if printer is None:
            return Response({'error': 'Printer not found'}, status=status.HTTP_404_NOT_FOUND)
    else:
        printer = Printer.objects.filter(is_default=True, is_active=True).first()

    product_ids = data['product_ids']
    if not product_ids:
        return Response({'error': 'No products selected'}, status=status.HTTP_400_BAD_REQUEST)

    quantity = data['quantity']
    print_settings = {}
    if printer:
        print_settings = {
            'printer_type': printer.printer_type,
            'connection': printer.connection,
            'paper_width': str(printer.paper_width),
            'paper_height': str(printer.paper_height),
        }

    job = PrintJob.objects.create(
        template=template,
        user=request.user,
        printer_name=printer.name if printer else '',
        product_ids=product_ids,
        copies=quantity,
        labels_per_row=data['labels_per_row'],
        paper_size=f"{_mm(template.width)}x{_mm(template.height)}",
        orientation=data['orientation'],
        status='completed',
        total_labels=len(product_ids) * quantity,
        custom_text=data['custom_text'],
        print_settings=print_settings,
        printed_at=timezone.now(),
    )
    logger.info(
        f"Print job {job.id}: {job.total_labels} labels on {job.printer_name or 'browser'} "
        f"using {template.name} ({job.paper_size}mm)"
    )
    create_audit_log(
        request=request,
        action='label_print',
        model_name='PrintJob',
        object_id=job.id,
        object_name=template.name,
        changes={'product_ids': product_ids, 'copies': quantity, 'total_labels': job.total_labels}
    )
    return Response({
        'message': 'Print job created successfully',
        'print_job': PrintJobSerializer(job).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def label_sheet(request):
    """HTML label sheet for the chosen products, laid out on a CSS grid"""
    data = request.data
    product_ids = data.get('product_ids') or []
    if not isinstance(product_ids, list) or not product_ids:
        return Response({'error': 'No products selected'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        product_ids = [int(pk) for pk in product_ids]
    except (TypeError, ValueError):
        return Response({'error': 'product_ids must be a list of ids'}, status=status.HTTP_400_BAD_REQUEST)

    template = None
    if data.get('template_id'):
        template = LabelTemplate.objects.filter(pk=data['template_id']).first()
        if template is None:
            return Response({'error': 'Template not found'}, status=status.HTTP_404_NOT_FOUND)

    try:
        config = sheet_config(data, template=template)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    products = _products_in_order(product_ids)
    if not products:
        return Response({'error': 'No matching products found'}, status=status.HTTP_404_NOT_FOUND)
    return _render_sheet(products, config, autoprint=bool(data.get('autoprint')))
