from rest_framework import serializers
from .models import LabelTemplate, Printer, PrintJob


class LabelTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = LabelTemplate
        fields = [
            'id', 'name', 'description', 'width', 'height', 'font_size',
            'include_barcode', 'include_price', 'include_description', 'include_mrp',
            'include_weight', 'include_logo', 'barcode_type', 'barcode_position',
            'text_alignment', 'border_style', 'border_width', 'background_color',
            'text_color', 'custom_css', 'is_default', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_width(self, value):
        if value <= 0:
            raise serializers.ValidationError("Width must be greater than zero")
        return value

    def validate_height(self, value):
        if value <= 0:
            raise serializers.ValidationError("Height must be greater than zero")
        return value

    def validate_font_size(self, value):
        if value <= 0:
            raise serializers.ValidationError("Font size must be greater than zero")
        return value


class PrinterSerializer(serializers.ModelSerializer):
    class Meta:
        model = Printer
        fields = [
            'id', 'name', 'printer_type', 'connection', 'ip_address', 'port',
            'paper_width', 'paper_height', 'is_default', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        connection = attrs.get('connection', getattr(self.instance, 'connection', 'usb'))
        ip_address = attrs.get('ip_address', getattr(self.instance, 'ip_address', None))
        if connection == 'network' and not ip_address:
            raise serializers.ValidationError({'ip_address': 'IP address is required for network printers'})
        return attrs


class PrintJobSerializer(serializers.ModelSerializer):
    template_name = serializers.CharField(source='template.name', read_only=True, default=None)
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = PrintJob
        fields = [
            'id', 'template', 'template_name', 'user', 'username', 'printer_name', 'product_ids',
            'copies', 'labels_per_row', 'paper_size', 'orientation', 'status', 'total_labels',
            'custom_text', 'print_settings', 'error_message', 'printed_at', 'created_at'
        ]
        read_only_fields = fields


class PrintLabelsSerializer(serializers.Serializer):
    template_id = serializers.IntegerField()
    product_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=True)
    printer_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(required=False, default=1, min_value=1, max_value=100)
    labels_per_row = serializers.IntegerField(required=False, default=2, min_value=1)
    orientation = serializers.ChoiceField(choices=PrintJob.ORIENTATION_CHOICES, required=False, default='portrait')
    custom_text = serializers.CharField(required=False, allow_blank=True, default='')
