from decimal import Decimal
from django.conf import settings
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LabelTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, unique=True)),
                ('description', models.TextField(blank=True)),
                ('width', models.DecimalField(decimal_places=2, max_digits=6)),
                ('height', models.DecimalField(decimal_places=2, max_digits=6)),
                ('font_size', models.IntegerField(default=12)),
                ('include_barcode', models.BooleanField(default=True)),
                ('include_price', models.BooleanField(default=True)),
                ('include_description', models.BooleanField(default=False)),
                ('include_mrp', models.BooleanField(default=False)),
                ('include_weight', models.BooleanField(default=False)),
                ('include_logo', models.BooleanField(default=False)),
                ('barcode_type', models.CharField(choices=[('CODE128', 'Code 128'), ('EAN13', 'EAN-13'), ('CODE39', 'Code 39'), ('UPC', 'UPC'), ('QR', 'QR Code')], default='CODE128', max_length=20)),
                ('barcode_position', models.CharField(choices=[('top', 'Top'), ('bottom', 'Bottom'), ('left', 'Left'), ('right', 'Right')], default='bottom', max_length=20)),
                ('text_alignment', models.CharField(choices=[('left', 'Left'), ('center', 'Center'), ('right', 'Right')], default='center', max_length=10)),
                ('border_style', models.CharField(choices=[('none', 'None'), ('solid', 'Solid'), ('dashed', 'Dashed'), ('dotted', 'Dotted')], default='solid', max_length=10)),
                ('border_width', models.IntegerField(default=1)),
                ('background_color', models.CharField(default='#ffffff', max_length=20)),
                ('text_color', models.CharField(default='#000000', max_length=20)),
                ('custom_css', models.TextField(blank=True)),
                ('is_default', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'label_templates',
                'ordering': ['-is_default', 'name'],
            },
        ),
        migrations.CreateModel(
            name='Printer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('printer_type', models.CharField(default='thermal', max_length=50)),
                ('connection', models.CharField(choices=[('usb', 'USB'), ('network', 'Network'), ('bluetooth', 'Bluetooth')], default='usb', max_length=20)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('port', models.IntegerField(blank=True, null=True)),
                ('paper_width', models.DecimalField(decimal_places=2, default=Decimal('80.00'), max_digits=6)),
                ('paper_height', models.DecimalField(decimal_places=2, default=Decimal('40.00'), max_digits=6)),
                ('is_default', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'printers',
                'ordering': ['-is_default', 'name'],
            },
        ),
        migrations.CreateModel(
            name='PrintJob',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('printer_name', models.CharField(blank=True, max_length=200)),
                ('product_ids', models.JSONField(default=list)),
                ('copies', models.IntegerField(default=1)),
                ('labels_per_row', models.IntegerField(default=2)),
                ('paper_size', models.CharField(blank=True, max_length=50)),
                ('orientation', models.CharField(choices=[('portrait', 'Portrait'), ('landscape', 'Landscape')], default='portrait', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed'), ('failed', 'Failed')], default='pending', max_length=20)),
                ('total_labels', models.IntegerField(default=0)),
                ('custom_text', models.TextField(blank=True)),
                ('print_settings', models.JSONField(blank=True, default=dict)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('printed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='print_jobs', to='labels.labeltemplate')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='print_jobs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'print_jobs',
                'ordering': ['-created_at'],
            },
        ),
    ]
