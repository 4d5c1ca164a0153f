"""Utility functions for audit logging and stored settings"""
import logging
import time

from .models import AuditLog, Setting

logger = logging.getLogger(__name__)

RECEIPT_SETTING_PREFIX = 'receipt.'

# Defaults used on receipts until an admin saves the business profile
RECEIPT_SETTING_DEFAULTS = {
    'business_name': 'My Retail Store',
    'business_address': '',
    'phone_number': '',
    'email': '',
    'tax_id': '',
    'receipt_footer': '',
    'show_qr_code': True,
    'terms_conditions': '',
    'return_policy': '',
}

BOOLEAN_RECEIPT_SETTINGS = {'show_qr_code'}


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, sale_create, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
        object_reference: Reference identifier (e.g., SKU, order number)
    """
    if not action or not model_name or object_id is None:
        logger.warning(
            f"Audit log creation skipped: missing required fields "
            f"(action={action}, model_name={model_name}, object_id={object_id})"
        )
        return None

    try:
        audit_user = user
        if audit_user is None and request is not None and hasattr(request, 'user'):
            audit_user = request.user

        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        # Audit logging never fails the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def _parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def get_receipt_settings():
    """Business profile for receipts, merged over the defaults"""
    values = dict(RECEIPT_SETTING_DEFAULTS)
    stored = Setting.objects.filter(key__startswith=RECEIPT_SETTING_PREFIX)
    for setting in stored:
        field = setting.key[len(RECEIPT_SETTING_PREFIX):]
        if field not in values:
            continue
        values[field] = _parse_bool(setting.value) if field in BOOLEAN_RECEIPT_SETTINGS else setting.value
    return values


def save_receipt_settings(data):
    """Persist receipt fields as receipt.<field> Setting rows"""
    for field, value in data.items():
        if field not in RECEIPT_SETTING_DEFAULTS:
            continue
        if field in BOOLEAN_RECEIPT_SETTINGS:
            value = 'true' if _parse_bool(value) else 'false'
        Setting.objects.update_or_create(
            key=f"{RECEIPT_SETTING_PREFIX}{field}",
            defaults={'value': '' if value is None else str(value)},
        )
    return get_receipt_settings()


def generate_order_number(model, prefix, field='order_number'):
    """
    Build {prefix}-{epoch millis}. Collisions within the same millisecond
    get -1, -2... appended.
    """
    base = f"{prefix}-{int(time.time() * 1000)}"
    candidate = base
    suffix = 0
    while model.objects.filter(**{field: candidate}).exists():
        suffix += 1
        candidate = f"{base}-{suffix}"
    return candidate
