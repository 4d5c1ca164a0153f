"""
Cache invalidation signals
Dashboard figures depend on products and sales, so any write to them clears the dashboard cache
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from .cache_utils import invalidate_dashboard_cache

logger = logging.getLogger(__name__)


@receiver(post_save, sender='catalog.Product')
@receiver(post_delete, sender='catalog.Product')
def invalidate_on_product_change(sender, instance, **kwargs):
    logger.debug(f"Product {instance.pk} changed, invalidating dashboard cache")
    invalidate_dashboard_cache()


@receiver(post_save, sender='sales.Sale')
@receiver(post_delete, sender='sales.Sale')
def invalidate_on_sale_change(sender, instance, **kwargs):
    logger.debug(f"Sale {instance.pk} changed, invalidating dashboard cache")
    invalidate_dashboard_cache()
