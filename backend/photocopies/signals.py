"""
Cache invalidation signals
Drop cached price config and paper types when their rows change
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from backend.core.models import Setting
from .calculations import DEFAULT_PRICES
from .models import PaperType
from .prices import get_price_config

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=Setting)
def invalidate_price_cache(sender, instance, **kwargs):
    """Any write to a price key invalidates the cached config"""
    if instance.key not in DEFAULT_PRICES:
        return
    try:
        get_price_config.invalidate()
    except Exception as e:
        logger.warning(f"Error invalidating price cache: {e}")


@receiver([post_save, post_delete], sender=PaperType)
def invalidate_paper_types_cache(sender, instance, **kwargs):
    from .views import get_active_paper_types
    try:
        get_active_paper_types.invalidate()
    except Exception as e:
        logger.warning(f"Error invalidating paper types cache: {e}")
