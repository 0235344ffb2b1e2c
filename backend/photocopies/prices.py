"""Price configuration stored in the ``Setting`` table under category ``precios``"""
import logging
from decimal import Decimal, InvalidOperation

from backend.core.cache_utils import cached_query, PRICE_CONFIG_CACHE_TTL
from backend.core.models import Setting
from .calculations import DEFAULT_PRICES

logger = logging.getLogger('backend.photocopies')

PRICE_CATEGORY = 'precios'

PRICE_DESCRIPTIONS = {
    'precio_bn': 'Price per black & white page',
    'precio_color': 'Price per color page',
    'precio_hoja': 'Price per sheet of paper',
    'fotocopia_gracia_bn': 'Free black & white pages before billing',
    'fotocopia_gracia_color': 'Free color pages before billing',
    'precio_resma': 'Price per ream (500 sheets)',
}

INTEGER_KEYS = ('fotocopia_gracia_bn', 'fotocopia_gracia_color')


def _parse(key, raw):
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError):
        logger.warning(f"Invalid stored value for {key}: {raw!r}, using default")
        return DEFAULT_PRICES[key]
    if key in INTEGER_KEYS:
        return int(value)
    return value


@cached_query(cache_ttl=PRICE_CONFIG_CACHE_TTL, key_prefix='price_config')
def get_price_config():
    """Current prices with defaults for any key never saved"""
    config = dict(DEFAULT_PRICES)
    for setting in Setting.objects.filter(key__in=DEFAULT_PRICES.keys()):
        config[setting.key] = _parse(setting.key, setting.value)
    return config


def save_price_config(values, user=None):
    """
    Upsert the given price keys (unknown keys and ``None`` values ignored).
    The cached config is dropped by the ``Setting`` save signal.
    Returns the list of keys written.
    """
    written = []
    for key, value in values.items():
        if key not in DEFAULT_PRICES or value is None:
            continue
        Setting.objects.update_or_create(
            key=key,
            defaults={
                'value': str(value),
                'category': PRICE_CATEGORY,
                'description': PRICE_DESCRIPTIONS[key],
                'updated_by': user,
            }
        )
        written.append(key)

    if written:
        logger.info(f"Price configuration updated: {', '.join(written)}")
    return written


def serialize_prices(config):
    """JSON-friendly numbers (Decimals as floats)"""
    return {key: float(value) if isinstance(value, Decimal) else value for key, value in config.items()}
