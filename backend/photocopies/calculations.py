"""
Sheet and cost arithmetic for photocopy jobs.

A job prints ``cantidad`` pages per copy, ``multiplicador`` copies. Duplex
jobs put two pages on each sheet, so an odd page count still takes a whole
sheet for its last page. Billing subtracts a grace allowance from the
aggregate black/white and colour page counts before applying unit prices;
sheets are always charged.
"""
from collections import namedtuple
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation

SHEETS_PER_REAM = 500

DEFAULT_PRICES = {
    'precio_bn': Decimal('15'),
    'precio_color': Decimal('50'),
    'precio_hoja': Decimal('5'),
    'fotocopia_gracia_bn': 1,
    'fotocopia_gracia_color': 1,
    'precio_resma': Decimal('2500'),
}

CostBreakdown = namedtuple('CostBreakdown', [
    'billable_bn', 'billable_color', 'cost_bn', 'cost_color', 'cost_sheets', 'total',
])


def _to_int(value, default):
    """Integer coercion that never raises: bad input becomes ``default``"""
    if value is None or isinstance(value, bool):
        return int(value) if isinstance(value, bool) else default
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return default


def _to_decimal(value, default):
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(str(default))


def sheets_per_copy(cantidad, doble_hoja=False):
    """Physical sheets needed for one copy of ``cantidad`` pages"""
    cantidad = _to_int(cantidad, 0)
    if cantidad <= 0:
        return 0
    if not doble_hoja:
        return cantidad
    if cantidad % 2 == 0:
        return cantidad // 2
    return cantidad // 2 + 1


def required_sheets(cantidad, multiplicador=1, doble_hoja=False):
    """
    Total sheets for a job.

    >>> required_sheets(9, 10, True)
    50
    >>> required_sheets(10, 1, False)
    10
    """
    multiplicador = _to_int(multiplicador, 1) or 1
    return sheets_per_copy(cantidad, doble_hoja) * multiplicador


def printed_pages(cantidad, multiplicador=1):
    """Pages printed by a job (before duplexing)"""
    cantidad = _to_int(cantidad, 0)
    multiplicador = _to_int(multiplicador, 1) or 1
    return max(cantidad, 0) * multiplicador


def billable_cost(bn_pages, color_pages, sheets, prices=None):
    """
    Cost of a batch of pages.

    ``prices`` is a mapping with the ``DEFAULT_PRICES`` keys; missing keys
    fall back to the defaults. Grace is subtracted from the aggregate counts
    and never drives a count below zero.
    """
    config = dict(DEFAULT_PRICES)
    if isinstance(prices, Mapping):
        config.update({k: v for k, v in prices.items() if v is not None})

    grace_bn = _to_int(config['fotocopia_gracia_bn'], 0)
    grace_color = _to_int(config['fotocopia_gracia_color'], 0)
    billable_bn = max(0, _to_int(bn_pages, 0) - grace_bn)
    billable_color = max(0, _to_int(color_pages, 0) - grace_color)

    cost_bn = billable_bn * _to_decimal(config['precio_bn'], DEFAULT_PRICES['precio_bn'])
    cost_color = billable_color * _to_decimal(config['precio_color'], DEFAULT_PRICES['precio_color'])
    cost_sheets = max(0, _to_int(sheets, 0)) * _to_decimal(config['precio_hoja'], DEFAULT_PRICES['precio_hoja'])

    return CostBreakdown(
        billable_bn=billable_bn,
        billable_color=billable_color,
        cost_bn=cost_bn,
        cost_color=cost_color,
        cost_sheets=cost_sheets,
        total=cost_bn + cost_color + cost_sheets,
    )


def _field(record, name, default=None):
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def summarize_records(records):
    """
    Aggregate photocopy records (mappings or model instances).

    Pages of a record are ``cantidad * multiplicador``; sheets follow
    ``required_sheets``. The ``total_hojas_sin_doble_cara`` figure is what the
    same jobs would have used printed one-sided.
    """
    summary = {
        'total_registros': 0,
        'total_copias': 0,
        'total_bn': 0,
        'total_color': 0,
        'total_doble_hoja': 0,
        'total_una_hoja': 0,
        'total_hojas': 0,
        'total_hojas_sin_doble_cara': 0,
    }
    for record in records:
        cantidad = _field(record, 'cantidad', 0)
        multiplicador = _field(record, 'multiplicador', 1)
        doble_hoja = bool(_field(record, 'doble_hoja', False))
        pages = printed_pages(cantidad, multiplicador)
        sheets = required_sheets(cantidad, multiplicador, doble_hoja)

        summary['total_registros'] += 1
        summary['total_copias'] += pages
        if _field(record, 'tipo') == 'color':
            summary['total_color'] += pages
        else:
            summary['total_bn'] += pages
        if doble_hoja:
            summary['total_doble_hoja'] += pages
        else:
            summary['total_una_hoja'] += pages
        summary['total_hojas'] += sheets
        summary['total_hojas_sin_doble_cara'] += pages
    return summary


def reams_needed(sheets):
    """Whole reams covering ``sheets``"""
    sheets = max(0, _to_int(sheets, 0))
    return -(-sheets // SHEETS_PER_REAM)
