"""
Photocopy dashboard analytics.

Every figure is computed from a ``PhotocopyRecord`` queryset that the caller
has already filtered (date range, user). Pages of a record are
``cantidad * multiplicador``; sheets come from the stored ``total_hojas``.
"""
import logging
import math
from decimal import Decimal

from django.db.models import Case, Count, F, IntegerField, Sum, Value, When
from django.db.models.functions import Coalesce, TruncDate, TruncMonth

from backend.photocopies.calculations import SHEETS_PER_REAM, billable_cost, reams_needed

logger = logging.getLogger('backend.reports')

# Duplex share under which the dashboard recommends printing more two-sided
DUPLEX_TARGET_RATIO = 0.7
# Safety margin applied to the average monthly consumption for stock planning
STOCK_SAFETY_FACTOR = 1.2

PAGES = F('cantidad') * F('multiplicador')
SHEETS = Coalesce(Sum('total_hojas'), Value(0), output_field=IntegerField())


def _sum_when(then=PAGES, **condition):
    return Coalesce(
        Sum(Case(When(then=then, **condition), default=Value(0), output_field=IntegerField())),
        Value(0),
        output_field=IntegerField(),
    )


def _totals():
    """Aggregate aliases; none may reuse a model field name (doble_hoja, total_hojas)"""
    return {
        'n_registros': Count('id'),
        'paginas': Coalesce(Sum(PAGES, output_field=IntegerField()), Value(0), output_field=IntegerField()),
        'paginas_bn': _sum_when(tipo='bn'),
        'paginas_color': _sum_when(tipo='color'),
        'paginas_doble_hoja': _sum_when(doble_hoja=True),
        'paginas_una_hoja': _sum_when(doble_hoja=False),
        'hojas': SHEETS,
        'hojas_ahorradas': _sum_when(then=PAGES - F('total_hojas'), doble_hoja=True),
    }


def _percent(part, whole):
    return round(part / whole * 100) if whole else 0


def _money(value):
    return float(value) if isinstance(value, Decimal) else value


def general_statistics(queryset):
    """Totals over the whole queryset"""
    data = queryset.aggregate(usuarios_unicos=Count('usuario_id', distinct=True), **_totals())
    return {
        'total_registros': data['n_registros'],
        'total_copias': data['paginas'],
        'total_bn': data['paginas_bn'],
        'total_color': data['paginas_color'],
        'total_doble_hoja': data['paginas_doble_hoja'],
        'total_una_hoja': data['paginas_una_hoja'],
        'total_hojas': data['hojas'],
        'hojas_ahorradas': data['hojas_ahorradas'],
        'usuarios_unicos': data['usuarios_unicos'],
    }


def daily_statistics(queryset):
    rows = (queryset.order_by()
            .annotate(dia=TruncDate('registrado_en'))
            .values('dia')
            .annotate(**_totals())
            .order_by('dia'))
    return [{
        'fecha': row['dia'].strftime('%d-%m-%Y'),
        'dia': row['dia'].isoformat(),
        'registros': row['n_registros'],
        'copias': row['paginas'],
        'bn': row['paginas_bn'],
        'color': row['paginas_color'],
        'doble_hoja': row['paginas_doble_hoja'],
        'una_hoja': row['paginas_una_hoja'],
        'total_hojas': row['hojas'],
    } for row in rows]


def monthly_statistics(queryset):
    rows = (queryset.order_by()
            .annotate(month=TruncMonth('registrado_en'))
            .values('month')
            .annotate(**_totals())
            .order_by('month'))
    return [{
        'mes': row['month'].strftime('%Y-%m'),
        'mes_formato': row['month'].strftime('%m/%Y'),
        'registros': row['n_registros'],
        'copias': row['paginas'],
        'bn': row['paginas_bn'],
        'color': row['paginas_color'],
        'doble_hoja': row['paginas_doble_hoja'],
        'una_hoja': row['paginas_una_hoja'],
        'total_hojas': row['hojas'],
        'copias_doble_cara': row['paginas_doble_hoja'],
        'hojas_ahorradas': row['hojas_ahorradas'],
    } for row in rows]


def user_statistics(queryset):
    rows = (queryset.order_by()
            .values('usuario_id', 'usuario__username', 'usuario__first_name', 'usuario__last_name')
            .annotate(
                n_registros=Count('id'),
                paginas=Coalesce(Sum(PAGES, output_field=IntegerField()), Value(0), output_field=IntegerField()),
                paginas_bn=_sum_when(tipo='bn'),
                paginas_color=_sum_when(tipo='color'),
                hojas=SHEETS,
            )
            .order_by('-paginas', 'usuario_id'))
    result = []
    for row in rows:
        full_name = f"{row['usuario__first_name'] or ''} {row['usuario__last_name'] or ''}".strip()
        result.append({
            'usuario_id': row['usuario_id'],
            'usuario_nombre': full_name or row['usuario__username'] or f"Usuario #{row['usuario_id']}",
            'registros': row['n_registros'],
            'copias': row['paginas'],
            'bn': row['paginas_bn'],
            'color': row['paginas_color'],
            'total_hojas': row['hojas'],
        })
    return result


def cost_breakdown(general, prices):
    """Billable cost of the aggregate counts, grace applied once"""
    cost = billable_cost(general['total_bn'], general['total_color'], general['total_hojas'], prices)
    return {
        'copias_bn_facturables': cost.billable_bn,
        'copias_color_facturables': cost.billable_color,
        'costo_bn': _money(cost.cost_bn),
        'costo_color': _money(cost.cost_color),
        'costo_hojas': _money(cost.cost_sheets),
        'costo_total': _money(cost.total),
    }


def statistics_report(queryset, prices):
    """Payload of the statistics endpoint: totals, daily/monthly/user series and costs"""
    general = general_statistics(queryset)
    per_day = daily_statistics(queryset)
    per_month = monthly_statistics(queryset)
    sheet_price = prices['precio_hoja']
    ream_price = prices['precio_resma']

    peak = max(per_month, key=lambda month: month['total_hojas']) if per_month else None
    average_monthly_sheets = (
        sum(month['total_hojas'] for month in per_month) / len(per_month) if per_month else 0
    )

    return {
        'general': general,
        'porDia': per_day,
        'porMes': per_month,
        'porUsuario': user_statistics(queryset),
        'costos': cost_breakdown(general, prices),
        'analisis': {
            'ahorroDobleHoja': {
                'copias_doble_cara': general['total_doble_hoja'],
                'hojas_ahorradas': general['hojas_ahorradas'],
                'costo_ahorrado': _money(general['hojas_ahorradas'] * sheet_price),
                'porcentaje_doble_cara': _percent(general['total_doble_hoja'], general['total_copias']),
            },
            'planificacionResmas': {
                'total_hojas_utilizadas': general['total_hojas'],
                'resmas_utilizadas': reams_needed(general['total_hojas']),
                'costo_resmas_estimado': _money(reams_needed(general['total_hojas']) * ream_price),
                'promedio_hojas_por_dia': round(general['total_hojas'] / len(per_day)) if per_day else 0,
            },
            'costoPromedioMensual': _money(Decimal(str(average_monthly_sheets)) * sheet_price),
            'picoOperativo': peak,
        },
    }


def advanced_analysis(queryset, prices):
    """
    Duplex savings, ream planning, averages, monthly trends, operating peak
    and recommendations, priced with the current configuration.
    """
    general = general_statistics(queryset)
    months = monthly_statistics(queryset)
    active_days = queryset.order_by().annotate(dia=TruncDate('registrado_en')).values('dia').distinct().count()
    active_months = len(months)

    sheet_price = prices['precio_hoja']
    ream_price = prices['precio_resma']
    sheets_used = general['total_hojas']
    one_sided_sheets = general['total_copias']
    saved_sheets = general['hojas_ahorradas']
    monthly_sheets = sheets_used / active_months if active_months else 0

    trends = [{
        'mes': month['mes_formato'],
        'hojas': month['total_hojas'],
        'copias': month['copias'],
        'resmas_necesarias': reams_needed(month['total_hojas']),
        'costo_estimado': _money(month['total_hojas'] * sheet_price),
        'porcentaje_doble_cara': _percent(month['doble_hoja'], month['copias']),
    } for month in months]

    peak = None
    for month in trends:
        if month['hojas'] > (peak['hojas'] if peak else 0):
            peak = {
                'mes': month['mes'],
                'hojas': month['hojas'],
                'resmas': month['resmas_necesarias'],
                'costo': month['costo_estimado'],
            }

    annual_reams = math.ceil(monthly_sheets * 12 / SHEETS_PER_REAM) if active_months else 0
    duplex_ratio = general['total_doble_hoja'] / general['total_copias'] if general['total_copias'] else None

    return {
        'ahorroDobleHoja': {
            'copias_doble_cara': general['total_doble_hoja'],
            'hojas_ahorradas': saved_sheets,
            'costo_ahorrado': _money(saved_sheets * sheet_price),
            'porcentaje_doble_cara': _percent(general['total_doble_hoja'], general['total_copias']),
            'ahorro_potencial_anual': _money(saved_sheets * sheet_price * 12),
        },
        'planificacionResmas': {
            'hojas_utilizadas': sheets_used,
            'resmas_utilizadas': reams_needed(sheets_used),
            'costo_resmas': _money(reams_needed(sheets_used) * ream_price),
            'resmas_sin_doble_cara': reams_needed(one_sided_sheets),
            'resmas_ahorradas': reams_needed(one_sided_sheets) - reams_needed(sheets_used),
            'proyeccion_anual_resmas': annual_reams,
            'proyeccion_anual_costo': _money(annual_reams * ream_price),
        },
        'promedios': {
            'hojas_por_dia': round(sheets_used / active_days) if active_days else 0,
            'hojas_por_mes': round(monthly_sheets),
            'costo_promedio_mensual': round(Decimal(str(monthly_sheets)) * sheet_price) if active_months else 0,
            'resmas_promedio_mensual': math.ceil(monthly_sheets / SHEETS_PER_REAM) if active_months else 0,
        },
        'tendenciasMensuales': trends,
        'picoOperativo': peak,
        'recomendaciones': {
            'incrementar_doble_cara': duplex_ratio is not None and duplex_ratio < DUPLEX_TARGET_RATIO,
            'ahorro_potencial_mes': (
                round(Decimal(general['total_una_hoja']) * Decimal('0.5') * sheet_price) if active_months else 0
            ),
            'stock_recomendado': (
                math.ceil(monthly_sheets * STOCK_SAFETY_FACTOR / SHEETS_PER_REAM) if active_months else 0
            ),
        },
    }


def chart_series(report):
    """
    Chart-ready series for the dashboard: daily activity lines, the B/N vs
    colour split and the one-sided vs duplex split.
    """
    per_day = report.get('porDia', [])
    general = report.get('general', {})
    return {
        'actividad': {
            'labels': [day['fecha'][:5].replace('-', '/') for day in per_day],
            'datasets': [
                {'label': 'B/N', 'data': [day['bn'] for day in per_day]},
                {'label': 'Color', 'data': [day['color'] for day in per_day]},
                {'label': 'Hojas', 'data': [day['total_hojas'] for day in per_day]},
            ],
        },
        'distribucion': {
            'labels': ['B/N', 'Color'],
            'data': [general.get('total_bn', 0), general.get('total_color', 0)],
            'porcentajes': [
                _percent(general.get('total_bn', 0), general.get('total_bn', 0) + general.get('total_color', 0)),
                _percent(general.get('total_color', 0), general.get('total_bn', 0) + general.get('total_color', 0)),
            ],
        },
        'caras': {
            'labels': ['Una Cara', 'Doble Cara'],
            'data': [general.get('total_una_hoja', 0), general.get('total_doble_hoja', 0)],
        },
    }
