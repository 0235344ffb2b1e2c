import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import HttpResponse

from backend.access.permissions import require_permissions
from backend.core.models import AuditLog
from backend.core.utils import create_audit_log
from backend.photocopies.prices import get_price_config, save_price_config, serialize_prices
from backend.photocopies.serializers import PriceConfigSerializer
from backend.photocopies.views import AUDIT_MODEL_NAME, filtered_records
from .analytics import advanced_analysis, chart_series, statistics_report
from .exports import (
    EXCEL_CONTENT_TYPE, PDF_CONTENT_TYPE, build_excel_report, build_pdf_report, export_filename,
)

logger = logging.getLogger('backend.reports')

ACTIVITY_DEFAULT_LIMIT = 50
ACTIVITY_MAX_LIMIT = 500


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='fotocopia_leer')])
def photocopy_statistics(request):
    """
    Dashboard statistics (filters: desde, hasta, usuario_id): totals, daily,
    monthly and per-user series, costs, efficiency and chart series.
    """
    prices = get_price_config()
    report = statistics_report(filtered_records(request.query_params), prices)
    report['graficos'] = chart_series(report)
    report['precios'] = serialize_prices(prices)
    return Response(report)


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='fotocopia_leer')])
def photocopy_analysis(request):
    """Duplex savings, ream planning, trends and recommendations"""
    analysis = advanced_analysis(filtered_records(request.query_params), get_price_config())
    return Response(analysis)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, require_permissions(POST='configuracion_editar')])
def photocopy_prices(request):
    """GET: current prices (defaults for unset keys). POST: update any subset of them."""
    if request.method == 'GET':
        return Response(serialize_prices(get_price_config()))

    serializer = PriceConfigSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    before = serialize_prices(get_price_config())
    written = save_price_config(serializer.validated_data, user=request.user)
    after = serialize_prices(get_price_config())

    create_audit_log(
        request=request,
        action='price_change',
        model_name='Setting',
        object_id='precios',
        object_name='Price configuration',
        changes={key: {'old': before[key], 'new': after[key]} for key in written},
        description=f"Updated prices: {', '.join(written)}",
    )
    return Response({
        'message': 'Price configuration updated successfully',
        'precios': after,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='auditoria_leer')])
def photocopy_activity(request):
    """Most recent photocopy audit entries (query param: limite, default 50)"""
    try:
        limit = int(request.query_params.get('limite', ACTIVITY_DEFAULT_LIMIT))
    except (TypeError, ValueError):
        return Response({'error': 'limite must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
    limit = max(1, min(limit, ACTIVITY_MAX_LIMIT))

    entries = (AuditLog.objects.filter(model_name=AUDIT_MODEL_NAME)
               .select_related('user').order_by('-created_at', '-id')[:limit])
    return Response([{
        'id': entry.id,
        'accion': entry.action,
        'tabla_afectada': 'fotocopias',
        'registro_id': entry.object_id,
        'descripcion': entry.description,
        'fecha': entry.created_at.strftime('%Y-%m-%d %H:%M:%S'),
        'usuario_id': entry.user_id,
        'usuario_nombre': entry.user.display_name if entry.user else None,
    } for entry in entries])


def _export_payload(request):
    prices = get_price_config()
    queryset = filtered_records(request.query_params)
    statistics = statistics_report(queryset, prices)
    analysis = advanced_analysis(queryset, prices)
    return statistics, analysis, prices


def _attachment(content, content_type, filename):
    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def _log_export(request, fmt, filename):
    create_audit_log(
        request=request,
        action='export',
        model_name=AUDIT_MODEL_NAME,
        object_id=fmt,
        object_name=filename,
        changes={key: request.query_params.get(key) for key in ('desde', 'hasta', 'usuario_id') if key in request.query_params},
        description=f'Exported photocopy report as {fmt.upper()}',
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='fotocopia_leer')])
def export_pdf(request):
    """Download the report as PDF (same filters as the statistics endpoint)"""
    statistics, analysis, prices = _export_payload(request)
    try:
        content = build_pdf_report(
            statistics, analysis, prices,
            request.query_params.get('desde'), request.query_params.get('hasta'),
        )
    except Exception as e:
        logger.exception(f"PDF export failed: {str(e)}")
        return Response({'error': 'Failed to generate PDF report'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    filename = export_filename('pdf')
    _log_export(request, 'pdf', filename)
    return _attachment(content, PDF_CONTENT_TYPE, filename)


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='fotocopia_leer')])
def export_excel(request):
    """Download the report as an Excel workbook"""
    statistics, analysis, prices = _export_payload(request)
    try:
        content = build_excel_report(
            statistics, analysis, prices,
            request.query_params.get('desde'), request.query_params.get('hasta'),
        )
    except Exception as e:
        logger.exception(f"Excel export failed: {str(e)}")
        return Response({'error': 'Failed to generate Excel report'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    filename = export_filename('xlsx')
    _log_export(request, 'excel', filename)
    return _attachment(content, EXCEL_CONTENT_TYPE, filename)
