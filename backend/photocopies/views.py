import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from django_filters.utils import translate_validation

from backend.access.permissions import require_permissions
from backend.access.services import get_primary_group, is_group_owner, module_report
from backend.core.cache_utils import cached_query, PAPER_TYPES_CACHE_TTL
from backend.core.models import AuditLog
from backend.core.utils import create_audit_log, diff_changes
from backend.core.views import parse_limit_offset
from backend.reports.analytics import cost_breakdown, general_statistics
from .filters import PhotocopyRecordFilter
from .models import PaperType, PhotocopyRecord
from .prices import get_price_config
from .serializers import PaperTypeSerializer, PhotocopyRecordSerializer

logger = logging.getLogger('backend.photocopies')

AUDIT_MODEL_NAME = 'PhotocopyRecord'
AUDITED_FIELDS = ('cantidad', 'multiplicador', 'tipo', 'doble_hoja', 'tipo_hoja_id', 'comentario', 'total_hojas')
AUDIT_PAGE_LIMIT = 20


def filtered_records(query_params):
    """Records matching the query filters; malformed values raise a 400 ValidationError"""
    queryset = PhotocopyRecord.objects.select_related('usuario', 'grupo', 'tipo_hoja')
    filterset = PhotocopyRecordFilter(query_params, queryset=queryset)
    if not filterset.is_valid():
        raise translate_validation(filterset.errors)
    return filterset.qs


@cached_query(cache_ttl=PAPER_TYPES_CACHE_TTL, key_prefix='paper_types')
def get_active_paper_types():
    return list(PaperTypeSerializer(PaperType.objects.filter(is_active=True), many=True).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, require_permissions(GET='fotocopia_leer', POST='fotocopia_escribir')])
def photocopy_list_create(request):
    """List photocopy records (filters: desde, hasta, usuario_id) or register a new one"""
    if request.method == 'GET':
        queryset = filtered_records(request.query_params)
        serializer = PhotocopyRecordSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = PhotocopyRecordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        group = get_primary_group(request.user)
        record = serializer.save(usuario=request.user, grupo=group)

    create_audit_log(
        request=request,
        action='create',
        model_name=AUDIT_MODEL_NAME,
        object_id=record.id,
        object_name=record.describe(),
        changes=PhotocopyRecordSerializer(record).data,
        description=f'Created photocopy record: {record.describe()}',
    )
    logger.info(f"User {request.user.username} registered photocopy record {record.id} ({record.total_hojas} sheets)")
    return Response(PhotocopyRecordSerializer(record).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, require_permissions(
    GET='fotocopia_leer', PUT='fotocopia_editar', DELETE='fotocopia_eliminar'
)])
def photocopy_detail(request, pk):
    """
    Retrieve, update or delete a photocopy record.
    Only the creator or the owner of the record's group may change it.
    """
    record = get_object_or_404(PhotocopyRecord.objects.select_related('usuario', 'grupo', 'tipo_hoja'), pk=pk)

    if request.method == 'GET':
        return Response(PhotocopyRecordSerializer(record).data)

    if record.usuario_id != request.user.id and not is_group_owner(request.user, record.grupo):
        logger.warning(f"User {request.user.username} denied {request.method} on photocopy record {record.id}")
        return Response({'error': 'Only the creator or the group owner can modify this record'},
                        status=status.HTTP_403_FORBIDDEN)

    if request.method == 'DELETE':
        description = record.describe()
        record_id = record.id
        create_audit_log(
            request=request,
            action='delete',
            model_name=AUDIT_MODEL_NAME,
            object_id=record_id,
            object_name=description,
            description=f'Deleted photocopy record: {description}',
        )
        record.delete()
        logger.info(f"User {request.user.username} deleted photocopy record {record_id}")
        return Response({'message': 'Record deleted successfully'})

    before = PhotocopyRecordSerializer(record).data
    serializer = PhotocopyRecordSerializer(record, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    # creator, group and timestamp are kept
    record = serializer.save()
    after = PhotocopyRecordSerializer(record).data

    changes = diff_changes(before, after, fields=AUDITED_FIELDS)
    create_audit_log(
        request=request,
        action='update',
        model_name=AUDIT_MODEL_NAME,
        object_id=record.id,
        object_name=record.describe(),
        changes=changes,
        description=f'Updated photocopy record: {record.describe()}',
    )
    return Response(after)


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='fotocopia_leer')])
def photocopy_users(request):
    """Users that have registered at least one photocopy record"""
    rows = (PhotocopyRecord.objects.order_by()
            .values('usuario_id', 'usuario__username', 'usuario__first_name', 'usuario__last_name')
            .distinct())
    users = []
    for row in rows:
        full_name = f"{row['usuario__first_name'] or ''} {row['usuario__last_name'] or ''}".strip()
        users.append({
            'usuario_id': row['usuario_id'],
            'usuario_nombre': full_name or row['usuario__username'],
        })
    users.sort(key=lambda user: user['usuario_nombre'].lower())
    return Response(users)


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='fotocopia_leer')])
def photocopy_stats(request):
    """Totals and billable cost for the filtered records"""
    general = general_statistics(filtered_records(request.query_params))
    return Response({
        **general,
        'costos': cost_breakdown(general, get_price_config()),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='fotocopia_leer')])
def photocopy_audit(request):
    """Audit trail of photocopy records, paginated with limit/offset"""
    limit, offset = parse_limit_offset(request.query_params, default_limit=AUDIT_PAGE_LIMIT)
    queryset = AuditLog.objects.filter(model_name=AUDIT_MODEL_NAME).select_related('user').order_by('-created_at', '-id')
    total = queryset.count()
    records = [{
        'id': entry.id,
        'usuario_id': entry.user_id,
        'usuario_nombre': entry.user.display_name if entry.user else None,
        'accion': entry.action,
        'registro_id': entry.object_id,
        'descripcion': entry.description,
        'fecha': entry.created_at,
    } for entry in queryset[offset:offset + limit]]
    return Response({
        'records': records,
        'total': total,
        'limit': limit,
        'offset': offset,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def photocopy_permissions(request):
    """Capability report for the photocopy module"""
    return Response(module_report(request.user, 'fotocopias'))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def paper_type_list(request):
    """Active paper types"""
    return Response(get_active_paper_types())
