import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError, transaction
from django.db.models import Count
from django.shortcuts import get_object_or_404

from backend.access.permissions import require_permissions
from backend.access.services import accessible_group_ids, module_report, resolve_group
from backend.core.utils import create_audit_log, diff_changes
from .filters import InventoryItemFilter
from .models import InventoryCategory, InventoryItem
from .serializers import InventoryCategorySerializer, InventoryItemSerializer, SectionUpdateSerializer

logger = logging.getLogger('backend.inventory')


def scoped_items(request):
    return InventoryItem.objects.select_related('categoria', 'trabajador').filter(
        grupo_id__in=accessible_group_ids(request.user)
    )


def scoped_categories(request):
    return InventoryCategory.objects.filter(grupo_id__in=accessible_group_ids(request.user))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, require_permissions(GET='inventario_leer', POST='inventario_escribir')])
def item_list_create(request):
    """
    GET: list items (filters: search, categoria_id, trabajador_id, grupo_id, estado, seccion)
    POST: create an item in the requested or primary group
    """
    if request.method == 'GET':
        queryset = InventoryItemFilter(request.query_params, queryset=scoped_items(request)).qs
        return Response(InventoryItemSerializer(queryset, many=True).data)

    group = resolve_group(request.user, request.data.get('grupo_id'))
    if group is None:
        return Response({'error': 'You do not have access to this group'}, status=status.HTTP_403_FORBIDDEN)

    serializer = InventoryItemSerializer(data=request.data, context={'grupo': group})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic():
            item = serializer.save(grupo=group)
    except IntegrityError:
        return Response({'codigo': ['Item with this code already exists']}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='create',
        model_name='InventoryItem',
        object_id=item.id,
        object_name=str(item),
        changes=InventoryItemSerializer(item).data,
    )
    logger.info(f"User {request.user.username} created inventory item {item.codigo}")
    return Response(InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, require_permissions(
    GET='inventario_leer', PUT='inventario_editar', DELETE='inventario_eliminar'
)])
def item_detail(request, pk):
    item = get_object_or_404(scoped_items(request), pk=pk)

    if request.method == 'GET':
        return Response(InventoryItemSerializer(item).data)

    if request.method == 'DELETE':
        create_audit_log(
            request=request,
            action='delete',
            model_name='InventoryItem',
            object_id=item.id,
            object_name=str(item),
        )
        item.delete()
        return Response({'message': 'Item deleted successfully'})

    before = InventoryItemSerializer(item).data
    serializer = InventoryItemSerializer(item, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        with transaction.atomic():
            item = serializer.save()
    except IntegrityError:
        return Response({'codigo': ['Item with this code already exists']}, status=status.HTTP_400_BAD_REQUEST)
    after = InventoryItemSerializer(item).data

    changes = diff_changes(before, after)
    action = 'status_change' if set(changes) == {'estado'} else 'update'
    create_audit_log(
        request=request,
        action=action,
        model_name='InventoryItem',
        object_id=item.id,
        object_name=str(item),
        changes=changes,
    )
    return Response(after)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, require_permissions(PUT='inventario_editar')])
def item_section(request, pk):
    """Move an item to another section (and optionally position)"""
    item = get_object_or_404(scoped_items(request), pk=pk)
    serializer = SectionUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_section = item.seccion
    item.seccion = serializer.validated_data['seccion']
    if 'posicion' in serializer.validated_data:
        item.posicion = serializer.validated_data['posicion']
    item.save(update_fields=['seccion', 'posicion', 'updated_at'])

    create_audit_log(
        request=request,
        action='update',
        model_name='InventoryItem',
        object_id=item.id,
        object_name=str(item),
        changes={'seccion': {'old': old_section, 'new': item.seccion}},
    )
    return Response(InventoryItemSerializer(item).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, require_permissions(GET='inventario_leer')])
def section_list(request):
    """Distinct section names in use"""
    sections = (scoped_items(request).exclude(seccion='')
                .order_by('seccion').values_list('seccion', flat=True).distinct())
    return Response(list(sections))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, require_permissions(GET='inventario_leer', POST='inventario_escribir')])
def category_list_create(request):
    if request.method == 'GET':
        categories = scoped_categories(request).annotate(item_count=Count('items'))
        return Response(InventoryCategorySerializer(categories, many=True).data)

    group = resolve_group(request.user, request.data.get('grupo_id'))
    if group is None:
        return Response({'error': 'You do not have access to this group'}, status=status.HTTP_403_FORBIDDEN)

    serializer = InventoryCategorySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if InventoryCategory.objects.filter(grupo=group, nombre__iexact=serializer.validated_data['nombre']).exists():
        return Response({'error': 'Category already exists'}, status=status.HTTP_400_BAD_REQUEST)

    category = serializer.save(grupo=group)
    return Response(InventoryCategorySerializer(category).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, require_permissions(
    GET='inventario_leer', PUT='inventario_editar', DELETE='inventario_eliminar'
)])
def category_detail(request, pk):
    category = get_object_or_404(scoped_categories(request), pk=pk)

    if request.method == 'GET':
        return Response(InventoryCategorySerializer(category).data)

    if request.method == 'DELETE':
        in_use = list(category.items.values('id', 'codigo'))
        if in_use:
            return Response({
                'error': 'Category is assigned to existing items',
                'items': in_use,
            }, status=status.HTTP_400_BAD_REQUEST)
        category.delete()
        return Response({'message': 'Category deleted successfully'})

    serializer = InventoryCategorySerializer(category, data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    duplicate = (InventoryCategory.objects.filter(grupo=category.grupo, nombre__iexact=serializer.validated_data['nombre'])
                 .exclude(pk=category.pk))
    if duplicate.exists():
        return Response({'error': 'Category already exists'}, status=status.HTTP_400_BAD_REQUEST)
    category = serializer.save()
    return Response(InventoryCategorySerializer(category).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_permissions(request):
    """Capability report for the inventory module"""
    return Response(module_report(request.user, 'inventario'))
