import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404

from backend.access.permissions import require_permissions
from backend.access.services import accessible_group_ids, module_report, resolve_group
from backend.core.utils import create_audit_log, diff_changes
from .models import Department, Occupation, Worker
from .serializers import DepartmentSerializer, OccupationSerializer, WorkerSerializer, WorkerStatusSerializer

logger = logging.getLogger('backend.workers')


def scoped_workers(request):
    """Workers of the groups the user can access, optionally narrowed by grupo_id"""
    queryset = Worker.objects.select_related('departamento').filter(grupo_id__in=accessible_group_ids(request.user))
    grupo_id = request.query_params.get('grupo_id')
    if grupo_id:
        queryset = queryset.filter(grupo_id=grupo_id)
    return queryset


def get_worker_or_404(request, pk):
    return get_object_or_404(scoped_workers(request), pk=pk)


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated, require_permissions(
    GET='trabajador_leer', POST='trabajador_escribir', DELETE='trabajador_eliminar'
)])
def worker_list_create(request):
    """
    GET: list workers (filters: grupo_id, activo, search)
    POST: create a worker in the requested or primary group
    DELETE: bulk delete, body {"ids": [...]}
    """
    if request.method == 'GET':
        queryset = scoped_workers(request)
        activo = request.query_params.get('activo')
        if activo is not None:
            queryset = queryset.filter(activo=activo.lower() in ('1', 'true', 'yes'))
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(nombres__icontains=search) |
                Q(apellidos__icontains=search) |
                Q(rut__icontains=search) |
                Q(email__icontains=search)
            )
        return Response(WorkerSerializer(queryset, many=True).data)

    if request.method == 'DELETE':
        ids = request.data.get('ids') if hasattr(request.data, 'get') else None
        if not isinstance(ids, list) or not ids:
            return Response({'error': 'ids must be a non-empty list'}, status=status.HTTP_400_BAD_REQUEST)
        queryset = scoped_workers(request).filter(pk__in=ids)
        deleted_ids = list(queryset.values_list('id', flat=True))
        queryset.delete()
        create_audit_log(
            request=request,
            action='delete',
            model_name='Worker',
            object_id=','.join(str(i) for i in deleted_ids)[:100],
            changes={'ids': deleted_ids},
            description=f'Bulk deleted {len(deleted_ids)} workers',
        )
        logger.info(f"User {request.user.username} bulk deleted workers {deleted_ids}")
        return Response({'deleted': len(deleted_ids), 'ids': deleted_ids})

    group = resolve_group(request.user, request.data.get('grupo_id'))
    if group is None:
        return Response({'error': 'You do not have access to this group'}, status=status.HTTP_403_FORBIDDEN)

    serializer = WorkerSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        worker = serializer.save(grupo=group)

    create_audit_log(
        request=request,
        action='create',
        model_name='Worker',
        object_id=worker.id,
        object_name=worker.full_name,
        changes=WorkerSerializer(worker).data,
    )
    logger.info(f"User {request.user.username} created worker {worker.id} in group {group.id}")
    return Response(WorkerSerializer(worker).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, require_permissions(
    GET='trabajador_leer', PUT='trabajador_editar', DELETE='trabajador_eliminar'
)])
def worker_detail(request, pk):
    worker = get_worker_or_404(request, pk)

    if request.method == 'GET':
        return Response(WorkerSerializer(worker).data)

    if request.method == 'DELETE':
        name = worker.full_name
        create_audit_log(
            request=request,
            action='delete',
            model_name='Worker',
            object_id=worker.id,
            object_name=name,
        )
        worker.delete()
        return Response({'message': 'Worker deleted successfully'})

    before = WorkerSerializer(worker).data
    serializer = WorkerSerializer(worker, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    with transaction.atomic():
        worker = serializer.save()
    after = WorkerSerializer(worker).data

    changes = diff_changes(before, after)
    create_audit_log(
        request=request,
        action='update',
        model_name='Worker',
        object_id=worker.id,
        object_name=worker.full_name,
        changes=changes,
    )
    return Response(after)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, require_permissions(PATCH='trabajador_editar')])
def worker_status(request, pk):
    """Toggle a worker's active flag"""
    worker = get_worker_or_404(request, pk)
    serializer = WorkerStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = worker.activo
    worker.activo = serializer.validated_data['activo']
    worker.save(update_fields=['activo', 'updated_at'])

    create_audit_log(
        request=request,
        action='status_change',
        model_name='Worker',
        object_id=worker.id,
        object_name=worker.full_name,
        changes={'activo': {'old': old_status, 'new': worker.activo}},
    )
    return Response(WorkerSerializer(worker).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def worker_permissions(request):
    """Capability report for the workers module"""
    return Response(module_report(request.user, 'trabajadores'))


def _group_filter(request):
    return Q(grupo_id__in=accessible_group_ids(request.user)) | Q(grupo__isnull=True)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, require_permissions(GET='trabajador_leer', POST='trabajador_escribir')])
def occupation_list_create(request):
    """
    GET: sorted names from the default list, the group's custom occupations
    and the occupations already assigned to workers
    POST: add a custom occupation {"nombre": ...}
    """
    if request.method == 'GET':
        names = set(Occupation.DEFAULT_OCCUPATIONS)
        names.update(Occupation.objects.filter(_group_filter(request)).values_list('nombre', flat=True))
        names.update(
            scoped_workers(request).exclude(ocupacion='').values_list('ocupacion', flat=True)
        )
        return Response(sorted(names, key=str.lower))

    serializer = OccupationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    nombre = serializer.validated_data['nombre']

    group = resolve_group(request.user, request.data.get('grupo_id'))
    if group is None:
        return Response({'error': 'You do not have access to this group'}, status=status.HTTP_403_FORBIDDEN)

    exists = (nombre.lower() in {name.lower() for name in Occupation.DEFAULT_OCCUPATIONS} or
              Occupation.objects.filter(grupo=group, nombre__iexact=nombre).exists())
    if exists:
        return Response({'error': 'Occupation already exists'}, status=status.HTTP_400_BAD_REQUEST)

    occupation = serializer.save(grupo=group)
    logger.info(f"User {request.user.username} added occupation '{nombre}' to group {group.id}")
    return Response(OccupationSerializer(occupation).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, require_permissions(PUT='trabajador_editar', DELETE='trabajador_eliminar')])
def occupation_detail(request, pk):
    occupation = get_object_or_404(Occupation.objects.filter(_group_filter(request)), pk=pk)

    if request.method == 'DELETE':
        occupation.delete()
        return Response({'message': 'Occupation deleted successfully'})

    old_name = occupation.nombre
    serializer = OccupationSerializer(occupation, data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    new_name = serializer.validated_data['nombre']
    duplicate = Occupation.objects.filter(grupo=occupation.grupo, nombre__iexact=new_name).exclude(pk=occupation.pk)
    if duplicate.exists():
        return Response({'error': 'Occupation already exists'}, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        occupation = serializer.save()
        # workers keep the occupation as text
        Worker.objects.filter(grupo=occupation.grupo, ocupacion=old_name).update(ocupacion=new_name)
    return Response(OccupationSerializer(occupation).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, require_permissions(GET='trabajador_leer', POST='trabajador_escribir')])
def department_list_create(request):
    if request.method == 'GET':
        departments = Department.objects.filter(_group_filter(request))
        return Response([{'id': d.id, 'nombre': d.nombre} for d in departments])

    serializer = DepartmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    group = resolve_group(request.user, request.data.get('grupo_id'))
    if group is None:
        return Response({'error': 'You do not have access to this group'}, status=status.HTTP_403_FORBIDDEN)

    if Department.objects.filter(grupo=group, nombre__iexact=serializer.validated_data['nombre']).exists():
        return Response({'error': 'Department already exists'}, status=status.HTTP_400_BAD_REQUEST)

    department = serializer.save(grupo=group)
    return Response(DepartmentSerializer(department).data, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, require_permissions(PUT='trabajador_editar', DELETE='trabajador_eliminar')])
def department_detail(request, pk):
    department = get_object_or_404(Department.objects.filter(_group_filter(request)), pk=pk)

    if request.method == 'DELETE':
        # workers fall back to no department
        department.delete()
        return Response({'message': 'Department deleted successfully'})

    serializer = DepartmentSerializer(department, data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        with transaction.atomic():
            department = serializer.save()
    except IntegrityError:
        return Response({'error': 'Department already exists'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(DepartmentSerializer(department).data)
