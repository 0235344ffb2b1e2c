import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404

from backend.core.utils import create_audit_log
from .models import SystemModule, AtomicPermission, Role, RolePermission, WorkGroup, Membership
from .permissions import IsOwner
from .serializers import (
    SystemModuleSerializer, RoleSerializer, RolePermissionsUpdateSerializer,
    WorkGroupSerializer, MembershipSerializer
)
from .services import effective_permissions, is_owner

logger = logging.getLogger('backend.access')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_permissions(request):
    """Resolved permission tokens for the current user"""
    permissions = effective_permissions(request.user)
    return Response({
        'isOwner': is_owner(request.user),
        'permissions': sorted(permissions),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def module_list(request):
    """Active system modules with their atomic permissions"""
    modules = SystemModule.objects.filter(is_active=True).prefetch_related('permissions')
    serializer = SystemModuleSerializer(modules, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def role_list(request):
    """Roles available for assignment"""
    roles = Role.objects.filter(is_active=True).prefetch_related('permissions').order_by('name')
    serializer = RoleSerializer(roles, many=True)
    return Response(serializer.data)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsOwner])
def role_permissions(request, pk):
    """Get or replace the atomic permissions of a role"""
    role = get_object_or_404(Role, pk=pk)

    if request.method == 'GET':
        codes = role.permissions.order_by('code').values_list('code', flat=True)
        return Response({'role': role.name, 'permissions': list(codes)})

    serializer = RolePermissionsUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    codes = serializer.validated_data['permissions']
    with transaction.atomic():
        RolePermission.objects.filter(role=role).delete()
        RolePermission.objects.bulk_create([
            RolePermission(role=role, permission=permission, assigned_by=request.user)
            for permission in AtomicPermission.objects.filter(code__in=codes)
        ])

    create_audit_log(
        request=request,
        action='update',
        model_name='Role',
        object_id=role.id,
        object_name=role.name,
        changes={'permissions': codes},
    )
    logger.info(f"User {request.user.username} set {len(codes)} permissions on role {role.name}")
    return Response({
        'message': 'Role permissions updated',
        'updated_permissions': len(codes),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_groups(request):
    """Groups the current user owns or belongs to"""
    memberships = Membership.objects.filter(user=request.user).select_related('group', 'role')
    owned = WorkGroup.objects.filter(owner=request.user)
    return Response({
        'owned': WorkGroupSerializer(owned, many=True).data,
        'memberships': MembershipSerializer(memberships, many=True).data,
    })
