import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from django.shortcuts import get_object_or_404

from backend.access.permissions import require_permissions
from backend.access.services import create_personal_group, effective_permissions, has_permission, is_owner
from .models import Setting, AuditLog
from .serializers import (
    UserSerializer, UserCreateSerializer,
    SettingSerializer, SettingValueSerializer, AuditLogSerializer
)
from .utils import create_audit_log

User = get_user_model()
logger = logging.getLogger('backend.core')

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 500


def parse_limit_offset(query_params, default_limit=DEFAULT_PAGE_LIMIT):
    """Read ``limit``/``offset`` query params, clamped to sane bounds"""
    try:
        limit = int(query_params.get('limit', default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    try:
        offset = int(query_params.get('offset', 0))
    except (TypeError, ValueError):
        offset = 0
    return max(1, min(limit, MAX_PAGE_LIMIT)), max(0, offset)


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['rol_global'] = user.rol_global
        token['es_propietario'] = user.es_propietario
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    """Custom token refresh view that handles deleted users gracefully"""
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """
    User registration endpoint.
    The new user owns a personal work group from the start.
    """
    serializer = UserCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        user = serializer.save()
        user.rol_global = 'propietario'
        user.save(update_fields=['rol_global'])
        group = create_personal_group(user)

    logger.info(f"Registered user {user.username} with personal group {group.id}")
    token = CustomTokenObtainPairSerializer.get_token(user)
    return Response({
        'user': UserSerializer(user).data,
        'group': {'id': group.id, 'name': group.name},
        'access': str(token.access_token),
        'refresh': str(token),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with resolved permission tokens"""
    user = request.user
    user_data = UserSerializer(user).data
    user_data['is_owner'] = is_owner(user)
    user_data['permissions'] = sorted(effective_permissions(user))
    return Response(user_data)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, require_permissions(POST='configuracion_editar')])
def setting_list_create(request):
    """List settings (optionally by category) or create a new one"""
    if request.method == 'GET':
        settings = Setting.objects.all()
        category = request.query_params.get('category')
        if category:
            settings = settings.filter(category=category)
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)

    serializer = SettingSerializer(data=request.data)
    if serializer.is_valid():
        setting = serializer.save(updated_by=request.user)
        create_audit_log(
            request=request,
            action='setting_change',
            model_name='Setting',
            object_id=setting.id,
            object_name=setting.key,
            changes={'value': setting.value},
            description=f'Setting {setting.key} created',
        )
        return Response(SettingSerializer(setting).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, require_permissions(PUT='configuracion_editar', DELETE='configuracion_editar')])
def setting_detail(request, key):
    """Retrieve, update or delete a setting by key"""
    setting = get_object_or_404(Setting, key=key)

    if request.method == 'GET':
        return Response(SettingSerializer(setting).data)

    if request.method == 'DELETE':
        setting.delete()
        logger.info(f"Setting {key} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = SettingValueSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_value = setting.value
    setting.value = serializer.validated_data['value']
    if 'description' in serializer.validated_data:
        setting.description = serializer.validated_data['description']
    setting.updated_by = request.user
    setting.save()

    create_audit_log(
        request=request,
        action='setting_change',
        model_name='Setting',
        object_id=setting.id,
        object_name=setting.key,
        changes={'value': {'old': old_value, 'new': setting.value}},
        description=f'Setting {setting.key} changed',
    )
    return Response(SettingSerializer(setting).data)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering and limit/offset pagination"""
    queryset = AuditLog.objects.select_related('user')

    # Users without audit access only see their own entries
    if not (has_permission(request.user, 'auditoria_leer') or request.user.is_staff):
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action')
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model')
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from')
    date_to = request.query_params.get('date_to')
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at', '-id')
    limit, offset = parse_limit_offset(request.query_params)
    total = queryset.count()
    serializer = AuditLogSerializer(queryset[offset:offset + limit], many=True)
    return Response({
        'results': serializer.data,
        'total': total,
        'limit': limit,
        'offset': offset,
    })
