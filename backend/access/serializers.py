from rest_framework import serializers
from .models import SystemModule, AtomicPermission, Role, WorkGroup, Membership


class AtomicPermissionSerializer(serializers.ModelSerializer):
    module_code = serializers.CharField(source='module.code', read_only=True, default=None)

    class Meta:
        model = AtomicPermission
        fields = ['id', 'code', 'name', 'description', 'module_code', 'is_active']


class SystemModuleSerializer(serializers.ModelSerializer):
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = SystemModule
        fields = ['id', 'code', 'name', 'description', 'icon', 'order', 'permissions']

    def get_permissions(self, obj):
        active = obj.permissions.filter(is_active=True)
        return AtomicPermissionSerializer(active, many=True).data


class RoleSerializer(serializers.ModelSerializer):
    permissions = serializers.SlugRelatedField(slug_field='code', many=True, read_only=True)

    class Meta:
        model = Role
        fields = ['id', 'name', 'description', 'is_active', 'permissions']


class RolePermissionsUpdateSerializer(serializers.Serializer):
    permissions = serializers.ListField(child=serializers.CharField(max_length=100), allow_empty=True)

    def validate_permissions(self, value):
        codes = set(value)
        known = set(AtomicPermission.objects.filter(code__in=codes, is_active=True).values_list('code', flat=True))
        unknown = sorted(codes - known)
        if unknown:
            raise serializers.ValidationError(f"Unknown permissions: {', '.join(unknown)}")
        return sorted(codes)


class WorkGroupSerializer(serializers.ModelSerializer):
    owner_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = WorkGroup
        fields = ['id', 'name', 'description', 'owner_id', 'is_personal', 'created_at']


class MembershipSerializer(serializers.ModelSerializer):
    group_name = serializers.CharField(source='group.name', read_only=True)
    role_name = serializers.CharField(source='role.name', read_only=True)

    class Meta:
        model = Membership
        fields = ['id', 'user', 'group', 'group_name', 'role', 'role_name', 'status', 'joined_at']
