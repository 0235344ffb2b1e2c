from django.conf import settings
from django.db import models


class SystemModule(models.Model):
    """Application modules that group atomic permissions"""
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=50, blank=True)
    order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'modulos_sistema'
        ordering = ['order', 'code']


class AtomicPermission(models.Model):
    """A single capability code, e.g. fotocopia_escribir"""
    module = models.ForeignKey(SystemModule, on_delete=models.CASCADE, related_name='permissions', null=True, blank=True)
    code = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=150, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    def __str__(self):
        return self.code

    class Meta:
        db_table = 'permisos_atomicos'
        ordering = ['code']


class Role(models.Model):
    """Named bundle of atomic permissions"""
    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    permissions = models.ManyToManyField(AtomicPermission, through='RolePermission', related_name='roles')

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'roles'


class RolePermission(models.Model):
    role = models.ForeignKey(Role, on_delete=models.CASCADE)
    permission = models.ForeignKey(AtomicPermission, on_delete=models.CASCADE)
    assigned_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'roles_permisos'
        unique_together = [['role', 'permission']]


class WorkGroup(models.Model):
    """Organisation unit; its owner bypasses every permission check"""
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='owned_groups')
    is_personal = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'grupos'


class Membership(models.Model):
    """User membership in a group with a role"""
    STATUS_CHOICES = [
        ('activo', 'Active'),
        ('inactivo', 'Inactive'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='memberships')
    group = models.ForeignKey(WorkGroup, on_delete=models.CASCADE, related_name='memberships')
    role = models.ForeignKey(Role, on_delete=models.PROTECT, related_name='memberships')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='activo')
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'usuarios_grupos'
        unique_together = [['user', 'group']]
        ordering = ['group_id']


class SpecialPermission(models.Model):
    """Permission granted directly to a user, outside any role"""
    STATUS_CHOICES = Membership.STATUS_CHOICES

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='special_permissions')
    permission = models.ForeignKey(AtomicPermission, on_delete=models.CASCADE, related_name='special_grants')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='activo')
    granted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'usuarios_permisos_especiales'
        unique_together = [['user', 'permission']]
