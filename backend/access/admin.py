from django.contrib import admin
from .models import SystemModule, AtomicPermission, Role, RolePermission, WorkGroup, Membership, SpecialPermission


@admin.register(SystemModule)
class SystemModuleAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'order', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name']
    ordering = ['order']


@admin.register(AtomicPermission)
class AtomicPermissionAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'module', 'is_active']
    list_filter = ['module', 'is_active']
    search_fields = ['code', 'name', 'description']
    ordering = ['code']


class RolePermissionInline(admin.TabularInline):
    model = RolePermission
    extra = 1
    readonly_fields = ['assigned_by', 'assigned_at']


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name']
    inlines = [RolePermissionInline]


class MembershipInline(admin.TabularInline):
    model = Membership
    extra = 1


@admin.register(WorkGroup)
class WorkGroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'is_personal', 'created_at']
    list_filter = ['is_personal', 'created_at']
    search_fields = ['name', 'owner__username', 'owner__email']
    inlines = [MembershipInline]


@admin.register(SpecialPermission)
class SpecialPermissionAdmin(admin.ModelAdmin):
    list_display = ['user', 'permission', 'status', 'granted_at']
    list_filter = ['status']
    search_fields = ['user__username', 'permission__code']
