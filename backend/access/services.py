"""
Server-side permission checks.

Owners (global ``propietario`` role, ``es_propietario`` flag, or owner of a
work group) bypass every check. Everybody else holds the atomic permissions
granted through the roles of their active memberships plus their active
special grants.
"""
import logging

from . import tokens
from .models import AtomicPermission, Membership, Role, WorkGroup

logger = logging.getLogger('backend.access')

# module -> atomic permission codes it owns
MODULE_PERMISSION_CODES = {
    'fotocopias': ['fotocopia_leer', 'fotocopia_escribir', 'fotocopia_editar', 'fotocopia_eliminar'],
    'trabajadores': ['trabajador_leer', 'trabajador_escribir', 'trabajador_editar', 'trabajador_eliminar'],
    'inventario': ['inventario_leer', 'inventario_escribir', 'inventario_editar', 'inventario_eliminar'],
    'configuracion': ['configuracion_leer', 'configuracion_editar'],
    'auditoria': ['auditoria_leer'],
}

# Code prefixes that count as access to a module's capability report
MODULE_PREFIXES = {
    'fotocopias': ('fotocopia_', 'copias_'),
    'trabajadores': ('trabajador_',),
    'inventario': ('inventario_',),
}

WORKER_ROLE = 'trabajador'


def is_owner(user):
    """True for global owners and for owners of any work group"""
    if not user or not user.is_authenticated:
        return False
    if tokens.is_owner(user):
        return True
    return WorkGroup.objects.filter(owner=user).exists()


def get_permission_codes(user):
    """Active atomic permission codes granted to the user (owners excluded)"""
    if not user or not user.is_authenticated:
        return set()

    role_codes = AtomicPermission.objects.filter(
        is_active=True,
        roles__is_active=True,
        roles__memberships__user=user,
        roles__memberships__status='activo',
    ).values_list('code', flat=True)

    special_codes = AtomicPermission.objects.filter(
        is_active=True,
        special_grants__user=user,
        special_grants__status='activo',
    ).values_list('code', flat=True)

    return set(role_codes) | set(special_codes)


def has_permission(user, code):
    """Check one atomic permission; owners always pass"""
    if not user or not user.is_authenticated or not code:
        return False
    if is_owner(user):
        return True
    return code in get_permission_codes(user)


def module_report(user, module):
    """
    Capability report for one module, as served by ``<module>/permissions/``:
    ``{"hasAccess": bool, "isOwner": bool, "permissions": [codes]}``
    """
    if module not in MODULE_PREFIXES:
        raise ValueError(f"Unknown permission module: {module}")

    owner = is_owner(user)
    if owner:
        codes = list(MODULE_PERMISSION_CODES[module])
    else:
        prefixes = MODULE_PREFIXES[module]
        codes = sorted(c for c in get_permission_codes(user) if c.startswith(prefixes))

    return {
        'hasAccess': owner or bool(codes),
        'isOwner': owner,
        'permissions': codes,
    }


def effective_permissions(user):
    """Flat permission token set for the user, computed once on the server"""
    owner = is_owner(user)
    payload = {
        'rol_global': getattr(user, 'rol_global', None),
        'es_propietario': owner,
    }
    if owner:
        return tokens.resolve_permissions(payload, {})

    reports = {}
    for module in tokens.MODULE_TOKENS:
        try:
            reports[module] = module_report(user, module)
        except Exception as e:
            logger.error(f"Failed to build permission report for {module}: {str(e)}")
            reports[module] = None
    return tokens.resolve_permissions(payload, reports)


def get_owner_role():
    role, _ = Role.objects.get_or_create(
        name=tokens.OWNER_ROLE,
        defaults={'description': 'Group owner with full access'}
    )
    return role


def get_worker_role():
    role, _ = Role.objects.get_or_create(
        name=WORKER_ROLE,
        defaults={'description': 'Group member with granted permissions only'}
    )
    return role


def create_personal_group(user):
    """Create the personal group owned by ``user`` and enrol them as owner"""
    group = WorkGroup.objects.create(
        name=f'Personal-{user.id}',
        description='Personal group',
        owner=user,
        is_personal=True,
    )
    Membership.objects.create(user=user, group=group, role=get_owner_role(), status='activo')
    logger.info(f"Created personal group {group.id} for user {user.id}")
    return group


def get_primary_group(user, create=True):
    """
    Group used when the user records something: first active membership,
    then any membership, then a freshly created personal group.
    """
    membership = Membership.objects.filter(user=user, status='activo').order_by('group_id').first()
    if membership is None:
        membership = Membership.objects.filter(user=user).order_by('group_id').first()
    if membership is not None:
        return membership.group
    if not create:
        return None
    logger.warning(f"User {user.id} has no group, creating a personal one")
    return create_personal_group(user)


def is_group_owner(user, group):
    return group is not None and group.owner_id == getattr(user, 'id', None)


def accessible_group_ids(user):
    """Groups the user owns or actively belongs to"""
    if not user or not user.is_authenticated:
        return set()
    owned = WorkGroup.objects.filter(owner=user).values_list('id', flat=True)
    member = Membership.objects.filter(user=user, status='activo').values_list('group_id', flat=True)
    return set(owned) | set(member)


def resolve_group(user, group_id=None):
    """
    Group a new record should belong to: the requested one when the user can
    access it, otherwise the user's primary group. Returns ``None`` for an
    explicit group the user cannot access.
    """
    if group_id in (None, ''):
        return get_primary_group(user)
    try:
        group_id = int(group_id)
    except (TypeError, ValueError):
        return None
    if group_id not in accessible_group_ids(user):
        return None
    return WorkGroup.objects.get(pk=group_id)
