"""
Permission token resolution.

A user's effective permissions are a flat set of string tokens consumed by
route guards and UI gating. Owners get the fixed full set; everybody else
gets the tokens derived from the per-module capability reports
(``{"hasAccess": bool, "permissions": [codes]}``) plus the always-on tokens.

This module is shared by the API (``GET auth/permissions/``) and by
``backend.client.permissions`` so the rule lives in one place.
"""
import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)

OWNER_ROLE = 'propietario'

OWNER_PERMISSIONS = (
    'trabajadores', 'trabajadores_crear', 'trabajadores_editar', 'trabajadores_eliminar',
    'inventario', 'inventario_crear', 'inventario_editar', 'inventario_eliminar',
    'fotocopias', 'fotocopias_crear', 'fotocopias_editar', 'fotocopias_eliminar',
    'admin', 'configuracion', 'graficos', 'ubicaciones',
)

# Granted to every authenticated user until these modules get their own checks
ALWAYS_ON_PERMISSIONS = ('graficos', 'ubicaciones')

# module -> (base token, {capability code: token})
MODULE_TOKENS = {
    'fotocopias': ('fotocopias', {
        'fotocopia_escribir': 'fotocopias_crear',
        'fotocopia_editar': 'fotocopias_editar',
        'fotocopia_eliminar': 'fotocopias_eliminar',
    }),
    'trabajadores': ('trabajadores', {
        'trabajador_escribir': 'trabajadores_crear',
        'trabajador_editar': 'trabajadores_editar',
        'trabajador_eliminar': 'trabajadores_eliminar',
    }),
    'inventario': ('inventario', {
        'inventario_escribir': 'inventario_crear',
        'inventario_editar': 'inventario_editar',
        'inventario_eliminar': 'inventario_eliminar',
    }),
}


def _user_value(user, name):
    if isinstance(user, Mapping):
        return user.get(name)
    return getattr(user, name, None)


def is_owner(user):
    """
    Owner predicate: ``rol_global`` or ``rol`` equal to ``propietario``,
    or a truthy ``es_propietario`` flag (``True`` or ``1``).
    Accepts a mapping (API payload) or an object (model instance).
    """
    if not user:
        return False
    return (
        _user_value(user, 'rol_global') == OWNER_ROLE
        or _user_value(user, 'rol') == OWNER_ROLE
        or _user_value(user, 'es_propietario') in (True, 1)
    )


def module_tokens(module, response):
    """
    Tokens contributed by one module capability report.

    Returns an empty list when the report denies access. Raises ``ValueError``
    for an unknown module or a report that is not a mapping.
    """
    if module not in MODULE_TOKENS:
        raise ValueError(f"Unknown permission module: {module}")
    if not isinstance(response, Mapping):
        raise ValueError(f"Malformed permission response for {module}: {response!r}")

    if not response.get('hasAccess'):
        return []

    base_token, capability_map = MODULE_TOKENS[module]
    capabilities = response.get('permissions')
    if not isinstance(capabilities, (list, tuple)):
        capabilities = []

    tokens = [base_token]
    for code, token in capability_map.items():
        if code in capabilities:
            tokens.append(token)
    return tokens


def resolve_permissions(user, module_responses):
    """
    Merge the owner override with the module capability reports.

    ``module_responses`` maps module name -> report (or ``None`` when the
    request for that module failed). Failed or malformed reports are logged
    and skipped without affecting the other modules.
    """
    if is_owner(user):
        return set(OWNER_PERMISSIONS)

    permissions = set()
    for module, response in (module_responses or {}).items():
        if response is None:
            logger.warning(f"Permission report for module '{module}' unavailable, skipping")
            continue
        try:
            permissions.update(module_tokens(module, response))
        except ValueError as e:
            logger.warning(f"Skipping permission report: {str(e)}")

    permissions.update(ALWAYS_ON_PERMISSIONS)
    return permissions
