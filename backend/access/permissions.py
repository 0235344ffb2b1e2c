from rest_framework.permissions import BasePermission

from .services import has_permission, is_owner


def require_permissions(**method_codes):
    """
    Build a DRF permission class that maps HTTP methods to atomic permission
    codes, e.g. ``require_permissions(GET='fotocopia_leer', POST='fotocopia_escribir')``.
    Methods without a code are allowed for any authenticated user.
    """
    codes = {method.upper(): code for method, code in method_codes.items()}

    class AtomicPermission(BasePermission):
        message = 'You do not have permission to perform this action.'

        def has_permission(self, request, view):
            code = codes.get(request.method)
            if code is None:
                return bool(request.user and request.user.is_authenticated)
            allowed = has_permission(request.user, code)
            if not allowed:
                self.message = f"Missing permission: {code}"
            return allowed

    AtomicPermission.__name__ = 'AtomicPermission_' + '_'.join(sorted(codes.values()))
    return AtomicPermission


class IsOwner(BasePermission):
    """Only owners (global role or group owner)"""
    message = 'Only owners can perform this action.'

    def has_permission(self, request, view):
        return is_owner(request.user)
