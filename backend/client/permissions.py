"""
Client-side permission state.

Owners resolve immediately; everybody else gets their tokens from the three
module capability reports, requested concurrently.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

import requests

from backend.access.tokens import is_owner, resolve_permissions
from .api import ApiError

logger = logging.getLogger(__name__)

MODULE_ENDPOINTS = {
    'fotocopias': 'photocopies/permissions/',
    'trabajadores': 'workers/permissions/',
    'inventario': 'inventory/permissions/',
}


class PermissionState:

    def __init__(self, session):
        self.session = session
        self.user = None
        self.permissions = set()
        self.loading = True

    def _fetch_report(self, module, path):
        try:
            return self.session.get(path)
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Permission check for {module} failed: {str(e)}")
            return None

    def refresh(self, user):
        """Recompute the token set for ``user`` (``None`` clears it)"""
        self.loading = True
        self.user = user
        try:
            if not user:
                self.permissions = set()
            elif is_owner(user):
                self.permissions = resolve_permissions(user, {})
            else:
                with ThreadPoolExecutor(max_workers=len(MODULE_ENDPOINTS)) as executor:
                    futures = {
                        module: executor.submit(self._fetch_report, module, path)
                        for module, path in MODULE_ENDPOINTS.items()
                    }
                    reports = {module: future.result() for module, future in futures.items()}
                self.permissions = resolve_permissions(user, reports)
        finally:
            self.loading = False
        return self.permissions

    def has_permission(self, permission):
        return permission in self.permissions

    def has_any_permission(self, permissions):
        return any(permission in self.permissions for permission in permissions)
