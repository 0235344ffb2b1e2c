"""
Python client for the REST API: an authenticated session plus the list and
permission state objects a front end keeps in memory.
"""
from .api import ApiError, ApiSession
from .collections import CollectionState
from .permissions import PermissionState
from .photocopies import PhotocopyList
from .workers import DepartmentsAndOccupations, WorkerList

__all__ = [
    'ApiError', 'ApiSession', 'CollectionState', 'PermissionState', 'PhotocopyList',
    'DepartmentsAndOccupations', 'WorkerList',
]
