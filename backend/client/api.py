"""
Authenticated HTTP session against the ``/api/v1`` REST API.
"""
import logging
import os

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://localhost:8000/api/v1'
DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """Non-2xx answer from the API"""

    def __init__(self, status, message):
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self):
        return f"{self.status}: {self.message}"


def _error_message(response):
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        for key in ('error', 'detail', 'message'):
            if payload.get(key):
                return str(payload[key])
    return str(payload)


class ApiSession:
    """
    Thin wrapper around ``requests.Session`` that prefixes the base URL,
    sends the bearer token and turns error responses into ``ApiError``.
    """

    def __init__(self, base_url=None, token=None, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = (base_url or os.getenv('API_URL', DEFAULT_API_URL)).rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.token = None
        if token:
            self.set_token(token)

    def set_token(self, token):
        self.token = token
        if token:
            self.session.headers.update({'Authorization': f'Bearer {token}'})
        else:
            self.session.headers.pop('Authorization', None)

    def login(self, username, password):
        """Obtain a JWT pair and keep the access token; returns the login payload"""
        data = self.post('auth/login/', {'username': username, 'password': password})
        self.set_token(data.get('access'))
        return data

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method, path, params=None, json=None):
        url = self.url(path)
        response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        if not 200 <= response.status_code < 300:
            message = _error_message(response)
            logger.warning(f"{method} {url} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get(self, path, params=None):
        return self.request('GET', path, params=params)

    def post(self, path, data=None):
        return self.request('POST', path, json=data)

    def put(self, path, data=None):
        return self.request('PUT', path, json=data)

    def patch(self, path, data=None):
        return self.request('PATCH', path, json=data)

    def delete(self, path, data=None):
        return self.request('DELETE', path, json=data)
