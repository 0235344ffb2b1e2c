"""
Test suite for the core module
Tests: registration, login tokens, current user, settings and audit log access
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from backend.access.models import Membership, WorkGroup
from backend.core.models import AuditLog, Setting, User
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, diff_changes, get_client_ip
from backend.core.views import parse_limit_offset


class AuthTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_register_creates_owner_with_personal_group(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'maria',
            'email': 'maria@test.com',
            'password': 'S3gura!Clave',
            'password_confirm': 'S3gura!Clave',
            'first_name': 'María',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        user = User.objects.get(username='maria')
        self.assertEqual(user.rol_global, 'propietario')
        group = WorkGroup.objects.get(pk=response.data['group']['id'])
        self.assertEqual(group.owner, user)
        self.assertTrue(group.is_personal)
        self.assertTrue(Membership.objects.filter(user=user, group=group, status='activo').exists())

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'maria',
            'password': 'S3gura!Clave',
            'password_confirm': 'otra',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(username='maria').exists())

    def test_login_returns_user_and_tokens(self):
        TestDataFactory.create_user(username='pedro', password='testpass123')
        response = self.client.post('/api/v1/auth/login/', {'username': 'pedro', 'password': 'testpass123'},
                                    format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['rol_global'], 'trabajador')

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='pedro')
        response = self.client.post('/api/v1/auth/login/', {'username': 'pedro', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_for_owner(self):
        owner = TestDataFactory.create_owner()
        client = AuthenticatedAPIClient()
        client.authenticate_user(owner)
        response = client.get('/api/v1/auth/me/')
        self.assertTrue(response.data['is_owner'])
        self.assertIn('trabajadores_eliminar', response.data['permissions'])
        self.assertIn('admin', response.data['permissions'])

    def test_me_for_worker(self):
        worker = TestDataFactory.create_user()
        TestDataFactory.grant_permission(worker, 'fotocopia_leer', 'fotocopia_escribir')
        client = AuthenticatedAPIClient()
        client.authenticate_user(worker)
        response = client.get('/api/v1/auth/me/')
        self.assertFalse(response.data['is_owner'])
        self.assertEqual(response.data['permissions'], ['fotocopias', 'fotocopias_crear', 'graficos', 'ubicaciones'])


class SettingAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.owner = TestDataFactory.create_owner()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_create_and_update_setting(self):
        response = self.client.post('/api/v1/settings/', {
            'key': 'empresa_nombre', 'value': 'Copias Ltda', 'category': 'general',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.put('/api/v1/settings/empresa_nombre/', {'value': 'Copias SpA'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Setting.objects.get(key='empresa_nombre').value, 'Copias SpA')
        entry = AuditLog.objects.filter(action='setting_change').latest('created_at')
        self.assertEqual(entry.changes['value'], {'old': 'Copias Ltda', 'new': 'Copias SpA'})

    def test_filter_by_category(self):
        Setting.objects.create(key='a', value='1', category='general')
        Setting.objects.create(key='precio_bn', value='15', category='precios')
        response = self.client.get('/api/v1/settings/', {'category': 'precios'})
        self.assertEqual([s['key'] for s in response.data], ['precio_bn'])

    def test_worker_cannot_change_settings(self):
        Setting.objects.create(key='a', value='1')
        worker = TestDataFactory.create_user()
        client = AuthenticatedAPIClient()
        client.authenticate_user(worker)
        self.assertEqual(client.get('/api/v1/settings/a/').status_code, status.HTTP_200_OK)
        response = client.put('/api/v1/settings/a/', {'value': '2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_setting(self):
        Setting.objects.create(key='a', value='1')
        response = self.client.delete('/api/v1/settings/a/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Setting.objects.filter(key='a').exists())


class AuditLogTests(TestCase):

    def setUp(self):
        self.owner = TestDataFactory.create_owner()
        self.worker = TestDataFactory.create_user()
        create_audit_log(user=self.owner, action='create', model_name='Worker', object_id=1)
        create_audit_log(user=self.worker, action='delete', model_name='Worker', object_id=2)

    def test_owner_sees_everything(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.owner)
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.data['total'], 2)
        response = client.get('/api/v1/audit-logs/', {'action': 'delete'})
        self.assertEqual(response.data['total'], 1)

    def test_worker_sees_own_entries(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.worker)
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['results'][0]['object_id'], '2')

    def test_missing_fields_skip_entry(self):
        self.assertIsNone(create_audit_log(user=self.owner, action='create', model_name='Worker'))
        self.assertEqual(AuditLog.objects.count(), 2)


class UtilityTests(TestCase):

    def test_parse_limit_offset(self):
        self.assertEqual(parse_limit_offset({}), (50, 0))
        self.assertEqual(parse_limit_offset({'limit': '10', 'offset': '5'}), (10, 5))
        self.assertEqual(parse_limit_offset({'limit': '0', 'offset': '-3'}), (1, 0))
        self.assertEqual(parse_limit_offset({'limit': '100000'}), (500, 0))
        self.assertEqual(parse_limit_offset({'limit': 'x'}, default_limit=20), (20, 0))

    def test_get_client_ip(self):
        class FakeRequest:
            META = {'HTTP_X_FORWARDED_FOR': '10.0.0.1, 10.0.0.2', 'REMOTE_ADDR': '127.0.0.1'}
        self.assertEqual(get_client_ip(FakeRequest()), '10.0.0.1')
        self.assertIsNone(get_client_ip(None))

    def test_diff_changes(self):
        before = {'nombres': 'Ana', 'activo': True, 'updated_at': '2024-01-01'}
        after = {'nombres': 'Anita', 'activo': True, 'updated_at': '2024-02-01'}
        self.assertEqual(diff_changes(before, after), {'nombres': {'old': 'Ana', 'new': 'Anita'}})
        self.assertEqual(diff_changes(before, after, fields=['activo']), {})
