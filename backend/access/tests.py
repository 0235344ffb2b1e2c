"""
Test suite for the access module
Tests: permission token resolution, capability reports, role management and seeding
"""
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from rest_framework import status

from backend.core.models import Setting
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.photocopies.models import PaperType
from . import tokens
from .models import AtomicPermission, Role, SystemModule
from .services import (
    accessible_group_ids, get_permission_codes, get_primary_group, has_permission, is_owner,
    module_report, resolve_group,
)


class OwnerPredicateTests(SimpleTestCase):

    def test_owner_variants(self):
        self.assertTrue(tokens.is_owner({'rol_global': 'propietario'}))
        self.assertTrue(tokens.is_owner({'rol': 'propietario'}))
        self.assertTrue(tokens.is_owner({'es_propietario': True}))
        self.assertTrue(tokens.is_owner({'es_propietario': 1}))

    def test_non_owner_variants(self):
        self.assertFalse(tokens.is_owner(None))
        self.assertFalse(tokens.is_owner({}))
        self.assertFalse(tokens.is_owner({'rol_global': 'trabajador', 'es_propietario': 0}))
        self.assertFalse(tokens.is_owner({'es_propietario': 'yes'}))


class ResolvePermissionsTests(SimpleTestCase):

    def test_owner_gets_full_set_regardless_of_reports(self):
        result = tokens.resolve_permissions({'rol_global': 'propietario'}, {'fotocopias': {'hasAccess': False}})
        self.assertEqual(result, set(tokens.OWNER_PERMISSIONS))
        self.assertEqual(len(result), 16)

    def test_module_capabilities(self):
        result = tokens.resolve_permissions({'rol_global': 'trabajador'}, {
            'fotocopias': {'hasAccess': True, 'permissions': ['fotocopia_leer', 'fotocopia_escribir']},
            'trabajadores': {'hasAccess': False, 'permissions': ['trabajador_editar']},
            'inventario': {'hasAccess': True, 'permissions': ['inventario_eliminar']},
        })
        self.assertEqual(result, {
            'fotocopias', 'fotocopias_crear', 'inventario', 'inventario_eliminar', 'graficos', 'ubicaciones',
        })

    def test_always_on_tokens_without_access(self):
        result = tokens.resolve_permissions({}, {})
        self.assertEqual(result, {'graficos', 'ubicaciones'})

    def test_non_list_permissions_treated_as_empty(self):
        result = tokens.resolve_permissions({}, {'trabajadores': {'hasAccess': True, 'permissions': 'all'}})
        self.assertEqual(result, {'trabajadores', 'graficos', 'ubicaciones'})

    def test_malformed_reports_are_skipped(self):
        with self.assertLogs('backend.access.tokens', level='WARNING'):
            result = tokens.resolve_permissions({}, {
                'fotocopias': None,
                'trabajadores': 'oops',
                'desconocido': {'hasAccess': True},
                'inventario': {'hasAccess': True, 'permissions': ['inventario_editar']},
            })
        self.assertEqual(result, {'inventario', 'inventario_editar', 'graficos', 'ubicaciones'})

    def test_module_tokens_unknown_module(self):
        with self.assertRaises(ValueError):
            tokens.module_tokens('ventas', {'hasAccess': True})


class PermissionServiceTests(TestCase):

    def setUp(self):
        self.owner = TestDataFactory.create_owner()
        self.group = self.owner.owned_groups.first()
        self.member = TestDataFactory.create_user()
        self.membership = TestDataFactory.create_membership(self.member, self.group)

    def test_group_owner_is_owner(self):
        group_owner = TestDataFactory.create_user()
        TestDataFactory.create_group(owner=group_owner)
        self.assertTrue(is_owner(group_owner))
        self.assertFalse(is_owner(self.member))

    def test_role_and_special_grants_combine(self):
        self.membership.role = TestDataFactory.create_role(codes=['fotocopia_leer'])
        self.membership.save()
        TestDataFactory.grant_permission(self.member, 'inventario_leer')
        self.assertEqual(get_permission_codes(self.member), {'fotocopia_leer', 'inventario_leer'})

    def test_inactive_membership_grants_nothing(self):
        self.membership.role = TestDataFactory.create_role(codes=['fotocopia_leer'])
        self.membership.status = 'inactivo'
        self.membership.save()
        self.assertFalse(has_permission(self.member, 'fotocopia_leer'))

    def test_inactive_permission_ignored(self):
        TestDataFactory.grant_permission(self.member, 'fotocopia_leer')
        AtomicPermission.objects.filter(code='fotocopia_leer').update(is_active=False)
        self.assertFalse(has_permission(self.member, 'fotocopia_leer'))

    def test_owner_passes_every_check(self):
        self.assertTrue(has_permission(self.owner, 'anything_at_all'))

    def test_module_report(self):
        TestDataFactory.grant_permission(self.member, 'trabajador_leer', 'fotocopia_leer')
        report = module_report(self.member, 'trabajadores')
        self.assertEqual(report, {'hasAccess': True, 'isOwner': False, 'permissions': ['trabajador_leer']})
        with self.assertRaises(ValueError):
            module_report(self.member, 'ventas')

    def test_accessible_groups_and_resolution(self):
        other = TestDataFactory.create_owner()
        foreign = other.owned_groups.first()
        self.assertEqual(accessible_group_ids(self.member), {self.group.id})
        self.assertEqual(resolve_group(self.member), self.group)
        self.assertEqual(resolve_group(self.member, str(self.group.id)), self.group)
        self.assertIsNone(resolve_group(self.member, foreign.id))
        self.assertIsNone(resolve_group(self.member, 'abc'))

    def test_primary_group_created_when_missing(self):
        loner = TestDataFactory.create_user()
        self.assertIsNone(get_primary_group(loner, create=False))
        group = get_primary_group(loner)
        self.assertTrue(group.is_personal)
        self.assertEqual(group.owner, loner)


class AccessAPITests(TestCase):

    def setUp(self):
        cache.clear()
        call_command('seed_access', stdout=StringIO())
        self.owner = TestDataFactory.create_owner()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_my_permissions(self):
        response = self.client.get('/api/v1/auth/permissions/')
        self.assertTrue(response.data['isOwner'])
        self.assertEqual(response.data['permissions'], sorted(tokens.OWNER_PERMISSIONS))

    def test_modules(self):
        response = self.client.get('/api/v1/access/modules/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        codes = [module['code'] for module in response.data]
        self.assertEqual(codes, ['fotocopias', 'trabajadores', 'inventario', 'configuracion', 'auditoria'])
        self.assertEqual(len(response.data[0]['permissions']), 4)

    def test_replace_role_permissions(self):
        role = Role.objects.get(name='trabajador')
        url = f'/api/v1/access/roles/{role.id}/permissions/'
        response = self.client.put(url, {'permissions': ['fotocopia_leer', 'fotocopia_escribir']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(url)
        self.assertEqual(response.data['permissions'], ['fotocopia_escribir', 'fotocopia_leer'])

    def test_unknown_permission_rejected(self):
        role = Role.objects.get(name='trabajador')
        response = self.client.put(f'/api/v1/access/roles/{role.id}/permissions/', {'permissions': ['volar']},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_owners_manage_roles(self):
        worker = TestDataFactory.create_user()
        client = AuthenticatedAPIClient()
        client.authenticate_user(worker)
        role = Role.objects.get(name='trabajador')
        response = client.get(f'/api/v1/access/roles/{role.id}/permissions/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_my_groups(self):
        response = self.client.get('/api/v1/access/groups/')
        self.assertEqual(len(response.data['owned']), 1)
        self.assertEqual(response.data['memberships'][0]['role_name'], 'propietario')


class SeedAccessCommandTests(TestCase):

    def setUp(self):
        cache.clear()

    def test_seed_is_idempotent(self):
        call_command('seed_access', stdout=StringIO())
        call_command('seed_access', stdout=StringIO())
        self.assertEqual(SystemModule.objects.count(), 5)
        self.assertEqual(AtomicPermission.objects.count(), 15)
        self.assertEqual(PaperType.objects.count(), 3)
        self.assertEqual(Setting.objects.get(key='precio_bn').value, '15')

    def test_worker_role_reads_only(self):
        call_command('seed_access', stdout=StringIO())
        codes = set(Role.objects.get(name='trabajador').permissions.values_list('code', flat=True))
        self.assertEqual(codes, {'fotocopia_leer', 'trabajador_leer', 'inventario_leer', 'configuracion_leer',
                                 'auditoria_leer'})

    def test_skip_prices(self):
        call_command('seed_access', '--skip-prices', stdout=StringIO())
        self.assertFalse(Setting.objects.exists())
