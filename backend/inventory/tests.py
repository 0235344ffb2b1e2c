"""
Test suite for the inventory module
Tests: item CRUD, section moves, categories and the capability report
"""
from django.test import TestCase
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import InventoryCategory, InventoryItem


class InventoryItemAPITests(TestCase):

    def setUp(self):
        self.owner = TestDataFactory.create_owner()
        self.group = self.owner.owned_groups.first()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)
        self.category = TestDataFactory.create_inventory_category(self.group, nombre='Notebooks')

    def test_create_item(self):
        response = self.client.post('/api/v1/inventory/items/', {
            'codigo': 'cci-001', 'nombre': 'Lenovo T14', 'categoria_id': self.category.id,
            'seccion': 'Bodega', 'posicion': 3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['codigo'], 'CCI-001')
        self.assertEqual(response.data['categoria_nombre'], 'Notebooks')
        self.assertEqual(response.data['estado'], 'disponible')
        self.assertEqual(response.data['grupo_id'], self.group.id)

    def test_duplicate_code_rejected(self):
        TestDataFactory.create_inventory_item(self.group, codigo='CCI-001')
        response = self.client.post('/api/v1/inventory/items/', {'codigo': 'CCI-001', 'nombre': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('codigo', response.data)

    def test_assigning_worker_marks_item_assigned(self):
        worker = TestDataFactory.create_worker(self.group)
        response = self.client.post('/api/v1/inventory/items/', {
            'codigo': 'CCI-002', 'nombre': 'Monitor', 'trabajador_id': worker.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['estado'], 'asignado')
        self.assertEqual(response.data['trabajador_nombre'], worker.full_name)

    def test_category_of_other_group_rejected(self):
        other_owner = TestDataFactory.create_owner()
        foreign = TestDataFactory.create_inventory_category(other_owner.owned_groups.first())
        response = self.client.post('/api/v1/inventory/items/', {
            'codigo': 'CCI-003', 'nombre': 'Mouse', 'categoria_id': foreign.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('categoria_id', response.data)

    def test_list_filters(self):
        TestDataFactory.create_inventory_item(self.group, nombre='Teclado', categoria=self.category)
        TestDataFactory.create_inventory_item(self.group, nombre='Silla', estado='baja')
        response = self.client.get('/api/v1/inventory/items/', {'estado': 'baja'})
        self.assertEqual([item['nombre'] for item in response.data], ['Silla'])
        response = self.client.get('/api/v1/inventory/items/', {'categoria_id': self.category.id})
        self.assertEqual([item['nombre'] for item in response.data], ['Teclado'])
        response = self.client.get('/api/v1/inventory/items/', {'search': 'tecl'})
        self.assertEqual(len(response.data), 1)

    def test_state_change_is_audited(self):
        item = TestDataFactory.create_inventory_item(self.group)
        response = self.client.put(f'/api/v1/inventory/items/{item.id}/', {'estado': 'mantenimiento'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = AuditLog.objects.get(model_name='InventoryItem', action='status_change')
        self.assertEqual(entry.changes['estado'], {'old': 'disponible', 'new': 'mantenimiento'})

    def test_move_section(self):
        item = TestDataFactory.create_inventory_item(self.group, seccion='A')
        response = self.client.put(f'/api/v1/inventory/items/{item.id}/section/', {'seccion': 'B', 'posicion': 2},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertEqual((item.seccion, item.posicion), ('B', 2))

        response = self.client.put(f'/api/v1/inventory/items/{item.id}/section/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sections(self):
        TestDataFactory.create_inventory_item(self.group, seccion='Oficina')
        TestDataFactory.create_inventory_item(self.group, seccion='Bodega')
        TestDataFactory.create_inventory_item(self.group, seccion='Bodega')
        response = self.client.get('/api/v1/inventory/sections/')
        self.assertEqual(response.data, ['Bodega', 'Oficina'])

    def test_delete_item(self):
        item = TestDataFactory.create_inventory_item(self.group)
        response = self.client.delete(f'/api/v1/inventory/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(InventoryItem.objects.filter(pk=item.id).exists())


class InventoryCategoryAPITests(TestCase):

    def setUp(self):
        self.owner = TestDataFactory.create_owner()
        self.group = self.owner.owned_groups.first()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_create_and_list(self):
        response = self.client.post('/api/v1/inventory/categories/', {'nombre': 'Sillas'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        category = InventoryCategory.objects.get(pk=response.data['id'])
        TestDataFactory.create_inventory_item(self.group, categoria=category)

        response = self.client.get('/api/v1/inventory/categories/')
        self.assertEqual(response.data[0]['nombre'], 'Sillas')
        self.assertEqual(response.data[0]['item_count'], 1)

    def test_duplicate_rejected(self):
        TestDataFactory.create_inventory_category(self.group, nombre='Sillas')
        response = self.client.post('/api/v1/inventory/categories/', {'nombre': 'sillas'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_blocked_while_in_use(self):
        category = TestDataFactory.create_inventory_category(self.group)
        item = TestDataFactory.create_inventory_item(self.group, codigo='CCI-010', categoria=category)
        response = self.client.delete(f'/api/v1/inventory/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['items'], [{'id': item.id, 'codigo': 'CCI-010'}])

        item.delete()
        response = self.client.delete(f'/api/v1/inventory/categories/{category.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_rename(self):
        category = TestDataFactory.create_inventory_category(self.group, nombre='Sillas')
        response = self.client.put(f'/api/v1/inventory/categories/{category.id}/', {'nombre': 'Mobiliario'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['nombre'], 'Mobiliario')


class InventoryPermissionTests(TestCase):

    def test_report_for_member_with_grants(self):
        owner = TestDataFactory.create_owner()
        member = TestDataFactory.create_user()
        TestDataFactory.create_membership(member, owner.owned_groups.first())
        TestDataFactory.grant_permission(member, 'inventario_leer', 'inventario_editar')
        client = AuthenticatedAPIClient()
        client.authenticate_user(member)

        report = client.get('/api/v1/inventory/permissions/').data
        self.assertTrue(report['hasAccess'])
        self.assertFalse(report['isOwner'])
        self.assertEqual(report['permissions'], ['inventario_editar', 'inventario_leer'])

        self.assertEqual(client.get('/api/v1/inventory/items/').status_code, status.HTTP_200_OK)
        response = client.post('/api/v1/inventory/items/', {'codigo': 'X', 'nombre': 'Y'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_report_for_owner(self):
        owner = TestDataFactory.create_owner()
        client = AuthenticatedAPIClient()
        client.authenticate_user(owner)
        report = client.get('/api/v1/inventory/permissions/').data
        self.assertTrue(report['isOwner'])
        self.assertEqual(len(report['permissions']), 4)
