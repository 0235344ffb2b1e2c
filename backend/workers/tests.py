"""
Test suite for the workers module
Tests: worker CRUD, status toggle, group scoping, departments and occupations
"""
from django.test import TestCase
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Department, Occupation, Worker


class WorkerAPITests(TestCase):

    def setUp(self):
        self.owner = TestDataFactory.create_owner()
        self.group = self.owner.owned_groups.first()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_create_worker_with_new_department(self):
        response = self.client.post('/api/v1/workers/', {
            'nombres': 'Ana', 'apellidos': 'Pérez', 'email': 'ana@test.com',
            'ocupacion': 'Analista', 'departamento': 'Finanzas', 'ropera': 12,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['departamento'], 'Finanzas')
        worker = Worker.objects.get(pk=response.data['id'])
        self.assertEqual(worker.grupo, self.group)
        self.assertTrue(Department.objects.filter(nombre='Finanzas', grupo=self.group).exists())

    def test_create_reuses_existing_department(self):
        department = TestDataFactory.create_department(self.group, nombre='Ventas')
        response = self.client.post('/api/v1/workers/', {
            'nombres': 'Luis', 'apellidos': 'Soto', 'departamento': 'Ventas',
        }, format='json')
        self.assertEqual(response.data['departamento_id'], department.id)
        self.assertEqual(Department.objects.filter(nombre='Ventas').count(), 1)

    def test_locker_out_of_range(self):
        for ropera in (0, 10000):
            response = self.client.post('/api/v1/workers/', {
                'nombres': 'Ana', 'apellidos': 'Pérez', 'ropera': ropera,
            }, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn('ropera', response.data)

    def test_names_required(self):
        response = self.client.post('/api/v1/workers/', {'nombres': '  ', 'apellidos': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Worker.objects.count(), 0)

    def test_cannot_create_in_foreign_group(self):
        other_owner = TestDataFactory.create_owner()
        foreign_group = other_owner.owned_groups.first()
        response = self.client.post('/api/v1/workers/', {
            'nombres': 'Ana', 'apellidos': 'Pérez', 'grupo_id': foreign_group.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_is_scoped_to_accessible_groups(self):
        TestDataFactory.create_worker(self.group, nombres='Mine')
        other_owner = TestDataFactory.create_owner()
        TestDataFactory.create_worker(other_owner.owned_groups.first(), nombres='Theirs')

        response = self.client.get('/api/v1/workers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([w['nombres'] for w in response.data], ['Mine'])

    def test_list_filters(self):
        TestDataFactory.create_worker(self.group, nombres='Ana', activo=True)
        TestDataFactory.create_worker(self.group, nombres='Bruno', activo=False)
        response = self.client.get('/api/v1/workers/', {'activo': 'false'})
        self.assertEqual([w['nombres'] for w in response.data], ['Bruno'])
        response = self.client.get('/api/v1/workers/', {'search': 'an'})
        self.assertEqual([w['nombres'] for w in response.data], ['Ana'])

    def test_update_worker(self):
        worker = TestDataFactory.create_worker(self.group, nombres='Ana')
        response = self.client.put(f'/api/v1/workers/{worker.id}/', {'ocupacion': 'Gerente'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['ocupacion'], 'Gerente')
        entry = AuditLog.objects.get(model_name='Worker', action='update')
        self.assertEqual(entry.changes['ocupacion'], {'old': '', 'new': 'Gerente'})

    def test_update_clears_department(self):
        department = TestDataFactory.create_department(self.group)
        worker = TestDataFactory.create_worker(self.group, departamento=department)
        response = self.client.put(f'/api/v1/workers/{worker.id}/', {'departamento': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['departamento'])

    def test_toggle_status(self):
        worker = TestDataFactory.create_worker(self.group)
        response = self.client.patch(f'/api/v1/workers/{worker.id}/status/', {'activo': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['activo'])
        self.assertTrue(AuditLog.objects.filter(model_name='Worker', action='status_change').exists())

    def test_toggle_status_requires_flag(self):
        worker = TestDataFactory.create_worker(self.group)
        response = self.client.patch(f'/api/v1/workers/{worker.id}/status/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_worker(self):
        worker = TestDataFactory.create_worker(self.group)
        response = self.client.delete(f'/api/v1/workers/{worker.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Worker.objects.filter(pk=worker.id).exists())

    def test_bulk_delete(self):
        first = TestDataFactory.create_worker(self.group)
        second = TestDataFactory.create_worker(self.group)
        kept = TestDataFactory.create_worker(self.group)
        response = self.client.delete('/api/v1/workers/', {'ids': [first.id, second.id]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deleted'], 2)
        self.assertEqual(list(Worker.objects.values_list('id', flat=True)), [kept.id])

    def test_bulk_delete_requires_ids(self):
        response = self.client.delete('/api/v1/workers/', {'ids': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_worker_of_other_group_not_found(self):
        other_owner = TestDataFactory.create_owner()
        worker = TestDataFactory.create_worker(other_owner.owned_groups.first())
        response = self.client.get(f'/api/v1/workers/{worker.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class WorkerPermissionTests(TestCase):

    def setUp(self):
        self.owner = TestDataFactory.create_owner()
        self.group = self.owner.owned_groups.first()
        self.member = TestDataFactory.create_user()
        TestDataFactory.create_membership(self.member, self.group)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.member)

    def test_member_without_grants(self):
        self.assertEqual(self.client.get('/api/v1/workers/').status_code, status.HTTP_403_FORBIDDEN)
        report = self.client.get('/api/v1/workers/permissions/').data
        self.assertFalse(report['hasAccess'])
        self.assertFalse(report['isOwner'])
        self.assertEqual(report['permissions'], [])

    def test_role_grants_read_only(self):
        role = TestDataFactory.create_role(codes=['trabajador_leer'])
        membership = self.member.memberships.get(group=self.group)
        membership.role = role
        membership.save()

        self.assertEqual(self.client.get('/api/v1/workers/').status_code, status.HTTP_200_OK)
        response = self.client.post('/api/v1/workers/', {'nombres': 'A', 'apellidos': 'B'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        report = self.client.get('/api/v1/workers/permissions/').data
        self.assertTrue(report['hasAccess'])
        self.assertEqual(report['permissions'], ['trabajador_leer'])

    def test_inactive_special_grant_ignored(self):
        TestDataFactory.grant_permission(self.member, 'trabajador_leer', status='inactivo')
        self.assertEqual(self.client.get('/api/v1/workers/').status_code, status.HTTP_403_FORBIDDEN)

    def test_member_sees_group_workers(self):
        TestDataFactory.grant_permission(self.member, 'trabajador_leer')
        TestDataFactory.create_worker(self.group, nombres='Shared')
        response = self.client.get('/api/v1/workers/')
        self.assertEqual([w['nombres'] for w in response.data], ['Shared'])


class DepartmentOccupationAPITests(TestCase):

    def setUp(self):
        self.owner = TestDataFactory.create_owner()
        self.group = self.owner.owned_groups.first()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_department_crud(self):
        response = self.client.post('/api/v1/departments/', {'nombre': 'Bodega'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        department_id = response.data['id']

        response = self.client.post('/api/v1/departments/', {'nombre': 'bodega'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/v1/departments/')
        self.assertEqual(response.data, [{'id': department_id, 'nombre': 'Bodega'}])

        response = self.client.put(f'/api/v1/departments/{department_id}/', {'nombre': 'Logística'}, format='json')
        self.assertEqual(response.data['nombre'], 'Logística')

        worker = TestDataFactory.create_worker(self.group, departamento=Department.objects.get(pk=department_id))
        response = self.client.delete(f'/api/v1/departments/{department_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        worker.refresh_from_db()
        self.assertIsNone(worker.departamento)

    def test_occupation_list_merges_sources(self):
        Occupation.objects.create(nombre='Bibliotecario/a', grupo=self.group)
        TestDataFactory.create_worker(self.group, ocupacion='Chofer')
        response = self.client.get('/api/v1/workers/occupations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('Analista', response.data)
        self.assertIn('Bibliotecario/a', response.data)
        self.assertIn('Chofer', response.data)
        self.assertEqual(response.data, sorted(response.data, key=str.lower))

    def test_occupation_duplicates_rejected(self):
        response = self.client.post('/api/v1/workers/occupations/', {'nombre': 'analista'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/workers/occupations/', {'nombre': 'Chofer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/workers/occupations/', {'nombre': 'CHOFER'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_occupation_rename_updates_workers(self):
        occupation = Occupation.objects.create(nombre='Chofer', grupo=self.group)
        worker = TestDataFactory.create_worker(self.group, ocupacion='Chofer')
        response = self.client.put(f'/api/v1/workers/occupations/{occupation.id}/', {'nombre': 'Conductor'},
                                   format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        worker.refresh_from_db()
        self.assertEqual(worker.ocupacion, 'Conductor')

    def test_occupation_delete(self):
        occupation = Occupation.objects.create(nombre='Chofer', grupo=self.group)
        response = self.client.delete(f'/api/v1/workers/occupations/{occupation.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Occupation.objects.filter(pk=occupation.id).exists())
