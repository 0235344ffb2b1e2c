"""
Test suite for the API client
Tests: session error handling, permission resolution and local list state
"""
from unittest import mock

import requests
from django.test import SimpleTestCase

from backend.access.tokens import OWNER_PERMISSIONS
from .api import ApiError, ApiSession
from .permissions import PermissionState
from .photocopies import PhotocopyList
from .workers import DepartmentsAndOccupations, WorkerList


def fake_response(status_code=200, payload=None, text=''):
    response = mock.Mock()
    response.status_code = status_code
    response.content = b'{}' if payload is not None else b''
    response.json.return_value = payload
    response.text = text
    response.reason = 'Error'
    return response


class ApiSessionTests(SimpleTestCase):

    def setUp(self):
        self.http = mock.Mock(spec=requests.Session)
        self.http.headers = {}
        self.api = ApiSession(base_url='http://api.test/api/v1/', token='abc', session=self.http)

    def test_request_url_and_token(self):
        self.http.request.return_value = fake_response(payload=[{'id': 1}])
        self.assertEqual(self.api.get('workers/', params={'activo': 'true'}), [{'id': 1}])
        self.http.request.assert_called_once_with(
            'GET', 'http://api.test/api/v1/workers/', params={'activo': 'true'}, json=None, timeout=10
        )
        self.assertEqual(self.http.headers['Authorization'], 'Bearer abc')

    def test_error_response_raises(self):
        self.http.request.return_value = fake_response(403, {'error': 'Missing permission: trabajador_leer'})
        with self.assertRaises(ApiError) as ctx:
            self.api.get('workers/')
        self.assertEqual(ctx.exception.status, 403)
        self.assertEqual(ctx.exception.message, 'Missing permission: trabajador_leer')

    def test_empty_body(self):
        self.http.request.return_value = fake_response(204)
        self.assertIsNone(self.api.delete('workers/1/'))

    def test_login_stores_access_token(self):
        self.http.request.return_value = fake_response(payload={'access': 'new-token', 'refresh': 'r'})
        self.api.login('maria', 'secret')
        self.assertEqual(self.api.token, 'new-token')
        self.assertEqual(self.http.headers['Authorization'], 'Bearer new-token')

    @mock.patch.dict('os.environ', {'API_URL': 'http://elsewhere/api/v1'})
    def test_base_url_from_environment(self):
        self.assertEqual(ApiSession(session=self.http).url('/auth/me/'), 'http://elsewhere/api/v1/auth/me/')


class PermissionStateTests(SimpleTestCase):

    def setUp(self):
        self.session = mock.Mock(spec=ApiSession)

    def test_loading_until_first_refresh(self):
        state = PermissionState(self.session)
        self.assertTrue(state.loading)
        state.refresh(None)
        self.assertFalse(state.loading)
        self.assertEqual(state.permissions, set())

    def test_owner_short_circuits(self):
        state = PermissionState(self.session)
        state.refresh({'id': 1, 'rol_global': 'propietario'})
        self.assertEqual(state.permissions, set(OWNER_PERMISSIONS))
        self.session.get.assert_not_called()

    def test_owner_flag_short_circuits(self):
        state = PermissionState(self.session)
        state.refresh({'id': 1, 'es_propietario': 1})
        self.assertEqual(state.permissions, set(OWNER_PERMISSIONS))
        self.assertTrue(state.has_permission('configuracion'))
        self.session.get.assert_not_called()

    def test_worker_resolved_from_module_reports(self):
        reports = {
            'photocopies/permissions/': {'hasAccess': True, 'permissions': ['fotocopia_leer', 'fotocopia_escribir']},
            'workers/permissions/': {'hasAccess': False, 'permissions': []},
            'inventory/permissions/': {'hasAccess': True, 'permissions': ['inventario_editar']},
        }
        self.session.get.side_effect = lambda path: reports[path]
        state = PermissionState(self.session)
        state.refresh({'id': 2, 'rol_global': 'trabajador'})

        self.assertEqual(self.session.get.call_count, 3)
        self.assertTrue(state.has_permission('fotocopias_crear'))
        self.assertTrue(state.has_permission('inventario_editar'))
        self.assertFalse(state.has_permission('trabajadores'))
        self.assertTrue(state.has_any_permission(['admin', 'graficos']))
        self.assertFalse(state.has_any_permission(['admin', 'configuracion']))

    def test_failed_module_is_skipped(self):
        def get(path):
            if path == 'workers/permissions/':
                raise ApiError(500, 'boom')
            if path == 'inventory/permissions/':
                raise requests.ConnectionError('offline')
            return {'hasAccess': True, 'permissions': []}

        self.session.get.side_effect = get
        state = PermissionState(self.session)
        state.refresh({'id': 2})
        self.assertEqual(state.permissions, {'fotocopias', 'graficos', 'ubicaciones'})
        self.assertFalse(state.loading)


WORKERS = [
    {'id': 1, 'nombres': 'Ana', 'apellidos': 'Soto', 'email': 'ana@x.cl', 'ropera': 12,
     'departamento': 'Ventas', 'ocupacion': 'Cajero', 'activo': True},
    {'id': 2, 'nombres': 'bruno', 'apellidos': 'Díaz', 'email': '', 'ropera': None,
     'departamento': 'Bodega', 'ocupacion': 'Bodeguero', 'activo': False},
    {'id': 3, 'nombres': 'Carla', 'apellidos': 'Rojas', 'email': 'carla@x.cl', 'ropera': 125,
     'departamento': 'Ventas', 'ocupacion': 'Vendedor', 'activo': True},
]


class WorkerListTests(SimpleTestCase):

    def setUp(self):
        self.session = mock.Mock(spec=ApiSession)
        self.session.get.return_value = [dict(worker) for worker in WORKERS]
        self.workers = WorkerList(self.session)
        self.assertTrue(self.workers.fetch())

    def names(self):
        return [worker['nombres'] for worker in self.workers.filtered_items()]

    def test_search(self):
        self.workers.set_search('ROJ')
        self.assertEqual(self.names(), ['Carla'])
        self.workers.set_search('12')
        self.assertEqual(self.names(), ['Ana', 'Carla'])

    def test_filters_combine(self):
        self.workers.set_filter('status', 'active')
        self.workers.set_filter('department', 'Ventas')
        self.assertEqual(self.names(), ['Ana', 'Carla'])
        self.workers.set_filter('ocupacion', 'Vendedor')
        self.assertEqual(self.names(), ['Carla'])
        self.workers.set_filter('status', 'inactive')
        self.assertEqual(self.names(), [])
        self.workers.reset_filters()
        self.assertEqual(len(self.names()), 3)

    def test_unknown_filter(self):
        with self.assertRaises(KeyError):
            self.workers.set_filter('color', 'azul')

    def test_sort_toggle_case_insensitive(self):
        self.workers.sort_by('nombres')
        self.assertEqual(self.names(), ['Ana', 'bruno', 'Carla'])
        self.workers.sort_by('nombres')
        self.assertEqual(self.names(), ['Carla', 'bruno', 'Ana'])
        self.workers.sort_by('ropera')
        self.assertEqual(self.names(), ['Ana', 'Carla', 'bruno'])
        self.workers.sort_by('ropera')
        self.assertEqual(self.names(), ['Carla', 'Ana', 'bruno'])

    def test_pagination(self):
        self.workers.set_items_per_page(2)
        self.workers.set_page(2)
        page = self.workers.page()
        self.assertEqual([worker['id'] for worker in page['items']], [3])
        self.assertEqual(page['total_items'], 3)
        self.assertEqual(page['total_pages'], 2)
        self.assertEqual(page['current_page'], 2)

        self.workers.set_search('nobody')
        self.assertEqual(self.workers.page()['total_pages'], 0)
        self.assertEqual(self.workers.current_page, 1)

    def test_create_appends_without_refetch(self):
        self.session.post.return_value = {'id': 4, 'nombres': 'Diego', 'apellidos': 'Paz', 'activo': True}
        self.workers.create({'nombres': 'Diego', 'apellidos': 'Paz'})
        self.assertEqual(len(self.workers.items), 4)
        self.assertEqual(self.session.get.call_count, 1)
        self.assertIsNotNone(self.workers.success)

    def test_update_and_delete(self):
        self.session.put.return_value = dict(WORKERS[0], nombres='Anita')
        self.workers.update(1, {'nombres': 'Anita'})
        self.session.put.assert_called_once_with('workers/1/', {'nombres': 'Anita'})
        self.assertEqual(self.workers.items[0]['nombres'], 'Anita')

        self.session.delete.return_value = {'message': 'Worker deleted successfully'}
        self.assertTrue(self.workers.delete(2))
        self.assertEqual([worker['id'] for worker in self.workers.items], [1, 3])

    def test_toggle_status(self):
        self.session.patch.return_value = dict(WORKERS[1], activo=True)
        self.workers.toggle_status(2)
        self.session.patch.assert_called_once_with('workers/2/status/', {'activo': True})
        self.assertTrue(self.workers.items[1]['activo'])

    def test_failed_mutation_keeps_list(self):
        self.session.delete.side_effect = ApiError(403, 'Missing permission: trabajador_eliminar')
        self.assertFalse(self.workers.delete(1))
        self.assertEqual(len(self.workers.items), 3)
        self.assertEqual(self.workers.error, 'Missing permission: trabajador_eliminar')

    def test_failed_fetch_keeps_previous_items(self):
        self.session.get.side_effect = requests.ConnectionError('offline')
        self.assertFalse(self.workers.fetch())
        self.assertEqual(len(self.workers.items), 3)
        self.assertEqual(self.workers.error, 'offline')
        self.assertFalse(self.workers.loading)


class DepartmentsAndOccupationsTests(SimpleTestCase):

    def setUp(self):
        self.session = mock.Mock(spec=ApiSession)
        self.lists = {
            'departments/': [{'id': 1, 'nombre': 'Ventas'}, {'id': 2, 'nombre': 'Bodega'}],
            'workers/occupations/': ['Cajero', 'Vendedor', 'Bodeguero'],
        }
        self.session.get.side_effect = lambda path: self.lists[path]
        self.state = DepartmentsAndOccupations(self.session)
        self.state.fetch()

    def test_suggestions(self):
        self.assertEqual(self.state.department_suggestions('ven'), [{'id': 1, 'nombre': 'Ventas'}])
        self.assertEqual(self.state.occupation_suggestions('EGU'), ['Bodeguero'])
        self.assertEqual(self.state.occupation_suggestions(''), [])

    def test_create_department_refetches(self):
        self.session.post.return_value = {'id': 3, 'nombre': 'RRHH'}
        self.lists['departments/'] = self.lists['departments/'] + [{'id': 3, 'nombre': 'RRHH'}]
        self.assertTrue(self.state.create_department('RRHH'))
        self.assertEqual(len(self.state.departments), 3)

    def test_delete_department_failure(self):
        self.session.delete.side_effect = ApiError(400, 'Department already exists')
        self.assertFalse(self.state.delete_department(1))
        self.assertEqual(self.state.error, 'Department already exists')
        self.assertEqual(len(self.state.departments), 2)


class PhotocopyListTests(SimpleTestCase):

    def setUp(self):
        self.session = mock.Mock(spec=ApiSession)
        self.session.get.return_value = [
            {'id': 1, 'cantidad': 10, 'multiplicador': 1, 'tipo': 'bn', 'doble_hoja': False,
             'comentario': 'Guías', 'usuario_nombre': 'Ana'},
            {'id': 2, 'cantidad': 9, 'multiplicador': 2, 'tipo': 'color', 'doble_hoja': True,
             'comentario': '', 'usuario_nombre': 'Bruno'},
            {'id': 3, 'cantidad': 4, 'multiplicador': 1, 'tipo': 'bn', 'doble_hoja': True,
             'comentario': 'Pruebas', 'usuario_nombre': 'Ana'},
        ]
        self.records = PhotocopyList(self.session)
        self.records.fetch()

    def test_summary(self):
        self.assertEqual(self.records.summary(), {
            'total_copias': 32, 'total_hojas': 22, 'total_bn': 14, 'total_color': 18,
        })

    def test_filters_and_search(self):
        self.records.set_filter('doble_hoja', True)
        self.records.set_filter('tipo', 'bn')
        self.assertEqual([record['id'] for record in self.records.filtered_items()], [3])
        self.records.reset_filters()
        self.records.set_search('ana')
        self.assertEqual(self.records.summary()['total_hojas'], 12)
