"""
Test suite for the photocopy module
Tests: sheet/cost arithmetic, record API, ownership rule, audit trail and price cache
"""
from decimal import Decimal

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from rest_framework import status

from backend.core.models import AuditLog, Setting
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .calculations import (
    billable_cost, printed_pages, reams_needed, required_sheets, sheets_per_copy, summarize_records,
)
from .models import PhotocopyRecord
from .prices import get_price_config, save_price_config


class RequiredSheetsTests(SimpleTestCase):
    """Sheet arithmetic"""

    def test_single_sided(self):
        self.assertEqual(required_sheets(10, 1, False), 10)
        self.assertEqual(required_sheets(7, 3, False), 21)
        self.assertEqual(required_sheets(9, 1, False), 9)

    def test_duplex_even(self):
        self.assertEqual(required_sheets(10, 1, True), 5)
        self.assertEqual(required_sheets(4, 1, True), 2)
        self.assertEqual(required_sheets(8, 10, True), 40)

    def test_duplex_odd_rounds_up(self):
        self.assertEqual(required_sheets(9, 10, True), 50)
        self.assertEqual(required_sheets(1, 1, True), 1)

    def test_zero_quantity(self):
        self.assertEqual(required_sheets(0, 5, True), 0)
        self.assertEqual(required_sheets(0, 5, False), 0)

    def test_coercion(self):
        self.assertEqual(required_sheets('4', '2', False), 8)
        self.assertEqual(required_sheets('abc', 2, False), 0)
        self.assertEqual(required_sheets(None, None, False), 0)
        # multiplier falls back to 1 when missing, invalid or zero
        self.assertEqual(required_sheets(5, None, False), 5)
        self.assertEqual(required_sheets(5, 'x', False), 5)
        self.assertEqual(required_sheets(5, 0, False), 5)

    def test_duplex_never_exceeds_single_sided(self):
        for cantidad in range(0, 30):
            self.assertLessEqual(required_sheets(cantidad, 2, True), required_sheets(cantidad, 2, False))

    def test_sheets_per_copy(self):
        self.assertEqual(sheets_per_copy(3, True), 2)
        self.assertEqual(sheets_per_copy(3, False), 3)
        self.assertEqual(sheets_per_copy(-4, False), 0)

    def test_duplex_halves_even_and_rounds_odd_up(self):
        for cantidad in range(1, 21):
            expected = cantidad // 2 if cantidad % 2 == 0 else cantidad // 2 + 1
            self.assertEqual(sheets_per_copy(cantidad, True), expected)
            self.assertEqual(required_sheets(cantidad, 3, True), expected * 3)

    def test_printed_pages(self):
        self.assertEqual(printed_pages(9, 10), 90)
        self.assertEqual(printed_pages(9, 0), 9)


class BillableCostTests(SimpleTestCase):
    """Cost with grace applied to aggregate counts"""

    def test_defaults(self):
        cost = billable_cost(3, 2, 5)
        self.assertEqual(cost.billable_bn, 2)
        self.assertEqual(cost.billable_color, 1)
        self.assertEqual(cost.cost_bn, Decimal('30'))
        self.assertEqual(cost.cost_color, Decimal('50'))
        self.assertEqual(cost.cost_sheets, Decimal('25'))
        self.assertEqual(cost.total, Decimal('105'))

    def test_grace_never_goes_negative(self):
        cost = billable_cost(0, 0, 0)
        self.assertEqual(cost.billable_bn, 0)
        self.assertEqual(cost.billable_color, 0)
        self.assertEqual(cost.total, Decimal('0'))

    def test_custom_prices(self):
        prices = {
            'precio_bn': Decimal('10'),
            'precio_color': Decimal('100'),
            'precio_hoja': Decimal('0'),
            'fotocopia_gracia_bn': 0,
            'fotocopia_gracia_color': 5,
        }
        cost = billable_cost(4, 6, 10, prices)
        self.assertEqual(cost.cost_bn, Decimal('40'))
        self.assertEqual(cost.cost_color, Decimal('100'))
        self.assertEqual(cost.cost_sheets, Decimal('0'))

    def test_missing_keys_fall_back_to_defaults(self):
        cost = billable_cost(2, 0, 0, {'precio_bn': None})
        self.assertEqual(cost.cost_bn, Decimal('15'))


class SummarizeRecordsTests(SimpleTestCase):

    def test_summary(self):
        records = [
            {'cantidad': 10, 'multiplicador': 1, 'tipo': 'bn', 'doble_hoja': False},
            {'cantidad': 9, 'multiplicador': 2, 'tipo': 'color', 'doble_hoja': True},
        ]
        summary = summarize_records(records)
        self.assertEqual(summary['total_registros'], 2)
        self.assertEqual(summary['total_copias'], 28)
        self.assertEqual(summary['total_bn'], 10)
        self.assertEqual(summary['total_color'], 18)
        self.assertEqual(summary['total_doble_hoja'], 18)
        self.assertEqual(summary['total_una_hoja'], 10)
        self.assertEqual(summary['total_hojas'], 20)
        self.assertEqual(summary['total_hojas_sin_doble_cara'], 28)

    def test_empty(self):
        self.assertEqual(summarize_records([])['total_hojas'], 0)

    def test_reams(self):
        self.assertEqual(reams_needed(0), 0)
        self.assertEqual(reams_needed(500), 1)
        self.assertEqual(reams_needed(501), 2)


class PhotocopyRecordModelTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_owner()
        self.group = self.user.owned_groups.first()

    def test_total_hojas_stored_on_save(self):
        record = TestDataFactory.create_photocopy(self.user, self.group, cantidad=9, multiplicador=10, doble_hoja=True)
        self.assertEqual(record.total_hojas, 50)
        record.doble_hoja = False
        record.save(update_fields=['doble_hoja'])
        record.refresh_from_db()
        self.assertEqual(record.total_hojas, 90)

    def test_describe(self):
        record = TestDataFactory.create_photocopy(self.user, self.group, cantidad=3, multiplicador=2, tipo='color',
                                                  doble_hoja=True)
        self.assertEqual(record.describe(), '3 Color x2 (doble hoja)')


class PhotocopyAPITests(TestCase):
    """Record CRUD and permission checks"""

    def setUp(self):
        cache.clear()
        self.owner = TestDataFactory.create_owner()
        self.group = self.owner.owned_groups.first()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_create_record(self):
        response = self.client.post('/api/v1/photocopies/', {
            'cantidad': 9, 'multiplicador': 10, 'tipo': 'bn', 'doble_hoja': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_hojas'], 50)
        self.assertEqual(response.data['total_paginas'], 90)
        record = PhotocopyRecord.objects.get(pk=response.data['id'])
        self.assertEqual(record.usuario, self.owner)
        self.assertEqual(record.grupo, self.group)
        self.assertTrue(AuditLog.objects.filter(model_name='PhotocopyRecord', action='create').exists())

    def test_create_rejects_invalid_quantity(self):
        response = self.client.post('/api/v1/photocopies/', {'cantidad': 0, 'tipo': 'bn'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('cantidad', response.data)
        self.assertEqual(PhotocopyRecord.objects.count(), 0)

    def test_create_rejects_invalid_type(self):
        response = self.client.post('/api/v1/photocopies/', {'cantidad': 1, 'tipo': 'sepia'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters_by_user(self):
        other = TestDataFactory.create_user()
        TestDataFactory.create_membership(other, self.group)
        TestDataFactory.create_photocopy(self.owner, self.group, cantidad=1)
        TestDataFactory.create_photocopy(other, self.group, cantidad=2)

        response = self.client.get('/api/v1/photocopies/', {'usuario_id': other.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['cantidad'], 2)

    def test_invalid_date_filter_is_rejected(self):
        TestDataFactory.create_photocopy(self.owner, self.group, cantidad=1)
        for path in ('/api/v1/photocopies/', '/api/v1/photocopies/stats/', '/api/v1/reports/photocopies/statistics/'):
            response = self.client.get(path, {'desde': 'not-a-date'})
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, path)
            self.assertIn('desde', response.data)
        response = self.client.get('/api/v1/photocopies/', {'hasta': '2024-13-45'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('hasta', response.data)

    def test_worker_without_permission_is_forbidden(self):
        worker = TestDataFactory.create_user()
        client = AuthenticatedAPIClient()
        client.authenticate_user(worker)
        response = client.get('/api/v1/photocopies/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_worker_with_read_permission(self):
        worker = TestDataFactory.create_user()
        TestDataFactory.grant_permission(worker, 'fotocopia_leer')
        client = AuthenticatedAPIClient()
        client.authenticate_user(worker)
        self.assertEqual(client.get('/api/v1/photocopies/').status_code, status.HTTP_200_OK)
        response = client.post('/api/v1/photocopies/', {'cantidad': 1, 'tipo': 'bn'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_creator_or_group_owner_can_edit(self):
        creator = TestDataFactory.create_user()
        TestDataFactory.create_membership(creator, self.group)
        TestDataFactory.grant_module(creator, 'fotocopias')
        record = TestDataFactory.create_photocopy(creator, self.group, cantidad=4)

        stranger = TestDataFactory.create_user()
        TestDataFactory.create_membership(stranger, self.group)
        TestDataFactory.grant_module(stranger, 'fotocopias')
        client = AuthenticatedAPIClient()
        client.authenticate_user(stranger)
        response = client.put(f'/api/v1/photocopies/{record.id}/', {'cantidad': 8}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)

        # the group owner may
        response = self.client.put(f'/api/v1/photocopies/{record.id}/', {'cantidad': 8}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_hojas'], 8)
        record.refresh_from_db()
        self.assertEqual(record.usuario, creator)

    def test_update_records_changes_in_audit(self):
        record = TestDataFactory.create_photocopy(self.owner, self.group, cantidad=4)
        self.client.put(f'/api/v1/photocopies/{record.id}/', {'doble_hoja': True}, format='json')
        entry = AuditLog.objects.get(model_name='PhotocopyRecord', action='update')
        self.assertEqual(entry.changes['doble_hoja'], {'old': False, 'new': True})
        self.assertEqual(entry.changes['total_hojas'], {'old': 4, 'new': 2})

    def test_delete_record(self):
        record = TestDataFactory.create_photocopy(self.owner, self.group)
        response = self.client.delete(f'/api/v1/photocopies/{record.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(PhotocopyRecord.objects.filter(pk=record.id).exists())

    def test_missing_record(self):
        response = self.client.get('/api/v1/photocopies/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_stats_apply_grace_once(self):
        TestDataFactory.create_photocopy(self.owner, self.group, cantidad=2, tipo='bn')
        TestDataFactory.create_photocopy(self.owner, self.group, cantidad=2, tipo='bn')
        response = self.client.get('/api/v1/photocopies/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_bn'], 4)
        self.assertEqual(response.data['costos']['copias_bn_facturables'], 3)
        self.assertEqual(response.data['costos']['costo_total'], 3 * 15 + 4 * 5)

    def test_users_endpoint(self):
        TestDataFactory.create_photocopy(self.owner, self.group)
        TestDataFactory.create_photocopy(self.owner, self.group)
        response = self.client.get('/api/v1/photocopies/users/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['usuario_id'], self.owner.id)

    def test_audit_pagination(self):
        for _ in range(3):
            self.client.post('/api/v1/photocopies/', {'cantidad': 1, 'tipo': 'bn'}, format='json')
        response = self.client.get('/api/v1/photocopies/audit/', {'limit': 2})
        self.assertEqual(response.data['total'], 3)
        self.assertEqual(len(response.data['records']), 2)
        self.assertEqual(response.data['records'][0]['accion'], 'create')

    def test_permissions_report_for_owner(self):
        response = self.client.get('/api/v1/photocopies/permissions/')
        self.assertTrue(response.data['hasAccess'])
        self.assertTrue(response.data['isOwner'])
        self.assertIn('fotocopia_escribir', response.data['permissions'])

    def test_paper_types_cache_invalidated(self):
        TestDataFactory.create_paper_type(name='Carta')
        self.assertEqual(len(self.client.get('/api/v1/photocopies/paper-types/').data), 1)
        TestDataFactory.create_paper_type(name='Oficio')
        self.assertEqual(len(self.client.get('/api/v1/photocopies/paper-types/').data), 2)


class PriceConfigTests(TestCase):

    def setUp(self):
        cache.clear()

    def test_defaults_when_unset(self):
        config = get_price_config()
        self.assertEqual(config['precio_bn'], Decimal('15'))
        self.assertEqual(config['fotocopia_gracia_color'], 1)
        self.assertEqual(config['precio_resma'], Decimal('2500'))

    def test_save_invalidates_cache(self):
        get_price_config()
        written = save_price_config({'precio_bn': Decimal('20'), 'unknown': 1, 'precio_color': None})
        self.assertEqual(written, ['precio_bn'])
        self.assertEqual(get_price_config()['precio_bn'], Decimal('20'))
        self.assertEqual(Setting.objects.get(key='precio_bn').category, 'precios')

    def test_invalid_stored_value_uses_default(self):
        Setting.objects.create(key='precio_hoja', value='not-a-number')
        self.assertEqual(get_price_config()['precio_hoja'], Decimal('5'))
