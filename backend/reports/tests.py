"""
Test suite for the photocopy dashboard reports
Tests: statistics, advanced analysis, prices, activity feed and PDF/Excel exports
"""
from datetime import datetime
from io import BytesIO

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from openpyxl import load_workbook
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.photocopies.models import PhotocopyRecord
from backend.photocopies.prices import get_price_config
from .analytics import (
    advanced_analysis, chart_series, daily_statistics, general_statistics, monthly_statistics,
    statistics_report, user_statistics,
)
from .exports import build_excel_report, build_pdf_report


def local_dt(*args):
    return timezone.make_aware(datetime(*args))


class DashboardDataMixin:
    """Three records over two days and two months"""

    def create_records(self):
        self.owner = TestDataFactory.create_owner()
        self.group = self.owner.owned_groups.first()
        TestDataFactory.create_photocopy(self.owner, self.group, cantidad=10, tipo='bn',
                                         registrado_en=local_dt(2024, 3, 10, 12))
        TestDataFactory.create_photocopy(self.owner, self.group, cantidad=9, multiplicador=2, tipo='color',
                                         doble_hoja=True, registrado_en=local_dt(2024, 3, 10, 15))
        TestDataFactory.create_photocopy(self.owner, self.group, cantidad=4, tipo='bn', doble_hoja=True,
                                         registrado_en=local_dt(2024, 4, 5, 10))


class AnalyticsTests(DashboardDataMixin, TestCase):

    def setUp(self):
        cache.clear()
        self.create_records()
        self.prices = get_price_config()

    def test_general_statistics(self):
        general = general_statistics(PhotocopyRecord.objects.all())
        self.assertEqual(general['total_registros'], 3)
        self.assertEqual(general['total_copias'], 32)
        self.assertEqual(general['total_bn'], 14)
        self.assertEqual(general['total_color'], 18)
        self.assertEqual(general['total_doble_hoja'], 22)
        self.assertEqual(general['total_una_hoja'], 10)
        self.assertEqual(general['total_hojas'], 22)
        self.assertEqual(general['hojas_ahorradas'], 10)
        self.assertEqual(general['usuarios_unicos'], 1)

    def test_empty_queryset(self):
        general = general_statistics(PhotocopyRecord.objects.none())
        self.assertEqual(general['total_copias'], 0)
        self.assertEqual(general['total_hojas'], 0)

    def test_breakdowns_by_day_month_and_user(self):
        queryset = PhotocopyRecord.objects.all()
        days = daily_statistics(queryset)
        self.assertEqual([(day['registros'], day['copias'], day['total_hojas']) for day in days],
                         [(2, 28, 20), (1, 4, 2)])
        self.assertEqual(days[0]['doble_hoja'], 18)
        self.assertEqual(days[0]['una_hoja'], 10)

        march, april = monthly_statistics(queryset)
        self.assertEqual(march['bn'], 10)
        self.assertEqual(march['color'], 18)
        self.assertEqual(march['hojas_ahorradas'], 8)
        self.assertEqual(april['copias_doble_cara'], 4)
        self.assertEqual(april['hojas_ahorradas'], 2)

        users = user_statistics(queryset)
        self.assertEqual(len(users), 1)
        self.assertEqual(users[0]['registros'], 3)
        self.assertEqual(users[0]['copias'], 32)
        self.assertEqual(users[0]['total_hojas'], 22)

    def test_statistics_report(self):
        report = statistics_report(PhotocopyRecord.objects.all(), self.prices)
        self.assertEqual([day['fecha'] for day in report['porDia']], ['10-03-2024', '05-04-2024'])
        self.assertEqual([month['mes_formato'] for month in report['porMes']], ['03/2024', '04/2024'])
        self.assertEqual(report['porUsuario'][0]['copias'], 32)
        costs = report['costos']
        self.assertEqual(costs['copias_bn_facturables'], 13)
        self.assertEqual(costs['copias_color_facturables'], 17)
        self.assertEqual(costs['costo_total'], 13 * 15 + 17 * 50 + 22 * 5)
        self.assertEqual(report['analisis']['planificacionResmas']['resmas_utilizadas'], 1)

    def test_advanced_analysis(self):
        analysis = advanced_analysis(PhotocopyRecord.objects.all(), self.prices)
        self.assertEqual(analysis['ahorroDobleHoja']['hojas_ahorradas'], 10)
        self.assertEqual(analysis['ahorroDobleHoja']['costo_ahorrado'], 50)
        self.assertEqual(analysis['promedios']['hojas_por_mes'], 11)
        self.assertEqual(analysis['picoOperativo']['mes'], '03/2024')
        self.assertEqual(analysis['picoOperativo']['hojas'], 20)
        self.assertTrue(analysis['recomendaciones']['incrementar_doble_cara'])
        self.assertEqual(analysis['recomendaciones']['stock_recomendado'], 1)
        self.assertEqual(len(analysis['tendenciasMensuales']), 2)

    def test_advanced_analysis_without_records(self):
        analysis = advanced_analysis(PhotocopyRecord.objects.none(), self.prices)
        self.assertIsNone(analysis['picoOperativo'])
        self.assertFalse(analysis['recomendaciones']['incrementar_doble_cara'])
        self.assertEqual(analysis['promedios']['hojas_por_dia'], 0)

    def test_chart_series(self):
        report = statistics_report(PhotocopyRecord.objects.all(), self.prices)
        charts = chart_series(report)
        self.assertEqual(charts['actividad']['labels'], ['10/03', '05/04'])
        self.assertEqual(charts['distribucion']['data'], [14, 18])
        self.assertEqual(charts['caras']['data'], [10, 22])

    def test_exports_render(self):
        queryset = PhotocopyRecord.objects.all()
        report = statistics_report(queryset, self.prices)
        analysis = advanced_analysis(queryset, self.prices)

        pdf = build_pdf_report(report, analysis, self.prices, '2024-03-01', '2024-04-30')
        self.assertTrue(pdf.startswith(b'%PDF'))

        workbook = load_workbook(BytesIO(build_excel_report(report, analysis, self.prices)))
        self.assertEqual(workbook.sheetnames, ['Estadísticas', 'Costos', 'Tendencias', 'Eficiencia'])
        self.assertEqual(workbook['Tendencias'].max_row, 3)


class ReportsAPITests(DashboardDataMixin, TestCase):

    def setUp(self):
        cache.clear()
        self.create_records()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.owner)

    def test_statistics_endpoint(self):
        response = self.client.get('/api/v1/reports/photocopies/statistics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['general']['total_copias'], 32)
        self.assertIn('graficos', response.data)
        self.assertEqual(response.data['precios']['precio_bn'], 15.0)

    def test_statistics_date_range(self):
        response = self.client.get('/api/v1/reports/photocopies/statistics/', {'desde': '2024-04-01'})
        self.assertEqual(response.data['general']['total_registros'], 1)
        self.assertEqual(response.data['general']['total_hojas'], 2)

    def test_analysis_endpoint(self):
        response = self.client.get('/api/v1/reports/photocopies/analysis/', {'hasta': '2024-03-31'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['planificacionResmas']['hojas_utilizadas'], 20)

    def test_statistics_requires_read_permission(self):
        member = TestDataFactory.create_user()
        client = AuthenticatedAPIClient()
        client.authenticate_user(member)
        response = client.get('/api/v1/reports/photocopies/statistics/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_get_prices(self):
        response = self.client.get('/api/v1/reports/photocopies/prices/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['precio_color'], 50.0)
        self.assertEqual(response.data['fotocopia_gracia_bn'], 1)

    def test_update_prices(self):
        response = self.client.post('/api/v1/reports/photocopies/prices/', {'precio_bn': 20}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['precios']['precio_bn'], 20.0)
        entry = AuditLog.objects.get(action='price_change')
        self.assertEqual(entry.changes['precio_bn'], {'old': 15.0, 'new': 20.0})

        # the new price is used right away
        response = self.client.get('/api/v1/reports/photocopies/statistics/')
        self.assertEqual(response.data['costos']['costo_bn'], 13 * 20)

    def test_update_prices_validation(self):
        response = self.client.post('/api/v1/reports/photocopies/prices/', {'precio_bn': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/reports/photocopies/prices/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_prices_requires_configuration_permission(self):
        member = TestDataFactory.create_user()
        TestDataFactory.grant_permission(member, 'fotocopia_leer')
        client = AuthenticatedAPIClient()
        client.authenticate_user(member)
        self.assertEqual(client.get('/api/v1/reports/photocopies/prices/').status_code, status.HTTP_200_OK)
        response = client.post('/api/v1/reports/photocopies/prices/', {'precio_bn': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_activity(self):
        for cantidad in (1, 2, 3):
            self.client.post('/api/v1/photocopies/', {'cantidad': cantidad, 'tipo': 'bn'}, format='json')
        response = self.client.get('/api/v1/reports/photocopies/activity/', {'limite': 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)
        self.assertEqual(response.data[0]['accion'], 'create')
        self.assertEqual(response.data[0]['tabla_afectada'], 'fotocopias')

    def test_activity_requires_audit_permission(self):
        member = TestDataFactory.create_user()
        client = AuthenticatedAPIClient()
        client.authenticate_user(member)
        response = client.get('/api/v1/reports/photocopies/activity/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_activity_invalid_limit(self):
        response = self.client.get('/api/v1/reports/photocopies/activity/', {'limite': 'many'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_export_pdf(self):
        response = self.client.get('/api/v1/reports/photocopies/export/pdf/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertIn('attachment; filename="reporte-fotocopias-', response['Content-Disposition'])
        self.assertTrue(response.content.startswith(b'%PDF'))
        self.assertTrue(AuditLog.objects.filter(action='export', object_id='pdf').exists())

    def test_export_excel(self):
        response = self.client.get('/api/v1/reports/photocopies/export/excel/', {'desde': '2024-03-01'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Disposition'].endswith('.xlsx"'))
        workbook = load_workbook(BytesIO(response.content))
        self.assertIn('Costos', workbook.sheetnames)
