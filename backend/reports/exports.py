"""
PDF (ReportLab) and Excel (openpyxl) renderings of the photocopy report.
Both documents are built from the same payloads the JSON endpoints return.
"""
import logging
from io import BytesIO

from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger('backend.reports')

REPORT_TITLE = 'Reporte de Sistema de Fotocopias'
FOOTER_TEXT = 'Sistema de Gestión de Fotocopias'
ACCENT_HEX = '14B8A6'
DAILY_ROWS_IN_PDF = 10

PDF_CONTENT_TYPE = 'application/pdf'
EXCEL_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _format_currency(value):
    return f"${round(float(value or 0)):,}".replace(',', '.')


def _format_number(value):
    return f"{int(value or 0):,}".replace(',', '.')


def _period_label(desde, hasta):
    return f"{desde or 'N/A'} a {hasta or 'N/A'}"


def export_filename(extension, generated_at=None):
    generated_at = generated_at or timezone.localtime()
    return f"reporte-fotocopias-{generated_at.strftime('%d-%m-%Y')}.{extension}"


def general_rows(statistics):
    general = statistics['general']
    return [
        ('Total de Copias', general['total_copias']),
        ('Total de Hojas', general['total_hojas']),
        ('Copias B/N', general['total_bn']),
        ('Copias Color', general['total_color']),
        ('Copias Doble Cara', general['total_doble_hoja']),
        ('Copias Una Cara', general['total_una_hoja']),
        ('Usuarios Únicos', general['usuarios_unicos']),
        ('Costo Estimado Total', statistics['costos']['costo_total']),
    ]


def cost_rows(statistics, prices):
    general = statistics['general']
    costs = statistics['costos']
    return [
        ('Copias B/N', costs['copias_bn_facturables'], float(prices['precio_bn']), costs['costo_bn']),
        ('Copias Color', costs['copias_color_facturables'], float(prices['precio_color']), costs['costo_color']),
        ('Costo Papel', general['total_hojas'], float(prices['precio_hoja']), costs['costo_hojas']),
    ]


def efficiency_rows(analysis):
    savings = analysis['ahorroDobleHoja']
    reams = analysis['planificacionResmas']
    return [
        ('Ahorro Doble Cara', savings['costo_ahorrado']),
        ('Hojas Ahorradas', savings['hojas_ahorradas']),
        ('Resmas Utilizadas', reams['resmas_utilizadas']),
        ('Costo Resmas', reams['costo_resmas']),
        ('Promedio Mensual', analysis['promedios']['costo_promedio_mensual']),
        ('Proyección Anual Resmas', reams['proyeccion_anual_resmas']),
        ('Proyección Anual Costo', reams['proyeccion_anual_costo']),
    ]


def daily_rows(statistics):
    return [
        (day['fecha'], day['bn'], day['color'], day['total_hojas'], day['copias'])
        for day in statistics['porDia']
    ]


def _pdf_table(data, col_widths=None):
    table = Table(data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(f'#{ACCENT_HEX}')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('ALIGN', (1, 1), (-1, -1), 'RIGHT'),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f8f9fa')]),
    ]))
    return table


def _draw_footer(canvas, doc):
    canvas.saveState()
    canvas.setFont('Helvetica', 8)
    canvas.setFillColor(colors.grey)
    canvas.drawString(20 * mm, 10 * mm, FOOTER_TEXT)
    canvas.drawRightString(A4[0] - 20 * mm, 10 * mm, f"Página {doc.page}")
    canvas.restoreState()


def build_pdf_report(statistics, analysis, prices, desde=None, hasta=None):
    """Render the report as PDF bytes"""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4,
        leftMargin=20 * mm, rightMargin=20 * mm, topMargin=20 * mm, bottomMargin=20 * mm,
        title=REPORT_TITLE,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle('ReportTitle', parent=styles['Heading1'], alignment=TA_CENTER, fontSize=18)
    subtitle_style = ParagraphStyle('ReportSubtitle', parent=styles['Normal'], alignment=TA_CENTER,
                                    textColor=colors.grey)
    section_style = styles['Heading2']

    generated_at = timezone.localtime()
    elements = [
        Paragraph(REPORT_TITLE, title_style),
        Paragraph(f"Generado el: {generated_at.strftime('%d-%m-%Y')}", subtitle_style),
        Paragraph(f"Período: {_period_label(desde, hasta)}", subtitle_style),
        Spacer(1, 10 * mm),
    ]

    general = [['Métrica', 'Valor']]
    for label, value in general_rows(statistics):
        shown = _format_currency(value) if label.startswith('Costo') else _format_number(value)
        general.append([label, shown])
    elements += [Paragraph('Estadísticas Generales', section_style), _pdf_table(general), Spacer(1, 8 * mm)]

    costs = [['Tipo', 'Cantidad', 'Precio Unitario', 'Costo Total']]
    for label, quantity, unit_price, total in cost_rows(statistics, prices):
        costs.append([label, _format_number(quantity), _format_currency(unit_price), _format_currency(total)])
    costs.append(['', '', 'TOTAL', _format_currency(statistics['costos']['costo_total'])])
    elements += [Paragraph('Desglose de Costos', section_style), _pdf_table(costs), Spacer(1, 8 * mm)]

    if analysis:
        efficiency = [['Métrica', 'Valor']]
        for label, value in efficiency_rows(analysis):
            is_money = label.startswith(('Ahorro', 'Costo', 'Promedio')) or label.endswith('Costo')
            efficiency.append([label, _format_currency(value) if is_money else _format_number(value)])
        elements += [Paragraph('Análisis de Eficiencia', section_style), _pdf_table(efficiency), Spacer(1, 8 * mm)]

    days = daily_rows(statistics)[-DAILY_ROWS_IN_PDF:]
    if days:
        daily = [['Fecha', 'B/N', 'Color', 'Hojas', 'Total Copias']]
        daily += [[fecha] + [_format_number(v) for v in values] for fecha, *values in days]
        elements += [
            Paragraph(f'Tendencias Diarias (Últimos {DAILY_ROWS_IN_PDF} días)', section_style),
            _pdf_table(daily),
        ]

    doc.build(elements, onFirstPage=_draw_footer, onLaterPages=_draw_footer)
    logger.info(f"Built PDF photocopy report ({len(days)} daily rows)")
    return buffer.getvalue()


def _autosize_columns(worksheet):
    for column in worksheet.columns:
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)


def _write_header(worksheet, row, headers, fill, font):
    for col, header in enumerate(headers, 1):
        cell = worksheet.cell(row=row, column=col, value=header)
        cell.fill = fill
        cell.font = font


def build_excel_report(statistics, analysis, prices, desde=None, hasta=None):
    """Render the report as an .xlsx workbook (bytes) with one sheet per section"""
    buffer = BytesIO()
    workbook = Workbook()
    workbook.remove(workbook.active)

    header_fill = PatternFill(start_color=ACCENT_HEX, end_color=ACCENT_HEX, fill_type='solid')
    header_font = Font(color='FFFFFF', bold=True)
    title_font = Font(size=14, bold=True)

    ws = workbook.create_sheet('Estadísticas')
    ws['A1'] = REPORT_TITLE
    ws['A1'].font = title_font
    ws['A1'].alignment = Alignment(horizontal='left')
    ws.append(['Generado el:', timezone.localtime().strftime('%d-%m-%Y')])
    ws.append(['Período:', _period_label(desde, hasta)])
    ws.append([])
    _write_header(ws, 5, ['Métrica', 'Valor'], header_fill, header_font)
    for label, value in general_rows(statistics):
        ws.append([label, value])

    ws = workbook.create_sheet('Costos')
    _write_header(ws, 1, ['Tipo', 'Cantidad', 'Precio Unitario', 'Costo Total'], header_fill, header_font)
    for row in cost_rows(statistics, prices):
        ws.append(list(row))
    ws.append([])
    ws.append(['TOTAL', '', '', statistics['costos']['costo_total']])
    ws.cell(row=ws.max_row, column=1).font = Font(bold=True)

    days = daily_rows(statistics)
    if days:
        ws = workbook.create_sheet('Tendencias')
        _write_header(ws, 1, ['Fecha', 'B/N', 'Color', 'Hojas', 'Total Copias'], header_fill, header_font)
        for row in days:
            ws.append(list(row))

    if analysis:
        ws = workbook.create_sheet('Eficiencia')
        _write_header(ws, 1, ['Métrica', 'Valor'], header_fill, header_font)
        for label, value in efficiency_rows(analysis):
            ws.append([label, value])

    for sheet in workbook.worksheets:
        _autosize_columns(sheet)

    workbook.save(buffer)
    logger.info(f"Built Excel photocopy report with sheets {workbook.sheetnames}")
    return buffer.getvalue()
