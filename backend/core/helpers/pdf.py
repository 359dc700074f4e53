"""
Geração de PDF dos relatórios (reportlab).
"""

from datetime import date, datetime
from decimal import Decimal

from django.utils import timezone
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas


def format_currency(value: Decimal) -> str:
    """Formata valor decimal como moeda brasileira."""
    if value is None:
        return "R$ 0,00"
    return f"R$ {value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def format_date(date_obj) -> str:
    """Formata data no padrão dd/mm/yyyy."""
    if date_obj is None:
        return "-"
    if isinstance(date_obj, str):
        date_obj = date.fromisoformat(date_obj)
    return date_obj.strftime("%d/%m/%Y")


def truncate_text(text: str, max_length: int) -> str:
    if text is None:
        return ""
    if len(text) > max_length:
        return text[:max_length - 3] + "..."
    return text


class PDFReportBase:
    """Cabeçalho, tabelas, quebra de página e rodapé padronizados."""

    def __init__(self, title: str, company_name: str = ""):
        self.title = title
        self.company_name = company_name
        self.margin = 40
        self.page_count = 1

    def draw_header(self, pdf: canvas.Canvas, width: float, height: float, date_range: str = ""):
        pdf.setFont("Helvetica-Bold", 14)
        pdf.drawCentredString(width / 2, height - 40, self.company_name)

        pdf.setFont("Helvetica-Bold", 12)
        pdf.drawCentredString(width / 2, height - 60, self.title)

        if date_range:
            pdf.setFont("Helvetica", 9)
            pdf.drawString(self.margin, height - 90, f"Período: {date_range}")

        pdf.setFont("Helvetica", 8)
        gerado_em = timezone.localtime().strftime('%d/%m/%Y às %H:%M:%S')
        pdf.drawString(self.margin, height - 105, f"Gerado em: {gerado_em}")

        return height - 130

    def draw_section_title(self, pdf: canvas.Canvas, y: float, title: str) -> float:
        pdf.setFont("Helvetica-Bold", 11)
        pdf.drawString(self.margin, y, title)
        return y - 18

    def draw_table_header(self, pdf: canvas.Canvas, y: float, columns: list, width: float) -> float:
        """columns: lista de dicts com 'label' e 'x'."""
        pdf.setFont("Helvetica-Bold", 9)
        for col in columns:
            pdf.drawString(col['x'], y, col['label'])

        y -= 5
        pdf.line(self.margin, y, width - self.margin, y)
        return y - 15

    def check_page_break(self, pdf: canvas.Canvas, y: float, width: float, height: float,
                         columns: list = None) -> float:
        if y < 60:
            self.draw_footer(pdf, width)
            pdf.showPage()
            self.page_count += 1
            y = height - 50
            if columns:
                y = self.draw_table_header(pdf, y, columns, width)
        return y

    def draw_row(self, pdf: canvas.Canvas, y: float, row_data: dict, columns: list, font_size: int = 9) -> float:
        """columns: lista de dicts com 'key', 'x' e opcionalmente 'max_length'."""
        pdf.setFont("Helvetica", font_size)

        for col in columns:
            value = row_data.get(col['key'], "")
            if isinstance(value, Decimal):
                value = format_currency(value)
            elif isinstance(value, (date, datetime)):
                value = format_date(value)
            elif value is None:
                value = "-"
            else:
                value = str(value)

            if col.get('max_length'):
                value = truncate_text(value, col['max_length'])
            pdf.drawString(col['x'], y, value)

        return y - 15

    def draw_total_row(self, pdf: canvas.Canvas, y: float, label: str, value: Decimal,
                       x_label: float, x_value: float) -> float:
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(x_label, y, label)
        pdf.drawString(x_value, y, format_currency(value))
        return y - 20

    def draw_footer(self, pdf: canvas.Canvas, width: float):
        pdf.setFont("Helvetica", 7)
        pdf.drawRightString(width - 40, 20, f"Página {self.page_count}")

    def draw_table(self, pdf, y, width, height, columns, rows) -> float:
        y = self.check_page_break(pdf, y, width, height)
        y = self.draw_table_header(pdf, y, columns, width)
        for row in rows:
            y = self.check_page_break(pdf, y, width, height, columns)
            y = self.draw_row(pdf, y, row, columns)
        return y - 10


def render_sales_report(output, report: dict, company_name: str, date_range: str = ""):
    """Desenha o relatório de vendas (saída de services.reports.sales_report) em `output`."""
    pdf = canvas.Canvas(output, pagesize=A4)
    width, height = A4
    margin = 40

    base = PDFReportBase("Relatório de Vendas", company_name)
    y = base.draw_header(pdf, width, height, date_range)

    resumo = report['resumo']
    y = base.draw_section_title(pdf, y, "Resumo")
    y = base.draw_row(pdf, y, {'label': 'Total de vendas', 'value': resumo['total_vendas']},
                      [{'key': 'label', 'x': margin}, {'key': 'value', 'x': margin + 200}])
    y = base.draw_row(pdf, y, {'label': 'Pedidos', 'value': resumo['total_pedidos']},
                      [{'key': 'label', 'x': margin}, {'key': 'value', 'x': margin + 200}])
    y = base.draw_row(pdf, y, {'label': 'Ticket médio', 'value': resumo['ticket_medio']},
                      [{'key': 'label', 'x': margin}, {'key': 'value', 'x': margin + 200}])
    y -= 15

    y = base.draw_section_title(pdf, y, "Vendas por dia")
    y = base.draw_table(
        pdf, y, width, height,
        [{'label': 'Dia', 'key': 'dia', 'x': margin}, {'label': 'Total', 'key': 'total', 'x': margin + 200}],
        [{'dia': format_date(dia), 'total': total} for dia, total in report['vendas_por_dia'].items()],
    )
    if report['vendas_por_dia']:
        y = base.draw_total_row(pdf, y, "TOTAL", resumo['total_vendas'], margin, margin + 200)

    y = base.draw_section_title(pdf, base.check_page_break(pdf, y, width, height), "Produtos mais vendidos")
    y = base.draw_table(
        pdf, y, width, height,
        [
            {'label': 'Produto', 'key': 'name', 'x': margin, 'max_length': 45},
            {'label': 'Qtd.', 'key': 'quantity', 'x': margin + 300},
            {'label': 'Receita', 'key': 'revenue', 'x': margin + 380},
        ],
        report['produtos_mais_vendidos'],
    )

    y = base.draw_section_title(pdf, base.check_page_break(pdf, y, width, height), "Vendas por categoria")
    y = base.draw_table(
        pdf, y, width, height,
        [
            {'label': 'Categoria', 'key': 'name', 'x': margin, 'max_length': 45},
            {'label': 'Qtd.', 'key': 'quantity', 'x': margin + 300},
            {'label': 'Receita', 'key': 'revenue', 'x': margin + 380},
        ],
        report['vendas_por_categoria'],
    )

    y = base.draw_section_title(pdf, base.check_page_break(pdf, y, width, height), "Formas de pagamento")
    base.draw_table(
        pdf, y, width, height,
        [{'label': 'Forma', 'key': 'metodo', 'x': margin}, {'label': 'Pedidos', 'key': 'pedidos', 'x': margin + 200}],
        [{'metodo': metodo, 'pedidos': pedidos} for metodo, pedidos in report['metodos_pagamento'].items()],
    )

    base.draw_footer(pdf, width)
    pdf.showPage()
    pdf.save()
