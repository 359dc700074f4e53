from django.http import HttpResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..mixins import parse_date
from ...authentication import get_session
from ...helpers.pdf import format_date, render_sales_report
from ...permissions import Action, Resource, require
from ...services import reports as report_service


def _period(request):
    return (
        parse_date(request.query_params.get('start_date'), 'start_date'),
        parse_date(request.query_params.get('end_date'), 'end_date'),
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_report_view(request):
    """
    GET /api/reports/sales/?start_date=AAAA-MM-DD&end_date=AAAA-MM-DD
    Resumo, vendas por dia, produtos mais vendidos, vendas por categoria,
    formas de pagamento e tipos de entrega. Pedidos cancelados não entram.
    """
    session = get_session(request)
    start_date, end_date = _period(request)
    orders = report_service.report_orders(session, start_date, end_date)
    return Response(report_service.sales_report(orders))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_report_pdf_view(request):
    """GET /api/reports/sales/pdf/ - mesmo relatório, em PDF."""
    session = get_session(request)
    require(session, Resource.REPORTS, Action.EXPORT)
    start_date, end_date = _period(request)
    report = report_service.sales_report(report_service.report_orders(session, start_date, end_date))

    date_range = ''
    if start_date or end_date:
        date_range = f"{format_date(start_date)} a {format_date(end_date)}"

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = 'inline; filename=relatorio_vendas.pdf'
    render_sales_report(response, report, session.company_name or 'Todas as empresas', date_range)
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_report_view(request):
    """GET /api/reports/products/ - quantidade vendida e receita por produto."""
    session = get_session(request)
    start_date, end_date = _period(request)
    orders = report_service.report_orders(session, start_date, end_date)
    return Response(report_service.product_report(report_service.report_products(session), orders))
