from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..mixins import parse_date
from ...authentication import get_session
from ...services import reports as report_service

MAX_DAILY_DAYS = 366


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_stats_view(request):
    """
    GET /api/admin/stats/?start_date=AAAA-MM-DD&end_date=AAAA-MM-DD
    Números do dashboard: pedidos, receita (sem cancelados), produtos ativos,
    pedidos pendentes e o movimento de hoje.
    """
    session = get_session(request)
    stats = report_service.dashboard_stats(
        session,
        start_date=parse_date(request.query_params.get('start_date'), 'start_date'),
        end_date=parse_date(request.query_params.get('end_date'), 'end_date'),
    )
    return Response(stats)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def daily_sales_view(request):
    """
    GET /api/admin/sales/daily/?days=30
    Vendas entregues por dia (dia local do servidor), com zero nos dias sem venda.
    """
    session = get_session(request)
    try:
        days = int(request.query_params.get('days', 30))
    except ValueError:
        raise ValidationError({'days': 'Informe um número de dias.'})
    if not 1 <= days <= MAX_DAILY_DAYS:
        raise ValidationError({'days': f'Use entre 1 e {MAX_DAILY_DAYS} dias.'})
    return Response(report_service.daily_sales_for(session, days=days))
