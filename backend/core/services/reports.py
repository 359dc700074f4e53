"""
Relatórios de vendas, produtos e dashboard.

As funções de agregação são puras: recebem pedidos já buscados e devolvem
dicts. Pedidos CANCELADO nunca entram em receita. O agrupamento por dia usa
o dia do calendário no fuso local do servidor (settings.TIME_ZONE), não o
dia UTC gravado no banco.
"""

from collections import Counter, OrderedDict
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from ..models import Order, OrderStatus, Product
from ..permissions import Action, Resource, require
from .common import scoped_filters

ZERO = Decimal('0.00')
CENTS = Decimal('0.01')
TOP_PRODUCTS = 10
NO_CATEGORY = 'Sem categoria'


def local_day(dt, tz=None):
    """Dia do calendário de `dt` no fuso local (ou no fuso `tz`)."""
    return timezone.localtime(dt, tz).date()


def _revenue_orders(orders):
    return [order for order in orders if order.status != OrderStatus.CANCELADO]


def sales_report(orders, tz=None) -> dict:
    orders = _revenue_orders(orders)

    total_vendas = sum((order.total_amount for order in orders), ZERO)
    total_pedidos = len(orders)
    ticket_medio = (total_vendas / total_pedidos).quantize(CENTS) if total_pedidos else ZERO

    vendas_por_dia = {}
    produtos = {}
    categorias = {}
    metodos_pagamento = Counter()
    tipos_entrega = Counter()

    for order in orders:
        dia = local_day(order.created_at, tz).isoformat()
        vendas_por_dia[dia] = vendas_por_dia.get(dia, ZERO) + order.total_amount
        metodos_pagamento[order.payment_method] += 1
        tipos_entrega[order.delivery_type] += 1

        for item in order.order_items.all():
            produto = produtos.setdefault(item.product_id, {
                'id': item.product_id,
                'name': item.product.name,
                'quantity': 0,
                'revenue': ZERO,
            })
            produto['quantity'] += item.quantity
            produto['revenue'] += item.total_price

            nome_categoria = item.product.category.name if item.product.category_id else NO_CATEGORY
            categoria = categorias.setdefault(nome_categoria, {
                'name': nome_categoria,
                'quantity': 0,
                'revenue': ZERO,
            })
            categoria['quantity'] += item.quantity
            categoria['revenue'] += item.total_price

    return {
        'resumo': {
            'total_vendas': total_vendas,
            'total_pedidos': total_pedidos,
            'ticket_medio': ticket_medio,
        },
        'vendas_por_dia': OrderedDict(sorted(vendas_por_dia.items())),
        'produtos_mais_vendidos': sorted(
            produtos.values(), key=lambda p: (-p['quantity'], p['name'])
        )[:TOP_PRODUCTS],
        'vendas_por_categoria': sorted(categorias.values(), key=lambda c: -c['revenue']),
        'metodos_pagamento': dict(metodos_pagamento),
        'tipos_entrega': dict(tipos_entrega),
    }


def product_report(products, orders) -> list:
    """Quantidade vendida e receita por produto (inclui produtos sem venda)."""
    linhas = {
        product.pk: {
            'id': product.pk,
            'name': product.name,
            'category': product.category.name if product.category_id else NO_CATEGORY,
            'active': product.active,
            'base_price': product.base_price,
            'quantity': 0,
            'revenue': ZERO,
            'orders': 0,
        }
        for product in products
    }
    for order in _revenue_orders(orders):
        vistos = set()
        for item in order.order_items.all():
            linha = linhas.get(item.product_id)
            if linha is None:
                continue
            linha['quantity'] += item.quantity
            linha['revenue'] += item.total_price
            if item.product_id not in vistos:
                linha['orders'] += 1
                vistos.add(item.product_id)
    return sorted(linhas.values(), key=lambda l: (-l['revenue'], l['name']))


def daily_sales(orders, today, days=30, tz=None) -> list:
    """
    Vendas concluídas (ENTREGUE) por dia, nos últimos `days` dias até `today`,
    inclusive. Dias sem venda aparecem com zero.
    """
    inicio = today - timedelta(days=days - 1)
    buckets = OrderedDict(
        ((inicio + timedelta(days=offset)), {'total': ZERO, 'count': 0})
        for offset in range(days)
    )
    for order in orders:
        if order.status != OrderStatus.ENTREGUE:
            continue
        bucket = buckets.get(local_day(order.created_at, tz))
        if bucket is None:
            continue
        bucket['total'] += order.total_amount
        bucket['count'] += 1
    return [
        {'date': dia.isoformat(), 'total': valores['total'], 'count': valores['count']}
        for dia, valores in buckets.items()
    ]


# --- Consultas ---

def report_orders(session, start_date=None, end_date=None, statuses=None):
    require(session, Resource.REPORTS, Action.READ)
    queryset = (
        Order.objects.filter(**scoped_filters(session))
        .exclude(status=OrderStatus.CANCELADO)
        .prefetch_related('order_items__product__category')
    )
    if statuses:
        queryset = queryset.filter(status__in=statuses)
    if start_date:
        queryset = queryset.filter(created_at__date__gte=start_date)
    if end_date:
        queryset = queryset.filter(created_at__date__lte=end_date)
    return queryset.order_by('-created_at')


def report_products(session):
    require(session, Resource.REPORTS, Action.READ)
    return Product.objects.filter(**scoped_filters(session)).select_related('category').order_by('name')


def daily_sales_for(session, days=30) -> list:
    today = timezone.localdate()
    orders = report_orders(
        session,
        start_date=today - timedelta(days=days - 1),
        end_date=today,
        statuses=[OrderStatus.ENTREGUE],
    )
    return daily_sales(orders, today, days=days)


def _sum_amount(queryset):
    return queryset.aggregate(
        total=Coalesce(Sum('total_amount'), Value(ZERO), output_field=DecimalField())
    )['total']


def dashboard_stats(session, start_date=None, end_date=None) -> dict:
    require(session, Resource.REPORTS, Action.READ)
    base = Order.objects.filter(**scoped_filters(session))
    periodo = base
    if start_date:
        periodo = periodo.filter(created_at__date__gte=start_date)
    if end_date:
        periodo = periodo.filter(created_at__date__lte=end_date)
    hoje = base.filter(created_at__date=timezone.localdate())

    return {
        'total_orders': periodo.count(),
        'total_revenue': _sum_amount(periodo.exclude(status=OrderStatus.CANCELADO)),
        'total_products': Product.objects.filter(**scoped_filters(session), active=True).count(),
        'pending_orders': base.filter(status=OrderStatus.RECEBIDO).count(),
        'orders_today': hoje.count(),
        'revenue_today': _sum_amount(hoje.exclude(status=OrderStatus.CANCELADO)),
    }


def summarize_entries(entries) -> dict:
    """Totais dos lançamentos agrupados por tipo e status."""
    grupos = (
        entries.order_by()
        .values('type', 'status')
        .annotate(total=Sum('amount'), count=Count('id'))
        .order_by('type', 'status')
    )
    por_tipo = {}
    for grupo in grupos:
        por_tipo[grupo['type']] = por_tipo.get(grupo['type'], ZERO) + (grupo['total'] or ZERO)
    return {
        'grupos': list(grupos),
        'por_tipo': por_tipo,
        'saldo': por_tipo.get('RECEITA', ZERO) - por_tipo.get('DESPESA', ZERO),
    }
