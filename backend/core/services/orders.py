"""
Pedidos e o lançamento financeiro de cada pedido.

Regras:
  - preço unitário = base_price do produto + price_modifier da variação,
    capturado na criação do pedido e nunca recalculado;
  - total do item = preço unitário x quantidade; subtotal = soma dos itens;
  - taxa de entrega fixa (settings.DELIVERY_FEE) quando o tipo é DELIVERY;
  - pedido, itens e lançamento RECEITA/PENDENTE são gravados juntos, numa
    única transação, ou nada é gravado;
  - recompra copia (produto, variação, quantidade) do pedido original e
    reprecifica pelo catálogo atual.
"""

import logging
from collections import namedtuple
from decimal import Decimal

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from ..exceptions import TransactionFailure
from ..models import (
    AuditAction, DeliveryType, EntryStatus, EntryType, FinancialEntry, Order, OrderItem, OrderStatus,
    Product, ProductVariant,
)
from ..permissions import Action, Resource, require, validate_order_status_transition
from .audit import record_audit, snapshot
from .common import get_scoped, normalize_digits, resolve_company_for_create, scoped_filters

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')

PricedLine = namedtuple('PricedLine', 'product variant quantity unit_price total_price')
Totals = namedtuple('Totals', 'subtotal delivery_fee total_amount')

SNAPSHOT_FIELDS = (
    'customer_id', 'customer_name', 'customer_email', 'customer_phone', 'customer_cnpj_cpf',
    'delivery_type', 'delivery_address', 'payment_method', 'notes',
)


def price_lines(company, lines) -> list:
    """
    Precifica as linhas do carrinho pelo catálogo atual da empresa.
    Produto ou variação inexistente/inativo invalida o pedido inteiro.
    """
    if not lines:
        raise ValidationError({'items': 'Pelo menos um item é obrigatório.'})

    priced = []
    for index, line in enumerate(lines):
        quantity = int(line.get('quantity') or 0)
        if quantity <= 0:
            raise ValidationError({'items': f'Quantidade inválida no item {index + 1}.'})

        product = Product.objects.filter(
            pk=line.get('product_id'), company=company, active=True
        ).first()
        if product is None:
            raise ValidationError({'items': f'Produto não encontrado: {line.get("product_id")}'})

        variant = None
        unit_price = product.base_price
        if line.get('variant_id'):
            variant = ProductVariant.objects.filter(
                pk=line['variant_id'], product=product, active=True
            ).first()
            if variant is None:
                raise ValidationError({'items': f'Variação não encontrada: {line["variant_id"]}'})
            unit_price += variant.price_modifier

        unit_price = unit_price.quantize(CENTS)
        priced.append(PricedLine(product, variant, quantity, unit_price, (unit_price * quantity).quantize(CENTS)))
    return priced


def compute_totals(priced, delivery_type) -> Totals:
    subtotal = sum((line.total_price for line in priced), Decimal('0.00'))
    delivery_fee = Decimal(settings.DELIVERY_FEE) if delivery_type == DeliveryType.DELIVERY else Decimal('0.00')
    delivery_fee = delivery_fee.quantize(CENTS)
    return Totals(subtotal, delivery_fee, subtotal + delivery_fee)


def place_order(company, data: dict, user_id=None) -> Order:
    """Cria pedido + itens + lançamento financeiro numa transação só."""
    priced = price_lines(company, data.get('items') or [])
    totals = compute_totals(priced, data['delivery_type'])

    customer_id = data.get('customer_id')
    if customer_id and not company.customers.filter(pk=customer_id).exists():
        raise ValidationError({'customer_id': 'Cliente não encontrado.'})

    try:
        with transaction.atomic():
            order = Order.objects.create(
                company=company,
                user_id=user_id,
                customer_id=customer_id or None,
                customer_name=data['customer_name'],
                customer_email=(data.get('customer_email') or '').lower() or None,
                customer_phone=data.get('customer_phone') or '',
                customer_cnpj_cpf=normalize_digits(data.get('customer_cnpj_cpf')) or None,
                delivery_type=data['delivery_type'],
                delivery_address=data.get('delivery_address') or None,
                payment_method=data['payment_method'],
                notes=data.get('notes') or None,
                subtotal=totals.subtotal,
                delivery_fee=totals.delivery_fee,
                total_amount=totals.total_amount,
            )
            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product=line.product,
                    variant=line.variant,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total_price=line.total_price,
                )
                for line in priced
            ])
            FinancialEntry.objects.create(
                company=company,
                order=order,
                type=EntryType.RECEITA,
                amount=totals.total_amount,
                description=f'Pedido #{order.pk}',
                category='Vendas',
                payment_method=order.payment_method,
                due_date=timezone.now(),
                status=EntryStatus.PENDENTE,
            )
    except DatabaseError as exc:
        logger.exception(f'Falha ao gravar pedido da empresa {company.pk}: {exc}')
        raise TransactionFailure()

    record_audit(company.pk, 'order', order.pk, AuditAction.CREATE,
                 user_id=user_id, new_values=snapshot(order))
    return order


def reorder(company, source_order_id, customer_id=None, overrides=None, user_id=None) -> Order:
    """
    Novo pedido com os mesmos (produto, variação, quantidade) do pedido de
    origem, a preços atuais. O pedido de origem precisa ser da mesma empresa
    e, quando informado, do mesmo cliente.
    """
    lookup = Q(pk=source_order_id, company=company)
    if customer_id:
        lookup &= Q(customer_id=customer_id)
    try:
        source = Order.objects.prefetch_related('order_items').get(lookup)
    except (Order.DoesNotExist, ValueError, TypeError):
        raise NotFound('Pedido para recomprar não encontrado.')

    data = {field: getattr(source, field) for field in SNAPSHOT_FIELDS}
    customer = source.customer
    if customer is not None:
        data['customer_name'] = customer.name
        data['customer_email'] = customer.email or source.customer_email
        data['customer_phone'] = customer.phone or source.customer_phone
    data['notes'] = None
    data.update({k: v for k, v in (overrides or {}).items() if v not in (None, '')})
    data['items'] = [
        {'product_id': item.product_id, 'variant_id': item.variant_id, 'quantity': item.quantity}
        for item in source.order_items.all()
    ]
    return place_order(company, data, user_id=user_id)


# --- Equipe ---

def list_orders(session, filters=None, start_date=None, end_date=None, search=None):
    require(session, Resource.ORDERS, Action.READ)
    queryset = (
        Order.objects.filter(**scoped_filters(session, filters))
        .select_related('customer', 'user')
        .prefetch_related('order_items__product', 'order_items__variant')
    )
    if start_date:
        queryset = queryset.filter(created_at__date__gte=start_date)
    if end_date:
        queryset = queryset.filter(created_at__date__lte=end_date)
    if search:
        condition = Q(customer_name__icontains=search) | Q(customer_email__icontains=search)
        if search.isdigit():
            condition |= Q(pk=int(search))
        queryset = queryset.filter(condition)
    return queryset.order_by('-created_at', '-id')


def get_order(session, pk) -> Order:
    require(session, Resource.ORDERS, Action.READ)
    return get_scoped(
        Order.objects.select_related('customer', 'user').prefetch_related(
            'order_items__product', 'order_items__variant', 'financial_entries'
        ),
        session, pk, message='Pedido não encontrado.',
    )


def create_order(session, data: dict, company_id=None) -> Order:
    require(session, Resource.ORDERS, Action.CREATE)
    company = resolve_company_for_create(session, company_id)
    if data.get('reorder_from_order_id'):
        return reorder(company, data['reorder_from_order_id'], overrides=data, user_id=session.user_id)
    return place_order(company, data, user_id=session.user_id)


def update_order(session, pk, data: dict) -> Order:
    """Altera status e observações. Itens e valores do pedido não mudam depois de criado."""
    require(session, Resource.ORDERS, Action.UPDATE)
    order = get_scoped(Order.objects.all(), session, pk, message='Pedido não encontrado.')
    old_values = snapshot(order)

    new_status = data.get('status')
    if new_status:
        validate_order_status_transition(order.status, new_status, session.role)

    with transaction.atomic():
        if 'notes' in data:
            order.notes = data['notes']
        if new_status and new_status != order.status:
            order.status = new_status
            _sync_entries_with_status(order)
        order.save()

    record_audit(order.company_id, 'order', order.pk, AuditAction.UPDATE,
                 user_id=session.user_id, old_values=old_values, new_values=snapshot(order))
    return order


def _sync_entries_with_status(order):
    pending = order.financial_entries.filter(type=EntryType.RECEITA, status=EntryStatus.PENDENTE)
    if order.status == OrderStatus.ENTREGUE:
        pending.update(status=EntryStatus.PAGO, paid_date=timezone.now(), updated_at=timezone.now())
    elif order.status == OrderStatus.CANCELADO:
        pending.update(status=EntryStatus.CANCELADO, updated_at=timezone.now())
