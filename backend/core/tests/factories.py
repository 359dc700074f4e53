from itertools import count
from decimal import Decimal

from core.models import (
    Category,
    Company,
    Customer,
    CustomUser,
    EntryStatus,
    EntryType,
    FinancialEntry,
    Product,
    ProductVariant,
    Role,
)

_seq = count(1)


def _n(prefix: str) -> str:
    return f"{prefix}-{next(_seq)}"


def make_company(name=None, slug=None, active=True):
    name = name or _n("Empresa")
    return Company.objects.create(name=name, slug=slug or _n("empresa"), active=active)


def make_user(company, role=Role.MASTER_DIST, email=None, password="Senha@1234", **extra):
    return CustomUser.objects.create_user(
        email=email or f"{_n('mail')}@test.com",
        password=password,
        company=company,
        role=role,
        first_name=extra.pop("first_name", "Teste"),
        **extra,
    )


def make_platform_user(role=Role.ADMINISTRADOR, password="Senha@1234"):
    return make_user(None, role=role, password=password)


def make_category(company, name=None, active=True, sort_order=0):
    return Category.objects.create(company=company, name=name or _n("Categoria"), active=active, sort_order=sort_order)


def make_product(company, category=None, name=None, base_price="10.00", active=True, sku=None):
    category = category or make_category(company)
    return Product.objects.create(
        company=company,
        category=category,
        name=name or _n("Produto"),
        base_price=Decimal(str(base_price)),
        active=active,
        sku=sku,
    )


def make_variant(product, name=None, price_modifier="0.00", stock_quantity=10, active=True):
    return ProductVariant.objects.create(
        product=product,
        name=name or _n("Variacao"),
        price_modifier=Decimal(str(price_modifier)),
        stock_quantity=stock_quantity,
        active=active,
    )


def make_customer(company, name=None, email=None, cnpj_cpf=None, password=None):
    customer = Customer(
        company=company,
        name=name or _n("Cliente"),
        email=email if email is not None else f"{_n('cliente')}@test.com",
        cnpj_cpf=cnpj_cpf,
    )
    if password:
        customer.set_password(password)
    customer.save()
    return customer


def make_entry(company, amount="100.00", type=EntryType.DESPESA, status=EntryStatus.PENDENTE, order=None, **extra):
    return FinancialEntry.objects.create(
        company=company,
        order=order,
        type=type,
        amount=Decimal(str(amount)),
        description=extra.pop("description", _n("Lancamento")),
        status=status,
        **extra,
    )


def order_payload(lines, delivery_type="RETIRADA", **extra):
    payload = {
        "customer_name": "Cliente Balcão",
        "delivery_type": delivery_type,
        "payment_method": "PIX",
        "items": lines,
    }
    if delivery_type == "DELIVERY":
        payload["delivery_address"] = {"street": "Rua A", "number": "10", "city": "Porto Alegre"}
    payload.update(extra)
    return payload
