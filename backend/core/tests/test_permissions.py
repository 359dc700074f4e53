from django.test import SimpleTestCase
from rest_framework.exceptions import PermissionDenied, ValidationError

from core.models import OrderStatus, EntryStatus, Role
from core.permissions import (
    Action,
    Resource,
    accessible_sections,
    can,
    can_access_company,
    can_deactivate_user,
    can_manage_user_role,
    can_modify_financial_entry,
    company_filter,
    validate_order_status_transition,
)
from core.authentication import Session
from core.tests.base import APITestBase
from core.tests.factories import make_category, make_product, make_user


class RolePolicyTests(SimpleTestCase):
    def test_administrador_passes_every_check(self):
        self.assertTrue(can(Role.ADMINISTRADOR, Resource.PRODUCTS, Action.DELETE))
        self.assertTrue(can(Role.ADMINISTRADOR, Resource.REPORTS, Action.EXPORT))

    def test_leitura_only_reads(self):
        self.assertTrue(can(Role.LEITURA, Resource.ORDERS, Action.READ))
        self.assertFalse(can(Role.LEITURA, Resource.ORDERS, Action.CREATE))
        self.assertFalse(can(Role.LEITURA, Resource.USERS, Action.READ))

    def test_financeiro_manages_financial_but_not_catalog(self):
        self.assertTrue(can(Role.FINANCEIRO, Resource.FINANCIAL, Action.DELETE))
        self.assertFalse(can(Role.FINANCEIRO, Resource.PRODUCTS, Action.CREATE))

    def test_sub_master_has_no_catalog_access(self):
        self.assertFalse(can(Role.SUB_MASTER, Resource.CATEGORIES, Action.READ))
        self.assertTrue(can(Role.SUB_MASTER, Resource.COMPANIES, Action.CREATE))

    def test_company_filter(self):
        tenant = Session(user_id=1, role=Role.MASTER_DIST, company_id=7)
        platform = Session(user_id=2, role=Role.SUB_MASTER)
        self.assertEqual(company_filter(tenant), {"company_id": 7})
        self.assertEqual(company_filter(platform), {})
        self.assertEqual(company_filter(tenant, field="product__company_id"), {"product__company_id": 7})

    def test_can_access_company(self):
        self.assertTrue(can_access_company(None, 3))
        self.assertTrue(can_access_company(3, "3"))
        self.assertFalse(can_access_company(3, 4))

    def test_user_management_matrix(self):
        self.assertTrue(can_manage_user_role(Role.MASTER_DIST, Role.LEITURA))
        self.assertFalse(can_manage_user_role(Role.MASTER_DIST, Role.SUB_MASTER))
        self.assertFalse(can_manage_user_role(Role.SUB_MASTER, Role.ADMINISTRADOR))
        self.assertTrue(can_manage_user_role(Role.ADMINISTRADOR, Role.SUB_MASTER))
        self.assertFalse(can_manage_user_role(Role.LEITURA, Role.LEITURA))

    def test_deactivation_rules(self):
        self.assertFalse(can_deactivate_user(Role.MASTER_DIST, Role.LEITURA, is_self=True))
        self.assertFalse(can_deactivate_user(Role.ADMINISTRADOR, Role.MASTER_DIST, False, is_target_primary_admin=True))
        self.assertFalse(can_deactivate_user(Role.MASTER_DIST, Role.MASTER_DIST, False))
        self.assertTrue(can_deactivate_user(Role.MASTER_DIST, Role.FINANCEIRO, False))

    def test_financial_entry_modification(self):
        self.assertFalse(can_modify_financial_entry(Role.MASTER_DIST, EntryStatus.PENDENTE, True))
        self.assertFalse(can_modify_financial_entry(Role.FINANCEIRO, EntryStatus.PAGO, False))
        self.assertTrue(can_modify_financial_entry(Role.FINANCEIRO, EntryStatus.PENDENTE, False))
        self.assertTrue(can_modify_financial_entry(Role.ADMINISTRADOR, EntryStatus.PAGO, True))
        self.assertFalse(can_modify_financial_entry(Role.LEITURA, EntryStatus.PENDENTE, False))

    def test_order_status_transitions(self):
        validate_order_status_transition(OrderStatus.RECEBIDO, OrderStatus.EM_SEPARACAO, Role.MASTER_DIST)
        validate_order_status_transition(OrderStatus.PRONTO, OrderStatus.PRONTO, Role.MASTER_DIST)
        with self.assertRaises(ValidationError):
            validate_order_status_transition(OrderStatus.RECEBIDO, OrderStatus.ENTREGUE, Role.MASTER_DIST)
        with self.assertRaises(ValidationError):
            validate_order_status_transition(OrderStatus.ENTREGUE, OrderStatus.CANCELADO, Role.MASTER_DIST)
        with self.assertRaises(PermissionDenied):
            validate_order_status_transition(OrderStatus.RECEBIDO, OrderStatus.CANCELADO, Role.FINANCEIRO)

    def test_sections_follow_role_table(self):
        master = [s["key"] for s in accessible_sections(Role.MASTER_DIST)]
        admin = [s["key"] for s in accessible_sections(Role.ADMINISTRADOR)]
        leitura = [s["key"] for s in accessible_sections(Role.LEITURA)]

        self.assertIn("categories", master)
        self.assertNotIn("companies", master)
        self.assertIn("companies", admin)
        self.assertIn("administrators", admin)
        self.assertNotIn("products", admin)
        self.assertNotIn("users", leitura)


class TenantIsolationTests(APITestBase):
    def test_leitura_cannot_create_category(self):
        self.auth_as(make_user(self.company, role=Role.LEITURA))
        response = self.client.post("/api/categories/", {"name": "Cervejas"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_create_injects_own_company(self):
        response = self.client.post("/api/categories/", {"name": "Bebidas"}, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["company"], self.company.id)

    def test_duplicate_name_conflicts_only_inside_company(self):
        first = self.client.post("/api/categories/", {"name": "Bebidas"}, format="json")
        self.assertEqual(first.status_code, 201)

        again = self.client.post("/api/categories/", {"name": "Bebidas"}, format="json")
        self.assertEqual(again.status_code, 409)

        self.auth_as(self.user_b)
        other = self.client.post("/api/categories/", {"name": "Bebidas"}, format="json")
        self.assertEqual(other.status_code, 201)

    def test_tenant_cannot_pick_another_company(self):
        response = self.client.post(
            "/api/categories/", {"name": "Bebidas", "company_id": self.company_b.id}, format="json"
        )
        self.assertEqual(response.status_code, 403)

    def test_list_returns_only_same_company(self):
        make_category(self.company, name="Categoria A Unica")
        make_category(self.company_b, name="Categoria B Unica")

        response = self.client.get("/api/categories/")
        self.assertEqual(response.status_code, 200)
        nomes = [item["name"] for item in self.results(response)]

        self.assertIn("Categoria A Unica", nomes)
        self.assertNotIn("Categoria B Unica", nomes)

    def test_other_tenant_record_is_not_found(self):
        product_b = make_product(self.company_b)

        self.assertEqual(self.client.get(f"/api/products/{product_b.id}/").status_code, 404)
        self.assertEqual(
            self.client.patch(f"/api/products/{product_b.id}/", {"name": "Hack"}, format="json").status_code, 404
        )
        product_b.refresh_from_db()
        self.assertNotEqual(product_b.name, "Hack")

    def test_platform_create_requires_company_id(self):
        self.auth_as(self.admin)
        response = self.client.post("/api/categories/", {"name": "Bebidas"}, format="json")
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            "/api/categories/", {"name": "Bebidas", "company_id": self.company_b.id}, format="json"
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["company"], self.company_b.id)

    def test_platform_lists_all_companies(self):
        make_category(self.company, name="Da A")
        make_category(self.company_b, name="Da B")
        self.auth_as(self.admin)

        nomes = [item["name"] for item in self.results(self.client.get("/api/categories/"))]
        self.assertIn("Da A", nomes)
        self.assertIn("Da B", nomes)

    def test_unauthenticated_is_rejected(self):
        self.unauth()
        self.assertIn(self.client.get("/api/categories/").status_code, (401, 403))
