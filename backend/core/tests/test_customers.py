from django.test import override_settings
from rest_framework.test import APIClient

from core.models import Customer, Order, Role
from core.services.customers import issue_customer_token
from core.services.orders import place_order
from core.tests.base import APITestBase
from core.tests.factories import make_customer, make_product, make_user, order_payload


class CustomerAdminTests(APITestBase):
    def test_create_normalizes_identity(self):
        payload = {"name": "Mercado Central", "email": "Contato@Mercado.com", "cnpj_cpf": "12.345.678/0001-90"}
        response = self.client.post("/api/customers/", payload, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["email"], "contato@mercado.com")
        self.assertEqual(response.data["cnpj_cpf"], "12345678000190")
        self.assertEqual(response.data["company"], self.company.id)

    def test_email_unique_per_company(self):
        payload = {"name": "João", "email": "joao@x.com"}
        self.assertEqual(self.client.post("/api/customers/", payload, format="json").status_code, 201)
        self.assertEqual(self.client.post("/api/customers/", payload, format="json").status_code, 409)

        self.auth_as(self.user_b)
        self.assertEqual(self.client.post("/api/customers/", payload, format="json").status_code, 201)

    def test_document_unique_per_company(self):
        make_customer(self.company, cnpj_cpf="11122233344")
        payload = {"name": "Outro", "cnpj_cpf": "111.222.333-44"}
        self.assertEqual(self.client.post("/api/customers/", payload, format="json").status_code, 409)

    def test_same_document_in_other_company_is_allowed(self):
        make_customer(self.company, cnpj_cpf="11122233344")
        self.auth_as(self.user_b)
        response = self.client.post("/api/customers/", {"name": "Outro", "cnpj_cpf": "111.222.333-44"}, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["company"], self.company_b.id)

    def test_requires_email_or_document(self):
        response = self.client.post("/api/customers/", {"name": "Sem contato"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_password_is_never_returned(self):
        payload = {"name": "Cliente Senha", "email": "s@x.com", "password": "segredo1"}
        response = self.client.post("/api/customers/", payload, format="json")
        self.assertNotIn("password", response.data)
        self.assertTrue(Customer.objects.get(pk=response.data["id"]).check_password("segredo1"))

    def test_delete_deactivates(self):
        customer = make_customer(self.company)
        response = self.client.delete(f"/api/customers/{customer.id}/")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["active"])
        self.assertTrue(Customer.objects.filter(pk=customer.id).exists())

    def test_search_by_document_digits(self):
        make_customer(self.company, name="Empório", cnpj_cpf="99988877766")
        make_customer(self.company, name="Outro")
        nomes = [c["name"] for c in self.results(self.client.get("/api/customers/?search=999.888"))]
        self.assertEqual(nomes, ["Empório"])

    def test_reset_password_only_for_master(self):
        customer = make_customer(self.company)
        url = f"/api/customers/{customer.id}/reset-password/"

        self.auth_as(make_user(self.company, role=Role.LEITURA))
        self.assertEqual(self.client.post(url, {"new_password": "novasenha"}, format="json").status_code, 403)

        self.auth_as(self.user)
        self.assertEqual(self.client.post(url, {"new_password": "novasenha"}, format="json").status_code, 200)
        customer.refresh_from_db()
        self.assertTrue(customer.check_password("novasenha"))


class PublicCustomerTests(APITestBase):
    def setUp(self):
        super().setUp()
        self.public = APIClient()
        self.customer = make_customer(
            self.company, name="Maria", email="maria@x.com", cnpj_cpf="12345678901", password="segredo1"
        )

    def customer_login(self, login, password="segredo1", slug="empresa-a"):
        return self.public.post(
            "/api/public/customers/login/",
            {"company_slug": slug, "login": login, "password": password},
            format="json",
        )

    def test_register_returns_token(self):
        payload = {"company_slug": "empresa-a", "name": "Pedro", "email": "pedro@x.com", "password": "segredo1"}
        response = self.public.post("/api/public/customers/register/", payload, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertIn("customer_token", response.data)
        self.assertNotIn("password", response.data["customer"])

    def test_register_duplicate_conflicts(self):
        payload = {"company_slug": "empresa-a", "name": "Maria 2", "email": "maria@x.com", "password": "segredo1"}
        response = self.public.post("/api/public/customers/register/", payload, format="json")
        self.assertEqual(response.status_code, 409)

    def test_login_by_email_or_document(self):
        self.assertEqual(self.customer_login("MARIA@x.com").status_code, 200)
        response = self.customer_login("123.456.789-01")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["customer"]["id"], self.customer.id)

    def test_login_unregistered_is_404(self):
        self.assertEqual(self.customer_login("ninguem@x.com").status_code, 404)

    def test_login_wrong_password_is_401(self):
        self.assertEqual(self.customer_login("maria@x.com", password="errada").status_code, 401)

    @override_settings(CUSTOMER_LOGIN_REVEALS_UNREGISTERED=False)
    def test_login_can_hide_unregistered(self):
        self.assertEqual(self.customer_login("ninguem@x.com").status_code, 401)

    def test_login_is_per_company(self):
        self.assertEqual(self.customer_login("maria@x.com", slug="empresa-b").status_code, 404)

    def test_check_and_find(self):
        check = self.public.get("/api/public/customers/check/?company_slug=empresa-a&cnpj_cpf=123.456.789-01")
        self.assertEqual(check.data, {"exists": True})

        found = self.public.get("/api/public/customers/find/?company_slug=empresa-a&email=maria@x.com")
        self.assertEqual(found.status_code, 200)
        self.assertTrue(found.data["has_password"])

        missing = self.public.get("/api/public/customers/find/?company_slug=empresa-b&email=maria@x.com")
        self.assertEqual(missing.status_code, 404)


class CustomerOrdersTests(APITestBase):
    def setUp(self):
        super().setUp()
        self.public = APIClient()
        self.product = make_product(self.company, base_price="4.00")
        self.customer = make_customer(self.company, name="Maria", password="segredo1")
        self.other = make_customer(self.company, name="Outra")
        self.mine = place_order(self.company, order_payload(
            [{"product_id": self.product.id, "quantity": 2}], customer_id=self.customer.id,
        ))
        place_order(self.company, order_payload(
            [{"product_id": self.product.id, "quantity": 1}], customer_id=self.other.id,
        ))
        self.token = issue_customer_token(self.customer)

    def test_orders_history_uses_token(self):
        response = self.public.get(
            "/api/public/customers/orders/?company_slug=empresa-a", HTTP_X_CUSTOMER_TOKEN=self.token
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual([o["id"] for o in response.data], [self.mine.id])

    def test_orders_without_token(self):
        response = self.public.get("/api/public/customers/orders/?company_slug=empresa-a")
        self.assertEqual(response.status_code, 401)

    def test_token_of_other_company_rejected(self):
        response = self.public.get(
            "/api/public/customers/orders/?company_slug=empresa-b", HTTP_X_CUSTOMER_TOKEN=self.token
        )
        self.assertEqual(response.status_code, 401)

    def test_reorder_own_order(self):
        response = self.public.post(
            "/api/public/customers/reorder/",
            {"company_slug": "empresa-a", "order_id": self.mine.id, "customer_token": self.token},
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["customer"], self.customer.id)
        self.assertEqual(response.data["total_amount"], "8.00")

    def test_cannot_reorder_someone_elses_order(self):
        foreign = Order.objects.exclude(pk=self.mine.pk).get()
        response = self.public.post(
            "/api/public/customers/reorder/",
            {"company_slug": "empresa-a", "order_id": foreign.id},
            format="json",
            HTTP_X_CUSTOMER_TOKEN=self.token,
        )
        self.assertEqual(response.status_code, 404)


class PublicOrderTests(APITestBase):
    def setUp(self):
        super().setUp()
        self.public = APIClient()
        self.product = make_product(self.company, base_price="6.00")

    def test_anonymous_order(self):
        payload = order_payload(
            [{"product_id": self.product.id, "quantity": 2}], "DELIVERY", company_slug="empresa-a",
        )
        response = self.public.post("/api/public/orders/", payload, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["total_amount"], "17.00")
        self.assertIsNone(response.data["user"])
        self.assertIsNone(response.data["customer"])

    def test_customer_id_in_body_is_ignored(self):
        customer = make_customer(self.company)
        payload = order_payload(
            [{"product_id": self.product.id, "quantity": 1}], company_slug="empresa-a", customer_id=customer.id,
        )
        response = self.public.post("/api/public/orders/", payload, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertIsNone(response.data["customer"])

    def test_token_links_customer(self):
        customer = make_customer(self.company)
        payload = order_payload(
            [{"product_id": self.product.id, "quantity": 1}], company_id=self.company.id,
        )
        response = self.public.post(
            "/api/public/orders/", payload, format="json", HTTP_X_CUSTOMER_TOKEN=issue_customer_token(customer)
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["customer"], customer.id)

    def test_product_of_other_company_rejected(self):
        foreign = make_product(self.company_b)
        payload = order_payload([{"product_id": foreign.id, "quantity": 1}], company_slug="empresa-a")
        self.assertEqual(self.public.post("/api/public/orders/", payload, format="json").status_code, 400)

    def test_company_required(self):
        payload = order_payload([{"product_id": self.product.id, "quantity": 1}])
        self.assertEqual(self.public.post("/api/public/orders/", payload, format="json").status_code, 400)
