from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from core.models import Company, CustomUser, Role
from core.tests.base import APITestBase


class LoginTests(APITestBase):
    def test_token_carries_role_and_company(self):
        response = self.login()
        self.assertEqual(response.status_code, 200, response.data)

        token = AccessToken(response.data["access"])
        self.assertEqual(token["role"], Role.MASTER_DIST)
        self.assertEqual(token["company_id"], self.company.id)
        self.assertEqual(token["company_slug"], "empresa-a")
        self.assertEqual(response.data["user"]["email"], "a@empresa.com")

    def test_email_is_case_insensitive(self):
        response = APIClient().post(
            "/api/token/", {"email": "  A@Empresa.COM ", "password": self.password}, format="json"
        )
        self.assertEqual(response.status_code, 200, response.data)

    def test_wrong_password(self):
        self.assertEqual(self.login(password="errada123").status_code, 401)

    def test_inactive_user_cannot_login(self):
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])
        self.assertEqual(self.login().status_code, 401)

    def test_inactive_company_blocks_login(self):
        self.company.active = False
        self.company.save(update_fields=["active"])
        self.assertEqual(self.login().status_code, 401)

    def test_platform_user_without_company_logs_in(self):
        response = self.login(self.admin)
        self.assertEqual(response.status_code, 200, response.data)
        token = AccessToken(response.data["access"])
        self.assertEqual(token["role"], Role.ADMINISTRADOR)
        self.assertIsNone(token["company_id"])

    def test_bearer_token_authenticates_requests(self):
        response = self.jwt_client().get("/api/categories/")
        self.assertEqual(response.status_code, 200)


class RefreshTests(APITestBase):
    def test_refresh_rereads_role(self):
        refresh = self.login().data["refresh"]
        self.user.role = Role.LEITURA
        self.user.save(update_fields=["role"])

        response = APIClient().post("/api/token/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(AccessToken(response.data["access"])["role"], Role.LEITURA)

    def test_refresh_refused_for_deactivated_user(self):
        refresh = self.login().data["refresh"]
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])

        response = APIClient().post("/api/token/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(response.status_code, 401)


class MeTests(APITestBase):
    def test_me_returns_session_and_sections(self):
        response = self.jwt_client().get("/api/me/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["company_id"], self.company.id)
        self.assertEqual(response.data["user_id"], self.user.id)
        self.assertEqual(response.data["role"], Role.MASTER_DIST)

        keys = [s["key"] for s in response.data["sections"]]
        self.assertIn("orders", keys)
        self.assertNotIn("companies", keys)

    def test_me_requires_authentication(self):
        self.assertIn(APIClient().get("/api/me/").status_code, (401, 403))


class SignupTests(APITestBase):
    def test_signup_creates_company_and_owner(self):
        self.unauth()
        payload = {
            "company_name": "Distribuidora Nova",
            "first_name": "Nina",
            "last_name": "Souza",
            "email": "Nina@Nova.com",
            "password": "segredo1",
        }
        response = self.client.post("/api/signup/", payload, format="json")
        self.assertEqual(response.status_code, 201, response.data)

        company = Company.objects.get(pk=response.data["company"]["id"])
        self.assertEqual(company.slug, "distribuidora-nova")
        user = CustomUser.objects.get(email="nina@nova.com")
        self.assertEqual(user.company, company)
        self.assertEqual(user.role, Role.MASTER_DIST)
        self.assertTrue(user.is_primary_admin)
        self.assertIn("access", response.data)

    def test_signup_rejects_taken_email(self):
        self.unauth()
        payload = {
            "company_name": "Outra",
            "first_name": "X",
            "last_name": "Y",
            "email": "a@empresa.com",
            "password": "segredo1",
        }
        response = self.client.post("/api/signup/", payload, format="json")
        self.assertEqual(response.status_code, 409)
        self.assertFalse(Company.objects.filter(name="Outra").exists())
