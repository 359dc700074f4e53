from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.db import DatabaseError
from django.utils import timezone

from core.models import AuditLog, EntryStatus, EntryType, FinancialEntry, ImmutableRecordError, Role
from core.services.audit import record_audit
from core.services.orders import place_order
from core.tests.base import APITestBase
from core.tests.factories import make_entry, make_product, make_user, order_payload


class FinancialEntryTests(APITestBase):
    def test_create_paid_entry_sets_paid_date(self):
        payload = {"type": "DESPESA", "amount": "150.00", "description": "Aluguel", "status": "PAGO"}
        response = self.client.post("/api/financial/", payload, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["company"], self.company.id)
        self.assertIsNotNone(response.data["paid_date"])

    def test_amount_must_be_positive(self):
        payload = {"type": "DESPESA", "amount": "0", "description": "Zero"}
        self.assertEqual(self.client.post("/api/financial/", payload, format="json").status_code, 400)

    def test_delete_manual_entry(self):
        entry = make_entry(self.company)
        self.assertEqual(self.client.delete(f"/api/financial/{entry.id}/").status_code, 204)
        self.assertFalse(FinancialEntry.objects.filter(pk=entry.id).exists())

    def test_order_entry_cannot_be_deleted_or_edited(self):
        product = make_product(self.company)
        order = place_order(self.company, order_payload([{"product_id": product.id, "quantity": 1}]))
        entry = FinancialEntry.objects.get(order=order)

        self.assertEqual(self.client.delete(f"/api/financial/{entry.id}/").status_code, 400)
        response = self.client.patch(f"/api/financial/{entry.id}/", {"amount": "1.00"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_paid_entry_locked_for_financeiro(self):
        entry = make_entry(self.company, status=EntryStatus.PAGO)
        self.auth_as(make_user(self.company, role=Role.FINANCEIRO))
        response = self.client.patch(f"/api/financial/{entry.id}/", {"description": "Mudou"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_financeiro_updates_pending_entry(self):
        entry = make_entry(self.company)
        self.auth_as(make_user(self.company, role=Role.FINANCEIRO))
        response = self.client.patch(f"/api/financial/{entry.id}/", {"status": "PAGO"}, format="json")
        self.assertEqual(response.status_code, 200, response.data)
        self.assertIsNotNone(response.data["paid_date"])

    def test_malformed_order_filter_is_400(self):
        response = self.client.get("/api/financial/?order_id=abc")
        self.assertEqual(response.status_code, 400)
        self.assertIn("order_id", response.data)

    def test_leitura_cannot_create(self):
        self.auth_as(make_user(self.company, role=Role.LEITURA))
        payload = {"type": "DESPESA", "amount": "10.00", "description": "Teste"}
        self.assertEqual(self.client.post("/api/financial/", payload, format="json").status_code, 403)

    def test_summary(self):
        make_entry(self.company, amount="100.00", type=EntryType.RECEITA)
        make_entry(self.company, amount="40.00", type=EntryType.DESPESA)
        make_entry(self.company_b, amount="999.00", type=EntryType.RECEITA)

        response = self.client.get("/api/financial/summary/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["saldo"], Decimal("60.00"))
        self.assertEqual(response.data["por_tipo"]["RECEITA"], Decimal("100.00"))

    def test_mark_overdue_command(self):
        past = timezone.now() - timedelta(days=2)
        vencida = make_entry(self.company, due_date=past)
        futura = make_entry(self.company, due_date=timezone.now() + timedelta(days=2))

        out = StringIO()
        call_command("mark_overdue_entries", stdout=out)

        vencida.refresh_from_db()
        futura.refresh_from_db()
        self.assertEqual(vencida.status, EntryStatus.VENCIDO)
        self.assertEqual(futura.status, EntryStatus.PENDENTE)


class AuditLogTests(APITestBase):
    def test_mutations_are_audited(self):
        response = self.client.post("/api/categories/", {"name": "Vinhos"}, format="json")
        self.client.patch(f"/api/categories/{response.data['id']}/", {"sort_order": 3}, format="json")

        actions = list(
            AuditLog.objects.filter(entity_type="category", entity_id=str(response.data["id"]))
            .order_by("id").values_list("action", flat=True)
        )
        self.assertEqual(actions, ["CREATE", "UPDATE"])
        log = AuditLog.objects.filter(action="UPDATE").get()
        self.assertEqual(log.user_id, self.user.id)
        self.assertEqual(log.old_values["sort_order"], 0)
        self.assertEqual(log.new_values["sort_order"], 3)

    def test_audit_failure_does_not_break_operation(self):
        with patch.object(AuditLog.objects, "create", side_effect=DatabaseError("indisponível")):
            response = self.client.post("/api/categories/", {"name": "Destilados"}, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertFalse(AuditLog.objects.exists())

    def test_record_audit_returns_none_on_failure(self):
        with patch.object(AuditLog.objects, "create", side_effect=DatabaseError("indisponível")):
            self.assertIsNone(record_audit(self.company.id, "x", 1, "CREATE"))

    def test_logs_are_immutable(self):
        log = record_audit(self.company.id, "category", 1, "CREATE", user_id=self.user.id)
        log.entity_type = "outro"
        with self.assertRaises(ImmutableRecordError):
            log.save()
        with self.assertRaises(ImmutableRecordError):
            log.delete()
        with self.assertRaises(ImmutableRecordError):
            AuditLog.objects.filter(pk=log.pk).update(entity_type="outro")
        with self.assertRaises(ImmutableRecordError):
            AuditLog.objects.all().delete()

    def test_master_sees_only_own_company(self):
        record_audit(self.company.id, "category", 1, "CREATE")
        record_audit(self.company_b.id, "category", 2, "CREATE")

        response = self.client.get(f"/api/audit/?company_id={self.company_b.id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual([log["company"] for log in response.data["logs"]], [self.company.id])
        self.assertEqual(response.data["pagination"]["total"], 1)

    def test_platform_filters_by_company(self):
        record_audit(self.company.id, "category", 1, "CREATE")
        record_audit(self.company_b.id, "category", 2, "CREATE")
        self.auth_as(self.admin)

        todos = self.client.get("/api/audit/")
        self.assertEqual(todos.data["pagination"]["total"], 2)
        filtrado = self.client.get(f"/api/audit/?company_id={self.company_b.id}")
        self.assertEqual([log["entity_id"] for log in filtrado.data["logs"]], ["2"])

    def test_pagination(self):
        for n in range(5):
            record_audit(self.company.id, "product", n, "UPDATE")
        response = self.client.get("/api/audit/?limit=2&page=3")
        self.assertEqual(len(response.data["logs"]), 1)
        self.assertEqual(response.data["pagination"]["total_pages"], 3)

    def test_financeiro_has_no_audit_access(self):
        self.auth_as(make_user(self.company, role=Role.FINANCEIRO))
        self.assertEqual(self.client.get("/api/audit/").status_code, 403)
