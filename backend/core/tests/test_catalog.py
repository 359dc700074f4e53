from core.models import AuditLog, Category, Product, ProductVariant, Role
from core.tests.base import APITestBase
from core.tests.factories import make_category, make_company, make_product, make_user, make_variant


class CategoryTests(APITestBase):
    def test_delete_deactivates_and_keeps_products(self):
        category = make_category(self.company, name="Águas")
        product = make_product(self.company, category=category)

        response = self.client.delete(f"/api/categories/{category.id}/")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["active"])

        category.refresh_from_db()
        product.refresh_from_db()
        self.assertFalse(category.active)
        self.assertTrue(product.active)
        self.assertTrue(
            AuditLog.objects.filter(entity_type="category", entity_id=str(category.id), action="DELETE").exists()
        )

    def test_rename_to_existing_name_conflicts(self):
        make_category(self.company, name="Sucos")
        other = make_category(self.company, name="Refris")

        response = self.client.patch(f"/api/categories/{other.id}/", {"name": "Sucos"}, format="json")
        self.assertEqual(response.status_code, 409)

    def test_active_filter(self):
        make_category(self.company, name="Ativa")
        make_category(self.company, name="Inativa", active=False)

        nomes = [c["name"] for c in self.results(self.client.get("/api/categories/?active=true"))]
        self.assertEqual(nomes, ["Ativa"])

    def test_pagination_envelope(self):
        for n in range(3):
            make_category(self.company, name=f"Categoria {n}")

        response = self.client.get("/api/categories/?limit=2&page=2")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["results"]), 1)
        self.assertEqual(response.data["pagination"], {"page": 2, "limit": 2, "total": 3, "total_pages": 2})

    def test_include_products(self):
        category = make_category(self.company, name="Cervejas")
        make_product(self.company, category=category, name="Pilsen")

        response = self.client.get("/api/categories/?include_products=true")
        self.assertEqual(response.status_code, 200)
        row = self.results(response)[0]
        self.assertEqual([p["name"] for p in row["products"]], ["Pilsen"])


class ProductTests(APITestBase):
    def setUp(self):
        super().setUp()
        self.category = make_category(self.company, name="Bebidas")

    def test_create_with_variants(self):
        payload = {
            "name": "Água Mineral",
            "category_id": self.category.id,
            "base_price": "3.50",
            "sku": "AGUA-500",
            "variants": [{"name": "1,5L", "price_modifier": "2.00", "stock_quantity": 5}],
        }
        response = self.client.post("/api/products/", payload, format="json")
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["company"], self.company.id)
        self.assertEqual(response.data["category_name"], "Bebidas")
        self.assertEqual(response.data["variants"][0]["price"], "5.50")

    def test_category_of_other_company_is_rejected(self):
        foreign = make_category(self.company_b)
        payload = {"name": "Produto X", "category_id": foreign.id, "base_price": "1.00"}
        response = self.client.post("/api/products/", payload, format="json")
        self.assertEqual(response.status_code, 400)

    def test_price_must_be_positive(self):
        payload = {"name": "Produto X", "category_id": self.category.id, "base_price": "0.00"}
        response = self.client.post("/api/products/", payload, format="json")
        self.assertEqual(response.status_code, 400)

    def test_duplicate_sku_conflicts_within_company(self):
        make_product(self.company, category=self.category, sku="SKU-1")
        payload = {"name": "Outro", "category_id": self.category.id, "base_price": "2.00", "sku": "SKU-1"}
        self.assertEqual(self.client.post("/api/products/", payload, format="json").status_code, 409)

        blank = {"name": "Sem SKU", "category_id": self.category.id, "base_price": "2.00", "sku": ""}
        self.assertEqual(self.client.post("/api/products/", blank, format="json").status_code, 201)
        self.assertEqual(self.client.post("/api/products/", dict(blank, name="Sem SKU 2"), format="json").status_code, 201)

    def test_delete_deactivates(self):
        product = make_product(self.company, category=self.category)
        response = self.client.delete(f"/api/products/{product.id}/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(Product.objects.filter(pk=product.id, active=False).exists())

    def test_malformed_category_filter_is_400(self):
        response = self.client.get("/api/products/?category_id=abc")
        self.assertEqual(response.status_code, 400)
        self.assertIn("category_id", response.data)

    def test_search(self):
        make_product(self.company, category=self.category, name="Guaraná Lata")
        make_product(self.company, category=self.category, name="Cerveja Long Neck")

        nomes = [p["name"] for p in self.results(self.client.get("/api/products/?search=guara"))]
        self.assertEqual(nomes, ["Guaraná Lata"])

    def test_variants_endpoint(self):
        product = make_product(self.company, category=self.category, base_price="10.00")
        response = self.client.post(
            f"/api/products/{product.id}/variants/", {"name": "Fardo", "price_modifier": "50.00"}, format="json"
        )
        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["price"], "60.00")

        variant_id = response.data["id"]
        self.assertEqual(self.client.delete(f"/api/variants/{variant_id}/").status_code, 200)
        self.assertFalse(ProductVariant.objects.get(pk=variant_id).active)

    def test_variant_of_other_company_is_not_found(self):
        variant = make_variant(make_product(self.company_b))
        response = self.client.patch(f"/api/variants/{variant.id}/", {"name": "X"}, format="json")
        self.assertEqual(response.status_code, 404)

    def test_leitura_reads_but_cannot_write(self):
        product = make_product(self.company, category=self.category)
        self.auth_as(make_user(self.company, role=Role.LEITURA))

        self.assertEqual(self.client.get(f"/api/products/{product.id}/").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/products/{product.id}/").status_code, 403)


class PublicMenuTests(APITestBase):
    def setUp(self):
        super().setUp()
        self.store = make_company(name="Bebidas Sul", slug="bebidas-sul")
        self.owner = make_user(self.store, role=Role.MASTER_DIST)
        self.category = make_category(self.store, name="Refrigerantes")
        self.product = make_product(self.store, category=self.category, name="Cola 2L", base_price="9.90")
        make_variant(self.product, name="Gelada", price_modifier="1.00")
        make_variant(self.product, name="Antiga", active=False)
        make_product(self.store, category=self.category, name="Fora de linha", active=False)
        self.unauth()

    def test_menu_lists_active_items(self):
        response = self.client.get("/api/public/menu/bebidas-sul/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["company"]["slug"], "bebidas-sul")

        categories = response.data["categories"]
        self.assertEqual([c["name"] for c in categories], ["Refrigerantes"])
        products = categories[0]["products"]
        self.assertEqual([p["name"] for p in products], ["Cola 2L"])
        self.assertEqual([v["name"] for v in products[0]["variants"]], ["Gelada"])
        self.assertEqual(products[0]["variants"][0]["price"], "10.90")

    def test_deactivated_category_hides_its_products(self):
        self.auth_as(self.owner)
        self.assertEqual(self.client.delete(f"/api/categories/{self.category.id}/").status_code, 200)
        self.unauth()

        response = self.client.get("/api/public/menu/bebidas-sul/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["categories"], [])
        self.assertTrue(Product.objects.get(pk=self.product.id).active)

    def test_inactive_company_is_not_found(self):
        self.store.active = False
        self.store.save(update_fields=["active"])
        self.assertEqual(self.client.get("/api/public/menu/bebidas-sul/").status_code, 404)
        self.assertEqual(self.client.get("/api/public/company/bebidas-sul/").status_code, 404)

    def test_unknown_slug(self):
        self.assertEqual(self.client.get("/api/public/menu/nao-existe/").status_code, 404)

    def test_menu_does_not_leak_other_company(self):
        make_category(self.company, name="Da Empresa A")
        response = self.client.get("/api/public/menu/bebidas-sul/")
        self.assertNotIn("Da Empresa A", [c["name"] for c in response.data["categories"]])

    def test_company_view(self):
        response = self.client.get("/api/public/company/bebidas-sul/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["name"], "Bebidas Sul")
        self.assertTrue(Category.objects.filter(company=self.store).exists())
