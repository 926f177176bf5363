from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from marketplace.admin import save_product_without_stock
from marketplace.catalog.domain.services import InventoryLedger
from marketplace.models import Product
from marketplace.tests.factories import AdminFactory, BusinessFactory, ProductFactory


class ProductAdminStockTests(TestCase):
    def setUp(self):
        self.client.force_login(AdminFactory())
        self.business = BusinessFactory()
        self.product = ProductFactory(business=self.business, price=Decimal("3.00"), quantity=5)
        self.url = reverse("admin:marketplace_product_change", args=[self.product.pk])

    def test_edit_keeps_reservation_made_while_form_was_open(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)

        InventoryLedger().reserve(self.product.id, 3)

        response = self.client.post(
            self.url,
            {
                "name": self.product.name,
                "description": self.product.description,
                "category": self.product.category,
                "business": str(self.business.pk),
                "price": "3.50",
                "quantity": 5,
                "_save": "Save",
            },
        )

        self.assertEqual(response.status_code, 302)
        product = Product.objects.get(id=self.product.id)
        self.assertEqual(product.quantity, 2)
        self.assertEqual(product.price, Decimal("3.50"))

    def test_quantity_is_read_only_on_change(self):
        response = self.client.get(self.url)

        self.assertNotIn("quantity", response.context["adminform"].form.fields)

    def test_quantity_is_editable_on_add(self):
        response = self.client.get(reverse("admin:marketplace_product_add"))

        self.assertIn("quantity", response.context["adminform"].form.fields)

    def test_save_without_stock_leaves_quantity_alone(self):
        stale = Product.objects.get(id=self.product.id)
        InventoryLedger().reserve(self.product.id, 4)

        stale.name = "Sourdough"
        save_product_without_stock(stale)

        product = Product.objects.get(id=self.product.id)
        self.assertEqual(product.name, "Sourdough")
        self.assertEqual(product.quantity, 1)
