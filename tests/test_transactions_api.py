from tests.base import ApiTestCase


class TransactionsApiTests(ApiTestCase):
    def test_create_defaults_category_to_other(self):
        created = self.add_transaction(amount=-50, description="Groceries", date="2023-04-15")
        self.assertEqual(created["category"], "Other")
        self.assertEqual(created["amount"], -50)
        self.assertEqual(created["date"], "2023-04-15")
        self.assertIsInstance(created["id"], str)
        self.assertIn("createdAt", created)

    def test_positive_amount_defaults_to_income(self):
        created = self.add_transaction(amount="1000", description="Salary", date="2023-04-01")
        self.assertEqual(created["category"], "Income")
        self.assertEqual(created["amount"], 1000)

    def test_explicit_category_is_kept(self):
        created = self.add_transaction(amount=-12, description="Bus", date="2023-04-02", category="Transportation")
        self.assertEqual(created["category"], "Transportation")

    def test_accepts_iso_datetime(self):
        created = self.add_transaction(amount=-5, description="Coffee", date="2023-04-15T00:00:00.000Z")
        self.assertEqual(created["date"], "2023-04-15")

    def test_missing_amount_is_rejected_and_nothing_persisted(self):
        resp = self.client.post("/api/transactions", json={"description": "Groceries", "date": "2023-04-15"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("amount", resp.json()["detail"])
        self.assertEqual(self.client.get("/api/transactions").json(), [])

    def test_blank_description_is_rejected(self):
        resp = self.client.post("/api/transactions", json={"amount": -1, "description": "  ", "date": "2023-04-15"})
        self.assertEqual(resp.status_code, 400)

    def test_unknown_category_is_rejected(self):
        resp = self.client.post(
            "/api/transactions",
            json={"amount": -1, "description": "x", "date": "2023-04-15", "category": "Crypto"}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("category", resp.json()["detail"])

    def test_list_is_newest_first(self):
        self.add_transaction(amount=-20, description="Movie tickets", date="2023-04-10")
        self.add_transaction(amount=-50, description="Groceries", date="2023-04-15")
        self.add_transaction(amount=1000, description="Salary", date="2023-04-01")

        resp = self.client.get("/api/transactions")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            [t["description"] for t in resp.json()],
            ["Groceries", "Movie tickets", "Salary"]
        )

    def test_list_filtered_by_month(self):
        self.add_transaction(amount=-20, description="March", date="2023-03-31")
        self.add_transaction(amount=-50, description="April", date="2023-04-01")

        resp = self.client.get("/api/transactions", params={"month": 4, "year": 2023})
        self.assertEqual([t["description"] for t in resp.json()], ["April"])

    def test_partial_update_keeps_missing_fields(self):
        created = self.add_transaction(amount=-50, description="Groceries", date="2023-04-15")

        resp = self.client.put(f"/api/transactions/{created['id']}", json={"description": "Supermarket"})
        self.assertEqual(resp.status_code, 200)
        updated = resp.json()
        self.assertEqual(updated["description"], "Supermarket")
        self.assertEqual(updated["amount"], -50)
        self.assertEqual(updated["date"], "2023-04-15")
        self.assertEqual(updated["category"], "Other")

    def test_update_applies_zero_amount_and_category(self):
        created = self.add_transaction(amount=-50, description="Groceries", date="2023-04-15")

        resp = self.client.put(
            f"/api/transactions/{created['id']}",
            json={"amount": 0, "category": "Food", "date": "2023-05-01"}
        )
        self.assertEqual(resp.status_code, 200)
        updated = resp.json()
        self.assertEqual(updated["amount"], 0)
        self.assertEqual(updated["category"], "Food")
        self.assertEqual(updated["date"], "2023-05-01")

    def test_update_unknown_id(self):
        resp = self.client.put("/api/transactions/999", json={"description": "x"})
        self.assertEqual(resp.status_code, 404)

    def test_update_rejects_blank_description(self):
        created = self.add_transaction(amount=-50, description="Groceries", date="2023-04-15")
        resp = self.client.put(f"/api/transactions/{created['id']}", json={"description": ""})
        self.assertEqual(resp.status_code, 400)

    def test_delete_returns_record_then_not_found(self):
        created = self.add_transaction(amount=-50, description="Groceries", date="2023-04-15")

        resp = self.client.delete(f"/api/transactions/{created['id']}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], created["id"])
        self.assertEqual(resp.json()["description"], "Groceries")

        resp = self.client.delete(f"/api/transactions/{created['id']}")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.client.get("/api/transactions").json(), [])

    def test_delete_unknown_or_malformed_id(self):
        self.assertEqual(self.client.delete("/api/transactions/12345").status_code, 404)
        self.assertEqual(self.client.delete("/api/transactions/not-an-id").status_code, 404)

    def test_list_degrades_to_empty_on_storage_error(self):
        self.add_transaction(amount=-50, description="Groceries", date="2023-04-15")
        self.break_storage()

        resp = self.client.get("/api/transactions")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), [])
        self.assertEqual(resp.headers["X-Degraded"], "storage-error")

    def test_write_surfaces_storage_error(self):
        self.break_storage()
        resp = self.client.post("/api/transactions", json={"amount": -1, "description": "x", "date": "2023-04-15"})
        self.assertEqual(resp.status_code, 500)

    def test_healthy_list_has_no_degraded_header(self):
        resp = self.client.get("/api/transactions")
        self.assertNotIn("X-Degraded", resp.headers)

    def test_malformed_json_body(self):
        resp = self.client.post(
            "/api/transactions",
            content='{"amount": -5, "description": ',
            headers={"Content-Type": "application/json"}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Invalid JSON body")
