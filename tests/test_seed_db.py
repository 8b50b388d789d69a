import unittest

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from database.crud import get_all_transactions
from database.database import Database
from seed_db import SAMPLE_TRANSACTIONS, seed_transactions


class SeedTests(unittest.TestCase):
    def setUp(self):
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        self.database = Database(engine=engine)

    def tearDown(self):
        self.database.dispose()

    def transactions(self):
        db = self.database.SessionLocal()
        try:
            return get_all_transactions(db)
        finally:
            db.close()

    def test_seed_replaces_existing_transactions(self):
        seed_transactions(self.database)
        seed_transactions(self.database)

        transactions = self.transactions()
        self.assertEqual(len(transactions), len(SAMPLE_TRANSACTIONS))
        categories = {t.description: t.category for t in transactions}
        self.assertEqual(categories["Salary"], "Income")
        self.assertEqual(categories["Grocery shopping"], "Other")

    def test_keep_existing(self):
        seed_transactions(self.database)
        seed_transactions(self.database, keep_existing=True)
        self.assertEqual(len(self.transactions()), 2 * len(SAMPLE_TRANSACTIONS))
