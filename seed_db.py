import argparse
import logging
from datetime import date

import config
from database.database import Database
from database.crud import create_transaction, delete_all_transactions
from models.transaction import TransactionCreate

logger = logging.getLogger(__name__)

SAMPLE_TRANSACTIONS = [
    {'amount': -50.00, 'description': 'Grocery shopping', 'date': date(2023, 4, 15)},
    {'amount': 1000.00, 'description': 'Salary', 'date': date(2023, 4, 1)},
    {'amount': -20.00, 'description': 'Movie tickets', 'date': date(2023, 4, 10)},
    {'amount': -35.50, 'description': 'Restaurant', 'date': date(2023, 4, 5)},
    {'amount': 200.00, 'description': 'Freelance work', 'date': date(2023, 4, 20)},
]


def seed_transactions(database: Database, keep_existing: bool = False) -> int:
    """Insère les transactions d'exemple, après avoir vidé la table sauf si keep_existing"""
    if not database.init_db():
        raise RuntimeError("Database unavailable, nothing was seeded")

    db = database.SessionLocal()
    try:
        if not keep_existing:
            count = delete_all_transactions(db)
            logger.info(f"{count} transaction(s) supprimée(s)")
        for sample in SAMPLE_TRANSACTIONS:
            create_transaction(db, TransactionCreate(**sample))
        logger.info(f"{len(SAMPLE_TRANSACTIONS)} transactions d'exemple insérées")
    finally:
        db.close()
    return len(SAMPLE_TRANSACTIONS)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Insert sample transactions into the database")
    parser.add_argument("--database-url", default=config.DATABASE_URL or config.DEFAULT_DATABASE_URL)
    parser.add_argument("--keep", action="store_true", help="keep existing transactions")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL)
    database = Database(args.database_url)
    try:
        seed_transactions(database, keep_existing=args.keep)
    finally:
        database.dispose()


if __name__ == "__main__":
    main()
