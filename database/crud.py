import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import TransactionModel, BudgetModel
from models.transaction import TransactionCreate, TransactionUpdate
from models.budget import BudgetCreate
from services.analysis_service import month_bounds

logger = logging.getLogger(__name__)


def parse_id(record_id) -> Optional[int]:
    """Identifiant exposé (chaîne) -> clé primaire, None si invalide"""
    try:
        return int(str(record_id))
    except (TypeError, ValueError):
        return None


# Transactions

def create_transaction(db: Session, transaction: TransactionCreate):
    """Crée une nouvelle transaction"""
    db_transaction = TransactionModel(
        amount=transaction.amount,
        description=transaction.description,
        date=transaction.date,
        category=transaction.category.value,
    )
    db.add(db_transaction)
    db.commit()
    db.refresh(db_transaction)
    return db_transaction


def get_all_transactions(db: Session, month: int = None, year: int = None):
    """Récupère les transactions, les plus récentes d'abord, optionnellement filtrées par mois/année"""
    query = db.query(TransactionModel)
    if month and year:
        start, end = month_bounds(month, year)
        query = query.filter(TransactionModel.date >= start, TransactionModel.date <= end)
    return query.order_by(TransactionModel.date.desc(), TransactionModel.id.desc()).all()


def get_transactions_between(db: Session, start: date, end: date, expenses_only: bool = False):
    """Transactions dont la date est dans [start, end] (bornes incluses)"""
    query = db.query(TransactionModel).filter(
        TransactionModel.date >= start,
        TransactionModel.date <= end,
    )
    if expenses_only:
        query = query.filter(TransactionModel.amount < 0)
    return query.all()


def get_transaction_by_id(db: Session, transaction_id):
    """Récupère une transaction par son ID"""
    pk = parse_id(transaction_id)
    if pk is None:
        return None
    return db.query(TransactionModel).filter(TransactionModel.id == pk).first()


def update_transaction(db: Session, transaction_id, transaction_update: TransactionUpdate):
    """Met à jour les champs fournis d'une transaction"""
    transaction = get_transaction_by_id(db, transaction_id)
    if not transaction:
        return None

    for field, value in transaction_update.changes().items():
        if field == "category":
            value = value.value
        setattr(transaction, field, value)

    db.commit()
    db.refresh(transaction)
    return transaction


def delete_transaction(db: Session, transaction_id):
    """Supprime une transaction et renvoie l'enregistrement supprimé"""
    transaction = get_transaction_by_id(db, transaction_id)
    if not transaction:
        return None
    db.delete(transaction)
    db.commit()
    return transaction


def delete_all_transactions(db: Session):
    """Supprime toutes les transactions"""
    count = db.query(TransactionModel).delete()
    db.commit()
    return count


# Budgets

def get_budget(db: Session, category: str, month: int, year: int):
    """Récupère un budget spécifique"""
    return db.query(BudgetModel).filter(
        BudgetModel.category == category,
        BudgetModel.month == month,
        BudgetModel.year == year
    ).first()


def create_budget(db: Session, budget: BudgetCreate):
    """Crée ou met à jour le budget d'une catégorie pour un mois donné"""
    category = budget.category.value
    existing = get_budget(db, category, budget.month, budget.year)

    if existing:
        existing.amount = budget.amount
        db.commit()
        db.refresh(existing)
        return existing

    db_budget = BudgetModel(
        category=category,
        amount=budget.amount,
        month=budget.month,
        year=budget.year
    )
    db.add(db_budget)
    try:
        db.commit()
    except IntegrityError:
        # Insertion concurrente du même triplet : on met à jour la ligne gagnante
        db.rollback()
        existing = get_budget(db, category, budget.month, budget.year)
        if existing is None:
            raise
        logger.info(f"Budget {category} {budget.month}/{budget.year} créé entre-temps, mise à jour")
        existing.amount = budget.amount
        db.commit()
        db.refresh(existing)
        return existing
    db.refresh(db_budget)
    return db_budget


def get_all_budgets(db: Session, month: int = None, year: int = None):
    """Récupère tous les budgets par catégorie, optionnellement filtrés par mois/année"""
    query = db.query(BudgetModel)
    if month and year:
        query = query.filter(
            BudgetModel.month == month,
            BudgetModel.year == year
        )
    return query.order_by(BudgetModel.category.asc()).all()


def get_budget_by_id(db: Session, budget_id):
    pk = parse_id(budget_id)
    if pk is None:
        return None
    return db.query(BudgetModel).filter(BudgetModel.id == pk).first()


def delete_budget(db: Session, budget_id):
    """Supprime un budget et renvoie l'enregistrement supprimé"""
    budget = get_budget_by_id(db, budget_id)
    if not budget:
        return None
    db.delete(budget)
    db.commit()
    return budget
