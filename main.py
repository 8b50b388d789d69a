from fastapi import FastAPI, APIRouter, HTTPException, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
import uvicorn
from datetime import datetime, timezone, MINYEAR, MAXYEAR
import logging

import config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

from services.analysis_service import AnalysisService, month_bounds, previous_period
from database.database import Database
from database.crud import (
    create_transaction, get_all_transactions, get_transactions_between,
    update_transaction, delete_transaction,
    create_budget, get_all_budgets, delete_budget
)
from models.category import CATEGORIES
from models.transaction import Transaction, TransactionCreate, TransactionUpdate
from models.budget import Budget, BudgetCreate

# En-tête posé quand une lecture renvoie un résultat vide suite à une erreur de stockage
DEGRADED_HEADER = "X-Degraded"

analysis_service = AnalysisService()
router = APIRouter()


def get_db(request: Request):
    """Dependency : session issue de la base attachée à l'application"""
    yield from request.app.state.database.get_db()


def degrade_to_empty(payload, error: Exception, what: str):
    """
    Politique "vide en cas d'échec de lecture" : le client reçoit un 200
    avec un contenu vide, marqué par l'en-tête X-Degraded
    """
    logger.error(f"Erreur lors de la lecture {what}: {str(error)}")
    return JSONResponse(payload, headers={DEGRADED_HEADER: "storage-error"})


def storage_error(error: Exception, action: str):
    """Erreur de stockage sur une écriture : 400 si contrainte violée, 500 sinon"""
    logger.error(f"Erreur lors de {action}: {str(error)}")
    if isinstance(error, IntegrityError):
        return HTTPException(status_code=400, detail=f"Failed to {action}")
    return HTTPException(status_code=500, detail=f"Failed to {action}")


def parse_period(month: Optional[str], year: Optional[str]):
    """(mois, année) depuis la query string, None si absent ou invalide"""
    if not month or not year:
        return None
    try:
        month_value = int(str(month).strip())
        year_value = int(str(year).strip())
    except ValueError:
        return None
    # Hors de l'intervalle de datetime.date : aucune période calculable
    if not 1 <= month_value <= 12 or not MINYEAR <= year_value <= MAXYEAR:
        return None
    return month_value, year_value


def serialize_transaction(transaction) -> dict:
    return Transaction.model_validate(transaction).model_dump(by_alias=True)


def validation_message(exc: RequestValidationError) -> str:
    missing = []
    problems = []
    for error in exc.errors():
        location = [str(part) for part in error.get('loc', ()) if part != 'body']
        field = '.'.join(location) or 'body'
        if error.get('type') == 'json_invalid':
            problems.append("Invalid JSON body")
        elif error.get('type') == 'missing':
            missing.append(field)
        else:
            problems.append(f"{field}: {error.get('msg')}")

    parts = []
    if missing:
        parts.append(f"Please provide {', '.join(missing)}")
    parts.extend(problems)
    return '; '.join(parts) or "Invalid request"


@router.get("/")
async def root():
    return {"message": "Finance Tracker API"}


@router.get("/api/test")
async def test_endpoint():
    """Sonde de disponibilité"""
    return {
        "message": "API is working!",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/api/categories")
async def get_categories():
    return CATEGORIES


# Budget endpoints
@router.get("/api/budgets", response_model=List[Budget])
def get_budgets_endpoint(month: Optional[str] = None, year: Optional[str] = None,
                         db: Session = Depends(get_db)):
    """
    Récupère les budgets triés par catégorie, filtrés par mois/année si les deux sont fournis
    """
    period = None
    if month and year:
        period = parse_period(month, year)
        if period is None:
            return []

    try:
        if period:
            budgets = get_all_budgets(db, *period)
        else:
            budgets = get_all_budgets(db)
    except SQLAlchemyError as e:
        return degrade_to_empty([], e, "des budgets")
    return budgets


@router.post("/api/budgets", response_model=Budget, status_code=201)
def create_budget_endpoint(budget: BudgetCreate, db: Session = Depends(get_db)):
    """
    Crée ou met à jour le budget d'une catégorie pour un mois
    """
    try:
        db_budget = create_budget(db, budget)
    except SQLAlchemyError as e:
        raise storage_error(e, "save budget")
    logger.info(f"Budget {db_budget.id} enregistré: {db_budget.category} {db_budget.month}/{db_budget.year}")
    return db_budget


@router.delete("/api/budgets/{budget_id}", response_model=Budget)
def delete_budget_endpoint(budget_id: str, db: Session = Depends(get_db)):
    """
    Supprime un budget et renvoie l'enregistrement supprimé
    """
    try:
        budget = delete_budget(db, budget_id)
    except SQLAlchemyError as e:
        raise storage_error(e, "delete budget")
    if not budget:
        raise HTTPException(status_code=404, detail="Budget not found")
    logger.info(f"Budget {budget_id} supprimé")
    return budget


@router.get("/api/budget-vs-actual")
def get_budget_vs_actual(month: Optional[str] = None, year: Optional[str] = None,
                         db: Session = Depends(get_db)):
    """
    Compare les budgets du mois aux dépenses réelles par catégorie
    """
    period = parse_period(month, year)
    if period is None:
        return []

    month_value, year_value = period
    start, end = month_bounds(month_value, year_value)
    try:
        budgets = get_all_budgets(db, month_value, year_value)
        transactions = get_transactions_between(db, start, end, expenses_only=True)
    except SQLAlchemyError as e:
        return degrade_to_empty([], e, "budget vs réel")

    budgets_data = [{'category': b.category, 'amount': b.amount} for b in budgets]
    transactions_data = [serialize_transaction(t) for t in transactions]
    return analysis_service.budget_vs_actual(budgets_data, transactions_data)


# Transaction endpoints
@router.get("/api/transactions", response_model=List[Transaction])
def get_transactions(month: Optional[str] = None, year: Optional[str] = None,
                     db: Session = Depends(get_db)):
    """
    Récupère les transactions (plus récentes d'abord), optionnellement filtrées par mois/année
    """
    period = parse_period(month, year)
    try:
        if period:
            transactions = get_all_transactions(db, *period)
        else:
            transactions = get_all_transactions(db)
    except SQLAlchemyError as e:
        return degrade_to_empty([], e, "des transactions")
    return transactions


@router.post("/api/transactions", response_model=Transaction, status_code=201)
def create_transaction_endpoint(transaction: TransactionCreate, db: Session = Depends(get_db)):
    try:
        transaction_db = create_transaction(db, transaction)
    except SQLAlchemyError as e:
        raise storage_error(e, "add transaction")
    logger.info(f"Transaction {transaction_db.id} créée ({transaction_db.category})")
    return transaction_db


@router.put("/api/transactions/{transaction_id}", response_model=Transaction)
def update_transaction_endpoint(transaction_id: str, transaction_update: TransactionUpdate,
                                db: Session = Depends(get_db)):
    """
    Mise à jour partielle : les champs absents ou nuls conservent leur valeur
    """
    try:
        updated_transaction = update_transaction(db, transaction_id, transaction_update)
    except SQLAlchemyError as e:
        raise storage_error(e, "update transaction")
    if not updated_transaction:
        logger.info(f"Transaction introuvable: {transaction_id}")
        raise HTTPException(status_code=404, detail="Transaction not found")
    logger.info(f"Transaction {transaction_id} mise à jour")
    return updated_transaction


@router.delete("/api/transactions/{transaction_id}", response_model=Transaction)
def delete_transaction_endpoint(transaction_id: str, db: Session = Depends(get_db)):
    try:
        transaction = delete_transaction(db, transaction_id)
    except SQLAlchemyError as e:
        raise storage_error(e, "delete transaction")
    if not transaction:
        logger.info(f"Transaction introuvable: {transaction_id}")
        raise HTTPException(status_code=404, detail="Transaction not found")
    logger.info(f"Transaction {transaction_id} supprimée")
    return transaction


# Tableaux de bord
@router.get("/api/summary")
def get_summary(db: Session = Depends(get_db)):
    """
    Solde, total des revenus et des dépenses, trois dernières transactions
    """
    try:
        transactions = get_all_transactions(db)
    except SQLAlchemyError as e:
        return degrade_to_empty(analysis_service.summarize([]), e, "du résumé")
    return analysis_service.summarize([serialize_transaction(t) for t in transactions])


@router.get("/api/monthly-totals")
def get_monthly_totals(db: Session = Depends(get_db)):
    try:
        transactions = get_all_transactions(db)
    except SQLAlchemyError as e:
        return degrade_to_empty([], e, "des totaux mensuels")
    return analysis_service.monthly_totals([serialize_transaction(t) for t in transactions])


@router.get("/api/category-breakdown")
def get_category_breakdown(month: Optional[str] = None, year: Optional[str] = None,
                           db: Session = Depends(get_db)):
    """
    Répartition des dépenses par catégorie, sur un mois ou sur tout l'historique
    """
    period = parse_period(month, year)
    try:
        if period:
            transactions = get_all_transactions(db, *period)
        else:
            transactions = get_all_transactions(db)
    except SQLAlchemyError as e:
        return degrade_to_empty([], e, "de la répartition par catégorie")
    return analysis_service.category_breakdown([serialize_transaction(t) for t in transactions])


@router.get("/api/insights")
def get_insights(month: Optional[str] = None, year: Optional[str] = None,
                 db: Session = Depends(get_db)):
    """
    Conseils sur les dépenses du mois (mois courant si non spécifié)
    """
    period = parse_period(month, year)
    if period is None:
        now = datetime.now()
        period = (now.month, now.year)

    previous = previous_period(*period)
    try:
        current_transactions = get_all_transactions(db, *period)
        previous_transactions = get_all_transactions(db, *previous) if previous else []
    except SQLAlchemyError as e:
        return degrade_to_empty([], e, "des conseils")
    return analysis_service.spending_insights(
        [serialize_transaction(t) for t in current_transactions],
        [serialize_transaction(t) for t in previous_transactions]
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = validation_message(exc)
    logger.info(f"Requête invalide sur {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"detail": message})


def create_app(database_url: str = None, engine=None) -> FastAPI:
    """
    Construit l'application avec une base explicitement créée puis attachée à app.state
    """
    if engine is None and not database_url:
        if not config.DATABASE_URL and config.REQUIRE_DATABASE_URL:
            logger.critical("DATABASE_URL non définie, arrêt du serveur")
            raise SystemExit(1)
        database_url = config.DATABASE_URL or config.DEFAULT_DATABASE_URL

    database = Database(database_url, engine=engine)
    # Une base injoignable n'empêche pas le démarrage : les requêtes échoueront une à une
    database.init_db()

    app = FastAPI(title="Finance Tracker API", version="1.0.0")
    app.state.database = database

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[DEGRADED_HEADER],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT)
