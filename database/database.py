import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Connexion à la base de données, construite explicitement au démarrage
    puis transmise à l'application (pas d'état global)
    """

    def __init__(self, url: str = None, engine=None):
        if engine is None:
            connect_args = {}
            if url.startswith("sqlite"):
                connect_args = {"check_same_thread": False}
            engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        self.engine = engine
        # expire_on_commit=False : un enregistrement supprimé reste lisible pour la réponse
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
        )

    def init_db(self) -> bool:
        """Crée les tables. Un échec est journalisé mais ne stoppe pas le processus"""
        from database.models import TransactionModel, BudgetModel  # noqa: F401

        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error(f"Connexion à la base impossible au démarrage: {str(e)}")
            return False
        return True

    def get_db(self):
        """Session par requête, fermée après usage"""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self):
        self.engine.dispose()
