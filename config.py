import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///./finance.db"


def _as_bool(value, default=False):
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# DATABASE_URL vide = non configurée explicitement
DATABASE_URL = os.getenv("DATABASE_URL", "")
ENV = os.getenv("ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

# Variante stricte : le processus s'arrête au démarrage sans chaîne de connexion
REQUIRE_DATABASE_URL = _as_bool(os.getenv("REQUIRE_DATABASE_URL"))

CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]
