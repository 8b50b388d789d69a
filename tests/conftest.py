import os

# La base par défaut de main.app ne doit pas créer de fichier pendant les tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.pop("REQUIRE_DATABASE_URL", None)
