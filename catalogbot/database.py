# catalogbot/database.py
# ------------------------------------------------------------
# SQLAlchemy setup for the catalog snapshot database
# - URL from env (CATALOG_DB_URL), SQLite file by default
# - Table creation happens in the FastAPI startup hook
# ------------------------------------------------------------
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from decouple import config

CATALOG_DB_URL = config("CATALOG_DB_URL", default="sqlite:///products.db")


def make_engine(url: str):
    # SQLite connections are shared with the FastAPI threadpool
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


catalog_engine = make_engine(CATALOG_DB_URL)
CatalogSessionLocal = sessionmaker(bind=catalog_engine, autoflush=False, autocommit=False)
CatalogBase = declarative_base()  # Base for catalog models (ProductRecord)
