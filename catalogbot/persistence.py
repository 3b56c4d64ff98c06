# catalogbot/persistence.py
# Whole-catalog snapshot stored in the products table. load() never raises;
# save() replaces every row in one transaction and surfaces failures.

import logging
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from catalogbot.database import CatalogBase, catalog_engine, make_engine
from catalogbot.errors import PersistenceFailure
from catalogbot.models import Product, ProductRecord

logger = logging.getLogger(__name__)


class SnapshotStore:
    def __init__(self, engine=catalog_engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    @classmethod
    def from_url(cls, url: str) -> "SnapshotStore":
        return cls(make_engine(url))

    def create_schema(self) -> None:
        try:
            CatalogBase.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            logger.error(f"DB init failed at startup: {e}")

    def load(self) -> List[Product]:
        db = self._session_factory()
        try:
            rows = db.query(ProductRecord).order_by(ProductRecord.position).all()
            products = [row.to_product() for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Could not read catalog snapshot, starting empty: {e}")
            return []
        finally:
            db.close()
        logger.info(f"Loaded {len(products)} products from snapshot")
        return products

    def save(self, products: Sequence[Product]) -> None:
        db = self._session_factory()
        try:
            db.query(ProductRecord).delete()
            db.add_all([ProductRecord.from_product(i, p) for i, p in enumerate(products)])
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Catalog snapshot write failed: {e}")
            raise PersistenceFailure(str(e)) from e
        finally:
            db.close()
