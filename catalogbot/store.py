# catalogbot/store.py
import logging
from typing import Dict, List, Optional, Protocol, Sequence

from catalogbot.errors import DuplicateName, NotFound, PersistenceFailure
from catalogbot.models import Product
from catalogbot.services.channels import slugify

logger = logging.getLogger(__name__)


class Snapshot(Protocol):
    def load(self) -> List[Product]: ...

    def save(self, products: Sequence[Product]) -> None: ...


def _key(name: str) -> str:
    return name.strip().casefold()


class CatalogStore:
    """
    In-memory catalog keyed by case-folded product name, in insertion order.

    Every mutation writes the full snapshot before returning. When the write
    fails the in-memory change is undone and PersistenceFailure propagates,
    so memory and disk keep describing the same catalog.
    """

    def __init__(self, snapshot: Snapshot, products: Optional[Sequence[Product]] = None):
        self._snapshot = snapshot
        self._products: Dict[str, Product] = {}
        for product in products or []:
            self._products[_key(product.name)] = product

    @classmethod
    def open(cls, snapshot: Snapshot) -> "CatalogStore":
        return cls(snapshot, snapshot.load())

    def __len__(self) -> int:
        return len(self._products)

    def find(self, name: str) -> Optional[Product]:
        return self._products.get(_key(name))

    def get(self, name: str) -> Product:
        product = self.find(name)
        if product is None:
            raise NotFound(name)
        return product

    def find_by_slug(self, slug: str) -> Optional[Product]:
        for product in self._products.values():
            if slugify(product.name) == slug:
                return product
        return None

    def list(self) -> List[Product]:
        return list(self._products.values())

    def insert(self, product: Product) -> None:
        key = _key(product.name)
        if key in self._products:
            raise DuplicateName(product.name)
        self._products[key] = product
        try:
            self._persist()
        except PersistenceFailure:
            del self._products[key]
            raise

    def remove(self, name: str) -> Product:
        key = _key(name)
        if key not in self._products:
            raise NotFound(name)
        previous = dict(self._products)
        product = self._products.pop(key)
        try:
            self._persist()
        except PersistenceFailure:
            self._products = previous
            raise
        return product

    def adjust(self, name: str, delta: int) -> Product:
        """Add delta to the stock, clamping at zero."""
        product = self.get(name)
        old = product.stock
        product.stock = max(0, old + delta)
        try:
            self._persist()
        except PersistenceFailure:
            product.stock = old
            raise
        return product

    def _persist(self) -> None:
        self._snapshot.save(self.list())
