# catalogbot/models.py
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Column, Float, Integer, String, Text

from catalogbot.database import CatalogBase


@dataclass
class Product:
    """
    A catalog entry bound 1:1:1 to a Discord channel and its status card.
    - name: unique (case-insensitive), never changed after creation
    - price: informational, shown with the configured currency
    - stock: never negative
    - channel_id / message_id: set once at creation
    - display_color: explicit embed color; None means derived from stock
    """
    name: str
    description: str
    price: float
    stock: int
    channel_id: str
    message_id: str
    image_url: Optional[str] = None
    display_color: Optional[int] = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class ProductRecord(CatalogBase):
    """One row of the catalog snapshot; position keeps insertion order."""
    __tablename__ = "products"

    position = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False, default=0.0)
    stock = Column(Integer, nullable=False, default=0)
    channel_id = Column(String, nullable=False)
    message_id = Column(String, nullable=False)
    image_url = Column(String, nullable=True)
    display_color = Column(Integer, nullable=True)

    @classmethod
    def from_product(cls, position: int, product: Product) -> "ProductRecord":
        return cls(
            position=position,
            name=product.name,
            description=product.description,
            price=product.price,
            stock=product.stock,
            channel_id=product.channel_id,
            message_id=product.message_id,
            image_url=product.image_url,
            display_color=product.display_color,
        )

    def to_product(self) -> Product:
        return Product(
            name=self.name,
            description=self.description or "",
            price=self.price,
            stock=self.stock,
            channel_id=self.channel_id,
            message_id=self.message_id,
            image_url=self.image_url,
            display_color=self.display_color,
        )

    def __repr__(self) -> str:
        return f"<ProductRecord position={self.position} name={self.name!r} stock={self.stock}>"
