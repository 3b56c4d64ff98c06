# catalogbot/operations.py
# Catalog use cases. Each one runs its steps in a fixed order so that a
# failure leaves either no record at all or a record whose only defect is a
# stale status card:
#   add:    render -> create channel -> post card -> insert + persist
#   remove: delete channel (best-effort) -> remove + persist
#   stock:  mutate + persist -> refresh card (best-effort)

import logging
import threading
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from catalogbot.auth import ADMIN_ROLES, allowed_role_ids, is_authorized
from catalogbot.commands import AddProduct, AdjustStock, ListStock, Query, RemoveProduct, Reply
from catalogbot.errors import (
    CatalogError,
    DuplicateName,
    ExternalResourceFailure,
    InvalidInput,
    PersistenceFailure,
    SlugConflict,
    Unauthorized,
)
from catalogbot.models import Product
from catalogbot.platform import ChannelGateway, Requester
from catalogbot.services.cards import CURRENCY, DisplaySynchronizer, parse_color
from catalogbot.services.channels import ChannelProvisioner, slugify
from catalogbot.store import CatalogStore

logger = logging.getLogger(__name__)

STOCK_DIRECTIONS = ("add", "remove")


class CatalogOperations:
    def __init__(
        self,
        store: CatalogStore,
        gateway: ChannelGateway,
        *,
        admin_roles: Iterable[str] = ADMIN_ROLES,
        currency: str = CURRENCY,
    ):
        self.store = store
        self.admin_roles = list(admin_roles)
        self.channels = ChannelProvisioner(gateway)
        self.display = DisplaySynchronizer(gateway, currency)
        # one command at a time, including its remote calls
        self._lock = threading.Lock()

    def _authorize(self, requester: Requester) -> None:
        if not is_authorized(requester.roles(), self.admin_roles):
            logger.info(f"Denied command for user {requester.user_id}")
            raise Unauthorized(requester.user_id)

    # ---------------- use cases ----------------

    def add_product(
        self,
        requester: Requester,
        name: str,
        description: str,
        price: float,
        stock: int,
        color: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> Product:
        self._authorize(requester)
        name = (name or "").strip()
        if not name:
            raise InvalidInput("Product name cannot be empty.")
        if price < 0:
            raise InvalidInput("Price cannot be negative.")
        if stock < 0:
            raise InvalidInput("Stock cannot be negative.")
        display_color = parse_color(color) if color else None

        if self.store.find(name) is not None:
            raise DuplicateName(name)
        slug = slugify(name)
        clash = self.store.find_by_slug(slug)
        if clash is not None:
            raise SlugConflict(f"{name!r} and {clash.name!r} both map to #{slug}")

        draft = Product(
            name=name,
            description=description or "",
            price=price,
            stock=stock,
            channel_id="",
            message_id="",
            image_url=image_url,
            display_color=display_color,
        )
        card = self.display.render(draft)

        channel = self.channels.provision(slug, allowed_role_ids(requester, self.admin_roles))
        try:
            message_id = self.display.publish(channel, card)
            product = replace(draft, channel_id=channel.id, message_id=message_id)
            self.store.insert(product)
        except (ExternalResourceFailure, PersistenceFailure):
            cleanup = self.channels.deprovision(channel.id)
            if not cleanup.ok:
                logger.error(f"Channel {channel.id} for {name!r} leaked: {cleanup.detail}")
            raise

        logger.info(f"Product {name!r} added (channel={channel.id} message={message_id})")
        return product

    def remove_product(self, requester: Requester, name: str) -> Product:
        self._authorize(requester)
        product = self.store.get(name)
        cleanup = self.channels.deprovision(product.channel_id)
        if not cleanup.ok:
            logger.warning(f"Removing {product.name!r} although its channel remains: {cleanup.detail}")
        self.store.remove(product.name)
        logger.info(f"Product {product.name!r} removed")
        return product

    def adjust_stock(self, requester: Requester, name: str, direction: str, qty: int) -> Product:
        self._authorize(requester)
        if direction not in STOCK_DIRECTIONS:
            raise InvalidInput(f"Unknown stock action {direction!r}.")
        if qty <= 0:
            raise InvalidInput("Quantity must be a positive number.")
        delta = qty if direction == "add" else -qty
        product = self.store.adjust(name, delta)
        logger.info(f"Stock of {product.name!r} is now {product.stock}")
        self.display.update(product)
        return product

    def query(self, requester: Requester, name: str) -> Product:
        self._authorize(requester)
        return self.store.get(name)

    def list_stock(self, requester: Requester) -> List[Tuple[str, int]]:
        self._authorize(requester)
        return [(p.name, p.stock) for p in self.store.list()]

    # ---------------- command dispatch ----------------

    def execute(self, command) -> Reply:
        """Run one inbound command and return exactly one reply for it."""
        with self._lock:
            try:
                return self._dispatch(command)
            except CatalogError as e:
                logger.info(f"{type(command).__name__} failed: {type(e).__name__}: {e}")
                return Reply(content=e.user_message)
            except Exception:
                logger.exception(f"Unexpected error while running {type(command).__name__}")
                return Reply(content=CatalogError.user_message)

    def _dispatch(self, command) -> Reply:
        if isinstance(command, AddProduct):
            product = self.add_product(
                command.requester,
                command.name,
                command.description,
                command.price,
                command.stock,
                color=command.color,
                image_url=command.image_url,
            )
            return Reply(content=f"Product added: {product.name}")

        if isinstance(command, RemoveProduct):
            product = self.remove_product(command.requester, command.name)
            return Reply(content=f"Product {product.name} deleted")

        if isinstance(command, AdjustStock):
            product = self.adjust_stock(command.requester, command.name, command.direction, command.qty)
            return Reply(content=f"Stock updated: {product.name}: {product.stock} pcs.")

        if isinstance(command, Query):
            product = self.query(command.requester, command.name)
            return Reply(embeds=[self.display.render_details(product)])

        if isinstance(command, ListStock):
            lines = [f"{name}: {stock} pcs." for name, stock in self.list_stock(command.requester)]
            return Reply(content="\n".join(lines) or "No products.")

        raise InvalidInput(f"Unsupported command {type(command).__name__}.")
