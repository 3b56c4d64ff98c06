# catalogbot/services/cards.py
# Status card (Discord embed) rendering and the push to the product channel.
# The public card shows a binary in/out of stock line; the /info reply shows
# the exact count and is never posted to the channel.

import logging
import re
from typing import Optional

from decouple import config

from catalogbot.errors import ExternalResourceFailure, InvalidInput, PlatformError
from catalogbot.models import Product
from catalogbot.platform import ChannelGateway, ChannelHandle, SyncResult

CURRENCY = config("CURRENCY", default="EUR")

logger = logging.getLogger(__name__)

GREEN = 0x57F287
RED = 0xED4245

# Same palette names Discord clients accept for embed colors
NAMED_COLORS = {
    "default": 0x000000,
    "white": 0xFFFFFF,
    "aqua": 0x1ABC9C,
    "green": GREEN,
    "blue": 0x3498DB,
    "yellow": 0xFEE75C,
    "purple": 0x9B59B6,
    "gold": 0xF1C40F,
    "orange": 0xE67E22,
    "red": RED,
    "grey": 0x95A5A6,
    "navy": 0x34495E,
    "blurple": 0x5865F2,
    "fuchsia": 0xEB459E,
}

_HEX = re.compile(r"^(?:#|0x)?([0-9a-f]{6})$")


def parse_color(value: str) -> int:
    text = value.strip().lower()
    if text in NAMED_COLORS:
        return NAMED_COLORS[text]
    match = _HEX.match(text)
    if not match:
        raise InvalidInput(f"Invalid color {value!r}, use HEX like #00FF00.")
    return int(match.group(1), 16)


def card_color(product: Product) -> int:
    if product.display_color is not None:
        return product.display_color
    return GREEN if product.in_stock else RED


def _base_card(product: Product, currency: str) -> dict:
    card = {
        "title": product.name,
        "description": product.description,
        "color": card_color(product),
        "fields": [{"name": "💰 Price", "value": f"{product.price:.2f} {currency}"}],
    }
    if product.image_url:
        card["image"] = {"url": product.image_url}
    return card


def render(product: Product, currency: str = CURRENCY) -> dict:
    card = _base_card(product, currency)
    status = "✅ In stock" if product.in_stock else "❌ Out of stock"
    card["fields"].append({"name": "📦 Status", "value": status})
    return card


def render_details(product: Product, currency: str = CURRENCY) -> dict:
    card = _base_card(product, currency)
    card["fields"].append({"name": "📦 Stock", "value": f"{product.stock} pcs."})
    return card


class DisplaySynchronizer:
    def __init__(self, gateway: ChannelGateway, currency: str = CURRENCY):
        self.gateway = gateway
        self.currency = currency

    def render(self, product: Product) -> dict:
        return render(product, self.currency)

    def render_details(self, product: Product) -> dict:
        return render_details(product, self.currency)

    def publish(self, channel: ChannelHandle, card: dict) -> str:
        """Post the first card in a fresh channel; returns the message id."""
        try:
            message = channel.send(card)
        except PlatformError as e:
            logger.error(f"Status card could not be posted in channel {channel.id}: {e}")
            raise ExternalResourceFailure(str(e)) from e
        return message.id

    def update(self, product: Product, card: Optional[dict] = None) -> SyncResult:
        card = card or self.render(product)
        try:
            self.gateway.message(product.channel_id, product.message_id).edit(card)
        except PlatformError as e:
            logger.warning(f"Status card for {product.name!r} is stale: {e}")
            return SyncResult(False, str(e))
        return SyncResult(True)
