# catalogbot/commands.py
# Guild slash-command definitions and the conversion of an interaction
# payload into one of the typed commands handled by CatalogOperations.

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from catalogbot.errors import InvalidInput
from catalogbot.platform import Requester

# Discord option types
SUB_COMMAND = 1
STRING = 3
INTEGER = 4
NUMBER = 10
ATTACHMENT = 11

EPHEMERAL = 1 << 6


def _opt(kind: int, name: str, description: str, required: bool = True, **extra) -> dict:
    return {"type": kind, "name": name, "description": description, "required": required, **extra}


def _name_opt() -> dict:
    return _opt(STRING, "name", "Product name")


COMMANDS: List[dict] = [
    {
        "name": "addproduct",
        "description": "Add a new product",
        "options": [
            _name_opt(),
            _opt(STRING, "description", "Description"),
            _opt(NUMBER, "price", "Price", min_value=0),
            _opt(INTEGER, "stock", "Quantity in stock", min_value=0),
            _opt(STRING, "color", "Embed color HEX (e.g. #00FF00)", required=False),
            _opt(ATTACHMENT, "image", "Product image", required=False),
        ],
    },
    {
        "name": "removeproduct",
        "description": "Delete a product by name",
        "options": [_name_opt()],
    },
    {
        "name": "stock",
        "description": "Manage stock",
        "options": [
            {"type": SUB_COMMAND, "name": "list", "description": "Show stock"},
            {
                "type": SUB_COMMAND,
                "name": "add",
                "description": "Restock a product",
                "options": [_name_opt(), _opt(INTEGER, "qty", "Quantity", min_value=1)],
            },
            {
                "type": SUB_COMMAND,
                "name": "remove",
                "description": "Reduce stock of a product",
                "options": [_name_opt(), _opt(INTEGER, "qty", "Quantity", min_value=1)],
            },
        ],
    },
    {
        "name": "info",
        "description": "Show product information",
        "options": [_name_opt()],
    },
]


@dataclass(frozen=True)
class AddProduct:
    requester: Requester
    name: str
    description: str
    price: float
    stock: int
    color: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class RemoveProduct:
    requester: Requester
    name: str


@dataclass(frozen=True)
class AdjustStock:
    requester: Requester
    name: str
    direction: str  # "add" | "remove"
    qty: int


@dataclass(frozen=True)
class Query:
    requester: Requester
    name: str


@dataclass(frozen=True)
class ListStock:
    requester: Requester


@dataclass
class Reply:
    """The single ephemeral answer sent back for a command."""
    content: str = ""
    embeds: List[dict] = field(default_factory=list)

    def to_response(self) -> dict:
        data: Dict[str, Any] = {"flags": EPHEMERAL}
        if self.content:
            data["content"] = self.content
        if self.embeds:
            data["embeds"] = self.embeds
        return {"type": 4, "data": data}


def _options(raw: Optional[list]) -> Dict[str, Any]:
    return {o["name"]: o.get("value") for o in raw or [] if o.get("type") != SUB_COMMAND}


def requester_from(payload: dict, role_map: Dict[str, str]) -> Requester:
    member = payload.get("member") or {}
    user = member.get("user") or payload.get("user") or {}
    return Requester(user_id=str(user.get("id", "")), role_map=dict(role_map))


def member_role_ids(payload: dict) -> List[str]:
    member = payload.get("member") or {}
    return [str(r) for r in member.get("roles", [])]


def parse_interaction(payload: dict, role_map: Dict[str, str]):
    data = payload.get("data") or {}
    command = data.get("name")
    requester = requester_from(payload, role_map)
    options = _options(data.get("options"))

    try:
        if command == "addproduct":
            image_url = None
            if options.get("image"):
                attachments = (data.get("resolved") or {}).get("attachments") or {}
                image_url = attachments[str(options["image"])]["url"]
            return AddProduct(
                requester,
                name=options["name"],
                description=options.get("description") or "",
                price=float(options["price"]),
                stock=int(options["stock"]),
                color=options.get("color"),
                image_url=image_url,
            )
        if command == "removeproduct":
            return RemoveProduct(requester, name=options["name"])
        if command == "info":
            return Query(requester, name=options["name"])
        if command == "stock":
            sub = (data.get("options") or [{}])[0]
            subcommand = sub.get("name")
            if subcommand == "list":
                return ListStock(requester)
            if subcommand in ("add", "remove"):
                sub_options = _options(sub.get("options"))
                return AdjustStock(
                    requester,
                    name=sub_options["name"],
                    direction=subcommand,
                    qty=int(sub_options["qty"]),
                )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidInput(f"Missing or invalid option for /{command}.") from e

    raise InvalidInput(f"Unknown command /{command}.")
