# catalogbot/main.py
# Discord HTTP interactions endpoint.
#  - Verifies the Ed25519 signature on every request
#  - PING -> PONG, slash commands -> CatalogOperations.execute
#  - Every command gets exactly one ephemeral reply

import json

from decouple import config
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from catalogbot.commands import COMMANDS, Reply, member_role_ids, parse_interaction
from catalogbot.auth import is_authorized
from catalogbot.errors import CatalogError, PlatformError, Unauthorized
from catalogbot.operations import CatalogOperations
from catalogbot.persistence import SnapshotStore
from catalogbot.store import CatalogStore
from catalogbot.utils import (
    DISCORD_BOT_TOKEN,
    DISCORD_GUILD_ID,
    DiscordClient,
    RoleDirectory,
    logger,
    verify_signature,
)

DISCORD_PUBLIC_KEY = config("DISCORD_PUBLIC_KEY", default="")
DISCORD_APPLICATION_ID = config("DISCORD_APPLICATION_ID", default="")
REGISTER_COMMANDS_ON_STARTUP = config("REGISTER_COMMANDS_ON_STARTUP", cast=bool, default=False)

PING = 1
APPLICATION_COMMAND = 2
PONG = 1

app = FastAPI(title="catalogbot")


@app.on_event("startup")
def on_startup():
    if not (DISCORD_BOT_TOKEN and DISCORD_GUILD_ID and DISCORD_PUBLIC_KEY):
        logger.error("Check .env: DISCORD_BOT_TOKEN, DISCORD_GUILD_ID and DISCORD_PUBLIC_KEY must be set")

    snapshot = SnapshotStore()
    snapshot.create_schema()
    store = CatalogStore.open(snapshot)
    client = DiscordClient()
    app.state.operations = CatalogOperations(store, client)
    app.state.roles = RoleDirectory(client)
    logger.info(f"Catalog ready with {len(store)} products")

    if REGISTER_COMMANDS_ON_STARTUP:
        try:
            client.register_commands(DISCORD_APPLICATION_ID, COMMANDS)
        except PlatformError as e:
            logger.error(f"Error registering slash commands: {e}")


def get_operations(request: Request) -> CatalogOperations:
    return request.app.state.operations


def get_roles(request: Request) -> RoleDirectory:
    return request.app.state.roles


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/interactions")
async def interactions(
    request: Request,
    x_signature_ed25519: str = Header(""),
    x_signature_timestamp: str = Header(""),
    operations: CatalogOperations = Depends(get_operations),
    roles: RoleDirectory = Depends(get_roles),
):
    body = await request.body()
    if not verify_signature(DISCORD_PUBLIC_KEY, x_signature_ed25519, x_signature_timestamp, body):
        raise HTTPException(status_code=401, detail="invalid request signature")

    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="malformed interaction body")

    kind = payload.get("type")
    if kind == PING:
        return {"type": PONG}
    if kind != APPLICATION_COMMAND:
        raise HTTPException(status_code=400, detail=f"unsupported interaction type {kind}")

    reply = await run_in_threadpool(_run_command, payload, operations, roles)
    return reply.to_response()


def _run_command(payload: dict, operations: CatalogOperations, roles: RoleDirectory) -> Reply:
    try:
        role_map = roles.resolve(member_role_ids(payload))
    except PlatformError as e:
        logger.error(f"Could not resolve member roles: {e}")
        return Reply(content="Could not check your roles right now, please try again.")

    if not is_authorized(role_map.values(), operations.admin_roles):
        logger.info(f"Denied interaction from member roles {sorted(role_map.values())}")
        return Reply(content=Unauthorized.user_message)

    try:
        command = parse_interaction(payload, role_map)
    except CatalogError as e:
        return Reply(content=e.user_message)
    return operations.execute(command)
