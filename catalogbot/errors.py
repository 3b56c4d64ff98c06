# catalogbot/errors.py
# Failure kinds raised by the catalog core. Each one carries the single
# user-facing line that the interaction reply shows; the exception text
# itself is only for logs.


class CatalogError(Exception):
    user_message = "Something went wrong, please try again."

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.user_message)


class Unauthorized(CatalogError):
    user_message = "You do not have permission to use this bot."


class NotFound(CatalogError):
    user_message = "Product not found."


class DuplicateName(CatalogError):
    user_message = "A product with this name already exists."


class SlugConflict(DuplicateName):
    user_message = "Another product already uses the same channel name."


class InvalidInput(CatalogError):
    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.user_message = detail or "Invalid command input."


class PersistenceFailure(CatalogError):
    user_message = "The catalog could not be saved, check the bot logs before retrying."


class ExternalResourceFailure(CatalogError):
    user_message = "Discord rejected the request, the product was not created."


# Raised by the platform client, translated by the provisioner/synchronizer.
class PlatformError(Exception):
    pass


class ResourceMissing(PlatformError):
    pass


class DiscordAPIError(PlatformError):
    def __init__(self, status: int, body: str = ""):
        super().__init__(f"Discord API error {status}: {body[:200]}")
        self.status = status
        self.body = body
