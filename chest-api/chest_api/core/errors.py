"""
Domain errors for the chest ledger.

Services raise these; ``main.py`` registers a handler that turns them into
``{"error": detail, ...extra}`` JSON responses with the mapped status code.
"""


class LedgerError(Exception):
    status_code = 500
    default_detail = "Server error"

    def __init__(self, detail: str | None = None, **extra):
        self.detail = detail or self.default_detail
        self.extra = extra
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"error": self.detail, **self.extra}


# 400
class InvalidInput(LedgerError):
    status_code = 400
    default_detail = "Invalid input"


class InvalidReference(InvalidInput):
    default_detail = "itemId, itemMongoId or name required"


class InvalidDelta(InvalidInput):
    default_detail = "inc required (non-zero integer)"


class InvalidName(InvalidInput):
    default_detail = "name required"


class InsufficientQuantity(LedgerError):
    status_code = 400
    default_detail = "Insufficient quantity"


class RequiresDecision(LedgerError):
    """Non-empty chest deleted without a migration target or confirmation."""
    status_code = 400
    default_detail = "Chest is not empty"


# 404
class NotFound(LedgerError):
    status_code = 404
    default_detail = "Not found"


class ChestNotFound(NotFound):
    default_detail = "Chest not found"


class ItemNotFound(NotFound):
    default_detail = "Item not found"


# 409
class Conflict(LedgerError):
    status_code = 409
    default_detail = "Conflict"


class DuplicateName(Conflict):
    default_detail = "A chest with this name already exists"


# Auth
class Unauthenticated(LedgerError):
    status_code = 401
    default_detail = "Authentication required"


class Unauthorized(LedgerError):
    status_code = 403
    default_detail = "Required role not found"


# 500
class InternalError(LedgerError):
    status_code = 500
    default_detail = "Server error"


class ProviderError(InternalError):
    """Identity provider (Discord) unreachable or answering with an error."""
    default_detail = "Identity provider error"
