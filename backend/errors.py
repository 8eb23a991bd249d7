from __future__ import annotations

from sqlalchemy.exc import DBAPIError

UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"
FOREIGN_KEY_VIOLATION = "23503"

# SQLite reports constraint failures only through the message text.
_SQLITE_MESSAGES = {
    "UNIQUE constraint failed": UNIQUE_VIOLATION,
    "CHECK constraint failed": CHECK_VIOLATION,
    "FOREIGN KEY constraint failed": FOREIGN_KEY_VIOLATION,
}


def sqlstate_of(exc: BaseException) -> str | None:
    orig = getattr(exc, "orig", None) or exc
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    message = str(orig)
    for fragment, code in _SQLITE_MESSAGES.items():
        if fragment in message:
            return code
    # asyncpg-style "<code>: message" prefixes
    head = message.strip()[:5]
    if head.isdigit() and head.startswith("23"):
        return head
    return None


def is_unique_violation(exc: BaseException) -> bool:
    return isinstance(exc, DBAPIError) and sqlstate_of(exc) == UNIQUE_VIOLATION


def is_check_violation(exc: BaseException) -> bool:
    return isinstance(exc, DBAPIError) and sqlstate_of(exc) == CHECK_VIOLATION
