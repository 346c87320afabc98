"""Translation of storage failures into fedlink errors.

Two steps:
- `to_database_error` wraps any driver/SQLAlchemy failure as `DatabaseError`,
  tagging structured uniqueness violations with `UNIQUE_VIOLATION`.
- `map_unique_violation` turns such a `DatabaseError` into a user-safe
  `ConflictError` and passes everything else through untouched.
"""

from fedlink.domain.shared.error import ConflictError, DatabaseError, FedlinkError

UNIQUE_VIOLATION = "unique_violation"

# Message fragments the engines emit on a uniqueness-constraint failure
UNIQUE_VIOLATION_MARKERS: tuple[str, ...] = (
    "UNIQUE constraint failed",  # SQLite
    "duplicate key value violates unique constraint",  # PostgreSQL
)

FEDERATION_CONFLICT_MESSAGE = "Upstream user id is already linked to another account"
FEDERATION_CONFLICT_CODE = "federation_already_linked"


def to_database_error(exc: BaseException, *, unique_violation: bool = False) -> DatabaseError:
    """Wrap a raw storage exception, keeping the driver's own message."""
    orig = getattr(exc, "orig", None) or exc
    return DatabaseError(
        str(orig),
        code=UNIQUE_VIOLATION if unique_violation else None,
    )


def is_unique_violation(error: FedlinkError) -> bool:
    if error.code == UNIQUE_VIOLATION:
        return True
    return any(marker in error.message for marker in UNIQUE_VIOLATION_MARKERS)


def map_unique_violation(error: FedlinkError) -> FedlinkError:
    """Replace a uniqueness violation with a fixed ConflictError.

    The backend message is dropped so constraint and table names never reach
    the caller. Any other error is returned as the very same object.
    """
    if is_unique_violation(error):
        return ConflictError(FEDERATION_CONFLICT_MESSAGE, code=FEDERATION_CONFLICT_CODE)
    return error
