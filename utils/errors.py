"""Error taxonomy shared by the data layer, the services and the CLI.

``InvalidArgument`` and ``NotFound`` are caller errors. ``ConcurrencyConflict``
and ``PersistenceFailure`` come from the storage layer; the original
``sqlite3`` error is kept as ``__cause__``.
"""


class FinanceError(Exception):
    """Base class for all errors raised by the finance core."""


class InvalidArgument(FinanceError, ValueError):
    """Negative monetary configuration, malformed frequency, bad dates, ..."""


class NotFound(FinanceError, LookupError):
    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found.")
        self.entity = entity
        self.entity_id = entity_id


class ConcurrencyConflict(FinanceError):
    """Another processor advanced the same schedule, or the database was locked."""


class PersistenceFailure(FinanceError):
    """Storage layer error. The underlying exception is chained as __cause__."""
