"""
Typed Exception Hierarchy for the Dairy Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Collection entry, rate maintenance and farmer maintenance all share one
failure that callers must react to precisely: the write touches a bill period
that has been locked. Callers catch by type and read structured attributes,
never by parsing messages:

    try:
        collections.create(entry)
    except LockedPeriodError as e:
        return {"error": e.code, "period": e.period_id, "locked": True}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DairyKernelError (base)
    |
    +-- PeriodError
    |   +-- LockedPeriodError
    |   |   +-- LockedRangeError
    |
    +-- ValidationFailedError
    |
    +-- NotFoundError
    |   +-- CollectionNotFoundError
    |   +-- RateConfigNotFoundError
    |   +-- FarmerNotFoundError
    |   +-- AdjustmentNotFoundError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                    | When Raised
----------------|-------------------------|-----------------------------------------
Period          | LOCKED_PERIOD           | Write targets a date/period id that is locked
                | LOCKED_RANGE            | Write covers a date span touching a locked period
----------------|-------------------------|-----------------------------------------
Validation      | VALIDATION_FAILED       | Required raw fields missing on a single write
----------------|-------------------------|-----------------------------------------
Not found       | COLLECTION_NOT_FOUND    | Collection id doesn't exist
                | RATE_CONFIG_NOT_FOUND   | Rate config id doesn't exist
                | FARMER_NOT_FOUND        | Farmer id doesn't exist
                | ADJUSTMENT_NOT_FOUND    | Addition/deduction id doesn't exist
----------------|-------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION  | Flush would modify a locked collection row

Missing master data is NOT an error for valuation: an unknown farmer means
"no overrides" and an unknown config means "all rates zero". NotFoundError is
only raised by CRUD operations addressing a record by id.
"""


class DairyKernelError(Exception):
    """
    Base exception for all dairy kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "DAIRY_KERNEL_ERROR"


# Period-related exceptions


class PeriodError(DairyKernelError):
    """Base exception for bill-period related errors."""

    code: str = "PERIOD_ERROR"


class LockedPeriodError(PeriodError):
    """Attempted to write into a locked bill period."""

    code: str = "LOCKED_PERIOD"
    locked: bool = True

    def __init__(self, target: str, period_id: str, operation: str):
        self.target = target
        self.period_id = period_id
        self.operation = operation
        super().__init__(
            f"Cannot {operation} {target}: bill period {period_id} is locked"
        )


class LockedRangeError(LockedPeriodError):
    """Attempted a write whose date span touches a locked bill period."""

    code: str = "LOCKED_RANGE"

    def __init__(self, target: str, from_date: str, to_date: str, operation: str):
        self.from_date = from_date
        self.to_date = to_date
        self.target = target
        self.period_id = ""
        self.operation = operation
        PeriodError.__init__(
            self,
            f"Cannot {operation} {target}: range {from_date}..{to_date} "
            "touches a locked bill period",
        )


# Validation exceptions


class ValidationFailedError(DairyKernelError):
    """Required raw fields are missing or malformed."""

    code: str = "VALIDATION_FAILED"

    def __init__(self, entity: str, errors: list):
        self.entity = entity
        self.errors = errors
        super().__init__(
            f"Validation failed for {entity}: "
            + "; ".join(getattr(e, "message", str(e)) for e in errors)
        )


# Not-found exceptions


class NotFoundError(DairyKernelError):
    """Base exception for records addressed by id that do not exist."""

    code: str = "NOT_FOUND"


class CollectionNotFoundError(NotFoundError):
    """Collection with given id was not found."""

    code: str = "COLLECTION_NOT_FOUND"

    def __init__(self, collection_id: str):
        self.collection_id = collection_id
        super().__init__(f"Collection not found: {collection_id}")


class RateConfigNotFoundError(NotFoundError):
    """Rate configuration with given id was not found."""

    code: str = "RATE_CONFIG_NOT_FOUND"

    def __init__(self, config_id: str):
        self.config_id = config_id
        super().__init__(f"Rate config not found: {config_id}")


class FarmerNotFoundError(NotFoundError):
    """Farmer with given id was not found."""

    code: str = "FARMER_NOT_FOUND"

    def __init__(self, farmer_id: str):
        self.farmer_id = farmer_id
        super().__init__(f"Farmer not found: {farmer_id}")


class AdjustmentNotFoundError(NotFoundError):
    """Addition/deduction line with given id was not found."""

    code: str = "ADJUSTMENT_NOT_FOUND"

    def __init__(self, adjustment_id: str):
        self.adjustment_id = adjustment_id
        super().__init__(f"Adjustment not found: {adjustment_id}")


# Immutability exceptions


class ImmutabilityError(DairyKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify a record frozen by a locked bill period.

    Raised by the ORM listeners in db/immutability.py, behind the
    service-level lock checks.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )
