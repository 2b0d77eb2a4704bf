"""
Typed Exception Hierarchy for the Khata Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A command that touches the ledger either commits every effect or none of
them. Callers need to tell a user typo apart from a broken audit trail
without parsing message strings, so:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable)
  3. Exceptions carry structured DATA (not just a message string)

Example - WRONG way to handle errors:
    try:
        billing.generate_bill(name, items, actor)
    except Exception as e:
        if "at least one item" in str(e):
            show_form_error()

Example - RIGHT way:
    try:
        billing.generate_bill(name, items, actor)
    except EmptyBillError as e:
        show_form_error(code=e.code)
    except NonPositiveValueError as e:
        show_field_error(e.field, e.value)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from KhataKernelError:

    KhataKernelError (base)
    |
    +-- ValidationError
    |   +-- MissingFieldError
    |   +-- NonPositiveValueError
    |   +-- InvalidValueError
    |   +-- EmptyBillError
    |   +-- DuplicateRecordError
    |   +-- SerialRegressionError
    |
    +-- RecordNotFoundError
    |
    +-- AuditError
    |   +-- MissingEntityError
    |   +-- MissingActorError
    |   +-- SnapshotMismatchError
    |
    +-- OwnershipError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                 | When Raised
----------------|----------------------|-------------------------------------------
Validation      | MISSING_FIELD        | Required form field blank
                | NON_POSITIVE_VALUE   | Quantity, price or amount <= 0
                | INVALID_VALUE        | Field not of the expected form (bill serial)
                | EMPTY_BILL           | Bill requested with no items
                | DUPLICATE_RECORD     | Unique key already taken (user email)
                | SERIAL_REGRESSION    | Counter moved below an issued bill serial
----------------|----------------------|-------------------------------------------
Lookup          | RECORD_NOT_FOUND     | Id does not resolve in its collection
----------------|----------------------|-------------------------------------------
Audit           | MISSING_ENTITY       | History recorded against no record
                | MISSING_ACTOR        | Mutation without a current actor
                | SNAPSHOT_MISMATCH    | old/new snapshots not keyed identically
----------------|----------------------|-------------------------------------------
Ownership       | INVALID_OWNERSHIP    | Transaction owned by both or neither party

===============================================================================
HANDLING PATTERNS
===============================================================================

1. VALIDATION ERRORS are user-facing. Nothing was committed; show the
   message and let the user retry.

2. AUDIT ERRORS and OWNERSHIP ERRORS are programming errors. They must
   propagate; a missing audit record is a correctness defect.

3. RECORD NOT FOUND usually means a stale UI reference to a deleted
   customer or company.
"""


class KhataKernelError(Exception):
    """
    Base exception for all khata kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "KHATA_KERNEL_ERROR"


# Validation exceptions


class ValidationError(KhataKernelError):
    """Base exception for input rejected before any state change."""

    code: str = "VALIDATION_ERROR"


class MissingFieldError(ValidationError):
    """A required field was empty."""

    code: str = "MISSING_FIELD"

    def __init__(self, field: str, record_kind: str | None = None):
        self.field = field
        self.record_kind = record_kind
        where = f" for {record_kind}" if record_kind else ""
        super().__init__(f"Missing required field '{field}'{where}")


class NonPositiveValueError(ValidationError):
    """Quantity, price or amount must be strictly positive."""

    code: str = "NON_POSITIVE_VALUE"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = str(value)
        super().__init__(f"'{field}' must be greater than zero, got {value}")


class InvalidValueError(ValidationError):
    """A field holds a value of the wrong form."""

    code: str = "INVALID_VALUE"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = str(value)
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class EmptyBillError(ValidationError):
    """A bill needs at least one line item."""

    code: str = "EMPTY_BILL"

    def __init__(self, customer_name: str):
        self.customer_name = customer_name
        super().__init__(f"Bill for '{customer_name}' must contain at least one item")


class DuplicateRecordError(ValidationError):
    """A unique key is already taken in its collection."""

    code: str = "DUPLICATE_RECORD"

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} already exists: {key}")


class SerialRegressionError(ValidationError):
    """
    The bill counter may not be set below a serial that was already issued.

    Moving it back would make the next bill reuse an existing serial.
    """

    code: str = "SERIAL_REGRESSION"

    def __init__(self, requested: int, highest_issued: int):
        self.requested = requested
        self.highest_issued = highest_issued
        super().__init__(
            f"Bill serial counter {requested} is below highest issued serial "
            f"{highest_issued}"
        )


# Lookup exceptions


class RecordNotFoundError(KhataKernelError):
    """Record with given id was not found in its collection."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


# Audit-related exceptions


class AuditError(KhataKernelError):
    """Base exception for audit trail errors."""

    code: str = "AUDIT_ERROR"


class MissingEntityError(AuditError):
    """History was recorded against no record at all."""

    code: str = "MISSING_ENTITY"

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Cannot record '{action}' history on a missing record")


class MissingActorError(AuditError):
    """A mutation was attempted without a current actor."""

    code: str = "MISSING_ACTOR"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"No actor supplied for '{operation}'")


class SnapshotMismatchError(AuditError):
    """
    old_values / new_values must both be present and keyed identically.

    The diff renderer pairs the snapshots by key; an unpaired key would
    render as "N/A" and hide what actually changed.
    """

    code: str = "SNAPSHOT_MISMATCH"

    def __init__(self, old_keys: list[str] | None, new_keys: list[str] | None):
        self.old_keys = old_keys
        self.new_keys = new_keys
        super().__init__(
            f"History snapshots do not pair up: old={old_keys}, new={new_keys}"
        )


# Ownership exceptions


class OwnershipError(KhataKernelError):
    """A transaction must belong to exactly one customer or one company."""

    code: str = "INVALID_OWNERSHIP"

    def __init__(self, customer_id: str | None, company_id: str | None):
        self.customer_id = customer_id
        self.company_id = company_id
        super().__init__(
            "Transaction must have exactly one of customer_id/company_id, "
            f"got customer_id={customer_id!r}, company_id={company_id!r}"
        )
