"""
Typed Exception Hierarchy for the POS Kernel.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from PosKernelError:

    PosKernelError (base)
    |
    +-- CatalogError
    |   +-- InvalidProductError
    |   +-- DuplicateProductError
    |   +-- UnknownProductError      (also an IntegrityViolationError)
    |
    +-- CheckoutError
    |   +-- InvalidCheckoutTransitionError
    |
    +-- IntegrityViolationError
    |   +-- SaleIdCollisionError
    |   +-- UnknownProductError
    |
    +-- FormattingError
        +-- DocumentRenderError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                         | When Raised
-------------|------------------------------|-----------------------------------
Catalog      | INVALID_PRODUCT              | Product field out of bounds
             | DUPLICATE_PRODUCT            | Adding an id already in catalog
             | UNKNOWN_PRODUCT              | Id not present in the catalog
-------------|------------------------------|-----------------------------------
Checkout     | INVALID_CHECKOUT_TRANSITION  | State machine misuse (bug)
-------------|------------------------------|-----------------------------------
Integrity    | INTEGRITY_VIOLATION          | Base for abort-before-append
             | SALE_ID_COLLISION            | Sale id already in the ledger
-------------|------------------------------|-----------------------------------
Formatting   | DOCUMENT_RENDER_FAILED       | Receipt/report document failed

Insufficient cash tender and empty-cart checkout are NOT exceptions: the
checkout coordinator returns them as typed outcome values
(``ValidationRejection`` and ``EmptyCartNoop``).

===============================================================================
HANDLING PATTERNS
===============================================================================

1. Integrity errors abort the sale before any ledger append. The checkout
   coordinator catches IntegrityViolationError and converts it into an
   ``IntegrityViolation`` outcome; callers of ``submit_cart`` never see
   the exception.

2. Formatting errors never propagate past the reporting module. The
   reporting service catches FormattingError and degrades to the plain
   text summary.

3. Every exception stores its context as attributes so the structured
   log formatter can emit ``exc_code`` and ``exc_<field>`` keys.
"""

from pos_kernel.invariants import KernelInvariant


class PosKernelError(Exception):
    """
    Base exception for all POS kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "POS_KERNEL_ERROR"


# Catalog-related exceptions


class CatalogError(PosKernelError):
    """Base exception for catalog-related errors."""

    code: str = "CATALOG_ERROR"


class InvalidProductError(CatalogError):
    """A product field is outside its allowed bounds."""

    code: str = "INVALID_PRODUCT"

    def __init__(self, product_id: str, field_name: str, reason: str):
        self.product_id = product_id
        self.field_name = field_name
        self.reason = reason
        super().__init__(f"Invalid product {product_id}: {field_name} {reason}")


class DuplicateProductError(CatalogError):
    """A product with the same id already exists in the catalog."""

    code: str = "DUPLICATE_PRODUCT"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product already exists: {product_id}")


# Integrity exceptions


class IntegrityViolationError(PosKernelError):
    """
    Base exception for failures that must abort a sale before any
    ledger append.
    """

    code: str = "INTEGRITY_VIOLATION"
    invariant: KernelInvariant = KernelInvariant.STOCK_LOCKSTEP


class UnknownProductError(CatalogError, IntegrityViolationError):
    """
    A product id could not be resolved in the catalog.

    During reconciliation this aborts the whole sale: no stock moves and
    nothing is appended to the ledger.
    """

    code: str = "UNKNOWN_PRODUCT"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class SaleIdCollisionError(IntegrityViolationError):
    """A newly allocated sale id is already present in the ledger."""

    code: str = "SALE_ID_COLLISION"
    invariant: KernelInvariant = KernelInvariant.SALE_IMMUTABLE

    def __init__(self, sale_id: str):
        self.sale_id = sale_id
        super().__init__(f"Sale id already recorded: {sale_id}")


# Checkout exceptions


class CheckoutError(PosKernelError):
    """Base exception for checkout state machine errors."""

    code: str = "CHECKOUT_ERROR"


class InvalidCheckoutTransitionError(CheckoutError):
    """
    A checkout state transition not declared in CHECKOUT_TRANSITIONS.

    This is a programming error, not a user-facing rejection.
    """

    code: str = "INVALID_CHECKOUT_TRANSITION"

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal checkout transition: {from_state} -> {to_state}"
        )


# Formatting exceptions


class FormattingError(PosKernelError):
    """Base exception for receipt and report rendering errors."""

    code: str = "FORMATTING_ERROR"


class DocumentRenderError(FormattingError):
    """A structured document (receipt or report) could not be produced."""

    code: str = "DOCUMENT_RENDER_FAILED"

    def __init__(self, document_kind: str, reason: str):
        self.document_kind = document_kind
        self.reason = reason
        super().__init__(f"Failed to render {document_kind}: {reason}")
