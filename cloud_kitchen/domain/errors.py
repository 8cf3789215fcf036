"""
Error taxonomy for the order/kitchen core.

Every error carries the HTTP status the API layer answers with, so handlers
can do `JSONResponse({"error": str(e)}, status_code=e.status_code)` without a
lookup table.
"""


class KitchenStoreError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


# --- 400: bad or missing input ---

class ValidationError(KitchenStoreError):
    status_code = 400


class EmptyCartError(ValidationError):
    def __init__(self, message: str = "Order must include at least one menu item."):
        super().__init__(message)


class MissingPhoneError(ValidationError):
    def __init__(self, message: str = "Phone number is required."):
        super().__init__(message)


class UnknownStatusError(ValidationError):
    def __init__(self, status: object = None):
        super().__init__("Unknown status supplied.")
        self.status = status


# --- lifecycle ---

class InvalidTransitionError(KitchenStoreError):
    status_code = 400

    def __init__(self, current: str, requested: str):
        super().__init__("Invalid status transition.")
        self.current = current
        self.requested = requested


class TerminalStateError(KitchenStoreError):
    status_code = 400

    def __init__(self, message: str = "Order can no longer be changed."):
        super().__init__(message)


# --- lookup / auth ---

class NotFoundError(KitchenStoreError):
    status_code = 404

    def __init__(self, message: str = "Order not found"):
        super().__init__(message)


class UnauthorizedError(KitchenStoreError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


# --- both backends down ---

class StorageError(KitchenStoreError):
    status_code = 500

    def __init__(self, message: str = "Unable to store data. Please try again."):
        super().__init__(message)
