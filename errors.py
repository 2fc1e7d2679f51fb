"""
Error types raised by the EcoWaste backend.

Every EcoWasteError carries the HTTP status it is reported with; main.py
renders them as {"success": false, "error": message}.
"""


class EcoWasteError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EcoWasteError):
    status_code = 400


class InvalidQuantity(ValidationError):
    pass


class NotFoundError(EcoWasteError):
    status_code = 404


class ConflictError(EcoWasteError):
    # Duplicate signups are reported as a plain bad request
    status_code = 400


class AuthenticationError(EcoWasteError):
    status_code = 401


class ClassifierError(EcoWasteError):
    """The image classifier could not produce predictions; the client may retry."""
    status_code = 502


class FlowStateError(RuntimeError):
    """An entry submission flow operation was called from the wrong state."""
