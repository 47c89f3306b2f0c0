class CRMError(Exception):
    """Base error carrying the HTTP status and the client-facing message."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidImportSourceError(CRMError):
    status_code = 400
    default_message = "Invalid source type"


class InvalidImportDataError(CRMError):
    status_code = 400
    default_message = "Import data is required for this source"


class NoValidCustomersError(CRMError):
    status_code = 400
    default_message = (
        "No valid customers to import. Make sure the data has name and phoneNumber fields."
    )


class MissingFieldsError(CRMError):
    status_code = 400
    default_message = "Missing required fields: name, phoneNumber, country, category"


class InvalidActionError(CRMError):
    status_code = 400
    default_message = "Invalid action"


class InvalidPayloadError(CRMError):
    status_code = 400
    default_message = "Invalid payload"


class CustomerNotFoundError(CRMError):
    status_code = 404
    default_message = "Customer not found"


class DuplicatePhoneNumberError(CRMError):
    status_code = 409
    default_message = "Customer with this phone number already exists"


class OperationFailedError(CRMError):
    """Raised by routes after logging an unexpected failure; the cause stays server-side."""

    status_code = 500
    default_message = "Operation failed"
