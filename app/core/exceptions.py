class EstateCRMError(Exception):
    """Base class for all domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except EstateCRMError`` clause can catch any domain error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class UnauthorizedError(EstateCRMError):
    """Raised when the request carries no valid session."""

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail)


class ForbiddenError(EstateCRMError):
    """Raised when the caller lacks the permission or tenant ownership."""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(detail)


class InvalidRequestError(EstateCRMError):
    """Raised for malformed request bodies the schema layer cannot catch."""

    def __init__(self, detail: str = "Invalid request"):
        super().__init__(detail)


class LeadNotFoundError(EstateCRMError):
    """Raised when a requested lead does not exist in the caller's tenant."""

    def __init__(self, detail: str = "Lead not found"):
        super().__init__(detail)


class PropertyNotFoundError(EstateCRMError):
    """Raised when a requested property does not exist."""

    def __init__(self, detail: str = "Property not found"):
        super().__init__(detail)


class UserNotFoundError(EstateCRMError):
    """Raised when a requested profile does not exist."""

    def __init__(self, detail: str = "User not found"):
        super().__init__(detail)


class QueryError(EstateCRMError):
    """Raised by repositories when the database rejects a query.

    The detail names what was being attempted, e.g. ``"Failed to fetch
    leads"``. The driver error is logged, never sent to the client.
    """

    def __init__(self, detail: str = "Query failed"):
        super().__init__(detail)


class BackendServiceError(EstateCRMError):
    """Raised when the hosted auth or storage service fails."""

    def __init__(self, detail: str = "Backend service unavailable"):
        super().__init__(detail)


class UploadRejectedError(EstateCRMError):
    """Raised when an image upload violates the count or size limits."""

    def __init__(self, detail: str = "Upload rejected"):
        super().__init__(detail)
