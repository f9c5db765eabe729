from typing import Optional


class ServiceError(Exception):
    """Raised by services when a business rule rejects the request.

    ``code`` is the stable machine-readable error code returned to clients
    in the response envelope, ``status_code`` the HTTP status to use.
    """

    def __init__(self, code: str, status_code: int = 400, message: Optional[str] = None):
        self.code = code
        self.status_code = status_code
        self.message = message or code.replace("_", " ").capitalize()
        super().__init__(self.message)


class NotFoundError(ServiceError):
    def __init__(self, code: str = "NOT_FOUND", message: Optional[str] = None):
        super().__init__(code=code, status_code=404, message=message)
