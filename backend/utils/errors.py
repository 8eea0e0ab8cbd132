# utils/errors.py
# Failures raised by the services layer. main.py turns them into
# {"detail": ...} responses with the matching status code.


class ServiceError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationFailed(ServiceError):
    status_code = 400


class Unauthorized(ServiceError):
    status_code = 401


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 409


class SupplierUnavailable(ServiceError):
    status_code = 503
