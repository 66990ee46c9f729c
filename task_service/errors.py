"""
Domain errors raised by the auth and task services.

Each error carries the HTTP status it maps to; the API layer translates
them into ``{"success": false, "message": ...}`` responses.
"""


class TaskServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(TaskServiceError):
    status_code = 400


class Unauthorized(TaskServiceError):
    status_code = 401


class Forbidden(TaskServiceError):
    status_code = 403


class NotFound(TaskServiceError):
    status_code = 404


class Conflict(TaskServiceError):
    # Duplicate registrations surface as a plain bad request
    status_code = 400
