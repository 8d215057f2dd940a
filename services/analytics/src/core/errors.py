"""Service error taxonomy.

    AnalyticsError (base)
    ├── NotFoundError             404
    ├── ValidationError           400
    ├── AuthenticationError       401
    ├── UpstreamUnavailableError  503
    └── PublishFailure            never surfaced, logged by the notifier

The API layer renders every ``AnalyticsError`` through ``to_dict``.
"""

from __future__ import annotations


class AnalyticsError(Exception):
    status_code = 500

    def __init__(self, message: str, code: str = "ANALYTICS_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
        }


class NotFoundError(AnalyticsError):
    status_code = 404

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found: {entity_id}", code="NOT_FOUND")
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(AnalyticsError):
    """Malformed request parameters."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class AuthenticationError(AnalyticsError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="AUTHENTICATION_FAILED")


class UpstreamUnavailableError(AnalyticsError):
    status_code = 503

    def __init__(self, upstream: str, message: str | None = None):
        super().__init__(
            message or f"{upstream} is unavailable", code="UPSTREAM_UNAVAILABLE"
        )
        self.upstream = upstream


class PublishFailure(AnalyticsError):
    def __init__(self, topic: str, message: str):
        super().__init__(message, code="PUBLISH_FAILURE")
        self.topic = topic
