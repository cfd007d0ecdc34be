"""Exceptions raised across the Toolgate system."""


class ToolgateError(Exception):
    """Base class for Toolgate errors."""


class ApprovalError(ToolgateError):
    """An approval request ended without approval."""

    def __init__(self, message: str, request_id: str):
        super().__init__(message)
        self.request_id = request_id


class RequestSupersededError(ApprovalError):
    """A newer approval request replaced this one before it was decided."""

    def __init__(self, request_id: str):
        super().__init__("Request superseded by new tool approval request", request_id)


class UserDeniedError(ApprovalError):
    """The user explicitly denied the request."""

    def __init__(self, request_id: str):
        super().__init__("User denied tool execution", request_id)


class PlanningCancelledError(ToolgateError):
    """The planning model call was cancelled by the caller."""
