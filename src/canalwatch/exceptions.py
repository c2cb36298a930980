"""
Exceptions for canalwatch operations.
"""


class CanalWatchError(Exception):
    """Base exception for canalwatch-related errors."""

    pass


class ServiceConnectionError(CanalWatchError):
    """Error reaching the monitoring service (no usable response)."""

    pass


class ServiceResponseError(CanalWatchError):
    """A response arrived but its payload is not usable."""

    pass


class BindingNotFoundError(CanalWatchError):
    """A UI binding target does not exist."""

    def __init__(self, binding_id: str):
        self.binding_id = binding_id
        super().__init__(f"No UI binding named '{binding_id}'")
