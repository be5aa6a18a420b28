"""Errors raised by the provider clients."""


class ProviderError(Exception):
    """
    An external provider call failed.

    status_code is the provider's own HTTP status for non-2xx responses,
    or 500 for transport, parsing and empty-result failures.
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
