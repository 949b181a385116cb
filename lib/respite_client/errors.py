from __future__ import annotations


class RespiteClientError(Exception):
    """Base client error."""


class ConfigNotFound(RespiteClientError):
    def __init__(self, service: str, message: str | None = None):
        super().__init__(message or f"No configuration found for service '{service}' and no host given")
        self.service = service


class SigningError(RespiteClientError):
    """Signing requested but no shared secret is configured."""


class TransportError(RespiteClientError):
    """Transport/network layer error."""


class ResponseDecodeError(RespiteClientError):
    def __init__(self, status_code: int, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class RemoteError(RespiteClientError):
    def __init__(self, status_code: int | None, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details
