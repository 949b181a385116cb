from .client import RespiteClient
from .config_types import ClientConfig
from .context import caller_context
from .logging_ import setup_logging
from .errors import ConfigNotFound, RemoteError, ResponseDecodeError, RespiteClientError, SigningError, TransportError
from .response import Result

__all__ = [
    "RespiteClient",
    "ClientConfig",
    "Result",
    "caller_context",
    "setup_logging",
    "RespiteClientError",
    "ConfigNotFound",
    "SigningError",
    "TransportError",
    "ResponseDecodeError",
    "RemoteError",
]
