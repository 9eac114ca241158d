from .config import ConnectionConfig, load_config, load_connection
from .connection import Connection
from .errors import (
    ApiConnectionError,
    ApiError,
    ApiNotImplemented,
    InvalidCredentials,
    MalformedTaskHandle,
    NoVmIdAvailable,
    ProxmoxError,
    ServerError,
    TaskTimeout,
    UnauthorizedError,
    VmNotFound,
)
from .models import VmState

__version__ = '0.1.0'
