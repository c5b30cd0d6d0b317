# remotereg/core/__init__.py
from .exceptions import (
    Fatal,
    InvalidArgument,
    KeyNotFound,
    RegistryConnectionError,
    RemoteRegError,
    SessionClosed,
    ValueNotFound,
    WriteError,
)

__all__ = [
    "Fatal",
    "InvalidArgument",
    "KeyNotFound",
    "RegistryConnectionError",
    "RemoteRegError",
    "SessionClosed",
    "ValueNotFound",
    "WriteError",
]
