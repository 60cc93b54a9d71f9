"""Huly Client - async access to a Huly workspace.

Modules:
- client: REST client over httpx
- errors: domain error family
- schemas: pydantic parameter models for every operation
- operations: one module per area (issues, projects, documents, ...)
"""

__version__ = "1.0.0"

from .client import HulyClient
from .errors import HulyAuthError, HulyConnectionError, HulyError, NotFoundError

__all__ = [
    "HulyClient",
    "HulyError",
    "HulyConnectionError",
    "HulyAuthError",
    "NotFoundError",
]
