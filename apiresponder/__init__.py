"""
apiresponder - JSON and XML API controllers for ASGI.

This module exports the API, Request and Response classes, the base
Controller and the response providers it negotiates between.
"""

from .api import API
from .controller import Controller
from .exceptions import ForbiddenError, ResponseSent
from .models import Request, Response
from .providers import (
    FormatMode,
    JSONResponseProvider,
    ResponseProvider,
    XMLResponseProvider,
)

__all__ = [
    "API",
    "Controller",
    "ForbiddenError",
    "FormatMode",
    "JSONResponseProvider",
    "Request",
    "Response",
    "ResponseProvider",
    "ResponseSent",
    "XMLResponseProvider",
]
