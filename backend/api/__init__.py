"""API module."""

from .routes import router, get_transport
from .errors import register_error_handlers
from .schemas import (
    DesignOptionsModel,
    GenerateRequest,
    DesignRequest,
    BreakdownRequest,
    AnimateRequest,
    ReportRequest,
)

__all__ = [
    "router",
    "get_transport",
    "register_error_handlers",
    "DesignOptionsModel",
    "GenerateRequest",
    "DesignRequest",
    "BreakdownRequest",
    "AnimateRequest",
    "ReportRequest",
]
