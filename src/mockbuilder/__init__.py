"""mockbuilder: dynamic response templates for mock HTTP endpoints."""

from mockbuilder.models import RequestContext
from mockbuilder.routing import extract_path_params, path_matches
from mockbuilder.templating import resolve
from mockbuilder.variables import AVAILABLE_VARIABLES, register_variable

__all__ = [
    "AVAILABLE_VARIABLES",
    "RequestContext",
    "extract_path_params",
    "path_matches",
    "register_variable",
    "resolve",
]
