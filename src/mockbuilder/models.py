"""Core data models for mockbuilder templates."""

from __future__ import annotations

import json
from contextlib import suppress
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from starlette.requests import Request


def _is_json_content_type(content_type: str) -> bool:
    """True for ``application/json`` and ``+json`` media types, any case."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


class RequestContext(BaseModel):
    """The parts of an inbound mock request that templates can read.

    Header names are lowercased on construction so that lookups through
    ``header()`` are case-insensitive regardless of how the HTTP layer
    spelled them.
    """

    query: dict[str, Any] = Field(default_factory=dict, description="Query parameters")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")
    body: Any = Field(default=None, description="Parsed request body (any JSON value)")

    @field_validator("headers", mode="before")
    @classmethod
    def _lowercase_header_names(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(k).lower(): v for k, v in value.items()}
        return value

    def header(self, name: str) -> str | None:
        """Return a header value by case-insensitive name, or None."""
        return self.headers.get(name.lower())

    @classmethod
    async def from_request(cls, request: Request) -> RequestContext:
        """Build a context from a Starlette/FastAPI request.

        The body is decoded as JSON when the content type says so, otherwise
        the raw text is kept. An empty body becomes None.

        Args:
            request: The incoming request.

        Returns:
            A RequestContext populated from the request.
        """
        body_bytes = await request.body()
        body_str = body_bytes.decode("utf-8", errors="replace") if body_bytes else None
        body: Any = body_str
        if body_str and _is_json_content_type(request.headers.get("content-type", "")):
            with suppress(json.JSONDecodeError):
                body = json.loads(body_str)

        return cls(
            query=dict(request.query_params),
            headers=dict(request.headers),
            body=body,
        )


class TemplateVariable(BaseModel):
    """Catalogue entry describing one supported placeholder."""

    name: str = Field(description="Token as written in a template, e.g. '{{$uuid}}'")
    description: str = Field(description="What the token resolves to")
    example: str = Field(default="", description="Example output or usage")
