"""Runtime resolution of ``{{$variable}}`` placeholders in response templates.

A template is any JSON-like value. Mappings and sequences are walked
recursively; string leaves have their placeholders substituted. When a
placeholder is the whole string the resolver's native value is returned
(an int for ``{{$randomInt}}``, a bool for ``{{$randomBoolean}}``, ...);
placeholders embedded in longer text are stringified in place.
"""

from __future__ import annotations

import json
import logging
import random
import re
from typing import TYPE_CHECKING, Any

from mockbuilder.config import TemplateSettings
from mockbuilder.models import RequestContext
from mockbuilder.variables import VariableCall, lookup_variable

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\{\{\$([^}]+)\}\}")

_UNRESOLVED = object()


def resolve(
    template: Any,
    request: RequestContext | None = None,
    path_params: Mapping[str, str] | None = None,
    *,
    rng: random.Random | None = None,
    settings: TemplateSettings | None = None,
) -> Any:
    """Resolve every placeholder in a JSON-like template.

    The input is never mutated; mappings and sequences are rebuilt with
    the same keys, order and length.

    Args:
        template: A string, number, bool, None, list/tuple or dict.
        request: The inbound request context. Defaults to an empty one.
        path_params: Parameters extracted from the request path.
        rng: Random source. If None, one is created from ``settings.seed``.
        settings: Variable defaults. If None, the built-in defaults apply.

    Returns:
        The resolved value, shaped like ``template``.
    """
    if settings is None:
        settings = TemplateSettings()
    call = VariableCall(
        rng=rng if rng is not None else random.Random(settings.seed),
        request=request if request is not None else RequestContext(),
        path_params=dict(path_params or {}),
        settings=settings,
    )
    return _resolve_value(template, call)


def resolve_string(text: str, call: VariableCall) -> Any:
    """Substitute the placeholders in a single string.

    Args:
        text: The template string.
        call: Shared resolution state (request, path params, rng, settings).

    Returns:
        The native value when ``text`` is exactly one resolvable token,
        otherwise the string with every resolvable token replaced.
    """
    if "{{$" not in text:
        return text

    match = TOKEN_PATTERN.fullmatch(text)
    if match is not None:
        value = _evaluate(match, call)
        return text if value is _UNRESOLVED else value

    def _replace(m: re.Match[str]) -> str:
        value = _evaluate(m, call)
        return m.group(0) if value is _UNRESOLVED else stringify(value)

    return TOKEN_PATTERN.sub(_replace, text)


def stringify(value: Any) -> str:
    """Render a resolved value for embedding inside a larger string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def _resolve_value(value: Any, call: VariableCall) -> Any:
    if isinstance(value, str):
        return resolve_string(value, call)
    if isinstance(value, dict):
        return {key: _resolve_value(item, call) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_resolve_value(item, call) for item in value]
    return value


def _evaluate(match: re.Match[str], call: VariableCall) -> Any:
    """Resolve one token, or return _UNRESOLVED to keep its literal text."""
    parts = match.group(1).split()
    if not parts:
        return _UNRESOLVED
    name, args = parts[0], parts[1:]

    found = lookup_variable(name)
    if found is None:
        logger.debug("Unknown template variable '%s' left as-is", name)
        return _UNRESOLVED

    variable, key = found
    if variable.namespace and not key:
        # Space-separated form: {{$request.query userId}}
        if not args:
            return _UNRESOLVED
        key, args = args[0], args[1:]

    call.key = key
    call.args = args
    try:
        return variable.func(call)
    except (ValueError, TypeError, KeyError, AttributeError, OverflowError) as exc:
        logger.warning("Failed to resolve template variable '%s': %s", match.group(0), exc)
        return _UNRESOLVED
