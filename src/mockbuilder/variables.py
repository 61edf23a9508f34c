"""Template variable table and random data generators.

Every ``{{$name ...}}`` token is dispatched through a lookup table that maps
a variable name to a resolver function. Request-derived variables are
registered as namespaces (``request.query``, ``request.body``, ...) and
receive the remainder of the dotted name as their key.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from mockbuilder.config import TemplateSettings
from mockbuilder.models import RequestContext, TemplateVariable

if TYPE_CHECKING:
    import random

ALPHANUMERIC = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"

FIRST_NAMES = [
    "James",
    "John",
    "Robert",
    "Michael",
    "William",
    "David",
    "Richard",
    "Joseph",
    "Thomas",
    "Charles",
    "Mary",
    "Patricia",
    "Jennifer",
    "Linda",
    "Elizabeth",
    "Barbara",
    "Susan",
    "Jessica",
    "Sarah",
    "Karen",
]

LAST_NAMES = [
    "Smith",
    "Johnson",
    "Williams",
    "Brown",
    "Jones",
    "Garcia",
    "Miller",
    "Davis",
    "Rodriguez",
    "Martinez",
    "Hernandez",
    "Lopez",
    "Gonzalez",
    "Wilson",
    "Anderson",
    "Thomas",
    "Taylor",
    "Moore",
    "Jackson",
    "Martin",
]


@dataclass
class VariableCall:
    """Everything a resolver function may read for one token."""

    rng: random.Random
    request: RequestContext = field(default_factory=RequestContext)
    path_params: dict[str, str] = field(default_factory=dict)
    settings: TemplateSettings = field(default_factory=TemplateSettings)
    key: str = ""
    args: list[str] = field(default_factory=list)


Resolver = Callable[[VariableCall], Any]


@dataclass(frozen=True)
class Variable:
    """A registered resolver. Namespace variables require a key."""

    name: str
    func: Resolver
    namespace: bool = False


_REGISTRY: dict[str, Variable] = {}


def register_variable(name: str, func: Resolver, *, namespace: bool = False) -> None:
    """Add or replace a template variable.

    Args:
        name: Variable name without the leading ``$`` (e.g. ``"uuid"``).
        func: Callable receiving a VariableCall and returning the value.
        namespace: If True, ``name.<key>`` tokens are routed here with
            ``<key>`` exposed as ``VariableCall.key``.
    """
    _REGISTRY[name] = Variable(name=name, func=func, namespace=namespace)


def lookup_variable(name: str) -> tuple[Variable, str] | None:
    """Find the variable for a token name.

    Args:
        name: The token name, e.g. ``"uuid"`` or ``"request.body.user.id"``.

    Returns:
        The variable and the key following its namespace (empty for exact
        matches), or None if the name is unknown.
    """
    variable = _REGISTRY.get(name)
    if variable is not None:
        return variable, ""

    for registered in _REGISTRY.values():
        prefix = f"{registered.name}."
        if registered.namespace and name.startswith(prefix):
            return registered, name[len(prefix) :]

    return None


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


def generate_uuid(rng: random.Random) -> str:
    """Return a lowercase canonical version-4 UUID drawn from ``rng``."""
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def generate_random_string(rng: random.Random, length: int) -> str:
    return "".join(rng.choices(ALPHANUMERIC, k=length))


def generate_random_name(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"


def generate_random_email(rng: random.Random, domain: str = "example.com") -> str:
    first = rng.choice(FIRST_NAMES).lower()
    last = rng.choice(LAST_NAMES).lower()
    return f"{first}.{last}@{domain}"


def get_nested_value(data: Any, path: str) -> Any:
    """Walk ``data`` through a dot-separated path of mapping keys.

    Returns None as soon as a segment is missing or the current value is
    not a mapping.
    """
    current = data
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return None
        current = current[segment]
    return current


def _int_arg(args: list[str], index: int, default: int) -> int:
    try:
        return int(args[index])
    except (IndexError, ValueError):
        return default


def _float_arg(args: list[str], index: int, default: float) -> float:
    try:
        value = float(args[index])
    except (IndexError, ValueError):
        return default
    return value if math.isfinite(value) else default


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------


def _timestamp(call: VariableCall) -> int:
    return int(datetime.now(UTC).timestamp() * 1000)


def _iso_date(call: VariableCall) -> str:
    now = datetime.now(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _uuid(call: VariableCall) -> str:
    return generate_uuid(call.rng)


def _random_int(call: VariableCall) -> int:
    low = _int_arg(call.args, 0, call.settings.random_int_min)
    high = _int_arg(call.args, 1, call.settings.random_int_max)
    if low > high:
        low, high = high, low
    return call.rng.randint(low, high)


def _random_float(call: VariableCall) -> float:
    if not call.args:
        return call.rng.random()

    low = _float_arg(call.args, 0, 0.0)
    high = _float_arg(call.args, 1, 1.0)
    precision = _int_arg(call.args, 2, call.settings.random_float_precision)
    if low > high:
        low, high = high, low
    if not math.isfinite(high - low):
        low, high = 0.0, 1.0
    if precision < 0:
        precision = call.settings.random_float_precision
    return round(call.rng.uniform(low, high), precision)


def _random_string(call: VariableCall) -> str:
    length = _int_arg(call.args, 0, call.settings.random_string_length)
    if length < 0 or length > call.settings.random_string_max_length:
        length = call.settings.random_string_length
    return generate_random_string(call.rng, length)


def _random_email(call: VariableCall) -> str:
    return generate_random_email(call.rng, call.settings.email_domain)


def _random_name(call: VariableCall) -> str:
    return generate_random_name(call.rng)


def _random_boolean(call: VariableCall) -> bool:
    return call.rng.random() < 0.5


def _request_query(call: VariableCall) -> Any:
    value = call.request.query.get(call.key)
    return "" if value is None else value


def _request_header(call: VariableCall) -> str:
    return call.request.header(call.key) or ""


def _request_body(call: VariableCall) -> Any:
    value = get_nested_value(call.request.body, call.key)
    return "" if value is None else value


def _request_path(call: VariableCall) -> str:
    return call.path_params.get(call.key, "")


register_variable("timestamp", _timestamp)
register_variable("isoDate", _iso_date)
register_variable("uuid", _uuid)
register_variable("randomInt", _random_int)
register_variable("randomFloat", _random_float)
register_variable("randomString", _random_string)
register_variable("randomEmail", _random_email)
register_variable("randomName", _random_name)
register_variable("randomBoolean", _random_boolean)
register_variable("request.query", _request_query, namespace=True)
register_variable("request.header", _request_header, namespace=True)
register_variable("request.body", _request_body, namespace=True)
register_variable("request.path", _request_path, namespace=True)


AVAILABLE_VARIABLES: list[TemplateVariable] = [
    TemplateVariable(
        name="{{$timestamp}}",
        description="Unix timestamp in milliseconds",
        example="1705420800000",
    ),
    TemplateVariable(
        name="{{$isoDate}}",
        description="ISO 8601 date-time (UTC)",
        example="2024-01-16T12:00:00.000Z",
    ),
    TemplateVariable(
        name="{{$uuid}}",
        description="UUID v4",
        example="a1b2c3d4-e5f6-4890-abcd-ef1234567890",
    ),
    TemplateVariable(
        name="{{$randomInt}}",
        description="Random integer (0-1000)",
        example="42",
    ),
    TemplateVariable(
        name="{{$randomInt min max}}",
        description="Random integer in an inclusive range",
        example="{{$randomInt 1 100}} -> 73",
    ),
    TemplateVariable(
        name="{{$randomFloat}}",
        description="Random float between 0 and 1",
        example="0.42",
    ),
    TemplateVariable(
        name="{{$randomFloat min max precision}}",
        description="Random float in a range, rounded to precision digits",
        example="{{$randomFloat 0 100 2}} -> 42.73",
    ),
    TemplateVariable(
        name="{{$randomString n}}",
        description="Random alphanumeric string of length n",
        example="{{$randomString 8}} -> xK9mN2pL",
    ),
    TemplateVariable(
        name="{{$randomEmail}}",
        description="Random email address",
        example="john.smith@example.com",
    ),
    TemplateVariable(
        name="{{$randomName}}",
        description="Random full name",
        example="John Smith",
    ),
    TemplateVariable(
        name="{{$randomBoolean}}",
        description="Random true/false",
        example="true",
    ),
    TemplateVariable(
        name="{{$request.query.xxx}}",
        description="Query parameter value",
        example="{{$request.query.userId}}",
    ),
    TemplateVariable(
        name="{{$request.header.xxx}}",
        description="Request header value (case-insensitive)",
        example="{{$request.header.Authorization}}",
    ),
    TemplateVariable(
        name="{{$request.body.xxx}}",
        description="Request body field (nested paths supported)",
        example="{{$request.body.user.name}}",
    ),
    TemplateVariable(
        name="{{$request.path.xxx}}",
        description="Path parameter value",
        example="{{$request.path.id}}",
    ),
]
