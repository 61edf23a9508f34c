"""Tests for runtime template variable resolution."""

from __future__ import annotations

import random
import re
import time
from datetime import datetime

from mockbuilder.config import TemplateSettings
from mockbuilder.models import RequestContext
from mockbuilder.templating import resolve

UUID_V4 = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


# ---------------------------------------------------------------------------
# Built-in variables
# ---------------------------------------------------------------------------


def test_timestamp_is_current_milliseconds() -> None:
    """{{$timestamp}} should be the current Unix time in milliseconds."""
    before = int(time.time() * 1000)
    result = resolve({"ts": "{{$timestamp}}"})
    after = int(time.time() * 1000)
    assert isinstance(result["ts"], int)
    assert before - 1 <= result["ts"] <= after + 1


def test_iso_date_format() -> None:
    """{{$isoDate}} should be a parseable ISO 8601 UTC date-time."""
    result = resolve({"date": "{{$isoDate}}"})
    assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", result["date"])
    datetime.fromisoformat(result["date"].replace("Z", "+00:00"))


def test_uuid_is_v4() -> None:
    """{{$uuid}} should match the canonical lowercase UUID v4 form."""
    for _ in range(50):
        assert UUID_V4.match(resolve("{{$uuid}}"))


def test_uuid_differs_between_calls() -> None:
    """Two resolutions of {{$uuid}} should produce different values."""
    assert resolve("{{$uuid}}") != resolve("{{$uuid}}")


def test_random_int_default_range() -> None:
    """{{$randomInt}} should be an integer between 0 and 1000."""
    for _ in range(100):
        value = resolve("{{$randomInt}}")
        assert isinstance(value, int)
        assert 0 <= value <= 1000


def test_random_int_with_bounds() -> None:
    """{{$randomInt 10 20}} should stay inside the inclusive range."""
    seen = {resolve("{{$randomInt 10 20}}") for _ in range(300)}
    assert seen <= set(range(10, 21))
    assert 10 in seen
    assert 20 in seen


def test_random_int_reversed_bounds_are_swapped() -> None:
    for _ in range(50):
        assert 5 <= resolve("{{$randomInt 9 5}}") <= 9


def test_random_int_malformed_args_fall_back() -> None:
    """Non-integer arguments should use the default range."""
    for _ in range(50):
        value = resolve("{{$randomInt abc xyz}}")
        assert 0 <= value <= 1000


def test_random_float_default_range() -> None:
    """{{$randomFloat}} should be a float in [0, 1)."""
    for _ in range(100):
        value = resolve("{{$randomFloat}}")
        assert isinstance(value, float)
        assert 0.0 <= value < 1.0


def test_random_float_with_range_and_precision() -> None:
    for _ in range(100):
        value = resolve("{{$randomFloat 10 20 1}}")
        assert 10.0 <= value <= 20.0
        assert round(value, 1) == value


def test_random_string_length_and_charset() -> None:
    """{{$randomString 10}} should be 10 alphanumeric characters."""
    value = resolve("{{$randomString 10}}")
    assert len(value) == 10
    assert re.match(r"^[a-zA-Z0-9]+$", value)


def test_random_string_default_length() -> None:
    assert len(resolve("{{$randomString}}")) == 10
    assert len(resolve("{{$randomString oops}}")) == 10
    assert len(resolve("{{$randomString -3}}")) == 10


def test_random_email_format() -> None:
    """{{$randomEmail}} should look like first.last@example.com."""
    for _ in range(50):
        assert re.match(r"^[a-z]+\.[a-z]+@example\.com$", resolve("{{$randomEmail}}"))


def test_random_email_uses_configured_domain() -> None:
    settings = TemplateSettings(email_domain="mock.dev")
    assert resolve("{{$randomEmail}}", settings=settings).endswith("@mock.dev")


def test_random_boolean_is_native_bool() -> None:
    """{{$randomBoolean}} should resolve to a real boolean, not a string."""
    values = {resolve("{{$randomBoolean}}") for _ in range(100)}
    assert values == {True, False}


def test_random_name_is_two_words() -> None:
    name = resolve("{{$randomName}}")
    assert name
    assert len(name.split(" ")) == 2


# ---------------------------------------------------------------------------
# Request variables
# ---------------------------------------------------------------------------


def test_request_query() -> None:
    request = RequestContext(query={"userId": "123"})
    assert resolve({"id": "{{$request.query.userId}}"}, request, {}) == {"id": "123"}


def test_request_query_missing_is_empty() -> None:
    assert resolve("{{$request.query.userId}}", RequestContext(query={}), {}) == ""


def test_request_header_is_case_insensitive() -> None:
    request = RequestContext(headers={"Authorization": "Bearer token123"})
    assert resolve("{{$request.header.authorization}}", request) == "Bearer token123"
    assert resolve("{{$request.header.AUTHORIZATION}}", request) == "Bearer token123"
    assert resolve("{{$request.header.x-missing}}", request) == ""


def test_request_body_field() -> None:
    request = RequestContext(body={"name": "John"})
    assert resolve("{{$request.body.name}}", request) == "John"


def test_request_body_nested_field() -> None:
    request = RequestContext(body={"user": {"address": {"city": "Seoul"}}})
    assert resolve({"city": "{{$request.body.user.address.city}}"}, request) == {"city": "Seoul"}


def test_request_body_missing_segment_is_empty() -> None:
    request = RequestContext(body={"user": {"name": "Kim"}})
    assert resolve("{{$request.body.user.address.city}}", request) == ""
    assert resolve("{{$request.body.user.name.first}}", request) == ""


def test_request_body_not_an_object_is_empty() -> None:
    assert resolve("{{$request.body.name}}", RequestContext(body="plain text")) == ""
    assert resolve("{{$request.body.name}}", RequestContext(body=None)) == ""
    assert resolve("{{$request.body.name}}", RequestContext(body=[1, 2])) == ""


def test_request_body_object_value_whole_and_embedded() -> None:
    """Objects stay native as whole values and render as JSON when embedded."""
    request = RequestContext(body={"user": {"id": 7}})
    assert resolve("{{$request.body.user}}", request) == {"id": 7}
    assert resolve("user={{$request.body.user}}", request) == 'user={"id":7}'


def test_request_path_param() -> None:
    assert resolve("{{$request.path.id}}", None, {"id": "456"}) == "456"
    assert resolve("{{$request.path.other}}", None, {"id": "456"}) == ""


def test_space_separated_request_form() -> None:
    request = RequestContext(query={"userId": "42"}, body={"user": {"name": "Lee"}})
    assert resolve("{{$request.query userId}}", request) == "42"
    assert resolve("{{$request.body user.name}}", request) == "Lee"


def test_request_namespace_without_key_is_left_as_is() -> None:
    assert resolve("{{$request.query}}") == "{{$request.query}}"


# ---------------------------------------------------------------------------
# Structure and embedding
# ---------------------------------------------------------------------------


def test_nested_objects() -> None:
    result = resolve({"user": {"id": "{{$uuid}}", "name": "{{$randomName}}"}})
    assert UUID_V4.match(result["user"]["id"])
    assert result["user"]["name"]


def test_arrays_preserve_length_and_order() -> None:
    template = {"items": [{"id": "{{$uuid}}"}, "fixed", 3, {"id": "{{$uuid}}"}]}
    result = resolve(template)
    assert len(result["items"]) == 4
    assert result["items"][1:3] == ["fixed", 3]
    assert result["items"][0]["id"] != result["items"][3]["id"]


def test_template_without_placeholders_is_unchanged() -> None:
    template = {
        "status": "ok",
        "count": 3,
        "ratio": 0.5,
        "active": True,
        "missing": None,
        "tags": ["a", {"deep": ["b", "{{ not a token }}"]}],
        "price": "$10",
    }
    assert resolve(template) == template


def test_input_is_not_mutated() -> None:
    template = {"items": ["{{$uuid}}"], "id": "{{$uuid}}"}
    resolve(template)
    assert template == {"items": ["{{$uuid}}"], "id": "{{$uuid}}"}


def test_key_order_is_preserved() -> None:
    template = {"z": "{{$uuid}}", "a": 1, "m": "{{$randomInt}}"}
    assert list(resolve(template)) == ["z", "a", "m"]


def test_embedded_placeholders_are_stringified() -> None:
    request = RequestContext(query={"page": "2"})
    result = resolve("id-{{$uuid}}-page-{{$request.query.page}}", request)
    assert result.startswith("id-")
    assert result.endswith("-page-2")
    assert UUID_V4.match(result[3:39])


def test_embedded_boolean_renders_lowercase() -> None:
    assert resolve("flag={{$randomBoolean}}") in ("flag=true", "flag=false")


def test_embedded_number_renders_as_digits() -> None:
    result = resolve("n={{$randomInt 5 5}}")
    assert result == "n=5"


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


def test_unknown_variable_preserved() -> None:
    """Unknown variables should be returned untouched."""
    assert resolve({"value": "{{$unknownVariable}}"}) == {"value": "{{$unknownVariable}}"}


def test_unknown_variable_kept_next_to_known_one() -> None:
    result = resolve("{{$unknownVariable}}/{{$randomInt 1 1}}")
    assert result == "{{$unknownVariable}}/1"


def test_failing_resolver_keeps_token(caplog) -> None:
    from mockbuilder.variables import _REGISTRY, register_variable

    def _boom(call: object) -> str:
        raise ValueError("broken")

    register_variable("boom", _boom)
    try:
        assert resolve("{{$boom}}") == "{{$boom}}"
        assert "broken" in caplog.text
    finally:
        del _REGISTRY["boom"]


# ---------------------------------------------------------------------------
# Reproducibility
# ---------------------------------------------------------------------------


def test_same_seed_same_output() -> None:
    template = {"id": "{{$uuid}}", "n": "{{$randomInt}}", "s": "{{$randomString 12}}"}
    first = resolve(template, rng=random.Random(7))
    second = resolve(template, rng=random.Random(7))
    assert first == second


def test_settings_seed_is_used() -> None:
    settings = TemplateSettings(seed=1234)
    assert resolve("{{$uuid}}", settings=settings) == resolve("{{$uuid}}", settings=settings)


def test_random_string_over_max_length_falls_back() -> None:
    """Oversized lengths should use the default instead of allocating huge strings."""
    result = resolve({"s": "{{$randomString 100000000000}}"})
    assert len(result["s"]) == 10
    settings = TemplateSettings(random_string_max_length=5, random_string_length=3)
    assert len(resolve("{{$randomString 6}}", settings=settings)) == 3
    assert len(resolve("{{$randomString 5}}", settings=settings)) == 5


def test_random_float_overflowing_range_falls_back() -> None:
    """A range whose width overflows should use [0, 1] rather than produce inf."""
    for _ in range(50):
        value = resolve("{{$randomFloat -1e308 1e308}}")
        assert 0.0 <= value <= 1.0
