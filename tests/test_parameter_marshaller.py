"""
Tests for ParameterMarshaller.

This test module covers:
- Positional mapping of declared parameters
- Required and optional parameters receiving None
- Flattening structured arguments (pydantic, dataclass, mapping, __flatten_fields__)
- Declared parameters as a whitelist over flattened arguments
- Query value encoding for GET
- Body shapes for non-GET verbs
- Conversion of argument values into JSON-compatible data
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import pytest
from pydantic import BaseModel

from controller_proxy._internal.parameter_marshaller import (
    ParameterMarshaller,
    readable_properties,
    to_query_value,
)
from controller_proxy.exceptions import MarshallingError, MissingRequiredParameterError
from controller_proxy.schemas import (
    DeclaredParameter,
    EndpointDescriptor,
    HttpMethod,
    MethodKey,
)
from controller_proxy.utils import pydantic_to_jsonable

# ============================================================================
# Test Argument Types
# ============================================================================


class User(BaseModel):
    name: str
    age: Optional[int] = None


class Order(BaseModel):
    user: User
    total: float


@dataclass
class SearchCriteria:
    name: Optional[str] = None
    min_age: Optional[int] = None
    since: Optional[datetime.date] = None


class LegacyFilter:
    __flatten_fields__ = ("status", "limit")

    def __init__(self, status: str, limit: Optional[int] = None) -> None:
        self.status = status
        self.limit = limit
        self.internal = "not sent"


class Opaque:
    pass


class Color(str, Enum):
    RED = "red"


# ============================================================================
# Fixtures / Helpers
# ============================================================================


def make_descriptor(
    method: HttpMethod = HttpMethod.GET, *declared: DeclaredParameter
) -> EndpointDescriptor:
    return EndpointDescriptor(
        key=MethodKey("tests.UserController", "call", "(self)"),
        service_base_url="http://users.test",
        path_template="/api/users",
        http_method=method,
        declared_parameters=tuple(declared),
    )


@pytest.fixture
def marshaller() -> ParameterMarshaller:
    return ParameterMarshaller()


def query(marshaller: ParameterMarshaller, descriptor: EndpointDescriptor, *args: Any):
    return marshaller.marshal(descriptor, args).query_params


def body(marshaller: ParameterMarshaller, descriptor: EndpointDescriptor, *args: Any):
    result = marshaller.marshal(descriptor, args)
    assert result.has_body
    return result.body


# ============================================================================
# Positional Mapping Tests
# ============================================================================


class TestPositionalMapping:
    """Test mapping arguments onto declared parameters by position."""

    def test_single_declared_parameter(self, marshaller: ParameterMarshaller) -> None:
        descriptor = make_descriptor(HttpMethod.GET, DeclaredParameter("q", True, 0))

        assert query(marshaller, descriptor, "alice") == [("q", "alice")]

    def test_declared_order_is_kept(self, marshaller: ParameterMarshaller) -> None:
        descriptor = make_descriptor(
            HttpMethod.GET,
            DeclaredParameter("page", True, 0),
            DeclaredParameter("size", True, 1),
        )

        assert query(marshaller, descriptor, 2, 50) == [("page", "2"), ("size", "50")]

    def test_optional_none_is_omitted(self, marshaller: ParameterMarshaller) -> None:
        descriptor = make_descriptor(
            HttpMethod.GET,
            DeclaredParameter("page", True, 0),
            DeclaredParameter("size", False, 1),
        )

        assert query(marshaller, descriptor, 1, None) == [("page", "1")]

    def test_required_none_fails(self, marshaller: ParameterMarshaller) -> None:
        """
        Test a required parameter receiving None.

        Verifies that:
        - MissingRequiredParameterError is raised
        - The error names the parameter
        - It is a MarshallingError
        """
        descriptor = make_descriptor(HttpMethod.GET, DeclaredParameter("q", True, 0))

        with pytest.raises(MissingRequiredParameterError) as exc_info:
            marshaller.marshal(descriptor, (None,))

        assert exc_info.value.parameter_name == "q"
        assert isinstance(exc_info.value, MarshallingError)

    def test_matching_count_maps_positionally_even_for_structured_args(
        self, marshaller: ParameterMarshaller
    ) -> None:
        """
        Test the positional caveat.

        Verifies that:
        - When counts match, arguments are mapped by position without
          looking at their structure
        """
        descriptor = make_descriptor(HttpMethod.GET, DeclaredParameter("name", True, 0))

        assert query(marshaller, descriptor, User(name="bob")) == [
            ("name", '{"name":"bob","age":null}')
        ]


# ============================================================================
# Flattening Tests
# ============================================================================


class TestFlattening:
    """Test flattening structured arguments into name/value pairs."""

    def test_pydantic_model_skips_none(self) -> None:
        assert readable_properties(User(name="bob")) == {"name": "bob"}

    def test_dataclass(self) -> None:
        criteria = SearchCriteria(name="bob", since=datetime.date(2024, 1, 2))

        assert readable_properties(criteria) == {
            "name": "bob",
            "since": datetime.date(2024, 1, 2),
        }

    def test_mapping(self) -> None:
        assert readable_properties({"a": 1, "b": None}) == {"a": 1}

    def test_flatten_fields_attribute(self) -> None:
        assert readable_properties(LegacyFilter("open")) == {"status": "open"}

    def test_primitives_and_none_contribute_nothing(self) -> None:
        assert readable_properties(None) == {}
        assert readable_properties("text") == {}
        assert readable_properties(3) == {}

    def test_unsupported_type_fails(self) -> None:
        with pytest.raises(MarshallingError, match="Opaque"):
            readable_properties(Opaque())

    def test_missing_listed_field_fails(self) -> None:
        class Broken:
            __flatten_fields__ = ("missing",)

        with pytest.raises(MarshallingError, match="missing"):
            readable_properties(Broken())

    def test_no_declared_parameters_sends_all_properties(
        self, marshaller: ParameterMarshaller
    ) -> None:
        """
        Test one structured argument and no declared parameters.

        Verifies that:
        - The parameter names equal the argument's non-None property names
        """
        descriptor = make_descriptor(HttpMethod.GET)
        criteria = SearchCriteria(name="bob", min_age=18)

        params = query(marshaller, descriptor, criteria)

        assert dict(params).keys() == {"name", "min_age"}
        assert dict(params) == {"name": "bob", "min_age": "18"}

    def test_declared_parameters_act_as_whitelist(
        self, marshaller: ParameterMarshaller
    ) -> None:
        """
        Test a count mismatch with declared parameters.

        Verifies that:
        - Arguments are flattened together
        - Only declared names present in the flattened map are sent
        - Declaration order is used
        """
        descriptor = make_descriptor(
            HttpMethod.GET,
            DeclaredParameter("min_age", True, 0),
            DeclaredParameter("name", True, 1),
            DeclaredParameter("status", True, 2),
        )

        params = query(
            marshaller, descriptor, SearchCriteria(name="bob", min_age=21), User(name="eve")
        )

        # later arguments overwrite earlier ones
        assert params == [("min_age", "21"), ("name", "eve")]

    def test_empty_call(self, marshaller: ParameterMarshaller) -> None:
        assert query(marshaller, make_descriptor(HttpMethod.GET)) == []
        assert body(marshaller, make_descriptor(HttpMethod.POST)) == {}


# ============================================================================
# Query Encoding Tests
# ============================================================================


class TestQueryEncoding:
    """Test the textual form of query values."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("alice", "alice"),
            ("with space", "with space"),
            (5, "5"),
            (1.5, "1.5"),
            (True, "true"),
            ([1, 2], "[1,2]"),
            ({"a": 1}, '{"a":1}'),
            (datetime.date(2024, 1, 2), '"2024-01-02"'),
            (Color.RED, "red"),
        ],
    )
    def test_to_query_value(self, value: Any, expected: str) -> None:
        assert to_query_value(value) == expected

    def test_unencodable_value_fails(self) -> None:
        with pytest.raises(MarshallingError):
            to_query_value(Opaque())


# ============================================================================
# Body Tests
# ============================================================================


class TestBody:
    """Test request bodies for non-GET verbs."""

    @pytest.mark.parametrize("value", [42, 1.25, "alice", True])
    def test_single_primitive_is_the_body(
        self, marshaller: ParameterMarshaller, value: Any
    ) -> None:
        descriptor = make_descriptor(HttpMethod.POST)

        assert body(marshaller, descriptor, value) == value

    def test_single_primitive_with_declared_parameter_is_still_the_body(
        self, marshaller: ParameterMarshaller
    ) -> None:
        descriptor = make_descriptor(HttpMethod.PUT, DeclaredParameter("id", True, 0))

        assert body(marshaller, descriptor, 7) == 7

    def test_structured_argument_drops_none_properties(
        self, marshaller: ParameterMarshaller
    ) -> None:
        descriptor = make_descriptor(HttpMethod.POST)

        assert body(marshaller, descriptor, User(name="bob", age=None)) == {"name": "bob"}

    def test_nested_values_become_json_compatible(
        self, marshaller: ParameterMarshaller
    ) -> None:
        descriptor = make_descriptor(HttpMethod.POST)
        order = Order(user=User(name="bob", age=30), total=9.5)

        assert body(marshaller, descriptor, order) == {
            "user": {"name": "bob", "age": 30},
            "total": 9.5,
        }

    def test_declared_parameters_build_a_map(
        self, marshaller: ParameterMarshaller
    ) -> None:
        descriptor = make_descriptor(
            HttpMethod.PATCH,
            DeclaredParameter("name", True, 0),
            DeclaredParameter("age", False, 1),
        )

        assert body(marshaller, descriptor, "bob", None) == {"name": "bob"}

    def test_get_has_no_body(self, marshaller: ParameterMarshaller) -> None:
        result = marshaller.marshal(make_descriptor(HttpMethod.GET), ())

        assert result.has_body is False
        assert result.body is None


# ============================================================================
# JSON Conversion Tests
# ============================================================================


class TestJsonConversion:
    """Test conversion of argument values into JSON-compatible data."""

    def test_nested_values(self) -> None:
        """
        Test a mapping mixing models, dataclasses, enums and dates.

        Verifies that:
        - Every value is converted by its runtime type
        - None values are kept as null
        """
        value = {
            "user": User(name="bob"),
            "criteria": SearchCriteria(min_age=3),
            "color": Color.RED,
            "since": datetime.date(2024, 1, 2),
            "tags": ("a", "b"),
        }

        assert pydantic_to_jsonable(value) == {
            "user": {"name": "bob", "age": None},
            "criteria": {"name": None, "min_age": 3, "since": None},
            "color": "red",
            "since": "2024-01-02",
            "tags": ["a", "b"],
        }

    def test_unsupported_value_fails(self) -> None:
        with pytest.raises((TypeError, ValueError)):
            pydantic_to_jsonable({"x": Opaque()})
