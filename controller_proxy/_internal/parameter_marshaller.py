"""
Parameter marshalling component.

Turns the arguments of one call into either query-string parameters (GET)
or a JSON request body (every other verb), following the parameter
declarations of the method's endpoint descriptor.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from ..exceptions import MarshallingError, MissingRequiredParameterError
from ..logger import get_logger
from ..schemas import EndpointDescriptor, HttpMethod, MarshalledParameters
from ..utils import (
    is_pydantic_model,
    pydantic_dumps,
    pydantic_field_names,
    pydantic_to_jsonable,
)

logger = get_logger("parameter_marshaller")

# Attribute an argument class can define to list the fields it is flattened into
FLATTEN_FIELDS_ATTRIBUTE = "__flatten_fields__"

PRIMITIVE_TYPES = (str, int, float, bool)


def is_primitive(value: Any) -> bool:
    """Scalars sent as-is: str, int, float, bool and enums built on them."""
    return isinstance(value, PRIMITIVE_TYPES)


def readable_properties(value: Any) -> dict[str, Any]:
    """
    Flatten one structured argument into its non-None fields.

    Supported shapes, checked in order: pydantic models (declared fields),
    dataclass instances (fields), mappings (string keys), and objects whose
    class lists its fields in ``__flatten_fields__``. None and primitive
    values contribute nothing.

    Raises
    ------
    MarshallingError
        If the argument has none of the supported shapes, or reading a
        listed field fails.
    """
    if value is None or is_primitive(value):
        return {}
    if is_pydantic_model(value):
        names = pydantic_field_names(value)
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        names = [f.name for f in dataclasses.fields(value)]
    elif isinstance(value, Mapping):
        return {str(k): v for k, v in value.items() if v is not None}
    elif isinstance(getattr(type(value), FLATTEN_FIELDS_ATTRIBUTE, None), Sequence):
        names = list(getattr(type(value), FLATTEN_FIELDS_ATTRIBUTE))
    else:
        raise MarshallingError(
            f"Cannot flatten argument of type {type(value).__name__}: use a pydantic "
            f"model, a dataclass, a mapping or declare {FLATTEN_FIELDS_ATTRIBUTE}"
        )

    properties: dict[str, Any] = {}
    for name in names:
        try:
            field_value = getattr(value, name)
        except AttributeError as e:
            raise MarshallingError(
                f"Cannot get property '{name}' of {type(value).__name__}"
            ) from e
        if field_value is not None:
            properties[name] = field_value
    return properties


def to_query_value(value: Any) -> str:
    """
    Textual form of a query-string value.

    Strings pass through unchanged, everything else is JSON-encoded so that
    structured values stay legible on the server side (``true``, ``[1,2]``,
    ``{"a":1}``).
    """
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return value
    try:
        return pydantic_dumps(value)
    except (TypeError, ValueError) as e:
        raise MarshallingError(f"Cannot serialize to JSON: {value!r}") from e


class ParameterMarshaller:
    """
    Converts call arguments into query parameters or a request body.

    Decision rule, in order:

    1. When the method declares N request parameters and exactly N arguments
       were given, arguments are mapped positionally onto the declared
       names. None is omitted, or fails the call for a required parameter.
       Note that this also happens when the count matches by coincidence and
       the arguments are not in declaration order.
    2. Otherwise every argument is flattened into one name/value map. Declared
       parameters, if any, act as a whitelist over that map; with none
       declared the whole map is sent.

    GET requests send the result as query parameters; other verbs send it as
    a JSON body, except that a single primitive argument is sent as the body
    itself.
    """

    def marshal(
        self, descriptor: EndpointDescriptor, args: Sequence[Any]
    ) -> MarshalledParameters:
        """
        Marshal the arguments of one call.

        Args:
            descriptor: The endpoint descriptor of the called method.
            args: Argument values in declaration order.

        Returns:
            Query parameters for GET, a body otherwise.

        Raises:
            MissingRequiredParameterError: If a required parameter is None.
            MarshallingError: If an argument cannot be flattened or encoded.
        """
        if descriptor.http_method == HttpMethod.GET:
            values = self.parameters_map(descriptor, args)
            logger.debug(f"Query parameters of {descriptor.key}: {list(values)}")
            return MarshalledParameters(
                query_params=[(name, to_query_value(v)) for name, v in values.items()]
            )
        return MarshalledParameters(body=self.body(descriptor, args), has_body=True)

    def body(self, descriptor: EndpointDescriptor, args: Sequence[Any]) -> Any:
        if len(args) == 1 and is_primitive(args[0]):
            return pydantic_to_jsonable(args[0])
        values = self.parameters_map(descriptor, args)
        try:
            return pydantic_to_jsonable(values)
        except (TypeError, ValueError) as e:
            raise MarshallingError(
                f"Cannot serialize request body of {descriptor.key}"
            ) from e

    def parameters_map(
        self, descriptor: EndpointDescriptor, args: Sequence[Any]
    ) -> dict[str, Any]:
        declared = descriptor.declared_parameters
        if declared and len(declared) == len(args):
            values: dict[str, Any] = {}
            for parameter, value in zip(declared, args):
                if value is not None:
                    values[parameter.name] = value
                elif parameter.required:
                    raise MissingRequiredParameterError(parameter.name)
            return values

        flattened: dict[str, Any] = {}
        for arg in args:
            flattened.update(readable_properties(arg))
        if declared:
            return {p.name: flattened[p.name] for p in declared if p.name in flattened}
        return flattened
