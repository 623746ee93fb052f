from __future__ import annotations

import json
import re
from functools import lru_cache
from typing import TYPE_CHECKING, Any, TypeVar, get_type_hints

import pydantic
from packaging import version

from .logger import get_logger

if TYPE_CHECKING:
    from pydantic import BaseModel

T = TypeVar("T", bound="BaseModel")

logger = get_logger("utils")


def canonical_name(obj: Any) -> str:
    """Module-qualified name of a class or function, e.g. ``pkg.mod.UserController``."""
    return f"{obj.__module__}.{obj.__qualname__}"


class StringUtils:
    @staticmethod
    def convert_camelcase_to_underscore(name: str, lower: bool = True) -> str:
        s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
        res = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
        if lower:
            return res.lower()
        else:
            return res.upper()


# Helper methods for supporting Pydantic v1 and v2
def is_pydantic_pre_v2() -> bool:
    return version.parse(pydantic.VERSION) < version.parse("2.0.0")


def is_pydantic_model(value: Any) -> bool:
    return isinstance(value, pydantic.BaseModel)


def pydantic_field_names(model: pydantic.BaseModel) -> list[str]:
    if is_pydantic_pre_v2():
        return list(model.__fields__)
    return list(type(model).model_fields)


@lru_cache(maxsize=256)
def _type_adapter(target_type: Any) -> Any:
    return pydantic.TypeAdapter(target_type)


def pydantic_parse_as(target_type: Any, data: Any) -> Any:
    """
    Validate decoded JSON against an arbitrary type, generics included.

    Raises
    ------
    ValueError
        If ``data`` does not validate (pydantic's ValidationError).
    TypeError
        If pydantic cannot build a schema for ``target_type``.
    """
    logger.debug(f"Using pydantic to parse {target_type!r}: {data}")
    if is_pydantic_pre_v2():
        return pydantic.parse_obj_as(target_type, data)
    try:
        adapter = _type_adapter(target_type)
    except TypeError:
        # unhashable type hints can't be cached
        adapter = pydantic.TypeAdapter(target_type)
    return adapter.validate_python(data)


def pydantic_to_jsonable(value: Any) -> Any:
    """
    Convert models, dataclasses, enums, datetimes etc. into JSON-compatible data.

    Raises
    ------
    ValueError
        If a value of an unsupported type is met (pydantic's serialization error).
    TypeError
        Raised by the pydantic v1 encoder for the same case.
    """
    if is_pydantic_pre_v2():
        from pydantic.json import pydantic_encoder

        return json.loads(json.dumps(value, default=pydantic_encoder))
    # Any serializes by runtime type
    return _type_adapter(Any).dump_python(value, mode="json")


def pydantic_dumps(value: Any) -> str:
    return json.dumps(pydantic_to_jsonable(value), separators=(",", ":"))


def resolve_type_hints(function: Any) -> dict[str, Any]:
    """
    Resolve a function's annotations, ``Annotated`` extras included.

    Returns an empty dict (and logs a warning) when a forward reference
    cannot be resolved, so callers fall back to their defaults.
    """
    try:
        return get_type_hints(function, include_extras=True)
    except Exception as e:  # NameError, TypeError, AttributeError from eval
        logger.warning(
            f"Cannot resolve type hints of {canonical_name(function)}: "
            f"{type(e).__name__}: {e}"
        )
        return {}


def pydantic_parse(model: type[T], data: dict[str, Any], **kwargs: Any) -> T:
    logger.debug(f"Using pydantic to parse: {data}")
    if is_pydantic_pre_v2():
        parsed_data = model.parse_obj(data, **kwargs)
    else:
        parsed_data = model.model_validate(data, **kwargs)
    logger.debug(f"Pydantic parsed data: {parsed_data}")
    return parsed_data
