"""
Result unmarshalling component.

Maps the body of a successful HTTP response onto the statically declared
return type of the called method. Error statuses never reach this component;
the call dispatcher turns them into RemoteInvocationFailedError first.
"""

from __future__ import annotations

import inspect
import json
from typing import Any, get_origin

import httpx
import pydantic

from ..exceptions import ResultUnmarshallingError
from ..logger import get_logger
from ..utils import pydantic_parse, pydantic_parse_as

logger = get_logger("result_unmarshaller")


def is_parameterized(return_type: Any) -> bool:
    """True for generic aliases such as ``list[User]`` or ``Optional[User]``."""
    return get_origin(return_type) is not None


class ResultUnmarshaller:
    """
    Converts a response body into the declared return type.

    Two strategies are used:

    - a raw type (``User``, ``int``, ``str``) is validated directly;
    - a parameterized type (``list[User]``, ``dict[str, Item]``,
      ``User | None``) is validated against the full generic type, so the
      element types are preserved instead of being left as plain dicts.

    Methods annotated ``-> None`` discard the body. Methods without a return
    annotation, or annotated ``Any``, get the decoded JSON as is.
    """

    def unmarshal(self, response: httpx.Response, return_type: Any) -> Any:
        """
        Unmarshal a successful response.

        Args:
            response: The HTTP response, status already checked.
            return_type: The method's declared return annotation.

        Returns:
            The typed result, or None for an empty body.

        Raises:
            ResultUnmarshallingError: If the body is not JSON or does not
                validate against ``return_type``.
        """
        if return_type is None or return_type is type(None):
            return None
        url = _response_url(response)
        if not response.content:
            return None
        if return_type is str and not _is_json(response):
            return response.text

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ResultUnmarshallingError(
                f"Response of {url} is not valid JSON", url
            ) from e

        if return_type is inspect.Signature.empty or return_type is Any:
            return data
        if is_parameterized(return_type):
            return self._unmarshal_parameterized(data, return_type, url)
        return self._unmarshal_raw(data, return_type, url)

    def _unmarshal_raw(self, data: Any, return_type: Any, url: str) -> Any:
        if inspect.isclass(return_type) and issubclass(return_type, pydantic.BaseModel):
            try:
                return pydantic_parse(return_type, data)
            except ValueError as e:
                raise ResultUnmarshallingError(
                    f"Cannot convert response of {url} to {return_type.__name__}: {e}", url
                ) from e
        if return_type in (dict, list) and isinstance(data, return_type):
            return data
        return self._validate(data, return_type, url)

    def _unmarshal_parameterized(self, data: Any, return_type: Any, url: str) -> Any:
        logger.debug(f"Unmarshalling {url} with generic signature {return_type!r}")
        return self._validate(data, return_type, url)

    @staticmethod
    def _validate(data: Any, return_type: Any, url: str) -> Any:
        try:
            return pydantic_parse_as(return_type, data)
        except (TypeError, ValueError) as e:
            raise ResultUnmarshallingError(
                f"Cannot convert response of {url} to {return_type!r}: {e}", url
            ) from e


def _is_json(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "")
    return "json" in content_type.lower()


def _response_url(response: httpx.Response) -> str:
    try:
        return str(response.request.url)
    except RuntimeError:
        # responses built by hand have no request attached
        return "<unknown>"
