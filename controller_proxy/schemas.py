"""
Data model for remote dispatch.

Endpoint descriptors are computed once per interface when its dispatch proxy
is built and are never mutated afterwards, so they can be shared freely
between threads.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class HttpMethod(str, Enum):
    """
    HTTP verbs a remote method can be mapped to.

    The enum is a ``str`` subclass so members compare equal to their names
    and can be passed straight to httpx.

    Examples
    --------
    >>> HttpMethod("post") is HttpMethod.POST
    True
    >>> HttpMethod.GET == "GET"
    True
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def _missing_(cls, value: object) -> Optional[HttpMethod]:
        if isinstance(value, str):
            return cls.__members__.get(value.upper())
        return None


@dataclass(frozen=True)
class DeclaredParameter:
    """
    A named request parameter declared on a method.

    Parameters
    ----------
    name : str
        Query-string / body key the argument is sent under.
    required : bool
        Whether a None argument fails the call instead of being omitted.
    position : int
        Index of the argument in the method's positional arguments
        (``self`` excluded).
    """

    name: str
    required: bool = True
    position: int = 0


@dataclass(frozen=True)
class MethodKey:
    """
    Identity of an interface method in a descriptor table.

    Keyed by declaring type, name and signature so that an overriding
    definition in a derived interface never shadows the descriptor of
    the base definition.
    """

    declaring_type: str
    name: str
    signature: str

    @classmethod
    def of(cls, function: Callable[..., Any]) -> MethodKey:
        qualname = function.__qualname__
        owner, _, name = qualname.rpartition(".")
        try:
            signature = str(inspect.signature(function))
        except (TypeError, ValueError):
            signature = "(...)"
        return cls(
            declaring_type=f"{function.__module__}.{owner}" if owner else function.__module__,
            name=name or function.__name__,
            signature=signature,
        )

    def __str__(self) -> str:
        return f"{self.declaring_type}:{self.name}{self.signature}"


@dataclass(frozen=True)
class EndpointDescriptor:
    """
    Precomputed metadata describing how to reach one method remotely.

    Attributes
    ----------
    key : MethodKey
        The key this descriptor is stored under.
    service_base_url : str
        Base URL of the remote service, e.g. ``http://users:8080``.
    path_template : str
        Interface-level prefix concatenated with the method-level path.
    http_method : HttpMethod
        HTTP verb, GET when nothing was declared.
    declared_parameters : tuple[DeclaredParameter, ...]
        Declared request parameters in declaration order. Empty means the
        parameters are derived from the structure of the arguments.
    return_type : Any
        The method's declared return annotation, ``inspect.Signature.empty``
        when it has none.
    """

    key: MethodKey
    service_base_url: str
    path_template: str
    http_method: HttpMethod = HttpMethod.GET
    declared_parameters: tuple[DeclaredParameter, ...] = ()
    return_type: Any = inspect.Signature.empty

    @property
    def url(self) -> str:
        return self.service_base_url + self.path_template


@dataclass(frozen=True)
class MarshalledParameters:
    """
    Output of the parameter marshaller.

    Exactly one of the two shapes is meaningful: ``query_params`` for GET
    requests, ``body`` for every other verb.
    """

    query_params: list[tuple[str, str]] = field(default_factory=list)
    body: Any = None
    has_body: bool = False


@dataclass(frozen=True)
class RemoteRequest:
    """A fully marshalled HTTP call handed to the transport."""

    method: HttpMethod
    url: str
    headers: list[tuple[str, str]] = field(default_factory=list)
    query_params: list[tuple[str, str]] = field(default_factory=list)
    body: Any = None
    has_body: bool = False
