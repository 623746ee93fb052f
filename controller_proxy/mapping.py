"""
Declarative endpoint metadata for controller interfaces.

An interface describes its remote contract with decorators on the class and
its methods, and with ``RequestParam`` markers inside ``typing.Annotated``
parameter hints:

```python
@request_mapping("/api")
class UserController(Protocol):
    @get_mapping("/users/search")
    def search(self, q: Annotated[str, RequestParam()]) -> list[User]: ...

    @post_mapping("/users")
    def create(self, user: User) -> User: ...
```

The decorators only record metadata; nothing is validated here. The
descriptor builder reads it once through ``DecoratorMetadataSource`` and
degrades malformed values to defaults.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Annotated, Any, Callable, TypeVar, get_args, get_origin

from .schemas import DeclaredParameter, HttpMethod
from .utils import resolve_type_hints

MAPPING_ATTRIBUTE = "__request_mapping__"

T = TypeVar("T")


@dataclass(frozen=True)
class RequestMapping:
    """
    Raw mapping metadata attached to an interface or a method.

    Parameters
    ----------
    paths : tuple[str, ...]
        Declared paths. Only the first one is used; declaring more than one
        is reported as a warning when descriptors are built.
    methods : tuple[HttpMethod | str, ...]
        Declared HTTP verbs, as given. Only the first one is used.
    """

    paths: tuple[Any, ...] = ()
    methods: tuple[Any, ...] = ()


@dataclass(frozen=True)
class RequestParam:
    """
    Marks a method parameter as a named request parameter.

    Parameters
    ----------
    name : str | None
        Name sent over the wire. Defaults to the Python parameter name.
    required : bool, default True
        When True, calling the method with None for this parameter fails
        with MissingRequiredParameterError instead of omitting it.

    Examples
    --------
    >>> def search(self, q: Annotated[str, RequestParam()]) -> list[User]: ...
    >>> def page(self, n: Annotated[int | None, RequestParam("page", required=False)]): ...
    """

    name: str | None = None
    required: bool = True


def request_mapping(
    *paths: str, method: HttpMethod | str | None = None
) -> Callable[[T], T]:
    """
    Attach a path (and optionally a verb) to an interface or a method.

    On an interface the path is a prefix for every method and the verb,
    if any, is the default for methods that declare none.
    """
    methods = () if method is None else (method,)

    def decorator(target: T) -> T:
        setattr(target, MAPPING_ATTRIBUTE, RequestMapping(tuple(paths), methods))
        return target

    return decorator


def get_mapping(*paths: str) -> Callable[[T], T]:
    return request_mapping(*paths, method=HttpMethod.GET)


def post_mapping(*paths: str) -> Callable[[T], T]:
    return request_mapping(*paths, method=HttpMethod.POST)


def put_mapping(*paths: str) -> Callable[[T], T]:
    return request_mapping(*paths, method=HttpMethod.PUT)


def delete_mapping(*paths: str) -> Callable[[T], T]:
    return request_mapping(*paths, method=HttpMethod.DELETE)


def patch_mapping(*paths: str) -> Callable[[T], T]:
    return request_mapping(*paths, method=HttpMethod.PATCH)


class DecoratorMetadataSource:
    """
    Reads endpoint metadata written by the mapping decorators.

    This is the default ``EndpointMetadataSource``. Another source (for
    example one fed from an OpenAPI document) can be passed to the
    ControllerFactory instead.
    """

    def interface_mapping(self, interface: type) -> RequestMapping | None:
        mapping = getattr(interface, MAPPING_ATTRIBUTE, None)
        return mapping if isinstance(mapping, RequestMapping) else None

    def method_mapping(self, function: Callable[..., Any]) -> RequestMapping | None:
        mapping = getattr(function, MAPPING_ATTRIBUTE, None)
        return mapping if isinstance(mapping, RequestMapping) else None

    def declared_parameters(
        self, function: Callable[..., Any]
    ) -> list[DeclaredParameter]:
        hints = resolve_type_hints(function)
        declared: list[DeclaredParameter] = []
        for position, parameter in enumerate(_call_parameters(function)):
            hint = hints.get(parameter.name)
            if get_origin(hint) is not Annotated:
                continue
            for extra in get_args(hint)[1:]:
                if isinstance(extra, RequestParam):
                    declared.append(
                        DeclaredParameter(
                            name=extra.name or parameter.name,
                            required=extra.required,
                            position=position,
                        )
                    )
                    break
        return declared


def _call_parameters(function: Callable[..., Any]) -> list[inspect.Parameter]:
    """Named parameters of an interface method in declaration order, ``self`` excluded."""
    parameters = list(inspect.signature(function).parameters.values())
    if parameters and parameters[0].name in ("self", "cls"):
        parameters = parameters[1:]
    return [
        p
        for p in parameters
        if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
