"""
Dispatch proxies for remote controllers.

A dispatch proxy is an instance of a class generated per interface: it
subclasses the interface and defines one forwarding function per interface
method, so ``isinstance(proxy, Interface)`` holds and the interface's own
signatures are used to bind the arguments of every call before they reach
the RestCallDispatcher.
"""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from ._internal.descriptor_builder import interface_methods
from .logger import get_logger
from .utils import canonical_name

if TYPE_CHECKING:
    from .call_dispatcher import RestCallDispatcher

logger = get_logger("proxy")

T = TypeVar("T")


def bind_arguments(
    method: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> tuple[Any, ...]:
    """
    Bind a call onto the method's signature and return every argument value
    in declaration order, defaults applied.

    ``*args`` values are spliced in place and a ``**kwargs`` dict is passed
    as one structured argument.

    Raises:
        TypeError: If the call does not match the method's signature.
    """
    bound = inspect.signature(method).bind(None, *args, **kwargs)
    bound.apply_defaults()
    values: list[Any] = []
    parameters = list(bound.signature.parameters.values())[1:]
    for parameter in parameters:
        value = bound.arguments.get(parameter.name)
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            values.extend(value or ())
        elif parameter.kind == inspect.Parameter.VAR_KEYWORD:
            if value:
                values.append(value)
        else:
            values.append(value)
    return tuple(values)


class ControllerProxy:
    """
    Base class of every generated dispatch proxy.

    Provides access to the dispatcher and a readable repr; the generated
    subclass adds the interface as a base and the forwarding methods.

    Example:
        ```python
        proxy = create_proxy(UserController, dispatcher)
        isinstance(proxy, UserController)  # True
        proxy.search("alice")  # GET <base>/api/users/search?q=alice
        ```
    """

    _dispatcher_: RestCallDispatcher

    def __init__(self, dispatcher: RestCallDispatcher) -> None:
        self._dispatcher_ = dispatcher

    @property
    def dispatcher(self) -> RestCallDispatcher:
        return self._dispatcher_

    def __repr__(self) -> str:
        return f"<remote {canonical_name(self._dispatcher_.interface)} proxy>"


def _forwarding_method(method: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(method)
    def forward(self: ControllerProxy, *args: Any, **kwargs: Any) -> Any:
        return self._dispatcher_.invoke(method, bind_arguments(method, args, kwargs))

    # forwarding methods are concrete even if the interface declared them abstract
    forward.__isabstractmethod__ = False  # type: ignore[attr-defined]
    return forward


def create_proxy_class(interface: type) -> type:
    """
    Generate the dispatch proxy class of an interface.

    Returns:
        A class deriving from ControllerProxy and ``interface``.
    """
    namespace: dict[str, Any] = {
        name: _forwarding_method(function)
        for name, function in interface_methods(interface).items()
    }
    namespace["__init__"] = ControllerProxy.__init__
    namespace["__module__"] = interface.__module__
    namespace["__qualname__"] = f"{interface.__qualname__}RemoteProxy"
    # the interface may come with its own metaclass (ABCMeta, Protocol)
    metaclass = type(interface)
    proxy_class = metaclass(
        f"{interface.__name__}RemoteProxy", (ControllerProxy, interface), namespace
    )
    # only functions are forwarded; anything else left abstract is not part of the contract
    proxy_class.__abstractmethods__ = frozenset()
    return proxy_class


def create_proxy(interface: type[T], dispatcher: RestCallDispatcher) -> T:
    """Instantiate a dispatch proxy of ``interface`` bound to ``dispatcher``."""
    proxy_class = create_proxy_class(interface)
    logger.debug(f"Created dispatch proxy class {proxy_class.__qualname__}")
    return proxy_class(dispatcher)  # type: ignore[return-value]
