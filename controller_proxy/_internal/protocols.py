"""
Protocol definitions for the collaborators of the controller factory.

These protocols define interfaces that allow the dispatch machinery to depend
on abstractions rather than concrete implementations. A real application
plugs in its DI container, its service registry and its auth headers here;
the package ships small default implementations in ``controller_proxy.resolvers``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    import httpx

    from ..mapping import RequestMapping
    from ..schemas import DeclaredParameter, RemoteRequest


@runtime_checkable
class EndpointMetadataSource(Protocol):
    """
    Protocol for reading the remote contract of an interface.

    The default implementation, ``DecoratorMetadataSource``, reads what the
    ``request_mapping`` decorators and ``RequestParam`` markers recorded.

    See Also
    --------
    DecoratorMetadataSource : Default decorator-based implementation.
    """

    def interface_mapping(self, interface: type) -> RequestMapping | None:
        """
        Return the interface-level mapping (path prefix, default verb), if any.
        """
        ...

    def method_mapping(self, function: Callable[..., Any]) -> RequestMapping | None:
        """
        Return the method-level mapping (path suffix, verb), if any.
        """
        ...

    def declared_parameters(
        self, function: Callable[..., Any]
    ) -> Sequence[DeclaredParameter]:
        """
        Return the declared request parameters of a method in declaration order.
        """
        ...


@runtime_checkable
class ServiceUrlResolver(Protocol):
    """
    Protocol for resolving the base URL of the service implementing an interface.

    Examples
    --------
    >>> class FixedResolver:
    ...     def resolve(self, interface: type) -> str | None:
    ...         return "http://users:8080"
    """

    def resolve(self, interface: type) -> str | None:
        """
        Return the base URL, or None (or an empty string) when unknown.
        """
        ...


@runtime_checkable
class HeadersResolver(Protocol):
    """
    Protocol for supplying request headers per interface.

    This is where authentication headers are injected. When no resolver is
    configured, every request asks for JSON (``Accept: application/json``).
    """

    def headers_for(self, interface: type) -> Mapping[str, Sequence[str]]:
        """
        Return an ordered multi-map of header name to value(s).
        """
        ...


@runtime_checkable
class ImplementationProvider(Protocol):
    """
    Protocol for finding local implementations of an interface.

    In an application this is typically backed by a DI container.
    """

    def find_implementations(self, interface: type) -> Sequence[Any]:
        """
        Return every local instance implementing ``interface``.
        """
        ...


@runtime_checkable
class Transport(Protocol):
    """
    Protocol for executing one HTTP exchange.

    Implementations raise ``httpx.HTTPError`` subclasses for transport
    failures and error statuses; the call dispatcher converts those into
    RemoteInvocationFailedError.
    """

    def exchange(self, request: RemoteRequest) -> httpx.Response:
        """
        Send the request and return the successful response.
        """
        ...
