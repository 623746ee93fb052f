"""
Controller resolution: local implementation or remote dispatch proxy.

ControllerFactory is the entry point of the package. Asked for an interface,
it hands back the single local implementation when there is one, and
otherwise a dispatch proxy that reaches the same contract over HTTP. Proxies
are built once per interface and cached for the lifetime of the factory.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, TypeVar

from ._internal.descriptor_builder import DescriptorBuilder
from .call_dispatcher import RestCallDispatcher
from .config import ControllerFactoryConfig
from .exceptions import AmbiguousLocalImplementationError, UnresolvedServiceUrlError
from .logger import get_logger
from .mapping import DecoratorMetadataSource
from .proxy import create_proxy
from .resolvers import InstanceRegistry
from .transport import HttpTransport
from .utils import canonical_name

if TYPE_CHECKING:
    from ._internal.protocols import (
        EndpointMetadataSource,
        HeadersResolver,
        ImplementationProvider,
        ServiceUrlResolver,
        Transport,
    )

logger = get_logger("controller_factory")

T = TypeVar("T")


class ControllerFactory:
    """
    Obtains controllers: the local implementation or a remote proxy.

    Resolution per requested interface:

    - zero local implementations, or ``enforce_proxy_creation`` set: return
      the cached dispatch proxy, creating it on first use;
    - exactly one: return that instance unchanged;
    - more than one: raise AmbiguousLocalImplementationError.

    The proxy cache is keyed by the interface's canonical name and guarded by
    a lock, so concurrent first requests for the same interface publish a
    single proxy. Entries are never evicted.

    Parameters
    ----------
    url_resolver : ServiceUrlResolver
        Resolves the base URL of the service implementing an interface.
    implementation_provider : ImplementationProvider | None
        Finds local implementations. Defaults to an empty InstanceRegistry.
    headers_resolver : HeadersResolver | None
        Supplies request headers for remote calls.
    transport : Transport | None
        Executes HTTP exchanges. Defaults to an HttpTransport built from
        ``config.transport``.
    metadata_source : EndpointMetadataSource | None
        Reads endpoint metadata. Defaults to DecoratorMetadataSource.
    config : ControllerFactoryConfig | None
        Factory configuration.

    Examples
    --------
    >>> factory = ControllerFactory(
    ...     StaticServiceUrlResolver({UserController: "http://users:8080"}),
    ...     implementation_provider=registry,
    ... )
    >>> users = factory.get_controller(UserController)
    >>> users.search("alice")
    """

    def __init__(
        self,
        url_resolver: ServiceUrlResolver,
        implementation_provider: ImplementationProvider | None = None,
        headers_resolver: HeadersResolver | None = None,
        transport: Transport | None = None,
        metadata_source: EndpointMetadataSource | None = None,
        config: ControllerFactoryConfig | None = None,
    ) -> None:
        self._config = config or ControllerFactoryConfig()
        self._config.validate()
        self._url_resolver = url_resolver
        self._implementation_provider = implementation_provider or InstanceRegistry()
        self._headers_resolver = headers_resolver
        self._transport = transport or HttpTransport(self._config.transport)
        self._descriptor_builder = DescriptorBuilder(
            metadata_source or DecoratorMetadataSource()
        )
        self._enforce_proxy_creation = self._config.enforce_proxy_creation
        self._proxies: dict[str, Any] = {}
        self._proxies_lock = threading.Lock()

    @property
    def enforce_proxy_creation(self) -> bool:
        """Whether a remote proxy is returned even when a local implementation exists."""
        return self._enforce_proxy_creation

    @enforce_proxy_creation.setter
    def enforce_proxy_creation(self, value: bool) -> None:
        self._enforce_proxy_creation = bool(value)

    def get_controller(self, interface: type[T]) -> T:
        """
        Get the local implementation of ``interface`` or a proxy for remote calls.

        Args:
            interface: The controller interface to obtain.

        Returns:
            The local instance, or a dispatch proxy implementing ``interface``.

        Raises:
            TypeError: If ``interface`` is not a class.
            AmbiguousLocalImplementationError: If several local
                implementations exist.
            UnresolvedServiceUrlError: If a proxy is needed but no base URL
                can be resolved.
        """
        if not isinstance(interface, type):
            raise TypeError(f"Expected an interface class, got {interface!r}")

        implementations = list(
            self._implementation_provider.find_implementations(interface)
        )
        if self._enforce_proxy_creation or not implementations:
            return self._get_or_create_proxy(interface)
        if len(implementations) > 1:
            raise AmbiguousLocalImplementationError(
                canonical_name(interface), len(implementations)
            )
        logger.debug(f"Using local implementation of {canonical_name(interface)}")
        return implementations[0]

    def _get_or_create_proxy(self, interface: type[T]) -> T:
        name = canonical_name(interface)
        with self._proxies_lock:
            proxy = self._proxies.get(name)
            if proxy is None:
                proxy = self._create_proxy(interface)
                self._proxies[name] = proxy
            return proxy

    def _create_proxy(self, interface: type[T]) -> T:
        name = canonical_name(interface)
        service_url = self._url_resolver.resolve(interface)
        if not service_url:
            raise UnresolvedServiceUrlError(f"Cannot resolve URL for {name}")

        descriptors = self._descriptor_builder.build(interface, service_url)
        dispatcher = RestCallDispatcher(
            interface,
            descriptors,
            self._transport,
            headers_resolver=self._headers_resolver,
            default_accept=self._config.default_accept,
        )
        logger.info(
            f"Created remote proxy for {name} at {service_url} "
            f"({len(descriptors)} endpoints)"
        )
        return create_proxy(interface, dispatcher)
