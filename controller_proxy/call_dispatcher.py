"""
Call dispatching for remote controllers.

The RestCallDispatcher is the runtime entry point of a dispatch proxy: every
intercepted method call ends up in ``invoke``, which looks up the method's
endpoint descriptor, marshals the arguments, performs the HTTP exchange and
unmarshals the response into the declared return type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

import httpx

from ._internal.parameter_marshaller import ParameterMarshaller
from ._internal.result_unmarshaller import ResultUnmarshaller
from .exceptions import InvocationMetadataMissingError, RemoteInvocationFailedError
from .logger import get_logger
from .schemas import EndpointDescriptor, MethodKey, RemoteRequest
from .utils import canonical_name

if TYPE_CHECKING:
    from ._internal.protocols import HeadersResolver, Transport

logger = get_logger("call_dispatcher")

DEFAULT_ACCEPT = "application/json"


class RestCallDispatcher:
    """
    Dispatches interface method calls to a remote HTTP service.

    The descriptor table is built once by the DescriptorBuilder and is only
    read afterwards, so one dispatcher can serve concurrent calls from many
    threads.

    Parameters
    ----------
    interface : type
        The interface whose methods are dispatched.
    descriptors : Mapping[MethodKey, EndpointDescriptor]
        The descriptor table of ``interface``.
    transport : Transport
        Executes the HTTP exchanges.
    headers_resolver : HeadersResolver | None
        Supplies request headers. When None, requests only ask for JSON.
    default_accept : str
        Accept header used when there is no headers resolver.

    Examples
    --------
    >>> dispatcher = RestCallDispatcher(UserController, table, HttpTransport())
    >>> dispatcher.invoke(UserController.search, ("alice",))
    [User(name='alice', ...)]
    """

    def __init__(
        self,
        interface: type,
        descriptors: Mapping[MethodKey, EndpointDescriptor],
        transport: Transport,
        headers_resolver: HeadersResolver | None = None,
        default_accept: str = DEFAULT_ACCEPT,
    ) -> None:
        self._interface = interface
        self._descriptors = dict(descriptors)
        self._transport = transport
        self._headers_resolver = headers_resolver
        self._default_accept = default_accept
        self._marshaller = ParameterMarshaller()
        self._unmarshaller = ResultUnmarshaller()

    @property
    def interface(self) -> type:
        return self._interface

    @property
    def descriptors(self) -> Mapping[MethodKey, EndpointDescriptor]:
        return self._descriptors

    def descriptor_for(self, method: Callable[..., Any]) -> EndpointDescriptor:
        """
        Look up the descriptor of a method.

        Raises:
            InvocationMetadataMissingError: If the method has no descriptor.
        """
        key = MethodKey.of(method)
        descriptor = self._descriptors.get(key)
        if descriptor is None:
            raise InvocationMetadataMissingError(
                f"Cannot find invocation info for the method {key}"
            )
        return descriptor

    def invoke(self, method: Callable[..., Any], args: Sequence[Any]) -> Any:
        """
        Remotely invoke ``method`` with ``args``.

        Args:
            method: The interface function being called.
            args: Argument values in declaration order (``self`` excluded).

        Returns:
            The response body converted to the method's return type.

        Raises:
            InvocationMetadataMissingError: If the method has no descriptor.
            MarshallingError: If the arguments or the response cannot be converted.
            RemoteInvocationFailedError: If the HTTP exchange fails.
        """
        logger.debug(
            f"Invoke method {method.__name__} of {canonical_name(self._interface)} "
            f"with args {list(args)!r}"
        )
        descriptor = self.descriptor_for(method)
        request = self.build_request(descriptor, args)
        resolved_url = request.url

        try:
            resolved_url = str(
                httpx.URL(request.url, params=request.query_params or None)
            )
            response = self._transport.exchange(request)
        except httpx.HTTPStatusError as e:
            raise RemoteInvocationFailedError(
                resolved_url, e.response.status_code
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise RemoteInvocationFailedError(resolved_url) from e

        # transports are not required to raise on error statuses
        if response.is_error:
            raise RemoteInvocationFailedError(resolved_url, response.status_code)

        return self._unmarshaller.unmarshal(response, descriptor.return_type)

    def build_request(
        self, descriptor: EndpointDescriptor, args: Sequence[Any]
    ) -> RemoteRequest:
        """Marshal one call into the request handed to the transport."""
        marshalled = self._marshaller.marshal(descriptor, args)
        return RemoteRequest(
            method=descriptor.http_method,
            url=descriptor.url,
            headers=self.headers(),
            query_params=marshalled.query_params,
            body=marshalled.body,
            has_body=marshalled.has_body,
        )

    def headers(self) -> list[tuple[str, str]]:
        if self._headers_resolver is None:
            return [("Accept", self._default_accept)]
        headers = self._headers_resolver.headers_for(self._interface)
        resolved: list[tuple[str, str]] = []
        for name, values in headers.items():
            if isinstance(values, str):
                values = [values]
            resolved.extend((name, value) for value in values)
        return resolved
