"""
Exception classes for controller_proxy.

This module defines all custom exceptions raised by the library.
All exceptions inherit from ControllerProxyError, which inherits from Exception,
so a caller of a proxied method can catch every invocation-level failure with
a single except clause.
"""

from __future__ import annotations


class ControllerProxyError(Exception):
    """
    Base exception for all controller_proxy errors.

    This is the parent class for all custom exceptions raised by the
    controller_proxy library. Catching this exception will catch
    all library-specific errors.
    """


class ConfigurationError(ControllerProxyError):
    """
    Raised when the remote contract of an interface cannot be resolved.

    Configuration errors are fatal at proxy-construction or first-dispatch
    time. They are never silently defaulted, with the single exception of
    an interface or method declaring more than one path, where the first
    one is used and a warning is logged.
    """


class InvocationMetadataMissingError(ConfigurationError):
    """
    Raised when a dispatched method has no endpoint descriptor.

    The call dispatcher only knows the methods it built descriptors for
    when the proxy was created. Invoking anything else fails before any
    network call is made.
    """


class UnresolvedServiceUrlError(ConfigurationError):
    """
    Raised when the service URL resolver returns no base URL for an interface.
    """


class MarshallingError(ControllerProxyError):
    """
    Raised when call arguments or a response body cannot be converted.

    Marshalling errors fail the single invocation only. The descriptor
    table and the proxy cache stay valid.
    """


class MissingRequiredParameterError(MarshallingError):
    """
    Raised when a required declared parameter receives None.
    """

    def __init__(self, parameter_name: str) -> None:
        super().__init__(
            f"Cannot resolve value of required parameter '{parameter_name}'"
        )
        self.parameter_name = parameter_name


class ResultUnmarshallingError(MarshallingError):
    """
    Raised when a response body does not match the declared return type.

    Attributes
    ----------
    url : str
        The URL the response was received from.
    """

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class RemoteInvocationFailedError(ControllerProxyError):
    """
    Raised when the HTTP exchange with the remote service fails.

    This covers both transport failures (connection refused, timeouts,
    TLS errors) and HTTP error statuses. The underlying httpx exception is
    available as ``__cause__`` but its type never crosses this boundary.

    Attributes
    ----------
    url : str
        The fully resolved target URL, query string included.
    status_code : int | None
        The HTTP status code, or None when no response was received.
    """

    def __init__(self, url: str, status_code: int | None = None) -> None:
        message = f"Error calling remote service URL {url}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class AmbiguousLocalImplementationError(ControllerProxyError):
    """
    Raised when more than one local implementation of an interface exists.

    The resolver never guesses which implementation to use; the caller
    must disambiguate in the implementation provider.
    """

    def __init__(self, interface_name: str, count: int) -> None:
        super().__init__(
            f"Expecting single implementation of {interface_name}, found {count}"
        )
        self.interface_name = interface_name
        self.count = count
