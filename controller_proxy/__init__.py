"""
controller_proxy - local or remote controllers behind one interface

Call methods on an interface against a local implementation when one exists,
or transparently against a remote HTTP service implementing the same
contract when none does.
"""

# Protocol definitions
from controller_proxy._internal.protocols import (
    EndpointMetadataSource,
    HeadersResolver,
    ImplementationProvider,
    ServiceUrlResolver,
    Transport,
)

# Core classes
from controller_proxy.call_dispatcher import RestCallDispatcher

# Configuration classes
from controller_proxy.config import (
    ControllerFactoryConfig,
    HttpTransportConfig,
    TransportRetryConfig,
)
from controller_proxy.controller_factory import ControllerFactory

# Exceptions
from controller_proxy.exceptions import (
    AmbiguousLocalImplementationError,
    ConfigurationError,
    ControllerProxyError,
    InvocationMetadataMissingError,
    MarshallingError,
    MissingRequiredParameterError,
    RemoteInvocationFailedError,
    ResultUnmarshallingError,
    UnresolvedServiceUrlError,
)

# Logging utilities
from controller_proxy.logger import LoggingModes, get_logger, logging_config

# Endpoint metadata
from controller_proxy.mapping import (
    DecoratorMetadataSource,
    RequestMapping,
    RequestParam,
    delete_mapping,
    get_mapping,
    patch_mapping,
    post_mapping,
    put_mapping,
    request_mapping,
)
from controller_proxy.proxy import ControllerProxy

# Collaborator defaults
from controller_proxy.resolvers import (
    EnvServiceUrlResolver,
    InstanceRegistry,
    StaticHeadersResolver,
    StaticServiceUrlResolver,
)

# Data model
from controller_proxy.schemas import (
    DeclaredParameter,
    EndpointDescriptor,
    HttpMethod,
    MethodKey,
    RemoteRequest,
)
from controller_proxy.transport import HttpTransport

__version__ = "0.1.0"

__all__ = [
    "AmbiguousLocalImplementationError",
    "ConfigurationError",
    "ControllerFactory",
    "ControllerFactoryConfig",
    "ControllerProxy",
    "ControllerProxyError",
    "DeclaredParameter",
    "DecoratorMetadataSource",
    "EndpointDescriptor",
    "EndpointMetadataSource",
    "EnvServiceUrlResolver",
    "HeadersResolver",
    "HttpMethod",
    "HttpTransport",
    "HttpTransportConfig",
    "ImplementationProvider",
    "InstanceRegistry",
    "InvocationMetadataMissingError",
    "LoggingModes",
    "MarshallingError",
    "MethodKey",
    "MissingRequiredParameterError",
    "RemoteInvocationFailedError",
    "RemoteRequest",
    "RequestMapping",
    "RequestParam",
    "RestCallDispatcher",
    "ResultUnmarshallingError",
    "ServiceUrlResolver",
    "StaticHeadersResolver",
    "StaticServiceUrlResolver",
    "Transport",
    "TransportRetryConfig",
    "UnresolvedServiceUrlError",
    "delete_mapping",
    "get_logger",
    "get_mapping",
    "logging_config",
    "patch_mapping",
    "post_mapping",
    "put_mapping",
    "request_mapping",
]
