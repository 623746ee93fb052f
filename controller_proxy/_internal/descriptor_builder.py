"""
Descriptor building component.

This module walks an interface once, when its dispatch proxy is created, and
turns the mapping metadata of every public method into an immutable
EndpointDescriptor. Nothing here raises on malformed metadata: building must
never block binding an interface, so bad values degrade to defaults and are
reported as warnings.
"""

from __future__ import annotations

import abc
import inspect
from typing import TYPE_CHECKING, Any, Callable, Generic, Protocol

from ..logger import get_logger
from ..schemas import DeclaredParameter, EndpointDescriptor, HttpMethod, MethodKey
from ..utils import canonical_name, resolve_type_hints

if TYPE_CHECKING:
    from ..mapping import RequestMapping
    from .protocols import EndpointMetadataSource

logger = get_logger("descriptor_builder")

# bases that never contribute remote methods
_SKIPPED_BASES = (object, Protocol, Generic, abc.ABC)


def interface_methods(interface: type) -> dict[str, Callable[..., Any]]:
    """
    Collect the public methods of an interface, inherited ones included.

    The most-derived definition of a name wins. Only plain functions are
    considered; static methods, class methods and properties are not part
    of a remote contract.

    Returns
    -------
    dict[str, Callable]
        Method name to function, in definition order (derived first).
    """
    methods: dict[str, Callable[..., Any]] = {}
    for cls in interface.__mro__:
        if cls in _SKIPPED_BASES:
            continue
        for name, member in vars(cls).items():
            if name.startswith("_") or name in methods:
                continue
            if inspect.isfunction(member):
                methods[name] = member
    return methods


class DescriptorBuilder:
    """
    Builds the descriptor table of an interface.

    Parameters
    ----------
    metadata_source : EndpointMetadataSource
        Where the mapping metadata is read from.

    Example:
        ```python
        builder = DescriptorBuilder(DecoratorMetadataSource())
        table = builder.build(UserController, "http://users:8080")
        table[MethodKey.of(UserController.search)].path_template  # "/api/users/search"
        ```
    """

    def __init__(self, metadata_source: EndpointMetadataSource) -> None:
        self._metadata_source = metadata_source

    def build(
        self, interface: type, service_base_url: str
    ) -> dict[MethodKey, EndpointDescriptor]:
        """
        Build one descriptor per public method of ``interface``.

        Args:
            interface: The interface class to describe.
            service_base_url: Resolved base URL of the remote service.

        Returns:
            Mapping of method key to descriptor.
        """
        interface_mapping = self._metadata_source.interface_mapping(interface)
        prefix = self._first_path(interface_mapping, interface)
        default_method = self._first_method(
            interface_mapping, interface, HttpMethod.GET
        )

        descriptors: dict[MethodKey, EndpointDescriptor] = {}
        for function in interface_methods(interface).values():
            descriptor = self._describe(
                function, prefix, default_method, service_base_url
            )
            descriptors[descriptor.key] = descriptor
            logger.debug(f"Endpoint descriptor is registered: {descriptor}")
        return descriptors

    def _describe(
        self,
        function: Callable[..., Any],
        prefix: str,
        default_method: HttpMethod,
        service_base_url: str,
    ) -> EndpointDescriptor:
        mapping = self._metadata_source.method_mapping(function)
        return EndpointDescriptor(
            key=MethodKey.of(function),
            service_base_url=service_base_url,
            path_template=prefix + self._first_path(mapping, function),
            http_method=self._first_method(mapping, function, default_method),
            declared_parameters=self._declared_parameters(function),
            return_type=self._return_type(function),
        )

    def _first_path(self, mapping: RequestMapping | None, owner: Any) -> str:
        if mapping is None or not mapping.paths:
            return ""
        if len(mapping.paths) > 1:
            logger.warning(
                f"More than one request mapping found for {canonical_name(owner)}, "
                f"using {mapping.paths[0]!r}"
            )
        path = mapping.paths[0]
        if not isinstance(path, str):
            logger.warning(
                f"Ignoring non-string request mapping {path!r} of {canonical_name(owner)}"
            )
            return ""
        return path

    def _first_method(
        self, mapping: RequestMapping | None, owner: Any, default: HttpMethod
    ) -> HttpMethod:
        if mapping is None or not mapping.methods:
            return default
        try:
            return HttpMethod(mapping.methods[0])
        except ValueError:
            logger.warning(
                f"Unknown HTTP method {mapping.methods[0]!r} on {canonical_name(owner)}, "
                f"using {default.value}"
            )
            return default

    def _declared_parameters(
        self, function: Callable[..., Any]
    ) -> tuple[DeclaredParameter, ...]:
        try:
            return tuple(self._metadata_source.declared_parameters(function))
        except Exception as e:
            logger.warning(
                f"Cannot read declared parameters of {canonical_name(function)}, "
                f"deriving them from arguments: {type(e).__name__}: {e}"
            )
            return ()

    def _return_type(self, function: Callable[..., Any]) -> Any:
        hints = resolve_type_hints(function)
        if "return" in hints:
            return hints["return"]
        annotation = inspect.signature(function).return_annotation
        # unresolved forward references stay untyped
        if isinstance(annotation, str):
            return inspect.Signature.empty
        return annotation
