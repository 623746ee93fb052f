"""
Default collaborator implementations.

Small implementations of the collaborator protocols, enough to use the
ControllerFactory without a DI container or a service registry:

- ``StaticServiceUrlResolver``: interface -> base URL from a dict.
- ``EnvServiceUrlResolver``: base URL from ``<NAME>_SERVICE_URL`` variables.
- ``StaticHeadersResolver``: the same headers for every interface.
- ``InstanceRegistry``: local implementations registered by hand.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from typing import Any

from .utils import StringUtils, canonical_name


class StaticServiceUrlResolver:
    """
    Resolve base URLs from a static map.

    Keys may be interface classes, canonical names (``pkg.mod.Interface``)
    or bare class names; they are tried in that order.

    Examples
    --------
    >>> resolver = StaticServiceUrlResolver({UserController: "http://users:8080"})
    >>> resolver.resolve(UserController)
    'http://users:8080'
    """

    def __init__(self, urls: Mapping[type | str, str]) -> None:
        self._urls = dict(urls)

    def resolve(self, interface: type) -> str | None:
        for key in (interface, canonical_name(interface), interface.__name__):
            url = self._urls.get(key)
            if url:
                return url
        return None


class EnvServiceUrlResolver:
    """
    Resolve base URLs from environment variables.

    ``UserController`` resolves from ``USER_CONTROLLER_SERVICE_URL`` (class
    name converted to upper snake case, plus the suffix). The environment is
    read on every call, so the resolver itself holds no state.
    """

    def __init__(
        self, suffix: str = "_SERVICE_URL", environ: Mapping[str, str] | None = None
    ) -> None:
        self._suffix = suffix
        self._environ = environ

    def variable_name(self, interface: type) -> str:
        return (
            StringUtils.convert_camelcase_to_underscore(interface.__name__, lower=False)
            + self._suffix
        )

    def resolve(self, interface: type) -> str | None:
        env = os.environ if self._environ is None else self._environ
        value = env.get(self.variable_name(interface), "").strip()
        return value or None


class StaticHeadersResolver:
    """
    Supply the same headers for every interface.

    Values may be a single string or a sequence of strings; header order is
    kept as given.

    Examples
    --------
    >>> StaticHeadersResolver({"Authorization": "Bearer abc", "Accept": "application/json"})
    """

    def __init__(self, headers: Mapping[str, str | Sequence[str]]) -> None:
        self._headers: dict[str, list[str]] = {
            name: [values] if isinstance(values, str) else list(values)
            for name, values in headers.items()
        }

    def headers_for(self, interface: type) -> Mapping[str, Sequence[str]]:
        return {name: list(values) for name, values in self._headers.items()}


class InstanceRegistry:
    """
    Local implementation provider backed by a list of instances.

    An instance is an implementation of an interface when it was registered
    for it explicitly, or when the interface is a nominal base of its class.
    Structural (protocol) matching is not used.

    Examples
    --------
    >>> registry = InstanceRegistry()
    >>> registry.register(LocalUserController())
    >>> registry.register(UserServiceAdapter(), UserController)
    >>> registry.find_implementations(UserController)
    [<LocalUserController ...>, <UserServiceAdapter ...>]
    """

    def __init__(self) -> None:
        self._entries: list[tuple[Any, tuple[type, ...]]] = []

    def register(self, instance: Any, *interfaces: type) -> None:
        self._entries.append((instance, interfaces))

    def find_implementations(self, interface: type) -> list[Any]:
        return [
            instance
            for instance, interfaces in self._entries
            if interface in interfaces or interface in type(instance).__mro__
        ]
