"""Configuration dataclasses for the controller factory and its HTTP transport.

This module provides immutable, validated configuration objects for the
remote dispatch path: transport settings passed straight through to httpx,
the opt-in retry policy of the transport, and the factory-level switches.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

ENV_PREFIX = "CONTROLLER_PROXY_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class TransportRetryConfig:
    """Configuration for retrying failed HTTP exchanges.

    Retries are a transport concern and are disabled unless a
    TransportRetryConfig is passed to HttpTransportConfig. Only connection
    level failures and 5xx responses are retried; 4xx responses are final.

    Parameters
    ----------
    max_attempts : int, default 3
        Total number of attempts, the first one included. Must be at least 1.
    min_wait : float, default 0.1
        Lower bound in seconds of the random exponential backoff.
    max_wait : float, default 10.0
        Upper bound in seconds of the random exponential backoff.

    Examples
    --------
    >>> config = TransportRetryConfig(max_attempts=5, max_wait=2.0)
    >>> config.validate()
    """

    max_attempts: int = 3
    min_wait: float = 0.1
    max_wait: float = 10.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Explicitly validate the configuration.

        Raises
        ------
        ValueError
            If max_attempts is below 1, if a wait bound is negative, or if
            min_wait is greater than max_wait.
        """
        if self.max_attempts < 1:
            raise ValueError(
                f"max_attempts must be at least 1, got {self.max_attempts}"
            )
        if self.min_wait < 0 or self.max_wait < 0:
            raise ValueError(
                f"wait bounds must be non-negative, got {self.min_wait}..{self.max_wait}"
            )
        if self.min_wait > self.max_wait:
            raise ValueError(
                f"min_wait ({self.min_wait}s) must not exceed max_wait ({self.max_wait}s)"
            )


@dataclass(frozen=True)
class HttpTransportConfig:
    """Configuration for the httpx-based transport.

    These settings are passed through to ``httpx.Client`` when the transport
    creates its own short-lived client for an exchange. They are ignored when
    the caller supplies a ready-made client, which then carries its own
    timeout, TLS and pooling configuration.

    Parameters
    ----------
    timeout : float | None, default 10.0
        Timeout in seconds for the whole exchange. None waits indefinitely.
    follow_redirects : bool, default False
        Whether redirects are followed.
    verify : bool | str, default True
        TLS verification flag or CA bundle path.
    retry : TransportRetryConfig | None, default None
        Retry policy. None disables retries.

    Examples
    --------
    >>> config = HttpTransportConfig(timeout=2.5)
    >>> config.validate()

    >>> config = HttpTransportConfig(retry=TransportRetryConfig(max_attempts=2))
    >>> assert config.retry.max_attempts == 2
    """

    timeout: float | None = 10.0
    follow_redirects: bool = False
    verify: bool | str = True
    retry: TransportRetryConfig | None = None

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {self.timeout}")

    def validate(self) -> None:
        """Explicitly validate the configuration.

        Validation is automatically performed in __post_init__; this also
        validates the nested retry configuration.
        """
        if self.retry is not None:
            self.retry.validate()

    def client_kwargs(self) -> dict[str, Any]:
        return {
            "timeout": self.timeout,
            "follow_redirects": self.follow_redirects,
            "verify": self.verify,
        }


@dataclass(frozen=True)
class ControllerFactoryConfig:
    """Configuration for ControllerFactory.

    Parameters
    ----------
    enforce_proxy_creation : bool, default False
        Create a remote dispatch proxy even when a local implementation
        exists. Useful to exercise the remote path in tests.
    default_accept : str, default "application/json"
        Accept header sent when no headers resolver is configured.
    transport : HttpTransportConfig, default HttpTransportConfig()
        Settings for the default httpx transport.

    Examples
    --------
    >>> config = ControllerFactoryConfig(enforce_proxy_creation=True)
    >>> assert config.transport.timeout == 10.0

    >>> # CONTROLLER_PROXY_ENFORCE_PROXY_CREATION=true CONTROLLER_PROXY_TIMEOUT=3
    >>> config = ControllerFactoryConfig.from_env()
    """

    enforce_proxy_creation: bool = False
    default_accept: str = "application/json"
    transport: HttpTransportConfig = field(default_factory=HttpTransportConfig)

    def __post_init__(self) -> None:
        if not self.default_accept:
            raise ValueError("default_accept must be a non-empty media type")

    def validate(self) -> None:
        """Explicitly validate the configuration, nested transport included."""
        self.transport.validate()

    @classmethod
    def from_env(
        cls, prefix: str = ENV_PREFIX, environ: dict[str, str] | None = None
    ) -> ControllerFactoryConfig:
        """
        Load from environment variables with the given prefix.

        Recognised variables (with the default prefix):
        ``CONTROLLER_PROXY_ENFORCE_PROXY_CREATION``,
        ``CONTROLLER_PROXY_DEFAULT_ACCEPT`` and ``CONTROLLER_PROXY_TIMEOUT``
        (seconds; ``none`` disables the timeout). Unset variables keep
        their defaults.

        Raises
        ------
        ValueError
            If CONTROLLER_PROXY_TIMEOUT is not a number or "none".
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for key, value in env.items():
            if key.startswith(prefix):
                values[key[len(prefix) :].lower()] = value.strip()

        kwargs: dict[str, Any] = {}
        if "enforce_proxy_creation" in values:
            kwargs["enforce_proxy_creation"] = (
                values["enforce_proxy_creation"].lower() in _TRUE_VALUES
            )
        if values.get("default_accept"):
            kwargs["default_accept"] = values["default_accept"]
        if "timeout" in values:
            raw = values["timeout"]
            timeout = None if raw.lower() == "none" else float(raw)
            kwargs["transport"] = HttpTransportConfig(timeout=timeout)
        return cls(**kwargs)
