"""
Tests for configuration objects, default resolvers and logging mode selection.

This test module covers:
- Validation of TransportRetryConfig, HttpTransportConfig and ControllerFactoryConfig
- Loading ControllerFactoryConfig from environment variables
- StaticServiceUrlResolver, EnvServiceUrlResolver and StaticHeadersResolver
- InstanceRegistry matching
- Logging mode resolution from CONTROLLER_PROXY_LOGGING
"""

from __future__ import annotations

import abc
from typing import Protocol

import pytest

from controller_proxy._internal.protocols import (
    HeadersResolver,
    ImplementationProvider,
    ServiceUrlResolver,
)
from controller_proxy.config import (
    ControllerFactoryConfig,
    HttpTransportConfig,
    TransportRetryConfig,
)
from controller_proxy.logger import ENV_VAR, LoggingConfig, LoggingModes, mode_from_env
from controller_proxy.resolvers import (
    EnvServiceUrlResolver,
    InstanceRegistry,
    StaticHeadersResolver,
    StaticServiceUrlResolver,
)

# ============================================================================
# Test Interfaces
# ============================================================================


class UserController(Protocol):
    def ping(self) -> str: ...


class OrderService(abc.ABC):
    @abc.abstractmethod
    def total(self) -> float: ...


class LocalOrderService(OrderService):
    def total(self) -> float:
        return 0.0


class StructurallyMatching:
    def ping(self) -> str:
        return "pong"


# ============================================================================
# Config Validation Tests
# ============================================================================


class TestConfigValidation:
    """Test validation of configuration objects."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"min_wait": -1},
            {"min_wait": 5.0, "max_wait": 1.0},
        ],
    )
    def test_invalid_retry_config(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            TransportRetryConfig(**kwargs)

    def test_negative_timeout(self) -> None:
        with pytest.raises(ValueError, match="timeout"):
            HttpTransportConfig(timeout=-1)

    def test_empty_accept(self) -> None:
        with pytest.raises(ValueError, match="default_accept"):
            ControllerFactoryConfig(default_accept="")

    def test_defaults(self) -> None:
        config = ControllerFactoryConfig()

        assert config.enforce_proxy_creation is False
        assert config.default_accept == "application/json"
        assert config.transport.timeout == 10.0
        assert config.transport.retry is None

    def test_configs_are_immutable(self) -> None:
        config = ControllerFactoryConfig()

        with pytest.raises(AttributeError):
            config.enforce_proxy_creation = True  # type: ignore[misc]


# ============================================================================
# Environment Loading Tests
# ============================================================================


class TestFromEnv:
    """Test ControllerFactoryConfig.from_env."""

    def test_empty_environment_keeps_defaults(self) -> None:
        assert ControllerFactoryConfig.from_env(environ={}) == ControllerFactoryConfig()

    def test_all_variables(self) -> None:
        """
        Test every recognised variable.

        Verifies that:
        - Boolean flags accept common truthy spellings
        - The accept header and timeout are read
        - Unrelated variables are ignored
        """
        config = ControllerFactoryConfig.from_env(
            environ={
                "CONTROLLER_PROXY_ENFORCE_PROXY_CREATION": "Yes",
                "CONTROLLER_PROXY_DEFAULT_ACCEPT": "application/xml",
                "CONTROLLER_PROXY_TIMEOUT": " 3.5 ",
                "OTHER_TIMEOUT": "1",
            }
        )

        assert config.enforce_proxy_creation is True
        assert config.default_accept == "application/xml"
        assert config.transport.timeout == 3.5

    def test_timeout_none(self) -> None:
        config = ControllerFactoryConfig.from_env(environ={"CONTROLLER_PROXY_TIMEOUT": "none"})

        assert config.transport.timeout is None

    def test_false_flag(self) -> None:
        config = ControllerFactoryConfig.from_env(
            environ={"CONTROLLER_PROXY_ENFORCE_PROXY_CREATION": "0"}
        )

        assert config.enforce_proxy_creation is False

    def test_custom_prefix(self) -> None:
        config = ControllerFactoryConfig.from_env(
            prefix="APP_", environ={"APP_ENFORCE_PROXY_CREATION": "true"}
        )

        assert config.enforce_proxy_creation is True

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValueError):
            ControllerFactoryConfig.from_env(environ={"CONTROLLER_PROXY_TIMEOUT": "soon"})


# ============================================================================
# Resolver Tests
# ============================================================================


class TestServiceUrlResolvers:
    """Test the default service URL resolvers."""

    @pytest.mark.parametrize(
        "key",
        [UserController, f"{UserController.__module__}.UserController", "UserController"],
    )
    def test_static_resolver_keys(self, key: object) -> None:
        resolver = StaticServiceUrlResolver({key: "http://users:8080"})

        assert resolver.resolve(UserController) == "http://users:8080"

    def test_static_resolver_unknown(self) -> None:
        assert StaticServiceUrlResolver({}).resolve(UserController) is None

    def test_env_resolver_variable_name(self) -> None:
        assert (
            EnvServiceUrlResolver().variable_name(UserController)
            == "USER_CONTROLLER_SERVICE_URL"
        )

    def test_env_resolver(self) -> None:
        resolver = EnvServiceUrlResolver(
            environ={"USER_CONTROLLER_SERVICE_URL": " http://users:8080 "}
        )

        assert resolver.resolve(UserController) == "http://users:8080"
        assert resolver.resolve(OrderService) is None

    def test_env_resolver_reads_process_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ORDER_SERVICE_URL", "http://orders")
        resolver = EnvServiceUrlResolver(suffix="_URL")

        assert resolver.resolve(OrderService) == "http://orders"

    def test_resolvers_satisfy_protocols(self) -> None:
        assert isinstance(StaticServiceUrlResolver({}), ServiceUrlResolver)
        assert isinstance(EnvServiceUrlResolver(), ServiceUrlResolver)
        assert isinstance(StaticHeadersResolver({}), HeadersResolver)
        assert isinstance(InstanceRegistry(), ImplementationProvider)


class TestStaticHeadersResolver:
    """Test StaticHeadersResolver."""

    def test_values_become_lists(self) -> None:
        resolver = StaticHeadersResolver({"Authorization": "Bearer abc", "X-Tag": ("a", "b")})

        assert resolver.headers_for(UserController) == {
            "Authorization": ["Bearer abc"],
            "X-Tag": ["a", "b"],
        }

    def test_returned_headers_are_copies(self) -> None:
        resolver = StaticHeadersResolver({"X-Tag": ["a"]})

        resolver.headers_for(UserController)["X-Tag"].append("b")

        assert resolver.headers_for(UserController) == {"X-Tag": ["a"]}


class TestInstanceRegistry:
    """Test local implementation lookup."""

    def test_nominal_subclass_matches(self) -> None:
        registry = InstanceRegistry()
        local = LocalOrderService()
        registry.register(local)

        assert registry.find_implementations(OrderService) == [local]

    def test_structural_match_is_not_used(self) -> None:
        registry = InstanceRegistry()
        registry.register(StructurallyMatching())

        assert registry.find_implementations(UserController) == []

    def test_explicit_registration(self) -> None:
        registry = InstanceRegistry()
        adapter = StructurallyMatching()
        registry.register(adapter, UserController)

        assert registry.find_implementations(UserController) == [adapter]
        assert registry.find_implementations(OrderService) == []


# ============================================================================
# Logging Mode Tests
# ============================================================================


class TestLoggingMode:
    """Test logging mode resolution."""

    def test_default_is_simple(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(ENV_VAR, raising=False)

        assert LoggingConfig().get_mode() == LoggingModes.SIMPLE

    def test_mode_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_VAR, "loguru")

        assert LoggingConfig().get_mode() == LoggingModes.LOGURU

    def test_unknown_mode_falls_back_to_simple(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ENV_VAR, "verbose")

        assert LoggingConfig().get_mode() == LoggingModes.SIMPLE

    def test_explicit_mode_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ENV_VAR, "loguru")
        config = LoggingConfig()
        config.set_mode(LoggingModes.SIMPLE)

        assert config.get_mode() == LoggingModes.SIMPLE

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("no_logs", LoggingModes.NO_LOGS),
            (" STREAM ", LoggingModes.STREAM),
            ("", LoggingModes.SIMPLE),
        ],
    )
    def test_mode_from_mapping(self, value: str, expected: LoggingModes) -> None:
        assert mode_from_env({ENV_VAR: value}) == expected
