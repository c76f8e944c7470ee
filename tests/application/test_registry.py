"""Registry tests: init-once installation, lazy default binding, and concurrent reads."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from lib_configure.adapters.layered import DefaultSource
from lib_configure.application import registry as registry_module
from lib_configure.application.registry import Registry, active_source, install_source
from lib_configure.domain.errors import UsageError
from lib_configure.testing import StaticSource, isolated_registry


def test_get_binds_default_source_lazily() -> None:
    fresh = Registry(default_factory=DefaultSource)
    assert fresh.is_default()
    source = fresh.get()
    assert isinstance(source, DefaultSource)
    assert fresh.get() is source
    assert fresh.is_default()


def test_install_then_get_returns_installed_source() -> None:
    fresh = Registry(default_factory=DefaultSource)
    source = StaticSource({})
    fresh.install(source)
    assert fresh.get() is source
    assert fresh.is_overridden()


def test_second_install_is_rejected_and_keeps_first_source() -> None:
    fresh = Registry(default_factory=DefaultSource)
    first = StaticSource({})
    fresh.install(first)
    with pytest.raises(UsageError, match="already installed"):
        fresh.install(StaticSource({}))
    assert fresh.get() is first


def test_install_after_default_was_bound_is_rejected() -> None:
    fresh = Registry(default_factory=DefaultSource)
    default = fresh.get()
    with pytest.raises(UsageError, match="default source"):
        fresh.install(StaticSource({}))
    assert fresh.get() is default
    assert fresh.is_default()


def test_install_rejects_objects_without_fetch() -> None:
    fresh = Registry(default_factory=DefaultSource)
    with pytest.raises(UsageError, match="does not implement"):
        fresh.install(object())  # type: ignore[arg-type]
    assert fresh.is_default()


def test_concurrent_get_binds_a_single_default() -> None:
    created: list[object] = []
    lock = threading.Lock()

    def factory() -> StaticSource:
        with lock:
            source = StaticSource({})
            created.append(source)
            return source

    fresh = Registry(default_factory=factory)
    with ThreadPoolExecutor(max_workers=8) as pool:
        seen = list(pool.map(lambda _: fresh.get(), range(64)))
    assert len(created) == 1
    assert all(source is created[0] for source in seen)


def test_module_helpers_use_process_wide_registry() -> None:
    source = StaticSource({})
    with isolated_registry() as fresh:
        install_source(source)
        assert registry_module.CONFIGURATION is fresh
        assert active_source() is source
    assert registry_module.CONFIGURATION is not fresh


def test_isolated_registry_restores_previous_registry_on_error() -> None:
    previous = registry_module.CONFIGURATION
    with pytest.raises(RuntimeError):
        with isolated_registry(StaticSource({})):
            raise RuntimeError("boom")
    assert registry_module.CONFIGURATION is previous


def test_package_exports_only_call_time_registry_accessors() -> None:
    import lib_configure

    assert "CONFIGURATION" not in lib_configure.__all__
    assert not hasattr(lib_configure, "CONFIGURATION")
    source = StaticSource({})
    with isolated_registry() as fresh:
        lib_configure.install_source(source)
        assert fresh.get() is source
        assert lib_configure.active_source() is source
    assert registry_module.CONFIGURATION is not fresh
