"""Configuration records shared by the test-suite and the CLI end-to-end tests."""

from __future__ import annotations

from dataclasses import dataclass, field

from lib_configure import Configurable, configurable, setting


@dataclass
class FooConfig(Configurable, namespace="foo"):
    bar: int
    baz: str | None = None


@dataclass(frozen=True)
class ServerConfig(Configurable, namespace="server"):
    host: str = setting(doc="Interface to bind.", default="127.0.0.1")
    port: int = setting(doc="TCP port.", default=7878)
    workers: list[int] = setting(default_factory=list)
    debug: bool = False


@configurable("test")
class Configuration:
    first_field: int = 100
    second_field: str = "FooBar"
    third_field: list[int] | None = field(default_factory=list)


@dataclass
class DerivedConfig(Configurable, namespace="derived"):
    base: int = 1
    doubled: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.doubled = self.base * 2
