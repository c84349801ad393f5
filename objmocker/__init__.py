"""
JaySoft-ObjMocker - Convention-based fake data for test fixtures.

This package provides tools to:
- Fill objects with plausible values inferred from member names and types
- Override individual members with functions, ranges or candidate values
- Build lists of filled objects and nested object graphs
- Tune global bounds (integers, shorts, dates, list sizes)

The module-level functions share one default ``ObjectMocker`` and are meant
for single-threaded test code; create your own ``ObjectMocker`` for an
isolated configuration.
"""

__version__ = "1.0.0"
__author__ = "JaySoft Development"
__email__ = "info@jaysoft.dev"

from datetime import datetime
from typing import Any, List, Optional, Type, TypeVar

from objmocker.core.classifier import GeneratorRule
from objmocker.core.configuration import DefaultsConfigurator, TypeConfigurator
from objmocker.core.models import (
    ConfigurationError, DateRule, GeneratorCategory, GlobalDefaults, MemberType, Short,
)
from objmocker.mocker import ObjectMocker

T = TypeVar("T")

_default_mocker = ObjectMocker()


def get_default_mocker() -> ObjectMocker:
    """The shared engine behind the module-level functions."""
    return _default_mocker


def new(target: Any) -> Any:
    """Fill a new instance of a class, or fill an existing instance in place."""
    return _default_mocker.new(target)


def list_of(cls: Type[T], count: Optional[int] = None) -> List[T]:
    """Build ``count`` filled instances of a class."""
    return _default_mocker.list_of(cls, count)


def configure(cls: type) -> TypeConfigurator:
    """Persistent per-class overrides."""
    return _default_mocker.configure(cls)


def set_once(cls: type) -> TypeConfigurator:
    """Per-class overrides for the next fill only."""
    return _default_mocker.set_once(cls)


def defaults() -> DefaultsConfigurator:
    """Fluent access to the global defaults."""
    return _default_mocker.defaults()


def reset() -> None:
    """Restore factory defaults and drop every override."""
    _default_mocker.reset()


def calendar_date(rule: DateRule = DateRule.ANY) -> datetime:
    return _default_mocker.calendar_date(rule)


__all__ = [
    "ObjectMocker",
    "GeneratorRule",
    "GeneratorCategory",
    "GlobalDefaults",
    "MemberType",
    "DateRule",
    "Short",
    "ConfigurationError",
    "TypeConfigurator",
    "DefaultsConfigurator",
    "get_default_mocker",
    "new",
    "list_of",
    "configure",
    "set_once",
    "defaults",
    "reset",
    "calendar_date",
]
