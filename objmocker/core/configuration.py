"""Global defaults and per-class fill overrides, with fluent builders."""

import json
import logging
import random
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Union

import yaml
from faker import Faker
from pydantic import BaseModel, ValidationError

from .models import (
    ConfigurationError, GlobalDefaults, MethodFillConfig, PropertyFillConfig,
    TypeConfiguration,
)


logger = logging.getLogger(__name__)

Selector = Union[str, Callable[[Any], Any]]

_MISSING = object()


class _SelectorRecorder:
    """Stand-in instance recording the first attribute a selector touches."""

    def __init__(self):
        object.__setattr__(self, "selected", None)

    def __getattr__(self, name: str) -> "_SelectorRecorder":
        if self.selected is None:
            object.__setattr__(self, "selected", name)
        return self

    def __call__(self, *args, **kwargs) -> "_SelectorRecorder":
        return self


def selector_name(selector: Selector) -> str:
    """Resolve ``"age"`` or ``lambda p: p.age`` to a member name."""
    if isinstance(selector, str):
        if not selector:
            raise ConfigurationError("Member selector must not be empty")
        return selector
    if callable(selector):
        recorder = _SelectorRecorder()
        try:
            selector(recorder)
        except Exception as e:
            raise ConfigurationError(f"Cannot resolve member selector {selector!r}: {e}") from e
        if recorder.selected is not None:
            return recorder.selected
    raise ConfigurationError(f"Cannot resolve member selector {selector!r}")


def _build(model: type, **kwargs: Any) -> BaseModel:
    try:
        return model(**kwargs)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {model.__name__}: {e}") from e


def _as_generator(value: Any) -> Callable[[], Any]:
    if callable(value):
        return value
    return lambda: value


def _is_candidate_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


class PropertyFillBuilder:
    """Pending fill rule for one property, completed by a strategy call."""

    def __init__(self, configurator: "TypeConfigurator", name: str):
        self._configurator = configurator
        self._name = name

    def within_range(self, min_value: Any, max_value: Any) -> "TypeConfigurator":
        """Fill the property with a value in ``[min_value, max_value]``."""
        config = _build(PropertyFillConfig, min_value=min_value, max_value=max_value)
        return self._configurator._set_property(self._name, config)

    def with_values(self, candidates: Iterable[Any]) -> "TypeConfigurator":
        """Fill the property with a random pick from ``candidates``."""
        config = _build(PropertyFillConfig, possible_values=list(candidates))
        return self._configurator._set_property(self._name, config)

    def with_generator(self, generator: Callable[[], Any]) -> "TypeConfigurator":
        config = _build(PropertyFillConfig, generator=generator)
        return self._configurator._set_property(self._name, config)


class MethodFillBuilder:
    """Pending fill rule for one setter-style method."""

    def __init__(self, configurator: "TypeConfigurator", name: str):
        self._configurator = configurator
        self._name = name

    def with_random(self, candidates: Iterable[Any]) -> "TypeConfigurator":
        """Call the method with a random pick from ``candidates`` on every fill."""
        config = _build(MethodFillConfig, candidates=list(candidates))
        return self._configurator._set_method(self._name, config)

    def with_generator(self, generator: Callable[[], Any]) -> "TypeConfigurator":
        """Call the method with whatever ``generator()`` returns."""
        config = _build(MethodFillConfig, generator=generator)
        return self._configurator._set_method(self._name, config)


class TypeConfigurator:
    """Fluent surface over a ``TypeConfiguration``.

    Example::

        configure(Person) \\
            .fill("age").within_range(20, 22) \\
            .fill(lambda p: p.title, lambda: "Dr") \\
            .fill_method("set_middle_name").with_random(["aaa", "bbb"])
    """

    def __init__(self, configuration: TypeConfiguration):
        self.configuration = configuration

    @property
    def target(self) -> type:
        return self.configuration.target

    def fill(self, selector: Selector, generator: Any = _MISSING
             ) -> Union["TypeConfigurator", PropertyFillBuilder]:
        """Fill a property with a zero-argument function or a constant.

        Without a generator, returns a builder for ``within_range`` or
        ``with_values``.
        """
        name = selector_name(selector)
        if generator is _MISSING:
            return PropertyFillBuilder(self, name)
        config = _build(PropertyFillConfig, generator=_as_generator(generator))
        return self._set_property(name, config)

    def fill_method(self, selector: Selector, generator_or_candidates: Any = _MISSING
                    ) -> Union["TypeConfigurator", MethodFillBuilder]:
        """Fill through a method taking one value.

        Accepts a zero-argument function, a sequence of candidates to pick
        from at random, or a constant. Without either, returns a builder for
        ``with_random`` or ``with_generator``.
        """
        name = selector_name(selector)
        if generator_or_candidates is _MISSING:
            return MethodFillBuilder(self, name)
        if _is_candidate_sequence(generator_or_candidates):
            config = _build(MethodFillConfig, candidates=list(generator_or_candidates))
        else:
            config = _build(MethodFillConfig, generator=_as_generator(generator_or_candidates))
        return self._set_method(name, config)

    def _set_property(self, name: str, config: PropertyFillConfig) -> "TypeConfigurator":
        self.configuration.properties[name] = config
        logger.debug(f"Configured property {self.target.__name__}.{name}")
        return self

    def _set_method(self, name: str, config: MethodFillConfig) -> "TypeConfigurator":
        self.configuration.methods[name] = config
        logger.debug(f"Configured method {self.target.__name__}.{name}")
        return self


def load_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from JSON or YAML file."""
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, 'r') as f:
        if config_file.suffix.lower() == '.json':
            return json.load(f)
        else:
            return yaml.safe_load(f) or {}


class ConfigurationStore:
    """Holds global defaults plus persistent and one-shot per-class overrides.

    Not synchronised: share a store between threads only with external
    locking, or give each thread its own engine.
    """

    def __init__(self, defaults: Optional[GlobalDefaults] = None):
        self._initial_defaults = defaults.model_copy() if defaults else None
        self.defaults: GlobalDefaults = defaults or GlobalDefaults()
        self._persistent: Dict[type, TypeConfiguration] = {}
        self._one_shot: Dict[type, TypeConfiguration] = {}

    def update_defaults(self, **changes: Any) -> GlobalDefaults:
        """Replace the defaults with a validated copy; invalid changes leave them untouched."""
        values = self.defaults.model_dump()
        values.update(changes)
        try:
            updated = GlobalDefaults(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid defaults: {e}") from e

        self.defaults = updated
        if "seed" in changes and updated.seed is not None:
            random.seed(updated.seed)
            Faker.seed(updated.seed)
        logger.debug(f"Updated defaults: {changes}")
        return updated

    def load_defaults(self, config_path: Union[str, Path]) -> GlobalDefaults:
        """Apply the ``defaults`` section of a YAML or JSON file."""
        data = load_config_file(config_path)
        section = data.get("defaults", data) if isinstance(data, dict) else None
        if not isinstance(section, dict):
            raise ConfigurationError(f"No defaults mapping found in {config_path}")

        changes = {}
        for key, value in section.items():
            if key in ("min_date", "max_date") and isinstance(value, date) \
                    and not isinstance(value, datetime):
                value = datetime.combine(value, time.min if key == "min_date" else time.max)
            changes[key] = value

        logger.info(f"Loading defaults from {config_path}")
        return self.update_defaults(**changes)

    def configure(self, cls: type) -> TypeConfiguration:
        """Get or create the persistent configuration of a class."""
        if cls not in self._persistent:
            self._persistent[cls] = TypeConfiguration(target=cls)
        return self._persistent[cls]

    def set_once(self, cls: type) -> TypeConfiguration:
        """Get or create the configuration consumed by the next fill of a class."""
        if cls not in self._one_shot:
            self._one_shot[cls] = TypeConfiguration(target=cls)
        return self._one_shot[cls]

    def get(self, cls: type) -> Optional[TypeConfiguration]:
        return self._persistent.get(cls)

    def has_pending(self, cls: type) -> bool:
        return cls in self._one_shot

    def resolve(self, cls: type) -> Optional[TypeConfiguration]:
        """Effective configuration for the next fill; consumes any one-shot entry."""
        persistent = self.get(cls)
        one_shot = self._one_shot.pop(cls, None)
        if one_shot is not None:
            logger.debug(f"Consuming one-shot configuration for {cls.__name__}")
        if persistent is None:
            return one_shot
        return persistent.merged_with(one_shot)

    def reset(self) -> None:
        """Clear all overrides and restore factory defaults."""
        self._persistent.clear()
        self._one_shot.clear()
        self.defaults = (self._initial_defaults.model_copy()
                         if self._initial_defaults else GlobalDefaults())
        logger.debug("Configuration reset to factory defaults")


class DefaultsConfigurator:
    """Fluent surface over the global defaults of a store.

    Every call is validated on its own against the current defaults, so
    moving a bound past its partner with the single setters fails
    (``min_int(150)`` while ``max_int`` is 100). Use ``int_range``,
    ``short_range`` or ``float_range`` to move both bounds at once.
    """

    def __init__(self, store: ConfigurationStore):
        self._store = store

    @property
    def current(self) -> GlobalDefaults:
        return self._store.defaults

    def max_int(self, value: int) -> "DefaultsConfigurator":
        self._store.update_defaults(max_int=value)
        return self

    def min_int(self, value: int) -> "DefaultsConfigurator":
        self._store.update_defaults(min_int=value)
        return self

    def max_short(self, value: int) -> "DefaultsConfigurator":
        self._store.update_defaults(max_short=value)
        return self

    def min_short(self, value: int) -> "DefaultsConfigurator":
        self._store.update_defaults(min_short=value)
        return self

    def max_float(self, value: float) -> "DefaultsConfigurator":
        self._store.update_defaults(max_float=value)
        return self

    def min_float(self, value: float) -> "DefaultsConfigurator":
        self._store.update_defaults(min_float=value)
        return self

    def int_range(self, min_value: int, max_value: int) -> "DefaultsConfigurator":
        """Set both integer bounds in one update."""
        self._store.update_defaults(min_int=min_value, max_int=max_value)
        return self

    def short_range(self, min_value: int, max_value: int) -> "DefaultsConfigurator":
        self._store.update_defaults(min_short=min_value, max_short=max_value)
        return self

    def float_range(self, min_value: float, max_value: float) -> "DefaultsConfigurator":
        self._store.update_defaults(min_float=min_value, max_float=max_value)
        return self

    def list_count(self, value: int) -> "DefaultsConfigurator":
        self._store.update_defaults(list_count=value)
        return self

    def date_range(self, min_date: Union[date, datetime],
                   max_date: Union[date, datetime]) -> "DefaultsConfigurator":
        """Bound every generated date; plain dates cover their whole day."""
        if not isinstance(min_date, datetime):
            min_date = datetime.combine(min_date, time.min)
        if not isinstance(max_date, datetime):
            max_date = datetime.combine(max_date, time.max)
        self._store.update_defaults(min_date=min_date, max_date=max_date)
        return self

    def max_recursion_depth(self, value: int) -> "DefaultsConfigurator":
        self._store.update_defaults(max_recursion_depth=value)
        return self

    def seed(self, value: int) -> "DefaultsConfigurator":
        """Seed ``random`` and Faker for reproducible data."""
        self._store.update_defaults(seed=value)
        return self

    def load_file(self, config_path: Union[str, Path]) -> "DefaultsConfigurator":
        self._store.load_defaults(config_path)
        return self
