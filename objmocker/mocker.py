"""The engine tying configuration, classification and generation together."""

import logging
from datetime import datetime
from typing import Any, List, Optional, Type, TypeVar

from faker import Faker

from objmocker.core.catalog import CategoryKey, Generator, ValueGeneratorCatalog
from objmocker.core.classifier import GeneratorRule, PropertyClassifier
from objmocker.core.configuration import (
    ConfigurationStore, DefaultsConfigurator, TypeConfigurator,
)
from objmocker.core.filler import ObjectFiller
from objmocker.core.models import DateRule, GlobalDefaults


logger = logging.getLogger(__name__)

T = TypeVar("T")


class ObjectMocker:
    """Fills objects with plausible fake data.

    Each instance owns its configuration, so independent mockers can be used
    side by side (for instance one per thread). The module-level functions in
    ``objmocker`` delegate to a shared default instance.
    """

    def __init__(self, defaults: Optional[GlobalDefaults] = None, faker: Optional[Faker] = None):
        """Initialize the engine with optional starting defaults and Faker instance."""
        self.store = ConfigurationStore(defaults)
        self.catalog = ValueGeneratorCatalog(faker)
        self.classifier = PropertyClassifier()
        self.filler = ObjectFiller(self.store, self.classifier, self.catalog)

        if self.store.defaults.seed is not None:
            self.store.update_defaults(seed=self.store.defaults.seed)

    def new(self, target: Any) -> Any:
        """Fill a new instance of a class, or fill an existing instance in place."""
        return self.filler.fill(target)

    def list_of(self, cls: Type[T], count: Optional[int] = None) -> List[T]:
        """Build ``count`` filled instances (defaults to ``list_count``)."""
        return self.filler.sequences.build(cls, count)

    def configure(self, cls: type) -> TypeConfigurator:
        """Persistent overrides for a class, kept until ``reset``."""
        return TypeConfigurator(self.store.configure(cls))

    def set_once(self, cls: type) -> TypeConfigurator:
        """Overrides applied to the next ``new`` or ``list_of`` call for a class only."""
        return TypeConfigurator(self.store.set_once(cls))

    def defaults(self) -> DefaultsConfigurator:
        return DefaultsConfigurator(self.store)

    def add_rule(self, rule: GeneratorRule) -> None:
        """Register a classification rule ahead of the built-in ones."""
        self.classifier.add_rule(rule)

    def register_generator(self, category: CategoryKey, generator: Generator) -> None:
        """Register or replace the generator behind a category."""
        self.catalog.register(category, generator)

    def calendar_date(self, rule: DateRule = DateRule.ANY) -> datetime:
        """A datetime in the past, the future or anywhere within the date range."""
        return self.catalog.calendar_date(rule, self.store.defaults)

    def reset(self) -> None:
        """Restore factory state: defaults, overrides, custom rules and generators."""
        self.store.reset()
        self.classifier.reset()
        self.catalog.reset()
        self.filler.reset()
        logger.debug("ObjectMocker reset")
