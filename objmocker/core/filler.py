"""Object filler: populates an instance member by member."""

import logging
from typing import Any, List, Optional, Set, Tuple

from .catalog import ValueGeneratorCatalog
from .classifier import PropertyClassifier
from .configuration import ConfigurationStore
from .introspection import construct, describe, is_default_value
from .models import (
    RANGE_MEMBER_TYPES, GeneratorParams, MemberInfo, MemberType, PropertyFillConfig,
    TypeConfiguration, TypeDescriptor,
)
from .sequence import SequenceBuilder


logger = logging.getLogger(__name__)

_UNFILLED = object()


class ObjectFiller:
    """Resolves every writable member of an instance to a value and assigns it.

    Resolution order per member: an explicit property override, then (only
    while the member still holds its default value) the first matching
    classification rule, then a recursive fill for complex members or a
    generated list for ``List[Complex]`` members. Anything else keeps its
    default value. Configured method fills run after all members.
    """

    def __init__(self, store: ConfigurationStore, classifier: PropertyClassifier,
                 catalog: ValueGeneratorCatalog):
        self.store = store
        self.classifier = classifier
        self.catalog = catalog
        self.sequences = SequenceBuilder(self)
        self._active_types: List[type] = []
        self._reported: Set[Tuple[type, str]] = set()

    def fill(self, target: Any) -> Any:
        """Fill an instance, or a new instance when given a class."""
        cls = target if isinstance(target, type) else type(target)
        return self.fill_with(target, self.store.resolve(cls))

    def fill_with(self, target: Any, type_config: Optional[TypeConfiguration]) -> Any:
        """Fill using an already resolved configuration."""
        if isinstance(target, type):
            cls, instance = target, construct(target)
        else:
            cls, instance = type(target), target

        descriptor = describe(cls, instance)
        logger.debug(f"Filling {cls.__name__}: {len(descriptor.members)} members")

        self._active_types.append(cls)
        try:
            for member in descriptor.members:
                self._fill_member(instance, member, type_config)
            if type_config is not None:
                self._report_unknown_properties(descriptor, type_config)
                self._fill_methods(instance, descriptor, type_config)
        finally:
            self._active_types.pop()

        return instance

    def reset(self) -> None:
        self._reported.clear()

    def _fill_member(self, instance: Any, member: MemberInfo,
                     type_config: Optional[TypeConfiguration]) -> None:
        override = type_config.properties.get(member.name) if type_config else None
        if override is not None:
            value = self._apply_override(member, override, type(instance))
        else:
            if not is_default_value(member.getter(instance), member):
                logger.debug(f"Member {member.name} already set, leaving unchanged")
                return
            value = self._generate(member)

        if value is _UNFILLED:
            return
        member.setter(instance, value)

    def _generate(self, member: MemberInfo) -> Any:
        """Generate a value by convention."""
        rule = self.classifier.classify_member(member)
        if rule is not None:
            return self.catalog.generate(rule.category, self._params(member))

        if member.member_type == MemberType.COMPLEX:
            if self._can_descend(member.target_type):
                return self.fill(member.target_type)
            return _UNFILLED

        if member.member_type == MemberType.LIST and member.item_member_type == MemberType.COMPLEX:
            if self._can_descend(member.target_type):
                return self.sequences.build(member.target_type)
            return _UNFILLED

        logger.debug(f"No generator for member {member.name} "
                     f"({member.member_type.value}), leaving default value")
        return _UNFILLED

    def _apply_override(self, member: MemberInfo, override: PropertyFillConfig, cls: type) -> Any:
        if not override.is_range:
            return override.produce()

        fallback = self.classifier.fallback_for(member.member_type)
        if member.member_type not in RANGE_MEMBER_TYPES or fallback is None:
            self._warn_once(cls, member.name,
                            f"Range configured for {cls.__name__}.{member.name} but "
                            f"{member.member_type.value} members cannot be bounded, skipping")
            return _UNFILLED

        params = self._params(member, override.min_value, override.max_value)
        return self.catalog.generate(fallback.category, params)

    def _fill_methods(self, instance: Any, descriptor: TypeDescriptor,
                      type_config: TypeConfiguration) -> None:
        cls = descriptor.type
        for name, method_config in type_config.methods.items():
            if descriptor.get_method(name) is None:
                self._warn_once(cls, name,
                                f"Method {cls.__name__}.{name} does not exist or does not "
                                f"take a single value, skipping")
                continue
            getattr(instance, name)(method_config.produce())

    def _report_unknown_properties(self, descriptor: TypeDescriptor,
                                   type_config: TypeConfiguration) -> None:
        cls = descriptor.type
        for name in type_config.properties:
            if descriptor.get_member(name) is not None:
                continue
            reason = "is read-only" if name in descriptor.read_only else "does not exist"
            self._warn_once(cls, name, f"Property {cls.__name__}.{name} {reason}, skipping")

    def _warn_once(self, cls: type, name: str, message: str) -> None:
        if (cls, name) not in self._reported:
            self._reported.add((cls, name))
            logger.warning(message)

    def _can_descend(self, cls: Optional[type]) -> bool:
        if cls is None:
            return False
        if cls in self._active_types:
            logger.debug(f"{cls.__name__} is already being filled, not recursing")
            return False
        if len(self._active_types) >= self.store.defaults.max_recursion_depth:
            logger.debug(f"Maximum recursion depth reached at {cls.__name__}")
            return False
        return True

    def _params(self, member: MemberInfo, min_value: Any = None,
                max_value: Any = None) -> GeneratorParams:
        return GeneratorParams(defaults=self.store.defaults, member=member,
                               min_value=min_value, max_value=max_value)
