"""Class introspection: ordered writable members, settable methods and construction."""

import collections.abc
import dataclasses
import inspect
import sys
import logging
import types
import typing
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .models import MemberInfo, MemberType, MethodInfo, Short, TypeDescriptor


logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = (
    list, collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Iterable, collections.abc.Collection,
)

# Checked in order: bool before int, datetime before date
_SIMPLE_TYPES: List[Tuple[type, MemberType]] = [
    (bool, MemberType.BOOLEAN),
    (str, MemberType.STRING),
    (int, MemberType.INTEGER),
    (float, MemberType.FLOAT),
    (Decimal, MemberType.DECIMAL),
    (datetime, MemberType.DATETIME),
    (date, MemberType.DATE),
    (time, MemberType.TIME),
    (uuid.UUID, MemberType.UUID),
]

_ZERO_VALUES: Dict[MemberType, Any] = {
    MemberType.STRING: "",
    MemberType.INTEGER: 0,
    MemberType.SHORT: 0,
    MemberType.FLOAT: 0.0,
    MemberType.DECIMAL: Decimal(0),
    MemberType.BOOLEAN: False,
}


class ResolvedType(typing.NamedTuple):
    member_type: MemberType
    target_type: Optional[type] = None
    item_member_type: Optional[MemberType] = None
    is_optional: bool = False


def resolve_annotation(annotation: Any) -> ResolvedType:
    """Resolve a type annotation into a member kind."""
    if annotation is None or annotation is Any or annotation is inspect.Parameter.empty:
        return ResolvedType(MemberType.UNKNOWN)

    if annotation is Short:
        return ResolvedType(MemberType.SHORT, int)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        return resolve_annotation(args[0])

    if origin is Union or _is_union_type(annotation):
        non_null = [arg for arg in args if arg is not type(None)]
        if len(non_null) != 1:
            return ResolvedType(MemberType.UNKNOWN)
        return resolve_annotation(non_null[0])._replace(is_optional=True)

    if origin in _SEQUENCE_ORIGINS:
        item = resolve_annotation(args[0]) if args else ResolvedType(MemberType.UNKNOWN)
        return ResolvedType(MemberType.LIST, item.target_type, item.member_type)

    if origin is not None or not isinstance(annotation, type):
        return ResolvedType(MemberType.UNKNOWN)

    if issubclass(annotation, Enum):
        return ResolvedType(MemberType.ENUM, annotation)

    for python_type, member_type in _SIMPLE_TYPES:
        if issubclass(annotation, python_type):
            return ResolvedType(member_type, python_type)

    if annotation.__module__ == "builtins":
        # dict, tuple, set, bytes and friends are not generated
        return ResolvedType(MemberType.UNKNOWN)

    return ResolvedType(MemberType.COMPLEX, annotation)


def _is_union_type(annotation: Any) -> bool:
    # PEP 604 unions (X | None) have their own runtime type
    return isinstance(annotation, getattr(types, "UnionType", ()))


def zero_value(member_type: MemberType) -> Any:
    """Language default for a member kind."""
    if member_type == MemberType.LIST:
        return []
    return _ZERO_VALUES.get(member_type)


def is_default_value(value: Any, member: MemberInfo) -> bool:
    """Check whether a member still holds its type's default value."""
    if value is None:
        return True
    if member.member_type == MemberType.LIST:
        return isinstance(value, collections.abc.Sized) and len(value) == 0
    zero = _ZERO_VALUES.get(member.member_type)
    if zero is None:
        return False
    return type(value) is type(zero) and value == zero


def _own_annotations(obj: Any) -> Dict[str, Any]:
    """Annotations declared on ``obj`` itself, unevaluated."""
    if hasattr(inspect, "get_annotations"):
        return dict(inspect.get_annotations(obj))
    if isinstance(obj, type):
        return dict(obj.__dict__.get("__annotations__", {}))
    return dict(getattr(obj, "__annotations__", {}))


def _type_hints(obj: Any) -> Dict[str, Any]:
    """Resolve type hints, falling back to one annotation at a time.

    A single unresolvable annotation only loses that member's type.
    """
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except Exception as e:
        logger.debug(f"Resolving type hints of {obj!r} one by one: {e}")

    if not isinstance(obj, type):
        globalns = getattr(obj, "__globals__", {})
        return {name: _resolve_hint(obj, name, annotation, globalns, None)
                for name, annotation in _own_annotations(obj).items()}

    hints: Dict[str, Any] = {}
    for klass in reversed(obj.__mro__):
        if klass is object or klass.__module__.startswith("pydantic"):
            continue
        module = sys.modules.get(klass.__module__)
        globalns = vars(module) if module is not None else {}
        for name, annotation in _own_annotations(klass).items():
            hints[name] = _resolve_hint(klass, name, annotation, globalns, dict(vars(klass)))
    return hints


def _resolve_hint(owner: Any, name: str, annotation: Any, globalns: Dict[str, Any],
                  localns: Optional[Dict[str, Any]]) -> Any:
    holder = type("AnnotationHolder", (), {"__annotations__": {name: annotation}})
    try:
        return typing.get_type_hints(holder, globalns=globalns, localns=localns,
                                     include_extras=True)[name]
    except Exception as e:
        logger.warning(f"Cannot resolve annotation {annotation!r} of "
                       f"{getattr(owner, '__qualname__', owner)}.{name}, leaving it unfilled: {e}")
        return None


def _is_frozen(cls: type) -> bool:
    params = getattr(cls, "__dataclass_params__", None)
    if params is not None and params.frozen:
        return True
    model_config = getattr(cls, "model_config", None)
    return isinstance(model_config, dict) and bool(model_config.get("frozen"))


def _make_accessors(name: str):
    def getter(instance: Any) -> Any:
        return getattr(instance, name, None)

    def setter(instance: Any, value: Any) -> None:
        setattr(instance, name, value)

    return getter, setter


def _member(name: str, annotation: Any, is_property: bool = False) -> MemberInfo:
    resolved = resolve_annotation(annotation)
    getter, setter = _make_accessors(name)
    return MemberInfo(
        name=name,
        declared_type=annotation,
        member_type=resolved.member_type,
        getter=getter,
        setter=setter,
        target_type=resolved.target_type,
        item_member_type=resolved.item_member_type,
        is_property=is_property,
    )


def _single_value_parameter(function: Any) -> Optional[inspect.Parameter]:
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return None
    params = list(signature.parameters.values())[1:]  # drop self
    positional = [p for p in params
                  if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    required_rest = [p for p in params[1:] if p.default is p.empty
                     and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)]
    if not positional or required_rest:
        return None
    return positional[0]


def describe(cls: type, instance: Any = None) -> TypeDescriptor:
    """Describe the writable members and settable methods of a class.

    Members come from class annotations (dataclasses, pydantic models and
    plain annotated classes) and from properties with a setter, in
    declaration order along the MRO. When an instance is given, public
    instance attributes assigned in ``__init__`` without an annotation are
    appended with their runtime type.
    """
    descriptor = TypeDescriptor(type=cls)
    members: Dict[str, MemberInfo] = {}
    frozen = _is_frozen(cls)
    hints = _type_hints(cls)

    for klass in reversed(cls.__mro__):
        if klass is object or klass.__module__.startswith("pydantic"):
            continue

        for name in _own_annotations(klass):
            if name.startswith("_") or name in members:
                continue
            annotation = hints.get(name)
            if typing.get_origin(annotation) is typing.ClassVar:
                continue
            if frozen:
                descriptor.read_only.append(name)
                continue
            members[name] = _member(name, annotation)

        for name, attr in klass.__dict__.items():
            if name.startswith("_"):
                continue
            if isinstance(attr, property):
                members.pop(name, None)
                if attr.fset is None:
                    descriptor.read_only.append(name)
                    continue
                return_type = _type_hints(attr.fget).get("return") if attr.fget else None
                members[name] = _member(name, return_type, is_property=True)
            elif inspect.isfunction(attr):
                parameter = _single_value_parameter(attr)
                if parameter is None:
                    continue
                annotation = _type_hints(attr).get(parameter.name)
                descriptor.methods = [m for m in descriptor.methods if m.name != name]
                descriptor.methods.append(MethodInfo(name=name, parameter_type=annotation))

    if instance is not None and hasattr(instance, "__dict__"):
        for name, value in vars(instance).items():
            if name.startswith("_") or name in members or name in descriptor.read_only:
                continue
            if callable(value):
                continue
            annotation = type(value) if value is not None else None
            members[name] = _member(name, annotation)

    descriptor.members = list(members.values())
    return descriptor


def _required_value(annotation: Any) -> Any:
    resolved = resolve_annotation(annotation)
    if resolved.is_optional:
        return None
    return zero_value(resolved.member_type)


def construct(cls: type) -> Any:
    """Create an instance, supplying zero values for required fields."""
    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        kwargs = {}
        for f in dataclasses.fields(cls):
            if not f.init:
                continue
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                kwargs[f.name] = _required_value(hints.get(f.name))
        return cls(**kwargs)

    model_fields = getattr(cls, "model_fields", None)
    if isinstance(model_fields, dict) and hasattr(cls, "model_construct"):
        kwargs = {}
        for name, info in model_fields.items():
            if info.is_required():
                kwargs[name] = _required_value(info.annotation)
        return cls.model_construct(**kwargs)

    return cls()
