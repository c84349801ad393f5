"""Data models for member description, generation parameters and configuration."""

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, List, NewType, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Marker for members that should be bounded by the short-integer defaults.
Short = NewType("Short", int)


class ConfigurationError(ValueError):
    """Raised when a fill rule or a default is configured with invalid values."""


class MemberType(Enum):
    """Enumeration of resolved member kinds."""
    STRING = "string"
    INTEGER = "integer"
    SHORT = "short"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    UUID = "uuid"
    ENUM = "enum"
    LIST = "list"
    COMPLEX = "complex"
    UNKNOWN = "unknown"


# Member types a within_range() override can bound.
RANGE_MEMBER_TYPES = frozenset({
    MemberType.INTEGER, MemberType.SHORT, MemberType.FLOAT, MemberType.DECIMAL,
    MemberType.DATE, MemberType.DATETIME,
})


class GeneratorCategory(Enum):
    """Semantic categories known to the value generator catalog."""
    # Person
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    FULL_NAME = "full_name"
    EMAIL = "email"
    PHONE = "phone"
    USERNAME = "username"
    AGE = "age"
    BIRTH_DATE = "birth_date"

    # Organisation
    COMPANY = "company"
    JOB_TITLE = "job_title"

    # Location
    STREET_ADDRESS = "street_address"
    CITY = "city"
    PROVINCE = "province"
    STATE = "state"
    COUNTRY = "country"
    POSTAL_CODE = "postal_code"

    # Content
    URL = "url"
    TITLE = "title"
    DESCRIPTION = "description"

    # Type fallbacks
    STRING = "string"
    INTEGER = "integer"
    SHORT = "short"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    UUID = "uuid"
    ENUM = "enum"


class DateRule(Enum):
    """Where a rule-driven date falls relative to now."""
    PAST = "past"
    FUTURE = "future"
    ANY = "any"


@dataclass
class MemberInfo:
    """A writable member of a class, as seen by the filler."""
    name: str
    declared_type: Any
    member_type: MemberType
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None]
    # Class for COMPLEX/ENUM members, item class for LIST members
    target_type: Optional[type] = None
    item_member_type: Optional[MemberType] = None
    is_property: bool = False


@dataclass
class MethodInfo:
    """A public method taking exactly one value argument."""
    name: str
    parameter_type: Any = None


@dataclass
class TypeDescriptor:
    """Ordered description of everything fillable on a class."""
    type: type
    members: List[MemberInfo] = field(default_factory=list)
    methods: List[MethodInfo] = field(default_factory=list)
    read_only: List[str] = field(default_factory=list)

    def get_member(self, name: str) -> Optional[MemberInfo]:
        """Get member by name."""
        for member in self.members:
            if member.name == name:
                return member
        return None

    def get_method(self, name: str) -> Optional[MethodInfo]:
        """Get method by name."""
        for method in self.methods:
            if method.name == name:
                return method
        return None


def _default_min_date() -> datetime:
    return datetime.now() - timedelta(days=365 * 10)


def _default_max_date() -> datetime:
    return datetime.now() + timedelta(days=365 * 10)


class GlobalDefaults(BaseModel):
    """Process-wide bounds used by any generator without a more specific override."""

    model_config = ConfigDict(extra="forbid")

    max_int: int = Field(default=100, description="Upper bound for generated integers")
    min_int: int = Field(default=1, description="Lower bound for generated integers")
    max_short: int = Field(default=100, description="Upper bound for generated shorts")
    min_short: int = Field(default=1, description="Lower bound for generated shorts")
    max_float: float = Field(default=1000.0, description="Upper bound for floats and decimals")
    min_float: float = Field(default=1.0, description="Lower bound for floats and decimals")
    list_count: int = Field(default=25, ge=0, description="Number of elements built by list_of")
    min_date: datetime = Field(default_factory=_default_min_date,
                               description="Earliest generated date")
    max_date: datetime = Field(default_factory=_default_max_date,
                               description="Latest generated date")
    max_recursion_depth: int = Field(
        default=3, ge=1, description="Deepest chain of nested complex members filled by convention"
    )
    seed: Optional[int] = Field(default=None, description="Random seed for reproducible data")

    @model_validator(mode="after")
    def check_bounds(self) -> "GlobalDefaults":
        for low, high in (("min_int", "max_int"), ("min_short", "max_short"),
                          ("min_float", "max_float"), ("min_date", "max_date")):
            if getattr(self, low) > getattr(self, high):
                raise ValueError(
                    f"{low} ({getattr(self, low)}) must not exceed {high} ({getattr(self, high)})"
                )
        return self


def _check_range(min_value: Any, max_value: Any) -> None:
    try:
        inverted = min_value > max_value
    except TypeError as e:
        raise ConfigurationError(
            f"Range bounds {min_value!r} and {max_value!r} are not comparable"
        ) from e
    if inverted:
        raise ConfigurationError(
            f"Range minimum {min_value!r} is greater than maximum {max_value!r}"
        )


class PropertyFillConfig(BaseModel):
    """How a single property is filled when configured explicitly."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    generator: Optional[Callable[[], Any]] = None
    min_value: Optional[Any] = None
    max_value: Optional[Any] = None
    possible_values: Optional[List[Any]] = None

    @model_validator(mode="after")
    def check_strategy(self) -> "PropertyFillConfig":
        if (self.min_value is None) != (self.max_value is None):
            raise ConfigurationError("Both range bounds are required")
        if self.min_value is not None:
            _check_range(self.min_value, self.max_value)
        if self.possible_values is not None and not self.possible_values:
            raise ConfigurationError("possible_values must not be empty")
        return self

    @property
    def is_range(self) -> bool:
        return self.min_value is not None

    def produce(self) -> Any:
        """Produce a value for generator or candidate based fills."""
        if self.generator is not None:
            return self.generator()
        return random.choice(self.possible_values)


class MethodFillConfig(BaseModel):
    """How a setter-style method is invoked when configured explicitly."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    generator: Optional[Callable[[], Any]] = None
    candidates: Optional[List[Any]] = None

    @model_validator(mode="after")
    def check_strategy(self) -> "MethodFillConfig":
        if self.candidates is not None and not self.candidates:
            raise ConfigurationError("Candidate sequence must not be empty")
        return self

    @property
    def is_ready(self) -> bool:
        return self.generator is not None or self.candidates is not None

    def produce(self) -> Any:
        """Produce the argument for the next method call."""
        if self.generator is not None:
            return self.generator()
        return random.choice(self.candidates)


@dataclass
class TypeConfiguration:
    """Per-class overrides, kept in registration order."""
    target: type
    properties: Dict[str, PropertyFillConfig] = field(default_factory=dict)
    methods: Dict[str, MethodFillConfig] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.properties and not self.methods

    def merged_with(self, other: Optional["TypeConfiguration"]) -> "TypeConfiguration":
        """Return a copy where entries of ``other`` take precedence."""
        merged = TypeConfiguration(target=self.target,
                                   properties=dict(self.properties),
                                   methods=dict(self.methods))
        if other is not None:
            merged.properties.update(other.properties)
            merged.methods.update(other.methods)
        return merged


@dataclass
class GeneratorParams:
    """Parameters handed to a catalog generator."""
    defaults: GlobalDefaults
    member: Optional[MemberInfo] = None
    min_value: Optional[Any] = None
    max_value: Optional[Any] = None

    @property
    def target_type(self) -> Optional[type]:
        return self.member.target_type if self.member else None

    @property
    def has_range(self) -> bool:
        return self.min_value is not None and self.max_value is not None
