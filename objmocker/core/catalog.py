"""Registry of value generators keyed by semantic category."""

import logging
import math
import random
import uuid
from datetime import date, datetime, time, timedelta
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Any, Callable, Dict, Optional, Tuple, Union

from faker import Faker

from .models import (
    ConfigurationError, DateRule, GeneratorCategory, GeneratorParams, GlobalDefaults, MemberType,
)


logger = logging.getLogger(__name__)

Generator = Callable[[GeneratorParams], Any]
CategoryKey = Union[GeneratorCategory, str]


class ValueGeneratorCatalog:
    """Maps a semantic category to a generator producing one random value.

    Sample data (names, cities, provinces...) comes from Faker; numeric and
    temporal generators honour the bounds carried by ``GeneratorParams``,
    falling back to the global defaults.
    """

    def __init__(self, faker: Optional[Faker] = None):
        """Initialize the catalog with the built-in generators."""
        self.faker = faker or Faker()
        # Provinces only exist in the Canadian address provider
        self.regional_faker = Faker("en_CA")
        self._generators: Dict[CategoryKey, Generator] = self._build_generators()

    def register(self, category: CategoryKey, generator: Generator) -> None:
        """Register or replace the generator for a category."""
        if not callable(generator):
            raise TypeError(f"Generator for {category} must be callable")
        self._generators[category] = generator
        logger.debug(f"Registered generator for category {category}")

    def has(self, category: CategoryKey) -> bool:
        return category in self._generators

    def reset(self) -> None:
        """Drop registered generators and restore the built-in ones."""
        self._generators = self._build_generators()

    def generate(self, category: CategoryKey, params: GeneratorParams) -> Any:
        """Generate one value for a category."""
        try:
            generator = self._generators[category]
        except KeyError:
            raise KeyError(f"No generator registered for category {category}") from None
        return generator(params)

    def _build_generators(self) -> Dict[CategoryKey, Generator]:
        """Build dictionary of built-in generator functions."""
        return {
            GeneratorCategory.FIRST_NAME: lambda p: self.faker.first_name(),
            GeneratorCategory.LAST_NAME: lambda p: self.faker.last_name(),
            GeneratorCategory.FULL_NAME: lambda p: self.faker.name(),
            GeneratorCategory.EMAIL: lambda p: self.faker.email(),
            GeneratorCategory.PHONE: lambda p: self.faker.phone_number(),
            GeneratorCategory.USERNAME: lambda p: self.faker.user_name(),
            GeneratorCategory.AGE: self._generate_age,
            GeneratorCategory.BIRTH_DATE: self._generate_birth_date,
            GeneratorCategory.COMPANY: lambda p: self.faker.company(),
            GeneratorCategory.JOB_TITLE: lambda p: self.faker.job(),
            GeneratorCategory.STREET_ADDRESS: lambda p: self.faker.street_address(),
            GeneratorCategory.CITY: lambda p: self.faker.city(),
            GeneratorCategory.PROVINCE: lambda p: self.regional_faker.province(),
            GeneratorCategory.STATE: lambda p: self.faker.state(),
            GeneratorCategory.COUNTRY: lambda p: self.faker.country(),
            GeneratorCategory.POSTAL_CODE: lambda p: self.faker.postcode(),
            GeneratorCategory.URL: lambda p: self.faker.url(),
            GeneratorCategory.TITLE: lambda p: self.faker.sentence(nb_words=5).rstrip("."),
            GeneratorCategory.DESCRIPTION: lambda p: self.faker.text(max_nb_chars=200),
            GeneratorCategory.STRING: lambda p: self.faker.word(),
            GeneratorCategory.INTEGER: self._generate_integer,
            GeneratorCategory.SHORT: self._generate_short,
            GeneratorCategory.FLOAT: self._generate_float,
            GeneratorCategory.DECIMAL: self._generate_decimal,
            GeneratorCategory.BOOLEAN: lambda p: random.choice([True, False]),
            GeneratorCategory.DATE: self._generate_date,
            GeneratorCategory.DATETIME: self._generate_datetime,
            GeneratorCategory.TIME: lambda p: self.faker.time_object(),
            GeneratorCategory.UUID: lambda p: uuid.uuid4(),
            GeneratorCategory.ENUM: self._generate_enum,
        }

    def _generate_integer(self, params: GeneratorParams) -> int:
        """Generate integer value."""
        if params.has_range:
            return _integer_between(params.min_value, params.max_value)
        return random.randint(params.defaults.min_int, params.defaults.max_int)

    def _generate_short(self, params: GeneratorParams) -> int:
        """Generate short value."""
        if params.has_range:
            return _integer_between(params.min_value, params.max_value)
        return random.randint(params.defaults.min_short, params.defaults.max_short)

    def _generate_float(self, params: GeneratorParams) -> float:
        """Generate float value."""
        if params.has_range:
            return random.uniform(float(params.min_value), float(params.max_value))
        return random.uniform(params.defaults.min_float, params.defaults.max_float)

    def _generate_decimal(self, params: GeneratorParams) -> Decimal:
        """Generate decimal value with two places, or at the bounds' precision when no cent fits."""
        if params.has_range:
            low, high = Decimal(str(params.min_value)), Decimal(str(params.max_value))
        else:
            low, high = Decimal(str(params.defaults.min_float)), Decimal(str(params.defaults.max_float))

        places = 2
        if _scaled_bounds(low, high, places) is None:
            places = max(places, _decimal_places(low), _decimal_places(high))
        bounds = _scaled_bounds(low, high, places)
        if bounds is None:
            return low
        return Decimal(random.randint(*bounds)).scaleb(-places)

    def _generate_age(self, params: GeneratorParams) -> int:
        """Generate a plausible adult age."""
        if params.has_range:
            return self._generate_integer(params)
        return random.randint(18, 90)

    def _generate_enum(self, params: GeneratorParams) -> Any:
        """Pick a member of the member's enum class."""
        enum_type = params.target_type
        if enum_type is None or not list(enum_type):
            return None
        return random.choice(list(enum_type))

    def _bounds(self, params: GeneratorParams) -> Tuple[datetime, datetime]:
        if params.has_range:
            return _as_datetime(params.min_value), _as_datetime(params.max_value, end=True)
        return params.defaults.min_date, params.defaults.max_date

    def _generate_datetime(self, params: GeneratorParams) -> datetime:
        """Generate datetime value within the configured date range."""
        low, high = self._bounds(params)
        return random_datetime_between(low, high)

    def _generate_date(self, params: GeneratorParams) -> date:
        """Generate date value within the configured date range."""
        low, high = self._bounds(params)
        first, last = low.date(), high.date()
        # A partial first day would put midnight before the lower bound
        if low.time() != time.min and first < last:
            first += timedelta(days=1)
        return first + timedelta(days=random.randint(0, (last - first).days))

    def _generate_birth_date(self, params: GeneratorParams) -> Any:
        """Generate a date in the past, within the configured date range."""
        low, high = self._bounds(params)
        high = min(high, datetime.now())
        if high < low:
            high = self._bounds(params)[1]
        value = random_datetime_between(low, high)
        if params.member is not None and params.member.member_type == MemberType.DATE:
            return value.date()
        return value

    def calendar_date(self, rule: DateRule, defaults: GlobalDefaults) -> datetime:
        """Generate a datetime in the past, the future or anywhere in the date range."""
        now = datetime.now()
        low, high = defaults.min_date, defaults.max_date
        if rule == DateRule.PAST:
            high = min(high, now)
            if high <= low:
                low, high = now - timedelta(days=365), now
        elif rule == DateRule.FUTURE:
            low = max(low, now)
            if high <= low:
                low, high = now, now + timedelta(days=365)
        return random_datetime_between(low, high)


def random_datetime_between(low: datetime, high: datetime) -> datetime:
    """Pick a datetime uniformly between two bounds, inclusive."""
    span = (high - low).total_seconds()
    if span <= 0:
        return low
    value = low + timedelta(seconds=random.uniform(0, span))
    return min(max(value, low), high)


def _integer_between(min_value: Any, max_value: Any) -> int:
    first, last = math.ceil(min_value), math.floor(max_value)
    if first > last:
        raise ConfigurationError(f"No integer lies within [{min_value}, {max_value}]")
    return random.randint(first, last)


def _decimal_places(value: Decimal) -> int:
    exponent = value.as_tuple().exponent
    return -exponent if isinstance(exponent, int) and exponent < 0 else 0


def _scaled_bounds(low: Decimal, high: Decimal, places: int) -> Optional[Tuple[int, int]]:
    """Smallest and largest multiples of ``10 ** -places`` within the bounds, scaled to ints."""
    first = int(low.scaleb(places).to_integral_value(rounding=ROUND_CEILING))
    last = int(high.scaleb(places).to_integral_value(rounding=ROUND_FLOOR))
    if first > last:
        return None
    return first, last


def _as_datetime(value: Any, end: bool = False) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max if end else time.min)
    raise TypeError(f"Expected a date or datetime bound, got {value!r}")
