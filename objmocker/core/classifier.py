"""Ordered name/type heuristics deciding which generator fills a member."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, List, Optional, Union

from .introspection import resolve_annotation
from .models import GeneratorCategory, MemberInfo, MemberType


logger = logging.getLogger(__name__)

NameMatcher = Callable[[str], bool]

_WORD_PATTERN = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")

STRING_TYPES = frozenset({MemberType.STRING})
INTEGER_TYPES = frozenset({MemberType.INTEGER, MemberType.SHORT})
TEMPORAL_TYPES = frozenset({MemberType.DATE, MemberType.DATETIME})


def name_words(name: str) -> List[str]:
    """Split snake_case, camelCase and PascalCase names into lowercase words."""
    return [word.lower() for word in _WORD_PATTERN.findall(name)]


def normalize_name(name: str) -> str:
    """Lowercase a name and drop separators: ``First_Name`` -> ``firstname``."""
    return re.sub(r"[^a-z0-9]", "", name.lower())


def name_contains(*fragments: str, exclude: tuple = ()) -> NameMatcher:
    """Match names containing any fragment, ignoring case and separators."""
    def matcher(name: str) -> bool:
        normalized = normalize_name(name)
        if any(pattern in normalized for pattern in exclude):
            return False
        return any(fragment in normalized for fragment in fragments)
    return matcher


def name_has_word(*words: str) -> NameMatcher:
    """Match names with any of the given whole words."""
    def matcher(name: str) -> bool:
        return any(word in words for word in name_words(name))
    return matcher


@dataclass
class GeneratorRule:
    """A classification rule: which category fills which members.

    A rule without a name matcher is a type fallback and accepts any name.
    """
    category: Union[GeneratorCategory, str]
    member_types: FrozenSet[MemberType]
    matcher: Optional[NameMatcher] = None
    description: str = ""

    def matches(self, name: str, member_type: MemberType) -> bool:
        if member_type not in self.member_types:
            return False
        return self.matcher is None or self.matcher(name)

    @property
    def is_fallback(self) -> bool:
        return self.matcher is None


def _rule(category, member_types, matcher=None, description="") -> GeneratorRule:
    return GeneratorRule(category=category, member_types=frozenset(member_types),
                         matcher=matcher, description=description)


def default_name_rules() -> List[GeneratorRule]:
    """Built-in name rules, highest priority first."""
    return [
        # Person
        _rule(GeneratorCategory.FIRST_NAME, STRING_TYPES,
              name_contains("firstname", "givenname", "forename"), "first name"),
        _rule(GeneratorCategory.LAST_NAME, STRING_TYPES,
              name_contains("lastname", "surname", "familyname"), "last name"),
        _rule(GeneratorCategory.EMAIL, STRING_TYPES, name_contains("email"), "email address"),
        _rule(GeneratorCategory.PHONE, STRING_TYPES,
              name_contains("phone", "mobile", "fax"), "phone number"),
        _rule(GeneratorCategory.USERNAME, STRING_TYPES,
              name_contains("username", "login", "nickname", "handle"), "user name"),
        _rule(GeneratorCategory.COMPANY, STRING_TYPES,
              name_contains("company", "business", "employer", "organization", "organisation"),
              "company name"),
        _rule(GeneratorCategory.JOB_TITLE, STRING_TYPES,
              name_contains("jobtitle", "occupation", "profession"), "job title"),

        # Location
        _rule(GeneratorCategory.STREET_ADDRESS, STRING_TYPES,
              name_contains("address", "street"), "street address"),
        _rule(GeneratorCategory.CITY, STRING_TYPES, name_contains("city", "town"), "city"),
        _rule(GeneratorCategory.PROVINCE, STRING_TYPES, name_contains("province"), "province"),
        _rule(GeneratorCategory.STATE, STRING_TYPES,
              name_contains("state", exclude=("statement", "estate")), "state"),
        _rule(GeneratorCategory.COUNTRY, STRING_TYPES, name_contains("country"), "country"),
        _rule(GeneratorCategory.POSTAL_CODE, STRING_TYPES,
              name_contains("postalcode", "postcode", "zip"), "postal code"),

        # Content
        _rule(GeneratorCategory.URL, STRING_TYPES,
              name_contains("url", "website", "homepage", "link"), "url"),
        _rule(GeneratorCategory.FULL_NAME, STRING_TYPES,
              name_contains("name", exclude=("file", "path", "host", "domain")), "full name"),
        _rule(GeneratorCategory.TITLE, STRING_TYPES,
              name_contains("title", "subject", "headline"), "title"),
        _rule(GeneratorCategory.DESCRIPTION, STRING_TYPES,
              name_contains("description", "summary", "body", "content", "comment",
                            "notes", "bio", "text"),
              "free text"),

        # Numbers and dates
        _rule(GeneratorCategory.AGE, INTEGER_TYPES, name_has_word("age"), "age"),
        _rule(GeneratorCategory.BIRTH_DATE, TEMPORAL_TYPES,
              name_contains("birth", "dob"), "birth date"),
    ]


def default_fallback_rules() -> List[GeneratorRule]:
    """One lowest-priority rule per primitive member type."""
    return [
        _rule(GeneratorCategory.STRING, {MemberType.STRING}, description="any string"),
        _rule(GeneratorCategory.INTEGER, {MemberType.INTEGER}, description="any integer"),
        _rule(GeneratorCategory.SHORT, {MemberType.SHORT}, description="any short"),
        _rule(GeneratorCategory.FLOAT, {MemberType.FLOAT}, description="any float"),
        _rule(GeneratorCategory.DECIMAL, {MemberType.DECIMAL}, description="any decimal"),
        _rule(GeneratorCategory.BOOLEAN, {MemberType.BOOLEAN}, description="any boolean"),
        _rule(GeneratorCategory.DATE, {MemberType.DATE}, description="any date"),
        _rule(GeneratorCategory.DATETIME, {MemberType.DATETIME}, description="any datetime"),
        _rule(GeneratorCategory.TIME, {MemberType.TIME}, description="any time"),
        _rule(GeneratorCategory.UUID, {MemberType.UUID}, description="any uuid"),
        _rule(GeneratorCategory.ENUM, {MemberType.ENUM}, description="any enum member"),
    ]


class PropertyClassifier:
    """Picks the first rule, in priority order, that accepts a member."""

    def __init__(self):
        self._custom_rules: List[GeneratorRule] = []
        self._name_rules = default_name_rules()
        self._fallback_rules = default_fallback_rules()

    @property
    def rules(self) -> List[GeneratorRule]:
        """All rules in evaluation order."""
        return self._custom_rules + self._name_rules + self._fallback_rules

    def add_rule(self, rule: GeneratorRule) -> None:
        """Register a rule ahead of the built-in ones.

        Custom rules keep their registration order among themselves, so
        the earliest registered custom rule wins ties.
        """
        self._custom_rules.append(rule)
        logger.debug(f"Added classification rule for {rule.category}: {rule.description}")

    def reset(self) -> None:
        self._custom_rules = []

    def classify(self, property_name: str, declared_type: Any) -> Optional[GeneratorRule]:
        """Classify a member from its name and declared type annotation.

        Returns ``None`` for complex, collection and unsupported types:
        those are recursed into or left alone by the filler.
        """
        member_type = resolve_annotation(declared_type).member_type
        return self.classify_kind(property_name, member_type)

    def classify_member(self, member: MemberInfo) -> Optional[GeneratorRule]:
        return self.classify_kind(member.name, member.member_type)

    def classify_kind(self, property_name: str, member_type: MemberType) -> Optional[GeneratorRule]:
        for rule in self.rules:
            if rule.matches(property_name, member_type):
                logger.debug(f"Member {property_name} ({member_type.value}) classified as {rule.category}")
                return rule
        return None

    def fallback_for(self, member_type: MemberType) -> Optional[GeneratorRule]:
        """The type fallback rule, ignoring name heuristics."""
        for rule in self._fallback_rules:
            if member_type in rule.member_types:
                return rule
        return None
