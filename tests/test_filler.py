"""Tests for the object filler and sequence builder."""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import Mock

import pytest

from objmocker import ConfigurationError, ObjectMocker

from sample_models import (
    BlogComment, BlogCommenter, BlogPost, CanadianLocation, ClassWithShortProperty, Customer,
    Empty, Employee, FrozenPoint, Order, OrderStatus, Person, TreeNode,
)


FILLER_LOGGER = "objmocker.core.filler"


class TestObjectFiller:
    """Test filling by convention."""

    def test_fills_new_instance(self, mocker_engine):
        person = mocker_engine.new(Person)

        assert isinstance(person, Person)
        assert person.first_name
        assert person.last_name
        assert "@" in person.email_address
        assert person.phone_number
        assert person.age > 0
        assert person.number_of_kids > 0
        assert isinstance(person.birth_date, datetime)

    def test_fills_existing_instance_in_place(self, mocker_engine):
        person = Person()

        result = mocker_engine.new(person)

        assert result is person
        assert person.first_name

    def test_pre_set_values_preserved(self, mocker_engine):
        person = Person(first_name="Ann", age=3)

        mocker_engine.new(person)

        assert person.first_name == "Ann"
        assert person.age == 3
        assert person.last_name

    def test_explicit_override_wins_over_pre_set_value(self, mocker_engine):
        mocker_engine.configure(Person).fill("first_name", "Bob")

        person = mocker_engine.new(Person(first_name="Ann"))

        assert person.first_name == "Bob"

    def test_private_members_untouched(self, mocker_engine):
        assert mocker_engine.new(Person).get_middle_name() == ""

    def test_pydantic_model(self, mocker_engine):
        location = mocker_engine.new(CanadianLocation)

        assert location.address
        assert location.city
        assert location.province
        assert location.postal_code

    def test_plain_class_attributes_and_properties(self, mocker_engine):
        commenter = mocker_engine.new(BlogCommenter)

        assert commenter.name
        assert commenter.nickname
        assert commenter.joined == datetime(2000, 1, 1)

    def test_special_types(self, mocker_engine):
        order = mocker_engine.new(Order)

        assert isinstance(order.reference, uuid.UUID)
        assert isinstance(order.status, OrderStatus)
        assert isinstance(order.total, Decimal)
        assert order.total > 0
        assert isinstance(order.weight, float)
        assert type(order.placed_on) is date

    def test_required_constructor_fields(self, mocker_engine):
        employee = mocker_engine.new(Employee)

        assert 1 <= employee.employee_id <= 100
        assert employee.company
        assert isinstance(employee.manager, Person)
        assert employee.manager.first_name

    def test_nested_complex_members(self, mocker_engine):
        order = mocker_engine.new(Order)

        assert isinstance(order.customer, Customer)
        assert order.customer.full_name
        assert order.customer.address.street_address

    @pytest.mark.parametrize("depth,customer_filled,address_filled", [
        (1, False, False),
        (2, True, False),
        (3, True, True),
    ])
    def test_recursion_depth_limit(self, mocker_engine, depth, customer_filled, address_filled):
        mocker_engine.defaults().max_recursion_depth(depth)

        order = mocker_engine.new(Order)

        assert (order.customer is not None) == customer_filled
        if customer_filled:
            assert (order.customer.address is not None) == address_filled

    def test_self_reference_not_followed(self, mocker_engine):
        node = mocker_engine.new(TreeNode)

        assert node.label
        assert node.parent is None
        assert node.children == []

    def test_list_of_complex_members(self, mocker_engine):
        mocker_engine.defaults().list_count(3)

        post = mocker_engine.new(BlogPost)

        assert len(post.comments) == 3
        for comment in post.comments:
            assert isinstance(comment, BlogComment)
            assert comment.comment
            assert isinstance(comment.comment_date, datetime)
        # Lists of primitives are not generated
        assert post.tags == []

    def test_non_empty_list_preserved(self, mocker_engine):
        existing = [BlogComment(comment="first!")]

        post = mocker_engine.new(BlogPost(comments=existing))

        assert post.comments is existing

    def test_frozen_and_empty_classes(self, mocker_engine):
        assert mocker_engine.new(FrozenPoint) == FrozenPoint()
        assert isinstance(mocker_engine.new(Empty), Empty)

    def test_generator_errors_propagate(self, mocker_engine):
        mocker_engine.configure(Person).fill("age", lambda: 1 / 0)

        with pytest.raises(ZeroDivisionError):
            mocker_engine.new(Person)


class TestOverrides:
    """Test explicit property and method overrides."""

    def test_range_override(self, mocker_engine):
        mocker_engine.configure(Person).fill("age").within_range(20, 22)

        for person in mocker_engine.list_of(Person, 100):
            assert 20 <= person.age <= 22

    def test_fractional_integer_range_stays_inside_bounds(self, mocker_engine):
        mocker_engine.configure(Person).fill("number_of_kids").within_range(1.5, 2.5)

        assert {person.number_of_kids for person in mocker_engine.list_of(Person, 30)} == {2}

    def test_integer_range_without_integers_raises(self, mocker_engine):
        mocker_engine.configure(Person).fill("number_of_kids").within_range(1.2, 1.8)

        with pytest.raises(ConfigurationError, match="No integer"):
            mocker_engine.new(Person)

    def test_fractional_short_range(self, mocker_engine):
        mocker_engine.configure(ClassWithShortProperty).fill("short_property").within_range(6.5, 7.5)

        assert mocker_engine.new(ClassWithShortProperty).short_property == 7

    def test_decimal_range_narrower_than_a_cent(self, mocker_engine):
        """Test bounds finer than two places are sampled at their own precision."""
        low, high = Decimal("1.001"), Decimal("1.009")
        mocker_engine.configure(Order).fill("total").within_range(low, high)

        for order in mocker_engine.list_of(Order, 30):
            assert isinstance(order.total, Decimal)
            assert low <= order.total <= high

    def test_decimal_range_keeps_two_places(self, mocker_engine):
        mocker_engine.configure(Order).fill("total").within_range(Decimal("1.5"), Decimal("2.5"))

        for order in mocker_engine.list_of(Order, 30):
            assert Decimal("1.5") <= order.total <= Decimal("2.5")
            assert order.total == order.total.quantize(Decimal("0.01"))

    def test_date_range_override(self, mocker_engine):
        mocker_engine.configure(Order).fill("placed_on").within_range(
            date(2021, 3, 1), date(2021, 3, 2))

        for order in mocker_engine.list_of(Order, 20):
            assert order.placed_on in (date(2021, 3, 1), date(2021, 3, 2))

    def test_range_on_string_member_warns_once(self, mocker_engine, caplog):
        mocker_engine.configure(Person).fill("first_name").within_range(1, 5)

        with caplog.at_level(logging.WARNING, logger=FILLER_LOGGER):
            people = mocker_engine.list_of(Person, 3)

        assert all(person.first_name == "" for person in people)
        warnings = [r for r in caplog.records if "cannot be bounded" in r.getMessage()]
        assert len(warnings) == 1

    def test_generator_called_once_per_instance(self, mocker_engine):
        generator = Mock(return_value=11)
        mocker_engine.configure(Person).fill("age", generator)

        people = mocker_engine.list_of(Person, 3)

        assert generator.call_count == 3
        assert all(person.age == 11 for person in people)

    def test_values_override(self, mocker_engine):
        mocker_engine.configure(Person).fill("first_name").with_values(["Ann", "Bob"])

        for person in mocker_engine.list_of(Person, 20):
            assert person.first_name in ("Ann", "Bob")

    def test_unknown_property_warns(self, mocker_engine, caplog):
        mocker_engine.configure(Person).fill("shoe_size", 9)

        with caplog.at_level(logging.WARNING, logger=FILLER_LOGGER):
            person = mocker_engine.new(Person)

        assert not hasattr(person, "shoe_size")
        assert "Person.shoe_size does not exist" in caplog.text

    def test_read_only_property_warns(self, mocker_engine, caplog):
        mocker_engine.configure(BlogCommenter).fill("joined", datetime(2020, 1, 1))

        with caplog.at_level(logging.WARNING, logger=FILLER_LOGGER):
            commenter = mocker_engine.new(BlogCommenter)

        assert commenter.joined == datetime(2000, 1, 1)
        assert "BlogCommenter.joined is read-only" in caplog.text

    def test_method_fill(self, mocker_engine):
        mocker_engine.configure(Person).fill_method(lambda p: p.set_middle_name, "q")

        assert mocker_engine.new(Person).get_middle_name() == "q"

    def test_method_fill_with_random(self, mocker_engine):
        candidates = ["aaa", "bbb", "ccc"]
        mocker_engine.configure(Person).fill_method("set_middle_name").with_random(candidates)

        for person in mocker_engine.list_of(Person, 10):
            assert person.get_middle_name() in candidates

    def test_unknown_method_warns(self, mocker_engine, caplog):
        mocker_engine.configure(Person).fill_method("set_shoe_size", 9)

        with caplog.at_level(logging.WARNING, logger=FILLER_LOGGER):
            mocker_engine.new(Person)
            mocker_engine.new(Person)

        warnings = [r for r in caplog.records if "set_shoe_size" in r.getMessage()]
        assert len(warnings) == 1

    def test_one_shot_applies_to_next_fill_only(self, mocker_engine):
        mocker_engine.set_once(Person).fill("age", 7)

        assert mocker_engine.new(Person).age == 7
        assert 18 <= mocker_engine.new(Person).age <= 90

    def test_one_shot_applies_to_whole_list(self, mocker_engine):
        mocker_engine.set_once(Person).fill("age", 7)

        assert {person.age for person in mocker_engine.list_of(Person, 5)} == {7}
        assert not mocker_engine.store.has_pending(Person)


class TestSequenceBuilder:
    """Test list building."""

    def test_default_count(self, mocker_engine):
        assert len(mocker_engine.list_of(Person)) == 25

    def test_explicit_count(self, mocker_engine):
        people = mocker_engine.list_of(Person, 13)

        assert len(people) == 13
        assert len({id(person) for person in people}) == 13

    def test_zero_count(self, mocker_engine):
        assert mocker_engine.list_of(Person, 0) == []

    def test_negative_count(self, mocker_engine):
        with pytest.raises(ValueError):
            mocker_engine.list_of(Person, -1)


class TestEngineIsolation:
    """Test independent engines."""

    def test_configuration_not_shared(self):
        first, second = ObjectMocker(), ObjectMocker()
        first.configure(Person).fill("age", 1)
        first.defaults().list_count(2)

        assert first.new(Person).age == 1
        assert 18 <= second.new(Person).age <= 90
        assert len(second.list_of(Person)) == 25

    def test_seed_reproducible(self):
        def build():
            engine = ObjectMocker()
            engine.defaults() \
                .date_range(datetime(1990, 1, 1), datetime(1999, 12, 31)) \
                .seed(42)
            return engine.list_of(Person, 5)

        assert build() == build()

    def test_reset_restores_factory_state(self, mocker_engine):
        mocker_engine.configure(Person).fill("age", 1)
        mocker_engine.defaults().list_count(2)
        mocker_engine.register_generator("shoe_size", lambda p: 9)

        mocker_engine.reset()

        assert len(mocker_engine.list_of(Person)) == 25
        assert all(person.age != 1 for person in mocker_engine.list_of(Person, 10))
        assert not mocker_engine.catalog.has("shoe_size")
