import copy
import datetime
import inspect
import math

import pytest

from unionplan import (
    Alias,
    Case,
    Composite,
    CompositeRegistry,
    InvalidCaseAccess,
    NonExhaustiveMatchError,
    TypeKind,
    UnionOptions,
    UnionValue,
    UnknownCaseError,
    Value,
    build_model,
    realize,
)

from unionplan import runtime

from .conftest import result_cases, shape_cases


class TestResult:
    def test_success(self, Result):
        r = Result.make_success(42)
        assert r.is_success
        assert not r.is_failure
        assert r.try_as_success() == (True, 42)
        assert r.as_success() == 42
        assert r.try_as_failure() == (False, "")
        with pytest.raises(InvalidCaseAccess) as e:
            r.as_failure()
        assert e.value.expected == "Failure"
        assert e.value.actual == "Success"

    def test_failure(self, Result):
        r = Result.make_failure("bad")
        assert r.is_failure
        assert r.as_failure() == "bad"
        assert r.try_as_success() == (False, 0)
        assert r.as_success_or_default() == 0
        assert r.as_failure_or_default() == "bad"
        assert str(r) == "Failure(bad)"
        assert repr(r) == "Result.make_failure('bad')"

    def test_tag(self, Result):
        r = Result.make_failure("bad")
        assert r.tag == Result.Case.Failure
        assert r.tag == 2
        assert r.case_name == "Failure"
        assert isinstance(r, UnionValue)
        assert isinstance(r, Result)

    def test_keyword_construction(self, Result):
        assert Result.make_success(value=3).as_success() == 3
        assert list(inspect.signature(Result.make_success).parameters) == ["value"]
        with pytest.raises(TypeError):
            Result.make_success()
        with pytest.raises(TypeError):
            Result.make_success(1, 2)


class TestOption:
    def test_singleton_case(self, Option):
        none = Option.make_none()
        assert none.is_none
        assert not none.is_some
        assert none.try_as_some() == (False, 0)
        assert str(none) == "None"
        assert repr(none) == "Option.make_none()"
        assert none.tag == 0

    def test_some(self, Option):
        some = Option.make_some(5)
        assert some.as_some() == 5
        assert str(some) == "Some(5)"
        assert some != Option.make_none()


class TestEquality:
    def test_equal_values(self, Result):
        assert Result.make_success(1) == Result.make_success(1)
        assert Result.make_success(1) != Result.make_success(2)
        assert Result.make_failure("x") != Result.make_success(0)

    def test_reflexive_and_symmetric(self, Shape):
        values = [
            Shape.make_circle(1.0, "c"),
            Shape.make_circle(1.0, None),
            Shape.make_rect(1.0, 0.0, "c", None),
            Shape.make_empty(),
        ]
        for a in values:
            assert a == a
            for b in values:
                assert (a == b) == (b == a)

    def test_nan_is_equal_to_itself(self):
        Reading = realize(
            build_model(
                "Reading",
                [Alias("Celsius", "float"), Alias("Note", "object", TypeKind.REFERENCE)],
            )
        )
        for reading in (Reading.make_celsius(math.nan), Reading.make_note(math.nan)):
            assert reading == reading
        assert Reading.make_celsius(math.nan) == Reading.make_celsius(math.nan)
        assert hash(Reading.make_celsius(math.nan)) == hash(Reading.make_celsius(math.nan))
        assert Reading.make_note(math.nan) == Reading.make_note(math.nan)

    def test_other_types(self, Result):
        assert Result.make_success(1) != 1
        assert Result.make_success(1) != (1,)

    def test_absent_references(self, Shape):
        both_absent = Shape.make_rect(1.0, 2.0, "r", None)
        assert both_absent == Shape.make_rect(1.0, 2.0, "r", None)
        assert both_absent != Shape.make_rect(1.0, 2.0, "r", object())
        assert Shape.make_rect(1.0, 2.0, None, None) != Shape.make_rect(1.0, 2.0, "", None)

    def test_hash_agrees_with_equality(self, Result):
        assert hash(Result.make_success(7)) == hash(Result.make_success(7))
        assert len({Result.make_success(7), Result.make_success(7), Result.make_failure("7")}) == 2

    def test_inactive_slots_do_not_matter(self, Shape):
        # Same case and values means equal, whatever the shared slots held
        # for other cases.
        assert Shape.make_circle(1.0, "c") == Shape.make_circle(1.0, "c")
        assert Shape.make_empty() == Shape.make_empty()


class TestOverlay:
    def test_inactive_slots_hold_defaults(self, Shape):
        circle = Shape.make_circle(1.5, "c")
        assert circle._values == (1.5, 0.0)
        assert circle._bucket == ("c", None)

        empty = Shape.make_empty()
        assert empty._values == (0.0, 0.0)
        assert empty._bucket == ("", None)

    def test_shared_positions_are_not_reinterpreted(self, Shape):
        circle = Shape.make_circle(1.5, "c")
        assert circle.try_as_rect() == (False, 0.0, 0.0, "", None)
        with pytest.raises(InvalidCaseAccess):
            circle.as_rect()
        assert circle.as_rect_or_default() == (0.0, 0.0, "", None)

    def test_round_trip(self, Shape):
        owner = object()
        rect = Shape.make_rect(1.0, 2.0, "r", owner)
        ok, width, height, label, got_owner = rect.try_as_rect()
        assert ok
        assert (width, height, label) == (1.0, 2.0, "r")
        assert got_owner is owner

    def test_unshared_layout_behaves_the_same(self):
        Shape = realize(build_model("Shape", shape_cases(), UnionOptions(share_reference_slots=False)))
        rect = Shape.make_rect(1.0, 2.0, "r", None)
        assert rect._bucket == ("", "r", None)
        assert rect.as_rect() == (1.0, 2.0, "r", None)
        assert Shape.make_circle(0.5, "c").as_circle() == (0.5, "c")


class TestImmutability:
    def test_no_assignment(self, Result):
        r = Result.make_success(1)
        with pytest.raises(AttributeError):
            r.value = 2
        with pytest.raises(AttributeError):
            r._tag = 2
        with pytest.raises(AttributeError):
            del r._tag

    def test_no_direct_construction(self, Result):
        with pytest.raises(TypeError):
            Result()

    def test_copies_are_the_same_instance(self, Result):
        r = Result.make_failure("x")
        assert copy.copy(r) is r
        assert copy.deepcopy(r) is r


class TestDispatch:
    def test_match(self, Result):
        handlers = dict(success=lambda v: v * 2, failure=lambda reason: reason.upper())
        assert Result.make_success(21).match(**handlers) == 42
        assert Result.make_failure("bad").match(**handlers) == "BAD"

    def test_match_requires_every_case(self, Result):
        with pytest.raises(NonExhaustiveMatchError) as e:
            Result.make_success(1).match(success=lambda v: v)
        assert e.value.missing == ("Failure",)

    def test_match_otherwise(self, Result):
        r = Result.make_failure("bad")
        assert r.match(success=lambda v: v, otherwise=lambda: "fallback") == "fallback"
        assert Result.make_success(3).match(success=lambda v: v, otherwise=lambda: 0) == 3

    def test_match_unknown_case(self, Result):
        with pytest.raises(UnknownCaseError):
            Result.make_success(1).match(success=abs, failure=str, pending=str)

    def test_matcher_is_reusable(self, Result):
        describe = Result.matcher(success=lambda v: f"ok {v}", failure=lambda r: f"error {r}")
        assert [describe(r) for r in (Result.make_success(1), Result.make_failure("x"))] == [
            "ok 1",
            "error x",
        ]

    def test_matcher_validates_up_front(self, Result):
        with pytest.raises(NonExhaustiveMatchError):
            Result.matcher(failure=str)

    def test_match_validates_each_handler_set_once(self, Result, monkeypatch):
        calls = []
        check_exhaustive = runtime.check_exhaustive

        def counting(*args):
            calls.append(args)
            return check_exhaustive(*args)

        monkeypatch.setattr(runtime, "check_exhaustive", counting)
        for value in (1, 2, 3):
            Result.make_success(value).match(success=abs, failure=len)
        assert len(calls) == 1

        Result.make_failure("x").match(success=abs, otherwise=lambda: 0)
        assert len(calls) == 2

    def test_singleton_handlers_take_no_arguments(self, Option):
        handlers = dict(none=lambda: "nothing", some=lambda v: f"some {v}")
        assert Option.make_none().match(**handlers) == "nothing"
        assert Option.make_some(2).match(**handlers) == "some 2"

    def test_visit(self, Result):
        class Describe:
            def visit_success(self, value):
                return f"ok {value}"

            def visit_failure(self, reason):
                return f"error {reason}"

        assert Result.make_success(1).visit(Describe()) == "ok 1"
        assert Result.make_failure("x").visit(Describe()) == "error x"

    def test_visit_otherwise(self, Result):
        class OnlySuccess:
            def visit_success(self, value):
                return value

            def visit_otherwise(self, instance):
                return instance.case_name

        assert Result.make_failure("x").visit(OnlySuccess()) == "Failure"

    def test_incomplete_visitor(self, Result):
        class OnlySuccess:
            def visit_success(self, value):
                return value

        # Rejected even if the active case is handled.
        with pytest.raises(NonExhaustiveMatchError):
            Result.make_success(1).visit(OnlySuccess())


class TestOptions:
    def test_disabled_families(self):
        options = UnionOptions(
            generate_equality=False,
            generate_hashing=False,
            generate_to_string=False,
            generate_exhaustive_match=False,
        )
        Result = realize(build_model("Result", result_cases(), options))
        a, b = Result.make_success(1), Result.make_success(1)
        assert a != b
        assert a == a
        assert not hasattr(Result, "match")
        assert not hasattr(Result, "visit")
        assert str(a).startswith("<")

    def test_equality_without_hashing(self):
        Result = realize(build_model("Result", result_cases(), UnionOptions(generate_hashing=False)))
        assert Result.make_success(1) == Result.make_success(1)
        with pytest.raises(TypeError):
            hash(Result.make_success(1))

    def test_custom_tag_names(self):
        options = UnionOptions(tag_name="kind", tag_type_name="Kind")
        Result = realize(build_model("Result", result_cases(), options))
        assert Result.make_failure("x").kind == Result.Kind.Failure


class TestDecomposition:
    POINT = Composite("Point", [Value("x", "int"), Value("y", "int")])

    def realize_event(self, composer=None):
        registry = CompositeRegistry(
            [Composite("Point", self.POINT.members, composer=composer)]
        )
        model = build_model(
            "Event",
            [
                Case("Moved", values=[Value("to", "Point", TypeKind.DECOMPOSABLE), Value("by", "str", TypeKind.REFERENCE)]),
                Case("Closed"),
            ],
            registry=registry,
        )
        return realize(model)

    def test_round_trip(self):
        Event = self.realize_event()
        moved = Event.make_moved((1, 2), "mouse")
        assert moved._values == (1, 2)
        to, by = moved.as_moved()
        assert (to.x, to.y) == (1, 2)
        assert by == "mouse"

    def test_mapping_and_attribute_arguments(self):
        Event = self.realize_event()

        class Point:
            x = 3
            y = 4

        assert Event.make_moved({"x": 1, "y": 2}, "a") == Event.make_moved((1, 2), "a")
        assert Event.make_moved(Point(), "b")._values == (3, 4)

    def test_custom_composer(self):
        Event = self.realize_event(composer=lambda x, y: complex(x, y))
        assert Event.make_moved((1, 2), "a").as_moved() == (complex(1, 2), "a")

    def test_try_accessor_defaults(self):
        Event = self.realize_event()
        assert Event.make_closed().try_as_moved() == (False, None, "")


class TestSingletonMarkers:
    def realize_clock(self):
        return realize(
            build_model(
                "Clock",
                [
                    Case("Tick", values=[Value("marker", "Unit", TypeKind.SINGLETON), Value("count", "int")]),
                    Case("Beat", values=[Value("marker", "Unit", TypeKind.SINGLETON)]),
                ],
            )
        )

    def test_markers_are_not_arguments(self):
        Clock = self.realize_clock()
        assert list(inspect.signature(Clock.make_tick).parameters) == ["count"]
        with pytest.raises(TypeError):
            Clock.make_tick(object(), 3)

    def test_round_trip(self):
        tick = self.realize_clock().make_tick(3)
        assert tick.try_as_tick() == (True, 3)
        assert tick.as_tick() == 3
        assert tick.match(tick=lambda count: count, beat=lambda: 0) == 3
        assert str(tick) == "Tick(3)"
        assert tick._values == (3,)
        assert tick._bucket == ()

    def test_marker_only_case_is_a_singleton(self):
        beat = self.realize_clock().make_beat()
        assert beat.is_beat
        assert str(beat) == "Beat"
        assert not hasattr(beat, "as_beat")
        assert beat.try_as_tick() == (False, 0)


def test_mutable_defaults_are_not_shared():
    model = build_model(
        "Bag",
        [Case("Items", values=[Value("items", "List", TypeKind.REFERENCE)]), Case("Empty")],
        defaults={"List": list},
    )
    Bag = realize(model)
    first = Bag.make_empty().as_items_or_default()
    first.append(1)
    assert Bag.make_empty().as_items_or_default() == []


class TestTypeConversions:
    def realize_scalar(self):
        model = build_model(
            "Scalar",
            [
                Alias("Number", "int"),
                Alias("Flag", "bool"),
                Alias("Text", "str", TypeKind.REFERENCE),
                Alias("When", "Date", TypeKind.REFERENCE),
                Alias("Anything", "T", TypeKind.TYPE_PARAMETER),
                Case("Missing"),
            ],
            UnionOptions(generate_type_conversions=True),
            types={"Date": datetime.date},
        )
        return realize(model)

    def test_disabled_by_default(self, Result):
        assert not hasattr(Result, "try_create_from")
        assert not hasattr(Result, "try_get")

    def test_try_create_from(self):
        Scalar = self.realize_scalar()
        assert Scalar.try_create_from(3) == (True, Scalar.make_number(3))
        assert Scalar.try_create_from("x") == (True, Scalar.make_text("x"))

        day = datetime.date(2024, 1, 2)
        ok, when = Scalar.try_create_from(day)
        assert ok and when.as_when() == day

        assert Scalar.try_create_from(1.5) == (False, None)

    def test_exact_type_wins(self):
        Scalar = self.realize_scalar()
        ok, flag = Scalar.try_create_from(True)
        assert ok
        assert flag.is_flag

    def test_subclasses_are_accepted(self):
        Scalar = self.realize_scalar()
        moment = datetime.datetime(2024, 1, 2, 3, 4)
        ok, when = Scalar.try_create_from(moment)
        assert ok and when.is_when

    def test_try_get(self):
        Scalar = self.realize_scalar()
        number = Scalar.make_number(3)
        assert number.try_get(int) == (True, 3)
        assert number.try_get("int") == (True, 3)
        assert number.try_get(str) == (False, "")
        assert number.try_get(bool) == (False, False)
        assert Scalar.make_flag(True).try_get(int) == (True, True)

    def test_try_get_by_declared_name(self):
        Scalar = self.realize_scalar()
        assert Scalar.make_anything([1]).try_get("T") == (True, [1])
        assert Scalar.make_missing().try_get("float") == (False, 0.0)
        assert Scalar.make_missing().try_get(float) == (False, None)
