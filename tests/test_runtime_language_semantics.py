from __future__ import annotations

import datetime
import re
import unittest
from dataclasses import dataclass
from typing import NamedTuple

from matches import UNDEFINED, MatchEnvironment, Pass, UnregisteredExtractorError, VariantRegistry
from matches.compiler import compile_tree, count_captures
from matches.parser import parse
from matches.runtime import Runtime


@dataclass
class Point:
    x: int
    y: int


class Temperature:
    def __init__(self, celsius: float) -> None:
        self.celsius = celsius

    def unapply(self) -> list[float]:
        return [self.celsius]

    def unapply_mapping(self) -> dict[str, float]:
        return {"celsius": self.celsius, "fahrenheit": self.celsius * 9 / 5 + 32}


class Pair(NamedTuple):
    left: object
    right: object


class Opaque:
    pass


class Renamed:
    class_name = "Alias"


class LiteralAndStructureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.env = MatchEnvironment()

    def test_wildcard_and_identifier(self) -> None:
        self.assertEqual(self.env.extract("_", object()), ())
        self.assertEqual(self.env.extract("x", 5), (5,))
        self.assertEqual(self.env.extract("x, _, z", 1, 2, 3), (1, 3))
        self.assertIsNone(self.env.extract("x", 1, 2))
        self.assertIsNone(self.env.extract("x, y", 1))
        self.assertEqual(self.env.extract(""), ())

    def test_null_and_undefined_are_distinct(self) -> None:
        self.assertEqual(self.env.extract("null", None), ())
        self.assertIsNone(self.env.extract("null", UNDEFINED))
        self.assertEqual(self.env.extract("undefined", UNDEFINED), ())
        self.assertIsNone(self.env.extract("undefined", None))

    def test_boolean_literals_match_by_identity(self) -> None:
        self.assertEqual(self.env.extract("true", True), ())
        self.assertIsNone(self.env.extract("true", 1))
        self.assertIsNone(self.env.extract("false", 0))

    def test_number_literals(self) -> None:
        self.assertEqual(self.env.extract("1", 1), ())
        self.assertEqual(self.env.extract("1", 1.0), ())
        self.assertIsNone(self.env.extract("1", True))
        self.assertIsNone(self.env.extract("1", "1"))
        self.assertEqual(self.env.extract("-2.5", -2.5), ())
        self.assertEqual(self.env.extract("1e999", float("inf")), ())

    def test_string_literals(self) -> None:
        self.assertEqual(self.env.extract("'a'", "a"), ())
        self.assertIsNone(self.env.extract("'a'", "b"))
        self.assertIsNone(self.env.extract("'1'", 1))

    def test_empty_and_single_arrays(self) -> None:
        self.assertEqual(self.env.extract("[]", []), ())
        self.assertIsNone(self.env.extract("[]", [1]))
        self.assertEqual(self.env.extract("[x]", [1]), (1,))
        self.assertIsNone(self.env.extract("[x]", [1, 2]))
        self.assertIsNone(self.env.extract("[x]", []))

    def test_tuples_are_sequences_strings_are_not(self) -> None:
        self.assertEqual(self.env.extract("[a, b]", (1, 2)), (1, 2))
        self.assertIsNone(self.env.extract("[a, b]", "ab"))
        self.assertIsNone(self.env.extract("[...]", {"a": 1}))

    def test_rest_in_the_middle(self) -> None:
        self.assertEqual(self.env.extract("[x, ...y, z]", [1, 2, 2, 2, 3]), (1, [2, 2, 2], 3))
        self.assertEqual(self.env.extract("[x, ...y, z]", [1, 3]), (1, [], 3))
        self.assertIsNone(self.env.extract("[x, ...y, z]", [1]))
        self.assertEqual(self.env.extract("[x, ...y, z]", (1, 2, 3)), (1, [2], 3))

    def test_rest_spellings_and_wildcard_rest(self) -> None:
        self.assertEqual(self.env.extract("[head, tail...]", [1, 2, 3]), (1, [2, 3]))
        self.assertEqual(self.env.extract("[..., last]", [1, 2, 3]), (3,))
        self.assertEqual(self.env.extract("first, ...", 1, 2, 3), (1,))
        self.assertEqual(self.env.extract("...args", 1, 2, 3), ([1, 2, 3],))

    def test_rest_with_structured_subpattern_aggregates(self) -> None:
        self.assertEqual(self.env.extract("[...[a, b]]", [[1, 2], [3, 4]]), ([1, 3], [2, 4]))
        self.assertEqual(self.env.extract("[...[a, b]]", []), ([], []))
        self.assertIsNone(self.env.extract("[...[a, b]]", [[1, 2], [3]]))
        self.assertEqual(self.env.extract("[...{k, v}]", [{"k": 1, "v": 2}]), ([1], [2]))
        self.assertEqual(self.env.extract("[...1]", [1, 1]), ())
        self.assertIsNone(self.env.extract("[...1]", [1, 2]))

    def test_exact_object_keys(self) -> None:
        self.assertEqual(self.env.extract("{a, b}", {"a": 1, "b": 2}), (1, 2))
        self.assertIsNone(self.env.extract("{a, b}", {"a": 1, "b": 2, "c": 3}))
        self.assertIsNone(self.env.extract("{a, b}", {"a": 1}))
        self.assertEqual(self.env.extract("{}", {}), ())
        self.assertIsNone(self.env.extract("{}", {"a": 1}))
        self.assertIsNone(self.env.extract("{a}", [1]))

    def test_object_rests(self) -> None:
        self.assertEqual(self.env.extract("{a, b, c...}", {"a": 1, "b": 2, "c": 3}), (1, 2, {"c": 3}))
        self.assertEqual(self.env.extract("{a, ...}", {"a": 1, "z": 9}), (1,))
        self.assertIsNone(self.env.extract("{a, ...}", {"z": 9}))
        self.assertEqual(self.env.extract("{...rest, a}", {"a": 1, "b": 2}), ({"b": 2}, 1))
        self.assertEqual(self.env.extract("{a, ...rest}", {"a": 1}), (1, {}))

    def test_object_rest_capture_is_a_fresh_dict(self) -> None:
        value = {"a": 1, "b": 2}
        (rest,) = self.env.extract("{...rest}", value)
        self.assertEqual(rest, value)
        self.assertIsNot(rest, value)

    def test_object_key_values(self) -> None:
        self.assertEqual(self.env.extract("{a: [x, y]}", {"a": [1, 2]}), (1, 2))
        self.assertIsNone(self.env.extract("{a: [x, y]}", {"a": [1]}))
        self.assertEqual(self.env.extract("{'first name': n}", {"first name": "Ada"}), ("Ada",))
        self.assertEqual(self.env.extract("{kind: 'circle', r}", {"kind": "circle", "r": 2}), (2,))
        self.assertIsNone(self.env.extract("{kind: 'circle', r}", {"kind": "square", "r": 2}))

    def test_binders(self) -> None:
        self.assertEqual(self.env.extract("p@[x, y]", [1, 2]), ([1, 2], 1, 2))
        self.assertIsNone(self.env.extract("p@[x, y]", [1]))
        value = {"a": 1}
        self.assertEqual(self.env.extract("o@{a}", value), (value, 1))

    def test_capture_order_is_depth_first(self) -> None:
        got = self.env.extract("[a, {b, c: [d]}], e", [1, {"b": 2, "c": [3]}], 4)
        self.assertEqual(got, (1, 2, 3, 4))


class ClassPatternTests(unittest.TestCase):
    def setUp(self) -> None:
        self.env = MatchEnvironment()

    def test_builtin_type_tags(self) -> None:
        cases = [
            ("Null", None),
            ("Undefined", UNDEFINED),
            ("Boolean", False),
            ("Number", 3.5),
            ("String", "s"),
            ("Array", [1]),
            ("Array", (1,)),
            ("Object", {}),
            ("Function", len),
            ("Date", datetime.date(2024, 1, 2)),
            ("RegExp", re.compile("x")),
        ]
        for name, value in cases:
            with self.subTest(name=name, value=value):
                self.assertEqual(self.env.extract(name, value), ())

    def test_builtin_type_tags_reject_other_kinds(self) -> None:
        self.assertIsNone(self.env.extract("Number", True))
        self.assertIsNone(self.env.extract("Boolean", 0))
        self.assertIsNone(self.env.extract("String", ["s"]))
        self.assertIsNone(self.env.extract("Array", "abc"))
        self.assertIsNone(self.env.extract("Null", UNDEFINED))

    def test_class_name_tags(self) -> None:
        self.assertEqual(self.env.extract("Point", Point(1, 2)), ())
        self.assertIsNone(self.env.extract("Point", (1, 2)))
        self.assertEqual(self.env.extract("Alias", Renamed()), ())
        self.assertIsNone(self.env.extract("Renamed2", Renamed()))

    def test_positional_destructure(self) -> None:
        self.assertEqual(self.env.extract("Point(a, b)", Point(1, 2)), (1, 2))
        self.assertEqual(self.env.extract("Point(0, b)", Point(0, 2)), (2,))
        self.assertIsNone(self.env.extract("Point(0, b)", Point(1, 2)))
        self.assertIsNone(self.env.extract("Point(a)", Point(1, 2)))
        self.assertEqual(self.env.extract("Point(...xs)", Point(1, 2)), ([1, 2],))
        self.assertEqual(self.env.extract("Temperature(c)", Temperature(20)), (20,))
        self.assertEqual(self.env.extract("Pair(l, r)", Pair("a", "b")), ("a", "b"))
        self.assertEqual(self.env.extract("Array(a, b)", [1, 2]), (1, 2))

    def test_keyed_destructure(self) -> None:
        self.assertEqual(self.env.extract("Point{x, y}", Point(1, 2)), (1, 2))
        self.assertIsNone(self.env.extract("Point{x}", Point(1, 2)))
        self.assertEqual(self.env.extract("Point{x, ...}", Point(1, 2)), (1,))
        self.assertEqual(self.env.extract("Temperature{fahrenheit, ...}", Temperature(100)), (212.0,))
        self.assertEqual(self.env.extract("Pair{left, right}", Pair(1, 2)), (1, 2))
        self.assertEqual(self.env.extract("Object{a}", {"a": 1}), (1,))

    def test_missing_hook_is_a_mismatch(self) -> None:
        self.assertEqual(self.env.extract("Opaque", Opaque()), ())
        self.assertIsNone(self.env.extract("Opaque(x)", Opaque()))
        self.assertIsNone(self.env.extract("Opaque{x}", Opaque()))

    def test_binder_on_class_pattern(self) -> None:
        point = Point(3, 4)
        self.assertEqual(self.env.extract("p@Point(x, _)", point), (point, 3))


class ExtractorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.env = MatchEnvironment()

        @self.env.extractors.register("email")
        def email(value, ok):
            if isinstance(value, str) and "@" in value:
                return ok(value)
            return None

        self.env.extractors.register("upper", lambda value, ok: ok(value.upper()) if isinstance(value, str) else None)
        self.env.extractors.register("nothing", lambda value, ok: ok(None))

    def test_extractor_success_and_failure(self) -> None:
        self.assertEqual(self.env.extract("$email(x)", "a@b.c"), ("a@b.c",))
        self.assertIsNone(self.env.extract("$email(x)", "nope"))
        self.assertEqual(self.env.extract("$email", "a@b.c"), ())

    def test_extractor_transforms_value(self) -> None:
        self.assertEqual(self.env.extract("$upper(s)", "abc"), ("ABC",))
        self.assertEqual(self.env.extract("[$upper('A'), y]", ["a", 2]), (2,))

    def test_extractor_may_pass_none(self) -> None:
        self.assertEqual(self.env.extract("$nothing(null)", 5), ())
        self.assertEqual(self.env.extract("$nothing(v)", 5), (None,))

    def test_non_pass_result_is_failure(self) -> None:
        self.env.extractors.register("raw", lambda value, ok: value)
        self.assertIsNone(self.env.extract("$raw(x)", 1))

    def test_extractor_receives_pass_wrapper(self) -> None:
        self.env.extractors.register("sees_pass", lambda value, ok: Pass(ok is Pass))
        self.assertEqual(self.env.extract("$sees_pass(true)", 0), ())

    def test_unregistered_extractor_raises(self) -> None:
        with self.assertRaises(UnregisteredExtractorError) as ctx:
            self.env.extract("$missing(x)", 1)
        self.assertEqual(str(ctx.exception), "Extractor does not exist: missing")
        self.assertEqual(ctx.exception.name, "missing")
        self.assertIsInstance(ctx.exception, LookupError)

    def test_failed_fragment_stops_before_later_hooks(self) -> None:
        calls: list[object] = []
        self.env.extractors.register("spy", lambda value, ok: calls.append(value) or ok(value))
        self.assertIsNone(self.env.extract("[1, $spy]", [2, "x"]))
        self.assertEqual(calls, [])
        self.assertEqual(self.env.extract("[1, $spy]", [1, "x"]), ())
        self.assertEqual(calls, ["x"])

    def test_unregister(self) -> None:
        self.assertIsNotNone(self.env.extractors.unregister("upper"))
        self.assertNotIn("upper", self.env.extractors)
        self.assertIsNone(self.env.extractors.unregister("upper"))

    def test_registering_non_callable_fails(self) -> None:
        with self.assertRaises(TypeError):
            self.env.extractors["bad"] = 3


@dataclass
class Leaf:
    value: int


@dataclass
class Branch:
    left: object
    right: object


class SumTypeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = VariantRegistry()
        self.registry.register("Tree", Leaf, Branch)
        self.env = MatchEnvironment(sum_types=self.registry)

    def test_sum_type_membership(self) -> None:
        self.assertEqual(self.env.extract("Tree", Leaf(1)), ())
        self.assertEqual(self.env.extract("Tree", Branch(Leaf(1), Leaf(2))), ())
        self.assertIsNone(self.env.extract("Tree", Point(1, 2)))

    def test_sum_type_slots(self) -> None:
        self.assertEqual(self.env.extract("Tree(v)", Leaf(7)), (7,))
        self.assertEqual(self.env.extract("Branch(Leaf(a), Leaf(b))", Branch(Leaf(1), Leaf(2))), (1, 2))
        self.assertEqual(self.registry.arity(Branch(None, None)), 2)
        self.assertEqual(self.registry.slot(Branch("l", "r"), 1), "r")

    def test_without_registry_sum_name_does_not_match(self) -> None:
        self.assertIsNone(MatchEnvironment().extract("Tree", Leaf(1)))

    def test_registering_variant_without_slots_fails(self) -> None:
        with self.assertRaises(TypeError):
            self.registry.register("Bad", Opaque)


class CaptureCountTests(unittest.TestCase):
    def test_count_captures(self) -> None:
        cases = {
            "x": 1,
            "_": 0,
            "[x, ...y, z]": 3,
            "{a, b: [c, d], ...r}": 4,
            "p@Point(x, _)": 2,
            "$e(v)": 1,
            "[...[a, b]]": 2,
            "1, 'a', null": 0,
        }
        for text, want in cases.items():
            with self.subTest(text=text):
                tree = parse(text)
                self.assertEqual(count_captures(tree), want)
                compiled = compile_tree(tree, Runtime())
                self.assertEqual(compiled.arity, want)
                self.assertEqual(compiled.canonical, tree.canonical)


if __name__ == "__main__":
    unittest.main()
