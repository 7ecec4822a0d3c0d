"""
Arguments module unit tests (Flag, Option, Positional, Group).

Scope
- Validate spec construction: names, relations, value settings and slots.
- Validate read-only introspection and representations.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (Flag, Option, Positional, Group).
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from clasp import Flag, Option, Positional, Group


class TestFlag(TestCase):
    """Construction and validation of Flag specs."""

    def testFlagRequiresAtLeastOneName(self):
        with self.assertRaises(TypeError):
            Flag("verbose")

    def testFlagShortAndLongExposed(self):
        flag = Flag("verbose", "-v", "--verbose")
        self.assertEqual(flag.names, ("-v", "--verbose"))
        self.assertEqual(flag.short, "v")
        self.assertEqual(flag.long, "verbose")
        self.assertEqual(flag.kind, "flag")
        self.assertFalse(flag.values)

    def testFlagLongOnlyHasNoShort(self):
        flag = Flag("dry-run", "--dry-run")
        self.assertIsNone(flag.short)
        self.assertEqual(flag.long, "dry-run")

    def testFlagNamesRejectUnderscore(self):
        with self.assertRaises(ValueError):
            Flag("flag", "--my_flag")

    def testFlagNamesRejectLongSingleDash(self):
        with self.assertRaises(ValueError):
            Flag("flag", "-flag")

    def testFlagDuplicateNamesRejected(self):
        with self.assertRaises(ValueError):
            Flag("verbose", "-v", "-v")

    def testFlagNamesAllowI18N(self):
        flag = Flag("nombre", "-ñ", "--ñame")
        self.assertEqual(flag.short, "ñ")
        self.assertEqual(flag.long, "ñame")

    def testNameWhitespaceRejected(self):
        with self.assertRaises(ValueError):
            Flag("my flag", "-m")

    def testNameIsTrimmed(self):
        self.assertEqual(Flag("  quiet ", "-q").name, "quiet")

    def testDescrDefaultsToNone(self):
        self.assertIsNone(Flag("quiet", "-q").descr)

    def testDescrEmptyRejected(self):
        with self.assertRaises(ValueError):
            Flag("quiet", "-q", descr="   ")

    def testRelationsAreTuples(self):
        flag = Flag("alpha", "-a", requires=["beta", "gamma"], conflicts={"delta": 1})
        self.assertEqual(flag.requires, ("beta", "gamma"))
        self.assertEqual(flag.conflicts, ("delta",))
        self.assertEqual(flag.overrides, ())

    def testRelationRejectsPlainString(self):
        with self.assertRaises(TypeError):
            Flag("alpha", "-a", requires="beta")

    def testRelationRejectsDuplicates(self):
        with self.assertRaises(ValueError):
            Flag("alpha", "-a", conflicts=("beta", "beta"))

    def testSelfReferenceRejected(self):
        for field in ("requires", "conflicts", "overrides"):
            with self.subTest(field=field), self.assertRaises(ValueError):
                Flag("alpha", "-a", **{field: ("alpha",)})

    def testTerminatorCannotBeRequired(self):
        with self.assertRaises(TypeError):
            Flag("help", "-h", terminator=True, required=True)

    def testPropertiesAreReadOnly(self):
        flag = Flag("verbose", "-v")
        with self.assertRaises(AttributeError):
            flag.name = "quiet"

    def testRepresentation(self):
        self.assertTrue(repr(Flag("verbose", "-v")).startswith("flag(name='verbose', names=('-v',)"))


class TestOption(TestCase):
    """Construction and validation of Option specs."""

    def testOptionDefaults(self):
        option = Option("output", "-o", "--output")
        self.assertEqual(option.kind, "option")
        self.assertFalse(option.values)
        self.assertIsNone(option.nargs)
        self.assertIsNone(option.delimiter)
        self.assertIsNone(option.default)
        self.assertEqual(option.choices, ())

    def testNargsAboveOneImpliesValues(self):
        self.assertTrue(Option("point", "--point", nargs=2).values)
        self.assertFalse(Option("point", "--point", nargs=1).values)

    def testNargsRejectsBool(self):
        with self.assertRaises(TypeError):
            Option("point", "--point", nargs=True)

    def testNargsRejectsZero(self):
        with self.assertRaises(ValueError):
            Option("point", "--point", nargs=0)

    def testDelimiterMustBeSingleCharacter(self):
        with self.assertRaises(ValueError):
            Option("tags", "--tags", delimiter=",,")
        with self.assertRaises(ValueError):
            Option("tags", "--tags", delimiter=" ")
        with self.assertRaises(TypeError):
            Option("tags", "--tags", delimiter=1)

    def testChoicesDuplicatesRejected(self):
        with self.assertRaises(ValueError):
            Option("color", "--color", choices=("red", "red"))

    def testChoicesFrozen(self):
        option = Option("color", "--color", choices=["red", "blue"], default="red")
        self.assertEqual(option.choices, ("red", "blue"))
        self.assertEqual(option.default, "red")


class TestPositional(TestCase):
    """Construction and validation of Positional specs."""

    def testPositionalDefaults(self):
        positional = Positional("input")
        self.assertEqual(positional.kind, "positional")
        self.assertIsNone(positional.index)
        self.assertFalse(positional.multiple)
        self.assertFalse(positional.values)
        self.assertFalse(positional.trailing)

    def testExplicitIndex(self):
        self.assertEqual(Positional("input", 2).index, 2)

    def testIndexRejectsZero(self):
        with self.assertRaises(ValueError):
            Positional("input", 0)

    def testIndexRejectsBool(self):
        with self.assertRaises(TypeError):
            Positional("input", True)

    def testTrailingRequiresMultiple(self):
        with self.assertRaises(TypeError):
            Positional("rest", trailing=True)

    def testValuesFollowMultiple(self):
        self.assertTrue(Positional("files", multiple=True).values)


class TestGroup(TestCase):
    """Construction and replacement of Group specs."""

    def testGroupDefaults(self):
        group = Group("format", ("json", "yaml"))
        self.assertEqual(group.members, ("json", "yaml"))
        self.assertTrue(group.multiple)
        self.assertFalse(group.required)
        self.assertEqual(group.requires, ())

    def testGroupCannotContainItself(self):
        with self.assertRaises(ValueError):
            Group("format", ("json", "format"))

    def testGroupReplaceKeepsSettings(self):
        group = Group("format", ("json",), requires=("output",), multiple=False, descr="output format")
        replaced = copy.replace(group, members=("json", "yaml"))
        self.assertEqual(replaced.members, ("json", "yaml"))
        self.assertEqual(replaced.requires, ("output",))
        self.assertFalse(replaced.multiple)
        self.assertEqual(replaced.descr, "output format")
        self.assertEqual(group.members, ("json",))

    def testRepresentation(self):
        self.assertTrue(repr(Group("format")).startswith("group(name='format'"))


if __name__ == "__main__":
    unittest.main()
