"""
Resolver module unit tests (requirement propagation, overrides, group discharge).

Scope
- Drive resolve/process directly against a Matches record, the way the parse
  loop does: record first, then process.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from clasp import Command, Flag, Option, Group, Matches
from clasp.resolver import (
    ResolverState,
    REQUIRED,
    OVERRIDES,
    propagate,
    discard,
    retract,
    process,
    pending,
)


def _tool():
    return Command(
        "tool",
        Flag("alpha", "-a", requires=("beta",)),
        Flag("beta", "-b", requires=("gamma",)),
        Flag("gamma", "-g"),
        Flag("delta", "-d", overrides=("beta",)),
        Option("mode", "-m", groups=("source",), required=True),
        Option("file", "-f", groups=("source",)),
        groups=(Group("source", requires=("gamma",)),),
    )


class _Driver:
    """Record-then-process helper mirroring one parse."""

    def __init__(self, command):
        self.command = command
        self.matches = Matches(command)
        self.state = ResolverState.initial(command)

    def match(self, name, *values):
        self.matches.record(name, *values)
        self.state = process(self.command, self.state, self.command.find(name), self.matches)
        return self.state


class TestResolverState(TestCase):
    """State seeding and the generic propagate/discard/retract operations."""

    def testInitialStateSeedsRequired(self):
        tool = Command(
            "tool",
            Flag("alpha", "-a", required=True),
            Flag("beta", "-b", groups=("either",)),
            Flag("gamma", "-g", required=True),
            groups=(Group("either", required=True),),
        )
        state = ResolverState.initial(tool)
        self.assertEqual(state.required, ("alpha", "gamma", "either"))
        self.assertEqual(state.overrides, ())
        self.assertIsNone(state.cache)
        self.assertFalse(state.trailing)
        self.assertFalse(state.found)

    def testPropagateDeduplicatesAndSkipsPresent(self):
        tool = _tool()
        matches = Matches(tool)
        matches.record("gamma")
        state = propagate(ResolverState(required=("beta",)), REQUIRED, ("beta", "gamma", "alpha"), matches)
        self.assertEqual(state.required, ("beta", "alpha"))

    def testPropagateWithoutMatchesKeepsEverything(self):
        state = propagate(ResolverState(), OVERRIDES, ("beta", "gamma"))
        self.assertEqual(state.overrides, ("beta", "gamma"))

    def testDiscard(self):
        state = discard(ResolverState(required=("alpha", "beta", "gamma")), REQUIRED, ("beta", "delta"))
        self.assertEqual(state.required, ("alpha", "gamma"))

    def testRetractKeepsNamesStillContributed(self):
        tool = Command(
            "tool",
            Flag("x", "-x", requires=("z",)),
            Flag("y", "-y", requires=("z",)),
            Flag("z", "-z"),
        )
        matches = Matches(tool)
        matches.record("y")
        state = retract(tool, ResolverState(required=("z",)), REQUIRED, ("z",), matches)
        self.assertEqual(state.required, ("z",))
        matches.remove("y")
        state = retract(tool, state, REQUIRED, ("z",), matches)
        self.assertEqual(state.required, ())

    def testRetractKeepsDeclaredRequirements(self):
        tool = Command("tool", Flag("x", "-x", requires=("z",)), Flag("z", "-z", required=True))
        state = retract(tool, ResolverState(required=("z",)), REQUIRED, ("z",), Matches(tool))
        self.assertEqual(state.required, ("z",))


class TestResolve(TestCase):
    """resolve/process through the record-then-process driver."""

    def testRequirementBecomesPending(self):
        driver = _Driver(_tool())
        state = driver.match("alpha")
        self.assertEqual(state.required, ("mode", "beta"))
        self.assertEqual(pending(state, driver.matches), ("mode", "beta"))
        self.assertTrue(state.found)
        self.assertEqual(state.cache, "alpha")

    def testRequirementAlreadyPresentIsSkipped(self):
        driver = _Driver(_tool())
        driver.match("beta")
        state = driver.match("alpha")
        self.assertEqual(state.required, ("mode", "gamma"))

    def testRequirementsPropagateOnePass(self):
        driver = _Driver(_tool())
        state = driver.match("alpha")
        # beta's own requirement only appears once beta itself is matched
        self.assertNotIn("gamma", state.required)
        state = driver.match("beta")
        self.assertEqual(pending(state, driver.matches), ("mode", "gamma"))

    def testProcessIsCachedForConsecutiveMatches(self):
        driver = _Driver(_tool())
        state = driver.match("alpha")
        self.assertIs(process(driver.command, state, driver.command.find("alpha"), driver.matches), state)

    def testOverrideRemovesSupersededAndItsRequirements(self):
        driver = _Driver(_tool())
        driver.match("beta")
        state = driver.match("delta")
        self.assertFalse(driver.matches.is_present("beta"))
        self.assertEqual(state.overrides, ("beta",))
        self.assertNotIn("gamma", state.required)
        self.assertEqual(pending(state, driver.matches), ("mode",))

    def testOverriddenArgumentReturnsAndWins(self):
        driver = _Driver(_tool())
        driver.match("delta")
        state = driver.match("beta")
        self.assertFalse(driver.matches.is_present("delta"))
        self.assertTrue(driver.matches.is_present("beta"))
        self.assertEqual(state.overrides, ())
        self.assertEqual(state.required, ("mode", "gamma"))

    def testGroupDischargesMembersAndAddsRequires(self):
        driver = _Driver(_tool())
        state = driver.match("file", "input.txt")
        self.assertEqual(state.required, ("gamma",))
        self.assertEqual(pending(state, driver.matches), ("gamma",))

    def testLastGroupWins(self):
        tool = Command(
            "tool",
            Flag("x", "-x", groups=("first", "second")),
            Flag("y", "-y", groups=("second",)),
            Flag("z", "-z"),
            groups=(
                Group("first", requires=("y",)),
                Group("second", requires=("z",)),
            ),
        )
        driver = _Driver(tool)
        state = driver.match("x")
        self.assertEqual(state.required, ("z",))

    def testNothingSharedBetweenStates(self):
        tool = _tool()
        first = _Driver(tool)
        first.match("alpha")
        second = _Driver(tool)
        self.assertEqual(second.state.required, ("mode",))
        self.assertEqual(len(second.matches), 0)


if __name__ == "__main__":
    unittest.main()
