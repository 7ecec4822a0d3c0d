"""
Cursor module unit tests (slot selection and the trailing transition).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from clasp import Command, Positional
from clasp.cursor import PositionalCursor
from clasp.resolver import ResolverState


class TestPositionalCursor(TestCase):
    """select/advance over command.positionals."""

    def testSlotsInOrderThenExhausted(self):
        tool = Command("tool", Positional("source"), Positional("target"))
        cursor = PositionalCursor(tool)
        state = ResolverState.initial(tool)

        argument, state = cursor.select(state)
        self.assertEqual(argument.name, "source")
        state = cursor.advance(argument, state)
        argument, state = cursor.select(state)
        self.assertEqual(argument.name, "target")
        state = cursor.advance(argument, state)
        argument, state = cursor.select(state)
        self.assertIsNone(argument)
        self.assertEqual(cursor.index, 2)
        self.assertFalse(state.trailing)

    def testMultipleKeepsSlot(self):
        tool = Command("tool", Positional("files", multiple=True))
        cursor = PositionalCursor(tool)
        state = ResolverState.initial(tool)
        for _ in range(3):
            argument, state = cursor.select(state)
            self.assertEqual(argument.name, "files")
            state = cursor.advance(argument, state)
        self.assertEqual(cursor.index, 0)

    def testTrailingActivatesOnceSlotReached(self):
        tool = Command(
            "run",
            Positional("program", required=True),
            Positional("args", multiple=True, trailing=True),
        )
        cursor = PositionalCursor(tool)
        state = ResolverState.initial(tool)

        argument, state = cursor.select(state)
        self.assertEqual(argument.name, "program")
        self.assertFalse(state.trailing)
        state = cursor.advance(argument, state)
        self.assertTrue(state.trailing)
        argument, state = cursor.select(state)
        self.assertEqual(argument.name, "args")

    def testSoleTrailingActivatesOnFirstSelect(self):
        tool = Command("exec", Positional("args", multiple=True, trailing=True))
        cursor = PositionalCursor(tool)
        argument, state = cursor.select(ResolverState.initial(tool))
        self.assertEqual(argument.name, "args")
        self.assertTrue(state.trailing)

    def testNoTrailingWithoutMarker(self):
        tool = Command("tool", Positional("first"), Positional("rest", multiple=True))
        cursor = PositionalCursor(tool)
        state = ResolverState.initial(tool)
        argument, state = cursor.select(state)
        state = cursor.advance(argument, state)
        argument, state = cursor.select(state)
        self.assertEqual(argument.name, "rest")
        self.assertFalse(state.trailing)

    def testNoPositionals(self):
        tool = Command("tool")
        argument, state = PositionalCursor(tool).select(ResolverState.initial(tool))
        self.assertIsNone(argument)
        self.assertFalse(state.trailing)


if __name__ == "__main__":
    unittest.main()
