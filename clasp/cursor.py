"""
Clasp positional cursor.

The cursor decides which declared positional receives the next bare token.
It walks the command's positionals in slot order, stays on a positional that
allows multiple occurrences, and switches the parse into trailing mode once the
trailing var-arg positional is reached: from then on no token is read as an
option, everything lands on that last positional.
"""
import copy
import logging

logger = logging.getLogger(__name__)


class PositionalCursor:
    """
    Slot pointer over command.positionals for one parse.

    select(state) -> (positional | None, state)
    - applies the trailing transition, then returns the positional at the
      current slot (None when every slot is used up).

    advance(argument, state) -> state
    - moves to the next slot unless argument allows multiple occurrences, then
      applies the trailing transition again.

    The transition fires when the command declares a trailing positional, the
    state is not trailing yet, and the cursor sits on that last slot (every
    slot before it has been assigned).
    """

    def __init__(self, command, /):
        self._command = command
        self._index = 0

    @property
    def index(self):
        return self._index

    def _transition(self, state):
        positionals = self._command.positionals
        if not state.trailing and self._command.trailing and self._index == len(positionals) - 1:
            logger.debug("cursor:%s: slot %d reached, trailing values", self._command.name, self._index)
            return copy.replace(state, trailing=True)
        return state

    def select(self, state, /):
        state = self._transition(state)
        try:
            return self._command.positionals[self._index], state
        except IndexError:
            return None, state

    def advance(self, argument, state, /):
        if not argument.multiple:
            self._index += 1
        return self._transition(state)


__all__ = (
    "PositionalCursor",
)
