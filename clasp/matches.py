"""
Clasp match accumulator.

Matches is the per-parse ledger of what was supplied: occurrence counts and
captured raw values per argument name, plus a touched counter per group. It is
pure bookkeeping; every constraint lives in the resolver and in the parse loop,
and every mutation is visible to them immediately.

Lifecycle
- Created fresh by Command.parse for one invocation and handed back to the
  caller once the parse succeeds; it is never shared between parses.
- After parsing it doubles as the read-only query surface for the program and
  for renderers: is_present / value_of / values_of / occurrences_of.

Example
    >>> matches = command.parse(["-c", "app.toml", "input.txt"])
    >>> matches.is_present("config")
    True
    >>> matches.value_of("config")
    'app.toml'
"""
from .utils import Unset


class Matches:
    """
    Occurrence and value ledger for one parse.

    Mutation API (used by the engine)
    - record(name, value=Unset): one more occurrence (with an optional value);
      bumps the touched counter of every group containing name.
    - append(name, value): one more value for the current occurrence.
    - remove(name) / remove_all(names): forget an argument entirely (overrides).

    Query API
    - is_present, occurrences_of, value_of, values_of, subcommand*.
    """

    def __init__(self, command, /):
        self._command = command
        self._occurrences = {}
        self._values = {}
        self._groups = {}
        self._subcommand = None

    @property
    def command(self):
        return self._command

    def record(self, name, value=Unset, /):
        self._occurrences[name] = self._occurrences.get(name, 0) + 1
        values = self._values.setdefault(name, [])
        if value is not Unset:
            values.append(value)
        for group in self._command.groups_for(name):
            self._groups[group.name] = self._groups.get(group.name, 0) + 1

    def append(self, name, value, /):
        if name not in self._occurrences:
            raise KeyError(f"argument {name!r} has no occurrence to append to")
        self._values[name].append(value)

    def remove(self, name, /):
        occurrences = self._occurrences.pop(name, 0)
        self._values.pop(name, None)
        if not occurrences:
            return
        for group in self._command.groups_for(name):
            if (touched := self._groups.get(group.name, 0) - occurrences) > 0:
                self._groups[group.name] = touched
            else:
                self._groups.pop(group.name, None)

    def remove_all(self, names, /):
        for name in names:
            self.remove(name)

    def nest(self, name, matches, /):
        """
        Attach the record of the subcommand the parse was routed to.
        """
        if self._subcommand is not None:
            raise ValueError("matches already hold a subcommand")
        self._subcommand = (name, matches)

    def occurrences_of(self, name, /):
        """
        Occurrence count of an argument, the touched counter of a group, or 1/0
        for a subcommand depending on whether the parse was routed to it.
        """
        if name in self._occurrences:
            return self._occurrences[name]
        if name in self._groups:
            return self._groups[name]
        if name in self._command.subcommands:
            return int(self.subcommand_name == name)
        self._command.find(name)  # unknown names raise KeyError
        return 0

    def is_present(self, name, /):
        return self.occurrences_of(name) > 0

    def value_of(self, name, /):
        """
        First captured value, else the declared default, else None.
        """
        argument = self._command.find(name)
        if values := self._values.get(name):
            return values[0]
        return getattr(argument, "default", None)

    def values_of(self, name, /):
        """
        Every captured value in order, else the declared default as a 1-tuple, else ().
        """
        argument = self._command.find(name)
        if values := self._values.get(name):
            return tuple(values)
        if (default := getattr(argument, "default", None)) is not None:
            return (default,)
        return ()

    @property
    def subcommand(self):
        """
        (name, Matches) of the matched subcommand, or None.
        """
        return self._subcommand

    @property
    def subcommand_name(self):
        return self._subcommand[0] if self._subcommand else None

    def subcommand_matches(self, name, /):
        if self._subcommand and self._subcommand[0] == name:
            return self._subcommand[1]
        return None

    def __contains__(self, name, /):
        return self._occurrences.get(name, 0) > 0 or self._groups.get(name, 0) > 0

    def __iter__(self):
        return iter(tuple(self._occurrences))

    def __len__(self):
        return len(self._occurrences)

    def __rich_repr__(self):
        yield "command", self._command.name
        yield "occurrences", dict(self._occurrences)
        yield "values", {name: tuple(values) for name, values in self._values.items() if values}
        yield "groups", dict(self._groups)
        if self._subcommand:
            yield "subcommand", self._subcommand

    def __repr__(self):
        return "matches(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "Matches",
)
