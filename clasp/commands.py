"""
Clasp commands.

A Command is the root of the specification model: it owns the declared
arguments, groups and subcommands, validates them against each other once at
build time, and exposes the read-only query surface the parse machinery relies
on (find, groups_for, members_of, required_names, ...).

Command.parse(tokens) runs one parse. All per-parse state (the Matches record,
the resolver state, the positional cursor, a pending option waiting for its
values) lives in a private _Invocation object created for that call, so a
Command can be shared and parsed any number of times.

invoke(command, prompt) is the process-level shell around parse: it reads
sys.argv (or a shell-like string, or an iterable of tokens) and hands faults to
trigger(), which prints and exits in shell mode or raises otherwise.
"""
import copy
import difflib
import functools
import itertools
import logging
import operator
import re
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from rich.text import Text

from .arguments import *
from .cursor import PositionalCursor
from .faults import *
from .matches import Matches
from .resolver import ResolverState, pending, process
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass that turns Command into an introspectable, read-only descriptor.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      for consistent, human-friendly labels in build-time errors.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - command(name='build', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield a sequence of (name, object) pairs for pretty printers.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _process_strings(cls, metadata):
    """
    Normalize scalar string/Text metadata fields.

    - name: required, trimmed, non-empty and without whitespace (it is matched
      against a single token when routing subcommands).
    - descr, version: Unset | str | Text; trimmed strings, Unset becomes None.

    Errors
    - TypeError: when a value is not str | Text | Unset.
    - ValueError: when a string becomes empty after trimming.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace")
    metadata["name"] = name

    for name in ("descr", "version"):
        if not isinstance(object := metadata[name], str | Text | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a string")
        elif isinstance(object, str) and not (object := object.strip()):
            raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
        metadata[name] = coalesce(object)


def _process_flags(cls, metadata):
    """
    Validate boolean settings; runtime flags keep Unset so they can inherit.
    """
    for name in ("negate", "required"):
        metadata[name] = bool(metadata[name])
    for name in ("shell", "fancy", "colorful"):
        if not isinstance(metadata[name], bool | Unset):
            raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")


def _process_arguments(cls, metadata):
    """
    Validate the declared arguments and compile the switch table and slot order.

    Rules
    - every item is a Flag, Option or Positional; names are unique.
    - every switch spelling ("-v", "--verbose") maps to exactly one argument.
    - positionals with an explicit index take that slot; the others fill the
      free slots in declaration order. Slots must be contiguous from 1.
    - only the last positional may allow multiple occurrences or be trailing.
    - a required positional cannot follow an optional one.

    Mutates
    - metadata["arguments"] (tuple), metadata["positionals"] (tuple in slot
      order), metadata["switches"] (spelling -> argument).
    """
    names, switches, positionals, slots = set(), {}, [], {}
    for argument in metadata["arguments"]:
        if not isinstance(argument, Flag | Option | Positional):
            raise TypeError(f"{cls.__typename__} arguments must be flags, options or positionals")
        elif argument.name in names:
            raise ValueError(f"{cls.__typename__} argument name {argument.name!r} is already in use")
        names.add(argument.name)

        if isinstance(argument, Positional):
            positionals.append(argument)
            continue
        for spelling in argument.names:
            if switches.setdefault(spelling, argument) is not argument:
                raise ValueError(f"{cls.__typename__} switch {spelling!r} is already in use")

    for positional in positionals:
        if positional.index is not None and slots.setdefault(positional.index, positional) is not positional:
            raise ValueError(f"{cls.__typename__} positional index {positional.index} is already in use")
    free = (index for index in itertools.count(1) if index not in slots)
    for positional in positionals:
        if positional.index is None:
            slots[next(free)] = positional
    if slots and max(slots) != len(slots):
        raise ValueError(f"{cls.__typename__} positional indexes must be contiguous from 1")

    ordered = tuple(slots[index] for index in sorted(slots))
    for positional in ordered[:-1]:
        if positional.trailing:
            raise ValueError(f"{cls.__typename__} only the last positional can be trailing")
        elif positional.multiple:
            raise ValueError(f"{cls.__typename__} only the last positional can allow multiple occurrences")
    for earlier, later in itertools.pairwise(ordered):
        if later.required and not earlier.required:
            raise ValueError(f"{cls.__typename__} required positional {later.name!r} cannot follow an optional one")

    metadata["arguments"] = tuple(metadata["arguments"])
    metadata["positionals"] = ordered
    metadata["switches"] = switches


def _process_groups(cls, metadata):
    """
    Validate the declared groups and merge argument-side memberships.

    - group names are unique and distinct from argument names.
    - an argument naming a group in groups=... is appended to its members; an
      unknown group name creates an implicit group (first-reference order,
      after the declared ones).
    - every member must be a declared argument.
    """
    if not isinstance(metadata["groups"], Iterable) or isinstance(metadata["groups"], str | Text):
        raise TypeError(f"{cls.__typename__} 'groups' must be an iterable of groups")

    names = {argument.name for argument in metadata["arguments"]}
    groups = {}
    for group in metadata["groups"]:
        if not isinstance(group, Group):
            raise TypeError(f"{cls.__typename__} 'groups' must be an iterable of groups")
        elif group.name in names or group.name in groups:
            raise ValueError(f"{cls.__typename__} group name {group.name!r} is already in use")
        groups[group.name] = group

    for argument in metadata["arguments"]:
        for name in argument.groups:
            if name in names:
                raise ValueError(f"{cls.__typename__} argument {argument.name!r} cannot join argument {name!r} as a group")
            group = groups.get(name) or Group(name)
            if argument.name not in group.members:
                group = copy.replace(group, members=(*group.members, argument.name))
            groups[name] = group

    for group in groups.values():
        for member in group.members:
            if member not in names:
                raise ValueError(f"{cls.__typename__} group {group.name!r} member {member!r} is not a declared argument")

    metadata["groups"] = tuple(groups.values())


def _process_relations(cls, metadata):
    """
    Ensure every relation points at something declared.

    requires/conflicts may name arguments or groups; overrides name arguments only.
    """
    arguments = {argument.name for argument in metadata["arguments"]}
    known = arguments | {group.name for group in metadata["groups"]}
    for spec in (*metadata["arguments"], *metadata["groups"]):
        for field in ("requires", "conflicts", "overrides"):
            for name in getattr(spec, field, ()):
                if name not in (arguments if field == "overrides" else known):
                    raise ValueError(f"{cls.__typename__} {spec.name!r} {field} unknown name {name!r}")


def _process_subcommands(cls, metadata):
    """
    Validate subcommands: Command instances, unique names, not attached elsewhere.
    """
    if not isinstance(metadata["subcommands"], Iterable) or isinstance(metadata["subcommands"], str | Text):
        raise TypeError(f"{cls.__typename__} 'subcommands' must be an iterable of commands")

    subcommands = {}
    for subcommand in metadata["subcommands"]:
        if not isinstance(subcommand, Command):
            raise TypeError(f"{cls.__typename__} 'subcommands' must be an iterable of commands")
        elif subcommand.parent is not None:
            raise ValueError(f"{cls.__typename__} {subcommand.name!r} is already a subcommand of {subcommand.parent.name!r}")
        elif subcommands.setdefault(subcommand.name, subcommand) is not subcommand:
            raise ValueError(f"{cls.__typename__} subcommand name {subcommand.name!r} is already in use")
    metadata["subcommands"] = subcommands


def _attach_to_parent(self, parent):
    """
    Register this command under its parent (a command has at most one parent).
    """
    if self._parent is not None and self._parent is not parent:
        raise ValueError(f"{type(self).__typename__} {self.name!r} is already a subcommand of {self._parent.name!r}")
    self._parent = parent


@functools.cache
def _ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def _is_switch(token):
    return len(token) > 1 and token.startswith("-")


def _hint(suggestions, fallback):
    try:
        return "did you mean %r?" % suggestions[0]
    except IndexError:
        return fallback


class Command(metaclass=CommandType):
    """
    Specification model root: a named grammar of arguments, groups and subcommands.

    Responsibilities
    - Construction: validates every argument, group, relation and subcommand
      once; a built Command never changes (subcommands only learn their parent).
    - Query surface: find/group/groups_for/members_of/required_names/trailing
      for the resolver, the cursor and the match record.
    - Parsing: parse(tokens) -> Matches, raising a CommandException subclass on
      the first violated constraint.

    Runtime flags (shell, fancy, colorful) left Unset are inherited from the
    parent command, and default to False at the root.
    """

    __introspectable__ = (
        "name",
        "descr",
        "version",
        "arguments",
        "positionals",
        "switches",
        "groups",
        "subcommands",
        "parent",
        "negate",
        "required",
    )

    # parent is left out to keep representations acyclic
    __displayable__ = (
        "name",
        "descr",
        "version",
        "arguments",
        "groups",
        "subcommands",
        "negate",
        "required",
    )

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def shell(self):
        return bool(coalesce(self._shell, getattr(self.parent, "shell", False)))

    @property
    def fancy(self):
        return bool(coalesce(self._fancy, getattr(self.parent, "fancy", False)))

    @property
    def colorful(self):
        return bool(coalesce(self._colorful, getattr(self.parent, "colorful", False)))

    @property
    def required_names(self):
        """
        Names pending at the start of every parse: required arguments in
        declaration order, then required groups.
        """
        return (
            *(argument.name for argument in self._arguments if argument.required),
            *(group.name for group in self._groups if group.required),
        )

    @property
    def trailing(self):
        """
        Whether the last positional is a trailing var-arg.
        """
        return bool(self._positionals) and self._positionals[-1].trailing

    def __new__(
            cls,
            name,
            /,
            *arguments,
            groups=(),
            subcommands=(),
            descr=Unset,
            version=Unset,
            negate=False,
            required=False,
            shell=Unset,
            fancy=Unset,
            colorful=Unset
    ):
        """
        Build a Command.

        Parameters
        - name: str, the program or subcommand name.
        - arguments: Flag | Option | Positional specs, in declaration order.
        - groups: Group specs (argument-side groups=... memberships are merged).
        - subcommands: Command instances routed by their name.
        - descr, version: renderer metadata.
        - negate: subcommands are recognized only before any argument was matched.
        - required: a subcommand must be given (when subcommands exist).
        - shell, fancy, colorful: bool | Unset runtime flags (inherited when Unset).

        Raises
        - TypeError/ValueError on any inconsistent declaration.
        """
        metadata = {
            "name": name,
            "descr": descr,
            "version": version,
            "arguments": arguments,
            "groups": groups,
            "subcommands": subcommands,
            "negate": negate,
            "required": required,
            "shell": shell,
            "fancy": fancy,
            "colorful": colorful,
        }
        _process_strings(cls, metadata)
        _process_flags(cls, metadata)
        _process_arguments(cls, metadata)
        _process_groups(cls, metadata)
        _process_relations(cls, metadata)
        _process_subcommands(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._parent = None

        self._lookup = {spec.name: spec for spec in (*self._arguments, *self._groups)}
        self._memberships = {
            argument.name: tuple(group for group in self._groups if argument.name in group.members)
            for argument in self._arguments
        }

        for subcommand in self._subcommands.values():
            _attach_to_parent(subcommand, self)
        return self

    def find(self, name, /):
        """
        Argument or group declared under name; KeyError when unknown.
        """
        try:
            return self._lookup[name]
        except KeyError:
            raise KeyError(f"{self.name!r} has no argument or group named {name!r}") from None

    def group(self, name, /):
        if not isinstance(spec := self.find(name), Group):
            raise KeyError(f"{name!r} is an argument of {self.name!r}, not a group")
        return spec

    def groups_for(self, name, /):
        """
        Groups containing the argument name, in declared group order (() otherwise).
        """
        return self._memberships.get(name, ())

    def members_of(self, name, /):
        """
        Argument names an entry stands for: a group's members or the argument itself.
        """
        if isinstance(spec := self.find(name), Group):
            return spec.members
        return (spec.name,)

    def parse(self, tokens, /):
        """
        Match a token sequence against this command.

        Returns a fresh Matches record; raises a CommandException subclass on the
        first violation (unknown token, conflict, missing requirement, ...).
        """
        if not isinstance(tokens, Iterable) or isinstance(tokens, str):
            raise TypeError("parse() argument must be an iterable of strings")
        tokens = deque(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")
        logger.debug("parse:%s: %d tokens", self.name, len(tokens))
        return _Invocation(self, tokens).run()

    def __invoke__(self, prompt=Unset):
        """
        Parse a prompt and surface faults with this command's runtime flags.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used as is.

        Returns the Matches of a successful parse. On failure the fault goes
        through trigger(): shell mode prints it and exits with status 1,
        otherwise it is raised.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            return self.parse(tokens)
        except CommandException as fault:
            tool = fault.options.get("tool", self)
            trigger(fault, tool=tool, shell=tool.shell, fancy=tool.fancy, colorful=tool.colorful)


class _Invocation:
    """
    One run of the token loop against one command; never reused.

    fields
    - tokens: shared deque (a subcommand keeps consuming the parent's tokens).
    - index: 1-based position of the current token, for messages.
    - matches / state / cursor: the per-parse record, resolver state and slot pointer.
    - waiting: [argument, input, count, index] of an option still taking values.
    - terminated: a terminator switch was matched; the parse ends without validation.
    """

    def __init__(self, command, tokens, /, *, index=1):
        self.command = command
        self.tokens = tokens
        self.index = index
        self.matches = Matches(command)
        self.state = ResolverState.initial(command)
        self.cursor = PositionalCursor(command)
        self.waiting = None
        self.terminated = False

    @property
    def route(self):
        return " ".join(step.name for step in self.command.path)

    def fail(self, exception, message, /, *, index=Unset, **options):
        raise exception(
            message,
            tool=self.command,
            index=coalesce(index, self.index),
            docs=getdoc(options["code"]),
            **options
        )

    def run(self):
        while self.tokens:
            token = self.tokens.popleft()
            logger.debug("parse:%s: token %r at %d", self.command.name, token, self.index)

            if self.waiting and self._feed(token):
                self.index += 1
                continue
            self._close()

            if not self.state.trailing and token == "--":
                logger.debug("parse:%s: escape, trailing values", self.command.name)
                self.state = copy.replace(self.state, trailing=True)
            elif not self.state.trailing and _is_switch(token):
                self._switch(token)
            else:
                self._bare(token)

            if self.terminated:
                logger.debug("parse:%s: terminated", self.command.name)
                return self.matches
            self.index += 1

        self._finalize()
        return self.matches

    def _lookup(self, input):
        try:
            return self.command.switches[input]
        except KeyError:
            suggestions = difflib.get_close_matches(input, self.command.switches.keys(), 5)
            self.fail(
                UnknownArgumentError,
                "unknown option or flag %r at %s position" % (input, _ordinal(self.index)),
                title="unknown option or flag",
                code=FaultCode.UNKNOWN_ARGUMENT,
                token=input,
                suggestions=tuple(suggestions),
                hint=_hint(suggestions, "check the options accepted by '%s'" % self.route),
            )

    def _switch(self, token):
        """
        Resolve --long[=value], -s[value|=value] and -abc clusters.
        """
        if token.startswith("--"):
            input, separator, value = token.partition("=")
            self._take(self._lookup(input), input, value if separator else Unset)
            return

        for offset in range(1, len(token)):
            argument = self._lookup(input := "-" + token[offset])
            rest = token[offset + 1:]
            if isinstance(argument, Option):
                self._take(argument, input, rest.removeprefix("=") if rest else Unset)
                return
            if rest.startswith("="):
                self._take(argument, input, rest[1:])
                return
            self._take(argument, input, Unset)
            if self.terminated:
                return

    def _take(self, argument, input, value):
        """
        Match a switch occurrence, with its inline value when one was given.
        """
        if isinstance(argument, Flag):
            if value is not Unset:
                self.fail(
                    ValueCountMismatchError,
                    "flag %r at %s position cannot have an inline value" % (input, _ordinal(self.index)),
                    title="unexpected value",
                    code=FaultCode.VALUE_COUNT_MISMATCH,
                    name=argument.name,
                    expected=0,
                    got=1,
                    hint="use '%s' alone" % input,
                )
            self._match(argument, input)
            return

        if value is Unset:
            self._match(argument, input)
            if not self.terminated:
                self.waiting = [argument, input, 0, self.index]
            return

        if not value:
            self.fail(
                ValueCountMismatchError,
                "empty inline value for option %r at %s position" % (input, _ordinal(self.index)),
                title="empty inline value",
                code=FaultCode.VALUE_COUNT_MISMATCH,
                name=argument.name,
                expected=argument.nargs or 1,
                got=0,
                hint="pass a value after '=' or after a space (for example: %s <value>)" % input,
            )

        values = self._split(argument, value)
        if argument.nargs is not None and len(values) != argument.nargs:
            self._mismatch(argument, input, argument.nargs, len(values), self.index)
        self._match(argument, input, values)

    def _split(self, argument, value):
        if argument.delimiter is None:
            return [value]
        return value.split(argument.delimiter)

    def _check(self, argument, input, value):
        if not argument.choices or value in argument.choices:
            return
        self.fail(
            InvalidValueError,
            "value %r for %s %r at %s position is not a valid choice" % (
                value, argument.kind, input, _ordinal(self.index)
            ),
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            name=argument.name,
            value=value,
            choices=argument.choices,
            hint="choose one of: %s" % ", ".join(map(repr, argument.choices)),
        )

    def _conflict(self, argument):
        """
        First present argument (in declaration order) that argument cannot co-occur with.

        Sources: its own conflicts (groups expand to members), present arguments
        declaring a conflict with it or one of its groups, and co-members of its
        non-multiple groups. Pairs linked by overrides are settled by the resolver.
        """
        command, matches, name = self.command, self.matches, argument.name
        memberships = command.groups_for(name)

        candidates = set()
        for conflict in argument.conflicts:
            candidates.update(command.members_of(conflict))
        for present in matches:
            conflicts = command.find(present).conflicts
            if name in conflicts or any(group.name in conflicts for group in memberships):
                candidates.add(present)
        for group in memberships:
            if not group.multiple:
                candidates.update(group.members)
        candidates -= {name, *argument.overrides}

        for other in command.arguments:
            if other.name in candidates and name not in other.overrides and matches.occurrences_of(other.name):
                return other.name
        return None

    def _match(self, argument, input, values=()):
        name = argument.name
        if self.matches.occurrences_of(name) and not argument.multiple:
            self.fail(
                UnexpectedRepeatedOccurrenceError,
                "%s %r at %s position was already provided" % (argument.kind, input, _ordinal(self.index)),
                title="repeated %s" % argument.kind,
                code=FaultCode.UNEXPECTED_REPEATED_OCCURRENCE,
                name=name,
                hint="remove the extra occurrence",
            )
        if (other := self._conflict(argument)) is not None:
            self.fail(
                ConflictingArgumentsError,
                "%s %r at %s position cannot be used with %r" % (argument.kind, input, _ordinal(self.index), other),
                title="conflicting arguments",
                code=FaultCode.CONFLICTING_ARGUMENTS,
                first=name,
                second=other,
                hint="use either %r or %r" % (name, other),
            )
        for value in values:
            self._check(argument, input, value)

        logger.debug("parse:%s: matched %r with %r", self.command.name, name, tuple(values))
        self.matches.record(name, *values[:1])
        for value in values[1:]:
            self.matches.append(name, value)
        self.state = process(self.command, self.state, argument, self.matches)
        self.terminated = getattr(argument, "terminator", False)

    def _feed(self, token):
        """
        Give token to the waiting option; False when it cannot take it.
        """
        argument, input, count, _ = self.waiting
        if token == "--" or _is_switch(token):
            return False

        values = self._split(argument, token)
        for value in values:
            self._check(argument, input, value)
        for value in values:
            self.matches.append(argument.name, value)
        self.waiting[2] = count = count + len(values)

        # without nargs, a single-valued option takes exactly one token
        if argument.nargs is not None and count >= argument.nargs or argument.nargs is None and not argument.values:
            self._close()
        return True

    def _close(self):
        """
        Close the waiting option, checking it received the values it needs.
        """
        if not self.waiting:
            return
        argument, input, count, index = self.waiting
        self.waiting = None
        expected = argument.nargs or 1
        if count < expected or (argument.nargs is not None and count != argument.nargs):
            self._mismatch(argument, input, expected, count, index)

    def _mismatch(self, argument, input, expected, got, index):
        if argument.nargs is not None:
            message = "option %r at %s position requires exactly %d value%s, got %d" % (
                input, _ordinal(index), expected, "s" * (expected != 1), got
            )
        else:
            message = "option %r at %s position requires a value" % (input, _ordinal(index))
        self.fail(
            ValueCountMismatchError,
            message,
            index=index,
            title="wrong number of values",
            code=FaultCode.VALUE_COUNT_MISMATCH,
            name=argument.name,
            expected=expected,
            got=got,
            hint="pass values as '%s VALUE' or '%s=VALUE'" % (input, input),
        )

    def _bare(self, token):
        """
        Route a bare token to a subcommand or to the next positional slot.
        """
        command = self.command
        if command.subcommands and not self.state.trailing and not (command.negate and self.state.found):
            if token in command.subcommands:
                return self._dispatch(token)
            if not command.positionals:
                suggestions = difflib.get_close_matches(token, command.subcommands.keys(), 5)
                self.fail(
                    InvalidSubcommandError,
                    "unknown subcommand %r at %s position" % (token, _ordinal(self.index)),
                    title="unknown subcommand",
                    code=FaultCode.INVALID_SUBCOMMAND,
                    token=token,
                    suggestions=tuple(suggestions),
                    hint=_hint(suggestions, "available subcommands: %s" % ", ".join(command.subcommands)),
                )

        argument, self.state = self.cursor.select(self.state)
        if argument is None:
            self.fail(
                UnknownArgumentError,
                "unexpected positional argument %r at %s position" % (token, _ordinal(self.index)),
                title="unexpected positional",
                code=FaultCode.UNKNOWN_ARGUMENT,
                token=token,
                suggestions=(),
                hint="remove this extra value or check the usage of '%s'" % self.route,
            )
        self._match(argument, "<%s>" % argument.name, [token])
        self.state = self.cursor.advance(argument, self.state)

    def _dispatch(self, token):
        subcommand = self.command.subcommands[token]
        logger.debug("parse:%s: routing to subcommand %r", self.command.name, token)
        invocation = _Invocation(subcommand, self.tokens, index=self.index + 1)
        self.matches.nest(token, invocation.run())
        self.terminated = invocation.terminated

    def _finalize(self):
        self._close()

        command = self.command
        if command.required and command.subcommands and self.matches.subcommand is None:
            self.fail(
                MissingSubcommandError,
                "'%s' requires a subcommand" % self.route,
                title="missing subcommand",
                code=FaultCode.MISSING_SUBCOMMAND,
                choices=tuple(command.subcommands),
                hint="choose one of: %s" % ", ".join(command.subcommands),
            )

        if missing := pending(self.state, self.matches):
            self.fail(
                MissingRequiredArgumentError,
                "missing required argument%s: %s" % ("s" * (len(missing) > 1), ", ".join(map(repr, missing))),
                title="missing required argument",
                code=FaultCode.MISSING_REQUIRED_ARGUMENT,
                names=missing,
                hint="provide %s" % " and ".join(map(repr, missing)),
            )


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands.

    Parameters
    - object: an instance providing __invoke__(prompt).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).

    Returns whatever __invoke__ returns (the Matches for a Command).

    Raises
    - TypeError: when 'object' does not implement __invoke__ or when the prompt
      type is invalid.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    # Public API surface for consumers of clasp.commands.
    # These names are re-exported from the package __init__.
    "Command",
    "invoke",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
