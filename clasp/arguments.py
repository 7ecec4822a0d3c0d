r"""
Clasp argument specifications.

Overview
- Specs
  • Flag: named, presence-only switch (no payload), e.g., -v/--verbose.
  • Option: named, value-bearing switch with one or more spellings (e.g., -o/--output).
  • Positional: argument identified by its slot, optionally repeatable and trailing.
  • Group: named set of arguments with shared requirements and co-occurrence policy.

- Relations (all specs)
  • requires: names that become mandatory once this spec is matched.
  • conflicts: names that must not co-occur with this spec.
  • overrides: names whose earlier match this spec supersedes (last one wins).
  • groups: names of the groups this spec is a member of.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Metadata (sanitized on construction)
- Shared
  • name: non-empty identifier without whitespace, unique within a command.
  • descr: Unset | str | Text (short help), non-empty when provided.
  • requires/conflicts/overrides/groups: iterables of names; duplicates and
    self-references are rejected; normalized to tuples (declaration order kept).
  • multiple, required, hidden: bool.
- Named (Flag/Option)
  • names: at least one of "-x" (single character) or "--long-name".
  • terminator: matching stops the parse and hands control back immediately.
- Value-bearing (Option/Positional)
  • default, choices (duplicates rejected).
  • values / nargs / delimiter (Option only).
- Positional only
  • index (1-based slot), trailing (trailing var-arg marker, requires multiple).

Validation highlights
- Short names must be a single letter or digit, long names must match
  r"--[^\W\d_](-?[^\W_]+)*".
- Flags cannot be repeated unless multiple=True; the same applies to options.
- A trailing positional must allow repeated occurrence.

Quick example:
    >>> from clasp.arguments import Flag, Option, Positional, Group
    >>> debug = Flag("debug", "-d", "--debug")
    >>> config = Option("config", "-c", "--config", requires=("input",))
    >>> input = Positional("input", required=True)
    >>> formats = Group("format", members=("json", "yaml"))

Public API
- Classes: Flag, Option, Positional, Group
"""
import functools
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and renderers.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
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
            - flag(name='verbose', names=('-v', '--verbose'), ...)
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


def _sanitize_names(cls, field, names, /, *, own=Unset):
    """
    Internal: validate an iterable of identifiers and stabilize it into a tuple.

    Rules
    - The value must be an iterable but not a plain string.
    - Each item must be a non-empty string after trimming.
    - Duplicates are rejected; declaration order is preserved.
    - When `own` is given, the spec cannot reference itself.
    """
    if not isinstance(names, Iterable) or isinstance(names, (str, Text)):
        raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")

    sanitized = []
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} {field!r} must be an iterable of strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} {field!r} cannot contain empty strings")
        elif name in sanitized:
            raise ValueError(f"{cls.__typename__} {field!r} cannot contain duplicates")
        elif name == own:
            raise ValueError(f"{cls.__typename__} {own!r} cannot reference itself in {field!r}")
        sanitized.append(name)
    return tuple(sanitized)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by every spec.

    - name: required identifier; trimmed, non-empty, no inner whitespace.
    - descr: optional short description; Unset becomes None.
    - requires/conflicts/overrides/groups: tuples of names (see _sanitize_names).

    Mutates the provided metadata dict in place.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' cannot contain whitespace")
    metadata["name"] = name

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    for field in ("requires", "conflicts", "overrides"):
        metadata[field] = _sanitize_names(cls, field, metadata[field], own=name)
    metadata["groups"] = _sanitize_names(cls, "groups", metadata["groups"])


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: validate spellings of switch-like specs (Flag, Option).

    Accepted forms
    - short: "-x" (a single letter or digit, clusterable as "-xyz")
    - long:  "--name", "--long-name" (unicode letters allowed)

    The first short and the first long spelling are also published as
    `short`/`long` for renderers. Duplicates are rejected.
    """
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    names = []
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif not re.fullmatch(r"-[^\W_]|--[^\W\d_](-?[^\W_]+)*", name):
            raise ValueError(f"{cls.__typename__} names must be valid shell-style option names (unicodes are allowed)")
        elif name in names:
            raise ValueError(f"{cls.__typename__} names cannot contain duplicates")
        names.append(name)

    metadata["names"] = tuple(names)
    metadata["short"] = next((name[1:] for name in names if not name.startswith("--")), None)
    metadata["long"] = next((name[2:] for name in names if name.startswith("--")), None)


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate and normalize metadata for value-bearing specs.

    - nargs (Option): Unset | int >= 1; more than one value implies `values`.
    - delimiter (Option): Unset | single non-space character.
    - choices: iterable of strings; duplicates rejected; normalized to a tuple.
    - default: any value (None included); not validated against choices.
    """
    if "nargs" in metadata:
        if not isinstance(nargs := metadata["nargs"], int | Unset) or isinstance(nargs, bool):
            raise TypeError(f"{cls.__typename__} 'nargs' must be an integer")
        if isinstance(nargs, int) and nargs < 1:
            raise ValueError(f"{cls.__typename__} 'nargs' must be a positive integer")
        metadata["nargs"] = coalesce(nargs)
        metadata["values"] = bool(metadata["values"]) or (nargs is not Unset and nargs > 1)

    if "delimiter" in metadata:
        if not isinstance(delimiter := metadata["delimiter"], str | Unset):
            raise TypeError(f"{cls.__typename__} 'delimiter' must be a string")
        if isinstance(delimiter, str) and (len(delimiter) != 1 or delimiter.isspace()):
            raise ValueError(f"{cls.__typename__} 'delimiter' must be a single non-space character")
        metadata["delimiter"] = coalesce(delimiter)

    metadata["choices"] = _sanitize_names(cls, "choices", metadata["choices"])


class Flag(metaclass=ArgumentType):
    """
    Named, presence-only switch specification.

    A Flag carries no payload: its occurrence count is the signal. Repeated
    occurrences (-vvv) are accepted only when multiple=True.
    """

    kind = "flag"
    values = False

    __introspectable__ = (
        "name",
        "names",
        "short",
        "long",
        "requires",
        "conflicts",
        "overrides",
        "groups",
        "multiple",
        "required",
        "terminator",
        "descr",
        "hidden",
    )

    __displayable__ = (
        "name",
        "names",
        "requires",
        "conflicts",
        "overrides",
        "groups",
        "multiple",
        "required",
    )

    def __new__(
            cls,
            name,
            /,
            *names,
            requires=(),
            conflicts=(),
            overrides=(),
            groups=(),
            multiple=False,
            required=False,
            terminator=False,
            descr=Unset,
            hidden=False
    ):
        """
        Construct a Flag spec.

        Parameters
        - name: str, the identifier used by relations and the query surface.
        - names: one or more spellings ("-v", "--verbose").
        - requires/conflicts/overrides/groups: iterables of names.
        - multiple: accept repeated occurrences.
        - required: the flag must be supplied.
        - terminator: stop parsing as soon as the flag is matched (help/version).
        - descr, hidden: renderer metadata.
        """
        metadata = {
            "name": name,
            "names": names,
            "requires": requires,
            "conflicts": conflicts,
            "overrides": overrides,
            "groups": groups,
            "multiple": bool(multiple),
            "required": bool(required),
            "terminator": bool(terminator),
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if self.terminator and self.required:
            raise TypeError(f"terminator {cls.__typename__} cannot be required")
        return self


class Option(metaclass=ArgumentType):
    """
    Named, value-bearing switch specification.

    Highlights
    - Values are taken inline (--name=value, -nvalue, -n=value) or from the
      following token(s) (--name value).
    - values=True lets one occurrence take several tokens, up to the next
      option-like token; nargs pins the exact count per occurrence.
    - delimiter splits each raw value into several values ("a,b" -> "a", "b").
    - default and choices drive the query surface and value validation.
    """

    kind = "option"

    __introspectable__ = (
        "name",
        "names",
        "short",
        "long",
        "requires",
        "conflicts",
        "overrides",
        "groups",
        "multiple",
        "values",
        "nargs",
        "delimiter",
        "default",
        "choices",
        "required",
        "terminator",
        "descr",
        "hidden",
    )

    __displayable__ = (
        "name",
        "names",
        "requires",
        "conflicts",
        "overrides",
        "groups",
        "multiple",
        "values",
        "nargs",
        "default",
        "choices",
        "required",
    )

    def __new__(
            cls,
            name,
            /,
            *names,
            requires=(),
            conflicts=(),
            overrides=(),
            groups=(),
            multiple=False,
            values=False,
            nargs=Unset,
            delimiter=Unset,
            default=None,
            choices=(),
            required=False,
            terminator=False,
            descr=Unset,
            hidden=False
    ):
        """
        Construct an Option spec.

        Parameters
        - name: str, the identifier used by relations and the query surface.
        - names: one or more spellings ("-o", "--output").
        - requires/conflicts/overrides/groups: iterables of names.
        - multiple: accept repeated occurrences (--opt a --opt b).
        - values: accept several values per occurrence (--opt a b).
        - nargs: exact number of values per occurrence.
        - delimiter: split every raw value on this character.
        - default: value reported by the query surface when absent.
        - choices: allowed values.
        - required, terminator, descr, hidden: see Flag.
        """
        metadata = {
            "name": name,
            "names": names,
            "requires": requires,
            "conflicts": conflicts,
            "overrides": overrides,
            "groups": groups,
            "multiple": bool(multiple),
            "values": bool(values),
            "nargs": nargs,
            "delimiter": delimiter,
            "default": default,
            "choices": choices,
            "required": bool(required),
            "terminator": bool(terminator),
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_named_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if self.terminator and self.required:
            raise TypeError(f"terminator {cls.__typename__} cannot be required")
        return self


class Positional(metaclass=ArgumentType):
    """
    Positional, value-bearing argument specification.

    Each bare token routed to a positional is one occurrence. A positional with
    multiple=True keeps its slot, so every following bare token lands on it.
    The trailing marker turns the last positional into a trailing var-arg:
    once the cursor reaches it, option syntax is no longer interpreted.
    """

    kind = "positional"

    __introspectable__ = (
        "name",
        "index",
        "requires",
        "conflicts",
        "overrides",
        "groups",
        "multiple",
        "trailing",
        "default",
        "choices",
        "required",
        "descr",
        "hidden",
    )

    __displayable__ = (
        "name",
        "index",
        "requires",
        "conflicts",
        "overrides",
        "groups",
        "multiple",
        "trailing",
        "default",
        "required",
    )

    @property
    def values(self):
        return self.multiple

    def __new__(
            cls,
            name,
            /,
            index=Unset,
            *,
            requires=(),
            conflicts=(),
            overrides=(),
            groups=(),
            multiple=False,
            trailing=False,
            default=None,
            choices=(),
            required=False,
            descr=Unset,
            hidden=False
    ):
        """
        Construct a Positional spec.

        Parameters
        - name: str, the identifier used by relations and the query surface.
        - index: Unset | int >= 1, explicit 1-based slot; declaration order otherwise.
        - multiple: keep the slot for every following bare token.
        - trailing: trailing var-arg marker (requires multiple=True).
        - the remaining parameters behave as for Option.
        """
        if not isinstance(index, int | Unset) or isinstance(index, bool):
            raise TypeError(f"{cls.__typename__} 'index' must be an integer")
        if isinstance(index, int) and index < 1:
            raise ValueError(f"{cls.__typename__} 'index' must be a positive integer")

        metadata = {
            "name": name,
            "index": coalesce(index),
            "requires": requires,
            "conflicts": conflicts,
            "overrides": overrides,
            "groups": groups,
            "multiple": bool(multiple),
            "trailing": bool(trailing),
            "default": default,
            "choices": choices,
            "required": bool(required),
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_parametric_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        if self.trailing and not self.multiple:
            raise TypeError(f"trailing {cls.__typename__} must allow multiple occurrences")
        return self


class Group(metaclass=ArgumentType):
    """
    Named set of arguments.

    Semantics
    - Matching any member discharges the pending requirement of its co-members
      and adds the group's own `requires` to the pending set.
    - multiple=False makes two different members a conflict.
    - required=True makes the group itself pending until a member is matched.

    Members can be listed here or declared from the argument side via groups=...;
    the command merges both, keeping the order in which members were declared.
    """

    __introspectable__ = (
        "name",
        "members",
        "requires",
        "multiple",
        "required",
        "descr",
    )

    def __new__(
            cls,
            name,
            /,
            members=(),
            *,
            requires=(),
            multiple=True,
            required=False,
            descr=Unset
    ):
        metadata = {
            "name": name,
            "descr": descr,
            "requires": requires,
            "conflicts": (),
            "overrides": (),
            "groups": (),
        }
        _sanitize_metadata(cls, metadata)
        del metadata["conflicts"], metadata["overrides"], metadata["groups"]
        metadata["members"] = _sanitize_names(cls, "members", members, own=metadata["name"])
        metadata["multiple"] = bool(multiple)
        metadata["required"] = bool(required)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        members = overrides.pop("members", self.members)
        return type(self)(
            overrides.pop("name", self.name),
            members,
            **{
                "requires": self.requires,
                "multiple": self.multiple,
                "required": self.required,
                "descr": self.descr if self.descr is not None else Unset,
            } | overrides
        )


__all__ = (
    # Public API surface for consumers of clasp.arguments.
    # These names are re-exported from the package __init__.

    # Classes (specifications)
    "Flag",
    "Option",
    "Positional",
    "Group",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
