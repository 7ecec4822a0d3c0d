"""
Clasp faults (parse failures) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every way a parse can fail.
  Codes are grouped by domain to keep copy consistent and make logs/searches
  predictable.
- CommandException: base type that carries a message plus structured options
  (the offending names, tokens, counts) and knows how to render itself.
- trigger(): central entry point to surface a fault (raise, or print and exit in shell mode).
- getdoc(): optional description lookup for a code from the host application.

Failure model
- Parsing is fail-fast: the first violated constraint is raised as one of the
  CommandException subclasses below and no partial record is returned.
- Structured fields are available both through the read-only `options` mapping
  and as attributes (e.g. `fault.names`, `fault.expected`).

Integration
- Command.parse raises faults directly.
- invoke() hands a raised fault to trigger(fault, **ctx); in shell mode it is
  rendered through rich on stderr and the process exits with status 1.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • INVALID_SUBCOMMAND, MISSING_SUBCOMMAND
    - tokens and values (1111x/1112x)
      • UNKNOWN_ARGUMENT, UNEXPECTED_REPEATED_OCCURRENCE,
        VALUE_COUNT_MISMATCH, INVALID_VALUE
    - cross-argument constraints (1113x)
      • MISSING_REQUIRED_ARGUMENT, CONFLICTING_ARGUMENTS

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- routing errors (11xxx) ---
    INVALID_SUBCOMMAND             = 11101
    MISSING_SUBCOMMAND             = 11102

    # --- token/value errors (11xxx) ---
    UNKNOWN_ARGUMENT               = 11112
    UNEXPECTED_REPEATED_OCCURRENCE = 11115
    VALUE_COUNT_MISMATCH           = 11122
    INVALID_VALUE                  = 11124

    # --- constraint errors (11xxx) ---
    MISSING_REQUIRED_ARGUMENT      = 11131
    CONFLICTING_ARGUMENTS          = 11132

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        # structured fields (names, token, expected, ...) live in the options mapping
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        main = __import__("__main__")
        options = defaultdict(lambda: None, self.options)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if options["colorful"] else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not options["colorful"]:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        tool = options["tool"]
        prog = text(getattr(main, "__prog__", tool.root.name if tool else "clasp"), styler("prog-name"))

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(options["code"].normalize() if options["code"] else "", styler("code")),
            " | ",
            text((options["title"] or "error").title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        hint = Text.assemble(text(" → ", styler("hint-arrow")), text(options["hint"], styler("hint")))

        if options["fancy"]:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__traceback__ = self.__traceback__
        return fault


class MissingRequiredArgumentError(CommandException): ...
class ConflictingArgumentsError(CommandException): ...
class UnexpectedRepeatedOccurrenceError(CommandException): ...
class ValueCountMismatchError(CommandException): ...
class UnknownArgumentError(CommandException): ...
class InvalidSubcommandError(CommandException): ...
class InvalidValueError(CommandException): ...
class MissingSubcommandError(CommandException): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see CommandException).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via rich console and the process exits;
      otherwise the (merged) exception is raised.

    typical options
    - tool, shell, fancy, colorful, and any context the reporter may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "MissingRequiredArgumentError",
    "ConflictingArgumentsError",
    "UnexpectedRepeatedOccurrenceError",
    "ValueCountMismatchError",
    "UnknownArgumentError",
    "InvalidSubcommandError",
    "InvalidValueError",
    "MissingSubcommandError",
    "FaultCode",
    "trigger",
    "getdoc",
)
