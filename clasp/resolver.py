"""
Clasp constraint resolver.

After every distinct argument match the resolver updates the cross-argument
bookkeeping of the running parse:

- required: names still pending satisfaction (ordered, first insertion wins);
- overrides: names currently superseded by a matched argument.

The resolver never raises. Violations are detected by the parse loop, which
checks conflicts and multiplicity against Matches on every match and compares
`required` against Matches once the input is exhausted.

State is carried in ResolverState, an immutable namedtuple. Every function here
takes a state and returns a new one, so a parse owns its state explicitly and
nothing leaks between invocations.

Relations flow through one generic pair of operations:
- propagate(state, target, names, matches): add names to `required` or `overrides`.
- retract(command, state, target, names, matches): take names back out, unless
  something still present keeps contributing them.
"""
import copy
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

REQUIRED = "required"
OVERRIDES = "overrides"

# which argument relation feeds which state field
_RELATIONS = {
    REQUIRED: "requires",
    OVERRIDES: "overrides",
}


class ResolverState(namedtuple("ResolverState", (
    "required",
    "overrides",
    "cache",
    "trailing",
    "found",
), defaults=((), (), None, False, False))):
    """
    Per-parse resolver bookkeeping.

    fields
    - required: tuple of argument/group names still pending.
    - overrides: tuple of argument names currently superseded.
    - cache: name of the last argument run through process(); a multi-valued
      argument consuming consecutive tokens is resolved once per run.
    - trailing: option syntax is no longer interpreted (after '--' or once the
      trailing var-arg positional is reached).
    - found: at least one argument was matched.
    """
    __slots__ = ()

    @classmethod
    def initial(cls, command, /):
        """
        Fresh state seeded with every argument and group declared required.
        """
        return cls(required=tuple(command.required_names))


def propagate(state, target, names, matches=None, /):
    """
    Append names to the target set, keeping first-insertion order.

    When matches is given, names already present in it are skipped (a
    requirement that is already satisfied never becomes pending).
    """
    current = list(getattr(state, target))
    for name in names:
        if name in current:
            continue
        if matches is not None and matches.occurrences_of(name):
            continue
        current.append(name)
    return copy.replace(state, **{target: tuple(current)})


def discard(state, target, names, /):
    """
    Remove names from the target set unconditionally.
    """
    names = set(names)
    return copy.replace(state, **{target: tuple(name for name in getattr(state, target) if name not in names)})


def _origins(command, target, matches):
    """
    Names some present argument (or touched group) still contributes to target.
    """
    relation = _RELATIONS[target]
    origins = set(command.required_names) if target == REQUIRED else set()
    for name in matches:
        origins.update(getattr(command.find(name), relation))
        if target == REQUIRED:
            for group in command.groups_for(name):
                origins.update(group.requires)
    return origins


def retract(command, state, target, names, matches, /):
    """
    Remove names from the target set unless something present still contributes them.

    Used when an argument is superseded: the entries its own relation list put
    into `required`/`overrides` go away, but an entry also requested by another
    present argument, one of its groups, or a required declaration stays.
    """
    origins = _origins(command, target, matches)
    return discard(state, target, (name for name in names if name not in origins))


def _supersede(command, state, argument, matches):
    # matches no longer holds argument at this point
    logger.debug("resolve:%s: superseded, retracting its relations", argument.name)
    for target in (REQUIRED, OVERRIDES):
        state = retract(command, state, target, getattr(argument, _RELATIONS[target]), matches)
    # declared requirements the removed match discharged are pending again
    restored = (name for name in command.required_names if name not in state.overrides)
    return propagate(state, REQUIRED, restored, matches)


def _find_override(command, name, matches):
    """
    First present argument, in declaration order, whose overrides list name.
    """
    for argument in command.arguments:
        if argument.name != name and name in argument.overrides and matches.occurrences_of(argument.name):
            return argument
    return None


def resolve(command, state, argument, matches, /):
    """
    Update the bookkeeping for a freshly matched argument.

    steps (in order)
    1. override arrival: when the argument is itself superseded by a present
       argument, that argument is removed (last one wins) and its relations retracted.
    2. own overrides: every overridden name is removed from matches, its
       relations retracted, added to `overrides` and dropped from `required`.
    3. conflicts: conflicting names lose override priority.
    4. requires: names not yet present become pending.
    5. groups: for every group containing the argument, in declared order, its
       requires become pending and its members (and itself) are discharged.
    """
    name = argument.name
    logger.debug("resolve:%s;", name)

    if name in state.overrides:
        if (superseding := _find_override(command, name, matches)) is not None:
            logger.debug("resolve:%s: overrides %r", name, superseding.name)
            matches.remove(superseding.name)
            state = _supersede(command, state, superseding, matches)

    if argument.overrides:
        logger.debug("resolve:%s: has overrides %r", name, argument.overrides)
        for overridden in argument.overrides:
            if matches.occurrences_of(overridden):
                matches.remove(overridden)
                state = _supersede(command, state, command.find(overridden), matches)
        state = propagate(state, OVERRIDES, argument.overrides)
        state = discard(state, REQUIRED, argument.overrides)

    if argument.conflicts:
        logger.debug("resolve:%s: has conflicts %r", name, argument.conflicts)
        state = discard(state, OVERRIDES, argument.conflicts)

    if argument.requires:
        logger.debug("resolve:%s: has requirements %r", name, argument.requires)
        state = propagate(state, REQUIRED, argument.requires, matches)

    for group in command.groups_for(name):
        logger.debug("resolve:%s: found in group %r", name, group.name)
        state = propagate(state, REQUIRED, group.requires, matches)
        state = discard(state, REQUIRED, (*group.members, group.name))

    return state


def process(command, state, argument, matches, /):
    """
    Run resolve() unless argument was the last one processed, then mark it.
    """
    if state.cache == argument.name:
        return state
    return copy.replace(resolve(command, state, argument, matches), cache=argument.name, found=True)


def pending(state, matches, /):
    """
    Names in `required` that are still absent from matches, in insertion order.
    """
    return tuple(name for name in state.required if not matches.occurrences_of(name))


__all__ = (
    "ResolverState",
    "REQUIRED",
    "OVERRIDES",
    "propagate",
    "discard",
    "retract",
    "resolve",
    "process",
    "pending",
)
