"""
Argot reducing policies.

A reducing policy folds every occurrence of one option into a single value.
It is a plain function with three call forms:

    policy()                  -> value when the option never occurs
    policy(value)             -> value after the first occurrence
    policy(accumulated, value) -> value after each later occurrence

`value` is the occurrence payload after conversion: True for options without
a parameter, the converted parameter otherwise (or the option's default for an
optional parameter that was left out).

The zero-argument form may return Unset, meaning “absent”: the binder then
reports False for a flag and None for a parameterized option.

Built-ins (Policy)
- ERROR      absent / value / raises DuplicateOptionError (the default)
- USE_FIRST  absent / value / keeps the accumulated value
- USE_LAST   absent / value / takes the new value
- APPEND     [] / [value] / accumulated + [value]
- COUNT      0 / 1 / accumulated + 1
- TOGGLE     False / True / not accumulated
- CUSTOM     tag for user functions (see resolve_policy)
"""
from collections import namedtuple
from enum import Enum

from .faults import DuplicateOptionError
from .utils import *


def _error(*arguments):
    match arguments:
        case ():
            return Unset
        case (value,):
            return value
        case _:
            raise DuplicateOptionError("option was already provided")


def _use_first(*arguments):
    match arguments:
        case ():
            return Unset
        case (value,):
            return value
        case (accumulated, _):
            return accumulated


def _use_last(*arguments):
    match arguments:
        case ():
            return Unset
        case (value,) | (_, value):
            return value


def _append(*arguments):
    match arguments:
        case ():
            return []
        case (value,):
            return [value]
        case (accumulated, value):
            return [*accumulated, value]


def _count(*arguments):
    match arguments:
        case ():
            return 0
        case (_,):
            return 1
        case (accumulated, _):
            return accumulated + 1


def _toggle(*arguments):
    match arguments:
        case ():
            return False
        case (_,):
            return True
        case (accumulated, _):
            return not accumulated


class Policy(Enum):
    """
    closed set of reducing policies; CUSTOM tags user-supplied functions.
    """
    ERROR = "error"
    USE_FIRST = "use-first"
    USE_LAST = "use-last"
    APPEND = "append"
    COUNT = "count"
    TOGGLE = "toggle"
    CUSTOM = "custom"


class Reducer(namedtuple("Reducer", ("policy", "function"))):
    """
    A resolved reducing policy: the Policy tag plus the function to call.
    """
    __slots__ = ()

    def absent(self):
        return self.function()

    def first(self, value, /):
        return self.function(value)

    def fold(self, accumulated, value, /):
        return self.function(accumulated, value)


_BUILTINS = {
    Policy.ERROR: Reducer(Policy.ERROR, rename(_error, "error")),
    Policy.USE_FIRST: Reducer(Policy.USE_FIRST, rename(_use_first, "use_first")),
    Policy.USE_LAST: Reducer(Policy.USE_LAST, rename(_use_last, "use_last")),
    Policy.APPEND: Reducer(Policy.APPEND, rename(_append, "append")),
    Policy.COUNT: Reducer(Policy.COUNT, rename(_count, "count")),
    Policy.TOGGLE: Reducer(Policy.TOGGLE, rename(_toggle, "toggle")),
}

policy_registry = Registry("reducing policy", {
    policy.value: reducer for policy, reducer in _BUILTINS.items()
})


def register_policy(name, function, /, *, replace=False):
    """
    Register a named custom reducing policy (usable as `policy="name"`).
    """
    if not callable(function):
        raise TypeError("register_policy() second argument must be callable")
    return policy_registry.register(name, Reducer(Policy.CUSTOM, function), replace=replace)


def resolve_policy(object, /):
    """
    Normalize a spec's `policy` into a Reducer.

    Accepted
    - Reducer: returned as-is.
    - Policy member other than CUSTOM.
    - str: a registered name ("use-last", or one added with register_policy()).
    - callable: wrapped as CUSTOM.
    """
    match object:
        case Reducer():
            return object
        case Policy.CUSTOM:
            raise ValueError("Policy.CUSTOM needs a function; pass the function itself")
        case Policy():
            return _BUILTINS[object]
        case str():
            try:
                return policy_registry[object]
            except KeyError:
                raise ValueError("unknown reducing policy %r" % object) from None
        case _ if callable(object):
            return Reducer(Policy.CUSTOM, object)
    raise TypeError("reducing policy must be a Policy, a registered name, or a callable")


__all__ = (
    "Policy",
    "Reducer",
    "policy_registry",
    "register_policy",
    "resolve_policy",
)
