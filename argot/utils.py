"""
Argot utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the specs, the reader, the binder and the
  program layer. Stable enough for consumers, but written for the package.

Overview
- UnsetType / Unset
  • Singleton sentinel for “value not provided”, distinct from None.
  • Falsey, printable as "Unset", non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a default; None, 0, "" and [] are kept as they are.

- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated callables.

- mirror("attr")
  • Read-only property over a private backing field (self._attr).

- ordinal(number)
  • "first", "second", ..., "11th", "22nd" for position-first messages.

- Registry
  • Copy-on-write, name-keyed registry. Writers serialize on a lock and publish
    a fresh read-only snapshot; readers never lock. Backs the conversion and
    reducing-policy registries.

- IntrospectableType
  • Metaclass shared by specs and programs: read-only mirrored fields,
    __typename__ and stable __repr__/__rich_repr__. Imported explicitly, it is
    kept out of star-imports.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> ordinal(3), ordinal(12), ordinal(23)
    ('third', '12th', '23rd')
"""
import builtins
import functools
import operator
import re
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false, but distinct from None and 0.
    - repr(Unset) -> "Unset".
    - Singleton per process; subclassing is forbidden.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return `object` unless it is the Unset sentinel, in which case return `default`.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def mirror(name, /):
    """
    Define a read-only property that mirrors the private attribute "_{name}".

    Backing values are expected to be immutable already (tuples, frozensets,
    MappingProxyType); specs freeze their metadata on construction, so the
    property hands the stored object out as-is.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return getattr(self, "_" + name)

    return property(getter)


def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes.
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

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class Registry(Mapping):
    """
    Name-keyed, copy-on-write registry.

    Reads go through the current snapshot (a MappingProxyType) without any
    locking. register() takes the writer lock, copies the snapshot, adds the
    entry, and publishes the new snapshot in a single assignment, so a reader
    always sees either the old or the new table, never a half-written one.

    Parameters
    - kind: str
      Label used in error messages ("conversion", "reducing policy").
    - entries: Mapping[str, Any]
      Initial (built-in) entries.
    """

    def __init__(self, kind, entries=MappingProxyType({}), /):
        if not isinstance(kind, str):
            raise TypeError("Registry() first argument must be a string")
        self._kind = kind
        self._lock = threading.Lock()
        self._snapshot = MappingProxyType(dict(entries))

    @property
    def kind(self):
        return self._kind

    def register(self, name, entry, /, *, replace=False):
        """
        Publish `entry` under `name`.

        Raises
        - TypeError: name is not a string.
        - ValueError: name is empty, or already registered and replace is False.
        """
        if not isinstance(name, str):
            raise TypeError(f"{self._kind} name must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{self._kind} name cannot be empty")
        with self._lock:
            if name in self._snapshot and not replace:
                raise ValueError(f"{self._kind} {name!r} is already registered")
            self._snapshot = MappingProxyType(self._snapshot | {name: entry})
        return entry

    def __getitem__(self, name):
        return self._snapshot[name]

    def __iter__(self):
        return iter(self._snapshot)

    def __len__(self):
        return len(self._snapshot)

    def __repr__(self):
        return f"registry({self._kind!r}, {sorted(self._snapshot)!r})"


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a meaningful user value. Materialize with
coalesce(value, default).
"""


class IntrospectableType(type):
    """
    Metaclass turning classes into introspectable, read-only value objects.

    Responsibilities
    - Expose every name in __introspectable__ as a read-only property over the
      private field "_<name>" (see mirror()), unless the class defines its own.
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name ("OptionSpec" → "option-spec")
      and used in messages.
    - __displayable__ (if set) narrows which properties __rich_repr__ shows.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            } | namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",
    "Registry",

    # Constants
    "Unset",
)
