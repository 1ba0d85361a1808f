r"""
Argot program specifications.

Overview
- Specs
  • OptionSpec: named switch recognized by one or more identifiers (-f/--file),
    with a parameter arity, a reducing policy and a conversion.
  • ArgumentSpec: order-bound positional value.
  • OthersSpec: collector for positionals beyond the declared arguments.
  • ProgramSpec: the whole accepted shape; validates the cross-entry invariants.

- Arity
  • NONE: the option never takes a parameter (a flag).
  • OPTIONAL: a parameter only in the inline form (--name=value); otherwise the
    option's `default` is used.
  • MANDATORY: a parameter is always taken (inline, or the next raw element).

- Introspection & representation
  • IntrospectableType (argot.utils) provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ as read-only properties.
  • Every spec supports __replace__(**overrides) and named(name), which return
    fresh, re-validated copies; instances are never mutated.

Binding names (one namespace per program)
- option name → presence (flags: the reduced value)
- option parameter name (arity ≠ NONE) → reduced parameter value
- argument names → converted positional values
- others name → list of converted extra positionals

Validation highlights
- Identifiers must match r"-[^\W\d_]|--[^\W\d_][^\W_]*(?:-[^\W_]+)*" and be unique
  inside one option and across a program.
- Names must be Python identifiers; every binding name of a program is unique.
- Specs placed in a ProgramSpec must be named.

Quick example:
    >>> from argot.specs import OptionSpec, ArgumentSpec, ProgramSpec, Arity
    >>> spec = ProgramSpec(
    ...     options=(
    ...         OptionSpec("-h", "--help", name="help"),
    ...         OptionSpec("--file", "-f", name="file", arity=Arity.MANDATORY, parameter="fileValue"),
    ...     ),
    ...     arguments=(ArgumentSpec("target"),),
    ... )
"""
import re
from collections.abc import Iterable
from enum import Enum
from types import MappingProxyType

from rich.text import Text

from .conversions import resolve_conversion
from .policies import resolve_policy, Policy
from .utils import *
from .utils import IntrospectableType


class Arity(Enum):
    NONE = "none"
    OPTIONAL = "optional"
    MANDATORY = "mandatory"


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate 'name', 'type' and 'descr', shared by every entry spec.

    - name: Unset (named later, see named()) or a Python identifier.
    - type: anything resolve_conversion() accepts; stored as a Conversion.
    - descr: Unset | str | Text; non-empty after trimming; Unset becomes None.
    """
    if not isinstance(name := metadata["name"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif isinstance(name, str) and not name.isidentifier():
        raise ValueError(f"{cls.__typename__} 'name' must be a valid identifier, got {name!r}")
    metadata["name"] = coalesce(name)

    metadata["type"] = resolve_conversion(metadata["type"])

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_option_metadata(cls, metadata, /):
    r"""
    Internal: validate identifiers, arity, parameter name and policy.

    - identifiers: at least one; "-c" (one letter or digit) or "--long-name".
      Order is kept (the first identifier is the canonical one in messages).
    - arity: Arity member or its value ("none", "optional", "mandatory").
    - parameter: only for parameterized options; derived as "<name>_value" when
      left Unset. Must differ from the option name.
    - policy: anything resolve_policy() accepts; stored as a Reducer.
    """
    identifiers = []
    if not metadata["identifiers"]:
        raise TypeError(f"{cls.__typename__} must specify at least one identifier")
    for identifier in metadata["identifiers"]:
        if not isinstance(identifier, str):
            raise TypeError(f"{cls.__typename__} identifiers must be strings")
        elif not re.fullmatch(r"-[^\W\d_]|--[^\W\d_][^\W_]*(?:-[^\W_]+)*", identifier):
            raise ValueError(f"{cls.__typename__} identifier {identifier!r} must look like '-c' or '--long-name'")
        elif identifier in identifiers:
            raise ValueError(f"{cls.__typename__} identifiers cannot contain duplicates")
        identifiers.append(identifier)
    metadata["identifiers"] = tuple(identifiers)

    try:
        metadata["arity"] = Arity(metadata["arity"])
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'arity' must be one of: none, optional, mandatory") from None

    parameter = metadata["parameter"]
    if metadata["arity"] is Arity.NONE:
        if parameter is not Unset:
            raise TypeError(f"{cls.__typename__} without parameter cannot declare a 'parameter' name")
    elif not isinstance(parameter, str | Unset):
        raise TypeError(f"{cls.__typename__} 'parameter' must be a string")
    elif isinstance(parameter, str):
        if not parameter.isidentifier():
            raise ValueError(f"{cls.__typename__} 'parameter' must be a valid identifier, got {parameter!r}")
        if parameter == metadata["name"]:
            raise ValueError(f"{cls.__typename__} 'parameter' must differ from its 'name'")

    metadata["policy"] = resolve_policy(metadata["policy"])


def _unset(object, /):
    # sanitized fields store None for “not provided”; constructors expect Unset
    return Unset if object is None else object


class OptionSpec(metaclass=IntrospectableType):
    """
    Named option specification.

    Parameters
    - identifiers: one or more str
      Spellings recognized on the command line ("-f", "--file").
    - name: Unset | str
      Binding name. May be left Unset and supplied later with named().
    - arity: Arity | str
      Parameter arity (default NONE).
    - parameter: Unset | str
      Binding name of the parameter value (parameterized options only).
    - policy: Policy | str | callable
      Reducing policy applied to repeated occurrences (default ERROR).
    - type: str | Conversion | callable
      Conversion applied to each raw parameter (default "string").
    - default: Any
      Parameter value used when an OPTIONAL parameter is left out. Not converted.
    - descr: Unset | str | Text
      Short description.
    """

    __introspectable__ = (
        "identifiers",
        "name",
        "arity",
        "parameter",
        "policy",
        "type",
        "default",
        "descr",
    )

    __displayable__ = (
        "identifiers",
        "name",
        "arity",
        "parameter",
        "policy",
    )

    def __init__(
            self,
            *identifiers,
            name=Unset,
            arity=Arity.NONE,
            parameter=Unset,
            policy=Policy.ERROR,
            type="string",
            default=None,
            descr=Unset,
    ):
        metadata = {
            "identifiers": identifiers,
            "name": name,
            "arity": arity,
            "parameter": parameter,
            "policy": policy,
            "type": type,
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(OptionSpec, metadata)
        _sanitize_option_metadata(OptionSpec, metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def parameter(self):
        """
        Binding name of the parameter value, or None for options without parameter.
        """
        if self._arity is Arity.NONE:
            return None
        if self._parameter is not Unset:
            return self._parameter
        return None if self._name is None else self._name + "_value"

    @property
    def canonical(self):
        """
        First declared identifier; used in messages.
        """
        return self._identifiers[0]

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        metadata = {
            "name": _unset(self._name),
            "arity": self._arity,
            "parameter": self._parameter,
            "policy": self._policy,
            "type": self._type,
            "default": self._default,
            "descr": _unset(self._descr),
        } | overrides
        return OptionSpec(*metadata.pop("identifiers", self._identifiers), **metadata)

    def named(self, name, /):
        return self.__replace__(name=name)


class ArgumentSpec(metaclass=IntrospectableType):
    """
    Positional argument specification.

    Parameters
    - name: Unset | str
      Binding name. May be left Unset and supplied later with named().
    - type: str | Conversion | callable
      Conversion applied to the positional value (default "string").
    - default: Any
      Value reported when the argument is absent (presence stays False).
    - descr: Unset | str | Text
      Short description.
    """

    __introspectable__ = (
        "name",
        "type",
        "default",
        "descr",
    )

    def __init__(self, name=Unset, /, type="string", default=None, descr=Unset):
        metadata = {
            "name": name,
            "type": type,
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(ArgumentSpec, metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        metadata = {
            "name": _unset(self._name),
            "type": self._type,
            "default": self._default,
            "descr": _unset(self._descr),
        } | overrides
        return ArgumentSpec(metadata.pop("name"), **metadata)

    def named(self, name, /):
        return self.__replace__(name=name)


class OthersSpec(metaclass=IntrospectableType):
    """
    Collector for positionals beyond the declared arguments.

    Each extra positional is converted with `type`; the binding is the list of
    converted values in command-line order.
    """

    __introspectable__ = (
        "name",
        "type",
        "descr",
    )

    def __init__(self, name=Unset, /, type="string", descr=Unset):
        metadata = {
            "name": name,
            "type": type,
            "descr": descr,
        }
        _sanitize_metadata(OthersSpec, metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        metadata = {
            "name": _unset(self._name),
            "type": self._type,
            "descr": _unset(self._descr),
        } | overrides
        return OthersSpec(metadata.pop("name"), **metadata)

    def named(self, name, /):
        return self.__replace__(name=name)


class ProgramSpec(metaclass=IntrospectableType):
    """
    The declared shape of an accepted command line.

    Parameters
    - options: Iterable[OptionSpec]
    - arguments: Iterable[ArgumentSpec]  (declaration order = command-line order)
    - others: Unset | OthersSpec

    Invariants (checked here, raising TypeError/ValueError)
    - every entry is named;
    - identifiers are unique across all options;
    - option names, parameter names, argument names and the others name are
      mutually disjoint.

    Derived views
    - identifiers: identifier → OptionSpec
    - targets: option/argument/others name → spec
    - names: every binding name the program produces
    """

    __introspectable__ = (
        "options",
        "arguments",
        "others",
        "identifiers",
        "targets",
        "names",
    )

    __displayable__ = (
        "options",
        "arguments",
        "others",
    )

    def __init__(self, options=(), arguments=(), others=Unset):
        if not isinstance(options, Iterable) or not isinstance(arguments, Iterable):
            raise TypeError("program-spec 'options' and 'arguments' must be iterable")
        options = tuple(options)
        arguments = tuple(arguments)

        for option in options:
            if not isinstance(option, OptionSpec):
                raise TypeError(f"program-spec options must be option-specs, got {option!r}")
        for argument in arguments:
            if not isinstance(argument, ArgumentSpec):
                raise TypeError(f"program-spec arguments must be argument-specs, got {argument!r}")
        if not isinstance(others, OthersSpec | Unset):
            raise TypeError("program-spec 'others' must be an others-spec")

        identifiers = {}
        targets = {}
        names = []

        def claim(name, entry):
            if name is None:
                raise ValueError(f"program-spec entries must be named, got {entry!r}")
            if name in names:
                raise ValueError(f"program-spec binding name {name!r} is declared more than once")
            names.append(name)

        for option in options:
            claim(option.name, option)
            targets[option.name] = option
            if option.parameter is not None:
                claim(option.parameter, option)
            for identifier in option.identifiers:
                if identifier in identifiers:
                    raise ValueError(
                        f"program-spec identifier {identifier!r} is shared by "
                        f"{identifiers[identifier].name!r} and {option.name!r}"
                    )
                identifiers[identifier] = option

        for argument in arguments:
            claim(argument.name, argument)
            targets[argument.name] = argument

        if others is not Unset:
            claim(others.name, others)
            targets[others.name] = others

        self._options = options
        self._arguments = arguments
        self._others = coalesce(others)
        self._identifiers = MappingProxyType(identifiers)
        self._targets = MappingProxyType(targets)
        self._names = tuple(names)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        metadata = {
            "options": self._options,
            "arguments": self._arguments,
            "others": _unset(self._others),
        } | overrides
        return ProgramSpec(**metadata)


__all__ = (
    "Arity",
    "OptionSpec",
    "ArgumentSpec",
    "OthersSpec",
    "ProgramSpec",
)
