"""
Argot binder: tokens in, named values out.

bind(spec, tokens)
- Partition the token stream into per-option occurrences and positionals
  (terminators are dropped, the reader already honored them).
- Fold every option through its reducing policy, converting each parameter
  before it enters the fold.
- Fill the arguments in declaration order; extra positionals go to the others
  collector or are rejected.
- Fail fast: the first fault aborts the whole bind, nothing partial escapes.

Fault precedence (binder side; reader faults always come first)
1. DuplicateOptionError: an ERROR-policy option occurring twice, options
   checked in declaration order.
2. ConversionFailedError: options (declaration order), then arguments, then
   others. A MANDATORY option occurrence without a parameter (possible with
   hand-built tokens or pairs) raises MissingMandatoryParameterError in the
   same pass.
3. UnexpectedArgumentError: the first positional nothing can hold.

Binding values
- option without parameter: name → reduced value (absent: False).
- option with parameter:    name → presence (True/False),
                            parameter name → reduced value (absent: None).
- argument:                 name → converted value (absent: its declared default).
- others:                   name → list of converted values (possibly empty).
A policy's own absent value ([] for APPEND, 0 for COUNT, False for TOGGLE) is
kept as-is.

Entry points
- bind(spec, tokens)
- parse(spec, arguments, reader=GNU): read + bind, the pure argv → Binding call.
- bind_from_pairs(spec, pairs): skip the reader, pairs are (name, raw).
"""
import logging
from collections import namedtuple
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from .conversions import convert, converting
from .faults import *
from .policies import Policy
from .readers import GNU, OptionToken, PlainToken, Reader, Terminator
from .specs import Arity, ProgramSpec
from .utils import *

logger = logging.getLogger(__name__)


class Bound(namedtuple("Bound", ("present", "value"))):
    __slots__ = ()


class Binding(Mapping):
    """
    Read-only result of a successful bind.

    As a mapping it yields binding name → value. bound(name) returns the
    (present, value) pair, present(name) only the presence flag.
    """

    def __init__(self, entries, /):
        self._entries = MappingProxyType(dict(entries))

    def bound(self, name, /):
        return self._entries[name]

    def present(self, name, /):
        return self._entries[name].present

    def __getitem__(self, name):
        return self._entries[name].value

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        return f"binding({dict(self)!r})"

    def __rich_repr__(self):
        for name, bound in self._entries.items():
            yield name, bound.value


def _convert(conversion, name, raw):
    with converting(name, raw):
        try:
            return convert(conversion, raw)
        except Exception as error:
            reason = str(error) or type(error).__name__
            raise ConversionFailedError(
                "invalid value %r for %r: %s" % (raw, name, reason),
                title="conversion failed",
                name=name,
                value=raw,
                reason=reason,
                hint="expected a value accepted by the %s conversion" % conversion.name,
                docs=getdoc(FaultCode.CONVERSION_FAILED),
            ) from error


def _occurrence(option, identifier, raw):
    """
    Turn one raw occurrence into the value the reducing policy folds.
    """
    if option.arity is Arity.NONE:
        if raw is not None:
            raise ConversionFailedError(
                "option %r accepts no parameter, got %r" % (identifier, raw),
                title="conversion failed",
                name=option.name,
                value=raw,
                reason="option accepts no parameter",
                hint="use %s without '=value'" % identifier,
                docs=getdoc(FaultCode.CONVERSION_FAILED),
            )
        return True
    if raw is None and option.arity is Arity.MANDATORY:
        raise MissingMandatoryParameterError(
            "option %r requires a parameter" % identifier,
            title="missing parameter",
            name=option.name,
            identifier=identifier,
            hint="provide a value (e.g., %s=value)" % option.canonical,
            docs=getdoc(FaultCode.MISSING_MANDATORY_PARAMETER),
        )
    if raw is None:
        return option.default
    return _convert(option.type, option.name, raw)


def _fold(option, values):
    reducer = option.policy
    if not values:
        return reducer.absent()
    try:
        accumulated = reducer.first(values[0])
        for value in values[1:]:
            accumulated = reducer.fold(accumulated, value)
    except DuplicateOptionError as error:
        raise error.__replace__(name=option.name, **_duplicate(option)) from None
    return accumulated


def _duplicate(option):
    return {
        "title": "duplicate option",
        "hint": "pass %s only once" % option.canonical,
        "docs": getdoc(FaultCode.DUPLICATE_OPTION),
    }


def _bind(spec, occurrences, arguments, others, unexpected):
    """
    Shared core of bind() and bind_from_pairs().

    - occurrences: option name → list of (identifier, raw | None)
    - arguments: argument name → raw
    - others: raw extra positionals (spec declares others)
    - unexpected: raw extra positionals nothing can hold
    """
    for option in spec.options:
        if option.policy.policy is Policy.ERROR and len(found := occurrences[option.name]) > 1:
            raise DuplicateOptionError(
                "option %r was already provided" % found[1][0],
                name=option.name,
                identifier=found[1][0],
                **_duplicate(option),
            )

    entries = {}
    for option in spec.options:
        found = occurrences[option.name]
        value = _fold(option, [_occurrence(option, identifier, raw) for identifier, raw in found])
        if option.arity is Arity.NONE:
            entries[option.name] = Bound(bool(found), coalesce(value, False))
        else:
            entries[option.name] = Bound(bool(found), bool(found))
            entries[option.parameter] = Bound(bool(found), coalesce(value, None))

    for argument in spec.arguments:
        if argument.name in arguments:
            entries[argument.name] = Bound(True, _convert(argument.type, argument.name, arguments[argument.name]))
        else:
            entries[argument.name] = Bound(False, argument.default)

    if unexpected:
        raise UnexpectedArgumentError(
            "unexpected argument %r" % unexpected[0],
            title="unexpected argument",
            value=unexpected[0],
            hint="this program takes %d argument(s)" % len(spec.arguments) if spec.arguments
            else "this program takes no arguments",
            docs=getdoc(FaultCode.UNEXPECTED_ARGUMENT),
        )

    if spec.others is not None:
        values = [_convert(spec.others.type, spec.others.name, raw) for raw in others]
        entries[spec.others.name] = Bound(bool(values), values)

    return Binding(entries)


def bind(spec, tokens, /):
    """
    Bind a token stream (as produced by a Reader) against `spec`.

    Raises
    - UnknownOptionError: an option token names an identifier `spec` does not know.
    - DuplicateOptionError, ConversionFailedError, UnexpectedArgumentError.
    """
    if not isinstance(spec, ProgramSpec):
        raise TypeError("bind() first argument must be a program-spec")
    if not isinstance(tokens, Iterable):
        raise TypeError("bind() second argument must be an iterable of tokens")

    occurrences = {option.name: [] for option in spec.options}
    positionals = []
    for token in tokens:
        match token:
            case OptionToken(identifier, parameter):
                try:
                    option = spec.identifiers[identifier]
                except KeyError:
                    raise UnknownOptionError(
                        "unknown option %r" % identifier,
                        title="unknown option",
                        identifier=identifier,
                        docs=getdoc(FaultCode.UNKNOWN_OPTION),
                    ) from None
                occurrences[option.name].append((identifier, parameter))
            case PlainToken(text):
                positionals.append(text)
            case Terminator():
                pass
            case _:
                raise TypeError(f"bind() tokens must be option, plain or terminator tokens, got {token!r}")

    count = len(spec.arguments)
    arguments = {argument.name: raw for argument, raw in zip(spec.arguments, positionals)}
    extra = positionals[count:]
    binding = _bind(
        spec,
        occurrences,
        arguments,
        extra if spec.others is not None else [],
        extra if spec.others is None else [],
    )
    logger.debug("bound %d name(s) from %d positional(s)", len(binding), len(positionals))
    return binding


def parse(spec, arguments, /, reader=GNU):
    """
    Read and bind `arguments` (the raw argv, without the program name).

    This is the pure (ProgramSpec, argv) → Binding entry point; faults are
    raised, never printed.
    """
    if not isinstance(spec, ProgramSpec):
        raise TypeError("parse() first argument must be a program-spec")
    if not isinstance(reader, Reader):
        raise TypeError("parse() 'reader' must be a reader")
    return bind(spec, reader.read(arguments, spec.identifiers))


def bind_from_pairs(spec, pairs, /):
    """
    Bind name/raw pairs directly, skipping the reader.

    Pairs
    - (option name, raw | None): one occurrence; None means "no parameter".
    - (argument name, raw): the argument value.
    - (others name, raw): one more collected value.

    Accepts a mapping too (its items are used). Folding, conversion and fault
    precedence are the same as bind().

    Raises
    - UnknownOptionError: a name `spec` does not declare.
    - ValueError: an argument given more than once.
    """
    if not isinstance(spec, ProgramSpec):
        raise TypeError("bind_from_pairs() first argument must be a program-spec")
    if isinstance(pairs, Mapping):
        pairs = pairs.items()
    elif not isinstance(pairs, Iterable):
        raise TypeError("bind_from_pairs() second argument must be an iterable of pairs")

    occurrences = {option.name: [] for option in spec.options}
    arguments = {}
    others = []
    for pair in pairs:
        try:
            name, raw = pair
        except (TypeError, ValueError):
            raise TypeError(f"bind_from_pairs() pairs must be (name, value) tuples, got {pair!r}") from None
        if raw is not None and not isinstance(raw, str):
            raise TypeError(f"bind_from_pairs() values must be strings or None, got {raw!r}")

        match spec.targets.get(name):
            case None:
                raise UnknownOptionError(
                    "unknown name %r" % name,
                    title="unknown option",
                    identifier=name,
                    docs=getdoc(FaultCode.UNKNOWN_OPTION),
                )
            case target if target is spec.others:
                if raw is None:
                    raise TypeError(f"bind_from_pairs() {name!r} needs a value")
                others.append(raw)
            case target if name in occurrences:
                occurrences[name].append((target.canonical, raw))
            case _:
                if raw is None:
                    raise TypeError(f"bind_from_pairs() {name!r} needs a value")
                if name in arguments:
                    raise ValueError(f"bind_from_pairs() argument {name!r} is given more than once")
                arguments[name] = raw

    return _bind(spec, occurrences, arguments, others, [])


__all__ = (
    "Bound",
    "Binding",
    "bind",
    "parse",
    "bind_from_pairs",
)
