"""
Argot command-line readers.

A reader turns the flat sequence of raw argument strings into classified
tokens. Readers are stateless and are passed explicitly to every parse/split
call; GNU is the ready-made GNU-style instance.

Tokens (immutable tuples)
- OptionToken(identifier, parameter): an option occurrence; parameter is the
  inline or consumed value, or None when absent.
- PlainToken(text): a positional value.
- Terminator(): the "--" marker; everything after it is plain.

GNU rules (left to right, no backtracking)
- "--"              → Terminator, then every later element is PlainToken.
- "--name=value"    → OptionToken("--name", "value").
- "--name" / "-c"   → OptionToken; a MANDATORY option also consumes the next
                      element, whatever it looks like. Nothing left to consume
                      raises MissingMandatoryParameterError.
- anything else     → PlainToken ("-", "-5", "-abc", "value"); a dash and a
                      digit is a negative number, never an option.
- unknown identifiers raise UnknownOptionError when they are reached.

Reader.scan() is lazy: it yields (token, end) pairs where `end` is the index
of the first raw element not consumed yet, so a caller may stop early and take
the rest unparsed (see argot.dispatch).
"""
import difflib
import logging
from collections import namedtuple
from collections.abc import Iterable, Mapping

from .faults import *
from .specs import Arity, OptionSpec, ProgramSpec
from .utils import *

logger = logging.getLogger(__name__)


class OptionToken(namedtuple("OptionToken", ("identifier", "parameter"))):
    __slots__ = ()


class PlainToken(namedtuple("PlainToken", ("text",))):
    __slots__ = ()


class Terminator(namedtuple("Terminator", ())):
    __slots__ = ()


def _sanitize_arguments(arguments):
    if isinstance(arguments, str) or not isinstance(arguments, Iterable):
        raise TypeError("reader arguments must be an iterable of strings")
    arguments = tuple(arguments)
    for argument in arguments:
        if not isinstance(argument, str):
            raise TypeError("reader arguments must be an iterable of strings")
    return arguments


def _identifiers(options):
    """
    Build (or pick) the identifier → OptionSpec map a reader classifies against.
    """
    if isinstance(options, ProgramSpec):
        return options.identifiers
    if isinstance(options, Mapping):
        return options
    identifiers = {}
    for option in options:
        if not isinstance(option, OptionSpec):
            raise TypeError(f"reader options must be option-specs, got {option!r}")
        for identifier in option.identifiers:
            if identifiers.setdefault(identifier, option) is not option:
                raise ValueError(f"identifier {identifier!r} is declared by more than one option")
    return identifiers


class Reader:
    """
    Pluggable reader contract.

    Subclasses implement scan(); read() materializes it.
    """

    def scan(self, arguments, options, /):
        raise NotImplementedError

    def read(self, arguments, options, /):
        """
        Classify every raw argument and return the token list.

        Parameters
        - arguments: Iterable[str]
          The raw argument vector (without the program name).
        - options: ProgramSpec | Mapping[str, OptionSpec] | Iterable[OptionSpec]
          The options whose identifiers are known.

        Raises
        - UnknownOptionError, MissingMandatoryParameterError
        """
        tokens = [token for token, _ in self.scan(arguments, options)]
        logger.debug("%s read %d token(s)", type(self).__name__, len(tokens))
        return tokens

    def __repr__(self):
        return f"{type(self).__name__}()"


class GnuReader(Reader):
    """
    GNU-style reader: "--long", "--long=value", "-c", and "--" as terminator.
    """

    def scan(self, arguments, options, /):
        arguments = _sanitize_arguments(arguments)
        identifiers = _identifiers(options)

        index = 0
        terminated = False
        while index < len(arguments):
            element = arguments[index]
            index += 1

            if terminated:
                yield PlainToken(element), index
                continue

            if element == "--":
                terminated = True
                yield Terminator(), index
                continue

            if element.startswith("--"):
                identifier, separator, value = element.partition("=")
                parameter = value if separator else None
            elif len(element) == 2 and element[0] == "-" and element[1] != "-" and not element[1].isdecimal():
                identifier, parameter = element, None
            else:
                yield PlainToken(element), index
                continue

            try:
                option = identifiers[identifier]
            except KeyError:
                suggestions = difflib.get_close_matches(identifier, list(identifiers), 5)
                try:
                    hint = "did you mean %r?" % suggestions[0]
                except IndexError:
                    hint = "remove it, or put it after '--' to pass it as a plain value"
                raise UnknownOptionError(
                    "unknown option %r at %s position" % (identifier, ordinal(index)),
                    title="unknown option",
                    identifier=identifier,
                    index=index,
                    suggestions=suggestions,
                    hint=hint,
                    docs=getdoc(FaultCode.UNKNOWN_OPTION),
                ) from None

            if parameter is None and option.arity is Arity.MANDATORY:
                if index >= len(arguments):
                    raise MissingMandatoryParameterError(
                        "option %r at %s position requires a parameter" % (identifier, ordinal(index)),
                        title="missing parameter",
                        name=option.name,
                        identifier=identifier,
                        index=index,
                        hint="provide a value (e.g., %s=value)" % identifier if identifier.startswith("--")
                        else "provide a value (e.g., %s value)" % identifier,
                        docs=getdoc(FaultCode.MISSING_MANDATORY_PARAMETER),
                    )
                parameter = arguments[index]
                index += 1

            yield OptionToken(identifier, parameter), index


GNU = GnuReader()


__all__ = (
    "OptionToken",
    "PlainToken",
    "Terminator",
    "Reader",
    "GnuReader",
    "GNU",
)
