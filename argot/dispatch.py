"""
Argot dispatcher splitting.

A dispatcher program reads its own options only up to the first positional,
the command name. Everything after the command is left raw for the selected
sub-program, even when it looks like one of the outer options:

    >>> outer = ProgramSpec(
    ...     options=(OptionSpec("-h", "--help", name="help"),),
    ...     arguments=(ArgumentSpec("command"),),
    ... )
    >>> split(outer, ["--help", "status", "--help"])
    Split(binding=binding({'help': True, 'command': 'status'}), command='status', remainder=['--help'])
"""
import logging
from collections import namedtuple
from collections.abc import Iterable

from .binder import bind
from .readers import GNU, PlainToken, Reader
from .specs import ProgramSpec

logger = logging.getLogger(__name__)


class Split(namedtuple("Split", ("binding", "command", "remainder"))):
    """
    Result of split(): the outer binding, the command name (None when the
    command line holds none) and the raw elements after it.
    """
    __slots__ = ()


def split(spec, arguments, /, reader=GNU):
    """
    Bind the outer options of a dispatcher program and cut at the command.

    Parameters
    - spec: ProgramSpec
      Exactly one ArgumentSpec (the command) and no OthersSpec.
    - arguments: Iterable[str]
      The raw argv without the program name.
    - reader: Reader
      Scanned lazily; elements after the command are never classified.

    Raises
    - ValueError: spec is not shaped like a dispatcher.
    - Any reader/binder fault for the part before the command.
    """
    if not isinstance(spec, ProgramSpec):
        raise TypeError("split() first argument must be a program-spec")
    if len(spec.arguments) != 1 or spec.others is not None:
        raise ValueError("split() program-spec must declare exactly one argument and no others")
    if not isinstance(reader, Reader):
        raise TypeError("split() 'reader' must be a reader")
    if isinstance(arguments, str) or not isinstance(arguments, Iterable):
        raise TypeError("split() second argument must be an iterable of strings")
    arguments = list(arguments)

    tokens = []
    command = None
    remainder = []
    for token, end in reader.scan(arguments, spec.identifiers):
        tokens.append(token)
        if isinstance(token, PlainToken):
            command = token.text
            remainder = arguments[end:]
            break

    binding = bind(spec, tokens)
    logger.debug("split at command %r with %d raw element(s) left", command, len(remainder))
    return Split(binding, command, remainder)


__all__ = (
    "Split",
    "split",
)
