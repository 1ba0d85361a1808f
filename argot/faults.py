"""
Argot faults (binding errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing issue.
- BindingError / BindingWarning: base types that carry a message + options and
  know how to render themselves with rich.
- The five binding error kinds raised by the reader and the binder, plus the
  routing error raised by dispatcher programs.
- trigger(): central entry point to surface a fault (raise or render).
- getdoc(): optional description lookup for a code from the host application.

Payload
- Every fault keeps its context in `options`, a read-only mapping. The engine
  always fills the machine-readable keys of its kind:
  • UnknownOptionError:             identifier
  • MissingMandatoryParameterError: name, identifier
  • DuplicateOptionError:           name
  • ConversionFailedError:          name, value, reason
  • UnexpectedArgumentError:        value
  • UnknownCommandError:            command, suggestions
  Rendering keys (title, hint, program, shell, fancy, colorful) are merged in
  by trigger().

Integration
- The reader and binder raise faults directly (fail fast, no partial binding).
- The program layer catches them and calls trigger(fault, **runtime options):
  in shell mode the fault is printed through a stderr rich console and the
  process exits with status 1; otherwise it is re-raised unchanged.
"""
import inspect
import sys
import warnings
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
    canonical fault codes (stable identifiers).

    grouping
    - reading (2110x): UNKNOWN_OPTION, MISSING_MANDATORY_PARAMETER
    - binding (2111x): DUPLICATE_OPTION, CONVERSION_FAILED, UNEXPECTED_ARGUMENT
    - routing (2112x): UNKNOWN_COMMAND
    - warnings (2210x): CONVERSION_WARNING
    """
    # --- reader errors ---
    UNKNOWN_OPTION              = 21101
    MISSING_MANDATORY_PARAMETER = 21102

    # --- binder errors ---
    DUPLICATE_OPTION            = 21111
    CONVERSION_FAILED           = 21112
    UNEXPECTED_ARGUMENT         = 21113

    # --- dispatcher program errors ---
    UNKNOWN_COMMAND             = 21121

    # --- warnings ---
    CONVERSION_WARNING          = 22101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, title_style, message_style):
    main = __import__("__main__")
    options = fault.options
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = options.get("colorful", False)
    fancy = options.get("fancy", False)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), styles[style] if colorful else "")

    program = getattr(options.get("program"), "name", None)
    prog = text(getattr(main, "__prog__", program or "argot"), "prog-name")

    header = Text.assemble(
        "[ ",
        prog,
        " - ",
        text(fault.code.normalize(), "code"),
        " | ",
        text(options.get("title", type(fault).__name__).title(), title_style),
        " ]"
    )
    message = text(fault.message, message_style)
    parts = [message]
    if hint := options.get("hint"):
        parts.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
    if docs := options.get("docs"):
        parts.append(text(docs, "docs"))

    if fancy:
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class BindingError(Exception):
    """
    Base type of every fault that aborts a bind attempt.

    Parameters
    - message: str
      Lower-case, one-sentence description of what went wrong.
    - options: Any
      Payload (see the module docstring) and rendering context.
    """
    code = Unset

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(
            self,
            {
                "prog-name": "bold #E6E6F0",
                "code": "bold #00E5FF",
                "error-title": "bold #FF4DA6",
                "error-message": "#C8C8D0",
                "hint-arrow": "#9CE19C dim",
                "hint": "italic #9CE19C",
                "docs": "dim",
            },
            "error-title",
            "error-message",
        )

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replacement = type(self)(self.message, **{**self.options, **overrides})
        replacement.__cause__ = self.__cause__
        return replacement.with_traceback(self.__traceback__)


class UnknownOptionError(BindingError):
    code = FaultCode.UNKNOWN_OPTION


class MissingMandatoryParameterError(BindingError):
    code = FaultCode.MISSING_MANDATORY_PARAMETER


class DuplicateOptionError(BindingError):
    code = FaultCode.DUPLICATE_OPTION


class ConversionFailedError(BindingError):
    code = FaultCode.CONVERSION_FAILED


class UnexpectedArgumentError(BindingError):
    code = FaultCode.UNEXPECTED_ARGUMENT


class UnknownCommandError(BindingError):
    code = FaultCode.UNKNOWN_COMMAND


class ConversionError(ValueError):
    """
    Raised by conversion functions to reject a raw string.

    The binder turns it (and any other exception escaping a conversion
    function) into a ConversionFailedError carrying the binding name.
    """


class BindingWarning(Warning):
    code = Unset

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(
            self,
            {
                "prog-name": "bold #E6E6F0",
                "code": "bold #FFB400",
                "warning-title": "bold #FFC2E0",
                "warning-message": "#D6D6DE",
                "hint-arrow": "#B8EFAF dim",
                "hint": "italic #B8EFAF",
                "docs": "dim",
            },
            "warning-title",
            "warning-message",
        )

    def __trigger__(self):
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ConversionWarning(BindingWarning):
    code = FaultCode.CONVERSION_WARNING


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise errors
      are raised and warnings are issued through the warnings module.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "BindingError",
    "UnknownOptionError",
    "MissingMandatoryParameterError",
    "DuplicateOptionError",
    "ConversionFailedError",
    "UnexpectedArgumentError",
    "UnknownCommandError",
    "ConversionError",
    "BindingWarning",
    "ConversionWarning",
    "trigger",
    "getdoc",
)
