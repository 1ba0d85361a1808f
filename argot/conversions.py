"""
Argot conversion registry.

A conversion turns one raw command-line string into a typed value. It is a
named pure function plus the type its results must have:

    Conversion(name, function, returns)

convert(conversion, raw) calls the function and checks the result type. The
function signals a rejected string by raising (ConversionError, ValueError,
anything); a result of the wrong type is a rejection too. The binder wraps
every rejection in a ConversionFailedError naming the option or argument.

Built-ins
- string   str, identity
- integer  int (decimal, "_" separators allowed)
- number   float
- boolean  yes/no, true/false, on/off, 1/0 (case-insensitive)
- keyword  lower-case identifier with hyphens ("fast", "dry-run")
- path     pathlib.Path

Factories
- choice(*values): accept exactly one of the given strings.
- ranged(conversion, minimum=, maximum=): bound a numeric conversion.

Warnings
- A conversion function reports a doubtful but accepted string with
  warn_conversion(message); inside a bind the ConversionWarning names the
  option or argument and the raw value. Other warnings pass through untouched.

Registration happens through register_conversion(); the registry is
copy-on-write (see argot.utils.Registry) so lookups never lock.
"""
import contextlib
import contextvars
import pathlib
import re
import warnings
from collections import namedtuple

from .faults import ConversionError, ConversionWarning, FaultCode, getdoc
from .utils import *


class Conversion(namedtuple("Conversion", ("name", "function", "returns"))):
    __slots__ = ()

    def __new__(cls, name, function, returns=object):
        if not isinstance(name, str):
            raise TypeError("conversion 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("conversion 'name' cannot be empty")
        if not callable(function):
            raise TypeError("conversion 'function' must be callable")
        if not isinstance(returns, type | tuple):
            raise TypeError("conversion 'returns' must be a type or a tuple of types")
        return super().__new__(cls, name, function, returns)

    def __call__(self, raw, /):
        return convert(self, raw)


def convert(conversion, raw, /):
    """
    Apply `conversion` to the raw string `raw`.

    Raises
    - ConversionError: the function returned a value that is not an instance of
      conversion.returns.
    - Anything the conversion function itself raises, unchanged.
    """
    result = conversion.function(raw)
    if not isinstance(result, conversion.returns):
        raise ConversionError(
            "%s conversion returned %s, expected %s" % (
                conversion.name,
                type(result).__name__,
                getattr(conversion.returns, "__name__", "one of %r" % (conversion.returns,)),
            )
        )
    return result


_subject = contextvars.ContextVar("argot.conversions.subject", default=None)


@contextlib.contextmanager
def converting(name, raw, /):
    """
    Mark the binding name and raw value being converted in the current context.

    Context variables are per thread (and per task), so parallel binds never
    see each other's subject.
    """
    token = _subject.set((name, raw))
    try:
        yield
    finally:
        _subject.reset(token)


def warn_conversion(message, /, **options):
    """
    Issue a ConversionWarning from inside a conversion function.

    Inside a bind the warning carries the binding `name` and the raw `value`
    being converted; extra options (e.g. hint=) are kept.
    """
    if (subject := _subject.get()) is not None:
        name, raw = subject
        options = {"name": name, "value": raw} | options
    options = {"title": "conversion warning", "docs": getdoc(FaultCode.CONVERSION_WARNING)} | options
    warnings.warn(ConversionWarning(message, **options), stacklevel=2)


def _integer(raw):
    try:
        return int(raw, 10)
    except ValueError:
        raise ConversionError("%r is not a decimal integer" % raw) from None


def _number(raw):
    try:
        return float(raw)
    except ValueError:
        raise ConversionError("%r is not a number" % raw) from None


_BOOLEANS = {
    "yes": True, "true": True, "on": True, "1": True,
    "no": False, "false": False, "off": False, "0": False,
}


def _boolean(raw):
    try:
        return _BOOLEANS[raw.strip().lower()]
    except KeyError:
        raise ConversionError("%r is not a boolean (use yes/no, true/false, on/off or 1/0)" % raw) from None


def _keyword(raw):
    if not re.fullmatch(r"[^\W\d_][^\W_]*(?:-[^\W_]+)*", raw):
        raise ConversionError("%r is not a keyword" % raw)
    return raw.lower()


def _path(raw):
    if not raw:
        raise ConversionError("empty path")
    return pathlib.Path(raw)


def choice(*values, name=Unset):
    """
    Build a conversion accepting exactly one of `values`.

    The comparison is exact (case-sensitive). The matching string is returned.
    """
    if not values:
        raise TypeError("choice() requires at least one value")
    for value in values:
        if not isinstance(value, str):
            raise TypeError("choice() values must be strings")
    if len(set(values)) != len(values):
        raise ValueError("choice() values cannot contain duplicates")

    def function(raw):
        if raw not in values:
            raise ConversionError("%r is not one of: %s" % (raw, " · ".join(values)))
        return raw

    return Conversion(coalesce(name, "choice(%s)" % ", ".join(values)), rename(function, "choice"), str)


def ranged(conversion, /, minimum=None, maximum=None):
    """
    Bound a numeric conversion to [minimum, maximum] (either side optional).
    """
    conversion = resolve_conversion(conversion)
    if minimum is not None and maximum is not None and minimum > maximum:
        raise ValueError("ranged() minimum cannot exceed maximum")

    def function(raw):
        value = convert(conversion, raw)
        if minimum is not None and value < minimum:
            raise ConversionError("%r is below the minimum of %r" % (value, minimum))
        if maximum is not None and value > maximum:
            raise ConversionError("%r is above the maximum of %r" % (value, maximum))
        return value

    bounds = "%s..%s" % ("" if minimum is None else minimum, "" if maximum is None else maximum)
    return Conversion("%s[%s]" % (conversion.name, bounds), rename(function, "ranged"), conversion.returns)


conversion_registry = Registry("conversion", {
    "string": Conversion("string", str, str),
    "integer": Conversion("integer", _integer, int),
    "number": Conversion("number", _number, float),
    "boolean": Conversion("boolean", _boolean, bool),
    "keyword": Conversion("keyword", _keyword, str),
    "path": Conversion("path", _path, pathlib.Path),
})


def register_conversion(name, function, /, returns=object, *, replace=False):
    """
    Register a named conversion for use as `type="name"` in specs.

    Registration should happen during single-threaded setup; it is safe later
    too, since the registry publishes copy-on-write snapshots.
    """
    return conversion_registry.register(name, Conversion(name, function, returns), replace=replace)


def resolve_conversion(object, /):
    """
    Normalize a spec's `type` into a Conversion.

    Accepted
    - Conversion: returned as-is.
    - str: looked up in the registry (KeyError-free: unknown names raise ValueError).
    - class: used as the function and as its own return type (int, float, Path, an Enum).
    - any other callable: used as the function, results are not type-checked.
    """
    if isinstance(object, Conversion):
        return object
    if isinstance(object, str):
        try:
            return conversion_registry[object]
        except KeyError:
            raise ValueError("unknown conversion %r" % object) from None
    if isinstance(object, type):
        return Conversion(object.__name__, object, object)
    if callable(object):
        return Conversion(getattr(object, "__name__", "conversion"), object)
    raise TypeError("conversion must be a registered name, a Conversion, or a callable")


__all__ = (
    "Conversion",
    "convert",
    "choice",
    "ranged",
    "conversion_registry",
    "register_conversion",
    "resolve_conversion",
    "warn_conversion",
)
