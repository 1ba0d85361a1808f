"""
Argot program layer: declare, compose and run command-line programs.

What this module provides
- Program: wraps a Python callable whose parameter defaults are specs
  (OptionSpec, ArgumentSpec, OthersSpec) into a runnable program. Unnamed
  specs take the parameter name; the ProgramSpec is built once.
- Dispatcher programs: parent.command(callback) mounts a sub-program. A parent
  with children reads its own options up to the command name (see
  argot.dispatch.split), runs its callback, then runs the child on the rest.
- program(...): create a Program or a decorator producing one.
- invoke(object, prompt): run a program (or a plain callable) on an argv.

Values handed to the callback
- option with parameter → the reduced parameter value (None when absent)
- option without parameter → the reduced value (False when absent)
- argument → the converted value or its default
- others → list of converted values

Runtime flags (inherited from the parent when left Unset)
- shell: faults are printed with rich to stderr and the process exits with 1,
  warnings are printed; otherwise faults are raised and warnings issued.
- fancy: faults are drawn inside a panel.
- colorful: faults are styled (see __styles__ in argot.faults).

Quick start
    from argot import program, OptionSpec, ArgumentSpec, Arity, invoke

    @program(shell=True, colorful=True)
    def tool(
        path=ArgumentSpec(type="path"),
        /,
        count=OptionSpec("--count", "-c", arity=Arity.MANDATORY, type="integer"),
        *,
        verbose=OptionSpec("-v", "--verbose", policy="count"),
    ):
        print(path, count, verbose)

    if __name__ == "__main__":
        invoke(tool, "--count 2 -v -v ./README.md")
"""
import difflib
import inspect
import logging
import shlex
import sys
import warnings
from collections.abc import Iterable
from inspect import Parameter
from types import MappingProxyType

from rich.text import Text

from .binder import parse
from .dispatch import split
from .faults import *
from .readers import GNU, Reader
from .specs import ArgumentSpec, OptionSpec, OthersSpec, ProgramSpec
from .utils import *
from .utils import IntrospectableType

logger = logging.getLogger(__name__)


def _process_source(cls, callback):
    """
    Build the ProgramSpec from the callback signature.

    Returns the spec and the (parameter, spec) pairs used to deliver values.
    """
    try:
        signature = inspect.signature(callback)
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'callback' must be callable") from None
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'callback' must be an inspectable callable") from None

    options = []
    arguments = []
    others = Unset
    parameters = []

    for parameter in signature.parameters.values():
        if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
            raise TypeError(f"{cls.__typename__} callback cannot take *{parameter.name} or **{parameter.name}")
        spec = parameter.default
        if not isinstance(spec, OptionSpec | ArgumentSpec | OthersSpec):
            raise TypeError(
                f"{cls.__typename__} parameter {parameter.name!r} must default to an "
                f"option-spec, argument-spec or others-spec"
            )
        if spec.name is None:
            spec = spec.named(parameter.name)

        match spec:
            case OptionSpec():
                options.append(spec)
            case ArgumentSpec():
                arguments.append(spec)
            case OthersSpec() if others is Unset:
                others = spec
            case OthersSpec():
                raise ValueError(f"{cls.__typename__} callback can declare only one others-spec")
        parameters.append((parameter, spec))

    return ProgramSpec(options, arguments, others), tuple(parameters)


def _sanitize_prompt(prompt):
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        prompt = list(prompt)
        for item in prompt:
            if not isinstance(item, str):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        return prompt
    raise TypeError("__invoke__() argument must be a string or an iterable of strings")


class Program(metaclass=IntrospectableType):
    """
    Runnable program wrapping a Python callable.

    Parameters
    - callback: Callable
      Every parameter must default to a spec; positional-only parameters are
      passed positionally, the rest by keyword.
    - parent: Program | Unset
      Mount this program as a command of `parent`.
    - name: str | Unset
      Command name (defaults to the callback's __name__).
    - descr: str | Text | Unset
      Short description (defaults to the callback's docstring).
    - reader: Reader
      Reader used for this program (default GNU).
    - shell, fancy, colorful: bool | Unset
      Runtime flags; Unset inherits from the parent (or False).

    Raises
    - TypeError/ValueError on a malformed callback, a parent that takes
      arguments, or a command name already in use.
    """

    __introspectable__ = (
        "name",
        "descr",
        "spec",
        "reader",
        "parent",
        "children",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "name",
        "descr",
        "spec",
        "children",
    )

    def __init__(
            self,
            callback,
            /,
            parent=Unset,
            name=Unset,
            descr=Unset,
            *,
            reader=GNU,
            shell=Unset,
            fancy=Unset,
            colorful=Unset,
    ):
        cls = type(self)
        if not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")
        if not isinstance(parent, Program | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a program")
        if not isinstance(reader, Reader):
            raise TypeError(f"{cls.__typename__} 'reader' must be a reader")

        name = coalesce(name, getattr(callback, "__name__", None))
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' cannot be empty")

        descr = coalesce(descr, inspect.getdoc(callback))
        if not isinstance(descr, str | Text | None):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")

        self._callback = callback
        self._spec, self._parameters = _process_source(cls, callback)
        self._router = None
        self._name = name
        self._descr = descr
        self._reader = reader
        self._parent = coalesce(parent)
        self._children = {}
        self._shell = bool(coalesce(shell, getattr(parent, "shell", False)))
        self._fancy = bool(coalesce(fancy, getattr(parent, "fancy", False)))
        self._colorful = bool(coalesce(colorful, getattr(parent, "colorful", False)))

        if self._parent is not None:
            self._parent._mount(self)

    @property
    def children(self):
        return MappingProxyType(self._children)

    @property
    def root(self):
        """
        Topmost program of this hierarchy.
        """
        program = self
        while program.parent is not None:
            program = program.parent
        return program

    @property
    def path(self):
        """
        Programs from the root down to this one.
        """
        path = [program := self]
        while program.parent is not None:
            path.append(program := program.parent)
        return tuple(reversed(path))

    def _mount(self, child):
        if self._spec.arguments or self._spec.others is not None:
            raise ValueError(f"{type(self).__typename__} {self._name!r} takes arguments and cannot have commands")
        if self._children.setdefault(child.name, child) is not child:
            raise ValueError(f"{type(self).__typename__} command name {child.name!r} is already in use")
        if self._router is None:
            self._router = self._spec.__replace__(arguments=(ArgumentSpec("command", descr="command to run"),))

    def __call__(self, /, *args, **kwargs):
        return self._callback(*args, **kwargs)

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Create a sub-program under this program (direct or decorator form).
        """
        return program(source, self, *args, **kwargs)

    def trigger(self, fault, /, **options):
        """
        Surface `fault` with this program's runtime flags.
        """
        trigger(fault, **options, program=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)

    def _deliver(self, binding):
        args = []
        kwargs = {}
        for parameter, spec in self._parameters:
            if isinstance(spec, OptionSpec) and spec.parameter is not None:
                value = binding[spec.parameter]
            else:
                value = binding[spec.name]
            if parameter.kind is Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[parameter.name] = value
        return self._callback(*args, **kwargs)

    def _read(self, arguments):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                if self._children:
                    outcome = split(self._router, arguments, reader=self._reader)
                else:
                    outcome = parse(self._spec, arguments, reader=self._reader)
            except BindingError as fault:
                self.trigger(fault)
                raise
        for warning in caught:
            if isinstance(warning.message, BindingWarning):
                self.trigger(warning.message)
            else:
                warnings.warn_explicit(warning.message, warning.category, warning.filename, warning.lineno)
        return outcome

    def __invoke__(self, prompt=Unset):
        """
        Run this program on a command line.

        Parameters
        - prompt:
          • Unset: read sys.argv[1:].
          • str: split with shlex.split.
          • Iterable[str]: used as-is.

        Returns
        - What the callback (or, for dispatchers, the selected command) returns.
        """
        return self._run(_sanitize_prompt(prompt))

    def _run(self, arguments):
        outcome = self._read(arguments)
        if not self._children:
            logger.debug("running %r", self._name)
            return self._deliver(outcome)

        binding, command, remainder = outcome
        child = None
        if command is not None and (child := self._children.get(command)) is None:
            suggestions = difflib.get_close_matches(command, list(self._children), 5)
            try:
                hint = "did you mean %r?" % suggestions[0]
            except IndexError:
                hint = "available commands: %s" % ", ".join(self._children)
            self.trigger(UnknownCommandError(
                "unknown command %r" % command,
                title="unknown command",
                command=command,
                suggestions=suggestions,
                hint=hint,
                docs=getdoc(FaultCode.UNKNOWN_COMMAND),
            ))

        result = self._deliver(binding)
        if child is None:
            return result
        logger.debug("routing %r to command %r with %d argument(s)", self._name, command, len(remainder))
        return child._run(remainder)


def program(source=Unset, /, *args, **kwargs):
    """
    Create a Program, or return a decorator that will.

    Forms
    - program(callback, ...) -> Program
    - @program(...) -> decorator
    - @program -> Program
    """
    @rename("program")
    def wrapper(source, /):
        if not callable(source) or isinstance(source, Program):
            raise TypeError("@program() must be applied to a callable")
        return Program(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def invoke(object, prompt=Unset, /):
    """
    Run `object` on a command line.

    - Objects providing __invoke__(prompt) are run directly.
    - Plain callables are wrapped with program() first.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    if callable(object):
        return invoke(program(object), prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "Program",
    "program",
    "invoke",
)
