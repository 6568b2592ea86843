"""
Linescript faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue raised while
  tokenizing, expanding, binding, or tabulating script lines.
- ScriptException / ScriptWarning: base types that carry a message plus an
  immutable bag of options (keyword, index, token, line, hint, ...) and know how
  to render themselves through rich.
- ScriptExit: groups every error of a deferred parse into one exception.
- trigger(): central entry point to surface a fault with runtime options.
- getdoc(): optional description lookup for a code from the host application.

Message conventions
- Messages name the command keyword and the position of the offending argument
  ("second argument of 'OUTPUT'"). The line number is never part of the message;
  the parser adds it as the 'line' option and the renderer shows it in the header.
- Lowercased, one sentence, one hint.

Integration
- The tokenizer, expander, binder and table raise faults directly.
- The parser catches them per line, merges 'line'/'source' and its rendering
  flags with copy.replace(), and calls trigger().
- Outside shell mode exceptions are raised and warnings go through
  warnings.warn(); in shell mode both are printed with rich.
"""
import copy
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
    - tokenizer (2110x): MALFORMED_QUOTE
    - routing (2111x): UNKNOWN_COMMAND
    - binding (2112x): TOO_MANY_ARGUMENTS, MISSING_ARGUMENT, INVALID_PARAMETER_NAME
    - command table (2113x): DUPLICATED_COMMAND
    - warnings (22xxx): UNSET_VARIABLE
    """
    # --- tokenizer errors (21xxx) ---
    MALFORMED_QUOTE             = 21101

    # --- routing errors (21xxx) ---
    UNKNOWN_COMMAND             = 21111

    # --- binding errors (21xxx) ---
    TOO_MANY_ARGUMENTS          = 21121
    MISSING_ARGUMENT            = 21122
    INVALID_PARAMETER_NAME      = 21123

    # --- command table errors (21xxx) ---
    DUPLICATED_COMMAND          = 21131

    # --- warnings (22xxx) ---
    UNSET_VARIABLE              = 22111

    def normalize(self):
        """
        return a host-normalized label for this code.

        a __codes__ mapping in __main__ may override numeric ids; otherwise the
        numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _renderer(fault, palette):
    # Shared header/body assembly for exceptions and warnings.
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    where = str(getattr(main, "__prog__", options.get("source", "linescript")))
    if options.get("line") is not None:
        where += ":%d" % options["line"]

    code = options.get("code")
    header = Text.assemble(
        "[ ",
        text(where, styler("source")),
        " — ",
        text(code.normalize() if code is not None else "?", styler("code")),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), styler("title")),
        " ]"
    )
    message = text(fault.message, styler("message"))
    parts = [message]
    if hint := options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy", False):
        try:
            width = int((console.width - 4) * options["ratio"])
        except KeyError:
            width = None
        return Panel(Group(*parts), title=header, title_align="left", width=width)

    return Group(header, *parts)


class ScriptException(Exception):
    """
    base of every linescript error.

    options
    - title, code, hint, docs: presentation.
    - keyword, index, token, parameter, count, tokens: where the problem is on
      the line (count: how many values competed; tokens: arguments on the line).
    - line, source: added by the parser.
    - shell, fancy, colorful, deferred: rendering flags merged by trigger().
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def keyword(self):
        return self.options.get("keyword")

    @property
    def line(self):
        return self.options.get("line")

    def __rich__(self):
        return _renderer(self, {
            "source": "bold #E6E6F0",  # near-white script name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MalformedQuoteError(ScriptException): ...
class UnknownCommandError(ScriptException): ...
class TooManyArgumentsError(ScriptException): ...
class MissingArgumentError(ScriptException): ...
class InvalidParameterNameError(ScriptException): ...
class DuplicatedCommandError(ScriptException): ...


class ScriptWarning(Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def line(self):
        return self.options.get("line")

    def __rich__(self):
        return _renderer(self, {
            "source": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=4)
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnsetVariableWarning(ScriptWarning): ...


class ScriptExit(ExceptionGroup[ScriptException]):
    """every error collected by a deferred parse, in line order."""

    def __new__(cls, exceptions, **options):
        return super().__new__(cls, "bad script", exceptions)

    def __init__(self, exceptions, **options):
        super().__init__("bad script", tuple(exceptions))
        self.options = MappingProxyType(options)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        styles = defaultdict(str, {
            "source": "bold #E6E6F0",
            "title": "bold #FF4DA6",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style):
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(getattr(main, "__prog__", self.options.get("source", "linescript")), "source"),
            " — ",
            text(self.message.title(), "title"),
            " ]"
        )
        renders = [copy.replace(exception, ratio=2/3) for exception in self.exceptions]

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.exceptions, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged with copy.replace() before triggering.
    - outside shell mode errors are raised and warnings are warned; in shell
      mode both are printed to stderr with rich.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation for a fault code, read from __main__.__docs__.

    returns None when the host application documents nothing for the code.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ScriptException",
    "MalformedQuoteError",
    "UnknownCommandError",
    "TooManyArgumentsError",
    "MissingArgumentError",
    "InvalidParameterNameError",
    "DuplicatedCommandError",
    "ScriptWarning",
    "UnsetVariableWarning",
    "ScriptExit",
    "FaultCode",
    "trigger",
    "getdoc",
)
