"""
bindargs faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the parser
  and the schema can report. Codes are grouped by domain so logs and searches
  stay predictable.
- ArgumentKind: what an unrecognized name was meant to be (command, flag or
  prop); its value is the user-facing word.
- CommandException / CommandWarning: base types that carry a message plus
  read-only options, and know how to render themselves with rich.
- trigger(): central entry point to surface any fault (raise or print+exit).
- getdoc(): optional description lookup for a code from the host application.

Two taxonomies
- Lexical (ParseError): MalformedFlagError, MalformedOptionError,
  TooManyCommandsError. Raised by parse(); no partial bag is ever returned.
- Semantic (InvalidArguments): UnrecognizedArgumentError,
  MissingRequiredOptionsError. Raised only when validation is requested, so a
  help request can be served before them.

Payload
- Every fault keeps its payload in `options` and exposes the interesting keys
  as attributes: `raw`/`index` for lexical faults, `name` (and `kind`) for
  semantic ones.

Integration
- Library code raises faults directly. Drivers (see commands.invoke) pass them
  to trigger(fault, shell=..., fancy=..., colorful=...): in non-shell mode the
  exception is raised, in shell mode it is rendered on stderr via rich.
"""
import copy
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum, StrEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce, rename

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - lexical (111xx)
      • MALFORMED_FLAG, MALFORMED_OPTION, TOO_MANY_COMMANDS
    - semantic (112xx)
      • UNRECOGNIZED_COMMAND, UNRECOGNIZED_FLAG, UNRECOGNIZED_PROP,
        MISSING_REQUIRED_OPTIONS
    - warnings (12xxx)
      • DUPLICATED_PROP
    """
    # --- lexical errors (111xx) ---
    MALFORMED_FLAG              = 11101
    MALFORMED_OPTION            = 11102
    TOO_MANY_COMMANDS           = 11103

    # --- semantic errors (112xx) ---
    UNRECOGNIZED_COMMAND        = 11201
    UNRECOGNIZED_FLAG           = 11202
    UNRECOGNIZED_PROP           = 11203
    MISSING_REQUIRED_OPTIONS    = 11211

    # --- warnings (12xxx) ---
    DUPLICATED_PROP             = 12101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ArgumentKind(StrEnum):
    COMMAND = "command"
    FLAG = "flag"
    PROP = "option"


def _payload(name, /):
    # read-only attribute over a payload entry of `options`
    return property(rename(lambda self: self.options.get(name), name))


def _render(fault, palette, /):
    """
    Build the rich renderable shared by exceptions and warnings.

    Layout: a "[ prog — code | title ]" header, the message, and a hint line.
    When the `fancy` option is set, message and hint go inside a Panel titled
    with the header.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)

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

    prog = text(getattr(main, "__prog__", options.get("prog", "")), styler("prog-name"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — " if prog else "",
        text(code.normalize() if code is not None else "", styler("code")),
        " | ",
        text(str(options.get("title", "")).title(), styler("title")),
        " ]"
    )
    message = text(coalesce(fault.message, ""), styler("message"))
    hint = Text.assemble(text(" → ", styler("hint-arrow")), text(options.get("hint", ""), styler("hint")))

    if options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class CommandException(Exception):
    """
    Base type for every error raised by bindargs.

    Parameters
    - message: str (positional-only); the one-sentence body.
    - **options: title, code, hint, and any payload (raw, index, name, kind…),
      plus rendering switches (shell, fancy, colorful, prog).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    code = _payload("code")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ParseError(CommandException):
    raw = _payload("raw")
    index = _payload("index")


class MalformedFlagError(ParseError): ...
class MalformedOptionError(ParseError): ...
class TooManyCommandsError(ParseError): ...


class InvalidArguments(CommandException):
    name = _payload("name")


class UnrecognizedArgumentError(InvalidArguments):
    kind = _payload("kind")


class MissingRequiredOptionsError(InvalidArguments): ...


class CommandWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    code = _payload("code")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=self.options.get("stacklevel", 3))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicatedPropWarning(CommandWarning):
    name = _payload("name")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode, rendering happens via the rich console; otherwise,
      exceptions are raised and warnings are emitted with warnings.warn.

    typical options
    - shell, fancy, colorful, prog.
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
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode members and values are short documentation strings. returns
    None when nothing is registered.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ArgumentKind",
    "CommandException",
    "ParseError",
    "MalformedFlagError",
    "MalformedOptionError",
    "TooManyCommandsError",
    "InvalidArguments",
    "UnrecognizedArgumentError",
    "MissingRequiredOptionsError",
    "CommandWarning",
    "DuplicatedPropWarning",
    "trigger",
    "getdoc",
)
