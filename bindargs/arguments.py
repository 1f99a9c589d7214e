r"""
bindargs tokenizer and argument bag.

Overview
- Tokens
  • Switch: presence-only `--name` / `-n` (a flag).
  • SwitchWithValue: `--name=value` / `-n=value` (an option).
  • Operand: anything else, numbered 0, 1, 2, … in encounter order.
  • empty: tombstone left in a slot once its token has been taken.

- parse(arguments) -> ArgumentBag
  • The first element is the program name; the rest is lexed left to right.
  • `--` ends option processing; later elements are kept verbatim apart.
  • `@name` as the first interpreted element declares a command.
  • Malformed switches raise MalformedFlagError / MalformedOptionError; no
    partial bag is returned.

- ArgumentBag
  • Pull-based, consume-once accessors: take_flag, take_option, take_operand,
    take_command, take_remaining, take_ignored, is_empty.
  • Taken slots become `empty` but keep their place, so operand positions
    recorded at parse time stay valid.

Claim order
- `--name value` lexes as Switch("name") followed by Operand("value"). The
  accessor called first decides: take_option("name") claims both tokens and
  returns "value"; take_flag("name") claims only the switch and leaves the
  operand for take_operand().

Quick example:
    >>> bag = parse(["git", "--verbose", "--level", "3", "remote"])
    >>> bag.take_flag("verbose")
    True
    >>> bag.take_option("level")
    '3'
    >>> bag.take_operand()
    'remote'
    >>> bag.is_empty()
    True
"""
import functools
import shlex
import sys
from collections.abc import Iterable

from rich.text import Text

from .faults import *
from .utils import *


class Switch:
    """
    Presence-only switch token, e.g. `--verbose` or `-v`.
    """
    __slots__ = ("name",)

    def __init__(self, name):
        self.name = name

    def __str__(self):
        return ("-" if len(self.name) == 1 else "--") + self.name

    def __repr__(self):
        return f"switch(name={self.name!r})"

    def __rich_repr__(self):
        yield "name", self.name

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash((type(self), self.name))


class SwitchWithValue:
    """
    Switch token carrying an inline value, e.g. `--level=3` or `-l=3`.
    """
    __slots__ = ("name", "value")

    def __init__(self, name, value):
        self.name = name
        self.value = value

    def __str__(self):
        return ("-" if len(self.name) == 1 else "--") + self.name + "=" + self.value

    def __repr__(self):
        return f"switch-with-value(name={self.name!r}, value={self.value!r})"

    def __rich_repr__(self):
        yield "name", self.name
        yield "value", self.value

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return (self.name, self.value) == (other.name, other.value)

    def __hash__(self):
        return hash((type(self), self.name, self.value))


class Operand:
    """
    Positional token. `position` is fixed at parse time and never renumbered.
    """
    __slots__ = ("position", "value")

    def __init__(self, position, value):
        self.position = position
        self.value = value

    def __str__(self):
        return self.value

    def __repr__(self):
        return f"operand(position={self.position!r}, value={self.value!r})"

    def __rich_repr__(self):
        yield "position", self.position
        yield "value", self.value

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return (self.position, self.value) == (other.position, other.value)

    def __hash__(self):
        return hash((type(self), self.position, self.value))


class EmptyType:
    """
    Tombstone for a taken token slot.

    Notes
    - Singleton per process; falsy; renders as an empty string.
    - The type is final; subclassing is blocked.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __str__(self):
        return ""

    def __repr__(self):
        return "empty"

    def __rich__(self):
        return Text(repr(self), style="dim")

    def __init_subclass__(cls, **options):
        raise TypeError("type 'EmptyType' is not an acceptable base type")


empty = EmptyType()


class ArgumentBag:
    """
    A bag of parsed command line arguments.

    Attributes
    - program_name: str
      The first raw element (the executable as invoked), "" if there was none.
    - command: str | None
      The `@name` declaration, if the first interpreted element was one.

    The token storage and the end-of-options tail are owned by the bag and
    only reachable through the take_* accessors and the read-only `tokens` /
    `ignored` snapshots.
    """

    def __init__(self, program_name="", tokens=(), ignored=(), command=None):
        self.program_name = program_name
        self.command = command
        self._tokens = list(tokens)
        self._ignored = list(ignored)

    @property
    def tokens(self):
        """
        Live (not yet taken) tokens in original order.
        """
        return tuple(token for token in self._tokens if token is not empty)

    @property
    def ignored(self):
        """
        Elements found after the end-of-options marker, not yet taken.
        """
        return tuple(self._ignored)

    def take_flag(self, name, /):
        """
        Take the first switch named `name`.

        Returns True when one was found (its slot becomes empty), False
        otherwise. Switches with an inline value never match.
        """
        for index, token in enumerate(self._tokens):
            if isinstance(token, Switch) and token.name == name:
                self._tokens[index] = empty
                return True
        return False

    def take_option(self, name, /):
        """
        Take the value of the first option named `name`.

        Works for both `--name=value` and `--name value`. The first switch
        named `name` decides:
        - with an inline value, that value is returned;
        - followed right away by an operand, both are taken and the operand
          text is returned;
        - otherwise None is returned and nothing is taken (the switch is left
          to be read as a flag).
        """
        for index, token in enumerate(self._tokens):
            if isinstance(token, SwitchWithValue) and token.name == name:
                self._tokens[index] = empty
                return token.value
            if isinstance(token, Switch) and token.name == name:
                try:
                    operand = self._tokens[index + 1]
                except IndexError:
                    return None
                if not isinstance(operand, Operand):
                    return None
                self._tokens[index] = self._tokens[index + 1] = empty
                return operand.value
        return None

    def take_operand(self, position=Unset, /):
        """
        Take an operand.

        With `position`, the operand recorded at that 0-based position is
        taken (None if it was already taken or never existed). Without it,
        the first remaining operand is taken. Positions of the other operands
        are never changed.
        """
        for index, token in enumerate(self._tokens):
            if not isinstance(token, Operand):
                continue
            if position is not Unset and token.position != position:
                continue
            self._tokens[index] = empty
            return token.value
        return None

    def take_command(self):
        """
        Take the `@name` declaration, if any. Subsequent calls return None.
        """
        command, self.command = self.command, None
        return command

    def take_remaining(self):
        """
        Take every token not taken yet, as canonical text, in original order.

        An undrained `@name` declaration comes first. Subsequent calls return
        an empty list. Elements after `--` are not included; see take_ignored().
        """
        remaining = [str(token) for token in self._tokens if token is not empty]
        if (command := self.take_command()) is not None:
            remaining.insert(0, "@" + command)
        self._tokens = [empty] * len(self._tokens)
        return remaining

    def take_ignored(self):
        """
        Take every element that followed the end-of-options marker (`--`).

        Subsequent calls return an empty list.
        """
        ignored, self._ignored = self._ignored, []
        return ignored

    def is_empty(self):
        """
        True when no command, flag, option or operand is left. Ignored elements
        do not count.
        """
        return self.command is None and all(token is empty for token in self._tokens)

    def __len__(self):
        return sum(token is not empty for token in self._tokens)

    def __repr__(self):
        return "argument-bag(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "program_name", self.program_name
        yield "command", self.command
        yield "tokens", self.tokens
        yield "ignored", self.ignored


def _lex_switch(raw, body, *, short, index):
    # `body` is `raw` without its leading dash(es)
    name, separator, value = body.partition("=")
    valid = len(name) == 1 if short else len(name) >= 2

    if separator:
        if not valid:
            raise MalformedOptionError(
                "bad form of option %r at %s position" % (raw, ordinal(index)),
                title="malformed option",
                code=FaultCode.MALFORMED_OPTION,
                hint="use -n=<value> for one-letter names or --name=<value> for longer ones",
                raw=raw,
                index=index,
                docs=getdoc(FaultCode.MALFORMED_OPTION),
            )
        return SwitchWithValue(name, value)

    if not valid:
        raise MalformedFlagError(
            "bad form of flag %r at %s position" % (raw, ordinal(index)),
            title="malformed flag",
            code=FaultCode.MALFORMED_FLAG,
            hint="use -n for one-letter names or --name for longer ones",
            raw=raw,
            index=index,
            docs=getdoc(FaultCode.MALFORMED_FLAG),
        )
    return Switch(name)


def parse(arguments, /):
    """
    Parse command line arguments into an ArgumentBag.

    Parameters
    - arguments: Iterable[str] | str
      Same shape as sys.argv: the program name comes first. A single string
      is split shell-style (shlex.split).

    Grammar (after the program name)
    - empty or whitespace-only elements are skipped and never counted.
    - `--` stops interpretation; every later element goes to the ignored tail.
    - `--name` / `-n` → Switch; `--name=value` / `-n=value` → SwitchWithValue.
      Long names need at least two characters, short names exactly one.
    - `@name` as the first interpreted element declares the command; any
      later element starting with `@` (a bare `@` included) then raises
      TooManyCommandsError. Without a declaration, `@…` is an operand.
    - anything else → Operand(position, value).

    Raises
    - TypeError: when an element is not a string.
    - MalformedFlagError / MalformedOptionError / TooManyCommandsError.
    """
    if isinstance(arguments, str):
        arguments = shlex.split(arguments)
    elif not isinstance(arguments, Iterable):
        raise TypeError("parse() argument must be a string or an iterable of strings")

    iterator = iter(arguments)
    program_name = next(iterator, "")
    if not isinstance(program_name, str):
        raise TypeError("parse() argument must be a string or an iterable of strings")

    tokens = []
    ignored = []
    command = None
    operands = 0
    first = True
    terminated = False

    for index, argument in enumerate(iterator, start=1):
        if not isinstance(argument, str):
            raise TypeError("parse() argument must be a string or an iterable of strings")
        if not argument.strip():
            continue

        if terminated:
            ignored.append(argument)
            continue

        leading, first = first, False

        if argument == "--":
            terminated = True
        elif argument.startswith("--"):
            tokens.append(_lex_switch(argument, argument[2:], short=False, index=index))
        elif argument.startswith("-"):
            tokens.append(_lex_switch(argument, argument[1:], short=True, index=index))
        elif argument.startswith("@") and command is not None:
            raise TooManyCommandsError(
                "command %r at %s position comes after command %r" % (argument, ordinal(index), command),
                title="too many commands",
                code=FaultCode.TOO_MANY_COMMANDS,
                hint="declare a single command, right after the program name (for example: @%s)" % command,
                raw=argument,
                index=index,
                docs=getdoc(FaultCode.TOO_MANY_COMMANDS),
            )
        elif argument.startswith("@") and len(argument) > 1 and leading:
            command = argument[1:]
        else:
            tokens.append(Operand(operands, argument))
            operands += 1

    return ArgumentBag(program_name, tokens, ignored, command)


def parse_env():
    """
    Parse the arguments of the running process (sys.argv).
    """
    return parse(sys.argv)


__all__ = (
    # Tokens
    "Switch",
    "SwitchWithValue",
    "Operand",
    "EmptyType",
    "empty",

    # Bag
    "ArgumentBag",

    # Tokenizer
    "parse",
    "parse_env",
)
