"""
bindargs argument tree.

What this module provides
- ArgsNode: one level of an invocation: its name, the flags and props given
  at that level, and at most one child for the next subcommand level.
- build(bag): group the live tokens of an ArgumentBag into an ArgsNode chain.
- requested_help(tree): find the level that asked for help, if any.

Building rules
- The root is named after the program.
- A declared `@command` becomes the first subcommand level.
- Switch → flag of the current level; SwitchWithValue → prop of the current
  level (a repeated prop keeps the last value and warns).
- Operand → a new subcommand level, which becomes the current one.

Example
    >>> tree = build(parse(["git", "--verbose", "remote", "--level=3"]))
    >>> tree.flags, tree.subcommand.name, dict(tree.subcommand.props)
    ({'verbose'}, 'remote', {'level': '3'})
"""
from .arguments import Switch, SwitchWithValue, Operand
from .faults import *


class ArgsNode:
    """
    A structured view of one command line level.

    Attributes
    - name: str
    - flags: set[str]
    - props: dict[str, str]
    - subcommand: ArgsNode | None (owned, never shared)
    - ignored: list[str] (end-of-options tail; only filled on the root)
    """

    def __init__(self, name="", flags=(), props=(), subcommand=None, ignored=()):
        self.name = name
        self.flags = set(flags)
        self.props = dict(props)
        self.subcommand = subcommand
        self.ignored = list(ignored)

    @property
    def path(self):
        """
        Names from this level down to the deepest subcommand.
        """
        path = [(node := self).name]
        while node.subcommand is not None:
            path.append((node := node.subcommand).name)
        return tuple(path)

    def __iter__(self):
        """
        Walk the chain, this level first.
        """
        node = self
        while node is not None:
            yield node
            node = node.subcommand

    def __eq__(self, other):
        if not isinstance(other, ArgsNode):
            return NotImplemented
        return (
            self.name == other.name and
            self.flags == other.flags and
            self.props == other.props and
            self.ignored == other.ignored and
            self.subcommand == other.subcommand
        )

    __hash__ = None

    def __repr__(self):
        return "args-node(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "name", self.name
        yield "flags", self.flags
        yield "props", self.props
        yield "subcommand", self.subcommand
        if self.ignored:
            yield "ignored", self.ignored


def build(bag, /, **options):
    """
    Assemble the live tokens of `bag` into an ArgsNode chain.

    The bag is only read: nothing is taken from it. `options` (shell, fancy,
    colorful, prog) are forwarded to trigger() with any warning.

    Warns
    - DuplicatedPropWarning when a level receives the same prop twice; the
      last value wins.
    """
    root = current = ArgsNode(bag.program_name, ignored=bag.ignored)

    if bag.command is not None:
        current.subcommand = current = ArgsNode(bag.command)

    for token in bag.tokens:
        if isinstance(token, Switch):
            current.flags.add(token.name)
        elif isinstance(token, SwitchWithValue):
            if token.name in current.props:
                trigger(DuplicatedPropWarning(
                    "option %r was already given to %r; keeping %r" % (token.name, current.name, token.value),
                    title="duplicated option",
                    code=FaultCode.DUPLICATED_PROP,
                    hint="keep a single %s=<value>" % Switch(token.name),
                    name=token.name,
                    docs=getdoc(FaultCode.DUPLICATED_PROP),
                    stacklevel=4,
                ), **options)
            current.props[token.name] = token.value
        elif isinstance(token, Operand):
            current.subcommand = current = ArgsNode(token.value)
        else:
            raise RuntimeError("unexpected token")

    return root


def requested_help(tree, /):
    """
    Return the name of the first level (root first) that carries a `help`
    or `h` flag, or None when no level asked for help.

    Meant to run before validation: help must be reachable even when the rest
    of the command line is invalid.
    """
    for node in tree:
        if "help" in node.flags or "h" in node.flags:
            return node.name
    return None


__all__ = (
    "ArgsNode",
    "build",
    "requested_help",
)
