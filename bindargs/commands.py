"""
bindargs command layer: declare, validate and canonicalize command trees.

What this module provides
- Flag: presence-only switch definition (`--verbose`), with aliases.
- Prop: value-bearing definition (`--level=3`), with aliases, optionally required.
- Command: a node of the command tree: names, help, props, flags and
  subcommands. Root and subcommands use the same type.
- validate(command, args) / resolve_aliases(command, args): the two recursive
  walks pairing a Command with an ArgsNode chain.
- invoke(command, prompt): convenience runner (parse, help, validate, resolve)
  with the usual shell/fancy/colorful switches.

Definitions are immutable
- Every field is exposed through a read-only property.
- The fluent builders (add_alias, make_required, add_flag, add_prop,
  add_command) return a new object built with copy.replace(); the receiver
  is left untouched.

Validation order (per level, root first)
1. every flag resolves to a Flag (by name or alias),
2. every prop resolves to a Prop,
3. every required Prop was given (first missing one in definition order),
4. the subcommand, if any, resolves to a child Command; then recurse.
The first failure stops the walk: deeper levels are not looked at.

Quick start
    from bindargs import Command, Flag, Prop, invoke

    git = (
        Command("git", help="the stupid content tracker")
        .add_flag(Flag("verbose", help="be loud").add_alias("v"))
        .add_command(
            Command("remote", help="manage remotes")
            .add_prop(Prop("level", help="verbosity level").add_alias("l").make_required())
        )
    )

    if __name__ == "__main__":
        args = invoke(git, shell=True, colorful=True)
"""
import copy
import sys
from collections import defaultdict

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import parse
from .faults import *
from .nodes import build, requested_help
from .utils import *


def _sanitize_names(cls, names, /, *, switch):
    """
    Internal: validate and normalize the names of a definition.

    - at least one name is required (the first one is canonical);
    - names are non-empty strings once trimmed, without duplicates;
    - flag and prop names cannot contain '=' (it separates the inline value)
      and cannot start with '-' (the dashes belong to the command line, not
      to the name).
    """
    typename = cls.__name__.lower()
    if not names:
        raise TypeError(f"{typename} must specify at least one name")

    sanitized = []
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{typename} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{typename} names cannot be empty-strings")
        elif switch and ("=" in name or name.startswith("-")):
            raise ValueError(f"{typename} names cannot contain '=' nor start with '-' (got {name!r})")
        elif name in sanitized:
            raise ValueError(f"{typename} names cannot contain duplicates")
        sanitized.append(name)
    return tuple(sanitized)


def _sanitize_help(cls, help, /):
    if not isinstance(help, str | Text | Unset):
        raise TypeError(f"{cls.__name__.lower()} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__name__.lower()} 'help' cannot be empty")
    return coalesce(help)


def _switch(name, /):
    # how a flag/prop name is typed on the command line
    return ("-" if len(name) == 1 else "--") + name


class Flag:
    """
    Presence-only switch definition.

    Parameters
    - names: one or more str (the first one is canonical), without dashes:
      Flag("verbose", "v") matches both `--verbose` and `-v`.
    - help: str | Text (optional)
    """

    names = mirror("names")
    help = mirror("help")

    def __init__(self, *names, help=Unset):
        self._names = _sanitize_names(type(self), names, switch=True)
        self._help = _sanitize_help(type(self), help)

    @property
    def name(self):
        """
        The canonical (first declared) name.
        """
        return self._names[0]

    def add_alias(self, alias, /):
        return copy.replace(self, names=self._names + (alias,))

    def __replace__(self, /, **overrides):
        return type(self)(*overrides.get("names", self._names), help=overrides.get("help", self._help or Unset))

    def __repr__(self):
        return f"flag(names={self.names!r}, help={self.help!r})"

    def __rich_repr__(self):
        yield "names", self.names
        yield "help", self.help


class Prop:
    """
    Value-bearing definition (an option).

    Parameters
    - names: one or more str (the first one is canonical), without dashes:
      Prop("level", "l") matches `--level=3`, `--level 3`, `-l=3`.
    - help: str | Text (optional)
    - required: bool; validation fails when a required prop is absent.
    """

    names = mirror("names")
    help = mirror("help")
    required = mirror("required")

    def __init__(self, *names, help=Unset, required=False):
        self._names = _sanitize_names(type(self), names, switch=True)
        self._help = _sanitize_help(type(self), help)
        self._required = bool(required)

    @property
    def name(self):
        return self._names[0]

    def add_alias(self, alias, /):
        return copy.replace(self, names=self._names + (alias,))

    def make_required(self):
        return copy.replace(self, required=True)

    def __replace__(self, /, **overrides):
        return type(self)(
            *overrides.get("names", self._names),
            help=overrides.get("help", self._help or Unset),
            required=overrides.get("required", self._required),
        )

    def __repr__(self):
        return f"prop(names={self.names!r}, help={self.help!r}, required={self.required!r})"

    def __rich_repr__(self):
        yield "names", self.names
        yield "help", self.help
        yield "required", self.required


class Command:
    """
    Blueprint of what a valid command line looks like, for one level.

    Parameters
    - names: one or more str; the first one is canonical. Aliases of the root
      command have no visible effect (the root node is named after the
      program).
    - help: str | Text (optional)
    - props: Iterable[Prop]
    - flags: Iterable[Flag]
    - commands: Iterable[Command]; the subcommands.

    Name lookups (get_flag, get_prop, get_command) are linear and match the
    canonical name as well as any alias. Siblings are expected to have
    distinct names; this is not checked.
    """

    names = mirror("names")
    help = mirror("help")
    props = mirror("props")
    flags = mirror("flags")
    commands = mirror("commands")

    def __init__(self, *names, help=Unset, props=(), flags=(), commands=()):
        self._names = _sanitize_names(type(self), names, switch=False)
        self._help = _sanitize_help(type(self), help)
        self._props = tuple(props)
        self._flags = tuple(flags)
        self._commands = tuple(commands)

        for sequence, kind in ((self._props, Prop), (self._flags, Flag), (self._commands, Command)):
            if not all(isinstance(item, kind) for item in sequence):
                raise TypeError(f"command {kind.__name__.lower()}s must be {kind.__name__.lower()} definitions")

    @property
    def name(self):
        return self._names[0]

    # ── Builders ──────────────────────────────────────────────────────────────

    def add_alias(self, alias, /):
        return copy.replace(self, names=self._names + (alias,))

    def add_flag(self, flag, /):
        return copy.replace(self, flags=self._flags + (flag,))

    def add_prop(self, prop, /):
        return copy.replace(self, props=self._props + (prop,))

    def add_command(self, command, /):
        return copy.replace(self, commands=self._commands + (command,))

    def __replace__(self, /, **overrides):
        return type(self)(
            *overrides.get("names", self._names),
            help=overrides.get("help", self._help or Unset),
            props=overrides.get("props", self._props),
            flags=overrides.get("flags", self._flags),
            commands=overrides.get("commands", self._commands),
        )

    # ── Lookups ───────────────────────────────────────────────────────────────

    def get_flag(self, name, /):
        return next((flag for flag in self._flags if name in flag._names), None)

    def get_prop(self, name, /):
        return next((prop for prop in self._props if name in prop._names), None)

    def get_command(self, name, /):
        return next((command for command in self._commands if name in command._names), None)

    # ── Parsing ───────────────────────────────────────────────────────────────

    def validate(self, args, /):
        validate(self, args)

    def resolve_aliases(self, args, /, **options):
        resolve_aliases(self, args, **options)

    def parse(self, arguments, /):
        """
        Parse `arguments` (sys.argv-shaped), check them against this command
        and return the ArgsNode tree with canonical names.

        Raises
        - ParseError subclasses for lexical problems.
        - InvalidArguments subclasses for schema mismatches.
        """
        args = build(parse(arguments))
        validate(self, args)
        resolve_aliases(self, args)
        return args

    # ── Help ──────────────────────────────────────────────────────────────────

    def help_for(self, args, /):
        """
        Return the Command whose help was requested in `args`, or None.

        Definitions are walked alongside the argument levels. When a level
        names a subcommand that does not exist, the deepest matching
        definition is returned instead.
        """
        if requested_help(args) is None:
            return None

        command = self
        for node in args:
            if "help" in node.flags or "h" in node.flags:
                return command
            if (child := command.get_command(node.subcommand.name)) is None:
                return command
            command = child

        raise RuntimeError("help request was lost while walking the definitions")

    def render_help(self, *, colorful=False, fancy=False):
        """
        Build the help of this command as a rich renderable.

        Sections
        - description (help text), usage line, then `props`, `flags` and
          `commands` tables listing every name of each definition.

        Palette keys
        - usage-label, program-name, description-section, group-label,
          prop-name, flag-name, command-name, metavar, argument-description,
          panel-title

        Customization
        - Define a mapping named __styles__ in __main__ to override any entry.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "description-section": "italic #A3A3A3",
            "group-label": "bold #FFFFFF",
            "prop-name": "bold #00E6FF",
            "flag-name": "bold #22C55E",
            "command-name": "bold #36C5F0",
            "metavar": "bold #FFD600",
            "argument-description": "#9CA3AF",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}))

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

        def prop_label(prop, *, usage=False):
            if usage:
                return Text.assemble(
                    text(_switch(prop.name), styler("prop-name")), "=", text("<value>", styler("metavar"))
                )
            return Text.assemble(
                Text("/").join(text(_switch(name), styler("prop-name")) for name in prop._names),
                "=",
                text("<%s>" % prop.name.upper(), styler("metavar")),
            )

        renders = []

        if self._help:
            renders.append(Text.assemble(text(self._help, styler("description-section")), "\n"))

        usage = Text()
        usage.append("usage", styler("usage-label")).append(":")
        usage.append(" ")
        usage.append(text(self.name, styler("program-name")))
        for prop in filter(lambda x: x.required, self._props):
            usage.append(" ").append(prop_label(prop, usage=True))
        for prop in filter(lambda x: not x.required, self._props):
            usage.append(" ").append(Text.assemble("[", prop_label(prop, usage=True), "]"))
        for flag in self._flags:
            usage.append(" ").append(Text.assemble("[", text(_switch(flag.name), styler("flag-name")), "]"))
        if self._commands:
            usage.append(" [COMMAND] [COMMAND ARGUMENTS]")
        renders.append(usage.append("\n"))

        sections = (
            ("props", self._props, prop_label),
            ("flags", self._flags, lambda x: Text("/").join(
                text(_switch(name), styler("flag-name")) for name in x._names
            )),
            ("commands", self._commands, lambda x: Text("/").join(
                text(name, styler("command-name")) for name in x._names
            )),
        )

        for group, definitions, label in sections:
            if not definitions:
                continue
            table = Table.grid(padding=(0, 4, 0, 0))
            table.add_column(no_wrap=True)
            table.add_column()
            for definition in definitions:
                table.add_row(Text("  ") + label(definition), text(definition._help, styler("argument-description")))
            renders.append(text(group, styler("group-label")).append(":"))
            renders.append(table)
            renders.append(Text(""))

        renderable = Group(*renders)

        if fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{self.name} HELP".upper(), " ", "]", style=styler("panel-title")),
                title_align="left",
            )

        return renderable

    def intercept_help(self, args, /, *, console=Unset, colorful=False, fancy=False):
        """
        Print the requested help and exit with status 0, if help was requested.

        Returns None (and prints nothing) otherwise.
        """
        if (command := self.help_for(args)) is None:
            return
        coalesce(console, Console()).print(command.render_help(colorful=colorful, fancy=fancy))
        sys.exit(0)

    def __repr__(self):
        return "command(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "names", self.names
        yield "help", self.help
        yield "props", self.props
        yield "flags", self.flags
        yield "commands", self.commands


def _validate(command, args, route):
    hint = "run '%s --help' to see what %r accepts" % (" ".join(route), command.name)

    for flag in sorted(args.flags):
        if command.get_flag(flag) is None:
            raise UnrecognizedArgumentError(
                "%s is not a valid flag for %r" % (_switch(flag), command.name),
                title="unrecognized flag",
                code=FaultCode.UNRECOGNIZED_FLAG,
                hint=hint,
                name=flag,
                kind=ArgumentKind.FLAG,
                docs=getdoc(FaultCode.UNRECOGNIZED_FLAG),
            )

    seen = set()
    for name in args.props:
        if (prop := command.get_prop(name)) is None:
            raise UnrecognizedArgumentError(
                "%s is not a valid option for %r" % (_switch(name), command.name),
                title="unrecognized option",
                code=FaultCode.UNRECOGNIZED_PROP,
                hint=hint,
                name=name,
                kind=ArgumentKind.PROP,
                docs=getdoc(FaultCode.UNRECOGNIZED_PROP),
            )
        seen.add(prop.name)

    for prop in command._props:
        if prop.required and prop.name not in seen:
            raise MissingRequiredOptionsError(
                "missing required option %r for %r" % (prop.name, command.name),
                title="missing required option",
                code=FaultCode.MISSING_REQUIRED_OPTIONS,
                hint="add %s=<value>; %s" % (_switch(prop.name), hint),
                name=prop.name,
                docs=getdoc(FaultCode.MISSING_REQUIRED_OPTIONS),
            )

    if (subcommand := args.subcommand) is None:
        return

    if (child := command.get_command(subcommand.name)) is None:
        raise UnrecognizedArgumentError(
            "%s is not a valid command for %r" % (subcommand.name, command.name),
            title="unrecognized command",
            code=FaultCode.UNRECOGNIZED_COMMAND,
            hint=hint,
            name=subcommand.name,
            kind=ArgumentKind.COMMAND,
            docs=getdoc(FaultCode.UNRECOGNIZED_COMMAND),
        )

    _validate(child, subcommand, route + (child.name,))


def validate(command, args, /):
    """
    Check the ArgsNode chain `args` against `command`, level by level.

    Raises
    - UnrecognizedArgumentError: a flag, prop or subcommand name is not
      defined at its level (`kind` tells which).
    - MissingRequiredOptionsError: a required prop is absent; `name` is the
      first one missing in definition order.

    The walk stops at the first failing level.
    """
    _validate(command, args, (command.name,))


def resolve_aliases(command, args, /, **options):
    """
    Rewrite `args` in place so every flag, prop and subcommand uses the
    canonical name of its definition. `validate` must have succeeded first.

    Warns
    - DuplicatedPropWarning when two names of the same Prop were given at one
      level; the last value wins. `options` are forwarded to trigger().

    Raises
    - KeyError: when a name has no definition (validation was skipped).
    """
    def lookup(getter, name):
        if (definition := getter(name)) is None:
            raise KeyError(f"{name!r} is not defined; validate() must succeed before resolve_aliases()")
        return definition

    while True:
        args.flags = {lookup(command.get_flag, flag).name for flag in args.flags}
        props = {}
        for name, value in args.props.items():
            if (canonical := lookup(command.get_prop, name).name) in props:
                trigger(DuplicatedPropWarning(
                    "option %r was given to %r under several names; keeping %r" % (canonical, args.name, value),
                    title="duplicated option",
                    code=FaultCode.DUPLICATED_PROP,
                    hint="keep a single %s=<value>" % _switch(canonical),
                    name=canonical,
                    docs=getdoc(FaultCode.DUPLICATED_PROP),
                    stacklevel=4,
                ), **options)
            props[canonical] = value
        args.props = props

        if (subcommand := args.subcommand) is None:
            return

        command = lookup(command.get_command, subcommand.name)
        subcommand.name = command.name
        args = subcommand


def invoke(command, prompt=Unset, /, *, shell=False, fancy=False, colorful=False):
    """
    Convenience runner: parse, serve help, validate and canonicalize.

    Parameters
    - command: Command
    - prompt:
      • Unset: read sys.argv.
      • str: split with shlex.split (the program name comes first).
      • Iterable[str]: used as-is.
    - shell, fancy, colorful: presentation switches forwarded to trigger()
      and to the help renderer.

    Behavior
    - When help is requested at any level, it is printed and the process
      exits with status 0, before any validation.
    - Faults go through trigger(): raised when shell is False, printed on
      stderr followed by exit status 1 otherwise.
    - Warnings go through trigger() too: warnings.warn when shell is False,
      printed on stderr (without exiting) otherwise.

    Returns
    - ArgsNode: the validated tree with canonical names.
    """
    if not isinstance(command, Command):
        raise TypeError("invoke() first argument must be a command")

    options = dict(shell=shell, fancy=fancy, colorful=colorful, prog=command.name)

    try:
        args = build(parse(coalesce(prompt, sys.argv)), **options)
        command.intercept_help(args, colorful=colorful, fancy=fancy)
        validate(command, args)
    except CommandException as fault:
        return trigger(fault, **options)

    resolve_aliases(command, args, **options)
    return args


__all__ = (
    "Flag",
    "Prop",
    "Command",
    "validate",
    "resolve_aliases",
    "invoke",
)
