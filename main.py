from rich.pretty import pprint

from bindargs import *

git = (
    Command("git", help="the stupid content tracker")
    .add_flag(Flag("verbose", help="be loud").add_alias("v"))
    .add_command(
        Command("remote", help="manage the set of tracked repositories")
        .add_alias("r")
        .add_prop(Prop("level", help="how much to show").add_alias("l").make_required())
        .add_flag(Flag("dry-run", help="do not touch anything").add_alias("n"))
    )
)


if __name__ == '__main__':
    pprint(invoke(git, shell=True, colorful=True))
