from rich.pretty import pprint

from argot import *


@program(shell=True, colorful=True)
def tool(*, verbose=OptionSpec("-v", "--verbose", policy=Policy.COUNT)):
    """Inspect and move files."""
    pprint({"verbose": verbose})


@tool.command
def status(paths=OthersSpec(type="path"), /, *, short=OptionSpec("-s", "--short")):
    pprint({"paths": paths, "short": short})


@tool.command
def move(
        source=ArgumentSpec(type="path"),
        target=ArgumentSpec(type="path"),
        /,
        mode=OptionSpec("--mode", "-m", arity=Arity.MANDATORY, type=choice("copy", "link", "rename")),
        *,
        force=OptionSpec("-f", "--force"),
):
    pprint({"source": source, "target": target, "mode": mode, "force": force})


if __name__ == '__main__':
    invoke(tool)
