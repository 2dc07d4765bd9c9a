from pathlib import Path

from .__version__ import __version__

__all__ = ["__version__", "main"]


def main():
    import sys

    from .app import DynComp
    from .io import DynCompIO

    io = DynCompIO(output=sys.stdout, error=sys.stderr, make_default=True)
    app = DynComp(cwd=Path().resolve(), output=io)
    result = app(cli_args=sys.argv[1:])
    if result:
        raise SystemExit(result)
