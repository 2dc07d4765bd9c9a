import sys
from collections.abc import Sequence
from contextlib import redirect_stderr
from typing import TYPE_CHECKING

from .__version__ import __version__
from .exceptions import ConfigValidationError, DynCompException, ExecutionError
from .io import DynCompIO, guess_ansi_support

if TYPE_CHECKING:
    from argparse import ArgumentParser, Namespace


STDOUT_ANSI_SUPPORT = guess_ansi_support(sys.stdout)

COMMANDS: tuple[tuple[str, str], ...] = (
    ("fish", "Print a fish completion script for PROGRAM"),
    ("complete", "Run the completion negotiation for the given words"),
)


class DynCompUi:
    args: "Namespace"

    def __init__(self, io: DynCompIO, program_name: str = "dyncomp"):
        self.io = io
        self.program_name = program_name

    def __getitem__(self, key: str):
        """Provide easy access to arguments"""
        return getattr(self.args, key, None)

    def build_parser(self) -> "ArgumentParser":
        import argparse

        parser = argparse.ArgumentParser(
            prog=self.program_name,
            description="Dynamic shell completion driven by the completed program",
            add_help=False,
            allow_abbrev=False,
        )

        parser.add_argument(
            "-h",
            "--help",
            dest="help",
            action="store_true",
            default=False,
            help="Show this help page and exit",
        )

        parser.add_argument(
            "--version",
            dest="version",
            action="store_true",
            default=False,
            help="Print the version and exit",
        )

        parser.add_argument(
            "-v",
            "--verbose",
            dest="increase_verbosity",
            action="count",
            default=0,
            help="Increase output (repeatable)",
        )

        parser.add_argument(
            "-q",
            "--quiet",
            dest="decrease_verbosity",
            action="count",
            default=0,
            help="Decrease output (repeatable)",
        )

        parser.add_argument(
            "-C",
            "--directory",
            dest="project_root",
            metavar="PATH",
            type=str,
            default=None,
            help="Specify where to find the config file",
        )

        ansi_group = parser.add_mutually_exclusive_group()
        ansi_group.add_argument(
            "--ansi",
            dest="ansi",
            action="store_true",
            default=STDOUT_ANSI_SUPPORT,
            help="Force enable ANSI output",
        )
        ansi_group.add_argument(
            "--no-ansi",
            dest="ansi",
            action="store_false",
            default=STDOUT_ANSI_SUPPORT,
            help="Force disable ANSI output",
        )

        subparsers = parser.add_subparsers(dest="command", metavar="command")

        fish_parser = subparsers.add_parser("fish", add_help=False)
        fish_parser.add_argument("program", metavar="PROGRAM")
        self._add_descriptions_arg(fish_parser)
        fish_parser.add_argument(
            "-o",
            "--output",
            dest="output_file",
            metavar="FILE",
            type=str,
            default=None,
            help="Write the script to FILE instead of stdout",
        )

        complete_parser = subparsers.add_parser("complete", add_help=False)
        self._add_descriptions_arg(complete_parser)
        complete_parser.add_argument("words", metavar="WORD", nargs="*")

        return parser

    @staticmethod
    def _add_descriptions_arg(parser: "ArgumentParser"):
        parser.add_argument(
            "--no-descriptions",
            dest="include_descriptions",
            action="store_false",
            default=None,
            help="Request completions without descriptions",
        )

    def parse_args(self, cli_args: Sequence[str]):
        self.parser = self.build_parser()

        with redirect_stderr(self.io.error_output):
            self.args = self.parser.parse_args(cli_args)

        self.io.configure(ansi_enabled=self.args.ansi)
        self.io.configure(
            offset=(self.args.increase_verbosity - self.args.decrease_verbosity),
            dont_override=True,
        )

    def print_help(
        self,
        info: str | None = None,
        error: DynCompException | None = None,
    ):
        verbosity = 0 if self["help"] else self.io.verbosity

        result: list[str | Sequence[str]] = []
        if verbosity >= 0:
            result.append((f"<h2>dyncomp</h2> (version <em>{__version__}</em>)",))

        if info and verbosity >= -2:
            result.append(f"{f'<em2>Result: {info}</em2>'}")

        if error and verbosity >= -2:
            result.append(self._format_dyncomp_error(error))

        if verbosity >= 0:
            result.append(
                (
                    "<h2>Usage:</h2>",
                    f"  <u>{self.program_name}</u>"
                    " [global options]"
                    " command [command arguments]",
                )
            )

            # Use argparse for optional args
            formatter = self.parser.formatter_class(prog=self.parser.prog)
            action_group = self.parser._action_groups[1]
            formatter.start_section(action_group.title)
            formatter.add_arguments(
                [
                    action
                    for action in action_group._group_actions
                    if action.dest != "command"
                ]
            )
            formatter.end_section()
            result.append(
                (
                    "<h2>Global options:</h2>",
                    *formatter.format_help().split("\n")[1:],
                )
            )

            commands_section = ["<h2>Commands:</h2>"]
            for command, help_text in COMMANDS:
                commands_section.append(
                    f"  <em>{self._padr(command, 20)}</em>  {help_text}"
                )
            commands_section.extend(
                (
                    "",
                    "<h2>Command options:</h2>",
                    f"  <em3>{self._padr('--no-descriptions', 20)}</em3>"
                    "  Request completions without descriptions",
                    f"  <em3>{self._padr('-o, --output FILE', 20)}</em3>"
                    "  (fish) Write the script to FILE instead of stdout",
                )
            )
            result.append(commands_section)

        if error and self.io.is_debug_enabled():
            import traceback

            result.append(
                "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ).strip()
            )

        self.io.print(
            "\n\n".join(
                section if isinstance(section, str) else "\n".join(section).strip("\n")
                for section in result
            )
            + "\n"
            + ("\n" if verbosity >= 0 else ""),
            message_verbosity=-2,
        )

    def _format_dyncomp_error(self, error: DynCompException) -> tuple[str, ...]:
        error_lines = []
        if isinstance(error, ConfigValidationError):
            if error.option:
                error_lines.append(f"Invalid option {error.option!r}")
                if error.filename:
                    error_lines[-1] += f" in file {error.filename}"
        error_lines.extend(error.msg.split("\n"))
        if error.cause:
            error_lines.append(error.cause)
        if error.__cause__ and not isinstance(error.__cause__, SystemExit):
            error_lines.append(f"From: {error.__cause__!r}")

        return self._format_error_lines(error_lines)

    @staticmethod
    def _padr(text: str, width: int):
        if len(text) >= width:
            return text
        return text + " " * (width - len(text))

    def print_error(self, error: DynCompException | ExecutionError):
        error_lines = error.msg.split("\n")
        if error.cause:
            error_lines.append(f"From: {error.cause}")
        if error.__cause__ and not isinstance(error.__cause__, SystemExit):
            error_lines.append(f"From: {error.__cause__!r}")

        for line in self._format_error_lines(error_lines):
            self.io.print_error(line)

        if self.io.is_debug_enabled():
            import traceback

            self.io.print_debug(
                "".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ).strip()
            )

    def _format_error_lines(self, lines: Sequence[str]) -> tuple[str, ...]:
        return (
            f"<error>Error: {lines[0]}</error>",
            *(f"<error>     | {line}</error>" for line in lines[1:]),
        )

    def print_version(self):
        if self.io.verbosity >= 0:
            result = f"dyncomp - version: <em>{__version__}</em>"
        else:
            result = __version__
        self.io.print(result, message_verbosity=-2)
