from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pastel import Pastel

DYNCOMP_DEBUG = os.environ.get("DYNCOMP_DEBUG", "0") == "1"


def guess_ansi_support(file) -> bool:
    if os.environ.get("NO_COLOR", "0")[:1] not in ("", "0"):
        # https://no-color.org/
        return False

    return (
        (sys.platform != "win32" or "ANSICON" in os.environ)
        and hasattr(file, "isatty")
        and file.isatty()
    )


class DynCompIO:
    """
    Manages output streams, verbosity levels, and message styling.

    Debug messages may additionally be appended to a debug file, which is the same
    file the generated shell scripts write their own debug lines to.
    """

    output: IO
    error_output: IO
    ansi_enabled: bool
    debug_file: Path | None
    _baseline_verbosity: int
    _verbosity_offset: int | None

    _color: Pastel
    _default_io: DynCompIO | None = None

    def __init__(
        self,
        *,
        parent: DynCompIO | None = None,
        output: IO | None = None,
        error: IO | None = None,
        baseline_verbosity: int | None = None,
        verbosity_offset: int | None = None,
        ansi: bool | None = None,
        debug_file: str | Path | None = None,
        make_default: bool = True,
    ):
        self.output = output or (parent.output if parent else sys.stdout)
        self.error_output = error or (parent.error_output if parent else sys.stderr)
        self.ansi_enabled = (
            ansi
            if ansi is not None
            else (parent.ansi_enabled if parent else guess_ansi_support(output))
        )
        self.debug_file = (
            Path(debug_file)
            if debug_file
            else (parent.debug_file if parent else None)
        )

        if DYNCOMP_DEBUG:
            self._baseline_verbosity = 3
            self._verbosity_offset = 0
        else:
            self._baseline_verbosity = (
                baseline_verbosity
                if baseline_verbosity is not None
                else parent._baseline_verbosity if parent else 0
            )
            self._verbosity_offset = (
                verbosity_offset
                if verbosity_offset is not None
                else parent._verbosity_offset if parent else None
            )

        if parent:
            self._color = parent._color
        else:
            self._init_colors()

        # First instance of DynCompIO becomes the default IO
        if make_default:
            self.__class__._default_io = self

    def _init_colors(self):
        from pastel import Pastel

        self._color = Pastel(self.ansi_enabled)
        self._color.add_style("u", "default", options="underline")
        self._color.add_style("hl", "light_gray")
        self._color.add_style("em", "cyan")
        self._color.add_style("em2", "cyan", options="italic")
        self._color.add_style("em3", "blue")
        self._color.add_style("h2", "default", options="bold")
        self._color.add_style("h2-dim", "default", options="dark")
        self._color.add_style("debug", "light_gray", options="dark")
        self._color.add_style("error", "light_red", options="bold")
        self._color.add_style("warning", "light_red", options="bold")

    @classmethod
    def get_default_io(cls) -> DynCompIO:
        if cls._default_io is None:
            cls._default_io = cls()
        return cls._default_io

    @property
    def verbosity(self) -> int:
        """
        Returns the current verbosity level, which is the base verbosity plus any
        verbosity offset from the command line arguments.
        """
        return self._baseline_verbosity + (self._verbosity_offset or 0)

    def configure(
        self,
        *,
        ansi_enabled: bool | None = None,
        baseline: int | None = None,
        offset: int | None = None,
        debug_file: str | Path | None = None,
        dont_override: bool = False,
    ):
        may_override = not dont_override
        if ansi_enabled is not None and (self.ansi_enabled is None or may_override):
            self.ansi_enabled = ansi_enabled
            self._init_colors()
        if baseline is not None and (self._baseline_verbosity is None or may_override):
            self._baseline_verbosity = baseline
        if offset is not None and (self._verbosity_offset is None or may_override):
            self._verbosity_offset = offset
        if debug_file and (self.debug_file is None or may_override):
            self.debug_file = Path(debug_file)

    def print(
        self,
        message: str,
        *values: Any,
        message_verbosity: int = 0,
        end: str = "\n",
    ):
        if self._check_verbosity(message_verbosity):
            if values:
                message = message % values
            self.write_out(message, end=end)

    def print_warning(
        self,
        message: str,
        *values: Any,
        message_verbosity: int = -1,
        prefix: str = "<warning>Warning:</warning> ",
    ):
        if self._check_verbosity(message_verbosity):
            if values:
                message = message % values
            self.write_err(prefix + message)

    def print_error(
        self,
        message: str,
        *values: Any,
        message_verbosity: int = -2,
        end: str = "\n",
    ):
        if self._check_verbosity(message_verbosity):
            if values:
                message = message % values
            self.write_err(message, end=end)

    def print_debug(
        self,
        message: str,
        *values: Any,
        message_verbosity: int = 3,
        end: str = "\n",
    ):
        if values:
            message = message % values
        if self.debug_file is not None:
            self._append_debug_file(message)
        if self._check_verbosity(message_verbosity):
            self.write_err(f"<debug>{message}</debug>", end=end)

    def is_debug_enabled(self) -> bool:
        """
        Check if the debug verbosity level is enabled.
        """
        return self._check_verbosity(3)

    def _check_verbosity(self, message_verbosity: int) -> bool:
        """
        Check if the message should be printed based on the current verbosity level.
        """
        return message_verbosity <= (
            self._baseline_verbosity + (self._verbosity_offset or 0)
        )

    def _append_debug_file(self, message: str):
        assert self.debug_file is not None
        try:
            with self.debug_file.open("a", encoding="utf-8") as debug_file:
                debug_file.write(message + "\n")
        except OSError as error:
            # Only report this once rather than on every debug line
            self.debug_file = None
            self.print_warning(f"Could not write to debug file: {error}")

    def write_out(self, message: str, *, end: str = "\n"):
        print(self._color.colorize(message), end=end, file=self.output, flush=True)

    def write_err(self, message: str, *, end: str = "\n"):
        print(
            self._color.colorize(message), end=end, file=self.error_output, flush=True
        )

    def write_raw(self, message: str, *, end: str = "\n"):
        """Write to the output stream without interpreting style tags"""
        print(message, end=end, file=self.output, flush=True)
