"""
The decision procedure run once per completion trigger: invoke the host program,
parse its response, and decide between presenting candidates and deferring to the
shell's default file completion.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from subprocess import DEVNULL, PIPE, Popen, TimeoutExpired
from typing import TYPE_CHECKING

from ..exceptions import HostInvocationError
from .directive import Directive, describe, has_flag
from .filters import FilterContext, apply_nospace, filter_by_prefix
from .request import CompletionRequest
from .response import CompletionResponse, flag_prefix

if TYPE_CHECKING:
    from ..config import DynCompConfig
    from ..io import DynCompIO

HostRunner = Callable[[Sequence[str], "float | None"], str]


class Outcome(Enum):
    PRESENT = "present"
    FILE_FALLBACK = "file_fallback"


@dataclass(frozen=True)
class CompletionResult:
    outcome: Outcome
    candidates: list[str] = field(default_factory=list)
    directive: Directive = Directive.DEFAULT
    reason: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.outcome is Outcome.FILE_FALLBACK

    @classmethod
    def fallback(
        cls, reason: str, directive: Directive = Directive.DEFAULT
    ) -> CompletionResult:
        return cls(Outcome.FILE_FALLBACK, [], directive, reason)


def run_host(argv: Sequence[str], timeout: float | None = None) -> str:
    """
    Execute the host program and return its decoded stdout. Stderr is discarded and
    the exit status is not part of the protocol so it is ignored.
    """
    executable = shutil.which(argv[0])
    if executable is None:
        raise HostInvocationError(f"Cannot find executable {argv[0]!r}")

    try:
        proc = Popen([executable, *argv[1:]], stdout=PIPE, stderr=DEVNULL)
    except OSError as error:
        raise HostInvocationError(f"Failed to execute {argv[0]!r}", error) from error

    try:
        captured_stdout, _ = proc.communicate(timeout=timeout)
    except TimeoutExpired as error:
        proc.kill()
        proc.communicate()
        raise HostInvocationError(
            f"Timed out waiting for {argv[0]!r}", error
        ) from error

    return captured_stdout.decode("utf-8", errors="replace")


class ResponseInterpreter:
    def __init__(
        self,
        config: DynCompConfig | None = None,
        io: DynCompIO | None = None,
        runner: HostRunner | None = None,
    ):
        from ..config import DynCompConfig
        from ..io import DynCompIO

        self.config = config or DynCompConfig()
        self.io = io or DynCompIO.get_default_io()
        self._run_host = runner or run_host

    def interpret(self, request: CompletionRequest) -> CompletionResult:
        self.io.print_debug("")
        self.io.print_debug("========= starting completion logic ==========")

        argv = request.argv()
        self.io.print_debug("Calling %s", argv)
        try:
            output = self._run_host(argv, self.config.timeout)
        except HostInvocationError as error:
            detail = f"{error.msg}: {error.cause}" if error.cause else error.msg
            self.io.print_debug("%s. No completions.", detail)
            return CompletionResult.fallback("host invocation failed")

        return self.interpret_output(request, output)

    def interpret_output(
        self, request: CompletionRequest | str, output: str
    ) -> CompletionResult:
        """
        Decide what to do with output already captured from the host, given the
        request it answers, or just the token currently under the cursor.
        """
        current = request.current if isinstance(request, CompletionRequest) else request
        response = CompletionResponse.parse(output)
        if response.is_empty:
            self.io.print_debug("No completion, probably due to a failure")
            return CompletionResult.fallback("empty response")

        directive = response.directive
        self.io.print_debug("Directive is: %s", describe(directive))

        if has_flag(directive, Directive.ERROR):
            self.io.print_debug("Received error directive: aborting.")
            return CompletionResult.fallback("error directive", directive)

        if has_flag(directive, Directive.FILTER_FILE_EXT) or has_flag(
            directive, Directive.FILTER_DIRS
        ):
            self.io.print_debug(
                "File extension filtering or directory filtering not supported"
            )
            return CompletionResult.fallback("unsupported filter directive", directive)

        prefix = flag_prefix(current)
        context = FilterContext(
            prefix=current,
            candidates=[prefix + line for line in response.lines],
        )
        self.io.print_debug("Completions are: %s", context.candidates)

        nospace = has_flag(directive, Directive.NO_SPACE)
        nofiles = has_flag(directive, Directive.NO_FILE_COMP)
        if nospace or not nofiles:
            num_comps = filter_by_prefix(context)
            self.io.print_debug("Filtered completions are: %s", context.candidates)
            self.io.print_debug("numComps: %s", num_comps)

            if apply_nospace(context, directive, self.config.nospace_sentinel):
                self.io.print_debug(
                    "Added second completion to perform nospace directive: %s",
                    context.candidates,
                )

            if num_comps == 0 and not nofiles:
                self.io.print_debug("Requesting file completion")
                return CompletionResult.fallback("no matching candidates", directive)

        return CompletionResult(Outcome.PRESENT, list(context.candidates), directive)
