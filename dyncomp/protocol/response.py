import re
from dataclasses import dataclass

from .directive import Directive, decode

_FLAG_PREFIX_PATTERN = re.compile(r"-.*=")


@dataclass(frozen=True)
class Candidate:
    value: str
    description: str | None = None

    @classmethod
    def parse(cls, line: str) -> "Candidate":
        value, tab, description = line.partition("\t")
        return cls(value, description if tab else None)

    @property
    def line(self) -> str:
        if self.description is None:
            return self.value
        return f"{self.value}\t{self.description}"


@dataclass(frozen=True)
class CompletionResponse:
    candidates: tuple[Candidate, ...]
    directive: Directive
    is_empty: bool = False

    @classmethod
    def parse(cls, output: str) -> "CompletionResponse":
        """
        Split raw host output into candidates and the trailing directive line.
        Output with no lines at all is a distinct result that signals failure.
        """
        lines = output.replace("\r\n", "\n").split("\n")
        if lines[-1] == "":
            lines.pop()
        if not lines:
            return cls(candidates=(), directive=Directive.DEFAULT, is_empty=True)

        *candidate_lines, directive_line = lines
        return cls(
            candidates=tuple(Candidate.parse(line) for line in candidate_lines),
            directive=decode(directive_line),
        )

    @property
    def lines(self) -> list[str]:
        return [candidate.line for candidate in self.candidates]


def flag_prefix(current: str) -> str:
    """
    When completing the value of a flag given as ``--flag=<partial>`` the host only
    returns values, so candidates need the ``--flag=`` part put back in front.
    """
    match = _FLAG_PREFIX_PATTERN.search(current)
    return match.group(0) if match else ""
