from collections.abc import Sequence
from dataclasses import dataclass, field

from ..exceptions import RequestError

# Hidden sub-commands the host program must implement
REQUEST_CMD = "__complete"
NO_DESC_REQUEST_CMD = "__completeNoDesc"


def request_token(include_descriptions: bool = True) -> str:
    return REQUEST_CMD if include_descriptions else NO_DESC_REQUEST_CMD


@dataclass(frozen=True)
class CompletionRequest:
    """
    One invocation of the host program's completion sub-command.

    ``args`` holds the tokens already typed after the program name, and ``current``
    is the token under the cursor, which is empty when the user is about to start a
    new argument.
    """

    program: str
    args: tuple[str, ...] = field(default_factory=tuple)
    current: str = ""
    include_descriptions: bool = True

    @property
    def request_token(self) -> str:
        return request_token(self.include_descriptions)

    @property
    def last_arg_empty(self) -> bool:
        return not self.current

    def argv(self) -> list[str]:
        """
        The argument vector to execute. The current token is always passed last so
        that an empty one shows up as an explicit "" for the host to distinguish
        starting a new argument from continuing the previous one.
        """
        return [self.program, self.request_token, *self.args, self.current]

    @classmethod
    def from_words(
        cls, words: Sequence[str], include_descriptions: bool = True
    ) -> "CompletionRequest":
        """
        Build a request from pre-tokenized words, where the first word is the
        program and the last is the token being completed.
        """
        if not words or not words[0]:
            raise RequestError("Cannot build a completion request without a program")
        if len(words) == 1:
            # Completing directly after the program name with no separating space
            # is still a request for its first argument
            return cls(words[0], (), "", include_descriptions)
        return cls(words[0], tuple(words[1:-1]), words[-1], include_descriptions)

    @classmethod
    def from_commandline(
        cls, line: str, include_descriptions: bool = True
    ) -> "CompletionRequest":
        """
        Tokenize a raw command line up to the cursor. Words are separated by
        whitespace and quotes are not interpreted, a trailing space means the token
        under the cursor is empty.
        """
        words = line.split()
        if not words:
            raise RequestError(f"Cannot build a completion request from {line!r}")
        if line[-1:].isspace():
            words.append("")
        return cls.from_words(words, include_descriptions)
