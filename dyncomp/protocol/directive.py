"""
The directive is the trailing ``:<int>`` line of a host response. Its bit values are
shared with every host implementing the completion sub-command and must never be
renumbered.
"""

import re
from enum import IntFlag


class Directive(IntFlag):
    DEFAULT = 0
    # The host failed to produce completions, fall back to file completion
    ERROR = 1
    # Don't add a space after accepting a single completion
    NO_SPACE = 2
    # Don't fall back to file completion when there are no candidates
    NO_FILE_COMP = 4
    # Candidates are file extensions to filter file completion on
    FILTER_FILE_EXT = 8
    # Only directories should be completed
    FILTER_DIRS = 16


ALL_FLAGS: tuple[Directive, ...] = (
    Directive.ERROR,
    Directive.NO_SPACE,
    Directive.NO_FILE_COMP,
    Directive.FILTER_FILE_EXT,
    Directive.FILTER_DIRS,
)

_KNOWN_BITS = sum(ALL_FLAGS)
_DECIMAL = re.compile(r"[0-9]+")


def decode(raw: str | None) -> Directive:
    """
    Parse directive text as sent by the host. Surrounding whitespace and the
    leading colon are both optional.

    Anything that isn't a non-negative decimal integer decodes to Directive.DEFAULT,
    which is the same as the host requesting no special behavior.
    """
    if not raw:
        return Directive.DEFAULT

    text = raw.strip()
    if text.startswith(":"):
        text = text[1:]

    if not _DECIMAL.fullmatch(text):
        return Directive.DEFAULT

    return Directive(int(text) & _KNOWN_BITS)


def has_flag(directive: int, flag: Directive) -> bool:
    return (int(directive) // int(flag)) % 2 == 1


def encode(directive: int) -> str:
    return f":{int(directive)}"


def describe(directive: int) -> str:
    """Render a directive for debug output, e.g. ``NO_SPACE|NO_FILE_COMP (6)``"""
    names = [flag.name for flag in ALL_FLAGS if has_flag(directive, flag)]
    return f"{'|'.join(names) or 'DEFAULT'} ({int(directive)})"
