from dataclasses import dataclass, field

from .directive import Directive, has_flag

NOSPACE_SENTINEL = "."


@dataclass
class FilterContext:
    """
    Working state for a single interpretation run. The filter steps mutate
    ``candidates`` in place and the context is dropped once the run completes.
    """

    prefix: str
    candidates: list[str] = field(default_factory=list)

    @property
    def num_comps(self) -> int:
        return len(self.candidates)


def candidate_value(line: str) -> str:
    return line.split("\t", 1)[0]


def filter_by_prefix(context: FilterContext) -> int:
    """
    Keep only candidates whose value starts with the prefix being typed. Hosts may
    match on looser criteria than a prefix so this is enforced here.

    Returns the number of remaining candidates.
    """
    context.candidates[:] = [
        line
        for line in context.candidates
        if candidate_value(line).startswith(context.prefix)
    ]
    return context.num_comps


def apply_nospace(
    context: FilterContext,
    directive: Directive,
    sentinel: str = NOSPACE_SENTINEL,
) -> bool:
    """
    Shells append a space after accepting a single unambiguous match. Offering the
    sole candidate a second time with an extra trailing character makes the match
    ambiguous so no space is added.

    The description is dropped because the extra character must come before it, and
    a single real match is expanded immediately anyway.

    Returns True if the candidates were modified.
    """
    if context.num_comps != 1 or not has_flag(directive, Directive.NO_SPACE):
        return False

    value = candidate_value(context.candidates[0])
    context.candidates[:] = [value, value + sentinel]
    return True
