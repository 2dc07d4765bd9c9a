from .directive import Directive, decode, encode, has_flag
from .filters import FilterContext, apply_nospace, filter_by_prefix
from .interpreter import CompletionResult, Outcome, ResponseInterpreter, run_host
from .request import (
    NO_DESC_REQUEST_CMD,
    REQUEST_CMD,
    CompletionRequest,
    request_token,
)
from .response import Candidate, CompletionResponse, flag_prefix

__all__ = [
    "NO_DESC_REQUEST_CMD",
    "REQUEST_CMD",
    "Candidate",
    "CompletionRequest",
    "CompletionResponse",
    "CompletionResult",
    "Directive",
    "FilterContext",
    "Outcome",
    "ResponseInterpreter",
    "apply_nospace",
    "decode",
    "encode",
    "filter_by_prefix",
    "flag_prefix",
    "has_flag",
    "request_token",
    "run_host",
]
