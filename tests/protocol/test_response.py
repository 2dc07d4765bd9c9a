import pytest

from dyncomp.protocol.directive import Directive
from dyncomp.protocol.response import Candidate, CompletionResponse, flag_prefix


def test_parse_candidates_and_directive():
    response = CompletionResponse.parse("apple\napricot\tA fruit\n:4\n")

    assert not response.is_empty
    assert response.directive == Directive.NO_FILE_COMP
    assert response.candidates == (
        Candidate("apple"),
        Candidate("apricot", "A fruit"),
    )
    assert response.lines == ["apple", "apricot\tA fruit"]


def test_parse_without_trailing_newline():
    response = CompletionResponse.parse("apple\n:2")
    assert response.candidates == (Candidate("apple"),)
    assert response.directive == Directive.NO_SPACE


def test_parse_directive_only():
    response = CompletionResponse.parse(":1\n")
    assert response.candidates == ()
    assert response.directive == Directive.ERROR
    assert not response.is_empty


def test_parse_no_output_at_all():
    response = CompletionResponse.parse("")
    assert response.is_empty
    assert response.candidates == ()
    assert response.directive == Directive.DEFAULT


def test_last_line_is_always_the_directive():
    # Even a malformed last line is taken as the directive rather than a candidate
    response = CompletionResponse.parse("apple\napricot\n")
    assert response.candidates == (Candidate("apple"),)
    assert response.directive == Directive.DEFAULT


def test_parse_windows_line_endings():
    response = CompletionResponse.parse("apple\r\n:2\r\n")
    assert response.lines == ["apple"]
    assert response.directive == Directive.NO_SPACE


def test_candidate_splits_on_first_tab_only():
    candidate = Candidate.parse("value\tdesc\twith tab")
    assert candidate.value == "value"
    assert candidate.description == "desc\twith tab"
    assert candidate.line == "value\tdesc\twith tab"


def test_candidate_empty_description_is_kept():
    candidate = Candidate.parse("value\t")
    assert candidate.description == ""
    assert candidate.line == "value\t"


@pytest.mark.parametrize(
    ("current", "expected"),
    [
        ("", ""),
        ("ap", ""),
        ("--name=fo", "--name="),
        ("-n=", "-n="),
        ("--opt=a=b", "--opt=a="),
        ("name=foo", ""),
    ],
)
def test_flag_prefix(current, expected):
    assert flag_prefix(current) == expected
