from itertools import combinations

import pytest

from dyncomp.protocol.directive import (
    ALL_FLAGS,
    Directive,
    decode,
    describe,
    encode,
    has_flag,
)


def test_bit_values_are_fixed():
    assert int(Directive.ERROR) == 1
    assert int(Directive.NO_SPACE) == 2
    assert int(Directive.NO_FILE_COMP) == 4
    assert int(Directive.FILTER_FILE_EXT) == 8
    assert int(Directive.FILTER_DIRS) == 16
    assert int(Directive.DEFAULT) == 0


def _all_subsets():
    for size in range(len(ALL_FLAGS) + 1):
        yield from combinations(ALL_FLAGS, size)


def test_every_flag_combination_survives_the_wire():
    subsets = list(_all_subsets())
    assert len(subsets) == 32

    for subset in subsets:
        combined = Directive.DEFAULT
        for flag in subset:
            combined |= flag

        assert decode(encode(combined)) == combined
        for flag in ALL_FLAGS:
            assert has_flag(combined, flag) == (flag in subset), (combined, flag)


@pytest.mark.parametrize(
    "raw",
    ["", None, ":", "abc", ":abc", "-1", ":-4", "1.5", "0x2", " : 2", "::2", ":\u0663"],
)
def test_undecodable_text_means_no_flags(raw):
    assert decode(raw) == Directive.DEFAULT


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("0", Directive.DEFAULT),
        (":0", Directive.DEFAULT),
        ("2", Directive.NO_SPACE),
        (":6", Directive.NO_SPACE | Directive.NO_FILE_COMP),
        (" :4\n", Directive.NO_FILE_COMP),
        (":31", Directive(31)),
        ("12", Directive.NO_FILE_COMP | Directive.FILTER_FILE_EXT),
        (":12 ", Directive.NO_FILE_COMP | Directive.FILTER_FILE_EXT),
        ("\t:6\r", Directive.NO_SPACE | Directive.NO_FILE_COMP),
    ],
)
def test_decode(raw, expected):
    assert decode(raw) == expected


def test_unknown_high_bits_are_ignored():
    assert decode(":36") == Directive.NO_FILE_COMP
    assert decode(":64") == Directive.DEFAULT


def test_encode():
    assert encode(Directive.DEFAULT) == ":0"
    assert encode(Directive.NO_SPACE | Directive.NO_FILE_COMP) == ":6"


def test_has_flag_accepts_plain_ints():
    assert has_flag(5, Directive.ERROR)
    assert has_flag(5, Directive.NO_FILE_COMP)
    assert not has_flag(5, Directive.NO_SPACE)


def test_describe():
    assert describe(Directive.DEFAULT) == "DEFAULT (0)"
    assert (
        describe(Directive.NO_SPACE | Directive.FILTER_DIRS)
        == "NO_SPACE|FILTER_DIRS (18)"
    )
