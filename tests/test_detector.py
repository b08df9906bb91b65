from __future__ import annotations

from typing import List

import pytest

from arrowmap.detector import MatchState, arrow_at, has_arrow
from tests.support.harness import (
    Case,
    ErrorKind,
    Malformed,
    NotCandidate,
    WellFormed,
    arrow_map,
    brace,
    classify,
    ident,
    num,
    paren,
    parse_group,
    punct,
    s,
)

CLASSIFY_CASES: List[Case] = [
    # Well-formed
    Case("single-pair", '{"beta" => "true"}', WellFormed, pairs=1, trailing=False),
    Case("two-pairs", '{"key" => "val", "foo" => "bar"}', WellFormed, pairs=2, trailing=False),
    Case("trailing-comma", '{"a" => "b",}', WellFormed, pairs=1, trailing=True),
    Case("ident-value", '{"a" => x}', WellFormed, pairs=1),
    Case("group-value", '{"a" => (x + 1)}', WellFormed, pairs=1),
    Case("nested-map-value", '{"a" => {"b" => 1}}', WellFormed, pairs=1),
    Case("integer-key", "{1 => \"one\", 2 => \"two\"}", WellFormed, pairs=2),
    Case("char-key", "{'a' => 1}", WellFormed, pairs=1),
    Case("raw-string-key", '{r"k" => 1}', WellFormed, pairs=1),
    # Not candidates
    Case("empty-brace", "{}", NotCandidate),
    Case("block-expr", "{ x + 1 }", NotCandidate),
    Case("struct-literal", "{ a: 1, b: 2 }", NotCandidate),
    Case("string-block", '{ "a" }', NotCandidate),
    Case("method-on-literal", '{ "a".to_string() }', NotCandidate),
    Case("float-block", "{ 1.5 }", NotCandidate),
    Case("paren-group", '("a", "b")', NotCandidate),
    Case("bracket-group", '["a", "b"]', NotCandidate),
    Case("spaced-arrow", '{"a" = > 1}', NotCandidate),
    Case("ident-first-with-arrow", '{x => 1}', NotCandidate),
    # Malformed
    Case("missing-value", '{"key" =>}', Malformed, kind=ErrorKind.EXPECTED_VALUE, err_line=1, err_col=10),
    Case("punct-value", '{"key" => -1}', Malformed, kind=ErrorKind.EXPECTED_VALUE, err_line=1, err_col=11),
    Case("missing-separator-later", '{"a" "b" => 1}', Malformed, kind=ErrorKind.EXPECTED_SEPARATOR, err_line=1, err_col=6),
    Case("second-pair-no-separator", '{"a" => 1, "b"}', Malformed, kind=ErrorKind.EXPECTED_SEPARATOR, err_line=1, err_col=15),
    Case("second-pair-bad-sep", '{"a" => 1, "b" : 2}', Malformed, kind=ErrorKind.EXPECTED_SEPARATOR, err_line=1, err_col=16),
    Case("ident-key-after-comma", '{"a" => 1, b => 2}', Malformed, kind=ErrorKind.EXPECTED_KEY_LITERAL, err_line=1, err_col=12),
    Case("float-key", '{1.5 => "x"}', Malformed, kind=ErrorKind.EXPECTED_KEY_LITERAL, err_line=1, err_col=2),
    Case("multi-token-value", '{"a" => x + 1}', Malformed, kind=ErrorKind.UNTERMINATED_PAIR_LIST, err_line=1, err_col=11),
    Case("missing-comma", '{"a" => 1 "b" => 2}', Malformed, kind=ErrorKind.UNTERMINATED_PAIR_LIST, err_line=1, err_col=11),
    Case("dangling-value-multiline", '{\n  "a" => 1,\n  "b" =>\n}', Malformed, kind=ErrorKind.EXPECTED_VALUE, err_line=4, err_col=1),
]


@pytest.mark.parametrize("case", CLASSIFY_CASES, ids=lambda case: case.name)
def test_classify(case: Case) -> None:
    verdict = classify(parse_group(case.source))

    assert isinstance(verdict, case.verdict), f"got {verdict!r}"

    if isinstance(verdict, WellFormed):
        if case.pairs is not None:
            assert len(verdict.candidate.pairs) == case.pairs
        if case.trailing is not None:
            assert verdict.candidate.trailing_comma is case.trailing

    if isinstance(verdict, Malformed):
        assert verdict.kind is case.kind
        assert verdict.reason == case.kind.value
        assert (verdict.span.line, verdict.span.column) == (case.err_line, case.err_col)


def test_candidate_records_pairs_in_order() -> None:
    verdict = classify(parse_group('{"key" => "val", "foo" => bar,}'))
    assert isinstance(verdict, WellFormed)

    candidate = verdict.candidate
    assert [p.key.text for p in candidate.pairs] == ['"key"', '"foo"']
    assert [p.value for p in candidate.pairs] == [s("val"), ident("bar")]
    assert all(p.comma is not None for p in candidate.pairs)
    assert candidate.delimiter.name == "BRACE"


def test_value_group_is_not_scanned() -> None:
    # The inner brace group is malformed, but as a value it is opaque here
    inner = brace(s("x"), punct("=", joint=True), punct(">"))
    verdict = classify(arrow_map((s("a"), inner)))

    assert isinstance(verdict, WellFormed)
    assert verdict.candidate.pairs[0].value is inner


def test_separator_span_covers_both_chars() -> None:
    verdict = classify(parse_group('{"a" => 1}'))
    assert isinstance(verdict, WellFormed)

    span = verdict.candidate.pairs[0].separator_span
    assert (span.start, span.end) == (5, 7)


def test_hand_built_group_classifies() -> None:
    group = arrow_map((s("a"), num("1")), (s("b"), paren(ident("x"))), trailing=True)
    verdict = classify(group)

    assert isinstance(verdict, WellFormed)
    assert len(verdict.candidate.pairs) == 2
    assert verdict.candidate.trailing_comma


def test_malformed_detail_names_offending_token() -> None:
    verdict = classify(parse_group('{"a" => 1, b => 2}'))

    assert isinstance(verdict, Malformed)
    assert verdict.detail == "found 'b'"


def test_arrow_helpers() -> None:
    children = parse_group('{"a" => 1, "b" = > 2}').children

    assert arrow_at(children, 1)
    assert not arrow_at(children, 0)
    assert not arrow_at(children, 6)
    assert has_arrow(children, 5) is False
    assert has_arrow(children)


def test_match_states_cover_grammar() -> None:
    assert [state.name for state in MatchState] == [
        "EXPECT_KEY_OR_END",
        "EXPECT_SEPARATOR",
        "EXPECT_VALUE",
        "EXPECT_COMMA_OR_END",
    ]
