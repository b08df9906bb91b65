from __future__ import annotations

import pytest

from tests.support.harness import (
    TARGET_TEXT,
    brace,
    bracket,
    ident,
    num,
    parse,
    paren,
    punct,
    s,
    to_source,
)


@pytest.mark.parametrize(
    "source, expected",
    [
        ("a::b::c", "a::b::c"),
        ("::a::b", "::a::b"),
        ("f(x, y)", "f(x, y)"),
        ("v[0].len()", "v[0].len()"),
        ("println!(\"{}\", x)", "println!(\"{}\", x)"),
        ("let x: i32 = 1;", "let x: i32 = 1;"),
        ("a => b", "a => b"),
        ("x?;", "x?;"),
        ("{}", "{}"),
        ("{x}", "{ x }"),
        ("f()()", "f()()"),
        ("T: 'a", "T: 'a"),
        ("a  +   b", "a + b"),
    ],
    ids=[
        "path",
        "rooted-path",
        "call",
        "index-method",
        "macro-call",
        "type-annotation",
        "arrow",
        "question-mark",
        "empty-brace",
        "brace-padding",
        "chained-call",
        "lifetime-bound",
        "collapses-whitespace",
    ],
)
def test_render_spacing(source: str, expected: str) -> None:
    assert to_source(parse(source)) == expected


def test_render_is_stable() -> None:
    source = 'fn main() { let m = {"a" => 1}; call(m, [1, 2]); }'
    once = to_source(parse(source))
    assert to_source(parse(once)) == once


def test_render_hand_built_tokens() -> None:
    stream = (
        ident("f"),
        paren(brace(s("k"), punct("=", joint=True), punct(">"), num("1"))),
        punct(";"),
        bracket(),
    )
    assert to_source(stream) == 'f({ "k" => 1 }); []'


def test_render_target_path() -> None:
    stream = parse(f'{TARGET_TEXT}(("a", 1))')
    assert to_source(stream) == f'{TARGET_TEXT}(("a", 1))'


def test_render_empty_stream() -> None:
    assert to_source(()) == ""
