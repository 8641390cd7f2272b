"""Composable text-matching primitives for the credential grammar.

Every function in this module builds and returns a *parser*: a plain
callable that takes the remaining input text and returns a three-tuple::

    (remaining, extracted, failure)

On success ``failure`` is ``None`` and ``remaining`` is whatever input the
parser did not consume. On failure ``extracted`` is ``None`` and
``failure`` is a :class:`ParseFailure` describing what was expected and
where. Failures are returned rather than raised so that :func:`optional`
and :func:`many` can treat them as ordinary control flow; the grammar in
:mod:`credfile.parser.grammar` converts a final failure into a
:class:`~credfile.exceptions.ParseError`.

Parsers hold no state between calls and perform no I/O, so a parser built
once can be shared freely.

Example::

    keyword = sequence(tag("login"), take_while(is_whitespace, min_count=1))
    remaining, values, failure = keyword("login   batman")
    # remaining == "batman", values == ["login", "   "], failure is None
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

ParseResult = tuple[str, Any, Optional["ParseFailure"]]
Parser = Callable[[str], ParseResult]


@dataclass(frozen=True)
class ParseFailure:
    """Why and where a parser failed.

    Attributes:
        expected: Human-readable description of what the parser wanted,
            e.g. ``"'login'"`` or ``"whitespace"``.
        remaining: The input left at the failure point. Its length relative
            to the original text gives the failure offset.
    """

    expected: str
    remaining: str

    def __str__(self) -> str:
        return f"expected {self.expected}"


def is_whitespace(ch: str) -> bool:
    """Return True if *ch* is a Unicode whitespace character."""
    return ch.isspace()


def tag(literal: str) -> Parser:
    """Match *literal* exactly at the start of the input.

    Extracts the literal itself.
    """

    def parse(text: str) -> ParseResult:
        if text.startswith(literal):
            return text[len(literal):], literal, None
        return text, None, ParseFailure(repr(literal), text)

    return parse


def take_while(
    predicate: Callable[[str], bool],
    min_count: int = 0,
    name: str = "matching characters",
) -> Parser:
    """Consume the longest run of characters satisfying *predicate*.

    With the default ``min_count=0`` this parser never fails and may
    consume nothing. A positive *min_count* turns it into a mandatory
    match; *name* is then used in the failure description.
    """

    def parse(text: str) -> ParseResult:
        end = 0
        while end < len(text) and predicate(text[end]):
            end += 1
        if end < min_count:
            return text, None, ParseFailure(name, text)
        return text[end:], text[:end], None

    return parse


def take_till(predicate: Callable[[str], bool], name: str = "a value") -> Parser:
    """Consume the longest non-empty run of characters NOT satisfying *predicate*.

    Fails when the very first character satisfies *predicate* or the input
    is exhausted, since an empty token is never a valid value.
    """

    def parse(text: str) -> ParseResult:
        end = 0
        while end < len(text) and not predicate(text[end]):
            end += 1
        if end == 0:
            return text, None, ParseFailure(name, text)
        return text[end:], text[:end], None

    return parse


def optional(parser: Parser) -> Parser:
    """Run *parser*; on failure succeed without consuming or extracting anything."""

    def parse(text: str) -> ParseResult:
        remaining, value, failure = parser(text)
        if failure is not None:
            return text, None, None
        return remaining, value, None

    return parse


def first_of(*parsers: Parser) -> Parser:
    """Return the result of the first parser in *parsers* that succeeds.

    When all of them fail, the failure lists every alternative.
    """

    def parse(text: str) -> ParseResult:
        expected = []
        for parser in parsers:
            remaining, value, failure = parser(text)
            if failure is None:
                return remaining, value, None
            expected.append(failure.expected)
        return text, None, ParseFailure(" or ".join(expected), text)

    return parse


def sequence(*parsers: Parser) -> Parser:
    """Run *parsers* in order and extract the list of their outputs.

    The sequence is atomic: if any parser fails, the original input is
    returned untouched alongside the inner failure, so callers never see
    partial consumption.
    """

    def parse(text: str) -> ParseResult:
        remaining = text
        values: list[Any] = []
        for parser in parsers:
            remaining, value, failure = parser(remaining)
            if failure is not None:
                return text, None, failure
            values.append(value)
        return remaining, values, None

    return parse


def many(parser: Parser, min_count: int = 1) -> Parser:
    """Repeat *parser* until it fails, stops consuming, or the input runs out.

    Fails if fewer than *min_count* repetitions succeeded, reporting the
    failure of the last attempt. Otherwise extracts a flat list of every
    repetition's output: list outputs are spliced in, other values are
    appended.
    """

    def parse(text: str) -> ParseResult:
        remaining = text
        values: list[Any] = []
        count = 0
        last_failure: Optional[ParseFailure] = None
        while remaining or count < min_count:
            rest, value, failure = parser(remaining)
            if failure is not None:
                last_failure = failure
                break
            if len(rest) == len(remaining):
                break
            count += 1
            if isinstance(value, list):
                values.extend(value)
            else:
                values.append(value)
            remaining = rest

        if count < min_count:
            if last_failure is None:
                last_failure = ParseFailure(
                    f"at least {min_count} repetition(s)", remaining
                )
            return text, None, last_failure
        return remaining, values, None

    return parse


def mapped(parser: Parser, func: Callable[[Any], Any]) -> Parser:
    """Run *parser* and transform its extracted value with the pure function *func*."""

    def parse(text: str) -> ParseResult:
        remaining, value, failure = parser(text)
        if failure is not None:
            return text, None, failure
        return remaining, func(value), None

    return parse


def line_ending() -> Parser:
    """Match a single ``\\r\\n`` or ``\\n`` line terminator."""
    return first_of(tag("\r\n"), tag("\n"))
