"""Grammar for ``.netrc`` auto-login configuration files.

A document is one or more *triples*, each made of three fields that must
appear strictly in the order ``machine`` -> ``login`` -> ``password``::

    machine github.com login batman password gotham
    machine gitlab.com
    login joker
    password arkam

Fields are separated by any run of whitespace, so the compact (one line)
and full (three lines) layouts can be freely mixed, and both ``\\n`` and
``\\r\\n`` line endings are accepted.

Parsing is strict and all-or-nothing. If no complete triple can be read
from the start of the document (a field is missing, malformed, or out of
order) the whole parse fails with a
:class:`~credfile.exceptions.ParseError` and no records are returned.
Input left over after the last complete triple is ignored.

The single public function is :func:`parse_auto_login`.
"""

from __future__ import annotations

from credfile.exceptions import ParseError
from credfile.models import LoginRecord
from credfile.parser.combinators import (
    ParseFailure,
    Parser,
    is_whitespace,
    line_ending,
    many,
    mapped,
    optional,
    sequence,
    tag,
    take_till,
    take_while,
)

MACHINE = "machine"
LOGIN = "login"
PASSWORD = "password"


def field(keyword: str) -> Parser:
    """Build a parser for ``<keyword> <value>`` that extracts only the value.

    The keyword must be followed by at least one whitespace character and a
    non-empty token. Trailing whitespace and a line ending are consumed when
    present.
    """
    return mapped(
        sequence(
            tag(keyword),
            take_while(is_whitespace, min_count=1, name=f"whitespace after '{keyword}'"),
            take_till(is_whitespace, name=f"a value for '{keyword}'"),
            optional(take_while(is_whitespace)),
            optional(line_ending()),
        ),
        lambda values: values[2],
    )


def _to_records(values: list[str]) -> list[LoginRecord]:
    # values arrive flattened as (machine, login, password) repeating
    return [
        LoginRecord(machine=values[i], username=values[i + 1], password=values[i + 2])
        for i in range(0, len(values), 3)
    ]


login_triple: Parser = sequence(field(MACHINE), field(LOGIN), field(PASSWORD))
"""Parser for a single machine/login/password triple."""

auto_login_document: Parser = mapped(
    sequence(optional(take_while(is_whitespace)), many(login_triple, 1)),
    lambda values: _to_records(values[1]),
)
"""Parser for a whole document, extracting a list of :class:`LoginRecord`."""


def _position(text: str, failure: ParseFailure) -> tuple[int, int]:
    """Translate a failure's remaining input into a 1-based (line, column)."""
    offset = len(text) - len(failure.remaining)
    consumed = text[:offset]
    line = consumed.count("\n") + 1
    column = offset - (consumed.rfind("\n") + 1) + 1
    return line, column


def parse_auto_login(text: str) -> list[LoginRecord]:
    """Parse an auto-login configuration into an ordered list of records.

    Args:
        text: The full contents of a ``.netrc`` style file.

    Returns:
        The records in document order. Never empty.

    Raises:
        ParseError: If the document does not start with at least one
            well-formed triple. The error reports the expected token and
            its line and column, never the credential values themselves.

    Example::

        records = parse_auto_login("machine github.com login batman password gotham")
        assert records[0].username == "batman"
    """
    _, records, failure = auto_login_document(text)
    if failure is not None:
        line, column = _position(text, failure)
        raise ParseError(
            f"Invalid auto-login configuration: {failure} at line {line}, column {column}",
            expected=failure.expected,
            line=line,
            column=column,
        )
    return records
