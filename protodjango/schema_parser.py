"""Parse .proto-style schema text into message and field definitions.

Handles:
- Top-level message blocks, in the order they appear
- Field declarations: [repeated|optional|required] Type name = N [options];
- Qualified field types (pkg.Type), reduced to their last segment
- Line (//) and block (/* */) comments
- Skipping of syntax/package/import/option statements and enum/service blocks
- Skipping of option/reserved/extensions statements inside message bodies

Nested messages, enums, oneofs and map<> fields are rejected with a
SchemaSyntaxError that points at the offending token.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, NoReturn

from .errors import SchemaSyntaxError
from .loader import load_schema
from .logging_config import get_logger

logger = get_logger(__name__)

IDENT = "ident"
INT = "int"
STRING = "string"
PUNCT = "punct"
EOF = "eof"

_TOKEN_SPEC: list[tuple[str, str]] = [
    ("COMMENT", r"//[^\n]*|/\*.*?\*/"),
    ("OPEN_COMMENT", r"/\*"),
    ("NEWLINE", r"\n"),
    ("SKIP", r"[ \t\r\f\v]+"),
    ("IDENT", r"[A-Za-z_][A-Za-z0-9_]*"),
    ("INT", r"0[xX][0-9a-fA-F]+|\d+"),
    ("STRING", r'"(?:[^"\\\n]|\\.)*"' + r"|'(?:[^'\\\n]|\\.)*'"),
    ("PUNCT", r"[{}\[\]()<>=;,.:+\-]"),
    ("MISMATCH", r"."),
]

_TOKEN_RE = re.compile(
    "|".join(f"(?P<{kind}>{pattern})" for kind, pattern in _TOKEN_SPEC),
    re.DOTALL,
)

_FIELD_LABELS = {"repeated", "optional", "required"}

# Definitions that would need a nested scope
_NESTED_KEYWORDS = {"message", "enum", "oneof", "extend"}

# Statements inside a message body that carry no field
_SKIPPED_MEMBERS = {"option", "reserved", "extensions"}


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int
    column: int

    def is_punct(self, value: str) -> bool:
        return self.kind == PUNCT and self.value == value

    def is_keyword(self, value: str) -> bool:
        return self.kind == IDENT and self.value == value

    def describe(self) -> str:
        if self.kind == EOF:
            return "end of input"
        return repr(self.value)


@dataclass(frozen=True)
class SchemaField:
    """A single field declaration inside a message."""

    name: str
    type: str
    repeated: bool = False
    tag: int | None = None
    line: int = 0


@dataclass(frozen=True)
class SchemaMessage:
    """A message block with its fields in declaration order."""

    name: str
    fields: tuple[SchemaField, ...] = ()
    line: int = 0


def tokenize(text: str, source: str = "<schema>") -> Iterator[Token]:
    """Split schema text into tokens, dropping whitespace and comments.

    The final token is always EOF.
    """
    line = 1
    line_start = 0
    for match in _TOKEN_RE.finditer(text):
        kind = match.lastgroup
        value = match.group()
        column = match.start() - line_start + 1

        if kind == "NEWLINE":
            line += 1
            line_start = match.end()
            continue
        if kind == "COMMENT":
            newlines = value.count("\n")
            if newlines:
                line += newlines
                line_start = match.start() + value.rfind("\n") + 1
            continue
        if kind == "SKIP":
            continue
        if kind == "OPEN_COMMENT":
            raise SchemaSyntaxError("unterminated block comment", line, column, source)
        if kind == "MISMATCH":
            raise SchemaSyntaxError(
                f"unexpected character {value!r}", line, column, source,
            )

        yield Token(kind.lower(), value, line, column)

    yield Token(EOF, "", line, len(text) - line_start + 1)


def _parse_int(value: str) -> int:
    if value[:2].lower() == "0x":
        return int(value, 16)
    return int(value)


class SchemaParser:
    """Recursive-descent parser over the token stream.

    Grammar::

        file    := (message | statement)*
        message := "message" IDENT "{" member* "}"
        member  := ";" | skipped_statement | field
        field   := [label] type IDENT "=" INT ["[" ... "]"] [";"]
        type    := ["."] IDENT ("." IDENT)*
    """

    def __init__(self, tokens: Iterator[Token] | list[Token], source: str = "<schema>") -> None:
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].kind != EOF:
            self.tokens.append(Token(EOF, "", 1, 1))
        self.pos = 0
        self.source = source

    # -- Public API --------------------------------------------------------

    def parse(self) -> list[SchemaMessage]:
        """Parse every top-level message block."""
        messages: list[SchemaMessage] = []
        while self._peek().kind != EOF:
            token = self._peek()
            if token.is_keyword("message"):
                messages.append(self._parse_message())
            elif token.is_punct("}"):
                self._error("unexpected '}'", token)
            else:
                self._skip_statement()
        return messages

    # -- Grammar rules -----------------------------------------------------

    def _parse_message(self) -> SchemaMessage:
        keyword = self._advance()
        name = self._expect_ident("message name").value
        self._expect_punct("{")

        fields: list[SchemaField] = []
        while True:
            token = self._peek()
            if token.kind == EOF:
                self._error(f"unterminated message {name!r}", keyword)
            if token.is_punct("}"):
                self._advance()
                break
            if token.is_punct(";"):
                self._advance()
                continue
            if token.kind == IDENT and token.value in _NESTED_KEYWORDS:
                self._error(
                    f"nested {token.value} definitions are not supported "
                    f"(in message {name!r})",
                    token,
                )
            if token.kind == IDENT and token.value in _SKIPPED_MEMBERS:
                self._skip_statement()
                continue
            fields.append(self._parse_field())

        logger.debug("Parsed message %s with %d field(s)", name, len(fields))
        return SchemaMessage(name=name, fields=tuple(fields), line=keyword.line)

    def _parse_field(self) -> SchemaField:
        first = self._peek()
        repeated = False
        # A label is only a label when a type and a name follow it
        if (
            first.kind == IDENT
            and first.value in _FIELD_LABELS
            and (self._peek(1).kind == IDENT or self._peek(1).is_punct("."))
            and not self._peek(2).is_punct("=")
        ):
            self._advance()
            repeated = first.value == "repeated"

        type_token, type_name = self._parse_type_name()
        if self._peek().is_punct("<"):
            self._error(f"{type_token.value}<...> fields are not supported", type_token)
        name_token = self._expect_ident("field name")
        self._expect_punct("=")
        tag_token = self._expect(INT, "field number")

        if self._peek().is_punct("["):
            self._skip_field_options()
        if self._peek().is_punct(";"):
            self._advance()

        return SchemaField(
            name=name_token.value,
            type=type_name,
            repeated=repeated,
            tag=_parse_int(tag_token.value),
            line=type_token.line,
        )

    def _parse_type_name(self) -> tuple[Token, str]:
        """Parse a possibly qualified type; the last segment names it.

        ``google.protobuf.Timestamp`` and ``.pkg.Author`` become ``Timestamp``
        and ``Author``.
        """
        first = self._peek()
        if first.is_punct("."):
            self._advance()
        segment = self._expect_ident("field type")
        while self._peek().is_punct("."):
            self._advance()
            segment = self._expect_ident("field type")
        return first, segment.value

    def _skip_field_options(self) -> None:
        start = self._advance()
        depth = 1
        while depth:
            token = self._advance()
            if token.kind == EOF:
                self._error("unterminated field options", start)
            if token.is_punct("["):
                depth += 1
            elif token.is_punct("]"):
                depth -= 1

    def _skip_statement(self) -> None:
        """Skip to the end of a statement or balanced block.

        Stops without consuming at a '}' that closes the enclosing scope,
        or at a top-level 'message' keyword after the first token.
        """
        start = self._peek()
        depth = 0
        while True:
            token = self._peek()
            if token.kind == EOF:
                if depth:
                    self._error("unterminated block", start)
                return
            if depth == 0 and token is not start:
                if token.is_punct("}") or token.is_keyword("message"):
                    return
            self._advance()
            if token.is_punct("{"):
                depth += 1
            elif token.is_punct("}"):
                depth -= 1
                if depth == 0:
                    return
            elif token.is_punct(";") and depth == 0:
                return

    # -- Token helpers -----------------------------------------------------

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind != EOF:
            self.pos += 1
        return token

    def _expect(self, kind: str, what: str) -> Token:
        token = self._peek()
        if token.kind != kind:
            self._error(f"expected {what}, got {token.describe()}", token)
        return self._advance()

    def _expect_ident(self, what: str) -> Token:
        return self._expect(IDENT, what)

    def _expect_punct(self, value: str) -> Token:
        token = self._peek()
        if not token.is_punct(value):
            self._error(f"expected {value!r}, got {token.describe()}", token)
        return self._advance()

    def _error(self, message: str, token: Token) -> NoReturn:
        raise SchemaSyntaxError(message, token.line, token.column, self.source)


def parse_schema(text: str, source: str = "<schema>") -> list[SchemaMessage]:
    """Parse schema text into messages in textual order."""
    messages = SchemaParser(tokenize(text, source), source).parse()
    logger.info("Parsed %d message(s) from %s", len(messages), source)
    return messages


def parse_schema_file(path: str | Path) -> list[SchemaMessage]:
    """Read and parse a schema file."""
    return parse_schema(load_schema(path), source=str(path))
