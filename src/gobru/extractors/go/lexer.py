from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

TokenKind = Literal["ident", "keyword", "number", "string", "rune", "op", "comment", "semi"]

GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
        "map", "package", "range", "return", "select", "struct", "switch", "type",
        "var",
    }
)

# longest first, so the scanner can use the first prefix that matches
_OPERATORS = sorted(
    [
        "<<=", ">>=", "&^=", "...", "&&", "||", "<-", "++", "--", "==", "!=", "<=",
        ">=", ":=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<", ">>", "&^",
        "~", "+", "-", "*", "/", "%", "&", "|", "^", "<", ">", "=", "!", "(", ")",
        "[", "]", "{", "}", ",", ";", ".", ":",
    ],
    key=len,
    reverse=True,
)

# tokens after which a newline ends the statement (Go automatic semicolon rule)
_SEMI_KEYWORDS = {"break", "continue", "fallthrough", "return"}
_SEMI_OPS = {"++", "--", ")", "]", "}"}


class GoParseError(ValueError):
    """A Go source file could not be read structurally."""

    def __init__(self, path: str, line: int, message: str):
        self.path = path
        self.line = line
        self.message = message
        super().__init__(f"{path}:{line}: {message}")


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    line: int
    end_line: int


def _ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _ident_part(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


def _needs_semi(tok: Token | None) -> bool:
    if tok is None:
        return False
    if tok.kind in ("ident", "number", "string", "rune"):
        return True
    if tok.kind == "keyword":
        return tok.value in _SEMI_KEYWORDS
    if tok.kind == "op":
        return tok.value in _SEMI_OPS
    return False


def tokenize(source: str, path: str = "<source>") -> list[Token]:
    """
    Split Go source into tokens, comments included.

    Newlines are not tokens; instead a ``semi`` token is inserted wherever Go's
    automatic semicolon rule would put one, so declaration readers can split
    statements and struct fields without tracking line breaks themselves.
    """
    tokens: list[Token] = []
    last_code: Token | None = None
    i = 0
    line = 1
    n = len(source)

    def emit(tok: Token) -> None:
        nonlocal last_code
        tokens.append(tok)
        if tok.kind != "comment":
            last_code = tok

    def newline_at(at_line: int) -> None:
        nonlocal last_code
        if _needs_semi(last_code):
            emit(Token("semi", "\n", at_line, at_line))
        last_code = None

    while i < n:
        ch = source[i]

        if ch == "\n":
            newline_at(line)
            line += 1
            i += 1
            continue

        if ch in " \t\r\ufeff":
            i += 1
            continue

        if source.startswith("//", i):
            end = source.find("\n", i)
            if end == -1:
                end = n
            emit(Token("comment", source[i:end], line, line))
            i = end
            continue

        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            if end == -1:
                raise GoParseError(path, line, "comment not terminated")
            text = source[i : end + 2]
            start_line = line
            breaks = text.count("\n")
            line += breaks
            tok = Token("comment", text, start_line, line)
            tokens.append(tok)
            if breaks:
                # a multi-line block comment acts like a newline
                newline_at(start_line)
            i = end + 2
            continue

        if _ident_start(ch):
            j = i + 1
            while j < n and _ident_part(source[j]):
                j += 1
            word = source[i:j]
            kind: TokenKind = "keyword" if word in GO_KEYWORDS else "ident"
            emit(Token(kind, word, line, line))
            i = j
            continue

        if ch.isdigit() or (ch == "." and i + 1 < n and source[i + 1].isdigit()):
            j = i + 1
            while j < n and (source[j].isalnum() or source[j] in "._"):
                # exponent sign: 1e+10, 0x1p-2
                j += 1
                if source[j - 1] in "eEpP" and j < n and source[j] in "+-":
                    j += 1
            emit(Token("number", source[i:j], line, line))
            i = j
            continue

        if ch == '"':
            j = i + 1
            while j < n and source[j] != '"':
                if source[j] == "\\":
                    j += 1
                if j < n and source[j] == "\n":
                    raise GoParseError(path, line, "string literal not terminated")
                j += 1
            if j >= n:
                raise GoParseError(path, line, "string literal not terminated")
            emit(Token("string", source[i : j + 1], line, line))
            i = j + 1
            continue

        if ch == "`":
            end = source.find("`", i + 1)
            if end == -1:
                raise GoParseError(path, line, "raw string literal not terminated")
            text = source[i : end + 1]
            start_line = line
            line += text.count("\n")
            emit(Token("string", text, start_line, line))
            i = end + 1
            continue

        if ch == "'":
            j = i + 1
            while j < n and source[j] != "'":
                if source[j] == "\\":
                    j += 1
                if j < n and source[j] == "\n":
                    raise GoParseError(path, line, "rune literal not terminated")
                j += 1
            if j >= n:
                raise GoParseError(path, line, "rune literal not terminated")
            emit(Token("rune", source[i : j + 1], line, line))
            i = j + 1
            continue

        for op in _OPERATORS:
            if source.startswith(op, i):
                emit(Token("op", op, line, line))
                i += len(op)
                break
        else:
            raise GoParseError(path, line, f"illegal character {ch!r}")

    newline_at(line)
    return tokens


def comment_text(raw: str) -> list[str]:
    """Strip comment markers; block comments may yield several lines."""
    if raw.startswith("//"):
        return [raw[2:].strip()]
    body = raw[2:-2] if raw.endswith("*/") else raw[2:]
    out = []
    for ln in body.splitlines():
        ln = ln.strip()
        if ln.startswith("*"):
            ln = ln[1:].strip()
        out.append(ln)
    # drop the empty first/last lines of a "/*\n ... \n*/" block
    while out and not out[0]:
        out.pop(0)
    while out and not out[-1]:
        out.pop()
    return out
