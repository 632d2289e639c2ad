from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from gobru.extractors.go.lexer import GoParseError, Token, comment_text, tokenize

TypeKind = Literal["ident", "selector", "array", "map", "pointer", "struct", "other"]

_OPEN = {"(": ")", "[": "]", "{": "}"}
_CLOSE = {")", "]", "}"}

# binary, unary and assignment operators; none of them can end an expression
_DANGLING_OPS = frozenset(
    {
        "+", "-", "*", "/", "%", "&", "|", "^", "<<", ">>", "&^", "&&", "||", "==",
        "!=", "<", "<=", ">", ">=", "=", ":=", "+=", "-=", "*=", "/=", "%=", "&=",
        "|=", "^=", "<<=", ">>=", "&^=", "<-", ".", "!", "~",
    }
)

_TYPE_KEYWORDS = {"map", "chan", "func", "struct", "interface"}


@dataclass(frozen=True)
class FuncDecl:
    name: str
    doc: tuple[str, ...]
    line: int


@dataclass(frozen=True)
class StructField:
    names: tuple[str, ...]  # empty for embedded fields
    type_kind: TypeKind
    type_text: str
    tag: Optional[str]
    doc: tuple[str, ...]
    line: int


@dataclass(frozen=True)
class StructDecl:
    name: str
    fields: tuple[StructField, ...]
    doc: tuple[str, ...]
    line: int


@dataclass(frozen=True)
class GoFile:
    path: str
    package: str
    funcs: tuple[FuncDecl, ...]
    structs: tuple[StructDecl, ...]


def parse_go_file(path: Path, display_path: str | None = None) -> GoFile:
    shown = display_path or str(path)
    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise GoParseError(shown, 0, f"invalid UTF-8 encoding ({e.reason})") from e
    return parse_go_source(source, shown)


def parse_go_source(source: str, path: str = "<source>") -> GoFile:
    """
    Read the declarations gobru cares about from one Go file:
      - top-level func / method declarations with their doc comments
      - struct type declarations (any nesting level, single or grouped)

    Raises GoParseError for the syntax errors this reader checks:
      - lexical errors: unterminated string, rune or comment literals, illegal characters
      - a missing package clause, and unbalanced or mismatched brackets
      - a binary or assignment operator left dangling before `)`, `]`, `}`,
        the end of a statement or the end of the file
      - struct fields that are not a field list followed by exactly one type
        expression and an optional tag
    Anything else inside function bodies is not checked.
    """
    reader = _DeclReader(tokenize(source, path), path)
    return reader.read()


class _DeclReader:
    def __init__(self, tokens: list[Token], path: str):
        self.tokens = tokens
        self.path = path
        self.match: dict[int, int] = {}

    def error(self, tok: Token | None, message: str) -> GoParseError:
        line = tok.line if tok is not None else (self.tokens[-1].line if self.tokens else 1)
        return GoParseError(self.path, line, message)

    # ----------------------------
    # Token navigation
    # ----------------------------

    def next_code(self, i: int) -> int:
        """Index of the first non-comment token at or after i (len(tokens) if none)."""
        while i < len(self.tokens) and self.tokens[i].kind == "comment":
            i += 1
        return i

    def prev_code(self, i: int) -> int:
        while i >= 0 and self.tokens[i].kind == "comment":
            i -= 1
        return i

    def tok(self, i: int) -> Token | None:
        return self.tokens[i] if 0 <= i < len(self.tokens) else None

    def is_op(self, i: int, value: str) -> bool:
        t = self.tok(i)
        return t is not None and t.kind == "op" and t.value == value

    def is_keyword(self, i: int, value: str) -> bool:
        t = self.tok(i)
        return t is not None and t.kind == "keyword" and t.value == value

    def is_stmt_end(self, i: int) -> bool:
        t = self.tok(i)
        return t is not None and (t.kind == "semi" or (t.kind == "op" and t.value == ";"))

    # ----------------------------
    # Structure
    # ----------------------------

    def read(self) -> GoFile:
        package = self._read_package_clause()
        self._match_brackets()
        self._check_dangling_operators()

        funcs: list[FuncDecl] = []
        structs: list[StructDecl] = []
        depth = 0

        for i, t in enumerate(self.tokens):
            if t.kind == "op":
                if t.value in _OPEN:
                    depth += 1
                elif t.value in _CLOSE:
                    depth -= 1
                continue
            if t.kind != "keyword":
                continue
            if t.value == "func" and depth == 0:
                fn = self._read_func(i)
                if fn is not None:
                    funcs.append(fn)
            elif t.value == "type":
                structs.extend(self._read_type_decl(i))

        return GoFile(path=self.path, package=package, funcs=tuple(funcs), structs=tuple(structs))

    def _read_package_clause(self) -> str:
        i = self.next_code(0)
        t = self.tok(i)
        if not self.is_keyword(i, "package"):
            raise self.error(t, "expected 'package' clause")
        name = self.tok(self.next_code(i + 1))
        if name is None or name.kind != "ident":
            raise self.error(t, "expected package name")
        return name.value

    def _match_brackets(self) -> None:
        stack: list[int] = []
        for i, t in enumerate(self.tokens):
            if t.kind != "op":
                continue
            if t.value in _OPEN:
                stack.append(i)
            elif t.value in _CLOSE:
                if not stack or _OPEN[self.tokens[stack[-1]].value] != t.value:
                    raise self.error(t, f"unexpected {t.value!r}")
                self.match[stack.pop()] = i
        if stack:
            t = self.tokens[stack[-1]]
            raise self.error(t, f"{t.value!r} is never closed")

    def _check_dangling_operators(self) -> None:
        prev: Token | None = None
        for t in self.tokens:
            if t.kind == "comment":
                continue
            ends = t.kind == "semi" or (t.kind == "op" and t.value in (";", ")", "]", "}"))
            if ends and prev is not None and prev.kind == "op" and prev.value in _DANGLING_OPS:
                raise self.error(t, f"expected operand after {prev.value!r}")
            prev = t
        if prev is not None and prev.kind == "op" and prev.value in _DANGLING_OPS:
            raise self.error(prev, f"expected operand after {prev.value!r}")

    def doc_before(self, i: int) -> tuple[str, ...]:
        """
        Lines of the comment group that ends on the line right above token i.
        A comment sharing its first line with code is a trailing comment, not a doc.
        """
        group: list[Token] = []
        expected = self.tokens[i].line - 1
        j = i - 1
        while j >= 0 and self.tokens[j].kind == "comment":
            c = self.tokens[j]
            if c.end_line != expected:
                break
            group.append(c)
            expected = c.line - 1
            j -= 1

        if group and j >= 0 and self.tokens[j].end_line == group[-1].line:
            group.pop()

        lines: list[str] = []
        for c in reversed(group):
            lines.extend(comment_text(c.value))
        return tuple(lines)

    # ----------------------------
    # func
    # ----------------------------

    def _read_func(self, i: int) -> FuncDecl | None:
        # A declaration starts a statement; `x = func() {...}` is a literal.
        before = self.prev_code(i - 1)
        if before >= 0 and not self.is_stmt_end(before):
            return None

        j = self.next_code(i + 1)
        if self.is_op(j, "("):
            j = self.next_code(self.match[j] + 1)  # skip receiver

        name = self.tok(j)
        if name is None or name.kind != "ident":
            return None
        after = self.next_code(j + 1)
        if not (self.is_op(after, "(") or self.is_op(after, "[")):
            raise self.error(name, f"expected '(' after func {name.value}")

        return FuncDecl(name=name.value, doc=self.doc_before(i), line=self.tokens[i].line)

    # ----------------------------
    # type
    # ----------------------------

    def _read_type_decl(self, i: int) -> list[StructDecl]:
        j = self.next_code(i + 1)
        t = self.tok(j)
        if t is None:
            raise self.error(self.tokens[i], "expected type name")

        if t.kind == "ident":
            spec = self._read_type_spec(j, doc=self.doc_before(i))
            return [spec] if spec is not None else []

        if not self.is_op(j, "("):
            # e.g. `switch v := x.(type)`
            return []

        out: list[StructDecl] = []
        end = self.match[j]
        k = self.next_code(j + 1)
        while k < end:
            if self.is_stmt_end(k):
                k = self.next_code(k + 1)
                continue
            spec_tok = self.tokens[k]
            if spec_tok.kind != "ident":
                raise self.error(spec_tok, f"expected type name, found {spec_tok.value!r}")
            spec = self._read_type_spec(k, doc=self.doc_before(k))
            if spec is not None:
                out.append(spec)
            k = self._skip_to_stmt_end(k, end)
        return out

    def _skip_to_stmt_end(self, k: int, end: int) -> int:
        while k < end and not self.is_stmt_end(k):
            if k in self.match:
                k = self.match[k]
            k += 1
        return self.next_code(k + 1) if k < end else end

    def _looks_like_type_params(self, open_idx: int) -> bool:
        # `type Page[T any] struct` vs `type Buf [64]byte`
        first = self.next_code(open_idx + 1)
        second = self.next_code(first + 1)
        if first >= self.match[open_idx] or self.tokens[first].kind != "ident":
            return False
        nxt = self.tok(second)
        if nxt is None or second >= self.match[open_idx]:
            return False
        return nxt.kind in ("ident", "keyword") or nxt.value in (",", "~", "*")

    def _read_type_spec(self, name_idx: int, doc: tuple[str, ...]) -> StructDecl | None:
        name_tok = self.tokens[name_idx]
        k = self.next_code(name_idx + 1)
        if self.is_op(k, "[") and self._looks_like_type_params(k):
            k = self.next_code(self.match[k] + 1)
        if self.is_op(k, "="):
            k = self.next_code(k + 1)
        if not self.is_keyword(k, "struct"):
            return None

        brace = self.next_code(k + 1)
        if not self.is_op(brace, "{"):
            raise self.error(self.tokens[k], "expected '{' after struct")

        fields = self._read_struct_fields(brace, self.match[brace])
        return StructDecl(name=name_tok.value, fields=tuple(fields), doc=doc, line=name_tok.line)

    def _read_struct_fields(self, open_idx: int, close_idx: int) -> list[StructField]:
        fields: list[StructField] = []
        segment: list[int] = []
        k = open_idx + 1
        while k <= close_idx:
            if k == close_idx or self.is_stmt_end(k):
                if segment:
                    fields.append(self._read_field(segment))
                segment = []
                k += 1
                continue
            if self.tokens[k].kind == "comment":
                k += 1
                continue
            segment.append(k)
            if k in self.match:
                # a nested struct/func/map type: keep its bracket span whole
                segment.extend(
                    idx for idx in range(k + 1, self.match[k] + 1) if self.tokens[idx].kind != "comment"
                )
                k = self.match[k]
            k += 1
        return fields

    def _read_field(self, segment: list[int]) -> StructField:
        toks = [self.tokens[i] for i in segment]
        first = toks[0]
        doc = self.doc_before(segment[0])

        tag: Optional[str] = None
        if len(toks) > 1 and toks[-1].kind == "string":
            tag = _unquote(toks[-1].value)
            toks = toks[:-1]

        names: list[str] = []
        type_toks: list[Token]

        if first.kind == "ident" and len(toks) > 1 and toks[1].value == ",":
            idx = 0
            while True:
                if idx >= len(toks) or toks[idx].kind != "ident":
                    raise self.error(first, "expected field name")
                names.append(toks[idx].value)
                idx += 1
                if idx < len(toks) and toks[idx].kind == "op" and toks[idx].value == ",":
                    idx += 1
                    continue
                break
            type_toks = toks[idx:]
            if not type_toks:
                raise self.error(first, "expected field type")
        elif first.kind == "ident" and _is_embedded_name(toks):
            type_toks = toks  # embedded: T, pkg.T, T[int], pkg.T[K, V]
        elif first.kind == "op" and first.value == "*":
            type_toks = toks  # embedded: *T
        elif first.kind == "ident":
            names.append(first.value)
            type_toks = toks[1:]
        else:
            raise self.error(first, f"unexpected {first.value!r} in struct field")

        end = self._type_end(type_toks, 0)
        if end < len(type_toks):
            raise self.error(type_toks[end], f"unexpected {type_toks[end].value!r} after field type")

        return StructField(
            names=tuple(names),
            type_kind=_type_kind(type_toks),
            type_text=_type_text(type_toks),
            tag=tag,
            doc=doc,
            line=first.line,
        )

    def _type_end(self, toks: list[Token], i: int) -> int:
        """Index just past the single type expression starting at toks[i]."""
        if i >= len(toks):
            raise self.error(toks[-1], "expected field type")
        t = toks[i]

        if t.kind == "ident":
            i += 1
            if i + 1 < len(toks) and _is_op(toks[i], ".") and toks[i + 1].kind == "ident":
                i += 2
            if i < len(toks) and _is_op(toks[i], "["):
                close = _local_close(toks, i)
                if close == i + 1:
                    raise self.error(toks[i], "expected type argument")
                i = close + 1
            return i

        if _is_op(t, "*"):
            return self._type_end(toks, i + 1)
        if _is_op(t, "["):
            return self._type_end(toks, _local_close(toks, i) + 1)
        if _is_op(t, "("):
            close = _local_close(toks, i)
            if self._type_end(toks, i + 1) != close:
                raise self.error(t, "expected ')' after parenthesized type")
            return close + 1
        if _is_op(t, "<-") and i + 1 < len(toks) and toks[i + 1].value == "chan":
            return self._type_end(toks, i + 2)

        if t.kind == "keyword" and t.value in _TYPE_KEYWORDS:
            nxt = toks[i + 1] if i + 1 < len(toks) else None
            if t.value == "chan":
                i += 1
                if nxt is not None and _is_op(nxt, "<-"):
                    i += 1
                return self._type_end(toks, i)
            want = {"map": "[", "func": "(", "struct": "{", "interface": "{"}[t.value]
            if nxt is None or not _is_op(nxt, want):
                raise self.error(t, f"expected {want!r} after {t.value}")
            i = _local_close(toks, i + 1) + 1
            if t.value == "map":
                return self._type_end(toks, i)
            if t.value == "func" and i < len(toks):
                # result: a parameter list or a single type
                if _is_op(toks[i], "("):
                    return _local_close(toks, i) + 1
                if _starts_type(toks[i]):
                    return self._type_end(toks, i)
            return i

        raise self.error(t, f"unexpected {t.value!r} in field type")


def _is_op(t: Token, value: str) -> bool:
    return t.kind == "op" and t.value == value


def _starts_type(t: Token) -> bool:
    if t.kind == "ident":
        return True
    if t.kind == "keyword":
        return t.value in _TYPE_KEYWORDS
    return t.kind == "op" and t.value in ("*", "[", "(", "<-")


def _local_close(toks: list[Token], open_idx: int) -> int:
    depth = 0
    for k in range(open_idx, len(toks)):
        t = toks[k]
        if t.kind != "op":
            continue
        if t.value in _OPEN:
            depth += 1
        elif t.value in _CLOSE:
            depth -= 1
            if depth == 0:
                return k
    # field segments always carry whole bracket spans
    raise AssertionError("unbalanced field segment")


def _is_embedded_name(toks: list[Token]) -> bool:
    # `Page[int]` embeds a generic type; `Items [4]int` is a named array field
    if len(toks) == 1 or _is_op(toks[1], "."):
        return True
    return _is_op(toks[1], "[") and _local_close(toks, 1) == len(toks) - 1


def _type_kind(toks: list[Token]) -> TypeKind:
    head = toks[0]
    if head.kind == "op":
        if head.value == "*":
            return "pointer"
        if head.value == "[":
            return "array"
        return "other"
    if head.kind == "keyword":
        if head.value == "map":
            return "map"
        if head.value == "struct":
            return "struct"
        return "other"
    if head.kind == "ident":
        if len(toks) == 1:
            return "ident"
        if len(toks) == 3 and toks[1].value == "." and toks[2].kind == "ident":
            return "selector"
    return "other"


def _type_text(toks: list[Token]) -> str:
    words = ("ident", "keyword", "number")
    out = ""
    prev: Token | None = None
    for idx, t in enumerate(toks):
        if t.kind == "semi":
            if idx + 1 < len(toks) and toks[idx + 1].value != "}":
                out += ";"
                prev = t
            continue
        if prev is not None and (
            (prev.kind in words and t.kind in words)
            or prev.value == ","
            or prev.kind == "semi"
            or (prev.value == ")" and t.kind in words)
        ):
            out += " "
        out += t.value
        prev = t
    return out


def _unquote(literal: str) -> str:
    if literal.startswith("`"):
        return literal[1:-1]
    try:
        return json.loads(literal)
    except ValueError:
        return literal[1:-1]
