"""Tokens, syntax tree and parser for nelly scripts."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Union


class ParseError(Exception):
    """A script could not be tokenized or parsed."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{line}:{column}: {message}")
        self.message, self.line, self.column = message, line, column


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int
    column: int


_RULES = (
    ("Repo", r"repo\b"),
    ("Branch", r"branch\b"),
    ("String", r'"(?:\\.|[^"])*"'),
    ("Whitespace", r"[ \t\n\r]+"),
    ("Comment", r"//[^\n]*"),
    ("Semver", r"v?\d+\.\d+\.\d+(?:-[A-Za-z_]\w*)?(?:\+[A-Za-z_]\w*)?"),
    ("Ident", r"[a-zA-Z_][a-zA-Z0-9_]*"),
    ("Number", r"[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?"),
    ("LBrace", r"\{"),
    ("RBrace", r"\}"),
    ("LBracket", r"\["),
    ("RBracket", r"\]"),
    ("LParen", r"\("),
    ("RParen", r"\)"),
    ("Comma", r","),
    ("Semicolon", r";"),
    ("Op", r"==|!=|<=|>=|&&|\|\||[+\-*/<>]"),
    ("Assign", r"="),
    ("Dot", r"\."),
)
_TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in _RULES))
_SEMVER_RE = re.compile(r"(v?)(\d+)\.(\d+)\.(\d+)(?:-(\w+))?(?:\+(\w+))?")
_KEYWORDS = frozenset({"let", "for", "in", "if", "else"})
_PRECEDENCE = ({"||"}, {"&&"}, {"==", "!=", "<", "<=", ">", ">="}, {"+", "-"}, {"*", "/"})


@dataclass
class RepoDecl:
    url: str


@dataclass
class BranchDecl:
    name: str


@dataclass
class Ident:
    name: str


@dataclass
class StringLit:
    value: str


@dataclass
class NumberLit:
    value: float


@dataclass
class BoolLit:
    value: bool


@dataclass
class Semver:
    major: int
    minor: int
    patch: int
    prefix: str = ""
    pre: Optional[str] = None
    build: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.prefix}{self.major}.{self.minor}.{self.patch}"
        if self.pre is not None:
            text += f"-{self.pre}"
        if self.build is not None:
            text += f"+{self.build}"
        return text


@dataclass
class ArrayLit:
    items: list[Expr] = field(default_factory=list)


@dataclass
class CallExpr:
    name: str
    args: list[Expr] = field(default_factory=list)


@dataclass
class BinaryExpr:
    left: Expr
    operator: str
    right: Expr


Expr = Union[Ident, StringLit, NumberLit, BoolLit, Semver, ArrayLit, CallExpr, BinaryExpr]


@dataclass
class LetStmt:
    name: str
    value: Expr


@dataclass
class CommandOption:
    name: str
    value: Optional[Expr] = None


@dataclass
class CommandStmt:
    name: str
    options: list[CommandOption] = field(default_factory=list)


@dataclass
class ForStmt:
    var: str
    iterable: Expr
    body: list[Statement] = field(default_factory=list)


@dataclass
class IfStmt:
    condition: Expr
    then: list[Statement] = field(default_factory=list)
    else_body: Optional[list[Statement]] = None


@dataclass
class ExprStmt:
    expr: Expr


Statement = Union[LetStmt, CommandStmt, ForStmt, IfStmt, ExprStmt]


@dataclass
class Program:
    repo: RepoDecl
    branch: BranchDecl
    statements: list[Statement] = field(default_factory=list)


def tokenize(source: str) -> list[Token]:
    """Split ``source`` into tokens, dropping whitespace and comments."""
    tokens, pos, line, column = [], 0, 1, 1
    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            raise ParseError(f"invalid character {source[pos]!r}", line, column)
        kind, text = match.lastgroup, match.group()
        if kind not in ("Whitespace", "Comment"):
            tokens.append(Token(kind, text, line, column))
        newlines = text.count("\n")
        line += newlines
        column = len(text) - text.rfind("\n") if newlines else column + len(text)
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, tokens: list[Token], end: tuple[int, int]) -> None:
        self._tokens, self._pos, self._end = tokens, 0, end

    def _peek(self, offset: int = 0) -> Optional[Token]:
        index = self._pos + offset
        return self._tokens[index] if index < len(self._tokens) else None

    def _at(self, kind: str, value: Optional[str] = None, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token is not None and token.kind == kind and value in (None, token.value)

    def _error(self, message: str) -> ParseError:
        token = self._peek()
        return ParseError(message, *((token.line, token.column) if token else self._end))

    def _expect(self, kind: str, value: Optional[str] = None) -> Token:
        token = self._peek()
        if not self._at(kind, value):
            found = "end of input" if token is None else repr(token.value)
            raise self._error(f"expected {kind if value is None else repr(value)}, found {found}")
        self._pos += 1
        return token

    def program(self) -> Program:
        self._expect("Repo")
        repo = RepoDecl(self._expect("String").value.strip('"'))
        self._expect("Branch")
        branch = BranchDecl(self._expect("String").value.strip('"'))
        statements = []
        while self._peek() is not None:
            statements.append(self.statement())
        return Program(repo, branch, statements)

    def statement(self) -> Statement:
        token = self._peek()
        word = token.value
        if token.kind != "Ident" or word in ("true", "false") or self._at("LParen", offset=1) \
                or self._at("Op", offset=1):
            return ExprStmt(self.expression())
        self._pos += 1
        if word == "let":
            name = self._expect("Ident").value
            self._expect("Assign")
            return LetStmt(name, self.expression())
        if word == "for":
            var = self._expect("Ident").value
            self._expect("Ident", "in")
            iterable = self.expression()
            return ForStmt(var, iterable, self._block())
        if word == "if":
            condition, then, else_body = self.expression(), None, None
            then = self._block()
            if self._at("Ident", "else"):
                self._pos += 1
                else_body = self._block()
            return IfStmt(condition, then, else_body)
        if word in _KEYWORDS:
            self._pos -= 1
            raise self._error(f"unexpected {word!r}")
        command = CommandStmt(word)
        while self._at("Dot"):
            self._pos += 1
            name = self._expect("Ident").value
            value = self.expression() if self._starts_option_value() else None
            command.options.append(CommandOption(name, value))
        return command

    def _starts_option_value(self) -> bool:
        token = self._peek()
        if token is None:
            return False
        if token.kind in ("String", "Number", "Semver", "LBracket", "LParen"):
            return True
        return token.kind == "Ident" and token.value not in _KEYWORDS and not self._at("Dot", offset=1)

    def _block(self) -> list[Statement]:
        self._expect("LBrace")
        body = []
        while not self._at("RBrace"):
            if self._peek() is None:
                raise self._error("expected '}', found end of input")
            body.append(self.statement())
        self._pos += 1
        return body

    def expression(self, level: int = 0) -> Expr:
        if level == len(_PRECEDENCE):
            return self._primary()
        left = self.expression(level + 1)
        while (operator := self._operator(_PRECEDENCE[level])) is not None:
            left = BinaryExpr(left, operator, self.expression(level + 1))
        return left

    def _operator(self, operators: set[str]) -> Optional[str]:
        token = self._peek()
        if token is None:
            return None
        if token.kind == "Op" and token.value in operators:
            self._pos += 1
            return token.value
        sign = token.value[0]
        if token.kind == "Number" and sign in "+-" and sign in operators:
            # A signed number directly after an operand is a binary operator.
            self._tokens[self._pos] = Token("Number", token.value[1:], token.line, token.column + 1)
            return sign
        return None

    def _primary(self) -> Expr:
        token = self._peek()
        if token is None:
            raise self._error("expected expression, found end of input")
        self._pos += 1
        if token.kind == "String":
            return StringLit(token.value.strip('"'))
        if token.kind == "Number":
            return NumberLit(float(token.value))
        if token.kind == "Semver":
            prefix, major, minor, patch, pre, build = _SEMVER_RE.fullmatch(token.value).groups()
            return Semver(int(major), int(minor), int(patch), prefix, pre, build)
        if token.kind == "LBracket":
            return ArrayLit(self._list("RBracket"))
        if token.kind == "LParen":
            inner = self.expression()
            self._expect("RParen")
            return inner
        if token.kind == "Ident":
            if token.value in ("true", "false"):
                return BoolLit(token.value == "true")
            if self._at("LParen"):
                self._pos += 1
                return CallExpr(token.value, self._list("RParen"))
            return Ident(token.value)
        self._pos -= 1
        raise self._error(f"unexpected {token.value!r}")

    def _list(self, closing: str) -> list[Expr]:
        items = [] if self._at(closing) else [self.expression()]
        while items and self._at("Comma"):
            self._pos += 1
            items.append(self.expression())
        self._expect(closing)
        return items


def parse_script(source: str) -> Program:
    """Parse a whole script; raise ParseError if it is malformed."""
    lines = source.split("\n")
    return _Parser(tokenize(source), (len(lines), len(lines[-1]) + 1)).program()