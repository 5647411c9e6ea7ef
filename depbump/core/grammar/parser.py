"""Tokenizer and recursive-descent parser for requirement strings.

Every ecosystem shares the same surface structure::

    expression := group (OR group)*
    group      := constraint ((COMMA | AND | <whitespace>) constraint)*
    constraint := atom HYPHEN atom      # "1.0 - 2.0"
                | atom AS atom          # "dev-main as 1.0.x-dev"
                | atom                  # "^1.2.3", ">= 1.0", "1.2.*"

What differs is the vocabulary: the operator set, whether a single
``|`` separates alternatives, whether bare whitespace means AND, and
which words are keywords (``as``, ``and``, ``or``). Those knobs come from
the :class:`~depbump.core.grammar.base.Grammar` driving the lexer.

Nodes remember the character span they were parsed from so updaters can
rewrite a single version in place and keep every other byte of the
original requirement.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple, Union

from depbump.exceptions import RequirementParseError

if TYPE_CHECKING:
    from depbump.core.grammar.base import Grammar

Span = Tuple[int, int]

_WHITESPACE = re.compile(r"\s+")
_VALUE = re.compile(r"[^\s,|]+")


class TokenKind(Enum):
    ATOM = "atom"
    OR = "or"
    AND = "and"
    COMMA = "comma"
    HYPHEN = "hyphen"
    AS = "as"
    END = "end"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    end: int
    operator: str = ""
    value: str = ""
    value_start: int = 0


# ---------------------------------------------------------------------------
# Syntax tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Comparator:
    """An operator applied to one version token, e.g. ``^1.2`` or ``>= 2.0``.

    ``operator`` is empty for a bare version.
    """

    operator: str
    version: str
    span: Span
    version_span: Span


@dataclass(frozen=True)
class HyphenRange:
    """An inclusive ``lower - upper`` range."""

    lower: Comparator
    upper: Comparator
    span: Span


@dataclass(frozen=True)
class Alias:
    """A Composer inline alias: ``target as alias``."""

    target: Comparator
    alias: Comparator
    span: Span


Constraint = Union[Comparator, HyphenRange, Alias]


@dataclass(frozen=True)
class Group:
    """Constraints that must all hold (AND)."""

    constraints: Tuple[Constraint, ...]
    span: Span


@dataclass(frozen=True)
class Expression:
    """Alternatives of which any may hold (OR), in source order."""

    source: str
    groups: Tuple[Group, ...]

    def text(self, node: Union[Constraint, Group, Span]) -> str:
        """Return the source text a node (or span) was parsed from."""
        start, end = node if isinstance(node, tuple) else node.span
        return self.source[start:end]

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        """All constraints across every group, in source order."""
        return tuple(c for group in self.groups for c in group.constraints)

    def comparators(self) -> Iterator[Comparator]:
        """Yield every comparator, including both ends of hyphen ranges."""
        for constraint in self.constraints:
            if isinstance(constraint, HyphenRange):
                yield constraint.lower
                yield constraint.upper
            elif isinstance(constraint, Alias):
                yield constraint.target
            else:
                yield constraint

    @property
    def or_separator(self) -> Optional[str]:
        """Raw text between the first two alternatives, if there are two."""
        if len(self.groups) < 2:
            return None
        return self.source[self.groups[0].span[1]:self.groups[1].span[0]]


def replace_span(text: str, span: Span, replacement: str) -> str:
    """Return ``text`` with ``span`` replaced by ``replacement``."""
    start, end = span
    return text[:start] + replacement + text[end:]


# ---------------------------------------------------------------------------
# Lexer
# ---------------------------------------------------------------------------


class Lexer:
    """Split a requirement string into tokens for one grammar."""

    def __init__(self, grammar: "Grammar") -> None:
        self.grammar = grammar
        operators = sorted(grammar.operators, key=len, reverse=True)
        self._operator_re = (
            re.compile("|".join(re.escape(op) for op in operators)) if operators else None
        )

    def tokenize(self, text: str) -> List[Token]:
        tokens: List[Token] = []
        pos = 0
        length = len(text)

        while True:
            match = _WHITESPACE.match(text, pos)
            if match:
                pos = match.end()
            if pos >= length:
                break

            char = text[pos]
            if text.startswith("||", pos):
                tokens.append(Token(TokenKind.OR, "||", pos, pos + 2))
                pos += 2
            elif char == "|":
                if not self.grammar.single_pipe_or:
                    raise RequirementParseError(
                        "Unexpected '|'", requirement=text, position=pos
                    )
                tokens.append(Token(TokenKind.OR, "|", pos, pos + 1))
                pos += 1
            elif char == ",":
                tokens.append(Token(TokenKind.COMMA, ",", pos, pos + 1))
                pos += 1
            elif char == "-":
                if not self.grammar.hyphen_ranges:
                    raise RequirementParseError(
                        "Unexpected '-'", requirement=text, position=pos
                    )
                tokens.append(Token(TokenKind.HYPHEN, "-", pos, pos + 1))
                pos += 1
            else:
                token = self._atom(text, pos)
                tokens.append(token)
                pos = token.end

        tokens.append(Token(TokenKind.END, "", length, length))
        return tokens

    def _atom(self, text: str, start: int) -> Token:
        pos = start
        operator = ""
        if self._operator_re is not None:
            match = self._operator_re.match(text, pos)
            if match:
                operator = match.group(0)
                pos = match.end()
                gap = _WHITESPACE.match(text, pos)
                if gap:
                    pos = gap.end()

        match = _VALUE.match(text, pos)
        if not match:
            raise RequirementParseError(
                f"Expected a version after {operator!r}",
                requirement=text,
                position=pos,
            )

        value = match.group(0)
        if not operator:
            keyword = self.grammar.keywords.get(value.lower())
            if keyword is not None:
                return Token(keyword, value, start, match.end())

        return Token(
            TokenKind.ATOM,
            text[start:match.end()],
            start,
            match.end(),
            operator=operator,
            value=value,
            value_start=match.start(),
        )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class Parser:
    """Recursive-descent parser producing an :class:`Expression`."""

    def __init__(self, grammar: "Grammar", text: str) -> None:
        self.grammar = grammar
        self.text = text
        self._tokens = Lexer(grammar).tokenize(text)
        self._index = 0

    def parse(self) -> Expression:
        groups = [self._group()]
        while self._peek().kind is TokenKind.OR:
            self._advance()
            groups.append(self._group())
        self._expect(TokenKind.END)
        return Expression(source=self.text, groups=tuple(groups))

    def _group(self) -> Group:
        constraints = [self._constraint()]
        while True:
            kind = self._peek().kind
            if kind in (TokenKind.COMMA, TokenKind.AND):
                self._advance()
            elif not (kind is TokenKind.ATOM and self.grammar.whitespace_and):
                break
            constraints.append(self._constraint())

        span = (constraints[0].span[0], constraints[-1].span[1])
        return Group(constraints=tuple(constraints), span=span)

    def _constraint(self) -> Constraint:
        first = self._comparator()
        kind = self._peek().kind
        if kind is TokenKind.HYPHEN:
            self._advance()
            upper = self._comparator()
            return HyphenRange(first, upper, (first.span[0], upper.span[1]))
        if kind is TokenKind.AS:
            self._advance()
            alias = self._comparator()
            return Alias(first, alias, (first.span[0], alias.span[1]))
        return first

    def _comparator(self) -> Comparator:
        token = self._expect(TokenKind.ATOM)
        return Comparator(
            operator=token.operator,
            version=token.value,
            span=(token.start, token.end),
            version_span=(token.value_start, token.end),
        )

    def _peek(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._tokens[self._index]
        if token.kind is not TokenKind.END:
            self._index += 1
        return token

    def _expect(self, kind: TokenKind) -> Token:
        token = self._peek()
        if token.kind is not kind:
            found = token.text or "end of requirement"
            raise RequirementParseError(
                f"Expected {kind.value}, found {found!r}",
                requirement=self.text,
                position=token.start,
            )
        return self._advance()
