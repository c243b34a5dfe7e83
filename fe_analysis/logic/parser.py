"""Parser for C-style boolean expressions as written by ``str(formula)``."""

import re
import typing as tp

from fe_analysis.logic.formula import (
    FALSE,
    TRUE,
    Conjunction,
    Disjunction,
    Formula,
    Negation,
    Variable,
)
from fe_analysis.utils.exceptions import FormulaParseError

_TOKEN_REGEX = re.compile(
    r"\s*(?:"
    r"(?P<ident>[A-Za-z0-9_]+(?:(?:!=|<=|>=|=|<|>)-?[A-Za-z0-9_.]+)?)"
    r"|(?P<op>&&|\|\||!|\(|\))"
    r")"
)

_CONSTANTS = {"1": TRUE, "true": TRUE, "0": FALSE, "false": FALSE}


def _tokenize(text: str) -> tp.List[str]:
    tokens: tp.List[str] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN_REGEX.match(text, pos)
        if match is None or match.end() == pos:
            raise FormulaParseError(
                f"Unexpected character '{text[pos]}' at position {pos} "
                f"in '{text}'"
            )
        tokens.append(match.group("ident") or match.group("op"))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive descent parser, ``&&`` binds tighter than ``||`` and both
    are left-associative."""

    def __init__(self, text: str) -> None:
        self.__text = text
        self.__tokens = _tokenize(text)
        self.__pos = 0

    def parse(self) -> Formula:
        if not self.__tokens:
            raise FormulaParseError("Cannot parse an empty formula")
        result = self.__parse_or()
        if self.__pos != len(self.__tokens):
            raise FormulaParseError(
                f"Unexpected token '{self.__tokens[self.__pos]}' "
                f"in '{self.__text}'"
            )
        return result

    def __peek(self) -> tp.Optional[str]:
        if self.__pos < len(self.__tokens):
            return self.__tokens[self.__pos]
        return None

    def __next(self) -> str:
        token = self.__peek()
        if token is None:
            raise FormulaParseError(f"Unexpected end of '{self.__text}'")
        self.__pos += 1
        return token

    def __parse_or(self) -> Formula:
        result = self.__parse_and()
        while self.__peek() == "||":
            self.__next()
            result = Disjunction(result, self.__parse_and())
        return result

    def __parse_and(self) -> Formula:
        result = self.__parse_unary()
        while self.__peek() == "&&":
            self.__next()
            result = Conjunction(result, self.__parse_unary())
        return result

    def __parse_unary(self) -> Formula:
        if self.__peek() == "!":
            self.__next()
            return Negation(self.__parse_unary())
        return self.__parse_atom()

    def __parse_atom(self) -> Formula:
        token = self.__next()
        if token == "(":
            result = self.__parse_or()
            if self.__next() != ")":
                raise FormulaParseError(f"Missing ')' in '{self.__text}'")
            return result
        if token in ("&&", "||", ")", "!"):
            raise FormulaParseError(
                f"Unexpected token '{token}' in '{self.__text}'"
            )
        if token in _CONSTANTS:
            return _CONSTANTS[token]
        return Variable(token)


def parse_formula(text: str) -> Formula:
    """
    Parse a C-style boolean expression.

    Args:
        text: expression using ``!``, ``&&``, ``||``, parentheses, variable
              names and the constants ``1``/``0``/``true``/``false``

    Returns: the parsed formula

    Raises:
        FormulaParseError: if ``text`` is not a well formed expression
    """
    return _Parser(text).parse()
