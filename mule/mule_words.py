"""
Words are the expression nodes built by the parser for every value that may
reference variables: URLs, header values, credentials, claims, bodies.

A word is one of a fixed set of variants:

  - Literal: fixed text.
  - Variable: a name looked up in the environment at expansion time.
  - Compound: the concatenation of other words, e.g. an interpolated string
    `https://$host/api` becomes Compound(Literal, Variable, Literal).

Words carry no type. The same word can be expanded to a string, a boolean,
an integer or a URL depending on where it is used; the typed expansions all
expand to text first and then parse it.
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

import httpx

from mule.mule_env import Environment
from mule.mule_errors import ExpansionError

_TRUE = frozenset(("1", "t", "T", "TRUE", "true", "True"))
_FALSE = frozenset(("0", "f", "F", "FALSE", "false", "False"))
_INT_RE = re.compile(r"[+-]?[0-9]+")


class Word:
    """Base of the word variants. Subclasses are frozen dataclasses."""

    def expand(self, env: Environment[str]) -> str:
        return expand(self, env)

    def expand_bool(self, env: Environment[str]) -> bool:
        return expand_bool(self, env)

    def expand_int(self, env: Environment[str]) -> int:
        return expand_int(self, env)

    def expand_url(self, env: Environment[str]) -> httpx.URL:
        return expand_url(self, env)


@dataclass(frozen=True)
class Literal(Word):
    text: str


@dataclass(frozen=True)
class Variable(Word):
    name: str


@dataclass(frozen=True)
class Compound(Word):
    parts: Tuple[Word, ...]


def literal(text: str) -> Literal:
    return Literal(text)


def variable(name: str) -> Variable:
    return Variable(name)


def compound(*parts: Word) -> Word:
    """Builds a compound word, flattening nested compounds.

    A single part is returned as is, so `compound(w)` is just `w`.
    """
    flat: List[Word] = []
    for part in parts:
        if isinstance(part, Compound):
            flat.extend(part.parts)
        else:
            flat.append(part)
    if len(flat) == 1:
        return flat[0]
    return Compound(tuple(flat))


def expand(word: Word, env: Environment[str]) -> str:
    match word:
        case Literal(text=text):
            return text
        case Variable(name=name):
            return env.resolve(name)
        case Compound(parts=parts):
            # Fail fast: the first failing part aborts the whole word.
            return "".join(expand(part, env) for part in parts)
        case _:
            raise TypeError(f"not a word: {word!r}")


def expand_bool(word: Word, env: Environment[str]) -> bool:
    return parse_bool(expand(word, env))


def expand_int(word: Word, env: Environment[str]) -> int:
    return parse_int(expand(word, env))


def expand_url(word: Word, env: Environment[str]) -> httpx.URL:
    return parse_url(expand(word, env))


def parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ExpansionError(text, "bool")


def parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ExpansionError(text, "int")
    return int(text)


def parse_url(text: str) -> httpx.URL:
    try:
        return httpx.URL(text)
    except httpx.InvalidURL as e:
        raise ExpansionError(text, "url", str(e)) from e


def variables(word: Word) -> List[str]:
    """Names referenced by a word, in evaluation order."""
    match word:
        case Literal():
            return []
        case Variable(name=name):
            return [name]
        case Compound(parts=parts):
            names: List[str] = []
            for part in parts:
                names.extend(variables(part))
            return names
        case _:
            raise TypeError(f"not a word: {word!r}")
