"""
Bags hold the multi-valued, word-based sets declared in collections and
requests: headers, query parameters and cookies. They are expanded against
an environment when a request is built.
"""

from http.cookies import CookieError, Morsel
from typing import Dict, Iterator, List, Optional, Tuple

import httpx

from mule.mule_env import Environment
from mule.mule_errors import ExpansionError
from mule.mule_words import Word, expand, expand_bool, expand_int


def sanitize_cookie_value(value: str) -> str:
    """Drops characters that may not appear in a cookie value.

    Only printable ASCII minus `"`, `;` and `\\` survives. A result holding
    spaces or commas is wrapped in double quotes.
    """
    kept = "".join(c for c in value if " " <= c <= "~" and c not in '";\\')
    if " " in kept or "," in kept:
        return f'"{kept}"'
    return kept


class Bag:
    """An ordered mapping of names to lists of words."""
    def __init__(self, values: Optional[Dict[str, List[Word]]] = None):
        self._values: Dict[str, List[Word]] = {}
        for name, words in (values or {}).items():
            self._values[name] = list(words)

    def add(self, name: str, word: Word):
        self._values.setdefault(name, []).append(word)

    def set(self, name: str, word: Word):
        self._values[name] = [word]

    def clone(self) -> 'Bag':
        return Bag(self._values)

    def merge(self, other: 'Bag') -> 'Bag':
        """Returns a new bag with other's entries for names this bag lacks."""
        merged = self.clone()
        for name, words in other.pairs():
            if name in merged._values:
                continue
            merged._values[name] = list(words)
        return merged

    def pairs(self) -> Iterator[Tuple[str, List[Word]]]:
        for name, words in self._values.items():
            yield name, list(words)

    def headers(self, env: Environment[str]) -> httpx.Headers:
        return httpx.Headers(self._expand_all(env))

    def query(self, env: Environment[str]) -> httpx.QueryParams:
        return httpx.QueryParams(self._expand_all(env))

    def query_with(self, env: Environment[str], base: httpx.QueryParams) -> httpx.QueryParams:
        """Bag parameters followed by the parameters already present in base."""
        items = self._expand_all(env)
        items.extend(base.multi_items())
        return httpx.QueryParams(items)

    def cookie(self, env: Environment[str]) -> Morsel:
        """Builds one cookie from the name/value/path/... properties of the bag.

        The name must be a legal cookie name that is not one of the attribute
        names (path, domain, expires...); a missing or illegal name raises
        ExpansionError rather than producing a nameless cookie. The raw value
        is kept as `value`, the header text uses the sanitized `coded_value`.
        """
        props: Dict[str, object] = {}
        for key, words in self._values.items():
            if not words:
                continue
            word = words[0]
            match key:
                case "name" | "value" | "path" | "domain":
                    props[key] = expand(word, env)
                case "expires":
                    pass
                case "max-age":
                    props[key] = expand_int(word, env)
                case "secure":
                    props[key] = expand_bool(word, env)
                case "http-only":
                    props["httponly"] = expand_bool(word, env)
                case _:
                    raise ExpansionError(key, "cookie", "unknown cookie property")
        morsel = Morsel()
        name = str(props.pop("name", ""))
        value = str(props.pop("value", ""))
        try:
            morsel.set(name, value, sanitize_cookie_value(value))
        except CookieError as e:
            raise ExpansionError(name, "cookie", str(e)) from e
        for attr, val in props.items():
            morsel[attr] = val
        return morsel

    def _expand_all(self, env: Environment[str]) -> List[Tuple[str, str]]:
        items: List[Tuple[str, str]] = []
        for name, words in self._values.items():
            for word in words:
                items.append((name, expand(word, env)))
        return items

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, name: str) -> List[Word]:
        return list(self._values[name])

    def __repr__(self) -> str:
        return f"<Bag names=[{', '.join(self._values)}]>"


class FrozenBag(Bag):
    """A bag that ignores merges and refuses updates."""
    def __init__(self, bag: Bag):
        super().__init__(dict(bag.pairs()))

    def add(self, name: str, word: Word):
        raise TypeError("frozen bag can not be updated")

    def set(self, name: str, word: Word):
        raise TypeError("frozen bag can not be updated")

    def merge(self, other: Bag) -> Bag:
        return self


def freeze(bag: Bag) -> Bag:
    if isinstance(bag, FrozenBag):
        return bag
    return FrozenBag(bag)
