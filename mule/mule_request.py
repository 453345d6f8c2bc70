"""
Assembles concrete httpx requests from the word-based definition of a
request. Nothing here sends anything: the executor owns the client, the
retries and the cache lookups around `client.send(request)`.
"""

from dataclasses import dataclass, field
from typing import Optional

import httpx

from mule.mule_auth import Authorization, header_value
from mule.mule_bag import Bag
from mule.mule_env import Environment
from mule.mule_errors import MuleError
from mule.mule_words import Word, compound, expand, parse_url


@dataclass
class RequestTemplate:
    method: str
    url: Word
    headers: Bag = field(default_factory=Bag)
    query: Bag = field(default_factory=Bag)
    auth: Optional[Authorization] = None
    body: Optional[Word] = None
    content_type: str = "text/plain; charset=utf-8"

    def build(self, env: Environment[str]) -> httpx.Request:
        url = self.url.expand_url(env)
        params = self.query.query_with(env, url.params)
        headers = self.headers.headers(env)
        if self.auth is not None:
            headers["Authorization"] = header_value(self.auth, env)
        content = None
        if self.body is not None:
            content = expand(self.body, env).encode("utf-8")
            headers["Content-Type"] = self.content_type
        return httpx.Request(
            self.method.upper(),
            url.copy_with(params=params),
            headers=headers,
            content=content,
        )


def merge_url(base: Optional[Word], path: Optional[Word], env: Environment[str]) -> Optional[Word]:
    """Joins a collection base URL with a request URL.

    A request URL that already expands to an absolute URL replaces the base.
    """
    if base is None:
        return path
    if path is None:
        return base
    try:
        absolute = parse_url(expand(path, env)).is_absolute_url
    except MuleError:
        # Unresolvable for now; it is checked again when the request is built.
        absolute = False
    return path if absolute else compound(base, path)
