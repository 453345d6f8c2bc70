"""
Authorization schemes declared in collections and requests.

Each scheme turns its words into the credential part of an Authorization
header. The method prefix ("Basic", "Bearer") is kept apart so executors
can assemble the header themselves; `header_value` does it for them.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Sequence, Union

from mule import mule_jwt
from mule.mule_env import Environment
from mule.mule_words import Word, expand


@dataclass(frozen=True)
class Basic:
    user: Word
    password: Word

    def method(self) -> str:
        return method(self)

    def expand(self, env: Environment[str]) -> str:
        return expand_authorization(self, env)


@dataclass(frozen=True)
class Bearer:
    token: Word

    def method(self) -> str:
        return method(self)

    def expand(self, env: Environment[str]) -> str:
        return expand_authorization(self, env)


@dataclass(frozen=True)
class JwtClaims:
    """A bearer token signed on the fly from a set of claims.

    Every claim maps to a list of words; a claim with a single word is
    encoded as a scalar, otherwise as a list.
    """
    claims: Mapping[str, Sequence[Word]] = field(default_factory=dict)
    algorithm: str = mule_jwt.HS256
    secret: str = ""

    def method(self) -> str:
        return method(self)

    def expand(self, env: Environment[str]) -> str:
        return expand_authorization(self, env)


Authorization = Union[Basic, Bearer, JwtClaims]


def method(auth: Authorization) -> str:
    match auth:
        case Basic():
            return "Basic"
        case Bearer() | JwtClaims():
            return "Bearer"
        case _:
            raise TypeError(f"not an authorization: {auth!r}")


def expand_authorization(auth: Authorization, env: Environment[str]) -> str:
    match auth:
        case Basic(user=user, password=password):
            creds = f"{expand(user, env)}:{expand(password, env)}"
            return base64.urlsafe_b64encode(creds.encode("utf-8")).decode("ascii")
        case Bearer(token=token):
            return expand(token, env)
        case JwtClaims(claims=claims, algorithm=algorithm, secret=secret):
            return mule_jwt.encode(claim_set(claims, env), algorithm, secret)
        case _:
            raise TypeError(f"not an authorization: {auth!r}")


def claim_set(claims: Mapping[str, Sequence[Word]], env: Environment[str]) -> Dict[str, Any]:
    """Expands every claim; any failure aborts before anything is signed."""
    out: Dict[str, Any] = {}
    for name, words in claims.items():
        values = [expand(w, env) for w in words]
        out[name] = values[0] if len(values) == 1 else values
    return out


def header_value(auth: Authorization, env: Environment[str]) -> str:
    """Full Authorization header value, e.g. `Basic YWxpY2U6c2VjcmV0`."""
    return f"{method(auth)} {expand_authorization(auth, env)}"
