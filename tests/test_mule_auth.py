import base64

import jwt
import pytest

from mule.mule_auth import Basic, Bearer, JwtClaims, claim_set, expand_authorization, header_value, method
from mule.mule_env import Environment
from mule.mule_errors import NotDefined, TokenEncodingError
from mule import mule_jwt
from mule.mule_words import Literal, Variable, compound, literal, variable

SECRET = "0123456789abcdef" * 4


@pytest.fixture
def env():
    return Environment.from_mapping({"user": "alice", "pass": "secret", "tok": "abc.def"})


def test_basic_encodes_user_and_password():
    auth = Basic(Literal("alice"), Literal("secret"))
    assert auth.method() == "Basic"
    assert auth.expand(Environment()) == "YWxpY2U6c2VjcmV0"


def test_basic_expands_variables(env):
    auth = Basic(Variable("user"), Variable("pass"))
    assert expand_authorization(auth, env) == "YWxpY2U6c2VjcmV0"


def test_basic_uses_url_safe_alphabet():
    # "?>?" encodes to "Pz4/" with the standard alphabet.
    auth = Basic(Literal("?>?"), Literal(""))
    value = auth.expand(Environment())
    assert "/" not in value and "+" not in value
    assert base64.urlsafe_b64decode(value) == b"?>?:"


def test_basic_propagates_first_failure():
    auth = Basic(Variable("who"), Variable("pw"))
    with pytest.raises(NotDefined) as ei:
        auth.expand(Environment())
    assert ei.value.name == "who"


def test_bearer_returns_token_unchanged(env):
    auth = Bearer(compound(literal("x-"), variable("tok")))
    assert method(auth) == "Bearer"
    assert auth.expand(env) == "x-abc.def"


def test_header_value(env):
    assert header_value(Basic(Variable("user"), Variable("pass")), env) == "Basic YWxpY2U6c2VjcmV0"
    assert header_value(Bearer(Variable("tok")), env) == "Bearer abc.def"


def test_claim_set_collapses_single_values(env):
    claims = {
        "sub": [Variable("user")],
        "roles": [Literal("read"), Literal("write")],
    }
    assert claim_set(claims, env) == {"sub": "alice", "roles": ["read", "write"]}


def test_jwt_claims_round_trip(env):
    auth = JwtClaims(
        claims={"name": [Variable("user")], "roles": [Literal("read"), Literal("write")]},
        algorithm="HS256",
        secret=SECRET,
    )
    assert auth.method() == "Bearer"
    token = auth.expand(env)
    decoded = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert decoded == {"name": "alice", "roles": ["read", "write"]}
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


@pytest.mark.parametrize("alg", ["HS384", "HS512"])
def test_jwt_claims_other_hmac_algorithms(env, alg):
    auth = JwtClaims(claims={"name": [Variable("user")]}, algorithm=alg, secret=SECRET)
    decoded = jwt.decode(auth.expand(env), SECRET, algorithms=[alg])
    assert decoded["name"] == "alice"


def test_jwt_claims_unsigned(env):
    auth = JwtClaims(claims={"name": [Literal("bob")]}, algorithm="none")
    token = auth.expand(env)
    assert token.endswith(".")
    assert jwt.decode(token, options={"verify_signature": False}) == {"name": "bob"}


def test_jwt_unsupported_algorithm(env):
    auth = JwtClaims(claims={"name": [Literal("bob")]}, algorithm="RS999", secret=SECRET)
    with pytest.raises(TokenEncodingError):
        auth.expand(env)


def test_jwt_expansion_failure_aborts_before_encoding(monkeypatch):
    calls = []
    monkeypatch.setattr(mule_jwt, "encode", lambda *a: calls.append(a) or "token")
    auth = JwtClaims(claims={"name": [Variable("missing")]}, algorithm="HS256", secret=SECRET)
    with pytest.raises(NotDefined):
        auth.expand(Environment())
    assert calls == []


def test_jwt_encoder_receives_claims_algorithm_and_secret(env, monkeypatch):
    calls = []
    monkeypatch.setattr(mule_jwt, "encode", lambda *a: calls.append(a) or "token")
    auth = JwtClaims(claims={"name": [Variable("user")]}, algorithm="HS512", secret="s")
    assert auth.expand(env) == "token"
    assert calls == [({"name": "alice"}, "HS512", "s")]
