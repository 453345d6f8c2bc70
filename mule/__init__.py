from mule.mule_errors import (
    MuleError, NotDefined, ExpansionError, TokenEncodingError,
    CacheMiss, StoreError, LexError, format_error, format_token_error,
)
from mule.mule_env import Environment
from mule.mule_scanner import Scanner, Token, TokenKind, DEFAULT_KEYWORDS, tokenize
from mule.mule_words import (
    Word, Literal, Variable, Compound, literal, variable, compound,
    expand, expand_bool, expand_int, expand_url,
)
from mule.mule_auth import Basic, Bearer, JwtClaims, Authorization, header_value
from mule.mule_bag import Bag, freeze
from mule.mule_request import RequestTemplate, merge_url
from mule.mule_cache import Entry, ResponseCache, open_cache
from mule.mule_config import Settings, load_settings, configure_logging

__all__ = [
    "MuleError", "NotDefined", "ExpansionError", "TokenEncodingError",
    "CacheMiss", "StoreError", "LexError", "format_error", "format_token_error",
    "Environment",
    "Scanner", "Token", "TokenKind", "DEFAULT_KEYWORDS", "tokenize",
    "Word", "Literal", "Variable", "Compound", "literal", "variable", "compound",
    "expand", "expand_bool", "expand_int", "expand_url",
    "Basic", "Bearer", "JwtClaims", "Authorization", "header_value",
    "Bag", "freeze",
    "RequestTemplate", "merge_url",
    "Entry", "ResponseCache", "open_cache",
    "Settings", "load_settings", "configure_logging",
]
