"""httphook — Rule-based HTTP request interception for tests.

All public types are exported from this module for flat imports:

    from httphook import HttpHook, HttpMethod, json, pass_through
"""

__version__ = "0.1.0"

# Config types — see httphook._config for details
from httphook._config import (
    ConfigParseError,
    ResponseConfig,
    RuleConfig,
    RulesConfig,
    load_rules_file,
    parse_rules_config,
    register_rules,
    static_handler,
)

# Dispatch
from httphook._dispatch import Dispatcher

# Errors
from httphook._errors import HookError, InvalidPatternError, UnknownMethodError

# Hook facade
from httphook._hook import HookState, HttpHook, normalize_host

# Matchers
from httphook._matchers import ExactMatcher, RegexMatcher, RuleMatcher, TemplateMatcher
from httphook._method import HttpMethod
from httphook._outcome import MatchOutcome

# Registry — see httphook._registry for details
from httphook._registry import (
    REGEX_KEY_SEPARATOR,
    Handler,
    Rule,
    RuleKey,
    RuleKind,
    RuleRegistry,
)

# Request / response model
from httphook._request import URL, HookRequest
from httphook._response import (
    JSON_CONTENT_TYPE,
    PASS_THROUGH,
    Body,
    Bytes,
    Empty,
    HandlerResult,
    PassThrough,
    Response,
    Stream,
    Text,
    bad_request,
    binary,
    default_reason_phrase,
    forbidden,
    internal_server_error,
    json,
    not_found,
    ok,
    pass_through,
    render_body,
    stream,
    unauthorized,
)
from httphook._types import Collaborator

__all__ = [
    # Protocols
    "Collaborator",
    "Handler",
    # Hook
    "HttpHook",
    "HookState",
    "normalize_host",
    "Dispatcher",
    # Registry
    "Rule",
    "RuleKey",
    "RuleKind",
    "RuleRegistry",
    "REGEX_KEY_SEPARATOR",
    # Matchers
    "ExactMatcher",
    "TemplateMatcher",
    "RegexMatcher",
    "RuleMatcher",
    "MatchOutcome",
    # Request
    "HttpMethod",
    "URL",
    "HookRequest",
    # Response
    "Response",
    "PassThrough",
    "PASS_THROUGH",
    "HandlerResult",
    "Body",
    "Empty",
    "Text",
    "Bytes",
    "Stream",
    "JSON_CONTENT_TYPE",
    "render_body",
    "default_reason_phrase",
    # Builders
    "ok",
    "json",
    "binary",
    "stream",
    "bad_request",
    "unauthorized",
    "forbidden",
    "not_found",
    "internal_server_error",
    "pass_through",
    # Config
    "ResponseConfig",
    "RuleConfig",
    "RulesConfig",
    "ConfigParseError",
    "parse_rules_config",
    "load_rules_file",
    "register_rules",
    "static_handler",
    # Errors
    "HookError",
    "UnknownMethodError",
    "InvalidPatternError",
]
