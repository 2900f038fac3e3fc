"""Config types for declarative rule sets.

Config-driven construction path:
  dict / YAML → parse_rules_config() → RulesConfig → register_rules(hook) → rules

Expected shape::

    rules:
      - type: exact
        url: http://api.example.com/users
        method: GET
        response:
          status: 200
          json: [{"id": 1}]
      - type: template
        host: api.example.com        # optional; omitted = any host
        template: /users/:id
        method: DELETE
        response: {status: 204}
      - type: regex
        regex: ^/search/(.+)$
        method: GET
        response: {pass_through: true}

A response carries at most one of ``body`` (text), ``json`` (any value),
or ``base64`` (binary).
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from httphook._errors import HookError, UnknownMethodError
from httphook._method import HttpMethod
from httphook._registry import RuleKind
from httphook._response import (
    PASS_THROUGH,
    Bytes,
    Empty,
    Response,
    Text,
    json,
)

if TYPE_CHECKING:
    from httphook._hook import HttpHook
    from httphook._outcome import MatchOutcome
    from httphook._registry import Handler, RuleKey
    from httphook._request import HookRequest
    from httphook._response import HandlerResult

# ═══════════════════════════════════════════════════════════════════════════════
# Config types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ResponseConfig:
    """Static response for a configured rule.

    ``pass_through`` excludes every other field.
    """

    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    reason: str | None = None
    body: str | None = None
    json_body: Any = None
    has_json: bool = False
    raw: bytes | None = None
    pass_through: bool = False

    def build(self) -> HandlerResult:
        """Materialize the response value."""
        if self.pass_through:
            return PASS_THROUGH
        if self.has_json:
            built = json(self.json_body, status_code=self.status, headers=self.headers)
            return Response(
                status_code=built.status_code,
                headers=built.headers,
                body=built.body,
                reason_phrase=self.reason,
            )
        if self.raw is not None:
            body: Empty | Text | Bytes = Bytes(self.raw)
        elif self.body:
            body = Text(self.body)
        else:
            body = Empty()
        return Response(
            status_code=self.status,
            headers=dict(self.headers),
            body=body,
            reason_phrase=self.reason,
        )


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """One configured rule.

    ``pattern`` is the URL for exact rules, the path template for template
    rules, and the regex source for regex rules. ``host`` is ignored for
    exact rules.
    """

    kind: RuleKind
    pattern: str
    method: HttpMethod
    response: ResponseConfig
    host: str | None = None


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """An ordered rule set; order is registration (precedence) order."""

    rules: tuple[RuleConfig, ...] = ()


class ConfigParseError(HookError):
    """Error parsing a config dict into config types."""


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════

_PATTERN_FIELDS = {
    RuleKind.EXACT: "url",
    RuleKind.TEMPLATE: "template",
    RuleKind.REGEX: "regex",
}

_BODY_FIELDS = ("body", "json", "base64")


def parse_rules_config(data: dict[str, Any]) -> RulesConfig:
    """Parse a dict into a RulesConfig.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_rules = data.get("rules")
    if raw_rules is None:
        msg = "missing required field 'rules'"
        raise ConfigParseError(msg)
    if not isinstance(raw_rules, list):
        msg = f"'rules' must be a list, got {type(raw_rules).__name__}"
        raise ConfigParseError(msg)

    return RulesConfig(
        rules=tuple(_parse_rule(i, r) for i, r in enumerate(raw_rules))
    )


def load_rules_file(path: str | Path) -> RulesConfig:
    """Read a YAML (or JSON) rules file and parse it.

    Raises:
        ConfigParseError: If the file is not valid YAML or is malformed.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        msg = f"{path}: invalid YAML: {e}"
        raise ConfigParseError(msg) from e
    if data is None:
        return RulesConfig()
    return parse_rules_config(data)


def _parse_rule(index: int, data: Any) -> RuleConfig:
    """Parse one rule dict. Uses 'type' discriminant: exact, template, regex."""
    where = f"rules[{index}]"
    if not isinstance(data, dict):
        msg = f"{where} must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    rule_type = data.get("type")
    if rule_type is None:
        msg = f"{where} missing required field 'type'"
        raise ConfigParseError(msg)
    try:
        kind = RuleKind(rule_type)
    except ValueError:
        msg = f"{where} unknown rule type: {rule_type!r}"
        raise ConfigParseError(msg) from None

    pattern_field = _PATTERN_FIELDS[kind]
    pattern = data.get(pattern_field)
    if not isinstance(pattern, str) or not pattern:
        msg = f"{where} {kind} rule requires a non-empty string '{pattern_field}'"
        raise ConfigParseError(msg)

    host = data.get("host")
    if host is not None and not isinstance(host, str):
        msg = f"{where} 'host' must be a string, got {type(host).__name__}"
        raise ConfigParseError(msg)

    if "method" not in data:
        msg = f"{where} missing required field 'method'"
        raise ConfigParseError(msg)
    try:
        method = HttpMethod.from_string(str(data["method"]))
    except UnknownMethodError as e:
        msg = f"{where} {e}"
        raise ConfigParseError(msg) from e

    if "response" not in data:
        msg = f"{where} missing required field 'response'"
        raise ConfigParseError(msg)
    response = _parse_response(f"{where}.response", data["response"])

    return RuleConfig(kind=kind, pattern=pattern, method=method, response=response, host=host)


def _parse_response(where: str, data: Any) -> ResponseConfig:
    """Parse a response dict."""
    if not isinstance(data, dict):
        msg = f"{where} must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    if data.get("pass_through", False):
        extra = sorted(k for k in data if k != "pass_through")
        if extra:
            msg = f"{where} pass_through excludes other fields, got {extra}"
            raise ConfigParseError(msg)
        return ResponseConfig(pass_through=True)

    status = data.get("status", 200)
    if not isinstance(status, int) or isinstance(status, bool) or not 100 <= status <= 999:
        msg = f"{where} 'status' must be an integer in 100..999, got {status!r}"
        raise ConfigParseError(msg)

    headers = data.get("headers", {})
    if not isinstance(headers, dict):
        msg = f"{where} 'headers' must be a dict, got {type(headers).__name__}"
        raise ConfigParseError(msg)

    reason = data.get("reason")
    if reason is not None and not isinstance(reason, str):
        msg = f"{where} 'reason' must be a string, got {type(reason).__name__}"
        raise ConfigParseError(msg)

    present = [f for f in _BODY_FIELDS if f in data]
    if len(present) > 1:
        msg = f"{where} at most one of {list(_BODY_FIELDS)} may be set, got {present}"
        raise ConfigParseError(msg)

    body: str | None = None
    raw: bytes | None = None
    if "body" in data:
        body = data["body"]
        if not isinstance(body, str):
            msg = f"{where} 'body' must be a string, got {type(body).__name__}"
            raise ConfigParseError(msg)
    if "base64" in data:
        try:
            raw = base64.b64decode(data["base64"], validate=True)
        except (binascii.Error, TypeError, ValueError) as e:
            msg = f"{where} 'base64' is not valid base64: {e}"
            raise ConfigParseError(msg) from e

    return ResponseConfig(
        status=status,
        headers={str(k): str(v) for k, v in headers.items()},
        reason=reason,
        body=body,
        json_body=data.get("json"),
        has_json="json" in data,
        raw=raw,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════════════════════════


def static_handler(result: ResponseConfig) -> Handler:
    """Handler that answers every matched request from a ResponseConfig."""

    def handler(_request: HookRequest, _match: MatchOutcome) -> HandlerResult:
        return result.build()

    return handler


def register_rules(hook: HttpHook, config: RulesConfig) -> list[RuleKey]:
    """Register every configured rule on ``hook``, in order.

    Raises:
        InvalidPatternError: If a regex rule does not compile.
    """
    keys: list[RuleKey] = []
    for rule in config.rules:
        handler = static_handler(rule.response)
        match rule.kind:
            case RuleKind.EXACT:
                keys.append(hook.register(rule.pattern, rule.method, handler))
            case RuleKind.TEMPLATE:
                keys.append(
                    hook.register_template(rule.host, rule.pattern, rule.method, handler)
                )
            case RuleKind.REGEX:
                keys.append(hook.register_regex(rule.host, rule.pattern, rule.method, handler))
    return keys
