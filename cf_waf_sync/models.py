import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import RuleTemplateError

DOMAIN_PLACEHOLDER = "{domain}"

# Keys held in Rule attributes or owned by the API, never echoed back in a payload
RULE_FIELDS = {
    'description', 'action', 'expression', 'enabled', 'position', 'action_parameters',
    'id', 'version', 'last_updated',
}


def position_index(value: Any) -> Optional[int]:
    """Read a rule position given as {"index": N} or a bare integer."""
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get('index')
        if value is None:
            return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid rule position: {value!r}")
    return value


@dataclass
class Rule:
    """A WAF custom rule as held in a zone's default ruleset"""
    description: str
    action: str
    expression: str
    enabled: bool = True
    id: Optional[str] = None
    position: Optional[int] = None  # 1-based, inferred from API response order
    action_parameters: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)  # e.g. logging, ratelimit, ref

    @classmethod
    def from_api(cls, data: Dict[str, Any], index: Optional[int] = None) -> 'Rule':
        return cls(
            description=data.get('description', ''),
            action=data.get('action', ''),
            expression=data.get('expression', ''),
            enabled=data.get('enabled', True),
            id=data.get('id'),
            position=index,
            action_parameters=copy.deepcopy(data.get('action_parameters')),
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in RULE_FIELDS},
        )

    def to_payload(self, include_position: bool = True) -> Dict[str, Any]:
        """Build a create/update request body, leaving out unset optional fields."""
        payload = copy.deepcopy(self.extra)
        payload.update({
            'description': self.description,
            'action': self.action,
            'expression': self.expression,
            'enabled': self.enabled,
        })
        if include_position and self.position is not None:
            payload['position'] = {'index': self.position}
        if self.action_parameters is not None:
            payload['action_parameters'] = copy.deepcopy(self.action_parameters)
        return payload


@dataclass
class RuleTemplate:
    """Desired state for a rule, keyed by name, applied to every target zone"""
    name: str
    action: str
    expression: str
    enabled: bool = True
    position: Optional[int] = None
    action_parameters: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RuleTemplate':
        if not isinstance(data, dict):
            raise RuleTemplateError(f"Rule template must be an object, got {type(data).__name__}")

        missing = [key for key in ('name', 'action', 'expression') if not data.get(key)]
        if missing:
            raise RuleTemplateError(
                f"Rule template {data.get('name', '<unnamed>')!r} is missing: {', '.join(missing)}"
            )

        try:
            position = position_index(data.get('position'))
        except ValueError as e:
            raise RuleTemplateError(f"Rule template {data['name']!r}: {e}") from e

        return cls(
            name=data['name'],
            action=data['action'],
            expression=data['expression'],
            enabled=bool(data.get('enabled', True)),
            position=position,
            action_parameters=data.get('action_parameters'),
        )

    def for_domain(self, domain: str) -> 'RuleTemplate':
        """Return a deep copy with every {domain} in the expression replaced."""
        rendered = copy.deepcopy(self)
        rendered.expression = rendered.expression.replace(DOMAIN_PLACEHOLDER, domain)
        return rendered

    def to_rule(self) -> Rule:
        return Rule(
            description=self.name,
            action=self.action,
            expression=self.expression,
            enabled=self.enabled,
            position=self.position,
            action_parameters=copy.deepcopy(self.action_parameters),
        )


@dataclass
class Zone:
    """A Cloudflare zone with its default ruleset rules"""
    id: str
    name: str
    default_ruleset_id: Optional[str] = None
    waf_rules: List[Rule] = field(default_factory=list)

    def find_rule(self, description: str) -> Optional[Rule]:
        for rule in self.waf_rules:
            if rule.description == description:
                return rule
        return None


@dataclass
class SyncResult:
    """Outcome of applying one rule template to one zone"""
    zone_name: str
    rule_name: str
    operation: str  # create or update
    success: bool
    error: Optional[str] = None
