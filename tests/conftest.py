import copy
import json
import logging

import pytest

from cf_waf_sync.exceptions import CloudflareAPIError


class FakeWAFClient:
    """In-memory stand-in for CloudflareAPIClient that records writes."""

    def __init__(self, zones, rulesets, rules, fail_zones=()):
        self.zones = zones
        self.rulesets = rulesets
        self.rules = rules
        self.fail_zones = set(fail_zones)
        self.calls = []
        self.created = []
        self.updated = []
        self.closed = False

    def list_zones(self):
        self.calls.append(('list_zones',))
        return copy.deepcopy(self.zones)

    def list_rulesets(self, zone_id):
        self.calls.append(('list_rulesets', zone_id))
        return copy.deepcopy(self.rulesets.get(zone_id, []))

    def get_ruleset_rules(self, zone_id, ruleset_id):
        self.calls.append(('get_ruleset_rules', zone_id, ruleset_id))
        return copy.deepcopy(self.rules.get(ruleset_id, []))

    def create_rule(self, zone_id, ruleset_id, payload):
        self.calls.append(('create_rule', zone_id, ruleset_id))
        if zone_id in self.fail_zones:
            raise CloudflareAPIError(
                'POST', f'/zones/{zone_id}/rulesets/{ruleset_id}/rules', 400,
                [{'code': 20021, 'message': 'invalid expression'}]
            )
        self.created.append((zone_id, ruleset_id, payload))
        return {'id': ruleset_id}

    def update_rule(self, zone_id, ruleset_id, rule_id, payload):
        self.calls.append(('update_rule', zone_id, ruleset_id, rule_id))
        if zone_id in self.fail_zones:
            raise CloudflareAPIError(
                'PATCH', f'/zones/{zone_id}/rulesets/{ruleset_id}/rules/{rule_id}', 400,
                [{'code': 20021, 'message': 'invalid expression'}]
            )
        self.updated.append((zone_id, ruleset_id, rule_id, payload))
        return {'id': ruleset_id}

    def cleanup(self):
        self.closed = True


@pytest.fixture(autouse=True)
def restore_root_logger_level():
    """setup_logging changes the root level; put it back after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


@pytest.fixture
def sample_zones():
    return [
        {'id': 'zone-1', 'name': 'example.com', 'status': 'active'},
        {'id': 'zone-2', 'name': 'example.org', 'status': 'active'},
        {'id': 'zone-3', 'name': 'example.net', 'status': 'active'},
    ]


@pytest.fixture
def sample_rulesets():
    return {
        'zone-1': [
            {'id': 'rs-managed-1', 'name': 'Cloudflare Managed Ruleset', 'kind': 'managed'},
            {'id': 'rs-1', 'name': 'default', 'kind': 'zone', 'phase': 'http_request_firewall_custom'},
        ],
        'zone-2': [
            {'id': 'rs-2', 'name': 'default', 'kind': 'zone', 'phase': 'http_request_firewall_custom'},
        ],
        # No custom rules ruleset yet
        'zone-3': [
            {'id': 'rs-managed-3', 'name': 'Cloudflare Managed Ruleset', 'kind': 'managed'},
        ],
    }


@pytest.fixture
def sample_rules():
    return {
        'rs-1': [
            {
                'id': 'rule-a',
                'description': 'Block bad bots',
                'action': 'block',
                'expression': '(cf.client.bot)',
                'enabled': True,
            },
            {
                'id': 'rule-b',
                'description': 'Block admin',
                'action': 'block',
                'expression': '(http.host eq "old.example.com")',
                'enabled': False,
            },
            {
                'id': 'rule-c',
                'description': 'Allow monitor',
                'action': 'skip',
                'expression': '(http.user_agent contains "Monitor")',
                'enabled': True,
                'action_parameters': {'ruleset': 'current'},
            },
        ],
        'rs-2': [],
    }


@pytest.fixture
def sample_templates():
    return [
        {
            'name': 'Block admin',
            'action': 'block',
            'expression': '(http.host eq "{domain}" and starts_with(http.request.uri.path, "/admin"))',
            'enabled': True,
            'position': {'index': 2},
            'action_parameters': {
                'response': {'status_code': 403, 'content': 'Forbidden', 'content_type': 'text/plain'}
            },
        },
        {
            'name': 'Allow monitor',
            'action': 'skip',
            'expression': '(http.host eq "{domain}" and http.user_agent contains "Monitor")',
            'enabled': True,
            'position': {'index': 1},
            'action_parameters': {'ruleset': 'current', 'phases': ['http_ratelimit']},
        },
    ]


@pytest.fixture
def rules_file(tmp_path, sample_templates):
    path = tmp_path / 'waf_rules.json'
    path.write_text(json.dumps(sample_templates), encoding='utf-8')
    return path


@pytest.fixture
def mock_config(tmp_path, rules_file):
    """Create a mock configuration for testing."""
    class MockConfig:
        def __init__(self, tmp_path, rules_file):
            self.api_token = "test_token"
            self.base_url = "https://api.cloudflare.test/client/v4"
            self.rules_file = rules_file
            self.request_timeout = 5
            self.headers = {
                'Authorization': f'Bearer {self.api_token}',
                'Content-Type': 'application/json'
            }

    return MockConfig(tmp_path, rules_file)


@pytest.fixture
def make_fake_client(sample_zones, sample_rulesets, sample_rules):
    def _make(fail_zones=()):
        return FakeWAFClient(sample_zones, sample_rulesets, sample_rules, fail_zones=fail_zones)
    return _make


@pytest.fixture
def fake_client(make_fake_client):
    return make_fake_client()
