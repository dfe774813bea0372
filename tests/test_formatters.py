from cf_waf_sync.formatters import TableFormatter
from cf_waf_sync.models import Rule, SyncResult, Zone


def test_zones_table_lists_each_zone():
    zones = [
        Zone(id='zone-1', name='example.com', default_ruleset_id='rs-1',
             waf_rules=[Rule(description='Block', action='block', expression='true', position=1)]),
        Zone(id='zone-3', name='example.net'),
    ]

    output = TableFormatter().zones_table(zones).get_string()

    assert 'example.com' in output
    assert 'rs-1' in output
    # Missing ruleset id is shown as a dash
    assert 'example.net' in output and ' - ' in output


def test_results_table_marks_failures():
    results = [
        SyncResult('example.com', 'Block admin', 'update', True),
        SyncResult('example.org', 'Block admin', 'create', False, 'POST failed: 400'),
    ]

    output = TableFormatter().results_table(results).get_string()

    assert 'FAILED' in output
    assert 'POST failed: 400' in output


def test_rules_table_shows_enabled_flag():
    zone = Zone(id='zone-1', name='example.com', waf_rules=[
        Rule(description='Off rule', action='log', expression='true', enabled=False, position=1),
    ])

    output = TableFormatter().rules_table(zone).get_string()

    assert 'Off rule' in output
    assert 'no' in output
