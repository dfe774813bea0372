from typing import Any, Dict, List
import logging

from prettytable import PrettyTable

from .models import RuleTemplate, SyncResult, Zone

logger = logging.getLogger(__name__)


class TableFormatter:
    """Handles table formatting for zones, rules and sync results"""

    def __init__(self):
        self.alignments = {
            'numeric': 'r',
            'text': 'l',
            'flag': 'c'
        }

    def format_table(self, data: List[Dict], columns: List[str],
                     column_types: Dict[str, str]) -> PrettyTable:
        """Create consistently formatted table"""
        table = PrettyTable()
        table.field_names = columns

        for col in columns:
            col_type = column_types.get(col, 'text')
            table.align[col] = self.alignments.get(col_type, 'l')

        for row in data:
            table.add_row([
                self._format_value(row.get(col), column_types.get(col, 'text'))
                for col in columns
            ])

        return table

    def _format_value(self, value: Any, value_type: str) -> str:
        if value is None:
            return '-'
        if value_type == 'flag':
            return 'yes' if value else 'no'
        return str(value)

    def zones_table(self, zones: List[Zone]) -> PrettyTable:
        rows = [
            {
                'Zone': zone.name,
                'Zone ID': zone.id,
                'Default Ruleset': zone.default_ruleset_id,
                'Rules': len(zone.waf_rules),
            }
            for zone in zones
        ]
        return self.format_table(
            rows,
            ['Zone', 'Zone ID', 'Default Ruleset', 'Rules'],
            {'Rules': 'numeric'}
        )

    def rules_table(self, zone: Zone) -> PrettyTable:
        rows = [
            {
                'Position': rule.position,
                'Description': rule.description,
                'Action': rule.action,
                'Enabled': rule.enabled,
            }
            for rule in zone.waf_rules
        ]
        return self.format_table(
            rows,
            ['Position', 'Description', 'Action', 'Enabled'],
            {'Position': 'numeric', 'Enabled': 'flag'}
        )

    def templates_table(self, templates: Dict[str, RuleTemplate]) -> PrettyTable:
        rows = [
            {
                'Name': template.name,
                'Action': template.action,
                'Position': template.position,
                'Enabled': template.enabled,
            }
            for template in templates.values()
        ]
        return self.format_table(
            rows,
            ['Name', 'Action', 'Position', 'Enabled'],
            {'Position': 'numeric', 'Enabled': 'flag'}
        )

    def results_table(self, results: List[SyncResult]) -> PrettyTable:
        rows = [
            {
                'Zone': result.zone_name,
                'Rule': result.rule_name,
                'Operation': result.operation,
                'Status': 'ok' if result.success else 'FAILED',
                'Error': result.error,
            }
            for result in results
        ]
        return self.format_table(
            rows,
            ['Zone', 'Rule', 'Operation', 'Status', 'Error'],
            {}
        )
