import copy
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import requests

from .api_client import WAFRulesetAPI
from .exceptions import CloudflareAPIError, MissingRuleError, RuleTemplateError
from .models import Rule, RuleTemplate, SyncResult, Zone
from .ui import ProgressReporter
from .zones import ZoneFetcher

logger = logging.getLogger(__name__)


def load_rule_templates(rules_file: Union[str, Path]) -> Dict[str, RuleTemplate]:
    """
    Load rule templates from a JSON array, keyed by template name.

    Raises:
        RuleTemplateError: file missing, not valid JSON, or a template is malformed
    """
    rules_path = Path(rules_file)
    try:
        with open(rules_path, 'r', encoding='utf-8') as f:
            raw_templates = json.load(f)
    except FileNotFoundError as e:
        raise RuleTemplateError(f"Rule template file not found: {rules_path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise RuleTemplateError(f"Could not read rule template file {rules_path}: {e}") from e

    if not isinstance(raw_templates, list):
        raise RuleTemplateError(f"Rule template file {rules_path} must contain a JSON array")

    templates = {}
    for raw_template in raw_templates:
        template = RuleTemplate.from_dict(raw_template)
        if template.name in templates:
            logger.warning(f"Duplicate rule template '{template.name}' in {rules_path}; using the last one")
        templates[template.name] = template

    logger.debug(f"Loaded {len(templates)} rule templates from {rules_path}")
    return templates


def build_update_payload(existing: Rule, desired: RuleTemplate) -> Dict:
    """
    Compute the PATCH body that moves an existing rule to the desired state.

    action, expression and enabled always come from the template. Action
    parameters are only replaced when the existing rule already has them. The
    position is sent only when it changes, the API rejects a no-op move.
    """
    updated = copy.deepcopy(existing)
    updated.action = desired.action
    updated.expression = desired.expression
    updated.enabled = desired.enabled

    if existing.action_parameters is not None and desired.action_parameters is not None:
        updated.action_parameters = copy.deepcopy(desired.action_parameters)

    move = desired.position is not None and desired.position != existing.position
    if move:
        updated.position = desired.position

    return updated.to_payload(include_position=move)


class RuleSynchronizer:
    """Creates or updates named WAF rules across zones from local templates."""

    def __init__(
        self,
        api_client: WAFRulesetAPI,
        config,
        zone_fetcher: Optional[ZoneFetcher] = None,
        reporter: Optional[ProgressReporter] = None,
    ):
        self.api_client = api_client
        self.config = config
        self.zone_fetcher = zone_fetcher or ZoneFetcher(api_client, reporter)

    def set_zone_waf_rule(
        self,
        rule_names: Sequence[str],
        sites: Optional[Sequence[str]] = None
    ) -> List[SyncResult]:
        """
        Apply each named template to every selected zone.

        Templates are loaded before any API call. An unknown rule name stops
        the run; rules already applied for earlier names stay applied. A
        failure on one zone is logged and the next zone is attempted.

        Raises:
            RuleTemplateError: the template file cannot be used
            MissingRuleError: a rule name has no template
        """
        templates = load_rule_templates(self.config.rules_file)
        zones = self.zone_fetcher.get_zones(sites)

        results = []
        for rule_name in rule_names:
            template = templates.get(rule_name)
            if template is None:
                logger.error(f"Rule '{rule_name}' is not defined in {self.config.rules_file}")
                raise MissingRuleError(rule_name, results)

            for zone in zones:
                if not zone.default_ruleset_id:
                    logger.debug(f"Skipping {zone.name}: no default ruleset")
                    continue
                results.append(self.apply_rule(zone, template))

        return results

    def apply_rule(self, zone: Zone, template: RuleTemplate) -> SyncResult:
        """Create or update one rule in one zone's default ruleset."""
        desired = template.for_domain(zone.name)
        existing = zone.find_rule(template.name)

        if existing is None:
            operation = 'create'
            payload = desired.to_rule().to_payload()
        else:
            operation = 'update'
            payload = build_update_payload(existing, desired)

        try:
            if existing is None:
                self.api_client.create_rule(zone.id, zone.default_ruleset_id, payload)
            else:
                self.api_client.update_rule(zone.id, zone.default_ruleset_id, existing.id, payload)
        except (CloudflareAPIError, requests.RequestException) as e:
            logger.error(f"Failed to {operation} rule '{template.name}' in {zone.name}: {str(e)}")
            return SyncResult(zone.name, template.name, operation, False, str(e))

        logger.info(f"{operation.capitalize()}d rule '{template.name}' in {zone.name}")
        return SyncResult(zone.name, template.name, operation, True)
