import logging
from typing import List, Optional, Sequence

from .api_client import WAFRulesetAPI
from .models import Rule, Zone
from .ui import ProgressReporter

logger = logging.getLogger(__name__)

DEFAULT_RULESET_NAME = "default"


class ZoneFetcher:
    """Reads zones, their default ruleset and its rules from the API."""

    def __init__(self, api_client: WAFRulesetAPI, reporter: Optional[ProgressReporter] = None):
        self.api_client = api_client
        self.reporter = reporter or ProgressReporter()

    def get_zones(self, sites: Optional[Sequence[str]] = None) -> List[Zone]:
        """
        Fetch zones with the rules of their default ruleset.

        Args:
            sites: Zone names to keep (exact match). All zones when empty.

        Returns:
            Zones in provider order. Zones without a default ruleset have no
            ruleset id and no rules.
        """
        raw_zones = self.api_client.list_zones()
        if sites:
            wanted = set(sites)
            raw_zones = [z for z in raw_zones if z.get('name') in wanted]

        total = len(raw_zones)
        logger.info(f"Fetching rulesets for {total} zones")

        zones = []
        for processed, raw_zone in enumerate(raw_zones, 1):
            zone = Zone(id=raw_zone['id'], name=raw_zone['name'])
            self.reporter.write_progress(
                "Fetching zones",
                f"Zone {processed} of {total}",
                zone.name,
                round(processed / total * 100)
            )

            rulesets = self.api_client.list_rulesets(zone.id)
            default_ruleset = next(
                (r for r in rulesets if r.get('name') == DEFAULT_RULESET_NAME),
                None
            )

            if default_ruleset is None:
                logger.debug(f"Zone {zone.name} has no '{DEFAULT_RULESET_NAME}' ruleset")
            else:
                zone.default_ruleset_id = default_ruleset['id']
                raw_rules = self.api_client.get_ruleset_rules(zone.id, zone.default_ruleset_id)
                # The API does not return positions; response order is the ruleset order
                zone.waf_rules = [
                    Rule.from_api(raw_rule, index=index)
                    for index, raw_rule in enumerate(raw_rules, 1)
                ]
                logger.debug(f"Zone {zone.name}: {len(zone.waf_rules)} rules in default ruleset")

            zones.append(zone)

        return zones
