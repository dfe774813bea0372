# main.py
import argparse
import logging
import sys
import traceback
from typing import List, Optional

import requests

from .config import Config, load_env_file, setup_logging
from .api_client import CloudflareAPIClient
from .exceptions import CloudflareAPIError, MissingRuleError, RuleTemplateError
from .formatters import TableFormatter
from .rules import RuleSynchronizer, load_rule_templates
from .zones import ZoneFetcher

logger = logging.getLogger(__name__)


def split_sites(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated list of zone names."""
    if not value:
        return None
    return [site.strip() for site in value.split(',') if site.strip()]


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Synchronize Cloudflare WAF custom rules from a local JSON file'
    )

    parser.add_argument('--env-file', default='.env', help='KEY=value file loaded into the environment (default: .env)')
    parser.add_argument('--token', help='Cloudflare API token (overrides CLOUDFLARE_API_TOKEN)')
    parser.add_argument('--base-url', help='Cloudflare API base URL (overrides CLOUDFLARE_BASE_URL)')
    parser.add_argument('--rules-file', help='Rule template JSON file (overrides WAF_RULES_FILE)')
    parser.add_argument('--log-dir', default='logs', help='Directory for log files (default: logs)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', required=True)

    zones_parser = subparsers.add_parser('zones', help='List zones and their default ruleset')
    zones_parser.add_argument('--sites', help='Comma-separated zone names to include')
    zones_parser.add_argument('--rules', action='store_true', help='Also list the rules of each zone')

    subparsers.add_parser('templates', help='List the rule templates in the rules file')

    sync_parser = subparsers.add_parser('sync', help='Create or update rules in every selected zone')
    sync_parser.add_argument('rule_names', nargs='+', metavar='RULE', help='Rule template names to apply')
    sync_parser.add_argument('--sites', help='Comma-separated zone names to include')

    return parser.parse_args(argv)


def run_zones(args: argparse.Namespace, config: Config, formatter: TableFormatter) -> int:
    api_client = CloudflareAPIClient(config)
    try:
        zones = ZoneFetcher(api_client).get_zones(split_sites(args.sites))
    finally:
        api_client.cleanup()

    print(formatter.zones_table(zones))
    if args.rules:
        for zone in zones:
            print(f"\n{zone.name}")
            print(formatter.rules_table(zone))
    return 0


def run_templates(config: Config, formatter: TableFormatter) -> int:
    templates = load_rule_templates(config.rules_file)
    print(formatter.templates_table(templates))
    return 0


def run_sync(args: argparse.Namespace, config: Config, formatter: TableFormatter) -> int:
    api_client = CloudflareAPIClient(config)
    try:
        results = RuleSynchronizer(api_client, config).set_zone_waf_rule(
            args.rule_names,
            split_sites(args.sites)
        )
    except MissingRuleError as e:
        if e.results:
            print(formatter.results_table(e.results))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        api_client.cleanup()

    print(formatter.results_table(results))
    failed = sum(1 for result in results if not result.success)
    print(f"\n{len(results) - failed} succeeded, {failed} failed")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function."""
    args = parse_arguments(argv)
    # LOG_LEVEL may come from the env file
    load_env_file(args.env_file)
    setup_logging(args.verbose, args.log_dir)

    try:
        config = Config(
            api_token=args.token,
            base_url=args.base_url,
            rules_file=args.rules_file
        )
        logger.debug(repr(config))
        formatter = TableFormatter()

        if args.command == 'zones':
            return run_zones(args, config, formatter)
        if args.command == 'templates':
            return run_templates(config, formatter)
        return run_sync(args, config, formatter)

    except RuleTemplateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (CloudflareAPIError, requests.RequestException) as e:
        logger.error(f"Fatal error talking to Cloudflare: {str(e)}")
        logger.debug(traceback.format_exc())
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
