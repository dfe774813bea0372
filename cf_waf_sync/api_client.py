# api_client.py
import logging
from typing import Any, Dict, List, Optional, Protocol

import requests

from .exceptions import CloudflareAPIError

logger = logging.getLogger(__name__)


class WAFRulesetAPI(Protocol):
    """Operations the zone fetcher and rule synchronizer need from the provider."""

    def list_zones(self) -> List[Dict[str, Any]]:
        ...

    def list_rulesets(self, zone_id: str) -> List[Dict[str, Any]]:
        ...

    def get_ruleset_rules(self, zone_id: str, ruleset_id: str) -> List[Dict[str, Any]]:
        ...

    def create_rule(self, zone_id: str, ruleset_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update_rule(
        self, zone_id: str, ruleset_id: str, rule_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        ...


class CloudflareAPIClient:
    """Blocking client for the Cloudflare v4 zones and rulesets endpoints."""

    def __init__(self, config, session: Optional[requests.Session] = None):
        self.config = config
        self.base_url = config.base_url
        self.request_timeout = config.request_timeout
        self.per_page = 50
        self.session = session or requests.Session()
        self.session.headers.update(config.headers)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send one request and unwrap the v4 response envelope."""
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url} params={params}")

        response = self.session.request(
            method,
            url,
            params=params,
            json=payload,
            timeout=self.request_timeout
        )

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.ok or not data.get('success', False):
            errors = data.get('errors') or response.text[:200]
            logger.debug(f"{method} {url} returned {response.status_code}: {errors}")
            raise CloudflareAPIError(method, url, response.status_code, errors)

        return data

    def list_zones(self) -> List[Dict[str, Any]]:
        """Fetch every zone visible to the token, following pagination."""
        zones = []
        page = 1
        while True:
            data = self._request('GET', '/zones', params={'page': page, 'per_page': self.per_page})
            zones.extend(data.get('result') or [])

            total_pages = (data.get('result_info') or {}).get('total_pages', 1)
            if page >= total_pages:
                break
            page += 1

        logger.debug(f"Fetched {len(zones)} zones")
        return zones

    def list_rulesets(self, zone_id: str) -> List[Dict[str, Any]]:
        data = self._request('GET', f'/zones/{zone_id}/rulesets')
        return data.get('result') or []

    def get_ruleset_rules(self, zone_id: str, ruleset_id: str) -> List[Dict[str, Any]]:
        """Get the rules of a ruleset in the order the API returns them."""
        data = self._request('GET', f'/zones/{zone_id}/rulesets/{ruleset_id}')
        return (data.get('result') or {}).get('rules') or []

    def create_rule(self, zone_id: str, ruleset_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = self._request('POST', f'/zones/{zone_id}/rulesets/{ruleset_id}/rules', payload=payload)
        return data.get('result') or {}

    def update_rule(
        self, zone_id: str, ruleset_id: str, rule_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        data = self._request(
            'PATCH',
            f'/zones/{zone_id}/rulesets/{ruleset_id}/rules/{rule_id}',
            payload=payload
        )
        return data.get('result') or {}

    def cleanup(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
