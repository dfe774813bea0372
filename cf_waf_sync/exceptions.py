from typing import Any, List, Optional


class WAFSyncError(Exception):
    """Base class for all errors raised by cf_waf_sync."""


class CloudflareAPIError(WAFSyncError):
    """A Cloudflare API call returned a non-2xx status or success=false."""

    def __init__(self, method: str, url: str, status_code: int, errors: Any = None):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.errors = errors
        super().__init__(f"{method} {url} failed: {status_code} {errors}")


class RuleTemplateError(WAFSyncError):
    """The rule template file is missing, unreadable or malformed."""


class MissingRuleError(WAFSyncError):
    """A requested rule name has no template.

    ``results`` holds the zone updates already committed for rule names
    processed earlier in the same run.
    """

    def __init__(self, rule_name: str, results: Optional[List] = None):
        self.rule_name = rule_name
        self.results = results or []
        super().__init__(f"Rule '{rule_name}' not found in rule templates")
