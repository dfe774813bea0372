"""
Cloudflare WAF rule synchronizer

Pushes WAF custom rule templates from a local JSON file to the default
ruleset of one or more Cloudflare zones.
"""

__version__ = "0.1.0"
