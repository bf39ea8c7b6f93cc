"""Prompt relay: vendor table, vendor HTTP client and relay service."""

from storysmith.relay.client import VendorClient
from storysmith.relay.service import RelayService, parse_relay_request
from storysmith.relay.vendors import VENDORS, resolve_vendor

__all__ = [
    "VENDORS",
    "RelayService",
    "VendorClient",
    "parse_relay_request",
    "resolve_vendor",
]
