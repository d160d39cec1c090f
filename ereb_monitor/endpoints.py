# ereb_monitor/endpoints.py
from typing import Iterable, List, Optional

from yarl import URL

from ereb_monitor.fetcher.exceptions import EndpointParseError


DEFAULT_SERVER = "http://localhost:8888"
TRAILING_SLASH = "/"


def normalize_endpoints(servers: Optional[Iterable[str]]) -> List[str]:
    """
    Build the effective endpoint list for one collection cycle.

    Falls back to the local default server when nothing is configured, drops
    entries without an http(s) scheme and strips a trailing slash.
    """
    servers = list(servers or [])
    if not servers:
        servers = [DEFAULT_SERVER]

    endpoints = []
    for endpoint in servers:
        if not endpoint.startswith("http"):
            continue
        if endpoint.endswith(TRAILING_SLASH):
            endpoint = endpoint[: -len(TRAILING_SLASH)]
        endpoints.append(endpoint)
    return endpoints


def host_tag(endpoint: str) -> str:
    """Return the ``host[:port]`` part of an endpoint, without credentials."""
    try:
        authority = URL(endpoint).raw_authority
    except (ValueError, TypeError) as e:
        raise EndpointParseError(
            endpoint, f"Unable parse server address '{endpoint}': {e}"
        ) from e
    return authority.rpartition("@")[2]
