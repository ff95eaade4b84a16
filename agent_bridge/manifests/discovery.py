"""
Manifest discovery through the well-known path.

Any domain can host ``/.well-known/agentbridge.json`` to declare the API
actions it offers. Discovery never raises: a missing, unreachable or
invalid document yields None.
"""
import asyncio
import json
import logging
from typing import List, Optional, Tuple

import httpx

from agent_bridge.domains.manifest import Manifest
from agent_bridge.errors import ManifestError
from agent_bridge.manifests.enrichment import Send

# Setup logger for this module
logger = logging.getLogger(__name__)

WELL_KNOWN_PATH = "/.well-known/agentbridge.json"
DISCOVERY_TIMEOUT = 10.0


def well_known_url(domain: str) -> str:
    """Normalize a bare domain or URL to its well-known manifest URL."""
    base_url = domain.strip()
    if not base_url.startswith("http"):
        base_url = f"https://{base_url}"
    return base_url.rstrip("/") + WELL_KNOWN_PATH


async def discover_from_domain(
    domain: str,
    send: Optional[Send] = None,
    timeout: float = DISCOVERY_TIMEOUT,
) -> Optional[Manifest]:
    """Fetch and validate the manifest a domain publishes.

    Args:
        domain: Bare domain (``api.example.com``) or base URL
        send: Optional coroutine that sends an ``httpx.Request``
        timeout: Timeout in seconds for the default client

    Returns:
        The validated manifest, or None if the domain publishes none
    """
    request = httpx.Request(
        "GET", well_known_url(domain), headers={"Accept": "application/json"}
    )
    try:
        if send is not None:
            response = await send(request)
        else:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(timeout), follow_redirects=True
            ) as client:
                response = await client.send(request)
    except httpx.HTTPError as e:
        logger.info(f"Discovery request to {request.url} failed: {e}")
        return None

    if not response.is_success:
        logger.info(f"No manifest at {request.url} ({response.status_code})")
        return None

    try:
        return Manifest.load(response.content)
    except ManifestError as e:
        logger.warning(f"Ignoring invalid manifest at {request.url}: {e}")
        return None


async def discover_from_domains(
    domains: List[str], send: Optional[Send] = None
) -> List[Tuple[str, Manifest]]:
    """Discover several domains concurrently, keeping the ones that answer."""
    manifests = await asyncio.gather(
        *(discover_from_domain(domain, send=send) for domain in domains)
    )
    return [
        (domain, manifest)
        for domain, manifest in zip(domains, manifests)
        if manifest is not None
    ]


def generate_well_known_file(manifest: Manifest) -> str:
    """Render the document an API owner hosts at the well-known path."""
    return json.dumps(manifest.to_document(), indent=2)
