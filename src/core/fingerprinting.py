"""Device fingerprinting for per-device session tracking.

A device fingerprint identifies "the same browser on the same machine"
across logins so that a repeat login updates the existing session instead
of creating a duplicate one.

Fingerprint Components:
- User-Agent header (browser, OS, version)
- Accept-Language header (preferred languages)
- Screen resolution (from custom header)
- Timezone offset (from custom header)

Security:
- SHA256 hash (64 hex characters)
- Not reversible, no PII stored
"""

import hashlib

import structlog
from fastapi import Request
from user_agents import parse as parse_user_agent  # type: ignore[import-untyped]

logger = structlog.get_logger(__name__)


def generate_device_fingerprint(request: Request) -> str:
    """Generate SHA256 hash of device fingerprint from request metadata.

    Args:
        request: FastAPI Request object.

    Returns:
        SHA256 hash (64 hex characters).

    Notes:
        - Custom headers (x-screen-resolution, x-timezone-offset) must be
          sent by client for full fingerprint accuracy
        - Missing headers result in empty string components (still stable)
    """
    components = [
        request.headers.get("user-agent", ""),
        request.headers.get("accept-language", ""),
        request.headers.get("x-screen-resolution", ""),
        request.headers.get("x-timezone-offset", ""),
    ]
    fingerprint_string = "|".join(components)
    fingerprint_hash = hashlib.sha256(fingerprint_string.encode("utf-8")).hexdigest()

    logger.debug("device_fingerprint_generated", fingerprint_prefix=fingerprint_hash[:8])

    return fingerprint_hash


def describe_device(user_agent: str | None) -> str | None:
    """Build a human-readable device summary ("Chrome on Mac OS X").

    Args:
        user_agent: Raw User-Agent header.

    Returns:
        Summary string, or None when nothing could be parsed.
    """
    if not user_agent:
        return None

    try:
        ua = parse_user_agent(user_agent)
    except Exception as e:  # user-agents raises assorted parser errors
        logger.warning(
            "user_agent_parse_failed", user_agent=user_agent[:100], error=str(e)
        )
        return None

    browser = ua.browser.family if ua.browser.family != "Other" else None
    os_name = ua.os.family if ua.os.family != "Other" else None

    if browser and os_name:
        return f"{browser} on {os_name}"
    if browser:
        return browser
    if os_name:
        return f"Unknown browser on {os_name}"
    return None
