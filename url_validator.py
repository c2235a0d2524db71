"""
url_validator.py - URL Validation
SwiftUI Playground

Validates URLs used for images, scripts and links so rendered HTML never
loads from dangerous schemes or unapproved hosts.
"""

import re
import logging
from urllib.parse import urlsplit, quote

from config import get_configuration, DEFAULT_APPROVED_DOMAINS

logger = logging.getLogger(__name__)

# Legacy list; the configuration is consulted first
APPROVED_DOMAINS = list(DEFAULT_APPROVED_DOMAINS)

ALLOWED_SCHEMES = ['http', 'https']

DANGEROUS_PATTERNS = [
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'data:(?!image/(png|jpg|jpeg|gif|webp|svg\+xml))', re.IGNORECASE),
    re.compile(r'vbscript:', re.IGNORECASE),
    re.compile(r'file:', re.IGNORECASE),
    re.compile(r'about:', re.IGNORECASE),
    re.compile(r'chrome:', re.IGNORECASE),
    re.compile(r'chrome-extension:', re.IGNORECASE),
]

PLACEHOLDER_IMAGE = '/images/placeholder.png'


def contains_dangerous_pattern(url: str) -> bool:
    return any(pattern.search(url) for pattern in DANGEROUS_PATTERNS)


def approved_domain(host) -> bool:
    """Check the configured domains, then the legacy list."""
    if host is None:
        return False

    if get_configuration().domain_approved(host):
        return True

    host_lower = host.lower()
    return any(
        host_lower == approved or host_lower.endswith(f".{approved}")
        for approved in APPROVED_DOMAINS
    )


def validate_url(url, allow_relative: bool = True, require_approved_domains: bool = False, fallback=None):
    """
    Validate and return a URL.

    Args:
        url: URL to check
        allow_relative: Permit relative URLs (default True)
        require_approved_domains: Reject hosts outside the approved list
        fallback: Returned when the host is not approved

    Returns:
        str: The URL, the fallback, or None if the URL is unsafe
    """
    if url is None or not str(url).strip():
        return None

    url = str(url)

    if contains_dangerous_pattern(url):
        logger.warning(f"Blocked dangerous URL pattern: {url}")
        return None

    try:
        parts = urlsplit(url)
    except ValueError:
        logger.warning(f"Invalid URL format: {url}")
        return None

    # Relative URLs carry neither scheme nor host
    if not parts.scheme and not parts.netloc:
        if allow_relative:
            return url
        logger.warning(f"Relative URLs not allowed: {url}")
        return None

    if (parts.scheme or '').lower() not in ALLOWED_SCHEMES:
        logger.warning(f"Disallowed URL scheme: {parts.scheme} in {url}")
        return None

    if require_approved_domains and not approved_domain(parts.hostname):
        logger.warning(f"Unapproved external domain: {parts.hostname}")
        return fallback

    return url


def validate_image_src(src, **options):
    """Image sources must come from approved domains; falls back to a placeholder."""
    settings = {
        'allow_relative': True,
        'require_approved_domains': True,
        'fallback': PLACEHOLDER_IMAGE,
    }
    settings.update(options)
    return validate_url(src, **settings)


def validate_script_src(src, **options):
    settings = {
        'allow_relative': True,
        'require_approved_domains': True,
        'fallback': None,
    }
    settings.update(options)
    return validate_url(src, **settings)


def validate_link_href(href, **options):
    """Links may point anywhere safe; falls back to '#'."""
    settings = {
        'allow_relative': True,
        'require_approved_domains': False,
        'fallback': '#',
    }
    settings.update(options)
    return validate_url(href, **settings)


def safe_placeholder_image(width: int = 400, height: int = 400, text: str = None) -> str:
    if text:
        return f"https://via.placeholder.com/{width}x{height}?text={quote(text, safe='')}"
    return f"https://via.placeholder.com/{width}x{height}"


def add_approved_domain(domain: str) -> bool:
    return get_configuration().add_approved_domain(domain)
