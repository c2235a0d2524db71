"""
config.py - Runtime Configuration
SwiftUI Playground

Holds the process-wide settings shared by the DSL, the security validators
and the playground. Defaults live here; create_app() applies environment
variables and test overrides on top.
"""

import os
import re
import logging

logger = logging.getLogger(__name__)

DOMAIN_PATTERN = re.compile(r'^[a-z0-9\-.]+$', re.IGNORECASE)

DEFAULT_APPROVED_DOMAINS = (
    # Development/placeholder services
    'picsum.photos',
    'via.placeholder.com',
    'placehold.co',
    'placeholder.com',
    # CDN services
    'cdn.jsdelivr.net',
    'unpkg.com',
    'cdnjs.cloudflare.com',
    # Common image services
    'images.unsplash.com',
    'i.imgur.com',
    'gravatar.com',
    # Documentation services
    'tailwindui.com',
    'tailwindcss.com',
)

DEFAULT_ALLOWED_COMPONENTS = (
    'VStack', 'HStack', 'ZStack', 'Grid', 'Text', 'Button', 'Image',
    'Card', 'List', 'ListItem', 'ScrollView', 'Divider', 'Spacer',
)


class SwiftUIError(Exception):
    """Base exception for DSL and playground errors."""
    pass


class SecurityError(SwiftUIError):
    """Raised when input violates a security policy or execution budget."""
    pass


class Configuration:
    """Settings consulted by validators, the DSL context and the rate limiter."""

    def __init__(self):
        self.maximum_component_depth = 50
        self.approved_image_domains = set(DEFAULT_APPROVED_DOMAINS)
        self.rate_limit_actions = True
        self.rate_limit_threshold = 10  # Max actions per window
        self.rate_limit_window = 60  # Window in seconds
        self.content_security_policy_enabled = True
        self.allowed_components = set(DEFAULT_ALLOWED_COMPONENTS)

    def component_allowed(self, component_name) -> bool:
        return str(component_name) in self.allowed_components

    def add_approved_domain(self, domain: str) -> bool:
        """
        Approve an external domain at runtime.

        Returns:
            bool: False if the domain is blank or malformed
        """
        if not domain or not domain.strip():
            return False

        if not DOMAIN_PATTERN.match(domain):
            logger.warning(f"Invalid domain format: {domain}")
            return False

        self.approved_image_domains.add(domain.lower())
        return True

    def domain_approved(self, host) -> bool:
        """Exact or subdomain match against the approved domains."""
        if host is None:
            return False

        host_lower = host.lower()
        return any(
            host_lower == approved or host_lower.endswith(f".{approved}")
            for approved in self.approved_image_domains
        )


_configuration = Configuration()


def get_configuration() -> Configuration:
    return _configuration


def configure(**overrides) -> Configuration:
    """
    Update configuration fields in place.

    Raises:
        AttributeError: If an override names an unknown field
    """
    for key, value in overrides.items():
        if not hasattr(_configuration, key):
            raise AttributeError(f"Unknown configuration option: {key}")
        setattr(_configuration, key, value)
    return _configuration


def reset_configuration() -> Configuration:
    """Restore defaults (used by tests)."""
    _configuration.__init__()
    return _configuration


def load_from_env(environ=None) -> Configuration:
    """Apply SWIFTUI_* environment variables to the shared configuration."""
    environ = os.environ if environ is None else environ

    if 'SWIFTUI_MAX_DEPTH' in environ:
        _configuration.maximum_component_depth = int(environ['SWIFTUI_MAX_DEPTH'])
    if 'SWIFTUI_RATE_LIMIT' in environ:
        _configuration.rate_limit_actions = environ['SWIFTUI_RATE_LIMIT'] != '0'
    if 'SWIFTUI_RATE_LIMIT_THRESHOLD' in environ:
        _configuration.rate_limit_threshold = int(environ['SWIFTUI_RATE_LIMIT_THRESHOLD'])
    if 'SWIFTUI_RATE_LIMIT_WINDOW' in environ:
        _configuration.rate_limit_window = int(environ['SWIFTUI_RATE_LIMIT_WINDOW'])

    return _configuration
