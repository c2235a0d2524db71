"""
csp.py - Content Security Policy and Security Headers
SwiftUI Playground
"""

from flask import g


def build_policy(approved_domains, ssl: bool = False) -> str:
    """
    Build the Content-Security-Policy header value.

    Images may load from 'self' and from each approved domain over https.
    Inline scripts and styles stay allowed for Stimulus and Tailwind.
    """
    img_sources = ["'self'"] + [f"https://{domain}" for domain in sorted(approved_domains)]

    directives = [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline'",
        "style-src 'self' 'unsafe-inline'",
        "img-src " + ' '.join(img_sources),
        "font-src 'self' data:",
        "connect-src 'self'",
        "frame-ancestors 'none'",
        "base-uri 'self'",
        "form-action 'self'",
    ]
    if ssl:
        directives.append('upgrade-insecure-requests')

    return '; '.join(directives)


def apply_security_headers(response, config, ssl: bool = False, debug: bool = False):
    """Add the CSP and hardening headers to a response."""
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-XSS-Protection'] = '1; mode=block'

    if not config.content_security_policy_enabled or g.get('csp_relaxed'):
        return response

    policy = build_policy(config.approved_image_domains, ssl=ssl)
    response.headers['Content-Security-Policy'] = policy
    if debug:
        # Report-only copy surfaces violations in the browser console during development
        response.headers['Content-Security-Policy-Report-Only'] = policy

    return response
