"""
data_attributes.py - Data Attribute Sanitization
SwiftUI Playground

Sanitizes data-* attributes and Stimulus wiring before they reach the
rendered HTML.
"""

import re
import json
import logging
from markupsafe import escape

logger = logging.getLogger(__name__)

DANGEROUS_PATTERNS = [
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'data:text/html', re.IGNORECASE),
    re.compile(r'vbscript:', re.IGNORECASE),
    re.compile(r'onload=', re.IGNORECASE),
    re.compile(r'onerror=', re.IGNORECASE),
    re.compile(r'onclick=', re.IGNORECASE),
    re.compile(r'onmouse', re.IGNORECASE),
    re.compile(r'<script', re.IGNORECASE),
    re.compile(r'<iframe', re.IGNORECASE),
    re.compile(r'<object', re.IGNORECASE),
    re.compile(r'<embed', re.IGNORECASE),
    re.compile(r'document\.', re.IGNORECASE),
    re.compile(r'window\.', re.IGNORECASE),
    re.compile(r'eval\(', re.IGNORECASE),
    re.compile(r'setTimeout', re.IGNORECASE),
    re.compile(r'setInterval', re.IGNORECASE),
]

ALLOWED_EVENTS = [
    'click', 'dblclick', 'mousedown', 'mouseup', 'mouseover', 'mouseout', 'mousemove',
    'keydown', 'keyup', 'keypress',
    'submit', 'change', 'input', 'focus', 'blur',
    'load', 'unload', 'resize', 'scroll',
    'touchstart', 'touchend', 'touchmove',
    'dragstart', 'dragend', 'drop',
]

CONTROLLER_METHOD = re.compile(r'^[a-zA-Z][a-zA-Z0-9\-_]*#[a-zA-Z][a-zA-Z0-9_]*$')


def dasherize(value) -> str:
    return str(value).replace('_', '-')


def sanitize_data_key(key) -> str:
    """Normalize a key to data-<letters/digits/-/_>."""
    key_str = dasherize(key)
    key_str = re.sub(r'^data-', '', key_str)
    key_str = re.sub(r'[^a-zA-Z0-9\-_]', '', key_str)

    if not re.match(r'^[a-zA-Z]', key_str):
        key_str = f"x-{key_str}"

    return f"data-{key_str}"


def sanitize_data_value(value) -> str:
    if value is None:
        return ''

    value_str = str(value)
    for pattern in DANGEROUS_PATTERNS:
        if pattern.search(value_str):
            logger.warning(f"Potential XSS attempt blocked in data attribute: {value_str}")
            return ''

    return escape(value_str)


def sanitize_stimulus_action(action) -> str:
    """
    Validate an action descriptor of the form event->controller#method.

    Returns:
        str: The normalized action, or '' if it is not well formed
    """
    if not action:
        return ''

    parts = str(action).split('->')
    if len(parts) != 2:
        return ''

    event_part = parts[0].strip()
    controller_method = parts[1].strip()

    if event_part not in ALLOWED_EVENTS:
        return ''
    if not CONTROLLER_METHOD.match(controller_method):
        return ''

    return f"{event_part}->{controller_method}"


def sanitize_stimulus_controller(controller) -> str:
    if not controller:
        return ''
    return re.sub(r'[^a-zA-Z0-9\-_]', '', str(controller))


def sanitize_stimulus_target(target) -> str:
    if not target:
        return ''
    return re.sub(r'[^a-zA-Z0-9_]', '', str(target))


def sanitize_value(value) -> str:
    """Serialize a value according to its type."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return sanitize_data_value(value)
    if isinstance(value, (list, tuple, dict)):
        return escape(json.dumps(value))
    return escape(str(value))


def sanitize_data_attribute(key, value):
    """
    Sanitize a single data attribute.

    Returns:
        tuple: (safe_key, safe_value)
    """
    safe_key = sanitize_data_key(key)

    if str(key) == 'action' or safe_key == 'data-action':
        safe_value = sanitize_stimulus_action(value)
    else:
        safe_value = sanitize_data_value(value)

    return safe_key, safe_value


def sanitize_data_attributes(attributes) -> dict:
    if not isinstance(attributes, dict):
        return {}

    sanitized = {}
    for key, value in attributes.items():
        safe_key, safe_value = sanitize_data_attribute(key, value)
        sanitized[safe_key] = safe_value

    return sanitized


def safe_data_attributes(action=None, controller=None, target=None, values=None, data=None) -> dict:
    """Build Stimulus action/controller/target/value attributes."""
    attrs = {}

    if action:
        attrs['data-action'] = sanitize_stimulus_action(action)

    if controller:
        attrs['data-controller'] = sanitize_stimulus_controller(controller)

    if target:
        attrs[f"data-{sanitize_stimulus_controller(controller)}-target"] = sanitize_stimulus_target(target)

    if isinstance(values, dict):
        controller_name = sanitize_stimulus_controller(controller) or 'component'
        for key, value in values.items():
            attrs[f"data-{controller_name}-{dasherize(key)}-value"] = sanitize_value(value)

    if isinstance(data, dict):
        for key, value in data.items():
            attrs[sanitize_data_key(key)] = sanitize_value(value)

    return attrs
