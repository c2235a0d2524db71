"""
component_validator.py - Component Prop and Name Validation
SwiftUI Playground

Declarative prop validation for components, sanitization helpers, and the
name checks applied to component, prop and story identifiers.
"""

import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit
from markupsafe import escape

VALID_VARIANTS = ['primary', 'secondary', 'success', 'danger', 'warning', 'info', 'light', 'dark']
VALID_SIZES = ['xs', 'sm', 'md', 'lg', 'xl']
VALID_POSITIONS = ['top', 'bottom', 'left', 'right', 'center']
VALID_ALIGNMENTS = ['start', 'center', 'end', 'stretch', 'baseline']

COLOR_PATTERN = re.compile(r'^[a-zA-Z0-9\-]+$')
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9.!#$%&\'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$')

COMPONENT_NAME_PATTERN = re.compile(r'^[a-zA-Z][a-zA-Z0-9_]*$')
STORY_NAME_PATTERN = re.compile(r'^[a-z_][a-z0-9_]*$')
FORBIDDEN_NAME_KEYWORDS = re.compile(
    r'\b(system|exec|eval|constantize|send|public_send|instance_eval|class_eval|module_eval)\b',
    re.IGNORECASE,
)
FORBIDDEN_PROP_KEYWORDS = re.compile(r'\b(system|exec|eval)\b', re.IGNORECASE)
SUSPICIOUS_CHARS = re.compile(r'[;|&`$(){}]')


def _blank(value) -> bool:
    return value is None or str(value).strip() == ''


def valid_url(url, allow_blank: bool = False) -> bool:
    """True for http(s) URLs with a host."""
    if _blank(url):
        return allow_blank

    try:
        parts = urlsplit(str(url))
    except ValueError:
        return False

    return parts.scheme in ('http', 'https') and bool(parts.netloc)


def valid_callable(value, allow_nil: bool = True) -> bool:
    if value is None:
        return allow_nil
    return callable(value)


def sanitize_html(content) -> str:
    if content is None:
        return ''
    return str(escape(content))


def sanitize_css_class(class_name) -> str:
    if class_name is None:
        return ''
    return re.sub(r'[^a-zA-Z0-9\-_ ]', '', str(class_name))


def sanitize_id(id_value) -> str:
    """IDs start with a letter and contain only letters, digits, dash and underscore."""
    if id_value is None:
        return ''

    cleaned = re.sub(r'[^a-zA-Z0-9\-_]', '', str(id_value))
    if not re.match(r'^[a-zA-Z]', cleaned):
        cleaned = f"id-{cleaned}"
    return cleaned


class PropValidations:
    """
    Validation table for a component's props.

    Example:
        rules = PropValidations().variant('variant').size('size').url('href', allow_blank=True)
        rules.validate({'variant': 'primary', 'size': 'md', 'href': ''})
    """

    def __init__(self):
        self.rules: Dict[str, Dict[str, Any]] = {}

    def variant(self, prop_name: str, allowed: Optional[List[str]] = None) -> 'PropValidations':
        return self.inclusion(prop_name, allowed or VALID_VARIANTS)

    def size(self, prop_name: str, allowed: Optional[List[str]] = None) -> 'PropValidations':
        return self.inclusion(prop_name, allowed or VALID_SIZES)

    def color(self, prop_name: str) -> 'PropValidations':
        self.rules[prop_name] = {
            'format': {'with': COLOR_PATTERN, 'message': 'must be a valid color name'}
        }
        return self

    def number(self, prop_name: str, min=None, max=None) -> 'PropValidations':
        self.rules[prop_name] = {'numericality': {'min': min, 'max': max}}
        return self

    def url(self, prop_name: str, allow_blank: bool = False) -> 'PropValidations':
        self.rules[prop_name] = {'url': {'allow_blank': allow_blank}}
        return self

    def email(self, prop_name: str, allow_blank: bool = False) -> 'PropValidations':
        self.rules[prop_name] = {
            'format': {
                'with': EMAIL_PATTERN,
                'message': 'must be a valid email address',
                'allow_blank': allow_blank,
            }
        }
        return self

    def callable(self, prop_name: str, allow_nil: bool = True) -> 'PropValidations':
        self.rules[prop_name] = {'callable': {'allow_nil': allow_nil}}
        return self

    def inclusion(self, prop_name: str, values, allow_blank: bool = False) -> 'PropValidations':
        if values is None:
            raise ValueError("inclusion requires a list of allowed values")

        allowed = list(values)
        self.rules[prop_name] = {
            'inclusion': {
                'in': allowed,
                'message': f"must be one of: {', '.join(str(v) for v in allowed)}",
                'allow_blank': allow_blank,
            }
        }
        return self

    def _check(self, prop_name: str, value, validation_type: str, options: Dict[str, Any]) -> List[str]:
        errors = []

        if validation_type == 'inclusion':
            if options.get('allow_blank') and _blank(value):
                return errors
            if str(value) not in [str(v) for v in options['in']]:
                errors.append(f"{prop_name} {options.get('message', 'is not included in the list')}")

        elif validation_type == 'format':
            if options.get('allow_blank') and _blank(value):
                return errors
            if not options['with'].match(str(value if value is not None else '')):
                errors.append(f"{prop_name} {options.get('message', 'is invalid')}")

        elif validation_type == 'numericality':
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                errors.append(f"{prop_name} must be a number")
                return errors
            if options.get('min') is not None and value < options['min']:
                errors.append(f"{prop_name} must be greater than or equal to {options['min']}")
            if options.get('max') is not None and value > options['max']:
                errors.append(f"{prop_name} must be less than or equal to {options['max']}")

        elif validation_type == 'url':
            if not valid_url(value, allow_blank=options.get('allow_blank', False)):
                errors.append(f"{prop_name} must be a valid URL")

        elif validation_type == 'callable':
            if not valid_callable(value, allow_nil=options.get('allow_nil', True)):
                errors.append(f"{prop_name} must be a callable (function or method)")

        return errors

    def validate(self, props: Dict[str, Any]) -> bool:
        """
        Validate props against every rule.

        Raises:
            ValueError: Listing every failed prop
        """
        errors = []
        for prop_name, validations in self.rules.items():
            value = props.get(prop_name)
            for validation_type, options in validations.items():
                errors.extend(self._check(prop_name, value, validation_type, options))

        if errors:
            raise ValueError(f"Component validation failed: {', '.join(errors)}")

        return True


def validate_component_name(name: str) -> None:
    if not COMPONENT_NAME_PATTERN.match(name or ''):
        raise ValueError(
            f"Invalid component name '{name}'. Component names must start with a letter "
            "and contain only letters, numbers, and underscores."
        )

    if FORBIDDEN_NAME_KEYWORDS.search(name):
        raise ValueError(f"Component name '{name}' contains forbidden keywords.")

    if SUSPICIOUS_CHARS.search(name):
        raise ValueError(f"Component name '{name}' contains suspicious characters.")


def validate_props(props) -> None:
    if not props:
        return

    for prop in props:
        prop_str = str(prop)
        if SUSPICIOUS_CHARS.search(prop_str) or FORBIDDEN_PROP_KEYWORDS.search(prop_str):
            raise ValueError(f"Property definition '{prop_str}' contains suspicious characters or keywords.")


def validate_story_names(stories) -> None:
    if not stories:
        return

    for story in stories:
        story_str = str(story)
        if not STORY_NAME_PATTERN.match(story_str):
            raise ValueError(
                f"Invalid story name '{story_str}'. Story names must start with a lowercase letter "
                "or underscore and contain only lowercase letters, numbers, and underscores."
            )
        if FORBIDDEN_PROP_KEYWORDS.search(story_str):
            raise ValueError(f"Story name '{story_str}' contains forbidden keywords.")
