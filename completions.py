"""
completions.py - Editor Completions
SwiftUI Playground

Suggests DSL builders, snippets, modifiers and modifier values for the
playground editor based on the text before the cursor.
"""

import re
import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

SNIPPET_FORMAT = 2
PLAIN_FORMAT = 1

COLOR_CHOICES = ['blue-500', 'red-500', 'green-500', 'yellow-500', 'purple-500', 'gray-100', 'white', 'black', 'transparent']
TEXT_COLOR_CHOICES = ['gray-800', 'blue-600', 'red-600', 'green-600', 'yellow-600', 'purple-600', 'gray-500', 'white', 'black']
BORDER_COLOR_CHOICES = ['gray-300', 'blue-500', 'red-500', 'green-500', 'yellow-500', 'purple-500', 'gray-200', 'transparent']
FONT_SIZE_CHOICES = ['xs', 'sm', 'base', 'lg', 'xl', '2xl', '3xl', '4xl', '5xl', '6xl']
FONT_WEIGHT_CHOICES = ['light', 'normal', 'medium', 'semibold', 'bold', 'extrabold']
SPACING_CHOICES = ['0', '1', '2', '3', '4', '5', '6', '8', '10', '12', '16', '20', '24']
WIDTH_CHOICES = ['full', '1/2', '1/3', '2/3', '1/4', '3/4', 'auto', 'fit', 'screen', '48', '64', '96']
HEIGHT_CHOICES = ['full', 'screen', 'auto', 'fit', '48', '64', '96', '32', '24', '16', '12', '8']
ROUNDED_CHOICES = ['none', 'sm', 'md', 'lg', 'xl', '2xl', '3xl', 'full']
SHADOW_CHOICES = ['none', 'sm', 'md', 'lg', 'xl', '2xl', 'inner']

# label -> (parameter hint, description, value choices)
MODIFIERS = {
    'padding': ('amount', 'Add padding', SPACING_CHOICES),
    'p': ('value', 'Padding shorthand', SPACING_CHOICES),
    'px': ('value', 'Horizontal padding', SPACING_CHOICES),
    'py': ('value', 'Vertical padding', SPACING_CHOICES),
    'pt': ('value', 'Top padding', SPACING_CHOICES),
    'pb': ('value', 'Bottom padding', SPACING_CHOICES),
    'm': ('value', 'Margin shorthand', SPACING_CHOICES + ['auto']),
    'mx': ('value', 'Horizontal margin', SPACING_CHOICES + ['auto']),
    'my': ('value', 'Vertical margin', SPACING_CHOICES + ['auto']),
    'mt': ('value', 'Top margin', SPACING_CHOICES + ['auto']),
    'mb': ('value', 'Bottom margin', SPACING_CHOICES + ['auto']),
    'bg': ('color', 'Background color', COLOR_CHOICES),
    'background': ('color', 'Background color (hex allowed)', COLOR_CHOICES),
    'text_color': ('color', 'Text color', TEXT_COLOR_CHOICES),
    'foreground_color': ('color', 'Text color (hex allowed)', TEXT_COLOR_CHOICES),
    'border_color': ('color', 'Border color', BORDER_COLOR_CHOICES),
    'font_size': ('size', 'Font size', FONT_SIZE_CHOICES),
    'text_size': ('size', 'Font size', FONT_SIZE_CHOICES),
    'font_weight': ('weight', 'Font weight', FONT_WEIGHT_CHOICES),
    'text_align': ('alignment', 'Text alignment', ['left', 'center', 'right', 'justify']),
    'leading': ('value', 'Line height', ['tight', 'snug', 'normal', 'relaxed', 'loose']),
    'line_clamp': ('lines', 'Clamp text to N lines', ['1', '2', '3', '4', '5', '6']),
    'w': ('value', 'Width', WIDTH_CHOICES),
    'h': ('value', 'Height', HEIGHT_CHOICES),
    'width': ('value', 'Width', WIDTH_CHOICES),
    'height': ('value', 'Height', HEIGHT_CHOICES),
    'rounded': ('size', 'Border radius', ROUNDED_CHOICES),
    'corner_radius': ('radius', 'Border radius (px for custom)', ROUNDED_CHOICES),
    'shadow': ('size', 'Box shadow', SHADOW_CHOICES),
    'opacity': ('value', 'Opacity (0-100)', ['0', '10', '20', '30', '40', '50', '60', '70', '80', '90', '100']),
    'hover': ('classes', 'Hover state styling', ['bg-blue-600', 'bg-red-600', 'bg-green-600', 'scale-105', 'shadow-lg', 'opacity-80']),
    'focus': ('classes', 'Focus state styling', ['ring-2', 'ring-blue-500', 'outline-none', 'ring-offset-2']),
    'scale': ('value', 'Scale transform', ['50', '75', '90', '95', '100', '105', '110', '125', '150']),
    'rotate': ('value', 'Rotate transform', ['0', '1', '2', '3', '6', '12', '45', '90', '180']),
    'duration': ('ms', 'Transition duration', ['75', '100', '150', '200', '300', '500', '700', '1000']),
    'z_index': ('value', 'Stacking order', ['0', '10', '20', '30', '40', '50', 'auto']),
    'tw': ('classes', 'Raw Tailwind classes', None),
    'data': ('attributes', 'Data attributes', None),
    'stimulus_controller': ('name', 'Attach a Stimulus controller', None),
    'stimulus_action': ('action', 'Attach a Stimulus action (event->controller#method)', None),
    'stimulus_target': ('name', 'Mark as a Stimulus target', None),
    'aria_label': ('label', 'Accessible label', None),
    'title': ('text', 'Tooltip text', None),
    'id': ('value', 'Element id', None),
    'style': ('css', 'Inline style (validated)', None),
    'flex': (None, 'Make element a flex container', None),
    'hidden': (None, 'Hide element', None),
    'font_bold': (None, 'Bold text', None),
    'text_center': (None, 'Center text', None),
    'w_full': (None, 'Full width', None),
    'disabled': (None, 'Disable the element', None),
    'transition': (None, 'Enable transitions', None),
    'on_tap': (None, 'Handle clicks through the component controller', None),
    'on_change': (None, 'Handle change events through the component controller', None),
}

# name -> (signature, description)
BUILDERS = {
    'vstack': ('(alignment="center", spacing=8, justify=None)', 'Vertical stack layout'),
    'hstack': ('(alignment="center", spacing=8, justify=None)', 'Horizontal stack layout'),
    'zstack': ('()', 'Layered stack (relative positioning)'),
    'grid': ('(columns=2, spacing=8)', 'Responsive CSS grid'),
    'lazy_vgrid': ('(columns, spacing=20)', 'Isolated responsive grid'),
    'grid_item': ('(size_type="flexible")', 'Column description for lazy_vgrid'),
    'text': ('(content)', 'Display text'),
    'label': ('(text=None, for_input=None)', 'Form label'),
    'button': ('(title=None)', 'Interactive button'),
    'link': ('(title=None, destination="#")', 'Hyperlink'),
    'image': ('(src, alt="")', 'Image from an approved domain'),
    'icon': ('(name, size=16)', 'Icon placeholder'),
    'textfield': ('(placeholder="", value="")', 'Text input'),
    'toggle': ('(label_text, is_on=False)', 'Checkbox toggle'),
    'slider': ('(value=50, min=0, max=100, step=1)', 'Range slider'),
    'select': ('(name=None, selected=None)', 'Select dropdown'),
    'option': ('(value, text=None, selected=False)', 'Select option'),
    'form': ('()', 'Form container'),
    'secure_form': ('(action, method="POST", csrf_token=None)', 'Form with CSRF and method override inputs'),
    'card': ('(elevation=1, header=None, content=None, actions=None)', 'Card container'),
    'list_view': ('()', 'Unordered list'),
    'list_item': ('(content=None)', 'List item'),
    'scroll_view': ('()', 'Scrollable container'),
    'spacer': ('(min_length=None)', 'Flexible space'),
    'divider': ('()', 'Horizontal rule'),
    'spinner': ('(size="md")', 'Loading spinner'),
    'div': ('(content=None)', 'Generic container'),
    'paragraph': ('(content=None)', 'Paragraph'),
    'table': ('()', 'Table'),
    'simple_table': ('(headers, rows)', 'Table from header and row lists'),
    'data_table': ('(data, columns, title=None, paginate=False, per_page=10)', 'Card table with formatted cells and pagination'),
    'render_pagination': ('(current_page, per_page, total_count)', 'Pagination footer'),
    'with_form': ('()', 'Form field group'),
    'with_sidebar': ('()', 'Sidebar container'),
    'with_header': ('()', 'Header container'),
    'with_footer': ('()', 'Footer container'),
    'swift_ui': ('()', 'Root fragment'),
}

SNIPPETS = {
    'with vstack': (
        'Vertical stack block',
        'with vstack(spacing=${1:16}):\n    ${2:text("Hello")}',
    ),
    'with hstack': (
        'Horizontal stack block',
        'with hstack(justify="${1|start,center,end,between,around,evenly|}"):\n    ${2:text("Left")}\n    ${3:text("Right")}',
    ),
    'with grid': (
        'Grid block',
        'with grid(columns=${1:3}, spacing=${2:16}):\n    for i in range(${3:6}):\n        card(elevation=1, content=f"Item {i}")',
    ),
    'with card': (
        'Card block',
        'with card(elevation=${1:2}):\n    text("${2:Card Title}").font_size("xl").font_weight("bold")',
    ),
    'with form': (
        'Form block',
        'with form(action="#", method="post"):\n    textfield(name="${1:email}", placeholder="${2:Enter email}")\n    button("Submit", type="submit")',
    ),
}

SPECIAL_BUILDER_SNIPPETS = {
    'button': 'button(${1:"Click Me"})\n  .bg(${2:"blue-500"})\n  .text_color(${3:"white"})\n  .px(${4:4}).py(${5:2})\n  .rounded(${6:"lg"})',
    'text': 'text(${1:"Your text here"})\n  .font_size(${2:"xl"})\n  .font_weight(${3:"semibold"})\n  .text_color(${4:"gray-800"})',
}

SIGNATURES = [
    {
        'label': 'text(content)',
        'documentation': 'Display text content with styling options',
        'parameters': [
            {'label': 'content', 'documentation': 'The text to display'},
        ],
    },
    {
        'label': 'button(title)',
        'documentation': 'Create an interactive button',
        'parameters': [
            {'label': 'title', 'documentation': 'The button text'},
        ],
    },
    {
        'label': 'vstack(alignment, spacing, justify)',
        'documentation': 'Create a vertical stack layout',
        'parameters': [
            {'label': 'alignment', 'documentation': 'Horizontal alignment'},
            {'label': 'spacing', 'documentation': 'Space between elements'},
            {'label': 'justify', 'documentation': 'Vertical distribution'},
        ],
    },
    {
        'label': 'hstack(alignment, spacing, justify)',
        'documentation': 'Create a horizontal stack layout',
        'parameters': [
            {'label': 'alignment', 'documentation': 'Vertical alignment'},
            {'label': 'spacing', 'documentation': 'Space between elements'},
            {'label': 'justify', 'documentation': 'Horizontal distribution'},
        ],
    },
]

MODIFIER_CONTEXT = re.compile(r'\.\s*([A-Za-z_]\w*)?$')
VALUE_CONTEXT = re.compile(r'\.([A-Za-z_]\w*)\(\s*["\']([\w\-/.]*)$')
WORD_CONTEXT = re.compile(r'(\w*)$')

PLACEHOLDER = re.compile(r'\$\{\d+:([^}]*)\}')
CHOICE_PLACEHOLDER = re.compile(r'\$\{\d+\|([^,|]*)[^}]*\}')


def signatures() -> List[Dict]:
    return SIGNATURES


def _choice_placeholder(choices) -> str:
    return '${1|' + ','.join(f'"{choice}"' for choice in choices) + '|}'


def _plain_text(snippet: str) -> str:
    """Snippet body with each placeholder replaced by its default."""
    text = PLACEHOLDER.sub(r'\1', snippet)
    return CHOICE_PLACEHOLDER.sub(r'\1', text)


class CompletionService:
    """Completion suggestions for the text up to a cursor position."""

    def __init__(self, context: str, position: Optional[Dict] = None):
        position = position or {}
        self.context = context or ''
        self.line = int(position.get('lineNumber') or 1)
        self.column = int(position.get('column') or 1)

    def text_before_cursor(self) -> str:
        lines = self.context.split('\n')
        line_index = max(self.line - 1, 0)
        before = lines[:line_index]
        current = lines[line_index] if line_index < len(lines) else ''
        return '\n'.join(before + [current[:max(self.column - 1, 0)]])

    def generate_completions(self) -> List[Dict]:
        text = self.text_before_cursor()
        current_line = text.split('\n')[-1]

        value_match = VALUE_CONTEXT.search(current_line)
        modifier_match = MODIFIER_CONTEXT.search(current_line)
        if value_match:
            partial = value_match.group(2)
            results = self.value_completions(value_match.group(1), partial)
        elif modifier_match:
            partial = modifier_match.group(1) or ''
            results = self.modifier_completions(partial)
        else:
            partial = WORD_CONTEXT.search(current_line).group(1)
            results = self.top_level_completions(partial)

        logger.debug(f"Generated {len(results)} completions at {self.line}:{self.column}")
        return self._finalize(results, partial)

    def modifier_completions(self, partial: str = '') -> List[Dict]:
        results = []
        for label, (parameter, description, choices) in MODIFIERS.items():
            if not self._matches(label, partial):
                continue

            if parameter is None:
                insert_text, insert_format = f"{label}()", PLAIN_FORMAT
            elif choices:
                insert_text, insert_format = f"{label}({_choice_placeholder(choices)})", SNIPPET_FORMAT
            else:
                insert_text, insert_format = f"{label}(${{1:{parameter}}})", SNIPPET_FORMAT

            results.append({
                'label': label,
                'kind': 'method',
                'detail': f"({parameter})" if parameter else '()',
                'documentation': description,
                'insertText': insert_text,
                'insertTextFormat': insert_format,
            })
        return results

    def top_level_completions(self, partial: str = '') -> List[Dict]:
        results = []
        for name, (signature, description) in BUILDERS.items():
            if not self._matches(name, partial):
                continue
            results.append({
                'label': name,
                'kind': 'function',
                'detail': signature,
                'documentation': description,
                'insertText': SPECIAL_BUILDER_SNIPPETS.get(name, f"{name}($1)"),
                'insertTextFormat': SNIPPET_FORMAT,
            })

        for label, (description, body) in SNIPPETS.items():
            # "with vstack" is offered for both "wi" and "vs"
            if not (self._matches(label, partial) or self._matches(label[len('with '):], partial)):
                continue
            results.append({
                'label': label,
                'kind': 'snippet',
                'detail': description,
                'documentation': _plain_text(body),
                'insertText': body,
                'insertTextFormat': SNIPPET_FORMAT,
            })
        return results

    def value_completions(self, modifier: str, partial: str = '') -> List[Dict]:
        entry = MODIFIERS.get(modifier)
        if entry is None or not entry[2]:
            return []

        return [
            {
                'label': value,
                'kind': 'value',
                'detail': 'Option',
                'documentation': f"{modifier}: {value}",
                'insertText': value,
                'insertTextFormat': PLAIN_FORMAT,
            }
            for value in entry[2]
            if self._matches(value, partial)
        ]

    @staticmethod
    def _matches(label: str, partial: str) -> bool:
        return not partial or label.lower().startswith(partial.lower())

    @staticmethod
    def _finalize(results: List[Dict], partial: str) -> List[Dict]:
        """Deduplicate by label; exact-case prefix matches sort first."""
        unique = {}
        for item in results:
            unique.setdefault(item['label'], item)

        def sort_key(item):
            exact = bool(partial) and item['label'].startswith(partial)
            return (0 if exact else 1, item['label'])

        return sorted(unique.values(), key=sort_key)
