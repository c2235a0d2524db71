"""
element.py - Chainable HTML Element
SwiftUI Playground

Every modifier appends Tailwind classes or attributes and returns the element,
so calls chain the way SwiftUI modifiers do:

    text("Hello").font_size("2xl").foreground_color("#333").padding(4)

Rendering always escapes text content and attribute values; the result is a
markupsafe.Markup string that Flask/Jinja will not escape a second time.
"""

import re
import logging
from markupsafe import Markup, escape

from config import SwiftUIError
from css_validator import (
    safe_aspect_class,
    safe_duration_class,
    safe_opacity_class,
    safe_scale_class,
    safe_style,
    safe_transition_class,
)
from data_attributes import (
    sanitize_data_attribute,
    sanitize_data_attributes,
    sanitize_stimulus_action,
    sanitize_stimulus_controller,
    sanitize_stimulus_target,
    dasherize,
)
from url_validator import validate_image_src, validate_link_href

logger = logging.getLogger(__name__)

VOID_TAGS = ('img', 'input', 'hr', 'br', 'meta', 'link')

ATTRIBUTE_NAME = re.compile(r'^[a-zA-Z][a-zA-Z0-9\-_:.]*$')

# Attributes whose values are URLs and get validated on assignment
URL_ATTRIBUTES = {
    'href': validate_link_href,
    'action': validate_link_href,
    'formaction': validate_link_href,
    'src': validate_image_src,
}

COMPONENT_CONTROLLER = 'swift-ui-component'

CORNER_RADIUS_CLASSES = {
    'none': 'rounded-none',
    '0': 'rounded-none',
    'sm': 'rounded-sm',
    'md': 'rounded-md',
    'lg': 'rounded-lg',
    'xl': 'rounded-xl',
    'full': 'rounded-full',
}


def safe_attribute_name(name) -> bool:
    """Attribute names must be plain identifiers and never inline event handlers."""
    name_str = str(name)
    if not ATTRIBUTE_NAME.match(name_str):
        return False
    return not name_str.lower().startswith('on')


def _utility(prefix):
    def modifier(self, value):
        return self.tw(f"{prefix}-{value}")
    modifier.__name__ = prefix.replace('-', '_')
    modifier.__doc__ = f"Add a {prefix}-* class."
    return modifier


def _static(*classes):
    def modifier(self):
        return self.tw(*classes)
    return modifier


def _variant(prefix):
    def modifier(self, utilities):
        for utility in str(utilities).split():
            self.tw(f"{prefix}:{utility}")
        return self
    modifier.__doc__ = f"Prefix each space-separated utility with '{prefix}:'."
    return modifier


class Element:
    """A single HTML element with chainable Tailwind modifiers."""

    def __init__(self, tag_name, content=None, options=None, context=None):
        self._tag_name = str(tag_name)
        # Plain str: a Markup fragment passed as content is escaped like any text
        self._content = None if content is None else str(content)
        self._options = dict(options or {})
        self._css_classes = []
        self._attributes = {}
        self._children = []
        self._parent = None
        self._context = context
        self._action_counter = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def tag_name(self):
        return self._tag_name

    @property
    def content(self):
        return self._content

    @property
    def children(self):
        return tuple(self._children)

    @property
    def css_classes(self):
        return list(self._css_classes)

    def get_attribute(self, name):
        merged = self._merged_attributes()
        return merged.get(name)

    # ------------------------------------------------------------------
    # Tree management (used by DSLContext)
    # ------------------------------------------------------------------

    def _add_child(self, child):
        if any(existing is child for existing in self._children):
            return
        child._parent = self
        self._children.append(child)

    def _remove_child(self, child):
        self._children = [existing for existing in self._children if existing is not child]
        child._parent = None

    def _ancestors(self):
        node = self
        while node is not None:
            yield node
            node = node._parent

    def __enter__(self):
        if self._context is None:
            raise SwiftUIError(f"<{self._tag_name}> is not attached to a DSL context")
        self._context.push(self)
        return self

    def __exit__(self, exc_type, exc, tb):
        self._context.pop(self)
        return False

    # ------------------------------------------------------------------
    # Classes
    # ------------------------------------------------------------------

    def tw(self, *classes):
        """Add raw Tailwind classes (space-separated strings are split)."""
        for css_class in classes:
            if css_class is None:
                continue
            if isinstance(css_class, (list, tuple)):
                self.tw(*css_class)
                continue
            self._css_classes.extend(str(css_class).split())
        return self

    def add_class(self, class_name):
        if class_name and class_name not in self._css_classes:
            self._css_classes.append(str(class_name))
        return self

    def _append_style(self, declaration):
        if safe_style(declaration) is None:
            return
        existing = self._options.get('style')
        self._options['style'] = '; '.join(part for part in (existing, declaration) if part)

    # ------------------------------------------------------------------
    # Spacing and sizing
    # ------------------------------------------------------------------

    m = _utility('m')
    mt = _utility('mt')
    mr = _utility('mr')
    mb = _utility('mb')
    ml = _utility('ml')
    mx = _utility('mx')
    my = _utility('my')
    p = _utility('p')
    pt = _utility('pt')
    pr = _utility('pr')
    pb = _utility('pb')
    pl = _utility('pl')
    px = _utility('px')
    py = _utility('py')

    w = _utility('w')
    h = _utility('h')
    min_w = _utility('min-w')
    max_w = _utility('max-w')
    min_h = _utility('min-h')
    max_h = _utility('max-h')

    def padding(self, amount=4):
        return self.tw(f"p-{amount}")

    padding_x = _utility('px')
    padding_y = _utility('py')
    padding_bottom = _utility('pb')
    padding_horizontal = _utility('px')
    padding_vertical = _utility('py')
    margin_top = _utility('mt')
    margin_bottom = _utility('mb')

    width = _utility('w')
    height = _utility('h')
    max_width = _utility('max-w')
    w_full = _static('w-full')

    # ------------------------------------------------------------------
    # Typography
    # ------------------------------------------------------------------

    text_size = _utility('text')
    font_size = _utility('text')
    text_color = _utility('text')
    font_weight = _utility('font')
    text_align = _utility('text')
    line_clamp = _utility('line-clamp')
    font_family = _utility('font')
    leading = _utility('leading')

    italic = _static('italic')
    underline = _static('underline')
    font_bold = _static('font-bold')
    font_semibold = _static('font-semibold')
    font_medium = _static('font-medium')
    font_light = _static('font-light')
    text_center = _static('text-center')
    text_xs = _static('text-xs')
    text_sm = _static('text-sm')
    text_lg = _static('text-lg')
    text_xl = _static('text-xl')

    # ------------------------------------------------------------------
    # Colors, borders and shape
    # ------------------------------------------------------------------

    bg = _utility('bg')

    def background(self, color):
        """Hex colors become an inline background-color; anything else a bg-* class."""
        if str(color).startswith('#'):
            self._append_style(f"background-color: {color}")
            return self
        return self.tw(f"bg-{color}")

    def foreground_color(self, color):
        if str(color).startswith('#'):
            self._append_style(f"color: {color}")
            return self
        return self.tw(f"text-{color}")

    def border(self, width=None):
        if width is None:
            return self.tw('border')
        return self.tw(f"border-{width}")

    def border_t(self, width=None):
        return self.tw('border-t' if width is None else f"border-t-{width}")

    def border_b(self, width=None):
        return self.tw('border-b' if width is None else f"border-b-{width}")

    def border_l(self, width=None):
        return self.tw('border-l' if width is None else f"border-l-{width}")

    def border_r(self, width=None):
        return self.tw('border-r' if width is None else f"border-r-{width}")

    border_color = _utility('border')

    def rounded(self, size=''):
        return self.tw(f"rounded-{size}" if size else 'rounded')

    def corner_radius(self, radius):
        """Named radii map to classes; any other value is a pixel border-radius."""
        css_class = CORNER_RADIUS_CLASSES.get(str(radius))
        if css_class:
            return self.tw(css_class)
        self._append_style(f"border-radius: {radius}px")
        return self

    def shadow(self, size=''):
        return self.tw(f"shadow-{size}" if size else 'shadow')

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    flex = _static('flex')
    block = _static('block')
    inline = _static('inline')
    hidden = _static('hidden')
    items_center = _static('items-center')
    items_start = _static('items-start')
    items_end = _static('items-end')
    justify_center = _static('justify-center')
    justify_between = _static('justify-between')
    justify_start = _static('justify-start')
    justify_end = _static('justify-end')
    flex_grow = _static('flex-grow')

    def flex_shrink(self, value=None):
        return self.tw('flex-shrink' if value is None else f"flex-shrink-{value}")

    col_span = _utility('col-span')
    row_span = _utility('row-span')
    grid_area = _utility('grid-area')
    object_fit = _utility('object')

    def grid_template_columns(self, columns):
        self._append_style(f"grid-template-columns: {columns}")
        return self

    def grid_template_rows(self, rows):
        self._append_style(f"grid-template-rows: {rows}")
        return self

    def break_inside(self, value='avoid'):
        return self.tw(f"break-inside-{value}")

    def aspect_ratio(self, ratio):
        return self.tw(safe_aspect_class(ratio))

    # ------------------------------------------------------------------
    # Effects and state variants
    # ------------------------------------------------------------------

    cursor = _utility('cursor')
    loading = _static('animate-spin')

    def opacity(self, value):
        return self.tw(safe_opacity_class(value))

    def duration(self, ms):
        return self.tw(safe_duration_class(ms))

    def transition(self, kind=None):
        return self.tw(safe_transition_class(kind))

    def scale(self, value):
        return self.tw(safe_scale_class(value))

    def animation(self, type='transition-all', duration='200'):
        return self.tw(type, safe_duration_class(duration))

    hover = _variant('hover')
    focus = _variant('focus')
    active = _variant('active')
    disabled_state = _variant('disabled')
    dark = _variant('dark')
    sm = _variant('sm')
    md = _variant('md')
    lg = _variant('lg')
    xl = _variant('xl')

    def hover_background(self, color):
        return self.tw(f"hover:bg-{color}")

    def hover_effect(self, effect='opacity-90'):
        return self.tw(f"hover:{effect}")

    def hover_scale(self, scale='105'):
        return self.tw(f"hover:scale-{scale}", 'transition-transform')

    def hover_shadow(self, size='lg'):
        return self.tw(f"hover:shadow-{size}", 'transition-shadow')

    def ring_hover(self, width=2, color=None):
        self.tw(f"hover:ring-{width}")
        if color:
            self.tw(f"hover:ring-{color}")
        return self

    def group_hover_opacity(self, opacity):
        return self.tw(f"group-hover:opacity-{opacity}")

    def focus_ring(self, color='blue-500'):
        return self.tw('focus:outline-none', 'focus:ring-2', f"focus:ring-{color}", 'focus:ring-offset-2')

    def animate_in(self, animation='fadeIn'):
        return self.tw(f"animate-{animation}")

    def animate_out(self, animation='fadeOut'):
        return self.tw(f"animate-{animation}")

    def animate_on_hover(self, animation='scale-105'):
        return self.tw(f"hover:{animation}", 'transition-transform', 'duration-200')

    def animate_on_focus(self, animation='ring-2 ring-blue-500'):
        return self.focus(animation)

    rotate = _utility('rotate')
    translate_x = _utility('translate-x')
    translate_y = _utility('translate-y')
    grayscale = _static('grayscale')
    blur = _static('blur')

    # ------------------------------------------------------------------
    # Positioning
    # ------------------------------------------------------------------

    sticky = _static('sticky')
    fixed = _static('fixed')
    absolute = _static('absolute')
    relative = _static('relative')
    top = _utility('top')
    bottom = _utility('bottom')
    left = _utility('left')
    right = _utility('right')
    inset = _utility('inset')
    z_index = _utility('z')

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def attr(self, name, value):
        """
        Set an HTML attribute.

        Inline event handlers (on*) and malformed names are dropped; URL
        attributes go through the URL validator.
        """
        # HTML attribute names are case-insensitive
        name_str = str(name).lower()
        if not safe_attribute_name(name_str):
            logger.warning(f"[SECURITY] Blocked attribute: {name_str}")
            return self

        if name_str == 'class':
            return self.tw(value)
        if name_str == 'style':
            return self.style(value)

        validator = URL_ATTRIBUTES.get(name_str)
        if validator is not None and value is not None:
            value = validator(str(value))
            if value is None:
                return self

        self._attributes[name_str] = value
        return self

    def title(self, title_text):
        return self.attr('title', title_text)

    def id(self, id_value):
        return self.attr('id', id_value)

    def morph_id(self, id_value):
        self.attr('id', id_value)
        return self.attr('data-morph-id', id_value)

    def role(self, role_name):
        return self.attr('role', role_name)

    def aria_label(self, label):
        return self.attr('aria-label', label)

    def aria_hidden(self, hidden=True):
        return self.attr('aria-hidden', 'true' if hidden else 'false')

    def lazy_load(self):
        return self.attr('loading', 'lazy')

    def eager_load(self):
        return self.attr('loading', 'eager')

    def disabled(self, is_disabled=True):
        if is_disabled:
            self.tw('opacity-50', 'cursor-not-allowed')
            self._options['disabled'] = True
        return self

    def style(self, style_string):
        self._append_style(style_string)
        return self

    def merge_attributes(self, attributes):
        if isinstance(attributes, dict):
            for name, value in attributes.items():
                self.attr(name, value)
        return self

    # Components style themselves
    def button_style(self, style):
        return self

    def button_size(self, size):
        return self

    # ------------------------------------------------------------------
    # Data attributes, Stimulus and Turbo
    # ------------------------------------------------------------------

    def data(self, attributes):
        """Add data-* attributes from a dict or a single 'key:value' string."""
        if isinstance(attributes, dict):
            for key, value in sanitize_data_attributes(attributes).items():
                self._set_data_attribute(key, value)
        elif isinstance(attributes, str) and ':' in attributes:
            key, value = attributes.split(':', 1)
            self._set_data_attribute(*sanitize_data_attribute(key, value))
        return self

    def _set_data_attribute(self, key, value):
        if key == 'data-action':
            self._append_token('data-action', value)
        elif key == 'data-controller':
            self._append_token('data-controller', sanitize_stimulus_controller(value))
        else:
            # Sanitizers hand back escaped Markup; keep the raw text so render escapes it once
            self._attributes[key] = value.unescape() if isinstance(value, Markup) else value

    def _append_token(self, key, value):
        if not value:
            return
        existing = self._attributes.get(key)
        if existing:
            if value in str(existing).split():
                return
            self._attributes[key] = f"{existing} {value}"
        else:
            self._attributes[key] = value

    def stimulus_controller(self, controller_name):
        self._append_token('data-controller', sanitize_stimulus_controller(controller_name))
        return self

    def stimulus_action(self, action):
        self._append_token('data-action', sanitize_stimulus_action(action))
        return self

    def stimulus_target(self, target_name):
        target = sanitize_stimulus_target(target_name)
        if target:
            self._attributes[f"data-{dasherize(target)}-target"] = target
        return self

    def stimulus_param(self, param_name, value):
        self._set_data_attribute(*sanitize_data_attribute(f"{param_name}-param", value))
        return self

    def turbo_frame(self, frame_id):
        return self.attr('data-turbo-frame', frame_id)

    def turbo_permanent(self):
        return self.attr('data-turbo-permanent', True)

    def _add_component_action(self, event_type):
        self._action_counter += 1
        action_id = f"action_{self._tag_name}_{self._action_counter}_{event_type}"

        self._append_token('data-controller', COMPONENT_CONTROLLER)
        self._append_token('data-action', f"{event_type}->{COMPONENT_CONTROLLER}#handleAction")
        self._attributes[f"data-{COMPONENT_CONTROLLER}-action-{action_id}"] = action_id
        return self

    def on_tap(self):
        return self._add_component_action('click')

    def on_click(self):
        return self._add_component_action('click')

    def on_change(self):
        return self._add_component_action('change')

    def on_input(self):
        return self._add_component_action('input')

    def on_submit(self):
        return self._add_component_action('submit')

    def on_keyup(self):
        return self._add_component_action('keyup')

    def on_keydown(self):
        return self._add_component_action('keydown')

    def on_focus(self):
        return self._add_component_action('focus')

    def on_blur(self):
        return self._add_component_action('blur')

    def on_hover(self):
        return self._add_component_action('mouseover')

    def on_mouse_enter(self):
        return self._add_component_action('mouseover')

    def on_mouse_leave(self):
        return self._add_component_action('mouseout')

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _class_string(self):
        existing = str(self._options.get('class') or '').split()
        merged = []
        for css_class in existing + self._css_classes:
            if css_class and css_class not in merged:
                merged.append(css_class)
        return ' '.join(merged)

    def _merged_attributes(self):
        merged = {}
        for name, value in self._options.items():
            if name != 'class':
                merged[name] = value

        class_string = self._class_string()
        if class_string:
            merged = {'class': class_string, **merged}

        merged.update(self._attributes)
        return merged

    def _render_attributes(self):
        parts = []
        for name, value in self._merged_attributes().items():
            if value is None or value is False:
                continue
            if not safe_attribute_name(name):
                continue
            if value is True:
                parts.append(f" {name}")
            else:
                parts.append(f' {name}="{escape(str(value))}"')
        return ''.join(parts)

    def render(self):
        """Render this element and its children to safe HTML."""
        attributes = self._render_attributes()

        if self._tag_name in VOID_TAGS:
            return Markup(f"<{self._tag_name}{attributes}>")

        inner = ''
        if self._content is not None:
            inner = str(escape(self._content))
        inner += ''.join(str(child.render()) for child in self._children)

        return Markup(f"<{self._tag_name}{attributes}>{inner}</{self._tag_name}>")

    def __str__(self):
        return str(self.render())

    def __html__(self):
        return self.render()

    def __repr__(self):
        return f"<Element {self._tag_name} children={len(self._children)}>"

    def to_tree(self):
        """Nested dict of type/props/children for the component tree view."""
        props = {}
        for name, value in self._merged_attributes().items():
            if value is None or value is False:
                continue
            props[name] = value if isinstance(value, (bool, int, float)) else str(value)
        if self._content is not None:
            props['content'] = str(self._content)

        return {
            'type': self._tag_name,
            'props': props,
            'children': [child.to_tree() for child in self._children],
        }
