"""
dsl.py - DSL Context and Component Builders
SwiftUI Playground

DSLContext collects the elements created during one render. Containers
are used as context managers, and every element created inside the block
becomes a child of the innermost open container:

    ctx = DSLContext()
    with ctx.vstack(spacing=16):
        ctx.text("Welcome").font_size("2xl")
        with ctx.hstack(justify="between"):
            ctx.button("Cancel")
            ctx.button("Save").bg("blue-500")
    html = ctx.flush_elements()
"""

import logging
import math
from datetime import date, datetime
from markupsafe import Markup

from config import get_configuration, SecurityError, SwiftUIError
from css_validator import safe_grid_cols_class
from element import Element
from tailwind import (
    alignment_class,
    class_names,
    convert_spacing,
    is_pixel_value,
    justify_class,
    DISTRIBUTED_JUSTIFY,
)
from url_validator import validate_image_src, validate_link_href, PLACEHOLDER_IMAGE

logger = logging.getLogger(__name__)

RESPONSIVE_GRID_PRESETS = {
    1: 'grid-cols-1',
    2: 'grid-cols-1 sm:grid-cols-2',
    3: 'grid-cols-1 sm:grid-cols-2 lg:grid-cols-3',
    4: 'grid-cols-1 sm:grid-cols-2 lg:grid-cols-3 xl:grid-cols-4',
    5: 'grid-cols-1 sm:grid-cols-2 md:grid-cols-3 lg:grid-cols-4 xl:grid-cols-5',
    6: 'grid-cols-2 sm:grid-cols-3 lg:grid-cols-4 xl:grid-cols-6',
}

LAZY_GRID_PRESETS = {
    1: 'grid-cols-1',
    2: 'grid-cols-1 sm:grid-cols-2',
    3: 'grid-cols-1 sm:grid-cols-2 lg:grid-cols-3',
    4: 'grid-cols-1 sm:grid-cols-2 lg:grid-cols-4',
    6: 'grid-cols-2 sm:grid-cols-3 lg:grid-cols-6',
}

DEFAULT_LAZY_GRID = 'grid-cols-1 sm:grid-cols-2 lg:grid-cols-4'

BREAKPOINTS = ('sm', 'md', 'lg', 'xl', '2xl')

GRID_ALIGN = {
    'start': 'items-start',
    'center': 'items-center',
    'end': 'items-end',
    'stretch': 'items-stretch',
}

AUTO_ROWS = {
    'min': 'auto-rows-min',
    'max': 'auto-rows-max',
    'fr': 'auto-rows-fr',
}

AUTO_FLOW = {
    'row': 'grid-flow-row',
    'col': 'grid-flow-col',
    'column': 'grid-flow-col',
    'dense': 'grid-flow-dense',
    'row_dense': 'grid-flow-row-dense',
    'col_dense': 'grid-flow-col-dense',
    'column_dense': 'grid-flow-col-dense',
}

CARD_SHADOWS = {
    0: None,
    1: 'shadow',
    2: 'shadow-md',
    3: 'shadow-lg',
    4: 'shadow-xl',
}

SPINNER_SIZES = {
    'xs': 'h-3 w-3',
    'sm': 'h-4 w-4',
    'md': 'h-6 w-6',
    'lg': 'h-8 w-8',
    'xl': 'h-12 w-12',
}

METHOD_OVERRIDES = ('PUT', 'PATCH', 'DELETE')

TABLE_HEADER_CELL = 'px-6 py-3 text-left text-xs font-medium text-gray-500 uppercase tracking-wider'
TABLE_BODY_CELL = 'px-6 py-4 whitespace-nowrap'

BADGE_BASE = 'px-2 inline-flex text-xs leading-5 font-semibold rounded-full'
DEFAULT_BADGE = 'bg-gray-100 text-gray-800'
BADGE_CLASSES = {
    'Active': 'bg-green-100 text-green-800',
    'Inactive': DEFAULT_BADGE,
    'Pending': 'bg-yellow-100 text-yellow-800',
    'Error': 'bg-red-100 text-red-800',
}

ROW_ACTION_CLASSES = {
    'edit': 'text-indigo-600 hover:text-indigo-900',
    'delete': 'text-red-600 hover:text-red-900',
    'view': 'text-gray-600 hover:text-gray-900',
}

DEFAULT_DATE_FORMAT = '%b %d, %Y'


def spacing_token(value) -> str:
    """Pixel values become Tailwind scale tokens; scale values pass through."""
    if is_pixel_value(value):
        return convert_spacing(value)
    return str(value)


def _positive(value) -> bool:
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value > 0
    return bool(str(value)) and str(value) != '0'


def nested_value(row, key):
    """
    Look up a cell value: a plain key, a list of keys into nested dicts, or
    a callable that receives the whole row.
    """
    if callable(key):
        return key(row)
    if isinstance(key, (list, tuple)):
        value = row
        for part in key:
            if not isinstance(value, dict):
                return None
            value = value.get(part)
        return value
    if isinstance(row, dict):
        return row.get(key)
    return None


def format_currency(value, symbol='$') -> str:
    return f"{symbol}{'' if value is None else value}"


def format_date(value, date_format=None) -> str:
    """Format a date, datetime or ISO date string; anything else is shown as-is."""
    if not value:
        return ''

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value

    if isinstance(value, (date, datetime)):
        return value.strftime(date_format or DEFAULT_DATE_FORMAT)
    return str(value)


class Fragment(Element):
    """Root container that renders only its children."""

    def __init__(self, context=None):
        super().__init__('fragment', None, None, context)

    def render(self):
        return Markup(''.join(str(child.render()) for child in self._children))

    def to_tree(self):
        return {
            'type': 'fragment',
            'props': {},
            'children': [child.to_tree() for child in self._children],
        }


class DSLContext:
    """Collects and nests the elements created during one render."""

    def __init__(self, max_depth=None, on_element=None):
        if max_depth is None:
            max_depth = get_configuration().maximum_component_depth
        self.max_depth = max_depth
        self.on_element = on_element
        self._stack = []
        self._roots = []
        self._registered = set()

    # ------------------------------------------------------------------
    # Element tracking
    # ------------------------------------------------------------------

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def root_elements(self):
        return list(self._roots)

    @property
    def current_parent(self):
        return self._stack[-1] if self._stack else None

    def push(self, element):
        if len(self._stack) + 1 > self.max_depth:
            logger.error(f"[SECURITY] Maximum component depth ({self.max_depth}) exceeded at depth {len(self._stack) + 1}")
            raise SecurityError(
                "Maximum component nesting depth exceeded. This may indicate an infinite loop or attack."
            )
        self._stack.append(element)

    def pop(self, element):
        if not self._stack or self._stack[-1] is not element:
            raise SwiftUIError(f"Unbalanced container close for <{element.tag_name}>")
        self._stack.pop()

    def register_element(self, element):
        """Attach an element to the open container (or the root list) once."""
        if id(element) in self._registered:
            logger.debug(f"DSLContext: Skipping duplicate registration of {element.tag_name}")
            return element

        if self.on_element is not None:
            self.on_element(element)

        self._registered.add(id(element))
        parent = self.current_parent
        if parent is None:
            self._roots.append(element)
        else:
            parent._add_child(element)
        return element

    def adopt(self, element):
        """Move an already-registered element under the open container."""
        if id(element) not in self._registered:
            return self.register_element(element)

        parent = self.current_parent
        if parent is not None and any(node is element for node in parent._ancestors()):
            raise SwiftUIError(f"<{element.tag_name}> cannot be placed inside itself")

        if element._parent is not None:
            element._parent._remove_child(element)
        else:
            self._roots = [root for root in self._roots if root is not element]

        if parent is None:
            self._roots.append(element)
        else:
            parent._add_child(element)
        return element

    def flush_elements(self) -> Markup:
        """Render every root element and clear the root list."""
        logger.debug(f"DSLContext: Flushing {len(self._roots)} elements")
        html = Markup(''.join(str(element.render()) for element in self._roots))
        self._roots = []
        self._registered = set()
        return html

    def create_element(self, tag_name, content=None, **attrs) -> Element:
        element = Element(tag_name, content, None, self)
        apply_attributes(element, attrs)
        return self.register_element(element)

    def _render_slot(self, container, slot):
        with container:
            if slot is None:
                return
            if isinstance(slot, Element):
                self.adopt(slot)
            elif callable(slot):
                slot()
            elif isinstance(slot, (list, tuple)):
                for item in slot:
                    self._render_slot_item(item)
            else:
                self.text(str(slot))

    def _render_slot_item(self, item):
        if isinstance(item, Element):
            self.adopt(item)
        elif callable(item):
            item()
        else:
            self.text(str(item))

    def _render_items(self, container, items, builder):
        with container:
            for index, item in enumerate(items):
                if builder is None:
                    self.text(str(item))
                else:
                    builder(item, index)
        return container

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def vstack(self, alignment='center', spacing=8, justify=None, **attrs) -> Element:
        classes = ['flex', 'flex-col', f"items-{alignment_class(alignment)}", justify_class(justify)]

        if str(justify) in DISTRIBUTED_JUSTIFY:
            classes.append('h-full')
        elif _positive(spacing):
            classes.append(f"space-y-{spacing_token(spacing)}")

        attrs['class_'] = class_names(*classes, attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def hstack(self, alignment='center', spacing=8, justify=None, **attrs) -> Element:
        classes = ['flex', 'flex-row', f"items-{alignment_class(alignment)}", justify_class(justify)]

        if str(justify) in DISTRIBUTED_JUSTIFY:
            classes.append('w-full')
        elif _positive(spacing):
            classes.append(f"space-x-{spacing_token(spacing)}")

        attrs['class_'] = class_names(*classes, attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def zstack(self, **attrs) -> Element:
        attrs['class_'] = class_names('relative', attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def grid(self, columns=2, spacing=8, row_gap=None, column_gap=None, responsive=True,
             min_item_width=None, align='stretch', justify='start', auto_rows=None,
             auto_flow=None, masonry=False, **attrs) -> Element:
        """
        CSS grid container.

        Args:
            columns: Column count, or a breakpoint mapping like {'base': 1, 'md': 3}
            spacing: Gap in pixels or Tailwind scale units
            min_item_width: Auto-fit columns with this minimum width (px)
            responsive: Use the responsive presets for 1-6 columns
        """
        row_gap = spacing if row_gap is None else row_gap
        column_gap = spacing if column_gap is None else column_gap

        classes = ['grid']

        if min_item_width:
            classes.append(f"grid-cols-[repeat(auto-fit,minmax({int(min_item_width)}px,1fr))]")
        elif isinstance(columns, dict):
            for breakpoint, cols in columns.items():
                if str(breakpoint) == 'base':
                    classes.append(safe_grid_cols_class(cols))
                elif str(breakpoint) in BREAKPOINTS:
                    classes.append(f"{breakpoint}:{safe_grid_cols_class(cols)}")
        elif responsive and isinstance(columns, int) and columns in RESPONSIVE_GRID_PRESETS:
            classes.append(RESPONSIVE_GRID_PRESETS[columns])
        else:
            classes.append(safe_grid_cols_class(columns))

        if row_gap == column_gap:
            if _positive(row_gap):
                classes.append(f"gap-{spacing_token(row_gap)}")
        else:
            if _positive(column_gap):
                classes.append(f"gap-x-{spacing_token(column_gap)}")
            if _positive(row_gap):
                classes.append(f"gap-y-{spacing_token(row_gap)}")

        classes.append(GRID_ALIGN.get(str(align)))
        classes.append(justify_class(justify))

        if auto_rows:
            classes.append(AUTO_ROWS.get(str(auto_rows)))
        if auto_flow:
            classes.append(AUTO_FLOW.get(str(auto_flow)))

        if masonry:
            classes.append('masonry-grid')
            attrs.setdefault('data', {})['masonry'] = 'true'

        attrs['class_'] = class_names(*classes, attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def grid_item(self, size_type='flexible', size=None, min=None, max=None) -> dict:
        """Describe a lazy_vgrid column: fixed, flexible or adaptive."""
        if size_type == 'fixed':
            return {'type': 'fixed', 'size': size or 100}
        if size_type == 'flexible':
            return {'type': 'flexible', 'min': min, 'max': max}
        if size_type == 'adaptive':
            return {'type': 'adaptive', 'min': min or 80, 'max': max}
        return {'type': 'flexible'}

    def lazy_grid_classes(self, columns) -> str:
        if isinstance(columns, int):
            return LAZY_GRID_PRESETS.get(columns, safe_grid_cols_class(columns))
        if not isinstance(columns, (list, tuple)) or not columns:
            return ''

        types = [item.get('type') if isinstance(item, dict) else None for item in columns]
        if all(item_type == 'flexible' for item_type in types):
            return LAZY_GRID_PRESETS.get(len(columns), DEFAULT_LAZY_GRID)

        if 'adaptive' in types:
            min_size = columns[types.index('adaptive')].get('min') or 80
            if min_size <= 150:
                return 'grid-cols-2 sm:grid-cols-3 lg:grid-cols-4 xl:grid-cols-6'
            if min_size <= 250:
                return 'grid-cols-1 sm:grid-cols-2 lg:grid-cols-3 xl:grid-cols-4'
            return 'grid-cols-1 sm:grid-cols-2 lg:grid-cols-3'

        return DEFAULT_LAZY_GRID

    def lazy_vgrid(self, columns, spacing=20, **attrs) -> Element:
        """Isolated responsive grid; returns the inner grid that receives children."""
        attrs['class_'] = class_names('swift-ui-grid', attrs.pop('class_', None))
        attrs.setdefault('data', {})['grid_type'] = 'lazy-vgrid'

        outer = self.create_element('div', **attrs)
        with outer:
            inner = self.create_element(
                'div',
                class_=class_names('grid', f"gap-{spacing_token(spacing)}", self.lazy_grid_classes(columns)),
            )
        return inner

    def grid_item_wrapper(self, **attrs) -> Element:
        attrs['class_'] = class_names('contents', attrs.pop('class_', None))
        outer = self.create_element('div', **attrs)
        with outer:
            inner = self.create_element('div', class_='swift-ui-grid-item')
        return inner

    def spacer(self, min_length=None) -> Element:
        element = self.create_element('div', class_='flex-1')
        if min_length:
            element.style(f"min-height: {int(min_length)}px")
        return element

    def divider(self, **attrs) -> Element:
        attrs['class_'] = class_names('border-t border-gray-300', attrs.pop('class_', None))
        return self.create_element('hr', **attrs)

    def scroll_view(self, **attrs) -> Element:
        attrs['class_'] = class_names('overflow-auto', attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def swift_ui(self) -> Element:
        """Root fragment; renders only its children."""
        return self.register_element(Fragment(self))

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def text(self, content, **attrs) -> Element:
        return self.create_element('span', content, **attrs)

    def label(self, text=None, for_input=None, **attrs) -> Element:
        if for_input:
            attrs['for'] = for_input
        return self.create_element('label', text, **attrs)

    def button(self, title=None, **attrs) -> Element:
        return self.create_element('button', title, **attrs)

    def link(self, title=None, destination='#', **attrs) -> Element:
        attrs['href'] = validate_link_href(destination) or '#'
        return self.create_element('a', title, **attrs)

    def image(self, src=None, alt='', **attrs) -> Element:
        """
        Image with a validated source.

        Raises:
            ValueError: If src is missing
        """
        if not src:
            raise ValueError("image requires src attribute")

        src_str = str(src)
        if not src_str.lower().startswith(('http://', 'https://')):
            src_str = src_str.replace('..', '')

        safe_src = validate_image_src(src_str) or PLACEHOLDER_IMAGE

        attrs['src'] = safe_src
        attrs['alt'] = alt
        attrs.setdefault('loading', 'lazy')
        element = self.create_element('img', **attrs)
        element.style('max-width: 100%; height: auto; display: block;')
        return element

    def icon(self, name, size=16, **attrs) -> Element:
        attrs['class_'] = class_names('inline-block', attrs.pop('class_', None))
        attrs.setdefault('data', {})['icon'] = str(name)
        element = self.create_element('span', '', **attrs)
        element.style(f"width: {int(size)}px; height: {int(size)}px;")
        return element

    def spinner(self, size='md', border_color=None, spinner_color=None) -> Element:
        classes = class_names(
            SPINNER_SIZES.get(str(size), SPINNER_SIZES['md']),
            'animate-spin rounded-full border-2',
            border_color or 'border-gray-200',
            spinner_color or 'border-blue-600',
            'border-t-transparent',
        )
        return self.create_element('div', class_=classes, role='status', aria_label='Loading')

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    def form(self, **attrs) -> Element:
        return self.create_element('form', **attrs)

    def secure_form(self, action, method='POST', csrf_token=None, **attrs) -> Element:
        """
        Form with CSRF token and method override inputs.

        Hidden inputs are added up front; a with-block appends the fields after them.
        """
        method_upper = str(method).upper()
        attrs['action'] = validate_link_href(action) or '#'
        attrs['method'] = 'GET' if method_upper == 'GET' else 'POST'

        form = self.create_element('form', **attrs)
        with form:
            self.create_element('input', type='hidden', name='utf8', value='✓', autocomplete='off')

            if csrf_token and method_upper != 'GET':
                self.create_element('input', type='hidden', name='authenticity_token',
                                    value=csrf_token, autocomplete='off')

            if method_upper in METHOD_OVERRIDES:
                self.create_element('input', type='hidden', name='_method',
                                    value=method_upper.lower(), autocomplete='off')
        return form

    def input(self, **attrs) -> Element:
        return self.create_element('input', **attrs)

    def textfield(self, placeholder='', value='', **attrs) -> Element:
        attrs.setdefault('type', 'text')
        attrs['placeholder'] = placeholder
        attrs['value'] = value
        return self.create_element('input', **attrs)

    def textarea(self, content=None, **attrs) -> Element:
        return self.create_element('textarea', content, **attrs)

    def toggle(self, label_text, is_on=False, **attrs) -> Element:
        wrapper = self.create_element('label', **attrs)
        with wrapper:
            self.create_element('input', type='checkbox', checked=bool(is_on))
            self.create_element('span', label_text)
        return wrapper

    def slider(self, value=50, min=0, max=100, step=1, **attrs) -> Element:
        attrs.update({'type': 'range', 'value': value, 'min': min, 'max': max, 'step': step})
        return self.create_element('input', **attrs)

    def select(self, name=None, selected=None, **attrs) -> Element:
        if name:
            attrs['name'] = name
        if selected:
            attrs['value'] = selected
        return self.create_element('select', **attrs)

    def option(self, value, text=None, selected=False, **attrs) -> Element:
        attrs['value'] = value
        if selected:
            attrs['selected'] = True
        return self.create_element('option', value if text is None else text, **attrs)

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    def card(self, elevation=1, header=None, content=None, actions=None, **attrs) -> Element:
        """
        Card container with optional header/content/actions slots.

        Slots accept a string, an Element, a callable or (for actions) a list.
        Without slots, the card itself is the container for a with-block.
        """
        shadow = CARD_SHADOWS.get(elevation, 'shadow-2xl') if isinstance(elevation, int) else 'shadow'
        attrs['class_'] = class_names('rounded-lg bg-white', shadow, attrs.pop('class_', None))

        card = self.create_element('div', **attrs)
        if header is None and content is None and actions is None:
            return card

        with card:
            if header is not None:
                self._render_slot(self.create_element('div', class_='p-4 border-b'), header)

            body = self.create_element('div', class_='p-4')
            if content is not None:
                self._render_slot(body, content)

            if actions is not None:
                footer = self.create_element('div', class_='p-4 border-t')
                if isinstance(actions, (list, tuple)):
                    with footer:
                        self._render_slot(self.hstack(spacing=8), actions)
                else:
                    self._render_slot(footer, actions)

        return card

    def card_header(self, **attrs) -> Element:
        attrs['class_'] = class_names('p-4 border-b', attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def card_content(self, **attrs) -> Element:
        attrs['class_'] = class_names('p-4', attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def card_footer(self, **attrs) -> Element:
        attrs['class_'] = class_names('p-4 border-t', attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def card_section(self, **attrs) -> Element:
        attrs['class_'] = class_names('p-4', attrs.pop('class_', None))
        return self.create_element('div', **attrs)

    def with_form(self, **attrs) -> Element:
        """Plain div grouping form fields; pair it with form() for a real <form>."""
        return self.create_element('div', **attrs)

    def with_sidebar(self, **attrs) -> Element:
        return self.create_element('div', **attrs)

    def with_header(self, **attrs) -> Element:
        return self.create_element('div', **attrs)

    def with_footer(self, **attrs) -> Element:
        return self.create_element('div', **attrs)

    def list(self, **attrs) -> Element:
        return self.create_element('ul', **attrs)

    def list_item(self, content=None, **attrs) -> Element:
        return self.create_element('li', content, **attrs)

    # ------------------------------------------------------------------
    # Plain HTML tags
    # ------------------------------------------------------------------

    def div(self, content=None, **attrs) -> Element:
        return self.create_element('div', content, **attrs)

    def span(self, content=None, **attrs) -> Element:
        return self.create_element('span', content, **attrs)

    def section(self, content=None, **attrs) -> Element:
        return self.create_element('section', content, **attrs)

    def article(self, content=None, **attrs) -> Element:
        return self.create_element('article', content, **attrs)

    def header(self, content=None, **attrs) -> Element:
        return self.create_element('header', content, **attrs)

    def footer(self, content=None, **attrs) -> Element:
        return self.create_element('footer', content, **attrs)

    def nav(self, content=None, **attrs) -> Element:
        return self.create_element('nav', content, **attrs)

    def a(self, content=None, href='#', **attrs) -> Element:
        attrs['href'] = validate_link_href(href) or '#'
        return self.create_element('a', content, **attrs)

    def h1(self, content=None, **attrs) -> Element:
        return self.create_element('h1', content, **attrs)

    def h2(self, content=None, **attrs) -> Element:
        return self.create_element('h2', content, **attrs)

    def h3(self, content=None, **attrs) -> Element:
        return self.create_element('h3', content, **attrs)

    def h4(self, content=None, **attrs) -> Element:
        return self.create_element('h4', content, **attrs)

    def h5(self, content=None, **attrs) -> Element:
        return self.create_element('h5', content, **attrs)

    def h6(self, content=None, **attrs) -> Element:
        return self.create_element('h6', content, **attrs)

    def paragraph(self, content=None, **attrs) -> Element:
        return self.create_element('p', content, **attrs)

    def table(self, **attrs) -> Element:
        return self.create_element('table', **attrs)

    def thead(self, **attrs) -> Element:
        return self.create_element('thead', **attrs)

    def tbody(self, **attrs) -> Element:
        return self.create_element('tbody', **attrs)

    def tr(self, **attrs) -> Element:
        return self.create_element('tr', **attrs)

    def th(self, content=None, **attrs) -> Element:
        return self.create_element('th', content, **attrs)

    def td(self, content=None, **attrs) -> Element:
        return self.create_element('td', content, **attrs)

    # ------------------------------------------------------------------
    # Data tables
    # ------------------------------------------------------------------

    def simple_table(self, headers, rows, container_class='', table_class='min-w-full', **attrs) -> Element:
        """Headers plus rows of plain cell values; the header row is skipped when headers is empty."""
        attrs['class_'] = class_names(container_class, attrs.pop('class_', None))
        wrapper = self.create_element('div', **attrs)
        with wrapper:
            with self.create_element('div', class_='overflow-x-auto'):
                with self.table(class_=table_class):
                    if headers:
                        with self.thead():
                            with self.tr():
                                for header in headers:
                                    self.th(str(header), class_='px-4 py-2 text-left')
                    with self.tbody():
                        for row in rows:
                            with self.tr(class_='border-t'):
                                for cell in row:
                                    self.td(str(cell), class_='px-4 py-2')
        return wrapper

    def data_table(self, data, columns, title=None, add_button=None, sortable=True, paginate=False,
                   per_page=10, current_page=1, total_count=None, search=None,
                   empty_message='No data available', table_class='min-w-full divide-y divide-gray-200',
                   container_class='', elevation=2) -> Element:
        """
        Card-wrapped table with header, search bar, formatted cells and pagination.

        Each column is a dict with:
            key: Row key, a list of keys for nested values, or a callable(row)
            label: Header text
            format: badge, avatar_with_text, currency, date or actions
            sortable: Show the sort indicator (when the table is sortable)
            header_class / cell_class: Override the default cell classes

        Args:
            add_button: {'text': ..., 'destination': ...} shown beside the title
            search: {'placeholder': ..., 'value': ..., 'name': ...}
            total_count: Total rows across all pages (defaults to len(data))
        """
        rows = list(data or [])
        if total_count is None:
            total_count = len(rows)

        wrapper = self.create_element('div', class_=container_class)
        with wrapper:
            with self.card(elevation=elevation):
                if title or add_button:
                    self._table_title(title, add_button)

                if search:
                    search_options = search if isinstance(search, dict) else {}
                    with self.create_element('div', class_='px-6 py-4 border-b'):
                        self.textfield(
                            placeholder=search_options.get('placeholder', 'Search...'),
                            value=search_options.get('value', ''),
                            name=search_options.get('name', 'search'),
                            class_='w-full px-4 py-2 border rounded-md focus:outline-none focus:ring-2 focus:ring-blue-500',
                        )

                with self.create_element('div', class_='overflow-x-auto'):
                    if not rows:
                        with self.create_element('div', class_='text-center py-12'):
                            self.text(empty_message).text_color('gray-500')
                    else:
                        self._table_body(rows, columns, sortable, table_class)

                if paginate and rows:
                    self.render_pagination(current_page, per_page, total_count)
        return wrapper

    def _table_title(self, title, add_button):
        with self.create_element('div', class_='px-6 py-4 border-b'):
            with self.hstack(justify='between'):
                if title:
                    self.h2(str(title), class_='text-xl font-semibold text-gray-900')
                else:
                    self.div()

                if isinstance(add_button, dict):
                    label_text = add_button.get('text', 'Add')
                    with self.link(destination=add_button.get('destination', '#')):
                        (self.button(label_text).bg('blue-600').text_color('white').px(4).py(2)
                         .rounded('md').font_weight('medium').hover('bg-blue-700'))

    def _table_body(self, rows, columns, sortable, table_class):
        with self.table(class_=table_class):
            with self.thead(class_='bg-gray-50 border-b'):
                with self.tr():
                    for column in columns:
                        with self.th(class_=column.get('header_class', TABLE_HEADER_CELL)):
                            if sortable and column.get('sortable'):
                                with self.button(class_='group inline-flex items-center'):
                                    self.text(column.get('label', ''))
                                    self.span('↕', class_='ml-2 text-gray-400')
                            else:
                                self.text(column.get('label', ''))

            with self.tbody(class_='bg-white divide-y divide-gray-200'):
                for row in rows:
                    with self.tr(class_='hover:bg-gray-50'):
                        for column in columns:
                            with self.td(class_=column.get('cell_class', TABLE_BODY_CELL)):
                                self._table_cell(row, column)

    def _table_cell(self, row, column):
        """Draw one data_table cell according to column['format']."""
        value = nested_value(row, column.get('key'))
        cell_format = column.get('format')

        if cell_format == 'badge':
            badges = column.get('badge_map') or BADGE_CLASSES
            badge_class = badges.get(value, DEFAULT_BADGE) if isinstance(value, str) else DEFAULT_BADGE
            return self.span(str(value), class_=f"{BADGE_BASE} {badge_class}")
        if cell_format == 'avatar_with_text':
            return self._avatar_with_text(value)
        if cell_format == 'currency':
            return self.text(format_currency(value, column.get('currency', '$')))
        if cell_format == 'date':
            return self.text(format_date(value, column.get('date_format')))
        if cell_format == 'actions':
            return self._row_actions(row, column.get('actions') or [])
        return self.text('' if value is None else str(value))

    def _avatar_with_text(self, name):
        name_str = '' if name is None else str(name)
        initials = ''.join(word[0] for word in name_str.split()).upper()

        with self.hstack(spacing=3) as row:
            with self.create_element('div', class_='h-10 w-10 rounded-full bg-gray-200 flex items-center justify-center'):
                self.span(initials, class_='text-sm font-medium text-gray-600')
            self.text(name_str).font_weight('medium').text_color('gray-900')
        return row

    def _row_actions(self, row, actions):
        with self.hstack(spacing=2) as links:
            for action in actions:
                if isinstance(action, dict):
                    path = action.get('path', '#')
                    if callable(path):
                        path = path(row)
                    self.link(action.get('label', ''), destination=path,
                              class_=action.get('class', ROW_ACTION_CLASSES['edit']))
                elif action in ROW_ACTION_CLASSES:
                    self.link(str(action).capitalize(), destination='#', class_=ROW_ACTION_CLASSES[action])
        return links

    def render_pagination(self, current_page, per_page, total_count) -> Element:
        """Results summary plus Previous/page/Next buttons; page numbers only for five pages or fewer."""
        per_page = max(int(per_page), 1)
        total_count = int(total_count)
        current_page = int(current_page)
        total_pages = math.ceil(total_count / per_page)
        first = (current_page - 1) * per_page + 1
        last = min(current_page * per_page, total_count)

        footer = self.create_element('div', class_='px-6 py-4 border-t')
        with footer:
            with self.hstack(justify='between'):
                self.text(f"Showing {first} to {last} of {total_count} results").text_sm().text_color('gray-700')

                with self.hstack(spacing=2):
                    self._page_button('Previous').disabled(current_page <= 1)

                    if total_pages <= 5:
                        for page in range(1, total_pages + 1):
                            if page == current_page:
                                self.button(str(page)).px(3).py(1).bg('blue-600').text_color('white').rounded('md').text_sm()
                            else:
                                self._page_button(str(page))

                    self._page_button('Next').disabled(current_page >= total_pages)
        return footer

    def _page_button(self, label_text):
        return self.button(label_text).px(3).py(1).border().rounded('md').text_sm()

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def list_items(self, items, builder=None, **attrs) -> Element:
        """Render items into a space-y-4 list; builder(item, index) draws each one."""
        attrs['class_'] = class_names('space-y-4', attrs.pop('class_', None))
        return self._render_items(self.create_element('div', **attrs), items, builder)

    def grid_list(self, items, columns=3, builder=None, **attrs) -> Element:
        attrs['class_'] = class_names('grid gap-4', safe_grid_cols_class(columns), attrs.pop('class_', None))
        return self._render_items(self.create_element('div', **attrs), items, builder)

    def vstack_collection(self, items, spacing=8, builder=None, **attrs) -> Element:
        return self._render_items(self.vstack(spacing=spacing, **attrs), items, builder)

    def hstack_collection(self, items, spacing=8, builder=None, **attrs) -> Element:
        return self._render_items(self.hstack(spacing=spacing, **attrs), items, builder)

    def grid_collection(self, items, columns=3, spacing=8, builder=None, **attrs) -> Element:
        return self._render_items(self.grid(columns=columns, spacing=spacing, **attrs), items, builder)


def apply_attributes(element, attrs):
    """
    Apply builder keyword arguments to an element.

    class_ (or class) sets classes, data expands to data-* attributes, style
    is validated, and every other underscore becomes a hyphen (aria_label ->
    aria-label).
    """
    for key, value in attrs.items():
        if value is None:
            continue

        if key in ('class_', 'class'):
            element.tw(value)
        elif key == 'data':
            element.data(value)
        elif key == 'style':
            element.style(value)
        else:
            element.attr(key.rstrip('_').replace('_', '-'), value)
    return element


# Builders exposed to playground code, keyed by the name user code calls
BUILDER_NAMES = (
    'vstack', 'hstack', 'zstack', 'grid', 'grid_item', 'lazy_vgrid', 'grid_item_wrapper',
    'text', 'label', 'button', 'link', 'image', 'icon', 'textfield', 'textarea', 'toggle',
    'slider', 'select', 'option', 'form', 'secure_form', 'card', 'card_header',
    'card_content', 'card_footer', 'card_section', 'with_form', 'with_sidebar', 'with_header',
    'with_footer', 'list_item', 'scroll_view', 'spacer', 'divider', 'spinner', 'div', 'span',
    'section', 'article', 'header', 'footer', 'nav', 'a', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'paragraph', 'table', 'thead', 'tbody', 'tr', 'th', 'td', 'simple_table', 'data_table',
    'render_pagination', 'list_items', 'grid_list', 'vstack_collection', 'hstack_collection',
    'grid_collection', 'swift_ui',
)

# Builders whose natural name is a Python builtin get an alias in playground code
BUILDER_ALIASES = {
    'list_view': 'list',
    'input_field': 'input',
}


def builder_namespace(context: DSLContext) -> dict:
    namespace = {name: getattr(context, name) for name in BUILDER_NAMES}
    for alias, method_name in BUILDER_ALIASES.items():
        namespace[alias] = getattr(context, method_name)
    return namespace
