"""
tailwind.py - Tailwind Spacing and Layout Tokens
SwiftUI Playground
"""

# Each Tailwind spacing unit is 0.25rem (4px)
PIXEL_TO_SPACING = {
    0: '0',
    1: 'px',
    2: '0.5',
    4: '1',
    6: '1.5',
    8: '2',
    10: '2.5',
    12: '3',
    14: '3.5',
    16: '4',
    20: '5',
    24: '6',
    28: '7',
    32: '8',
    36: '9',
    40: '10',
    44: '11',
    48: '12',
    56: '14',
    64: '16',
    80: '20',
    96: '24',
    112: '28',
    128: '32',
    144: '36',
    160: '40',
    176: '44',
    192: '48',
    208: '52',
    224: '56',
    240: '60',
    256: '64',
    288: '72',
    320: '80',
    384: '96',
}

# Values below this are already on the Tailwind scale
TAILWIND_SCALE_VALUES = [0, 0.5, 1, 1.5, 2, 2.5, 3, 3.5, 4, 5, 6]

ALIGNMENTS = {
    'top': 'start',
    'start': 'start',
    'center': 'center',
    'bottom': 'end',
    'end': 'end',
}

JUSTIFICATIONS = {
    'start': 'justify-start',
    'center': 'justify-center',
    'end': 'justify-end',
    'between': 'justify-between',
    'around': 'justify-around',
    'evenly': 'justify-evenly',
}

# justify-between/around/evenly distribute space themselves
DISTRIBUTED_JUSTIFY = ('between', 'around', 'evenly')


def convert_spacing(value) -> str:
    """
    Convert a pixel value to the Tailwind spacing scale.

    Strings pass through. Known pixel values map directly; anything else is
    divided by 4 and rounded to one decimal.
    """
    if isinstance(value, str):
        return value

    num_value = int(value)
    if num_value in PIXEL_TO_SPACING:
        return PIXEL_TO_SPACING[num_value]

    units = round(num_value / 4.0, 1)
    if units == int(units):
        return str(int(units))
    return str(units)


def is_pixel_value(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if value in TAILWIND_SCALE_VALUES:
        return False
    return value > 6


def alignment_class(alignment) -> str:
    return ALIGNMENTS.get(str(alignment), 'center')


def justify_class(justify):
    if justify is None:
        return None
    return JUSTIFICATIONS.get(str(justify))


def class_names(*args) -> str:
    """Join non-blank class strings, dropping duplicates."""
    seen = []
    for arg in args:
        if arg is None:
            continue
        for css_class in str(arg).split():
            if css_class not in seen:
                seen.append(css_class)
    return ' '.join(seen)
