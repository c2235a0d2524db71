"""
examples.py - Playground Starter Code
SwiftUI Playground

Default editor contents, the component palette and the example gallery
served by GET /playground/.
"""

DEFAULT_CODE = '''\
with swift_ui():
    with vstack(spacing=16).padding(24).bg("white").corner_radius("lg").shadow("md"):
        text("Welcome to the SwiftUI Playground!").font_size("2xl").font_weight("bold").text_color("gray-800")

        text("Build layouts with Python and Tailwind").text_color("gray-600")

        with hstack(spacing=12):
            button("Get Started").bg("blue-500").text_color("white").px(4).py(2).rounded("lg").hover("bg-blue-600")

            button("Learn More").bg("gray-200").text_color("gray-800").px(4).py(2).rounded("lg").hover("bg-gray-300")
'''

COMPONENTS = {
    'Basic': [
        {'name': 'Text', 'code': 'text("Hello World")'},
        {'name': 'Button', 'code': 'button("Click Me").bg("blue-500").text_color("white").px(4).py(2).rounded("md")'},
        {'name': 'Image', 'code': 'image(src="https://picsum.photos/200", alt="Placeholder").rounded("lg")'},
    ],
    'Layout': [
        {'name': 'VStack', 'code': 'with vstack(spacing=16):\n    text("Item 1")\n    text("Item 2")'},
        {'name': 'HStack', 'code': 'with hstack(spacing=16):\n    text("Left")\n    text("Right")'},
        {'name': 'Grid', 'code': 'with grid(columns=3, spacing=16):\n    for i in range(1, 7):\n        text(f"Item {i}")'},
    ],
    'Components': [
        {'name': 'Card', 'code': 'with card(elevation=2).padding(16):\n    text("Card Title").font_weight("bold")\n    text("Card content goes here")'},
        {'name': 'List', 'code': 'with list_view():\n    for item in ["Apple", "Banana", "Cherry"]:\n        list_item(item)'},
    ],
    'Forms': [
        {
            'name': 'Form',
            'code': (
                'with form(action="#").p(4):\n'
                '    with vstack(alignment="start", spacing=12):\n'
                '        label("Email", for_input="email")\n'
                '        textfield(placeholder="you@example.com", name="email", id="email")\n'
                '        button("Submit", type="submit").bg("blue-500").text_color("white").px(4).py(2).rounded("md")'
            ),
        },
        {'name': 'TextField', 'code': 'textfield(placeholder="Enter text...", name="field")'},
    ],
    'Tables': [
        {
            'name': 'Simple Table',
            'code': (
                'with table().w("full"):\n'
                '    with thead():\n'
                '        with tr():\n'
                '            th("Name")\n'
                '            th("Role")\n'
                '    with tbody():\n'
                '        with tr():\n'
                '            td("Ada")\n'
                '            td("Engineer")'
            ),
        },
        {
            'name': 'Table',
            'code': (
                'rows = [["Ada", "Engineer"], ["Grace", "Admiral"], ["Linus", "Maintainer"]]\n'
                'with table().w("full").border():\n'
                '    with thead().bg("gray-100"):\n'
                '        with tr():\n'
                '            for heading in ["Name", "Role"]:\n'
                '                th(heading).px(4).py(2).text_align("left")\n'
                '    with tbody():\n'
                '        for name, role in rows:\n'
                '            with tr():\n'
                '                td(name).px(4).py(2)\n'
                '                td(role).px(4).py(2)'
            ),
        },
    ],
}

EXAMPLES = [
    {
        'name': 'Product Card',
        'description': 'A card with an image, price and call to action',
        'code': '''\
with card(elevation=3).max_w("sm"):
    image(src="https://picsum.photos/400/250", alt="Product").w("full")
    with vstack(alignment="start", spacing=8).p(4):
        text("Wireless Headphones").font_size("lg").font_weight("semibold")
        text("$129.00").text_color("green-600").font_weight("bold")
        button("Add to Cart").bg("blue-500").text_color("white").px(4).py(2).rounded("md").w("full")
''',
    },
    {
        'name': 'Feature Grid',
        'description': 'A responsive grid generated from a list of features',
        'code': '''\
features = [
    ("Fast", "Renders in milliseconds"),
    ("Safe", "Every attribute is validated"),
    ("Composable", "Nest stacks, grids and cards"),
]
with grid(columns=3, spacing=16):
    for title, body in features:
        with card(elevation=1).p(4):
            text(title).font_weight("bold")
            text(body).text_color("gray-600").font_size("sm")
''',
    },
    {
        'name': 'Counter',
        'description': 'Buttons wired to a Stimulus controller',
        'code': '''\
with hstack(spacing=12).data({"controller": "counter", "counter-count-value": 0}):
    button("-").data({"action": "click->counter#decrement"}).px(3).py(1).border()
    text("0").data({"counter-target": "count"}).font_size("xl")
    button("+").data({"action": "click->counter#increment"}).px(3).py(1).border()
''',
    },
    {
        'name': 'Login Form',
        'description': 'A form with labelled inputs and a submit button',
        'code': '''\
with card(elevation=2).p(6).max_w("md"):
    with form(action="#"):
        with vstack(alignment="start", spacing=12):
            text("Sign in").font_size("xl").font_weight("bold")
            label("Email", for_input="email")
            textfield(placeholder="you@example.com", name="email", id="email").w("full")
            label("Password", for_input="password")
            input_field(type="password", name="password", id="password").w("full").border().rounded("md").p(2)
            button("Sign In", type="submit").bg("blue-500").text_color("white").px(4).py(2).rounded("md")
''',
    },
    {
        'name': 'Todo List',
        'description': 'A list built with a loop and conditional styling',
        'code': '''\
todos = [("Write docs", True), ("Ship release", False), ("Celebrate", False)]
with vstack(alignment="start", spacing=8):
    text("Today").font_size("lg").font_weight("bold")
    with list_view().w("full"):
        for title, done in todos:
            item = list_item(title).p(2).border_b()
            if done:
                item.tw("line-through text-gray-400")
''',
    },
]
