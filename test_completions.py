#!/usr/bin/env python3
"""
test_completions.py - Test editor completions and signature help
"""

import sys

from completions import CompletionService, signatures, MODIFIERS


def complete(line_text, context_before=''):
    """Completions with the cursor at the end of line_text."""
    context = context_before + line_text
    line_number = context.count('\n') + 1
    return CompletionService(context, {'lineNumber': line_number, 'column': len(line_text) + 1}).generate_completions()


def test_modifiers_after_dot():
    items = complete('text("hi").')

    assert len(items) == len(MODIFIERS)
    assert all(item['kind'] == 'method' for item in items)

    by_label = {item['label']: item for item in items}
    assert by_label['bg']['insertTextFormat'] == 2
    assert by_label['bg']['insertText'].startswith('bg(${1|"blue-500","red-500"')
    assert by_label['tw']['insertText'] == 'tw(${1:classes})'
    assert by_label['flex']['insertText'] == 'flex()'
    assert by_label['flex']['insertTextFormat'] == 1
    assert by_label['padding']['detail'] == '(amount)'
    print("✅ Modifiers after a dot")


def test_prefix_filter_is_case_insensitive():
    labels = [item['label'] for item in complete('text("hi").Fo')]

    assert labels == ['focus', 'font_bold', 'font_size', 'font_weight', 'foreground_color']
    print("✅ Prefix filter")


def test_modifier_values():
    items = complete('text("x").bg("bl')

    assert [item['label'] for item in items] == ['black', 'blue-500']
    assert all(item['kind'] == 'value' for item in items)
    assert complete('text("x").tw("') == []
    print("✅ Modifier values")


def test_top_level_builders_and_snippets():
    items = complete('')
    kinds = {item['label']: item['kind'] for item in items}

    assert kinds['vstack'] == 'function'
    assert kinds['with vstack'] == 'snippet'
    assert 'list_view' in kinds and 'list' not in kinds

    labels = [item['label'] for item in complete('    vs')]
    assert labels == ['vstack', 'with vstack']

    labels = [item['label'] for item in complete('wi')]
    assert labels == [
        'with card', 'with form', 'with grid', 'with hstack', 'with vstack',
        'with_footer', 'with_form', 'with_header', 'with_sidebar',
    ]
    assert [item['label'] for item in complete('data_')] == ['data_table']
    assert [item['label'] for item in complete('simple')] == ['simple_table']
    print("✅ Builders and snippets")


def test_snippet_bodies():
    button = complete('butt')[0]
    assert button['label'] == 'button'
    assert button['insertText'].startswith('button(${1:"Click Me"})')

    snippet = next(item for item in complete('with vs') if item['label'] == 'with vstack')
    assert snippet['insertText'] == 'with vstack(spacing=${1:16}):\n    ${2:text("Hello")}'
    assert snippet['documentation'] == 'with vstack(spacing=16):\n    text("Hello")'

    hstack = next(item for item in complete('hs') if item['label'] == 'with hstack')
    assert hstack['documentation'].startswith('with hstack(justify="start")')
    print("✅ Snippet bodies")


def test_cursor_position():
    """Only the text before the cursor counts."""
    items = complete('    text("a").sh', context_before='with vstack():\n')
    assert [item['label'] for item in items] == ['shadow']

    service = CompletionService('text("a").bg("blue-500")', {'lineNumber': 1, 'column': 11})
    assert service.text_before_cursor() == 'text("a").'
    assert len(service.generate_completions()) == len(MODIFIERS)

    service = CompletionService('', None)
    assert service.text_before_cursor() == ''
    print("✅ Cursor position")


def test_finalize_dedupes_and_orders():
    results = [
        {'label': 'Text'},
        {'label': 'table'},
        {'label': 'text'},
        {'label': 'text'},
    ]
    ordered = CompletionService._finalize(results, 'te')

    assert [item['label'] for item in ordered] == ['text', 'Text', 'table']
    print("✅ Dedupe and ordering")


def test_signatures():
    labels = [signature['label'] for signature in signatures()]

    assert labels == [
        'text(content)',
        'button(title)',
        'vstack(alignment, spacing, justify)',
        'hstack(alignment, spacing, justify)',
    ]
    assert all(signature['parameters'] for signature in signatures())
    print("✅ Signatures")


def run_all_tests():
    """Run all completion tests."""
    print("\n" + "="*60)
    print("🧪 Testing Editor Completions")
    print("="*60 + "\n")

    tests = [
        test_modifiers_after_dot,
        test_prefix_filter_is_case_insensitive,
        test_modifier_values,
        test_top_level_builders_and_snippets,
        test_snippet_bodies,
        test_cursor_position,
        test_finalize_dedupes_and_orders,
        test_signatures,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"❌ {test.__name__} FAILED: {e}")
            failed += 1
        except Exception as e:
            print(f"❌ {test.__name__} ERROR: {e}")
            failed += 1

    print("\n" + "="*60)
    print(f"📊 Results: {passed} passed, {failed} failed")
    print("="*60 + "\n")

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
