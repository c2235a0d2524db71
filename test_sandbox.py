#!/usr/bin/env python3
"""
test_sandbox.py - Test the sandbox validation, budgets and execution
"""

import sys

from sandbox import (
    CodeValidator, Executor, SandboxConfig, ExecutionResult,
    format_syntax_error, extract_stimulus_controllers, NO_OUTPUT_HTML
)
from examples import DEFAULT_CODE, COMPONENTS, EXAMPLES
from config import reset_configuration


def test_safe_code():
    """Test that valid DSL code passes validation."""
    validator = CodeValidator()

    safe_code = """
with vstack(spacing=16):
    text("Hello").font_size("xl")
    for i in range(3):
        button(f"Button {i}").bg("blue-500")
"""
    is_valid, violations = validator.validate(safe_code)
    assert is_valid, f"Safe code should pass, got violations: {violations}"
    print("✅ Safe code validation passed")


def test_eval_blocked():
    """Test that eval() is blocked."""
    validator = CodeValidator()

    is_valid, violations = validator.validate('eval("text(1)")')
    assert not is_valid, "eval() should be blocked"
    assert any("eval" in v for v in violations), "Should report eval violation"
    assert any("(line 1)" in v for v in violations), "Should report the line"
    print("✅ eval() blocking works")


def test_import_blocked():
    """Test that imports are blocked."""
    validator = CodeValidator()

    is_valid, violations = validator.validate("import os\nos.system('ls')")
    assert not is_valid, "import should be blocked"
    assert any("Import is not allowed" in v for v in violations)

    is_valid, violations = validator.validate("from os import path")
    assert not is_valid, "from-import should be blocked"
    print("✅ Import blocking works")


def test_dunder_escape_blocked():
    """Test that attribute walks to interpreter internals are blocked."""
    validator = CodeValidator()

    is_valid, violations = validator.validate("x = ().__class__.__bases__[0].__subclasses__()")
    assert not is_valid, "dunder access should be blocked"
    assert any("__class__" in v for v in violations)

    is_valid, violations = validator.validate('text("a")._context')
    assert not is_valid, "private element state should be unreachable"
    print("✅ Dunder escape blocking works")


def test_loops_and_definitions_blocked():
    """Test that while loops, functions and lambdas are rejected."""
    validator = CodeValidator()

    is_valid, violations = validator.validate("while True:\n    pass")
    assert not is_valid, "while loops should be blocked"
    assert any("While is not allowed" in v for v in violations)

    is_valid, violations = validator.validate("def f():\n    pass")
    assert not is_valid, "function definitions should be blocked"

    is_valid, violations = validator.validate("f = lambda: 1")
    assert not is_valid, "lambdas should be blocked"
    print("✅ Loop and definition blocking works")


def test_builder_reassignment_blocked():
    """Test that builders and safe builtins cannot be rebound."""
    validator = CodeValidator()

    is_valid, violations = validator.validate("text = 1")
    assert not is_valid, "builder names should be protected"
    assert any("Assignment to 'text'" in v for v in violations)

    is_valid, violations = validator.validate("range = list")
    assert not is_valid, "overridden builtins should be protected"
    print("✅ Builder reassignment blocking works")


def test_output_amplifiers_blocked():
    """Test that string padding methods and wide format specs are rejected."""
    validator = CodeValidator()

    is_valid, violations = validator.validate('s = "a".ljust(50000)')
    assert not is_valid, "ljust should be blocked"

    is_valid, violations = validator.validate('s = f"{1:>500}"')
    assert not is_valid, "wide format specs should be blocked"
    assert any("Format width" in v for v in violations)

    is_valid, violations = validator.validate('s = f"{1:>5}"')
    assert is_valid, f"narrow format specs should pass: {violations}"
    print("✅ Output amplifier blocking works")


def test_sanitize_raises_on_invalid():
    """Test that sanitize() raises ValueError for invalid code."""
    validator = CodeValidator()

    try:
        validator.sanitize("eval('alert(1)')")
        assert False, "sanitize() should raise ValueError"
    except ValueError as e:
        assert "validation failed" in str(e)

    assert validator.sanitize('text("ok")') == 'text("ok")'
    print("✅ sanitize() raises ValueError correctly")


def test_config_defaults():
    """Test SandboxConfig defaults."""
    config = SandboxConfig()
    assert config.max_execution_time_ms == 5000
    assert config.max_iterations == 10000
    assert config.max_elements == 2000
    assert config.max_code_length == 20000

    assert SandboxConfig(max_iterations=5).max_iterations == 5
    try:
        SandboxConfig(enable_network=True)
        assert False, "Unknown options should raise"
    except AttributeError:
        pass
    print("✅ SandboxConfig defaults correct")


def test_execute_renders_html():
    """Test a successful run renders escaped HTML and a component tree."""
    reset_configuration()
    result = Executor().execute('with vstack():\n    text("a")\n    text("<b>")')

    assert result.success, result.error
    assert '<div class="flex flex-col items-center space-y-2">' in result.html
    assert '<span>a</span>' in result.html
    assert '&lt;b&gt;' in result.html, "Text content must be escaped"

    tree = result.component_tree
    assert tree['type'] == 'div'
    assert [child['type'] for child in tree['children']] == ['span', 'span']
    assert tree['children'][0]['props']['content'] == 'a'
    print("✅ Execution renders HTML and tree")


def test_multiple_roots_make_fragment():
    result = Executor().execute('text("one")\ntext("two")')

    assert result.success, result.error
    assert result.component_tree['type'] == 'fragment'
    assert len(result.component_tree['children']) == 2
    print("✅ Multiple roots produce a fragment tree")


def test_no_output():
    result = Executor().execute("x = 1")

    assert result.success
    assert result.html == NO_OUTPUT_HTML
    assert result.component_tree is None
    print("✅ Empty output handled")


def test_print_renders_text():
    result = Executor().execute('print("hi", 2)')

    assert result.success, result.error
    assert 'hi 2' in result.html
    assert 'p-2 bg-gray-100 rounded-md' in result.html
    print("✅ print() renders a styled text element")


def test_iteration_limit():
    """Test that nested loops stop at the iteration budget."""
    executor = Executor(SandboxConfig(max_iterations=100))
    result = executor.execute("for i in range(50):\n    for j in range(50):\n        pass")

    assert not result.success
    assert result.error.startswith("SecurityError: Iteration limit of 100 exceeded")
    print("✅ Iteration limit enforced")


def test_range_limit():
    result = Executor().execute("for i in range(1000000):\n    pass")

    assert not result.success
    assert "range() larger than 10000" in result.error
    print("✅ range() size limit enforced")


def test_element_limit():
    executor = Executor(SandboxConfig(max_elements=5))
    result = executor.execute('for i in range(10):\n    text("x")')

    assert not result.success
    assert "Element limit of 5 exceeded" in result.error
    print("✅ Element limit enforced")


def test_sequence_growth_blocked():
    """Test that string/list multiplication and concatenation are bounded."""
    result = Executor().execute('s = "a" * 100000')
    assert not result.success
    assert result.error.startswith("SecurityError: Sequence length limit")

    result = Executor().execute('s = "a" * 10\ns += "b"\ntext(s)')
    assert result.success, result.error
    assert 'aaaaaaaaaab' in result.html

    result = Executor().execute('s = "%s" % "x"')
    assert not result.success
    assert "%-formatting is not allowed" in result.error

    result = Executor().execute('text(str(7 % 3))')
    assert result.success, result.error
    print("✅ Sequence growth bounded")


def test_security_violation_message():
    result = Executor().execute("open('/etc/passwd')")

    assert not result.success
    assert result.error.startswith("SecurityError: Unsafe operation detected:")
    assert "Call to 'open' is not allowed" in result.error
    print("✅ Security violations reported")


def test_code_length_limit():
    executor = Executor(SandboxConfig(max_code_length=10))
    result = executor.execute('text("this is far too long")')

    assert not result.success
    assert result.error.startswith("SecurityError: Code exceeds maximum length of 10")
    print("✅ Code length limit enforced")


def test_syntax_error_context():
    """Test that syntax errors include a marked source window."""
    result = Executor().execute("with vstack():\n    text('a'\n")

    assert not result.success
    assert result.error.startswith("Syntax Error:")
    assert "→" in result.error

    error = SyntaxError("invalid syntax", ("<playground>", 3, 1, "c"))
    formatted = format_syntax_error(error, "a\nb\nc\nd\ne")
    assert formatted.startswith("invalid syntax on line 3\n\n")
    assert "    1 | a" in formatted
    assert "→   3 | c" in formatted
    assert "    4 | d" in formatted
    assert "5 | e" not in formatted
    print("✅ Syntax error context formatted")


def test_runtime_error_format():
    result = Executor().execute("text(missing_name)")

    assert not result.success
    assert result.error.startswith("NameError:")

    result = Executor().execute("image()")
    assert result.error == "ValueError: image requires src attribute"
    print("✅ Runtime errors reported with class name")


def test_depth_limit():
    from config import configure

    reset_configuration()
    configure(maximum_component_depth=3)
    try:
        code = "with vstack():\n    with vstack():\n        with vstack():\n            with vstack():\n                text('deep')"
        result = Executor().execute(code)
        assert not result.success
        assert "Maximum component nesting depth exceeded" in result.error
    finally:
        reset_configuration()
    print("✅ Nesting depth limit enforced")


def test_stimulus_controllers():
    """Test Stimulus wiring is reported from the source."""
    counter = next(example for example in EXAMPLES if example['name'] == 'Counter')
    controllers = extract_stimulus_controllers(counter['code'])

    assert 'counter' in controllers
    details = controllers['counter']
    assert {'event': 'click', 'method': 'increment'} in details['actions']
    assert {'event': 'click', 'method': 'decrement'} in details['actions']
    assert details['targets'] == ['count']
    assert details['values'] == {'count': '0'}

    controllers = extract_stimulus_controllers('button("x").stimulus_action("click->modal#open")')
    assert controllers['modal']['actions'] == [{'event': 'click', 'method': 'open'}]
    print("✅ Stimulus controllers extracted")


def test_result_to_dict():
    failed = ExecutionResult(False, error="SecurityError: nope")
    assert failed.to_dict() == {'success': False, 'error': "SecurityError: nope"}

    succeeded = ExecutionResult(True, html="<span>x</span>", component_tree={'type': 'span'})
    data = succeeded.to_dict()
    assert data['success'] is True
    assert data['html'] == "<span>x</span>"
    assert data['stimulus_controllers'] == {}
    print("✅ ExecutionResult serializes")


def test_bundled_code_runs():
    """The starter code, palette snippets and examples must all render."""
    reset_configuration()
    executor = Executor()

    snippets = [DEFAULT_CODE] + [example['code'] for example in EXAMPLES]
    for category in COMPONENTS.values():
        snippets.extend(component['code'] for component in category)

    for code in snippets:
        result = executor.execute(code)
        assert result.success, f"{result.error}\n---\n{code}"
        assert result.html != NO_OUTPUT_HTML
    print("✅ Bundled examples render")


def test_rendered_html_not_exposed():
    """Test that user code cannot reach rendered markup and splice it back in."""
    result = Executor().execute('t = text("x")\nraw = t.render()\ndiv(raw)')
    assert not result.success
    assert "Attribute 'render' is not allowed" in result.error

    for code in ('text("x").to_tree()', 'text("x").get_attribute("class")'):
        result = Executor().execute(code)
        assert not result.success, code

    result = Executor().execute('s = str(text("<b>hi</b>"))\ndiv(s[6:-7])')
    assert result.success, result.error
    assert '<b>' not in result.html
    assert '<div>&amp;lt;b&amp;gt;hi&amp;lt;/b&amp;gt;</div>' in result.html
    print("✅ Rendered HTML stays out of reach")


def test_fstring_size_guarded():
    """Test that f-strings and str() cannot expand a shared-reference list past the limit."""
    big_list = 's = "a" * 10000\nx = [s] * 1000\n'

    result = Executor().execute(big_list + 'big = f"{x}"\ntext(str(len(big)))')
    assert not result.success
    assert result.error.startswith("SecurityError: Sequence length limit")

    for tail in ('text(str(x))', 'text(",".join(x))', 'print(x)', 'text(x)'):
        result = Executor().execute(big_list + tail)
        assert not result.success, tail
        assert "Sequence length limit" in result.error

    result = Executor().execute('n = [1, 2, 3]\ntext(f"Total: {n} = {sum(n):>3}")')
    assert result.success, result.error
    assert 'Total: [1, 2, 3] =   6' in result.html
    print("✅ f-string size guarded")


def test_data_table_from_playground():
    code = (
        'rows = [{"name": "Ada", "status": "Active"}, {"name": "Bob", "status": "Pending"}]\n'
        'cols = [{"key": "name", "label": "Name"}, {"key": "status", "label": "Status", "format": "badge"}]\n'
        'data_table(rows, cols, title="Team", paginate=True, per_page=1)\n'
        'simple_table(["A"], [["1"]])'
    )
    result = Executor().execute(code)

    assert result.success, result.error
    assert 'bg-yellow-100 text-yellow-800">Pending</span>' in result.html
    assert 'Showing 1 to 1 of 2 results' in result.html
    assert '<td class="px-4 py-2">1</td>' in result.html
    print("✅ Tables render from playground code")


def run_all_tests():
    """Run all sandbox tests."""
    print("\n" + "="*60)
    print("🧪 Testing Sandbox Security System")
    print("="*60 + "\n")

    tests = [
        test_safe_code,
        test_eval_blocked,
        test_import_blocked,
        test_dunder_escape_blocked,
        test_loops_and_definitions_blocked,
        test_builder_reassignment_blocked,
        test_output_amplifiers_blocked,
        test_sanitize_raises_on_invalid,
        test_config_defaults,
        test_execute_renders_html,
        test_multiple_roots_make_fragment,
        test_no_output,
        test_print_renders_text,
        test_iteration_limit,
        test_range_limit,
        test_element_limit,
        test_sequence_growth_blocked,
        test_security_violation_message,
        test_code_length_limit,
        test_syntax_error_context,
        test_runtime_error_format,
        test_depth_limit,
        test_stimulus_controllers,
        test_result_to_dict,
        test_bundled_code_runs,
        test_rendered_html_not_exposed,
        test_fstring_size_guarded,
        test_data_table_from_playground,
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
