"""
sandbox.py - Playground Code Validation and Execution
SwiftUI Playground

Validates user-submitted DSL code against an AST whitelist, then runs it
against a fresh DSLContext with a restricted namespace and an execution
budget (iterations, elements, sequence sizes and wall-clock time).
"""

import re
import ast
import time
import builtins
import logging
from typing import Dict, List, Optional, Tuple
from markupsafe import Markup

from config import SecurityError
from dsl import DSLContext, BUILDER_NAMES, BUILDER_ALIASES, builder_namespace

logger = logging.getLogger(__name__)

NO_OUTPUT_HTML = '<div>No output generated</div>'

PRINT_CLASSES = 'p-2 bg-gray-100 rounded-md'

# Helper names injected by the budget transformer; user code cannot
# reference them because leading underscores are rejected.
CALL_HELPER = '__swiftui_call__'
BINOP_HELPER = '__swiftui_binop__'
ITER_HELPER = '__swiftui_iter__'
TEXT_HELPER = '__swiftui_text__'
SIZE_HELPER = '__swiftui_size__'


class SandboxConfig:
    """Execution limits for playground code."""

    def __init__(self, **overrides):
        self.max_execution_time_ms = 5000  # 5 seconds
        self.max_iterations = 10000  # Loop iterations and range() length
        self.max_elements = 2000
        self.max_code_length = 20000  # Characters
        self.max_sequence_length = 10000  # Longest str/list a single operation may produce
        self.max_output_bytes = 1024 * 1024

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown sandbox option: {key}")
            setattr(self, key, value)


SAFE_BUILTIN_NAMES = (
    'len', 'str', 'int', 'float', 'bool', 'list', 'dict', 'tuple', 'enumerate', 'zip',
    'min', 'max', 'sum', 'abs', 'round', 'sorted', 'reversed', 'any', 'all',
)

# Replaced with bounded versions at execution time
OVERRIDDEN_BUILTINS = ('range', 'print')


def _node_types(*names):
    return tuple(getattr(ast, name) for name in names if hasattr(ast, name))


class CodeValidator:
    """Validates playground code against an AST whitelist."""

    ALLOWED_NODES = _node_types(
        # Statements
        'Module', 'Expr', 'Assign', 'AugAssign', 'With', 'withitem', 'For', 'If',
        'Pass', 'Break', 'Continue',
        # Expressions
        'Call', 'keyword', 'Attribute', 'Name', 'Load', 'Store', 'Constant',
        'List', 'Tuple', 'Dict', 'Set',
        'ListComp', 'SetComp', 'DictComp', 'GeneratorExp', 'comprehension',
        'JoinedStr', 'FormattedValue',
        'BoolOp', 'And', 'Or',
        'Compare', 'Eq', 'NotEq', 'Lt', 'LtE', 'Gt', 'GtE', 'In', 'NotIn', 'Is', 'IsNot',
        'BinOp', 'Add', 'Sub', 'Mult', 'Div', 'FloorDiv', 'Mod',
        'UnaryOp', 'Not', 'USub', 'UAdd',
        'IfExp', 'Subscript', 'Slice', 'Index',
    )

    BLOCKED_CALLS = {
        'eval', 'exec', 'compile', 'open', 'input', 'getattr', 'setattr', 'delattr',
        'vars', 'globals', 'locals', 'dir', 'type', 'super', 'breakpoint', 'help',
        'memoryview', '__import__',
    }

    # Reflection hooks and string methods that can blow up output size
    BLOCKED_ATTRIBUTES = {
        'format', 'format_map', 'mro',
        'gi_frame', 'gi_code', 'cr_frame', 'cr_code', 'ag_frame', 'ag_code',
        'f_globals', 'f_locals', 'f_builtins', 'f_back', 'f_code',
        'tb_frame', 'tb_next', 'co_code', 'func_globals',
        'ljust', 'rjust', 'center', 'zfill', 'expandtabs',
        # User code never receives rendered HTML
        'render', 'to_tree', 'get_attribute', 'flush_elements',
    }

    FORMAT_SPEC_MAX_WIDTH = 100

    def __init__(self, config: Optional[SandboxConfig] = None):
        self.config = config or SandboxConfig()
        self.protected_names = set(BUILDER_NAMES) | set(BUILDER_ALIASES) | set(SAFE_BUILTIN_NAMES) | set(OVERRIDDEN_BUILTINS)

    def validate(self, code: str) -> Tuple[bool, List[str]]:
        """
        Validate code for safety issues.

        Returns:
            (is_valid, list_of_violations)
        """
        if len(code) > self.config.max_code_length:
            return False, [f"Code exceeds maximum length of {self.config.max_code_length} characters"]

        try:
            tree = ast.parse(code, filename='<playground>', mode='exec')
        except SyntaxError as e:
            return False, [f"Syntax error on line {e.lineno}: {e.msg}"]

        violations = self.check_tree(tree)
        return len(violations) == 0, violations

    def check_tree(self, tree: ast.AST) -> List[str]:
        violations = []
        for node in ast.walk(tree):
            for message in self._check_node(node):
                line = getattr(node, 'lineno', None)
                entry = f"{message} (line {line})" if line else message
                if entry not in violations:
                    violations.append(entry)
        return violations

    def _check_node(self, node: ast.AST) -> List[str]:
        if not isinstance(node, self.ALLOWED_NODES):
            return [f"{type(node).__name__} is not allowed"]

        if isinstance(node, ast.Name):
            return self._check_name(node)
        if isinstance(node, ast.Attribute):
            return self._check_attribute(node)
        if isinstance(node, ast.Call):
            return self._check_call(node)
        if isinstance(node, (ast.Assign, ast.AugAssign, ast.For, ast.comprehension)):
            return self._check_targets(node)
        if isinstance(node, ast.withitem):
            if node.optional_vars is not None and not isinstance(node.optional_vars, ast.Name):
                return ["With targets must be plain names"]
        if isinstance(node, ast.FormattedValue):
            return self._check_format_spec(node)
        return []

    def _check_name(self, node: ast.Name) -> List[str]:
        if node.id.startswith('_'):
            return [f"Name '{node.id}' is not allowed"]
        if isinstance(node.ctx, ast.Store) and node.id in self.protected_names:
            return [f"Assignment to '{node.id}' is not allowed"]
        return []

    def _check_attribute(self, node: ast.Attribute) -> List[str]:
        if node.attr.startswith('_'):
            return [f"Attribute '{node.attr}' is not allowed"]
        if node.attr in self.BLOCKED_ATTRIBUTES:
            return [f"Attribute '{node.attr}' is not allowed"]
        if isinstance(node.ctx, ast.Store):
            return ["Attribute assignment is not allowed"]
        return []

    def _check_call(self, node: ast.Call) -> List[str]:
        violations = []
        if isinstance(node.func, ast.Name) and node.func.id in self.BLOCKED_CALLS:
            violations.append(f"Call to '{node.func.id}' is not allowed")
        if any(keyword.arg is None for keyword in node.keywords):
            violations.append("Keyword argument unpacking is not allowed")
        return violations

    def _check_targets(self, node) -> List[str]:
        if isinstance(node, ast.Assign):
            targets = node.targets
        else:
            targets = [node.target]

        for target in targets:
            if isinstance(target, ast.Name):
                continue
            if isinstance(target, ast.Tuple) and all(isinstance(elt, ast.Name) for elt in target.elts):
                if not isinstance(node, ast.AugAssign):
                    continue
            return ["Only assignment to plain names is allowed"]
        return []

    def _check_format_spec(self, node: ast.FormattedValue) -> List[str]:
        spec = node.format_spec
        if spec is None:
            return []

        parts = spec.values if isinstance(spec, ast.JoinedStr) else [spec]
        for part in parts:
            if not isinstance(part, ast.Constant) or not isinstance(part.value, str):
                return ["Nested format specifications are not allowed"]
            widths = [int(digits) for digits in re.findall(r'\d+', part.value)]
            if any(width > self.FORMAT_SPEC_MAX_WIDTH for width in widths):
                return [f"Format width above {self.FORMAT_SPEC_MAX_WIDTH} is not allowed"]
        return []

    def sanitize(self, code: str) -> str:
        """
        Sanitize code before execution.
        Returns the code or raises ValueError if unsafe.
        """
        is_valid, violations = self.validate(code)
        if not is_valid:
            raise ValueError(f"Code validation failed: {'; '.join(violations)}")
        return code


class BudgetTransformer(ast.NodeTransformer):
    """Route calls, sequence-growing operators and loops through budget helpers."""

    GUARDED_OPS = {ast.Add: 'add', ast.Mult: 'mul', ast.Mod: 'mod'}

    def visit_Call(self, node):
        self.generic_visit(node)
        return ast.Call(
            func=ast.Name(id=CALL_HELPER, ctx=ast.Load()),
            args=[node.func] + node.args,
            keywords=node.keywords,
        )

    def visit_BinOp(self, node):
        self.generic_visit(node)
        op_name = self.GUARDED_OPS.get(type(node.op))
        if op_name is None:
            return node
        return self._binop_call(op_name, node.left, node.right)

    def visit_AugAssign(self, node):
        self.generic_visit(node)
        op_name = self.GUARDED_OPS.get(type(node.op))
        if op_name is None or not isinstance(node.target, ast.Name):
            return node
        return ast.Assign(
            targets=[ast.Name(id=node.target.id, ctx=ast.Store())],
            value=self._binop_call(op_name, ast.Name(id=node.target.id, ctx=ast.Load()), node.value),
        )

    def visit_JoinedStr(self, node):
        self.generic_visit(node)
        return ast.Call(func=ast.Name(id=SIZE_HELPER, ctx=ast.Load()), args=[node], keywords=[])

    def visit_FormattedValue(self, node):
        # format_spec must stay a JoinedStr, so only the value is rewritten
        node.value = ast.Call(
            func=ast.Name(id=TEXT_HELPER, ctx=ast.Load()),
            args=[self.visit(node.value)],
            keywords=[],
        )
        return node

    def visit_For(self, node):
        self.generic_visit(node)
        node.iter = self._iter_call(node.iter)
        return node

    def visit_comprehension(self, node):
        self.generic_visit(node)
        node.iter = self._iter_call(node.iter)
        return node

    @staticmethod
    def _binop_call(op_name, left, right):
        return ast.Call(
            func=ast.Name(id=BINOP_HELPER, ctx=ast.Load()),
            args=[ast.Constant(value=op_name), left, right],
            keywords=[],
        )

    @staticmethod
    def _iter_call(iterable):
        return ast.Call(func=ast.Name(id=ITER_HELPER, ctx=ast.Load()), args=[iterable], keywords=[])


SIZED_TYPES = (str, bytes, list, tuple, dict, set)

# Builtins that never turn their arguments into text
UNMEASURED_CALLS = (
    len, int, float, bool, list, dict, tuple, enumerate, zip,
    min, max, sum, abs, round, sorted, reversed, any, all,
)


class ExecutionBudget:
    """Counts iterations and elements and enforces the wall-clock deadline."""

    def __init__(self, config: SandboxConfig):
        self.config = config
        self.iterations = 0
        self.elements = 0
        self.deadline = time.monotonic() + config.max_execution_time_ms / 1000.0

    def check_time(self):
        if time.monotonic() > self.deadline:
            raise SecurityError(f"Execution time limit of {self.config.max_execution_time_ms}ms exceeded")

    def tick(self):
        self.iterations += 1
        if self.iterations > self.config.max_iterations:
            raise SecurityError(f"Iteration limit of {self.config.max_iterations} exceeded")
        self.check_time()

    def count_element(self, element):
        self.elements += 1
        if self.elements > self.config.max_elements:
            raise SecurityError(f"Element limit of {self.config.max_elements} exceeded")
        self.check_time()

    def check_size(self, value):
        if isinstance(value, SIZED_TYPES) and len(value) > self.config.max_sequence_length:
            raise SecurityError(f"Sequence length limit of {self.config.max_sequence_length} exceeded")
        return value

    def iterate(self, iterable):
        for item in iterable:
            self.tick()
            yield item

    def text_length(self, *values) -> int:
        """
        Estimate the length of str() of each value, summed, without building the strings.

        Nested containers are walked item by item, so shared references count
        every time they would be printed. Raises SecurityError as soon as the
        estimate passes max_sequence_length.
        """
        limit = self.config.max_sequence_length
        total = 0
        visited = 0
        pending = list(values)

        while pending:
            item = pending.pop()
            if isinstance(item, (str, bytes)):
                total += len(item)
            elif isinstance(item, dict):
                total += 2 + 4 * len(item)
                pending.extend(item.keys())
                pending.extend(item.values())
            elif isinstance(item, (list, tuple, set, frozenset)):
                total += 2 + 2 * len(item)
                pending.extend(item)
            else:
                total += 1

            if total > limit:
                raise SecurityError(f"Sequence length limit of {limit} exceeded")
            visited += 1
            if visited % 1000 == 0:
                self.check_time()

        return total

    def text(self, value):
        """Guard a value interpolated into an f-string."""
        self.text_length(value)
        return value

    def measured(self, func) -> bool:
        if any(func is exempt for exempt in UNMEASURED_CALLS):
            return False
        # list.append, dict.get and friends never stringify their arguments
        return not isinstance(getattr(func, '__self__', None), (list, dict, set))

    def call(self, func, *args, **kwargs):
        self.check_time()
        if self.measured(func):
            self.text_length(*args, *kwargs.values())
        return self.check_size(func(*args, **kwargs))

    def binop(self, op_name, left, right):
        limit = self.config.max_sequence_length

        if op_name == 'mul':
            sequence, count = (left, right) if isinstance(left, SIZED_TYPES) else (right, left)
            if isinstance(sequence, SIZED_TYPES) and isinstance(count, int):
                if len(sequence) * max(count, 0) > limit:
                    raise SecurityError(f"Sequence length limit of {limit} exceeded")
            return left * right

        if op_name == 'add':
            if isinstance(left, SIZED_TYPES) and isinstance(right, SIZED_TYPES):
                if len(left) + len(right) > limit:
                    raise SecurityError(f"Sequence length limit of {limit} exceeded")
            return left + right

        if isinstance(left, (str, bytes)):
            raise SecurityError("%-formatting is not allowed; use f-strings")
        return left % right

    def bounded_range(self, *args):
        result = range(*args)
        if len(result) > self.config.max_iterations:
            raise SecurityError(f"range() larger than {self.config.max_iterations} is not allowed")
        return result


class ExecutionResult:
    """Outcome of one playground run."""

    def __init__(self, success: bool, html: str = '', error: Optional[str] = None,
                 component_tree: Optional[Dict] = None, stimulus_controllers: Optional[Dict] = None):
        self.success = success
        self.html = html
        self.error = error
        self.component_tree = component_tree
        self.stimulus_controllers = stimulus_controllers or {}

    def to_dict(self) -> Dict:
        if not self.success:
            return {'success': False, 'error': self.error}
        return {
            'success': True,
            'html': str(self.html),
            'component_tree': self.component_tree,
            'stimulus_controllers': self.stimulus_controllers,
        }


def format_syntax_error(error: SyntaxError, code: str) -> str:
    """
    Describe a syntax error with surrounding source lines.

    Shows two lines before and one after the offending line, marked with an arrow.
    """
    lines = code.splitlines()
    lineno = error.lineno or 1
    message = f"{error.msg} on line {lineno}"

    if not lines:
        return message

    start = max(1, lineno - 2)
    end = min(len(lines), lineno + 1)

    window = []
    for number in range(start, end + 1):
        marker = '→' if number == lineno else ' '
        window.append(f"{marker} {str(number).rjust(3)} | {lines[number - 1]}")

    return message + "\n\n" + "\n".join(window)


CONTROLLER_PATTERNS = [
    re.compile(r'["\']controller["\']\s*:\s*["\']([^"\']+)["\']'),
    re.compile(r'stimulus_controller\(\s*["\']([^"\']+)["\']'),
    re.compile(r'data_controller\s*=\s*["\']([^"\']+)["\']'),
]

ACTION_PATTERNS = [
    re.compile(r'["\']action["\']\s*:\s*["\']([^"\']+)["\']'),
    re.compile(r'stimulus_action\(\s*["\']([^"\']+)["\']'),
    re.compile(r'data_action\s*=\s*["\']([^"\']+)["\']'),
]

TARGET_PATTERN = re.compile(r'["\']([a-zA-Z][\w-]*)-target["\']\s*:\s*["\']([^"\']+)["\']')

ACTION_DESCRIPTOR = re.compile(r'(\w+)->([\w-]+)#(\w+)')


def extract_stimulus_controllers(code: str) -> Dict[str, Dict]:
    """
    Scan source for Stimulus controllers, targets, values and actions.

    Returns:
        dict: {controller: {'values': {}, 'targets': [], 'actions': [{'event', 'method'}]}}
    """
    controllers: Dict[str, Dict] = {}

    def entry(name):
        for controller_name in name.split():
            controllers.setdefault(controller_name, {'values': {}, 'targets': [], 'actions': []})
        return controllers.get(name.split()[0]) if name.split() else None

    for pattern in CONTROLLER_PATTERNS:
        for match in pattern.finditer(code):
            entry(match.group(1))

    for pattern in ACTION_PATTERNS:
        for match in pattern.finditer(code):
            for event, controller, method in ACTION_DESCRIPTOR.findall(match.group(1)):
                action = {'event': event, 'method': method}
                actions = entry(controller)['actions']
                if action not in actions:
                    actions.append(action)

    for controller, target in TARGET_PATTERN.findall(code):
        if controller in controllers and target not in controllers[controller]['targets']:
            controllers[controller]['targets'].append(target)

    for controller, details in controllers.items():
        value_pattern = re.compile(
            r'["\']' + re.escape(controller) + r'-([\w-]+)-value["\']\s*:\s*["\']?([^"\',}]*)'
        )
        for name, value in value_pattern.findall(code):
            details['values'][name] = value.strip()

    return controllers


class Executor:
    """Runs validated playground code and renders the result."""

    def __init__(self, config: Optional[SandboxConfig] = None):
        self.config = config or SandboxConfig()
        self.validator = CodeValidator(self.config)

    def execute(self, code: str) -> ExecutionResult:
        """
        Validate, run and render playground code.

        Never raises for problems in the submitted code; they are reported in
        the result's error field.
        """
        if len(code) > self.config.max_code_length:
            return ExecutionResult(
                False,
                error=f"SecurityError: Code exceeds maximum length of {self.config.max_code_length} characters",
            )

        try:
            tree = ast.parse(code, filename='<playground>', mode='exec')
        except SyntaxError as e:
            return ExecutionResult(False, error=f"Syntax Error: {format_syntax_error(e, code)}")

        violations = self.validator.check_tree(tree)
        if violations:
            logger.warning(f"[SECURITY] Playground code rejected: {'; '.join(violations)}")
            return ExecutionResult(
                False,
                error=f"SecurityError: Unsafe operation detected: {'; '.join(violations)}",
            )

        compiled = compile(ast.fix_missing_locations(BudgetTransformer().visit(tree)), '<playground>', 'exec')

        budget = ExecutionBudget(self.config)
        context = DSLContext(on_element=budget.count_element)
        namespace = self._build_namespace(context, budget)

        try:
            exec(compiled, namespace)

            roots = context.root_elements
            component_tree = self._component_tree(roots)
            html = context.flush_elements() if roots else Markup(NO_OUTPUT_HTML)

            if len(str(html).encode('utf-8')) > self.config.max_output_bytes:
                raise SecurityError(f"Rendered output exceeds {self.config.max_output_bytes} bytes")

        except SecurityError as e:
            logger.warning(f"[SECURITY] Playground execution stopped: {e}")
            return ExecutionResult(False, error=f"SecurityError: {e}")
        except Exception as e:
            return ExecutionResult(False, error=f"{type(e).__name__}: {e}")
        finally:
            namespace.clear()

        return ExecutionResult(
            True,
            html=html,
            component_tree=component_tree,
            stimulus_controllers=extract_stimulus_controllers(code),
        )

    def _build_namespace(self, context: DSLContext, budget: ExecutionBudget) -> Dict:
        safe_builtins = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}
        safe_builtins['range'] = budget.bounded_range
        safe_builtins['print'] = self._print_builder(context)
        safe_builtins.update({'True': True, 'False': False, 'None': None})

        namespace = {'__builtins__': safe_builtins}
        namespace.update(builder_namespace(context))
        namespace[CALL_HELPER] = budget.call
        namespace[BINOP_HELPER] = budget.binop
        namespace[ITER_HELPER] = budget.iterate
        namespace[TEXT_HELPER] = budget.text
        namespace[SIZE_HELPER] = budget.check_size
        return namespace

    @staticmethod
    def _print_builder(context: DSLContext):
        def playground_print(*values):
            return context.text(' '.join(str(value) for value in values)).tw(PRINT_CLASSES)
        return playground_print

    @staticmethod
    def _component_tree(roots) -> Optional[Dict]:
        if not roots:
            return None
        if len(roots) == 1:
            return roots[0].to_tree()
        return {
            'type': 'fragment',
            'props': {},
            'children': [root.to_tree() for root in roots],
        }
