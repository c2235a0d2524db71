"""
routes.py - Flask API Routes
SwiftUI Playground

Provides the playground endpoints:
- GET /playground/ - Starter code, component palette and examples
- POST /playground/preview - Run DSL code and return rendered HTML
- POST /playground/validate - Check DSL code without running it
- POST /playground/completions - Editor completions
- GET /playground/signatures - Editor signature help
- GET /playground/health - Health check

All endpoints return JSON with consistent structure:
    Success: {"success": true, ...data}
    Error: {"success": false, "error": "message"}
"""

from flask import Blueprint, request, jsonify, current_app
from markupsafe import escape
from sandbox import CodeValidator, Executor, SandboxConfig
from completions import CompletionService, signatures
from rate_limiter import rate_limit, get_client_ip
from examples import DEFAULT_CODE, COMPONENTS, EXAMPLES

# Create Flask Blueprint
playground_bp = Blueprint('playground', __name__, url_prefix='/playground')

ERROR_FRAGMENT = '<div class="p-4 bg-red-50 text-red-700 rounded-md"><pre class="whitespace-pre-wrap">{}</pre></div>'


def sandbox_config() -> SandboxConfig:
    """Sandbox limits from app config (SANDBOX_OPTIONS dict)."""
    return SandboxConfig(**current_app.config.get('SANDBOX_OPTIONS', {}))


def get_code_param():
    """
    Read the code field from a JSON body.

    Returns:
        tuple: (code, error_response) - exactly one of them is None
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None, (jsonify({
            'success': False,
            'error': 'Request body must be JSON'
        }), 400)

    code = data.get('code')
    if not isinstance(code, str):
        return None, (jsonify({
            'success': False,
            'error': 'code is required and must be a string'
        }), 400)

    return code, None


# API Routes

@playground_bp.route('/', methods=['GET'])
def index():
    """
    GET /playground/

    Response:
        {
            "success": true,
            "default_code": "...",
            "components": {"Basic": [{"name", "code"}], ...},
            "examples": [{"name", "description", "code"}]
        }
    """
    return jsonify({
        'success': True,
        'default_code': DEFAULT_CODE,
        'components': COMPONENTS,
        'examples': EXAMPLES
    }), 200


@playground_bp.route('/preview', methods=['POST'])
@rate_limit()
def preview():
    """
    POST /playground/preview

    Request body:
        {"code": "with vstack():\\n    text('Hi')"}

    Query:
        format=html - return the rendered fragment (or an error fragment)

    Response (200):
        {"success": true, "html": "...", "component_tree": {...}, "stimulus_controllers": {...}}

    Response (422):
        {"success": false, "error": "SecurityError: ..."}
    """
    code, error_response = get_code_param()
    if error_response:
        return error_response

    result = Executor(sandbox_config()).execute(code)

    if not result.success:
        current_app.logger.info(f"Preview failed for {get_client_ip()}: {result.error.splitlines()[0]}")

    if request.args.get('format') == 'html':
        if result.success:
            return str(result.html), 200, {'Content-Type': 'text/html; charset=utf-8'}
        return ERROR_FRAGMENT.format(escape(result.error)), 422, {'Content-Type': 'text/html; charset=utf-8'}

    if result.success:
        return jsonify(result.to_dict()), 200

    return jsonify({
        'success': False,
        'error': result.error
    }), 422


@playground_bp.route('/validate', methods=['POST'])
def validate():
    """
    POST /playground/validate

    Request body:
        {"code": "..."}

    Response:
        {"success": true, "valid": false, "issues": ["Call to 'open' is not allowed (line 1)"]}
    """
    code, error_response = get_code_param()
    if error_response:
        return error_response

    is_valid, issues = CodeValidator(sandbox_config()).validate(code)

    return jsonify({
        'success': True,
        'valid': is_valid,
        'issues': issues
    }), 200


@playground_bp.route('/completions', methods=['POST'])
def completions():
    """
    POST /playground/completions

    Request body:
        {"prefix": "text(", "context": "full editor text", "line": 1, "column": 6}

    Response:
        {"completions": [{"label", "kind", "detail", "documentation", "insertText", "snippet"}]}
    """
    data = request.get_json(silent=True) or {}

    try:
        # Without the full editor text, complete against the prefix alone
        context = data.get('context') or data.get('prefix') or ''
        position = {
            'lineNumber': int(data.get('line') or 1),
            'column': int(data.get('column') or len(context) + 1)
        }

        service = CompletionService(str(context), position)
        items = [
            {
                'label': completion['label'],
                'kind': completion['kind'],
                'detail': completion['detail'],
                'documentation': completion['documentation'],
                'insertText': completion['insertText'],
                'snippet': completion['insertTextFormat'] == 2
            }
            for completion in service.generate_completions()
        ]
    except Exception as e:
        current_app.logger.error(f"Completion error: {e}", exc_info=True)
        items = []

    return jsonify({'completions': items}), 200


@playground_bp.route('/signatures', methods=['GET'])
def get_signatures():
    """GET /playground/signatures"""
    return jsonify({'signatures': signatures()}), 200


# Health check endpoint (no rate limit)
@playground_bp.route('/health', methods=['GET'])
def health_check():
    """
    GET /playground/health

    Simple health check endpoint.
    """
    return jsonify({
        'status': 'ok',
        'service': 'swiftui-playground'
    }), 200
