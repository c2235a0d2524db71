"""
app.py - Flask Application Factory
SwiftUI Playground

Provides the create_app() factory function following Flask 2.x patterns.
Handles configuration, blueprint registration and security headers.
"""

import os
from flask import Flask, request
from config import configure, get_configuration, load_from_env
from csp import apply_security_headers
from rate_limiter import RateLimiter
from routes import playground_bp

# app.config keys -> Configuration fields
CONFIG_OVERRIDES = {
    'MAX_COMPONENT_DEPTH': 'maximum_component_depth',
    'RATE_LIMIT_ENABLED': 'rate_limit_actions',
    'RATE_LIMIT_THRESHOLD': 'rate_limit_threshold',
    'RATE_LIMIT_WINDOW': 'rate_limit_window',
    'CSP_ENABLED': 'content_security_policy_enabled',
}

JSON_ERROR_PREFIXES = ('/api/', '/playground/')


def wants_json() -> bool:
    return request.path.startswith(JSON_ERROR_PREFIXES)


def create_app(test_config: dict = None) -> Flask:
    """
    Application factory for the SwiftUI Playground.

    Creates and configures the Flask application with:
    - Configuration from SWIFTUI_* environment variables and test_config
    - Playground blueprint registration
    - CSP and security headers on every response
    - JSON error handlers for API paths

    Args:
        test_config: Optional dictionary of configuration overrides for testing

    Returns:
        Flask: Configured Flask application instance
    """
    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.secret_key = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('SWIFTUI_MAX_REQUEST_BYTES', 256 * 1024))
    app.config['FORCE_SSL'] = os.environ.get('SWIFTUI_FORCE_SSL') == '1'
    app.config['SANDBOX_OPTIONS'] = {}

    # Apply test configuration if provided
    if test_config:
        app.config.update(test_config)

    load_from_env()
    overrides = {
        field: app.config[key]
        for key, field in CONFIG_OVERRIDES.items()
        if key in app.config
    }
    configure(**overrides)
    for domain in app.config.get('APPROVED_IMAGE_DOMAINS', []):
        get_configuration().add_approved_domain(domain)

    # One limiter per app so counters never leak between app instances
    app.extensions['rate_limiter'] = RateLimiter()

    # Register blueprints
    app.register_blueprint(playground_bp)

    # Request hooks
    @app.after_request
    def after_request(response):
        """Add CSP and security headers after each request."""
        ssl = request.is_secure or app.config['FORCE_SSL']
        return apply_security_headers(response, get_configuration(), ssl=ssl, debug=app.debug)

    # Error handlers
    @app.errorhandler(404)
    def not_found(error):
        if wants_json():
            return {'success': False, 'error': 'Endpoint not found'}, 404
        return 'Not Found', 404

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal error: {error}")
        if wants_json():
            return {'success': False, 'error': 'Internal server error'}, 500
        return 'Internal Server Error', 500

    @app.errorhandler(405)
    def method_not_allowed(error):
        if wants_json():
            return {'success': False, 'error': 'Method not allowed'}, 405
        return 'Method Not Allowed', 405

    @app.errorhandler(413)
    def payload_too_large(error):
        if wants_json():
            return {'success': False, 'error': 'Request body too large'}, 413
        return 'Payload Too Large', 413

    # Handle SCRIPT_NAME for subpath deployment
    @app.before_request
    def handle_script_name():
        script_name = request.headers.get('X-Script-Name')
        if script_name:
            request.environ['SCRIPT_NAME'] = script_name

    # API root endpoint
    @app.route('/')
    def index():
        return {
            'service': 'SwiftUI Playground API',
            'version': '1.0.0',
            'status': 'running',
            'endpoints': {
                'playground': '/playground/',
                'preview': '/playground/preview',
                'validate': '/playground/validate',
                'completions': '/playground/completions',
                'signatures': '/playground/signatures',
                'health': '/playground/health'
            }
        }

    app.logger.info("SwiftUI Playground API initialized")
    return app


# For running directly (development)
if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, host='0.0.0.0', port=5000)
