"""Public HTTP surface of the node.

Two routes:
- ``/`` answers with a fixed greeting
- ``/<sub_path>`` regenerates and returns the subscription artifact
"""

import logging

from flask import Flask, Response

from argonode.core.errors import NodeError

logger = logging.getLogger(__name__)


def _text(body: str, status: int = 200) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def create_app(orchestrator) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    sub_path = orchestrator.config.sub_path.strip("/") or "sub"

    @app.route('/')
    def index():
        return _text("Hello world!")

    @app.route(f'/{sub_path}')
    def subscription():
        try:
            orchestrator.refresh_subscription()
            content = orchestrator.read_subscription()
        except NodeError as e:
            logger.error(f"Subscription refresh failed: {e}")
            return _text(str(e), 500)
        except OSError as e:
            logger.error(f"Failed to read subscription: {e}")
            return _text(f"Failed to read subscription: {e}", 500)
        return _text(content)

    return app


def start_server(app: Flask, host: str = '0.0.0.0', port: int = 3000):
    """Serve ``app`` in the foreground until the process exits."""
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logger.info(f"http server is running on port: {port}")
    app.run(host=host, port=port, debug=False, use_reloader=False, threaded=True)
