"""
Forkboard - API Backend for GitHub Repository and Fork Management

This Flask app serves the JSON API behind the Forkboard React frontend:
fork lineage trees plus repository, branch and file actions.
"""

import os

from flask import Flask, request, jsonify

try:
    from .routes import bp
    from .config import validate_config
except ImportError:
    from routes import bp
    from config import validate_config

# Set URL_PREFIX when serving behind a path-based reverse proxy
URL_PREFIX = os.environ.get("URL_PREFIX", "")

DEV_ORIGINS = ['http://localhost:3000', 'http://127.0.0.1:3000', 'http://localhost:5173']

app = Flask(__name__)


# ============ CORS Support ============
@app.after_request
def add_cors_headers(response):
    """Add CORS headers for the frontend dev server."""
    origin = request.headers.get('Origin', '')
    if origin in DEV_ORIGINS:
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        response.headers['Access-Control-Allow-Credentials'] = 'true'
    return response


@app.route('/')
def api_root():
    """API info endpoint."""
    return jsonify({"message": "Forkboard API", "docs": "/api/"})


app.register_blueprint(bp, url_prefix=URL_PREFIX or None)


if __name__ == "__main__":
    # Fail fast on a missing token instead of erroring on the first request
    validate_config()
    debug_mode = os.environ.get("FLASK_ENV") == "development"
    app.run(debug=debug_mode, port=int(os.environ.get("PORT", "5000")))
