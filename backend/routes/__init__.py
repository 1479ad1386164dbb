"""
Routes package - defines the shared Blueprint for all API routes.
"""

from flask import Blueprint

bp = Blueprint('forkboard', __name__)

# Import route modules AFTER bp is created to register their @bp.route decorators
from . import health_routes  # noqa: E402, F401
from . import fork_routes    # noqa: E402, F401
from . import github_routes  # noqa: E402, F401
