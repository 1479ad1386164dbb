"""
Health routes - healthcheck, owner identity and cache monitoring endpoints.
"""

from flask import jsonify

from . import bp

try:
    from ..services import get_authenticated_user, clear_cache, get_cache_stats
except ImportError:
    from services import get_authenticated_user, clear_cache, get_cache_stats


@bp.route("/api/healthcheck", methods=["GET"])
def api_healthcheck():
    """Health check endpoint for monitoring."""
    owner = get_authenticated_user()
    return jsonify({
        "success": True,
        "status": "healthy" if owner else "degraded",
        "owner": owner or "unknown",
        "api_version": "1.0.0"
    })


@bp.route("/api/owner", methods=["GET"])
def api_owner():
    """Get the authenticated GitHub owner/user."""
    owner = get_authenticated_user()
    return jsonify({"success": owner is not None, "owner": owner or "unknown"})


@bp.route("/api/clear-cache", methods=["POST"])
def api_clear_cache():
    """Clear all cached GitHub lookups."""
    cleared = clear_cache()
    return jsonify({"success": True, "message": f"Cache cleared ({cleared} entries)"})


@bp.route("/api/cache-stats", methods=["GET"])
def api_cache_stats():
    """Get cache statistics for debugging."""
    return jsonify({"success": True, "stats": get_cache_stats()})
