"""
Fork routes - action-dispatch endpoint for the fork tree view.
"""

from flask import request, jsonify

from . import bp

try:
    from ..services import ForkGraphResolver, MalformedTreeError, get_client, get_authenticated_user
    from ..helpers.request_helpers import BadRequest, require_fields, parse_page
except ImportError:
    from services import ForkGraphResolver, MalformedTreeError, get_client, get_authenticated_user
    from helpers.request_helpers import BadRequest, require_fields, parse_page


def _make_resolver():
    """Build a request-scoped resolver with an authenticated client."""
    client = get_client()
    return ForkGraphResolver(client, viewer_login=get_authenticated_user(client))


def _list_forks(resolver, data):
    owner, repo = require_fields(data, "owner", "repo")
    page = parse_page(data.get("page"))
    forks, has_next_page = resolver.list_forks(owner, repo, page)
    return {
        "forks": [f.to_dict(include_children=False) for f in forks],
        "hasNextPage": has_next_page,
        "currentPage": page,
    }


def _get_ancestry(resolver, data):
    owner, repo = require_fields(data, "owner", "repo")
    return {"ancestry": [a.to_dict() for a in resolver.get_ancestry(owner, repo)]}


def _get_full_fork_tree(resolver, data):
    owner, repo = require_fields(data, "owner", "repo")
    page = parse_page(data.get("page"))
    tree = resolver.get_full_fork_tree(owner, repo, data.get("loadedNodes"), page)
    return {"forkTree": tree.to_dict()}


def _get_complete_lineage(resolver, data):
    owner, repo = require_fields(data, "owner", "repo")
    page = parse_page(data.get("page"))
    lineage = resolver.get_complete_lineage(owner, repo, data.get("loadedNodes"), page)
    return {
        "data": [node.to_dict() for node in lineage],
        "repoInfo": {"owner": owner, "repo": repo},
    }


def _load_more_forks(resolver, data):
    owner, repo = require_fields(data, "owner", "repo")
    page = parse_page(data.get("page"))
    tree = resolver.load_more_forks(owner, repo, page, data.get("loadedNodes") or [])
    return {
        "data": [node.to_dict() for node in tree],
        "repoInfo": {"owner": owner, "repo": repo},
    }


def _search_repositories(resolver, data):
    (query,) = require_fields(data, "query")
    return {"items": resolver.search_repositories(query)}


FORK_ACTIONS = {
    "listForks": _list_forks,
    "getAncestry": _get_ancestry,
    "getFullForkTree": _get_full_fork_tree,
    "getCompleteLineage": _get_complete_lineage,
    "loadMoreForks": _load_more_forks,
    "searchRepositories": _search_repositories,
}


@bp.route("/api/forks", methods=["POST"])
def api_forks():
    """Dispatch a fork tree action: {action, owner, repo, query?, page?, loadedNodes?}."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    action = data.get("action")
    handler = FORK_ACTIONS.get(action) if isinstance(action, str) else None
    if handler is None:
        return jsonify({"error": "Invalid action"}), 400

    print(f"[FORKS] Processing {action} request for {data.get('owner')}/{data.get('repo')}")
    try:
        result = handler(_make_resolver(), data)
    except (BadRequest, MalformedTreeError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        print(f"[FORKS] {action} failed: {e}")
        return jsonify({"error": str(e)}), 500

    return jsonify(result)
