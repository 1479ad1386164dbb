"""
GitHub routes - repository, branch and file management actions.
"""

from flask import request, jsonify

from . import bp

try:
    from ..services import RepoService
    from ..helpers.request_helpers import BadRequest, require_fields, parse_bool
except ImportError:
    from services import RepoService
    from helpers.request_helpers import BadRequest, require_fields, parse_bool


def _get_user_info(svc, data):
    return svc.get_user_info()


def _list_repos(svc, data):
    return svc.list_repos()


def _list_branches(svc, data):
    owner, repo = require_fields(data, "owner", "repo")
    return svc.list_branches(owner, repo)


def _get_repo(svc, data):
    owner, repo = require_fields(data, "owner", "repo")
    return svc.get_repo(owner, repo)


def _create_repo(svc, data):
    (name,) = require_fields(data, "name")
    return svc.create_repo(name, description=data.get("description") or "", private=parse_bool(data.get("private")))


def _get_content(svc, data):
    owner, repo, path = require_fields(data, "owner", "repo", "path")
    return svc.get_content(owner, repo, path, ref=data.get("ref") or None)


def _create_file(svc, data):
    owner, repo, path = require_fields(data, "owner", "repo", "path")
    content = data.get("content")
    if content is None:
        raise BadRequest("Missing required fields: content")
    return svc.create_file(
        owner, repo, path, content,
        message=data.get("message"),
        branch=data.get("branch") or "main",
        sha=data.get("sha") or None,
    )


def _create_branch(svc, data):
    owner, repo, new_branch = require_fields(data, "owner", "repo", "newBranch")
    return svc.create_branch(owner, repo, new_branch, base_branch=data.get("baseBranch") or "main")


def _create_fork(svc, data):
    owner, repo = require_fields(data, "owner", "repo")
    return svc.fork_repo(owner, repo, fork_name=data.get("forkName") or None)


def _fork_repo(svc, data):
    """Copy the full history into a new repository with no fork link."""
    owner, repo, fork_name = require_fields(data, "owner", "repo", "forkName")
    return svc.mirror_repo(
        owner, repo, fork_name,
        description=data.get("description") or "",
        private=parse_bool(data.get("private")),
    )


GITHUB_ACTIONS = {
    "getUserInfo": _get_user_info,
    "listRepos": _list_repos,
    "listBranches": _list_branches,
    "getRepo": _get_repo,
    "createRepo": _create_repo,
    "getContent": _get_content,
    "createFile": _create_file,
    "createBranch": _create_branch,
    "forkRepo": _fork_repo,
    "createFork": _create_fork,
}


@bp.route("/api/github", methods=["POST"])
def api_github():
    """Dispatch a repository management action: {action, ...params}."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    action = data.get("action")
    handler = GITHUB_ACTIONS.get(action) if isinstance(action, str) else None
    if handler is None:
        return jsonify({"error": "Invalid action"}), 400

    try:
        result = handler(RepoService(), data)
    except BadRequest as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        print(f"[GITHUB] {action} failed: {e}")
        return jsonify({"error": str(e)}), 500

    return jsonify(result)
