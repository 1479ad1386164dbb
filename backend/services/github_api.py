"""
GitHub API Service - REST client for the GitHub endpoints the dashboard uses.

Raw JSON is converted into typed records here so the fork graph code never
handles untyped payloads.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional

import requests

from .cache import VIEWER_LOGIN_KEY, get_cached, set_cached, token_scoped_key

try:
    from ..config import GITHUB_API_URL, REQUEST_TIMEOUT, MAX_REPOS, ConfigError, get_github_token
except ImportError:
    from config import GITHUB_API_URL, REQUEST_TIMEOUT, MAX_REPOS, ConfigError, get_github_token


class UpstreamFetchError(Exception):
    """A call to the GitHub API failed or returned an unusable payload."""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class RepoRef:
    """Identity and fork status of a repository as reported by GitHub."""

    owner: str
    name: str
    full_name: str
    html_url: str
    is_fork: bool
    parent: Optional["RepoRef"] = None

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_api(cls, raw) -> "RepoRef":
        """Build a RepoRef from a GitHub repository object."""
        if not isinstance(raw, dict):
            raise UpstreamFetchError("Repository payload is not an object")
        owner = (raw.get("owner") or {}).get("login")
        name = raw.get("name")
        if not owner or not name:
            raise UpstreamFetchError("Repository payload is missing owner or name")

        parent = None
        raw_parent = raw.get("parent")
        if raw_parent:
            try:
                parent = cls.from_api(raw_parent)
            except UpstreamFetchError:
                parent = None

        return cls(
            owner=owner,
            name=name,
            full_name=raw.get("full_name") or f"{owner}/{name}",
            html_url=raw.get("html_url") or "",
            is_fork=bool(raw.get("fork", False)),
            parent=parent,
        )


@dataclass(frozen=True)
class ForkPage:
    """One page of a repository's direct forks."""

    forks: list = field(default_factory=list)
    has_next_page: bool = False


class GitHubClient:
    """Bearer-token authenticated client for api.github.com."""

    def __init__(self, token, base_url=GITHUB_API_URL, timeout=REQUEST_TIMEOUT, session=None):
        if not token:
            raise ConfigError("GitHub token not configured")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self._session = session
        self._local = threading.local()
        if session is not None:
            session.headers.update(self.headers)

    @property
    def session(self):
        """The injected session, or one requests.Session per calling thread."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update(self.headers)
            self._local.session = session
        return session

    # --- Transport ---

    def _request(self, method, path, params=None, json_body=None):
        """Perform a request and return the response, raising UpstreamFetchError on failure."""
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, params=params, json=json_body, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamFetchError(f"{method} {path} failed: {e}") from e

        if not resp.ok:
            message = ""
            try:
                message = resp.json().get("message", "")
            except (ValueError, AttributeError):
                message = resp.text
            raise UpstreamFetchError(
                f"{method} {path} returned {resp.status_code}: {message}",
                status=resp.status_code,
            )
        return resp

    def _json(self, method, path, params=None, json_body=None):
        resp = self._request(method, path, params=params, json_body=json_body)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamFetchError(f"{method} {path} returned invalid JSON") from e

    # --- Fork graph collaborator interface ---

    def get_repo(self, owner, name) -> RepoRef:
        """Get a repository, including its parent when it is a fork."""
        return RepoRef.from_api(self._json("GET", f"/repos/{owner}/{name}"))

    def list_forks(self, owner, name, page=1, per_page=20) -> ForkPage:
        """List one page of direct forks. hasNextPage comes from the Link header."""
        resp = self._request(
            "GET",
            f"/repos/{owner}/{name}/forks",
            params={"page": page, "per_page": per_page},
        )
        try:
            raw_forks = resp.json()
        except ValueError as e:
            raise UpstreamFetchError(f"Fork listing for {owner}/{name} returned invalid JSON") from e
        if not isinstance(raw_forks, list):
            raise UpstreamFetchError(f"Fork listing for {owner}/{name} is not a list")

        forks = [RepoRef.from_api(f) for f in raw_forks]
        return ForkPage(forks=forks, has_next_page="next" in resp.links)

    def search_repos(self, query, per_page=20):
        """Search repositories. Returns the raw items list."""
        data = self._json("GET", "/search/repositories", params={"q": query, "per_page": per_page})
        return data.get("items", [])

    def get_authenticated_user(self):
        """Get the user the token belongs to."""
        return self._json("GET", "/user")

    # --- Repository management ---

    def list_user_repos(self, per_page=MAX_REPOS):
        return self._json("GET", "/user/repos", params={"sort": "updated", "per_page": per_page})

    def list_branches(self, owner, name):
        return self._json("GET", f"/repos/{owner}/{name}/branches")

    def get_repo_raw(self, owner, name):
        return self._json("GET", f"/repos/{owner}/{name}")

    def create_repo(self, name, description="", private=False, auto_init=True):
        return self._json("POST", "/user/repos", json_body={
            "name": name,
            "description": description,
            "private": private,
            "auto_init": auto_init,
        })

    def get_content(self, owner, name, path, ref=None):
        params = {"ref": ref} if ref else None
        return self._json("GET", f"/repos/{owner}/{name}/contents/{path}", params=params)

    def put_content(self, owner, name, path, message, content_b64, branch="main", sha=None):
        body = {"message": message, "content": content_b64, "branch": branch}
        if sha:
            body["sha"] = sha
        return self._json("PUT", f"/repos/{owner}/{name}/contents/{path}", json_body=body)

    def get_ref(self, owner, name, ref):
        return self._json("GET", f"/repos/{owner}/{name}/git/ref/{ref}")

    def create_ref(self, owner, name, ref, sha):
        return self._json("POST", f"/repos/{owner}/{name}/git/refs", json_body={"ref": ref, "sha": sha})

    def create_fork(self, owner, name, fork_name=None):
        body = {"default_branch_only": False}
        if fork_name:
            body["name"] = fork_name
        return self._json("POST", f"/repos/{owner}/{name}/forks", json_body=body)


def get_client():
    """Create a client from the configured token. Raises ConfigError when unset."""
    return GitHubClient(get_github_token())


def get_authenticated_user(client=None):
    """Get the login behind the configured token. Returns None when it cannot be determined."""
    token = get_github_token()
    if not token:
        return None
    cache_key = token_scoped_key(VIEWER_LOGIN_KEY, token)
    cached = get_cached(cache_key)
    if cached:
        return cached

    try:
        login = (client or GitHubClient(token)).get_authenticated_user().get("login")
    except UpstreamFetchError as e:
        print(f"[GITHUB] Could not resolve authenticated user: {e}")
        return None

    if login:
        set_cached(cache_key, login)
    return login
