"""Pytest configuration - add backend/ to sys.path so tests can import modules."""

import sys
import os

import pytest

# Add the backend directory to sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from services.github_api import ForkPage, RepoRef, UpstreamFetchError  # noqa: E402


class FakeGitHub:
    """In-memory stand-in for GitHubClient's fork graph methods."""

    def __init__(self):
        self.repos = {}
        self.forks = {}
        self.failing_repos = set()
        self.failing_forks = set()
        self.search_items = []
        self.calls = []

    def add(self, full_name, parent=None):
        """Register a repo; with `parent`, it is also listed as one of the parent's forks."""
        owner, name = full_name.split("/")
        parent_ref = self.repos[parent] if parent else None
        ref = RepoRef(
            owner=owner,
            name=name,
            full_name=full_name,
            html_url=f"https://github.com/{full_name}",
            is_fork=parent is not None,
            parent=parent_ref,
        )
        self.repos[full_name] = ref
        self.forks.setdefault(full_name, [])
        if parent:
            self.forks[parent].append(ref)
        return ref

    def get_repo(self, owner, name):
        key = f"{owner}/{name}"
        self.calls.append(("get_repo", key))
        if key in self.failing_repos or key not in self.repos:
            raise UpstreamFetchError(f"GET /repos/{key} returned 404: Not Found", status=404)
        return self.repos[key]

    def list_forks(self, owner, name, page=1, per_page=20):
        key = f"{owner}/{name}"
        self.calls.append(("list_forks", key, page))
        if key in self.failing_forks:
            raise UpstreamFetchError(f"GET /repos/{key}/forks returned 502: Bad Gateway", status=502)
        items = self.forks.get(key, [])
        start = (page - 1) * per_page
        return ForkPage(forks=items[start:start + per_page], has_next_page=len(items) > start + per_page)

    def search_repos(self, query, per_page=20):
        self.calls.append(("search_repos", query, per_page))
        return self.search_items[:per_page]

    def called(self, method, key):
        return any(c[0] == method and c[1] == key for c in self.calls)


@pytest.fixture
def fake_github():
    """A fresh FakeGitHub per test."""
    return FakeGitHub()
