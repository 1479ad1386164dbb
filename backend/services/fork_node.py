"""
ForkNode - the node type of fork trees and lineage chains.

Nodes are serialized to camelCase JSON for the frontend and parsed back when
the client sends a previously loaded tree for "load more".
"""

import copy
from dataclasses import dataclass, field
from typing import Optional


class MalformedTreeError(Exception):
    """A client-supplied fork tree could not be parsed."""


@dataclass
class ForkNode:
    owner: str
    name: str
    full_name: str = ""
    html_url: str = ""
    is_fork: bool = False
    sub_forks: list = field(default_factory=list)
    is_ancestor: Optional[bool] = None
    is_owned_by_user: Optional[bool] = None
    has_next_page: Optional[bool] = None
    current_page: Optional[int] = None

    def __post_init__(self):
        if not self.full_name:
            self.full_name = f"{self.owner}/{self.name}"

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def has_subforks(self) -> bool:
        return len(self.sub_forks) > 0

    def matches(self, owner, name) -> bool:
        return self.owner == owner and self.name == name

    @classmethod
    def from_repo(cls, repo, **kwargs) -> "ForkNode":
        """Build a node from a RepoRef."""
        return cls(
            owner=repo.owner,
            name=repo.name,
            full_name=repo.full_name,
            html_url=repo.html_url,
            is_fork=repo.is_fork,
            **kwargs,
        )

    @classmethod
    def stub(cls, owner, name, page=None) -> "ForkNode":
        """Identity-only node used when a repository could not be fetched."""
        return cls(owner=owner, name=name, has_next_page=False, current_page=page, is_owned_by_user=False)

    @classmethod
    def from_dict(cls, data) -> "ForkNode":
        """Parse a node (and its subtree) from client-held JSON.

        Any incoming hasSubforks value is ignored; it is recomputed from subForks.
        """
        if not isinstance(data, dict):
            raise MalformedTreeError("Fork node must be an object")
        owner = data.get("owner")
        name = data.get("name")
        if isinstance(owner, dict):
            owner = owner.get("login")
        if not owner or not name:
            raise MalformedTreeError("Fork node is missing owner or name")

        children = data.get("subForks") or []
        if isinstance(children, dict):
            children = [children]

        current_page = data.get("currentPage")
        if current_page is not None:
            try:
                current_page = int(current_page)
            except (TypeError, ValueError):
                raise MalformedTreeError(f"Fork node {owner}/{name} has an invalid currentPage")
        return cls(
            owner=owner,
            name=name,
            full_name=data.get("fullName") or "",
            html_url=data.get("htmlUrl") or "",
            is_fork=bool(data.get("isFork", False)),
            sub_forks=[cls.from_dict(child) for child in children],
            is_ancestor=data.get("isAncestor"),
            is_owned_by_user=data.get("isOwnedByUser"),
            has_next_page=data.get("hasNextPage"),
            current_page=current_page,
        )

    def to_dict(self, include_children=True) -> dict:
        data = {
            "fullName": self.full_name,
            "htmlUrl": self.html_url,
            "owner": self.owner,
            "name": self.name,
            "isFork": self.is_fork,
        }
        if include_children:
            data["subForks"] = [child.to_dict() for child in self.sub_forks]
            data["hasSubforks"] = self.has_subforks
        if self.is_ancestor is not None:
            data["isAncestor"] = self.is_ancestor
        if self.is_owned_by_user is not None:
            data["isOwnedByUser"] = self.is_owned_by_user
        if self.has_next_page is not None:
            data["hasNextPage"] = self.has_next_page
        if self.current_page is not None:
            data["currentPage"] = self.current_page
        return data


def iter_nodes(nodes):
    """Yield every node of a forest depth-first, parents before children."""
    for node in nodes:
        yield node
        yield from iter_nodes(node.sub_forks)


def parse_tree(raw_nodes):
    """Parse a client-supplied forest. Accepts a single node object or a list."""
    if raw_nodes is None:
        return []
    if isinstance(raw_nodes, (dict, ForkNode)):
        raw_nodes = [raw_nodes]
    if not isinstance(raw_nodes, list):
        raise MalformedTreeError("loadedNodes must be a list of fork nodes")
    return [copy.deepcopy(raw) if isinstance(raw, ForkNode) else ForkNode.from_dict(raw) for raw in raw_nodes]
