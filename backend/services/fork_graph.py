"""
Fork Graph Service - resolves a repository's lineage for the fork tree view.

Walks parent links upward (ancestry) and fork listings downward (fork tree),
then joins both into a single-root tree. Every resolver method degrades to a
partial result on GitHub errors; only "load more" against a tree that does
not contain its target raises.
"""

import dataclasses
import time
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from .fork_node import ForkNode, iter_nodes, parse_tree
from .github_api import ForkPage, UpstreamFetchError

try:
    from ..config import FORKS_PER_PAGE, MAX_FORK_DEPTH, MAX_CONCURRENT_REQUESTS, RESOLUTION_DEADLINE
except ImportError:
    from config import FORKS_PER_PAGE, MAX_FORK_DEPTH, MAX_CONCURRENT_REQUESTS, RESOLUTION_DEADLINE


class NotFoundInTree(Exception):
    """The node targeted by "load more" is not in the supplied tree."""


def _contains_any(node, keys):
    return any(n.key in keys for n in iter_nodes(node.sub_forks))


class ForkGraphResolver:
    """Request-scoped resolver. Create one per request; never share across requests."""

    def __init__(self, client, viewer_login=None, per_page=FORKS_PER_PAGE, max_depth=MAX_FORK_DEPTH,
                 max_workers=MAX_CONCURRENT_REQUESTS, deadline_seconds=RESOLUTION_DEADLINE,
                 clock=time.monotonic):
        self.client = client
        self.viewer_login = viewer_login
        self.per_page = per_page
        self.max_depth = max_depth
        self.max_workers = max_workers
        self.deadline_seconds = deadline_seconds
        self.clock = clock
        self._deadline = None
        self._memo_lock = threading.Lock()

    # --- Helpers ---

    def is_owned_by_user(self, owner):
        """True when the authenticated caller is the owner (case-insensitive)."""
        return bool(self.viewer_login) and self.viewer_login.lower() == owner.lower()

    def _start_deadline(self):
        if self.deadline_seconds:
            self._deadline = self.clock() + self.deadline_seconds

    def _past_deadline(self):
        return self._deadline is not None and self.clock() >= self._deadline

    def _leaf(self, repo):
        return ForkNode.from_repo(repo, is_owned_by_user=self.is_owned_by_user(repo.owner))

    def seed_memo(self, memo, loaded_nodes):
        """Register previously loaded nodes so they are reused instead of refetched."""
        for node in iter_nodes(parse_tree(loaded_nodes)):
            memo.setdefault(node.key, node)
        return memo

    def _memo_lookup(self, memo, key, blocked):
        with self._memo_lock:
            cached = memo.get(key)
            if cached is None:
                return None
            if cached.is_owned_by_user is None:
                cached.is_owned_by_user = self.is_owned_by_user(cached.owner)
        if _contains_any(cached, blocked):
            # Reusing the cached subtree here would nest a node inside itself.
            print(f"[FORKS] Cached subtree for {key} overlaps the current path, attaching as leaf")
            return dataclasses.replace(cached, sub_forks=[])
        return cached

    def _memo_register(self, memo, key, node):
        with self._memo_lock:
            return memo.setdefault(key, node)

    # --- Pagination ---

    def get_forks_page(self, owner, repo, page=1, per_page=None) -> ForkPage:
        """Fetch one page of direct forks. Errors degrade to an empty last page."""
        per_page = per_page or self.per_page
        print(f"[FORKS] Fetching forks for {owner}/{repo} - page {page}, per_page {per_page}")
        try:
            result = self.client.list_forks(owner, repo, page=page, per_page=per_page)
        except UpstreamFetchError as e:
            print(f"[FORKS] Error fetching forks for {owner}/{repo}: {e}")
            return ForkPage(forks=[], has_next_page=False)
        print(f"[FORKS] Page {page} of {owner}/{repo}: {len(result.forks)} forks, has next: {result.has_next_page}")
        return result

    def list_forks(self, owner, repo, page=1):
        """Direct forks of one page as leaf nodes, with ownership flags."""
        fork_page = self.get_forks_page(owner, repo, page)
        return [self._leaf(f) for f in fork_page.forks], fork_page.has_next_page

    # --- Ancestry ---

    def get_ancestry(self, owner, repo):
        """Return ancestors root-first, nearest parent last. The repo itself is excluded.

        Best-effort: a failed fetch ends the walk and whatever was resolved so
        far is returned.
        """
        print(f"[FORKS] Getting ancestry for {owner}/{repo}")
        nearest_first = []
        seen = {f"{owner}/{repo}"}
        try:
            current = self.client.get_repo(owner, repo)
            while current.is_fork:
                parent = current.parent
                if parent is None:
                    print(f"[FORKS] {current.full_name} is marked as a fork but has no parent, ending ancestry")
                    break
                if parent.key in seen:
                    print(f"[FORKS] Ancestry of {owner}/{repo} revisits {parent.full_name}, ending ancestry")
                    break
                seen.add(parent.key)
                nearest_first.append(ForkNode.from_repo(
                    parent,
                    is_ancestor=True,
                    is_owned_by_user=self.is_owned_by_user(parent.owner),
                ))
                if not parent.is_fork:
                    break
                current = self.client.get_repo(parent.owner, parent.name)
        except UpstreamFetchError as e:
            print(f"[FORKS] Error in ancestry for {owner}/{repo}: {e}")

        nearest_first.reverse()
        print(f"[FORKS] Ancestry chain for {owner}/{repo}: {[a.full_name for a in nearest_first]}")
        return nearest_first

    # --- Fork tree ---

    def build_fork_tree(self, owner, repo, depth=0, max_depth=None, memo=None, page=1,
                        path=frozenset(), exclude=frozenset()):
        """Build the fork subtree rooted at owner/repo.

        Forks are expanded recursively while depth < max_depth; below that,
        direct forks are attached as leaves. Keys on the current path or in
        `exclude` are never attached, which keeps the output acyclic and
        disjoint from the ancestry chain. Never raises on GitHub errors.
        """
        max_depth = self.max_depth if max_depth is None else max_depth
        memo = {} if memo is None else memo
        key = f"{owner}/{repo}"
        blocked = path | exclude

        cached = self._memo_lookup(memo, key, blocked)
        if cached is not None:
            print(f"[FORKS] Using existing data for {key}")
            return cached

        print(f"[FORKS] Building fork tree for {key} at depth {depth}, page {page}")
        try:
            info = self.client.get_repo(owner, repo)
        except UpstreamFetchError as e:
            print(f"[FORKS] Error building fork tree for {key}: {e}")
            return ForkNode.stub(owner, repo, page)

        fork_page = self.get_forks_page(owner, repo, page)
        path = path | {key}
        candidates = []
        for fork in fork_page.forks:
            if fork.key in path or fork.key in exclude:
                print(f"[FORKS] Skipping {fork.full_name} under {key}, already in lineage")
                continue
            candidates.append(fork)

        if depth < max_depth:
            children = self._expand_children(candidates, depth, max_depth, memo, path, exclude)
        else:
            children = [self._leaf(f) for f in candidates]

        # Stable: forks that have forks of their own first, listing order otherwise.
        children.sort(key=lambda child: not child.has_subforks)

        node = ForkNode(
            owner=owner,
            name=repo,
            full_name=info.full_name,
            html_url=info.html_url,
            is_fork=info.is_fork,
            sub_forks=children,
            has_next_page=fork_page.has_next_page,
            current_page=page,
            is_owned_by_user=self.is_owned_by_user(owner),
        )
        return self._memo_register(memo, key, node)

    def _expand_children(self, forks, depth, max_depth, memo, path, exclude):
        """Build each fork's subtree, keeping listing order in the result."""

        def build_one(fork):
            if self._past_deadline():
                print(f"[FORKS] Resolution deadline passed, not expanding {fork.full_name}")
                return self._leaf(fork)
            return self.build_fork_tree(fork.owner, fork.name, depth + 1, max_depth, memo, 1, path, exclude)

        # Only siblings directly under the root fan out; deeper levels stay serial.
        if depth > 0 or self.max_workers <= 1 or len(forks) < 2:
            return [build_one(f) for f in forks]

        start = time.time()
        results = [None] * len(forks)
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(forks))) as executor:
            futures = {executor.submit(build_one, f): i for i, f in enumerate(forks)}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        print(f"[PERF] Expanded {len(forks)} forks in {time.time() - start:.2f}s")
        return results

    def get_full_fork_tree(self, owner, repo, loaded_nodes=None, page=1):
        """Fork tree of owner/repo from depth 0, reusing any previously loaded nodes."""
        self._start_deadline()
        memo = self.seed_memo({}, loaded_nodes)
        return self.build_fork_tree(owner, repo, 0, self.max_depth, memo, page)

    # --- Lineage ---

    def get_complete_lineage(self, owner, repo, loaded_nodes=None, page=1):
        """Join ancestry and fork tree into a one-element list holding the oldest root."""
        print(f"[FORKS] Building complete lineage for {owner}/{repo}, page {page}")
        self._start_deadline()
        memo = self.seed_memo({}, loaded_nodes)

        try:
            ancestry = self.get_ancestry(owner, repo)
        except Exception as e:
            print(f"[FORKS] Ancestry failed for {owner}/{repo}, showing fork tree only: {e}")
            ancestry = []

        exclude = frozenset(a.key for a in ancestry)
        child = self.build_fork_tree(owner, repo, 0, self.max_depth, memo, page, exclude=exclude)
        print(f"[FORKS] Built fork tree from {owner}/{repo} with {len(child.sub_forks)} direct forks")

        for ancestor in reversed(ancestry):
            child = dataclasses.replace(ancestor, sub_forks=[child], is_ancestor=True)

        print(f"[FORKS] Returning lineage with root {child.full_name}")
        return [child]

    # --- Load more ---

    def load_more_forks(self, owner, repo, page, tree):
        """Append page `page` of owner/repo's forks to its node in a copy of `tree`.

        Returns the whole copied tree. Raises NotFoundInTree when the target
        node is absent.
        """
        print(f"[FORKS] Loading more forks for {owner}/{repo}, page {page}")
        nodes = parse_tree(tree)
        trail = _find_trail(nodes, owner, repo)
        if trail is None:
            raise NotFoundInTree(f"Node {owner}/{repo} not found in existing data")

        target = trail[-1]
        blocked = {n.key for n in trail} | {child.key for child in target.sub_forks}
        fork_page = self.get_forks_page(owner, repo, page)
        new_children = [self._leaf(f) for f in fork_page.forks if f.key not in blocked]
        print(f"[FORKS] Found {len(new_children)} more forks for {owner}/{repo} on page {page}")

        target.sub_forks = target.sub_forks + new_children
        target.has_next_page = fork_page.has_next_page
        target.current_page = page
        return nodes

    # --- Search ---

    def search_repositories(self, query):
        """Repository search results trimmed to what the picker shows."""
        items = self.client.search_repos(query, per_page=self.per_page)
        return [
            {
                "id": item.get("id"),
                "full_name": item.get("full_name"),
                "owner": {"login": (item.get("owner") or {}).get("login")},
                "name": item.get("name"),
            }
            for item in items
        ]


def _find_trail(nodes, owner, repo):
    """Depth-first search returning the nodes from a root down to the target."""
    for node in nodes:
        if node.matches(owner, repo):
            return [node]
        trail = _find_trail(node.sub_forks, owner, repo)
        if trail is not None:
            return [node] + trail
    return None
