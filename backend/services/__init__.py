"""
Services package initialization
"""

from .cache import (
    get_cached,
    set_cached,
    clear_cache,
    get_cache_stats,
)
from .github_api import (
    GitHubClient,
    RepoRef,
    ForkPage,
    UpstreamFetchError,
    get_client,
    get_authenticated_user,
)
from .fork_node import ForkNode, MalformedTreeError, iter_nodes, parse_tree
from .fork_graph import ForkGraphResolver, NotFoundInTree
from .repo_service import RepoService, MirrorError, run_git_command

__all__ = [
    'get_cached',
    'set_cached',
    'clear_cache',
    'get_cache_stats',
    'GitHubClient',
    'RepoRef',
    'ForkPage',
    'UpstreamFetchError',
    'get_client',
    'get_authenticated_user',
    'ForkNode',
    'MalformedTreeError',
    'iter_nodes',
    'parse_tree',
    'ForkGraphResolver',
    'NotFoundInTree',
    'RepoService',
    'MirrorError',
    'run_git_command',
]
