"""Tests for ForkNode parsing and serialization."""

import pytest

from services.fork_node import ForkNode, MalformedTreeError, iter_nodes, parse_tree


class TestForkNodeSerialization:
    """Tests for to_dict / from_dict."""

    def test_full_name_defaults_to_owner_slash_name(self):
        assert ForkNode(owner="acme", name="widget").full_name == "acme/widget"

    def test_to_dict_uses_camel_case_and_omits_unset_optionals(self):
        node = ForkNode(owner="acme", name="widget", html_url="https://github.com/acme/widget")

        assert node.to_dict() == {
            "fullName": "acme/widget",
            "htmlUrl": "https://github.com/acme/widget",
            "owner": "acme",
            "name": "widget",
            "isFork": False,
            "subForks": [],
            "hasSubforks": False,
        }

    def test_to_dict_without_children_is_leaf_shaped(self):
        node = ForkNode(owner="acme", name="widget", is_owned_by_user=True,
                        sub_forks=[ForkNode(owner="bob", name="widget")])

        data = node.to_dict(include_children=False)

        assert "subForks" not in data
        assert "hasSubforks" not in data
        assert data["isOwnedByUser"] is True

    def test_from_dict_recomputes_has_subforks(self):
        node = ForkNode.from_dict({
            "owner": "acme", "name": "widget", "hasSubforks": True, "subForks": [],
        })

        assert node.has_subforks is False
        assert node.to_dict()["hasSubforks"] is False

    def test_from_dict_keeps_pagination_and_flags(self):
        node = ForkNode.from_dict({
            "owner": "acme", "name": "widget", "fullName": "acme/widget",
            "isFork": True, "isAncestor": True, "isOwnedByUser": False,
            "hasNextPage": True, "currentPage": "3",
            "subForks": [{"owner": "bob", "name": "widget"}],
        })

        assert node.is_fork is True
        assert node.is_ancestor is True
        assert node.is_owned_by_user is False
        assert node.has_next_page is True
        assert node.current_page == 3
        assert node.sub_forks[0].full_name == "bob/widget"

    def test_from_dict_accepts_bare_object_children(self):
        node = ForkNode.from_dict({
            "owner": "acme", "name": "widget",
            "subForks": {"owner": "bob", "name": "widget"},
        })

        assert [c.full_name for c in node.sub_forks] == ["bob/widget"]

    def test_from_dict_accepts_owner_object(self):
        node = ForkNode.from_dict({"owner": {"login": "acme"}, "name": "widget"})

        assert node.owner == "acme"

    def test_from_dict_rejects_missing_identity(self):
        with pytest.raises(MalformedTreeError):
            ForkNode.from_dict({"name": "widget"})

    def test_from_dict_rejects_unparseable_page(self):
        with pytest.raises(MalformedTreeError):
            ForkNode.from_dict({"owner": "acme", "name": "widget", "currentPage": "two"})

    def test_round_trip_preserves_tree(self):
        tree = ForkNode(owner="a", name="r", current_page=1, has_next_page=False, sub_forks=[
            ForkNode(owner="b", name="r", is_fork=True, sub_forks=[ForkNode(owner="c", name="r", is_fork=True)]),
        ])

        assert ForkNode.from_dict(tree.to_dict()).to_dict() == tree.to_dict()


class TestParseTree:
    """Tests for parse_tree and iter_nodes."""

    def test_none_is_empty_forest(self):
        assert parse_tree(None) == []

    def test_single_object_becomes_forest(self):
        assert [n.full_name for n in parse_tree({"owner": "a", "name": "r"})] == ["a/r"]

    def test_rejects_non_list(self):
        with pytest.raises(MalformedTreeError):
            parse_tree("a/r")

    def test_copies_existing_nodes(self):
        original = ForkNode(owner="a", name="r", sub_forks=[ForkNode(owner="b", name="r")])

        copied = parse_tree([original])[0]
        copied.sub_forks.append(ForkNode(owner="c", name="r"))

        assert len(original.sub_forks) == 1

    def test_iter_nodes_is_depth_first(self):
        forest = parse_tree([{"owner": "a", "name": "r", "subForks": [
            {"owner": "b", "name": "r", "subForks": [{"owner": "c", "name": "r"}]},
            {"owner": "d", "name": "r"},
        ]}])

        assert [n.owner for n in iter_nodes(forest)] == ["a", "b", "c", "d"]
