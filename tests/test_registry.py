"""Tests for the policy registry."""

import pytest

from ghaudit.exceptions import PolicyRegistryError
from ghaudit.policies import BUILTIN_POLICIES, default_registry
from ghaudit.policies.base import Policy, PolicyMetadata
from ghaudit.policies.registry import PolicyRegistry


def make_policy(policy_id, enabled=True):
    def check(workflow):
        return []

    return Policy(
        PolicyMetadata(id=policy_id, short_description=f"{policy_id} short", long_description="", enabled=enabled),
        check,
    )


class TestPolicyRegistry:
    def test_builtin_ids_in_order(self):
        assert default_registry().ids() == [
            "no_all_permissions",
            "no_github_expr_in_run",
            "no_unpinned_actions",
            "permissions_set",
        ]

    def test_default_registry_is_shared(self):
        assert default_registry() is default_registry()

    def test_builtin_descriptors_are_documented(self):
        for metadata in default_registry().descriptors():
            assert metadata.short_description
            assert metadata.long_description.startswith(f"# {metadata.id}")

    def test_sorted_regardless_of_input_order(self):
        registry = PolicyRegistry([make_policy("zeta"), make_policy("alpha")])
        assert registry.ids() == ["alpha", "zeta"]

    def test_duplicate_identifier_fails(self):
        with pytest.raises(PolicyRegistryError, match="Duplicate"):
            PolicyRegistry([make_policy("same"), make_policy("same")])

    def test_duplicate_builtin_fails(self):
        with pytest.raises(PolicyRegistryError):
            PolicyRegistry([*BUILTIN_POLICIES, BUILTIN_POLICIES[0]])

    def test_invalid_identifier_fails(self):
        with pytest.raises(PolicyRegistryError):
            PolicyRegistry([make_policy("Not-Valid")])

    def test_wrong_signature_fails(self):
        def check(doc, extra):
            return []

        bad = Policy(PolicyMetadata(id="bad", short_description="", long_description=""), check)
        with pytest.raises(PolicyRegistryError):
            PolicyRegistry([bad])

    def test_find_and_contains(self):
        registry = default_registry()
        assert registry.find("permissions_set").id == "permissions_set"
        assert registry.find("missing") is None
        assert "no_all_permissions" in registry
        assert len(registry) == 4


class TestSelect:
    @pytest.fixture
    def registry(self):
        return PolicyRegistry([make_policy("a"), make_policy("b"), make_policy("c", enabled=False)])

    def test_default_skips_disabled_by_metadata(self, registry):
        assert [p.id for p in registry.select()] == ["a", "b"]

    def test_only_includes_not_enabled(self, registry):
        assert [p.id for p in registry.select(only=["c", "a"])] == ["a", "c"]

    def test_disabled(self, registry):
        assert [p.id for p in registry.select(disabled=["a"])] == ["b"]

    def test_generator_arguments(self, registry):
        selected = registry.select(only=(pid for pid in ["a", "b"]))
        assert [p.id for p in selected] == ["a", "b"]

    def test_unknown_identifier(self, registry):
        with pytest.raises(KeyError):
            registry.select(only=["nope"])
        with pytest.raises(KeyError):
            registry.select(disabled=["nope"])
