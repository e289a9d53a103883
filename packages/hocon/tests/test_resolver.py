"""Tests for substitution resolution."""

import logging

import pytest

from dataknobs_hocon import (
    NULL,
    Array,
    Concatenation,
    CyclicSubstitutionError,
    Int,
    InvalidConcatenationError,
    Object,
    PathTraversalError,
    ResolutionError,
    ResolveOptions,
    String,
    Substitution,
    SubstitutionResolver,
    UnresolvedSubstitutionError,
    ValueWithAlternative,
    is_resolved,
    resolve,
)


class TestSubstitutions:
    """Test plain substitutions."""

    def test_simple_substitution(self):
        """Test replacing a reference with the referenced value."""
        root = Object({"a": Int(1), "b": Substitution("a")})
        assert resolve(root) == Object({"a": Int(1), "b": Int(1)})

    def test_nested_path(self):
        """Test a reference to a nested path."""
        root = Object({"x": Object({"y": String("v")}), "z": Substitution("x.y")})
        assert resolve(root)["z"] == String("v")

    def test_transitive_substitution(self):
        """Test that a referenced reference is itself resolved."""
        root = Object({"a": Substitution("b"), "b": Substitution("c"), "c": Int(3)})
        assert resolve(root) == Object({"a": Int(3), "b": Int(3), "c": Int(3)})

    def test_substitution_of_object(self):
        """Test that referenced objects are resolved before use."""
        root = Object(
            {
                "a": Object({"b": Substitution("c")}),
                "c": Int(1),
                "d": Substitution("a"),
            }
        )
        assert resolve(root)["d"] == Object({"b": Int(1)})

    def test_substitution_inside_array(self):
        """Test references held in array elements."""
        root = Object({"a": Int(1), "list": Array([Substitution("a"), Int(2)])})
        assert resolve(root)["list"] == Array([Int(1), Int(2)])

    def test_required_missing(self):
        """Test that a missing required path is an error."""
        root = Object({"a": Substitution("missing")})
        with pytest.raises(UnresolvedSubstitutionError) as exc_info:
            resolve(root)
        assert str(exc_info.value) == "substitution not resolved: ${missing}"
        assert exc_info.value.path == "missing"

    def test_optional_missing_drops_key(self):
        """Test that an absent optional substitution removes its key."""
        root = Object({"a": Int(1), "b": Substitution("missing", optional=True)})
        assert resolve(root) == Object({"a": Int(1)})

    def test_optional_missing_drops_element(self):
        """Test that an absent optional substitution removes its element."""
        root = Object({"list": Array([Int(1), Substitution("missing", optional=True), Int(2)])})
        assert resolve(root)["list"] == Array([Int(1), Int(2)])

    def test_optional_present(self):
        """Test that a present optional substitution resolves normally."""
        root = Object({"a": Int(1), "b": Substitution("a", optional=True)})
        assert resolve(root)["b"] == Int(1)

    def test_null_is_a_value(self):
        """Test that an explicit null is found, not absent."""
        root = Object({"a": NULL, "b": Substitution("a")})
        assert resolve(root)["b"] == NULL

    def test_redirect_through_substitution(self):
        """Test a lookup that passes through a substitution."""
        root = Object(
            {
                "a": Object({"c": Int(1)}),
                "b": Substitution("a"),
                "d": Substitution("b.c"),
            }
        )
        assert resolve(root)["d"] == Int(1)

    def test_lookup_through_concatenation(self):
        """Test a lookup into an object produced by a concatenation."""
        root = Object(
            {
                "x": Concatenation([Object({"p": Int(1)}), Object({"q": Int(2)})]),
                "y": Substitution("x.q"),
            }
        )
        assert resolve(root)["y"] == Int(2)

    def test_traversal_through_scalar(self):
        """Test that a path crossing a scalar is reported."""
        root = Object({"a": Int(1), "b": Substitution("a.c")})
        with pytest.raises(PathTraversalError, match="traverses through a non-object value at: a"):
            resolve(root)

    def test_keys_not_addressable_by_path(self):
        """Test keys that are empty or contain the separator."""
        root = Object({"": Substitution("x"), "a.b": Substitution("x"), "x": Int(2)})
        assert resolve(root) == Object({"": Int(2), "a.b": Int(2), "x": Int(2)})

    def test_empty_key_object_resolves_in_place(self):
        """Test that members of an object under an empty key stay inside it."""
        root = Object(
            {
                "": Object({"k": Int(1), "m": Substitution("k")}),
                "k": Int(99),
                "r": Substitution("", optional=True),
            }
        )
        assert resolve(root) == Object(
            {"": Object({"k": Int(1), "m": Int(99)}), "k": Int(99)}
        )

    def test_empty_path_not_found(self):
        """Test that a substitution of an empty path finds nothing."""
        root = Object({"": Object({"k": Int(1)}), "k": Int(99), "r": Substitution("")})
        with pytest.raises(UnresolvedSubstitutionError):
            resolve(root)

    @pytest.mark.parametrize("path", ["a..c", ".c", "a."])
    def test_empty_segments_not_found(self, path):
        """Test that paths with empty segments never reach an empty key."""
        root = Object(
            {
                "a": Object({"": Object({"c": Int(1)}), "c": Int(2)}),
                "c": Int(3),
                "r": Substitution(path, optional=True),
            }
        )
        assert "r" not in resolve(root)

    def test_redirect_through_empty_substitution(self):
        """Test that a lookup through ${} does not fall back to the root."""
        root = Object(
            {
                "": Object({"c": Int(1)}),
                "c": Int(2),
                "b": Substitution(""),
            }
        )
        resolver = SubstitutionResolver(root)
        assert resolver.resolve_path("b.c") is None


class TestCycles:
    """Test cycle detection."""

    def test_two_node_cycle(self):
        """Test a cycle between two paths."""
        root = Object({"a": Substitution("b"), "b": Substitution("a")})
        with pytest.raises(CyclicSubstitutionError) as exc_info:
            resolve(root)
        assert str(exc_info.value) == "cyclic substitution detected: a -> b -> a"
        assert exc_info.value.chain == ["a", "b"]

    def test_self_reference(self):
        """Test a path that refers to itself."""
        root = Object({"a": Substitution("a")})
        with pytest.raises(CyclicSubstitutionError, match="a -> a"):
            resolve(root)

    def test_cycle_through_nested_path(self):
        """Test a cycle between a nested path and its parent."""
        root = Object({"a": Object({"b": Substitution("a")})})
        with pytest.raises(CyclicSubstitutionError):
            resolve(root)

    def test_optional_cycle_is_still_an_error(self):
        """Test that optional substitutions do not hide cycles."""
        root = Object({"a": Substitution("a", optional=True)})
        with pytest.raises(CyclicSubstitutionError):
            resolve(root)

    def test_errors_share_a_base(self):
        """Test that resolution errors can be caught together."""
        with pytest.raises(ResolutionError):
            resolve(Object({"a": Substitution("a")}))
        with pytest.raises(ResolutionError):
            resolve(Object({"a": Substitution("b")}))


class TestConcatenations:
    """Test concatenation resolution."""

    def test_string_concatenation(self, unresolved_root):
        """Test joining resolved fragments into a string."""
        assert resolve(unresolved_root)["server"]["url"] == String("http://localhost:8080")

    def test_object_concatenation(self, unresolved_root):
        """Test merging a referenced object with an inline object."""
        client = resolve(unresolved_root)["client"]
        assert client == Object({"host": String("localhost"), "port": Int(9090)})

    def test_invalid_concatenation(self):
        """Test that an object cannot concatenate with a string."""
        root = Object(
            {
                "o": Object({"a": Int(1)}),
                "s": Concatenation([Substitution("o"), String("x")]),
            }
        )
        with pytest.raises(InvalidConcatenationError):
            resolve(root)

    def test_absent_fragments_dropped(self):
        """Test that absent optional fragments are skipped."""
        root = Object(
            {
                "s": Concatenation(
                    [String("a"), Substitution("missing", optional=True), String("b")]
                )
            }
        )
        assert resolve(root)["s"] == String("ab")

    def test_all_fragments_absent(self):
        """Test that a concatenation of only absent fragments is absent."""
        root = Object(
            {"a": Int(1), "s": Concatenation([Substitution("missing", optional=True)])}
        )
        assert resolve(root) == Object({"a": Int(1)})

    def test_mode_follows_resolved_fragments(self):
        """Test that a substitution yielding an object selects merge mode."""
        root = Object(
            {
                "base": Object({"a": Int(1)}),
                "merged": Concatenation([Substitution("base"), Substitution("extra")]),
                "extra": Object({"b": Int(2)}),
            }
        )
        assert resolve(root)["merged"] == Object({"a": Int(1), "b": Int(2)})


class TestValueWithAlternative:
    """Test values with alternatives."""

    def test_alternative_wins(self):
        """Test that a resolvable alternative replaces the value."""
        root = Object(
            {
                "default": Int(1),
                "override": Int(2),
                "v": ValueWithAlternative(Substitution("default"), Substitution("override")),
            }
        )
        assert resolve(root)["v"] == Int(2)

    def test_optional_alternative_missing(self):
        """Test fallback when an optional alternative is absent."""
        root = Object(
            {"v": ValueWithAlternative(String("x"), Substitution("missing", optional=True))}
        )
        assert resolve(root)["v"] == String("x")

    def test_required_alternative_missing(self):
        """Test fallback when a required alternative is missing."""
        root = Object({"v": ValueWithAlternative(String("x"), Substitution("missing"))})
        assert resolve(root)["v"] == String("x")

    def test_self_referencing_alternative(self):
        """Test fallback when the alternative refers back to the same path."""
        root = Object({"v": ValueWithAlternative(Int(1), Substitution("v"))})
        assert resolve(root)["v"] == Int(1)

    def test_value_is_resolved(self):
        """Test that the fallback value is itself resolved."""
        root = Object(
            {
                "default": String("d"),
                "v": ValueWithAlternative(Substitution("default"), Substitution("missing")),
            }
        )
        assert resolve(root)["v"] == String("d")

    def test_alternative_ignored_when_unresolved_allowed(self):
        """Test that a kept unresolved alternative does not replace the value."""
        root = Object({"v": ValueWithAlternative(Int(1), Substitution("missing"))})
        options = ResolveOptions(allow_unresolved=True)
        assert resolve(root, options)["v"] == Int(1)


class TestResolveBehaviour:
    """Test whole-document properties of resolution."""

    def test_fixture_document(self, unresolved_root):
        """Test resolving a document with every reference kind."""
        resolved = resolve(unresolved_root)
        assert is_resolved(resolved)
        assert resolved["server"] == Object(
            {"host": String("localhost"), "url": String("http://localhost:8080")}
        )
        assert "proxy" not in resolved["server"]

    def test_idempotent(self, unresolved_root):
        """Test that resolving a resolved tree changes nothing."""
        once = resolve(unresolved_root)
        assert resolve(once) == once

    def test_input_not_modified(self, unresolved_root):
        """Test that resolution builds a new tree."""
        before = str(unresolved_root)
        resolve(unresolved_root)
        assert str(unresolved_root) == before
        assert not is_resolved(unresolved_root)

    def test_allow_unresolved(self):
        """Test that missing required substitutions can be kept."""
        root = Object({"a": Substitution("missing"), "b": Int(1), "c": Substitution("b")})
        resolved = resolve(root, ResolveOptions(allow_unresolved=True))
        assert resolved == Object({"a": Substitution("missing"), "b": Int(1), "c": Int(1)})
        assert not is_resolved(resolved)

    def test_allow_unresolved_in_concatenation(self):
        """Test that a concatenation with a kept substitution stays a concatenation."""
        root = Object({"s": Concatenation([String("a"), Substitution("missing")])})
        resolved = resolve(root, ResolveOptions(allow_unresolved=True))
        assert resolved["s"] == Concatenation([String("a"), Substitution("missing")])

    def test_non_object_root(self):
        """Test that a non-object root resolves structurally."""
        root = Array([Int(1), Substitution("x", optional=True)])
        assert resolve(root) == Array([Int(1)])
        assert resolve(String("s")) == String("s")
        assert resolve(Substitution("x", optional=True)) == NULL
        with pytest.raises(UnresolvedSubstitutionError):
            resolve(Array([Substitution("x")]))

    def test_resolve_path(self, unresolved_root):
        """Test resolving a single path."""
        resolver = SubstitutionResolver(unresolved_root)
        assert resolver.resolve_path("server.url") == String("http://localhost:8080")
        assert resolver.resolve_path("server.proxy") is None
        assert resolver.resolve_path("nowhere") is None

    def test_debug_logging(self, unresolved_root, caplog):
        """Test that dropped keys are logged at debug level."""
        with caplog.at_level(logging.DEBUG, logger="dataknobs_hocon.resolver"):
            resolve(unresolved_root)
        assert "Dropping key 'proxy'" in caplog.text


class TestIsResolved:
    """Test is_resolved."""

    def test_plain_tree(self):
        """Test a tree with no references."""
        assert is_resolved(Object({"a": Array([Int(1)])}))

    def test_nested_reference(self):
        """Test that references are found at any depth."""
        assert not is_resolved(Object({"a": Array([Substitution("x")])}))
        assert not is_resolved(Concatenation([String("a")]))
