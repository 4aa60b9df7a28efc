"""
Invoicer Backend — Include Resolution Tests
=============================================

What we test:
    ✅ Defaults are always present
    ✅ Aliases expand to their deeper paths and keep the short name
    ✅ Unknown names pass through, empty and whitespace tokens are dropped
    ✅ top_level() / scope() split dotted paths for nested rendering
"""

from invoicer.services.includes import INCLUDE_ALIASES, resolve_includes, scope, top_level


class TestResolveIncludes:
    """Tests for resolve_includes()."""

    def test_defaults_only_when_nothing_requested(self):
        assert resolve_includes("", {"contacts"}) == {"contacts"}

    def test_none_parameter_treated_as_empty(self):
        assert resolve_includes(None, {"invoice_items"}) == {"invoice_items"}

    def test_alias_expands_and_keeps_token(self):
        result = resolve_includes("invoices", {"contacts"})
        assert result == {"contacts", "invoices", "invoices.invoice_items"}

    def test_every_alias_expands(self):
        for token, paths in INCLUDE_ALIASES.items():
            result = resolve_includes(token, set())
            assert token in result
            assert set(paths) <= result

    def test_unknown_tokens_pass_through(self):
        result = resolve_includes("payments,,client", set())
        assert result == {"payments", "client", "client.contacts"}

    def test_whitespace_tokens_are_stripped(self):
        result = resolve_includes(" vendor , , invoice ", set())
        assert result == {"vendor", "invoice"}

    def test_defaults_not_duplicated_by_request(self):
        assert resolve_includes("contacts,contacts", {"contacts"}) == {"contacts"}


class TestIncludeScoping:
    """Tests for top_level() and scope()."""

    def test_top_level_takes_first_segment(self):
        assert top_level({"client.contacts", "vendor", "invoices.invoice_items"}) == {
            "client",
            "vendor",
            "invoices",
        }

    def test_scope_returns_paths_below_relation(self):
        includes = {"client", "client.contacts", "vendor", "clientele.x"}
        assert scope(includes, "client") == {"contacts"}

    def test_scope_of_leaf_is_empty(self):
        assert scope({"vendor"}, "vendor") == set()
