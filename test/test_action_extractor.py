from __future__ import annotations

from conftest import make_product

from nani_assist.infrastructure.session_store import SessionState
from nani_assist.services.action_extractor import (
    apply_fallback_actions, clean_item_line, extract_cart_actions, resolve_item, scan_cart_block,
)


class TestScanCartBlock:
    def test_block_ends_at_next_tag(self):
        text = "[ITEMS ADDED TO CART]: - Organic Basil\n[RECIPES FOUND]: - Roma Tomatoes"
        assert scan_cart_block(text) == ["- Organic Basil"]

    def test_block_runs_to_end_of_text(self):
        text = "Sure!\n[ITEMS ADDED TO CART]:\n- Organic Basil\n\n* Eggs\nEnjoy your meal"
        assert scan_cart_block(text) == ["- Organic Basil", "* Eggs"]

    def test_bold_tag_and_case(self):
        text = "**[items added to cart]**:\n- Spaghetti"
        assert scan_cart_block(text) == ["- Spaghetti"]

    def test_inline_bullets_on_tag_line(self):
        text = "[ITEMS ADDED TO CART]: - Organic Basil - Roma Tomatoes - $2.49"
        assert scan_cart_block(text) == ["- Organic Basil", "- Roma Tomatoes - $2.49"]

    def test_no_block(self):
        assert scan_cart_block("I found some basil for you.") == []
        assert scan_cart_block("") == []

    def test_only_first_block_is_read(self):
        text = "[ITEMS ADDED TO CART]:\n- Eggs\n[NOTE]\n[ITEMS ADDED TO CART]:\n- Spaghetti"
        assert scan_cart_block(text) == ["- Eggs"]


class TestCleanItemLine:
    def test_markdown_and_price_removed(self):
        assert clean_item_line("- **Organic Basil** ($3.99)") == "Organic Basil"
        assert clean_item_line("* Roma Tomatoes - $2.49") == "Roma Tomatoes"
        assert clean_item_line("-Eggs (approx $5/dozen)") == "Eggs"


class TestResolve:
    def test_turn_results_take_priority(self, catalog):
        searched = [make_product("s1", "Eggs")]
        assert resolve_item("Eggs", searched, catalog).id == "s1"
        assert resolve_item("Spaghetti", searched, catalog).id == "p5"

    def test_plural_forms_resolve(self, catalog):
        tomato_catalog = [make_product("t", "Tomato"), *catalog]
        assert resolve_item("Tomatoes", [], tomato_catalog).id == "t"
        assert resolve_item("Egg", [], catalog).id == "p4"

    def test_never_invents(self, catalog):
        assert resolve_item("Basil", [], catalog) is None
        assert resolve_item("", [], catalog) is None


class TestExtractCartActions:
    def test_boundary_example(self, catalog):
        out = extract_cart_actions("[ITEMS ADDED TO CART]: - Organic Basil\n[RECIPES FOUND]: ...", [], catalog)
        assert [p.name for p in out] == ["Organic Basil"]

    def test_unresolved_names_dropped_in_order(self, catalog):
        text = "[ITEMS ADDED TO CART]:\n- Guanciale\n- **Spaghetti**\n- Eggs ($4.49)"
        assert [p.id for p in extract_cart_actions(text, [], catalog)] == ["p5", "p4"]

    def test_applying_twice_merges_quantities(self, catalog):
        text = "[ITEMS ADDED TO CART]:\n- Spaghetti\n- Eggs"
        st = SessionState(session_id="s")
        for _ in range(2):
            for p in extract_cart_actions(text, [], catalog):
                st.add_to_cart(p, 1)
        assert [(i.id, i.quantity) for i in st.cart] == [("p5", 2), ("p4", 2)]

    def test_fallback_skipped_when_primary_added(self, catalog):
        text = "[ITEMS ADDED TO CART]:\n- Spaghetti"
        assert apply_fallback_actions([catalog[0]], text, [], catalog) == []
        assert [p.id for p in apply_fallback_actions([], text, [], catalog)] == ["p5"]
