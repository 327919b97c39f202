from __future__ import annotations

from decimal import Decimal

from offerwatch.domain.filter import (
    Comparison,
    FilterNode,
    FilterVisitor,
    In,
    accept,
    parse_filter,
)
from offerwatch.domain.model import Listing
from tests.helpers.offers import make_listing


class RenderVisitor:
    """Renders a tree back into fully parenthesised filter text."""

    def visit_comparison(self, node: Comparison) -> str:
        value = node.value if isinstance(node.value, Decimal) else f"'{node.value}'"
        return f"{node.field} {node.operator} {value}"

    def visit_in(self, node: In) -> str:
        values = ", ".join(
            str(value) if isinstance(value, Decimal) else f"'{value}'" for value in node.values
        )
        return f"{node.field} in ({values})"

    def visit_and(self, left: str, right: str) -> str:
        return f"({left} and {right})"

    def visit_or(self, left: str, right: str) -> str:
        return f"({left} or {right})"

    def visit_not(self, operand: str) -> str:
        return f"not {operand}"


class MatchVisitor:
    """Evaluates a tree against a single listing."""

    def __init__(self, listing: Listing) -> None:
        self.listing = listing

    def visit_comparison(self, node: Comparison) -> bool:
        actual = getattr(self.listing, node.field.attribute)
        match node.operator:
            case "eq":
                return actual == node.value
            case "ne":
                return actual != node.value
            case "gt":
                return actual > node.value
            case "ge":
                return actual >= node.value
            case "lt":
                return actual < node.value
            case "le":
                return actual <= node.value
            case "contains":
                return str(node.value).lower() in actual.lower()
            case "startswith":
                return actual.lower().startswith(str(node.value).lower())
            case _:
                return actual.lower().endswith(str(node.value).lower())

    def visit_in(self, node: In) -> bool:
        return getattr(self.listing, node.field.attribute) in node.values

    def visit_and(self, left: bool, right: bool) -> bool:
        return left and right

    def visit_or(self, left: bool, right: bool) -> bool:
        return left or right

    def visit_not(self, operand: bool) -> bool:
        return not operand


def _matches(text: str, listing: Listing) -> bool:
    visitor: FilterVisitor[bool] = MatchVisitor(listing)
    return accept(parse_filter(text), visitor)


def test_render_visitor_makes_precedence_explicit() -> None:
    node = parse_filter("uf eq 'SP' or not city eq 'A' and askingPrice lt 5")

    assert accept(node, RenderVisitor()) == (
        "(uf eq 'SP' or (not city eq 'A' and askingPrice lt 5))"
    )


def test_rendered_text_parses_to_the_same_tree() -> None:
    original: FilterNode = parse_filter(
        "(uf in ('SP', 'RJ') or discountPercent ge 40.5) and not address endswith 'x'"
    )

    assert parse_filter(accept(original, RenderVisitor())) == original


def test_match_visitor_evaluates_against_listing() -> None:
    listing = make_listing(uf="SP", city="Campinas", asking_price=90000)

    assert _matches("uf eq 'SP' and askingPrice lt 100000", listing)
    assert _matches("city contains 'camp'", listing)
    assert _matches("uf in ('RJ', 'SP')", listing)
    assert not _matches("not uf eq 'SP'", listing)
    assert not _matches("askingPrice gt 90000 or city startswith 'Rio'", listing)
