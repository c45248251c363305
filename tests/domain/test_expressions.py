"""Tests for expression classification and substitution."""

from gardenctl.domain.expressions import Expression, classify, find_references, substitute
from gardenctl.domain.types import ExpressionKind


class TestClassify:
    def test_literal(self) -> None:
        assert classify("plain text") is ExpressionKind.LITERAL
        assert classify("$HOME and ${VAR:-x}") is ExpressionKind.LITERAL

    def test_interpolation(self) -> None:
        assert classify("${TREE_PATH}/bin") is ExpressionKind.INTERPOLATION

    def test_escape_counts_as_interpolation(self) -> None:
        assert classify("literal $${brace}") is ExpressionKind.INTERPOLATION

    def test_command(self) -> None:
        assert classify("$ git rev-parse HEAD") is ExpressionKind.COMMAND

    def test_dollar_without_space_is_not_command(self) -> None:
        assert classify("$git") is ExpressionKind.LITERAL


class TestExpression:
    def test_command_body_strips_prefix(self) -> None:
        expr = Expression("$ echo ${name}")
        assert expr.kind is ExpressionKind.COMMAND
        assert expr.body == "echo ${name}"
        assert expr.references == ["name"]

    def test_references_in_first_appearance_order(self) -> None:
        assert Expression("${b}-${a}-${b}").references == ["b", "a"]


class TestFindReferences:
    def test_dotted_and_dashed_names(self) -> None:
        assert find_references("${tree.name} ${my-var}") == ["tree.name", "my-var"]

    def test_escape_is_not_a_reference(self) -> None:
        assert find_references("$${HOME}") == []


class TestSubstitute:
    def test_replaces_known_names(self) -> None:
        values = {"a": "1", "b": "2"}
        assert substitute("${a}+${b}", values.get) == "1+2"

    def test_none_keeps_reference(self) -> None:
        assert substitute("echo ${unknown}", lambda name: None) == "echo ${unknown}"

    def test_escape_collapses(self) -> None:
        assert substitute("cost: $${price}", lambda name: "X") == "cost: ${price}"

    def test_replacement_is_not_rescanned(self) -> None:
        assert substitute("${a}", lambda name: "${b}") == "${b}"
