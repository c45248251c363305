"""Tests for the error taxonomy."""

import pytest

from gardenctl.domain.errors import (
    EX_CONFIG,
    EX_USAGE,
    CircularGroupReference,
    CircularVariableReference,
    CommandExpressionFailed,
    ConfigError,
    EvaluationError,
    GardenError,
    SelectionError,
    TreeCommandFailed,
    UndefinedVariable,
    UnknownSelector,
    UnknownTree,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        ("error", "parent"),
        [
            (UndefinedVariable("x", scope="global"), EvaluationError),
            (CircularVariableReference(["a", "a"], scope="global"), EvaluationError),
            (CommandExpressionFailed("false", exit_code=1), EvaluationError),
            (CircularGroupReference(["g", "g"]), SelectionError),
            (UnknownSelector("nope", query="nope"), SelectionError),
            (TreeCommandFailed("alpha", "build", exit_code=2), GardenError),
            (ConfigError("bad"), GardenError),
            (UnknownTree("ghost"), GardenError),
        ],
    )
    def test_subclass(self, error: GardenError, parent: type[GardenError]) -> None:
        assert isinstance(error, parent)
        assert isinstance(error, GardenError)


class TestMessages:
    def test_undefined_variable_names_scope(self) -> None:
        err = UndefinedVariable("nope", scope="tree:alpha")
        assert err.message == "undefined variable 'nope' in scope tree:alpha"
        assert err.detail == {"name": "nope", "scope": "tree:alpha"}
        assert err.code == "UNDEFINED_VARIABLE"
        assert err.exit_code == EX_CONFIG

    def test_cycle_chain(self) -> None:
        err = CircularVariableReference(["a", "b", "a"], scope="global")
        assert "a -> b -> a" in err.message
        assert err.cycle == ["a", "b", "a"]

    def test_command_expression_includes_stderr(self) -> None:
        err = CommandExpressionFailed("git describe", exit_code=128, stderr="fatal: no tags\n")
        assert err.status == 128
        assert err.message.endswith("fatal: no tags")
        assert err.detail["status"] == 128

    def test_circular_group_is_config_error_exit(self) -> None:
        assert CircularGroupReference(["a", "b", "a"]).exit_code == EX_CONFIG

    def test_unknown_selector_is_usage_error(self) -> None:
        err = UnknownSelector("ghost*", query="alpha ghost*")
        assert err.exit_code == EX_USAGE
        assert err.detail == {"term": "ghost*", "query": "alpha ghost*"}

    def test_tree_command_exit_code_is_the_tree_status(self) -> None:
        err = TreeCommandFailed("alpha", "build", exit_code=3)
        assert err.exit_code == 3
        assert err.message == "build failed in alpha with exit status 3"

    def test_unknown_garden(self) -> None:
        assert UnknownTree("work", kind="garden").message == "unknown garden: work"
