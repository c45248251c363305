"""Tests for QueryService."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from gardenctl.domain.model import TreeContext
from gardenctl.infrastructure.workspace import Workspace
from gardenctl.services.query import QueryService


class TestResolve:
    def test_resolve(self, workspace: Workspace) -> None:
        contexts = QueryService(workspace).resolve("%backend gamma")
        assert [ctx.tree for ctx in contexts] == ["alpha", "beta", "gamma"]

    def test_garden_context(self, workspace: Workspace) -> None:
        assert QueryService(workspace).resolve(":work")[0] == TreeContext("alpha", "work")

    def test_current_tree_uses_settings_cwd(
        self, garden_root: Path, make_workspace: Callable[..., Workspace]
    ) -> None:
        ws = make_workspace(cwd=garden_root / "src" / "beta")
        assert [ctx.tree for ctx in QueryService(ws).resolve(".")] == ["beta"]

    def test_strict_from_settings(
        self, garden_root: Path, make_workspace: Callable[..., Workspace]
    ) -> None:
        ws = make_workspace(strict=True)
        result = QueryService(ws).select("ghost")
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "UNKNOWN_SELECTOR"
        assert result.exit_code == 64


class TestSelect:
    def test_items(self, workspace: Workspace) -> None:
        result = QueryService(workspace).select(":work !gamma")
        assert result.ok
        assert result.op == "select"
        assert result.data["count"] == 1
        assert result.data["items"] == [{"tree": "alpha", "garden": "work"}]

    def test_empty_selection_is_ok(self, workspace: Workspace) -> None:
        result = QueryService(workspace).select("nosuch*")
        assert result.ok
        assert result.data["items"] == []

    def test_circular_group(
        self, write_config: Callable[..., Path], make_workspace: Callable[..., Workspace]
    ) -> None:
        write_config("trees:\n  t: {}\ngroups:\n  a: [b]\n  b: [a]\n")
        result = QueryService(make_workspace()).select("%a")
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "CIRCULAR_GROUP"
        assert result.error.detail["cycle"] == ["a", "b", "a"]
        assert result.exit_code == 78
