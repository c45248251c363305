"""InspectService — read-only views of the workspace.

``evaluate`` answers "what would this expression become here?" and
``list_trees`` shows a resolved selection with each tree's path.
Nothing here runs a tree command, though evaluating an expression may run
``$ command`` expressions it references.
"""

from __future__ import annotations

import logging
from typing import Any

from gardenctl.domain.errors import GardenError
from gardenctl.domain.model import TreeContext
from gardenctl.services.base import BaseService
from gardenctl.services.query import QueryService
from gardenctl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class InspectService(BaseService):
    """Expression evaluation and selection listing."""

    def evaluate(
        self,
        expression: str,
        tree: str | None = None,
        garden: str | None = None,
    ) -> ServiceResult:
        """Evaluate *expression* in the global scope or in a tree's scope.

        A *garden* is only meaningful together with a *tree*; it adds the
        garden's variables between the global and tree layers.
        """
        op = "eval"
        data: dict[str, Any] = {"expression": expression, "tree": tree, "garden": garden}
        try:
            if tree is None:
                scope = self._workspace.global_scope()
            else:
                context = TreeContext(tree, garden)
                self._config.get_tree(tree)
                if garden is not None:
                    self._config.get_garden(garden)
                scope = self._workspace.scope_for(context)
            value = self._workspace.evaluator.evaluate(expression, scope)
        except GardenError as exc:
            return ServiceResult.failure(op, exc, data=data)

        logger.debug("Evaluated %r in %s", expression, scope.label)
        return ServiceResult(ok=True, op=op, data={**data, "scope": scope.label, "value": value})

    def list_trees(self, query: str = "*", *, variables: bool = False) -> ServiceResult:
        """List the trees selected by *query* with their resolved paths.

        Trees whose path cannot be resolved are still listed, with the
        error in place of the path. With *variables*, every variable
        visible in the tree's scope is resolved and included.
        """
        op = "ls"
        try:
            contexts = QueryService(self._workspace).resolve(query)
        except GardenError as exc:
            return ServiceResult.failure(op, exc, data={"query": query})

        items: list[dict[str, Any]] = []
        warnings: list[str] = []
        for ctx in contexts:
            tree = self._config.get_tree(ctx.tree)
            item: dict[str, Any] = {
                "tree": ctx.tree,
                "garden": ctx.garden,
                "description": tree.description,
            }
            try:
                path = self._workspace.tree_path(ctx)
                item["path"] = str(path)
                item["exists"] = path.is_dir()
                if variables:
                    scope = self._workspace.scope_for(ctx)
                    item["variables"] = self._workspace.evaluator.resolve_all(scope)
            except GardenError as exc:
                item.setdefault("path", None)
                item.setdefault("exists", False)
                item["error"] = exc.message
                warnings.append(f"{ctx.tree}: {exc.message}")
            items.append(item)

        return ServiceResult(
            ok=True,
            op=op,
            data={"query": query, "count": len(items), "items": items},
            warnings=warnings,
        )
