"""QueryService — resolve tree queries against the workspace.

(See :mod:`gardenctl.domain.query` for the query syntax.)
"""

from __future__ import annotations

import logging

from gardenctl.domain.errors import GardenError
from gardenctl.domain.model import TreeContext
from gardenctl.domain.query import Query, select
from gardenctl.services.base import BaseService
from gardenctl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class QueryService(BaseService):
    """Turns selection strings into ordered tree contexts."""

    def resolve(self, query: str, *, strict: bool | None = None) -> list[TreeContext]:
        """Resolve *query* into tree contexts in declaration order.

        Raises:
            CircularGroupReference: a selected group contains itself.
            UnknownSelector: strict mode and an inclusion matched nothing.
        """
        parsed = Query.parse(query)
        current: list[str] = []
        if any(term.is_current for term in parsed.terms):
            current = self._workspace.current_trees()
        if strict is None:
            strict = self._workspace.settings.strict
        contexts = select(self._config, parsed, current=current, strict=strict)
        logger.debug("Query %r selected %d trees", query, len(contexts))
        return contexts

    def select(self, query: str) -> ServiceResult:
        """Resolve *query* and report the selected trees."""
        try:
            contexts = self.resolve(query)
        except GardenError as exc:
            return ServiceResult.failure("select", exc, data={"query": query})

        items = [{"tree": ctx.tree, "garden": ctx.garden} for ctx in contexts]
        return ServiceResult(
            ok=True,
            op="select",
            data={"query": query, "count": len(items), "items": items},
        )
