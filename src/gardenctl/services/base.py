"""BaseService — foundation for all gardenctl services.

Every service receives a :class:`Workspace` at construction time. The
Workspace provides the configuration model, scope construction, and the
run-scoped evaluator, so services sharing a Workspace share caches.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gardenctl.domain.model import Configuration
    from gardenctl.infrastructure.workspace import Workspace


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ListService(BaseService):
            def list_trees(self, query: str) -> ServiceResult:
                contexts = QueryService(self._workspace).resolve(query)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @property
    def _config(self) -> Configuration:
        return self._workspace.config
