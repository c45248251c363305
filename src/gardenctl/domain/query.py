"""Tree queries — parse selection strings and match them against a Configuration.

Pure functions over the model. Query syntax::

    alpha            tree, group, or garden named "alpha"
    lib-*            glob over tree, group, and garden names
    @alpha           trees only
    %backend         groups only
    :work            gardens only
    .                the tree containing the current directory
    !beta            exclusion (same forms as above)

Inclusions are applied first, in order, then exclusions, regardless of
where the exclusions appear. The result is deduplicated and reported in
configuration declaration order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase

from gardenctl.domain.errors import CircularGroupReference, UnknownSelector
from gardenctl.domain.model import Configuration, TreeContext
from gardenctl.domain.types import TargetKind

EXCLUDE_PREFIX = "!"
CURRENT_TREE = "."

_GLOB_CHARS = frozenset("*?[")
_SIGILS: dict[str, TargetKind] = {
    "@": TargetKind.TREE,
    "%": TargetKind.GROUP,
    ":": TargetKind.GARDEN,
}
_ALL_KINDS = frozenset(TargetKind)


@dataclass(frozen=True)
class QueryTerm:
    """One whitespace-separated selector in a query."""

    text: str
    pattern: str
    exclude: bool = False
    kinds: frozenset[TargetKind] = _ALL_KINDS

    @property
    def is_glob(self) -> bool:
        return any(ch in _GLOB_CHARS for ch in self.pattern)

    @property
    def is_current(self) -> bool:
        return self.pattern == CURRENT_TREE

    def matches(self, name: str) -> bool:
        """Glob match, or exact match when the pattern has no metacharacters."""
        if self.is_glob:
            return fnmatchcase(name, self.pattern)
        return name == self.pattern


@dataclass(frozen=True)
class Query:
    """A parsed selection string."""

    text: str
    terms: tuple[QueryTerm, ...] = ()

    @property
    def includes(self) -> list[QueryTerm]:
        return [t for t in self.terms if not t.exclude]

    @property
    def excludes(self) -> list[QueryTerm]:
        return [t for t in self.terms if t.exclude]

    @classmethod
    def parse(cls, text: str) -> Query:
        return cls(text=text, terms=tuple(parse_term(token) for token in text.split()))


def parse_term(token: str) -> QueryTerm:
    """Parse a single selector token.

    Examples:
        >>> parse_term("!%backend").exclude
        True
        >>> parse_term("@lib-*").pattern
        'lib-*'
    """
    exclude = token.startswith(EXCLUDE_PREFIX)
    body = token[len(EXCLUDE_PREFIX) :] if exclude else token
    kinds = _ALL_KINDS
    if body[:1] in _SIGILS and len(body) > 1:
        kinds = frozenset({_SIGILS[body[0]]})
        body = body[1:]
    return QueryTerm(text=token, pattern=body, exclude=exclude, kinds=kinds)


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------


def expand_group(config: Configuration, name: str) -> list[str]:
    """Expand group *name* into tree names in declaration order.

    Members may be tree names, group names, or glob patterns over tree
    names. Unknown literal members are ignored (sparse configurations).

    Raises:
        CircularGroupReference: a group transitively contains itself.
    """
    found: dict[str, None] = {}
    _expand_group_into(config, name, found, [])
    return config.sort_trees(list(found))


def _expand_group_into(
    config: Configuration,
    name: str,
    found: dict[str, None],
    stack: list[str],
) -> None:
    if name in stack:
        cycle = [*stack[stack.index(name) :], name]
        raise CircularGroupReference(cycle)
    stack.append(name)
    for member in config.groups[name].members:
        if member in config.groups:
            _expand_group_into(config, member, found, stack)
        elif member in config.trees:
            found.setdefault(member, None)
        elif any(ch in _GLOB_CHARS for ch in member):
            for tree in config.trees:
                if fnmatchcase(tree, member):
                    found.setdefault(tree, None)
    stack.pop()


def expand_garden(config: Configuration, name: str) -> list[str]:
    """Expand garden *name* into tree names in declaration order."""
    garden = config.gardens[name]
    found: dict[str, None] = {}
    for pattern in garden.trees:
        for tree in config.trees:
            if tree == pattern or fnmatchcase(tree, pattern):
                found.setdefault(tree, None)
    for pattern in garden.groups:
        for group in config.groups:
            if group == pattern or fnmatchcase(group, pattern):
                for tree in expand_group(config, group):
                    found.setdefault(tree, None)
    return config.sort_trees(list(found))


def match_term(
    config: Configuration,
    term: QueryTerm,
    *,
    current: Sequence[str] = (),
) -> list[TreeContext]:
    """Return the tree contexts one term selects, deduplicated.

    Gardens are matched first so a tree reached through a garden keeps
    the garden's scope layer; then groups, then trees.
    """
    found: dict[str, TreeContext] = {}

    if term.is_current:
        for tree in current:
            found.setdefault(tree, TreeContext(tree))
        return list(found.values())

    if TargetKind.GARDEN in term.kinds:
        for garden in config.gardens:
            if term.matches(garden):
                for tree in expand_garden(config, garden):
                    found.setdefault(tree, TreeContext(tree, garden))
    if TargetKind.GROUP in term.kinds:
        for group in config.groups:
            if term.matches(group):
                for tree in expand_group(config, group):
                    found.setdefault(tree, TreeContext(tree))
    if TargetKind.TREE in term.kinds:
        for tree in config.trees:
            if term.matches(tree):
                found.setdefault(tree, TreeContext(tree))
    return list(found.values())


def select(
    config: Configuration,
    query: Query,
    *,
    current: Sequence[str] = (),
    strict: bool = False,
) -> list[TreeContext]:
    """Resolve *query* into an ordered, deduplicated list of tree contexts.

    Args:
        config: The workspace model.
        query: Parsed selection.
        current: Tree names the ``.`` selector stands for.
        strict: Raise :class:`UnknownSelector` when an inclusion matches nothing.
    """
    included: dict[str, TreeContext] = {}
    for term in query.includes:
        matched = match_term(config, term, current=current)
        if not matched and strict:
            raise UnknownSelector(term.text, query=query.text)
        for context in matched:
            included.setdefault(context.tree, context)

    excluded: set[str] = set()
    for term in query.excludes:
        excluded.update(context.tree for context in match_term(config, term, current=current))

    order = config.tree_order
    selected = [ctx for tree, ctx in included.items() if tree not in excluded]
    return sorted(selected, key=lambda ctx: order[ctx.tree])
