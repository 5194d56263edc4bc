# jobhub/middleware/query_limits.py
"""
Graphene middleware that rejects operations nested deeper than a limit or asking for
the same field under too many aliases. Fragments are inlined before measuring, so a
fragment spread counts for the depth of the fields it contributes.

Depth counts nesting levels: `{ jobs }` has depth 1, `{ jobs { title } }` depth 2.
"""

import logging

from graphql import GraphQLError
from graphql.language.ast import FieldNode, FragmentSpreadNode, InlineFragmentNode

log = logging.getLogger(__name__)

INTROSPECTION_FIELDS = ("__schema", "__type")


class QueryLimitError(GraphQLError):
    pass


class _Analysis:
    def __init__(self, fragments: dict, max_aliases: int):
        self.fragments = fragments
        self.max_aliases = max_aliases
        self.aliases = {}

    def depth(self, selection_set, path=()) -> int:
        """ Deepest nesting below selection_set, following fragment spreads. """
        if selection_set is None:
            return 0
        deepest = 0
        for node in selection_set.selections:
            if isinstance(node, FieldNode):
                self._count_alias(node)
                deepest = max(deepest, 1 + self.depth(node.selection_set, path))
            elif isinstance(node, FragmentSpreadNode):
                name = node.name.value
                if name in path:
                    raise QueryLimitError(
                        f"Circular fragment reference detected: {' -> '.join(path + (name,))}."
                    )
                fragment = self.fragments.get(name)
                if fragment is None:
                    raise QueryLimitError(f"Fragment '{name}' was spread but not defined.")
                deepest = max(deepest, self.depth(fragment.selection_set, path + (name,)))
            elif isinstance(node, InlineFragmentNode):
                deepest = max(deepest, self.depth(node.selection_set, path))
        return deepest

    def _count_alias(self, node: FieldNode):
        name = node.name.value
        alias = node.alias.value if node.alias else name
        seen = self.aliases.setdefault(name, set())
        seen.add(alias)
        if len(seen) > self.max_aliases:
            raise QueryLimitError(
                f"Too many aliases for the field '{name}'. Limit is {self.max_aliases}, "
                f"found {len(seen)} unique aliases: {sorted(seen)}."
            )


def is_introspection(operation) -> bool:
    selection_set = getattr(operation, "selection_set", None)
    if selection_set is None:
        return False
    return any(
        isinstance(node, FieldNode) and node.name.value in INTROSPECTION_FIELDS
        for node in selection_set.selections
    )


def measure_operation(operation, fragments: dict, max_aliases: int) -> int:
    return _Analysis(fragments or {}, max_aliases).depth(operation.selection_set)


class QueryLimitsMiddleware:
    def __init__(self, max_depth: int, max_aliases: int, introspection_max_depth: int = None):
        self.max_depth = max_depth
        self.max_aliases = max_aliases
        self.introspection_max_depth = (
            max(max_depth, 15) if introspection_max_depth is None else introspection_max_depth
        )
        log.info(
            f"QueryLimitsMiddleware initialized with max_depth={self.max_depth}, "
            f"max_aliases={self.max_aliases}, introspection_max_depth={self.introspection_max_depth}"
        )

    def check(self, operation, fragments: dict) -> int:
        limit = self.introspection_max_depth if is_introspection(operation) else self.max_depth
        depth = measure_operation(operation, fragments, self.max_aliases)
        if depth > limit:
            log.warning(f"Query rejected: depth {depth} exceeds maximum of {limit}.")
            raise QueryLimitError(f"Query exceeds maximum depth of {limit}. Actual depth: {depth}")
        return depth

    def resolve(self, next_, root, info, **args):
        # analyse once per operation, at its root fields
        if info.path.prev is None and getattr(info, "operation", None) is not None:
            self.check(info.operation, info.fragments)
        return next_(root, info, **args)
