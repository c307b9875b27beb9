"""
================================================================================
Selector Resolver
================================================================================

Turns a compound element id such as ``"header:nav:loginButton"`` into a CSS
selector by walking the page-object configuration tree one segment at a time.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Union

from .config_tree import Branch, Helper, Leaf, LeafWithChildren, Node, normalize_key
from .errors import PropertyNotFoundError


# Selector used when an id resolves without any CSS fragment
DEFAULT_SELECTOR = "body"


@dataclass(frozen=True)
class ResolvedSelector:
    """
    Result of a resolution.

    Attributes:
        selector: Space-joined CSS fragments, empty if none were found
        node: The node the last segment resolved to
    """
    selector: str
    node: Optional[Node]

    @property
    def css(self) -> str:
        """Selector to hand to the driver, falling back to the whole document."""
        return self.selector or DEFAULT_SELECTOR


def _join(selector: str, fragment: str) -> str:
    return f"{selector} {fragment.strip()}".strip()


def resolve(
    tree: Union[Mapping[str, Node], Node],
    compound_id: str,
    base_selector: str = "",
    context: str = "",
) -> ResolvedSelector:
    """
    Resolve a compound id against a configuration tree.

    Args:
        tree: Page configuration, or a node returned by an earlier resolution
        compound_id: Colon-separated element path
        base_selector: Selector accumulated by an earlier resolution
        context: Page description included in error messages

    Returns:
        ResolvedSelector with the accumulated selector and final node

    Raises:
        PropertyNotFoundError: When a segment is not configured
    """
    children = tree.children if isinstance(tree, (Leaf, Branch, LeafWithChildren, Helper)) else tree
    selector = base_selector.strip()
    node: Optional[Node] = tree if not isinstance(tree, Mapping) else None

    for segment in compound_id.split(":"):
        node = children.get(normalize_key(segment)) if segment.strip() else None
        if node is None or isinstance(node, Helper):
            raise PropertyNotFoundError(segment, context)

        if isinstance(node, (Leaf, LeafWithChildren)):
            selector = _join(selector, node.selector)
        children = node.children

    return ResolvedSelector(selector, node)


__all__ = [
    "DEFAULT_SELECTOR",
    "ResolvedSelector",
    "resolve",
]
