"""
================================================================================
Page Object Configuration Tree
================================================================================

Normalized, tagged representation of page-object configuration.

Raw configuration (YAML or Python mappings) uses three shapes per entry:

    submit: "button[type=submit]"                  -> Leaf
    header: {nav: "nav.main"}                      -> Branch
    sidebar: ["aside.sidebar", {links: "a.link"}]  -> LeafWithChildren

and callables at the top level become ``Helper`` nodes. Keys are normalized
once, when the tree is built, so lookups are plain dictionary access.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Union

from .errors import ConfigurationError


# Runs of anything but letters and digits separate words
_SEPARATOR_RE = re.compile(r"[\W_]+")


def _is_boundary(prev: str, char: str, following: str) -> bool:
    """Whether a new word starts at ``char``."""
    if prev.isdigit() != char.isdigit():
        return True
    if char.isupper() and not prev.isupper():
        return True
    # Last capital of an acronym starts the next word: "HTMLParser" -> HTML, Parser
    return char.isupper() and prev.isupper() and following.isalpha() and not following.isupper()


def _split_words(chunk: str) -> List[str]:
    words: List[str] = []
    current = ""
    for index, char in enumerate(chunk):
        following = chunk[index + 1:index + 2]
        if current and _is_boundary(current[-1], char, following):
            words.append(current)
            current = ""
        current += char
    if current:
        words.append(current)
    return words


def normalize_key(value: Any) -> str:
    """
    Canonical form of a configuration key, route name or data key.

    Case and word separators are ignored:

        >>> normalize_key("loginButton")
        'login_button'
        >>> normalize_key("Login button")
        'login_button'
        >>> normalize_key("login-button")
        'login_button'
    """
    words = [word for chunk in _SEPARATOR_RE.split(str(value)) for word in _split_words(chunk)]
    if not words:
        raise ConfigurationError(f"Cannot normalize empty key: {value!r}")
    return "_".join(word.lower() for word in words)


@dataclass(frozen=True)
class Leaf:
    """A CSS fragment with no nested entries."""
    selector: str

    @property
    def children(self) -> Mapping[str, "Node"]:
        return {}


@dataclass(frozen=True)
class Branch:
    """A group of nested entries that adds nothing to the selector."""
    children: Mapping[str, "Node"] = field(default_factory=dict)


@dataclass(frozen=True)
class LeafWithChildren:
    """A CSS fragment that also scopes nested entries."""
    selector: str
    children: Mapping[str, "Node"] = field(default_factory=dict)


@dataclass(frozen=True)
class Helper:
    """A page-object helper, called with the page object as first argument."""
    func: Callable[..., Any]

    @property
    def children(self) -> Mapping[str, "Node"]:
        return {}


Node = Union[Leaf, Branch, LeafWithChildren, Helper]
ConfigTree = Dict[str, Node]


def build_node(raw: Any, path: str = "", allow_helpers: bool = False) -> Node:
    """
    Convert one raw configuration value into a tagged node.

    Args:
        raw: String, mapping, ``[selector, mapping]`` pair, callable or node
        path: Dotted location used in error messages
        allow_helpers: Whether callables are accepted at this level

    Raises:
        ConfigurationError: For values that are none of the supported shapes
    """
    if isinstance(raw, (Leaf, Branch, LeafWithChildren, Helper)):
        if isinstance(raw, Helper) and not allow_helpers:
            raise ConfigurationError(f"Helper {path!r} must be declared at the top level")
        return raw
    if isinstance(raw, str):
        return Leaf(raw.strip())
    if isinstance(raw, Mapping):
        return Branch(build_tree(raw, path))
    if isinstance(raw, (list, tuple)):
        if len(raw) == 2 and isinstance(raw[0], str) and isinstance(raw[1], Mapping):
            return LeafWithChildren(raw[0].strip(), build_tree(raw[1], path))
        raise ConfigurationError(
            f"Entry {path!r} must be a [selector, {{children}}] pair, got {raw!r}"
        )
    if callable(raw):
        if not allow_helpers:
            raise ConfigurationError(f"Helper {path!r} must be declared at the top level")
        return Helper(raw)
    raise ConfigurationError(f"Unsupported page object entry {path!r}: {raw!r}")


def build_tree(raw: Mapping[str, Any], path: str = "", allow_helpers: bool = False) -> ConfigTree:
    """
    Normalize a raw configuration mapping into a ``ConfigTree``.

    Two raw keys that normalize to the same name are a configuration error.
    """
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Page object {path or '<root>'!r} must be a mapping, got {raw!r}")

    tree: ConfigTree = {}
    for raw_key, raw_value in raw.items():
        key = normalize_key(raw_key)
        location = f"{path}.{key}" if path else key
        if key in tree:
            raise ConfigurationError(f"Duplicate page object key {location!r} (from {raw_key!r})")
        tree[key] = build_node(raw_value, location, allow_helpers)
    return tree


def _merge_node(base: Node, override: Node) -> Node:
    if isinstance(override, (Leaf, Helper)) or not base.children:
        return override
    children = merge_trees(base.children, override.children)
    if isinstance(override, LeafWithChildren):
        return LeafWithChildren(override.selector, children)
    return Branch(children)


def merge_trees(base: Mapping[str, Node], override: Mapping[str, Node]) -> ConfigTree:
    """
    Deep-merge two trees; ``override`` wins, ``base`` only fills gaps.

    Neither input is modified.
    """
    merged: ConfigTree = dict(base)
    for key, node in override.items():
        merged[key] = _merge_node(merged[key], node) if key in merged else node
    return merged


__all__ = [
    "normalize_key",
    "Leaf",
    "Branch",
    "LeafWithChildren",
    "Helper",
    "Node",
    "ConfigTree",
    "build_node",
    "build_tree",
    "merge_trees",
]
