"""
Mapping rules: rename, reorder or hide tree nodes from configuration.

Config keys come in three forms:
- ``**/name.md``: global match on a basename, anywhere in the tree
- ``a/b/c.md``: exact path, stored in the trie along its segments
- ``a``: nested config; non-``$`` keys of an object value are children

Values are either a plain string (rename) or an object with ``$name``,
``$order`` and ``$ignore``. Raw values are converted once, when the config
is loaded, into Rename or Detailed; everything downstream works on those.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .models import DocNode

logger = logging.getLogger(__name__)


class MappingConfigError(ValueError):
    """Raised when a mapping value has an unsupported shape."""
    pass


@dataclass
class MappingNode:
    """Trie node. The parent owns its children map exclusively."""
    name: str
    display_name: Optional[str] = None
    order: Optional[int] = None
    ignore: Optional[bool] = None
    children: dict[str, "MappingNode"] = field(default_factory=dict)


@dataclass(frozen=True)
class Rename:
    """Mapping value that only renames a node."""
    name: str

    @property
    def children(self) -> dict[str, "MappingValue"]:
        return {}

    def apply_to(self, node: MappingNode) -> None:
        node.display_name = self.name


@dataclass(frozen=True)
class Detailed:
    """Mapping value with optional name, order, ignore flag and child rules."""
    name: Optional[str] = None
    order: Optional[int] = None
    ignore: Optional[bool] = None
    children: dict[str, "MappingValue"] = field(default_factory=dict)

    def apply_to(self, node: MappingNode) -> None:
        if self.name is not None:
            node.display_name = self.name
        if self.order is not None:
            node.order = self.order
        if self.ignore is not None:
            node.ignore = self.ignore


MappingValue = Union[Rename, Detailed]


@dataclass
class MappingRules:
    """Trie for path matches plus a basename table for global matches."""
    trie: dict[str, MappingNode] = field(default_factory=dict)
    basename: dict[str, MappingNode] = field(default_factory=dict)


def parse_mapping_value(raw: Any, key: str = "") -> MappingValue:
    """
    Convert a raw config value into Rename or Detailed.

    Raises:
        MappingConfigError: If the value is neither a string nor a mapping,
            or a ``$`` field has the wrong type.
    """
    if isinstance(raw, str):
        return Rename(raw)
    if not isinstance(raw, dict):
        raise MappingConfigError(
            f"Mapping for '{key}' must be a string or an object, got {type(raw).__name__}"
        )

    name = raw.get("$name")
    order = raw.get("$order")
    ignore = raw.get("$ignore")
    if name is not None and not isinstance(name, str):
        raise MappingConfigError(f"$name for '{key}' must be a string")
    if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
        raise MappingConfigError(f"$order for '{key}' must be an integer")
    if ignore is not None and not isinstance(ignore, bool):
        raise MappingConfigError(f"$ignore for '{key}' must be a boolean")

    children = {
        str(sub_key): parse_mapping_value(sub_value, f"{key}/{sub_key}" if key else str(sub_key))
        for sub_key, sub_value in raw.items()
        if not str(sub_key).startswith("$")
    }
    return Detailed(name=name, order=order, ignore=ignore, children=children)


def parse_mapping_config(raw: Optional[dict[str, Any]]) -> dict[str, MappingValue]:
    """Convert a whole raw mapping section."""
    return {str(key): parse_mapping_value(value, str(key)) for key, value in (raw or {}).items()}


def _get_or_create(scope: dict[str, MappingNode], key: str) -> MappingNode:
    node = scope.get(key)
    if node is None:
        node = MappingNode(name=key)
        scope[key] = node
    return node


def _insert_nested(scope: dict[str, MappingNode], key: str, value: MappingValue) -> None:
    node = _get_or_create(scope, key)
    value.apply_to(node)
    for sub_key, sub_value in value.children.items():
        _insert_nested(node.children, sub_key, sub_value)


def _insert_exact_path(trie: dict[str, MappingNode], key: str, value: MappingValue) -> None:
    # "a//b/c/" -> ["a", "b", "c"]
    segments = [segment for segment in key.split("/") if segment]
    if not segments:
        return

    scope = trie
    for segment in segments[:-1]:
        scope = _get_or_create(scope, segment).children
    _insert_nested(scope, segments[-1], value)


def build_mapping_tree(mapping: Optional[dict[str, MappingValue]] = None) -> MappingRules:
    """
    Build the trie and basename table from parsed mapping values.

    Args:
        mapping: Config keys mapped to Rename/Detailed values.

    Returns:
        MappingRules ready for apply_mapping().
    """
    rules = MappingRules()

    for key, value in (mapping or {}).items():
        if key.startswith("**/"):
            clean_key = key[3:]
            node = MappingNode(name=clean_key)
            value.apply_to(node)
            rules.basename[clean_key] = node
        elif "/" in key:
            _insert_exact_path(rules.trie, key, value)
        else:
            _insert_nested(rules.trie, key, value)

    return rules


def apply_mapping(
    nodes: list[DocNode],
    rules: MappingRules,
    scope: Optional[dict[str, MappingNode]] = None,
) -> list[DocNode]:
    """
    Copy matching rule values onto tree nodes.

    A trie match at the current level wins over the basename table. The trie
    scope only descends into the children of a matched node; unmatched
    directories are matched against the basename table alone.

    Returns:
        The same nodes, updated in place.
    """
    if scope is None:
        scope = rules.trie

    for node in nodes:
        trie_rule = scope.get(node.name)
        basename_rule = rules.basename.get(node.name)

        for rule in (trie_rule, basename_rule):
            if rule is None:
                continue
            if node.meta.mapping_name is None and rule.display_name is not None:
                node.meta.mapping_name = rule.display_name
            if node.meta.mapping_order is None and rule.order is not None:
                node.meta.mapping_order = rule.order
            if node.meta.mapping_ignore is None and rule.ignore is not None:
                node.meta.mapping_ignore = rule.ignore

        if node.children:
            next_scope = trie_rule.children if trie_rule is not None else {}
            apply_mapping(node.children, rules, next_scope)

    return nodes
