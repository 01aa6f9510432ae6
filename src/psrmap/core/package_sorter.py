"""
Package ordering.

Packages are sorted so that every package comes after the packages it
requires. This is the order in which ``files`` rules are included, so a
package's bootstrap files can rely on its dependencies' being loaded.

The requirement graph is a NetworkX ``DiGraph`` whose edges point from a
dependency to its dependent. Requirement cycles are condensed into a
single node and ties are broken by the original position of each package,
which keeps the output deterministic.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

import networkx as nx

from .types import Package

logger = logging.getLogger(__name__)


def _name_index(packages: List[Package]) -> Dict[str, int]:
    """Map every name a package answers to onto its position."""
    index: Dict[str, int] = {}
    for position, package in enumerate(packages):
        for name in package.names:
            index.setdefault(name, position)
    # a package's own name beats another package providing it
    for position, package in enumerate(packages):
        index[package.name] = position
    return index


def build_requirement_graph(packages: List[Package], root: Optional[Package] = None) -> nx.DiGraph:
    """
    Build the dependency graph between the given packages.

    Nodes are positions in ``packages``. Dev requirements only count for
    the root package, since other packages' dev requirements are never
    installed.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(range(len(packages)))
    names = _name_index(packages)

    for position, package in enumerate(packages):
        links = list(package.requires)
        if root is not None and package is root:
            links.extend(package.dev_requires)

        for target in links:
            dependency = names.get(target)
            if dependency is None or dependency == position:
                continue
            graph.add_edge(dependency, position)

    return graph


def sort_packages(packages: List[Package], root: Optional[Package] = None) -> List[Package]:
    """
    Order packages dependencies-first.

    Args:
        packages: Packages in their original order.
        root: The root package, if it is part of ``packages``.

    Returns:
        A new list; packages in a requirement cycle stay in input order
        relative to each other.
    """
    graph = build_requirement_graph(packages, root)

    condensed = nx.condensation(graph)
    members = nx.get_node_attributes(condensed, "members")
    order = nx.lexicographical_topological_sort(condensed, key=lambda node: min(members[node]))

    result: List[Package] = []
    for node in order:
        component = sorted(members[node])
        if len(component) > 1:
            logger.debug(
                f"Requirement cycle between {', '.join(packages[i].name for i in component)}"
            )
        result.extend(packages[i] for i in component)
    return result


def reachable_packages(root: Package, packages: Iterable[Package]) -> Set[str]:
    """
    Collect the names reachable from the root's non-dev requirements.

    A requirement satisfied by a package that replaces the required name is
    followed through the replacing package.

    Returns:
        Every required name (after replacement) reachable from the root.
    """
    by_name: Dict[str, Package] = {}
    replaced_by: Dict[str, str] = {}
    for package in packages:
        by_name[package.name] = package
        for replaced in package.replaces:
            replaced_by[replaced] = package.name

    graph = nx.DiGraph()
    graph.add_node(root.name)
    pending = [root]
    seen = {root.name}
    while pending:
        package = pending.pop()
        for target in package.requires:
            target = replaced_by.get(target, target)
            graph.add_edge(package.name, target)
            if target not in seen:
                seen.add(target)
                if target in by_name:
                    pending.append(by_name[target])

    return nx.descendants(graph, root.name)
