# src/layout/ranking.py — v1
"""Rank assignment and crossing reduction for layered layouts.

Cycles are broken by reversing the back edges found by a depth-first
search in node order; ranks are the longest-path layering of the
resulting DAG (networkx topological generations). Within a rank, nodes
are reordered by alternating barycenter sweeps.
"""

from __future__ import annotations

import logging

import networkx as nx

logger = logging.getLogger(__name__)


def build_dag(node_ids: list[str], edges: list[tuple[str, str]]) -> nx.DiGraph:
    """Directed graph of the edges with self-loops removed and back edges reversed."""
    graph = nx.DiGraph()
    graph.add_nodes_from(node_ids)
    graph.add_edges_from((u, v) for u, v in edges if u != v)

    back_edges = find_back_edges(graph, node_ids)
    if back_edges:
        logger.debug("Reversing %d back edge(s) to break cycles", len(back_edges))
        graph.remove_edges_from(back_edges)
        graph.add_edges_from((v, u) for u, v in back_edges)
    return graph


def find_back_edges(graph: nx.DiGraph, order: list[str]) -> list[tuple[str, str]]:
    """Edges pointing to a node on the current DFS path."""
    on_path: set[str] = set()
    visited: set[str] = set()
    back: list[tuple[str, str]] = []

    for root in order:
        if root in visited:
            continue
        visited.add(root)
        on_path.add(root)
        stack = [(root, iter(list(graph.successors(root))))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                on_path.discard(node)
                stack.pop()
            elif child in on_path:
                back.append((node, child))
            elif child not in visited:
                visited.add(child)
                on_path.add(child)
                stack.append((child, iter(list(graph.successors(child)))))
    return back


def assign_ranks(node_ids: list[str], edges: list[tuple[str, str]]) -> dict[str, int]:
    """Longest-path rank of every node (sources at rank 0)."""
    dag = build_dag(node_ids, edges)
    ranks: dict[str, int] = {}
    for rank, generation in enumerate(nx.topological_generations(dag)):
        for node in generation:
            ranks[node] = rank
    return ranks


def order_layers(
    node_ids: list[str],
    ranks: dict[str, int],
    edges: list[tuple[str, str]],
    sweeps: int = 4,
) -> list[list[str]]:
    """Group nodes by rank and reduce crossings with barycenter sweeps."""
    depth = max(ranks.values()) + 1 if ranks else 0
    layers: list[list[str]] = [[] for _ in range(depth)]
    for nid in node_ids:
        layers[ranks[nid]].append(nid)

    neighbors_up: dict[str, list[str]] = {nid: [] for nid in node_ids}
    neighbors_down: dict[str, list[str]] = {nid: [] for nid in node_ids}
    for u, v in edges:
        if u == v or u not in ranks or v not in ranks:
            continue
        upper, lower = (u, v) if ranks[u] < ranks[v] else (v, u)
        if ranks[upper] == ranks[lower]:
            continue
        neighbors_up[lower].append(upper)
        neighbors_down[upper].append(lower)

    for sweep in range(sweeps):
        downward = sweep % 2 == 0
        indices = range(1, depth) if downward else range(depth - 2, -1, -1)
        neighbors = neighbors_up if downward else neighbors_down
        for i in indices:
            position = {nid: idx for layer in layers for idx, nid in enumerate(layer)}
            keys: dict[str, tuple[float, int]] = {}
            for idx, nid in enumerate(layers[i]):
                adjacent = neighbors[nid]
                center = (
                    sum(position[a] for a in adjacent) / len(adjacent) if adjacent else float(idx)
                )
                keys[nid] = (center, idx)
            layers[i] = sorted(layers[i], key=keys.__getitem__)
    return layers


def count_crossings(layers: list[list[str]], edges: list[tuple[str, str]]) -> int:
    """Number of crossings between edges joining adjacent layers."""
    layer_of = {nid: i for i, layer in enumerate(layers) for nid in layer}
    position = {nid: idx for layer in layers for idx, nid in enumerate(layer)}
    spans: dict[int, list[tuple[int, int]]] = {}
    for u, v in edges:
        if u not in layer_of or v not in layer_of:
            continue
        lu, lv = layer_of[u], layer_of[v]
        if abs(lu - lv) != 1:
            continue
        if lu > lv:
            u, v, lu = v, u, lv
        spans.setdefault(lu, []).append((position[u], position[v]))

    crossings = 0
    for pairs in spans.values():
        for i, (a1, b1) in enumerate(pairs):
            for a2, b2 in pairs[i + 1:]:
                if (a1 - a2) * (b1 - b2) < 0:
                    crossings += 1
    return crossings
