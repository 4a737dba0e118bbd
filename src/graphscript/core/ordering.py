# -*- coding: utf-8 -*-
"""
Execution Order - Topological ordering over execution edges.

Depth-first traversal seeded by the graph's storage order. Each node is
UNVISITED, IN_PROGRESS or DONE; finishing a node prepends it to the result
(reverse postorder). Reaching an IN_PROGRESS node means the execution
edges form a cycle.

Pure data nodes (no execution pins) are not scheduled; the translator
resolves them on demand through data edges.
"""
from enum import Enum
from typing import Dict, Iterator, List, Tuple, TYPE_CHECKING

from loguru import logger

from .errors import ExecutionCycleError
from .pins import PinKind

if TYPE_CHECKING:
    from .base_node import BaseNode
    from .graph import NodeGraph


class _Mark(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def execution_successors(graph: 'NodeGraph', node: 'BaseNode') -> List['BaseNode']:
    """Nodes reached through the execution outputs of a node, in pin order."""
    successors = []
    for pin in node.output_pins:
        if pin.kind != PinKind.EXECUTION:
            continue
        for conn in graph.get_connections_from_pin(pin.pin_id):
            if conn.source_pin_id != pin.pin_id:
                continue
            target = graph.get_node_for_pin(conn.target_pin_id)
            if target is not None:
                successors.append(target)
    return successors


def get_execution_order(graph: 'NodeGraph') -> List['BaseNode']:
    """
    Order nodes so every execution edge A -> B has A before B.

    The traversal keeps its own stack, so a long chain of nodes does not
    run into the interpreter's recursion limit.

    Args:
        graph: Graph to order

    Returns:
        Nodes with execution pins, in execution order

    Raises:
        ExecutionCycleError: If the execution edges contain a cycle
    """
    marks: Dict[str, _Mark] = {}
    postorder: List['BaseNode'] = []

    for root in graph.nodes.values():
        if not root.has_execution_pins:
            continue
        if marks.get(root.node_id, _Mark.UNVISITED) != _Mark.UNVISITED:
            continue

        marks[root.node_id] = _Mark.IN_PROGRESS
        stack: List[Tuple['BaseNode', Iterator['BaseNode']]] = [
            (root, iter(execution_successors(graph, root)))
        ]
        while stack:
            node, successors = stack[-1]
            successor = next(successors, None)
            if successor is None:
                stack.pop()
                marks[node.node_id] = _Mark.DONE
                postorder.append(node)
                continue

            mark = marks.get(successor.node_id, _Mark.UNVISITED)
            if mark == _Mark.IN_PROGRESS:
                raise ExecutionCycleError(successor.node_id)
            if mark == _Mark.UNVISITED:
                marks[successor.node_id] = _Mark.IN_PROGRESS
                stack.append((successor, iter(execution_successors(graph, successor))))

    result = postorder[::-1]
    logger.debug(f"Execution order: {[n.node_type for n in result]}")
    return result


def find_execution_cycle(graph: 'NodeGraph') -> List[str]:
    """
    Find one cycle among the execution edges.

    Returns:
        Node ids along the first cycle found, or an empty list
    """
    marks: Dict[str, _Mark] = {}

    for root in graph.nodes.values():
        if marks.get(root.node_id, _Mark.UNVISITED) != _Mark.UNVISITED:
            continue

        marks[root.node_id] = _Mark.IN_PROGRESS
        path: List[str] = [root.node_id]
        stack: List[Iterator['BaseNode']] = [iter(execution_successors(graph, root))]
        while stack:
            successor = next(stack[-1], None)
            if successor is None:
                stack.pop()
                marks[path.pop()] = _Mark.DONE
                continue

            mark = marks.get(successor.node_id, _Mark.UNVISITED)
            if mark == _Mark.IN_PROGRESS:
                return path[path.index(successor.node_id):]
            if mark == _Mark.UNVISITED:
                marks[successor.node_id] = _Mark.IN_PROGRESS
                path.append(successor.node_id)
                stack.append(iter(execution_successors(graph, successor)))
    return []
