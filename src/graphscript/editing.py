# -*- coding: utf-8 -*-
"""
Connection Editor - Two-step connect gesture for editors.

A drag starts on one pin and ends on another, in either direction. The
editor orders the pair into output -> input, asks the pins whether they
may connect, and only then touches the graph.

Example:
    editor = ConnectionEditor(graph)
    if editor.try_begin_connection(print_node.get_input_pin("Exec").pin_id):
        conn = editor.try_complete_connection(start.get_output_pin("Start").pin_id)
"""
from typing import Optional

from loguru import logger

from .core.connection import NodeConnection
from .core.graph import NodeGraph
from .core.pins import BasePin


class ConnectionEditor:
    """
    Connect/disconnect gestures on a graph.

    Attributes:
        graph: Graph being edited
        pending_pin_id: Pin the current gesture started on, if any
    """

    def __init__(self, graph: NodeGraph):
        self.graph = graph
        self.pending_pin_id: Optional[str] = None

    @property
    def is_connecting(self) -> bool:
        return self.pending_pin_id is not None

    def try_begin_connection(self, pin_id: str) -> bool:
        """
        Start a gesture on a pin.

        Returns:
            False if the pin is not in the graph
        """
        if self.graph.find_pin(pin_id) is None:
            self.pending_pin_id = None
            return False
        self.pending_pin_id = pin_id
        return True

    def try_complete_connection(self, pin_id: str) -> Optional[NodeConnection]:
        """
        Finish the gesture on a second pin.

        The gesture ends whatever the outcome.

        Returns:
            The new connection, or None if there was no gesture or the pins
            cannot be connected
        """
        start_id, self.pending_pin_id = self.pending_pin_id, None
        if start_id is None:
            return None

        first = self.graph.find_pin(start_id)
        second = self.graph.find_pin(pin_id)
        if first is None or second is None:
            return None

        source, target = self._order(first, second)
        if source is None or not source.can_connect_to(target, self.graph.checker):
            logger.debug(f"Connection refused: {first!r} / {second!r}")
            return None

        return self.graph.add_connection(source.pin_id, target.pin_id)

    def cancel(self) -> None:
        self.pending_pin_id = None

    def disconnect(self, connection_id: str) -> None:
        self.graph.remove_connection(connection_id)

    @staticmethod
    def _order(a: BasePin, b: BasePin):
        if a.is_output and b.is_input:
            return a, b
        if b.is_output and a.is_input:
            return b, a
        return None, None
