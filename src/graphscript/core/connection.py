# -*- coding: utf-8 -*-
"""
Connection - A directed link from an output pin to an input pin.

Connections store pin ids only; the graph owns the pins and keeps their
connected flags consistent. Create connections through
NodeGraph.add_connection, never directly.
"""
from typing import Optional, TYPE_CHECKING
from uuid import uuid4

from .pins import BasePin, PinDirection

if TYPE_CHECKING:
    from .compatibility import TypeCompatibilityChecker


class NodeConnection:
    """
    Represents a connection between two pins.

    Attributes:
        connection_id: Unique identifier
        source_pin_id: Output pin id (data/execution source)
        target_pin_id: Input pin id (data/execution destination)
    """

    def __init__(
        self,
        source_pin_id: str,
        target_pin_id: str,
        connection_id: Optional[str] = None
    ):
        self.connection_id = connection_id or str(uuid4())
        self.source_pin_id = source_pin_id
        self.target_pin_id = target_pin_id

    @staticmethod
    def is_valid(
        source: BasePin,
        target: BasePin,
        checker: Optional['TypeCompatibilityChecker'] = None
    ) -> bool:
        """
        Check that source -> target is a legal connection.

        Source must be an output, target an input, and the pins must
        pass BasePin.can_connect_to.
        """
        if source.direction != PinDirection.OUTPUT or target.direction != PinDirection.INPUT:
            return False
        return source.can_connect_to(target, checker)

    def touches(self, pin_id: str) -> bool:
        return self.source_pin_id == pin_id or self.target_pin_id == pin_id

    def __repr__(self) -> str:
        return f"<Connection {self.source_pin_id[:8]} -> {self.target_pin_id[:8]}>"

    def __eq__(self, other) -> bool:
        if not isinstance(other, NodeConnection):
            return False
        return self.connection_id == other.connection_id

    def __hash__(self) -> int:
        return hash(self.connection_id)
