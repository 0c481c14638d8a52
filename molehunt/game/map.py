"""Spatial room graph built from a validated map definition.

This module provides the runtime graph of rooms, exits, vents and
interactables that movement, tasks and the emergency button are checked
against.
"""

import copy
from typing import Dict, List, Optional, Set

from molehunt.game.maps import MapDefinition, SabotageLocation, validate_map
from molehunt.game.types import Interactable, Position, Room


class RoomGraph:
    """Manages the room graph of one loaded map.

    Features:
    - Exit-based movement validation
    - Vent overlay for mole fast-travel
    - Task interactable lookup
    - Designated emergency-button and logs rooms

    The graph is read-only at runtime, apart from edits to a room's
    interactable list, which never affect movement.
    """

    def __init__(self, definition):
        """Build the graph from a map definition.

        Args:
            definition: ``MapDefinition`` or raw map data; raw data is
                validated first and rejected with ``MapValidationError``
        """
        definition = validate_map(definition)
        self.definition: MapDefinition = definition
        self.map_id = definition.id
        self.name = definition.name

        # Fresh Room objects per graph so matches never share mutable rooms
        self.rooms: Dict[str, Room] = {}
        for spec in definition.rooms:
            self.rooms[spec.id] = Room(
                room_id=spec.id,
                name=spec.name,
                exits=list(spec.exits),
                interactables=[
                    Interactable(
                        interactable_id=i.id,
                        type=i.type,
                        name=i.name,
                        action=i.action,
                    )
                    for i in spec.interactables
                ],
                position=Position(x=spec.position.x, y=spec.position.y),
                description=spec.description,
            )

        # Force a symmetric vent graph (prevents one-way typos)
        self.vent_graph: Dict[str, Set[str]] = {room_id: set() for room_id in self.rooms}
        for source, vent in definition.vents.items():
            for dst in vent.connects_to:
                self.vent_graph[source].add(dst)
                self.vent_graph[dst].add(source)

        self.emergency_button_room: str = definition.emergency_button_room
        self.logs_room: str = definition.logs_room
        self.sabotage_locations: List[SabotageLocation] = list(definition.sabotage_locations)

    def get_room(self, room_id: str) -> Optional[Room]:
        """Get a room by ID (the live object, not a copy)."""
        return self.rooms.get(room_id)

    def get_rooms(self) -> List[Room]:
        """Get copies of all rooms, in map order.

        Mutating the returned rooms never changes the graph.
        """
        return [copy.deepcopy(room) for room in self.rooms.values()]

    def get_room_ids(self) -> List[str]:
        return list(self.rooms.keys())

    def validate_movement(self, from_id: str, to_id: str) -> bool:
        """Check if ``to_id`` is an exit of ``from_id``.

        Only the source room's exit list is consulted; map validation has
        already made exits symmetric.
        """
        from_room = self.rooms.get(from_id)
        if from_room is None or to_id not in self.rooms:
            return False
        return to_id in from_room.exits

    def validate_vent(self, from_id: str, to_id: str) -> bool:
        """Check if two rooms are connected by a vent."""
        return to_id in self.get_vent_destinations(from_id)

    def get_adjacent_rooms(self, room_id: str) -> List[str]:
        """Get rooms reachable through exits."""
        room = self.rooms.get(room_id)
        return list(room.exits) if room else []

    def get_vent_destinations(self, room_id: str) -> List[str]:
        """Get rooms reachable through vents (moles only)."""
        return sorted(self.vent_graph.get(room_id, set()))

    def get_task_interactables(self) -> List[Interactable]:
        """Get every Task interactable on the map, in room order."""
        tasks = []
        for room in self.rooms.values():
            tasks.extend(i for i in room.interactables if i.is_task)
        return tasks

    def get_tasks_in_room(self, room_id: str) -> List[str]:
        """Get the IDs of the tasks available in a room."""
        room = self.rooms.get(room_id)
        return room.task_ids() if room else []

    def __repr__(self) -> str:
        return f"RoomGraph(map_id={self.map_id!r}, rooms={len(self.rooms)})"
