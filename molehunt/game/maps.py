"""Map definitions: schema, topology validation, built-in maps and the loader.

A map is authored as plain data (a dict, or a YAML file with the same
shape) and validated in two passes before any ``RoomGraph`` is built:

1. Schema: pydantic checks field types, enum values and required keys.
2. Topology: room ids are unique, every exit and vent points at a known
   room, exits are symmetric, and the designated emergency-button and logs
   rooms exist and hold a Button / Log interactable.

Any failure raises ``MapValidationError``. A bad map is a deployment error,
never a runtime game event.
"""

import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from molehunt.core.exceptions import ConfigurationError, MapValidationError
from molehunt.game.types import InteractableType, SabotageType


class InteractableSpec(BaseModel):
    """An interactable as authored in a map file."""
    id: str = Field(description="Unique interactable ID like 'emergency-button'")
    type: InteractableType = Field(description="Button, Log, Door or Task")
    name: str = Field(default="", description="Human-readable name")
    action: str = Field(default="", description="Action label shown to agents")


class PositionSpec(BaseModel):
    x: float = 0
    y: float = 0


class RoomSpec(BaseModel):
    """A room as authored in a map file."""
    id: str = Field(description="Unique room ID like 'council-room'")
    name: str = Field(description="Human-readable name")
    description: Optional[str] = None
    exits: List[str] = Field(default_factory=list, description="IDs of adjacent rooms")
    interactables: List[InteractableSpec] = Field(default_factory=list)
    position: PositionSpec = Field(default_factory=PositionSpec)


class VentConnection(BaseModel):
    connects_to: List[str] = Field(default_factory=list)


class SabotageLocation(BaseModel):
    """Where a sabotage can be triggered, and which room it targets."""
    type: SabotageType
    room_id: str
    target_room_id: Optional[str] = None


class MapDefinition(BaseModel):
    """Complete map: rooms, vents, sabotage locations and special rooms."""
    id: str
    name: str
    description: Optional[str] = None
    rooms: List[RoomSpec] = Field(min_length=1)
    vents: Dict[str, VentConnection] = Field(default_factory=dict)
    sabotage_locations: List[SabotageLocation] = Field(default_factory=list)
    emergency_button_room: str
    logs_room: str

    @model_validator(mode="after")
    def check_topology(self) -> "MapDefinition":
        """Enforce the invariants the room graph relies on at runtime."""
        rooms: Dict[str, RoomSpec] = {}
        for room in self.rooms:
            if room.id in rooms:
                raise ValueError(f"Duplicate room id '{room.id}'")
            rooms[room.id] = room

        for room in self.rooms:
            for exit_id in room.exits:
                if exit_id not in rooms:
                    raise ValueError(f"Room '{room.id}' has exit to unknown room '{exit_id}'")
                if exit_id == room.id:
                    raise ValueError(f"Room '{room.id}' has an exit to itself")
                if room.id not in rooms[exit_id].exits:
                    raise ValueError(
                        f"Exit '{room.id}' -> '{exit_id}' is one-way; exits must be symmetric"
                    )

        for source, vent in self.vents.items():
            if source not in rooms:
                raise ValueError(f"Vent in unknown room '{source}'")
            for dst in vent.connects_to:
                if dst not in rooms:
                    raise ValueError(f"Vent in '{source}' leads to unknown room '{dst}'")

        for location in self.sabotage_locations:
            if location.room_id not in rooms:
                raise ValueError(f"Sabotage location in unknown room '{location.room_id}'")
            if location.target_room_id and location.target_room_id not in rooms:
                raise ValueError(
                    f"Sabotage location targets unknown room '{location.target_room_id}'"
                )

        _require_special_room(rooms, self.emergency_button_room, InteractableType.BUTTON,
                              "emergency_button_room")
        _require_special_room(rooms, self.logs_room, InteractableType.LOG, "logs_room")
        return self


def _require_special_room(
    rooms: Dict[str, RoomSpec],
    room_id: str,
    kind: InteractableType,
    label: str,
) -> None:
    room = rooms.get(room_id)
    if room is None:
        raise ValueError(f"{label} '{room_id}' is not a room on this map")
    if not any(i.type == kind for i in room.interactables):
        raise ValueError(f"{label} '{room_id}' has no {kind.value} interactable")


def validate_map(data: Union[Dict[str, Any], MapDefinition]) -> MapDefinition:
    """Validate raw map data.

    Raises:
        MapValidationError: If the map fails schema or topology validation
    """
    if isinstance(data, MapDefinition):
        return data
    try:
        return MapDefinition.model_validate(data)
    except ValidationError as e:
        map_id = data.get("id", "<unknown>") if isinstance(data, dict) else "<unknown>"
        raise MapValidationError(
            f"Invalid map definition '{map_id}'",
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


# --- Built-in development map ---
TEST_MAP: Dict[str, Any] = {
    "id": "test-map",
    "name": "Test Map",
    "description": "Development map for testing game mechanics",
    "rooms": [
        {"id": "center", "name": "Central Hall",
         "exits": ["hallway-west", "hallway-north", "electrical-room"],
         "interactables": [], "position": {"x": 0, "y": 0}},
        {"id": "hallway-west", "name": "West Hallway",
         "exits": ["center", "council-room"],
         "interactables": [], "position": {"x": -1, "y": 0}},
        {"id": "council-room", "name": "Council Room",
         "exits": ["hallway-west"],
         "interactables": [{"id": "emergency-button", "type": "Button",
                            "name": "Emergency Button", "action": "Call Council"}],
         "position": {"x": -2, "y": 0}},
        {"id": "hallway-north", "name": "North Hallway",
         "exits": ["center", "logs-room"],
         "interactables": [], "position": {"x": 0, "y": 1}},
        {"id": "logs-room", "name": "Logs Room",
         "exits": ["hallway-north"],
         "interactables": [{"id": "ship-logs", "type": "Log",
                            "name": "Ship Logs", "action": "View Logs"}],
         "position": {"x": 0, "y": 2}},
        {"id": "electrical-room", "name": "Electrical",
         "exits": ["center"],
         "interactables": [{"id": "rewire-task", "type": "Task",
                            "name": "Rewire", "action": "Fix Wiring"}],
         "position": {"x": 1, "y": 0}},
    ],
    # No vents on the test map
    "vents": {},
    "sabotage_locations": [
        {"type": "lights", "room_id": "electrical-room"},
        {"type": "doors", "room_id": "council-room", "target_room_id": "hallway-west"},
        {"type": "self-destruct", "room_id": "electrical-room"},
    ],
    "emergency_button_room": "council-room",
    "logs_room": "logs-room",
}


class MapLoader:
    """Registry of validated maps.

    The first registered map becomes the default.
    """

    def __init__(self):
        self._maps: Dict[str, MapDefinition] = {}
        self._default_map_id: Optional[str] = None

    def register(self, map_data: Union[Dict[str, Any], MapDefinition]) -> MapDefinition:
        """Validate and register a map definition.

        Raises:
            MapValidationError: If the map is invalid
        """
        definition = validate_map(map_data)
        if not self._maps:
            self._default_map_id = definition.id
        self._maps[definition.id] = definition
        return definition

    def load_file(self, path: Union[str, Path]) -> MapDefinition:
        """Load and register a map from a YAML file."""
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise MapValidationError(f"Map file {path} does not contain a mapping")
        return self.register(data)

    def load_directory(self, directory: Union[str, Path]) -> List[MapDefinition]:
        """Load every ``*.yaml`` / ``*.yml`` map in a directory, in name order."""
        directory = Path(directory)
        paths = sorted(list(directory.glob("*.yaml")) + list(directory.glob("*.yml")))
        return [self.load_file(p) for p in paths]

    def get(self, map_id: str) -> Optional[MapDefinition]:
        return self._maps.get(map_id)

    def has(self, map_id: str) -> bool:
        return map_id in self._maps

    def get_map_ids(self) -> List[str]:
        return list(self._maps.keys())

    def get_default(self) -> Optional[MapDefinition]:
        if self._default_map_id is None:
            return None
        return self._maps.get(self._default_map_id)

    def select_random(self, rng: Optional[random.Random] = None) -> MapDefinition:
        """Select a registered map uniformly at random.

        Raises:
            ConfigurationError: If no maps are registered
        """
        map_ids = self.get_map_ids()
        if not map_ids:
            raise ConfigurationError("No maps registered")
        rng = rng or random.Random()
        return self._maps[rng.choice(map_ids)]


def create_default_loader() -> MapLoader:
    """Loader with the built-in maps registered."""
    loader = MapLoader()
    loader.register(TEST_MAP)
    return loader
