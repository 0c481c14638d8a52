"""Type definitions for the hidden-role match."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set


class PlayerRole(Enum):
    """Player roles. Moles are the single covert faction."""
    LOYALIST = "Loyalist"
    MOLE = "Mole"


class PlayerStatus(Enum):
    """Player status. Anything other than ALIVE is terminal."""
    ALIVE = "Alive"
    DEAD = "Dead"
    EJECTED = "Ejected"


class Phase(Enum):
    """Match phases."""
    LOBBY = "Lobby"
    ROUND = "Round"  # Movement, tasks, kills and sabotage
    VOTING = "Voting"  # Council in session
    GAME_OVER = "GameOver"


class InteractableType(Enum):
    """Kinds of things a player can interact with inside a room."""
    BUTTON = "Button"
    LOG = "Log"
    DOOR = "Door"
    TASK = "Task"


class SabotageType(Enum):
    """Sabotage effects a mole can trigger."""
    LIGHTS = "lights"
    DOORS = "doors"
    SELF_DESTRUCT = "self-destruct"

    @classmethod
    def parse(cls, value) -> Optional["SabotageType"]:
        """Accept an enum member, its value, or the "lights-out" alias."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key == "lights-out":
                key = "lights"
            for member in cls:
                if member.value == key:
                    return member
        return None


class Faction(Enum):
    """Winning sides."""
    LOYALISTS = "loyalists"
    MOLES = "moles"


@dataclass
class Position:
    """Layout position of a room (debug metadata, not used for validation)."""
    x: float = 0
    y: float = 0


@dataclass
class Location:
    """Where a player is: a room plus a fine coordinate inside it."""
    room_id: str
    x: float = 0
    y: float = 0


@dataclass
class Interactable:
    """Something inside a room: the emergency button, ship logs, a task..."""
    interactable_id: str
    type: InteractableType
    name: str = ""
    action: str = ""

    @property
    def is_task(self) -> bool:
        return self.type == InteractableType.TASK


@dataclass
class Room:
    """A room in the map graph."""
    room_id: str
    name: str
    exits: List[str] = field(default_factory=list)
    interactables: List[Interactable] = field(default_factory=list)
    position: Position = field(default_factory=Position)
    description: Optional[str] = None

    def task_ids(self) -> List[str]:
        """IDs of the task interactables in this room."""
        return [i.interactable_id for i in self.interactables if i.is_task]


@dataclass
class PlayerState:
    """State of a single player."""
    player_id: str
    name: str
    role: PlayerRole
    status: PlayerStatus = PlayerStatus.ALIVE
    location: Location = field(default_factory=lambda: Location(room_id=""))

    # Ordered, unique task IDs completed by this player
    tasks: List[str] = field(default_factory=list)
    task_progress: int = 0  # Percent of the task catalog
    emergency_meetings_used: int = 0

    # Moles only: wall-clock ms before which the next kill is refused
    kill_cooldown_until: Optional[int] = None

    @property
    def is_alive(self) -> bool:
        return self.status == PlayerStatus.ALIVE

    @property
    def is_mole(self) -> bool:
        return self.role == PlayerRole.MOLE

    @property
    def is_loyalist(self) -> bool:
        return self.role == PlayerRole.LOYALIST


@dataclass
class DeadBody:
    """A body left behind by a kill."""
    player_id: str
    location: Location
    role: Optional[PlayerRole] = None
    reported: bool = False


@dataclass
class SabotageState:
    """The single active sabotage of a match."""
    sabotage_id: str
    type: SabotageType
    triggered_by: str
    started_at: int
    target_room_id: Optional[str] = None
    contributors: Set[str] = field(default_factory=set)  # Players who helped fix it

    def to_dict(self) -> dict:
        return {
            "sabotage_id": self.sabotage_id,
            "type": self.type.value,
            "triggered_by": self.triggered_by,
            "started_at": self.started_at,
            "target_room_id": self.target_room_id,
            "contributors": sorted(self.contributors),
        }


@dataclass
class SabotageAction:
    """Request to trigger a sabotage."""
    type: SabotageType
    target_room_id: Optional[str] = None


@dataclass
class TaskRecord:
    """One entry of the match-wide task history."""
    player_id: str
    task_id: str
    room_id: Optional[str] = None
