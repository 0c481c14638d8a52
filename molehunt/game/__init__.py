"""Hidden-role match engine: map, state, tasks, sabotage, emergency meetings."""

from molehunt.game.config import MatchConfig
from molehunt.game.council import CouncilSystem
from molehunt.game.emergency import EmergencyButtonSystem
from molehunt.game.kills import KillSystem
from molehunt.game.map import RoomGraph
from molehunt.game.maps import MapDefinition, MapLoader, TEST_MAP, create_default_loader, validate_map
from molehunt.game.match import Match
from molehunt.game.sabotage import SabotageSystem
from molehunt.game.state import MatchState
from molehunt.game.tasks import TaskManager
from molehunt.game.types import (
    Faction,
    Phase,
    PlayerRole,
    PlayerState,
    PlayerStatus,
    SabotageAction,
    SabotageType,
)

__all__ = [
    "MatchConfig",
    "CouncilSystem",
    "EmergencyButtonSystem",
    "KillSystem",
    "RoomGraph",
    "MapDefinition",
    "MapLoader",
    "TEST_MAP",
    "create_default_loader",
    "validate_map",
    "Match",
    "SabotageSystem",
    "MatchState",
    "TaskManager",
    "Faction",
    "Phase",
    "PlayerRole",
    "PlayerState",
    "PlayerStatus",
    "SabotageAction",
    "SabotageType",
]
