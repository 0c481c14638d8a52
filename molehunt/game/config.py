"""Configuration for a molehunt match."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from molehunt.core.utils import deep_merge


@dataclass
class MatchConfig:
    """Configuration for a single in-memory match.

    All durations are in milliseconds unless the name says otherwise.

    Attributes:
        map_id: Map to load from the map registry
        emergency_warmup_ms: Delay after round start before the button works
        emergency_meetings: Emergency meetings each player may call per match
        round_duration_s: Round timer, in seconds
        kill_cooldown_ms: Delay between two kills by the same mole
        sabotage_cooldown_ms: Delay between two sabotages by the same mole (0 = off)
        self_destruct_duration_ms: Time the crew has to stop a self-destruct
        self_destruct_fixers: Distinct loyalists needed to stop a self-destruct
        seed: Optional seed for reproducible spawns
    """
    map_id: str = "test-map"
    emergency_warmup_ms: int = 20000
    emergency_meetings: int = 1
    round_duration_s: int = 300
    kill_cooldown_ms: int = 30000
    sabotage_cooldown_ms: int = 0
    self_destruct_duration_ms: int = 30000
    self_destruct_fixers: int = 2
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration."""
        if not self.map_id:
            raise ValueError("map_id must be set")

        if self.emergency_warmup_ms < 0:
            raise ValueError("emergency_warmup_ms cannot be negative")
        if self.emergency_meetings < 0:
            raise ValueError("emergency_meetings cannot be negative")

        if self.round_duration_s < 1:
            raise ValueError("round_duration_s must be positive")

        if self.kill_cooldown_ms < 0:
            raise ValueError("kill_cooldown_ms cannot be negative")
        if self.sabotage_cooldown_ms < 0:
            raise ValueError("sabotage_cooldown_ms cannot be negative")

        if self.self_destruct_duration_ms < 1:
            raise ValueError("self_destruct_duration_ms must be positive")
        if self.self_destruct_fixers < 1:
            raise ValueError("self_destruct_fixers must be at least 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchConfig":
        """Build a config from a dict, ignoring keys that are not config fields."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_yaml(cls, path: Union[str, Path], **overrides) -> "MatchConfig":
        """Load config from a YAML file.

        Sections such as ``logging`` are skipped; keyword overrides win over
        the file.
        """
        with open(path, 'r') as f:
            yaml_config = yaml.safe_load(f) or {}

        match_config = {k: v for k, v in yaml_config.items()
                        if k not in ['game', 'logging']}
        match_config = deep_merge(match_config, overrides)
        return cls.from_dict(match_config)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)
