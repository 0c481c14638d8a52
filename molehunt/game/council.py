"""Council meetings: body reports, voting and ejection."""

from typing import Dict, List, Optional

from molehunt.core.types import ActionResult, ErrorKind
from molehunt.core.utils import now_ms as current_ms
from molehunt.game import rules
from molehunt.game.kills import KillSystem
from molehunt.game.state import MatchState
from molehunt.game.types import Phase
from molehunt.logging.formats import EventType

REASON_BODY = "Dead Body Reported"
REASON_EMERGENCY = "Emergency Meeting"
REASON_TIMER = "Round Timer Expired"


class CouncilSystem:
    """Runs one council at a time.

    A council opens on a body report or an emergency call and moves the
    match to VOTING. Every player alive at that moment gets one vote (a
    player ID or skip). The council closes early once a choice reaches a
    majority or everybody has voted; otherwise the caller closes it.
    """

    def __init__(self, state: MatchState, kills: KillSystem, logger=None):
        self.state = state
        self.kills = kills
        self.config = state.config
        self.logger = logger if logger is not None else state.logger

        self.votes: Dict[str, Optional[str]] = {}
        self.living_players: List[str] = []
        self.reason: str = ""
        self.caller_id: Optional[str] = None
        self.results: List[dict] = []

    # --- Opening ---

    def report_body(self, reporter_id: str, body_player_id: Optional[str] = None) -> ActionResult:
        """Report an unreported body in the reporter's room and open a council.

        Args:
            reporter_id: Player reporting
            body_player_id: Which body to report (defaults to the first one
                in the reporter's room)
        """
        if self.state.phase != Phase.ROUND:
            return self._reject(reporter_id, "report", ErrorKind.WRONG_PHASE,
                                "Can only report during round phase")

        reporter = self.state.get_player(reporter_id)
        if reporter is None:
            return self._reject(reporter_id, "report", ErrorKind.PLAYER_NOT_FOUND, "Player not found")
        if not reporter.is_alive:
            return self._reject(reporter_id, "report", ErrorKind.PLAYER_NOT_ALIVE,
                                "Player is not alive")

        room_id = reporter.location.room_id
        body = None
        for candidate in self.state.dead_bodies:
            if candidate.reported or candidate.location.room_id != room_id:
                continue
            if body_player_id is None or candidate.player_id == body_player_id:
                body = candidate
                break

        if body is None:
            return self._reject(reporter_id, "report", ErrorKind.INVALID_TARGET,
                                "No unreported body in this room")

        body.reported = True
        if self.logger:
            self.logger.log(
                EventType.BODY_REPORTED,
                {"body": body.player_id, "room": room_id},
                player_id=reporter_id,
            )

        self.start_council(REASON_BODY, caller_id=reporter_id)
        return ActionResult.ok(body=body.player_id)

    def start_council(self, reason: str, caller_id: Optional[str] = None) -> None:
        """Switch to VOTING and snapshot who may vote."""
        self.state.set_phase(Phase.VOTING)
        self.votes = {}
        self.reason = reason
        self.caller_id = caller_id
        self.living_players = self.state.get_alive_players()

        if self.logger:
            self.logger.log(
                EventType.COUNCIL_CALLED,
                {
                    "reason": reason,
                    "caller": caller_id,
                    "living_player_count": len(self.living_players),
                },
            )

    def is_open(self) -> bool:
        return self.state.phase == Phase.VOTING

    # --- Voting ---

    def cast_vote(self, voter_id: str, target=None, now_ms: Optional[int] = None) -> ActionResult:
        """Record one vote.

        Args:
            voter_id: Voting player
            target: Player ID, or None / "skip" to skip
            now_ms: Timestamp for the next round if this vote closes the council

        Returns:
            ActionResult; ``data["closed"]`` tells whether the council closed
        """
        if not self.is_open():
            return self._reject(voter_id, "vote", ErrorKind.WRONG_PHASE,
                                "Can only vote during voting phase")

        voter = self.state.get_player(voter_id)
        if voter is None:
            return self._reject(voter_id, "vote", ErrorKind.PLAYER_NOT_FOUND, "Player not found")
        if not voter.is_alive or voter_id not in self.living_players:
            return self._reject(voter_id, "vote", ErrorKind.PLAYER_NOT_ALIVE, "Player is not alive")
        if voter_id in self.votes:
            return self._reject(voter_id, "vote", ErrorKind.ALREADY_VOTED,
                                "You have already voted")

        target_id = rules.normalize_vote_target(target)
        if target_id is not None:
            candidate = self.state.get_player(target_id)
            if candidate is None or not candidate.is_alive:
                return self._reject(voter_id, "vote", ErrorKind.INVALID_TARGET,
                                    f"Invalid vote target: {target_id}")

        self.votes[voter_id] = target_id

        if self.logger:
            self.logger.log(
                EventType.VOTE_CAST,
                {"round": self.state.round_number, "target": target_id or "skip"},
                player_id=voter_id,
            )

        if self._decided():
            result = self.close_council(now_ms)
            return ActionResult.ok(closed=True, **result.data)
        return ActionResult.ok(closed=False, votes_cast=len(self.votes))

    def _decided(self) -> bool:
        if len(self.votes) >= len(self.living_players):
            return True
        threshold = rules.majority_threshold(len(self.living_players))
        counts: Dict[Optional[str], int] = {}
        for choice in self.votes.values():
            counts[choice] = counts.get(choice, 0) + 1
        return any(count >= threshold for count in counts.values())

    # --- Closing ---

    def close_council(self, now_ms: Optional[int] = None) -> ActionResult:
        """Tally, eject, check both win conditions, then start the next round."""
        if not self.is_open():
            return ActionResult.fail(ErrorKind.WRONG_PHASE, "No council in session")

        ejected, counts = rules.tally_votes(self.votes, len(self.living_players))
        votes = {("skip" if k is None else k): v for k, v in counts.items()}
        ejected_role = None

        if ejected is not None:
            ejected_role = self.state.players[ejected].role.value
            self.state.mark_ejected(ejected)
            if self.logger:
                self.logger.log(
                    EventType.PLAYER_EJECTED,
                    {
                        "round": self.state.round_number,
                        "ejected": ejected,
                        "name": self.state.players[ejected].name,
                        "role": ejected_role,
                        "votes": votes,
                    },
                )
        elif self.logger:
            self.logger.log(
                EventType.PLAYER_EJECTED,
                {"round": self.state.round_number, "ejected": None, "skipped": True, "votes": votes},
            )

        self.results.append({"reason": self.reason, "ejected": ejected, "votes": votes})
        self.votes = {}
        self.living_players = []

        self.kills.check_win()
        if not self.state.is_over():
            now = current_ms() if now_ms is None else now_ms
            self.state.start_round(start_ms=now)
            # Moles start every round with a full kill cooldown
            self.kills.reset_cooldowns(now + self.config.kill_cooldown_ms)

        return ActionResult.ok(
            ejected=ejected,
            role=ejected_role,
            votes=votes,
            game_over=self.state.is_over(),
        )

    def reset(self) -> None:
        self.votes = {}
        self.living_players = []
        self.reason = ""
        self.caller_id = None
        self.results = []

    def _reject(self, player_id: str, action: str, error: ErrorKind, reason: str) -> ActionResult:
        if self.logger:
            self.logger.log_rejection(player_id, action, error.value, reason)
        return ActionResult.fail(error, reason)
