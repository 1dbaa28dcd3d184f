"""
Match Manager - Creates and tracks independent match controllers.

Each match id owns its own controller and snapshot; nothing is shared
between matches. Matches live in memory; a controller may additionally
persist its own snapshot through a SnapshotStore.
"""

from __future__ import annotations
import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..engine_core.state import AIDifficulty, OpponentType
from ..content.collections import CardCatalog
from ..bots.local_ai import LocalAIPolicy
from ..bots.llm_opponent import LLMOpponentPolicy
from ..bots.policy import OpponentPolicy
from ..llm.config import LLMConfig
from .controller import DEFAULT_DECISION_TIMEOUT, MatchController
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class MatchNotFoundError(KeyError):
    """No match with the given id."""


@dataclass
class MatchSession:
    """A tracked match and its metadata."""
    match_id: str
    controller: MatchController
    created_at: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.controller.snapshot is not None and not self.controller.is_over


class MatchManager:
    """
    Manages match sessions.

    Responsibilities:
    - Create controllers with the right opponent policy
    - Track live matches by id
    - Clean up finished matches
    """

    def __init__(
        self,
        catalog: CardCatalog,
        llm_config: LLMConfig | None = None,
        snapshot_dir: str | Path | None = None,
        decision_timeout: float = DEFAULT_DECISION_TIMEOUT,
    ):
        self.catalog = catalog
        self.llm_config = llm_config or LLMConfig.from_env()
        self.snapshot_dir = Path(snapshot_dir) if snapshot_dir else None
        self.decision_timeout = decision_timeout
        self._sessions: dict[str, MatchSession] = {}

    def build_policy(self, difficulty: AIDifficulty) -> OpponentPolicy:
        """LLM opponent when the turn resolver is enabled, otherwise the local heuristic."""
        if self.llm_config.enable_turn_resolver:
            return LLMOpponentPolicy(config=self.llm_config)
        return LocalAIPolicy(self.catalog, difficulty)

    def create_session(
        self,
        opponent_type: OpponentType = OpponentType.AI,
        ai_difficulty: AIDifficulty = AIDifficulty.MEDIUM,
        policy: OpponentPolicy | None = None,
    ) -> MatchSession:
        """Create an empty session; the caller starts the match on its controller."""
        match_id = str(uuid.uuid4())
        if policy is None and opponent_type is OpponentType.AI:
            policy = self.build_policy(ai_difficulty)

        store = None
        if self.snapshot_dir is not None:
            store = SnapshotStore(self.snapshot_dir / f"{match_id}.json")

        controller = MatchController(
            self.catalog,
            opponent_policy=policy,
            store=store,
            decision_timeout=self.decision_timeout,
        )
        session = MatchSession(match_id=match_id, controller=controller, created_at=time.time())
        self._sessions[match_id] = session
        logger.debug("Created match session %s", match_id)
        return session

    def get_session(self, match_id: str) -> MatchSession:
        """Raises MatchNotFoundError for unknown ids."""
        session = self._sessions.get(match_id)
        if session is None:
            raise MatchNotFoundError(match_id)
        return session

    def end_session(self, match_id: str):
        """Remove a session and its saved snapshot."""
        session = self._sessions.pop(match_id, None)
        if session is None:
            raise MatchNotFoundError(match_id)
        session.controller.reset()

    def list_sessions(self) -> list[MatchSession]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_finished_sessions(self, max_age_seconds: int = 3600) -> int:
        """Remove finished sessions older than max_age. Returns the number removed."""
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if not session.is_active() and now - session.created_at > max_age_seconds
        ]
        for sid in stale:
            self.end_session(sid)
        return len(stale)
