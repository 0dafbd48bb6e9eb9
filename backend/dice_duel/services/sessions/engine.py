"""Session engine: the authoritative dice game state machine.

The engine knows nothing about sockets. Each command takes the requester's
connection id, validates against the session, mutates it under the
session lock and returns a ``CommandResult`` listing what to send and to
whom. Rejected commands raise a ``SessionError`` before touching state.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from dice_duel import errors
from dice_duel.models import GameConfig, Session, normalize_code
from .registry import SessionRegistry
from .rolls import DiceRoller

# Outbound event names
SESSION_CREATED = 'session-created'
SESSION_JOINED = 'session-joined'
SETTINGS_UPDATED = 'game-settings-updated'
PLAYER_JOINED = 'player-joined'
PLAYER_ROLLED = 'player-rolled'
GAME_RESULT = 'game-result'
CHECK_RESULT = 'check-result'
ROUND_RESET = 'round-reset'
SESSION_LEFT = 'session-left'
OPPONENT_LEFT = 'opponent-left'


@dataclass(frozen=True)
class Outbound:
    event: str
    payload: Any
    # Connection id for private events, session code for broadcasts
    to: str
    broadcast: bool = False


def private(sid: str, event: str, payload: Any) -> Outbound:
    return Outbound(event=event, payload=payload, to=sid)


def broadcast(code: str, event: str, payload: Any) -> Outbound:
    return Outbound(event=event, payload=payload, to=code, broadcast=True)


@dataclass
class CommandResult:
    code: Optional[str] = None
    events: List[Outbound] = field(default_factory=list)


class SessionEngine:
    def __init__(self, registry: SessionRegistry, roller=None, notify_opponent_left=False, logger=None):
        self.registry = registry
        self.roller = roller or DiceRoller()
        self.notify_opponent_left = notify_opponent_left
        self.logger = logger or logging.getLogger(__name__)

    # ---- lookup helpers ----

    def _find(self, code) -> Session:
        code = normalize_code(code)
        if not code:
            raise errors.InvalidCommand()
        session = self.registry.lookup(code)
        if session is None:
            raise errors.SessionNotFound()
        return session

    @staticmethod
    def _ensure_open(session: Session) -> None:
        # Emptied while we waited on its lock
        if session.closed:
            raise errors.SessionNotFound()

    @staticmethod
    def _ensure_member(session: Session, sid: str) -> None:
        if sid not in session.players:
            raise errors.NotAPlayer()

    def _roll(self) -> int:
        return int(self.roller())

    # ---- commands ----

    def create_session(self, sid: str, settings) -> CommandResult:
        config = GameConfig.from_payload(settings)
        session = self.registry.create(config, host=sid)
        self.logger.info(
            f"[session-create] code={session.code} mode={config.mode} host={sid} "
            f"target={config.target_number} max_rerolls={config.max_rerolls}"
        )
        return CommandResult(session.code, [private(sid, SESSION_CREATED, session.code)])

    def join_session(self, sid: str, code) -> CommandResult:
        session = self._find(code)
        with session.lock:
            self._ensure_open(session)
            if sid in session.players:
                raise errors.AlreadyInSession()
            if session.is_full:
                raise errors.SessionFull()
            session.players.append(sid)
            players = list(session.players)
            settings = session.config.to_dict()
        self.logger.info(f"[session-join] code={session.code} player={sid} players={len(players)}")
        return CommandResult(session.code, [
            private(sid, SESSION_JOINED, {'code': session.code, 'players': players}),
            private(sid, SETTINGS_UPDATED, settings),
            broadcast(session.code, PLAYER_JOINED, {'players': players}),
        ])

    def roll_dice(self, sid: str, code) -> CommandResult:
        """Versus mode: each player rolls once, higher roll takes the round."""
        session = self._find(code)
        with session.lock:
            self._ensure_open(session)
            if session.config.is_check:
                raise errors.WrongMode()
            self._ensure_member(session, sid)
            state = session.round
            if sid in state.pending_rolls:
                raise errors.AlreadyRolled()

            value = self._roll()
            state.pending_rolls[sid] = value
            events = [broadcast(session.code, PLAYER_ROLLED, {
                'rollerId': sid,
                'value': value,
                'pendingRolls': dict(state.pending_rolls),
            })]

            if len(state.pending_rolls) == session.MAX_PLAYERS:
                events.append(broadcast(session.code, GAME_RESULT, self._resolve_versus(session)))
                state.pending_rolls = {}
        return CommandResult(session.code, events)

    def _resolve_versus(self, session: Session):
        rolls = dict(session.round.pending_rolls)
        host, challenger = session.players[0], session.players[1]
        # Ties go to the host
        winner = host if rolls[host] >= rolls[challenger] else challenger
        tie = rolls[host] == rolls[challenger]
        self.logger.info(
            f"[versus-result] code={session.code} winner={winner} high={rolls[winner]} tie={tie}"
        )
        return {'winner': winner, 'highestRoll': rolls[winner], 'rolls': rolls, 'tie': tie}

    def check_roll(self, sid: str, code) -> CommandResult:
        """Check mode: the challenger rolls against the target until success or out of rerolls."""
        session = self._find(code)
        with session.lock:
            self._ensure_open(session)
            config, state = session.config, session.round
            if not config.is_check:
                raise errors.WrongMode()
            self._ensure_member(session, sid)
            if session.host == sid:
                raise errors.NotChallenger()
            if state.complete or state.rerolls_remaining < 0:
                raise errors.RoundComplete()

            value = self._roll()
            state.pending_rolls[sid] = value
            success = value >= config.target_number
            if not success:
                state.rerolls_remaining -= 1
            complete = success or state.rerolls_remaining < 0

            result = {
                'success': success,
                'roll': value,
                'remainingRerolls': state.rerolls_remaining,
                'rollerId': sid,
                'players': list(session.players),
                'complete': complete,
            }
            if complete:
                # Round closes; rerolls re-arm but the round stays complete until reset-round
                state.complete = True
                state.rearm(config)
            self.logger.info(
                f"[check-roll] code={session.code} roll={value} target={config.target_number} "
                f"success={success} remaining={result['remainingRerolls']} complete={complete}"
            )
        return CommandResult(session.code, [broadcast(session.code, CHECK_RESULT, result)])

    def reset_round(self, sid: str, code) -> CommandResult:
        session = self._find(code)
        with session.lock:
            self._ensure_open(session)
            if not session.config.is_check:
                raise errors.WrongMode()
            self._ensure_member(session, sid)
            session.round.complete = False
            session.round.rearm(session.config)
            payload = {'remainingRerolls': session.round.rerolls_remaining, 'complete': False}
        self.logger.info(f"[round-reset] code={session.code} by={sid}")
        return CommandResult(session.code, [broadcast(session.code, ROUND_RESET, payload)])

    # ---- departures ----

    def _depart(self, session: Session, sid: str) -> Optional[List[str]]:
        """Remove ``sid`` from the session. Returns the remaining players, or None if absent."""
        with session.lock:
            if not session.drop_player(sid):
                return None
            remaining = list(session.players)
            if not remaining:
                session.closed = True
        if not remaining:
            self.registry.remove(session.code, session)
            self.logger.info(f"[session-end] code={session.code} last_player={sid}")
        else:
            self.logger.info(f"[session-leave] code={session.code} player={sid} remaining={len(remaining)}")
        return remaining

    def _opponent_left(self, session: Session, remaining: List[str]) -> List[Outbound]:
        if remaining and self.notify_opponent_left:
            return [broadcast(session.code, OPPONENT_LEFT, {'code': session.code, 'players': remaining})]
        return []

    def leave_session(self, sid: str, code) -> CommandResult:
        session = self._find(code)
        remaining = self._depart(session, sid)
        if remaining is None:
            raise errors.NotAPlayer()
        events = [private(sid, SESSION_LEFT, {'code': session.code})]
        events.extend(self._opponent_left(session, remaining))
        return CommandResult(session.code, events)

    def disconnect(self, sid: str) -> CommandResult:
        """Drop a vanished connection from every session it belonged to."""
        events: List[Outbound] = []
        for session in self.registry.sessions():
            remaining = self._depart(session, sid)
            if remaining is not None:
                events.extend(self._opponent_left(session, remaining))
        return CommandResult(None, events)

    # ---- reads ----

    def snapshot(self, code) -> Optional[dict]:
        session = self.registry.lookup(code)
        if session is None:
            return None
        with session.lock:
            if session.closed:
                return None
            return session.to_dict()
