import re
import string
import secrets
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dice_duel.errors import InvalidSettings

MODE_VERSUS = 'versus'
MODE_CHECK = 'check'
# Older clients send 'vs'
_MODE_ALIASES = {'vs': MODE_VERSUS, MODE_VERSUS: MODE_VERSUS, MODE_CHECK: MODE_CHECK}

DIE_FACES = 20
CODE_ALPHABET = string.ascii_uppercase + string.digits
_INT_RE = re.compile(r'-?[0-9]+')


def generate_session_code(length=6):
    """Generate a short, hard to guess session code."""
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def normalize_code(code) -> str:
    if code is None:
        return ''
    return str(code).strip().upper()


def _as_int(value, name):
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool):
        raise InvalidSettings(f'{name} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    raise InvalidSettings(f'{name} must be an integer')


@dataclass(frozen=True)
class GameConfig:
    """Settings chosen by the host. Never changes after creation."""
    mode: str
    target_number: Optional[int] = None
    max_rerolls: int = 0

    @property
    def is_check(self) -> bool:
        return self.mode == MODE_CHECK

    @classmethod
    def from_payload(cls, data) -> 'GameConfig':
        if not isinstance(data, dict):
            raise InvalidSettings('settings must be an object')
        mode = _MODE_ALIASES.get(str(data.get('mode') or '').strip().lower())
        if mode is None:
            raise InvalidSettings("mode must be 'versus' or 'check'")
        if mode == MODE_VERSUS:
            return cls(mode=mode)

        target = data.get('targetNumber')
        if target is None:
            raise InvalidSettings('targetNumber is required in check mode')
        target = _as_int(target, 'targetNumber')
        if not 1 <= target <= DIE_FACES:
            raise InvalidSettings(f'targetNumber must be between 1 and {DIE_FACES}')

        rerolls = data.get('maxRerolls')
        rerolls = 0 if rerolls is None else _as_int(rerolls, 'maxRerolls')
        if rerolls < 0:
            raise InvalidSettings('maxRerolls cannot be negative')
        return cls(mode=mode, target_number=target, max_rerolls=rerolls)

    def to_dict(self):
        return {
            'mode': self.mode,
            'targetNumber': self.target_number,
            'maxRerolls': self.max_rerolls,
        }


@dataclass
class RoundState:
    """Per-round bookkeeping, reset every time a round concludes."""
    pending_rolls: Dict[str, int] = field(default_factory=dict)
    rerolls_remaining: Optional[int] = None
    complete: bool = False

    def rearm(self, config: GameConfig) -> None:
        self.pending_rolls = {}
        self.rerolls_remaining = config.max_rerolls if config.is_check else None


@dataclass(eq=False)
class Session:
    code: str
    config: GameConfig
    players: List[str] = field(default_factory=list)
    round: RoundState = field(default_factory=RoundState)
    # Set once the last player leaves; a closed session is never reused
    closed: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    MAX_PLAYERS = 2

    def __post_init__(self):
        if self.config.is_check and self.round.rerolls_remaining is None:
            self.round.rerolls_remaining = self.config.max_rerolls

    @property
    def host(self) -> Optional[str]:
        return self.players[0] if self.players else None

    @property
    def challenger(self) -> Optional[str]:
        return self.players[1] if len(self.players) > 1 else None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.MAX_PLAYERS

    @property
    def status(self) -> str:
        if not self.players:
            return 'empty'
        return 'ready' if self.is_full else 'waiting'

    def drop_player(self, sid: str) -> bool:
        if sid not in self.players:
            return False
        self.players = [p for p in self.players if p != sid]
        self.round.pending_rolls.pop(sid, None)
        return True

    def to_dict(self):
        return {
            'code': self.code,
            'status': self.status,
            'players': list(self.players),
            'settings': self.config.to_dict(),
            'pendingRolls': dict(self.round.pending_rolls),
            'remainingRerolls': self.round.rerolls_remaining,
            'complete': self.round.complete,
        }
