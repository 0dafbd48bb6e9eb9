import threading
from typing import Dict, List, Optional

from dice_duel.errors import RegistryExhausted
from dice_duel.models import GameConfig, Session, generate_session_code, normalize_code


class SessionRegistry:
    """Live sessions keyed by code.

    The registry lock only guards the code -> session map. Session content
    is guarded by each session's own lock; never take a session lock while
    holding this one.
    """

    def __init__(self, code_length: int = 6, max_attempts: int = 32, code_factory=None):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()
        self.code_length = code_length
        self.max_attempts = max_attempts
        self._code_factory = code_factory or generate_session_code

    def create(self, config: GameConfig, host: str) -> Session:
        with self._lock:
            for _ in range(self.max_attempts):
                code = normalize_code(self._code_factory(self.code_length))
                if code and code not in self._sessions:
                    session = Session(code=code, config=config, players=[host])
                    self._sessions[code] = session
                    return session
        raise RegistryExhausted(f'no free session code after {self.max_attempts} attempts')

    def lookup(self, code) -> Optional[Session]:
        return self._sessions.get(normalize_code(code))

    def remove(self, code, session: Optional[Session] = None) -> None:
        code = normalize_code(code)
        with self._lock:
            current = self._sessions.get(code)
            if current is None:
                return
            # A reused code may already belong to a newer session
            if session is not None and current is not session:
                return
            del self._sessions[code]

    def sessions(self) -> List[Session]:
        with self._lock:
            return list(self._sessions.values())

    def __len__(self):
        return len(self._sessions)

    def __contains__(self, code):
        return normalize_code(code) in self._sessions
