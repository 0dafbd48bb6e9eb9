"""Session services: registry, dice and the game engine.

Everything here is transport agnostic. Socket handlers and HTTP routes
import from this package, keeping Socket.IO concerns out of the game
rules.
"""

from .engine import CommandResult, Outbound, SessionEngine
from .media import MediaProvider, NullMediaProvider
from .registry import SessionRegistry
from .rolls import DiceRoller

__all__ = [
    'CommandResult',
    'DiceRoller',
    'MediaProvider',
    'NullMediaProvider',
    'Outbound',
    'SessionEngine',
    'SessionRegistry',
]
