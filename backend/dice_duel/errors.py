"""Errors reported back to the connection that issued a rejected command.

Every ``SessionError`` is raised before any state is touched, so the
gateway can turn it into a single private ``error`` event and move on.
"""


class SessionError(Exception):
    message = 'SessionError'
    detail = 'Session command rejected'

    def __init__(self, detail=None):
        if detail:
            self.detail = detail
        super().__init__(self.detail)

    def to_dict(self):
        return {'message': self.message, 'detail': self.detail}


class SessionNotFound(SessionError):
    message = 'SessionNotFound'
    detail = 'Session not found'


class SessionFull(SessionError):
    message = 'SessionFull'
    detail = 'Session is full'


class WrongMode(SessionError):
    message = 'WrongMode'
    detail = 'Wrong game mode'


class NotChallenger(SessionError):
    message = 'NotChallenger'
    detail = 'Only the challenger can roll'


class AlreadyRolled(SessionError):
    message = 'AlreadyRolled'
    detail = 'You have already rolled'


class RoundComplete(SessionError):
    message = 'RoundComplete'
    detail = 'Round is complete'


class InvalidSettings(SessionError):
    message = 'InvalidSettings'
    detail = 'Invalid game settings'


class NotAPlayer(SessionError):
    message = 'NotAPlayer'
    detail = 'You are not a player in this session'


class AlreadyInSession(SessionError):
    message = 'AlreadyInSession'
    detail = 'You are already in this session'


class InvalidCommand(SessionError):
    message = 'InvalidCommand'
    detail = 'code is required'


class RegistryExhausted(RuntimeError):
    """No free session code could be found. Internal, never a user error."""
