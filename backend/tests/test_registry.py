import pytest

from dice_duel.errors import RegistryExhausted
from dice_duel.models import GameConfig
from dice_duel.services.sessions import SessionRegistry

VERSUS = GameConfig(mode='versus')


def test_create_and_lookup():
    registry = SessionRegistry()
    session = registry.create(VERSUS, host='sid-a')
    assert len(session.code) == 6
    assert session.players == ['sid-a']
    assert registry.lookup(session.code) is session
    assert registry.lookup(session.code.lower()) is session
    assert session.code in registry
    assert len(registry) == 1


def test_lookup_unknown_code():
    assert SessionRegistry().lookup('NOPE00') is None


def test_create_retries_on_collision():
    codes = iter(['AAAAAA', 'AAAAAA', 'BBBBBB'])
    registry = SessionRegistry(code_factory=lambda length: next(codes))
    first = registry.create(VERSUS, host='a')
    second = registry.create(VERSUS, host='b')
    assert (first.code, second.code) == ('AAAAAA', 'BBBBBB')


def test_create_gives_up_after_max_attempts():
    registry = SessionRegistry(max_attempts=3, code_factory=lambda length: 'AAAAAA')
    registry.create(VERSUS, host='a')
    with pytest.raises(RegistryExhausted):
        registry.create(VERSUS, host='b')
    assert len(registry) == 1


def test_remove_is_idempotent():
    registry = SessionRegistry()
    session = registry.create(VERSUS, host='a')
    registry.remove(session.code)
    registry.remove(session.code)
    assert registry.lookup(session.code) is None


def test_remove_ignores_newer_session_with_reused_code():
    registry = SessionRegistry(code_factory=lambda length: 'REUSED')
    old = registry.create(VERSUS, host='a')
    registry.remove(old.code)
    new = registry.create(VERSUS, host='b')
    registry.remove('REUSED', old)
    assert registry.lookup('REUSED') is new
