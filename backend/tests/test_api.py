def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health_counts_sessions(client, app_engine):
    assert client.get('/health').get_json() == {'status': 'ok', 'sessions': 0}
    app_engine.create_session('sid-1', {'mode': 'versus'})
    assert client.get('/health').get_json()['sessions'] == 1


def test_session_state(client, app_engine):
    code = app_engine.create_session('sid-1', {'mode': 'check', 'targetNumber': 12, 'maxRerolls': 3}).code
    app_engine.join_session('sid-2', code)
    res = client.get(f'/api/sessions/{code.lower()}')
    assert res.status_code == 200
    state = res.get_json()
    assert state == {
        'code': code,
        'status': 'ready',
        'players': ['sid-1', 'sid-2'],
        'settings': {'mode': 'check', 'targetNumber': 12, 'maxRerolls': 3},
        'pendingRolls': {},
        'remainingRerolls': 3,
        'complete': False,
    }


def test_session_state_unknown(client):
    res = client.get('/api/sessions/NOPE00')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Session not found'}


def test_default_config_ships_inside_package():
    from dice_duel.config import Config
    from dice_duel import create_app

    application = create_app(Config)
    assert application.config['SESSION_CODE_LENGTH'] == 6
    assert application.extensions['dice_duel'].registry.code_length == 6
