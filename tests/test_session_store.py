from datetime import datetime, timedelta, timezone

from jose import jwt

from hr_portal.schemas.auth import UserProfile
from hr_portal.session.store import PROFILE_KEY, TOKEN_KEY, SessionStore, initials

PROFILE = UserProfile(id="u1", email="jane.doe@example.com", name="Jane Doe", role="HR Manager")


def _jwt(minutes: int, secret: str = "backend-secret") -> str:
    exp = datetime.now(tz=timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode({"sub": "u1", "exp": int(exp.timestamp())}, secret, algorithm="HS256")


def test_token_round_trip_and_authentication_flag():
    session = {}
    store = SessionStore(session)

    assert store.get_token() is None
    assert store.is_authenticated() is False

    store.set_token("abc")
    assert store.get_token() == "abc"
    assert store.is_authenticated() is True

    store.clear()
    assert store.get_token() is None
    assert store.is_authenticated() is False


def test_latest_set_wins_and_clear_is_idempotent():
    store = SessionStore({})
    store.set_token("first")
    store.set_token("second")
    assert store.get_token() == "second"
    store.clear()
    store.clear()
    assert store.is_authenticated() is False


def test_profile_is_serialized_into_the_session():
    session = {}
    store = SessionStore(session)
    store.set_profile(PROFILE)

    assert isinstance(session[PROFILE_KEY], str)
    assert store.get_profile() == PROFILE


def test_malformed_profile_degrades_to_none():
    store = SessionStore({PROFILE_KEY: "{not json"})
    assert store.get_profile() is None

    store = SessionStore({PROFILE_KEY: '{"name": "missing id"}'})
    assert store.get_profile() is None


def test_without_a_session_reads_are_empty_and_writes_are_ignored():
    store = SessionStore(None)
    store.set_token("abc")
    store.set_profile(PROFILE)

    assert store.available is False
    assert store.get_token() is None
    assert store.get_profile() is None
    assert store.is_authenticated() is False
    assert SessionStore.from_request(None).is_authenticated() is False


def test_logout_clears_both_keys_and_redirects_to_login():
    session = {}
    store = SessionStore(session, login_path="/login")
    store.set_token("abc")
    store.set_profile(PROFILE)

    response = store.logout()

    assert TOKEN_KEY not in session and PROFILE_KEY not in session
    assert store.get_token() is None
    assert store.get_profile() is None
    assert response.status_code == 303
    assert response.headers["location"] == "/login"


def test_expired_jwt_is_not_authenticated():
    store = SessionStore({})
    store.set_token(_jwt(-5))
    assert store.is_authenticated() is False

    store.set_token(_jwt(30))
    assert store.is_authenticated() is True


def test_jwt_signature_checked_when_secret_configured():
    store = SessionStore({}, jwt_secret="backend-secret")
    store.set_token(_jwt(30))
    assert store.is_authenticated() is True

    store.set_token(_jwt(30, secret="someone-else"))
    assert store.is_authenticated() is False


def test_initials():
    assert initials("Jane Doe") == "JD"
    assert initials("mary ann van dyke") == "MA"
    assert initials("Cher") == "C"
    assert initials("") == ""
    assert initials(None) == ""
