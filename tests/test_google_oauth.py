from ticketing.errors import UpstreamAuthFailed
from ticketing.models import OAuthProfile

FRONTEND = "http://localhost:5173"


def test_google_redirects_to_consent_page_with_origin_state(client):
    response = client.get("/google", params={"origin": "https://app.example"}, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "https://accounts.example/auth?state=https://app.example"


def test_callback_without_code_is_rejected(client, store):
    response = client.get("/google/callback", follow_redirects=False)

    assert response.status_code == 400
    assert response.text == "No code provided"
    assert store.tickets == {}


def test_callback_issues_ticket_and_redirects(client, store, notifier, oauth_client):
    response = client.get("/google/callback", params={"code": "abc"}, follow_redirects=False)

    assert response.status_code == 302
    [ticket] = store.tickets.values()
    assert response.headers["location"] == f"{FRONTEND}/ticket/{ticket.id}?showQR=true"
    assert oauth_client.codes == ["abc"]
    user = store.users["grace@example.com"]
    assert user.google_id == "g-123"
    assert ticket.user_id == user.id
    assert ticket.event_id == "tech2025"
    assert notifier.sent[0]["to"] == "grace@example.com"


def test_callback_uses_state_as_origin(client, store):
    response = client.get(
        "/google/callback",
        params={"code": "abc", "state": "https://app.example"},
        follow_redirects=False,
    )

    [ticket] = store.tickets.values()
    assert response.headers["location"] == f"https://app.example/ticket/{ticket.id}?showQR=true"


def test_google_login_drops_origin_not_in_allow_list(client):
    response = client.get("/google", params={"origin": "https://evil.example"}, follow_redirects=False)

    assert response.headers["location"] == f"https://accounts.example/auth?state={FRONTEND}"


def test_callback_ignores_forged_state(client, store, code_generator):
    response = client.get(
        "/google/callback",
        params={"code": "abc", "state": "https://evil.example/phish"},
        follow_redirects=False,
    )

    [ticket] = store.tickets.values()
    assert response.headers["location"] == f"{FRONTEND}/ticket/{ticket.id}?showQR=true"
    assert code_generator.encoded == [f"{FRONTEND}/ticket/{ticket.id}"]


def test_repeat_oauth_login_issues_new_ticket_for_same_user(client, store):
    first = client.get("/google/callback", params={"code": "one"}, follow_redirects=False)
    second = client.get("/google/callback", params={"code": "two"}, follow_redirects=False)

    assert first.status_code == second.status_code == 302
    assert first.headers["location"] != second.headers["location"]
    assert len(store.users) == 1
    assert len(store.tickets) == 2
    assert {t.user_id for t in store.tickets.values()} == {store.users["grace@example.com"].id}


def test_callback_incomplete_profile(client, store, oauth_client):
    oauth_client.error = UpstreamAuthFailed()

    response = client.get("/google/callback", params={"code": "abc"}, follow_redirects=False)

    assert response.status_code == 400
    assert response.text == "Failed to get user info"
    assert store.users == {}


def test_callback_token_exchange_failure(client, oauth_client):
    oauth_client.error = UpstreamAuthFailed("Authentication failed", status_code=500)

    response = client.get("/google/callback", params={"code": "abc"}, follow_redirects=False)

    assert response.status_code == 500
    assert response.text == "Authentication failed"


def test_callback_code_generation_failure(client, store, code_generator):
    code_generator.fail = True

    response = client.get("/google/callback", params={"code": "abc"}, follow_redirects=False)

    assert response.status_code == 500
    assert response.text == "Authentication failed"
    assert store.tickets == {}


def test_callback_existing_user_keeps_original_details(client, store, oauth_client):
    store.create_user("Ada", "grace@example.com", "manual-registration")
    oauth_client.profile = OAuthProfile(email="grace@example.com", name="Grace Hopper", id="g-999")

    response = client.get("/google/callback", params={"code": "abc"}, follow_redirects=False)

    assert response.status_code == 302
    user = store.users["grace@example.com"]
    assert user.name == "Ada"
    assert user.google_id == "manual-registration"
