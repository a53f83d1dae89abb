"""
Tests for the HTML page shell routing.
"""

import pytest

from ubuntumeet.meeting.recorder import MIME_TYPE, PERMISSION_ALERT


@pytest.mark.parametrize("path", ["/", "/signin", "/signup"])
def test_public_pages_render(client, path):
    response = client.get(path)

    assert response.status_code == 200
    assert "UbuntuMeet" in response.text
    assert 'href="/signin"' in response.text


def test_signup_prefills_name(client):
    response = client.get("/signup", params={"name": "Zola <b>"})

    assert 'value="Zola &lt;b&gt;"' in response.text


@pytest.mark.parametrize("path", ["/dashboard", "/profile"])
def test_private_pages_redirect_to_signin(client, path):
    response = client.get(path, follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/signin"


def test_dashboard_page_for_signed_in_user(signed_in_client):
    response = signed_in_client.get("/dashboard")

    assert response.status_code == 200
    assert "Start Instant Meeting" in response.text
    assert 'href="/profile"' in response.text


def test_meeting_without_url_redirects_to_dashboard(client):
    response = client.get("/meeting/standup", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


def test_meeting_page_has_no_nav_and_embeds_url(client):
    response = client.get("/meeting/standup", params={"url": "https://acme.daily.co/standup</script>"})

    assert response.status_code == 200
    assert "<nav>" not in response.text
    assert '"https://acme.daily.co/standup<\\/script>"' in response.text
    assert "This meeting is private" in response.text


def test_dashboard_renders_server_data_as_text(signed_in_client, mock_supabase):
    markup_name = "<img src=x onerror=alert(1)>"
    mock_supabase.select.side_effect = lambda table, access_token, **kwargs: (
        [{"id": "user-123", "display_name": markup_name}] if table == "profiles" else []
    )

    api = signed_in_client.get("/api/dashboard")
    page = signed_in_client.get("/dashboard")

    assert api.json()["greeting_name"] == markup_name
    assert markup_name not in page.text
    assert "innerHTML" not in page.text
    assert "node.textContent = text" in page.text


def test_meeting_page_recorder_matches_local_recorder(client):
    response = client.get("/meeting/standup", params={"url": "https://acme.daily.co/standup"})

    assert PERMISSION_ALERT in response.text
    assert f'mimeType: "{MIME_TYPE}"' in response.text
    assert "UbuntuMeet-Recording-" in response.text
