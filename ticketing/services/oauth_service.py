"""
Google OAuth client.

Builds the consent URL and turns an authorization code into the
signed-in user's profile (email, name, Google id).

Config (env/.env): CLIENT_ID, CLIENT_SECRET, REDIRECT_URL.
"""

from typing import Optional
from urllib.parse import urlencode

import requests

from ..errors import UpstreamAuthFailed
from ..logging_config import get_logger
from ..models import OAuthProfile

logger = get_logger("ticketing.oauth")

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

SCOPES = ["profile", "email"]


class GoogleOAuthClient:
    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        redirect_url: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "GoogleOAuthClient":
        return cls(settings.client_id, settings.client_secret, settings.redirect_url)

    def authorization_url(self, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_url,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        try:
            r = self.session.post(
                TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_url,
                    "grant_type": "authorization_code",
                },
                timeout=self.timeout,
            )
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise UpstreamAuthFailed("Authentication failed", status_code=500) from e
        if "error" in data:
            logger.error("Token exchange rejected", extra={"error": data.get("error_description") or data["error"]})
            raise UpstreamAuthFailed("Authentication failed", status_code=500)
        token = data.get("access_token")
        if not token:
            raise UpstreamAuthFailed("Authentication failed", status_code=500)
        return token

    def fetch_profile(self, code: str) -> OAuthProfile:
        """Exchange ``code`` and return the user's profile.

        Raises UpstreamAuthFailed (500) when the exchange or the userinfo call
        fails, and UpstreamAuthFailed (400) when email or name is missing.
        """
        logger.info("Exchanging code for tokens")
        token = self.exchange_code(code)

        logger.info("Fetching user info from Google")
        try:
            r = self.session.get(
                USERINFO_URL,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise UpstreamAuthFailed("Authentication failed", status_code=500) from e

        profile = OAuthProfile(email=data.get("email"), name=data.get("name"), id=data.get("id"))
        if not profile.email or not profile.name:
            logger.error("User info incomplete", extra={"has_email": bool(profile.email), "has_name": bool(profile.name)})
            raise UpstreamAuthFailed()
        return profile
