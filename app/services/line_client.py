"""
LINE Platform client used by the LIFF login flow.

Only two calls are needed: ID token verification (who is this?) and the
friendship status of the user with the clinic's official account.
"""
from dataclasses import dataclass
from typing import Optional
import logging

import requests

from ..core.config import settings

logger = logging.getLogger(__name__)


class LineApiError(RuntimeError):
    pass


class InvalidLineToken(LineApiError):
    pass


@dataclass
class LineIdentity:
    user_id: str
    display_name: str
    picture_url: Optional[str] = None


class LineClient:
    def __init__(
        self,
        channel_id: str,
        api_base_url: str = "https://api.line.me",
        timeout_sec: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.channel_id = (channel_id or "").strip()
        self.api_base_url = (api_base_url or "https://api.line.me").rstrip("/")
        self.timeout_sec = float(timeout_sec)
        self.session = session or requests.Session()

    def verify_id_token(self, id_token: str) -> LineIdentity:
        token = (id_token or "").strip()
        if not token:
            raise InvalidLineToken("id token is empty")
        if not self.channel_id:
            raise LineApiError("LINE_CHANNEL_ID is not configured")

        try:
            response = self.session.post(
                f"{self.api_base_url}/oauth2/v2.1/verify",
                data={"id_token": token, "client_id": self.channel_id},
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise LineApiError(f"line api connection error: {exc}") from exc

        if response.status_code == 400:
            # LINE answers 400 for expired, tampered or foreign-channel tokens
            raise InvalidLineToken(f"id token rejected: {response.text}")
        if response.status_code >= 400:
            raise LineApiError(f"line api error: status={response.status_code} body={response.text}")

        try:
            payload = response.json()
        except requests.JSONDecodeError as exc:
            raise LineApiError(f"line api returned a non-JSON body: {response.text[:200]}") from exc
        if not isinstance(payload, dict):
            raise LineApiError("line api returned an unexpected payload")
        sub = payload.get("sub")
        if not sub:
            raise InvalidLineToken("id token payload has no subject")
        return LineIdentity(
            user_id=sub,
            display_name=payload.get("name") or "",
            picture_url=payload.get("picture"),
        )

    def get_friendship(self, access_token: str) -> Optional[bool]:
        """Return the friend flag, or None when LINE cannot tell us.

        The value is only a cache on the profile, so failures are logged
        and swallowed here rather than failing the login.
        """
        token = (access_token or "").strip()
        if not token:
            return None
        try:
            response = self.session.get(
                f"{self.api_base_url}/friendship/v1/status",
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            logger.warning(f"Friendship status request failed: {exc}")
            return None
        if response.status_code != 200:
            logger.warning(f"Friendship status returned {response.status_code}")
            return None
        try:
            payload = response.json()
        except requests.JSONDecodeError:
            logger.warning("Friendship status returned a non-JSON body")
            return None
        return bool(payload.get("friendFlag")) if isinstance(payload, dict) else None


def get_line_client() -> LineClient:
    return LineClient(
        channel_id=settings.LINE_CHANNEL_ID,
        api_base_url=settings.LINE_API_BASE_URL,
        timeout_sec=settings.LINE_TIMEOUT_SEC,
    )
