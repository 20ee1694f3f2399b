# securevote/client.py
# HTTP client for the election API, used by the voting and admin front-ends
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from securevote import config

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timed out. The server may be down or slow to respond."


class ApiError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


def get_api_base_url(base_url: str) -> str:
    """Strip a trailing slash and make sure the URL ends with /api exactly once."""
    base_url = base_url.rstrip("/")
    return base_url if base_url.endswith("/api") else f"{base_url}/api"


def _error_message(response) -> str:
    message = f"API error: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        text = response.text
        return f"{message} - {text}" if text else message

    if not isinstance(body, dict):
        return message
    detail = body.get("message") or body.get("error") or body.get("detail")
    if isinstance(detail, list):
        # Request validation errors
        detail = "; ".join(
            f"{'.'.join(str(p) for p in item.get('loc', [])[1:])}: {item.get('msg')}"
            for item in detail if isinstance(item, dict)
        )
    return str(detail) if detail else message


class ElectionClient:
    """
    Thin wrapper over the REST endpoints.

    `session` may be any object with a requests-style `request()` method,
    which lets tests hand in FastAPI's TestClient.
    """

    def __init__(self, base_url: str = None, timeout: float = None, session=None):
        self.base_url = get_api_base_url(base_url or config.API_URL)
        self.timeout = config.API_TIMEOUT_SECONDS if timeout is None else timeout
        self.session = session or requests.Session()

    def _call(self, method: str, endpoint: str, payload: Any = None) -> Any:
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        url = f"{self.base_url}{path}"
        logger.debug(f"Making API call: {method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.error(f"API Timeout ({endpoint}): {TIMEOUT_MESSAGE}")
            raise ApiError(TIMEOUT_MESSAGE)
        except requests.ConnectionError as e:
            logger.error(f"API Error ({endpoint}): {e}")
            raise ApiError("Network error: Could not connect to server")

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(f"API Error ({endpoint}): {message}")
            raise ApiError(message, status=response.status_code)

        if response.status_code == 204:
            return None
        return response.json()

    # --- Service ---

    def health(self) -> Dict[str, Any]:
        return self._call("GET", "/health")

    def test_connection(self) -> Dict[str, Any]:
        try:
            data = self.health()
        except ApiError as e:
            logger.error(f"Connection test failed: {e.message}")
            return {"success": False, "error": e.message}
        logger.info("API connection successful")
        return {"success": True, "data": data}

    def get_election(self) -> Dict[str, Any]:
        return self._call("GET", "/election")

    def get_universities(self) -> List[Dict[str, str]]:
        return self._call("GET", "/universities")

    # --- Candidates ---

    def get_candidates(self) -> List[Dict[str, Any]]:
        return self._call("GET", "/candidates")

    def get_candidates_by_university(self, university: str) -> List[Dict[str, Any]]:
        """Use the filter endpoint, falling back to a full fetch where a server lacks it."""
        try:
            return self._call("GET", f"/candidates/university/{quote(university, safe='')}")
        except ApiError as e:
            if e.status not in (404, 405):
                raise
            logger.warning(f"University filter unavailable ({e.status}), filtering locally")
        return [c for c in self.get_candidates() if c.get("university") == university]

    def add_candidate(self, candidate: Dict[str, Any]) -> Dict[str, Any]:
        missing = [f for f in ("name", "university", "position") if not str(candidate.get(f) or "").strip()]
        if missing:
            raise ApiError(
                "Candidate data is incomplete. Name, university, and position are required."
            )
        return self._call("POST", "/candidates", candidate)

    def update_candidate(self, candidate_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("PUT", f"/candidates/{candidate_id}", updates)

    def delete_candidate(self, candidate_id: str) -> None:
        return self._call("DELETE", f"/candidates/{candidate_id}")

    # --- Settings, statistics & votes ---

    def get_settings(self) -> Dict[str, Any]:
        return self._call("GET", "/settings")

    def update_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("PUT", "/settings", settings)

    def get_stats(self) -> Dict[str, Any]:
        data = self._call("GET", "/stats")
        data["lastUpdated"] = datetime.fromisoformat(data["lastUpdated"].replace("Z", "+00:00"))
        return data

    def cast_vote(self, candidate_id: str, voter_id: str = None, university_id: str = None) -> Dict[str, Any]:
        payload = {"candidateId": candidate_id}
        if voter_id:
            payload["voterId"] = voter_id
        if university_id:
            payload["universityId"] = university_id
        return self._call("POST", "/vote", payload)
