"""
Judge0 API client.

Submissions are synchronous (``wait=true``) and base64 encoded in both
directions; a request-level timeout bounds the wait. Transport failures
surface as httpx exceptions for the caller to classify.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# Judge0 response fields to request
JUDGE0_FIELDS = (
    "stdout,stderr,status,compile_output,message,time,memory,post_execution_filesystem"
)

HEALTH_CHECK_TIMEOUT_SECONDS = 5.0


class Judge0Client:
    """Thin synchronous client for the Judge0 submissions and about endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 60.0,
        verify_ssl: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["X-Auth-Token"] = api_key
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            verify=verify_ssl,
            transport=transport,
        )

    def submit(self, submission: dict[str, Any]) -> dict[str, Any]:
        """Submit code and wait for the result.

        Raises httpx.HTTPStatusError on non-2xx, other httpx.HTTPError
        subclasses on transport failure, and ValueError on a non-JSON body.
        """
        response = self._client.post(
            "/submissions",
            params={"base64_encoded": "true", "wait": "true", "fields": JUDGE0_FIELDS},
            json=submission,
        )
        response.raise_for_status()
        return response.json()

    def about(self) -> dict[str, Any]:
        response = self._client.get("/about", timeout=HEALTH_CHECK_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> dict[str, Any]:
        """Return {"healthy": True, "version": ...} or {"healthy": False, "error": ...}."""
        try:
            about = self.about()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Judge0 health check failed: {e}")
            return {"healthy": False, "error": str(e) or e.__class__.__name__}
        version = about.get("version") if isinstance(about, dict) else None
        return {"healthy": True, "version": version}

    def close(self) -> None:
        self._client.close()
