"""Reputation gate for first-contact screening and CAPTCHA checks.

This module wraps the two remote verifiers the board relies on:

- an IP-reputation service answering with a proxy/VPN likelihood in ``[0, 1]``
- the reCAPTCHA ``siteverify`` endpoint answering ``{"success": bool}``

Both calls fail closed: transport errors, unexpected status codes and
undecodable bodies raise instead of letting the request through.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from parley_stage.core.errors import InternalError, UpstreamTimeoutError
from parley_stage.core.settings import settings

# Configure logger for this module
logger = logging.getLogger(__name__)

HTTP_OK = 200
PROXY_DENIAL_REASON = "Usage through a VPN or proxy is not permitted."


class ReputationGateError(InternalError):
    """Raised when a remote verifier cannot be reached or understood."""


@dataclass(frozen=True)
class ReputationConfig:
    """Immutable configuration for the remote verifiers."""

    ipintel_url: str
    ipintel_contact: str
    recaptcha_verify_url: str
    recaptcha_secret: str
    deny_threshold: float
    timeout_seconds: float


@dataclass(frozen=True)
class ReputationVerdict:
    """Outcome of an IP-reputation lookup."""

    allow: bool
    reason: str
    score: float


def load_reputation_config() -> ReputationConfig:
    """Build configuration object from global settings."""

    return ReputationConfig(
        ipintel_url=settings.ipintel_url,
        ipintel_contact=settings.ipintel_contact,
        recaptcha_verify_url=settings.recaptcha_verify_url,
        recaptcha_secret=settings.recaptcha_secret,
        deny_threshold=float(settings.reputation_deny_threshold),
        timeout_seconds=float(settings.remote_timeout_seconds),
    )


class ReputationGate:
    """HTTP client wrapper exposing a pass/fail contract over the verifiers."""

    def __init__(
        self,
        config: ReputationConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_reputation_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        client = await self._ensure_client()
        try:
            response = await client.request(method, url, params=params, data=data)
        except httpx.TimeoutException as exc:
            logger.warning("Reputation gate request to %s timed out", url)
            raise UpstreamTimeoutError(f"Verifier at {url} timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("Reputation gate request to %s failed: %s", url, exc)
            raise ReputationGateError(f"Unable to reach verifier: {exc}") from exc

        if response.status_code != HTTP_OK:
            logger.warning("Verifier at %s responded with %s", url, response.status_code)
            raise ReputationGateError(f"Verifier responded with {response.status_code}")
        return response

    async def check_reputation(self, address: str) -> ReputationVerdict:
        """Score ``address`` and deny it when the score exceeds the threshold.

        Args:
            address: Network address being seen for the first time.

        Returns:
            Verdict with the raw score and, on denial, a client-facing reason.

        Raises:
            ReputationGateError: If the verifier fails or answers with anything
                other than a score in ``[0, 1]``.
            UpstreamTimeoutError: If the verifier does not answer in time.
        """
        response = await self._request(
            "GET",
            self.config.ipintel_url,
            params={"ip": address, "contact": self.config.ipintel_contact},
        )
        body = response.text.strip()
        try:
            score = float(body)
        except ValueError as exc:
            raise ReputationGateError(f"Unable to parse reputation score {body!r}") from exc
        if not 0.0 <= score <= 1.0:
            # The service reports lookup errors as negative codes.
            raise ReputationGateError(f"Reputation service returned error code {body}")

        logger.debug("Reputation score for %s is %s", address, score)
        if score > self.config.deny_threshold:
            return ReputationVerdict(allow=False, reason=PROXY_DENIAL_REASON, score=score)
        return ReputationVerdict(allow=True, reason="", score=score)

    async def check_captcha(self, token: str) -> bool:
        """Return True if the CAPTCHA provider accepts ``token``."""
        response = await self._request(
            "POST",
            self.config.recaptcha_verify_url,
            data={"secret": self.config.recaptcha_secret, "response": token},
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ReputationGateError("Unable to decode CAPTCHA verification response") from exc

        success = payload.get("success") if isinstance(payload, dict) else None
        if not isinstance(success, bool):
            raise ReputationGateError("CAPTCHA verification response has no success flag")
        logger.debug("CAPTCHA verification success=%s", success)
        return success

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _ReputationGateSingleton:
    """Singleton holder for the process-wide reputation gate."""

    _instance: ReputationGate | None = None

    @classmethod
    def get_instance(cls) -> ReputationGate:
        if cls._instance is None:
            cls._instance = ReputationGate()
        return cls._instance


def get_reputation_gate() -> ReputationGate:
    """Return a singleton reputation gate instance."""
    return _ReputationGateSingleton.get_instance()
