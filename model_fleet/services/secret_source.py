"""Hugging Face token lookup for gated models.

The resolver only sees a ``SecretLookup`` callable: ``model_id -> token | None``.
The AWS source reads one Secrets Manager secret and caches it in memory for a TTL.
"""

from __future__ import annotations

import json
import time
from threading import Lock
from typing import Any, Callable, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from model_fleet.core.config import Settings
from model_fleet.core.logging import structured_log

SecretLookup = Callable[[str], Optional[str]]

# JSON keys tried when the secret value is an object
_TOKEN_KEYS = ("HF_TOKEN", "hf_token", "token", "HUGGING_FACE_HUB_TOKEN")


def _extract_token(secret_string: str) -> Optional[str]:
    """Accept either a raw token string or a JSON object holding one."""
    value = (secret_string or "").strip()
    if not value:
        return None
    if value.startswith("{"):
        try:
            data = json.loads(value)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        for key in _TOKEN_KEYS:
            token = data.get(key)
            if isinstance(token, str) and token.strip():
                return token.strip()
        return None
    return value


class SecretsManagerTokenSource:
    """Callable token source backed by AWS Secrets Manager."""

    def __init__(
        self,
        secret_arn: str,
        *,
        region: str,
        ttl_seconds: float = 300.0,
        client: Optional[Any] = None,
    ) -> None:
        self.secret_arn = secret_arn
        self.ttl_seconds = ttl_seconds
        self._client = client or boto3.client(
            "secretsmanager",
            region_name=region,
            config=Config(retries={"mode": "standard"}),
        )
        self._lock = Lock()
        self._value: Optional[str] = None
        self._expires_at = 0.0

    def _fetch(self) -> Optional[str]:
        try:
            response = self._client.get_secret_value(SecretId=self.secret_arn)
        except (ClientError, BotoCoreError) as exc:
            structured_log(
                "WARNING",
                "Hugging Face token secret unavailable",
                operation="secrets.get_secret_value",
                error={"type": type(exc).__name__, "message": str(exc)},
            )
            return None
        return _extract_token(response.get("SecretString", ""))

    def __call__(self, model_id: str) -> Optional[str]:
        now = time.monotonic()
        with self._lock:
            if self._expires_at > now:
                return self._value
            self._value = self._fetch()
            # Failed lookups are not cached so the next pass retries
            self._expires_at = now + self.ttl_seconds if self._value else 0.0
            return self._value

    def clear(self) -> None:
        with self._lock:
            self._value = None
            self._expires_at = 0.0


def static_token_source(token: Optional[str]) -> SecretLookup:
    """Same token for every model (tests, local runs)."""
    return lambda model_id: token


def no_secrets(model_id: str) -> Optional[str]:
    return None


def secret_source_from_settings(settings: Settings) -> SecretLookup:
    if settings.provider == "memory" or not settings.huggingface_secret_arn:
        return no_secrets
    return SecretsManagerTokenSource(
        settings.huggingface_secret_arn,
        region=settings.aws_region,
        ttl_seconds=settings.secret_cache_ttl_seconds,
    )
