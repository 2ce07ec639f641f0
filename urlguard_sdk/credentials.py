"""Per-scan provider credentials."""

from __future__ import annotations

import logging
import os
from types import MappingProxyType
from typing import Any, Mapping, Union

from urlguard_sdk.exceptions import InvalidRequestError
from urlguard_sdk.models import Provider

logger = logging.getLogger(__name__)

# Names used by the browser client's key storage and by environment variables.
ENV_NAMES: dict[Provider, str] = {
    Provider.VIRUSTOTAL: "VIRUSTOTAL_API_KEY",
    Provider.SAFE_BROWSING: "GOOGLE_SAFE_BROWSING_API_KEY",
    Provider.URLSCAN: "URLSCAN_API_KEY",
    Provider.IPINFO: "IPINFO_API_KEY",
}

_ALIASES: dict[str, Provider] = {p.value: p for p in Provider}
_ALIASES.update({name: p for p, name in ENV_NAMES.items()})

KeyLike = Union[str, Provider]


def _resolve(key: KeyLike) -> Provider | None:
    if isinstance(key, Provider):
        return key
    return _ALIASES.get(key.strip().upper())


class CredentialSet:
    """Read-only mapping of provider to API secret.

    A provider is active iff it has a non-blank secret. Missing keys are
    "not configured", never an error.

    Args:
        secrets: Mapping of provider to secret. ``None`` values are skipped.

    Raises:
        InvalidRequestError: If a secret is neither a string nor ``None``.

    Example::

        creds = CredentialSet.from_mapping({"VIRUSTOTAL_API_KEY": "abc"})
        creds.is_active(Provider.VIRUSTOTAL)  # True
    """

    __slots__ = ("_secrets",)

    def __init__(self, secrets: Mapping[Provider, str] | None = None) -> None:
        cleaned: dict[Provider, str] = {}
        for provider, secret in (secrets or {}).items():
            if secret is None:
                continue
            if not isinstance(secret, str):
                raise InvalidRequestError(f"API key for {getattr(provider, 'value', provider)} must be a string")
            if secret.strip():
                cleaned[provider] = secret.strip()
        self._secrets = MappingProxyType(cleaned)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Any, Any]) -> CredentialSet:
        """Build a set from wire-style ``apiKeys``.

        Keys may be provider identifiers, ``*_API_KEY`` names or
        :class:`Provider` members. Unknown keys are ignored.

        Raises:
            InvalidRequestError: If a key or a secret is not a string.
        """
        secrets: dict[Provider, str] = {}
        for key, value in mapping.items():
            if not isinstance(key, (str, Provider)):
                raise InvalidRequestError(f"API key names must be strings, got {type(key).__name__}")
            provider = _resolve(key)
            if provider is None:
                logger.debug("Ignoring credential for unknown provider %r", key)
                continue
            if value is None:
                continue
            if not isinstance(value, str):
                raise InvalidRequestError(f"API key for {provider.value} must be a string")
            secrets[provider] = value
        return cls(secrets)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CredentialSet:
        """Build a set from ``VIRUSTOTAL_API_KEY``-style environment variables."""
        env = os.environ if environ is None else environ
        return cls({p: env.get(name, "") for p, name in ENV_NAMES.items()})

    def is_active(self, provider: Provider) -> bool:
        return provider in self._secrets

    def secret(self, provider: Provider) -> str | None:
        return self._secrets.get(provider)

    def active_providers(self) -> list[Provider]:
        """Active providers in declaration order."""
        return [p for p in Provider if p in self._secrets]

    def __len__(self) -> int:
        return len(self._secrets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CredentialSet):
            return NotImplemented
        return dict(self._secrets) == dict(other._secrets)

    def __repr__(self) -> str:
        names = ", ".join(p.value for p in self.active_providers())
        return f"CredentialSet(active=[{names}])"


def as_credential_set(credentials: CredentialSet | Mapping[Any, Any] | None) -> CredentialSet:
    """Coerce a plain ``apiKeys`` mapping (or ``None``) into a :class:`CredentialSet`."""
    if credentials is None:
        return CredentialSet()
    if isinstance(credentials, CredentialSet):
        return credentials
    if not isinstance(credentials, Mapping):
        raise InvalidRequestError("apiKeys must be an object")
    return CredentialSet.from_mapping(credentials)
