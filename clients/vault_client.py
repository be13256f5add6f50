"""
Secrets for the support desk, read from HashiCorp Vault (KV v2).

Connection settings come from the environment (VAULT_ADDR, VAULT_ROLE_ID,
VAULT_SECRET_ID and optionally VAULT_NAMESPACE); everything else, database
and Valkey URLs and the email gateway credentials, lives in Vault under
``support/``. Missing settings are fatal at startup.
"""

import os
import logging
from typing import Dict, Tuple

import hvac
from hvac.exceptions import InvalidPath, Unauthorized, Forbidden, VaultError

logger = logging.getLogger(__name__)

MOUNT_PREFIX = "support"

_shared_client: "VaultClient | None" = None
_values: Dict[Tuple[str, str], str] = {}


class VaultClient:
    """AppRole-authenticated reader for ``support/*`` secrets."""

    def __init__(self, addr: str, role_id: str, secret_id: str, namespace: str | None = None):
        """
        Log in with AppRole.

        Raises:
            ValueError: A connection setting is empty
            PermissionError: Vault rejected the login
        """
        if not addr:
            raise ValueError("VAULT_ADDR environment variable is required")
        if not role_id or not secret_id:
            raise ValueError("VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required")

        self.addr = addr
        options = {"url": addr}
        if namespace:
            options["namespace"] = namespace
        self.client = hvac.Client(**options)

        try:
            login = self.client.auth.approle.login(role_id=role_id, secret_id=secret_id)
        except VaultError as e:
            logger.error("Vault AppRole login rejected: %s", e)
            raise PermissionError(f"AppRole authentication failed: {e}") from e
        self.client.token = login["auth"]["client_token"]

        if not self.client.is_authenticated():
            raise PermissionError("Vault authentication failed: token not accepted")
        logger.info("Authenticated to Vault at %s", addr)

    @classmethod
    def from_env(cls) -> "VaultClient":
        return cls(
            addr=os.getenv("VAULT_ADDR", ""),
            role_id=os.getenv("VAULT_ROLE_ID", ""),
            secret_id=os.getenv("VAULT_SECRET_ID", ""),
            namespace=os.getenv("VAULT_NAMESPACE"),
        )

    def read_secret(self, path: str, field: str) -> str:
        """
        One field of ``support/<path>``.

        Raises:
            PermissionError: The path does not exist or is not readable
            KeyError: The secret has no such field
        """
        full_path = f"{MOUNT_PREFIX}/{path}"
        try:
            version = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
        except InvalidPath:
            raise PermissionError(f"Secret path '{full_path}' not found in Vault")
        except (Unauthorized, Forbidden) as e:
            raise PermissionError(f"Access denied to secret '{full_path}': {e}") from e

        fields = version["data"]["data"]
        try:
            return fields[field]
        except KeyError:
            raise KeyError(
                f"Secret '{full_path}' has no field '{field}' "
                f"(fields: {', '.join(sorted(fields))})"
            ) from None


def reset_vault_cache() -> None:
    """Forget the shared client and every secret read through it."""
    global _shared_client
    _shared_client = None
    _values.clear()


def _secret(path: str, field: str) -> str:
    global _shared_client
    if (path, field) not in _values:
        if _shared_client is None:
            _shared_client = VaultClient.from_env()
        _values[(path, field)] = _shared_client.read_secret(path, field)
    return _values[(path, field)]


def get_database_url() -> str:
    return _secret("database", "url")


def get_valkey_url() -> str:
    return _secret("valkey", "url")


def get_email_config() -> Dict[str, str]:
    """Keyword arguments for EmailGatewayClient."""
    return {name: _secret("email", name) for name in ("gateway_url", "api_key", "hmac_secret")}
