"""
Configuration for the Domo client.

The client never reads the environment on its own. Callers build a
ClientConfig directly, or explicitly ask for one from the environment or a
JSON file:

    config = ClientConfig(client_id="...", client_secret="...")
    config = ClientConfig.from_env(env_file=".env")
    config = ClientConfig.from_file("domo.json")
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any
from urllib.parse import quote

logger = logging.getLogger("domorest.config")

DEFAULT_API_HOST = "https://api.domo.com"

# Scope names in the order they are sent to the token endpoint
SCOPE_ORDER = ("data", "user", "audit", "dashboard", "buzz", "account", "workflow")


@dataclass
class DomoScope:
    """
    OAuth scopes requested for the client-credentials token.

    Example:
        scope = DomoScope().with_data_scope().with_user_scope()
        scope.scope_string()   # 'data user'
        scope.encoded()        # 'data%20user'
    """

    data: bool = False
    user: bool = False
    audit: bool = False
    dashboard: bool = False
    buzz: bool = False
    account: bool = False
    workflow: bool = False

    @classmethod
    def default(cls) -> DomoScope:
        """Data scope only."""
        return cls(data=True)

    @classmethod
    def from_names(cls, names: list[str] | str) -> DomoScope:
        """Build from scope names, e.g. ``["data", "user"]`` or ``"data user"``."""
        if isinstance(names, str):
            names = names.replace(",", " ").split()
        unknown = [n for n in names if n not in SCOPE_ORDER]
        if unknown:
            raise ValueError(f"Unknown Domo scope(s): {', '.join(unknown)}")
        return cls(**{n: True for n in names})

    def names(self) -> list[str]:
        """Enabled scope names in the fixed wire order."""
        return [name for name in SCOPE_ORDER if getattr(self, name)]

    def scope_string(self) -> str:
        """Space-joined scope names, empty if none are enabled."""
        return " ".join(self.names())

    def encoded(self) -> str:
        """Percent-encoded scope string for the token URL."""
        return quote(self.scope_string(), safe="")

    @property
    def is_empty(self) -> bool:
        return not self.names()

    def with_data_scope(self) -> DomoScope:
        self.data = True
        return self

    def with_user_scope(self) -> DomoScope:
        self.user = True
        return self

    def with_audit_scope(self) -> DomoScope:
        self.audit = True
        return self

    def with_dashboard_scope(self) -> DomoScope:
        self.dashboard = True
        return self

    def with_buzz_scope(self) -> DomoScope:
        self.buzz = True
        return self

    def with_account_scope(self) -> DomoScope:
        self.account = True
        return self

    def with_workflow_scope(self) -> DomoScope:
        self.workflow = True
        return self


@dataclass
class ClientConfig:
    """
    Settings for a DomoClient.

    Args:
        client_id: OAuth client id
        client_secret: OAuth client secret
        scope: Scopes requested for the access token
        api_host: Base URL of the API, without trailing slash
        timeout: Per-request timeout in seconds
        validate_cert: Whether to verify TLS certificates
        max_clients: Maximum simultaneous connections of the HTTP client
        check_token_expiry: Refetch the token once it has expired
        token_leeway: Seconds before expiry at which a token counts as stale
    """

    client_id: str = ""
    client_secret: str = field(default="", repr=False)
    scope: DomoScope = field(default_factory=DomoScope.default)
    api_host: str = DEFAULT_API_HOST
    timeout: float = 30.0
    validate_cert: bool = True
    max_clients: int = 10
    check_token_expiry: bool = True
    token_leeway: float = 60.0

    def __post_init__(self) -> None:
        self.api_host = self.api_host.rstrip("/")

    @property
    def token_url(self) -> str:
        return f"{self.api_host}/oauth/token"

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        env_file: str | Path | None = None,
    ) -> ClientConfig:
        """
        Build a config from environment variables.

        Reads DOMO_CLIENT_ID / DOMO_CLIENT_SECRET (falling back to CLIENT_ID /
        CLIENT_SECRET), DOMO_API_HOST and the <NAME>_SCOPE flags. A scope flag
        is enabled by its presence. Without any flag only the data scope is
        requested.

        Args:
            environ: Mapping to read instead of os.environ
            env_file: Optional .env file whose values override ``environ``
        """
        env = dict(os.environ if environ is None else environ)
        if env_file is not None:
            env.update(load_env_file(env_file))

        flags = {name: f"{name.upper()}_SCOPE" in env for name in SCOPE_ORDER}
        scope = DomoScope(**flags) if any(flags.values()) else DomoScope.default()

        return cls(
            client_id=env.get("DOMO_CLIENT_ID") or env.get("CLIENT_ID", ""),
            client_secret=env.get("DOMO_CLIENT_SECRET") or env.get("CLIENT_SECRET", ""),
            scope=scope,
            api_host=env.get("DOMO_API_HOST", DEFAULT_API_HOST),
        )

    @classmethod
    def from_file(
        cls, config_file: str | Path, environ: Mapping[str, str] | None = None
    ) -> ClientConfig:
        """
        Build a config from a JSON file.

        String values may reference environment variables as ``${VAR}`` or
        ``${VAR:-default}``. ``scope`` may be a list of names or a string.

        Example file:
            {
                "client_id": "${DOMO_CLIENT_ID}",
                "client_secret": "${DOMO_CLIENT_SECRET}",
                "scope": ["data", "user"],
                "timeout": 60
            }
        """
        env = os.environ if environ is None else environ
        with Path(config_file).open() as f:
            raw = json.load(f)

        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in raw.items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r in %s", key, config_file)
                continue
            values[key] = _resolve_value(value, env)

        if "scope" in values:
            values["scope"] = DomoScope.from_names(values["scope"])

        return cls(**values)


def load_env_file(env_file: str | Path = ".env") -> dict[str, str]:
    """
    Parse a .env file into a dict.

    Blank lines and ``#`` comments are skipped; surrounding quotes are
    stripped. A missing file yields an empty dict.
    """
    values: dict[str, str] = {}
    env_path = Path(env_file)
    if not env_path.is_file():
        logger.debug("Env file %s not found", env_file)
        return values

    with env_path.open() as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                if key.startswith("export "):
                    key = key[len("export ") :]
                values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def _resolve_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str) and "${" in value:
        return resolve_env_reference(value, env)
    if isinstance(value, list):
        return [_resolve_value(v, env) for v in value]
    return value


def resolve_env_reference(value: str, env: Mapping[str, str]) -> str:
    """
    Resolve ``${VAR_NAME}`` and ``${VAR_NAME:-default}`` references.
    """
    start = value.find("${")
    end = value.find("}", start)
    if start == -1 or end == -1:
        return value

    env_expr = value[start + 2 : end]
    if ":-" in env_expr:
        var_name, default = env_expr.split(":-", 1)
        result = env.get(var_name.strip(), default)
    else:
        result = env.get(env_expr.strip(), "")

    resolved = value[:start] + result + value[end + 1 :]
    if "${" in resolved:
        return resolve_env_reference(resolved, env)
    return resolved
