"""Dev server settings."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

LOOPBACK_HOST = "127.0.0.1"
ALL_INTERFACES_HOST = "0.0.0.0"

# Setting this to any non-empty value exposes the server on every interface
OPEN_ENV_VAR = "OPEN"


@dataclass(frozen=True)
class DevServerConfig:
    host: str
    port: int
    root: Path
    max_depth: int

    @staticmethod
    def from_env(
        root: Path,
        port: int = 8090,
        max_depth: int = 2,
        environ: Mapping[str, str] | None = None,
    ) -> "DevServerConfig":
        env = os.environ if environ is None else environ
        host = ALL_INTERFACES_HOST if env.get(OPEN_ENV_VAR) else LOOPBACK_HOST
        return DevServerConfig(host=host, port=port, root=root, max_depth=max_depth)
