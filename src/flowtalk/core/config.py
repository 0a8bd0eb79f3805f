"""Runtime configuration for conversations.

Values resolve with priority: explicit argument > environment > default.

Environment Variables:
    FLOWTALK_BASE_DIR: Directory that relative subroutine ``src`` paths resolve against
    FLOWTALK_HTTP_TIMEOUT: Timeout in seconds for remote flow sources
    FLOWTALK_ALLOW_IMPORTS: Allow string module references to be imported ("1"/"true")
    FLOWTALK_ALLOWED_IMPORTS: Comma separated module prefixes importable when enabled
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class FlowtalkConfig:
    """Conversation configuration.

    Attributes:
        base_dir: Directory relative flow sources are resolved against.
        http_timeout: Total timeout (seconds) for fetching remote flows.
        allow_imports: Whether string module references may be imported
            with importlib when they are not registered.
        allowed_imports: Module prefixes importable when allow_imports is set.
            Empty means no module is importable.
    """

    base_dir: Path = field(default_factory=Path.cwd)
    http_timeout: float = 30.0
    allow_imports: bool = False
    allowed_imports: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.http_timeout <= 0:
            raise ValueError("http_timeout must be positive")

    @classmethod
    def from_env(
        cls,
        base_dir: str | Path | None = None,
        http_timeout: float | None = None,
        allow_imports: bool | None = None,
        allowed_imports: tuple[str, ...] | None = None,
    ) -> FlowtalkConfig:
        """Build a config from arguments, falling back to FLOWTALK_* variables.

        Raises:
            ValueError: If an environment value cannot be parsed.
        """
        if base_dir is None:
            base_dir = os.environ.get("FLOWTALK_BASE_DIR") or Path.cwd()

        if http_timeout is None:
            raw_timeout = os.environ.get("FLOWTALK_HTTP_TIMEOUT")
            if raw_timeout:
                try:
                    http_timeout = float(raw_timeout)
                except ValueError:
                    raise ValueError(
                        f"FLOWTALK_HTTP_TIMEOUT must be a number, got {raw_timeout!r}"
                    ) from None
            else:
                http_timeout = 30.0

        if allow_imports is None:
            allow_imports = _parse_bool(
                "FLOWTALK_ALLOW_IMPORTS", os.environ.get("FLOWTALK_ALLOW_IMPORTS", "")
            )

        if allowed_imports is None:
            raw_allowed = os.environ.get("FLOWTALK_ALLOWED_IMPORTS", "")
            allowed_imports = tuple(p.strip() for p in raw_allowed.split(",") if p.strip())

        return cls(
            base_dir=Path(base_dir),
            http_timeout=http_timeout,
            allow_imports=allow_imports,
            allowed_imports=allowed_imports,
        )
