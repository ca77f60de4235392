"""
Redirector configuration document.

The document is a JSON object::

    {
      "addr": ":8080",
      "read_timeout": "10s",
      "tls": {"cert": "/etc/metaimport/cert.pem", "priv_key": "/etc/metaimport/key.pem"},
      "paths": [
        {"prefix": "example.com/foo", "vcs": "git",
         "repo_template": "https://github.com/org/{{ components[2] }}"}
      ]
    }

Unknown fields are rejected at every level. Every problem found is reported
at once through a ConfigurationError.
"""

import json
import os
import re
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, FilePath, StrictInt, field_validator
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ConfigurationError


_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_HOSTNAME = re.compile(
    r"^(?=.{1,253}$)[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*\.?$"
)


def parse_duration(value: str) -> float:
    """Parse a duration string such as ``"1m30s"`` or ``"250ms"`` into seconds."""
    text = value.strip()
    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if text == "0":
        return 0.0
    if not text:
        raise ValueError(f"invalid duration {value!r}")

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            raise ValueError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ValueError(f"invalid duration {value!r}")

    return sign * total


def split_host_port(addr: str) -> Tuple[str, int]:
    """Split ``host:port`` into its parts; IPv6 hosts must be bracketed."""
    host, sep, port = addr.rpartition(":")
    if not sep:
        raise ValueError("missing port in address")
    if host.startswith("["):
        if not host.endswith("]"):
            raise ValueError("unterminated IPv6 address")
        host = host[1:-1]
        if ":" not in host:
            raise ValueError(f"invalid IPv6 address {host!r}")
    elif ":" in host:
        raise ValueError("too many colons in address")
    elif host and not _HOSTNAME.match(host):
        raise ValueError(f"invalid host {host!r}")

    if not port.isdigit():
        raise ValueError(f"invalid port {port!r}")
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"port {port_number} out of range")

    return host, port_number


class TLSConfig(BaseModel):
    """Certificate and key used to serve HTTPS."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cert: FilePath
    priv_key: FilePath

    @field_validator("cert", "priv_key")
    @classmethod
    def _must_be_readable(cls, value: Path) -> Path:
        if not os.access(value, os.R_OK):
            raise ValueError(f"{value} does not exist or is not accessible")
        return value


class ImportPathConfig(BaseModel):
    """One prefix rule as written in the configuration file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    prefix: str = Field(..., min_length=1, description="URL path prefix, host included")
    min_components: StrictInt = Field(0, ge=0, description="Minimum number of path segments")
    vcs: str = Field("git", description="VCS kind announced to the go tool")
    repo_template: str = Field(..., min_length=1, description="Repository URL template")


class MetaImportConfig(BaseModel):
    """Top-level redirector configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    addr: str
    read_timeout: Optional[float] = Field(None, description="Seconds; input is nanoseconds or a duration string")
    tls: Optional[TLSConfig] = None
    paths: List[ImportPathConfig] = Field(..., min_length=1)

    @field_validator("addr")
    @classmethod
    def _valid_addr(cls, value: str) -> str:
        split_host_port(value)
        return value

    @field_validator("read_timeout", mode="before")
    @classmethod
    def _parse_read_timeout(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("read_timeout must be a number or a duration string")
        if isinstance(value, str):
            return parse_duration(value)
        if isinstance(value, (int, float)):
            # Plain numbers are nanoseconds
            return value / 1e9
        return value

    @field_validator("read_timeout")
    @classmethod
    def _min_read_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value < 1.0:
            raise ValueError("read_timeout must be at least 1s")
        return value

    @property
    def listen_host(self) -> str:
        """Host to bind; an empty host means every interface."""
        host, _ = split_host_port(self.addr)
        return host or "0.0.0.0"

    @property
    def listen_port(self) -> int:
        """Port to bind."""
        _, port = split_host_port(self.addr)
        return port


def _format_location(loc: Tuple[Union[int, str], ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path or "(root)"


def format_validation_errors(error: PydanticValidationError) -> List[str]:
    """Render pydantic errors as ``field.path: message`` lines."""
    return [f"{_format_location(err['loc'])}: {err['msg']}" for err in error.errors()]


def parse_config(text: str, source: str = "<string>") -> MetaImportConfig:
    """Decode and validate a configuration document."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"syntax error at line {e.lineno} column {e.colno}: {e.msg}",
            details={"source": source, "pos": e.pos}
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            "bad configuration file: expected a JSON object",
            details={"source": source}
        )

    try:
        return MetaImportConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"invalid configuration file {source!r}",
            details={"source": source, "errors": format_validation_errors(e)}
        ) from e


def load_config(path: Union[str, os.PathLike]) -> MetaImportConfig:
    """Read and validate the configuration file at ``path``."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ConfigurationError(
            f"unable to read configuration file {str(path)!r}",
            details={"source": str(path), "error": e.strerror or str(e)}
        ) from e

    return parse_config(text, source=str(path))
