"""Hand the access token to the pipeline output file."""

from __future__ import annotations

import logging
import os
from typing import TextIO, Union

from .errors import SinkError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "AZURE_ACCESS_TOKEN"


def _check_entry(key: str, value: str) -> None:
    if not key or "=" in key or "\n" in key or "\r" in key:
        raise SinkError(f"invalid output key: {key!r}")
    # The value is a secret, so only the key is ever named here.
    if "\n" in value or "\r" in value:
        raise SinkError(f"value for {key} contains a line break")


def write_env(handle: TextIO, key: str, value: str) -> None:
    """Write a single ``KEY=VALUE`` line to an open text handle."""

    _check_entry(key, value)
    try:
        handle.write(f"{key}={value}\n")
    except OSError as exc:
        raise SinkError(f"failed to write to env: {exc}") from exc


def append_env_file(path: Union[str, "os.PathLike[str]"], key: str, value: str) -> None:
    """Append ``KEY=VALUE`` to ``path``, creating the file when needed."""

    _check_entry(key, value)
    try:
        with open(path, "a", encoding="utf-8") as handle:
            write_env(handle, key, value)
    except OSError as exc:
        raise SinkError(f"failed to open output file: {exc}") from exc
    logger.debug("Wrote %s to %s", key, path)
