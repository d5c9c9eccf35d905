"""
counter_program.version — package version, on-ledger ABI version, build describe.

`ABI_VERSION` covers the bytes other parties depend on: the instruction
payload layout and the 10-byte counter record. It changes only when one of
those layouts does, independently of `__version__`.

`counter-program version --verbose` prints `version_metadata()` as JSON.
"""

from __future__ import annotations

import os
import subprocess
from functools import lru_cache
from typing import Dict, Union

__version__ = "0.1.0"

ABI_VERSION = 1


@lru_cache(maxsize=1)
def git_describe() -> str:
    """
    `COUNTER_GIT_DESCRIBE` if set, else `git describe --tags --dirty --always`,
    else `<__version__>+local` outside a checkout.
    """
    override = os.getenv("COUNTER_GIT_DESCRIBE")
    if override:
        return override.strip()
    try:
        out = subprocess.run(
            ["git", "describe", "--tags", "--dirty", "--always"],
            capture_output=True,
            check=True,
            text=True,
        ).stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        out = ""
    return out or f"{__version__}+local"


def version_metadata() -> Dict[str, Union[str, int, bool]]:
    desc = git_describe()
    return {
        "version": __version__,
        "abi": ABI_VERSION,
        "describe": desc,
        "dirty": desc.endswith("-dirty"),
    }


__all__ = ["__version__", "ABI_VERSION", "git_describe", "version_metadata"]
