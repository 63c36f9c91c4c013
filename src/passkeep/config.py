"""Runtime settings for the credential store.

Values come from, in order of precedence: process environment, an optional
``.env`` file, then the defaults below.

    PASSKEEP_DB_PATH              SQLite file (default: data/credentials.db)
    PASSKEEP_MIN_PASSWORD_LENGTH  Shortest accepted password (default: 8)
    PASSKEEP_MASK_GLYPH           Placeholder for masked passwords (default: *)
    PASSKEEP_LOG_DIR              Directory for daily event logs (default: off)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

ENV_PREFIX = "PASSKEEP_"


@dataclass
class VaultSettings:
    """Settings consumed by :func:`passkeep.bootstrap.open_store`."""

    db_path: Path = Path("data/credentials.db")
    min_password_length: int = 8
    mask_glyph: str = "*"
    log_dir: Optional[Path] = None

    def __post_init__(self):
        self.db_path = Path(self.db_path)
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)
        if self.min_password_length < 1:
            raise ValueError("min_password_length must be at least 1")
        if len(self.mask_glyph) != 1:
            raise ValueError("mask_glyph must be a single character")


def load_settings(env_file: Optional[Union[str, Path]] = None) -> VaultSettings:
    """Build settings from the environment (and ``env_file`` if given).

    Raises:
        ValueError: If a variable is set to an unusable value.
    """
    load_dotenv(dotenv_path=env_file, override=False)

    kwargs = {}

    db_path = os.environ.get(ENV_PREFIX + "DB_PATH", "")
    if db_path:
        kwargs["db_path"] = Path(db_path).expanduser()

    min_length = os.environ.get(ENV_PREFIX + "MIN_PASSWORD_LENGTH", "")
    if min_length:
        try:
            kwargs["min_password_length"] = int(min_length)
        except ValueError:
            raise ValueError(
                f"{ENV_PREFIX}MIN_PASSWORD_LENGTH must be an integer, got {min_length!r}"
            ) from None

    glyph = os.environ.get(ENV_PREFIX + "MASK_GLYPH", "")
    if glyph:
        kwargs["mask_glyph"] = glyph

    log_dir = os.environ.get(ENV_PREFIX + "LOG_DIR", "")
    if log_dir:
        kwargs["log_dir"] = Path(log_dir).expanduser()

    return VaultSettings(**kwargs)
