"""Application configuration via pydantic-settings."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings

from rack_setup.models.inventory import Baseboard

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Rack setup service configuration.

    Loaded from environment variables with the ``RSS_`` prefix.
    """

    model_config = {"env_prefix": "RSS_"}

    # -- Identity of the sled running this service ---------------------------
    baseboard_kind: Literal["gimlet", "pc", "unknown"] = "unknown"
    baseboard_identifier: str = ""
    baseboard_model: str = ""
    baseboard_revision: int = 0

    # -- Misc ----------------------------------------------------------------
    log_level: str = "INFO"

    def our_baseboard(self) -> Baseboard | None:
        """Baseboard of the local sled, or None when it isn't known."""
        if self.baseboard_kind == "unknown":
            return None
        if self.baseboard_kind == "gimlet" and not self.baseboard_identifier:
            logger.warning("RSS_BASEBOARD_KIND=gimlet without RSS_BASEBOARD_IDENTIFIER")
        return Baseboard(
            kind=self.baseboard_kind,
            identifier=self.baseboard_identifier,
            model=self.baseboard_model,
            revision=self.baseboard_revision,
        )

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, v: str) -> str:
        return v.upper()
