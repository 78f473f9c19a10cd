from __future__ import annotations
import logging
from pydantic_settings import BaseSettings
from pydantic import Field
from .logging import configure_root_logging
from .engine.formats import DEFAULT_FORMAT, RpgFormat, get_format

configure_root_logging()
log = logging.getLogger("mcp.rpg.settings")

DEFAULT_INDENTATION = 3

class Settings(BaseSettings):
    # generation preferences
    STRUCTURE_FORMAT: str = Field(default=DEFAULT_FORMAT)
    INDENTATION: int = Field(default=DEFAULT_INDENTATION, ge=0)

    # logging
    LOG_LEVEL: str = Field(default="INFO")

    class Config:
        env_file = ".env"
        extra = "ignore"

    def __init__(self, **data):
        super().__init__(**data)
        logging.getLogger().setLevel(self.LOG_LEVEL.upper())
        log.info("STRUCTURE_FORMAT=%s INDENTATION=%s", self.STRUCTURE_FORMAT, self.INDENTATION)

    @property
    def indent_unit(self) -> str:
        # 0 means "not chosen yet"
        return " " * (self.INDENTATION or DEFAULT_INDENTATION)

    def format_table(self) -> RpgFormat:
        return get_format(self.STRUCTURE_FORMAT)
