from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Literal


class TopicSettings(BaseModel):
    name: str
    port: int = Field(..., ge=1, le=65535)
    key: str | None = None


class Settings(BaseSettings):
    ENV: str = "dev"
    HOST: str = "0.0.0.0"
    LOG_JSON: bool = True
    LOG_LEVEL: Literal["debug", "info", "warning", "error"] = "info"
    # JSON list, e.g. [{"name": "orders", "port": 60101, "key": "abc123"}]
    TOPICS: List[TopicSettings] = Field(default_factory=list)
    MAX_PAYLOAD_BYTES: int = 1536000
    MAX_EVENT_BYTES: int = 66560

    model_config = SettingsConfigDict(
        env_prefix="EVENTGRID_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("TOPICS")
    @classmethod
    def unique_ports(cls, topics: List[TopicSettings]) -> List[TopicSettings]:
        seen: set[int] = set()
        for topic in topics:
            if topic.port in seen:
                raise ValueError(f"Port {topic.port} is assigned to more than one topic")
            seen.add(topic.port)
        return topics


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
