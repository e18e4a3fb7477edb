"""Topic table: one simulated endpoint per listening port."""
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping
from pydantic import BaseModel, ConfigDict
import structlog
from .config import TopicSettings

log = structlog.get_logger()


class Topic(BaseModel):
    """A simulated endpoint bound to one port, with an optional shared secret."""

    model_config = ConfigDict(frozen=True)

    name: str
    port: int
    key: str | None = None

    @property
    def requires_auth(self) -> bool:
        return bool(self.key and self.key.strip())


class TopicRegistry:
    """
    Read-only port -> Topic mapping.

    Built once at startup and shared by every request; nothing mutates it
    afterwards, so lookups need no locking.
    """

    def __init__(self, topics: Iterable[Topic] = ()):
        by_port: dict[int, Topic] = {}
        for topic in topics:
            if topic.port in by_port:
                raise ValueError(
                    f"Topics '{by_port[topic.port].name}' and '{topic.name}' "
                    f"both listen on port {topic.port}"
                )
            by_port[topic.port] = topic
        self._by_port: Mapping[int, Topic] = MappingProxyType(by_port)

    @classmethod
    def from_settings(cls, topics: Iterable[TopicSettings]) -> "TopicRegistry":
        registry = cls(Topic(name=t.name, port=t.port, key=t.key) for t in topics)
        log.info(
            "topics.loaded",
            count=len(registry),
            topics=[{"name": t.name, "port": t.port, "auth": t.requires_auth} for t in registry],
        )
        return registry

    def for_port(self, port: int | None) -> Topic | None:
        if port is None:
            return None
        return self._by_port.get(port)

    @property
    def ports(self) -> list[int]:
        return sorted(self._by_port)

    def __len__(self) -> int:
        return len(self._by_port)

    def __iter__(self) -> Iterator[Topic]:
        return iter(self._by_port.values())
