from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database


@dataclass
class DBConfig:
    uri: str
    database: str
    timeout_ms: int = 5000


class MongoConnection:
    """Singleton-like MongoDB client holder.

    Note: MongoClient keeps its own connection pool, so one instance per process is enough.
    """

    _instance: Optional["MongoConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._client: Optional[MongoClient] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "MongoConnection":
        if cls._instance is None:
            cls._instance = MongoConnection(config)
        return cls._instance

    @property
    def client(self) -> MongoClient:
        if self._client is None:
            self._client = MongoClient(self._config.uri, serverSelectionTimeoutMS=int(self._config.timeout_ms))
        return self._client

    @property
    def db(self) -> Database:
        return self.client[self._config.database]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
