"""Persistence layer for saved mortgage scenarios.

Users can keep the calculations they want to revisit. Each saved scenario
holds the request that produced it and the resulting payload, keyed by an
anonymous per-browser user token. The store defaults to SQLite for local
development but accepts any SQLAlchemy-compatible URL (e.g. PostgreSQL).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


class SavedScenarioModel(Base):
    __tablename__ = "saved_scenarios"

    id = Column(String(64), primary_key=True)
    user_token = Column(String(64), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    request_json = Column(Text, nullable=False)
    result_json = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ScenarioStore:
    """Database-backed scenario store."""

    def __init__(self, url: str, *, max_per_user: int = 10) -> None:
        engine_kwargs: Dict[str, Any] = {"future": True}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # A single shared connection keeps the in-memory database alive.
            engine_kwargs.update(connect_args={"check_same_thread": False}, poolclass=StaticPool)
        self._engine = create_engine(url, **engine_kwargs)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_per_user = max_per_user

    def list_scenarios(self, user_token: Optional[str]) -> List[Dict[str, Any]]:
        if not user_token:
            return []
        with self._session_factory() as session:
            rows: Iterable[SavedScenarioModel] = session.execute(
                select(SavedScenarioModel)
                .where(SavedScenarioModel.user_token == user_token)
                .order_by(SavedScenarioModel.created_at.asc())
            ).scalars()
            return [self._to_dict(row) for row in rows]

    def get_scenario(self, user_token: Optional[str], scenario_id: str) -> Optional[Dict[str, Any]]:
        if not user_token:
            return None
        with self._session_factory() as session:
            row = session.get(SavedScenarioModel, scenario_id)
            if row is None or row.user_token != user_token:
                return None
            return self._to_dict(row)

    def add_scenario(
        self, user_token: str, scenario_id: str, name: str, request: dict, result: dict
    ) -> Optional[Dict[str, Any]]:
        if not user_token:
            return None
        row = SavedScenarioModel(
            id=scenario_id,
            user_token=user_token,
            name=name,
            request_json=json.dumps(request),
            result_json=json.dumps(result),
            created_at=datetime.utcnow(),
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
            saved = self._to_dict(row)
        self._trim_user(user_token)
        return saved

    def remove_scenario(self, user_token: Optional[str], scenario_id: str) -> bool:
        if not user_token:
            return False
        with self._session_factory() as session:
            row = session.get(SavedScenarioModel, scenario_id)
            if row and row.user_token == user_token:
                session.delete(row)
                session.commit()
                return True
        return False

    def clear_scenarios(self, user_token: Optional[str]) -> int:
        if not user_token:
            return 0
        with self._session_factory() as session:
            result = session.execute(
                SavedScenarioModel.__table__.delete().where(SavedScenarioModel.user_token == user_token)
            )
            session.commit()
            return result.rowcount or 0

    def _trim_user(self, user_token: str) -> None:
        if not self._max_per_user or self._max_per_user < 0:
            return
        with self._session_factory() as session:
            rows = session.execute(
                select(SavedScenarioModel)
                .where(SavedScenarioModel.user_token == user_token)
                .order_by(SavedScenarioModel.created_at.desc())
            ).scalars().all()
            if len(rows) <= self._max_per_user:
                return
            for row in rows[self._max_per_user :]:
                session.delete(row)
            session.commit()
            logger.info("Trimmed %d saved scenarios for user", len(rows) - self._max_per_user)

    @staticmethod
    def _to_dict(row: SavedScenarioModel) -> Dict[str, Any]:
        return {
            "id": row.id,
            "name": row.name,
            "request": json.loads(row.request_json),
            "results": json.loads(row.result_json),
            "createdAt": row.created_at.isoformat(),
        }


def create_store(url: Optional[str], *, max_per_user: int = 10) -> ScenarioStore:
    return ScenarioStore(url or "sqlite:///mortgage_scenarios.sqlite3", max_per_user=max_per_user)
