"""
Orchestrator registry queries.
"""

from typing import List, Optional, Tuple
import uuid

from sqlalchemy import desc
from sqlalchemy.orm import Session

from storefront.database.models import Orchestrator


class OrchestratorRepository:

    def __init__(self, db: Session):
        self.db = db

    def _not_deleted(self):
        return self.db.query(Orchestrator).filter(Orchestrator.dt_deleted.is_(None))

    def find_by_id(self, orchestrator_id: uuid.UUID) -> Optional[Orchestrator]:
        return self._not_deleted().filter(Orchestrator.id == orchestrator_id).first()

    def find_by_token(self, app_token: uuid.UUID) -> Optional[Orchestrator]:
        return self._not_deleted().filter(Orchestrator.app_token == app_token).first()

    def exists_with_name(self, app_name: str) -> bool:
        return self._not_deleted().filter(Orchestrator.app_name == app_name).first() is not None

    def list_all(self) -> List[Orchestrator]:
        return self._not_deleted().order_by(Orchestrator.dt_created).all()

    def list_paginated(self, limit: int, offset: int) -> Tuple[List[Orchestrator], int]:
        query = self._not_deleted()
        total = query.count()
        items = (
            query.order_by(desc(Orchestrator.dt_created), desc(Orchestrator.id))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def add(self, orchestrator: Orchestrator) -> Orchestrator:
        self.db.add(orchestrator)
        self.db.flush()
        return orchestrator
