from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from models.association import Association
from services.dto import AssociationDto, AssociationIn
from services.errors import NotFoundError, UnexpectedError

logger = logging.getLogger(__name__)

MAX_LIMIT = 100


def to_association_dto(a: Association) -> AssociationDto:
    return AssociationDto(
        association_id=a.id,
        name=a.name or "",
        website=a.website or "",
        active=bool(a.active),
        created_at=a.created_at,
        updated_at=a.updated_at,
        deleted_at=a.deleted_at,
    )


class AssociationService:
    """List/get/create/update/soft-delete over ``associations``."""

    def __init__(self, storage):
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    def get_associations(
        self,
        page: int = 1,
        limit: int = 20,
        q: str | None = None,
        descending: bool = False,
        include_deleted: bool = False,
    ) -> Tuple[List[AssociationDto], int]:
        query = self.session.query(Association)
        if not include_deleted:
            query = query.filter(Association.deleted_at.is_(None))
        if q:
            query = query.filter(func.lower(Association.name).like(f"%{q.strip().lower()}%"))
        total = query.count()
        order = Association.name.desc() if descending else Association.name.asc()
        limit = max(1, min(limit, MAX_LIMIT))
        rows = query.order_by(order).offset((max(page, 1) - 1) * limit).limit(limit).all()
        return [to_association_dto(a) for a in rows], total

    def _get_model(self, association_id: str, include_deleted: bool = False) -> Association:
        a = self.session.get(Association, association_id)
        if a is None or (a.is_deleted and not include_deleted):
            raise NotFoundError("Association", association_id)
        return a

    def get_association(self, association_id: str) -> Optional[AssociationDto]:
        try:
            return to_association_dto(self._get_model(association_id))
        except NotFoundError:
            return None

    def add_association(self, request: AssociationIn) -> AssociationDto:
        a = Association(name=request.name.strip(), website=request.website, active=request.active)
        self._commit(a)
        return to_association_dto(a)

    def update_association(self, association_id: str, **changes) -> AssociationDto:
        a = self._get_model(association_id)
        if "name" in changes:
            a.name = changes["name"].strip()
        for key in ("website", "active"):
            if key in changes:
                setattr(a, key, changes[key])
        self._commit(a)
        return to_association_dto(a)

    def delete_association(self, association_id: str) -> None:
        self._get_model(association_id).delete()

    def restore_association(self, association_id: str) -> AssociationDto:
        a = self._get_model(association_id, include_deleted=True)
        a.restore()
        return to_association_dto(a)

    def _commit(self, obj) -> None:
        self.storage.new(obj)
        try:
            self.storage.save()
        except SQLAlchemyError:
            logger.exception("Failed to persist %s", obj.__class__.__name__)
            raise UnexpectedError()
