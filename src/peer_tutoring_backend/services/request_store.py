'''
Persistence-facing query surface for tutoring requests.
'''
import datetime
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import ACTIVE_STATUSES, TERMINAL_STATUSES, RequestStatus, RequestType
from ..common.logger import log


class RequestStore:
    """
    Wraps every query the request lifecycle needs. Writes are flushed, never
    committed: the session owner (get_db_session) decides the transaction.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    # --- 1. Lookups ---

    async def get_by_id(self, request_id: UUID, for_update: bool = False) -> Optional[db_models.Requests]:
        stmt = select(db_models.Requests).filter(db_models.Requests.id == request_id)
        if for_update:
            stmt = stmt.with_for_update()
        return (await self.db.execute(stmt)).scalars().first()

    async def find_by_user(self, user: db_models.Users) -> list[db_models.Requests]:
        """All requests owned by the user, newest first."""
        stmt = select(db_models.Requests).filter(
            db_models.Requests.user_id == user.id
        ).order_by(db_models.Requests.created_at.desc())
        return list((await self.db.execute(stmt)).scalars().all())

    async def find_by_user_subject_type_status(
        self,
        user: db_models.Users,
        subject: db_models.Subjects,
        request_type: RequestType,
        status: RequestStatus
    ) -> Optional[db_models.Requests]:
        stmt = select(db_models.Requests).filter(
            db_models.Requests.user_id == user.id,
            db_models.Requests.subject_id == subject.id,
            db_models.Requests.type == request_type.value,
            db_models.Requests.status == status.value
        )
        return (await self.db.execute(stmt)).scalars().first()

    async def exists_by_user_subject_type_status(
        self,
        user: db_models.Users,
        subject: db_models.Subjects,
        request_type: RequestType,
        status: RequestStatus
    ) -> bool:
        return await self.find_by_user_subject_type_status(user, subject, request_type, status) is not None

    async def find_active(
        self,
        user: db_models.Users,
        subject: db_models.Subjects,
        request_type: RequestType
    ) -> Optional[db_models.Requests]:
        """The request blocking a new one for this triple: non-terminal and not archived."""
        stmt = select(db_models.Requests).filter(
            db_models.Requests.user_id == user.id,
            db_models.Requests.subject_id == subject.id,
            db_models.Requests.type == request_type.value,
            db_models.Requests.status.in_(ACTIVE_STATUSES),
            db_models.Requests.archived.is_(False)
        )
        return (await self.db.execute(stmt)).scalars().first()

    async def exists_active(
        self,
        user: db_models.Users,
        subject: db_models.Subjects,
        request_type: RequestType
    ) -> bool:
        return await self.find_active(user, subject, request_type) is not None

    async def find_by_status(self, status: RequestStatus) -> list[db_models.Requests]:
        stmt = select(db_models.Requests).filter(
            db_models.Requests.status == status.value
        ).order_by(db_models.Requests.created_at)
        return list((await self.db.execute(stmt)).scalars().all())

    async def find_by_subject(self, subject: db_models.Subjects) -> list[db_models.Requests]:
        stmt = select(db_models.Requests).filter(
            db_models.Requests.subject_id == subject.id
        ).order_by(db_models.Requests.created_at)
        return list((await self.db.execute(stmt)).scalars().all())

    async def find_all_not_archived(self) -> list[db_models.Requests]:
        """Visibility filter only. Status plays no part here."""
        stmt = select(db_models.Requests).filter(
            db_models.Requests.archived.is_(False)
        ).order_by(db_models.Requests.created_at.desc())
        return list((await self.db.execute(stmt)).scalars().all())

    async def find_by_matched_partner(self, partner: db_models.Users) -> list[db_models.Requests]:
        stmt = select(db_models.Requests).filter(db_models.Requests.matched_partner_id == partner.id)
        return list((await self.db.execute(stmt)).scalars().all())

    async def find_terminal_before(self, week_start: datetime.date) -> list[db_models.Requests]:
        stmt = select(db_models.Requests).filter(
            db_models.Requests.status.in_(TERMINAL_STATUSES),
            db_models.Requests.archived.is_(False),
            db_models.Requests.week_start_date < week_start
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def find_counterpart(self, request: db_models.Requests) -> Optional[db_models.Requests]:
        """
        The partner's side of a MATCHED pairing, if it still exists.
        Two users can tutor each other in the same subject, so the opposite
        type, slot and week pin down the one request linked to this one.
        """
        if request.matched_partner_id is None:
            return None
        stmt = select(db_models.Requests).filter(
            db_models.Requests.user_id == request.matched_partner_id,
            db_models.Requests.matched_partner_id == request.user_id,
            db_models.Requests.subject_id == request.subject_id,
            db_models.Requests.type != request.type,
            db_models.Requests.chosen_timeslot.is_not_distinct_from(request.chosen_timeslot),
            db_models.Requests.week_start_date.is_not_distinct_from(request.week_start_date),
            db_models.Requests.status == RequestStatus.MATCHED.value
        )
        return (await self.db.execute(stmt)).scalars().first()

    # --- 2. Writes ---

    async def lock_owner(self, user: db_models.Users) -> None:
        """
        Row-locks the owning user for the rest of the transaction so that two
        creations for the same user run one after the other.
        SQLite has no row locks and ignores FOR UPDATE.
        """
        stmt = select(db_models.Users.id).filter(db_models.Users.id == user.id).with_for_update()
        await self.db.execute(stmt)

    async def add(self, request: db_models.Requests) -> db_models.Requests:
        self.db.add(request)
        await self.db.flush()
        return request

    async def save(self, *requests: db_models.Requests) -> None:
        self.db.add_all(requests)
        await self.db.flush()

    async def delete_by_user(self, user: db_models.Users) -> int:
        """Deletes every request the user owns, with its timeslot rows."""
        owned = await self.find_by_user(user)
        for request in owned:
            await self.db.delete(request)
        await self.db.flush()
        log.info(f"Deleted {len(owned)} requests owned by user {user.id}.")
        return len(owned)

    async def clear_matched_partner_references(self, partner: db_models.Users) -> int:
        """
        Clears `matched_partner` on every request pointing at `partner`.
        Requests still MATCHED to them are resolved to CANCELLED.
        """
        referencing = await self.find_by_matched_partner(partner)
        for request in referencing:
            request.clear_partner()
        await self.db.flush()
        log.info(f"Cleared {len(referencing)} matched-partner references to user {partner.id}.")
        return len(referencing)
