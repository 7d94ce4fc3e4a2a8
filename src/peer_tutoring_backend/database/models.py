from typing import Optional

from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, ForeignKeyConstraint, Index, Integer, PrimaryKeyConstraint, String, Table, Text, UniqueConstraint, Uuid, and_
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import uuid

from .db_enums import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    ExamBoard,
    RequestStatus,
    RequestType,
    UserRole
)
from ..common.exceptions import InvalidStateError
from ..core import profiles, timeslots as timeslot_catalog

class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


t_user_subjects = Table(
    'user_subjects', Base.metadata,
    Column('user_id', Uuid, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('subject_id', Uuid, ForeignKey('subjects.id', ondelete='CASCADE'), primary_key=True)
)


class Subjects(Base):
    __tablename__ = 'subjects'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='subjects_pkey'),
        UniqueConstraint('code', name='subjects_code_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(64))
    display_name: Mapped[str] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"Subjects(code={self.code!r}, display_name={self.display_name!r})"


class Users(Base):
    __tablename__ = 'users'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='users_pkey'),
        UniqueConstraint('email', name='users_email_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[str] = mapped_column(Text)
    role: Mapped[str] = mapped_column(Enum(*UserRole.get_all_names(), name='user_role'), default=UserRole.STUDENT.value)
    year_group: Mapped[Optional[int]] = mapped_column(Integer)
    exam_board: Mapped[str] = mapped_column(Enum(*ExamBoard.get_all_names(), name='exam_board_enum'), default=ExamBoard.NONE.value)
    max_tutoring_per_week: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=_utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=_utcnow, onupdate=_utcnow)

    subjects: Mapped[list['Subjects']] = relationship('Subjects', secondary=t_user_subjects, lazy='selectin')
    availability: Mapped[list['UserAvailability']] = relationship(
        'UserAvailability',
        cascade='all, delete-orphan',
        lazy='selectin'
    )

    @property
    def availability_codes(self) -> set[str]:
        return {slot.timeslot_code for slot in self.availability}

    @property
    def is_profile_complete(self) -> bool:
        return profiles.is_profile_complete(
            self.role, self.year_group, len(self.subjects), len(self.availability)
        )

    def __repr__(self) -> str:
        return f"Users(id={self.id!r}, email={self.email!r}, role={self.role!r})"


class UserAvailability(Base):
    __tablename__ = 'user_availability'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='user_availability_user_id_fkey'),
        PrimaryKeyConstraint('user_id', 'timeslot_code', name='user_availability_pkey')
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    timeslot_code: Mapped[str] = mapped_column(String(16), primary_key=True)


class RequestTimeslots(Base):
    __tablename__ = 'request_timeslots'
    __table_args__ = (
        ForeignKeyConstraint(['request_id'], ['requests.id'], ondelete='CASCADE', name='request_timeslots_request_id_fkey'),
        PrimaryKeyConstraint('request_id', 'timeslot_code', name='request_timeslots_pkey')
    )

    request_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    timeslot_code: Mapped[str] = mapped_column(String(16), primary_key=True)


class Requests(Base):
    """
    One tutoring ask: a user offering (TUTOR) or seeking (TUTEE) tutoring
    in a subject for a set of weekly timeslots.

    The lifecycle methods below are the only sanctioned way to change
    `status` and `matched_partner`.
    """
    __tablename__ = 'requests'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='requests_user_id_fkey'),
        ForeignKeyConstraint(['subject_id'], ['subjects.id'], name='requests_subject_id_fkey'),
        ForeignKeyConstraint(['matched_partner_id'], ['users.id'], ondelete='SET NULL', name='requests_matched_partner_id_fkey'),
        PrimaryKeyConstraint('id', name='requests_pkey'),
        Index('idx_requests_user_created', 'user_id', 'created_at'),
        Index('idx_requests_status', 'status')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    type: Mapped[str] = mapped_column(Enum(*RequestType.get_all_names(), name='request_type_enum'))
    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    week_start_date: Mapped[Optional[datetime.date]] = mapped_column(Date)
    chosen_timeslot: Mapped[Optional[str]] = mapped_column(String(16))
    status: Mapped[str] = mapped_column(Enum(*RequestStatus.get_all_names(), name='request_status_enum'), default=RequestStatus.PENDING.value)
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    matched_partner_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=_utcnow)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=_utcnow, onupdate=_utcnow)

    user: Mapped['Users'] = relationship('Users', foreign_keys=[user_id], lazy='selectin')
    subject: Mapped['Subjects'] = relationship('Subjects', lazy='selectin')
    matched_partner: Mapped[Optional['Users']] = relationship('Users', foreign_keys=[matched_partner_id], lazy='selectin')
    timeslot_entries: Mapped[list['RequestTimeslots']] = relationship(
        'RequestTimeslots',
        cascade='all, delete-orphan',
        lazy='selectin'
    )

    # --- Timeslots ---

    @property
    def timeslots(self) -> set[str]:
        return {entry.timeslot_code for entry in self.timeslot_entries}

    @timeslots.setter
    def timeslots(self, codes: set[str]) -> None:
        self.timeslot_entries = [RequestTimeslots(timeslot_code=code) for code in sorted(codes)]

    @property
    def session_start(self) -> Optional[datetime.datetime]:
        """Start of the agreed session, once a slot and week are set."""
        return timeslot_catalog.start_time(self.week_start_date, self.chosen_timeslot)

    @property
    def session_end(self) -> Optional[datetime.datetime]:
        return timeslot_catalog.end_time(self.week_start_date, self.chosen_timeslot)

    # --- Status helpers ---

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        """Non-terminal and not archived. This is what duplicate checks mean by 'active'."""
        return self.status in ACTIVE_STATUSES and not self.archived

    def _touch(self) -> None:
        self.updated_at = _utcnow()

    # --- Lifecycle ---

    def can_be_cancelled(self) -> bool:
        return self.status == RequestStatus.PENDING.value

    def cancel(self) -> None:
        """Cancels a pending request. Does nothing for any other status."""
        if self.can_be_cancelled():
            self.status = RequestStatus.CANCELLED.value
            self._touch()

    def match_with(self, partner: 'Users', chosen_timeslot: Optional[str] = None) -> None:
        """Records an externally decided pairing on this side of the edge."""
        if self.status != RequestStatus.PENDING.value:
            raise InvalidStateError(f"Only pending requests can be matched (request is {self.status}).")
        self.matched_partner = partner
        self.status = RequestStatus.MATCHED.value
        self.chosen_timeslot = chosen_timeslot
        self._touch()

    def clear_partner(self) -> None:
        """
        Drops the partner reference. A MATCHED request cannot stand without
        its partner, so it is resolved to CANCELLED.
        """
        if self.matched_partner is None and self.matched_partner_id is None:
            return
        self.matched_partner = None
        self.matched_partner_id = None
        if self.status == RequestStatus.MATCHED.value:
            self.status = RequestStatus.CANCELLED.value
        self._touch()

    def mark_done(self) -> None:
        if self.status != RequestStatus.MATCHED.value:
            raise InvalidStateError(f"Only matched requests can be completed (request is {self.status}).")
        self.status = RequestStatus.DONE.value
        self._touch()

    def mark_not_matched(self) -> None:
        if self.status not in ACTIVE_STATUSES:
            raise InvalidStateError(f"Request is already closed ({self.status}).")
        self.matched_partner = None
        self.matched_partner_id = None
        self.status = RequestStatus.NOT_MATCHED.value
        self._touch()

    def archive(self) -> None:
        if not self.archived:
            self.archived = True
            self._touch()

    def __repr__(self) -> str:
        return (
            f"Requests(id={self.id!r}, type={self.type!r}, status={self.status!r}, "
            f"archived={self.archived!r}, timeslots={len(self.timeslot_entries)})"
        )


# At most one active request per (user, subject, type). The service checks this
# before inserting; the index makes the losing side of a concurrent insert fail.
ACTIVE_REQUEST_INDEX = 'uq_requests_active_user_subject_type'

_active_request_clause = and_(
    Requests.status.in_(ACTIVE_STATUSES),
    Requests.archived.is_(False)
)

Index(
    ACTIVE_REQUEST_INDEX,
    Requests.user_id, Requests.subject_id, Requests.type,
    unique=True,
    postgresql_where=_active_request_clause,
    sqlite_where=_active_request_clause
)
