'''
Tutoring request lifecycle: create, cancel, query, match, complete, archive.
'''
import datetime
from typing import Annotated, Iterable, Optional, Union
from uuid import UUID

from fastapi import Depends, HTTPException
from sqlalchemy.exc import IntegrityError

from ..database import models as db_models
from ..database.db_enums import RequestStatus, RequestType
from ..database.models import ACTIVE_REQUEST_INDEX
from ..common.exceptions import InvalidArgumentError, InvalidStateError, NotFoundError, UnauthorizedError
from ..common.logger import log
from ..core import dates, timeslots
from .request_store import RequestStore
from .time_service import TimeService, get_time_service


# SQLite reports the indexed columns instead of the index name.
_SQLITE_ACTIVE_INDEX_MESSAGE = "UNIQUE constraint failed: requests.user_id, requests.subject_id, requests.type"


def _violates_active_request_index(error: IntegrityError) -> bool:
    message = str(error.orig)
    return ACTIVE_REQUEST_INDEX in message or _SQLITE_ACTIVE_INDEX_MESSAGE in message


class RequestService:
    """
    Lifecycle of tutoring requests: creation with duplicate prevention,
    cancellation, and the bookkeeping around an already-decided match.
    """
    def __init__(
        self,
        store: Annotated[RequestStore, Depends(RequestStore)],
        time_service: Annotated[TimeService, Depends(get_time_service)]
    ):
        self.store = store
        self.time_service = time_service

    # --- 1. Creation ---

    async def create_request(
        self,
        user: db_models.Users,
        request_type: Union[RequestType, str],
        subject: db_models.Subjects,
        timeslot_codes: Optional[Iterable[str]],
        recurring: bool = False,
        week_start_date: Optional[datetime.date] = None
    ) -> db_models.Requests:
        """
        Creates a PENDING request after checking that:
        1. At least one valid timeslot remains after filtering.
        2. The user has no other active request for the same subject and type.
        The week defaults to the next Monday strictly after today.
        """
        request_type = RequestType(request_type)
        log.info(f"User {user.id} creating {request_type.value} request for subject {subject.code}.")

        valid_codes = timeslots.filter_valid(timeslot_codes)
        if not valid_codes:
            raise InvalidArgumentError("At least one timeslot must be selected")

        if week_start_date is None:
            week_start_date = dates.next_monday(self.time_service.today())
        elif not dates.is_monday(week_start_date):
            raise InvalidArgumentError("Week start date must be a Monday")

        # A failed flush expires the ORM objects, so read these up front.
        user_id = user.id
        duplicate_message = self._duplicate_message(request_type, subject)

        try:
            # Serialise creations for this user before checking for duplicates.
            await self.store.lock_owner(user)
            if await self.has_active_request(user, subject, request_type):
                raise InvalidArgumentError(duplicate_message)

            request = db_models.Requests(
                user=user,
                user_id=user.id,
                type=request_type.value,
                subject=subject,
                subject_id=subject.id,
                timeslots=valid_codes,
                recurring=bool(recurring),
                week_start_date=week_start_date,
                chosen_timeslot=None,
                status=RequestStatus.PENDING.value,
                archived=False,
                matched_partner=None,
                matched_partner_id=None
            )
            await self.store.add(request)
            log.info(f"Created request {request.id} with {len(valid_codes)} timeslots for week {week_start_date}.")
            return request

        except IntegrityError as e:
            if not _violates_active_request_index(e):
                log.error(f"Integrity error in create_request for user {user_id}: {e}", exc_info=True)
                raise
            # A concurrent transaction committed the same active triple first.
            log.warning(f"Concurrent duplicate request for user {user_id}: {e}")
            raise InvalidArgumentError(duplicate_message) from e
        except HTTPException:
            raise
        except Exception as e:
            log.error(f"Error in create_request for user {user_id}: {e}", exc_info=True)
            raise

    def _duplicate_message(self, request_type: RequestType, subject: db_models.Subjects) -> str:
        return (
            f"You already have an active {request_type.display_name.lower()} "
            f"request for {subject.display_name}"
        )

    # --- 2. Cancellation ---

    async def cancel_request(self, request_id: UUID, current_user: db_models.Users) -> db_models.Requests:
        """
        Cancels a PENDING request owned by the current user.
        The request is row-locked between the status check and the update.
        """
        log.info(f"User {current_user.id} attempting to cancel request {request_id}.")
        try:
            request = await self.store.get_by_id(request_id, for_update=True)
            if request is None:
                raise NotFoundError("Request not found")

            if request.user_id != current_user.id:
                log.warning(f"SECURITY: User {current_user.id} tried to cancel request {request_id} owned by {request.user_id}.")
                raise UnauthorizedError("You can only cancel your own requests")

            if not request.can_be_cancelled():
                raise InvalidStateError("This request cannot be cancelled")

            request.cancel()
            await self.store.save(request)
            log.info(f"Request {request_id} cancelled.")
            return request

        except HTTPException:
            raise
        except Exception as e:
            log.error(f"Error in cancel_request for request {request_id}: {e}", exc_info=True)
            raise

    # --- 3. Queries ---

    async def get_request(self, request_id: UUID) -> db_models.Requests:
        request = await self.store.get_by_id(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    async def get_user_requests(self, user: db_models.Users) -> list[db_models.Requests]:
        """All requests owned by the user, newest first."""
        return await self.store.find_by_user(user)

    async def has_active_request(
        self,
        user: db_models.Users,
        subject: db_models.Subjects,
        request_type: Union[RequestType, str]
    ) -> bool:
        """True if a PENDING or MATCHED, non-archived request exists for the triple."""
        return await self.store.exists_active(user, subject, RequestType(request_type))

    async def find_all_active(self) -> list[db_models.Requests]:
        """Every non-archived request, whatever its status. For dashboards."""
        return await self.store.find_all_not_archived()

    async def get_requests_by_status(self, status: Union[RequestStatus, str]) -> list[db_models.Requests]:
        return await self.store.find_by_status(RequestStatus(status))

    async def get_pending_requests(self) -> list[db_models.Requests]:
        return await self.get_requests_by_status(RequestStatus.PENDING)

    async def get_matched_requests(self) -> list[db_models.Requests]:
        return await self.get_requests_by_status(RequestStatus.MATCHED)

    async def get_requests_for_subject(self, subject: db_models.Subjects) -> list[db_models.Requests]:
        return await self.store.find_by_subject(subject)

    # --- 4. Match Bookkeeping ---

    async def apply_match(
        self,
        tutor_request_id: UUID,
        tutee_request_id: UUID,
        chosen_timeslot: Optional[str] = None
    ) -> tuple[db_models.Requests, db_models.Requests]:
        """
        Records a pairing decided elsewhere. Both sides of the link are
        validated first and then updated together, so a half-linked pair is
        never flushed.
        """
        log.info(f"Applying match between tutor request {tutor_request_id} and tutee request {tutee_request_id}.")
        try:
            tutor_request = await self.store.get_by_id(tutor_request_id, for_update=True)
            tutee_request = await self.store.get_by_id(tutee_request_id, for_update=True)
            if tutor_request is None or tutee_request is None:
                raise NotFoundError("Request not found")

            if tutor_request.type != RequestType.TUTOR.value or tutee_request.type != RequestType.TUTEE.value:
                raise InvalidArgumentError("A match pairs one TUTOR request with one TUTEE request")
            if tutor_request.subject_id != tutee_request.subject_id:
                raise InvalidArgumentError("Matched requests must be for the same subject")
            if tutor_request.user_id == tutee_request.user_id:
                raise InvalidArgumentError("A user cannot be matched with themselves")
            if tutor_request.week_start_date != tutee_request.week_start_date:
                raise InvalidArgumentError("Matched requests must be for the same week")

            if chosen_timeslot is not None:
                if not timeslots.is_valid(chosen_timeslot):
                    raise InvalidArgumentError(f"Unknown timeslot {chosen_timeslot}")
                if chosen_timeslot not in tutor_request.timeslots or chosen_timeslot not in tutee_request.timeslots:
                    raise InvalidArgumentError(
                        f"Both requests must include {timeslots.label(chosen_timeslot)}"
                    )

            for request in (tutor_request, tutee_request):
                if request.status != RequestStatus.PENDING.value:
                    raise InvalidStateError(f"Request {request.id} is {request.status} and cannot be matched")

            tutor_request.match_with(tutee_request.user, chosen_timeslot)
            tutee_request.match_with(tutor_request.user, chosen_timeslot)
            await self.store.save(tutor_request, tutee_request)

            log.info(
                f"Matched tutor {tutor_request.user.full_name} with tutee {tutee_request.user.full_name} "
                f"for {tutor_request.subject.display_name} at {chosen_timeslot}."
            )
            return tutor_request, tutee_request

        except HTTPException:
            raise
        except Exception as e:
            log.error(f"Error in apply_match: {e}", exc_info=True)
            raise

    async def mark_not_matched(self, request_id: UUID) -> db_models.Requests:
        """
        Closes a request as NOT_MATCHED. If it was MATCHED, the partner's side
        of the pairing is closed in the same transaction.
        """
        request = await self.store.get_by_id(request_id, for_update=True)
        if request is None:
            raise NotFoundError("Request not found")

        counterpart = None
        if request.status == RequestStatus.MATCHED.value:
            counterpart = await self.store.find_counterpart(request)

        request.mark_not_matched()
        if counterpart is not None:
            counterpart.mark_not_matched()
            await self.store.save(request, counterpart)
        else:
            await self.store.save(request)
        log.info(f"Request {request_id} marked NOT_MATCHED (counterpart: {counterpart.id if counterpart else None}).")
        return request

    async def mark_completed_requests_done(self, now: Optional[datetime.datetime] = None) -> int:
        """
        Moves every MATCHED request whose chosen slot has already ended to DONE.
        Requests without a week or chosen slot are left alone.
        `now` is naive local time, like the slot table.
        """
        now = now or self.time_service.now()
        finished = []
        for request in await self.store.find_by_status(RequestStatus.MATCHED):
            session_end = request.session_end
            if session_end is not None and now > session_end:
                request.mark_done()
                finished.append(request)

        if finished:
            await self.store.save(*finished)
            log.info(f"Marked {len(finished)} matched request(s) as DONE.")
        return len(finished)

    # --- 5. Archival ---

    async def archive_request(self, request_id: UUID) -> db_models.Requests:
        request = await self.get_request(request_id)
        request.archive()
        await self.store.save(request)
        return request

    async def archive_requests_before(self, week_start: datetime.date) -> int:
        """
        Archives closed requests from weeks before the week containing
        `week_start`. Any day of that week may be given.
        """
        week_start = dates.monday_of_week(week_start)
        stale = await self.store.find_terminal_before(week_start)
        for request in stale:
            request.archive()
        if stale:
            await self.store.save(*stale)
        log.info(f"Archived {len(stale)} request(s) from before {week_start}.")
        return len(stale)
