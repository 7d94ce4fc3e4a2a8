'''
API endpoints for the tutoring request lifecycle.
'''
from typing import Annotated, List
from uuid import UUID
from fastapi import APIRouter, Depends, status

from ..database import models as db_models
from ..models import request as request_models
from ..services.request_service import RequestService
from ..services.subject_service import SubjectService
from .deps import get_current_user, get_current_admin


class RequestsAPI:
    """
    A class to encapsulate endpoints for tutoring requests.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/requests",
            tags=["Requests"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_my_requests,
                methods=["GET"],
                response_model=List[request_models.RequestRead])
        self.router.add_api_route(
                "/",
                self.create_request,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=request_models.RequestRead)
        self.router.add_api_route(
                "/active",
                self.list_active_requests,
                methods=["GET"],
                response_model=List[request_models.RequestRead])
        self.router.add_api_route(
                "/match",
                self.apply_match,
                methods=["POST"],
                response_model=List[request_models.RequestRead])
        self.router.add_api_route(
                "/complete",
                self.complete_finished_requests,
                methods=["POST"],
                response_model=request_models.CompletionSweepRead)
        self.router.add_api_route(
                "/archive",
                self.archive_old_requests,
                methods=["POST"],
                response_model=request_models.ArchiveSweepRead)
        self.router.add_api_route(
                "/{request_id}/cancel",
                self.cancel_request,
                methods=["POST"],
                response_model=request_models.RequestRead)
        self.router.add_api_route(
                "/{request_id}/not-matched",
                self.mark_not_matched,
                methods=["POST"],
                response_model=request_models.RequestRead)
        self.router.add_api_route(
                "/{request_id}/archive",
                self.archive_request,
                methods=["POST"],
                response_model=request_models.RequestRead)

    async def list_my_requests(
        self,
        current_user: Annotated[db_models.Users, Depends(get_current_user)],
        request_service: Annotated[RequestService, Depends(RequestService)]
    ):
        """Retrieves the caller's requests, newest first."""
        return await request_service.get_user_requests(current_user)

    async def create_request(
        self,
        request_data: request_models.RequestCreate,
        current_user: Annotated[db_models.Users, Depends(get_current_user)],
        request_service: Annotated[RequestService, Depends(RequestService)],
        subject_service: Annotated[SubjectService, Depends(SubjectService)]
    ):
        """
        Creates a tutoring request for the caller.
        Fails with 400 if no valid timeslot was given or an active request
        for the same subject and type already exists.
        """
        subject = await subject_service.get_subject_by_code_or_404(request_data.subject_code)
        return await request_service.create_request(
            user=current_user,
            request_type=request_data.type,
            subject=subject,
            timeslot_codes=request_data.timeslots,
            recurring=request_data.recurring,
            week_start_date=request_data.week_start_date
        )

    async def cancel_request(
        self,
        request_id: UUID,
        current_user: Annotated[db_models.Users, Depends(get_current_user)],
        request_service: Annotated[RequestService, Depends(RequestService)]
    ):
        """Cancels one of the caller's pending requests."""
        return await request_service.cancel_request(request_id, current_user)

    async def list_active_requests(
        self,
        current_admin: Annotated[db_models.Users, Depends(get_current_admin)],
        request_service: Annotated[RequestService, Depends(RequestService)]
    ):
        """
        All non-archived requests, for the admin dashboard.
        **This endpoint is restricted to Admins only.**
        """
        return await request_service.find_all_active()

    async def apply_match(
        self,
        match_data: request_models.MatchCreate,
        current_admin: Annotated[db_models.Users, Depends(get_current_admin)],
        request_service: Annotated[RequestService, Depends(RequestService)]
    ):
        """
        Records a pairing between a TUTOR and a TUTEE request.
        **This endpoint is restricted to Admins only.**
        """
        tutor_request, tutee_request = await request_service.apply_match(
            match_data.tutor_request_id,
            match_data.tutee_request_id,
            match_data.chosen_timeslot
        )
        return [tutor_request, tutee_request]

    async def complete_finished_requests(
        self,
        current_admin: Annotated[db_models.Users, Depends(get_current_admin)],
        request_service: Annotated[RequestService, Depends(RequestService)]
    ):
        """
        Marks matched requests whose session has ended as DONE.
        **This endpoint is restricted to Admins only.**
        """
        marked = await request_service.mark_completed_requests_done()
        return request_models.CompletionSweepRead(marked_done=marked)

    async def archive_old_requests(
        self,
        archive_data: request_models.ArchiveBefore,
        current_admin: Annotated[db_models.Users, Depends(get_current_admin)],
        request_service: Annotated[RequestService, Depends(RequestService)]
    ):
        """
        Archives closed requests from weeks before the given Monday.
        **This endpoint is restricted to Admins only.**
        """
        archived = await request_service.archive_requests_before(archive_data.week_start_date)
        return request_models.ArchiveSweepRead(archived=archived)

    async def mark_not_matched(
        self,
        request_id: UUID,
        current_admin: Annotated[db_models.Users, Depends(get_current_admin)],
        request_service: Annotated[RequestService, Depends(RequestService)]
    ):
        """
        Closes a request as NOT_MATCHED, together with its partner's side if matched.
        **This endpoint is restricted to Admins only.**
        """
        return await request_service.mark_not_matched(request_id)

    async def archive_request(
        self,
        request_id: UUID,
        current_admin: Annotated[db_models.Users, Depends(get_current_admin)],
        request_service: Annotated[RequestService, Depends(RequestService)]
    ):
        """**This endpoint is restricted to Admins only.**"""
        return await request_service.archive_request(request_id)


# Instantiate the class and export its router
requests_api = RequestsAPI()
router = requests_api.router
