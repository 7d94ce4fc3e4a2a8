'''
API endpoints for the subject catalog.
'''
from typing import Annotated, List
from fastapi import APIRouter, Depends

from ..models import subject as subject_models
from ..services.subject_service import SubjectService


class SubjectsAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/subjects",
            tags=["Subjects"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/",
                self.list_subjects,
                methods=["GET"],
                response_model=List[subject_models.SubjectRead])

    async def list_subjects(
        self,
        subject_service: Annotated[SubjectService, Depends(SubjectService)]
    ):
        return await subject_service.get_all_subjects()


subjects_api = SubjectsAPI()
router = subjects_api.router
