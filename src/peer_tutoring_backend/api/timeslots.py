'''
API endpoint exposing the fixed timeslot catalog.
'''
from typing import List
from fastapi import APIRouter

from ..core import timeslots
from ..models import timeslot as timeslot_models


class TimeslotsAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/timeslots",
            tags=["Timeslots"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/",
                self.list_timeslots,
                methods=["GET"],
                response_model=List[timeslot_models.TimeslotRead])

    async def list_timeslots(self):
        """All 35 slots, MON_P1 through FRI_P7."""
        return [
            timeslot_models.TimeslotRead(
                code=slot.code,
                day=slot.day,
                day_name=slot.day_name,
                period=slot.period,
                start=slot.start,
                end=slot.end,
                label=slot.label,
                time_range=slot.time_range
            )
            for slot in timeslots.all_slots()
        ]


timeslots_api = TimeslotsAPI()
router = timeslots_api.router
