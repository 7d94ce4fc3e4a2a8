'''
Timeslot API Models
'''
from datetime import time
from pydantic import BaseModel, ConfigDict, Field

class TimeslotRead(BaseModel):
    """A single entry of the fixed timeslot catalog."""
    code: str = Field(..., description="e.g. 'MON_P1'")
    day: str
    day_name: str = Field(..., description="e.g. 'Monday'")
    period: int = Field(..., ge=1, le=7)
    start: time
    end: time
    label: str
    time_range: str

    model_config = ConfigDict(from_attributes=True)
