'''
Subject API Models
'''
from uuid import UUID
from pydantic import BaseModel, ConfigDict

class SubjectRead(BaseModel):
    """
    Pydantic model for reading a subject.
    Corresponds to db_models.Subjects.
    """
    id: UUID
    code: str
    display_name: str

    model_config = ConfigDict(from_attributes=True)
