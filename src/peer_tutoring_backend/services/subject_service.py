'''

'''
from typing import Annotated
from fastapi import Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..common.exceptions import NotFoundError
from ..common.logger import log

# Curated list shared across all exam boards
DEFAULT_SUBJECTS = (
    # Languages
    ("ENGLISH", "English"),
    ("GERMAN", "German"),
    ("FRENCH", "French"),
    # STEM
    ("MATHEMATICS", "Mathematics"),
    ("PHYSICS", "Physics"),
    ("BIOLOGY", "Biology"),
    ("CHEMISTRY", "Chemistry"),
    # Social Sciences
    ("ECONOMICS", "Economics"),
    ("POLITICS", "Politics"),
    ("BUSINESS", "Business"),
)


class SubjectService:
    """Read access to the subject catalog, plus first-run seeding."""
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_all_subjects(self) -> list[db_models.Subjects]:
        stmt = select(db_models.Subjects).order_by(db_models.Subjects.display_name)
        return list((await self.db.execute(stmt)).scalars().all())

    async def get_subject_by_code(self, code: str) -> db_models.Subjects | None:
        stmt = select(db_models.Subjects).filter(db_models.Subjects.code == code.upper())
        return (await self.db.execute(stmt)).scalars().first()

    async def get_subject_by_code_or_404(self, code: str) -> db_models.Subjects:
        subject = await self.get_subject_by_code(code)
        if subject is None:
            raise NotFoundError(f"Subject {code} not found.")
        return subject

    async def has_subjects(self) -> bool:
        count = await self.db.scalar(select(func.count()).select_from(db_models.Subjects))
        return bool(count)

    async def seed_default_subjects(self) -> int:
        """
        Seeds the standard subjects if none exist.
        Restarting the app never seeds twice.
        """
        if await self.has_subjects():
            log.info("Subjects already exist, skipping seeding")
            return 0

        log.info("Seeding subjects...")
        self.db.add_all([
            db_models.Subjects(code=code, display_name=display_name)
            for code, display_name in DEFAULT_SUBJECTS
        ])
        await self.db.flush()
        log.info(f"Successfully seeded {len(DEFAULT_SUBJECTS)} subjects")
        return len(DEFAULT_SUBJECTS)
