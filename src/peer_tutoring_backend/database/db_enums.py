'''
Static enums shared by the ORM models, the pydantic models and the services.
The ORM stores their `.value` strings.
'''
import enum


# --- Base Enum Class ---
class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member names."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]


class UserRole(ListableEnum):
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class ExamBoard(ListableEnum):
    GCSE = "GCSE"
    A_LEVELS = "A_LEVELS"
    IB = "IB"
    NONE = "NONE"

    @property
    def display_name(self) -> str:
        return {
            "GCSE": "GCSE",
            "A_LEVELS": "A Levels",
            "IB": "International Baccalaureate",
            "NONE": "None",
        }[self.value]


class RequestType(ListableEnum):
    TUTOR = "TUTOR"  # offering tutoring
    TUTEE = "TUTEE"  # seeking tutoring

    @property
    def display_name(self) -> str:
        return "Offering Tutoring" if self is RequestType.TUTOR else "Seeking Tutoring"


class RequestStatus(ListableEnum):
    """
    Lifecycle of a tutoring request.
    Archival is a separate boolean on the request, never a status.
    """
    PENDING = "PENDING"
    MATCHED = "MATCHED"
    NOT_MATCHED = "NOT_MATCHED"
    DONE = "DONE"
    CANCELLED = "CANCELLED"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def _missing_(cls, value):
        # older data used COMPLETED for DONE
        if isinstance(value, str) and value.upper() == "COMPLETED":
            return cls.DONE
        return None


ACTIVE_STATUSES = (RequestStatus.PENDING.value, RequestStatus.MATCHED.value)
TERMINAL_STATUSES = (
    RequestStatus.NOT_MATCHED.value,
    RequestStatus.DONE.value,
    RequestStatus.CANCELLED.value,
)
