from __future__ import annotations

from enum import Enum
from typing import Any

from .exceptions import ValidationError


class WireEnum(str, Enum):
    """Status family transmitted either as a numeric code or a string label.

    The numeric code is the member's position in definition order. The string
    value is the canonical encoding used for output.
    """

    @property
    def code(self) -> int:
        return list(type(self)).index(self)

    @classmethod
    def from_code(cls, code: int):
        members = list(cls)
        if not 0 <= code < len(members):
            raise ValidationError(f"Unknown {cls.__name__} code: {code}")
        return members[code]

    @classmethod
    def _aliases(cls) -> dict[str, Any]:
        return {}

    @classmethod
    def parse(cls, value: Any):
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValidationError(f"Invalid {cls.__name__}: {value!r}")
        if isinstance(value, int):
            return cls.from_code(value)
        if isinstance(value, str):
            v = value.strip()
            if v.lstrip("-").isdigit():
                return cls.from_code(int(v))
            key = v.replace(" ", "").replace("-", "").replace("_", "").lower()
            for member in cls:
                if member.value.lower() == key:
                    return member
            alias = cls._aliases().get(key)
            if alias is not None:
                return alias
        raise ValidationError(f"Invalid {cls.__name__}: {value!r}")


class EmploymentStatus(WireEnum):
    ACTIVE = "Active"
    ON_LEAVE = "OnLeave"
    RESIGNED = "Resigned"
    TERMINATED = "Terminated"

    @property
    def has_exited(self) -> bool:
        return self in (EmploymentStatus.RESIGNED, EmploymentStatus.TERMINATED)


class AttendanceStatus(WireEnum):
    PRESENT = "Present"
    ABSENT = "Absent"
    REMOTE = "Remote"
    ON_LEAVE = "OnLeave"
    HOLIDAY = "Holiday"


class LeaveType(WireEnum):
    VACATION = "Vacation"
    SICK = "Sick"
    UNPAID = "Unpaid"
    PARENTAL = "Parental"
    BEREAVEMENT = "Bereavement"
    OTHER = "Other"


class LeaveStatus(WireEnum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING


class ResignationStatus(WireEnum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @classmethod
    def _aliases(cls) -> dict[str, Any]:
        return {"approve": cls.APPROVED, "reject": cls.REJECTED}

    @property
    def is_terminal(self) -> bool:
        return self is not ResignationStatus.PENDING


class EmploymentType(WireEnum):
    FULL_TIME = "FullTime"
    PART_TIME = "PartTime"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"
    TEMPORARY = "Temporary"


class JobOpeningStatus(WireEnum):
    DRAFT = "Draft"
    OPEN = "Open"
    CLOSED = "Closed"
    FILLED = "Filled"
    CANCELLED = "Cancelled"


class ApplicationStatus(WireEnum):
    SUBMITTED = "Submitted"
    UNDER_REVIEW = "UnderReview"
    INTERVIEWING = "Interviewing"
    OFFERED = "Offered"
    REJECTED = "Rejected"
    HIRED = "Hired"
    WITHDRAWN = "Withdrawn"


class InterviewMode(WireEnum):
    IN_PERSON = "InPerson"
    VIRTUAL = "Virtual"
    PHONE = "Phone"


class InterviewStatus(WireEnum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"
