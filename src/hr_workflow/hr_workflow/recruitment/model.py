from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from ..core.enums import (
    ApplicationStatus,
    EmploymentType,
    InterviewMode,
    InterviewStatus,
    JobOpeningStatus,
)
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class JobOpening:
    """Domain entity: an advertised position.

    The salary band, when both ends are given, must not be inverted.
    """

    opening_id: UUID
    title: str
    employment_type: EmploymentType
    status: JobOpeningStatus
    created_at: datetime
    department_id: Optional[UUID] = None
    location: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    salary_min: Optional[Decimal] = None
    salary_max: Optional[Decimal] = None
    closing_date: Optional[date] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.salary_min is not None and self.salary_max is not None and self.salary_min > self.salary_max:
            raise ValidationError("Minimum salary cannot exceed maximum salary")


@dataclass(frozen=True)
class JobApplication:
    application_id: UUID
    job_opening_id: UUID
    candidate_name: str
    candidate_email: str
    status: ApplicationStatus
    applied_at: datetime
    candidate_phone: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Interview:
    interview_id: UUID
    job_application_id: UUID
    scheduled_at: datetime
    mode: InterviewMode
    status: InterviewStatus
    created_at: datetime
    interviewer_id: Optional[UUID] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
