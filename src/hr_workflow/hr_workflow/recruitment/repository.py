from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence
from uuid import UUID

from .model import Interview, JobApplication, JobOpening


class JobOpeningRepository(Protocol):
    def get_by_id(self, opening_id: UUID) -> Optional[JobOpening]:
        raise NotImplementedError

    def list_all(self, *, department_id: Optional[UUID] = None) -> Sequence[JobOpening]:
        raise NotImplementedError

    def titles_by_ids(self, opening_ids: Iterable[UUID]) -> dict[UUID, str]:
        raise NotImplementedError

    def add(self, opening: JobOpening) -> None:
        raise NotImplementedError

    def update(self, opening: JobOpening) -> bool:
        raise NotImplementedError

    def delete(self, opening_id: UUID) -> bool:
        raise NotImplementedError


class JobApplicationRepository(Protocol):
    def get_by_id(self, application_id: UUID) -> Optional[JobApplication]:
        raise NotImplementedError

    def list_all(self, *, job_opening_id: Optional[UUID] = None) -> Sequence[JobApplication]:
        raise NotImplementedError

    def get_many(self, application_ids: Iterable[UUID]) -> dict[UUID, JobApplication]:
        raise NotImplementedError

    def count_by_opening(self, opening_ids: Iterable[UUID]) -> dict[UUID, int]:
        """Application count per opening; openings without applications are omitted."""

        raise NotImplementedError

    def add(self, application: JobApplication) -> None:
        raise NotImplementedError

    def update(self, application: JobApplication) -> bool:
        raise NotImplementedError

    def delete(self, application_id: UUID) -> bool:
        raise NotImplementedError


class InterviewRepository(Protocol):
    def get_by_id(self, interview_id: UUID) -> Optional[Interview]:
        raise NotImplementedError

    def list_all(self, *, job_application_id: Optional[UUID] = None) -> Sequence[Interview]:
        raise NotImplementedError

    def count_for_application(self, application_id: UUID) -> int:
        raise NotImplementedError

    def add(self, interview: Interview) -> None:
        raise NotImplementedError

    def update(self, interview: Interview) -> bool:
        raise NotImplementedError

    def delete(self, interview_id: UUID) -> bool:
        raise NotImplementedError
