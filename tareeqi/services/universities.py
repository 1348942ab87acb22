"""University directory read by ride publishing and search."""

from __future__ import annotations

from typing import Callable, Optional

from tareeqi.domain.exceptions import NotFoundError
from tareeqi.infrastructure.models import UniversityModel
from tareeqi.infrastructure.unit_of_work import UnitOfWork


class UniversityService:
    def __init__(self, uow_factory: Callable[[], UnitOfWork] = UnitOfWork):
        self.uow_factory = uow_factory

    async def list_universities(self, city: Optional[str] = None) -> list[UniversityModel]:
        async with self.uow_factory() as uow:
            return await uow.universities.list_all(city)

    async def get_university(self, university_id: int) -> UniversityModel:
        async with self.uow_factory() as uow:
            university = await uow.universities.get_by_id(university_id)
            if university is None:
                raise NotFoundError("University not found")
            return university
