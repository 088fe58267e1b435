from datetime import date

from pydantic import BaseModel

from app.schemas.standings import CategoryBrief, SportBrief


class SeasonResponse(BaseModel):
    id: int
    name: str
    start_at: date
    end_at: date
    is_current: bool = False

    class Config:
        from_attributes = True


class SeasonListResponse(BaseModel):
    items: list[SeasonResponse]
    total: int


class SportListResponse(BaseModel):
    items: list[SportBrief]
    total: int


class CategoryListResponse(BaseModel):
    items: list[CategoryBrief]
    total: int
