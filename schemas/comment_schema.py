from datetime import datetime
from typing import List
from sqlmodel import SQLModel, Field

from schemas.report_schema import SalesPersonRef


class CommentCreateSchema(SQLModel):
    comment: str = Field(min_length=1, max_length=500)


class CommentReadSchema(SQLModel):
    id: int
    report_id: int
    manager_id: int
    manager: SalesPersonRef
    comment: str
    created_at: datetime


class CommentListResponse(SQLModel):
    data: List[CommentReadSchema]
