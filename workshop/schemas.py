"""Response schemas shared by several domains"""

from pydantic import BaseModel


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class SuccessResponse(BaseModel):
    success: bool = True
