from typing import Annotated

from fastapi import Query

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

LimitParam = Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE, description="Maximum number of rows to return")]
OffsetParam = Annotated[int, Query(ge=0, description="Rows to skip, in listing order")]
