from datetime import datetime
from typing import List
from pydantic import BaseModel


class GraphCellResponse(BaseModel):
    symbol: str
    color: int


class CommitRowResponse(BaseModel):
    index: int
    oid: str
    short_oid: str
    subject: str
    author: str
    timestamp: datetime
    graph: List[GraphCellResponse]


class CommitPageResponse(BaseModel):
    rows: List[CommitRowResponse]
    offset: int
    total: int  # length of the (possibly filtered) list loaded so far
    loaded: int
    has_more: bool
    complete: bool  # history fully read, not cut short by a limit
    filter: str = ""


class CommitDetailResponse(BaseModel):
    oid: str
    short_oid: str
    subject: str
    author: str
    timestamp: datetime
    message: str
    parent_oids: List[str]
    files: List[str]


class HealthResponse(BaseModel):
    status: str
    repo: str
