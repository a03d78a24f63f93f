import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from arbor.api.schemas import CommitDetailResponse, CommitPageResponse, HealthResponse
from arbor.api.service import GraphService
from arbor.config import Settings
from arbor.dag.errors import NoTipsFound

logger = logging.getLogger(__name__)

settings = Settings.from_env()

app = FastAPI(title="arbor commit graph API")

# In production, set ALLOWED_ORIGINS to a comma-separated list of domains
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# By default look in CWD. Can be overridden by env var GIT_DIR.
service = GraphService(
    settings.resolve_git_dir() or Path(".git"),
    include_all=settings.include_all,
    limit=settings.limit,
)


@app.get("/health", response_model=HealthResponse)
def health_check():
    return HealthResponse(status="ok", repo=str(service.git_dir))


@app.get("/api/commits", response_model=CommitPageResponse)
def get_commits(
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1),
    q: str = "",
):
    """Page of graph rows; history is read only as far as the page needs."""
    try:
        return service.get_commits(offset=offset, limit=limit, query=q)
    except NoTipsFound as e:
        logger.warning("%s", e)
        raise HTTPException(status_code=404, detail="No commits found")


@app.get("/api/commits/{oid}", response_model=CommitDetailResponse)
def get_commit(oid: str):
    """Details of a commit that has already been loaded."""
    try:
        commit = service.get_commit(oid)
    except NoTipsFound:
        raise HTTPException(status_code=404, detail="No commits found")
    if not commit:
        raise HTTPException(status_code=404, detail="Commit not found")
    return commit


@app.post("/api/reload", response_model=HealthResponse)
def reload():
    service.reset()
    logger.info("Reloaded graph session for %s", service.git_dir)
    return HealthResponse(status="reloaded", repo=str(service.git_dir))
