import asyncio

import pytest
from arbor.api.main import app, service
from httpx import ASGITransport, AsyncClient

import pytest_asyncio

# Fixture for async client
@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

# Point the global service at a temporary repo for each test
@pytest.fixture
def mock_repo(repo):
    previous = service.git_dir
    service.reset(repo.git_dir)
    yield repo
    service.reset(previous)

@pytest.fixture
def history(mock_repo):
    oids = []
    parent = []
    for i in range(1, 21):
        subject = f"Fix crash {i}" if i % 5 == 0 else f"Change {i}"
        files = {"a.txt": str(i)}
        if i % 5 == 0:
            files["fix.txt"] = str(i)
        tip = mock_repo.commit(subject, parent, files=files)
        oids.append(tip)
        parent = [tip]
    mock_repo.set_ref("refs/heads/main", tip)
    # Newest first, as the graph lists them
    return list(reversed(oids))

@pytest.mark.asyncio
async def test_health(client, mock_repo):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["repo"] == str(mock_repo.git_dir.resolve())

@pytest.mark.asyncio
async def test_get_commits_first_page(client, history):
    response = await client.get("/api/commits", params={"limit": 3})
    assert response.status_code == 200
    data = response.json()

    assert [row["oid"] for row in data["rows"]] == history[:3]
    assert [row["index"] for row in data["rows"]] == [0, 1, 2]
    assert data["rows"][0]["graph"] == [{"symbol": "*", "color": 0}]
    # Page plus look-ahead, not the whole history
    assert data["loaded"] == 9
    assert data["total"] == 9
    assert data["has_more"] is True
    assert data["complete"] is False

@pytest.mark.asyncio
async def test_get_commits_last_page(client, history):
    response = await client.get("/api/commits", params={"offset": 15, "limit": 10})
    assert response.status_code == 200
    data = response.json()

    assert [row["oid"] for row in data["rows"]] == history[15:]
    assert data["loaded"] == 20
    assert data["has_more"] is False
    assert data["complete"] is True

@pytest.mark.asyncio
async def test_get_commits_filtered(client, history):
    response = await client.get("/api/commits", params={"q": "fix", "limit": 10})
    assert response.status_code == 200
    data = response.json()

    assert data["filter"] == "fix"
    assert [row["subject"] for row in data["rows"]] == ["Fix crash 20", "Fix crash 15", "Fix crash 10", "Fix crash 5"]
    # Positions are within the filtered list
    assert [row["index"] for row in data["rows"]] == [0, 1, 2, 3]
    assert data["total"] == 4

@pytest.mark.asyncio
async def test_get_commit_detail(client, history):
    await client.get("/api/commits", params={"limit": 20})

    response = await client.get(f"/api/commits/{history[0]}")
    assert response.status_code == 200
    data = response.json()
    assert data["oid"] == history[0]
    assert data["message"] == "Fix crash 20\n"
    assert data["parent_oids"] == [history[1]]
    assert data["files"] == ["a.txt", "fix.txt"]

    # Abbreviated hashes work too
    response = await client.get(f"/api/commits/{history[1][:7]}")
    assert response.status_code == 200
    assert response.json()["files"] == ["a.txt"]

    root = await client.get(f"/api/commits/{history[-1]}")
    assert root.json()["files"] == ["(no file changes)"]

@pytest.mark.asyncio
async def test_get_commit_not_found(client, history):
    response = await client.get("/api/commits/" + "f" * 40)
    assert response.status_code == 404
    assert response.json()["detail"] == "Commit not found"

@pytest.mark.asyncio
async def test_empty_repository(client, mock_repo):
    response = await client.get("/api/commits")
    assert response.status_code == 404
    assert response.json()["detail"] == "No commits found"

@pytest.mark.asyncio
async def test_reload_picks_up_new_commits(client, history, mock_repo):
    await client.get("/api/commits", params={"limit": 1})

    newer = mock_repo.commit("Newer", [history[0]])
    mock_repo.set_ref("refs/heads/main", newer)
    stale = await client.get("/api/commits", params={"limit": 1})
    assert stale.json()["rows"][0]["oid"] == history[0]

    response = await client.post("/api/reload")
    assert response.status_code == 200
    assert response.json()["status"] == "reloaded"

    fresh = await client.get("/api/commits", params={"limit": 1})
    assert fresh.json()["rows"][0]["oid"] == newer

@pytest.mark.asyncio
async def test_limit_is_not_complete(client, history, monkeypatch):
    monkeypatch.setattr(service, "limit", 5)
    service.reset()

    response = await client.get("/api/commits", params={"limit": 50})
    data = response.json()
    assert data["loaded"] == 5
    assert data["has_more"] is False
    assert data["complete"] is False

@pytest.mark.asyncio
async def test_concurrent_requests_share_one_session(client, history):
    def page(i):
        params = {"limit": 5, "q": "fix" if i % 2 else ""}
        return client.get("/api/commits", params=params)

    responses = await asyncio.gather(*(page(i) for i in range(20)))

    for i, response in enumerate(responses):
        assert response.status_code == 200
        data = response.json()
        if i % 2:
            assert data["filter"] == "fix"
            assert [row["subject"] for row in data["rows"]] == ["Fix crash 20", "Fix crash 15", "Fix crash 10", "Fix crash 5"]
        else:
            assert data["filter"] == ""
            assert [row["oid"] for row in data["rows"]] == history[:5]
            assert [row["index"] for row in data["rows"]] == list(range(5))
