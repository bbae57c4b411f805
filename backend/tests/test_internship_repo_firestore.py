"""
Firestore adapters: collection paths and query shapes against a fake client.

Why:
    The adapters are thin, but the paths are the contract with the data that
    other services write. A small in-process fake of the async client keeps
    these tests free of credentials and network.
"""
from __future__ import annotations

from typing import Any

import pytest

from backend.internship.repo_firestore import FirestoreDeliveryStore, FirestorePrimaryStore


pytestmark = pytest.mark.anyio("asyncio")


class _Snap:
    def __init__(self, doc_id: str, data: dict | None):
        self.id = doc_id
        self.exists = data is not None
        self._data = data

    def to_dict(self) -> dict | None:
        return dict(self._data) if self._data is not None else None


class _DocRef:
    def __init__(self, client: "_FakeClient", path: tuple[str, ...]):
        self._client = client
        self._path = path

    async def get(self) -> _Snap:
        self._client.calls.append(("get", "/".join(self._path)))
        return _Snap(self._path[-1], self._client.docs.get(self._path))


class _Query:
    def __init__(self, client: "_FakeClient", path: tuple[str, ...]):
        self._client = client
        self._path = path
        self._filters: list[Any] = []
        self._order: str | None = None
        self._limit: int | None = None

    def document(self, doc_id: str) -> _DocRef:
        return _DocRef(self._client, self._path + (doc_id,))

    def where(self, *, filter: Any) -> "_Query":
        self._filters.append(filter)
        return self

    def order_by(self, field: str, direction: Any = None) -> "_Query":
        self._order = field
        self._client.calls.append(("order_by", field, direction))
        return self

    def limit(self, n: int) -> "_Query":
        self._limit = n
        return self

    async def stream(self):
        self._client.calls.append(("stream", "/".join(self._path)))
        rows = [
            (key[-1], data)
            for key, data in self._client.docs.items()
            if key[:-1] == self._path
        ]
        for flt in self._filters:
            assert flt.op_string == "=="
            rows = [(i, d) for i, d in rows if d.get(flt.field_path) == flt.value]
        if self._order:
            rows = [(i, d) for i, d in rows if self._order in d]
            rows.sort(key=lambda row: row[1][self._order])
        if self._limit is not None:
            rows = rows[: self._limit]
        for doc_id, data in rows:
            yield _Snap(doc_id, data)


class _FakeClient:
    def __init__(self) -> None:
        self.docs: dict[tuple[str, ...], dict] = {}
        self.calls: list[tuple] = []

    def put(self, path: str, **data: Any) -> None:
        self.docs[tuple(path.split("/"))] = data

    def collection(self, *segments: str) -> _Query:
        return _Query(self, tuple(segments))

    def document(self, *segments: str) -> _DocRef:
        return _DocRef(self, tuple(segments))


@pytest.fixture
def fake_client() -> _FakeClient:
    return _FakeClient()


@pytest.mark.anyio
async def test_primary_store_paths_and_shapes(fake_client):
    fake_client.put("users/u1", role="trainer")
    fake_client.put("internships/i1/courses/c1", title="Python Basics")
    fake_client.put("internships/i1/courses/c1/chapters/b", order=2, title="Loops")
    fake_client.put("internships/i1/courses/c1/chapters/a", order=1, title="Variables")
    fake_client.put("internships/i1/students/r1", studentId="stu-1")
    fake_client.put("students/stu-1", uid="auth-1", chapterAccess={"c1": ["a"]})
    store = FirestorePrimaryStore(client=fake_client)

    assert await store.get_user_role("u1") == "trainer"
    assert await store.get_user_role("missing") is None
    assert await store.get_course("i1", "c1") == {"title": "Python Basics", "id": "c1"}
    assert await store.get_course("i1", "nope") is None
    chapters = await store.list_chapters("i1", "c1")
    assert [c["id"] for c in chapters] == ["a", "b"]
    assert ("order_by", "order", "ASCENDING") in fake_client.calls
    assert await store.list_internship_students("i1") == [{"studentId": "stu-1", "id": "r1"}]
    assert (await store.get_student_profile("stu-1"))["chapterAccess"] == {"c1": ["a"]}
    found = await store.find_student_profile_by_uid("auth-1")
    assert found is not None and found["id"] == "stu-1"
    assert await store.find_student_profile_by_uid("auth-x") is None


@pytest.mark.anyio
async def test_user_role_must_be_a_string(fake_client):
    fake_client.put("users/u1", role=["admin"])
    store = FirestorePrimaryStore(client=fake_client)
    assert await store.get_user_role("u1") is None


@pytest.mark.anyio
async def test_delivery_store_paths_and_first_match(fake_client):
    fake_client.put("copiedcourses/c1/assignments/t1", title="Day 1 Quiz", day=1)
    fake_client.put("copiedcourses/c1/assignments/t1/submissions/s1", studentId="stu-1", autoScore=40)
    fake_client.put("copiedcourses/c1/assignments/t1/submissions/s2", studentId="stu-1", autoScore=90)
    fake_client.put("copiedcourses/c1/assignments/t1/submissions/s3", studentId="stu-2", autoScore=70)
    store = FirestoreDeliveryStore(client=fake_client)

    tests = await store.list_progress_tests("c1")
    assert tests == [{"title": "Day 1 Quiz", "day": 1, "id": "t1"}]
    sub = await store.find_submission("c1", "t1", "stu-1")
    assert sub["id"] == "s1"
    assert await store.find_submission("c1", "t1", "stu-9") is None
    assert ("stream", "copiedcourses/c1/assignments/t1/submissions") in fake_client.calls


def test_client_is_created_lazily():
    store = FirestorePrimaryStore(project="intern-portal-prod", database="(default)")
    # No client (and no credentials lookup) until first use
    assert store._client is None


class _ClosingClient(_FakeClient):
    def __init__(self, *, async_close: bool) -> None:
        super().__init__()
        self.closed = 0
        self._async_close = async_close

    def close(self):
        self.closed += 1
        if self._async_close:
            async def _done():
                return None

            return _done()
        return None


@pytest.mark.anyio
@pytest.mark.parametrize("async_close", [True, False])
async def test_close_releases_client_once(async_close):
    client = _ClosingClient(async_close=async_close)
    store = FirestoreDeliveryStore(client=client)

    await store.close()
    await store.close()

    assert client.closed == 1
    assert store._client is None


@pytest.mark.anyio
async def test_close_stores_closes_both_adapters():
    from backend.web.routes import internships

    primary_client = _ClosingClient(async_close=True)
    delivery_client = _ClosingClient(async_close=False)
    internships.set_stores(
        FirestorePrimaryStore(client=primary_client),
        FirestoreDeliveryStore(client=delivery_client),
    )

    await internships.close_stores()

    assert primary_client.closed == 1
    assert delivery_client.closed == 1


@pytest.mark.anyio
async def test_close_stores_skips_in_memory_adapters(primary_store, delivery_store):
    from backend.web.routes import internships

    internships.set_stores(primary_store, delivery_store)
    await internships.close_stores()
