from types import SimpleNamespace

import pytest

from gohive.errors import BackendError
from gohive.services.supabase_backend import AuthUser, SupabaseBackend


class FakeQuery:
    def __init__(self, log: list, rows: list[dict]):
        self.log = log
        self.rows = rows

    def select(self, columns):
        self.log.append(("select", columns))
        return self

    def insert(self, row):
        self.log.append(("insert", row))
        self.rows = [{**row, "id": 99}]
        return self

    def eq(self, column, value):
        self.log.append(("eq", column, value))
        return self

    def limit(self, count):
        self.log.append(("limit", count))
        return self

    def execute(self):
        return SimpleNamespace(data=self.rows)


class FakeClient:
    def __init__(self, rows=None, sign_in_error: Exception | None = None, users=None):
        self.log: list = []
        self.users = users if users is not None else [SimpleNamespace(email="Ada@Example.com")]
        self.rows = rows or []
        self.sign_in_error = sign_in_error
        self.auth = SimpleNamespace(
            admin=SimpleNamespace(
                list_users=self._list_users,
                create_user=self._create_user,
                delete_user=lambda user_id: self.log.append(("delete_user", user_id)),
            ),
            sign_in_with_password=self._sign_in,
        )

    def _list_users(self, page=1, per_page=50):
        self.log.append(("list_users", page, per_page))
        start = (page - 1) * per_page
        return self.users[start : start + per_page]

    def _create_user(self, attributes):
        self.log.append(("create_user", attributes))
        return SimpleNamespace(
            user=SimpleNamespace(id="abc", email=attributes["email"], user_metadata=None)
        )

    def _sign_in(self, credentials):
        if self.sign_in_error is not None:
            raise self.sign_in_error
        return SimpleNamespace(user=SimpleNamespace(id="abc", email=credentials["email"]))

    def schema(self, name):
        self.log.append(("schema", name))
        return self

    def table(self, name):
        self.log.append(("table", name))
        return FakeQuery(self.log, self.rows)


@pytest.mark.asyncio
async def test_select_builds_filtered_query():
    client = FakeClient(rows=[{"id": 1}])
    backend = SupabaseBackend(lambda: client)

    rows = await backend.select(
        "goals", columns="id", schema="posts", filters={"userID": "u1"}, limit=100
    )

    assert rows == [{"id": 1}]
    assert client.log == [
        ("schema", "posts"),
        ("table", "goals"),
        ("select", "id"),
        ("eq", "userID", "u1"),
        ("limit", 100),
    ]


@pytest.mark.asyncio
async def test_insert_returns_first_row():
    client = FakeClient()
    backend = SupabaseBackend(lambda: client)

    row = await backend.insert("users", {"username": "ada"})

    assert row == {"username": "ada", "id": 99}


@pytest.mark.asyncio
async def test_email_exists_is_case_insensitive():
    backend = SupabaseBackend(FakeClient)

    assert await backend.email_exists("ada@example.com") is True
    assert await backend.email_exists("bob@example.com") is False


@pytest.mark.asyncio
async def test_email_exists_reads_every_page():
    users = [SimpleNamespace(email=f"user{i}@example.com") for i in range(5)]
    client = FakeClient(users=users)
    backend = SupabaseBackend(lambda: client)
    backend.users_page_size = 2

    assert await backend.email_exists("user4@example.com") is True
    assert await backend.email_exists("nobody@example.com") is False
    pages = [entry[1] for entry in client.log if entry[0] == "list_users"]
    assert pages == [1, 2, 3, 1, 2, 3]


@pytest.mark.asyncio
async def test_create_auth_user_confirms_email():
    client = FakeClient()
    backend = SupabaseBackend(lambda: client)

    user = await backend.create_auth_user("ada@example.com", "pw", phone="+100")

    assert user == AuthUser(id="abc", email="ada@example.com", metadata={})
    assert client.log[0] == (
        "create_user",
        {"email": "ada@example.com", "password": "pw", "email_confirm": True, "phone": "+100"},
    )


@pytest.mark.asyncio
async def test_sdk_failures_become_backend_errors():
    error = Exception("Invalid login credentials")
    backend = SupabaseBackend(lambda: FakeClient(sign_in_error=error))

    with pytest.raises(BackendError) as exc_info:
        await backend.sign_in_with_password("ada@example.com", "bad")

    assert exc_info.value.message == "Invalid login credentials"
    assert exc_info.value.status_code == 400
