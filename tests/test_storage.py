"""
Contract tests for the account, session and content stores.

Every contract test runs against both backends: the in-memory stores and
the SQLAlchemy stores over a file-backed SQLite database, so concurrent
operations use separate connections as they would against PostgreSQL.
"""

import asyncio
import tempfile
import unittest
from datetime import UTC, datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from portal.core.database import create_db_engine, init_schema
from portal.errors import ConflictError, StorageError
from portal.schemas.accounts import NewAccount, ProfileUpdate
from portal.schemas.content import NewsCreate, NewsUpdate, ProjectCreate, ProjectUpdate
from portal.storage import Storage, database_storage, memory_storage
from portal.storage.database import DatabaseAccountStore, DatabaseSessionStore


class FakeClock:
    """Controllable replacement for utc_now."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def _candidate(username: str, role: str | None = None) -> NewAccount:
    if role is None:
        return NewAccount(username=username, password_hash=f"hash-of-{username}")
    return NewAccount(username=username, password_hash=f"hash-of-{username}", role=role)


class StorageBackendMixin:
    """Builds self.storage for one backend; subclasses set make_storage."""

    def make_storage(self, clock: FakeClock) -> Storage:
        raise NotImplementedError

    async def asyncSetUp(self) -> None:
        self.clock = FakeClock()
        self.storage = self.make_storage(self.clock)
        self.addCleanup(self.storage.close)


class MemoryBackend(StorageBackendMixin):
    def make_storage(self, clock: FakeClock) -> Storage:
        return memory_storage(clock)


class DatabaseBackend(StorageBackendMixin):
    def make_storage(self, clock: FakeClock) -> Storage:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        engine = create_db_engine(f"sqlite:///{tmp.name}/portal.db")
        init_schema(engine)
        return database_storage(engine, clock)


class AccountStoreContract:
    """Behavior every AccountStore must show."""

    async def test_distinct_ids_and_lookup_by_username(self) -> None:
        names = ["alice", "bob", "carol"]
        created = [await self.storage.accounts.create(_candidate(n)) for n in names]
        self.assertEqual(len({a.id for a in created}), 3)
        for account in created:
            found = await self.storage.accounts.get_by_username(account.username)
            self.assertIsNotNone(found)
            self.assertEqual(found.id, account.id)
            by_id = await self.storage.accounts.get_by_id(account.id)
            self.assertEqual(by_id.username, account.username)

    async def test_list_all_contains_exactly_created(self) -> None:
        created = [await self.storage.accounts.create(_candidate(n)) for n in ("a11", "b22")]
        listed = await self.storage.accounts.list_all()
        self.assertEqual({a.id for a in listed}, {a.id for a in created})

    async def test_role_defaults_to_user(self) -> None:
        account = await self.storage.accounts.create(_candidate("alice"))
        self.assertEqual(account.role, "user")
        admin = await self.storage.accounts.create(_candidate("root", role="admin"))
        self.assertEqual(admin.role, "admin")

    async def test_created_at_and_hash_stored(self) -> None:
        account = await self.storage.accounts.create(_candidate("alice"))
        self.assertEqual(account.password_hash, "hash-of-alice")
        self.assertIsNotNone(account.created_at)
        self.assertIsNone(account.avatar)
        self.assertIsNone(account.bio)

    async def test_concurrent_creates_of_one_username_admit_exactly_one(self) -> None:
        results = await asyncio.gather(
            *(self.storage.accounts.create(_candidate("bob")) for _ in range(5)),
            return_exceptions=True,
        )
        created = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, ConflictError)]
        self.assertEqual(len(created), 1)
        self.assertEqual(len(conflicts), 4)
        listed = await self.storage.accounts.list_all()
        self.assertEqual([a.id for a in listed], [created[0].id])

    async def test_timestamps_read_back_timezone_aware(self) -> None:
        account = await self.storage.accounts.create(_candidate("alice"))
        for found in (
            await self.storage.accounts.get_by_id(account.id),
            (await self.storage.accounts.list_all())[0],
        ):
            self.assertIsNotNone(found.created_at.tzinfo)
            self.assertEqual(found.created_at, self.clock.now)

    async def test_duplicate_username_conflicts_without_partial_account(self) -> None:
        await self.storage.accounts.create(_candidate("alice"))
        with self.assertRaises(ConflictError):
            await self.storage.accounts.create(_candidate("alice"))
        listed = await self.storage.accounts.list_all()
        self.assertEqual(len(listed), 1)

    async def test_unknown_lookups_are_absent(self) -> None:
        self.assertIsNone(await self.storage.accounts.get_by_id(404))
        self.assertIsNone(await self.storage.accounts.get_by_username("nobody"))

    async def test_update_profile_applies_only_given_fields(self) -> None:
        account = await self.storage.accounts.create(_candidate("alice"))
        updated = await self.storage.accounts.update_profile(
            account.id, ProfileUpdate(bio="Hello there")
        )
        self.assertEqual(updated.bio, "Hello there")
        self.assertEqual(updated.username, "alice")
        self.assertIsNone(updated.avatar)
        self.assertEqual(updated.role, "user")
        self.assertEqual(updated.password_hash, "hash-of-alice")

        renamed = await self.storage.accounts.update_profile(
            account.id, ProfileUpdate(username="alice2", avatar="/uploads/a.png")
        )
        self.assertEqual(renamed.username, "alice2")
        self.assertEqual(renamed.avatar, "/uploads/a.png")
        self.assertEqual(renamed.bio, "Hello there")
        self.assertIsNone(await self.storage.accounts.get_by_username("alice"))
        self.assertEqual((await self.storage.accounts.get_by_username("alice2")).id, account.id)

    async def test_update_profile_null_username_means_unchanged(self) -> None:
        account = await self.storage.accounts.create(_candidate("alice"))
        updated = await self.storage.accounts.update_profile(
            account.id, ProfileUpdate(username=None, bio="x")
        )
        self.assertEqual(updated.username, "alice")

    async def test_update_profile_unknown_id(self) -> None:
        self.assertIsNone(
            await self.storage.accounts.update_profile(404, ProfileUpdate(bio="x"))
        )

    async def test_update_profile_to_taken_username_conflicts(self) -> None:
        await self.storage.accounts.create(_candidate("alice"))
        bob = await self.storage.accounts.create(_candidate("bob"))
        with self.assertRaises(ConflictError):
            await self.storage.accounts.update_profile(bob.id, ProfileUpdate(username="alice"))
        self.assertEqual((await self.storage.accounts.get_by_id(bob.id)).username, "bob")
        same = await self.storage.accounts.update_profile(bob.id, ProfileUpdate(username="bob"))
        self.assertEqual(same.username, "bob")

    async def test_set_role(self) -> None:
        account = await self.storage.accounts.create(_candidate("alice"))
        promoted = await self.storage.accounts.set_role(account.id, "admin")
        self.assertEqual(promoted.role, "admin")
        self.assertEqual((await self.storage.accounts.get_by_id(account.id)).role, "admin")
        self.assertIsNone(await self.storage.accounts.set_role(404, "admin"))

    async def test_dump_never_contains_password_hash(self) -> None:
        account = await self.storage.accounts.create(_candidate("alice"))
        self.assertNotIn("password_hash", account.model_dump())
        self.assertNotIn("hash-of-alice", account.model_dump_json())


class SessionStoreContract:
    """Behavior every SessionStore must show."""

    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.account = await self.storage.accounts.create(_candidate("alice"))

    async def test_create_and_resolve(self) -> None:
        sid = await self.storage.sessions.create(self.account.id, timedelta(hours=1))
        self.assertEqual(await self.storage.sessions.resolve(sid), self.account.id)

    async def test_each_create_issues_new_id(self) -> None:
        a = await self.storage.sessions.create(self.account.id, timedelta(hours=1))
        b = await self.storage.sessions.create(self.account.id, timedelta(hours=1))
        self.assertNotEqual(a, b)

    async def test_unknown_session_absent(self) -> None:
        self.assertIsNone(await self.storage.sessions.resolve("no-such-session"))

    async def test_destroy_is_immediate_and_idempotent(self) -> None:
        sid = await self.storage.sessions.create(self.account.id, timedelta(hours=1))
        await self.storage.sessions.destroy(sid)
        self.assertIsNone(await self.storage.sessions.resolve(sid))
        await self.storage.sessions.destroy(sid)
        await self.storage.sessions.destroy("never-existed")

    async def test_expired_session_absent(self) -> None:
        sid = await self.storage.sessions.create(self.account.id, timedelta(minutes=30))
        self.clock.advance(minutes=29)
        self.assertEqual(await self.storage.sessions.resolve(sid), self.account.id)
        self.clock.advance(minutes=2)
        self.assertIsNone(await self.storage.sessions.resolve(sid))

    async def test_purge_removes_only_expired(self) -> None:
        short = await self.storage.sessions.create(self.account.id, timedelta(minutes=5))
        await self.storage.sessions.create(self.account.id, timedelta(minutes=5))
        long = await self.storage.sessions.create(self.account.id, timedelta(hours=5))
        self.clock.advance(minutes=10)
        self.assertEqual(await self.storage.sessions.purge_expired(), 2)
        self.assertEqual(await self.storage.sessions.purge_expired(), 0)
        self.assertIsNone(await self.storage.sessions.resolve(short))
        self.assertEqual(await self.storage.sessions.resolve(long), self.account.id)


class ContentStoreContract:
    """CRUD by id for news and projects."""

    async def test_news_crud(self) -> None:
        news = self.storage.news
        item = await news.create(NewsCreate(title="Launch", content="We launched."), user_id=7)
        self.assertEqual(item.user_id, 7)
        self.assertEqual(item.files, [])
        self.assertEqual((await news.get(item.id)).title, "Launch")
        self.assertEqual([n.id for n in await news.list_all()], [item.id])

        self.clock.advance(minutes=1)
        updated = await news.update(item.id, NewsUpdate(content="We relaunched."))
        self.assertEqual(updated.title, "Launch")
        self.assertEqual(updated.content, "We relaunched.")
        self.assertEqual(updated.user_id, 7)
        self.assertGreater(updated.updated_at, updated.created_at)
        self.assertEqual(updated.created_at.utcoffset(), timedelta(0))
        self.assertEqual(updated.updated_at, self.clock.now)
        self.assertEqual((await news.get(item.id)).created_at, item.created_at)

        self.assertTrue(await news.delete(item.id))
        self.assertFalse(await news.delete(item.id))
        self.assertIsNone(await news.get(item.id))
        self.assertIsNone(await news.update(item.id, NewsUpdate(title="Gone")))

    async def test_project_defaults_and_files(self) -> None:
        projects = self.storage.projects
        item = await projects.create(
            ProjectCreate(title="Site", description="Our site", files=["/uploads/a.pdf"]),
            user_id=3,
        )
        self.assertEqual(item.image_url, "")
        self.assertEqual(item.url, "")
        self.assertEqual(item.files, ["/uploads/a.pdf"])
        updated = await projects.update(item.id, ProjectUpdate(url="https://example.org"))
        self.assertEqual(updated.url, "https://example.org")
        self.assertEqual(updated.files, ["/uploads/a.pdf"])


class TestMemoryAccountStore(MemoryBackend, AccountStoreContract, unittest.IsolatedAsyncioTestCase):
    pass


class TestDatabaseAccountStore(DatabaseBackend, AccountStoreContract, unittest.IsolatedAsyncioTestCase):
    pass


class TestMemorySessionStore(SessionStoreContract, MemoryBackend, unittest.IsolatedAsyncioTestCase):
    pass


class TestDatabaseSessionStore(SessionStoreContract, DatabaseBackend, unittest.IsolatedAsyncioTestCase):
    async def test_sessions_survive_a_new_store_instance(self) -> None:
        sid = await self.storage.sessions.create(self.account.id, timedelta(hours=1))
        restarted = database_storage(self.storage.engine, self.clock)
        self.assertEqual(await restarted.sessions.resolve(sid), self.account.id)


class TestMemoryContentStore(MemoryBackend, ContentStoreContract, unittest.IsolatedAsyncioTestCase):
    pass


class TestDatabaseContentStore(DatabaseBackend, ContentStoreContract, unittest.IsolatedAsyncioTestCase):
    pass


class TestDatabaseStorageErrors(unittest.IsolatedAsyncioTestCase):
    """Driver failures surface as StorageError, never as an empty result."""

    async def asyncSetUp(self) -> None:
        engine = create_engine("sqlite:////nonexistent-dir/portal/unreachable.db")
        self.addCleanup(engine.dispose)
        self.factory = sessionmaker(bind=engine)

    async def test_account_lookup_raises_storage_error(self) -> None:
        store = DatabaseAccountStore(self.factory)
        with self.assertRaises(StorageError) as ctx:
            await store.get_by_username("alice")
        self.assertIn("accounts.get_by_username", ctx.exception.message)
        self.assertIsNotNone(ctx.exception.cause)

    async def test_session_resolve_raises_storage_error(self) -> None:
        store = DatabaseSessionStore(self.factory)
        with self.assertRaises(StorageError):
            await store.resolve("abc")


if __name__ == "__main__":
    unittest.main()
