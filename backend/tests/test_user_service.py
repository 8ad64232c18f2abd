"""
Credit API - User & Contact Service Tests
==========================================

What:  UserService and ContactService against a temporary SQLite database.
Why:   Cascades, orphan deletion and the case-insensitive unique index are
       database behaviour; mocks would only echo the test's assumptions.
"""

import pytest
from sqlalchemy import func, select

from credit_api.exceptions import NotFoundError, ValidationError
from credit_api.models import Contact, Transaction, User
from credit_api.schemas.user import ContactCreate, UserCreate, UserUpdate
from credit_api.services.contact_service import ContactService
from credit_api.services.user_service import UserService


async def _count(session, model, *criteria):
    result = await session.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar_one()


class TestUserService:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_create_with_contacts(self, db_session):
        created = await self.service.create_user(
            db_session,
            UserCreate(
                username="alice",
                credit=120.5,
                contacts=[
                    ContactCreate(nickname="Bob", phone_number="555-0100"),
                    ContactCreate(nickname="Carol", phone_number="555-0101"),
                ],
            ),
        )

        assert created.id
        assert created.credit == 120.5
        assert [c.nickname for c in created.contacts] == ["Bob", "Carol"]
        assert all(c.user_id == created.id for c in created.contacts)

        fetched = await self.service.get_user(db_session, created.id)
        assert fetched.username == "alice"
        assert len(fetched.contacts) == 2

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, db_session):
        created = await self.service.create_user(
            db_session, UserCreate(username="alice", password="Secret1!")
        )
        user = await db_session.get(User, created.id)
        assert user.password_hash is not None
        assert user.password_hash != "Secret1!"
        assert user.password_hash.startswith("$2")

    @pytest.mark.asyncio
    async def test_weak_password_rejected(self, db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_user(
                db_session, UserCreate(username="alice", password="short")
            )
        assert exc_info.value.context["violations"]
        assert await _count(db_session, User) == 0

    @pytest.mark.asyncio
    async def test_duplicate_username_is_case_insensitive(self, db_session):
        await self.service.create_user(db_session, UserCreate(username="Alice"))

        with pytest.raises(ValidationError, match="already taken"):
            await self.service.create_user(db_session, UserCreate(username="alice"))

    @pytest.mark.asyncio
    async def test_get_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_user(db_session, "does-not-exist")

    @pytest.mark.asyncio
    async def test_update_replaces_contacts(self, db_session):
        created = await self.service.create_user(
            db_session,
            UserCreate(
                username="alice",
                credit=10.0,
                contacts=[ContactCreate(nickname="Bob", phone_number="555-0100")],
            ),
        )

        await self.service.update_user(
            db_session,
            created.id,
            UserUpdate(
                username="alice2",
                credit=75.0,
                contacts=[ContactCreate(nickname="Dave", phone_number="555-0199")],
            ),
        )

        fetched = await self.service.get_user(db_session, created.id)
        assert fetched.username == "alice2"
        assert fetched.credit == 75.0
        assert [c.nickname for c in fetched.contacts] == ["Dave"]
        assert await _count(db_session, Contact) == 1

    @pytest.mark.asyncio
    async def test_update_without_contacts_clears_them(self, db_session):
        created = await self.service.create_user(
            db_session,
            UserCreate(
                username="alice",
                contacts=[ContactCreate(nickname="Bob", phone_number="555-0100")],
            ),
        )

        await self.service.update_user(
            db_session, created.id, UserUpdate(username="alice", credit=5.0)
        )

        assert await _count(db_session, Contact, Contact.user_id == created.id) == 0

    @pytest.mark.asyncio
    async def test_update_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_user(
                db_session, "does-not-exist", UserUpdate(username="x", credit=1.0)
            )

    @pytest.mark.asyncio
    async def test_delete_cascades_to_contacts_and_transactions(self, db_session):
        created = await self.service.create_user(
            db_session,
            UserCreate(
                username="alice",
                credit=50.0,
                contacts=[
                    ContactCreate(nickname="Bob", phone_number="555-0100"),
                    ContactCreate(nickname="Carol", phone_number="555-0101"),
                ],
            ),
        )
        db_session.add(
            Transaction(amount=5.0, user_id=created.id, contact_id=created.contacts[0].id)
        )
        await db_session.flush()

        await self.service.delete_user(db_session, created.id)

        assert await _count(db_session, User) == 0
        assert await _count(db_session, Contact) == 0
        assert await _count(db_session, Transaction) == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_user(db_session, "does-not-exist")


class TestContactService:

    def setup_method(self):
        self.users = UserService()
        self.service = ContactService()

    @pytest.mark.asyncio
    async def test_add_contact(self, db_session):
        user = await self.users.create_user(db_session, UserCreate(username="alice"))

        contact = await self.service.add_contact(
            db_session, user.id, ContactCreate(nickname="Bob", phone_number="555-0100")
        )

        assert contact.id is not None
        assert contact.user_id == user.id

    @pytest.mark.asyncio
    async def test_add_contact_unknown_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.add_contact(
                db_session, "nobody", ContactCreate(nickname="Bob", phone_number="555-0100")
            )

    @pytest.mark.asyncio
    async def test_cannot_delete_contact_of_another_user(self, db_session):
        alice = await self.users.create_user(
            db_session,
            UserCreate(username="alice", contacts=[ContactCreate(nickname="Bob", phone_number="1")]),
        )
        mallory = await self.users.create_user(db_session, UserCreate(username="mallory"))

        with pytest.raises(NotFoundError, match="contact"):
            await self.service.delete_contact(db_session, mallory.id, alice.contacts[0].id)

        assert await _count(db_session, Contact) == 1

    @pytest.mark.asyncio
    async def test_delete_contact_keeps_transactions(self, db_session):
        alice = await self.users.create_user(
            db_session,
            UserCreate(
                username="alice",
                credit=10.0,
                contacts=[ContactCreate(nickname="Bob", phone_number="1")],
            ),
        )
        contact_id = alice.contacts[0].id
        db_session.add(Transaction(amount=2.0, user_id=alice.id, contact_id=contact_id))
        await db_session.flush()

        await self.service.delete_contact(db_session, alice.id, contact_id)

        assert await _count(db_session, Contact) == 0
        assert await _count(db_session, Transaction, Transaction.user_id == alice.id) == 1
        assert await _count(db_session, Transaction, Transaction.contact_id.is_(None)) == 1
