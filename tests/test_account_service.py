"""Unit tests for accountkit.services.accounts with a mocked credential store."""

import io
import unittest
from unittest.mock import MagicMock

from accountkit.core.errors import (
    ConflictError,
    ForbiddenError,
    InternalError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    NotFoundError,
    ValidationError,
)
from accountkit.core.security import PasswordHasher, TokenIssuer
from accountkit.models import Account, Role
from accountkit.schemas.auth import Caller
from accountkit.services.accounts import AccountService, normalize_identifier

USER = Caller(account_id="u1", role=Role.USER)
OTHER_USER = Caller(account_id="u2", role=Role.USER)
ADMIN = Caller(account_id="a1", role=Role.ADMIN)


def _service(store: MagicMock, assets: MagicMock | None = None) -> AccountService:
    return AccountService(
        store=store,
        hasher=PasswordHasher(rounds=4),
        tokens=TokenIssuer("unit-test-secret"),
        assets=assets,
    )


def _store() -> MagicMock:
    store = MagicMock()
    store.find_by_email_or_phone.return_value = None
    store.insert.return_value = "u1"
    return store


class TestNormalizeIdentifier(unittest.TestCase):
    def test_email_is_lowercased(self) -> None:
        self.assertEqual(normalize_identifier("  A@X.com "), "a@x.com")

    def test_phone_separators_removed(self) -> None:
        self.assertEqual(normalize_identifier("+1 (555) 000-1"), "+15550001")


class TestSignup(unittest.TestCase):
    """Signup validates input, refuses duplicates and stores a hash, not the password."""

    def test_creates_user_with_hashed_password(self) -> None:
        store = _store()
        service = _service(store)
        account_id = service.signup(
            name="Ann", password="hunter2", email="A@x.com", phone="+15550001"
        )
        self.assertEqual(account_id, "u1")
        stored: Account = store.insert.call_args.args[0]
        self.assertEqual(stored.email, "a@x.com")
        self.assertEqual(stored.phone, "+15550001")
        self.assertEqual(stored.role, "User")
        self.assertNotEqual(stored.password_hash, "hunter2")
        self.assertTrue(service.hasher.verify("hunter2", stored.password_hash))

    def test_phone_only_is_enough(self) -> None:
        store = _store()
        _service(store).signup(name="Bob", password="secret", phone="+15550002")
        self.assertIsNone(store.insert.call_args.args[0].email)

    def test_requires_email_or_phone(self) -> None:
        store = _store()
        with self.assertRaises(ValidationError):
            _service(store).signup(name="Ann", password="hunter2", email=" ", phone=None)
        store.insert.assert_not_called()

    def test_short_password(self) -> None:
        with self.assertRaises(ValidationError):
            _service(_store()).signup(name="Ann", password="abcd", email="a@x.com")

    def test_malformed_email(self) -> None:
        with self.assertRaises(ValidationError):
            _service(_store()).signup(name="Ann", password="hunter2", email="not-an-email")

    def test_malformed_phone(self) -> None:
        with self.assertRaises(ValidationError):
            _service(_store()).signup(name="Ann", password="hunter2", phone="12ab")

    def test_conflict_on_either_field(self) -> None:
        existing = Account(id="u9", email="a@x.com", phone="+15550009")
        for email, phone, taken in (
            ("a@x.com", "+15550001", "a@x.com"),
            ("b@x.com", "+15550009", "+15550009"),
        ):
            with self.subTest(taken=taken):
                store = _store()
                store.find_by_email_or_phone.side_effect = (
                    lambda i, taken=taken: existing if i == taken else None
                )
                with self.assertRaises(ConflictError):
                    _service(store).signup(
                        name="Ann", password="hunter2", email=email, phone=phone
                    )
                store.insert.assert_not_called()

    def test_insert_race_surfaces_as_conflict(self) -> None:
        store = _store()
        store.insert.side_effect = ConflictError()
        with self.assertRaises(ConflictError):
            _service(store).signup(name="Ann", password="hunter2", email="a@x.com")

    def test_unexpected_store_error_is_internal(self) -> None:
        store = _store()
        store.insert.side_effect = RuntimeError("connection reset by peer")
        with self.assertRaises(InternalError) as ctx:
            _service(store).signup(name="Ann", password="hunter2", email="a@x.com")
        self.assertNotIn("connection reset", ctx.exception.message)


class TestLogin(unittest.TestCase):
    """Login returns a verifiable token; every failure is InvalidCredentialsError."""

    def setUp(self) -> None:
        self.store = _store()
        self.service = _service(self.store)
        self.account = Account(
            id="u1",
            email="a@x.com",
            phone="+15550001",
            name="Ann",
            role="User",
            password_hash=self.service.hasher.hash("hunter2"),
        )

    def test_success_by_email(self) -> None:
        self.store.find_by_email_or_phone.return_value = self.account
        token = self.service.login("A@X.com", "hunter2")
        self.store.find_by_email_or_phone.assert_called_with("a@x.com")
        caller = self.service.authenticate(token)
        self.assertEqual(caller, Caller(account_id="u1", role=Role.USER))

    def test_wrong_password(self) -> None:
        self.store.find_by_email_or_phone.return_value = self.account
        with self.assertRaises(InvalidCredentialsError) as wrong:
            self.service.login("a@x.com", "wrong")
        self.store.find_by_email_or_phone.return_value = None
        with self.assertRaises(InvalidCredentialsError) as unknown:
            self.service.login("nobody@x.com", "wrong")
        self.assertEqual(wrong.exception.message, unknown.exception.message)

    def test_unknown_identifier_still_runs_hash_check(self) -> None:
        hasher = MagicMock()
        service = AccountService(self.store, hasher, TokenIssuer("s"))
        with self.assertRaises(InvalidCredentialsError):
            service.login("nobody@x.com", "pw")
        hasher.burn.assert_called_once_with("pw")

    def test_blank_identifier(self) -> None:
        with self.assertRaises(InvalidCredentialsError):
            self.service.login("  ", "hunter2")


class TestCreateAdmin(unittest.TestCase):
    def test_creates_admin(self) -> None:
        store = _store()
        store.insert.return_value = "a1"
        self.assertEqual(_service(store).create_admin("Root@x.com", "hunter22"), "a1")
        stored: Account = store.insert.call_args.args[0]
        self.assertEqual(stored.role, "Admin")
        self.assertEqual(stored.email, "root@x.com")

    def test_conflict_when_email_taken(self) -> None:
        store = _store()
        store.find_by_email_or_phone.return_value = Account(id="a0", email="root@x.com")
        with self.assertRaises(ConflictError):
            _service(store).create_admin("root@x.com", "hunter22")


class TestGuardedOperations(unittest.TestCase):
    """Profile update, upload, delete and list go through the access guard."""

    def setUp(self) -> None:
        self.account = Account(
            id="u1", email="a@x.com", name="Ann", role="User", profile_image="/old.png"
        )
        self.store = _store()
        self.store.find_by_id.side_effect = lambda i: self.account if i == "u1" else None
        self.store.update.side_effect = self._update
        self.assets = MagicMock()
        self.assets.save.return_value = "/uploads/abc.png"
        self.service = _service(self.store, self.assets)

    def _update(self, account_id: str, fields: dict) -> Account:
        for key, value in fields.items():
            setattr(self.account, key, value)
        return self.account

    def test_owner_partial_update(self) -> None:
        out = self.service.modify_profile(USER, "u1", name="Annie")
        self.store.update.assert_called_once_with("u1", {"name": "Annie"})
        self.assertEqual(out.name, "Annie")
        self.assertEqual(out.profile_image, "/old.png")
        self.assertFalse(hasattr(out, "password_hash"))

    def test_no_fields_is_noop(self) -> None:
        self.service.modify_profile(USER, "u1")
        self.store.update.assert_not_called()

    def test_non_owner_forbidden(self) -> None:
        with self.assertRaises(ForbiddenError):
            self.service.modify_profile(OTHER_USER, "u1", name="X")
        self.store.update.assert_not_called()

    def test_admin_may_update(self) -> None:
        self.assertEqual(self.service.modify_profile(ADMIN, "u1", name="Z").name, "Z")

    def test_anonymous_update(self) -> None:
        with self.assertRaises(NotAuthenticatedError):
            self.service.modify_profile(None, "u1", name="X")

    def test_access_checked_before_blank_name(self) -> None:
        with self.assertRaises(NotAuthenticatedError):
            self.service.modify_profile(None, "u1", name="  ")
        with self.assertRaises(NotFoundError):
            self.service.modify_profile(ADMIN, "missing", name="  ")
        with self.assertRaises(ForbiddenError):
            self.service.modify_profile(OTHER_USER, "u1", name="  ")
        with self.assertRaises(ValidationError):
            self.service.modify_profile(USER, "u1", name="  ")
        self.store.update.assert_not_called()

    def test_upload_stores_reference(self) -> None:
        out = self.service.upload_profile_image(
            USER, "u1", io.BytesIO(b"\x89PNG"), "me.png", "image/png"
        )
        self.assets.save.assert_called_once_with(b"\x89PNG", "me.png", "image/png")
        self.assertEqual(out.profile_image, "/uploads/abc.png")

    def test_upload_without_file(self) -> None:
        for stream in (None, io.BytesIO(b"")):
            with self.subTest(stream=stream):
                with self.assertRaises(ValidationError):
                    self.service.upload_profile_image(USER, "u1", stream, None)
        self.assets.save.assert_not_called()

    def test_upload_checks_access_before_reading_payload(self) -> None:
        stream = MagicMock()
        with self.assertRaises(ForbiddenError):
            self.service.upload_profile_image(OTHER_USER, "u1", stream, "me.png")
        with self.assertRaises(NotAuthenticatedError):
            self.service.upload_profile_image(None, "u1", stream, "me.png")
        stream.read.assert_not_called()

    def test_upload_reads_at_most_limit_plus_one(self) -> None:
        service = AccountService(
            store=self.store,
            hasher=PasswordHasher(rounds=4),
            tokens=TokenIssuer("s"),
            assets=self.assets,
            max_upload_bytes=8,
        )
        stream = io.BytesIO(b"x" * 100)
        with self.assertRaises(ValidationError):
            service.upload_profile_image(USER, "u1", stream, "big.png", "image/png")
        self.assertEqual(stream.tell(), 9)
        self.assets.save.assert_not_called()

    def test_upload_removes_asset_when_account_vanishes(self) -> None:
        self.store.update.side_effect = NotFoundError()
        with self.assertRaises(NotFoundError):
            self.service.upload_profile_image(USER, "u1", io.BytesIO(b"\x89PNG"), "me.png")
        self.assets.delete.assert_called_once_with("/uploads/abc.png")

    def test_delete_then_concurrent_delete(self) -> None:
        self.store.delete.return_value = True
        self.service.delete_account(USER, "u1")
        self.store.delete.return_value = False
        with self.assertRaises(NotFoundError):
            self.service.delete_account(USER, "u1")

    def test_delete_missing(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.delete_account(ADMIN, "nope")

    def test_list_requires_admin(self) -> None:
        self.store.list_all.return_value = [self.account]
        self.assertEqual([a.id for a in self.service.list_accounts(ADMIN)], ["u1"])
        with self.assertRaises(ForbiddenError):
            self.service.list_accounts(USER)


if __name__ == "__main__":
    unittest.main()
