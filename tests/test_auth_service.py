"""Tests for the authentication service against an in-memory database."""

import unittest
from datetime import UTC, datetime, timedelta

import support
from support import PASSWORD, app_settings

from app.core.security import decode_access_token, verify_password
from app.models import RefreshSession, User
from app.schemas.auth import SignUpRequest
from app.services.auth import (
    INVALID_CREDENTIALS,
    refresh_access_token,
    revoke_user_sessions,
    sign_in,
    sign_out,
    sign_up,
)
from app.services.errors import ErrorKind, ServiceError


def _signup(**overrides) -> SignUpRequest:
    values = {
        "username": "Alice_01",
        "password": PASSWORD,
        "email": "Alice@Example.com",
        "first_name": "Alice",
        "last_name": "Liddell",
    }
    values.update(overrides)
    return SignUpRequest(**values)


class AuthTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.SessionLocal = support.make_session_factory()
        self.db = self.SessionLocal()
        self.settings = app_settings()

    def tearDown(self) -> None:
        self.db.close()


class TestSignUp(AuthTestCase):
    def test_creates_normalized_local_account(self) -> None:
        user = sign_up(self.db, _signup(phone=" 555 ", bio=""))
        self.assertEqual(user.username, "alice_01")
        self.assertEqual(user.email, "alice@example.com")
        self.assertEqual(user.display_name, "Alice Liddell")
        self.assertEqual(user.phone, "555")
        self.assertIsNone(user.bio)
        self.assertFalse(user.is_admin)
        self.assertFalse(user.is_super_admin)
        self.assertFalse(user.is_oauth_user)
        self.assertNotEqual(user.password_hash, PASSWORD)
        self.assertTrue(verify_password(PASSWORD, user.password_hash))

    def test_does_not_open_a_session(self) -> None:
        sign_up(self.db, _signup())
        self.assertEqual(self.db.query(RefreshSession).count(), 0)

    def test_policy_violations_name_the_field(self) -> None:
        cases = [
            (_signup(username="ab"), "username"),
            (_signup(username="bad-name"), "username"),
            (_signup(email="not-an-email"), "email"),
            (_signup(password="alllowercase1"), "password"),
        ]
        for payload, field in cases:
            with self.subTest(field=field):
                with self.assertRaises(ServiceError) as ctx:
                    sign_up(self.db, payload)
                self.assertEqual(ctx.exception.kind, ErrorKind.BAD_REQUEST)
                self.assertEqual(ctx.exception.field, field)
        self.assertEqual(self.db.query(User).count(), 0)

    def test_names_are_required(self) -> None:
        with self.assertRaises(ServiceError) as ctx:
            sign_up(self.db, _signup(last_name="  "))
        self.assertEqual(ctx.exception.kind, ErrorKind.BAD_REQUEST)

    def test_duplicate_username_is_a_conflict_regardless_of_case(self) -> None:
        sign_up(self.db, _signup())
        with self.assertRaises(ServiceError) as ctx:
            sign_up(self.db, _signup(username="ALICE_01", email="other@example.com"))
        self.assertEqual(ctx.exception.kind, ErrorKind.CONFLICT)
        self.assertEqual(ctx.exception.field, "username")
        self.assertEqual(ctx.exception.message, "Username already exists")

    def test_duplicate_email_is_a_conflict(self) -> None:
        sign_up(self.db, _signup())
        with self.assertRaises(ServiceError) as ctx:
            sign_up(self.db, _signup(username="someone_else", email="ALICE@example.com"))
        self.assertEqual(ctx.exception.kind, ErrorKind.CONFLICT)
        self.assertEqual(ctx.exception.field, "email")
        self.assertEqual(self.db.query(User).count(), 1)


class TestSignIn(AuthTestCase):
    def test_success_issues_token_and_session(self) -> None:
        user = support.make_user(self.db, "alice")
        now = datetime.now(UTC)
        result = sign_in(self.db, self.settings, "Alice", PASSWORD, now=now)

        payload = decode_access_token(result.access_token, self.settings)
        self.assertEqual(payload["sub"], user.id)
        self.assertEqual(result.user.id, user.id)

        stored = self.db.get(RefreshSession, result.refresh_token)
        self.assertIsNotNone(stored)
        self.assertEqual(stored.user_id, user.id)
        self.assertEqual(
            result.refresh_expires_at,
            now + timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def test_each_sign_in_adds_a_session(self) -> None:
        support.make_user(self.db, "alice")
        first = sign_in(self.db, self.settings, "alice", PASSWORD)
        second = sign_in(self.db, self.settings, "alice", PASSWORD)
        self.assertNotEqual(first.refresh_token, second.refresh_token)
        self.assertEqual(self.db.query(RefreshSession).count(), 2)

    def test_failures_are_indistinguishable(self) -> None:
        support.make_user(self.db, "alice")
        support.make_user(self.db, "gina", is_oauth_user=True)
        attempts = [("nobody", PASSWORD), ("alice", "Wrong1234"), ("gina", PASSWORD)]
        for username, password in attempts:
            with self.subTest(username=username):
                with self.assertRaises(ServiceError) as ctx:
                    sign_in(self.db, self.settings, username, password)
                self.assertEqual(ctx.exception.kind, ErrorKind.UNAUTHORIZED)
                self.assertEqual(ctx.exception.message, INVALID_CREDENTIALS)
        self.assertEqual(self.db.query(RefreshSession).count(), 0)


class TestRefreshAndSignOut(AuthTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = support.make_user(self.db, "alice")

    def test_refresh_returns_new_access_token_without_rotation(self) -> None:
        result = sign_in(self.db, self.settings, "alice", PASSWORD)
        token = refresh_access_token(self.db, self.settings, result.refresh_token)
        self.assertEqual(decode_access_token(token, self.settings)["sub"], self.user.id)
        # Same secret keeps working.
        refresh_access_token(self.db, self.settings, result.refresh_token)
        self.assertEqual(self.db.query(RefreshSession).count(), 1)

    def test_missing_secret_is_unauthorized(self) -> None:
        for value in (None, ""):
            with self.assertRaises(ServiceError) as ctx:
                refresh_access_token(self.db, self.settings, value)
            self.assertEqual(ctx.exception.kind, ErrorKind.UNAUTHORIZED)

    def test_unknown_secret_is_forbidden(self) -> None:
        with self.assertRaises(ServiceError) as ctx:
            refresh_access_token(self.db, self.settings, "f" * 128)
        self.assertEqual(ctx.exception.kind, ErrorKind.FORBIDDEN)

    def test_expired_secret_is_deleted_and_forbidden(self) -> None:
        past = datetime.now(UTC) - timedelta(days=30)
        result = sign_in(self.db, self.settings, "alice", PASSWORD, now=past)
        with self.assertRaises(ServiceError) as ctx:
            refresh_access_token(self.db, self.settings, result.refresh_token)
        self.assertEqual(ctx.exception.kind, ErrorKind.FORBIDDEN)
        self.assertEqual(ctx.exception.message, "Refresh token expired")
        self.assertIsNone(self.db.get(RefreshSession, result.refresh_token))

    def test_sign_out_deletes_only_that_session(self) -> None:
        first = sign_in(self.db, self.settings, "alice", PASSWORD)
        second = sign_in(self.db, self.settings, "alice", PASSWORD)
        sign_out(self.db, first.refresh_token)

        with self.assertRaises(ServiceError) as ctx:
            refresh_access_token(self.db, self.settings, first.refresh_token)
        self.assertEqual(ctx.exception.kind, ErrorKind.FORBIDDEN)
        refresh_access_token(self.db, self.settings, second.refresh_token)

    def test_sign_out_is_idempotent(self) -> None:
        result = sign_in(self.db, self.settings, "alice", PASSWORD)
        sign_out(self.db, result.refresh_token)
        sign_out(self.db, result.refresh_token)
        sign_out(self.db, None)
        self.assertEqual(self.db.query(RefreshSession).count(), 0)

    def test_revoke_user_sessions_leaves_other_accounts(self) -> None:
        support.make_user(self.db, "bob")
        sign_in(self.db, self.settings, "alice", PASSWORD)
        sign_in(self.db, self.settings, "alice", PASSWORD)
        bob = sign_in(self.db, self.settings, "bob", PASSWORD)

        self.assertEqual(revoke_user_sessions(self.db, self.user.id), 2)
        self.db.commit()
        self.assertEqual(
            [s.refresh_token for s in self.db.query(RefreshSession).all()],
            [bob.refresh_token],
        )


if __name__ == "__main__":
    unittest.main()
