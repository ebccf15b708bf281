"""HTTP-level tests: session lifecycle, error mapping and the admin gate."""

import unittest
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

import support
from support import PASSWORD

from app.core.config import get_settings
from app.core.database import get_db
from app.main import app
from app.models.admin_role import ROLE_MODERATOR
from app.services.images import validate_upload
from app.services.media import UploadedMedia

API = "/api/v1"
ALICE = {
    "username": "alice",
    "password": PASSWORD,
    "email": "alice@example.com",
    "firstName": "Alice",
    "lastName": "Lee",
}


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.SessionLocal = support.make_session_factory()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self.db = self.SessionLocal()

    def tearDown(self) -> None:
        self.db.close()
        app.dependency_overrides.clear()

    def sign_in(self, username: str, password: str = PASSWORD) -> str:
        resp = self.client.post(f"{API}/auth/signin", json={"username": username, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["accessToken"]

    @staticmethod
    def bearer(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


class TestSessionLifecycle(ApiTestCase):
    def test_signup_signin_me_signout(self) -> None:
        resp = self.client.post(f"{API}/auth/signup", json=ALICE)
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertNotIn("refreshToken", resp.cookies)

        resp = self.client.post(f"{API}/auth/signin", json={"username": "alice", "password": PASSWORD})
        self.assertEqual(resp.status_code, 200, resp.text)
        access_token = resp.json()["accessToken"]
        self.assertEqual(resp.json()["user"]["displayName"], "Alice Lee")
        self.assertNotIn("refreshToken", resp.json())
        set_cookie = resp.headers["set-cookie"]
        self.assertIn("refreshToken=", set_cookie)
        self.assertIn("HttpOnly", set_cookie)
        self.assertIn("Max-Age=604800", set_cookie)
        self.assertIn("samesite=lax", set_cookie.lower())
        refresh_secret = self.client.cookies.get("refreshToken")
        self.assertEqual(len(refresh_secret), 128)

        resp = self.client.get(f"{API}/users/me", headers=self.bearer(access_token))
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["user"]["displayName"], "Alice Lee")
        self.assertNotIn("passwordHash", resp.json()["user"])

        resp = self.client.post(f"{API}/auth/refresh")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertIn("accessToken", resp.json())
        self.assertNotIn("set-cookie", resp.headers)

        resp = self.client.post(f"{API}/auth/signout")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertIn('refreshToken=""', resp.headers["set-cookie"])
        self.assertIsNone(self.client.cookies.get("refreshToken"))

        # The access token outlives sign-out until it expires.
        resp = self.client.get(f"{API}/users/me", headers=self.bearer(access_token))
        self.assertEqual(resp.status_code, 200)

        # The refresh path is cut off.
        resp = self.client.post(f"{API}/auth/refresh")
        self.assertEqual(resp.status_code, 401)
        self.client.cookies.set("refreshToken", refresh_secret)
        resp = self.client.post(f"{API}/auth/refresh")
        self.assertEqual(resp.status_code, 403)

        resp = self.client.post(f"{API}/auth/signout")
        self.assertEqual(resp.status_code, 200)

    def test_duplicate_registration_names_the_field(self) -> None:
        self.assertEqual(self.client.post(f"{API}/auth/signup", json=ALICE).status_code, 201)

        resp = self.client.post(f"{API}/auth/signup", json={**ALICE, "email": "other@example.com"})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json(), {"detail": "Username already exists", "field": "username"})

        resp = self.client.post(f"{API}/auth/signup", json={**ALICE, "username": "alice2"})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["field"], "email")

    def test_weak_password_is_400(self) -> None:
        resp = self.client.post(f"{API}/auth/signup", json={**ALICE, "password": "password"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["field"], "password")

    def test_bad_credentials_and_missing_token(self) -> None:
        support.make_user(self.db, "alice")
        resp = self.client.post(f"{API}/auth/signin", json={"username": "alice", "password": "Nope12345"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid username or password")
        self.assertEqual(self.client.get(f"{API}/users/me").status_code, 401)
        resp = self.client.get(f"{API}/users/me", headers=self.bearer("garbage"))
        self.assertEqual(resp.status_code, 403)


class TestAdminGate(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        support.make_user(self.db, "alice")
        self.mod = support.make_user(self.db, "mod")
        support.grant(self.db, self.mod, ROLE_MODERATOR, manage_images=True)
        support.make_user(self.db, "root", is_admin=True, is_super_admin=True)

    def test_plain_account_is_refused(self) -> None:
        token = self.sign_in("alice")
        resp = self.client.get(f"{API}/admin/dashboard/stats", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Admin access required")

    def test_bootstrap_super_admin_without_admin_flag_is_admitted(self) -> None:
        support.make_user(self.db, "boot", is_admin=False, is_super_admin=True)
        headers = self.bearer(self.sign_in("boot"))
        resp = self.client.get(f"{API}/admin/dashboard/stats", headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(self.client.get(f"{API}/admin/roles", headers=headers).status_code, 200)

    def test_grant_holder_without_admin_flag_is_admitted(self) -> None:
        self.mod.is_admin = False
        self.db.commit()
        headers = self.bearer(self.sign_in("mod"))
        resp = self.client.get(f"{API}/admin/images", headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        resp = self.client.get(f"{API}/admin/users", headers=headers)
        self.assertEqual(resp.json()["detail"], "Permission denied: manage_users required")

    def test_grant_flags_decide_per_endpoint(self) -> None:
        headers = self.bearer(self.sign_in("mod"))
        self.assertEqual(self.client.get(f"{API}/admin/dashboard/stats", headers=headers).status_code, 200)
        self.assertEqual(self.client.get(f"{API}/admin/images", headers=headers).status_code, 200)
        resp = self.client.get(f"{API}/admin/users", headers=headers)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Permission denied: manage_users required")
        self.assertEqual(self.client.get(f"{API}/admin/roles", headers=headers).status_code, 403)

    def test_super_admin_manages_roles(self) -> None:
        headers = self.bearer(self.sign_in("root"))
        resp = self.client.get(f"{API}/admin/roles", headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual([r["user"]["username"] for r in resp.json()["adminRoles"]], ["mod"])

        resp = self.client.put(
            f"{API}/admin/roles/{self.mod.id}",
            headers=headers,
            json={"permissions": {"manageUsers": True}},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        permissions = resp.json()["adminRole"]["permissions"]
        self.assertTrue(permissions["manageUsers"])
        self.assertTrue(permissions["manageImages"])

        mod_headers = self.bearer(self.sign_in("mod"))
        self.assertEqual(self.client.get(f"{API}/admin/users", headers=mod_headers).status_code, 200)


class TestUploadAndHealth(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        support.make_user(self.db, "alice")
        support.make_category(self.db, "Nature")
        self.headers = self.bearer(self.sign_in("alice"))

    def _upload(self):
        return self.client.post(
            f"{API}/images/upload",
            headers=self.headers,
            data={"imageTitle": "Sunset", "imageCategory": "Nature"},
            files={"image": ("sunset.jpg", b"\xff\xd8\xff\xe0jpeg", "image/jpeg")},
        )

    @patch("app.services.media.upload_image", new_callable=AsyncMock)
    def test_upload_then_list(self, mock_upload: AsyncMock) -> None:
        mock_upload.return_value = UploadedMedia(
            public_id="photo-app-images/abc",
            secure_url="https://res.cloudinary.com/demo/image/upload/v1/photo-app-images/abc.jpg",
        )
        resp = self._upload()
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["image"]["imageTitle"], "Sunset")
        self.assertEqual(resp.json()["image"]["category"]["name"], "Nature")

        resp = self.client.get(f"{API}/images", params={"search": "sun"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["pagination"]["total"], 1)

    def test_oversized_upload_is_read_only_past_the_limit(self) -> None:
        app.dependency_overrides[get_settings] = lambda: support.app_settings(MAX_UPLOAD_BYTES=1024)
        with patch("app.services.images.validate_upload", wraps=validate_upload) as mock_validate:
            resp = self.client.post(
                f"{API}/images/upload",
                headers=self.headers,
                data={"imageTitle": "Big", "imageCategory": "Nature"},
                files={"image": ("big.jpg", b"\xff" * 4096, "image/jpeg")},
            )
        self.assertEqual(resp.status_code, 400, resp.text)
        self.assertEqual(resp.json()["field"], "image")
        self.assertEqual(len(mock_validate.call_args.args[1]), 1025)

    def test_oversized_avatar_is_rejected(self) -> None:
        app.dependency_overrides[get_settings] = lambda: support.app_settings(MAX_UPLOAD_BYTES=1024)
        resp = self.client.put(
            f"{API}/users/change-info",
            headers=self.headers,
            files={"avatar": ("me.png", b"\x89PNG" + b"\x00" * 4096, "image/png")},
        )
        self.assertEqual(resp.status_code, 400, resp.text)
        self.assertEqual(resp.json(), {"detail": "Avatar file is too large", "field": "avatar"})

    def test_upload_without_media_credentials_is_503(self) -> None:
        resp = self._upload()
        self.assertEqual(resp.status_code, 503)
        self.assertIn("not configured", resp.json()["detail"])

    def test_health(self) -> None:
        resp = self.client.get(f"{API}/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["database"], "connected")
        self.assertEqual(resp.json()["mediaProvider"], "not_configured")


if __name__ == "__main__":
    unittest.main()
