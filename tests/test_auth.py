import datetime as dt
import unittest
import warnings

import jwt

from config import Config
from models import db
from models.user import User
from security.password import hash_password, verify_password
from tests.base import ApiTestCase


class AdminLoginTestCase(ApiTestCase):
    def test_wrong_password_is_rejected_without_token(self) -> None:
        resp = self.login(password="not-the-password")
        self.assertEqual(resp.status_code, 401)
        body = resp.get_json()
        self.assertNotIn("token", body)
        self.assertIn("error", body)

    def test_unknown_email_is_rejected(self) -> None:
        resp = self.login(email="nobody@khanza.test")
        self.assertEqual(resp.status_code, 401)

    def test_non_text_credentials_are_a_client_error(self) -> None:
        resp = self.client.post("/api/admin/login", json={"email": 42, "password": ["x"]})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post("/api/admin/login", json={"email": self.config.ADMIN_EMAIL, "password": 123})
        self.assertEqual(resp.status_code, 400)

    def test_token_authorizes_admin_routes(self) -> None:
        resp = self.login()
        self.assertEqual(resp.status_code, 200)
        token = resp.get_json()["token"]

        listed = self.client.get("/api/admin/bookings", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(listed.status_code, 200)
        self.assertEqual(listed.get_json(), [])

        me = self.client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(me.get_json()["email"], self.config.ADMIN_EMAIL)

    def test_default_signing_key_is_long_enough(self) -> None:
        self.assertGreaterEqual(len(Config.JWT_SECRET.encode("utf-8")), 32)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            token = self.login().get_json()["token"]
            self.client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})
        key_warnings = [w for w in caught if "KeyLength" in w.category.__name__]
        self.assertEqual(key_warnings, [])

    def test_token_claims(self) -> None:
        token = self.login().get_json()["token"]
        claims = jwt.decode(token, self.config.JWT_SECRET, algorithms=["HS256"])
        self.assertEqual(claims["email"], self.config.ADMIN_EMAIL)
        self.assertIn("userId", claims)
        self.assertEqual(claims["exp"] - claims["iat"], 24 * 60 * 60)

    def test_missing_token_is_unauthorized(self) -> None:
        resp = self.client.get("/api/admin/bookings")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json()["error"], "Unauthorized")

    def test_forged_token_is_unauthorized(self) -> None:
        forged = jwt.encode({"userId": 1, "email": self.config.ADMIN_EMAIL},
                            "a-different-secret-of-at-least-32-bytes", algorithm="HS256")
        resp = self.client.get("/api/admin/bookings", headers={"Authorization": f"Bearer {forged}"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json()["error"], "Invalid or expired token")

    def test_expired_token_is_unauthorized(self) -> None:
        with self.app.app_context():
            user = User.query.filter_by(email=self.config.ADMIN_EMAIL).first()
            past = dt.datetime.now(dt.timezone.utc) - dt.timedelta(hours=25)
            expired = jwt.encode(
                {"userId": user.id, "email": user.email, "iat": past, "exp": past + dt.timedelta(hours=24)},
                self.config.JWT_SECRET,
                algorithm="HS256",
            )
        resp = self.client.get("/api/admin/stats", headers={"Authorization": f"Bearer {expired}"})
        self.assertEqual(resp.status_code, 401)

    def test_login_is_audited(self) -> None:
        self.login(password="nope")
        headers = self.admin_headers()
        logs = self.client.get("/api/admin/audit-logs", headers=headers).get_json()
        actions = [row["action"] for row in logs]
        self.assertIn("LOGIN_FAIL", actions)
        self.assertIn("LOGIN_SUCCESS", actions)


class SeedAdminTestCase(ApiTestCase):
    def test_admin_seeded_once_with_bcrypt_hash(self) -> None:
        with self.app.app_context():
            users = User.query.filter_by(email=self.config.ADMIN_EMAIL).all()
            self.assertEqual(len(users), 1)
            self.assertTrue(users[0].password_hash.startswith("$2"))
            self.assertTrue(verify_password(self.config.ADMIN_PASSWORD, users[0].password_hash))

    def test_plaintext_password_is_upgraded(self) -> None:
        from utils.seed import seed_admin

        with self.app.app_context():
            user = User.query.filter_by(email=self.config.ADMIN_EMAIL).first()
            user.password_hash = "123123"
            db.session.commit()

            self.assertTrue(seed_admin())
            user = User.query.filter_by(email=self.config.ADMIN_EMAIL).first()
            self.assertTrue(verify_password(self.config.ADMIN_PASSWORD, user.password_hash))

    def test_create_admin_cli(self) -> None:
        runner = self.app.test_cli_runner()
        result = runner.invoke(args=["create-admin", "owner@khanza.test", "An0ther-pass"])
        self.assertIn("created as admin", result.output)

        resp = self.login(email="owner@khanza.test", password="An0ther-pass")
        self.assertEqual(resp.status_code, 200)


class PasswordHashTestCase(unittest.TestCase):
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("Password!23")
        self.assertTrue(verify_password("Password!23", hashed))
        self.assertFalse(verify_password("password!23", hashed))

    def test_non_bcrypt_value_never_verifies(self) -> None:
        self.assertFalse(verify_password("123123", "123123"))
        self.assertFalse(verify_password("", "whatever"))

    def test_empty_password_cannot_be_hashed(self) -> None:
        with self.assertRaises(ValueError):
            hash_password("")


if __name__ == "__main__":
    unittest.main()
