"""HTTP tests for the auth and roles routes with in-memory stores injected via dependency overrides."""

import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from retailhub.api.v1 import roles as roles_api
from retailhub.api.v1.auth import get_account_store, get_authorization_gate, get_token_codec
from retailhub.core.config import get_settings
from retailhub.core.database import get_db
from retailhub.core.tokens import AuthPayload, TokenCodec
from retailhub.main import app
from retailhub.services.permissions import AuthorizationGate, PermissionCodes, PermissionResolver

from fakes import TEST_JWT_SECRET, FakeAccountStore, FakeClock, FakePermissionStore

PREFIX = get_settings().API_V1_PREFIX
COOKIE = get_settings().REFRESH_TOKEN_COOKIE_NAME

ADMIN_ROLE = 1
SELLER_ROLE = 2


class AuthApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.codec = TokenCodec(TEST_JWT_SECRET, clock=FakeClock())
        self.accounts = FakeAccountStore()
        self.admin = self.accounts.add("admin", "admin123", role_id=ADMIN_ROLE, employee_id=1, secret="a" * 128)
        self.seller = self.accounts.add("seller", "seller123", role_id=SELLER_ROLE, employee_id=2, secret="b" * 128)
        self.permissions = FakePermissionStore()
        self.permissions.account_roles = {self.admin.id: ADMIN_ROLE, self.seller.id: SELLER_ROLE}
        self.permissions.grant(
            ADMIN_ROLE,
            PermissionCodes.CUENTAS_EMPLEADOS_CREATE_ANY,
            PermissionCodes.CUENTAS_EMPLEADOS_UPDATE_ANY,
            PermissionCodes.ROLES_CUENTAS_GET_ANY,
        )
        self.permissions.grant(SELLER_ROLE, PermissionCodes.CUENTAS_EMPLEADOS_UPDATE_SELF)

        app.dependency_overrides[get_db] = lambda: MagicMock()
        app.dependency_overrides[get_account_store] = lambda: self.accounts
        app.dependency_overrides[get_token_codec] = lambda: self.codec
        app.dependency_overrides[get_authorization_gate] = lambda: AuthorizationGate(
            PermissionResolver(self.permissions)
        )
        app.dependency_overrides[roles_api.get_permission_store] = lambda: self.permissions
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _bearer(self, record) -> dict[str, str]:
        token = self.codec.sign_access_token(
            AuthPayload(account_id=record.id, role_id=record.role_id, employee_id=record.employee_id)
        )
        return {"Authorization": f"Bearer {token}"}


class TestLoginRoute(AuthApiTestCase):
    def test_login_returns_token_header_and_refresh_cookie(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth/login", json={"username": "admin", "password": "admin123"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["account"]["id"], self.admin.id)
        self.assertNotIn("secret", body["account"])
        self.assertEqual(resp.headers["authorization"], f"Bearer {body['access_token']}")

        cookie = resp.headers["set-cookie"].lower()
        self.assertTrue(cookie.startswith(f"{COOKIE}="))
        self.assertIn("httponly", cookie)
        self.assertIn("max-age=604800", cookie)
        self.assertIn("path=/", cookie)
        self.assertIn("samesite=strict", cookie)

    def test_bad_credentials_same_response(self) -> None:
        unknown = self.client.post(f"{PREFIX}/auth/login", json={"username": "nobody", "password": "admin123"})
        wrong = self.client.post(f"{PREFIX}/auth/login", json={"username": "admin", "password": "wrong123"})
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.json(), wrong.json())
        self.assertNotIn("set-cookie", wrong.headers)

    def test_invalid_body(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth/login", json={"username": "ad", "password": "x"})
        self.assertEqual(resp.status_code, 422)


class TestRefreshRoute(AuthApiTestCase):
    def test_refresh_with_login_cookie(self) -> None:
        login = self.client.post(f"{PREFIX}/auth/login", json={"username": "admin", "password": "admin123"})
        self.assertEqual(login.status_code, 200)
        resp = self.client.post(f"{PREFIX}/auth/refresh")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["account_id"], self.admin.id)
        self.assertEqual(self.codec.verify_access_token(body["access_token"]).account_id, self.admin.id)
        self.assertNotIn("set-cookie", resp.headers)

    def test_missing_cookie(self) -> None:
        resp = self.client.post(f"{PREFIX}/auth/refresh")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers["www-authenticate"], "Bearer")

    def test_garbage_cookie(self) -> None:
        self.client.cookies.set(COOKIE, "garbage")
        resp = self.client.post(f"{PREFIX}/auth/refresh")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid refresh token")

    def test_rotated_secret_rejects_cookie(self) -> None:
        self.client.post(f"{PREFIX}/auth/login", json={"username": "seller", "password": "seller123"})
        rotate = self.client.post(
            f"{PREFIX}/auth/accounts/{self.seller.id}/rotate-secret",
            headers=self._bearer(self.seller),
        )
        self.assertEqual(rotate.status_code, 204)
        resp = self.client.post(f"{PREFIX}/auth/refresh")
        self.assertEqual(resp.status_code, 401)


class TestSessionRoute(AuthApiTestCase):
    def test_requires_bearer(self) -> None:
        self.assertEqual(self.client.get(f"{PREFIX}/auth/session").status_code, 401)

    def test_rejects_invalid_bearer(self) -> None:
        resp = self.client.get(f"{PREFIX}/auth/session", headers={"Authorization": "Bearer nope"})
        self.assertEqual(resp.status_code, 401)

    def test_returns_current_account(self) -> None:
        resp = self.client.get(f"{PREFIX}/auth/session", headers=self._bearer(self.seller))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["username"], "seller")


class TestProtectedRoutes(AuthApiTestCase):
    @patch("retailhub.core.security.BCRYPT_ROUNDS", 4)
    def test_register_with_permission(self) -> None:
        self.accounts.employees[3] = True
        resp = self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": "newbie", "password": "newbie123", "role_id": SELLER_ROLE, "employee_id": 3},
            headers=self._bearer(self.admin),
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["account"]["username"], "newbie")

    def test_register_without_permission(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": "newbie", "password": "newbie123", "role_id": SELLER_ROLE, "employee_id": 3},
            headers=self._bearer(self.seller),
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Forbidden")

    def test_register_taken_username(self) -> None:
        self.accounts.employees[3] = True
        resp = self.client.post(
            f"{PREFIX}/auth/register",
            json={"username": "Seller", "password": "newbie123", "role_id": SELLER_ROLE, "employee_id": 3},
            headers=self._bearer(self.admin),
        )
        self.assertEqual(resp.status_code, 409)

    def test_update_self_cannot_rotate_other_account(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/accounts/{self.admin.id}/rotate-secret",
            headers=self._bearer(self.seller),
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.accounts.find_by_id(self.admin.id).secret, self.admin.secret)

    def test_update_any_rotates_other_account(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/accounts/{self.seller.id}/rotate-secret",
            headers=self._bearer(self.admin),
        )
        self.assertEqual(resp.status_code, 204)
        self.assertNotEqual(self.accounts.find_by_id(self.seller.id).secret, self.seller.secret)

    def test_rotate_unknown_account(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/auth/accounts/999/rotate-secret",
            headers=self._bearer(self.admin),
        )
        self.assertEqual(resp.status_code, 404)

    def test_list_roles(self) -> None:
        resp = self.client.get(f"{PREFIX}/roles", headers=self._bearer(self.admin))
        self.assertEqual(resp.status_code, 200)
        roles = {r["id"]: r for r in resp.json()["roles"]}
        self.assertIn(PermissionCodes.ROLES_CUENTAS_GET_ANY, roles[ADMIN_ROLE]["permission_codes"])

    def test_list_roles_forbidden_after_revocation(self) -> None:
        self.permissions.revoke(ADMIN_ROLE, PermissionCodes.ROLES_CUENTAS_GET_ANY)
        resp = self.client.get(f"{PREFIX}/roles", headers=self._bearer(self.admin))
        self.assertEqual(resp.status_code, 403)


class TestHealthRoute(AuthApiTestCase):
    def test_health(self) -> None:
        resp = self.client.get(f"{PREFIX}/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")
        self.assertEqual(resp.json()["database"], "connected")


if __name__ == "__main__":
    unittest.main()
