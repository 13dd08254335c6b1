import unittest

from support import StateTestCase, make_user, request_json

from api import gateway as gw
from api import payloads
from api.errors import NotAuthenticated, Unauthorized
from api.models import NewUser, ProfileUpdate
from core.credentials import ACCESS_TOKEN, USER
from core.session import derive_role


class DeriveRoleTestCase(unittest.TestCase):
    def test_admin_wins(self):
        self.assertEqual(derive_role(["USER", "ADMIN"]), "ADMIN")

    def test_other_roles_are_user(self):
        self.assertEqual(derive_role(["USER"]), "USER")
        self.assertEqual(derive_role(["MANAGER"]), "USER")

    def test_no_roles(self):
        self.assertIsNone(derive_role([]))


class SessionManagerTestCase(StateTestCase):
    def login_ok(self, role: str = "ADMIN"):
        self.gateway.route(
            "POST",
            f"{gw.AUTH}/login",
            body={
                "token": "T1",
                "userId": 7,
                "email": "alice@example.com",
                "role": role,
                "expiresIn": 3600,
            },
        )

    # ---------- Login ----------

    async def test_login_publishes_and_persists(self):
        self.login_ok()
        seen = []
        self.state.session.subscribe(seen.append)

        session = await self.state.auth.login("alice@example.com", "pw")

        self.assertTrue(session.is_authenticated)
        self.assertEqual(session.role, "ADMIN")
        self.assertEqual(session.user.id, 7)
        self.assertEqual(seen, [session])
        self.assertTrue(self.state.auth.is_admin())
        self.assertEqual(self.state.auth.current_token(), "T1")

        stored = await self.state.credentials.get_all()
        self.assertEqual(stored[ACCESS_TOKEN], "T1")
        self.assertEqual(payloads.load_user(stored[USER]).email, "alice@example.com")

        (req,) = self.gateway.sent("POST", f"{gw.AUTH}/login")
        self.assertEqual(request_json(req), {"email": "alice@example.com", "password": "pw"})
        self.assertNotIn("Authorization", req.headers)

    async def test_login_rejected(self):
        self.gateway.route("POST", f"{gw.AUTH}/login", status=401)

        with self.assertRaises(Unauthorized) as ctx:
            await self.state.auth.login("alice@example.com", "bad")

        self.assertEqual(ctx.exception.message, "Invalid email or password.")
        self.assertFalse(self.state.auth.is_logged_in())
        self.assertEqual(await self.state.credentials.get_all(), {})

    async def test_register_does_not_log_in(self):
        self.gateway.route(
            "POST",
            f"{gw.AUTH}/register",
            status=201,
            body={"id": 9, "email": "bob@example.com", "roles": ["USER"]},
        )

        user = await self.state.auth.register(NewUser(email="bob@example.com", password="pw"))

        self.assertEqual(user.id, 9)
        self.assertFalse(self.state.auth.is_logged_in())
        (req,) = self.gateway.requests
        self.assertEqual(
            request_json(req),
            {"email": "bob@example.com", "password": "pw", "firstName": "", "lastName": ""},
        )

    # ---------- Restore ----------

    async def test_restore_valid_credentials(self):
        user = make_user(role="ADMIN")
        await self.state.credentials.save("T1", payloads.dump_user(user))

        session = await self.state.start()

        self.assertTrue(session.is_authenticated)
        self.assertEqual(session.user, user)
        self.assertEqual(session.role, "ADMIN")
        self.assertEqual(self.state.auth.current_token(), "T1")

    async def test_restore_empty_store(self):
        session = await self.state.start()
        self.assertFalse(session.is_authenticated)

    async def test_restore_corrupt_user_clears_store(self):
        await self.state.credentials.save("T1", "{not json")

        session = await self.state.start()

        self.assertFalse(session.is_authenticated)
        self.assertEqual(await self.state.credentials.get_all(), {})

    async def test_restore_user_with_wrong_shape_clears_store(self):
        records = (
            '{"id": 7, "email": "a@b.com", "roles": 5}',
            '{"id": 7, "permissions": 5}',
            "[1, 2]",
        )
        for record in records:
            await self.state.credentials.save("T1", record)

            session = await self.state.auth.restore()

            self.assertFalse(session.is_authenticated)
            self.assertEqual(await self.state.credentials.get_all(), {})

    async def test_restore_token_without_user_clears_store(self):
        async with self.state.credentials.connect() as conn:
            await conn.execute(
                "INSERT INTO credentials(key, value) VALUES (?, ?);", (ACCESS_TOKEN, "T1")
            )
            await conn.commit()

        session = await self.state.start()

        self.assertFalse(session.is_authenticated)
        self.assertEqual(await self.state.credentials.get_all(), {})

    # ---------- Logout ----------

    async def test_logout_without_refresh_token_is_local(self):
        await self.log_in_as()

        await self.state.auth.logout()

        self.assertEqual(self.gateway.requests, [])
        self.assertFalse(self.state.auth.is_logged_in())
        self.assertIsNone(self.state.auth.current_token())
        self.assertEqual(await self.state.credentials.get_all(), {})
        self.assertEqual(self.navigations, 1)

    async def test_logout_survives_backend_failure(self):
        user = make_user()
        await self.state.credentials.save("T1", payloads.dump_user(user), refresh_token="R1")
        await self.state.start()
        self.gateway.route("POST", f"{gw.AUTH}/logout", status=503)

        await self.state.auth.logout()

        (req,) = self.gateway.sent("POST", f"{gw.AUTH}/logout")
        self.assertEqual(request_json(req), {"refreshToken": "R1"})
        self.assertFalse(self.state.auth.is_logged_in())
        self.assertEqual(await self.state.credentials.get_all(), {})
        self.assertEqual(self.navigations, 1)

    # ---------- Profile ----------

    async def test_profile_requires_login(self):
        with self.assertRaises(NotAuthenticated):
            await self.state.auth.get_current_profile()
        self.assertEqual(self.gateway.requests, [])

    async def test_update_profile_republishes_user(self):
        await self.log_in_as()
        self.gateway.route(
            "PUT",
            f"{gw.USERS}/7",
            body={
                "id": 7,
                "email": "alice@example.com",
                "firstName": "Alice",
                "lastName": "Liddell",
                "roles": ["USER"],
            },
        )

        user = await self.state.auth.update_profile(ProfileUpdate(first_name="Alice", last_name="Liddell"))

        (req,) = self.gateway.requests
        self.assertEqual(request_json(req), {"firstName": "Alice", "lastName": "Liddell"})
        self.assertEqual(self.state.auth.current_user.display_name, "Alice Liddell")
        stored = await self.state.credentials.get(USER)
        self.assertEqual(payloads.load_user(stored), user)

    async def test_delete_profile_logs_out(self):
        await self.log_in_as()
        self.gateway.route("DELETE", f"{gw.USERS}/7", status=204)

        await self.state.auth.delete_profile()

        self.assertFalse(self.state.auth.is_logged_in())
        self.assertEqual(self.navigations, 1)


if __name__ == "__main__":
    unittest.main()
