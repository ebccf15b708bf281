"""Tests for permission delegation and the admin dashboard aggregates."""

import unittest

import support

from app.models import AdminRole, User
from app.models.admin_role import ROLE_MODERATOR, ROLE_SUPER_ADMIN
from app.schemas.admin import AdminRoleCreate, AdminRoleUpdate, PermissionPatch, PermissionSet
from app.services import admin_roles, dashboard
from app.services.errors import ErrorKind, ServiceError
from app.services.permissions import AdminContext, Permission, require_permission


class RolesTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.SessionLocal = support.make_session_factory()
        self.db = self.SessionLocal()
        self.root = support.make_user(self.db, "root", is_admin=True, is_super_admin=True)
        self.ctx = AdminContext(user=self.root)
        self.alice = support.make_user(self.db, "alice")

    def tearDown(self) -> None:
        self.db.close()

    def assertKind(self, kind: ErrorKind, func, *args) -> ServiceError:
        with self.assertRaises(ServiceError) as ctx:
            func(*args)
        self.assertEqual(ctx.exception.kind, kind)
        return ctx.exception


class TestCreateRole(RolesTestCase):
    def test_grant_sets_admin_flag_and_grantor(self) -> None:
        admin_role = admin_roles.create_role(
            self.db,
            self.ctx,
            AdminRoleCreate(
                user_id=self.alice.id,
                role=ROLE_MODERATOR,
                permissions=PermissionSet(manage_images=True),
            ),
        )
        self.assertEqual(admin_role.granted_by, self.root.id)
        self.assertTrue(admin_role.manage_images)
        self.assertFalse(admin_role.delete_images)
        self.assertTrue(admin_role.view_dashboard)
        self.assertTrue(self.db.get(User, self.alice.id).is_admin)

        out = admin_roles.to_out(self.db, admin_role)
        self.assertEqual(out.role, ROLE_MODERATOR)
        self.assertTrue(out.permissions.manage_images)
        self.assertEqual(out.user.username, "alice")
        self.assertEqual(out.granted_by.username, "root")

    def test_default_grant_only_views_dashboard(self) -> None:
        admin_role = admin_roles.create_role(self.db, self.ctx, AdminRoleCreate(user_id=self.alice.id))
        self.assertEqual(admin_role.role, "admin")
        for permission in Permission:
            self.assertEqual(
                getattr(admin_role, permission.value),
                permission is Permission.VIEW_DASHBOARD,
            )

    def test_rejections(self) -> None:
        self.assertKind(
            ErrorKind.BAD_REQUEST, admin_roles.create_role, self.db, self.ctx,
            AdminRoleCreate(user_id=self.root.id),
        )
        self.assertKind(
            ErrorKind.NOT_FOUND, admin_roles.create_role, self.db, self.ctx,
            AdminRoleCreate(user_id="missing"),
        )
        other_root = support.make_user(self.db, "other_root", is_super_admin=True)
        self.assertKind(
            ErrorKind.BAD_REQUEST, admin_roles.create_role, self.db, self.ctx,
            AdminRoleCreate(user_id=other_root.id),
        )
        admin_roles.create_role(self.db, self.ctx, AdminRoleCreate(user_id=self.alice.id))
        err = self.assertKind(
            ErrorKind.BAD_REQUEST, admin_roles.create_role, self.db, self.ctx,
            AdminRoleCreate(user_id=self.alice.id),
        )
        self.assertEqual(err.message, "User already has an admin role")


class TestEditRole(RolesTestCase):
    def setUp(self) -> None:
        super().setUp()
        support.grant(self.db, self.alice, manage_users=True, delete_users=True)

    def test_update_merges_permissions(self) -> None:
        admin_role = admin_roles.update_role(
            self.db,
            self.ctx,
            self.alice.id,
            AdminRoleUpdate(permissions=PermissionPatch(delete_users=False, manage_categories=True)),
        )
        self.assertTrue(admin_role.manage_users)
        self.assertFalse(admin_role.delete_users)
        self.assertTrue(admin_role.manage_categories)
        self.assertEqual(admin_role.role, "admin")

    def test_promotion_to_super_admin_role_grants_everything(self) -> None:
        admin_roles.update_role(
            self.db, self.ctx, self.alice.id, AdminRoleUpdate(role=ROLE_SUPER_ADMIN)
        )
        ctx = require_permission(self.db, self.alice, Permission.MANAGE_ADMINS)
        self.assertTrue(ctx.is_super_admin)

    def test_nobody_edits_their_own_grant(self) -> None:
        alice_ctx = AdminContext(user=self.alice, admin_role=self.db.get(AdminRole, self.alice.id))
        self.assertKind(
            ErrorKind.BAD_REQUEST, admin_roles.update_role, self.db, alice_ctx, self.alice.id,
            AdminRoleUpdate(role=ROLE_SUPER_ADMIN),
        )
        self.assertKind(ErrorKind.BAD_REQUEST, admin_roles.delete_role, self.db, alice_ctx, self.alice.id)

    def test_missing_grant(self) -> None:
        bob = support.make_user(self.db, "bob")
        self.assertKind(ErrorKind.NOT_FOUND, admin_roles.delete_role, self.db, self.ctx, bob.id)

    def test_revoke_clears_admin_flag(self) -> None:
        admin_roles.delete_role(self.db, self.ctx, self.alice.id)
        self.assertIsNone(self.db.get(AdminRole, self.alice.id))
        self.assertFalse(self.db.get(User, self.alice.id).is_admin)
        self.assertKind(
            ErrorKind.FORBIDDEN, require_permission, self.db, self.alice, Permission.VIEW_DASHBOARD
        )

    def test_get_role_own_or_super_admin(self) -> None:
        bob = support.make_user(self.db, "bob")
        bob_role = support.grant(self.db, bob)
        alice_ctx = AdminContext(user=self.alice, admin_role=self.db.get(AdminRole, self.alice.id))

        self.assertEqual(admin_roles.get_role(self.db, alice_ctx, self.alice.id).user_id, self.alice.id)
        self.assertEqual(admin_roles.get_role(self.db, self.ctx, bob.id).user_id, bob_role.user_id)
        self.assertKind(ErrorKind.FORBIDDEN, admin_roles.get_role, self.db, alice_ctx, bob.id)
        self.assertKind(ErrorKind.NOT_FOUND, admin_roles.get_role, self.db, self.ctx, self.root.id)

    def test_list_excludes_bootstrap_super_admins(self) -> None:
        # A stray grant on a flagged account is hidden from the listing.
        self.db.add(AdminRole(user_id=self.root.id, role=ROLE_SUPER_ADMIN))
        self.db.commit()
        self.assertEqual([r.user_id for r in admin_roles.list_roles(self.db)], [self.alice.id])


class TestDashboard(RolesTestCase):
    def test_collect(self) -> None:
        nature = support.make_category(self.db, "Nature")
        city = support.make_category(self.db, "City")
        support.make_image(self.db, self.alice, nature, "One")
        support.make_image(self.db, self.alice, nature, "Two")
        support.make_image(self.db, self.root, city, "Three")

        data = dashboard.collect(self.db)

        self.assertEqual(data.total_users, 2)
        self.assertEqual(data.total_images, 3)
        self.assertEqual(
            [(c["name"], c["count"]) for c in data.category_stats],
            [("Nature", 2), ("City", 1)],
        )
        self.assertEqual(len(data.recent_users), 2)
        self.assertEqual(len(data.recent_images), 3)


if __name__ == "__main__":
    unittest.main()
