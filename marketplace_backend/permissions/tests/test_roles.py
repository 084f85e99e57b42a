# permissions/tests/test_roles.py

from io import StringIO

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase

from permissions.roles import (
    CAP_ORDERS_DELETE,
    CAP_ORDERS_VIEW_ASSIGNED,
    CAP_PAYMENTS_VERIFY,
    CAP_WALLET_USE,
    HasAnyCapability,
    HasCapability,
    ROLE_ADMIN,
    ROLE_CUSTOMER,
    ROLE_PARTNER,
    capabilities_for,
    user_has_capability,
)


class _User:
    is_authenticated = True

    def __init__(self, role):
        self.role = role


class _Request:
    def __init__(self, user):
        self.user = user


class _View:
    def __init__(self, capability=None, any_of=None):
        self.required_capability = capability
        self.required_any_capabilities = any_of


class CapabilityMapTests(SimpleTestCase):
    def test_only_admin_deletes_and_verifies(self):
        self.assertTrue(user_has_capability(_User(ROLE_ADMIN), CAP_ORDERS_DELETE))
        self.assertTrue(user_has_capability(_User(ROLE_ADMIN), CAP_PAYMENTS_VERIFY))
        for role in (ROLE_PARTNER, ROLE_CUSTOMER):
            self.assertFalse(user_has_capability(_User(role), CAP_ORDERS_DELETE))
            self.assertFalse(user_has_capability(_User(role), CAP_PAYMENTS_VERIFY))

    def test_partner_sees_assignments(self):
        self.assertIn(CAP_ORDERS_VIEW_ASSIGNED, capabilities_for(_User(ROLE_PARTNER)))
        self.assertNotIn(CAP_ORDERS_VIEW_ASSIGNED, capabilities_for(_User(ROLE_CUSTOMER)))

    def test_anonymous_and_unknown_roles_have_nothing(self):
        self.assertEqual(capabilities_for(AnonymousUser()), set())
        self.assertEqual(capabilities_for(_User("mechanic")), set())

    def test_has_capability_denies_by_default(self):
        request = _Request(_User(ROLE_ADMIN))
        self.assertFalse(HasCapability().has_permission(request, _View()))
        self.assertTrue(HasCapability().has_permission(request, _View(CAP_ORDERS_DELETE)))

    def test_has_any_capability(self):
        request = _Request(_User(ROLE_CUSTOMER))
        view = _View(any_of={CAP_ORDERS_DELETE, CAP_WALLET_USE})
        self.assertTrue(HasAnyCapability().has_permission(request, view))
        self.assertFalse(HasAnyCapability().has_permission(request, _View(any_of={CAP_ORDERS_DELETE})))


class SeedUsersCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        out = StringIO()
        call_command("seed_users", stdout=out)
        call_command("seed_users", stdout=out)

        User = get_user_model()
        self.assertEqual(User.objects.count(), 3)
        admin = User.objects.get(email="admin@example.com")
        self.assertEqual(admin.role, ROLE_ADMIN)
        self.assertTrue(admin.is_staff)
        self.assertEqual(User.objects.get(email="partner@example.com").company_name, "Demo Parts Supply")
        self.assertIn("Created users: 0", out.getvalue())

    def test_short_password_refused(self):
        with self.assertRaises(CommandError):
            call_command("seed_users", password="abc", stdout=StringIO())
