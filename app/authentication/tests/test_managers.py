"""
Tests for UserManager.

This module tests the custom UserManager that handles email-based user creation.
The UserManager provides:
- create_user(): Creates regular users with optional password
- create_superuser(): Creates admin users with elevated privileges

Test organization follows the Given-When-Then pattern and tests:
1. Happy paths: Expected successful operations
2. Error cases: Invalid inputs
3. Behavior verification: Password hashing, email normalization, default flags

Related files:
    - managers.py: Implementation under test
    - models.py: User model that uses this manager
"""

import pytest
from django.contrib.auth.hashers import check_password

from authentication.models import User


class TestUserManagerCreateUser:
    """Tests for UserManager.create_user() method."""

    def test_creates_user_with_email_and_password(self, db):
        """
        Given valid email and password
        When create_user is called
        Then a user is created with those credentials
        """
        # Arrange
        email = "mgr_create_user@example.com"
        password = "SecurePass123!"

        # Act
        user = User.objects.create_user(email=email, password=password)

        # Assert
        assert user.pk is not None
        assert user.email == email
        assert user.check_password(password) is True

    def test_normalizes_email_domain_to_lowercase(self, db):
        """
        Given an email with uppercase characters in domain
        When create_user is called
        Then the domain portion is normalized to lowercase
        """
        user = User.objects.create_user(email="Test.User@EXAMPLE.COM", password="TestPass123!")

        assert user.email == "Test.User@example.com"

    def test_raises_valueerror_when_email_is_empty(self, db):
        """
        Given an empty email
        When create_user is called
        Then a ValueError is raised with descriptive message
        """
        with pytest.raises(ValueError) as exc_info:
            User.objects.create_user(email="", password="TestPass123!")

        assert "Email field must be set" in str(exc_info.value)

    def test_creates_user_without_password(self, db):
        """
        Given an email but no password
        When create_user is called
        Then user is created with unusable password
        """
        user = User.objects.create_user(email="nopass@example.com", password=None)

        assert user.pk is not None
        assert user.has_usable_password() is False
        assert user.check_password("") is False

    def test_defaults_name_to_email_local_part(self, db):
        """
        Given no display name
        When create_user is called
        Then the name falls back to the local part of the email

        Why it matters: chat notifications interpolate member names
        ("{name} has left the group"); an empty name would read badly.
        """
        user = User.objects.create_user(email="grace@example.com", password="TestPass123!")

        assert user.name == "grace"

    def test_keeps_explicit_name(self, db):
        """
        Given an explicit display name
        When create_user is called
        Then that name is stored unchanged
        """
        user = User.objects.create_user(
            email="ada@example.com", password="TestPass123!", name="Ada Lovelace"
        )

        assert user.name == "Ada Lovelace"

    def test_sets_default_flags_for_regular_user(self, db):
        """
        Given no explicit flags
        When create_user is called
        Then is_staff and is_superuser default to False
        """
        user = User.objects.create_user(email="regular@example.com", password="TestPass123!")

        assert user.is_staff is False
        assert user.is_superuser is False
        assert user.is_active is True

    def test_password_is_properly_hashed(self, db):
        """
        Given a plaintext password
        When create_user is called
        Then the password is stored as a hash, not plaintext
        """
        plaintext_password = "SecurePass123!"

        user = User.objects.create_user(email="hash@example.com", password=plaintext_password)

        assert user.password != plaintext_password
        assert "$" in user.password, "Password should be in Django hash format"
        assert check_password(plaintext_password, user.password) is True


class TestUserManagerCreateSuperuser:
    """Tests for UserManager.create_superuser() method."""

    def test_creates_superuser_with_correct_flags(self, db):
        """
        Given valid email and password
        When create_superuser is called
        Then user is created with is_staff=True and is_superuser=True
        """
        superuser = User.objects.create_superuser(
            email="admin@example.com", password="AdminPass123!"
        )

        assert superuser.is_staff is True
        assert superuser.is_superuser is True
        assert superuser.check_password("AdminPass123!") is True

    def test_raises_valueerror_when_is_staff_is_false(self, db):
        """
        Given is_staff=False explicitly passed
        When create_superuser is called
        Then ValueError is raised
        """
        with pytest.raises(ValueError) as exc_info:
            User.objects.create_superuser(
                email="admin@example.com", password="AdminPass123!", is_staff=False
            )

        assert "is_staff=True" in str(exc_info.value)

    def test_raises_valueerror_when_is_superuser_is_false(self, db):
        """
        Given is_superuser=False explicitly passed
        When create_superuser is called
        Then ValueError is raised
        """
        with pytest.raises(ValueError) as exc_info:
            User.objects.create_superuser(
                email="admin@example.com", password="AdminPass123!", is_superuser=False
            )

        assert "is_superuser=True" in str(exc_info.value)
