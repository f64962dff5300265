# users/models.py

import uuid

from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)
from django.db import models


ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"


class UserManager(BaseUserManager):
    def create_user(self, email=None, password=None, **extra_fields):
        """
        Email is the login identity and is stored lower-cased.

        Accounts start unverified; users.services.accounts sends the
        verification link.
        """
        if not email:
            raise ValueError("An email address is required")

        email = self.normalize_email(email).strip().lower()
        extra_fields.setdefault("is_active", True)
        extra_fields.setdefault("role", ROLE_CUSTOMER)

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        if not password:
            raise ValueError("Superuser must have a password")

        extra_fields.update(
            role=ROLE_ADMIN,
            is_staff=True,
            is_superuser=True,
            is_active=True,
            is_email_verified=True,
        )
        return self.create_user(email=email, password=password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Star Farmer account: customers shop, admins run the catalogue and orders.
    """

    ROLE_CHOICES = [
        (ROLE_CUSTOMER, "Customer"),
        (ROLE_ADMIN, "Admin"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=150, blank=True)

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CUSTOMER)

    is_email_verified = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def mark_email_verified(self):
        if not self.is_email_verified:
            self.is_email_verified = True
            self.save(update_fields=["is_email_verified", "updated_at"])

    def __str__(self):
        return f"{self.email} ({self.role})"
