import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """
    Marketplace principal.

    Accounts and credentials are owned by the external identity service; this
    table mirrors the identity and role the marketplace core needs to make
    authorization decisions.
    """

    ROLE_CONSUMER = "consumer"
    ROLE_SME = "sme"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES = [
        (ROLE_CONSUMER, "Consumer"),
        (ROLE_SME, "SME"),
        (ROLE_ADMIN, "Admin"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=30, blank=True)
    last_name = models.CharField(max_length=30, blank=True)
    date_joined = models.DateTimeField(auto_now_add=True)
    phone = models.CharField(max_length=50, blank=True)

    # Role system - simple field
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_CONSUMER)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        app_label = "authentication"

    def is_consumer(self):
        return self.role == self.ROLE_CONSUMER

    def is_sme(self):
        """Check if user operates a business on the marketplace"""
        return self.role == self.ROLE_SME

    def is_admin(self):
        """Check if user is an admin"""
        return self.role == self.ROLE_ADMIN or self.is_superuser

    def __str__(self):
        return self.email
