"""
Account Models
Tables: Users (storefront customers), Admins (back-office)
"""
from django.contrib.auth.hashers import check_password, make_password
from django.db import models
from apps.core.models import BaseModel


class PasswordMixin:
    def set_password(self, raw_password: str) -> None:
        self.password = make_password(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password(raw_password, self.password)


class User(PasswordMixin, BaseModel):
    """
    Storefront customer account. Orders reference it; nothing in the
    order engine writes to it.
    """
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=20, blank=True, default='')
    password = models.CharField(max_length=128)

    class Meta:
        db_table = 'accounts_users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.email})"


class Admin(PasswordMixin, BaseModel):
    """
    Back-office account with an optional pending password reset.
    Only the SHA-256 digest of the reset token is stored.
    """
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    password = models.CharField(max_length=128)
    reset_password_token = models.CharField(max_length=64, blank=True, null=True, db_index=True)
    reset_password_expire = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'accounts_admins'
        verbose_name = 'Admin'
        verbose_name_plural = 'Admins'

    def __str__(self):
        return f"{self.name} ({self.email})"

    @property
    def is_authenticated(self):
        return True
