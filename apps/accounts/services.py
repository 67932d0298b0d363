"""
Account services - sign up, sign in, signed tokens and admin password reset
"""
import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional, Tuple

from django.conf import settings
from django.core import signing
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import (
    AuthenticationException,
    ConflictException,
    PermissionException,
    ValidationException,
)
from apps.core.notifications import send_password_reset
from .models import Admin, User

logger = logging.getLogger(__name__)

RESET_MESSAGE = "If this email exists, a reset link has been sent"


def issue_token(account, kind: str) -> str:
    """Sign ``{id, email}`` for the given account kind ("admin" or "user")."""
    return signing.dumps(
        {"id": str(account.id), "email": account.email},
        salt=f"storefront.{kind}",
    )


def read_token(token: str, kind: str) -> Dict[str, Any]:
    """
    Verify a token from :func:`issue_token`.

    Raises:
        PermissionException: if the token is malformed, tampered with or older
            than ``AUTH_TOKEN_MAX_AGE`` seconds.
    """
    try:
        return signing.loads(token, salt=f"storefront.{kind}", max_age=settings.AUTH_TOKEN_MAX_AGE)
    except signing.SignatureExpired:
        raise PermissionException("Token expired")
    except signing.BadSignature:
        raise PermissionException("Invalid token")


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class AdminAuthService:
    """Back-office sign up / sign in and the forgot / reset password flow."""

    def signup(self, name: str, email: str, password: str) -> Admin:
        email = email.lower()
        if Admin.objects.filter(email=email).exists():
            raise ValidationException("Admin already exists", field="email")

        admin = Admin(name=name, email=email)
        admin.set_password(password)
        try:
            with transaction.atomic():
                admin.save()
        except IntegrityError:
            raise ConflictException("Admin already exists", retryable=False)

        logger.info(f"[AUTH] Registered admin {admin.email}")
        return admin

    def signin(self, email: str, password: str) -> Tuple[Admin, str]:
        admin = Admin.objects.filter(email=email.lower()).first()
        if admin is None or not admin.check_password(password):
            logger.warning(f"[AUTH] Failed admin sign in for {email}")
            raise AuthenticationException()
        return admin, issue_token(admin, "admin")

    def authenticate(self, token: str) -> Admin:
        payload = read_token(token, "admin")
        admin = Admin.objects.filter(pk=payload.get("id")).first()
        if admin is None:
            raise PermissionException("Invalid token")
        return admin

    def forgot_password(self, email: str) -> Optional[str]:
        """
        Start a password reset.

        The same message is returned to the caller whether or not the email
        is registered. Returns the raw token when one was issued.
        """
        admin = Admin.objects.filter(email=email.lower()).first()
        if admin is None:
            logger.info(f"[AUTH] Password reset requested for unknown email {email}")
            return None

        token = secrets.token_hex(32)
        admin.reset_password_token = hash_reset_token(token)
        admin.reset_password_expire = timezone.now() + timedelta(
            minutes=settings.PASSWORD_RESET_TIMEOUT_MINUTES
        )
        admin.save(update_fields=["reset_password_token", "reset_password_expire", "updated_at"])

        reset_url = f"{settings.ADMIN_FRONTEND_URL.rstrip('/')}/reset-password/{token}"
        send_password_reset(admin.email, reset_url)
        return token

    def reset_password(self, token: str, password: str) -> Admin:
        admin = Admin.objects.filter(
            reset_password_token=hash_reset_token(token),
            reset_password_expire__gt=timezone.now(),
        ).first()
        if admin is None:
            raise AuthenticationException("Invalid or expired token")

        admin.set_password(password)
        admin.reset_password_token = None
        admin.reset_password_expire = None
        admin.save()
        logger.info(f"[AUTH] Password reset for admin {admin.email}")
        return admin


class CustomerAuthService:
    """Storefront customer sign up and sign in."""

    def signup(self, name: str, email: str, password: str, phone: str = "") -> Tuple[User, str]:
        email = email.lower()
        if User.objects.filter(email=email).exists():
            raise ValidationException("User already exists", field="email")

        user = User(name=name, email=email, phone=phone or "")
        user.set_password(password)
        try:
            with transaction.atomic():
                user.save()
        except IntegrityError:
            raise ConflictException("User already exists", retryable=False)

        logger.info(f"[AUTH] Registered customer {user.email}")
        return user, issue_token(user, "user")

    def signin(self, email: str, password: str) -> Tuple[User, str]:
        user = User.objects.filter(email=email.lower()).first()
        if user is None or not user.check_password(password):
            raise AuthenticationException()
        return user, issue_token(user, "user")
