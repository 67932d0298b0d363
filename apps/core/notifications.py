"""
Outbound email for the contact form and password reset.

Delivery is fire-and-forget: one attempt, failures surface to the caller.
"""
import logging
from typing import Optional

from django.conf import settings
from django.core.mail import send_mail
from django.utils.html import escape

logger = logging.getLogger(__name__)


def send_contact_message(name: str, email: str, message: str, phone: Optional[str] = None) -> None:
    html = (
        "<h3>Contact Details</h3>"
        f"<p><strong>Name:</strong> {escape(name)}</p>"
        f"<p><strong>Email:</strong> {escape(email)}</p>"
        f"<p><strong>Phone:</strong> {escape(phone or 'N/A')}</p>"
        f"<p><strong>Message:</strong><br/> {escape(message)}</p>"
    )
    send_mail(
        subject=f"Contact Form Submission from {name}",
        message=f"Name: {name}\nEmail: {email}\nPhone: {phone or 'N/A'}\n\n{message}",
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[settings.EMAIL_RECEIVER],
        html_message=html,
        fail_silently=False,
    )
    logger.info(f"Contact message from {email} forwarded to {settings.EMAIL_RECEIVER}")


def send_password_reset(email: str, reset_url: str) -> None:
    send_mail(
        subject="Password Reset Request",
        message=f"You requested a password reset.\nReset your password here: {reset_url}",
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[email],
        html_message=(
            "<p>You requested a password reset</p>"
            "<p>Click here to reset your password:</p>"
            f'<a href="{reset_url}" target="_blank">{reset_url}</a>'
        ),
        fail_silently=False,
    )
    logger.info(f"Password reset link sent to {email}")
