"""
DRF authentication for back-office endpoints: ``Authorization: Bearer <token>``
"""
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from apps.core.exceptions import PermissionException
from .services import AdminAuthService


class AdminTokenAuthentication(BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        auth = get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None
        if len(auth) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header')

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed('Invalid token header')

        try:
            admin = AdminAuthService().authenticate(token)
        except PermissionException as e:
            raise exceptions.AuthenticationFailed(e.message)
        return admin, token

    def authenticate_header(self, request):
        return self.keyword
