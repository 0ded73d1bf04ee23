# shared/common/authentication.py
"""
Identity Token and Service Token Authentication

Student requests carry an HS256 identity token issued by the platform's
identity provider. Internal callers (payment webhook relay, identity
service) authenticate with the shared service token instead.
"""

import hmac
import jwt
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ['exp', 'iat', 'sub', 'iss']


def decode_identity_token(token: str, verify_exp: bool = True) -> Dict[str, Any]:
    """Verify signature, issuer and expiry of an identity token and return its claims."""
    jwt_settings = settings.JWT_SETTINGS
    return jwt.decode(
        token,
        jwt_settings['VERIFYING_KEY'],
        algorithms=[jwt_settings['ALGORITHM']],
        issuer=jwt_settings['ISSUER'],
        options={'require': REQUIRED_CLAIMS, 'verify_exp': verify_exp},
    )


class JWTAuthentication(authentication.BaseAuthentication):
    """
    Bearer identity token authentication.

    Requests without an Authorization header fall through to the next
    authenticator; malformed or invalid tokens are rejected.
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple['TokenUser', Dict]]:
        token = self._extract_token(request)
        if token is None:
            return None

        try:
            claims = decode_identity_token(token)
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected identity token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

        return TokenUser(claims), claims

    def _extract_token(self, request: Request) -> Optional[str]:
        header = authentication.get_authorization_header(request)
        if not header:
            return None

        try:
            parts = header.decode('utf-8').split()
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if not parts or parts[0].lower() != self.keyword.lower():
            return None
        if len(parts) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        return parts[1]

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class ServiceAuthentication(authentication.BaseAuthentication):
    """
    Shared-secret authentication for internal callers.

    The secret travels in ``X-Service-Auth``; ``X-Source-Service`` names
    the caller for logging.
    """

    keyword = 'Service'

    def authenticate(self, request: Request) -> Optional[Tuple['ServiceUser', Dict]]:
        presented = request.headers.get('X-Service-Auth')
        if not presented:
            return None

        if not hmac.compare_digest(presented, settings.SERVICE_AUTH_TOKEN):
            logger.warning(
                "Rejected service token",
                extra={'source_service': request.headers.get('X-Source-Service')}
            )
            raise exceptions.AuthenticationFailed('Invalid service token')

        caller = request.headers.get('X-Source-Service', 'unknown')
        return ServiceUser(caller), {'service': caller}

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class TokenUser:
    """
    Request user built from identity token claims.

    ``student_id`` is the learner profile the token was issued for and
    ``subscription_status`` the billing state at issue time.
    """

    is_active = True
    is_authenticated = True
    is_anonymous = False
    is_service = False

    def __init__(self, claims: Dict[str, Any]):
        self.claims = claims
        self.id = claims.get('sub')
        self.student_id = claims.get('student_id')
        self.email = claims.get('email')
        self.roles = list(claims.get('roles') or [])
        self.subscription_status = claims.get('subscription_status')

    def __str__(self) -> str:
        return f"TokenUser({self.email or self.id})"


class ServiceUser:
    """Request user of an authenticated internal caller."""

    is_active = True
    is_authenticated = True
    is_anonymous = False
    is_service = True

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.id = f"service:{service_name}"

    def __str__(self) -> str:
        return f"ServiceUser({self.service_name})"


class JWTTokenGenerator:
    """Issue identity tokens in the identity provider's format (tests and tooling)."""

    @staticmethod
    def generate_access_token(
        user_id: str,
        student_id: str = None,
        email: str = None,
        roles: list = None,
        subscription_status: str = None,
        extra_claims: Dict = None
    ) -> str:
        jwt_settings = settings.JWT_SETTINGS
        issued_at = datetime.now(timezone.utc)

        claims = {
            'sub': str(user_id),
            'student_id': str(student_id) if student_id else None,
            'email': email,
            'roles': roles or ['student'],
            'subscription_status': subscription_status,
            'iat': issued_at,
            'exp': issued_at + jwt_settings['ACCESS_TOKEN_LIFETIME'],
            'iss': jwt_settings['ISSUER'],
        }
        claims.update(extra_claims or {})

        return jwt.encode(claims, jwt_settings['SIGNING_KEY'], algorithm=jwt_settings['ALGORITHM'])
