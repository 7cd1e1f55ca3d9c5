from dataclasses import dataclass

from rest_framework import authentication


@dataclass(frozen=True)
class Principal:
    """An authenticated caller as asserted by the identity provider."""

    id: str
    email: str = ""
    name: str = ""

    is_authenticated = True
    is_anonymous = False


class TrustedHeaderAuthentication(authentication.BaseAuthentication):
    """Read the caller from headers set by the identity gateway.

    The gateway in front of this service validates the session token and
    forwards the resolved user; requests without ``X-User-Id`` are anonymous.
    """

    user_header = "HTTP_X_USER_ID"
    email_header = "HTTP_X_USER_EMAIL"
    name_header = "HTTP_X_USER_NAME"

    def authenticate(self, request):
        user_id = request.META.get(self.user_header, "").strip()
        if not user_id:
            return None
        principal = Principal(
            id=user_id,
            email=request.META.get(self.email_header, "").strip(),
            name=request.META.get(self.name_header, "").strip(),
        )
        return (principal, None)

    def authenticate_header(self, request):
        return "X-User-Id"
