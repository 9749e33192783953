from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer


class TokenError(Exception):
    """Base class for session tokens that must be rejected."""


class TokenInvalid(TokenError):
    pass


class TokenExpired(TokenError):
    pass


class TokenCodec:
    """
    Signs and verifies session tokens.

    The token carries the identity claims as-is, e.g.
        {"email": "a@x.com", "name": "Ada"}
    plus a signing timestamp that bounds its validity to max_age_seconds.
    """

    salt = "session-token"

    def __init__(self, secret: str, max_age_seconds: int) -> None:
        self.max_age_seconds = max_age_seconds
        self._serializer = URLSafeTimedSerializer(secret, salt=self.salt)

    def issue(self, claims: dict) -> str:
        if not claims.get("email"):
            raise TokenInvalid("Claims must include an email")
        return self._serializer.dumps(claims)

    def verify(self, token: str) -> dict:
        try:
            claims = self._serializer.loads(token, max_age=self.max_age_seconds)
        except SignatureExpired as exc:
            raise TokenExpired(str(exc)) from exc
        except BadData as exc:
            raise TokenInvalid(str(exc)) from exc

        if not isinstance(claims, dict) or not claims.get("email"):
            raise TokenInvalid("Token carries no email claim")
        return claims
