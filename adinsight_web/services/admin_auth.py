import hmac
from dataclasses import dataclass


class AdminAuthenticator:
    """Strategy interface."""
    def verify(self, credential: str) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class SharedSecretAuthenticator(AdminAuthenticator):
    """
    Placeholder gate: one shared secret, no hashing, no token, no expiry.
    Swap in a real identity provider by implementing ``verify``.
    """
    secret: str = "admin1234"

    def verify(self, credential: str) -> bool:
        if not self.secret:
            return False
        return hmac.compare_digest((credential or "").encode("utf-8"), self.secret.encode("utf-8"))
