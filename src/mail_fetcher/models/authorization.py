"""OAuth2 authorization request model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthorizationRequest:
    """
    Authorization URL issued to the user, with its anti-forgery state.

    Attributes:
        url: Provider consent URL including client_id, redirect_uri and state
        state: Random anti-forgery token embedded in the URL
    """

    url: str
    state: str

    def __repr__(self) -> str:
        """String representation without the state token."""
        return f"AuthorizationRequest(url='{self.url.split('?')[0]}?...')"
