"""OAuth2 authorization-code grant for the mail provider.

The user opens the authorization URL in a browser, consents, and pastes back
either the bare code or the whole redirect URL. The code is exchanged once
for a bearer access token; nothing is refreshed or stored.
"""

import json
import secrets
from urllib.parse import parse_qs, urlparse

import requests
from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from mail_fetcher.exceptions import AuthExchangeError, ConfigurationError
from mail_fetcher.lib.config import OAuthConfig
from mail_fetcher.lib.logger import get_logger
from mail_fetcher.models.authorization import AuthorizationRequest

logger = get_logger(__name__)


def _check_token_response_status(response):
    """Compliance hook: a non-2xx token response fails.

    Bodies in the OAuth2 error format pass through so oauthlib raises the
    matching OAuth2Error.
    """
    if 200 <= response.status_code < 300:
        return response

    try:
        body = json.loads(response.text)
    except ValueError:
        body = None
    if isinstance(body, dict) and "error" in body:
        return response

    raise AuthExchangeError(
        f"Token exchange failed: token endpoint returned HTTP {response.status_code}"
    )


def parse_authorization_response(text: str) -> tuple[str, str | None]:
    """
    Extract the authorization code (and state, if present) from user input.

    Args:
        text: Either the bare code or the full redirect URL the provider
            sent the browser to

    Returns:
        Tuple of (code, state); state is None for a bare code

    Raises:
        AuthExchangeError: Input is empty, or the redirect carries an error
    """
    text = text.strip()
    if not text:
        raise AuthExchangeError("No authorization code was entered")

    if "://" not in text and not text.startswith("?"):
        return text, None

    params = parse_qs(urlparse(text).query)
    if "error" in params:
        description = params.get("error_description", [""])[0]
        raise AuthExchangeError(
            f"Provider denied authorization: {params['error'][0]} {description}".strip()
        )

    if "code" not in params:
        raise AuthExchangeError("Redirect URL does not contain an authorization code")

    state = params.get("state", [None])[0]
    return params["code"][0], state


class TokenExchanger:
    """Run the OAuth2 authorization-code grant against the configured provider."""

    def __init__(self, config: OAuthConfig):
        """
        Initialize token exchanger.

        Args:
            config: OAuth2 client credentials and provider endpoints

        Raises:
            ConfigurationError: Missing credentials or malformed endpoint URLs
        """
        config.validate()
        self.config = config
        self._issued_state: str | None = None

        client_config = {
            "installed": {
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "auth_uri": config.auth_url,
                "token_uri": config.token_url,
                "redirect_uris": [config.redirect_url],
            }
        }
        try:
            self.flow = Flow.from_client_config(
                client_config,
                scopes=list(config.scopes),
                redirect_uri=config.redirect_url,
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid OAuth client configuration: {e}") from e

        self.flow.oauth2session.register_compliance_hook(
            "access_token_response", _check_token_response_status
        )

    def build_authorization_request(self) -> AuthorizationRequest:
        """
        Build the provider consent URL with a fresh anti-forgery state.

        Returns:
            AuthorizationRequest holding the URL and its state token

        Raises:
            ConfigurationError: The authorization URL cannot be built
        """
        # Generate cryptographically secure state token for CSRF protection
        state = secrets.token_urlsafe(32)
        try:
            # Online access: a single access token, no refresh token
            url, state = self.flow.authorization_url(state=state, access_type="online")
        except ValueError as e:
            raise ConfigurationError(f"Cannot build authorization URL: {e}") from e

        self._issued_state = state
        logger.info(f"Authorization URL issued for {urlparse(self.config.auth_url).netloc}")
        return AuthorizationRequest(url=url, state=state)

    def exchange_code(self, code: str, state: str | None = None) -> str:
        """
        Exchange an authorization code for a bearer access token.

        The code is single-use; a reused code is rejected by the provider,
        which surfaces here as an AuthExchangeError.

        Args:
            code: Authorization code returned to the redirect URI
            state: State echoed back in the redirect, if the user pasted it

        Returns:
            Access token string

        Raises:
            AuthExchangeError: State mismatch, network failure, provider error
                response, or a response without an access token
        """
        code = code.strip()
        if not code:
            raise AuthExchangeError("Authorization code is empty")

        if state is not None and state != self._issued_state:
            raise AuthExchangeError(
                "State parameter mismatch - possible CSRF attack. "
                "Start the authorization again."
            )

        logger.info("Exchanging authorization code for access token")
        try:
            token = self.flow.fetch_token(code=code)
        except OAuth2Error as e:
            logger.error(f"Token endpoint rejected the authorization code: {e.error}")
            raise AuthExchangeError(
                f"Token exchange failed: {e.error}"
                + (f" ({e.description})" if e.description else "")
            ) from e
        except requests.RequestException as e:
            logger.error(f"Token endpoint unreachable: {type(e).__name__}")
            raise AuthExchangeError(f"Cannot reach token endpoint: {e}") from e
        except Warning as e:
            # oauthlib raises a bare Warning when granted scopes differ
            raise AuthExchangeError(f"Token exchange failed: {e}") from e

        access_token = token.get("access_token")
        if not access_token:
            raise AuthExchangeError("Token response did not include an access token")

        logger.info(
            f"Access token obtained (token_type={token.get('token_type', 'unknown')}, "
            f"expires_in={token.get('expires_in', 'unknown')})"
        )
        return access_token
