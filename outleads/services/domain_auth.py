import logging
from urllib.parse import quote
import requests
from flask import current_app

logger = logging.getLogger(__name__)


class DomainAuthError(Exception):
    """Raised when the corporate directory rejects a login or cannot be reached."""
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class DomainAuthClient:
    """Client for the corporate directory used to authenticate domain users."""

    def __init__(self, base_url=None, timeout=None):
        self.base_url = (base_url or current_app.config.get('DOMAIN_AUTH_URL') or '').rstrip('/')
        self.timeout = timeout or current_app.config.get('HTTP_TIMEOUT_SECONDS', 10)

    @property
    def configured(self):
        return bool(self.base_url)

    def _make_request(self, method, endpoint, **kwargs):
        url = f"{self.base_url}{endpoint}"
        kwargs.setdefault('timeout', self.timeout)
        try:
            response = requests.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.warning(f"Directory request {method} {endpoint} failed with status {status}")
            raise DomainAuthError("Directory request failed", status_code=status) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Directory request {method} {endpoint} failed: {str(e)}")
            raise DomainAuthError("Directory service is unavailable") from e
        except ValueError as e:
            raise DomainAuthError("Directory returned an invalid response") from e

    def authenticate(self, username, password):
        """Exchange domain credentials for a directory token."""
        data = self._make_request('POST', '/auth/service/token/',
                                  json={'username': username, 'password': password})
        token = data.get('token')
        if not token:
            raise DomainAuthError("Invalid credentials", status_code=401)
        return token

    def get_user_info(self, username, token):
        """Return ``{'name', 'email'}`` for a domain user."""
        data = self._make_request('GET', f'/api/getuser/{username}',
                                  headers={'Authorization': f'Bearer {token}'})
        details = data.get('userDetails') or {}
        email = details.get('email_')
        if not email:
            raise DomainAuthError("User data from domain is incomplete (missing email)")
        name = ' '.join(part for part in (details.get('first_'), details.get('last_')) if part)
        return {'name': name or None, 'email': email}

    def search_user(self, username):
        """Look up a directory account by username. Returns the raw directory record."""
        return self._make_request('GET', f'/api/allusers/{quote(username, safe="")}')
