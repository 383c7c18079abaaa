import logging
import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ApiClientError(Exception):
    """Raised when the API answers with an error envelope or cannot be reached."""
    def __init__(self, message, status_code=None, error_code=None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class ApiClient:
    """Thin client for the Outleads HTTP API.

    The underlying ``requests.Session`` keeps the refresh cookie between
    calls; the access token is passed in per request.
    """

    def __init__(self, base_url, timeout=DEFAULT_TIMEOUT, http=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.http = http or requests.Session()

    def request(self, method, path, token=None, **kwargs):
        headers = dict(kwargs.pop('headers', None) or {})
        if token:
            headers['Authorization'] = f'Bearer {token}'
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.http.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"API request {method} {path} failed: {str(e)}")
            raise ApiClientError(f"Could not reach the API: {str(e)}") from e

        if response.status_code == 204:
            return None
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            raise ApiClientError(body.get('message', response.reason or 'Request failed'),
                                 status_code=response.status_code, error_code=body.get('error'))
        return body

    def login(self, username, password):
        return self.request('POST', '/api/auth/login', json={'username': username, 'password': password})['data']

    def refresh(self):
        return self.request('POST', '/api/auth/refresh')['data']['token']

    def me(self, token):
        return self.request('GET', '/api/auth/me', token=token)['data']['user']

    def logout(self):
        return self.request('POST', '/api/auth/logout')
