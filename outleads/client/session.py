"""
Process-wide auth state for one client runtime.

The store is hydrated on start by silently verifying the persisted access
token (refreshing it through the cookie when it has expired) and torn down
on logout by clearing both the persisted token and the in-memory state.
"""

import json
import logging
import os
import threading
from outleads.client.api_client import ApiClientError

logger = logging.getLogger(__name__)


class SessionStore:

    def __init__(self, client, token_path):
        self.client = client
        self.token_path = token_path
        self.token = None
        self.user = None
        self._lock = threading.Lock()

    @property
    def is_authenticated(self):
        return self.token is not None and self.user is not None

    def _persist(self):
        directory = os.path.dirname(self.token_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.token_path, 'w') as f:
            json.dump({'token': self.token}, f)

    def _load_persisted_token(self):
        try:
            with open(self.token_path) as f:
                return json.load(f).get('token')
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.token_path}: {str(e)}")
            return None

    def _forget(self):
        self.token = None
        self.user = None
        try:
            os.remove(self.token_path)
        except FileNotFoundError:
            pass

    def hydrate(self):
        """Restore the session on start. Returns True when a user is signed in."""
        with self._lock:
            token = self._load_persisted_token()
            if token:
                try:
                    self.user = self.client.me(token)
                    self.token = token
                    return True
                except ApiClientError as e:
                    if e.status_code not in (401, 403):
                        raise
                    logger.info("Persisted access token rejected, trying refresh")

            try:
                self.token = self.client.refresh()
                self.user = self.client.me(self.token)
            except ApiClientError as e:
                if e.status_code not in (401, 403):
                    raise
                self._forget()
                return False

            self._persist()
            return True

    def login(self, username, password):
        with self._lock:
            data = self.client.login(username, password)
            self.token = data['token']
            self.user = data['user']
            self._persist()
            return data

    def logout(self):
        with self._lock:
            try:
                self.client.logout()
            except ApiClientError as e:
                logger.warning(f"Logout request failed, clearing local session anyway: {str(e)}")
            finally:
                self._forget()
