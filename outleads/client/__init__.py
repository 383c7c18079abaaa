from outleads.client.api_client import ApiClient, ApiClientError
from outleads.client.session import SessionStore

__all__ = ['ApiClient', 'ApiClientError', 'SessionStore']
