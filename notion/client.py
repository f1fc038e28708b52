"""
Notion Service
Thin wrapper over notion_client with pagination and retry handling.
"""
import os
import random
import time
from typing import Any, Callable, Dict, Iterable, List, Optional
from notion_client import Client
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from data.models import DatabaseOption
from notion.exceptions import (
    NotionAuthError, NotionNotConnectedError, NotionRateLimitError, NotionRequestError,
)
from utils.config_manager import config
from utils.logger import logger


def _rich_text_plain(items) -> str:
    return "".join(
        (item or {}).get("plain_text") or ((item or {}).get("text") or {}).get("content") or ""
        for item in items or []
    ).strip()


class NotionService:
    """Notion REST calls used by the tracker."""

    def __init__(self, token: str, client: Optional[Client] = None,
                 sleep: Callable[[float], None] = time.sleep):
        if not token and client is None:
            raise NotionNotConnectedError("Notion token missing")
        self.token = token
        self.client = client or Client(auth=token)
        self.max_retries = int(config.get('notion.max_retries', 3))
        self.base_delay = float(config.get('notion.retry_base_delay', 1.0))
        self._sleep = sleep

    @classmethod
    def for_user(cls, candidates: Iterable[Optional[str]], store=None, **kwargs) -> "NotionService":
        """
        Build a service with the first token found for the given user ids.

        Args:
            candidates: User identifiers to try in order
            store: NotionUsersStore holding OAuth tokens (optional)

        Raises:
            NotionNotConnectedError: If neither a stored nor a configured token exists
        """
        ids = [c for c in candidates if c]
        default_user = config.get('notion.default_user', 'notion-user')
        if default_user and default_user not in ids:
            ids.append(default_user)

        if store is not None:
            for user_id in ids:
                user = store.fetch(user_id)
                if user is not None and user.access_token:
                    logger.debug(f"Using stored Notion token for {user_id}")
                    return cls(user.access_token, **kwargs)

        token = config.get('notion.token') or os.environ.get('NOTION_TOKEN')
        if not token:
            raise NotionNotConnectedError("User not connected to Notion or token missing")
        return cls(token, **kwargs)

    # ------------------------------------------------------------------
    # Retry
    # ------------------------------------------------------------------

    def _call(self, func: Callable[..., Any], **kwargs) -> Any:
        """Invoke a client endpoint, retrying timeouts, 429 and 5xx with backoff."""
        attempt = 0
        while True:
            try:
                return func(**kwargs)
            except RequestTimeoutError as e:
                error = NotionRequestError(f"Notion request timed out: {e}")
            except HTTPResponseError as e:
                status = getattr(e, 'status', None)
                if status in (401, 403):
                    raise NotionAuthError(f"Notion rejected the token ({status}): {e}") from e
                if status == 429:
                    error = NotionRateLimitError(f"Notion rate limit exceeded: {e}")
                elif status is not None and status >= 500:
                    error = NotionRequestError(f"Notion server error ({status}): {e}", status)
                else:
                    raise NotionRequestError(f"Notion request failed ({status}): {e}", status) from e

            if attempt >= self.max_retries:
                raise error
            delay = self.base_delay * (2 ** attempt) + random.random() * self.base_delay
            attempt += 1
            logger.warning(f"Retrying Notion call in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries + 1})")
            self._sleep(delay)

    def _paginate(self, func: Callable[..., Dict], **kwargs) -> List[Dict]:
        results: List[Dict] = []
        cursor = None
        while True:
            params = dict(kwargs)
            if cursor:
                params['start_cursor'] = cursor
            data = self._call(func, **params)
            results.extend(data.get('results') or [])
            cursor = data.get('next_cursor')
            if not data.get('has_more') or not cursor:
                return results

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def list_databases(self) -> List[Dict]:
        """All databases shared with the integration."""
        return self._paginate(
            self.client.search,
            filter={'property': 'object', 'value': 'database'},
        )

    def database_options(self) -> List[DatabaseOption]:
        options = []
        for db in self.list_databases():
            icon = db.get('icon') or {}
            options.append(DatabaseOption(
                id=db.get('id', ''),
                title=_rich_text_plain(db.get('title')) or 'Untitled',
                icon=icon.get('emoji') if icon.get('type') == 'emoji' else None,
            ))
        return options

    def query_database(self, database_id: str, filter: Optional[Dict] = None) -> List[Dict]:
        """Every page of a database, optionally filtered."""
        kwargs = {'database_id': database_id}
        if filter:
            kwargs['filter'] = filter
        return self._paginate(self.client.databases.query, **kwargs)

    def retrieve_database(self, database_id: str) -> Dict:
        return self._call(self.client.databases.retrieve, database_id=database_id)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def retrieve_page(self, page_id: str) -> Dict:
        return self._call(self.client.pages.retrieve, page_id=page_id)

    def create_page(self, database_id: str, properties: Dict) -> Dict:
        return self._call(
            self.client.pages.create,
            parent={'database_id': database_id},
            properties=properties,
        )

    def update_page(self, page_id: str, properties: Dict) -> Dict:
        return self._call(self.client.pages.update, page_id=page_id, properties=properties)
