# subscriptions.py - identity/subscription collaborator (live reads only)
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from urllib.parse import quote

import requests

import config
from errors import StoreUnavailable
from models import SubscriptionState

logger = logging.getLogger(__name__)


class SqliteSubscriptionDirectory:
    """Reads a viewer's subscription state from the viewers table.

    A viewer with no row has never subscribed and reads as NONE.
    """

    def __init__(self, database=None, timeout=None):
        self.database = database or config.DATABASE
        self.timeout = config.DB_TIMEOUT if timeout is None else timeout

    def get_subscription_state(self, viewer_id):
        if not Path(self.database).exists():
            logger.error("Subscription database file not found: %s", self.database)
            raise StoreUnavailable(f"subscription database file not found: {self.database}")
        try:
            with closing(sqlite3.connect(self.database, timeout=self.timeout)) as db:
                row = db.execute(
                    f"SELECT subscription_state FROM {config.VIEWERS_TABLE} WHERE viewer_id = ? LIMIT 1",
                    (viewer_id,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.error("Subscription lookup failed for viewer %s: %s", viewer_id, e)
            raise StoreUnavailable(f"subscription store unavailable: {e}") from e
        if row is None:
            return SubscriptionState.NONE
        try:
            return SubscriptionState.parse(row[0])
        except ValueError as e:
            logger.error("Viewer %s has unrecognised subscription state %r", viewer_id, row[0])
            raise StoreUnavailable(f"unrecognised subscription state {row[0]!r}") from e


class HttpSubscriptionDirectory:
    """Reads subscription state from the identity service over HTTP.

    GET {base_url}/viewers/{viewer_id}/subscription -> {"state": "active"}
    A 404 means the viewer has never subscribed. Failures are not retried.
    """

    def __init__(self, base_url, timeout=None, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = config.SUBSCRIPTION_API_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()

    def get_subscription_state(self, viewer_id):
        url = f"{self.base_url}/viewers/{quote(str(viewer_id), safe='')}/subscription"
        try:
            resp = self.session.get(url, timeout=self.timeout)
            if resp.status_code == 404:
                return SubscriptionState.NONE
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.RequestException as e:
            logger.error("Subscription service request failed for viewer %s: %s", viewer_id, e)
            raise StoreUnavailable(f"subscription service unavailable: {e}") from e
        except ValueError as e:
            logger.error("Subscription service returned invalid JSON for viewer %s", viewer_id)
            raise StoreUnavailable("subscription service returned invalid JSON") from e

        state = data.get("state") if isinstance(data, dict) else None
        try:
            return SubscriptionState.parse(state)
        except ValueError as e:
            logger.error("Subscription service returned unrecognised state %r for viewer %s", state, viewer_id)
            raise StoreUnavailable(f"unrecognised subscription state {state!r}") from e


def make_subscription_directory(database=None):
    if config.SUBSCRIPTION_API_URL:
        logger.info("Reading subscription state from %s", config.SUBSCRIPTION_API_URL)
        return HttpSubscriptionDirectory(config.SUBSCRIPTION_API_URL)
    return SqliteSubscriptionDirectory(database)
