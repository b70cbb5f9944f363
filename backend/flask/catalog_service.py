# catalog_service.py - façade exposing the catalog operations to callers
import logging
import math

from access_gate import AccessGate
from catalog_query import QueryEngine
from catalog_store import SqliteCatalogStore
from errors import InvalidInput, NotFound
from genres import GenreNormalizer
from ranking import RankingEngine
from subscriptions import make_subscription_directory

logger = logging.getLogger(__name__)


class CatalogService:
    """Composes ranking, genre, query and access logic over one store.

    Holds no mutable state of its own, so a single instance may serve any
    number of concurrent callers.
    """

    def __init__(self, store, subscriptions):
        self.store = store
        self.ranking = RankingEngine(store)
        self.genres = GenreNormalizer(store)
        self.query = QueryEngine(store)
        self.access = AccessGate(store, subscriptions)

    @classmethod
    def from_database(cls, database=None):
        store = SqliteCatalogStore(database)
        return cls(store, make_subscription_directory(database))

    def get_trending(self, limit=None):
        return self.ranking.get_trending(limit)

    def search(self, text):
        return self.query.search(text)

    def filter_by_genre(self, token):
        return self.query.filter_by_genre(token)

    def list_available_genres(self):
        return self.genres.list_available_genres()

    def authorize_playback(self, viewer_id, title_id):
        return self.access.authorize_playback(viewer_id, title_id)

    def get_title(self, title_id):
        title = self.store.get_title_by_id(title_id)
        if title is None:
            raise NotFound(f"title {title_id} not found")
        return title

    def record_interaction(self, viewer_id, title_id, progress=0.0):
        """Append one watch event for (viewer, title).

        The legacy views counter on the title is left alone.
        """
        if viewer_id is None or not str(viewer_id).strip():
            raise InvalidInput("'viewer_id' must not be blank")
        try:
            progress = float(progress)
        except (TypeError, ValueError):
            raise InvalidInput(f"progress must be a number, got {progress!r}")
        if not math.isfinite(progress) or progress < 0:
            raise InvalidInput("progress must be a finite, non-negative number")
        self.get_title(title_id)
        event = self.store.append_interaction(str(viewer_id), title_id, progress)
        logger.debug("Recorded interaction %s: viewer=%s title=%s", event.id, viewer_id, title_id)
        return event

    def watch_history(self, viewer_id):
        if viewer_id is None or not str(viewer_id).strip():
            raise InvalidInput("'viewer_id' must not be blank")
        return self.store.list_interactions_for_viewer(str(viewer_id))
