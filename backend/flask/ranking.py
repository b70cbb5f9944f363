# ranking.py - "Trending Now" derived from the interaction log
import logging

import config
from errors import InvalidInput

logger = logging.getLogger(__name__)


def validate_limit(limit):
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidInput(f"limit must be an integer, got {limit!r}")
    if limit < 0:
        raise InvalidInput("limit must not be negative")
    return limit


class RankingEngine:
    """Orders titles by how many interaction rows reference them.

    Titles without any interaction rows never appear, whatever their legacy
    views counter says. Ties are broken by ascending title id in the store.
    """

    def __init__(self, store):
        self.store = store

    def get_trending(self, limit=None):
        limit = validate_limit(config.TRENDING_DEFAULT_LIMIT if limit is None else limit)
        if limit == 0:
            return []

        trending = []
        for title_id, plays in self.store.count_interactions_grouped_by_title(limit):
            title = self.store.get_title_by_id(title_id)
            if title is None:
                # interaction row points at a title that no longer exists
                logger.warning("Skipping trending entry for missing title %s (%d plays)", title_id, plays)
                continue
            trending.append(title)
        return trending
