# catalog_query.py - text search and genre filtering over titles
from errors import InvalidInput


def _require_text(value, name):
    if value is None or not str(value).strip():
        raise InvalidInput(f"'{name}' must not be blank")
    return str(value)


class QueryEngine:
    def __init__(self, store):
        self.store = store

    def search(self, text):
        """Titles whose display name contains text, case-insensitively.

        Results come back in store order; search is a lookup, not a ranking.
        A blank query is rejected instead of dumping the whole catalog.
        """
        text = _require_text(text, "text")
        return self.store.list_titles_matching_text(text)

    def filter_by_genre(self, token):
        """Titles whose raw genre text contains token, case-insensitively.

        This is a substring match on the raw field, not an exact match on the
        normalized vocabulary: "com" matches "Action,Comedy".
        """
        token = _require_text(token, "genre")
        return self.store.list_titles_where_genre_contains(token)
