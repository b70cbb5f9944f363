# genres.py - derive the genre vocabulary from raw comma-separated genre text
GENRE_DELIMITER = ","


def split_genres(raw):
    """Split one raw genre string into trimmed, non-empty tokens.

    Empty tokens from doubled or trailing delimiters are dropped, never errored.
    """
    if raw is None:
        return []
    return [part.strip() for part in str(raw).split(GENRE_DELIMITER) if part.strip()]


def normalize_genres(raw_strings):
    """Build a deduplicated genre vocabulary.

    Tokens are deduplicated on their case-folded form; the first spelling seen
    (in the order raw_strings is given) is the one kept. The result is sorted by
    the case-folded form using plain code-point comparison.
    """
    seen = {}
    for raw in raw_strings:
        for token in split_genres(raw):
            seen.setdefault(token.casefold(), token)
    return [seen[key] for key in sorted(seen)]


class GenreNormalizer:
    def __init__(self, store):
        self.store = store

    def list_available_genres(self):
        return normalize_genres(self.store.list_all_raw_genre_strings())
