"""
Test suite for the catalog HTTP layer.
Tests cover: trending, search, genre filtering, genre vocabulary,
playback authorization, interaction recording and error mapping.
"""

import pytest
import json
import sqlite3
import tempfile
import os

import sys
sys.path.insert(0, os.path.dirname(__file__))

import events
from server import app, init_db_schema
from errors import StoreUnavailable


@pytest.fixture
def client():
    """Create a test client with a temporary database."""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')
    app.config['TESTING'] = True

    # Override DATABASE path for testing
    import server as server_module
    original_db = server_module.DATABASE
    server_module.DATABASE = db_path

    init_db_schema()
    db = sqlite3.connect(db_path)
    titles = [
        (1, 'Inception', 'Sci-Fi, Thriller, Action', 0),
        (2, 'Superbad', 'Comedy', 5000),
        (3, 'Hot Fuzz', 'Action,Comedy', 0),
        (4, 'Heat', 'crime, Thriller ', 0),
    ]
    for title_id, name, genre, views in titles:
        db.execute(
            'INSERT INTO titles (id, name, release_year, duration, genre, poster, video_path, views) '
            'VALUES (?, ?, 2000, 100, ?, ?, ?, ?)',
            (title_id, name, genre, f'/posters/{title_id}.jpg', f'/videos/{title_id}.mp4', views),
        )
    # counts: T3=3, T1=3, T4=1 ; T2 has none
    for title_id in (3, 3, 3, 1, 1, 1, 4):
        db.execute(
            "INSERT INTO interactions (title_id, viewer_id, watched_at, progress) VALUES (?, 'v', 0, 0)",
            (title_id,),
        )
    for viewer, state in [('alice', 'active'), ('bob', 'expired'), ('carol', 'cancelled')]:
        db.execute('INSERT INTO viewers (viewer_id, subscription_state) VALUES (?, ?)', (viewer, state))
    db.commit()
    db.close()

    yield app.test_client()

    # Cleanup
    os.close(db_fd)
    os.unlink(db_path)
    server_module.DATABASE = original_db


@pytest.fixture
def published(monkeypatch):
    """Capture events published by the request layer."""
    sent = []
    import server as server_module
    monkeypatch.setattr(server_module, 'publish_event', lambda t, p: sent.append((t, p)))
    return sent


class TestHome:

    def test_home_endpoint(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert 'message' in json.loads(response.data)


class TestTrendingEndpoint:
    """Test /titles/trending."""

    def test_trending_order_and_tie_break(self, client):
        response = client.get('/titles/trending?limit=2')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert [t['id'] for t in data['results']] == [1, 3]

    def test_trending_default_limit_excludes_unwatched(self, client):
        data = json.loads(client.get('/titles/trending').data)
        ids = [t['id'] for t in data['results']]
        assert ids == [1, 3, 4]
        assert 2 not in ids

    def test_trending_hides_video_path(self, client):
        data = json.loads(client.get('/titles/trending').data)
        assert all('video_path' not in t for t in data['results'])

    @pytest.mark.parametrize('limit', ['-1', 'abc', '2.5'])
    def test_trending_bad_limit(self, client, limit):
        response = client.get(f'/titles/trending?limit={limit}')
        assert response.status_code == 400
        assert 'error' in json.loads(response.data)

    def test_trending_large_limit_returns_all_ranked(self, client):
        response = client.get('/titles/trending?limit=1000')
        assert response.status_code == 200
        assert [t['id'] for t in json.loads(response.data)['results']] == [1, 3, 4]

    def test_trending_publishes_event(self, client, published):
        client.get('/titles/trending?limit=1')
        assert published == [('trending_requested', {'limit': 1, 'count': 1})]


class TestSearchEndpoint:
    """Test /titles/search."""

    def test_search_by_prefix(self, client):
        data = json.loads(client.get('/titles/search?q=Incep').data)
        assert data['count'] == 1
        assert data['results'][0]['name'] == 'Inception'

    def test_search_case_insensitive(self, client):
        data = json.loads(client.get('/titles/search?q=HOT').data)
        assert [t['id'] for t in data['results']] == [3]

    @pytest.mark.parametrize('query', ['', '?q=', '?q=%20%20%20'])
    def test_blank_search_rejected(self, client, query):
        response = client.get(f'/titles/search{query}')
        assert response.status_code == 400


class TestGenreEndpoints:
    """Test /titles?genre= and /genres."""

    def test_filter_substring(self, client):
        data = json.loads(client.get('/titles?genre=com').data)
        assert [t['id'] for t in data['results']] == [2, 3]

    def test_filter_missing_genre(self, client):
        assert client.get('/titles').status_code == 400

    def test_genre_vocabulary(self, client):
        data = json.loads(client.get('/genres').data)
        assert data['genres'] == ['Action', 'Comedy', 'crime', 'Sci-Fi', 'Thriller']
        assert data['count'] == 5


class TestTitleEndpoints:
    """Test /titles/<id> and /titles/<id>/play."""

    def test_title_detail(self, client):
        data = json.loads(client.get('/titles/2').data)
        assert data['name'] == 'Superbad'
        assert data['views'] == 5000

    def test_title_detail_not_found(self, client):
        assert client.get('/titles/99').status_code == 404

    def test_play_active(self, client, published):
        response = client.get('/titles/1/play?viewer_id=alice')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['status'] == 'authorized'
        assert data['video_path'] == '/videos/1.mp4'
        assert published[-1][0] == 'playback_authorized'

    def test_play_viewer_header(self, client):
        response = client.get('/titles/1/play', headers={'X-Viewer-Id': 'alice'})
        assert response.status_code == 200

    @pytest.mark.parametrize('viewer,state', [
        ('bob', 'expired'), ('carol', 'cancelled'), ('nobody', 'none'),
    ])
    def test_play_denied(self, client, viewer, state):
        response = client.get(f'/titles/1/play?viewer_id={viewer}')
        assert response.status_code == 403
        data = json.loads(response.data)
        assert data['subscription_state'] == state
        assert 'video_path' not in data

    def test_play_unknown_title(self, client):
        assert client.get('/titles/99/play?viewer_id=alice').status_code == 404

    def test_play_missing_viewer(self, client):
        assert client.get('/titles/1/play').status_code == 400


class TestInteractionEndpoints:
    """Test /interactions and /viewers/<id>/history."""

    def test_record_interaction(self, client):
        response = client.post('/interactions', json={'viewer_id': 'dave', 'title_id': 2, 'progress': 61.5})
        assert response.status_code == 201
        assert 'interaction_id' in json.loads(response.data)

        history = json.loads(client.get('/viewers/dave/history').data)
        assert history['count'] == 1
        assert history['history'][0]['title_id'] == 2
        assert history['history'][0]['progress'] == 61.5

    def test_recorded_interactions_feed_trending(self, client):
        for _ in range(4):
            client.post('/interactions', json={'viewer_id': 'dave', 'title_id': 2})
        data = json.loads(client.get('/titles/trending?limit=1').data)
        assert data['results'][0]['id'] == 2

    def test_record_interaction_unknown_title(self, client):
        response = client.post('/interactions', json={'viewer_id': 'dave', 'title_id': 99})
        assert response.status_code == 404

    @pytest.mark.parametrize('payload', [
        {'viewer_id': 'dave'},
        {'viewer_id': 'dave', 'title_id': '2'},
        {'viewer_id': '', 'title_id': 2},
        {'viewer_id': 'dave', 'title_id': 2, 'progress': -5},
    ])
    def test_record_interaction_invalid(self, client, payload):
        assert client.post('/interactions', json=payload).status_code == 400


class TestStoreFailures:
    """Test that collaborator failures surface as 503."""

    def test_store_unavailable(self, client, monkeypatch):
        import catalog_store

        def boom(self, sql, params=()):
            raise StoreUnavailable('disk on fire')

        monkeypatch.setattr(catalog_store.SqliteCatalogStore, '_query', boom)
        response = client.get('/titles/trending')
        assert response.status_code == 503
        assert 'error' in json.loads(response.data)


class TestEvents:
    """Test the best-effort event publisher."""

    def test_publish_without_producer(self, monkeypatch):
        monkeypatch.setattr(events, 'get_producer', lambda: None)
        event = events.publish_event('search_performed', {'q': 'x'})
        assert event['type'] == 'search_performed'
        assert event['source'] == 'catalog'
        assert event['payload'] == {'q': 'x'}
        assert len(event['event_id']) == 32

    def test_event_ids_are_unique(self, monkeypatch):
        monkeypatch.setattr(events, 'get_producer', lambda: None)
        first = events.publish_event('genre_filtered', {'genre': 'com'})
        second = events.publish_event('genre_filtered', {'genre': 'com'})
        assert first['event_id'] != second['event_id']

    def test_title_events_keyed_by_title(self, monkeypatch):
        sent = []

        class RecordingProducer:
            def send(self, topic, key=None, value=None):
                sent.append((topic, key, value))

            def flush(self):
                pass

        monkeypatch.setattr(events, 'get_producer', lambda: RecordingProducer())
        event = events.publish_event('playback_authorized', {'viewer_id': 'alice', 'title_id': 7})
        assert sent == [(events.config.KAFKA_TOPIC, 7, event)]

    def test_publish_failure_is_not_raised(self, monkeypatch):
        class BrokenProducer:
            def send(self, topic, key=None, value=None):
                raise RuntimeError('broker down')

        monkeypatch.setattr(events, 'get_producer', lambda: BrokenProducer())
        event = events.publish_event('search_performed', {'q': 'x'})
        assert event['type'] == 'search_performed'

    def test_no_producer_without_bootstrap(self, monkeypatch):
        monkeypatch.setattr(events.config, 'KAFKA_BOOTSTRAP', None)
        monkeypatch.setattr(events, '_producer', None)
        monkeypatch.setattr(events, '_producer_failed', False)
        assert events.get_producer() is None
