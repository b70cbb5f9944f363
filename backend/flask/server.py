# server.py - thin HTTP layer over the catalog service
from flask import Flask, request, jsonify, g
from flask_cors import CORS
import logging

import config
from catalog_service import CatalogService
from catalog_store import SqliteCatalogStore
from errors import InvalidInput, NotFound, StoreUnavailable
from events import publish_event
from models import Denied

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app, resources={r"/*": {"origins": [o.strip() for o in config.CORS_ORIGINS.split(',')]}})

DATABASE = config.DATABASE


# -----------------------
# Service helpers
# -----------------------
def get_service():
    service = getattr(g, "_catalog_service", None)
    if service is None:
        service = g._catalog_service = CatalogService.from_database(DATABASE)
    return service


def init_db_schema():
    SqliteCatalogStore(DATABASE).init_schema()


def int_arg(name, default=None):
    raw = request.args.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"'{name}' must be an integer, got {raw!r}")


# -----------------------
# Error mapping
# -----------------------
@app.errorhandler(InvalidInput)
def handle_invalid_input(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(NotFound)
def handle_not_found(e):
    return jsonify({'error': str(e)}), 404


@app.errorhandler(StoreUnavailable)
def handle_store_unavailable(e):
    return jsonify({'error': 'Catalog temporarily unavailable'}), 503


# -----------------------
# Catalog endpoints
# -----------------------
@app.route("/")
def home():
    return jsonify({'message': 'Catalog service is running'})


@app.route("/titles/trending", methods=["GET"])
def trending():
    limit = int_arg("limit", config.TRENDING_DEFAULT_LIMIT)
    titles = get_service().get_trending(limit)
    publish_event('trending_requested', {'limit': limit, 'count': len(titles)})
    return jsonify({'count': len(titles), 'results': [t.to_dict() for t in titles]})


@app.route("/titles/search", methods=["GET"])
def search():
    text = request.args.get("q")
    titles = get_service().search(text)
    publish_event('search_performed', {'q': text, 'count': len(titles)})
    return jsonify({'count': len(titles), 'results': [t.to_dict() for t in titles]})


@app.route("/titles", methods=["GET"])
def filter_by_genre():
    genre = request.args.get("genre")
    titles = get_service().filter_by_genre(genre)
    publish_event('genre_filtered', {'genre': genre, 'count': len(titles)})
    return jsonify({'count': len(titles), 'results': [t.to_dict() for t in titles]})


@app.route("/genres", methods=["GET"])
def genres():
    vocabulary = get_service().list_available_genres()
    return jsonify({'count': len(vocabulary), 'genres': vocabulary})


@app.route("/titles/<int:title_id>", methods=["GET"])
def title_detail(title_id):
    return jsonify(get_service().get_title(title_id).to_dict())


@app.route("/titles/<int:title_id>/play", methods=["GET"])
def play(title_id):
    viewer_id = request.args.get("viewer_id") or request.headers.get("X-Viewer-Id")
    decision = get_service().authorize_playback(viewer_id, title_id)
    if isinstance(decision, Denied):
        publish_event('playback_denied', {'viewer_id': viewer_id, 'title_id': title_id,
                                          'state': decision.reason.value})
        return jsonify({'error': 'Subscription required', 'subscription_state': decision.reason.value}), 403
    publish_event('playback_authorized', {'viewer_id': viewer_id, 'title_id': title_id})
    return jsonify({
        'status': 'authorized',
        'title': decision.title.to_dict(),
        'video_path': decision.video_path,
    })


# -----------------------
# Interaction log endpoints
# -----------------------
@app.route("/interactions", methods=["POST"])
def record_interaction():
    data = request.get_json(silent=True) or {}
    title_id = data.get('title_id')
    if isinstance(title_id, bool) or not isinstance(title_id, int):
        raise InvalidInput("'title_id' must be an integer")
    event = get_service().record_interaction(data.get('viewer_id'), title_id, data.get('progress', 0))
    publish_event('interaction_recorded', {'viewer_id': event.viewer_id, 'title_id': event.title_id,
                                           'progress': event.progress})
    return jsonify({'status': 'ok', 'interaction_id': event.id}), 201


@app.route("/viewers/<viewer_id>/history", methods=["GET"])
def watch_history(viewer_id):
    events = get_service().watch_history(viewer_id)
    return jsonify({
        'viewer_id': viewer_id,
        'count': len(events),
        'history': [
            {'title_id': e.title_id, 'watched_at': e.watched_at, 'progress': e.progress}
            for e in events
        ],
    })


if __name__ == "__main__":
    init_db_schema()
    app.run(debug=True)
