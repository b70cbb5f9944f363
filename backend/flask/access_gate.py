# access_gate.py - playback authorization keyed on live subscription state
import logging

from errors import InvalidInput, NotFound
from models import Authorized, Denied, SubscriptionState

logger = logging.getLogger(__name__)


class AccessGate:
    """Decides whether a viewer may play a title.

    Subscription state is read from the directory on every call and never
    cached, so an expiry or cancellation takes effect on the next request.
    The gate only decides; it never locates or streams video bytes.
    """

    def __init__(self, store, subscriptions):
        self.store = store
        self.subscriptions = subscriptions

    def authorize_playback(self, viewer_id, title_id):
        if viewer_id is None or not str(viewer_id).strip():
            raise InvalidInput("'viewer_id' must not be blank")

        title = self.store.get_title_by_id(title_id)
        if title is None:
            raise NotFound(f"title {title_id} not found")

        state = self.subscriptions.get_subscription_state(viewer_id)
        if state is SubscriptionState.ACTIVE:
            logger.info("Playback authorized: viewer=%s title=%s", viewer_id, title_id)
            return Authorized(title)

        logger.info("Playback denied: viewer=%s title=%s state=%s", viewer_id, title_id, state.value)
        return Denied(state)
