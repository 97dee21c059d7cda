import logging

logger = logging.getLogger(__name__)

CHANGES_GROUP = "ordering_changes"


def broadcast_change(event):
    """Forward a change event to every websocket client in the changes group."""
    from channels.layers import get_channel_layer
    from asgiref.sync import async_to_sync

    channel_layer = get_channel_layer()
    if not channel_layer:
        logger.debug("Channel layer not available. Skipping change broadcast.")
        return

    payload = {
        "type": "ordering_change",
        "kind": event.kind,
        "entity_id": event.entity_id,
    }
    try:
        async_to_sync(channel_layer.group_send)(CHANGES_GROUP, payload)
    except Exception as e:
        logger.error(f"Failed to broadcast {event.kind} ({event.entity_id}): {e}", exc_info=True)
