import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from hms.models import Bed

logger = logging.getLogger(__name__)

BED_BOARD_GROUP = 'beds'


def bed_event(bed: Bed) -> dict:
    return {
        'type': 'bed.changed',
        'bedId': str(bed.id),
        'wardId': str(bed.ward_id),
        'bedNumber': bed.bed_number,
        'status': bed.status,
    }


def publish_bed_change(bed: Bed) -> None:
    """Push the bed's new status to bed board listeners once the surrounding transaction commits."""
    event = bed_event(bed)

    def _send():
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        try:
            async_to_sync(channel_layer.group_send)(BED_BOARD_GROUP, event)
        except Exception:
            # the bed change is already committed; a dead channel layer only costs a live refresh
            logger.warning('bed board publish failed for bed %s', event['bedId'], exc_info=True)

    transaction.on_commit(_send)
