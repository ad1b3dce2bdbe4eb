"""
MW_MGR Notification Senders

Delivery-hint channels: in-process queue and desktop webhook.
"""
from .base_sender import BaseSender, SendResult, DeliveryHint
from .queue_sender import QueueSender
from .webhook_sender import WebhookSender

__all__ = [
    'BaseSender',
    'SendResult',
    'DeliveryHint',
    'QueueSender',
    'WebhookSender',
]
