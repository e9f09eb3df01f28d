from functools import partial

from django.db import transaction
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Invoice
from .notifications import INVOICE_CREATED, INVOICE_UPDATED, channel


# Remember the stored status so post_save can tell what changed.
@receiver(pre_save, sender=Invoice)
def remember_previous_status(sender, instance, **kwargs):
    if instance.pk is None:
        instance._previous_status = None
        return
    instance._previous_status = (
        Invoice.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
    )


# Publish only once the surrounding transaction has committed.
@receiver(post_save, sender=Invoice)
def publish_invoice_event(sender, instance, created, raw=False, **kwargs):
    if raw:
        return
    payload = {
        "invoice_id": instance.pk,
        "invoice_number": instance.invoice_number,
        "user_id": instance.created_by_id,
        "status": instance.status,
        "previous_status": getattr(instance, "_previous_status", None),
    }
    event = INVOICE_CREATED if created else INVOICE_UPDATED
    transaction.on_commit(partial(channel.publish, event, payload))
