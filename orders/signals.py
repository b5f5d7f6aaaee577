# Give every new table the QR payload pointing at its ordering page
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Table
from .services import table_qr_payload


@receiver(post_save, sender=Table)
def fill_table_qr_code(sender, instance, created, raw=False, **kwargs):
    """The payload embeds the table id, so it is only known after the insert"""
    if raw or instance.qr_code:
        return
    instance.qr_code = table_qr_payload(instance)
    Table.objects.filter(pk=instance.pk).update(qr_code=instance.qr_code)
