"""Django signals for cache invalidation."""

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from registrations.models import Waiver


def template_cache_key(event_id) -> str:
    return f"events:{event_id}:waivers"


@receiver([post_save, post_delete], sender=Waiver)
def invalidate_template_cache(sender, instance, **kwargs):
    """Invalidate an event's template listing when one of its waivers changes."""
    if instance.type == Waiver.Type.TEMPLATE and instance.event_id:
        cache.delete(template_cache_key(instance.event_id))
