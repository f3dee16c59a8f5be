"""Signal handlers for user profiles and token revocation.

Ensure profiles are created for new users and blacklist outstanding refresh
tokens when a user is deleted.
"""

import logging

from django.conf import settings
from django.db.models.signals import post_save, pre_delete
from django.dispatch import receiver
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken

from .models import Profile

logger = logging.getLogger(__name__)

# -----------------------------
# User Profile related signals
# -----------------------------


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created, **kwargs):
    # Skip if created from admin inline
    if created and not getattr(instance, "_created_from_admin", False):
        Profile.objects.create(user=instance)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def save_user_profile(sender, instance, **kwargs):
    # Skip if from admin inline
    if getattr(instance, "_created_from_admin", False):
        return

    try:
        instance.profile.save()
    except Profile.DoesNotExist:
        Profile.objects.create(user=instance)


# -----------------------------
# Token revocation
# -----------------------------


@receiver(pre_delete, sender=settings.AUTH_USER_MODEL)
def blacklist_user_tokens_on_delete(sender, instance, **kwargs):
    # Runs before delete so OutstandingToken rows still reference the user
    tokens = OutstandingToken.objects.filter(user_id=instance.pk)
    for token in tokens:
        BlacklistedToken.objects.get_or_create(token=token)
    if tokens:
        logger.info("Blacklisted %d refresh tokens of deleted user %s", len(tokens), instance.email)
