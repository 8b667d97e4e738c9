from django.db import models
import uuid


class TokenType(models.TextChoices):
    EXPO = 'expo', 'Expo'
    FCM = 'fcm', 'FCM'


class DeviceType(models.TextChoices):
    IOS = 'ios', 'iOS'
    ANDROID = 'android', 'Android'
    WEB = 'web', 'Web'


class ListAction(models.TextChoices):
    """Shopping-list activity that triggers a household notification."""
    ITEM_ADDED = 'list_item_added', 'Item added'
    ITEM_COMPLETED = 'list_item_completed', 'Item completed'
    ITEM_DELETED = 'list_item_deleted', 'Item deleted'


class PushToken(models.Model):
    """
    Device token a user registered for push notifications.

    A token belongs to exactly one user; registering it again from another
    account moves it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey('accounts.User', on_delete=models.CASCADE, related_name='push_tokens')
    token = models.CharField(max_length=255, unique=True)
    token_type = models.CharField(max_length=10, choices=TokenType.choices, default=TokenType.EXPO)
    device_type = models.CharField(max_length=20, choices=DeviceType.choices)
    device_name = models.CharField(max_length=255, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'push_tokens'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.token_type} token ({self.device_type}) for {self.user_id}"
