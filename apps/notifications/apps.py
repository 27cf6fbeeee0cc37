from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.notifications"
    label = "notifications"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .dispatcher import subscribe

        subscribe(message_bus)
