from django.apps import AppConfig


class FloorConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "floor"

    def ready(self):
        import floor.signals  # noqa
