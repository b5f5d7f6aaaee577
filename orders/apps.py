from django.apps import AppConfig


class OrdersConfig(AppConfig):
    name = "orders"
    verbose_name = "Salle & commandes"

    def ready(self):
        from . import signals  # noqa: F401
