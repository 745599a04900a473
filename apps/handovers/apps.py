from django.apps import AppConfig, apps
from django.conf import settings


class HandoversConfig(AppConfig):
    name = 'apps.handovers'
    verbose_name = 'Cash handovers'

    handover_config = None

    def ready(self):
        from .config import load_handover_config
        self.handover_config = load_handover_config(getattr(settings, 'CASH_HANDOVER', None))


def get_handover_config():
    """Return the HandoverConfig loaded at startup."""
    return apps.get_app_config('handovers').handover_config
