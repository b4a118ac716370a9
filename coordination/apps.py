from django.apps import AppConfig


class CoordinationConfig(AppConfig):
    name = 'coordination'
    default_auto_field = 'django.db.models.BigAutoField'
    verbose_name = 'Evacuation coordination'

    identity_verifier = None

    def ready(self):
        # One verifier per process, shared by the HTTP gate and the socket handshake.
        from coordination.services.identity import build_identity_verifier

        self.identity_verifier = build_identity_verifier()
