import typing as t

from django.apps import AppConfig

if t.TYPE_CHECKING:
    from cpops.minting import TokenIssuer


class CpopsConfig(AppConfig):
    """Configuration for the cPOP app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "cpops"
    verbose_name = "cPOPs"
    token_issuer: "TokenIssuer | None" = None

    def ready(self) -> None:
        """Build the token issuer once for the lifetime of the process."""
        from cpops.minting import build_token_issuer

        self.token_issuer = build_token_issuer()
