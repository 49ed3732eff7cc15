"""Lifecycle loader for natively-compiled application modules."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apploader.api.config import LoaderConfig
    from apploader.api.loader import LoaderHandle


def create_loader(config: "LoaderConfig", **kwargs: object) -> "LoaderHandle":
    """Create one loader supervising a single hosted module."""
    from apploader.api.loader import create_loader as api_create_loader

    return api_create_loader(config, **kwargs)  # type: ignore[arg-type]


__all__ = ["create_loader"]
