from .client import CloudflareClient

__all__ = ["CloudflareClient"]
