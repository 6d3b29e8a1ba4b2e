from .api_client import AnimationsClient

__all__ = ["AnimationsClient"]
