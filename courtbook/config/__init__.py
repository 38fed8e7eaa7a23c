from courtbook.config.settings import settings

__all__ = ["settings"]
