from .events import LoggingEventPublisher

__all__ = ["LoggingEventPublisher"]
