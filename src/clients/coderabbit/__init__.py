from .client import CodeRabbitClient

__all__ = ["CodeRabbitClient"]
