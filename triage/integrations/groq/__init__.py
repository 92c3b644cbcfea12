from .client import EnhancedGroqClient
from .model_manager import ModelManager

GroqClient = EnhancedGroqClient

__all__ = [
    'EnhancedGroqClient',
    'ModelManager',
    'GroqClient'
]
