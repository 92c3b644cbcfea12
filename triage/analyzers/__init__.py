from .classifier import EmailClassifier
from .responder import ResponseGenerationError, ResponseGenerator

__all__ = [
    'EmailClassifier',
    'ResponseGenerationError',
    'ResponseGenerator',
]
