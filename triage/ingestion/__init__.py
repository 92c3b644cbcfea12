from .samples import SAMPLE_EMAILS, sample_messages
from .service import EmailIngestionService

__all__ = ['EmailIngestionService', 'SAMPLE_EMAILS', 'sample_messages']
