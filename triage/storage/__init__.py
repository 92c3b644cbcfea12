from .email_repository import EmailRepository
from .models import Base, Email

__all__ = ['Base', 'Email', 'EmailRepository']
