from .base import DEFAULT_DOCUMENTS, KnowledgeBase, KnowledgeDocument

__all__ = ['DEFAULT_DOCUMENTS', 'KnowledgeBase', 'KnowledgeDocument']
