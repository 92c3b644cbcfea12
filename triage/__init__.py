"""
Support triage core package.

Classifies incoming support email, stores it, and drafts knowledge-grounded
replies through a prioritized in-process processing queue.
"""

__version__ = '1.0.0'
