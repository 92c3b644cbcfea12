from .queue import PriorityProcessingQueue, ProcessingOutcome, QueueItem

__all__ = [
    'PriorityProcessingQueue',
    'ProcessingOutcome',
    'QueueItem',
]
