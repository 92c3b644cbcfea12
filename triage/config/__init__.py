from .analyzer_config import ANALYZER_CONFIG

__all__ = ['ANALYZER_CONFIG']
