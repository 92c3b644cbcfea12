from datetime import datetime
from typing import Dict, List, Optional
from .constants import MODEL_CONFIGURATIONS, TASK_SETTINGS


class ModelManager:
    def __init__(self, overrides: Optional[Dict[str, str]] = None, error_window: int = 5):
        """
        Initialize the ModelManager with optional per-task model overrides.

        Args:
            overrides: Mapping of task type to a model name that always wins
            error_window: Consecutive failures on a primary model before the fallback is used
        """
        self.overrides = overrides or {}
        self.error_window = error_window
        self.performance_metrics: Dict[str, Dict[str, List[Dict]]] = {'models': {}}

    def get_model_config(self, task_type: str, force_model: Optional[str] = None) -> Dict:
        """
        Get the appropriate model configuration for a task.

        Args:
            task_type: Type of task (e.g., 'sentiment_analysis')
            force_model: Optional specific model to use

        Returns:
            Dict containing model configuration merged with the task settings
        """
        task_settings = TASK_SETTINGS.get(task_type)
        if not task_settings:
            raise ValueError(f"Unknown task type: {task_type}")

        models = MODEL_CONFIGURATIONS[task_settings['complexity']]
        if self._should_use_fallback(models['primary']['name']):
            config = dict(models['fallback'])
        else:
            config = dict(models['primary'])

        forced = force_model or self.overrides.get(task_type)
        if forced:
            config['name'] = forced

        config['temperature'] = task_settings.get('temperature', config['default_temperature'])
        config['json_output'] = task_settings.get('json_output', False)
        return config

    def _should_use_fallback(self, primary_model: str) -> bool:
        """Use the fallback once the primary's most recent calls all failed."""
        history = self.performance_metrics['models'].get(primary_model, [])
        recent = history[-self.error_window:]
        if len(recent) < self.error_window:
            return False
        return all(not entry.get('success', True) for entry in recent)

    def record_performance(self, model: str, task_type: str, metrics: Dict):
        """
        Record performance metrics for a model on a specific task.

        Args:
            model: Model name
            task_type: Type of task
            metrics: Dictionary containing performance metrics (expects 'success')
        """
        self.performance_metrics['models'].setdefault(model, []).append({
            'timestamp': datetime.now().isoformat(),
            'task_type': task_type,
            **metrics
        })
