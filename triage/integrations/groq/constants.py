# triage/integrations/groq/constants.py

MODEL_CONFIGURATIONS = {
    'complex': {
        'primary': {
            'name': 'llama-3.3-70b-versatile',
            'default_temperature': 0.7,
            'max_tokens': 1024,
            'recommended_tasks': ['response_generation']
        },
        'fallback': {
            'name': 'llama-3.1-8b-instant',
            'default_temperature': 0.6,
            'max_tokens': 1024,
            'recommended_tasks': ['response_generation']
        }
    },
    'simple': {
        'primary': {
            'name': 'llama-3.3-70b-versatile',
            'default_temperature': 0.2,
            'max_tokens': 512,
            'recommended_tasks': ['sentiment_analysis', 'urgency_analysis', 'information_extraction']
        },
        'fallback': {
            'name': 'llama-3.1-8b-instant',
            'default_temperature': 0.2,
            'max_tokens': 512,
            'recommended_tasks': ['sentiment_analysis', 'urgency_analysis']
        }
    }
}

# Default settings for different task types
TASK_SETTINGS = {
    'sentiment_analysis': {
        'complexity': 'simple',
        'temperature': 0.2,
        'json_output': True
    },
    'urgency_analysis': {
        'complexity': 'simple',
        'temperature': 0.2,
        'json_output': True
    },
    'information_extraction': {
        'complexity': 'simple',
        'temperature': 0.1,
        'json_output': True
    },
    'response_generation': {
        'complexity': 'complex',
        'temperature': 0.6,
        'json_output': False
    }
}
