# triage/config/analyzer_config.py

ANALYZER_CONFIG = {
    "client": {
        "default_model": "llama-3.3-70b-versatile",
        "retry_count": 3,
        "retry_delay": 2,
        "metrics_file": "data/metrics/groq_metrics.json"
    },
    "classifier": {
        "max_input_chars": 8000,
        # Values used when a model call or its JSON payload fails
        "fallbacks": {
            "sentiment": "neutral",
            "confidence": 0.5,
            "urgency": 0.3
        },
        "urgency_keywords": [
            "immediately", "critical", "cannot access", "outage", "refund",
            "down", "not working", "emergency"
        ]
    },
    "responder": {
        "knowledge_top_k": 3,
        "case_reference_prefix": "CASE",
        "fallback_reply": (
            "Thank you for contacting us. We'll review your request and get back to you soon."
        )
    },
    "knowledge_base": {
        "min_word_length": 4,
        "fallback_document_count": 2
    },
    "ingestion": {
        "support_keywords": [
            "support", "help", "query", "request", "issue", "problem", "bug", "error"
        ],
        "duplicate_window_seconds": 60
    }
}
