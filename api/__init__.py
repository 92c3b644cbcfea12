"""
API Package Initialization

HTTP surface of the support triage service: email review, reply
generation, queueing and dashboard endpoints.
"""
