"""
Oncotrack: drug-module questionnaire engine for oncology toxicity monitoring.

Resolves a patient's regimen composition to canonical drug modules, builds a
deduplicated symptom questionnaire for the current cycle, and tracks the
completion/triage lifecycle of delivered questionnaires.
"""

__version__ = "0.1.0"
__author__ = "Oncotrack Team"
