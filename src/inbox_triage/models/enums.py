"""
Enumerations for inbox triage data models.
"""

from enum import Enum


class Classification(str, Enum):
    """
    Closed taxonomy of message categories.
    
    Only PROMOTIONAL messages go on to unsubscribe-link extraction.
    """
    
    PROMOTIONAL = "promotional"
    TRANSACTIONAL = "transactional"
    PERSONAL = "personal"
