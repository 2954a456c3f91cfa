"""
Prompts Module - prompt templates and user-facing assistant messages.
"""

from app.ai.prompts.proposal_prompts import (
    PROPOSAL_SYSTEM_PROMPT,
    PROPOSAL_USER_PROMPT,
)

__all__ = [
    "PROPOSAL_SYSTEM_PROMPT",
    "PROPOSAL_USER_PROMPT",
]
