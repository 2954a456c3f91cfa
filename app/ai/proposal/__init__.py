"""
Proposal Module - typed calendar actions and the model-output normalizer.
"""

from app.ai.proposal.schemas import CandidateEvent, EventType, Proposal, ProposalAction
from app.ai.proposal.normalizer import NormalizeResult, ProposalNormalizer, strip_code_fence

__all__ = [
    "CandidateEvent",
    "EventType",
    "NormalizeResult",
    "Proposal",
    "ProposalAction",
    "ProposalNormalizer",
    "strip_code_fence",
]
