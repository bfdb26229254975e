"""
Consensus voting over repeated generations.

Main Components:
    - ConsensusRunner: Samples a GenerationRequest until two answers agree
    - ConsensusTally: Insertion-ordered vote counts
    - ConsensusNotReachedError: Raised when a capped run ends without agreement

Usage:
    >>> from inbox_triage.consensus import ConsensusRunner
    >>> runner = ConsensusRunner(generation_client)
    >>> category = await runner.run(request)
"""

from inbox_triage.consensus.exceptions import ConsensusNotReachedError
from inbox_triage.consensus.runner import ConsensusRunner
from inbox_triage.consensus.tally import ConsensusTally, canonicalize

__all__ = [
    "ConsensusRunner",
    "ConsensusTally",
    "ConsensusNotReachedError",
    "canonicalize",
]
