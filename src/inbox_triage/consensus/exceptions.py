"""
Consensus runner exceptions.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inbox_triage.consensus.tally import ConsensusTally


class ConsensusNotReachedError(Exception):
    """
    Raised when a capped consensus run ends without agreement.
    
    Only possible when the runner has ``max_attempts`` set and its fallback
    policy is "raise". The tally shows what the backend kept answering.
    
    Attributes:
        tally: Counts of every distinct answer sampled
        attempts: Number of samples drawn
    """

    def __init__(self, tally: "ConsensusTally", threshold: int) -> None:
        self.tally = tally
        self.attempts = tally.samples
        self.threshold = threshold
        super().__init__(
            f"No value reached {threshold} votes after {tally.samples} samples "
            f"({len(tally)} distinct answers)"
        )
