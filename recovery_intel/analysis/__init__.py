"""
Consensus analysis components.

- Fallback extractor: keyword mining of free-text provider output
- Synthesizer: merges provider results into one consensus
- Progress tracker: healing progress between image analyses

The orchestrator lives in ``recovery_intel.analysis.orchestrator``.
"""

from recovery_intel.analysis.fallback import FallbackExtractor
from recovery_intel.analysis.progress import ProgressTracker, compare_progress
from recovery_intel.analysis.synthesizer import ConsensusSynthesizer

__all__ = [
    "ConsensusSynthesizer",
    "FallbackExtractor",
    "ProgressTracker",
    "compare_progress",
]
