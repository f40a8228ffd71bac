"""
Prompt loading and formatting utilities.

Analysis prompts live as markdown templates in ``recovery_intel/prompts``,
one per modality, with simple ``{variable}`` substitution.
"""

import json
from functools import lru_cache
from pathlib import Path

from recovery_intel.models.analysis import AnalysisRequest
from recovery_intel.models.enums import Modality

PROMPTS_DIR = Path(__file__).parent.parent / "prompts"


@lru_cache(maxsize=None)
def load_prompt(modality: Modality) -> str:
    """
    Load the prompt template for a modality.

    Raises:
        FileNotFoundError: If the prompt file doesn't exist
    """
    prompt_path = PROMPTS_DIR / f"{Modality(modality).value}.md"

    if not prompt_path.exists():
        raise FileNotFoundError(
            f"Prompt file not found: {prompt_path}. "
            f"Expected prompt for modality '{modality}'."
        )

    return prompt_path.read_text()


def format_prompt(template: str, **kwargs) -> str:
    """
    Format a prompt template with variable substitution.

    Uses simple {variable} replacement so the JSON examples in the
    templates are left untouched.
    """
    result = template
    for key, value in kwargs.items():
        placeholder = "{" + key + "}"
        result = result.replace(placeholder, str(value))
    return result


def build_analysis_prompt(request: AnalysisRequest) -> str:
    """Build the prompt sent to every provider for a request."""
    context = json.dumps(request.context, default=str) if request.context else "Not provided"
    return format_prompt(
        load_prompt(request.modality),
        context=context,
        text=request.text,
    )
