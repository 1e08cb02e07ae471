from __future__ import annotations

from diagnosis.schemas import LANGUAGE_NAMES, AnalysisResult
from prompts.loader import render_prompt


def build_system_instruction(language: str, result: AnalysisResult | None = None) -> str:
    """Persona prompt for the voice assistant, seeded with the latest report."""

    language_name = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["en"])
    if result is None:
        return render_prompt("assistant_system.txt", language_name=language_name)

    report = result.model_dump_json(by_alias=True)
    return render_prompt(
        "assistant_report_system.txt",
        language_name=language_name,
        report=report,
    )
