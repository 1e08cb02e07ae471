from __future__ import annotations

from diagnosis.schemas import AnalysisResult, GroundingSource

_OBJECT_LABELS = {"leaf": "Mango leaf", "fruit": "Mango fruit", "other": "Not a mango leaf or fruit"}


def render_report(result: AnalysisResult, sources: list[GroundingSource] | None = None) -> str:
    """Plain-text rendering of an analysis, in the language the model answered in."""

    lines = [f"Subject: {_OBJECT_LABELS[result.object_type]}"]
    if result.object_type != "other":
        lines.append(f"Status: {'Healthy' if result.is_healthy else 'Diseased'}")
    if result.common_name or result.disease_name:
        name = result.common_name or result.disease_name
        if result.common_name and result.disease_name:
            name = f"{result.common_name} ({result.disease_name})"
        lines.append(f"Disease: {name}")

    lines += ["", result.description.strip()]

    if result.cure is not None:
        if result.cure.products:
            lines += ["", "Recommended products:"]
            for index, product in enumerate(result.cure.products, start=1):
                lines.append(f"  {index}. {product.name}: {product.usage}")
        lines += ["", "Preventative measures:", f"  {result.cure.preventative_measures.strip()}"]

    web_sources = [source.web for source in sources or [] if source.web is not None]
    if web_sources:
        lines += ["", "Sources:"]
        for web in web_sources:
            lines.append(f"  - {web.title or web.uri} <{web.uri}>")

    return "\n".join(lines) + "\n"
