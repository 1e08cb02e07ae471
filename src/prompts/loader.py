from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from string import Template


@lru_cache(maxsize=None)
def load_prompt(filename: str) -> Template:
    """Load a prompt template shipped next to this module.

    Templates use ``$name`` placeholders so that literal JSON braces survive.
    """

    path = Path(__file__).resolve().parent / filename
    if not path.exists():
        raise RuntimeError(f"Prompt file not found: {filename}")
    return Template(path.read_text(encoding="utf-8").strip() + "\n")


def render_prompt(filename: str, **values: str) -> str:
    return load_prompt(filename).substitute(**values)
