"""
Prompt templates.

Each prompt lives in prompts/<name>.txt and uses {{NAME}} placeholders.
Templates are read once and cached until reload().
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

from thinkcheck.core.config import settings
from thinkcheck.core.exceptions import PromptTemplateError

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    text: str

    @property
    def variables(self) -> FrozenSet[str]:
        return frozenset(PLACEHOLDER_RE.findall(self.text))

    def render(self, **values: Any) -> str:
        """Fill known placeholders; unknown ones are left as-is and logged."""
        missing = sorted(self.variables.difference(values))
        if missing:
            logger.warning(f"Prompt '{self.name}' rendered without: {missing}")

        def _fill(match: re.Match) -> str:
            key = match.group(1)
            return str(values[key]) if key in values else match.group(0)

        return PLACEHOLDER_RE.sub(_fill, self.text)


class PromptManager:
    """
    Example:
        manager = PromptManager()
        prompt = manager.load_prompt("mcq", NUM_QUESTIONS=5, TOPIC="Python decorators")
    """

    def __init__(self, prompts_dir: Optional[Path] = None):
        self.prompts_dir = Path(prompts_dir or settings.PROMPTS_DIR)
        self._templates: Dict[str, PromptTemplate] = {}

        if not self.prompts_dir.is_dir():
            logger.warning(f"Prompts directory not found: {self.prompts_dir}")

    def get(self, name: str) -> PromptTemplate:
        template = self._templates.get(name)
        if template is not None:
            return template

        path = self.prompts_dir / f"{name}.txt"
        if not path.is_file():
            raise PromptTemplateError(
                f"Unknown prompt '{name}' in {self.prompts_dir} (available: {self.list_templates()})"
            )
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise PromptTemplateError(f"Cannot read prompt '{name}': {e}") from e

        template = self._templates[name] = PromptTemplate(name=name, text=text)
        logger.debug(f"Loaded prompt '{name}' ({len(text)} chars)")
        return template

    def load_prompt(self, name: str, **values: Any) -> str:
        return self.get(name).render(**values)

    def reload(self, name: Optional[str] = None) -> None:
        """Forget one cached template, or all of them."""
        if name is None:
            self._templates.clear()
        else:
            self._templates.pop(name, None)
        logger.info(f"Prompt cache cleared: {name or 'all'}")

    def list_templates(self) -> List[str]:
        if not self.prompts_dir.is_dir():
            return []
        return sorted(path.stem for path in self.prompts_dir.glob("*.txt"))


_prompt_manager: Optional[PromptManager] = None


def get_prompt_manager() -> PromptManager:
    """Shared manager over the bundled prompts directory."""
    global _prompt_manager
    if _prompt_manager is None:
        _prompt_manager = PromptManager()
    return _prompt_manager
