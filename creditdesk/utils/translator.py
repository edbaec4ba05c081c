"""
Message template rendering.

Localization is owned by another service; the handoff only needs something
that renders `"Street %Street%"` style templates. TemplateTranslator does that
with an optional label catalog.
"""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional, Protocol

_PLACEHOLDER = re.compile(r"%[^%\s]+%")


class Translator(Protocol):
    def trans(self, template: str, values: Mapping[str, str]) -> str:
        ...


class TemplateTranslator:
    """Translate bare words through `catalog`, then substitute `%name%` placeholders."""

    def __init__(self, catalog: Optional[Dict[str, str]] = None) -> None:
        self.catalog = dict(catalog or {})

    def trans(self, template: str, values: Mapping[str, str]) -> str:
        translated = self.catalog.get(template)
        if translated is None:
            translated = self._translate_words(template)
        # single pass, so substituted values are never re-scanned
        return _PLACEHOLDER.sub(lambda m: str(values.get(m.group(0), m.group(0))), translated)

    def _translate_words(self, template: str) -> str:
        if not self.catalog:
            return template
        pieces = re.split(r"(%[^%\s]+%|[\s,]+)", template)
        return "".join(
            piece if piece.startswith("%") else self.catalog.get(piece, piece)
            for piece in pieces
        )
