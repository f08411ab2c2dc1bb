"""
Runtime configuration for the import engine.

EngineConfig is passed explicitly into the decomposer, the canonicalizer
and the pipeline. Nothing here reads environment variables.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EngineConfig:
    """Allow-lists of brand and manufacturer names that may contain digits.

    Entries are compared case-insensitively against the whole trimmed cell,
    e.g. "3M" or "Bayer 04".
    """

    allowed_numeric_brands: frozenset[str] = field(default_factory=frozenset)
    allowed_numeric_manufacturers: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_lists(
        cls,
        brands: list[str] | None = None,
        manufacturers: list[str] | None = None,
    ) -> "EngineConfig":
        return cls(
            allowed_numeric_brands=frozenset(
                b.strip().lower() for b in (brands or []) if b.strip()
            ),
            allowed_numeric_manufacturers=frozenset(
                m.strip().lower() for m in (manufacturers or []) if m.strip()
            ),
        )

    def is_allowed_numeric_brand(self, value: str) -> bool:
        text = str(value or "")
        return any(ch.isdigit() for ch in text) and (
            text.strip().lower() in self.allowed_numeric_brands
        )

    def is_allowed_numeric_manufacturer(self, value: str) -> bool:
        text = str(value or "")
        return any(ch.isdigit() for ch in text) and (
            text.strip().lower() in self.allowed_numeric_manufacturers
        )


DEFAULT_ENGINE_CONFIG = EngineConfig()
