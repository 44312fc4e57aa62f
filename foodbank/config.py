"""TOML configuration loader for foodbank ingestion."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class OCRConfig:
    enabled: bool = True
    segment_height: int = 4000
    segment_overlap: int = 200
    long_image_ratio: float = 3.0
    dedup_window: int = 10
    language: str = "eng"
    tesseract_cmd: str = ""


@dataclass
class ClaudeConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class GeminiConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class OpenAIConfig:
    api_key: str = ""
    model: str = "gpt-4o"


@dataclass
class LLMConfig:
    provider: str = "claude"
    max_tokens: int = 1024
    vision_max_tokens: int = 4096
    filter_baby_food: bool = False
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)


@dataclass
class MatchingConfig:
    threshold: float = 0.6
    use_remote: bool = False
    remote_min_confidence: float = 0.7


@dataclass
class IngestConfig:
    ocr: OCRConfig = field(default_factory=OCRConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)


def load_config(path: str | Path | None = None) -> IngestConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    ocr = raw.get("ocr", {})
    llm = raw.get("llm", {})
    mat = raw.get("matching", {})

    claude_cfg = llm.get("claude", {})
    gemini_cfg = llm.get("gemini", {})
    openai_cfg = llm.get("openai", {})

    # Resolve API keys: config file → environment variable
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )
    openai_api_key = openai_cfg.get("api_key", "") or os.environ.get(
        "OPENAI_API_KEY", ""
    )

    return IngestConfig(
        ocr=OCRConfig(
            enabled=ocr.get("enabled", True),
            segment_height=ocr.get("segment_height", 4000),
            segment_overlap=ocr.get("segment_overlap", 200),
            long_image_ratio=ocr.get("long_image_ratio", 3.0),
            dedup_window=ocr.get("dedup_window", 10),
            language=ocr.get("language", "eng"),
            tesseract_cmd=ocr.get("tesseract_cmd", ""),
        ),
        llm=LLMConfig(
            provider=llm.get("provider", "claude"),
            max_tokens=llm.get("max_tokens", 1024),
            vision_max_tokens=llm.get("vision_max_tokens", 4096),
            filter_baby_food=llm.get("filter_baby_food", False),
            claude=ClaudeConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
            gemini=GeminiConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
            openai=OpenAIConfig(
                api_key=openai_api_key,
                model=openai_cfg.get("model", "gpt-4o"),
            ),
        ),
        matching=MatchingConfig(
            threshold=mat.get("threshold", 0.6),
            use_remote=mat.get("use_remote", False),
            remote_min_confidence=mat.get("remote_min_confidence", 0.7),
        ),
    )
