"""Load settings.yaml into typed dataclasses. Validates scoring constants at startup."""

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

RUBRIC_FIELDS = ("clarity", "logic", "evidence", "relevance")

DEFAULT_WEIGHTS: dict[str, float] = {
    "clarity": 0.25,
    "logic": 0.30,
    "evidence": 0.25,
    "relevance": 0.20,
}

# Heuristic clamp bounds per rubric field, inclusive
DEFAULT_CLAMPS: dict[str, tuple[float, float]] = {
    "clarity": (5, 10),
    "logic": (4, 10),
    "evidence": (3, 10),
    "relevance": (5, 10),
}


@dataclass
class ModelConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    base_url: str | None = None


@dataclass
class ScoringConfig:
    weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    tie_threshold: float = 0.1
    clamps: dict[str, tuple[float, float]] = field(default_factory=lambda: dict(DEFAULT_CLAMPS))
    max_tokens: int = 2000
    temperature: float = 0.3   # low for consistent scoring


@dataclass
class PromptsConfig:
    judge: str


@dataclass
class DefaultsConfig:
    judge: str | None
    data_dir: Path
    output_dir: Path


@dataclass
class InboxConfig:
    dir: Path
    archive_dir: Path


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    models: dict[str, ModelConfig]
    prompts: PromptsConfig
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    inbox: InboxConfig = field(
        default_factory=lambda: InboxConfig(dir=Path("./inbox"), archive_dir=Path("./inbox/archive"))
    )
    available_providers: set[str] = field(default_factory=set)


def _load_scoring(raw: dict) -> ScoringConfig:
    """Build ScoringConfig from the optional `scoring` section.

    Raises ValueError if weights do not cover the rubric or do not sum to 1.0,
    if a clamp is not a [low, high] pair within [0, 10], or if tie_threshold
    is negative.
    """
    weights = dict(DEFAULT_WEIGHTS)
    weights.update({k: float(v) for k, v in raw.get("weights", {}).items()})
    unknown = set(weights) - set(RUBRIC_FIELDS)
    if unknown:
        raise ValueError(f"Unknown rubric weights: {', '.join(sorted(unknown))}")
    if not math.isclose(sum(weights.values()), 1.0, abs_tol=1e-9):
        raise ValueError(f"Scoring weights must sum to 1.0, got {sum(weights.values()):.4f}")

    clamps = dict(DEFAULT_CLAMPS)
    for name, bounds in raw.get("clamps", {}).items():
        if name not in RUBRIC_FIELDS:
            raise ValueError(f"Unknown clamp field: {name}")
        if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
            raise ValueError(f"Invalid clamp for {name}: expected [low, high], got {bounds!r}")
        try:
            low, high = float(bounds[0]), float(bounds[1])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid clamp for {name}: bounds must be numbers, got {bounds!r}") from None
        if not 0 <= low <= high <= 10:
            raise ValueError(f"Invalid clamp for {name}: [{low}, {high}]")
        clamps[name] = (low, high)

    tie_threshold = float(raw.get("tie_threshold", 0.1))
    if tie_threshold < 0:
        raise ValueError(f"tie_threshold must not be negative, got {tie_threshold}")

    return ScoringConfig(
        weights=weights,
        tie_threshold=tie_threshold,
        clamps=clamps,
        max_tokens=int(raw.get("max_tokens", 2000)),
        temperature=float(raw.get("temperature", 0.3)),
    )


def _check_judge_template(template: str) -> str:
    """Raise ValueError unless the judge prompt formats with its known placeholders."""
    try:
        template.format(topic="t", arguments="a", example_id="u1", participant_ids="u1, u2")
    except (AttributeError, KeyError, IndexError, ValueError) as exc:
        raise ValueError(f"Invalid judge prompt template: {exc!r}") from None
    return template


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError on bad
    scoring constants or a judge template that does not format. Logs which judge
    providers have an API key but does not raise: with no key at all the
    referee scores heuristically.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults_raw = raw["defaults"]
    judge_name = defaults_raw.get("judge")
    defaults = DefaultsConfig(
        judge=str(judge_name) if judge_name else None,
        data_dir=Path(defaults_raw["data_dir"]),
        output_dir=Path(defaults_raw["output_dir"]),
    )

    prompts = PromptsConfig(judge=_check_judge_template(raw["prompts"]["judge"]))
    scoring = _load_scoring(raw.get("scoring") or {})

    inbox_raw = raw.get("inbox") or {}
    inbox_dir = Path(inbox_raw.get("dir", "./inbox"))
    inbox = InboxConfig(
        dir=inbox_dir,
        archive_dir=Path(inbox_raw.get("archive_dir", inbox_dir / "archive")),
    )

    models: dict[str, ModelConfig] = {}
    available_providers: set[str] = set()

    for provider_name, model_raw in (raw.get("models") or {}).items():
        model_cfg = ModelConfig(
            name=provider_name,
            sdk=model_raw["sdk"],
            model=model_raw["model"],
            api_key_env=model_raw["api_key_env"],
            timeout_sec=int(model_raw["timeout_sec"]),
            base_url=model_raw.get("base_url"),
        )
        models[provider_name] = model_cfg

        api_key = os.environ.get(model_raw["api_key_env"], "").strip()
        if api_key:
            available_providers.add(provider_name)
            logger.info("Judge provider available: %s", provider_name)
        else:
            logger.info(
                "Judge provider skipped (no API key): %s — set %s in .env",
                provider_name,
                model_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        models=models,
        prompts=prompts,
        scoring=scoring,
        inbox=inbox,
        available_providers=available_providers,
    )
