"""
Engine Configuration

Thresholds and runtime settings for the alpha engine.

Config location: config/engine.yaml

Schema:
- grades: score → letter grade cut-offs
- gates: WALL_REJECTION / FAKE_PUMP / SHORT_STORM triggers and effects, plus the
  opt-in DEAD_VOLUME / SHORT_SQUEEZE_READY / TLT_FLIGHT gates
- decisions: action thresholds, anti-churn and replacement settings
- retry: upstream fetch retry budget
- runtime: worker pool, result cache, logging

The default values are the business contract. Change them explicitly in
YAML rather than in code.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class GradeThresholds:
    """Minimum final score per letter grade (F below d)."""
    a: int = 70
    b: int = 55
    c: int = 40
    d: int = 25


OPTIONAL_GATES = ("DEAD_VOLUME", "SHORT_SQUEEZE_READY", "TLT_FLIGHT")


@dataclass
class GateConfig:
    """Gate triggers and effects."""
    wall_proximity_pct: float = 2.0
    wall_cap: int = 55
    fake_pump_change_pct: float = 5.0
    fake_pump_cap: int = 45
    short_storm_penalty: int = 10
    short_volume_risk_pct: float = 55.0
    squeeze_risk_score: int = 45
    bearish_pcr: float = 1.2
    bearish_opi_ratio: float = -20.0
    confirm_dark_pool_pct: float = 50.0
    confirm_whale_index: float = 65.0
    extra_gates: tuple = ()
    dead_volume_rel_vol: float = 0.3
    dead_volume_cap: int = 50
    squeeze_ready_short_volume_pct: float = 45.0
    squeeze_ready_score: int = 60
    squeeze_ready_rel_vol: float = 1.5
    squeeze_ready_bonus: int = 8
    tlt_flight_change_pct: float = 1.0
    tlt_flight_penalty: int = 5


@dataclass
class DecisionConfig:
    """Decision state machine and continuity booster settings."""
    enter_threshold: int = 65
    maintain_threshold: int = 55
    exit_floor: int = 40
    replace_margin: int = 8
    boost_band: int = 5
    max_boost: int = 5
    grb_premium: int = 5
    top_n: int = 3
    max_replacements_per_run: int = 1
    blocking_gates: tuple = ("FAKE_PUMP",)


@dataclass
class RetryConfig:
    """Upstream fetch retry budget."""
    max_attempts: int = 3
    base_delay: float = 0.2
    max_delay: float = 5.0
    jitter: float = 0.0
    attempt_timeout: Optional[float] = 10.0


@dataclass
class RuntimeConfig:
    """Batch execution, cache and logging."""
    max_workers: int = 8
    cache_ttl: float = 30.0
    log_level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class EngineConfig:
    """Complete engine configuration."""

    grades: GradeThresholds = field(default_factory=GradeThresholds)
    gates: GateConfig = field(default_factory=GateConfig)
    decisions: DecisionConfig = field(default_factory=DecisionConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "EngineConfig":
        """Create config from dictionary with nested dataclass instantiation."""
        grades = data.get("grades") or {}
        gates = dict(data.get("gates") or {})
        decisions = dict(data.get("decisions") or {})
        retry = data.get("retry") or {}
        runtime = data.get("runtime") or {}

        if "extra_gates" in gates:
            gates["extra_gates"] = tuple(gates["extra_gates"] or ())
        if "blocking_gates" in decisions:
            decisions["blocking_gates"] = tuple(decisions["blocking_gates"] or ())

        return cls(
            grades=GradeThresholds(**grades),
            gates=GateConfig(**gates),
            decisions=DecisionConfig(**decisions),
            retry=RetryConfig(**retry),
            runtime=RuntimeConfig(**runtime),
        )

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        # Grades must be strictly descending
        g = self.grades
        if not (100 >= g.a > g.b > g.c > g.d >= 0):
            errors.append(f"Grade thresholds must satisfy 100 >= a > b > c > d >= 0: {g}")

        # Gates
        if not (0 <= self.gates.fake_pump_cap <= 100):
            errors.append(f"fake_pump_cap must be 0-100: {self.gates.fake_pump_cap}")
        if not (0 <= self.gates.wall_cap <= 100):
            errors.append(f"wall_cap must be 0-100: {self.gates.wall_cap}")
        if self.gates.short_storm_penalty < 0:
            errors.append(f"short_storm_penalty must be >= 0: {self.gates.short_storm_penalty}")
        if self.gates.wall_proximity_pct <= 0:
            errors.append(f"wall_proximity_pct must be > 0: {self.gates.wall_proximity_pct}")
        unknown = [name for name in self.gates.extra_gates if name not in OPTIONAL_GATES]
        if unknown:
            errors.append(f"Unknown extra_gates {unknown}, choose from {list(OPTIONAL_GATES)}")
        if not (0 <= self.gates.dead_volume_cap <= 100):
            errors.append(f"dead_volume_cap must be 0-100: {self.gates.dead_volume_cap}")
        if self.gates.squeeze_ready_bonus < 0 or self.gates.tlt_flight_penalty < 0:
            errors.append("squeeze_ready_bonus and tlt_flight_penalty must be >= 0")

        # Decisions
        d = self.decisions
        if not (d.enter_threshold >= d.maintain_threshold > d.exit_floor >= 0):
            errors.append(
                "Decision thresholds must satisfy enter >= maintain > exit_floor >= 0: "
                f"{d.enter_threshold}/{d.maintain_threshold}/{d.exit_floor}"
            )
        if d.replace_margin <= 0:
            errors.append(f"replace_margin must be > 0: {d.replace_margin}")
        if d.max_boost < 0 or d.boost_band < 0:
            errors.append("max_boost and boost_band must be >= 0")
        if d.top_n < 1:
            errors.append(f"top_n must be >= 1: {d.top_n}")
        if d.max_replacements_per_run < 0:
            errors.append(f"max_replacements_per_run must be >= 0: {d.max_replacements_per_run}")

        # Retry
        if self.retry.max_attempts < 1:
            errors.append(f"retry.max_attempts must be >= 1: {self.retry.max_attempts}")
        if self.retry.base_delay < 0 or self.retry.max_delay < 0 or self.retry.jitter < 0:
            errors.append("retry delays must be >= 0")
        if self.retry.attempt_timeout is not None and self.retry.attempt_timeout <= 0:
            errors.append(f"retry.attempt_timeout must be > 0: {self.retry.attempt_timeout}")

        # Runtime
        if self.runtime.max_workers < 1:
            errors.append(f"max_workers must be >= 1: {self.runtime.max_workers}")
        if self.runtime.cache_ttl <= 0:
            errors.append(f"cache_ttl must be > 0: {self.runtime.cache_ttl}")
        if self.runtime.log_level.upper() not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Invalid log_level: {self.runtime.log_level}")

        return errors
