"""
Gate Rules

Rules (evaluated in priority order):
- WallRejection (Priority 1): price within 2% of the call wall without
  confirming flow → cap 55
- FakePump (Priority 2): day change > 5% without confirming flow → cap 45
- ShortStorm (Priority 3): short-covering risk together with bearish
  structure → -10

Opt-in rules (registered only when named in ``gates.extra_gates``):
- DeadVolume (Priority 4): relative volume below 0.3 → cap 50
- ShortSqueezeReady (Priority 5): heavy short volume, high squeeze score,
  an up day and a volume spike together → +8
- TltFlight (Priority 6): long-bond proxy up more than 1% → -5

Flow confirms a move when net flow is positive, dark pool share >= 50% or
whale index >= 65. An absent flow field never confirms.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from alpha_engine.analytics.models import OptionsAnalytics
from alpha_engine.config.engine_config import GateConfig
from alpha_engine.evidence.models import Evidence
from alpha_engine.gates.models import GateEffect, GateResult


@dataclass(slots=True)
class GateContext:
    """Inputs available to every gate rule."""

    evidence: Evidence
    analytics: OptionsAnalytics


def flow_confirmed(evidence: Evidence, config: GateConfig) -> bool:
    flow = evidence.flow
    if flow.net_flow.present and flow.net_flow.value > 0:
        return True
    if flow.dark_pool_pct.present and flow.dark_pool_pct.value >= config.confirm_dark_pool_pct:
        return True
    if flow.whale_index.present and flow.whale_index.value >= config.confirm_whale_index:
        return True
    return False


class WallRejection:
    """
    Wall rejection gate (Priority 1).

    Price pressing into the largest call-OI strike above spot tends to stall
    unless real buying pushes through it.
    """

    priority = 1
    name = "WALL_REJECTION"

    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()

    def evaluate(self, context: GateContext) -> Optional[GateResult]:
        spot = context.evidence.spot
        wall = context.analytics.call_wall
        if spot is None or wall is None:
            return None

        distance_pct = abs(spot - wall) / spot * 100
        if distance_pct >= self.config.wall_proximity_pct:
            return None
        if flow_confirmed(context.evidence, self.config):
            logger.debug(f"{context.evidence.ticker}: call wall {wall} near but flow confirms")
            return None

        return GateResult(
            code=self.name,
            effect=GateEffect.CAP,
            applied_value=self.config.wall_cap,
            reason=f"Price {spot} within {distance_pct:.2f}% of call wall {wall} without confirming flow",
        )


class FakePump:
    """
    Fake pump gate (Priority 2).

    A large up day that dark pool / whale flow does not confirm is treated
    as unreliable. Blocking by default in the decision state machine.
    """

    priority = 2
    name = "FAKE_PUMP"

    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()

    def evaluate(self, context: GateContext) -> Optional[GateResult]:
        change = context.evidence.price.change_pct
        if not change.present or change.value <= self.config.fake_pump_change_pct:
            return None
        if flow_confirmed(context.evidence, self.config):
            return None

        return GateResult(
            code=self.name,
            effect=GateEffect.CAP,
            applied_value=self.config.fake_pump_cap,
            reason=f"Day change {change.value:+.2f}% without flow confirmation",
        )


class ShortStorm:
    """
    Short storm gate (Priority 3).

    Short-covering risk (heavy short volume or high squeeze score) on top of
    bearish options structure (negative GEX, put-heavy PCR or put-dominated
    OPI) makes the score less trustworthy. Flat penalty, not a cap.
    """

    priority = 3
    name = "SHORT_STORM"

    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()

    def _covering_risk(self, context: GateContext) -> bool:
        short_volume = context.evidence.flow.short_volume_pct
        if short_volume.present and short_volume.value >= self.config.short_volume_risk_pct:
            return True
        squeeze = context.analytics.squeeze
        return squeeze is not None and squeeze.score >= self.config.squeeze_risk_score

    def _bearish_structure(self, analytics: OptionsAnalytics) -> bool:
        if not analytics.has_chain:
            return False
        if analytics.gamma.net_gex < 0:
            return True
        if analytics.put_call_ratio is not None and analytics.put_call_ratio > self.config.bearish_pcr:
            return True
        return analytics.pressure.ratio < self.config.bearish_opi_ratio

    def evaluate(self, context: GateContext) -> Optional[GateResult]:
        if not (self._covering_risk(context) and self._bearish_structure(context.analytics)):
            return None

        return GateResult(
            code=self.name,
            effect=GateEffect.PENALTY,
            applied_value=self.config.short_storm_penalty,
            reason="Short-covering risk with bearish options structure",
        )


class DeadVolume:
    """
    Dead volume gate (Priority 4, opt-in).

    Almost no participation relative to normal volume means no one is
    interested in the setup, whatever the pillars say.
    """

    priority = 4
    name = "DEAD_VOLUME"

    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()

    def evaluate(self, context: GateContext) -> Optional[GateResult]:
        rel_vol = context.evidence.flow.relative_volume
        if not rel_vol.present or rel_vol.value >= self.config.dead_volume_rel_vol:
            return None

        return GateResult(
            code=self.name,
            effect=GateEffect.CAP,
            applied_value=self.config.dead_volume_cap,
            reason=f"Relative volume {rel_vol.value:.2f} below {self.config.dead_volume_rel_vol}",
        )


class ShortSqueezeReady:
    """
    Short squeeze ready gate (Priority 5, opt-in).

    The one bonus gate: shorts are crowded, the squeeze score is high and
    price is already rising on a volume spike.
    """

    priority = 5
    name = "SHORT_SQUEEZE_READY"

    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()

    def evaluate(self, context: GateContext) -> Optional[GateResult]:
        flow = context.evidence.flow
        change = context.evidence.price.change_pct
        squeeze = context.analytics.squeeze

        if not flow.short_volume_pct.present or flow.short_volume_pct.value < self.config.squeeze_ready_short_volume_pct:
            return None
        if squeeze is None or squeeze.score < self.config.squeeze_ready_score:
            return None
        if not change.present or change.value <= 0:
            return None
        if not flow.relative_volume.present or flow.relative_volume.value < self.config.squeeze_ready_rel_vol:
            return None

        return GateResult(
            code=self.name,
            effect=GateEffect.BONUS,
            applied_value=self.config.squeeze_ready_bonus,
            reason=(
                f"Short volume {flow.short_volume_pct.value:.1f}%, squeeze {squeeze.score}, "
                f"up {change.value:+.2f}% on {flow.relative_volume.value:.1f}x volume"
            ),
        )


class TltFlight:
    """
    Bond flight gate (Priority 6, opt-in).

    Money rotating into long bonds is a risk-off signal for equities.
    """

    priority = 6
    name = "TLT_FLIGHT"

    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()

    def evaluate(self, context: GateContext) -> Optional[GateResult]:
        rate_proxy = context.evidence.macro.rate_proxy_change_pct
        if not rate_proxy.present or rate_proxy.value <= self.config.tlt_flight_change_pct:
            return None

        return GateResult(
            code=self.name,
            effect=GateEffect.PENALTY,
            applied_value=self.config.tlt_flight_penalty,
            reason=f"Long-bond proxy {rate_proxy.value:+.2f}%, flight to safety",
        )


OPTIONAL_RULES = {
    DeadVolume.name: DeadVolume,
    ShortSqueezeReady.name: ShortSqueezeReady,
    TltFlight.name: TltFlight,
}
