"""
Risk Configuration

Flat, bounded risk parameters plus the fusion weights used by the
decision combiner. Validated at the boundary of every evaluation.
"""

from dataclasses import MISSING, dataclass, field, fields, asdict, replace
from typing import List, Optional, Tuple
import hashlib
import json
import logging
import os
import re

from tradesense.decision.config import FusionConfig
from tradesense.risk_manager.exceptions import ConfigValidationError

LOG = logging.getLogger(__name__)

# (field, lower bound exclusive, upper bound inclusive)
BOUNDED_FIELDS = (
    ('max_position_size', 0.0, 0.10),
    ('max_daily_loss', 0.0, 0.05),
    ('max_total_exposure', 0.0, 1.0),
    ('stop_loss_percentage', 0.0, 0.10),
)

# numeric fields that may be None
OPTIONAL_FIELDS = ('max_trade_value',)


def _snake_case(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


@dataclass
class RiskConfig:
    """
    Risk configuration.

    Bounds:
        max_position_size    (0, 0.10]
        max_daily_loss       (0, 0.05]
        max_total_exposure   (0, 1.00]
        stop_loss_percentage (0, 0.10]
        fusion weights sum to 1 ± weight_tolerance
    """

    # ========================================
    # POSITION & LOSS LIMITS
    # ========================================

    max_position_size: float = 0.02  # fraction of portfolio per asset
    max_daily_loss: float = 0.01
    max_total_exposure: float = 0.80
    stop_loss_percentage: float = 0.02
    take_profit_percentage: float = 0.04
    max_drawdown: float = 0.10
    max_sector_exposure: float = 0.30

    # ========================================
    # TRADE VALUE LIMITS
    # ========================================

    min_trade_value: float = 10.0
    max_trade_value: Optional[float] = 1000.0  # None -> 10% of portfolio
    min_account_value: float = 1000.0  # floor for exposure denominators
    quote_currencies: List[str] = field(default_factory=lambda: ['USD', 'USDT'])

    # ========================================
    # KELLY CRITERION
    # ========================================

    use_kelly_criterion: bool = False
    kelly_cap: float = 0.05

    # ========================================
    # SIGNAL QUALITY
    # ========================================

    min_signal_quality: float = 0.6

    # ========================================
    # CORRELATION
    # ========================================

    correlation_threshold: float = 0.7  # |rho| above this counts as correlated
    correlation_high_exposure: float = 0.30
    correlation_medium_exposure: float = 0.15

    # ========================================
    # MARKET CONDITIONS
    # ========================================

    market_volatility_medium: float = 0.25
    market_volatility_high: float = 0.40
    min_liquidity_score: float = 0.5
    default_asset_volatility: float = 0.3

    # ========================================
    # FUSION WEIGHTS
    # ========================================

    technical_weight: float = 0.5
    sentiment_weight: float = 0.3
    prediction_weight: float = 0.2
    weight_tolerance: float = 0.01

    # ========================================
    # SYMBOL FILTERS
    # ========================================

    allowed_symbols: List[str] = field(default_factory=list)  # empty -> all allowed
    blocked_symbols: List[str] = field(default_factory=list)

    config_version: str = "1.0.0"

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def type_errors(self) -> List[str]:
        """Fields whose value does not have the type of its default"""
        errors = []
        for f in fields(self):
            value = getattr(self, f.name)
            default = f.default_factory() if f.default_factory is not MISSING else f.default
            if isinstance(default, bool):
                if not isinstance(value, bool):
                    errors.append(f"{f.name} must be a boolean, got {value!r}")
            elif isinstance(default, (int, float)):
                if value is None and f.name in OPTIONAL_FIELDS:
                    continue
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    errors.append(f"{f.name} must be numeric, got {value!r}")
            elif isinstance(default, list):
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    errors.append(f"{f.name} must be a list of strings, got {value!r}")
        return errors

    def validate(self) -> List[str]:
        """Return every violated constraint (empty when valid)"""
        # range checks assume numeric values
        errors = self.type_errors()
        if errors:
            return errors

        for name, low, high in BOUNDED_FIELDS:
            value = getattr(self, name)
            if not low < value <= high:
                errors.append(f"{name} must be in ({low}, {high}], got {value}")

        total = self.technical_weight + self.sentiment_weight + self.prediction_weight
        for name in ('technical_weight', 'sentiment_weight', 'prediction_weight'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name} must be in [0, 1], got {value}")
        if abs(total - 1.0) > self.weight_tolerance:
            errors.append(
                f"fusion weights must sum to 1.0 (±{self.weight_tolerance}), got {total:.4f}"
            )

        if not 0 < self.kelly_cap <= 1:
            errors.append(f"kelly_cap must be in (0, 1], got {self.kelly_cap}")
        if not 0 < self.max_sector_exposure <= 1:
            errors.append(f"max_sector_exposure must be in (0, 1], got {self.max_sector_exposure}")
        if not 0 < self.max_drawdown <= 1:
            errors.append(f"max_drawdown must be in (0, 1], got {self.max_drawdown}")
        if self.min_trade_value < 0:
            errors.append(f"min_trade_value must be >= 0, got {self.min_trade_value}")
        if self.max_trade_value is not None and self.max_trade_value <= self.min_trade_value:
            errors.append(
                f"max_trade_value must exceed min_trade_value, got {self.max_trade_value} "
                f"<= {self.min_trade_value}"
            )
        if self.min_account_value <= 0:
            errors.append(f"min_account_value must be > 0, got {self.min_account_value}")
        if not 0 <= self.min_signal_quality <= 1:
            errors.append(f"min_signal_quality must be in [0, 1], got {self.min_signal_quality}")
        if not 0 < self.correlation_threshold <= 1:
            errors.append(f"correlation_threshold must be in (0, 1], got {self.correlation_threshold}")
        if not 0 <= self.correlation_medium_exposure <= self.correlation_high_exposure:
            errors.append(
                f"correlation exposure bands must satisfy 0 <= medium <= high, got "
                f"{self.correlation_medium_exposure}, {self.correlation_high_exposure}"
            )
        if not 0 <= self.market_volatility_medium <= self.market_volatility_high:
            errors.append(
                f"market volatility bands must satisfy 0 <= medium <= high, got "
                f"{self.market_volatility_medium}, {self.market_volatility_high}"
            )
        overlap = sorted(set(self.allowed_symbols) & set(self.blocked_symbols))
        if overlap:
            errors.append(f"symbols both allowed and blocked: {overlap}")

        return errors

    def ensure_valid(self) -> 'RiskConfig':
        """Raise ConfigValidationError listing every violation"""
        errors = self.validate()
        if errors:
            raise ConfigValidationError(errors)
        return self

    def clamped(self) -> Tuple['RiskConfig', List[str]]:
        """
        Copy with bounded fields clamped into range.

        Every adjustment is returned and logged as a warning; evaluation
        never calls this implicitly.
        """
        changes = {}
        warnings = []
        for name, low, high in BOUNDED_FIELDS:
            value = getattr(self, name)
            if value > high:
                changes[name] = high
            elif value <= low:
                changes[name] = min(high, 0.01)
            else:
                continue
            warnings.append(f"{name} clamped from {value} to {changes[name]}")

        for message in warnings:
            LOG.warning(message)
        return replace(self, **changes), warnings

    # ------------------------------------------------------------------
    # Derived configs
    # ------------------------------------------------------------------

    def fusion_config(self) -> FusionConfig:
        return FusionConfig(
            technical_weight=self.technical_weight,
            sentiment_weight=self.sentiment_weight,
            prediction_weight=self.prediction_weight,
            weight_tolerance=self.weight_tolerance,
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return asdict(self)

    def get_config_hash(self) -> str:
        """Deterministic hash of the configuration"""
        config_str = json.dumps(self.to_dict(), sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: dict) -> 'RiskConfig':
        """
        Build from a mapping; camelCase keys are accepted.

        Unknown keys raise ConfigValidationError.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        unknown = []
        for key, value in (data or {}).items():
            name = key if key in known else _snake_case(key)
            if name in known:
                kwargs[name] = value
            else:
                unknown.append(key)
        if unknown:
            raise ConfigValidationError([f"unknown risk setting: {k}" for k in sorted(unknown)])
        return cls(**kwargs)

    @classmethod
    def from_env(cls, prefix: str = "TRADESENSE_") -> 'RiskConfig':
        """
        Build from environment variables, e.g. TRADESENSE_MAX_POSITION_SIZE.

        List fields take comma-separated values.
        """
        defaults = cls()
        kwargs = {}
        for f in fields(cls):
            raw = os.environ.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            default = getattr(defaults, f.name)
            if isinstance(default, bool):
                kwargs[f.name] = raw.strip().lower() in ('1', 'true', 'yes', 'on')
            elif isinstance(default, list):
                kwargs[f.name] = [s.strip() for s in raw.split(',') if s.strip()]
            elif isinstance(default, (int, float)) or default is None:
                kwargs[f.name] = None if raw.strip().lower() in ('', 'none') else float(raw)
            else:
                kwargs[f.name] = raw
        return cls(**kwargs)
