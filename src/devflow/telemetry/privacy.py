"""Telemetry privacy consent.

Users opt in per data type (keystrokes, focus time, build events, ...).
Consent is stored under the ``privacy`` key of .devflow/privacy.yaml and
enforced by ConsentFilteringSink: without consent on file, nothing is
recorded.
"""

import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml

from devflow.config.settings import RuntimeSettings, get_settings
from devflow.telemetry.constants import (
    DATA_TYPES,
    DEFAULT_RETENTION_DAYS,
    PRIVACY_CONFIG_KEY,
    USER_ID_PREFIX,
    VALID_RETENTION_DAYS,
)
from devflow.telemetry.exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_user_id() -> str:
    """Anonymous user id: ``user_<9 random base36 chars>_<base36 epoch ms>``."""
    random_part = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{USER_ID_PREFIX}{random_part}_{_to_base36(int(time.time() * 1000))}"


@dataclass
class PrivacyConsent:
    """A user's telemetry consent decision.

    Attributes:
        user_id: Anonymous identifier attached to exported telemetry.
        consent_given: Master switch; when False no data type is allowed.
        consent_timestamp: When the decision was recorded (UTC).
        data_types: Per data type opt-in flags.
        retention_period_days: How long the backend may keep the data.
    """

    user_id: str
    consent_given: bool
    consent_timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    data_types: dict[str, bool] = field(default_factory=dict)
    retention_period_days: int = DEFAULT_RETENTION_DAYS

    def __post_init__(self) -> None:
        unknown = set(self.data_types) - set(DATA_TYPES)
        if unknown:
            raise ValidationError(
                f"Unknown consent data type(s): {', '.join(sorted(unknown))}",
                field="data_types",
                value=sorted(unknown),
                expected=f"subset of {DATA_TYPES}",
            )
        if self.retention_period_days not in VALID_RETENTION_DAYS:
            raise ValidationError(
                f"Invalid retention period: {self.retention_period_days}",
                field="retention_period_days",
                value=self.retention_period_days,
                expected=f"one of {VALID_RETENTION_DAYS}",
            )

    def allows(self, data_type: str) -> bool:
        """Whether records of ``data_type`` may be collected."""
        return self.consent_given and self.data_types.get(data_type, False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrivacyConsent":
        timestamp = data.get("consent_timestamp")
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        elif not isinstance(timestamp, datetime):
            timestamp = datetime.now(UTC)
        data_types = data.get("data_types") or {}
        if not isinstance(data_types, dict):
            raise ValidationError(
                "data_types must be a mapping of data type to true/false",
                field="data_types",
                value=data_types,
                expected="mapping",
            )
        return cls(
            user_id=str(data.get("user_id") or generate_user_id()),
            consent_given=bool(data.get("consent_given", False)),
            consent_timestamp=timestamp,
            data_types={k: bool(v) for k, v in data_types.items()},
            retention_period_days=int(data.get("retention_period_days", DEFAULT_RETENTION_DAYS)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "consent_given": self.consent_given,
            "consent_timestamp": self.consent_timestamp.isoformat(),
            "data_types": {t: self.data_types.get(t, False) for t in DATA_TYPES},
            "retention_period_days": self.retention_period_days,
        }


def default_consent(user_id: str | None = None) -> PrivacyConsent:
    """Consent with every data type enabled and one year of retention."""
    return PrivacyConsent(
        user_id=user_id or generate_user_id(),
        consent_given=True,
        data_types=dict.fromkeys(DATA_TYPES, True),
        retention_period_days=DEFAULT_RETENTION_DAYS,
    )


def declined_consent(user_id: str | None = None) -> PrivacyConsent:
    """Recorded refusal: every data type off, no retention."""
    return PrivacyConsent(
        user_id=user_id or generate_user_id(),
        consent_given=False,
        data_types=dict.fromkeys(DATA_TYPES, False),
        retention_period_days=0,
    )


def load_consent(
    project_root: Path,
    settings: RuntimeSettings | None = None,
) -> PrivacyConsent | None:
    """Load stored consent, or None when the user has not decided yet.

    Raises:
        ConfigurationError: If the consent file exists but cannot be read
            or holds invalid values.
    """
    consent_file = (settings or get_settings()).privacy_path(project_root)
    if not consent_file.exists():
        return None

    try:
        with open(consent_file, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        section = data.get(PRIVACY_CONFIG_KEY) if isinstance(data, dict) else None
        if not isinstance(section, dict):
            raise ConfigurationError(
                "Consent file has no privacy section",
                config_file=consent_file,
                key=PRIVACY_CONFIG_KEY,
            )
        return PrivacyConsent.from_dict(section)
    except (yaml.YAMLError, OSError, ValueError, TypeError) as e:
        raise ConfigurationError(
            f"Failed to load consent: {e}",
            config_file=consent_file,
        ) from e


def save_consent(
    project_root: Path,
    consent: PrivacyConsent,
    settings: RuntimeSettings | None = None,
) -> Path:
    """Persist consent. Returns the consent file path."""
    consent_file = (settings or get_settings()).privacy_path(project_root)
    consent_file.parent.mkdir(parents=True, exist_ok=True)
    with open(consent_file, "w", encoding="utf-8") as f:
        yaml.safe_dump({PRIVACY_CONFIG_KEY: consent.to_dict()}, f, sort_keys=False)
    logger.info(
        f"Saved telemetry consent (given={consent.consent_given}) to {consent_file}"
    )
    return consent_file
