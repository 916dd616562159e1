"""Shop settings: reasoning provider credentials and analysis feature flags."""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .reasoning import DEFAULT_TIMEOUT, Provider, ReasoningConfig

ENV_PROVIDER = "MOTOMAINT_AI_PROVIDER"
ENV_API_KEY = "MOTOMAINT_AI_API_KEY"
ENV_MODEL = "MOTOMAINT_AI_MODEL"


class Settings:
    """
    Explicit configuration handed to the analyzers.

    Both feature flags default to False: reasoning is never used unless the
    settings file turns it on.
    """

    def __init__(
        self,
        reasoning: Optional[ReasoningConfig] = None,
        analysis_enabled: bool = False,
        predictive_alerts: bool = False,
    ):
        self.reasoning = reasoning or ReasoningConfig()
        self.analysis_enabled = analysis_enabled
        self.predictive_alerts = predictive_alerts


def _as_bool(value: Any) -> bool:
    """Only an explicit true value enables a flag."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return False


def settings_from_dict(data: Optional[Dict[str, Any]], environ=None) -> Settings:
    environ = os.environ if environ is None else environ
    reasoning = (data or {}).get("reasoning") or {}

    provider = environ.get(ENV_PROVIDER) or reasoning.get("provider") or "none"
    api_key = environ.get(ENV_API_KEY) or reasoning.get("apiKey") or ""
    model = environ.get(ENV_MODEL) or reasoning.get("model")
    timeout = float(reasoning.get("timeout") or DEFAULT_TIMEOUT)

    return Settings(
        reasoning=ReasoningConfig(Provider(str(provider).lower()), api_key, model, timeout),
        analysis_enabled=_as_bool(reasoning.get("analysisEnabled", False)),
        predictive_alerts=_as_bool(reasoning.get("predictiveAlerts", False)),
    )


def load_settings(filename: Optional[Union[str, Path]] = None, environ=None) -> Settings:
    """
    Load settings from YAML, with environment overrides.

    A missing filename (or file) yields the defaults: no reasoning provider.
    """
    data = None
    if filename is not None and Path(filename).exists():
        with open(filename) as fp:
            data = yaml.safe_load(fp)
    return settings_from_dict(data, environ)
