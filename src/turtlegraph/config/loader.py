from __future__ import annotations

from typing import Any, Mapping, Optional

from dynaconf import Dynaconf
from dynaconf.utils.parse_conf import boolean_fix, parse_conf_data

from turtlegraph.config.constants import DEFAULTS
from turtlegraph.config.settings import EmbeddingConfig, StoreConfig


def build_settings(**overrides: Any) -> Dynaconf:
    """
    Settings object reading ``TURTLEGRAPH_*`` environment variables
    (and a ``.env`` file) on top of the packaged defaults.
    """
    settings = Dynaconf(
        envvar_prefix="TURTLEGRAPH",
        load_dotenv=True,
        settings_files=[],
    )
    for key, value in DEFAULTS.items():
        # environment wins over packaged defaults
        if settings.get(key) is None:
            settings.set(key, value)
    for key, value in overrides.items():
        settings.set(key.upper(), value)
    return settings


def _parse(value: Any) -> Any:
    # same casting dynaconf applies to environment variables
    if isinstance(value, str):
        return parse_conf_data(boolean_fix(value), tomlfy=True)
    return value


def _flag(settings: Any, key: str) -> bool:
    value = settings.get(key)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean, got {value!r}")
    return value


def load_config(settings: Optional[Mapping[str, Any] | Dynaconf] = None) -> StoreConfig:
    if settings is None:
        settings = build_settings()
    elif isinstance(settings, Mapping):
        settings = {**DEFAULTS, **{k.upper(): _parse(v) for k, v in settings.items()}}

    return StoreConfig(
        embed_on_create=_flag(settings, "EMBED_ON_CREATE"),
        embedding_failure_policy=settings.get("EMBEDDING_FAILURE_POLICY"),
        soft_link_threshold=float(settings.get("SOFT_LINK_THRESHOLD")),
        embedding=EmbeddingConfig(
            backend=settings.get("EMBEDDING_BACKEND"),
            model_name=settings.get("EMBEDDING_MODEL"),
            device=settings.get("EMBEDDING_DEVICE"),
            dimension=int(settings.get("EMBEDDING_DIMENSION")),
            normalize=_flag(settings, "EMBEDDING_NORMALIZE"),
        ),
    )
