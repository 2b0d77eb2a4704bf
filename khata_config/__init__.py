"""
khata_config -- single public entrypoint for shop configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``. No other component reads configuration
    files or environment variables directly.

Architecture position:
    Configuration -- sits above ``khata_kernel``. The kernel MUST NEVER
    import from ``khata_config``; ``khata_config.bridges`` translates a
    KhataConfig into kernel objects.

Failure modes:
    - ``FileNotFoundError`` -- the configured file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``KeyError`` / ``ValueError`` -- missing or invalid keys.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``KHATA_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying bills issued afterwards to the configuration that
    governed their serial prefix.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from khata_config.loader import load_config
from khata_config.schema import KhataConfig

_logger = logging.getLogger("khata_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "khata.yaml"
CONFIG_ENV_VAR = "KHATA_CONFIG"


def get_active_config(config_path: Path | str | None = None) -> KhataConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: ``config_path``, then the ``KHATA_CONFIG``
    environment variable, then the packaged defaults.
    """
    path = Path(config_path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    config = load_config(path)

    _logger.info(
        "KHATA_CONFIG_TRACE",
        extra={
            "trace_type": "KHATA_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "config_path": str(path),
            "serial_prefix": config.billing.serial_prefix,
            "demo_data": config.demo_data,
        },
    )
    return config


__all__ = ["DEFAULT_CONFIG_PATH", "KhataConfig", "get_active_config"]
