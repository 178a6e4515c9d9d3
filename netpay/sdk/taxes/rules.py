"""Tax rules loading.

Rules come from a YAML file validated into TaxRules. The packaged
netpay/rules/default.yaml is always available; a user-supplied file that is
missing or malformed is reported and the packaged defaults are used instead,
so a bad rules file never stops a calculation.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import ValidationError

from .schemas import TaxRules

logger = logging.getLogger(__name__)


def _get_rules_dir() -> Path:
    """Get the packaged rules directory path."""
    package_root = Path(__file__).parent.parent.parent  # taxes -> sdk -> netpay
    return package_root / "rules"


DEFAULT_RULES_FILE = _get_rules_dir() / "default.yaml"


class TaxRulesError(Exception):
    """Raised when a rules file cannot be read or fails validation."""
    pass


def read_tax_rules(path: Union[str, Path]) -> TaxRules:
    """Read and validate a rules YAML file.

    Raises:
        TaxRulesError: If the file is missing, not YAML, or not valid rules
    """
    rules_file = Path(path)
    if not rules_file.exists():
        raise TaxRulesError(f"Tax rules file not found: {rules_file}")

    try:
        with open(rules_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise TaxRulesError(f"Cannot read tax rules {rules_file}: {e}") from e

    if not isinstance(data, dict):
        raise TaxRulesError(f"Tax rules {rules_file} must be a mapping, got {type(data).__name__}")

    try:
        return TaxRules.model_validate(data)
    except ValidationError as e:
        raise TaxRulesError(f"Invalid tax rules {rules_file}: {e}") from e


@lru_cache(maxsize=1)
def default_tax_rules() -> TaxRules:
    """Packaged default rules (cached)."""
    return read_tax_rules(DEFAULT_RULES_FILE)


def load_tax_rules(path: Optional[Union[str, Path]] = None) -> TaxRules:
    """Load rules from ``path``, falling back to the packaged defaults.

    Args:
        path: Optional user rules file. None means packaged defaults.

    Returns:
        Validated TaxRules
    """
    if path is None:
        return default_tax_rules()

    try:
        rules = read_tax_rules(path)
    except TaxRulesError as e:
        logger.error(f"{e}; using default tax rules")
        return default_tax_rules()

    logger.debug(f"loaded tax rules from {path}")
    return rules
