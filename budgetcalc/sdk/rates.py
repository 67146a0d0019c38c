"""Tax schedule document loading.

One YAML document per filing status lives in budgetcalc/data/. A custom
directory with the same file names can be configured with the
'tax_rates_dir' setting (see config.py).
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

from .taxes import TaxRatesFile

logger = logging.getLogger(__name__)


FILING_STATUSES = ("single", "married")

RATES_FILENAMES = {
    "single": "tax_rates_single.yaml",
    "married": "tax_rates_joint.yaml",
}

DEFAULT_JURISDICTION = "New Jersey"
LAST_RESORT_JURISDICTION = "Alaska"


class TaxRatesNotFoundError(Exception):
    """Raised when no tax schedule exists for a filing status."""
    pass


def get_bundled_rates_dir() -> Path:
    """Directory of the tax schedules shipped with the package."""
    return Path(__file__).parent.parent / "data"


def get_tax_rates_dir() -> Path:
    """Tax schedule directory: 'tax_rates_dir' setting, else bundled data."""
    from .config import get_setting

    custom = get_setting("tax_rates_dir")
    if custom:
        return Path(custom).expanduser()
    return get_bundled_rates_dir()


def get_tax_rates_path(filing_status: str, rates_dir: Optional[Path] = None) -> Path:
    """Path to the tax schedule for a filing status.

    Raises:
        TaxRatesNotFoundError: If the filing status is unknown
    """
    filename = RATES_FILENAMES.get(filing_status)
    if filename is None:
        raise TaxRatesNotFoundError(
            f"Unknown filing status '{filing_status}'. "
            f"Expected one of: {', '.join(FILING_STATUSES)}"
        )
    return (rates_dir or get_tax_rates_dir()) / filename


def load_tax_rates(filing_status: str, rates_dir: Optional[Path] = None) -> TaxRatesFile:
    """Load and validate the tax schedule for a filing status.

    Args:
        filing_status: 'single' or 'married'
        rates_dir: Optional directory override (defaults to get_tax_rates_dir())

    Returns:
        Validated TaxRatesFile

    Raises:
        TaxRatesNotFoundError: If the filing status is unknown or the file is missing
        pydantic.ValidationError: If the document is malformed
    """
    rates_file = get_tax_rates_path(filing_status, rates_dir)
    if not rates_file.exists():
        raise TaxRatesNotFoundError(f"Tax rates file not found for {filing_status}: {rates_file}")

    with open(rates_file, "r") as f:
        data = yaml.safe_load(f) or {}

    logger.debug(f"loaded tax rates: {rates_file} ({len(data.get('states', {}))} states)")
    return TaxRatesFile.model_validate(data)


def list_jurisdictions(rates: TaxRatesFile) -> list[str]:
    """Sorted jurisdiction names in a tax schedule."""
    return rates.jurisdictions


def resolve_jurisdiction(rates: TaxRatesFile, requested: Optional[str] = None) -> str:
    """Pick the jurisdiction to derive with.

    Returns the requested jurisdiction when the schedule knows it. Otherwise
    falls back to New Jersey, then the first jurisdiction alphabetically,
    then Alaska for an empty schedule.
    """
    jurisdictions = rates.jurisdictions
    if requested and requested in rates.states:
        return requested

    if DEFAULT_JURISDICTION in rates.states:
        fallback = DEFAULT_JURISDICTION
    elif jurisdictions:
        fallback = jurisdictions[0]
    else:
        fallback = LAST_RESORT_JURISDICTION

    if requested:
        logger.warning(f"Unknown jurisdiction '{requested}', using {fallback}")
    return fallback
