"""Teacher-editable grade thresholds."""

import logging
from typing import Optional, Union

from gradebook.errors import InvalidBand
from gradebook.models import THRESHOLD_BANDS, Band, Thresholds
from gradebook.parsers import parse_number

logger = logging.getLogger(__name__)

_FIELDS = {
    Band.A_PLUS: "a_plus",
    Band.B_PLUS: "b_plus",
    Band.C_PLUS: "c_plus",
}


def resolve_band(band: Union[Band, str]) -> Band:
    """Map 'APlus' / 'BPlus' / 'CPlus' (or a Band) to a settable Band."""
    try:
        resolved = Band(band)
    except ValueError:
        resolved = None
    if resolved not in THRESHOLD_BANDS:
        raise InvalidBand(
            f"Unknown band '{band}'. Expected one of: "
            + ", ".join(b.value for b in THRESHOLD_BANDS)
        )
    return resolved


class ThresholdRegistry:
    """
    Owns the A+/B+/C+ cut-offs for a teacher session.

    Every reader is handed the registry explicitly; writes go through
    ``set`` so a bad value never replaces a good one.
    """

    def __init__(self, initial: Optional[Thresholds] = None):
        self._thresholds = (initial or Thresholds()).model_copy()

    def get(self) -> Thresholds:
        return self._thresholds.model_copy()

    def set(self, band: Union[Band, str], value: str) -> Thresholds:
        """
        Parse and store a new cut-off for one band.

        Args:
            band: 'APlus', 'BPlus' or 'CPlus'
            value: Free-text number as entered

        Returns:
            The updated thresholds

        Raises:
            InvalidBand: If band is not settable
            InvalidNumber: If value is not a finite number; prior value kept
        """
        resolved = resolve_band(band)
        number = parse_number(value, field=f"{resolved.value} threshold")

        self._thresholds = self._thresholds.model_copy(
            update={_FIELDS[resolved]: number}
        )
        logger.info("Threshold %s set to %s", resolved.value, number)
        return self.get()
