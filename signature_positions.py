"""
Where the PDF renderer stamps the client's signature, per form type.

Coordinates are PDF pixel space. Unknown form types use DEFAULT_POSITION.
"""

import copy
import logging
from typing import Dict, Optional

from schemas import SignaturePosition

logger = logging.getLogger(__name__)

DEFAULT_OPACITY = 0.7

DEFAULT_POSITION = SignaturePosition(x=400, y=100, width=200, height=60, opacity=DEFAULT_OPACITY)

_INITIAL_POSITIONS: Dict[str, SignaturePosition] = {
    "absa-form": SignaturePosition(x=74, y=373, width=200, height=60, opacity=0.7),
    "clearance-certificate-form": SignaturePosition(x=87, y=575, width=200, height=60, opacity=0.7),
    "sahl-certificate-form": SignaturePosition(x=71, y=586, width=200, height=60, opacity=0.7),
    "discovery-form": SignaturePosition(x=380, y=110, width=200, height=60, opacity=0.7),
    "liability-form": SignaturePosition(x=360, y=580, width=200, height=60, opacity=0.7),
    "noncompliance-form": SignaturePosition(x=300, y=700, width=200, height=60, opacity=0.7),
    "material-list-form": SignaturePosition(x=320, y=750, width=200, height=60, opacity=0.7),
}


class SignaturePlacements:
    """Mutable form-type -> rectangle table, one per process."""

    def __init__(self, positions: Optional[Dict[str, SignaturePosition]] = None):
        source = _INITIAL_POSITIONS if positions is None else positions
        self._positions = copy.deepcopy(source)

    def all(self) -> Dict[str, SignaturePosition]:
        return dict(self._positions)

    def get(self, form_type: str) -> SignaturePosition:
        return self._positions.get(form_type, DEFAULT_POSITION)

    def update(self, form_type: str, position: SignaturePosition) -> SignaturePosition:
        opacity = position.opacity if position.opacity is not None else DEFAULT_OPACITY
        stored = position.model_copy(update={"opacity": opacity})
        self._positions[form_type] = stored
        logger.info("Signature position for %s set to %s", form_type, stored.model_dump())
        return stored
