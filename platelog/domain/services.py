"""
Domain services for plate normalization and matching.

These services contain pure business logic with no infrastructure
dependencies. They can be easily unit tested.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import ClassVar

from platelog.domain.models import VehicleWithOwner


@dataclass
class PlateNormalizer:
    """
    Normalizes plate text for storage and comparison.

    Removes every whitespace and hyphen character. All other characters,
    including Thai consonants, are kept as-is, so the operation is
    idempotent.

    Example:
        >>> PlateNormalizer().normalize("1 ก ข-1234")
        '1กข1234'
    """

    STRIP_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"[\s\-]+")

    def normalize(self, text: str | None) -> str:
        """
        Normalize raw plate text.

        Args:
            text: Plate as typed or returned by the recognizer.

        Returns:
            str: Plate without whitespace or dashes ("" for empty input).
        """
        if not text:
            return ""
        return self.STRIP_PATTERN.sub("", text)


_default_normalizer = PlateNormalizer()


def normalize_plate(text: str | None) -> str:
    """Module-level shortcut for ``PlateNormalizer().normalize``."""
    return _default_normalizer.normalize(text)


class PlateMatcher:
    """
    Resolves a recognized plate against the registered vehicles.

    Vehicles are considered in the order given and the first one that
    satisfies either rule wins:

    1. the normalized query equals the normalized stored plate, or
    2. the normalized query contains the normalized stored plate and the
       stored plate is longer than ``MIN_CONTAINED_LENGTH`` characters.

    Rule 2 recovers the plate when the recognizer runs the province name
    into it ("5กฉ191กรุงเทพ"). Containment only goes one way: a stored
    plate longer than the query never matches through rule 2.

    Exact hits are found through an index keyed by normalized plate. The
    containment scan then only has to look at vehicles ordered before
    the exact hit, which gives the same answer as checking both rules
    vehicle by vehicle.

    Example:
        >>> matcher = PlateMatcher(vehicles)
        >>> matcher.match("1 กข 1234")
        VehicleWithOwner(...)
    """

    MIN_CONTAINED_LENGTH: ClassVar[int] = 3

    def __init__(
        self,
        vehicles: Sequence[VehicleWithOwner],
        normalizer: PlateNormalizer | None = None,
    ):
        """
        Build the matcher over a snapshot of vehicles.

        Args:
            vehicles: Registered vehicles with owners, in priority order.
            normalizer: Optional custom normalizer.
        """
        self._normalizer = normalizer or _default_normalizer
        self._vehicles = list(vehicles)
        self._plates = [
            self._normalizer.normalize(v.vehicle.license_plate) for v in self._vehicles
        ]

        # First position of each plate; later duplicates can never win
        self._index: dict[str, int] = {}
        for position, plate in enumerate(self._plates):
            self._index.setdefault(plate, position)

    def __len__(self) -> int:
        return len(self._vehicles)

    def match(self, query: str | None) -> VehicleWithOwner | None:
        """
        Find the vehicle a recognized plate belongs to.

        Args:
            query: Plate text, spaced or unspaced.

        Returns:
            VehicleWithOwner: First qualifying vehicle, or None.
        """
        normalized = self._normalizer.normalize(query)
        if not normalized:
            return None

        exact_position = self._index.get(normalized)
        stop = len(self._plates) if exact_position is None else exact_position

        for position in range(stop):
            if self._contains(normalized, self._plates[position]):
                return self._vehicles[position]

        if exact_position is not None:
            return self._vehicles[exact_position]

        return None

    def _contains(self, query: str, stored: str) -> bool:
        return len(stored) > self.MIN_CONTAINED_LENGTH and stored in query


def find_vehicle_by_plate(
    query: str | None,
    vehicles: Sequence[VehicleWithOwner],
) -> VehicleWithOwner | None:
    """
    Match a plate against ``vehicles`` (see ``PlateMatcher``).

    An empty query returns None without looking at the collection.
    """
    if not normalize_plate(query):
        return None
    return PlateMatcher(vehicles).match(query)
