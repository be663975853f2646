"""
Carrier code catalog.

Read-only lookup from carrier name to CarrierProfile. A catalog is built once
per operator session, either from the built-in reference list or from the
backend listing merged with the built-in templates.
"""

from collections.abc import Iterable, Iterator

from call_forwarding.carriers.constants import CATALOG_VERSION
from call_forwarding.carriers.data import CARRIERS
from call_forwarding.carriers.schemas import CarrierProfile, RemoteCarrierEntry
from call_forwarding.utils.logger import logger


def _key(name: str) -> str:
    return " ".join(name.split()).casefold()


class CarrierCatalog:
    """Immutable mapping of carrier name to profile, in display order."""

    def __init__(self, profiles: Iterable[CarrierProfile], version: str = CATALOG_VERSION):
        self.version = version
        self._profiles: dict[str, CarrierProfile] = {}
        for profile in profiles:
            key = _key(profile.name)
            if key in self._profiles:
                logger.warning("Duplicate carrier in catalog", carrier=profile.name)
                continue
            self._profiles[key] = profile

    @classmethod
    def builtin(cls) -> "CarrierCatalog":
        """Catalog built from the packaged reference list."""
        return cls(CarrierProfile(**entry) for entry in CARRIERS)

    @classmethod
    def from_remote(
        cls, entries: Iterable[RemoteCarrierEntry], version: str | None = None
    ) -> "CarrierCatalog":
        """
        Build a catalog from the backend listing.

        The backend owns names, families and notes. Dial-code templates come
        from the built-in entry with the same name, or the family defaults
        for carriers the packaged list does not know.
        """
        known = cls.builtin()
        profiles = []
        for entry in entries:
            reference = known.lookup(entry.name)
            templates = {}
            app_instructions = None
            if reference is not None and reference.family == entry.family:
                templates = dict(reference.templates)
                app_instructions = reference.app_instructions
            profiles.append(
                CarrierProfile(
                    name=entry.name,
                    family=entry.family,
                    supports_conditional=entry.supports_conditional,
                    notes=entry.notes if entry.notes is not None else (
                        reference.notes if reference else None
                    ),
                    app_instructions=app_instructions,
                    templates=templates,
                )
            )
        return cls(profiles, version=version or f"remote+{CATALOG_VERSION}")

    def lookup(self, carrier_name: str | None) -> CarrierProfile | None:
        """Return the profile for a carrier, or None while selection is pending."""
        if not carrier_name or not carrier_name.strip():
            return None
        return self._profiles.get(_key(carrier_name))

    def names(self) -> list[str]:
        return [profile.name for profile in self._profiles.values()]

    def profiles(self) -> list[CarrierProfile]:
        return list(self._profiles.values())

    def __contains__(self, carrier_name: object) -> bool:
        return isinstance(carrier_name, str) and self.lookup(carrier_name) is not None

    def __iter__(self) -> Iterator[CarrierProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)
