"""
Carrier code catalog.

Static reference data mapping each supported carrier to its dial-code
grammar for conditional (no-answer) and unconditional forwarding.
"""

from call_forwarding.carriers.catalog import CarrierCatalog
from call_forwarding.carriers.constants import CATALOG_VERSION, CarrierFamily, CodeTemplate
from call_forwarding.carriers.schemas import CarrierProfile, RemoteCarrierEntry

__all__ = [
    "CATALOG_VERSION",
    "CarrierCatalog",
    "CarrierFamily",
    "CarrierProfile",
    "CodeTemplate",
    "RemoteCarrierEntry",
]
