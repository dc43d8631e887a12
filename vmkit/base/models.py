"""Value types shared by the catalog and lifecycle components."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
)


class Architecture(str, Enum):
    """CPU architectures a VM product can be offered for."""

    I32 = "I32"
    I64 = "I64"
    SPARC = "SPARC"
    POWER = "POWER"
    ARM32 = "ARM32"
    ARM64 = "ARM64"


class VmState(str, Enum):
    """Lifecycle state of a VM as last observed on the backend."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"
    REBOOTING = "REBOOTING"
    TERMINATED = "TERMINATED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> VmState:
        """Map a backend status string (``running``, ``shutting-down`` ...) to a state.

        Unrecognised or empty values map to :attr:`UNKNOWN`.
        """
        if not value:
            return cls.UNKNOWN
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


class StorageUnit(str, Enum):
    MB = "MB"
    GB = "GB"


_MB_PER_UNIT = {StorageUnit.MB: 1, StorageUnit.GB: 1024}


class StorageSize(BaseModel):
    """An amount of storage in a given unit (e.g. ``512 MB``)."""

    model_config = ConfigDict(frozen=True)

    quantity: NonNegativeInt
    unit: StorageUnit

    def convert_to(self, unit: StorageUnit) -> StorageSize:
        """Return the same amount expressed in *unit*, truncated to whole units."""
        megabytes = self.quantity * _MB_PER_UNIT[self.unit]
        return StorageSize(quantity=megabytes // _MB_PER_UNIT[unit], unit=unit)

    def __str__(self) -> str:
        return f"{self.quantity} {self.unit.value}"


class ProductDefinition(BaseModel):
    """A VM product (tier / machine type) offered by a cloud.

    Instances are immutable. Identity is :attr:`product_id`: two definitions
    with the same identifier compare equal regardless of their other fields.
    """

    model_config = ConfigDict(frozen=True)

    product_id: str = Field(min_length=1)
    name: str
    description: str
    cpu_count: PositiveInt = 1
    root_volume_size: StorageSize = StorageSize(quantity=1, unit=StorageUnit.GB)
    ram_size: StorageSize = StorageSize(quantity=512, unit=StorageUnit.MB)
    architectures: frozenset[Architecture] = Field(min_length=1)
    standard_hourly_rate: NonNegativeFloat | None = None
    excluded_regions: frozenset[str] = frozenset()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ProductDefinition):
            return NotImplemented
        return self.product_id == other.product_id

    def __hash__(self) -> int:
        return hash(self.product_id)


class VmHandle(BaseModel):
    """Backend-assigned VM identifier plus its last observed state."""

    model_config = ConfigDict(frozen=True)

    vm_id: str
    state: VmState = VmState.UNKNOWN


__all__ = [
    "Architecture",
    "VmState",
    "StorageUnit",
    "StorageSize",
    "ProductDefinition",
    "VmHandle",
]
