"""Centroid file loading.

The centroid file is a YAML document holding the operation mode and the
components to place::

    operation_mode: manual        # or "auto"
    components:
      - designation: R1
        footprint: "0805"
        value: 100
        x: 10.0
        y: 20.0
        theta: 0.0
        feeder: 2

Every failure is reported as a :class:`CentroidFileError` whose ``code``
identifies the cause, so the caller can exit with a distinct status.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from ..core.config import SystemDefaults
from ..core.exceptions import CentroidFileError, CentroidFileStatus
from .models import OperationMode, PlacementItem, PlacementQueue

logger = logging.getLogger(__name__)


class ComponentRecord(BaseModel):
    """One component entry as written in the centroid file"""

    designation: str
    footprint: str = ""
    value: float = 0.0
    x: float
    y: float
    theta: float = 0.0
    feeder: int = Field(..., ge=0, lt=SystemDefaults.NUMBER_OF_FEEDERS)

    @field_validator("footprint", mode="before")
    @classmethod
    def coerce_footprint(cls, v):
        # Footprints such as 0805 are read back from YAML as integers
        return str(v) if v is not None else ""

    def to_item(self) -> PlacementItem:
        return PlacementItem(
            designation=self.designation,
            footprint=self.footprint,
            value=self.value,
            x_target=self.x,
            y_target=self.y,
            theta_target=self.theta,
            feeder=self.feeder,
        )


class CentroidDocument(BaseModel):
    """Whole centroid file"""

    operation_mode: OperationMode = OperationMode.MANUAL
    components: List[ComponentRecord] = []

    @field_validator("operation_mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        # 0 = manual control, 1 = autonomous, as older centroid files encode it
        if isinstance(v, int) and not isinstance(v, bool) and v in (0, 1):
            return (OperationMode.MANUAL, OperationMode.AUTO)[v]
        if isinstance(v, str):
            v = v.strip().lower()
            return OperationMode.AUTO.value if v == "autonomous" else v
        return v


@dataclass(frozen=True)
class CentroidFile:
    """Result of a successful load"""

    mode: OperationMode
    queue: PlacementQueue


def load_centroid_file(path: Union[str, Path]) -> CentroidFile:
    """Read and validate a centroid file"""
    path = Path(path)
    if not path.is_file():
        raise CentroidFileError(
            CentroidFileStatus.NOT_PRESENT, f"Centroid file {path} not found"
        )

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise CentroidFileError(
            CentroidFileStatus.UNREADABLE, f"Cannot read centroid file {path}: {e}"
        ) from e

    if not isinstance(data, dict):
        raise CentroidFileError(
            CentroidFileStatus.INVALID, f"Centroid file {path} must contain a mapping"
        )

    try:
        document = CentroidDocument.model_validate(data)
    except PydanticValidationError as e:
        raise CentroidFileError(
            CentroidFileStatus.INVALID, f"Invalid centroid file {path}: {e}"
        ) from e

    limit = SystemDefaults.MAX_NUMBER_OF_COMPONENTS_TO_PLACE
    if len(document.components) > limit:
        raise CentroidFileError(
            CentroidFileStatus.TOO_MANY_COMPONENTS,
            f"Centroid file {path} lists {len(document.components)} components, "
            f"maximum is {limit}",
        )

    queue = PlacementQueue(record.to_item() for record in document.components)
    logger.info(
        f"Loaded {len(queue)} components from {path} ({document.operation_mode.value} mode)"
    )
    return CentroidFile(mode=document.operation_mode, queue=queue)
