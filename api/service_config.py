"""Configuration for the grouping sidecar and CLI."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import grouping_config


@dataclass
class DetectionConfig:
    """Face detection configuration."""
    min_face_confidence: float = grouping_config.MIN_FACE_CONFIDENCE
    thumbnail_size: int = grouping_config.THUMBNAIL_SIZE
    device: Optional[str] = None  # "cuda", "cpu", or None for auto
    models_dir: Optional[Path] = None  # InsightFace model root, None = library default

    @classmethod
    def from_env(cls) -> "DetectionConfig":
        models_dir = os.environ.get("MODELS_DIR")
        return cls(
            min_face_confidence=float(
                os.environ.get("MIN_FACE_CONFIDENCE", grouping_config.MIN_FACE_CONFIDENCE)
            ),
            thumbnail_size=int(os.environ.get("THUMBNAIL_SIZE", grouping_config.THUMBNAIL_SIZE)),
            device=os.environ.get("DETECTION_DEVICE") or None,
            models_dir=Path(models_dir) if models_dir else None,
        )


@dataclass
class ServiceConfig:
    """Sidecar configuration."""
    data_dir: Path
    log_level: str = "INFO"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.log_level = self.log_level.upper()

    @property
    def export_path(self) -> Path:
        return self.data_dir / "group-info.json"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            data_dir=Path(os.environ.get("DATA_DIR", "./data")),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
        )
