"""Face detection and embedding for photo grouping.

Uses InsightFace (RetinaFace detection + ArcFace recognition on ONNX
Runtime, GPU when available). Only the single best face of each photo is
kept: grouping needs one embedding per photo.
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

import grouping_config
from photo_grouping.models import FaceDetection

logger = logging.getLogger(__name__)


class FaceDetector(ABC):
    """Turns an image into a face detection result."""

    @abstractmethod
    def detect(self, image: Image.Image) -> FaceDetection:
        """Detect the most prominent face in an image.

        Returns FaceDetection.no_face() when no face passes the detector's
        thresholds. May raise on model or image errors.
        """
        ...


def detect_safely(detector: FaceDetector, image: Image.Image, label: str = "") -> FaceDetection:
    """Run a detector, treating any failure as a definitive "no face"."""
    try:
        detection = detector.detect(image)
    except Exception as e:
        logger.warning(f"Face detection failed for {label or 'image'}: {e}")
        return FaceDetection.no_face()

    if detection is None:
        return FaceDetection.no_face()
    return detection


class InsightFaceDetector(FaceDetector):
    """RetinaFace + ArcFace detector, lazily loaded on first use."""

    def __init__(
        self,
        min_confidence: float = grouping_config.MIN_FACE_CONFIDENCE,
        device: Optional[str] = None,
        models_dir: Optional[Path] = None,
        det_size: int = 640,
    ):
        """
        Args:
            min_confidence: Detection score below which a face is ignored
            device: "cuda", "cpu", or None to auto-detect
            models_dir: InsightFace model root (None = ~/.insightface)
            det_size: Detector input resolution in pixels
        """
        self.min_confidence = min_confidence
        self._device = device
        self._models_dir = models_dir
        self._det_size = det_size
        self._face_analyzer = None

    @property
    def device(self) -> str:
        if self._device is None:
            import onnxruntime as ort
            providers = ort.get_available_providers()
            self._device = "cuda" if "CUDAExecutionProvider" in providers else "cpu"
        return self._device

    def _ort_providers(self) -> list[str]:
        if self.device == "cuda":
            return ["CUDAExecutionProvider", "CPUExecutionProvider"]
        return ["CPUExecutionProvider"]

    @property
    def face_analyzer(self):
        """Lazy-load InsightFace with the small buffalo model pack."""
        if self._face_analyzer is None:
            from insightface.app import FaceAnalysis

            logger.info(f"Loading InsightFace detector on {self.device}...")
            kwargs = {"name": "buffalo_sc", "providers": self._ort_providers()}
            if self._models_dir is not None:
                kwargs["root"] = str(self._models_dir)
            self._face_analyzer = FaceAnalysis(**kwargs)
            self._face_analyzer.prepare(
                ctx_id=0 if self.device == "cuda" else -1,
                det_size=(self._det_size, self._det_size),
            )
        return self._face_analyzer

    def detect(self, image: Image.Image) -> FaceDetection:
        rgb = np.array(image.convert("RGB"))
        bgr = rgb[:, :, ::-1].copy()  # InsightFace expects BGR

        faces = [f for f in self.face_analyzer.get(bgr) if f.det_score >= self.min_confidence]
        if not faces:
            return FaceDetection.no_face()

        best = max(faces, key=lambda f: f.det_score)
        return FaceDetection.face(best.normed_embedding, min(1.0, float(best.det_score)))
