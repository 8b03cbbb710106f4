"""Synthetic frame generation and per-focus feature transforms.

No decoding happens here: the "frames" are a sinusoidal intensity field with
uniform noise, shaped (frames, height, width).
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

logger = logging.getLogger(__name__)


@dataclass
class ProcessingStatus:
    stage: str
    progress: int
    message: str


@dataclass
class VideoFeatures:
    frames: np.ndarray
    metadata: dict = field(default_factory=dict)


ProgressCallback = Callable[[ProcessingStatus], None]

# stage -> (progress, message, simulated seconds spent in the stage)
_STAGES = {
    "loading": (10, "Loading video file...", 0.5),
    "extraction": (30, "Extracting frames...", 1.0),
    "analysis": (60, "Analyzing environmental features...", 0.8),
    "preprocessing": (85, "Preprocessing for PINN algorithms...", 0.5),
    "complete": (100, "Video processing complete", 0.0),
}


class VideoProcessor:
    def __init__(
        self,
        frame_count: int = 100,
        width: int = 320,
        height: int = 240,
        rng: Optional[np.random.Generator] = None,
        simulate_delay: bool = True,
    ):
        self.frame_count = frame_count
        self.width = width
        self.height = height
        self.rng = rng if rng is not None else np.random.default_rng()
        self.simulate_delay = simulate_delay

    async def process_video(
        self,
        filename: str,
        environmental_focus: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> VideoFeatures:
        self._report("loading", on_progress)
        await self._pause("loading")

        self._report("extraction", on_progress)
        frames = await asyncio.to_thread(self.extract_frames, filename)
        await self._pause("extraction")

        self._report("analysis", on_progress)
        features = await asyncio.to_thread(self.analyze_environmental_features, frames, environmental_focus)
        await self._pause("analysis")

        self._report("preprocessing", on_progress)
        processed = await asyncio.to_thread(self.normalize, features)
        await self._pause("preprocessing")

        self._report("complete", on_progress)

        return VideoFeatures(
            frames=processed,
            metadata={
                "duration": 120,
                "fps": 30,
                "resolution": {"width": 1920, "height": 1080},
                "environmentalFocus": environmental_focus,
            },
        )

    @staticmethod
    def _report(stage: str, on_progress: Optional[ProgressCallback]):
        progress, message, _ = _STAGES[stage]
        if on_progress:
            on_progress(ProcessingStatus(stage=stage, progress=progress, message=message))

    async def _pause(self, stage: str):
        delay = _STAGES[stage][2]
        if self.simulate_delay and delay:
            await asyncio.sleep(delay)

    def extract_frames(self, filename: str) -> np.ndarray:
        """Return a synthetic intensity field in [0, 255]; ``filename`` is not read."""
        logger.debug(f"Generating {self.frame_count} synthetic frames for {filename}")
        y, x = np.mgrid[0:self.height, 0:self.width].astype(np.float32)
        variation = np.sin(x * 0.01) * np.cos(y * 0.01) * 30
        base = 128 + variation
        noise = (self.rng.random((self.frame_count, self.height, self.width), dtype=np.float32) - 0.5) * 20
        return np.clip(base[np.newaxis, :, :] + noise, 0, 255)

    def analyze_environmental_features(self, frames: np.ndarray, environmental_focus: str) -> np.ndarray:
        transform = _TRANSFORMS.get(environmental_focus)
        if transform is None:
            return frames
        return transform(frames)

    @staticmethod
    def normalize(frames: np.ndarray) -> np.ndarray:
        """Min-max normalise each frame to [0, 1]; a constant frame divides by 1."""
        flat = frames.reshape(frames.shape[0], -1)
        mins = flat.min(axis=1)
        ranges = flat.max(axis=1) - mins
        ranges[ranges == 0] = 1
        shape = (-1,) + (1,) * (frames.ndim - 1)
        return (frames - mins.reshape(shape)) / ranges.reshape(shape)


def co2_features(frames: np.ndarray) -> np.ndarray:
    enhanced = np.where(frames > 120, frames * 1.1, frames * 0.9)
    return np.clip(enhanced, 0, 255)


def heat_features(frames: np.ndarray) -> np.ndarray:
    """Local 3x3 max minus min per pixel; edge padding keeps border windows in-frame."""
    padded = np.pad(frames, ((0, 0), (1, 1), (1, 1)), mode="edge")
    windows = sliding_window_view(padded, (3, 3), axis=(1, 2))
    return windows.max(axis=(-2, -1)) - windows.min(axis=(-2, -1))


def ocean_features(frames: np.ndarray) -> np.ndarray:
    motion = np.empty_like(frames)
    motion[0] = frames[0]
    motion[1:] = np.abs(frames[1:] - frames[:-1])
    return motion


def deforestation_features(frames: np.ndarray) -> np.ndarray:
    nir = frames
    red = frames * 0.7
    ndvi = (nir - red) / (nir + red + 0.001)
    return np.clip((ndvi + 1) * 127.5, 0, 255)


def multi_parameter_features(frames: np.ndarray) -> np.ndarray:
    return (
        co2_features(frames) * 0.25
        + heat_features(frames) * 0.25
        + ocean_features(frames) * 0.25
        + deforestation_features(frames) * 0.25
    )


_TRANSFORMS = {
    "carbon-dioxide": co2_features,
    "heat-flux": heat_features,
    "ocean-currents": ocean_features,
    "deforestation": deforestation_features,
    "multi-parameter": multi_parameter_features,
}
