from envpinn.models.video import Video
from envpinn.models.prediction import Prediction
from envpinn.models.ai_analysis import AiAnalysis
from envpinn.models.algorithm import Algorithm

__all__ = [
    "Video",
    "Prediction",
    "AiAnalysis",
    "Algorithm",
]
