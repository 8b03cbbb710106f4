"""Canned Amazon-deforestation run for the demo page.

Every call creates fresh Video, Prediction and AiAnalysis rows; nothing is
computed, the scores and commentary are fixed.
"""
import asyncio
import logging
from datetime import datetime

from envpinn.storage import Storage

logger = logging.getLogger(__name__)

SAMPLE_VIDEO_METADATA = {
    "filename": "amazon_deforestation_2024.mp4",
    "duration": 45,
    "fps": 30,
    "resolution": {"width": 1920, "height": 1080},
    "location": "Amazon Basin, Brazil",
    "captureDate": "2024-01-15",
    "environmentalFocus": "deforestation",
    "description": (
        "Aerial footage showing deforestation patterns in the Amazon rainforest with visible "
        "clearing boundaries and vegetation loss indicators"
    ),
    "frameAnalysis": {
        "totalFrames": 1350,
        "keyFrames": [
            {"frameNumber": 150, "timestamp": 5.0,
             "description": "Initial forest canopy showing dense vegetation",
             "vegetationDensity": 0.92, "clearingArea": 0.02},
            {"frameNumber": 450, "timestamp": 15.0,
             "description": "First clearing boundary visible with logging roads",
             "vegetationDensity": 0.74, "clearingArea": 0.18},
            {"frameNumber": 900, "timestamp": 30.0,
             "description": "Significant deforestation with soil exposure",
             "vegetationDensity": 0.45, "clearingArea": 0.47},
            {"frameNumber": 1200, "timestamp": 40.0,
             "description": "Agricultural conversion and infrastructure development",
             "vegetationDensity": 0.28, "clearingArea": 0.68},
        ],
    },
    "environmentalIndicators": {
        "co2Release": {"estimatedTonsPerHectare": 180, "totalAreaAffected": 2.3, "totalCo2Release": 414},
        "biodiversityLoss": {"speciesImpacted": 340, "habitatFragmentation": 0.73, "connectivityLoss": 0.56},
        "soilErosion": {"exposedSoilArea": 1.6, "erosionRisk": "high", "sedimentationRisk": 0.82},
        "microclimateLoss": {"temperatureIncrease": 2.4, "humidityDecrease": 15, "precipitationChange": -8},
    },
}

SAMPLE_SCENARIOS = {
    "amazonDeforestation": {
        "location": "Amazon Basin, Brazil",
        "type": "deforestation",
        "severity": "critical",
        "co2Impact": 414,
        "biodiversityImpact": 340,
        "temperatureChange": 2.4,
    },
    "arcticIceMelt": {
        "location": "Arctic Ocean, Greenland",
        "type": "ice_melt",
        "severity": "high",
        "seaLevelRise": 0.8,
        "albedoChange": 0.15,
        "temperatureChange": 1.8,
    },
    "wildfire": {
        "location": "California, USA",
        "type": "wildfire",
        "severity": "high",
        "co2Impact": 890,
        "airQualityIndex": 350,
        "evacuationRadius": 15,
    },
    "oceanAcidification": {
        "location": "Great Barrier Reef, Australia",
        "type": "ocean_chemistry",
        "severity": "medium",
        "phChange": -0.3,
        "coralBleaching": 0.67,
        "fishPopulationDecline": 0.45,
    },
}

OPENAI_SAMPLE_ANALYSIS = """ENVIRONMENTAL IMPACT ASSESSMENT - Amazon Deforestation Analysis

EXECUTIVE SUMMARY:
Critical environmental disruption detected in 2.3-hectare Amazon rainforest area. Analysis reveals significant carbon release, microclimate destabilization, and biodiversity threat.

KEY FINDINGS:
• Carbon Emissions: 414 tons CO₂ released (~180 tons/hectare)
• Temperature Impact: 2.4°C increase in cleared areas
• Biodiversity Risk: 340 species affected by habitat fragmentation
• Erosion Threat: 82% sedimentation risk to nearby waterways

IMMEDIATE CONCERNS:
1. Accelerated biomass decomposition in exposed soil areas
2. Heat island formation disrupting local weather patterns
3. Wildlife corridor fragmentation isolating animal populations
4. Soil carbon exposure accelerating greenhouse gas release

PREDICTIONS:
Based on current deforestation patterns, expect 15% expansion within 6 months if unchecked. Recommended immediate intervention to prevent cascade effects on broader ecosystem."""

GEMINI_SAMPLE_ANALYSIS = """SCIENTIFIC ANALYSIS: Physics-Informed Environmental Modeling Results

METHODOLOGY VALIDATION:
Our PINN algorithms successfully integrated Navier-Stokes equations for heat transfer, carbon cycle dynamics, and biodiversity connectivity models to produce comprehensive environmental impact assessment.

PHYSICS-BASED FINDINGS:
• Heat Transfer Dynamics: Cleared areas show 2.4°C temperature elevation due to reduced evapotranspiration and increased solar absorption
• Carbon Cycle Disruption: Biomass decomposition rate of 0.023/day indicates rapid organic carbon release to atmosphere
• Microclimate Disruption: 15% humidity reduction and 8% precipitation pattern change detected

QUANTITATIVE MEASUREMENTS:
- CO₂ flux: 414 tons released (95% confidence interval: 372-456 tons)
- Vegetation loss: 73% coverage reduction in affected areas
- Soil exposure: 1.6 hectares of bare earth vulnerable to erosion
- Species displacement: 340 species requiring habitat relocation

TEMPORAL ANALYSIS:
Progressive deforestation observed across 45-second analysis window shows accelerating clearance rates. Initial forest density of 92% reduced to 28% by frame analysis completion.

RECOMMENDATION:
Implement immediate conservation protocols. Current trajectory suggests ecosystem collapse within 24-month window without intervention."""

VELLUM_SAMPLE_ANALYSIS = """ENVIRONMENTAL RISK ASSESSMENT: Multi-Factor Impact Analysis

RISK CATEGORIZATION:
• CRITICAL: Carbon emission acceleration (414 tons CO₂)
• HIGH: Microclimate disruption (temperature +2.4°C)
• HIGH: Erosion and sedimentation risk (82% probability)
• MEDIUM: Wildlife corridor disruption (340 species impact)

GEOSPATIAL ANALYSIS:
Five primary risk zones identified:
1. Primary clearing zone (25%, 35%) - Maximum carbon release
2. Heat island formation area (60%, 20%) - Thermal disruption
3. Erosion risk slopes (40%, 75%) - Soil instability
4. Wildlife corridor break (75%, 45%) - Biodiversity threat
5. Secondary expansion area (15%, 60%) - Future risk zone

ENVIRONMENTAL FEEDBACK LOOPS:
- Soil carbon exposure → Accelerated decomposition → Increased emissions
- Vegetation loss → Reduced precipitation → Further drying → Expanded clearing susceptibility
- Heat island effects → Altered wind patterns → Broader microclimate disruption

INTERVENTION PRIORITIES:
1. Immediate reforestation of primary clearing zones
2. Erosion control measures on exposed slopes
3. Wildlife corridor restoration for species migration
4. Carbon sequestration initiatives in buffer zones

MONITORING RECOMMENDATIONS:
Continuous satellite surveillance with monthly PINN analysis to track intervention effectiveness and prevent expansion into secondary risk zones."""

SAMPLE_ANALYSES = [
    ("openai", OPENAI_SAMPLE_ANALYSIS, 0.91, 2340),
    ("gemini", GEMINI_SAMPLE_ANALYSIS, 0.94, 1870),
    ("vellum", VELLUM_SAMPLE_ANALYSIS, 0.88, 2100),
]


def _sample_temporal_data() -> list[dict]:
    """One entry per key frame: cleared share of the frame, as a percentage."""
    key_frames = SAMPLE_VIDEO_METADATA["frameAnalysis"]["keyFrames"]
    return [
        {"day": i, "deforest": round(frame["clearingArea"] * 100, 1)}
        for i, frame in enumerate(key_frames, start=1)
    ]


async def process_sample_video(storage: Storage, delay_seconds: float = 1.0) -> dict:
    video = storage.create_video(
        filename="amazon_deforestation_sample.mp4",
        original_name="Amazon Deforestation Analysis 2024.mp4",
        mime_type="video/mp4",
        size=45600000,
        environmental_focus="deforestation",
        analysis_priority="comprehensive",
        prediction_horizon=30,
    )
    storage.update_video_status(video.id, "processing")

    if delay_seconds:
        await asyncio.sleep(delay_seconds)

    prediction = storage.create_prediction(
        video_id=video.id,
        algorithm="land-atmosphere-pinn",
        overall_score=0.73,
        co2_score=0.84,
        co2_confidence=0.91,
        heat_score=0.68,
        heat_confidence=0.87,
        deforest_score=0.89,
        deforest_confidence=0.94,
        physics_constraints={
            "carbonCycle": "biomass_decomposition_rate: 0.023/day",
            "heatTransfer": "temperature_gradient: 2.4°C/km",
            "massConservation": "vegetation_loss_rate: 0.15 ha/day",
        },
        temporal_data=_sample_temporal_data(),
        spatial_data={
            "coordinates": "Amazon Basin, Brazil",
            "affectedArea": "2.3 hectares",
            "clearingBoundaries": 4,
            "analysisWindow": "45 seconds",
            "frameRate": 30,
            "keyFrames": [5, 15, 30, 40],
        },
        uncertainty_bounds={
            "co2Emission": "414 ± 42 tons",
            "temperatureIncrease": "2.4 ± 0.3°C",
            "biodiversityLoss": "340 ± 25 species",
        },
    )

    analyses = []
    for provider, text, confidence, processing_time in SAMPLE_ANALYSES:
        analyses.append(storage.create_ai_analysis(
            prediction_id=prediction.id,
            provider=provider,
            analysis=text,
            confidence=confidence,
            processing_time=processing_time,
        ))

    storage.update_video_status(video.id, "completed", datetime.utcnow())
    logger.info(f"Sample video {video.id} processed (prediction {prediction.id})")

    return {
        "videoId": video.id,
        "predictionId": prediction.id,
        "aiAnalyses": [
            {"provider": a.provider, "analysis": a.analysis, "confidence": a.confidence}
            for a in analyses
        ],
    }
