import asyncio

from envpinn.services import analysis_service
from envpinn.services.pipeline import VideoPipeline, prediction_fields
from envpinn.services.pinn_algorithms import PINNResult
from envpinn.storage import Storage, load_json


def _upload(storage: Storage, focus: str = "carbon-dioxide"):
    return storage.create_video(
        filename="abc.mp4", original_name="clip.mp4", mime_type="video/mp4",
        size=2048, environmental_focus=focus,
    )


def test_prediction_fields_flattens_present_categories() -> None:
    result = PINNResult(
        algorithm="PCNN-TSA",
        scores={"ocean": {"score": 93.4, "confidence": 0.94}, "overall": 93.4},
        temporal_data=[{"day": 1, "ocean": 90.0}],
    )

    fields = prediction_fields(result)

    assert fields["ocean_score"] == 93.4
    assert fields["ocean_confidence"] == 0.94
    assert fields["co2_score"] is None
    assert fields["deforest_confidence"] is None
    assert fields["overall_score"] == 93.4
    assert fields["spatial_data"] is None


def test_process_completes_video(storage, pipeline) -> None:
    video = _upload(storage)

    asyncio.run(pipeline.process(video.id))

    done = storage.get_video(video.id)
    assert done.status == "completed"
    assert done.processed_at is not None

    predictions = storage.get_predictions_by_video_id(video.id)
    assert len(predictions) == 1
    prediction = predictions[0]
    assert prediction.algorithm == "ClimODE"
    assert 0 <= prediction.overall_score <= 100
    assert len(load_json(prediction.temporal_data_json)) == 7

    analyses = storage.get_ai_analyses_by_prediction_id(prediction.id)
    assert [a.provider for a in analyses] == ["openai", "gemini", "vellum"]
    assert all(not a.is_fallback for a in analyses)

    progress = pipeline.get_progress(video.id)
    assert progress.stage == "complete"
    assert progress.progress == 100
    assert pipeline.get_status() == {"active_jobs": 0, "active_video_ids": []}


def test_process_multi_parameter_stores_every_category(storage, pipeline) -> None:
    video = _upload(storage, "multi-parameter")

    asyncio.run(pipeline.process(video.id))

    prediction = storage.get_predictions_by_video_id(video.id)[0]
    assert prediction.algorithm == "Multi-Algorithm Ensemble"
    for category in ("co2", "heat", "ocean", "deforest"):
        assert getattr(prediction, f"{category}_score") is not None
    assert len(load_json(prediction.temporal_data_json)) == 8


def test_failing_provider_stores_fallback(storage, processor, rng, make_provider) -> None:
    providers = [
        make_provider("openai"),
        make_provider("gemini", error=RuntimeError("quota exceeded")),
        make_provider("vellum"),
    ]
    pipeline = VideoPipeline(storage, providers=providers, processor=processor, rng=rng)
    video = _upload(storage, "ocean-currents")

    asyncio.run(pipeline.process(video.id))

    assert storage.get_video(video.id).status == "completed"
    prediction = storage.get_predictions_by_video_id(video.id)[0]
    analyses = {a.provider: a for a in storage.get_ai_analyses_by_prediction_id(prediction.id)}
    assert len(analyses) == 3
    assert analyses["gemini"].is_fallback is True
    assert analyses["gemini"].confidence == 0.0
    assert analyses["gemini"].analysis == "gemini fallback"
    assert analyses["openai"].confidence == 0.8


def test_processing_error_marks_video_failed(storage, pipeline, monkeypatch) -> None:
    async def broken(*args, **kwargs):
        raise RuntimeError("decoder crashed")

    monkeypatch.setattr(pipeline.processor, "process_video", broken)
    video = _upload(storage)

    asyncio.run(pipeline.process(video.id))

    assert storage.get_video(video.id).status == "failed"
    assert storage.get_predictions_by_video_id(video.id) == []
    assert pipeline.get_status()["active_jobs"] == 0


def test_unknown_video_is_ignored(storage, pipeline) -> None:
    asyncio.run(pipeline.process(404))
    assert storage.list_videos() == []


def test_analyze_prediction_always_stores_one_row_per_provider(storage, make_provider) -> None:
    video = _upload(storage)
    prediction = storage.create_prediction(
        video_id=video.id, algorithm="ClimODE", overall_score=88.0, co2_score=0.0, heat_score=90.0,
    )
    providers = [make_provider(name, error=ValueError("down")) for name in ("openai", "gemini", "vellum")]

    rows = asyncio.run(analysis_service.analyze_prediction(storage, providers, prediction, "carbon-dioxide"))

    assert len(rows) == 3
    assert all(r.is_fallback and r.confidence == 0.0 for r in rows)
    summary = analysis_service.summary_from_prediction(prediction, "carbon-dioxide")
    assert summary.present_scores() == [0.0, 90.0]


def test_finished_progress_expires(storage, providers, processor, rng) -> None:
    pipeline = VideoPipeline(
        storage, providers=providers, processor=processor, rng=rng, progress_retention=0,
    )
    first = _upload(storage)
    second = _upload(storage, "heat-flux")

    asyncio.run(pipeline.process(first.id))
    assert pipeline.get_progress(first.id).stage == "complete"

    asyncio.run(pipeline.process(second.id))

    assert pipeline.get_progress(first.id) is None
    assert pipeline.get_progress(second.id).stage == "complete"
    assert list(pipeline._finished_at) == [second.id]


def test_recent_progress_is_kept(storage, pipeline) -> None:
    videos = [_upload(storage) for _ in range(3)]
    for video in videos:
        asyncio.run(pipeline.process(video.id))

    assert all(pipeline.get_progress(v.id).progress == 100 for v in videos)
