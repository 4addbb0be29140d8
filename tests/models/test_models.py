# tests/models/test_models.py

import pytest
from pydantic import ValidationError

from memwatch.models.memory import ContainerMemorySample, PodMemorySample, usage_percent_of
from memwatch.models.raw import UsageSample


def test_usage_percent_of():
    assert usage_percent_of(50, 200) == 25.0
    assert usage_percent_of(None, 200) is None
    assert usage_percent_of(50, None) is None
    assert usage_percent_of(50, 0) is None


def test_percentages_follow_inputs():
    sample = ContainerMemorySample(name="app", current_usage=300, memory_request=400, memory_limit=600)
    assert sample.usage_percent == 75.0
    assert sample.limit_usage_percent == 50.0

    updated = sample.model_copy(update={"current_usage": 600})
    assert updated.usage_percent == 150.0
    assert updated.limit_usage_percent == 100.0


def test_samples_are_immutable():
    pod = PodMemorySample(namespace="default", name="web")
    with pytest.raises(ValidationError):
        pod.current_usage = 10


def test_negative_bytes_are_rejected():
    with pytest.raises(ValidationError):
        ContainerMemorySample(name="app", current_usage=-1)


def test_percentages_are_serialized():
    pod = PodMemorySample(namespace="default", name="web", current_usage=100, memory_request=200)
    data = pod.model_dump()
    assert data["usage_percent"] == 50.0
    assert data["limit_usage_percent"] is None
    assert pod.identity == ("default", "web")


def test_usage_sample_lookup():
    sample = UsageSample(containers={"app": 10, "init": None})
    assert sample.usage_for("app") == 10
    assert sample.usage_for("init") is None
    assert sample.usage_for("other") is None
