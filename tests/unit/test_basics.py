from time import sleep

from lab_metrics import config
from lab_metrics.utils import profiler


def test_get_settings_defaults():
    settings = config.get_settings()
    assert settings.app_env == "development"
    assert settings.log_level == "INFO"
    assert settings.granularity_names == ["day", "week", "month"]
    assert settings.metrics_gap_fill is False
    assert settings.results_dir == "results"
    assert settings.sample_rows > 0


def test_get_settings_is_cached():
    assert config.get_settings() is config.get_settings()


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("SAMPLE_ROWS", "25")
    settings = config.get_settings()
    assert settings.log_level == "DEBUG"
    assert settings.sample_rows == 25


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(0.05)
    assert stats.duration_seconds >= 0.05
    assert stats.peak_traced_bytes is not None
    # cpu_percent may be None if psutil missing; only assert type when present
    if stats.cpu_percent is not None:
        assert isinstance(stats.cpu_percent, float)


def test_profile_block_can_skip_tracemalloc():
    with profiler.profile_block("quick", enable_tracemalloc=False) as stats:
        sum(range(1000))
    assert stats.peak_traced_bytes is None
    assert stats.as_dict()["label"] == "quick"
