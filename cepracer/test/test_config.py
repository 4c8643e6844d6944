import pydantic
import pytest

from cepracer.config import DEADLINE, GRACE_PERIOD, SETTLE_PERIOD, RaceConfig


def test_defaults():
    config = RaceConfig.from_env({})
    assert config.deadline == DEADLINE == 1.0
    assert config.grace_period == GRACE_PERIOD
    assert config.settle_period == SETTLE_PERIOD
    assert config.compare_timings is False
    assert config.log_level == 'WARNING'


def test_from_env():
    config = RaceConfig.from_env({'CEPRACER_DEADLINE': '2.5',
                                  'CEPRACER_GRACE_PERIOD': '0.05',
                                  'CEPRACER_SETTLE_PERIOD': '1',
                                  'CEPRACER_COMPARE_TIMINGS': 'Yes',
                                  'CEPRACER_LOG_LEVEL': 'debug',
                                  'UNRELATED': 'x'})
    assert config == RaceConfig(deadline=2.5, grace_period=0.05, settle_period=1.0, compare_timings=True,
                                log_level='DEBUG')


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv('CEPRACER_COMPARE_TIMINGS', 'on')
    monkeypatch.setenv('CEPRACER_DEADLINE', '0.5')
    config = RaceConfig.from_env()
    assert config.compare_timings is True
    assert config.deadline == 0.5


def test_mapping_ignores_process_environment(monkeypatch):
    monkeypatch.setenv('CEPRACER_COMPARE_TIMINGS', '1')
    monkeypatch.setenv('CEPRACER_DEADLINE', '5')
    config = RaceConfig.from_env({})
    assert config.deadline == DEADLINE
    assert config.compare_timings is False

    config = RaceConfig.from_env({'CEPRACER_GRACE_PERIOD': '0.3'})
    assert config.deadline == DEADLINE
    assert config.grace_period == 0.3
    assert config.compare_timings is False


@pytest.mark.parametrize('raw, expected', [('1', True), ('on', True), ('true', True),
                                           ('0', False), ('off', False), ('no', False)])
def test_compare_timings_flag(raw, expected):
    assert RaceConfig.from_env({'CEPRACER_COMPARE_TIMINGS': raw}).compare_timings is expected


@pytest.mark.parametrize('env', [{'CEPRACER_DEADLINE': 'soon'},
                                 {'CEPRACER_DEADLINE': '0'},
                                 {'CEPRACER_GRACE_PERIOD': '-1'},
                                 {'CEPRACER_COMPARE_TIMINGS': 'maybe'}])
def test_invalid_values(env):
    with pytest.raises(ValueError) as info:
        RaceConfig.from_env(env)
    assert isinstance(info.value, pydantic.ValidationError)
    field = list(env)[0][len('CEPRACER_'):].lower()
    assert field in str(info.value)


def test_config_is_frozen():
    config = RaceConfig(compare_timings=True)
    with pytest.raises(pydantic.ValidationError):
        config.deadline = 0.5
    assert config.model_copy(update={'deadline': 0.5}).compare_timings
