import pytest
from pydantic import ValidationError

from cliroute.settings import ProcessorSettings


def test_defaults():
    settings = ProcessorSettings()
    assert settings.program is None
    assert settings.optimal_weight == 100
    assert settings.help_exit_code == 1
    assert settings.cancelled_exit_code == 130
    assert settings.internal_error_message == "Internal error."
    assert settings.record_history is True
    assert settings.history_limit == 1000


def test_from_env_reads_prefixed_variables():
    settings = ProcessorSettings.from_env(
        {
            "CLIROUTE_PROGRAM": "ops",
            "CLIROUTE_HELP_EXIT_CODE": "2",
            "CLIROUTE_DEBUG_HOOKS": "true",
            "UNRELATED": "x",
        }
    )
    assert settings.program == "ops"
    assert settings.help_exit_code == 2
    assert settings.debug_hooks is True


def test_overrides_win_over_environment():
    settings = ProcessorSettings.from_env({"CLIROUTE_PROGRAM": "ops"}, program="deployctl")
    assert settings.program == "deployctl"


@pytest.mark.parametrize(
    "values",
    [
        {"optimal_weight": 1},
        {"help_exit_code": 0},
        {"cancelled_exit_code": 256},
        {"history_limit": 0},
        {"unknown": True},
    ],
)
def test_invalid_settings(values):
    with pytest.raises(ValidationError):
        ProcessorSettings(**values)
