"""
Settings of a race.

Defaults live in the module constants below; :class:`RaceConfig` loads overrides from ``CEPRACER_*`` environment
variables with pydantic-settings, so invalid values fail at startup.
"""

from pydantic import Field, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ('DEADLINE', 'GRACE_PERIOD', 'SETTLE_PERIOD', 'ENV_PREFIX', 'RaceConfig')

DEADLINE = 1.0
"""
Seconds the backends have to produce a result, shared by all lookups of a race.
"""

GRACE_PERIOD = 0.1
"""
Seconds the timing comparison waits for the result of the backend that lost the race.
"""

SETTLE_PERIOD = 0.2
"""
Extra seconds, on top of the grace period, the caller waits for the timing comparison before giving up on it.
"""

ENV_PREFIX = 'CEPRACER_'


class RaceConfig(BaseSettings):
    """
    Settings of a race. Every field can be set with the upper-cased, ``CEPRACER_``-prefixed environment variable,
    e.g. ``CEPRACER_COMPARE_TIMINGS=1``.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra='ignore',
        frozen=True,
    )

    deadline: PositiveFloat = Field(
        default=DEADLINE,
        description='seconds the backends have to answer',
    )
    grace_period: PositiveFloat = Field(
        default=GRACE_PERIOD,
        description='seconds the losing backend gets to finish for the comparison',
    )
    settle_period: PositiveFloat = Field(
        default=SETTLE_PERIOD,
        description='extra seconds to wait for the comparison to be ready',
    )
    compare_timings: bool = Field(
        default=False,
        description='collect and report the durations of all backends once the race is decided',
    )
    log_level: str = Field(
        default='WARNING',
        description='level of the diagnostics written to stderr',
    )

    @field_validator('log_level')
    @classmethod
    def _upper_level(cls, v):
        return v.strip().upper() or 'WARNING'

    @classmethod
    def from_env(cls, environ=None):
        """
        Build a config from ``CEPRACER_*`` variables, falling back to the defaults for those unset.

        :param environ: mapping to read instead of the process environment.
        :raises pydantic.ValidationError: (a `ValueError`) if a variable holds an invalid value.
        """
        if environ is None:
            return cls()
        # explicit values outrank the env source, so every field is given to keep os.environ out
        values = {name: field.default for name, field in cls.model_fields.items()}
        values.update((name[len(ENV_PREFIX):].lower(), value)
                      for name, value in environ.items()
                      if name.upper().startswith(ENV_PREFIX))
        return cls(**values)
