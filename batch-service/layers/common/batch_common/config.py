import os

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .policy import ErrorHandlingPolicy, parse_error_handling_policy

class AppConfig(BaseSettings):

    # Service configuration
    powertools_service_name: str = "batch_processing"
    log_level: str = "INFO"

    # Batch processing configuration
    powertools_batch_error_handling_policy: ErrorHandlingPolicy = ErrorHandlingPolicy.DERIVE_FROM_EVENT
    powertools_batch_parallel_enabled: bool = False
    powertools_batch_max_degree_of_parallelism: int = Field(default=1)
    powertools_batch_throw_on_full_batch_failure: bool = False

    model_config = {"case_sensitive": False}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        return v.upper()

    @field_validator("powertools_batch_error_handling_policy", mode="before")
    @classmethod
    def validate_error_handling_policy(cls, v):
        if v is None or v == "":
            return ErrorHandlingPolicy.DERIVE_FROM_EVENT
        return parse_error_handling_policy(v)

    @property
    def max_workers(self) -> int:
        # Non-positive values size the pool from the CPU count
        if self.powertools_batch_max_degree_of_parallelism <= 0:
            return os.cpu_count() or 1
        return self.powertools_batch_max_degree_of_parallelism

    def __str__(self):
        dump = self.model_dump(mode="json")
        dump['level'] = self.log_level
        dump['message'] = 'config'
        return str(dump)

    def maybe_print(self):
        if self.log_level.upper() in ["DEBUG"]:
            print(self)

@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    config = AppConfig()
    config.maybe_print()
    return config
