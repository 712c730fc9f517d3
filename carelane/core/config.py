from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "CareLane"
    environment: str = "dev"
    log_level: str = "INFO"

    # every wall-clock rule (clinic hours, timeline days) is evaluated in this zone
    timezone: str = "America/Chicago"

    # composer rules
    clinic_open_hour: int = 8
    clinic_close_hour: int = 18
    closed_weekdays: list[int] = [6]  # date.weekday(), Sunday
    duration_options: list[int] = [30, 45, 60, 90, 120, 150, 180]
    max_recurrence_occurrences: int = 26
    block_recurrence_overage: bool = False
    decrement_authorization_on_commit: bool = True
    commit_delay_seconds: float = 0.85

    # timeline grid
    timeline_day_start_hour: int = 7
    timeline_hours_per_day: int = 12
    timeline_min_width_fraction: float = 0.02
    timeline_snap_minutes: int = 5
    timeline_stack_offset_px: int = 6

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARELANE_", extra="ignore")


settings = Settings()
