"""Configuration settings for barfill."""

from pathlib import Path

from pydantic import BaseModel, Field

from barfill.domain.bar import AxisMode
from barfill.exceptions import InvalidConfigurationError


class BarConfig(BaseModel):
    """Bar layout requested for one run.

    Spacings are only required to be positive for the axes the selected
    mode actually sweeps, so the model accepts any value and the check
    happens in validate_for_run().
    """

    axis_mode: AxisMode = Field(
        default=AxisMode.HORIZONTAL,
        description="Which sweep directions to generate bars for",
    )
    spacing_horizontal: float = Field(
        default=100.0,
        description="Distance between horizontal bars (drawing units)",
    )
    spacing_vertical: float = Field(
        default=100.0,
        description="Distance between vertical bars (drawing units)",
    )

    def validate_for_run(self) -> None:
        """Check that every swept axis has a positive spacing.

        Raises:
            InvalidConfigurationError: If a required spacing is not positive
        """
        if self.axis_mode == AxisMode.HORIZONTAL and not self.spacing_horizontal > 0:
            raise InvalidConfigurationError("horizontal spacing must be greater than 0")
        if self.axis_mode == AxisMode.VERTICAL and not self.spacing_vertical > 0:
            raise InvalidConfigurationError("vertical spacing must be greater than 0")
        if self.axis_mode == AxisMode.BOTH and not (
            self.spacing_horizontal > 0 and self.spacing_vertical > 0
        ):
            raise InvalidConfigurationError("both spacings must be greater than 0")

    def spacing_for(self, horizontal: bool) -> float:
        """Get the spacing used by horizontal or vertical sweeps."""
        return self.spacing_horizontal if horizontal else self.spacing_vertical


class GeometryConfig(BaseModel):
    """Tolerances used by the scanline engine, in drawing units."""

    point_tolerance: float = Field(
        default=0.01,
        gt=0.0,
        description="Distance below which two intersection points are merged",
    )
    min_bar_length: float = Field(
        default=0.0001,
        gt=0.0,
        description="Bars at or below this length are discarded",
    )
    closing_tolerance: float = Field(
        default=0.5,
        ge=0.0,
        description="Maximum end gap for auto-closing an open boundary",
    )
    min_sweep_margin: float = Field(
        default=1000.0,
        gt=0.0,
        description="Minimum overshoot of test lines past the boundary extents",
    )
    length_precision: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places used when grouping bars by length",
    )
    length_check_tolerance: float = Field(
        default=1e-4,
        gt=0.0,
        description="Allowed drift between stored and recomputed bar length",
    )


class CaptureConfig(BaseModel):
    """Configuration for the interactive boundary capture."""

    command_name: str = Field(
        default="PLINE",
        min_length=1,
        description="Drawing command launched to capture the boundary",
    )
    invocation_prefix: str = Field(
        default="_.",
        description="Prefix sent with the command (global name, built-in version)",
    )

    @property
    def command_string(self) -> str:
        """Command text sent to the host, including the trailing space."""
        return f"{self.invocation_prefix}{self.command_name} "


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class BarfillSettings(BaseModel):
    """Main application settings."""

    bars: BarConfig = Field(default_factory=BarConfig)
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> BarfillSettings:
    """Get default application settings."""
    return BarfillSettings()
