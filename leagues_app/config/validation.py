"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

SUPPORTED_BACKENDS = ("sqlite", "rest")
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_roster_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate roster parameters."""
        errors = []

        if "max_size" in params:
            value = params["max_size"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="max_size",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_submission_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate submission parameters."""
        errors = []

        if "require_full_roster" in params:
            value = params["require_full_roster"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="require_full_roster",
                    message="Must be a boolean",
                    value=value
                ))

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "team_name" in params:
            value = params["team_name"]
            if not isinstance(value, str) or not value.strip():
                errors.append(ValidationError(
                    field="team_name",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_scoring_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate scoring parameters."""
        errors = []

        for name in ("points_per_correct", "points_per_incorrect"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool):
                    errors.append(ValidationError(
                        field=name,
                        message="Must be an integer",
                        value=value
                    ))

        if "magnitude_weight" in params:
            value = params["magnitude_weight"]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field="magnitude_weight",
                    message="Must be a non-negative number",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_persistence_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate persistence parameters."""
        errors = []

        if "backend" in params and params["backend"] not in SUPPORTED_BACKENDS:
            errors.append(ValidationError(
                field="backend",
                message=f"Must be one of {', '.join(SUPPORTED_BACKENDS)}",
                value=params["backend"]
            ))

        if "db_path" in params:
            value = params["db_path"]
            if not isinstance(value, str) or not value:
                errors.append(ValidationError(
                    field="db_path",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in SUPPORTED_LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(SUPPORTED_LOG_LEVELS)}",
                    value=value
                ))

        if "format_json" in params and not isinstance(params["format_json"], bool):
            errors.append(ValidationError(
                field="format_json",
                message="Must be a boolean",
                value=params["format_json"]
            ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        if "roster" in config:
            errors.extend(ConfigValidator.validate_roster_params(config["roster"]))

        if "submission" in config:
            errors.extend(ConfigValidator.validate_submission_params(config["submission"]))

        if "scoring" in config:
            errors.extend(ConfigValidator.validate_scoring_params(config["scoring"]))

        if "persistence" in config:
            errors.extend(ConfigValidator.validate_persistence_params(config["persistence"]))

        if "logging" in config:
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors
