"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field


@dataclass
class CatalogConfig:
    """Ticketmaster Discovery API settings.

    Attributes:
        api_key: Discovery API consumer key
        base_url: Event search endpoint (None for the client default)
        page_size: Events per page (the API caps this at 200)
        classification_names: Segments to search
        sort: Server-side sort order
        timeout_seconds: Per-request timeout
    """
    api_key: str = ""
    base_url: str | None = None
    page_size: int = 20
    classification_names: tuple[str, ...] = ("music", "sports", "arts")
    sort: str = "date,asc"
    timeout_seconds: int = 15


@dataclass
class EngineConfig:
    """Discovery engine behaviour.

    Attributes:
        default_radius_miles: Radius used until the user picks one
        date_window_days: Length of each epoch's forward date window
        load_more_threshold: Items from the end of the list that trigger paging
        location_change_threshold_km: Movement needed to start a new epoch
            (0 = any change)
        max_workers: Fetch worker threads
    """
    default_radius_miles: int = 10
    date_window_days: int = 30
    load_more_threshold: int = 5
    location_change_threshold_km: float = 0.0
    max_workers: int = 4


@dataclass
class FavoritesConfig:
    """Firestore location of user favorites.

    Attributes:
        firestore_database: Firestore database name (None for default)
        collection: Collection holding one document per user
        field: Array field with favorite event IDs
    """
    firestore_database: str | None = None
    collection: str = "users"
    field: str = "favorites"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.
    """
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    favorites: FavoritesConfig = field(default_factory=FavoritesConfig)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_catalog(catalog: CatalogConfig) -> list[ValidationError]:
    """Validate catalog settings.

    Pure function.
    """
    errors = []

    if not catalog.api_key or catalog.api_key.startswith("${"):
        errors.append(ValidationError(
            field="catalog.api_key",
            message="API key not resolved (missing or still a placeholder)",
            severity="warning",
        ))

    if not 1 <= catalog.page_size <= 200:
        errors.append(ValidationError(
            field="catalog.page_size",
            message=f"Page size must be between 1 and 200, got {catalog.page_size}",
        ))

    if catalog.timeout_seconds <= 0:
        errors.append(ValidationError(
            field="catalog.timeout_seconds",
            message=f"Timeout must be positive, got {catalog.timeout_seconds}",
        ))

    if not catalog.classification_names:
        errors.append(ValidationError(
            field="catalog.classification_names",
            message="No classifications configured; every segment will be searched",
            severity="warning",
        ))

    return errors


def validate_engine(engine: EngineConfig) -> list[ValidationError]:
    """Validate engine settings.

    Pure function.
    """
    errors = []

    if engine.default_radius_miles <= 0:
        errors.append(ValidationError(
            field="engine.default_radius_miles",
            message=f"Radius must be positive, got {engine.default_radius_miles}",
        ))

    if engine.date_window_days <= 0:
        errors.append(ValidationError(
            field="engine.date_window_days",
            message=f"Date window must be positive, got {engine.date_window_days}",
        ))

    if engine.load_more_threshold < 0:
        errors.append(ValidationError(
            field="engine.load_more_threshold",
            message=f"Threshold must not be negative, got {engine.load_more_threshold}",
        ))

    if engine.location_change_threshold_km < 0:
        errors.append(ValidationError(
            field="engine.location_change_threshold_km",
            message=f"Threshold must not be negative, got {engine.location_change_threshold_km}",
        ))

    if engine.max_workers < 1:
        errors.append(ValidationError(
            field="engine.max_workers",
            message=f"Need at least one worker, got {engine.max_workers}",
        ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []
    errors.extend(validate_catalog(config.catalog))
    errors.extend(validate_engine(config.engine))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
