"""Application bootstrap: environment, logging and the default persistence unit."""

from typing import Optional

from dotenv import load_dotenv

from ..config.logging import get_logger, setup_logging
from ..config.settings import get_settings
from ..ormdb.database import SessionFactory, configure, create_tables


def initialize_application(unit_name: Optional[str] = None) -> SessionFactory:
    """
    Load ``.env``, set up logging and configure the process-wide factory.

    Args:
        unit_name: Persistence unit to configure; defaults to
            ``Settings.default_persistence_unit``

    Returns:
        SessionFactory: The configured process-wide factory

    Raises:
        ConfigurationError: If the factory was already configured
    """
    load_dotenv()
    get_settings.cache_clear()
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        file_enabled=settings.log_file_enabled,
        file_path=settings.log_file_path,
        max_file_size=settings.log_max_file_size,
        backup_count=settings.log_backup_count,
    )

    factory = configure(unit_name or settings.default_persistence_unit)
    create_tables(factory)

    logger = get_logger(__name__)
    logger.info(
        "Application initialized successfully",
        environment=settings.environment,
        unit=factory.unit_name,
        data_dir=settings.data_directory,
    )
    return factory
