# ============================================================================
# IMPORTS
# ============================================================================

import argparse
import logging
import tkinter as tk
from pathlib import Path
from typing import List, Optional

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("bartstart.main")

from .config_loader import ConfigLoader, ConfigValidator
from .dependency_injection import AppConfig, DependencyContainer, default_data_dir
from .error_handling import ConfigurationError
from .preferences import PreferenceStore
from .presenter import StartPagePresenter
from .session import StartPageSession
from .shutdown_manager import ShutdownManager, ShutdownPriority
from .ui import StartPageView
from .weather import create_geolocator


# ============================================================================
# CONFIGURATION
# ============================================================================

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="bartstart", description="Personal start page with clock, weather and search.")
    parser.add_argument("--config", type=Path, help="config.yaml / config.json to load")
    parser.add_argument("--ephemeral", action="store_true", help="keep preferences in memory only")
    parser.add_argument("--windowed", action="store_true", help="do not go fullscreen")
    return parser.parse_args(argv)


def load_config(config_path: Optional[Path]) -> AppConfig:
    """
    Load the app configuration.

    An explicit --config path wins; otherwise look in the working directory
    and the data directory. Anything unreadable or invalid falls back to the
    defaults.
    """
    path = config_path or ConfigLoader.find_config_file([Path.cwd(), default_data_dir()])
    if path is None:
        return AppConfig.create_default()

    try:
        config = ConfigLoader.load_from_file(path)
    except ConfigurationError as e:
        logger.error("%s; using defaults", e.message)
        return AppConfig.create_default()

    errors = ConfigValidator.validate(config)
    if errors:
        for problem in errors:
            logger.error("Config %s: %s", path, problem)
        logger.error("Invalid configuration; using defaults")
        return AppConfig.create_default()

    logger.info("Configuration loaded: %s", path)
    return config


# ============================================================================
# MAIN
# ============================================================================

def main(argv: Optional[List[str]] = None):
    """Main application entry point"""
    args = parse_args(argv)

    config = load_config(args.config)
    if args.windowed:
        config.ui.fullscreen = False

    logger.debug("Effective configuration: %s", config.to_dict())

    container = DependencyContainer.create(config, ephemeral=args.ephemeral)

    root = tk.Tk()
    view = StartPageView(root, config)
    view.build_ui()

    session = StartPageSession(
        store=PreferenceStore(container.storage),
        scheduler=root,
        error_handler=container.error_handler,
        config=config,
        geolocator=create_geolocator(config.feeds),
    )
    session.load()

    presenter = StartPagePresenter(session, view, config)

    # ========================================================================
    # SHUTDOWN
    # ========================================================================

    shutdown = ShutdownManager(container.error_handler, exit_on_complete=False)
    shutdown.register_component("presenter", presenter)
    shutdown.register_task("view.close()", view.close, ShutdownPriority.HIGH)
    shutdown.register_component("container", container)
    shutdown.setup_signal_handlers()

    def on_closing():
        logger.info("Shutting down...")
        shutdown.initiate_shutdown()

    root.protocol("WM_DELETE_WINDOW", on_closing)

    # ========================================================================
    # START APPLICATION
    # ========================================================================

    presenter.start()

    logger.info("Starting UI...")
    try:
        root.mainloop()
    finally:
        # mainloop can also end without WM_DELETE_WINDOW (e.g. Ctrl+C)
        shutdown.initiate_shutdown()
        shutdown.restore_signal_handlers()

    logger.info("Application stopped")


# ============================================================================
# ENTRYPOINT
# ============================================================================

if __name__ == "__main__":
    main()
