"""
Eureka agent runner implementation.
"""

import logging
from typing import List, Optional

from eureka_agent.agent import LifecycleController, ShutdownCoordinator, ShutdownState
from eureka_agent.agent.address import interface_summary
from .utils import build_config, configure_logging, parse_arguments

logger = logging.getLogger(__name__)


def run_agent(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for running the Eureka agent
    """
    args = parse_arguments(argv)
    configure_logging(args.verbose)

    config = build_config(args)
    controller = LifecycleController(config)
    coordinator = ShutdownCoordinator(controller)
    coordinator.install()

    try:
        logger.info("Starting Eureka agent...")
        logger.info("Registry URL: %s", config.registry_url)
        logger.info("Instance id: %s", controller.identity.instance_id)
        logger.debug("Network interfaces: %s", interface_summary())

        # a signal may already have arrived during startup
        if coordinator.state is ShutdownState.RUNNING:
            # blocks until the instance is UP or a signal cancels registration
            controller.register()

        while not coordinator.wait(1):
            pass

    except Exception as e:
        logger.exception("Error running Eureka agent: %s", e)
        coordinator.shutdown()
        return 1
    finally:
        coordinator.uninstall()
        controller.transport.close()

    return 0
