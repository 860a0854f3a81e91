import logging

from core import config
from core.logging_setup import setup_logging
from storage.pocketbase import PocketBaseClient
from controller.app_controller import AppController
from gui.main_window import MainWindow

logger = logging.getLogger(__name__)


def main():
    setup_logging(log_dir=config.LOG_DIR, console_level=config.LOG_LEVEL)
    logger.info("using task store %s (collection %s)", config.BASE_URL, config.COLLECTION)

    client = PocketBaseClient(config.BASE_URL, config.COLLECTION)
    controller = AppController(client)
    try:
        ui = MainWindow(controller)
        ui.mainloop()
    finally:
        client.close()


if __name__ == "__main__":
    main()
