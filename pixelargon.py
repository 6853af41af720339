import logging
import os
import sys

from PyQt5.QtWidgets import QApplication

from PX_Libs.constants import LOG_LEVEL_ENV
from PX_Libs.EditorLib.editor_window import PixelargonWindow


def configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging()
    app = QApplication(sys.argv)
    window = PixelargonWindow()
    window.show()
    if len(sys.argv) > 1:
        window.open_image(sys.argv[1])
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
