import logging

from app.core.config import settings
from app.core.logger import logger, setup_logging


def test_errors_go_to_configured_file(tmp_path):
    error_log = tmp_path / "errors.log"
    setup_logging("DEBUG", str(error_log))
    try:
        logger.info("🔍 routine lookup")
        logging.getLogger("app").error("❌ store write failed")
        logger.complete()
        content = error_log.read_text(encoding="utf-8")
    finally:
        setup_logging(settings.LOG_LEVEL, settings.ERROR_LOG_PATH)

    assert "store write failed" in content
    assert "routine lookup" not in content
