import logging

from vetms.config import get_settings
from vetms.db.engine import get_engine
from vetms.db.migrate import ensure_schema
from vetms.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main():
    configure_logging()
    ensure_schema(get_engine())
    logger.info("DB schema ready at %s", get_settings().sqlalchemy_url)

if __name__ == "__main__":
    main()
