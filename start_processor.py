import logging
import os

import uvicorn
from dotenv import load_dotenv

# Carica variabili ambiente
load_dotenv()

# Configurazione logging colorato PRIMA di qualsiasi altro import che usa logging
from core.logger import setup_colored_logging
setup_colored_logging("processor")

from core.config import get_config

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    config = get_config()
    host = os.getenv("HOST", "0.0.0.0")
    workers = int(os.getenv("UVICORN_WORKERS", "1"))

    if not config.has_openai_credential():
        logger.warning("OPENAI_API_KEY not set - only statistical insights will be generated")

    logger.info(f"Starting {config.processor_name} {config.processor_version} on {host}:{config.port} with {workers} workers")

    try:
        uvicorn.run(
            "api.main:app",
            host=host,
            port=config.port,
            workers=workers,
            reload=False,
            log_level="info",
            access_log=True,
            use_colors=False  # colori gestiti da colorlog
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise
