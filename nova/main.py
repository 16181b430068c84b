import logging
import os

import uvicorn

from nova.app import create_app

# Configure logging
logging.basicConfig(
    level=os.getenv("NOVA_LOG_LEVEL", "WARNING").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
    ]
)
logger = logging.getLogger(__name__)


def main() -> None:
    host = os.getenv("NOVA_HOST", "0.0.0.0")
    port = int(os.getenv("NOVA_PORT", "8080"))
    logger.info(f"Starting Nova on {host}:{port}")
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
