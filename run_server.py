import uvicorn

from pws_hourly.config import settings
from utils.logging_utils import get_tagged_logger, mask_url, setup_logging

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="pws_hourly")
    logger.info(
        "Starting PWS hourly service",
        extra={"api_base_url": mask_url(settings.api_base_url), "record_source": settings.record_source},
    )

    uvicorn.run(
        "pws_hourly.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=False,
        log_config=None,
    )
