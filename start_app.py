import logging
import os

from app import DEFAULT_HOST, DEFAULT_PORT, create_app, load_environment

if __name__ == '__main__':
    load_environment()
    app = create_app()
    services = app.extensions["dailynews"]

    host = os.getenv('HOST', DEFAULT_HOST)
    port = int(os.getenv('PORT', DEFAULT_PORT))
    debug = os.getenv('DEBUG', 'False').lower() == 'true'

    logger = logging.getLogger("dailynews")
    logger.info("Starting Daily Info Center on %s:%s", host, port)
    for provider, configured in services.settings.configured_providers().items():
        logger.info("  %s configured: %s", provider, configured)

    scheduler = None
    if os.getenv('ENABLE_SCHEDULER', 'False').lower() == 'true':
        from dailynews.scheduler import build_scheduler

        scheduler = build_scheduler(services, blocking=False)
        scheduler.start()
        logger.info("Daily generation scheduled at %02d:00 UTC", services.settings.schedule_hour_utc)

    try:
        # the reloader would start a second scheduler in the child process
        app.run(host=host, port=port, debug=debug, threaded=True, use_reloader=debug and scheduler is None)
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)
