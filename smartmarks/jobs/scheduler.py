import os

from apscheduler.schedulers.background import BackgroundScheduler

from smartmarks.services.changes import prune_changes


scheduler = BackgroundScheduler()


def run_change_log_prune(app):
    with app.app_context():
        removed = prune_changes(app.config["CHANGE_RETENTION_DAYS"])
        if removed:
            app.logger.info("Pruned %s change events", removed)


def start_scheduler(app):
    if not app.config.get("SCHEDULER_ENABLED", True):
        return
    if os.environ.get("WERKZEUG_RUN_MAIN") == "false":
        return

    interval_minutes = app.config["CHANGE_PRUNE_INTERVAL_MINUTES"]
    if not scheduler.get_jobs():
        scheduler.add_job(
            run_change_log_prune,
            "interval",
            minutes=interval_minutes,
            kwargs={"app": app},
            id="change_log_prune",
            replace_existing=True,
        )
        scheduler.start()
