# reconcile_jobs.py
import logging
import sys

from jobhub.db.database import prepare_database
from jobhub.db.gateway import DataGateway
from jobhub.services.reconcile import reconcile_active_jobs

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)


def main() -> int:
    log.info("--- Reconciling active jobs ---")
    summary = reconcile_active_jobs(DataGateway())
    changed = [r for r in summary.reports if r.changed]
    for report in changed:
        log.info(
            f"  Job {report.job_id}: admin_notification={report.admin_notification_created}, "
            f"notifications={report.notifications_created}, applications={report.applications_created}"
        )
    log.info(f"Checked {len(summary.reports)} job(s), repaired {len(changed)}, failed {len(summary.failed_job_ids)}.")
    return 1 if summary.failed_job_ids else 0


if __name__ == "__main__":
    prepare_database(seed=False)
    sys.exit(main())
