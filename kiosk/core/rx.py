"""
Provides reactivex support
"""
import multiprocessing

from reactivex.scheduler import ThreadPoolScheduler
from reactivex.scheduler.scheduler import Scheduler

# observers of kiosk signals, e.g., `created_new_user`, are notified on this scheduler
default_scheduler: Scheduler = ThreadPoolScheduler(multiprocessing.cpu_count())
