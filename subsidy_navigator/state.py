"""Process-wide wiring shared by the CLI and the HTTP API."""

from __future__ import annotations

from dataclasses import dataclass

from dotenv import load_dotenv

from .config import AppConfig, ConfigRepository
from .engine import RUNS_POOL, ThreadPoolManager, build_ai_client
from .logging_conf import configure_logging
from .pipeline import SubsidyPipeline, build_pipeline
from .runs import PipelineDispatcher
from .scheduler import APSchedulerAdapter
from .store import DocumentStore, initialize_store


@dataclass
class AppState:
    repository: ConfigRepository
    config: AppConfig
    store: DocumentStore
    thread_pool: ThreadPoolManager
    pipeline: SubsidyPipeline
    dispatcher: PipelineDispatcher
    scheduler: APSchedulerAdapter

    def start_scheduler(self) -> bool:
        """Register the periodic run when enabled; return whether it was."""

        if not self.config.schedule.enabled:
            return False
        self.scheduler.schedule_pipeline(
            self.config.schedule, lambda: self.dispatcher.submit(trigger="scheduler")
        )
        self.scheduler.start()
        return True

    def close(self) -> None:
        self.scheduler.shutdown()
        self.thread_pool.shutdown(wait=False)
        self.store.close()


def build_state(verbose: bool = False, repository: ConfigRepository | None = None) -> AppState:
    load_dotenv()
    repository = repository or ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    config = repository.load_app_config()
    base_dir = repository.locator.project_root

    store = initialize_store(config.store, base_dir)
    thread_pool = ThreadPoolManager(config.thread_pool_workers)
    pipeline = build_pipeline(config, store, thread_pool, build_ai_client(config.ai), base_dir)
    # One worker: queued runs never overlap, so the dedup check cannot race itself
    dispatcher = PipelineDispatcher(pipeline.run, thread_pool.get(RUNS_POOL, max_workers=1))
    return AppState(
        repository=repository,
        config=config,
        store=store,
        thread_pool=thread_pool,
        pipeline=pipeline,
        dispatcher=dispatcher,
        scheduler=APSchedulerAdapter(),
    )


__all__ = ["AppState", "build_state"]
