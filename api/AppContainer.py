# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: AppContainer.py
# -----------------------------------------------------------------------------
from pathlib import Path
from typing import Optional

import settings
from config.Config import Config
from health.InferenceHealth import InferenceHealth
from health.StoreHealth import StoreHealth
from health.TestRunner import TestRunner
from inference.HttpInferenceClient import HttpInferenceClient
from inference.InferenceClient import InferenceClient
from inference.RetryPolicy import RetryPolicy
from ingestion.IngestService import IngestService
from pipeline.EmbeddingPipeline import EmbeddingPipeline
from pipeline.PipelineRegistry import PipelineRegistry
from reprocess.BulkReprocessor import BulkReprocessor
from reprocess.JobStore import JobStore
from search.SearchGateway import SearchGateway
from services.HealthService import HealthService
from services.PipelineService import PipelineService
from utility.logging_utils import get_class_logger
from vectorstore.ChromaRecordStore import ChromaRecordStore
from vectorstore.RecordStore import RecordStore


def _state_path(value: str) -> Optional[Path]:
    return Path(value) if value else None


class AppContainer:
    """
    Owns heavy object instantiation and application wiring.
    Singleton instances are provided via FastAPI dependencies.

    store / inference_client can be injected (tests, local runs);
    otherwise they are built from Config.
    """

    def __init__(
        self,
        cfg: Optional[Config] = None,
        *,
        store: Optional[RecordStore] = None,
        inference_client: Optional[InferenceClient] = None,
        collection_name: str = settings.COLLECTION_DEFAULT,
    ) -> None:
        self.logger = get_class_logger(self.__class__)

        # Configuration
        if cfg is None and (store is None or inference_client is None):
            cfg = Config.from_env()
        self.cfg = cfg
        self.collection_name = collection_name
        if self.cfg is not None:
            self.logger.info("Configuration: %s", self.cfg.summary())

        # Core infrastructure
        self.store = store if store is not None else ChromaRecordStore(cfg=self.cfg)
        self.inference_client = inference_client if inference_client is not None else HttpInferenceClient(
            self.cfg.inference_endpoint,
            api_key=self.cfg.inference_api_key,
            timeout_seconds=settings.INFERENCE_DEFAULTS["timeout_seconds"],
        )

        # Shared compose -> infer -> normalize transform
        self.pipeline = EmbeddingPipeline(
            inference_client=self.inference_client,
            retry_policy=RetryPolicy.from_settings(settings.INFERENCE_DEFAULTS),
            empty_text_policy=settings.EMPTY_TEXT_POLICY,
        )

        # Control-plane state
        self.registry = PipelineRegistry(path=_state_path(settings.PIPELINE_STATE_FILE))
        self.job_store = JobStore(path=_state_path(settings.JOB_STATE_FILE))

        # Return a singleton PipelineService instance
        self.pipeline_service = PipelineService(
            registry=self.registry,
            store=self.store,
            collection_name=self.collection_name,
            metric=settings.VECTOR_METRIC,
            index_options=dict(settings.VECTOR_INDEX_OPTIONS),
        )

        # Return a singleton IngestService instance
        self.ingest_service = IngestService(
            store=self.store,
            registry=self.registry,
            pipeline=self.pipeline,
            collection_name=self.collection_name,
        )

        # Return a singleton BulkReprocessor instance
        defaults = settings.REPROCESS_DEFAULTS
        self.reprocessor = BulkReprocessor(
            store=self.store,
            registry=self.registry,
            pipeline=self.pipeline,
            collection_name=self.collection_name,
            job_store=self.job_store,
            store_retry=RetryPolicy.from_settings(settings.STORE_RETRY_DEFAULTS),
            default_batch_size=defaults["batch_size"],
            default_slice_count=defaults["slice_count"],
            max_inflight_inference=defaults["max_inflight_inference"],
            max_consecutive_failures=defaults["max_consecutive_failures"],
            async_runners=defaults["async_runners"],
        )

        # Return a singleton SearchGateway instance
        self.search_gateway = SearchGateway(
            store=self.store,
            registry=self.registry,
            pipeline=self.pipeline,
            collection_name=self.collection_name,
        )

        # Smoke tests / health
        self.test_runner = TestRunner(
            store_health=StoreHealth(self.store, self.collection_name),
            inference_health=InferenceHealth(self.inference_client),
        )
        self.health_service = HealthService(test_runner=self.test_runner)

    def shutdown(self) -> None:
        self.reprocessor.shutdown(wait=False)
