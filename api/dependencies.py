# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Description: dependencies.py
# -----------------------------------------------------------------------------
from functools import lru_cache

from api.AppContainer import AppContainer
from ingestion.IngestService import IngestService
from reprocess.BulkReprocessor import BulkReprocessor
from search.SearchGateway import SearchGateway
from services.HealthService import HealthService
from services.PipelineService import PipelineService


@lru_cache
def get_app_container() -> AppContainer:
    # built on first request so importing the app needs no environment
    return AppContainer()

def get_health_service() -> HealthService:
    # use the singleton service from the container
    return get_app_container().health_service

def get_pipeline_service() -> PipelineService:
    return get_app_container().pipeline_service

def get_ingest_service() -> IngestService:
    return get_app_container().ingest_service

def get_reprocessor() -> BulkReprocessor:
    return get_app_container().reprocessor

def get_search_gateway() -> SearchGateway:
    return get_app_container().search_gateway
