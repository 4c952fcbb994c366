"""
API Dependencies
Shared dependencies for Supabase access and the stage engine services
"""
from fastapi import Depends
from supabase import create_client, Client

from leadstage.core.config import get_config_manager, get_settings
from leadstage.domain.services.stage_event_recorder import (
    StageEventRecorder,
    get_stage_event_recorder,
)
from leadstage.services.stage_transition_service import (
    StageTransitionService,
    create_stage_transition_service,
)
from leadstage.services.stage_trigger_service import (
    StageTriggerService,
    get_stage_trigger_service,
)


def get_supabase() -> Client:
    """
    Get Supabase client with validation.

    Raises:
        RuntimeError: If Supabase URL or SERVICE_KEY is not configured
    """
    settings = get_settings()

    if not settings.supabase_url:
        raise RuntimeError(
            "SUPABASE_URL is not configured. "
            "Set SUPABASE_URL environment variable."
        )
    if not settings.supabase_service_key:
        raise RuntimeError(
            "SUPABASE_SERVICE_KEY is not configured. "
            "Set SUPABASE_SERVICE_KEY environment variable."
        )

    return create_client(settings.supabase_url, settings.supabase_service_key)


def get_recorder() -> StageEventRecorder:
    return get_stage_event_recorder()


def get_default_delay_ms() -> int:
    """Delay for evaluations requested without one (stage_engine.default_delay_ms)."""
    return get_config_manager().get_default_delay_ms()


def get_transition_service(
    supabase: Client = Depends(get_supabase)
) -> StageTransitionService:
    return create_stage_transition_service(supabase)


def get_trigger_service(
    supabase: Client = Depends(get_supabase)
) -> StageTriggerService:
    return get_stage_trigger_service(supabase)
