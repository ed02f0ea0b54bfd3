"""
Transcription module - provider abstraction and submission strategies.

Factory functions build the provider and the submission strategy named
in the configuration.
"""

from speechpad.core.config import Settings, get_settings

from .base import BaseTranscriptionProvider, ProviderTranscript
from .strategy import DirectSubmission, ObjectStoreSubmission, SubmissionStrategy

__all__ = [
    "BaseTranscriptionProvider",
    "DirectSubmission",
    "ObjectStoreSubmission",
    "ProviderTranscript",
    "SubmissionStrategy",
    "create_provider",
    "create_strategy",
]


def create_provider(provider: str, **kwargs) -> BaseTranscriptionProvider:
    """
    Factory function to create a transcription provider.

    Args:
        provider: Provider name ("assemblyai").
        **kwargs: Provider-specific configuration

    Raises:
        ValueError: If provider is unknown
    """
    if provider == "assemblyai":
        from .assemblyai import AssemblyAIProvider

        return AssemblyAIProvider(**kwargs)
    raise ValueError(f"Unknown transcription provider: {provider}")


def create_strategy(settings: Settings | None = None) -> SubmissionStrategy:
    """
    Build the configured submission strategy with its provider and store.

    Raises:
        ValueError: If the strategy name is unknown
        ConfigurationError: If a required credential is missing
    """
    from speechpad.services.storage.object_store import LocalDiskStore, SupabaseStore

    settings = settings or get_settings()
    provider = create_provider(
        settings.transcription_provider,
        api_key=settings.assemblyai_api_key,
        base_url=settings.assemblyai_base_url,
        poll_interval=settings.poll_interval,
        timeout=settings.transcription_timeout,
    )
    if settings.transcription_strategy == "direct":
        return DirectSubmission(provider, LocalDiskStore(settings.uploads_dir))
    if settings.transcription_strategy == "object_store":
        return ObjectStoreSubmission(
            provider,
            SupabaseStore(
                url=settings.supabase_url,
                service_key=settings.supabase_service_key,
                bucket=settings.supabase_bucket,
            ),
        )
    raise ValueError(f"Unknown transcription strategy: {settings.transcription_strategy}")
