"""Basic health check tests."""


def test_import_flavr():
    """Test that flavr package can be imported."""
    import flavr
    assert flavr.__version__ == "1.0.0"


def test_import_pipeline():
    """Test that the pipeline and its models can be imported."""
    from flavr.models import GenerationRequest, Tier
    from flavr.pipeline import GenerationOrchestrator

    request = GenerationRequest(intent="tomato soup")
    assert request.servings == 4
    assert Tier.TEMPLATE.value == "template"
    assert GenerationOrchestrator is not None


def test_settings_defaults():
    """Policy constants load with their defaults."""
    from flavr.config import FlavrSettings

    settings = FlavrSettings(openai_api_key="test")
    assert settings.fingerprint_cache_size == 50
    assert settings.template_confidence_threshold == 0.6
    assert settings.generation_timeout_seconds == 35
    assert settings.fallback_timeout_seconds == 60
    assert settings.is_development
