"""Category and persona classification package."""

# Use explicit imports when needed:
# from worker.classification.classifier import build_classifier, RuleBasedClassifier
# from worker.classification.providers import get_provider, MockProvider

__all__ = [
    # Classifiers
    "SiteClassifier",
    "RuleBasedClassifier",
    "ModelBackedClassifier",
    "build_classifier",
    # Models
    "CategoryInfo",
    "Persona",
    # Providers
    "CompletionProvider",
    "AnthropicProvider",
    "OpenRouterProvider",
    "OpenAIProvider",
    "MockProvider",
    "get_provider",
]
